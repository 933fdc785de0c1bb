"""CategoryStore: persistence for category records.

Every component reads and writes categories through a store handle passed in
explicitly. The handle wraps the domain's Category repository and maps
provider failures onto the category error taxonomy.

Writes are field-targeted: each one re-reads the current record and changes
only the fields it owns. Scalar edits go through ``save`` and the ancestor
cache only through ``set_ancestors``/``detach``, so neither clobbers the
other when they interleave.
"""

from contextlib import contextmanager

import structlog
from protean.exceptions import ObjectNotFoundError, ValidationError

from taxonomy.category.category import DESCRIPTIVE_FIELDS, Category
from taxonomy.category.errors import (
    CategoryConflictError,
    CategoryError,
    CategoryNotFoundError,
    CategoryValidationError,
    StoreUnavailableError,
)

logger = structlog.get_logger(__name__)

_SCALAR_FIELDS = ("name", "slug", "parent_id", "featured", *DESCRIPTIVE_FIELDS, "updated_at")

# Providers page results; every read here wants the full match set
_UNBOUNDED = 1_000_000


def _sort_key(category):
    return (category.name, str(category.id))


class CategoryStore:
    def __init__(self, domain):
        self._domain = domain

    def _repository(self):
        return self._domain.repository_for(Category)

    @contextmanager
    def _guard(self, operation: str):
        """Yield the repository, mapping provider failures onto the error taxonomy."""
        try:
            yield self._repository()
        except CategoryError:
            raise
        except ValidationError as exc:
            field_name, messages = next(iter(exc.messages.items()))
            message = messages[0] if isinstance(messages, list) else str(messages)
            if field_name == "slug":
                logger.warning("Category store slug collision", operation=operation, error=message)
                raise CategoryConflictError("A category with this slug already exists.") from exc
            raise CategoryValidationError(field_name, message) from exc
        except Exception as exc:
            logger.error("Category store failure", operation=operation, error=str(exc))
            raise StoreUnavailableError(operation) from exc

    def _query(self, repo, **filters):
        query = repo._dao.query
        if filters:
            query = query.filter(**filters)
        return query.limit(_UNBOUNDED).all().items

    # --- Reads ---

    def find(self, category_id: str) -> Category | None:
        if not category_id:
            return None
        with self._guard("find") as repo:
            try:
                return repo.get(category_id)
            except ObjectNotFoundError:
                return None

    def get(self, category_id: str) -> Category:
        category = self.find(category_id)
        if category is None:
            raise CategoryNotFoundError(f"Category '{category_id}' not found", category_id=category_id)
        return category

    def find_by_slug(self, slug: str) -> Category | None:
        with self._guard("find_by_slug") as repo:
            return repo._dao.query.filter(slug=slug).all().first

    def slug_taken(self, slug: str, exclude_id: str | None = None) -> bool:
        with self._guard("slug_taken") as repo:
            matches = self._query(repo, slug=slug)
        return any(str(category.id) != exclude_id for category in matches)

    def children_of(self, category_id: str) -> list[Category]:
        with self._guard("children_of") as repo:
            return sorted(self._query(repo, parent_id=category_id), key=_sort_key)

    def count_children(self, category_id: str) -> int:
        return len(self.children_of(category_id))

    def all(self) -> list[Category]:
        with self._guard("all") as repo:
            return sorted(self._query(repo), key=_sort_key)

    def filter(self, parent_id=None, roots_only=False, featured=None, search=None, limit=None, offset=0):
        matches = self._matching(parent_id, roots_only, featured, search)
        end = offset + limit if limit else None
        return matches[offset:end]

    def count(self, parent_id=None, roots_only=False, featured=None, search=None) -> int:
        return len(self._matching(parent_id, roots_only, featured, search))

    def _matching(self, parent_id, roots_only, featured, search) -> list[Category]:
        filters = {}
        if roots_only:
            filters["parent_id"] = None
        elif parent_id is not None:
            filters["parent_id"] = parent_id
        if featured is not None:
            filters["featured"] = featured

        with self._guard("filter") as repo:
            matches = self._query(repo, **filters)

        if search:
            needle = search.casefold()
            matches = [category for category in matches if needle in category.name.casefold()]
        return sorted(matches, key=_sort_key)

    # --- Writes ---

    def add(self, category: Category) -> Category:
        """Insert a new category."""
        if self.slug_taken(category.slug):
            raise CategoryConflictError(f"A category with slug '{category.slug}' already exists.", slug=category.slug)
        with self._guard("add") as repo:
            repo.add(category)
        return category

    def save(self, category: Category) -> Category:
        """Write the scalar fields of an existing category.

        ``ancestry`` is left alone: a concurrent cascade may have refreshed
        it since ``category`` was read.
        """
        category_id = str(category.id)
        if self.slug_taken(category.slug, exclude_id=category_id):
            raise CategoryConflictError(f"A category with slug '{category.slug}' already exists.", slug=category.slug)

        def apply(current):
            for field_name in _SCALAR_FIELDS:
                setattr(current, field_name, getattr(category, field_name))

        return self._rewrite(category_id, "save", apply)

    def set_ancestors(self, category_id: str, ancestors: list[dict]) -> None:
        self._rewrite(category_id, "set_ancestors", lambda current: current.cache_ancestors(ancestors))

    def detach(self, category_id: str) -> None:
        """Turn a category into a root with an empty ancestor chain."""
        self._rewrite(category_id, "detach", lambda current: current.detach())

    def remove(self, category: Category) -> None:
        current = self.get(str(category.id))
        with self._guard("remove") as repo:
            repo._dao.delete(current)

    def _rewrite(self, category_id: str, operation: str, apply) -> Category:
        current = self.get(category_id)
        apply(current)
        with self._guard(operation) as repo:
            repo.add(current)
        return current
