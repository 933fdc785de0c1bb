"""Category lifecycle: create, update and delete with structural checks.

All validation runs before a command is dispatched. Structural edits (parent,
slug or name) are followed by an ancestor cascade once the command has
committed, because descendants cache this node's identity in their own
chains. A cascade that fails part-way leaves the committed edit in place.
"""

import json
from collections import deque

import structlog
from protean.exceptions import ValidationError

from taxonomy.category.category import DESCRIPTIVE_FIELDS, NAME_MAX_LENGTH, Category, strip_scripts
from taxonomy.category.errors import CategoryConflictError, CategoryNotFoundError, CategoryValidationError
from taxonomy.category.management import CreateCategory, DeleteCategory, UpdateCategory
from taxonomy.category.slugs import normalize_slug

logger = structlog.get_logger(__name__)

ATTRIBUTE_FIELDS = ("featured", *DESCRIPTIVE_FIELDS)
UPDATABLE_FIELDS = ("name", "slug", "parent_id", *ATTRIBUTE_FIELDS)


def _check_fields(given, allowed):
    unknown = sorted(set(given) - set(allowed))
    if unknown:
        raise CategoryValidationError(unknown[0], f"Unknown category field(s): {', '.join(unknown)}")


class CategoryLifecycle:
    def __init__(self, domain, store, slugs, ancestry, max_depth: int = 32):
        self._domain = domain
        self._store = store
        self._slugs = slugs
        self._ancestry = ancestry
        self._max_depth = max_depth

    def create(self, name, slug=None, parent_id=None, **attributes) -> Category:
        _check_fields(attributes, ATTRIBUTE_FIELDS)
        name = self._clean_name(name)

        parent = None
        if parent_id:
            parent = self._load_parent(parent_id)
            if parent.depth + 1 >= self._max_depth:
                raise CategoryValidationError(
                    "parent_id", f"Category hierarchy cannot exceed {self._max_depth} levels"
                )

        if slug is not None and str(slug).strip():
            allocated = self._slugs.allocate(slug, explicit=True)
        else:
            allocated = self._slugs.allocate(name)

        featured = bool(attributes.pop("featured", False))
        category_id = self._dispatch(
            CreateCategory,
            name=name,
            slug=allocated,
            parent_id=parent.id if parent else None,
            featured=featured,
            **attributes,
        )

        logger.info(
            "Category created",
            category_id=category_id,
            slug=allocated,
            parent_id=parent.id if parent else None,
        )

        # No rollback if this fails: the node stays persisted with an empty chain
        if parent is not None:
            return self._ancestry.recompute_ancestors(category_id)
        return self._store.get(category_id)

    def update(self, category_id: str, **changes) -> Category:
        """Apply the given changes. Omitted fields are untouched.

        ``parent_id=None`` is an explicit move to the root level,
        ``featured=None`` leaves the flag as it is and an empty descriptive
        field is cleared.
        """
        _check_fields(changes, UPDATABLE_FIELDS)
        category = self._store.get(category_id)

        fields = {}
        changed = []

        if "name" in changes:
            new_name = self._clean_name(changes["name"])
            if new_name != category.name:
                fields["name"] = new_name
                changed.append("name")

        if "slug" in changes:
            requested = changes["slug"]
            if requested is None or not str(requested).strip():
                raise CategoryValidationError("slug", "Slug cannot be empty.")
            if normalize_slug(requested) != category.slug:
                fields["slug"] = self._slugs.allocate(requested, exclude_id=category.id, explicit=True)
                changed.append("slug")

        if "parent_id" in changes:
            requested_parent = changes["parent_id"] or None
            if requested_parent != category.parent_id:
                if requested_parent is not None:
                    self._check_move(category, requested_parent)
                fields["reparent"] = True
                fields["parent_id"] = requested_parent
                changed.append("parent_id")

        structural = bool(changed)

        featured = changes.get("featured")
        if featured is not None and bool(featured) != category.featured:
            fields["featured"] = bool(featured)
            changed.append("featured")

        cleared = []
        for field_name in DESCRIPTIVE_FIELDS:
            if field_name not in changes:
                continue
            value = changes[field_name]
            if field_name == "description":
                value = strip_scripts(value)
            if not value:
                if getattr(category, field_name) is not None:
                    cleared.append(field_name)
                    changed.append(field_name)
            elif value != getattr(category, field_name):
                fields[field_name] = value
                changed.append(field_name)
        if cleared:
            fields["cleared"] = json.dumps(cleared)

        if not changed:
            return category

        self._dispatch(UpdateCategory, category_id=category.id, **fields)
        logger.info("Category updated", category_id=category.id, fields=changed)

        if structural:
            self._ancestry.cascade(category.id)
        return self._store.get(category.id)

    def delete(self, category_id: str) -> Category:
        category = self._store.get(category_id)

        child_count = self._store.count_children(category_id)
        if child_count:
            noun = "categories" if child_count > 1 else "category"
            raise CategoryConflictError(
                f"Cannot delete category. It has {child_count} child {noun}. Please reassign or delete them first.",
                category_id=category_id,
                child_count=child_count,
            )

        self._dispatch(DeleteCategory, category_id=category.id)
        logger.info("Category deleted", category_id=category_id, slug=category.slug)
        return category

    def _dispatch(self, command_cls, **fields):
        """Build and process a command, mapping field errors onto the taxonomy."""
        try:
            return self._domain.process(command_cls(**fields), asynchronous=False)
        except ValidationError as exc:
            field_name, messages = next(iter(exc.messages.items()))
            message = messages[0] if isinstance(messages, list) else str(messages)
            raise CategoryValidationError(field_name, message) from exc

    # --- Validation helpers ---

    @staticmethod
    def _clean_name(name) -> str:
        cleaned = str(name).strip() if name is not None else ""
        if not cleaned:
            raise CategoryValidationError("name", "Category name is required.")
        if len(cleaned) > NAME_MAX_LENGTH:
            raise CategoryValidationError("name", f"Category name cannot exceed {NAME_MAX_LENGTH} characters.")
        return cleaned

    def _load_parent(self, parent_id: str) -> Category:
        try:
            return self._store.get(parent_id)
        except CategoryNotFoundError:
            raise CategoryNotFoundError("Parent category not found.", parent_id=parent_id) from None

    def _check_move(self, category: Category, parent_id: str) -> None:
        if parent_id == category.id:
            raise CategoryValidationError("parent_id", "Category cannot be its own parent.")

        parent = self._load_parent(parent_id)
        if category.id in parent.ancestor_ids:
            raise CategoryValidationError("parent_id", "Cannot move a category under one of its descendants.")

        deepest = parent.depth + 1 + self._subtree_height(category.id)
        if deepest >= self._max_depth:
            raise CategoryValidationError("parent_id", f"Category hierarchy cannot exceed {self._max_depth} levels")

    def _subtree_height(self, category_id: str) -> int:
        """Levels below ``category_id`` (0 for a leaf)."""
        height = 0
        pending = deque([(category_id, 0)])
        seen = {category_id}
        while pending:
            current, level = pending.popleft()
            height = max(height, level)
            for child in self._store.children_of(current):
                if child.id not in seen:
                    seen.add(child.id)
                    pending.append((child.id, level + 1))
        return height
