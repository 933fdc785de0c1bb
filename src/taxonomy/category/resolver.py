"""TreeResolver: read-only lookups over the category tree."""

import math

from taxonomy.category.category import Category
from taxonomy.category.errors import CategoryNotFoundError


class TreeResolver:
    def __init__(self, store):
        self._store = store

    def resolve_by_id(self, category_id: str) -> Category:
        return self._store.get(category_id)

    def resolve_by_slug(self, slug: str) -> Category:
        # Slugs are unique store-wide, so at most one node matches
        category = self._store.find_by_slug(slug) if slug else None
        if category is None:
            raise CategoryNotFoundError(f"No category with slug '{slug}'", slug=slug)
        return category

    def resolve_by_slug_path(self, segments) -> Category:
        """Resolve ``[root, ..., leaf]`` slugs to the leaf category.

        The leaf's cached ancestor slugs must equal the preceding segments
        exactly. There is no fallback to a node that merely shares the leaf
        slug, so stale or crafted paths fail closed. A string path may end
        with one slash; any other empty segment does not resolve.
        """
        if isinstance(segments, str):
            segments = segments.split("/")
            if len(segments) > 1 and segments[-1] == "":
                segments = segments[:-1]
        segments = list(segments)
        if not segments or not all(segments):
            raise CategoryNotFoundError(f"No category at path '{'/'.join(segments)}'", path=segments)

        *expected_ancestors, leaf = segments
        category = self._store.find_by_slug(leaf)
        if category is None or category.ancestor_slugs != expected_ancestors:
            raise CategoryNotFoundError(f"No category at path '{'/'.join(segments)}'", path=segments)
        return category

    # --- Navigation helpers ---

    def breadcrumbs(self, category: Category) -> list[dict]:
        return [dict(entry) for entry in category.ancestors] + [category.summary().to_dict()]

    def display_path(self, category: Category, separator: str = " > ") -> str:
        return separator.join(crumb["name"] for crumb in self.breadcrumbs(category))

    def slug_path(self, category: Category) -> str:
        return "/".join(crumb["slug"] for crumb in self.breadcrumbs(category))

    def children(self, category_id: str) -> list[Category]:
        self._store.get(category_id)
        return self._store.children_of(category_id)

    def search(self, parent_id=None, roots_only=False, featured=None, search=None, page=1, limit=50) -> dict:
        """Filtered, name-sorted page of categories with pagination metadata."""
        page = max(int(page), 1)
        limit = max(int(limit), 1)
        filters = {"parent_id": parent_id, "roots_only": roots_only, "featured": featured, "search": search}

        total = self._store.count(**filters)
        categories = self._store.filter(**filters, limit=limit, offset=(page - 1) * limit)
        return {
            "categories": categories,
            "pagination": {
                "total": total,
                "page": page,
                "limit": limit,
                "pages": math.ceil(total / limit),
            },
        }

    def tree(self, root_id: str | None = None) -> list[dict]:
        """Nested ``{...record, children: [...]}`` dicts built from one store read."""
        categories = self._store.all()
        by_parent: dict[str | None, list[Category]] = {}
        known_ids = {category.id for category in categories}
        for category in categories:
            # Dangling parents are surfaced as roots rather than dropped
            parent_id = category.parent_id if category.parent_id in known_ids else None
            by_parent.setdefault(parent_id, []).append(category)

        if root_id is not None:
            roots = [category for category in categories if category.id == root_id]
            if not roots:
                raise CategoryNotFoundError(f"Category '{root_id}' not found", category_id=root_id)
        else:
            roots = by_parent.get(None, [])

        result = []
        emitted = set()
        stack = []
        for root in roots:
            node = {**root.as_dict(), "children": []}
            result.append(node)
            emitted.add(root.id)
            stack.append((root, node))

        while stack:
            category, node = stack.pop()
            for child in by_parent.get(category.id, []):
                if child.id in emitted:
                    continue
                emitted.add(child.id)
                child_node = {**child.as_dict(), "children": []}
                node["children"].append(child_node)
                stack.append((child, child_node))

        return result
