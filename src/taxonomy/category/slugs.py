"""Slug normalization and allocation for categories."""

from __future__ import annotations

import re
import unicodedata

import structlog

from taxonomy.category.category import SLUG_MAX_LENGTH
from taxonomy.category.errors import CategoryConflictError, CategoryValidationError

logger = structlog.get_logger(__name__)

# Room left for a numeric "-N" suffix on slugs derived from names
_DERIVED_MAX_LENGTH = SLUG_MAX_LENGTH - 12

# Fixed path segments under /categories; a category slug must not shadow them
RESERVED_SLUGS = frozenset({"tree", "id", "path"})


def normalize_slug(value: str | None) -> str:
    """Lowercase, strip diacritics and hyphenate everything outside ``[a-z0-9-]``.

    Returns an empty string when nothing URL-safe is left. The result is not
    shortened; length limits are the allocator's concern.
    """
    if not value:
        return ""
    normalized = unicodedata.normalize("NFKD", value.strip().lower())
    normalized = "".join(ch for ch in normalized if not unicodedata.combining(ch))
    normalized = re.sub(r"[^a-z0-9-]+", "-", normalized)
    return re.sub(r"-{2,}", "-", normalized).strip("-")


def derive_slug(name: str | None) -> str:
    """Base slug for a display name, cut short enough to take a suffix."""
    return normalize_slug(name)[:_DERIVED_MAX_LENGTH].rstrip("-")


def is_slug_safe(slug: str | None) -> bool:
    return bool(slug) and normalize_slug(slug) == slug


class SlugAllocator:
    """Turns a display name or an explicit candidate into a globally unique slug."""

    def __init__(self, store, fallback: str = "category"):
        self._store = store
        self._fallback = derive_slug(fallback) or "category"

    def allocate(self, desired: str | None, exclude_id: str | None = None, explicit: bool = False) -> str:
        """Return a free slug for ``desired``.

        Names derive a base slug and try ``base``, ``base-1``, ``base-2`` ...
        until one is free. Explicit slugs are never suffixed or shortened: a
        taken or reserved explicit slug raises ``CategoryConflictError``.
        """
        if explicit:
            return self._explicit(desired, exclude_id)

        base = derive_slug(desired) or self._fallback
        candidate = base
        counter = 1
        while candidate in RESERVED_SLUGS or self._store.slug_taken(candidate, exclude_id=exclude_id):
            candidate = f"{base}-{counter}"
            counter += 1

        if candidate != base:
            logger.debug("Slug suffixed to stay unique", requested=base, allocated=candidate)
        return candidate

    def _explicit(self, desired, exclude_id):
        slug = normalize_slug(desired)
        if not slug:
            raise CategoryValidationError("slug", "Slug cannot be empty.")
        if len(slug) > SLUG_MAX_LENGTH:
            raise CategoryValidationError("slug", f"Slug cannot exceed {SLUG_MAX_LENGTH} characters.")
        if slug in RESERVED_SLUGS:
            raise CategoryConflictError(f"Slug '{slug}' is reserved.", slug=slug)
        if self._store.slug_taken(slug, exclude_id=exclude_id):
            raise CategoryConflictError(f"A category with slug '{slug}' already exists.", slug=slug)
        return slug
