"""Wires one store handle into every category component."""

from functools import lru_cache

from taxonomy.category.ancestry import AncestryMaintainer
from taxonomy.category.audit import TreeAuditor
from taxonomy.category.lifecycle import CategoryLifecycle
from taxonomy.category.resolver import TreeResolver
from taxonomy.category.slugs import SlugAllocator
from taxonomy.category.store import CategoryStore
from taxonomy.config import get_settings


class CategoryServices:
    def __init__(self, domain, settings=None):
        settings = settings or get_settings()
        self.domain = domain
        self.store = CategoryStore(domain)
        self.slugs = SlugAllocator(self.store, fallback=settings.slug_fallback)
        self.resolver = TreeResolver(self.store)
        self.ancestry = AncestryMaintainer(self.store)
        self.lifecycle = CategoryLifecycle(domain, self.store, self.slugs, self.ancestry, max_depth=settings.max_depth)
        self.auditor = TreeAuditor(self.store, self.ancestry)


@lru_cache
def get_services() -> CategoryServices:
    from taxonomy.domain import taxonomy

    return CategoryServices(taxonomy)
