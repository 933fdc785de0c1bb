"""TreeAuditor: whole-store consistency checks and cache rebuilds.

Concurrent structural edits to overlapping subtrees can interleave their
cascades and leave an ancestor chain that no later edit happens to touch.
``audit`` finds such nodes; ``rebuild`` recomputes every chain from the parent
pointers, top-down from the roots.
"""

from collections import Counter
from dataclasses import dataclass

import structlog

from taxonomy.category.ancestry import CascadeReport
from taxonomy.category.errors import PartialCascadeFailure

logger = structlog.get_logger(__name__)

STALE_ANCESTORS = "stale_ancestors"
DANGLING_PARENT = "dangling_parent"
CYCLE = "cycle"
DUPLICATE_SLUG = "duplicate_slug"


@dataclass(frozen=True)
class Violation:
    category_id: str
    kind: str
    detail: str


class TreeAuditor:
    def __init__(self, store, ancestry):
        self._store = store
        self._ancestry = ancestry

    def audit(self) -> list[Violation]:
        categories = {category.id: category for category in self._store.all()}
        violations = []

        for slug, count in Counter(category.slug for category in categories.values()).items():
            if count > 1:
                for category in categories.values():
                    if category.slug == slug:
                        violations.append(Violation(category.id, DUPLICATE_SLUG, f"slug '{slug}' used {count} times"))

        for category in categories.values():
            expected, problem = self._expected_chain(category, categories)
            if problem is not None:
                violations.append(problem)
                continue
            if category.ancestors != expected:
                violations.append(
                    Violation(
                        category.id,
                        STALE_ANCESTORS,
                        f"cached {[e['slug'] for e in category.ancestors]} "
                        f"expected {[e['slug'] for e in expected]}",
                    )
                )

        if violations:
            logger.warning("Category tree audit found violations", count=len(violations))
        return violations

    @staticmethod
    def _expected_chain(category, categories):
        """Walk parent pointers up to the root; returns (chain, violation)."""
        chain = []
        seen = {category.id}
        parent_id = category.parent_id
        while parent_id is not None:
            parent = categories.get(parent_id)
            if parent is None:
                return None, Violation(category.id, DANGLING_PARENT, f"parent '{parent_id}' does not exist")
            if parent.id in seen:
                return None, Violation(category.id, CYCLE, f"parent chain loops back through '{parent.id}'")
            seen.add(parent.id)
            chain.append(parent.summary().to_dict())
            parent_id = parent.parent_id
        chain.reverse()
        return chain, None

    def rebuild(self) -> list[CascadeReport]:
        """Cascade from every root; dangling nodes are detached to the root first."""
        categories = self._store.all()
        known_ids = {category.id for category in categories}
        starts = [c.id for c in categories if c.parent_id is None or c.parent_id not in known_ids]

        reports = []
        for category_id in starts:
            try:
                reports.append(self._ancestry.cascade(category_id))
            except PartialCascadeFailure as exc:
                logger.error("Rebuild left a branch stale", root_id=category_id, failed_ids=exc.failed_ids)
                reports.append(CascadeReport(category_id, exc.updated_ids, exc.failed_ids))

        logger.info("Ancestor caches rebuilt", roots=len(starts))
        return reports
