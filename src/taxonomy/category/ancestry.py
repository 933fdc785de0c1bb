"""AncestryMaintainer: keeps every node's cached ancestor chain correct.

A node's chain is its parent's chain plus the parent's own summary. Whenever
a node's parent, name or slug changes, every descendant embeds stale data,
so the recomputation is cascaded through the subtree.

The cascade walks the subtree breadth-first with an explicit worklist rather
than recursion. Each visited node costs one read (as part of its parent's
children listing) and at most one write. A failed write aborts that node's
branch only; nodes already written keep their new chains.
"""

from collections import deque
from dataclasses import dataclass, field

import structlog

from taxonomy.category.category import Category
from taxonomy.category.errors import CategoryError, PartialCascadeFailure

logger = structlog.get_logger(__name__)


@dataclass
class CascadeReport:
    root_id: str
    updated_ids: list[str] = field(default_factory=list)
    failed_ids: list[str] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return not self.failed_ids

    def raise_for_failures(self):
        if self.failed_ids:
            raise PartialCascadeFailure(self.root_id, self.updated_ids, self.failed_ids)


def chain_below(parent: Category) -> list[dict]:
    """The ancestor chain a direct child of ``parent`` must carry."""
    return parent.ancestors + [parent.summary().to_dict()]


class AncestryMaintainer:
    def __init__(self, store):
        self._store = store

    def recompute_ancestors(self, category_id: str) -> Category:
        """Rebuild one node's chain from its parent's current chain."""
        category = self._store.get(category_id)
        return self._recompute(category)

    def _recompute(self, category: Category) -> Category:
        if category.parent_id is None:
            return self._write(category, [])

        parent = self._store.find(category.parent_id)
        if parent is None:
            logger.warning(
                "Parent missing, detaching category to root",
                category_id=category.id,
                parent_id=category.parent_id,
            )
            self._store.detach(category.id)
            category.detach()
            return category

        return self._write(category, chain_below(parent))

    def _write(self, category: Category, chain: list[dict]) -> Category:
        if category.ancestors != chain:
            self._store.set_ancestors(category.id, chain)
            category.cache_ancestors(chain)
        return category

    def cascade(self, category_id: str) -> CascadeReport:
        """Recompute ``category_id`` and then every descendant, exactly once each.

        Raises ``PartialCascadeFailure`` when any branch failed; the report of
        the nodes that were updated travels on the exception.
        """
        report = CascadeReport(root_id=category_id)
        root = self._store.get(category_id)

        logger.info("Ancestor cascade started", category_id=category_id)

        try:
            root = self._recompute(root)
        except CategoryError as exc:
            logger.error("Ancestor cascade failed at root", category_id=category_id, error=exc.message)
            report.failed_ids.append(category_id)
            report.raise_for_failures()
        report.updated_ids.append(root.id)

        pending = deque([root])
        visited = {root.id}

        while pending:
            parent = pending.popleft()
            chain = chain_below(parent)

            try:
                children = self._store.children_of(parent.id)
            except CategoryError as exc:
                logger.error("Could not list children, branch aborted", category_id=parent.id, error=exc.message)
                report.failed_ids.append(parent.id)
                continue

            for child in children:
                if child.id in visited:
                    # Only reachable through corrupted parent pointers
                    logger.error("Cycle detected during cascade", category_id=child.id, root_id=category_id)
                    report.failed_ids.append(child.id)
                    continue
                visited.add(child.id)

                try:
                    child = self._write(child, chain)
                except CategoryError as exc:
                    logger.error("Ancestor write failed, branch aborted", category_id=child.id, error=exc.message)
                    report.failed_ids.append(child.id)
                    continue

                report.updated_ids.append(child.id)
                pending.append(child)

        logger.info(
            "Ancestor cascade finished",
            category_id=category_id,
            updated=len(report.updated_ids),
            failed=len(report.failed_ids),
        )
        report.raise_for_failures()
        return report
