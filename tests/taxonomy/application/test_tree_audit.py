"""Tests for TreeAuditor and for stale caches left by interleaved cascades."""

from taxonomy.category.audit import CYCLE, DANGLING_PARENT, STALE_ANCESTORS
from taxonomy.category.category import Category


def _kinds(violations):
    return {(violation.category_id, violation.kind) for violation in violations}


class TestAudit:
    def test_consistent_tree_has_no_violations(self, auditor, apparel_tree):
        assert auditor.audit() == []

    def test_stale_cache_reported(self, store, auditor, apparel_tree):
        graphic = apparel_tree["graphic"]
        store.set_ancestors(graphic.id, [])

        violations = auditor.audit()

        assert _kinds(violations) == {(graphic.id, STALE_ANCESTORS)}
        assert "expected ['apparel', 't-shirts']" in violations[0].detail

    def test_dangling_parent_reported(self, store, auditor):
        stray = store.add(Category.create(name="Stray", slug="stray", parent_id="ghost"))
        assert _kinds(auditor.audit()) == {(stray.id, DANGLING_PARENT)}

    def test_cycle_reported(self, store, auditor):
        a = store.add(Category.create(name="A", slug="a"))
        b = store.add(Category.create(name="B", slug="b", parent_id=a.id))
        a.parent_id = b.id
        store.save(a)

        assert _kinds(auditor.audit()) == {(a.id, CYCLE), (b.id, CYCLE)}


class TestRebuild:
    def test_rebuild_repairs_stale_caches(self, store, auditor, apparel_tree, assert_tree_consistent):
        store.set_ancestors(apparel_tree["graphic"].id, [])
        store.set_ancestors(apparel_tree["hoodies"].id, [{"id": "x", "name": "X", "slug": "x"}])

        reports = auditor.rebuild()

        assert all(report.succeeded for report in reports)
        assert auditor.audit() == []
        assert_tree_consistent()

    def test_rebuild_detaches_dangling_nodes(self, store, auditor, apparel_tree):
        stray = store.add(Category.create(name="Stray", slug="stray", parent_id="ghost"))

        auditor.rebuild()

        assert store.get(stray.id).parent_id is None
        assert auditor.audit() == []


class TestInterleavedCascades:
    def test_overlapping_edits_leave_cache_stale_until_rebuild(
        self, lifecycle, store, auditor, monkeypatch, assert_tree_consistent
    ):
        a = lifecycle.create("A")
        b = lifecycle.create("B")
        x = lifecycle.create("X", parent_id=a.id)
        y = lifecycle.create("Y", parent_id=x.id)

        original = store.children_of
        interleaved = []

        def children_then_move(category_id):
            children = original(category_id)
            if category_id == a.id and not interleaved:
                interleaved.append(category_id)
                # A second worker moves X while the first cascade holds A's old children list
                lifecycle.update(x.id, parent_id=b.id)
            return children

        monkeypatch.setattr(store, "children_of", children_then_move)

        lifecycle.update(a.id, slug="a-renamed")
        monkeypatch.undo()

        # The first cascade overwrote X and Y with A's chain after the move
        assert store.get(x.id).parent_id == b.id
        assert store.get(x.id).ancestor_slugs == ["a-renamed"]
        assert store.get(y.id).ancestor_slugs == ["a-renamed", "x"]

        # Further edits to A no longer reach X, so nothing heals it on its own
        lifecycle.update(a.id, name="A again")
        assert _kinds(auditor.audit()) == {(x.id, STALE_ANCESTORS), (y.id, STALE_ANCESTORS)}

        auditor.rebuild()

        assert auditor.audit() == []
        assert store.get(y.id).ancestor_slugs == ["b", "x"]
        assert_tree_consistent()
