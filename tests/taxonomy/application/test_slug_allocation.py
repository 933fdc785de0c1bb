"""Tests for slug allocation: derived suffixes, explicit slugs and reserved words."""

import pytest
from taxonomy.category.errors import CategoryConflictError, CategoryValidationError
from taxonomy.category.slugs import SlugAllocator


class TestDerivedSlugs:
    def test_first_name_gets_plain_slug(self, lifecycle):
        assert lifecycle.create("Shoes").slug == "shoes"

    def test_collisions_get_numeric_suffixes(self, lifecycle):
        slugs = [lifecycle.create("Shoes").slug for _ in range(3)]
        assert slugs == ["shoes", "shoes-1", "shoes-2"]

    def test_collision_across_different_parents(self, lifecycle):
        men = lifecycle.create("Men")
        women = lifecycle.create("Women")

        first = lifecycle.create("Shoes", parent_id=men.id)
        second = lifecycle.create("Shoes", parent_id=women.id)

        assert first.slug == "shoes"
        assert second.slug == "shoes-1"

    def test_name_without_url_safe_characters_uses_fallback(self, lifecycle):
        assert lifecycle.create("!!!").slug == "category"
        assert lifecycle.create("???").slug == "category-1"

    def test_custom_fallback(self, store):
        allocator = SlugAllocator(store, fallback="Misc Items")
        assert allocator.allocate("***") == "misc-items"

    def test_exclude_id_lets_a_node_keep_its_slug(self, lifecycle, services):
        shoes = lifecycle.create("Shoes")
        assert services.slugs.allocate("Shoes", exclude_id=shoes.id) == "shoes"
        assert services.slugs.allocate("Shoes") == "shoes-1"

    def test_long_names_are_cut_and_suffixed(self, lifecycle):
        first = lifecycle.create("a" * 100)
        second = lifecycle.create("a" * 100)
        assert second.slug == first.slug + "-1"

    @pytest.mark.parametrize("name", ["Tree", "ID", "Path"])
    def test_route_words_are_suffixed(self, lifecycle, name):
        assert lifecycle.create(name).slug == f"{name.lower()}-1"


class TestExplicitSlugs:
    def test_explicit_slug_is_normalized(self, lifecycle):
        assert lifecycle.create("T-Shirts", slug="Tees For All").slug == "tees-for-all"

    def test_taken_explicit_slug_is_a_conflict(self, lifecycle, store):
        lifecycle.create("Shoes")

        with pytest.raises(CategoryConflictError):
            lifecycle.create("Sneakers", slug="shoes")

        assert store.find_by_slug("sneakers") is None

    def test_explicit_slug_with_nothing_url_safe_is_rejected(self, lifecycle):
        with pytest.raises(CategoryValidationError) as exc:
            lifecycle.create("Shoes", slug="!!!")
        assert exc.value.field == "slug"

    def test_blank_explicit_slug_falls_back_to_name(self, lifecycle):
        assert lifecycle.create("Shoes", slug="   ").slug == "shoes"

    def test_long_explicit_slug_is_kept_intact(self, lifecycle):
        slug = "b" * 195
        assert lifecycle.create("Long", slug=slug).slug == slug

    def test_long_explicit_slugs_differing_at_the_end_do_not_collide(self, lifecycle):
        first = lifecycle.create("One", slug="b" * 190 + "-one")
        second = lifecycle.create("Two", slug="b" * 190 + "-two")

        assert first.slug.endswith("-one")
        assert second.slug.endswith("-two")

    def test_explicit_slug_over_the_limit_is_rejected(self, lifecycle, store):
        with pytest.raises(CategoryValidationError) as exc:
            lifecycle.create("Long", slug="b" * 201)

        assert exc.value.field == "slug"
        assert store.all() == []

    @pytest.mark.parametrize("slug", ["tree", "id", "path"])
    def test_reserved_explicit_slug_is_a_conflict(self, lifecycle, slug):
        with pytest.raises(CategoryConflictError) as exc:
            lifecycle.create("Reserved", slug=slug)
        assert exc.value.message == f"Slug '{slug}' is reserved."
