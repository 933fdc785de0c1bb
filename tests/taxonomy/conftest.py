import os

import pytest


@pytest.fixture(scope="session")
def _taxonomy_domain(request):
    """Initialize the taxonomy domain once per session."""
    os.environ["PROTEAN_ENV"] = request.config.option.env

    from taxonomy.domain import taxonomy

    taxonomy.init()
    return taxonomy


@pytest.fixture(scope="session", autouse=True)
def setup_db(_taxonomy_domain):
    from taxonomy.utils.db import drop_db, setup_db

    setup_db(_taxonomy_domain)

    yield

    drop_db(_taxonomy_domain)


@pytest.fixture(autouse=True)
def run_around_tests(_taxonomy_domain):
    """Push domain context before each test, cleanup after."""
    ctx = _taxonomy_domain.domain_context()
    ctx.push()

    yield

    from protean import current_domain

    for _, provider in current_domain.providers.items():
        provider._data_reset()

    current_domain.event_store.store._data_reset()
    ctx.pop()


@pytest.fixture()
def services(_taxonomy_domain):
    from taxonomy.category.services import get_services

    return get_services()


@pytest.fixture()
def store(services):
    return services.store


@pytest.fixture()
def lifecycle(services):
    return services.lifecycle


@pytest.fixture()
def resolver(services):
    return services.resolver


@pytest.fixture()
def ancestry(services):
    return services.ancestry


@pytest.fixture()
def auditor(services):
    return services.auditor


@pytest.fixture()
def apparel_tree(lifecycle):
    """Apparel > T-Shirts > Graphic Tees, plus a sibling Hoodies under Apparel."""
    apparel = lifecycle.create("Apparel")
    tshirts = lifecycle.create("T-Shirts", parent_id=apparel.id)
    graphic = lifecycle.create("Graphic Tees", parent_id=tshirts.id)
    hoodies = lifecycle.create("Hoodies", parent_id=apparel.id)
    return {"apparel": apparel, "tshirts": tshirts, "graphic": graphic, "hoodies": hoodies}


@pytest.fixture()
def assert_tree_consistent(store):
    """Check the ancestor, uniqueness and acyclicity invariants for every live node."""

    def _check():
        categories = {category.id: category for category in store.all()}
        slugs = [category.slug for category in categories.values()]
        assert len(slugs) == len(set(slugs))

        for category in categories.values():
            assert category.id not in category.ancestor_ids
            if category.parent_id is None:
                assert category.ancestors == []
                continue
            parent = categories[category.parent_id]
            expected = parent.ancestors + [{"id": parent.id, "name": parent.name, "slug": parent.slug}]
            assert category.ancestors == expected

    return _check
