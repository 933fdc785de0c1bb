"""Shared BDD fixtures and step definitions for the category hierarchy."""

import pytest
from pytest_bdd import given, parsers, then


@pytest.fixture()
def tree():
    """Category ids by display name for the current scenario."""
    return {}


@pytest.fixture()
def error():
    """Container for capturing errors raised in When steps."""
    return {"exc": None}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('a root category "{name}"'))
def root_category(lifecycle, tree, name):
    tree[name] = lifecycle.create(name).id


@given(parsers.cfparse('a category "{name}" under "{parent}"'))
def child_category(lifecycle, tree, name, parent):
    tree[name] = lifecycle.create(name, parent_id=tree[parent]).id


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the request is rejected with "{code}"'))
def request_rejected(error, code):
    assert error["exc"] is not None, "Expected the request to be rejected"
    assert error["exc"].code == code


@then("the category tree is consistent")
def tree_is_consistent(auditor):
    assert auditor.audit() == []
