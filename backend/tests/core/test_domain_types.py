"""Domain Types - verifies identity wrappers, field names and RequestScope.

Tests:
    - NewType wrappers are transparent at runtime
    - Interval field names stay in lft/rgt order
    - RequestScope is frozen and hashable
    - to_node_id parses UUID strings and rejects anything else
"""

import dataclasses
from uuid import uuid4

import pytest

from treestore.core.domain_types import (
    INTERVAL_FIELDS, LEFT_FIELD, RIGHT_FIELD,
    NodeId, OrganizationId, RequestScope, to_node_id,
)
from treestore.core.errors import FieldValidationError


def test_identity_types_wrap_values():
    uid = uuid4()
    assert NodeId(uid) == uid
    assert OrganizationId("org1") == "org1"


def test_interval_fields_order():
    assert INTERVAL_FIELDS == (LEFT_FIELD, RIGHT_FIELD) == ("lft", "rgt")


def test_request_scope_defaults_to_no_organization():
    assert RequestScope().organization_id is None


def test_request_scope_is_immutable():
    scope = RequestScope(organization_id="org1")
    with pytest.raises(dataclasses.FrozenInstanceError):
        scope.organization_id = "org2"


def test_request_scope_is_hashable():
    assert {RequestScope("a"), RequestScope("a"), RequestScope()} == {
        RequestScope("a"), RequestScope(),
    }


def test_to_node_id_parses_strings_and_keeps_uuids():
    uid = uuid4()
    assert to_node_id(uid) is uid
    assert to_node_id(str(uid)) == uid


@pytest.mark.parametrize("value", ["not-a-uuid", 42, None])
def test_to_node_id_rejects_malformed_values(value):
    with pytest.raises(FieldValidationError) as exc_info:
        to_node_id(value, "parent_id")
    assert exc_info.value.field == "parent_id"
