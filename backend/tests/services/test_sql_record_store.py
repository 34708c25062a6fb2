"""SqlRecordStore - RecordStore contract over the in-memory database.

Tests cover:
    - Projection always carries id; None projects every column
    - Unknown fields in conditions or projections raise FieldValidationError
    - Payload validation on create and update
    - Organization scoping on every query
    - id and parent_id condition values parsed from strings; malformed ids rejected
    - rebuild_intervals with no root is a no-op
"""

from uuid import uuid4

import pytest

from treestore.core.domain_types import RequestScope
from treestore.core.errors import FieldValidationError
from treestore.core.query_conditions import eq, in_, is_absent


async def test_create_returns_all_columns(store, scope):
    record = await store.create(scope, {"name": "Root", "unknown_key": "ignored"})

    assert record["name"] == "Root"
    assert record["organization_id"] is None
    assert record["use_counter"] == 0
    assert {"id", "lft", "rgt", "created_at"} <= set(record)
    assert "unknown_key" not in record


async def test_create_keeps_supplied_id(store, scope):
    node_id = uuid4()
    record = await store.create(scope, {"id": node_id, "name": "Root"})
    assert record["id"] == node_id


async def test_create_rejects_blank_name(store, scope):
    with pytest.raises(FieldValidationError) as exc_info:
        await store.create(scope, {"name": "  "})
    assert exc_info.value.field == "name"


async def test_create_rejects_negative_usage(store, scope):
    with pytest.raises(FieldValidationError) as exc_info:
        await store.create(scope, {"name": "X", "use_counter": -1})
    assert exc_info.value.code == "VALIDATION_ERROR"


async def test_find_one_projects_requested_fields(store, scope):
    await store.create(scope, {"name": "Root", "description": "d"})

    record = await store.find_one(scope, [is_absent("parent_id")], ("name",))

    assert record == {"id": record["id"], "name": "Root"}


async def test_find_one_returns_none_without_match(store, scope):
    assert await store.find_one(scope, [eq("id", uuid4())]) is None


async def test_unknown_condition_field_raises(store, scope):
    with pytest.raises(FieldValidationError) as exc_info:
        await store.find(scope, [eq("colour", "red")])
    assert exc_info.value.field == "colour"


async def test_unknown_projection_field_raises(store, scope):
    with pytest.raises(FieldValidationError):
        await store.find_one(scope, [], ("colour",))


async def test_find_sorts_by_name(store, scope):
    root = await store.create(scope, {"name": "root"})
    for name in ("zeta", "alpha", "mid"):
        await store.create(scope, {"name": name, "parent_id": root["id"]})

    records = await store.find(scope, [eq("parent_id", root["id"])], ("name",))

    assert [r["name"] for r in records] == ["alpha", "mid", "zeta"]


async def test_queries_are_scoped_by_organization(store):
    org1, org2 = RequestScope("org1"), RequestScope("org2")
    created = await store.create(org1, {"name": "R1"})
    await store.create(org2, {"name": "R2"})

    assert created["organization_id"] == "org1"
    assert [r["name"] for r in await store.find(org1, [])] == ["R1"]
    assert await store.find_one(org2, [eq("id", created["id"])]) is None
    assert await store.find(RequestScope(), []) == []


async def test_update_applies_patch(store, scope):
    created = await store.create(scope, {"name": "Root"})

    updated = await store.update(
        scope, [eq("id", created["id"])], {"description": "new", "use_counter": 4},
    )

    assert updated["description"] == "new"
    assert updated["use_counter"] == 4
    assert updated["name"] == "Root"


async def test_update_without_match_returns_none(store, scope):
    assert await store.update(scope, [eq("id", uuid4())], {"name": "x"}) is None


async def test_update_rejects_unknown_keys(store, scope):
    created = await store.create(scope, {"name": "Root"})
    with pytest.raises(FieldValidationError):
        await store.update(scope, [eq("id", created["id"])], {"lft": 99})


async def test_remove_deletes_matching_rows(store, scope):
    root = await store.create(scope, {"name": "root"})
    a = await store.create(scope, {"name": "a", "parent_id": root["id"]})
    b = await store.create(scope, {"name": "b", "parent_id": root["id"]})

    await store.remove(scope, [in_("id", [a["id"], b["id"]])])

    assert [r["name"] for r in await store.find(scope, [])] == ["root"]


async def test_remove_respects_scope(store, scope):
    created = await store.create(RequestScope("org1"), {"name": "R1"})

    await store.remove(scope, [eq("id", created["id"])])

    assert await store.find(RequestScope("org1"), []) != []


async def test_rebuild_without_root_is_noop(store, scope):
    await store.rebuild_intervals(scope, None, 1)
    assert await store.find(scope, []) == []


async def test_rebuild_numbers_from_start(store, scope):
    root = await store.create(scope, {"name": "root"})
    await store.create(scope, {"name": "kid", "parent_id": root["id"]})

    await store.rebuild_intervals(scope, root, 5)

    records = {r["name"]: (r["lft"], r["rgt"]) for r in await store.find(scope, [])}
    assert records == {"root": (5, 8), "kid": (6, 7)}


async def test_string_ids_are_parsed_in_conditions(store, scope):
    root = await store.create(scope, {"name": "root"})
    kid = await store.create(scope, {"name": "kid", "parent_id": root["id"]})

    by_id = await store.find_one(scope, [eq("id", str(root["id"]))])
    by_parent = await store.find(scope, [eq("parent_id", str(root["id"]))])
    by_set = await store.find(scope, [in_("id", [str(root["id"]), str(kid["id"])])])

    assert by_id["id"] == root["id"]
    assert [r["id"] for r in by_parent] == [kid["id"]]
    assert len(by_set) == 2


@pytest.mark.parametrize("condition", [
    eq("id", "not-a-uuid"),
    eq("parent_id", 42),
    in_("id", ["also-bad"]),
])
async def test_malformed_ids_raise_validation_error(store, scope, condition):
    with pytest.raises(FieldValidationError) as exc_info:
        await store.find(scope, [condition])
    assert exc_info.value.field == condition.field
