"""Error contract of SimpleDBEntityStore."""

from __future__ import annotations

import logging
from unittest.mock import AsyncMock, MagicMock

import pytest

from cqrs_ddd_persistence_simpledb import (
    DataEntity,
    InMemorySimpleDBClient,
    SimpleDBConnectionError,
    SimpleDBEntityStore,
    SimpleDBStoreError,
)
from cqrs_ddd_persistence_simpledb.memory import InMemorySimpleDBError


@pytest.mark.asyncio
async def test_store_error_is_wrapped(
    store: SimpleDBEntityStore, sdb: InMemorySimpleDBClient
) -> None:
    sdb.fail_next("put_item", RuntimeError("service down"))
    entity = DataEntity.create("foo", p1="v1")
    with pytest.raises(SimpleDBStoreError) as exc_info:
        await store.save(entity)
    err = exc_info.value
    assert err.code == "entity/error"
    assert err.store == "simpledb-store"
    assert "service down" in str(err)
    assert isinstance(err.__cause__, RuntimeError)
    # the failed insert does not assign an id
    assert entity.id is None


@pytest.mark.asyncio
async def test_domain_listing_error_stops_operation(
    store: SimpleDBEntityStore, sdb: InMemorySimpleDBClient, foo: DataEntity
) -> None:
    sdb.fail_next("list_domains", RuntimeError("no network"))
    with pytest.raises(SimpleDBStoreError):
        await store.list(foo, {})
    assert sdb.calls["select"] == 0


@pytest.mark.asyncio
async def test_load_error_is_wrapped(
    store: SimpleDBEntityStore, sdb: InMemorySimpleDBClient, foo: DataEntity
) -> None:
    sdb.fail_next("get_item", InMemorySimpleDBError("InternalError", "oops"))
    with pytest.raises(SimpleDBStoreError, match="InternalError"):
        await store.load(foo, {"id": "x"})


@pytest.mark.asyncio
async def test_programming_errors_are_not_wrapped(
    store: SimpleDBEntityStore, foo: DataEntity
) -> None:
    with pytest.raises(NotImplementedError):
        await store.load(foo, {})
    with pytest.raises(ValueError):
        await store.remove(foo, None)  # type: ignore[arg-type]


@pytest.mark.asyncio
async def test_background_delete_failure_is_logged_not_raised(
    store: SimpleDBEntityStore,
    sdb: InMemorySimpleDBClient,
    foo: DataEntity,
    caplog: pytest.LogCaptureFixture,
) -> None:
    await store.save(DataEntity.create("foo", id="a", p1="v1"))
    sdb.fail_next("delete_item", RuntimeError("delete refused"))

    with caplog.at_level(logging.WARNING, logger="cqrs_ddd.simpledb.store"):
        matched = await store.remove(foo, {"p1": "v1"})
        await store.drain()

    assert [item["id"] for item in matched] == ["a"]
    assert "Background delete failed" in caplog.text
    assert "delete refused" in caplog.text
    assert "a" in sdb.domains["foo"]


@pytest.mark.asyncio
async def test_joined_delete_failure_is_raised(
    sdb: InMemorySimpleDBClient, foo: DataEntity
) -> None:
    store = SimpleDBEntityStore(sdb, wait_for_deletes=True)
    await store.save(DataEntity.create("foo", id="a", p1="v1"))
    sdb.fail_next("delete_item", RuntimeError("delete refused"))
    with pytest.raises(SimpleDBStoreError, match="1 of 1 deletes failed"):
        await store.remove(foo, {"p1": "v1"})


@pytest.mark.asyncio
async def test_operations_after_close_fail(
    store: SimpleDBEntityStore, foo: DataEntity
) -> None:
    await store.close()
    with pytest.raises(SimpleDBConnectionError, match="closed"):
        await store.list(foo, {})


@pytest.mark.asyncio
async def test_close_never_raises() -> None:
    client = MagicMock()
    client.close = AsyncMock(side_effect=RuntimeError("already gone"))
    store = SimpleDBEntityStore(client)
    await store.close()
    client.close.assert_awaited_once()


@pytest.mark.asyncio
async def test_native_error_is_wrapped(
    store: SimpleDBEntityStore, sdb: InMemorySimpleDBClient, foo: DataEntity
) -> None:
    sdb.fail_next("create_domain", RuntimeError("limit exceeded"))
    with pytest.raises(SimpleDBStoreError, match="limit exceeded"):
        await store.native(foo)


class _Typed(DataEntity):
    entity_name = "typed"

    count: int = 0


@pytest.mark.asyncio
async def test_item_not_matching_entity_type_is_wrapped(
    store: SimpleDBEntityStore, sdb: InMemorySimpleDBClient
) -> None:
    sdb.domains["typed"] = {"k": {"id": "k", "count": "[1, 2]"}}
    with pytest.raises(SimpleDBStoreError, match="load"):
        await store.load(_Typed(), {"id": "k"})
    with pytest.raises(SimpleDBStoreError, match="list"):
        await store.list(_Typed())
