"""Unit tests for domain naming and lazy domain creation."""

from __future__ import annotations

import logging
from unittest.mock import AsyncMock, MagicMock

import pytest

from cqrs_ddd_persistence_simpledb.entity import DataEntity, EntityCanon
from cqrs_ddd_persistence_simpledb.memory import InMemorySimpleDBClient
from cqrs_ddd_persistence_simpledb.provisioning import DomainProvisioner, domain_name


def test_domain_name_with_and_without_base() -> None:
    assert domain_name(EntityCanon(name="foo")) == "foo"
    assert domain_name(EntityCanon(name="foo", base="sys")) == "sys_foo"


@pytest.mark.asyncio
async def test_creates_missing_domain(sdb: InMemorySimpleDBClient) -> None:
    provisioner = DomainProvisioner(sdb)
    client, name = await provisioner.ensure_domain(DataEntity.create("foo", base="b"))
    assert client is sdb
    assert name == "b_foo"
    assert "b_foo" in sdb.domains
    assert sdb.calls["create_domain"] == 1


@pytest.mark.asyncio
async def test_existing_domain_is_not_recreated(sdb: InMemorySimpleDBClient) -> None:
    sdb.domains["foo"] = {"k": {"id": "k"}}
    provisioner = DomainProvisioner(sdb)
    await provisioner.ensure_domain(DataEntity.create("foo"))
    assert sdb.calls["create_domain"] == 0
    assert sdb.domains["foo"] == {"k": {"id": "k"}}


@pytest.mark.asyncio
async def test_lists_domains_on_every_call(sdb: InMemorySimpleDBClient) -> None:
    provisioner = DomainProvisioner(sdb)
    entity = DataEntity.create("foo")
    await provisioner.ensure_domain(entity)
    await provisioner.ensure_domain(entity)
    assert sdb.calls["list_domains"] == 2
    assert sdb.calls["create_domain"] == 1


@pytest.mark.asyncio
async def test_listing_error_propagates() -> None:
    client = MagicMock()
    client.list_domains = AsyncMock(side_effect=RuntimeError("boom"))
    client.create_domain = AsyncMock()
    provisioner = DomainProvisioner(client)
    with pytest.raises(RuntimeError, match="boom"):
        await provisioner.ensure_domain(DataEntity.create("foo"))
    client.create_domain.assert_not_called()


@pytest.mark.asyncio
async def test_domain_creation_is_logged(
    sdb: InMemorySimpleDBClient, caplog: pytest.LogCaptureFixture
) -> None:
    provisioner = DomainProvisioner(sdb)
    with caplog.at_level(logging.DEBUG, logger="cqrs_ddd.simpledb.provisioning"):
        await provisioner.ensure_domain(DataEntity.create("foo"))
    records = [r for r in caplog.records if "foo" in r.getMessage()]
    assert [r.name for r in records] == ["cqrs_ddd.simpledb.provisioning"]
