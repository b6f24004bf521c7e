"""Test configuration for the SimpleDB persistence package."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from cqrs_ddd_persistence_simpledb import (
    DataEntity,
    InMemorySimpleDBClient,
    SimpleDBEntityStore,
    SimpleDBSettings,
)


@pytest.fixture
def settings() -> SimpleDBSettings:
    return SimpleDBSettings(key_id="AKIDEXAMPLE", secret="s3cr3t")


@pytest.fixture
def sdb() -> InMemorySimpleDBClient:
    return InMemorySimpleDBClient()


@pytest.fixture
def store(sdb: InMemorySimpleDBClient) -> SimpleDBEntityStore:
    return SimpleDBEntityStore(sdb)


@pytest.fixture
def foo() -> DataEntity:
    """Query entity for the untyped ``foo`` kind."""
    return DataEntity.create("foo")


@pytest.fixture
def mock_session() -> MagicMock:
    """aiobotocore session whose ``create_client`` yields a mocked sdb client."""
    session = MagicMock()
    mock_cm = MagicMock()
    mock_client = MagicMock()
    mock_client.list_domains = AsyncMock(return_value={"DomainNames": []})
    mock_client.create_domain = AsyncMock(return_value={})
    mock_client.delete_domain = AsyncMock(return_value={})
    mock_client.get_attributes = AsyncMock(return_value={})
    mock_client.put_attributes = AsyncMock(return_value={})
    mock_client.delete_attributes = AsyncMock(return_value={})
    mock_client.select = AsyncMock(return_value={"Items": []})
    mock_cm.__aenter__ = AsyncMock(return_value=mock_client)
    mock_cm.__aexit__ = AsyncMock(return_value=None)
    session.create_client = MagicMock(return_value=mock_cm)
    return session
