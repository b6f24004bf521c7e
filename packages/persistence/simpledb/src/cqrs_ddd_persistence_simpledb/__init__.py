"""Amazon SimpleDB entity store for CQRS/DDD.

Implements the save/load/list/remove/native CRUD contract over SimpleDB
domains, translating equality filters to select expressions and encoding
structured values as text.
"""

from __future__ import annotations

from .client import SelectPage, SimpleDBClient
from .config import SimpleDBSettings
from .connection import SimpleDBConnectionManager
from .entity import DataEntity, EntityCanon
from .exceptions import (
    SimpleDBConfigurationError,
    SimpleDBConnectionError,
    SimpleDBPersistenceError,
    SimpleDBQueryError,
    SimpleDBStoreError,
)
from .memory import InMemorySimpleDBClient
from .ports import IEntity, IEntityStore, ISimpleDBClient
from .provisioning import DomainProvisioner, domain_name
from .query_builder import SimpleDBQueryBuilder, escape_str
from .retry import BackoffPolicy
from .serialization import (
    decode_item,
    decode_value,
    encode_fields,
    encode_value,
    text_fields,
)
from .store import SimpleDBEntityStore

__all__ = [
    # Core
    "SimpleDBEntityStore",
    "SimpleDBClient",
    "SimpleDBConnectionManager",
    "SimpleDBSettings",
    "DomainProvisioner",
    "BackoffPolicy",
    "SelectPage",
    # Entities and ports
    "DataEntity",
    "EntityCanon",
    "IEntity",
    "IEntityStore",
    "ISimpleDBClient",
    # Utilities
    "SimpleDBQueryBuilder",
    "escape_str",
    "domain_name",
    "encode_value",
    "encode_fields",
    "decode_value",
    "decode_item",
    "text_fields",
    "InMemorySimpleDBClient",
    # Exceptions
    "SimpleDBPersistenceError",
    "SimpleDBConnectionError",
    "SimpleDBQueryError",
    "SimpleDBStoreError",
    "SimpleDBConfigurationError",
]
