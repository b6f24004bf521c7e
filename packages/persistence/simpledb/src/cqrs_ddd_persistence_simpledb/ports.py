"""Protocols at the two seams of the adapter.

``IEntity`` is what the host persistence framework hands in;
``ISimpleDBClient`` is what the adapter needs from the store;
``IEntityStore`` is the CRUD contract the adapter offers back.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    import builtins
    from collections.abc import Mapping

    from .client import SelectPage
    from .entity import EntityCanon


@runtime_checkable
class IEntity(Protocol):
    """A host-framework record: named fields plus an optional identifier."""

    id: str | None

    @property
    def canon(self) -> EntityCanon:
        """Kind of the entity (name plus optional base namespace)."""
        ...

    @property
    def explicit_id(self) -> str | None:
        """Caller-chosen id to use on insert, if any."""
        ...

    def fields(self) -> list[str]:
        """Names of the data fields, including ``id``."""
        ...

    def make(self, data: Mapping[str, Any]) -> IEntity:
        """Construct a new entity of the same kind from ``data``."""
        ...


@runtime_checkable
class ISimpleDBClient(Protocol):
    """Outbound operations the adapter requires from SimpleDB."""

    async def list_domains(self) -> builtins.list[str]: ...

    async def create_domain(self, name: str) -> dict[str, Any]: ...

    async def delete_domain(self, name: str) -> dict[str, Any]: ...

    async def get_item(self, domain: str, key: str) -> dict[str, Any] | None: ...

    async def put_item(
        self, domain: str, key: str, attributes: Mapping[str, Any]
    ) -> dict[str, Any]: ...

    async def delete_item(self, domain: str, key: str) -> None: ...

    async def select(
        self, query: str, next_token: str | None = None
    ) -> tuple[builtins.list[dict[str, Any]], SelectPage]: ...

    async def close(self) -> None: ...


@runtime_checkable
class IEntityStore(Protocol):
    """Uniform CRUD contract offered to the host framework."""

    name: str

    async def save(self, entity: IEntity) -> IEntity: ...

    async def load(
        self, entity: IEntity, query: Mapping[str, Any]
    ) -> IEntity | None: ...

    async def list(
        self, entity: IEntity, query: Mapping[str, Any] | None = None
    ) -> builtins.list[IEntity]: ...

    async def remove(self, entity: IEntity, query: Mapping[str, Any]) -> Any: ...

    async def native(self, entity: IEntity) -> ISimpleDBClient: ...

    async def close(self) -> None: ...
