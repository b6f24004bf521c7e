"""DataEntity — a pydantic implementation of the host entity contract."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, ClassVar

from pydantic import BaseModel, ConfigDict, PrivateAttr

if TYPE_CHECKING:
    from collections.abc import Mapping


class EntityCanon(BaseModel):
    """Kind of an entity: its name and optional base namespace."""

    model_config = ConfigDict(frozen=True)

    name: str
    base: str | None = None


class DataEntity(BaseModel):
    """Record with an optional ``id`` and arbitrary extra fields.

    Subclasses can declare typed fields plus ``entity_name`` (and optionally
    ``entity_base``); values read back from the store are then coerced by
    pydantic. Untyped kinds are built with :meth:`create`::

        order = Order(total=3)
        note = DataEntity.create("note", base="sys", text="hello")
    """

    model_config = ConfigDict(extra="allow")

    entity_name: ClassVar[str | None] = None
    entity_base: ClassVar[str | None] = None

    id: str | None = None

    _canon: EntityCanon | None = PrivateAttr(default=None)
    _explicit_id: str | None = PrivateAttr(default=None)

    def model_post_init(self, __context: Any) -> None:
        if self._canon is None and self.entity_name:
            self._canon = EntityCanon(name=self.entity_name, base=self.entity_base)

    @classmethod
    def create(
        cls,
        name: str,
        *,
        base: str | None = None,
        explicit_id: str | None = None,
        **fields: Any,
    ) -> DataEntity:
        entity = cls.model_validate(fields)
        entity._canon = EntityCanon(name=name, base=base)
        entity._explicit_id = explicit_id
        return entity

    @property
    def canon(self) -> EntityCanon:
        if self._canon is None:
            raise ValueError(f"{type(self).__name__} has no entity name")
        return self._canon

    @property
    def explicit_id(self) -> str | None:
        return self._explicit_id

    @explicit_id.setter
    def explicit_id(self, value: str | None) -> None:
        self._explicit_id = value

    def fields(self) -> list[str]:
        return list(self.model_dump())

    def make(self, data: Mapping[str, Any]) -> DataEntity:
        entity = type(self).model_validate(dict(data))
        entity._canon = self._canon
        return entity
