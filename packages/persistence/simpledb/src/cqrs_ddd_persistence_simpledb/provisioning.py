"""Domain provisioning — make sure an entity's domain exists before use."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .entity import EntityCanon
    from .ports import IEntity, ISimpleDBClient

logger = logging.getLogger("cqrs_ddd.simpledb.provisioning")


def domain_name(canon: EntityCanon) -> str:
    """``<base>_<name>`` when the kind has a base, otherwise ``<name>``."""
    return (f"{canon.base}_" if canon.base else "") + canon.name


class DomainProvisioner:
    """Resolves an entity's domain and creates it when missing.

    The domain list is fetched on every call; nothing is cached, so a domain
    deleted by ``remove(all$)`` is simply recreated on next use.
    """

    def __init__(self, client: ISimpleDBClient) -> None:
        self._client = client

    async def ensure_domain(self, entity: IEntity) -> tuple[ISimpleDBClient, str]:
        name = domain_name(entity.canon)
        domains = await self._client.list_domains()
        if name not in domains:
            logger.debug("Creating SimpleDB domain %s", name)
            await self._client.create_domain(name)
        return self._client, name
