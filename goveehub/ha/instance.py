import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Iterable, Iterator, List

from goveehub.ha.base import EntityConfig
from goveehub.ha.client import HassClient

log = logging.getLogger("goveehub.ha.instance")


class EntityInstance(ABC):
    """
    Publish/refresh contract shared by every entity kind.

    Both operations are independent and idempotent: publish_config may be
    re-sent on every reconnect and notify_state on every poll.
    """

    @abstractmethod
    async def publish_config(self, client: HassClient) -> None: ...

    @abstractmethod
    async def notify_state(self, client: HassClient) -> None: ...


async def publish_entity_config(integration: str, client: HassClient, config: EntityConfig) -> None:
    topic = client.discovery_topic(integration, config.unique_id)
    log.debug(f"Publishing HA discovery: {topic}")
    await client.publish_obj(topic, config.to_discovery(), retain=True)


class EntityList:
    def __init__(self, entities: Iterable[EntityInstance] = ()):
        self.entities: List[EntityInstance] = list(entities)

    def add(self, entity: EntityInstance) -> None:
        self.entities.append(entity)

    def extend(self, entities: Iterable[EntityInstance]) -> None:
        self.entities.extend(entities)

    def __len__(self) -> int:
        return len(self.entities)

    def __iter__(self) -> Iterator[EntityInstance]:
        return iter(self.entities)

    async def publish_config(self, client: HassClient) -> None:
        await self._run_all("publish_config", client)

    async def notify_state(self, client: HassClient) -> None:
        await self._run_all("notify_state", client)

    async def _run_all(self, operation: str, client: HassClient) -> None:
        """Run one operation on every entity; a failure in one does not stop the rest."""
        results = await asyncio.gather(
            *(getattr(e, operation)(client) for e in self.entities),
            return_exceptions=True,
        )
        failures = [
            (entity, result)
            for entity, result in zip(self.entities, results)
            if isinstance(result, BaseException)
        ]
        for entity, error in failures:
            log.error(f"{operation} failed for {entity!r}: {error}")
        if failures:
            raise failures[0][1]
