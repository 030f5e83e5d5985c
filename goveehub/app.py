import asyncio, logging, sys
from typing import FrozenSet, Optional, Tuple
from goveehub.config import HubConfig
from goveehub.mqtt import Mqtt
from goveehub.state import DeviceStore
from goveehub.ha.client import HassClient
from goveehub.ha.entities import build_entity_list
from goveehub.ha.instance import EntityList
from goveehub.ha.topics import availability_topic


log = logging.getLogger(__name__)


class BridgeApp:
    """
    Drives the Home Assistant entities:
      - discovery configs are published at startup, whenever a device or one
        of its capabilities is first seen, when the broker connection is
        (re)established and when Home Assistant announces itself on <discovery_prefix>/status
      - entity states are refreshed every polling.interval_secs
    Ingestion code populates `store`; this class only reads from it.
    """
    def __init__(self, cfg: HubConfig, store: Optional[DeviceStore] = None, mqtt_client: Optional[Mqtt] = None):
        self.cfg = cfg
        self._configure_logging()
        self.store = store or DeviceStore()
        self.mqtt = mqtt_client or Mqtt(cfg.mqtt, availability_topic=availability_topic())
        self.hass = HassClient(self.mqtt, cfg.mqtt.discovery_prefix)
        self.entities: Optional[EntityList] = None
        self._known_devices: FrozenSet[Tuple[str, Tuple[str, ...]]] = frozenset()
        self._config_pending = True
        self._republish: Optional[asyncio.Event] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    def _configure_logging(self):
        """Configure logging based on config settings."""
        log_config = self.cfg.logging

        root_logger = logging.getLogger()
        log_level = getattr(logging, log_config.level.upper())
        root_logger.setLevel(log_level)

        if not root_logger.handlers:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setLevel(log_level)
            console_handler.setFormatter(logging.Formatter(log_config.format))
            root_logger.addHandler(console_handler)

        logging.getLogger("goveehub").setLevel(log_level)
        # paho logs every reconnect attempt
        logging.getLogger("paho").setLevel(logging.WARNING)

        if log_config.ha_debug:
            logging.getLogger("goveehub.ha").setLevel(logging.DEBUG)

        log.info(f"Logging configured - Level: {log_config.level}, HA Debug: {log_config.ha_debug}")

    def request_republish(self):
        """Thread-safe: schedule a discovery republish on the next cycle."""
        if self._loop is None or self._republish is None:
            self._config_pending = True
            return
        self._loop.call_soon_threadsafe(self._republish.set)

    def _on_hass_status(self, topic: str, payload):
        log.info(f"Home Assistant status on {topic}: {payload}")
        if payload == "online":
            self.request_republish()

    async def init(self):
        self._loop = asyncio.get_running_loop()
        self._republish = asyncio.Event()
        self.mqtt.add_connect_listener(self.request_republish)
        if self.cfg.mqtt.ha_discovery:
            self.mqtt.sub(f"{self.hass.discovery_prefix}/status", self._on_hass_status)
        self.mqtt.start()

    @staticmethod
    def _device_signature(devices) -> FrozenSet[Tuple[str, Tuple[str, ...]]]:
        """Device ids paired with their advertised capability instances."""
        signature = set()
        for d in devices:
            caps = d.http_device_info.capabilities if d.http_device_info else []
            signature.add((d.id, tuple(sorted(c.instance for c in caps))))
        return frozenset(signature)

    async def tick(self):
        devices = self._device_signature(await self.store.devices())
        republish = self._republish is not None and self._republish.is_set()
        if republish:
            self._republish.clear()

        if self.entities is None or devices != self._known_devices:
            self.entities = await build_entity_list(self.store, self.cfg.poll_interval)
            self._known_devices = devices
            self._config_pending = True

        if republish:
            self._config_pending = True

        if self._config_pending and self.cfg.mqtt.ha_discovery:
            await self.entities.publish_config(self.hass)
        self._config_pending = False

        await self.entities.notify_state(self.hass)

    async def run(self):
        log.info("Starting bridge main loop")
        interval = self.cfg.polling.interval_secs
        log.info(f"Polling interval: {interval} seconds")
        try:
            while True:
                try:
                    await self.tick()
                except Exception as e:
                    log.error(f"Refresh cycle failed, will retry next cycle: {e}", exc_info=True)

                try:
                    await asyncio.wait_for(self._republish.wait(), timeout=interval)
                except asyncio.TimeoutError:
                    pass
        finally:
            self.mqtt.stop()
