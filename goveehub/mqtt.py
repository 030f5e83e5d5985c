import json
import threading
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Union
from paho.mqtt import client as mqtt
from pydantic import BaseModel
import logging
log = logging.getLogger(__name__)


class MqttPublishError(Exception):
    """The broker client refused or failed to queue a message."""

    def __init__(self, topic: str, rc: int):
        super().__init__(f"Failed to publish to {topic}: {mqtt.error_string(rc)}")
        self.topic = topic
        self.rc = rc


class Mqtt:
    def __init__(self, cfg, availability_topic: Optional[str] = None):
        self.cfg = cfg
        self.availability_topic = availability_topic
        self._connect_listeners: List[Callable[[], None]] = []
        self._subscriptions: Dict[str, Callable[[str, Any], None]] = {}
        self._lock = threading.Lock()
        self.cli = mqtt.Client(
            mqtt.CallbackAPIVersion.VERSION2,
            client_id=cfg.client_id,
            clean_session=True,
        )
        if cfg.username:
            self.cli.username_pw_set(cfg.username, cfg.password or "")
        if availability_topic:
            self.cli.will_set(availability_topic, "offline", qos=0, retain=True)
        self.cli.on_connect = self._on_connect
        self.cli.on_disconnect = self._on_disconnect

    def start(self):
        log.info(f"Connecting to MQTT broker {self.cfg.host}:{self.cfg.port}")
        self.cli.connect_async(self.cfg.host, self.cfg.port, keepalive=30)
        self.cli.loop_start()

    def stop(self):
        if self.availability_topic and self.cli.is_connected():
            self.cli.publish(self.availability_topic, "offline", qos=0, retain=True)
        self.cli.disconnect()
        self.cli.loop_stop()

    def add_connect_listener(self, callback: Callable[[], None]):
        """Register a callback run (on the network thread) after every successful connect."""
        self._connect_listeners.append(callback)

    def _on_connect(self, cli, _userdata, _flags, reason_code, _properties):
        if reason_code.is_failure:
            log.error(f"MQTT connection refused: {reason_code}")
            return
        log.info("MQTT connected")
        if self.availability_topic:
            cli.publish(self.availability_topic, "online", qos=0, retain=True)
        with self._lock:
            topics = list(self._subscriptions)
        for topic in topics:
            cli.subscribe(topic, qos=0)
        for callback in self._connect_listeners:
            try:
                callback()
            except Exception as e:
                log.error(f"MQTT connect listener failed: {e}", exc_info=True)

    def _on_disconnect(self, _cli, _userdata, _flags, reason_code, _properties):
        log.warning(f"MQTT disconnected: {reason_code}")

    def pub(self, topic: str, payload: Union[str, Dict[str, Any], List[Any]], retain: bool = False):
        try:
            if isinstance(payload, str):
                p = payload
            else:
                p = json.dumps(self._make_json_serializable(payload), separators=(",", ":"))
            log.debug("MQTT PUB %s %s", topic, p)
            info = self.cli.publish(topic, p, qos=0, retain=retain)
            if info.rc != mqtt.MQTT_ERR_SUCCESS:
                raise MqttPublishError(topic, info.rc)
        except Exception as e:
            log.error(f"Failed to publish MQTT message to {topic}: {e}", exc_info=True)
            raise

    def _make_json_serializable(self, obj: Any) -> Any:
        """Recursively convert models, datetimes and enums to JSON-friendly values."""
        if isinstance(obj, BaseModel):
            return obj.model_dump(mode="json")
        if isinstance(obj, dict):
            return {str(k): self._make_json_serializable(v) for k, v in obj.items()}
        if isinstance(obj, (list, tuple)):
            return [self._make_json_serializable(item) for item in obj]
        if isinstance(obj, Enum):
            return obj.value
        if isinstance(obj, datetime):
            return obj.isoformat()
        if isinstance(obj, (str, int, float, bool, type(None))):
            return obj
        return str(obj)

    def sub(self, topic: str, handler: Callable[[str, Any], None]):
        def on_message(_cli, _ud, msg):
            try:
                data = json.loads(msg.payload.decode())
            except Exception:
                handler(msg.topic, msg.payload.decode())
                return
            handler(msg.topic, data)
        with self._lock:
            self._subscriptions[topic] = handler
        self.cli.message_callback_add(topic, on_message)
        if self.cli.is_connected():
            self.cli.subscribe(topic, qos=0)
