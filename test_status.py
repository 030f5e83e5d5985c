"""
Unit tests for the device status diagnostic
Tests the Available/Missing/Unknown classifier and the attributes document
"""

from datetime import datetime, timedelta

import pytest
import pytz

from goveehub.ha.sensor import DeviceStatusDiagnostic, status_summary
from goveehub.models import DeviceState

from conftest import build_device, add_device, published

UPDATED = datetime(2024, 1, 1, 12, 0, 0, tzinfo=pytz.UTC)
POLL_INTERVAL = timedelta(seconds=900)
THRESHOLD = POLL_INTERVAL + timedelta(seconds=30)

UNIQUE_ID = "sensor-AABBCCDDEEFF0011-gv2mqtt-status"
STATE_TOPIC = f"gv2mqtt/sensor/{UNIQUE_ID}/state"
ATTRIBUTES_TOPIC = f"gv2mqtt/sensor/{UNIQUE_ID}/attributes"


class TestStatusSummary:
    """Test the three-state classifier"""

    def test_unknown_without_state(self):
        assert status_summary(None, UPDATED, THRESHOLD) == "Unknown"

    def test_available_at_threshold(self):
        state = DeviceState(source="LAN API", updated=UPDATED)
        assert status_summary(state, UPDATED + THRESHOLD, THRESHOLD) == "Available"

    def test_missing_one_second_past_threshold(self):
        state = DeviceState(source="LAN API", updated=UPDATED)
        now = UPDATED + THRESHOLD + timedelta(seconds=1)
        assert status_summary(state, now, THRESHOLD) == "Missing"

    def test_fresh_state(self):
        state = DeviceState(source="LAN API", updated=UPDATED)
        assert status_summary(state, UPDATED + timedelta(seconds=5), THRESHOLD) == "Available"


class TestDeviceStatusDiagnostic:
    """Test refreshing the status diagnostic from the store"""

    def _diag(self, store, now):
        return DeviceStatusDiagnostic(build_device(), store, POLL_INTERVAL, clock=lambda: now)

    def test_config(self, store):
        diag = self._diag(store, UPDATED)
        payload = diag.sensor.to_discovery()

        assert payload["name"] == "Status"
        assert payload["unique_id"] == UNIQUE_ID
        assert payload["state_topic"] == STATE_TOPIC
        assert payload["json_attributes_topic"] == ATTRIBUTES_TOPIC
        assert diag.threshold == THRESHOLD

    @pytest.mark.asyncio
    async def test_available(self, store, hass, mqtt_client):
        await add_device(store, build_device(states={"online": {"value": True}}, polled=UPDATED))

        await self._diag(store, UPDATED + timedelta(seconds=60)).notify_state(hass)

        topics = published(mqtt_client)
        assert topics[STATE_TOPIC] == "Available"
        attributes = topics[ATTRIBUTES_TOPIC]
        assert set(attributes) == {"iot", "lan", "http", "platform_metadata", "platform_state", "overall"}
        assert attributes["iot"] is None
        assert attributes["lan"] is None
        assert attributes["http"]["online"] is True
        assert attributes["overall"]["source"] == "PLATFORM API"
        assert attributes["platform_metadata"]["deviceName"] == "Living Room Thermometer"
        assert attributes["platform_state"]["capabilities"][0]["instance"] == "online"

    @pytest.mark.asyncio
    async def test_missing(self, store, hass, mqtt_client):
        await add_device(store, build_device(states={"online": {"value": True}}, polled=UPDATED))

        await self._diag(store, UPDATED + THRESHOLD + timedelta(seconds=1)).notify_state(hass)

        assert published(mqtt_client)[STATE_TOPIC] == "Missing"

    @pytest.mark.asyncio
    async def test_unknown(self, store, hass, mqtt_client):
        await add_device(store, build_device())

        await self._diag(store, UPDATED).notify_state(hass)

        topics = published(mqtt_client)
        assert topics[STATE_TOPIC] == "Unknown"
        assert topics[ATTRIBUTES_TOPIC]["overall"] is None

    @pytest.mark.asyncio
    async def test_lan_update_refreshes_status(self, store, hass, mqtt_client):
        device = build_device(states={"online": {"value": True}}, polled=UPDATED)
        lan_updated = UPDATED + timedelta(hours=1)
        device.set_lan_device_status({"onOff": 1, "brightness": 50}, lan_updated)
        await add_device(store, device)

        await self._diag(store, lan_updated + timedelta(seconds=10)).notify_state(hass)

        topics = published(mqtt_client)
        assert topics[STATE_TOPIC] == "Available"
        assert topics[ATTRIBUTES_TOPIC]["overall"]["source"] == "LAN API"

    @pytest.mark.asyncio
    async def test_malformed_lan_field_still_publishes(self, store, hass, mqtt_client):
        device = build_device(polled=UPDATED)
        device.set_lan_device_status({"onOff": 1, "brightness": "full"}, UPDATED)
        await add_device(store, device)

        await self._diag(store, UPDATED).notify_state(hass)

        topics = published(mqtt_client)
        assert topics[STATE_TOPIC] == "Available"
        assert topics[ATTRIBUTES_TOPIC]["lan"]["on"] is True
        assert topics[ATTRIBUTES_TOPIC]["lan"]["brightness"] == 0

    @pytest.mark.asyncio
    async def test_missing_device_is_noop(self, store, hass, mqtt_client):
        await self._diag(store, UPDATED).notify_state(hass)
        mqtt_client.pub.assert_not_called()
