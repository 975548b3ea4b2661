"""Test suite for action dispatch over HTTP and MQTT."""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import aiohttp
import paho.mqtt.client as mqtt
import pytest

from dispatcher import ActionDispatcher
from errors import DispatchError
from http_caller import HttpCaller
from models import HttpAction, MqttAction, MqttSettings
from mqtt_bridge import MqttBridge


class _FakeResponse:
    def __init__(self, status):
        self.status = status

    async def text(self):
        return "ok"

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False


def _caller_with_session(**get_kwargs):
    caller = HttpCaller(timeout=1.0)
    session = MagicMock()
    session.closed = False
    session.get = MagicMock(**get_kwargs)
    caller.session = session
    return caller, session


class TestHttpCaller:
    """Test cases for HttpCaller."""

    @pytest.mark.asyncio
    async def test_get_returns_status(self):
        caller, session = _caller_with_session(return_value=_FakeResponse(200))

        status = await caller.get(HttpAction("http://dev/on"))

        assert status == 200
        session.get.assert_called_once_with("http://dev/on")

    @pytest.mark.asyncio
    async def test_error_status_raises(self):
        caller, _ = _caller_with_session(return_value=_FakeResponse(500))

        with pytest.raises(DispatchError, match="500"):
            await caller.get(HttpAction("http://dev/on"))

    @pytest.mark.asyncio
    async def test_client_error_raises(self):
        caller, _ = _caller_with_session(side_effect=aiohttp.ClientConnectionError("refused"))

        with pytest.raises(DispatchError, match="refused"):
            await caller.get(HttpAction("http://dev/on"))

    @pytest.mark.asyncio
    async def test_timeout_raises(self):
        caller, _ = _caller_with_session(side_effect=asyncio.TimeoutError())

        with pytest.raises(DispatchError, match="timed out"):
            await caller.get(HttpAction("http://dev/on"))

    @pytest.mark.asyncio
    async def test_close_without_session(self):
        caller = HttpCaller()
        await caller.close()
        assert caller.session is None


class TestMqttBridge:
    """Test cases for MqttBridge."""

    def _bridge(self):
        with patch("mqtt_bridge.mqtt.Client") as client_cls:
            bridge = MqttBridge(MqttSettings(host="broker", port=1883, username="u", password="p"))
        return bridge, client_cls.return_value

    def test_credentials_applied(self):
        _, client = self._bridge()
        client.username_pw_set.assert_called_once_with("u", "p")

    def test_publish_fire_and_forget(self):
        bridge, client = self._bridge()
        client.publish.return_value = MagicMock(rc=mqtt.MQTT_ERR_SUCCESS, mid=7)

        mid = bridge.publish(MqttAction("fan/set", b"high"))

        assert mid == 7
        client.publish.assert_called_once_with("fan/set", payload=b"high", qos=0, retain=False)

    def test_publish_failure_raises(self):
        bridge, client = self._bridge()
        client.publish.return_value = MagicMock(rc=mqtt.MQTT_ERR_NO_CONN, mid=0)

        with pytest.raises(DispatchError):
            bridge.publish(MqttAction("fan/set", b"high"))

    def test_connect_starts_loop(self):
        bridge, client = self._bridge()

        bridge.connect()

        client.connect.assert_called_once_with("broker", 1883, keepalive=60)
        client.loop_start.assert_called_once()


class TestActionDispatcher:
    """Test cases for ActionDispatcher routing."""

    @pytest.mark.asyncio
    async def test_routes_http(self):
        http = MagicMock()
        http.get = AsyncMock(return_value=204)
        dispatcher = ActionDispatcher(http)

        assert await dispatcher.dispatch(HttpAction("http://dev/x")) == 204
        http.get.assert_awaited_once_with(HttpAction("http://dev/x"))

    @pytest.mark.asyncio
    async def test_routes_mqtt(self):
        http = MagicMock()
        http.get = AsyncMock()
        broker = MagicMock()
        broker.publish.return_value = 3
        dispatcher = ActionDispatcher(http, broker)

        assert await dispatcher.dispatch(MqttAction("t", b"p")) == 3
        broker.publish.assert_called_once_with(MqttAction("t", b"p"))
        http.get.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_mqtt_without_broker(self):
        dispatcher = ActionDispatcher(MagicMock())

        with pytest.raises(DispatchError, match="no MQTT broker"):
            await dispatcher.dispatch(MqttAction("t", b"p"))

    @pytest.mark.asyncio
    async def test_unknown_action(self):
        dispatcher = ActionDispatcher(MagicMock())

        with pytest.raises(DispatchError):
            await dispatcher.dispatch("http://not-an-action")
