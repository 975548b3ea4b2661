"""Route device actions to their transport."""

import logging
from typing import Optional

from errors import DispatchError
from http_caller import HttpCaller
from models import Action, HttpAction, MqttAction
from mqtt_bridge import MqttBridge

logger = logging.getLogger(__name__)


class ActionDispatcher:
    """Send an Action over HTTP or MQTT.

    Responses are only logged; callers get the HTTP status or MQTT message id
    back, or a DispatchError.
    """

    def __init__(self, http: HttpCaller, mqtt: Optional[MqttBridge] = None):
        self.http = http
        self.mqtt = mqtt

    async def dispatch(self, action: Action) -> int:
        """Dispatch one action."""
        if isinstance(action, HttpAction):
            return await self.http.get(action)
        if isinstance(action, MqttAction):
            if self.mqtt is None:
                raise DispatchError(action, "no MQTT broker configured")
            return self.mqtt.publish(action)
        raise DispatchError(action, f"unsupported action type {type(action).__name__}")
