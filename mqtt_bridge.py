"""MQTT publisher for topic/payload actions."""

import logging

import paho.mqtt.client as mqtt

from constants import MQTT_KEEPALIVE, MQTT_QOS
from errors import DispatchError
from models import MqttAction, MqttSettings

logger = logging.getLogger(__name__)


class MqttBridge:
    """Publishes MqttActions; paho runs its network loop in its own thread."""

    def __init__(self, settings: MqttSettings):
        self.settings = settings
        self.client = mqtt.Client(mqtt.CallbackAPIVersion.VERSION2, client_id=settings.client_id)
        if settings.username:
            self.client.username_pw_set(settings.username, settings.password)

        self.client.on_connect = self._on_connect
        self.client.on_disconnect = self._on_disconnect

    def connect(self):
        """Connect to MQTT broker."""
        try:
            self.client.connect(self.settings.host, self.settings.port, keepalive=MQTT_KEEPALIVE)
            self.client.loop_start()
            logger.info(f"Connecting to MQTT broker at {self.settings.host}:{self.settings.port}")
        except Exception as e:
            logger.error(f"Failed to connect to MQTT broker: {e}")
            raise

    def close(self):
        """Close MQTT connection."""
        try:
            self.client.loop_stop()
        finally:
            self.client.disconnect()

    def publish(self, action: MqttAction) -> int:
        """Publish without waiting for delivery; return the message id."""
        try:
            info = self.client.publish(action.topic, payload=action.payload, qos=MQTT_QOS, retain=False)
        except ValueError as e:
            raise DispatchError(action, str(e)) from e
        if info.rc != mqtt.MQTT_ERR_SUCCESS:
            raise DispatchError(action, mqtt.error_string(info.rc))
        logger.debug(f"Published to {action.topic}: {action.payload!r}")
        return info.mid

    def _on_connect(self, client, userdata, flags, reason_code, properties):
        """Handle MQTT connection."""
        if reason_code == 0:
            logger.info("Connected to MQTT broker successfully")
        else:
            logger.warning(f"Connected to MQTT broker with code {reason_code}")

    def _on_disconnect(self, client, userdata, flags, reason_code, properties):
        """Handle MQTT disconnection."""
        if reason_code != 0:
            logger.warning(f"Disconnected from MQTT broker unexpectedly: {reason_code}")
