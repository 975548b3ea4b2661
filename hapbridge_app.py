"""Main HAP bridge application."""

import asyncio
import logging
from typing import Dict, Optional

from pyhap.accessory import Bridge
from pyhap.accessory_driver import AccessoryDriver

from controllers import AccessoryController, build_controller
from dispatcher import ActionDispatcher
from hap_accessories import build_accessory
from http_caller import HttpCaller
from models import BridgeConfig
from mqtt_bridge import MqttBridge

logger = logging.getLogger(__name__)


class HapBridge:
    """Main bridge application."""

    def __init__(self, config: BridgeConfig):
        self.config = config
        self.loop = asyncio.get_running_loop()

        self.http = HttpCaller(timeout=config.http_timeout)
        self.mqtt: Optional[MqttBridge] = MqttBridge(config.mqtt) if config.mqtt else None
        self.dispatcher = ActionDispatcher(self.http, self.mqtt)

        # Controllers validate their config; build them before touching the network
        self.controllers: Dict[str, AccessoryController] = {
            acc.name: build_controller(acc, self.dispatcher) for acc in config.accessories
        }

        self.driver: Optional[AccessoryDriver] = None
        self.running = False

    def build_driver(self) -> AccessoryDriver:
        """Create the HAP driver with one bridged accessory per controller."""
        driver = AccessoryDriver(
            port=self.config.port,
            persist_file=self.config.persist_file,
            pincode=self.config.pincode.encode("utf-8"),
            loop=self.loop,
        )
        bridge = Bridge(driver, self.config.name)
        for controller in self.controllers.values():
            bridge.add_accessory(build_accessory(driver, controller))
            logger.info(f"Added {controller.config.kind} accessory '{controller.name}'")
        driver.add_accessory(accessory=bridge)
        return driver

    async def start(self):
        """Start the bridge."""
        self.running = True
        await self.http.connect()
        if self.mqtt is not None:
            self.mqtt.connect()
            logger.info("MQTT publisher started")

        self.driver = self.build_driver()
        await self.driver.async_start()
        logger.info(
            f"HAP bridge '{self.config.name}' serving {len(self.controllers)} accessories "
            f"on port {self.config.port}"
        )

    async def stop(self):
        """Stop the bridge."""
        if not self.running:
            return
        self.running = False

        if self.driver is not None:
            try:
                await self.driver.async_stop()
            except Exception as e:
                logger.warning(f"Error stopping HAP driver: {e}")
        try:
            await self.http.close()
        except Exception as e:
            logger.warning(f"Error closing HTTP session: {e}")
        if self.mqtt is not None:
            try:
                self.mqtt.close()
            except Exception as e:
                logger.warning(f"Error closing MQTT connection: {e}")
