"""HomeKit accessories backed by controllers."""

import logging

from pyhap.accessory import Accessory
from pyhap.const import CATEGORY_FAN, CATEGORY_LIGHTBULB

from constants import FAN_STATE_BLOWING_AIR, FAN_STATE_IDLE, KIND_FAN, KIND_SWITCH_LIGHT
from controllers import AccessoryController

logger = logging.getLogger(__name__)


class ControllerAccessory(Accessory):
    """
    Accessory with an On characteristic and, optionally, one 0-100 level
    characteristic.

    HAP setter callbacks are synchronous, so writes are handed to the
    driver's event loop as controller jobs; reads return cached state.
    """

    service_name = ""
    level_char = None
    extra_chars = ()

    def __init__(self, driver, controller: AccessoryController):
        super().__init__(driver, controller.name)
        self.controller = controller
        cfg = controller.config
        self.set_info_service(
            manufacturer=cfg.manufacturer,
            model=cfg.model,
            serial_number=cfg.serial,
        )

        chars = list(self.extra_chars)
        if self.level_char:
            chars.insert(0, self.level_char)
        self.serv = self.add_preload_service(self.service_name, chars=chars)
        self.char_on = self.serv.configure_char(
            "On",
            value=controller.get_power(),
            setter_callback=self._set_on,
            getter_callback=controller.get_power,
        )
        self.char_level = None
        if self.level_char:
            self.char_level = self.serv.configure_char(
                self.level_char,
                value=controller.get_value(),
                setter_callback=self._set_level,
                getter_callback=controller.get_value,
            )

    def _set_on(self, value):
        logger.info(f"[{self.display_name}] HomeKit set On={value}")
        self.driver.add_job(self._apply, self.controller.set_power(bool(value)))

    def _set_level(self, value):
        logger.info(f"[{self.display_name}] HomeKit set {self.level_char}={value}")
        self.driver.add_job(self._apply, self.controller.set_value(int(value)))

    async def _apply(self, request):
        try:
            await request
        except Exception as e:
            logger.error(f"[{self.display_name}] Request failed: {e}", exc_info=True)
        self.sync_chars()

    def sync_chars(self):
        """Push the controller's snapped values to HomeKit."""
        self.char_on.set_value(self.controller.get_power())
        if self.char_level is not None:
            self.char_level.set_value(self.controller.get_value())


class FanAccessory(ControllerAccessory):
    category = CATEGORY_FAN
    service_name = "Fan"
    level_char = "RotationSpeed"
    extra_chars = ("CurrentFanState",)

    def __init__(self, driver, controller: AccessoryController):
        super().__init__(driver, controller)
        self.char_fan_state = self.serv.configure_char(
            "CurrentFanState",
            value=self.get_fan_state(),
            getter_callback=self.get_fan_state,
        )

    def get_fan_state(self) -> int:
        return FAN_STATE_BLOWING_AIR if self.controller.get_power() else FAN_STATE_IDLE

    def sync_chars(self):
        super().sync_chars()
        self.char_fan_state.set_value(self.get_fan_state())


class LightAccessory(ControllerAccessory):
    category = CATEGORY_LIGHTBULB
    service_name = "Lightbulb"
    level_char = "Brightness"


class SwitchLightAccessory(ControllerAccessory):
    """Lightbulb exposing On only."""
    category = CATEGORY_LIGHTBULB
    service_name = "Lightbulb"


def build_accessory(driver, controller: AccessoryController) -> ControllerAccessory:
    """Create the HomeKit accessory for a controller."""
    if controller.config.kind == KIND_FAN:
        return FanAccessory(driver, controller)
    if controller.config.kind == KIND_SWITCH_LIGHT:
        return SwitchLightAccessory(driver, controller)
    return LightAccessory(driver, controller)
