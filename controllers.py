"""Per-accessory runtime: state plus the get/set entry points."""

import asyncio
import logging
from typing import List

from constants import KIND_BASIC_LIGHT, KIND_FAN, KIND_SWITCH_LIGHT, KIND_TOGGLE_LIGHT, MAX_LEVEL_VALUE
from dispatcher import ActionDispatcher
from errors import ConfigurationInvalid, DispatchError
from level_helpers import (
    closest_toggle_index,
    generate_toggle_levels,
    plan_toggle_steps,
    resolve_nearest_level,
)
from models import AccessoryConfig, AccessoryRuntimeState, Action, LevelTable, ToggleSpec

logger = logging.getLogger(__name__)


class AccessoryController:
    """Base controller. Owns the accessory's AccessoryRuntimeState."""

    def __init__(self, config: AccessoryConfig, dispatcher: ActionDispatcher):
        self.config = config
        self.name = config.name
        self.dispatcher = dispatcher
        self.state = AccessoryRuntimeState(
            power=config.default_power_on,
            current_value=config.default_value if config.default_power_on else 0,
        )

    def get_power(self) -> bool:
        return self.state.power

    def get_value(self) -> int:
        return self.state.current_value

    async def set_power(self, on: bool):
        raise NotImplementedError

    async def set_value(self, value: int):
        raise NotImplementedError

    async def _dispatch(self, action: Action) -> bool:
        """Dispatch an action; failures are logged, never raised."""
        try:
            result = await self.dispatcher.dispatch(action)
        except DispatchError as e:
            logger.error(f"[{self.name}] {e}")
            return False
        logger.debug(f"[{self.name}] {action} -> {result}")
        return True


class ContinuousController(AccessoryController):
    """
    Fans and basic lights: each request dispatches the nearest configured level.

    Optional power.on/power.off actions are sent on power changes. Fans
    restore their speed after power.on; basic lights with a power.on action
    send only that action.
    """

    def __init__(self, config: AccessoryConfig, dispatcher: ActionDispatcher):
        if config.levels is None:
            raise ConfigurationInvalid(f"Accessory '{config.name}' has no levels")
        super().__init__(config, dispatcher)
        self.levels: LevelTable = config.levels

    async def set_value(self, value: int):
        """Store the requested value and dispatch the nearest level."""
        self.state.current_value = value
        self.state.power = value > 0
        if value <= 0 and self.config.power.off is not None:
            await self._dispatch(self.config.power.off)
            return
        await self._dispatch_level(value)

    async def set_power(self, on: bool):
        """Off dispatches power.off or the level for 0; on restores the stored value."""
        self.state.power = on
        power = self.config.power
        if not on:
            if power.off is not None:
                await self._dispatch(power.off)
            else:
                await self._dispatch_level(0)
            return

        if self.state.current_value <= 0:
            self.state.current_value = self._power_on_value()
        if power.on is not None:
            await self._dispatch(power.on)
            if self.config.kind != KIND_FAN:
                return
        await self._dispatch_level(self.state.current_value)

    def _power_on_value(self) -> int:
        if self.config.default_value > 0:
            return self.config.default_value
        return self.levels[-1].value

    async def _dispatch_level(self, target: int):
        index = resolve_nearest_level(self.levels, target)
        level = self.levels[index]
        logger.info(f"[{self.name}] Requested {target}, using level {level.value}")
        await self._dispatch(level.action)


class ToggleLightController(AccessoryController):
    """
    Light with a single pulse actuator.

    Every pulse advances the lamp one stop through a fixed cycle of
    brightness levels. Requests are serialized: one pulse sequence runs at a
    time, and a request still waiting when a newer one arrives is dropped.
    """

    def __init__(self, config: AccessoryConfig, dispatcher: ActionDispatcher):
        if config.toggle is None:
            raise ConfigurationInvalid(f"Accessory '{config.name}' has no toggle settings")
        super().__init__(config, dispatcher)
        self.toggle: ToggleSpec = config.toggle
        self.sequence: List[int] = generate_toggle_levels(self.toggle.level_count, self.toggle.ascending)

        self._last_on_value = self.sequence[closest_toggle_index(self.sequence, config.default_value)]
        initial = config.default_value if config.default_power_on else 0
        index = closest_toggle_index(self.sequence, initial)
        self.state.current_toggle_index = index
        self.state.current_value = self.sequence[index]
        self.state.power = self.state.current_value > 0

        self._lock = asyncio.Lock()
        self._generation = 0

    async def set_value(self, value: int) -> int:
        """Move to the stop closest to value. Returns the number of pulses sent."""
        self._generation += 1
        generation = self._generation
        async with self._lock:
            if generation != self._generation:
                logger.warning(f"[{self.name}] Brightness {value} superseded by a newer request")
                return 0
            return await self._move_to(value)

    async def set_power(self, on: bool) -> int:
        if not on:
            return await self.set_value(0)
        target = self.state.current_value or self._last_on_value or max(self.sequence)
        return await self.set_value(target)

    async def _move_to(self, value: int) -> int:
        current_index = self.state.current_toggle_index
        target_index = closest_toggle_index(self.sequence, value)
        num_steps = plan_toggle_steps(current_index, target_index, self.toggle.level_count)

        # state tracks the intended end position before any pulse is sent
        self.state.current_toggle_index = target_index
        self.state.current_value = self.sequence[target_index]
        self.state.power = self.state.current_value > 0
        if self.state.power:
            self._last_on_value = self.state.current_value

        logger.info(
            f"[{self.name}] Requested {value}, moving from stop {current_index} to "
            f"{target_index} ({self.state.current_value}) in {num_steps} pulses"
        )
        await self.run_pulses(num_steps)
        return num_steps

    async def run_pulses(self, num_steps: int):
        """Send the pulse action num_steps times, settling after each one."""
        for step in range(num_steps):
            logger.debug(f"[{self.name}] Pulse {step + 1}/{num_steps}")
            await self._dispatch(self.toggle.pulse_action)
            await asyncio.sleep(self.toggle.settle_delay)


class SwitchLightController(AccessoryController):
    """On/off only light driven by the switch.on and switch.off actions."""

    def __init__(self, config: AccessoryConfig, dispatcher: ActionDispatcher):
        if config.power.on is None or config.power.off is None:
            raise ConfigurationInvalid(f"Accessory '{config.name}' needs switch on and off actions")
        super().__init__(config, dispatcher)
        self.state.current_value = MAX_LEVEL_VALUE if self.state.power else 0

    async def set_power(self, on: bool):
        self.state.power = on
        self.state.current_value = MAX_LEVEL_VALUE if on else 0
        logger.info(f"[{self.name}] Switching {'on' if on else 'off'}")
        await self._dispatch(self.config.power.on if on else self.config.power.off)

    async def set_value(self, value: int):
        await self.set_power(value > 0)


def build_controller(config: AccessoryConfig, dispatcher: ActionDispatcher) -> AccessoryController:
    """Create the controller matching the accessory kind."""
    if config.kind in (KIND_FAN, KIND_BASIC_LIGHT):
        return ContinuousController(config, dispatcher)
    if config.kind == KIND_TOGGLE_LIGHT:
        return ToggleLightController(config, dispatcher)
    if config.kind == KIND_SWITCH_LIGHT:
        return SwitchLightController(config, dispatcher)
    raise ConfigurationInvalid(f"Unknown accessory kind '{config.kind}' for '{config.name}'")
