"""Configuration loading and validation."""

import logging
import os
from typing import Any, Dict, List, Optional

import yaml

from constants import (
    DEFAULT_BRIDGE_NAME,
    DEFAULT_CONFIG_EXAMPLE_FILE,
    DEFAULT_HAP_PINCODE,
    DEFAULT_HAP_PORT,
    DEFAULT_MANUFACTURER,
    DEFAULT_MODEL,
    DEFAULT_MQTT_PORT,
    DEFAULT_PERSIST_FILE,
    DEFAULT_SERIAL,
    DEFAULT_SETTLE_DELAY,
    HTTP_REQUEST_TIMEOUT,
    KIND_BASIC_LIGHT,
    KIND_FAN,
    KIND_SWITCH_LIGHT,
    KIND_TOGGLE_LIGHT,
    LIGHT_TYPE_BASIC,
    LIGHT_TYPE_SWITCH,
    LIGHT_TYPE_TOGGLE,
    MAX_LEVEL_VALUE,
    TYPE_FAN,
    TYPE_LIGHT,
)
from errors import ConfigurationInvalid
from models import (
    AccessoryConfig,
    Action,
    BridgeConfig,
    HttpAction,
    LevelTable,
    MqttAction,
    MqttSettings,
    PowerActions,
    ToggleSpec,
)

logger = logging.getLogger(__name__)


def load_config(path: str) -> BridgeConfig:
    """Load and validate the configuration file.

    The file is read with yaml.safe_load, which accepts the JSON format as
    well as YAML.
    """
    if not os.path.exists(path):
        raise FileNotFoundError(
            f"Configuration file '{path}' not found. "
            f"Please copy '{DEFAULT_CONFIG_EXAMPLE_FILE}' to '{path}' "
            f"and update with your settings."
        )

    try:
        with open(path, 'r') as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationInvalid(f"Invalid YAML/JSON in '{path}': {e}")

    if not raw:
        raise ConfigurationInvalid(f"'{path}' is empty")
    if not isinstance(raw, dict):
        raise ConfigurationInvalid(f"'{path}' must contain a mapping at the top level")

    return parse_config(raw)


def parse_config(raw: Dict[str, Any]) -> BridgeConfig:
    """Build a BridgeConfig from an already parsed document."""
    bridge = _section(raw, 'bridge')
    http = _section(raw, 'http')

    mqtt_settings = None
    if raw.get('mqtt') is not None:
        mqtt_settings = _parse_mqtt(_section(raw, 'mqtt'))

    accessories_raw = raw.get('accessories')
    if not isinstance(accessories_raw, list) or not accessories_raw:
        raise ConfigurationInvalid("Missing 'accessories' list in configuration")

    accessories: List[AccessoryConfig] = []
    seen = set()
    for position, acc_raw in enumerate(accessories_raw):
        if not isinstance(acc_raw, dict):
            raise ConfigurationInvalid(f"Accessory #{position} must be a mapping")
        acc = parse_accessory(acc_raw)
        if acc.name in seen:
            raise ConfigurationInvalid(f"Duplicate accessory name '{acc.name}'")
        seen.add(acc.name)
        accessories.append(acc)

    uses_mqtt = any(_uses_mqtt(acc) for acc in accessories)
    if uses_mqtt and mqtt_settings is None:
        raise ConfigurationInvalid("MQTT actions configured but 'mqtt' section is missing")

    return BridgeConfig(
        name=str(bridge.get('name', DEFAULT_BRIDGE_NAME)),
        port=_int(bridge, 'port', 'bridge', default=DEFAULT_HAP_PORT),
        pincode=str(bridge.get('pincode', DEFAULT_HAP_PINCODE)),
        persist_file=str(bridge.get('persist_file', DEFAULT_PERSIST_FILE)),
        http_timeout=_number(http, 'timeout', 'http', default=HTTP_REQUEST_TIMEOUT),
        mqtt=mqtt_settings,
        accessories=accessories,
    )


def parse_accessory(raw: Dict[str, Any]) -> AccessoryConfig:
    """Validate one accessory definition."""
    name = raw.get('name')
    if not isinstance(name, str) or not name.strip():
        raise ConfigurationInvalid("Accessory is missing 'name'")
    where = f"accessory '{name}'"

    acc_type = raw.get('type')
    default_power_on = raw.get('default_power_on', False)
    if not isinstance(default_power_on, bool):
        raise ConfigurationInvalid(f"'default_power_on' must be a boolean in {where}")

    levels: Optional[LevelTable] = None
    toggle: Optional[ToggleSpec] = None
    power = PowerActions()

    if acc_type == TYPE_FAN:
        kind = KIND_FAN
        power = _parse_power(raw, 'power', where)
        levels = _parse_levels(raw, 'speeds', 'speed', where, power)
        default_value = _int(raw, 'default_speed', where, default=levels[-1].value)
    elif acc_type == TYPE_LIGHT:
        light_type = raw.get('light_type', LIGHT_TYPE_BASIC)
        default_value = _int(raw, 'default_brightness', where, default=MAX_LEVEL_VALUE)
        if light_type == LIGHT_TYPE_BASIC:
            kind = KIND_BASIC_LIGHT
            power = _parse_power(raw, 'power', where)
            levels = _parse_levels(raw, 'brightnesses', 'brightness', where, power)
        elif light_type == LIGHT_TYPE_TOGGLE:
            kind = KIND_TOGGLE_LIGHT
            toggle = _parse_toggle(raw, where)
        elif light_type == LIGHT_TYPE_SWITCH:
            kind = KIND_SWITCH_LIGHT
            power = _parse_power(raw, 'switch', where, required=True)
        else:
            raise ConfigurationInvalid(f"Unknown light_type '{light_type}' in {where}")
    else:
        raise ConfigurationInvalid(f"Unknown or missing type '{acc_type}' in {where}")

    return AccessoryConfig(
        name=name,
        kind=kind,
        manufacturer=str(raw.get('manufacturer', DEFAULT_MANUFACTURER)),
        model=str(raw.get('model', DEFAULT_MODEL)),
        serial=str(raw.get('serial', DEFAULT_SERIAL)),
        default_power_on=default_power_on,
        default_value=default_value,
        levels=levels,
        toggle=toggle,
        power=power,
    )


def _parse_levels(raw: Dict[str, Any], key: str, value_key: str, where: str,
                  power: PowerActions) -> LevelTable:
    entries = raw.get(key)
    if not isinstance(entries, list) or not entries:
        raise ConfigurationInvalid(f"Missing '{key}' list in {where}")

    pairs = []
    for entry in entries:
        if not isinstance(entry, dict):
            raise ConfigurationInvalid(f"Each entry of '{key}' must be a mapping in {where}")
        value = _int(entry, value_key, f"{key} of {where}")
        pairs.append((value, _parse_action(entry, f"{key} of {where}")))

    table = LevelTable.from_pairs(pairs)
    # without a power.off action "off" is reached through the resolver
    if power.off is None and 0 not in table.values():
        raise ConfigurationInvalid(f"'{key}' must include a level with {value_key} 0 or a 'power.off' action in {where}")
    return table


def _parse_toggle(raw: Dict[str, Any], where: str) -> ToggleSpec:
    ascending = raw.get('ascending', False)
    if not isinstance(ascending, bool):
        raise ConfigurationInvalid(f"'ascending' must be a boolean in {where}")
    pulse = raw.get('toggle')
    if not isinstance(pulse, dict):
        raise ConfigurationInvalid(f"Missing 'toggle' action in {where}")
    level_count = _int(raw, 'level_count', where)
    if level_count < 2:
        raise ConfigurationInvalid(f"level_count must be >= 2 (off plus one lit stop) in {where}, got {level_count}")
    return ToggleSpec(
        level_count=level_count,
        ascending=ascending,
        pulse_action=_parse_action(pulse, f"toggle of {where}"),
        settle_delay=_number(raw, 'settle_delay', where, default=DEFAULT_SETTLE_DELAY),
    )


def _parse_power(raw: Dict[str, Any], key: str, where: str, required: bool = False) -> PowerActions:
    section = raw.get(key)
    if section is None and not required:
        return PowerActions()
    if not isinstance(section, dict):
        raise ConfigurationInvalid(f"Missing '{key}' on/off actions in {where}")

    actions = {}
    for state in ('on', 'off'):
        entry = section.get(state)
        if entry is None and not required:
            actions[state] = None
            continue
        if not isinstance(entry, dict):
            raise ConfigurationInvalid(f"Missing '{key}.{state}' action in {where}")
        actions[state] = _parse_action(entry, f"{key}.{state} of {where}")
    return PowerActions(on=actions['on'], off=actions['off'])


def _parse_action(entry: Dict[str, Any], where: str) -> Action:
    if 'url' in entry:
        url = entry['url']
        if not isinstance(url, str) or not url:
            raise ConfigurationInvalid(f"'url' must be a non-empty string in {where}")
        return HttpAction(url=url)
    if 'topic' in entry:
        topic = entry['topic']
        if not isinstance(topic, str) or not topic:
            raise ConfigurationInvalid(f"'topic' must be a non-empty string in {where}")
        if 'payload' not in entry:
            raise ConfigurationInvalid(f"Missing 'payload' for topic '{topic}' in {where}")
        payload = entry['payload']
        if isinstance(payload, bool):
            payload = "true" if payload else "false"
        return MqttAction(topic=topic, payload=str(payload).encode("utf-8"))
    raise ConfigurationInvalid(f"Expected 'url' or 'topic'/'payload' in {where}")


def _parse_mqtt(raw: Dict[str, Any]) -> MqttSettings:
    host = raw.get('host')
    if not isinstance(host, str) or not host:
        raise ConfigurationInvalid("Missing 'mqtt.host' in configuration")
    return MqttSettings(
        host=host,
        port=_int(raw, 'port', 'mqtt', default=DEFAULT_MQTT_PORT),
        username=raw.get('username'),
        password=raw.get('password'),
        client_id=str(raw.get('client_id', '')),
    )


def _uses_mqtt(acc: AccessoryConfig) -> bool:
    actions = [acc.power.on, acc.power.off]
    if acc.levels is not None:
        actions.extend(lv.action for lv in acc.levels)
    if acc.toggle is not None:
        actions.append(acc.toggle.pulse_action)
    return any(isinstance(action, MqttAction) for action in actions)


def _section(raw: Dict[str, Any], key: str) -> Dict[str, Any]:
    value = raw.get(key) or {}
    if not isinstance(value, dict):
        raise ConfigurationInvalid(f"'{key}' section must be a mapping")
    return value


_MISSING = object()


def _int(raw: Dict[str, Any], key: str, where: str, default: Any = _MISSING) -> int:
    if key not in raw:
        if default is _MISSING:
            raise ConfigurationInvalid(f"Missing '{key}' in {where}")
        return default
    value = raw[key]
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationInvalid(f"'{key}' must be an integer in {where}, got {value!r}")
    return value


def _number(raw: Dict[str, Any], key: str, where: str, default: Any = _MISSING) -> float:
    if key not in raw:
        if default is _MISSING:
            raise ConfigurationInvalid(f"Missing '{key}' in {where}")
        return float(default)
    value = raw[key]
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigurationInvalid(f"'{key}' must be a number in {where}, got {value!r}")
    return float(value)
