"""Constants for the HAP to HTTP/MQTT bridge."""

# Default configuration paths
DEFAULT_CONFIG_FILE = "hapbridge.yaml"
DEFAULT_CONFIG_EXAMPLE_FILE = "hapbridge.yaml.example"

# Bridge (HAP) defaults
DEFAULT_BRIDGE_NAME = "HAP Bridge"
DEFAULT_HAP_PORT = 51826
DEFAULT_HAP_PINCODE = "031-45-154"
DEFAULT_PERSIST_FILE = "hapbridge.state"

# Accessory kinds
KIND_FAN = "fan"
KIND_BASIC_LIGHT = "basic_light"
KIND_TOGGLE_LIGHT = "toggle_light"
KIND_SWITCH_LIGHT = "switch_light"

# Config "type" / "light_type" values
TYPE_FAN = "fan"
TYPE_LIGHT = "light"
LIGHT_TYPE_BASIC = "basic"
LIGHT_TYPE_TOGGLE = "toggle"
LIGHT_TYPE_SWITCH = "switch"

# Accessory information defaults
DEFAULT_MANUFACTURER = "hapbridge"
DEFAULT_MODEL = "Generic"
DEFAULT_SERIAL = "0000"

# Value range of HomeKit speed/brightness characteristics
MAX_LEVEL_VALUE = 100

# CurrentFanState characteristic values
FAN_STATE_IDLE = 1
FAN_STATE_BLOWING_AIR = 2

# Toggle pacing (seconds)
DEFAULT_SETTLE_DELAY = 1.0

# Timeouts (seconds)
HTTP_REQUEST_TIMEOUT = 10.0

# MQTT settings
MQTT_QOS = 0
MQTT_KEEPALIVE = 60
DEFAULT_MQTT_PORT = 1883
