"""Exceptions raised by the bridge."""


class ConfigurationInvalid(ValueError):
    """Configuration is missing, malformed or describes an unusable accessory."""


class DispatchError(Exception):
    """An action could not be delivered to the device."""

    def __init__(self, action, reason: str):
        super().__init__(f"Failed to dispatch {action}: {reason}")
        self.action = action
        self.reason = reason
