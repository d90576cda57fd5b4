"""
API-level type definitions.

This module contains types and enums that belong to the API layer:
- Relay, input, reboot and power-up states and their wire codes
- Temperature and period units
- X-300 thermostat modes
- Event actions for WebRelay-10 Plus and WebSwitch Plus
- Constants used by the API layer
"""

from enum import Enum, IntEnum
from typing import Optional, Self


class RelayState(Enum):
    OFF = "off"
    ON = "on"
    PULSE = "pulse"
    REBOOT = "reboot"  # Only reported when auto-reboot is enabled
    DISABLE_AUTO_REBOOT = "disable_auto_reboot"
    ENABLE_AUTO_REBOOT = "enable_auto_reboot"
    TOGGLE = "toggle"

    @property
    def code(self) -> int:
        """Wire code used in relay state commands"""
        return _RELAY_STATE_CODES[self]

    @classmethod
    def from_code(cls, code: int, auto_reboot_enabled: bool = False) -> Self:
        """Decode a relay state. Code 2 means reboot when auto-reboot is enabled, else pulse."""
        match code:
            case 0: return cls.OFF
            case 1: return cls.ON
            case 2: return cls.REBOOT if auto_reboot_enabled else cls.PULSE
            case 3: return cls.DISABLE_AUTO_REBOOT
            case 4: return cls.ENABLE_AUTO_REBOOT
            case 5: return cls.TOGGLE
        raise ValueError(f"Relay state code must be 0-5, got {code}")


_RELAY_STATE_CODES = {
    RelayState.OFF: 0,
    RelayState.ON: 1,
    RelayState.PULSE: 2,
    RelayState.REBOOT: 2,
    RelayState.DISABLE_AUTO_REBOOT: 3,
    RelayState.ENABLE_AUTO_REBOOT: 4,
    RelayState.TOGGLE: 5,
}


class InputState(IntEnum):
    OFF = 0
    ON = 1


class PowerUpFlag(IntEnum):
    OFF = 0
    ON = 1

    @classmethod
    def from_code(cls, code: int) -> Self:
        return cls.OFF if code == 0 else cls.ON


class RebootState(IntEnum):
    AUTO_REBOOT_OFF = 0
    PINGING = 1
    WAITING_FOR_RESPONSE = 2
    REBOOTING = 3
    WAITING_FOR_BOOT = 4


class TemperatureUnits(Enum):
    FAHRENHEIT = "F"
    CELSIUS = "C"

    @classmethod
    def from_string(cls, text: Optional[str]) -> Self:
        if text and text.strip().upper() == "C":
            return cls.CELSIUS
        return cls.FAHRENHEIT


class PeriodUnits(Enum):
    SECONDS = "s"
    MINUTES = "m"
    HOURS = "h"
    DAYS = "d"
    WEEKS = "w"
    DISABLED = "0"

    @classmethod
    def from_string(cls, text: Optional[str]) -> Self:
        if not text:
            return cls.DISABLED
        try:
            return cls(text.strip().lower())
        except ValueError:
            return cls.DISABLED


class HeatMode(IntEnum):
    OFF = 0
    HEAT_ONLY = 1
    COOL_ONLY = 2
    AUTO = 3


class FanMode(IntEnum):
    ON = 0
    AUTO = 1


class X300OperationMode(IntEnum):
    THERMOSTAT = 6
    TEMPERATURE_MONITOR = 7


class WebRelay10Action(Enum):
    TURN_RELAY_ON = "turn relay(s) on"
    TURN_RELAY_OFF = "turn relay(s) off"
    PULSE_RELAY = "pulse relay(s)"
    TOGGLE_RELAY = "toggle relay(s)"
    SET_EXT_VAR = "set extvar0"
    CLEAR_EXT_VAR = "clear extvar0"
    CHANGE_SCHEDULES = "change schedules"
    NONE = ""

    @classmethod
    def from_string(cls, text: Optional[str]) -> Self:
        if not text:
            return cls.NONE
        try:
            return cls(text.strip().lower())
        except ValueError:
            return cls.NONE


class WebSwitchAction(Enum):
    TURN_RELAY_ON = 0
    TURN_RELAY_OFF = 1
    PULSE_RELAY = 2
    TOGGLE_RELAY = 3
    SET_EXT_VAR = 4
    DISABLE_EVENTS = 5
    ENABLE_EVENTS = 6
    NONE = 7

    @classmethod
    def from_string(cls, text: Optional[str]) -> Self:
        # The module only reports the relay actions by name
        if not text:
            return cls.NONE
        return _WEBSWITCH_ACTION_STRINGS.get(text.strip().lower(), cls.NONE)


_WEBSWITCH_ACTION_STRINGS = {
    "turn relay(s) on": WebSwitchAction.TURN_RELAY_ON,
    "turn relay(s) off": WebSwitchAction.TURN_RELAY_OFF,
    "pulse relay(s)": WebSwitchAction.PULSE_RELAY,
    "toggle relay(s)": WebSwitchAction.TOGGLE_RELAY,
}


class X301Action(Enum):
    """Event actions of the X-301. Values are the keywords the module reports."""
    TURN_RELAY_ON = "on"
    TURN_RELAY_OFF = "off"
    PULSE_RELAY = "pulse"
    TOGGLE_RELAY = "toggle"
    NONE = ""

    @classmethod
    def from_string(cls, text: Optional[str]) -> Self:
        # Matched by keyword, so "turn relay on" and "on" both decode
        if not text:
            return cls.NONE
        text = text.strip().lower()
        for action in (cls.TURN_RELAY_ON, cls.TURN_RELAY_OFF, cls.PULSE_RELAY, cls.TOGGLE_RELAY):
            if action.value in text:
                return action
        return cls.NONE

    @property
    def code(self) -> int:
        """Action code used by eventSetup.srv"""
        match self:
            case X301Action.TURN_RELAY_ON:
                return 1
            case X301Action.TURN_RELAY_OFF:
                return 2
            case X301Action.PULSE_RELAY:
                return 3
            case X301Action.TOGGLE_RELAY:
                return 4
        return 0


class Const:
    """API-level constants"""
    DEFAULT_PORT = 80
    DEFAULT_POLL_INTERVAL = 5  # seconds

    # Relays
    DEFAULT_PULSE_TIME = 1.5  # seconds
    MIN_PULSE_TIME = 0.1  # shorter pulses are ignored
    MAX_PULSE_DURATION = 86400  # one day

    # Events
    MIN_EVENT_ID = 0
    MAX_EVENT_ID = 99
    MAX_EVENT_DESCRIPTION = 20

    # Placeholder reported for a sensor that is connected but has no reading
    NO_READING = "x.x"

    # X-300
    X300_TOTAL_INPUTS = 8
    X300_TOTAL_RELAYS = 3
    DEFAULT_FILTER_CHANGE_DAYS = 60
    MIN_TEMP_ABSOLUTE = 0.0

    # X-301
    X301_TOTAL_INPUTS = 2
    X301_TOTAL_RELAYS = 2

    # Temperature Module
    TEMPERATURE_MODULE_TOTAL_SENSORS = 4
    TEMPERATURE_MODULE_TOTAL_RELAYS = 2
