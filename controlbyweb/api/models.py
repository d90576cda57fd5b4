"""
ControlByWeb API-level models.

This module contains the value objects shared by every module type:
- Relay, StandardInput, SensorInput (I/O channels)
- Epoch (device clock)
- Diagnostics and its per-device variants
- ModuleEvent, EventCollection (scheduled events)
"""

import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import ClassVar, Optional, Self

from ..exceptions import CbwUnsupportedMethodError
from .types import (
    Const,
    InputState,
    PeriodUnits,
    PowerUpFlag,
    RelayState,
    WebRelay10Action,
    WebSwitchAction,
    X301Action,
)


def parse_mac(text: str) -> str:
    """
    Normalise a MAC address to upper-case colon form.

    Accepts twelve hex digits, either bare or split into pairs by colons or
    dashes. Raises ValueError for anything else.
    """
    cleaned = text.strip().upper()
    for sep in (":", "-"):
        if sep in cleaned:
            parts = cleaned.split(sep)
            if len(parts) != 6 or any(len(p) != 2 for p in parts):
                raise ValueError(f"Invalid MAC address: {text!r}")
            cleaned = "".join(parts)
            break
    if len(cleaned) != 12 or any(c not in "0123456789ABCDEF" for c in cleaned):
        raise ValueError(f"Invalid MAC address: {text!r}")
    return ":".join(cleaned[i:i + 2] for i in range(0, 12, 2))


def _checked_pulse_time(pulse_time: float) -> float:
    if pulse_time < 0:
        return Const.DEFAULT_PULSE_TIME
    if pulse_time > Const.MAX_PULSE_DURATION:
        raise ValueError(f"Pulse time cannot exceed {Const.MAX_PULSE_DURATION}, got {pulse_time}")
    return float(pulse_time)


@dataclass
class Relay:
    """A relay output and the pulse duration used when it is pulsed"""
    state: RelayState = RelayState.OFF
    pulse_time: float = Const.DEFAULT_PULSE_TIME

    def __post_init__(self):
        self.pulse_time = _checked_pulse_time(self.pulse_time)

    def set_pulse_time(self, pulse_time: float) -> None:
        """Negative values restore the default pulse time"""
        self.pulse_time = _checked_pulse_time(pulse_time)

    def reset(self) -> None:
        self.state = RelayState.OFF
        self.pulse_time = Const.DEFAULT_PULSE_TIME


@dataclass
class StandardInput:
    """A digital input that counts its OFF to ON transitions"""
    state: InputState = InputState.OFF
    trigger_count: int = 0

    def __post_init__(self):
        if self.trigger_count < 0:
            raise ValueError(f"Trigger count cannot be less than zero, got {self.trigger_count}")

    def change_state(self, state: InputState) -> None:
        if self.state == InputState.OFF and state == InputState.ON:
            self.trigger_count += 1
        self.state = state

    def trigger(self) -> None:
        self.change_state(InputState.ON)

    def reset(self) -> None:
        self.state = InputState.OFF
        self.trigger_count = 0

    def reset_trigger_count(self) -> None:
        self.trigger_count = 0


@dataclass
class SensorInput:
    """A temperature sensor port. Temperature is only meaningful when a sensor is attached."""
    has_sensor: bool = False
    temperature: float = 0.0

    @classmethod
    def with_temperature(cls, temperature: float) -> Self:
        return cls(has_sensor=True, temperature=temperature)

    def set_temperature(self, temperature: float) -> None:
        if not self.has_sensor:
            raise RuntimeError("Cannot set the temperature for an input with no sensor")
        self.temperature = temperature

    def add_sensor(self, temperature: float = 0.0) -> None:
        self.has_sensor = True
        self.temperature = temperature

    def remove_sensor(self) -> None:
        self.has_sensor = False
        self.temperature = 0.0

    def reset(self) -> None:
        self.remove_sensor()

    def __str__(self) -> str:
        return f"Has sensor: {self.has_sensor}. Sensor temp: {self.temperature}."


@dataclass(frozen=True)
class Epoch:
    """Seconds since 1970-01-01 UTC, as reported by the module clock"""
    value: int = 0

    @classmethod
    def now(cls) -> Self:
        return cls(int(time.time()))

    @classmethod
    def from_datetime(cls, date: datetime) -> Self:
        if date.tzinfo is None:
            date = date.replace(tzinfo=timezone.utc)
        return cls(int(date.timestamp()))

    @classmethod
    def parse(cls, text: str) -> Self:
        return cls(int(text))

    @classmethod
    def try_parse(cls, text: Optional[str]) -> Optional[Self]:
        if text is None:
            return None
        try:
            return cls.parse(text.strip())
        except ValueError:
            return None

    def to_datetime(self) -> datetime:
        return datetime.fromtimestamp(self.value, tz=timezone.utc)

    def __str__(self) -> str:
        return str(self.value)


# ============================
# Diagnostics
# ============================

class Diagnostics:
    """Power-up flags and power-loss counter reported by diagnostics.xml"""
    memory_power_up_flag_supported = True

    def __init__(self):
        self._memory_power_up_flag = PowerUpFlag.ON
        self._device_power_up_flag = PowerUpFlag.ON
        self._power_loss_count = 0

    @property
    def memory_power_up_flag(self) -> PowerUpFlag:
        return self._memory_power_up_flag

    @property
    def device_power_up_flag(self) -> PowerUpFlag:
        return self._device_power_up_flag

    @property
    def power_loss_count(self) -> int:
        return self._power_loss_count

    def set_memory_power_up_flag(self, flag: PowerUpFlag) -> None:
        self._memory_power_up_flag = flag

    def set_device_power_up_flag(self, flag: PowerUpFlag) -> None:
        self._device_power_up_flag = flag

    def set_power_loss_count(self, count: int) -> None:
        # Negative counts are ignored
        if count >= 0:
            self._power_loss_count = count

    def increment_power_loss_count(self) -> None:
        self._power_loss_count += 1

    def reset_power_loss_count(self) -> None:
        self._power_loss_count = 0

    def reset(self) -> None:
        self._memory_power_up_flag = PowerUpFlag.ON
        self._device_power_up_flag = PowerUpFlag.ON
        self._power_loss_count = 0

    def __repr__(self) -> str:
        return (f"{type(self).__name__}(memory_power_up_flag={self.memory_power_up_flag.name}, "
                f"device_power_up_flag={self.device_power_up_flag.name}, "
                f"power_loss_count={self.power_loss_count})")


class LimitedDiagnostics(Diagnostics):
    """Diagnostics for modules without a memory power-up flag (WebRelay-10, WebSwitch)"""
    memory_power_up_flag_supported = False

    @property
    def memory_power_up_flag(self) -> PowerUpFlag:
        return PowerUpFlag.OFF

    def set_memory_power_up_flag(self, flag: PowerUpFlag) -> None:
        raise CbwUnsupportedMethodError("set_memory_power_up_flag", "Method only supported on WebSwitch Plus device.")


class X300Diagnostics(Diagnostics):

    def __init__(self):
        super().__init__()
        self._internal_temp = 0.0
        self._vin = 0.0
        self._internal_5volt = 0.0

    @property
    def internal_temperature(self) -> float:
        return self._internal_temp

    @property
    def voltage_in(self) -> float:
        return self._vin

    @property
    def internal_5volt(self) -> float:
        return self._internal_5volt

    def set_internal_temp(self, temp: float) -> None:
        if temp >= 0.0:
            self._internal_temp = temp

    def set_voltage_in(self, volts: float) -> None:
        if volts >= 0.0:
            self._vin = volts

    def set_internal_voltage(self, volts: float) -> None:
        if volts >= 0.0:
            self._internal_5volt = volts

    def reset(self) -> None:
        self._internal_temp = 0.0
        self._vin = 0.0
        self._internal_5volt = 0.0
        super().reset()

    def __repr__(self) -> str:
        return (f"{super().__repr__()[:-1]}, internal_temperature={self.internal_temperature}, "
                f"voltage_in={self.voltage_in}, internal_5volt={self.internal_5volt})")


class X301Diagnostics(X300Diagnostics):
    """Same readings as the X-300"""
    pass


# ============================
# Events
# ============================

@dataclass
class ModuleEvent:
    """
    A scheduled event as reported by event{N}.xml.

    An active event with a remaining count of zero repeats forever. A period
    of "0" means the event is disabled.
    """
    MAX_RELAY: ClassVar[int] = 2

    id: int = Const.MIN_EVENT_ID
    active: bool = False
    current_time: Optional[datetime] = None
    next_event: Optional[datetime] = None
    period: str = ""
    count: int = 0
    relay: int = 1
    pulse_duration: float = Const.DEFAULT_PULSE_TIME
    description: str = ""

    def __post_init__(self):
        self.set_or_override_id(self.id)
        self.set_or_override_count(self.count)
        self.set_or_override_relay(self.relay)
        self.set_or_override_pulse_duration(self.pulse_duration)
        self.set_or_override_description(self.description)

    @property
    def always_on(self) -> bool:
        return self.active and self.count == 0

    @property
    def is_disabled(self) -> bool:
        return self.period == "0"

    @property
    def period_units(self) -> PeriodUnits:
        return PeriodUnits.from_string(self.period)

    def set_or_override_id(self, event_id: int) -> None:
        if not Const.MIN_EVENT_ID <= event_id <= Const.MAX_EVENT_ID:
            raise ValueError(f"Event id must be {Const.MIN_EVENT_ID}-{Const.MAX_EVENT_ID}, got {event_id}")
        self.id = event_id

    def set_or_override_count(self, count: int) -> None:
        self.count = max(0, count)

    def set_or_override_relay(self, relay: int) -> None:
        if not 1 <= relay <= self.MAX_RELAY:
            raise ValueError(f"Relay must be 1-{self.MAX_RELAY}, got {relay}")
        self.relay = relay

    def set_or_override_pulse_duration(self, duration: float) -> None:
        self.pulse_duration = max(0.0, duration)

    def set_or_override_description(self, description: Optional[str]) -> None:
        if description is None:
            description = ""
        if len(description) > Const.MAX_EVENT_DESCRIPTION:
            raise ValueError(f"Description cannot be longer than {Const.MAX_EVENT_DESCRIPTION} characters")
        self.description = description

    def disable_event(self) -> None:
        self.period = "0"

    def reset(self) -> None:
        self.active = False
        self.current_time = None
        self.next_event = None
        self.period = ""
        self.count = 0
        self.relay = 1
        self.pulse_duration = Const.DEFAULT_PULSE_TIME


@dataclass
class WebRelay10PlusEvent(ModuleEvent):
    MAX_RELAY: ClassVar[int] = 10

    action: WebRelay10Action = WebRelay10Action.NONE

    def reset(self) -> None:
        super().reset()
        self.action = WebRelay10Action.NONE


@dataclass
class WebSwitchPlusEvent(ModuleEvent):
    MAX_RELAY: ClassVar[int] = 2

    action: WebSwitchAction = WebSwitchAction.NONE

    def reset(self) -> None:
        super().reset()
        self.action = WebSwitchAction.NONE


@dataclass
class X301Event(ModuleEvent):
    MAX_RELAY: ClassVar[int] = Const.X301_TOTAL_RELAYS

    action: X301Action = X301Action.NONE

    def reset(self) -> None:
        super().reset()
        self.action = X301Action.NONE


class EventCollection(list):
    """Events read from a module, looked up by schedule id"""

    def get_event_by_id(self, event_id: int) -> Optional[ModuleEvent]:
        for event in self:
            if event.id == event_id:
                return event
        return None

    def exists(self, event_id: int) -> bool:
        return self.get_event_by_id(event_id) is not None

    def replace(self, current: Optional[ModuleEvent], replacement: Optional[ModuleEvent]) -> None:
        """Swap an event for one with the same id, keeping its position. Nothing happens if current is not in the collection."""
        if current is None or replacement is None:
            return
        if current.id != replacement.id or current not in self:
            return
        self[self.index(current)] = replacement
