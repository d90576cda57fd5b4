"""
Device state objects.

Each module type reports its state as a flat XML document. These classes hold
the decoded values. Mutators named set_or_override_* are used when applying
values reported by a module; they apply the same clamping and validation the
modules themselves do. reset() restores the power-on defaults.
"""

import copy
from dataclasses import dataclass, field
from typing import ClassVar, Optional, Self

from .models import Epoch, Relay, SensorInput, StandardInput, parse_mac
from .types import (
    Const,
    FanMode,
    HeatMode,
    InputState,
    RebootState,
    RelayState,
    TemperatureUnits,
    X300OperationMode,
)


def _check_number(kind: str, number: int, low: int, high: int) -> int:
    if not low <= number <= high:
        raise ValueError(f"{kind} number must be {low}-{high}, got {number}")
    return number - low


class _StateBase:
    """Common behaviour for all state dataclasses"""

    def clone(self) -> Self:
        return copy.deepcopy(self)


# ============================
# Channel banks
# ============================

class InputBankMixin:
    TOTAL_INPUTS: ClassVar[int] = 2
    inputs: list[StandardInput]

    def get_input(self, input_num: int) -> StandardInput:
        return self.inputs[_check_number("Input", input_num, 1, self.TOTAL_INPUTS)]

    def set_or_override_input(self, input_num: int, value: Optional[StandardInput]) -> None:
        self.inputs[_check_number("Input", input_num, 1, self.TOTAL_INPUTS)] = value or StandardInput()


class CountingInputBankMixin(InputBankMixin):
    """Inputs that also report how long they were last held high"""
    high_times: list[float]

    def get_high_time(self, input_num: int) -> float:
        return self.high_times[_check_number("Input", input_num, 1, self.TOTAL_INPUTS)]

    def set_or_override_high_time(self, input_num: int, seconds: float) -> None:
        self.high_times[_check_number("Input", input_num, 1, self.TOTAL_INPUTS)] = max(0.0, seconds)


class SensorBankMixin:
    TOTAL_SENSORS: ClassVar[int] = 3
    sensors: list[SensorInput]
    units: TemperatureUnits

    def get_sensor(self, sensor_num: int) -> SensorInput:
        return self.sensors[_check_number("Sensor", sensor_num, 1, self.TOTAL_SENSORS)]

    def set_or_override_sensor(self, sensor_num: int, sensor: Optional[SensorInput]) -> None:
        self.sensors[_check_number("Sensor", sensor_num, 1, self.TOTAL_SENSORS)] = sensor or SensorInput()

    def set_or_override_units(self, units: TemperatureUnits) -> None:
        self.units = units


class ModuleInfoMixin:
    """External variables, serial number and clock reported by WebRelay-10 and WebSwitch modules"""
    TOTAL_EXT_VARS: ClassVar[int] = 5
    ext_vars: list[float]
    serial: Optional[str]
    time: Epoch

    def get_ext_var(self, var_id: int) -> float:
        return self.ext_vars[_check_number("External variable", var_id, 0, self.TOTAL_EXT_VARS - 1)]

    def set_or_override_ext_var(self, var_id: int, value: float) -> None:
        self.ext_vars[_check_number("External variable", var_id, 0, self.TOTAL_EXT_VARS - 1)] = value

    def set_or_override_serial(self, serial: Optional[str]) -> None:
        """Raises ValueError if serial is not a MAC address"""
        self.serial = parse_mac(serial) if serial else None

    def set_or_override_time(self, time: Epoch | int | None) -> None:
        if time is None:
            self.time = Epoch()
        elif isinstance(time, Epoch):
            self.time = time
        elif time >= 0:
            self.time = Epoch(time)


@dataclass
class RelayBankState(_StateBase):
    TOTAL_RELAYS: ClassVar[int] = 1

    relays: list[Relay] = field(default_factory=list)

    def __post_init__(self):
        if not self.relays:
            self.relays = [Relay() for _ in range(self.TOTAL_RELAYS)]
        if len(self.relays) != self.TOTAL_RELAYS:
            raise ValueError(f"{type(self).__name__} needs {self.TOTAL_RELAYS} relays, got {len(self.relays)}")

    def get_relay(self, relay_num: int) -> Relay:
        return self.relays[_check_number("Relay", relay_num, 1, self.TOTAL_RELAYS)]

    def set_or_override_relay(self, relay_num: int, relay: Optional[Relay]) -> None:
        self.relays[_check_number("Relay", relay_num, 1, self.TOTAL_RELAYS)] = relay or Relay()

    def reset(self) -> None:
        self.relays = [Relay() for _ in range(self.TOTAL_RELAYS)]


# ============================
# WebRelay
# ============================

@dataclass
class WebRelayState(_StateBase):
    relay: Relay = field(default_factory=Relay)
    input_state: InputState = InputState.OFF
    reboot_state: RebootState = RebootState.PINGING
    total_reboots: int = 0

    def __post_init__(self):
        self.set_or_override_total_reboots(self.total_reboots)

    def set_or_override_relay(self, relay: Optional[Relay]) -> None:
        self.relay = relay or Relay()

    def set_or_override_relay_state(self, state: RelayState) -> None:
        self.relay.state = state

    def set_or_override_total_reboots(self, count: int) -> None:
        self.total_reboots = max(0, count)

    def reset(self) -> None:
        self.relay = Relay()
        self.input_state = InputState.OFF
        self.reboot_state = RebootState.PINGING
        self.total_reboots = 0


@dataclass
class WebRelayQuadState(RelayBankState):
    TOTAL_RELAYS: ClassVar[int] = 4


# ============================
# WebRelay-10
# ============================

@dataclass
class WebRelay10State(ModuleInfoMixin, RelayBankState):
    TOTAL_RELAYS: ClassVar[int] = 10

    ext_vars: list[float] = field(default_factory=lambda: [0.0] * ModuleInfoMixin.TOTAL_EXT_VARS)
    serial: Optional[str] = None
    time: Epoch = field(default_factory=Epoch)

    def reset(self) -> None:
        super().reset()
        self.ext_vars = [0.0] * self.TOTAL_EXT_VARS
        self.serial = None
        self.time = Epoch()


@dataclass
class WebRelay10PlusState(CountingInputBankMixin, SensorBankMixin, WebRelay10State):
    inputs: list[StandardInput] = field(default_factory=lambda: [StandardInput() for _ in range(InputBankMixin.TOTAL_INPUTS)])
    high_times: list[float] = field(default_factory=lambda: [0.0] * InputBankMixin.TOTAL_INPUTS)
    units: TemperatureUnits = TemperatureUnits.FAHRENHEIT
    sensors: list[SensorInput] = field(default_factory=lambda: [SensorInput() for _ in range(SensorBankMixin.TOTAL_SENSORS)])

    def reset(self) -> None:
        super().reset()
        self.inputs = [StandardInput() for _ in range(self.TOTAL_INPUTS)]
        self.high_times = [0.0] * self.TOTAL_INPUTS
        self.units = TemperatureUnits.FAHRENHEIT
        self.sensors = [SensorInput() for _ in range(self.TOTAL_SENSORS)]


# ============================
# WebSwitch
# ============================

@dataclass
class WebSwitchState(ModuleInfoMixin, RelayBankState):
    TOTAL_RELAYS: ClassVar[int] = 2

    reboot_states: list[RebootState] = field(default_factory=lambda: [RebootState.PINGING] * 2)
    failures: list[int] = field(default_factory=lambda: [0] * 2)
    reboot_attempts: list[int] = field(default_factory=lambda: [0] * 2)
    total_reboots: list[int] = field(default_factory=lambda: [0] * 2)
    ext_vars: list[float] = field(default_factory=lambda: [0.0] * ModuleInfoMixin.TOTAL_EXT_VARS)
    serial: Optional[str] = None
    time: Epoch = field(default_factory=Epoch)

    def get_reboot_state(self, relay_num: int) -> RebootState:
        return self.reboot_states[_check_number("Relay", relay_num, 1, self.TOTAL_RELAYS)]

    def set_or_override_reboot_state(self, relay_num: int, state: RebootState) -> None:
        self.reboot_states[_check_number("Relay", relay_num, 1, self.TOTAL_RELAYS)] = state

    def set_or_override_failures(self, relay_num: int, count: int) -> None:
        self.failures[_check_number("Relay", relay_num, 1, self.TOTAL_RELAYS)] = max(0, count)

    def set_or_override_reboot_attempts(self, relay_num: int, count: int) -> None:
        self.reboot_attempts[_check_number("Relay", relay_num, 1, self.TOTAL_RELAYS)] = max(0, count)

    def set_or_override_total_reboots(self, relay_num: int, count: int) -> None:
        self.total_reboots[_check_number("Relay", relay_num, 1, self.TOTAL_RELAYS)] = max(0, count)

    def reset(self) -> None:
        super().reset()
        self.reboot_states = [RebootState.PINGING] * self.TOTAL_RELAYS
        self.failures = [0] * self.TOTAL_RELAYS
        self.reboot_attempts = [0] * self.TOTAL_RELAYS
        self.total_reboots = [0] * self.TOTAL_RELAYS
        self.ext_vars = [0.0] * self.TOTAL_EXT_VARS
        self.serial = None
        self.time = Epoch()


@dataclass
class WebSwitchPlusState(InputBankMixin, SensorBankMixin, WebSwitchState):
    inputs: list[StandardInput] = field(default_factory=lambda: [StandardInput() for _ in range(InputBankMixin.TOTAL_INPUTS)])
    units: TemperatureUnits = TemperatureUnits.FAHRENHEIT
    sensors: list[SensorInput] = field(default_factory=lambda: [SensorInput() for _ in range(SensorBankMixin.TOTAL_SENSORS)])

    def reset(self) -> None:
        super().reset()
        self.inputs = [StandardInput() for _ in range(self.TOTAL_INPUTS)]
        self.units = TemperatureUnits.FAHRENHEIT
        self.sensors = [SensorInput() for _ in range(self.TOTAL_SENSORS)]


# ============================
# X-300
# ============================

@dataclass
class X300TempMonitorState(SensorBankMixin, RelayBankState):
    MODE: ClassVar[X300OperationMode] = X300OperationMode.TEMPERATURE_MONITOR
    TOTAL_RELAYS: ClassVar[int] = Const.X300_TOTAL_RELAYS
    TOTAL_SENSORS: ClassVar[int] = Const.X300_TOTAL_INPUTS

    units: TemperatureUnits = TemperatureUnits.FAHRENHEIT
    sensors: list[SensorInput] = field(default_factory=lambda: [SensorInput() for _ in range(Const.X300_TOTAL_INPUTS)])

    def reset(self) -> None:
        super().reset()
        self.units = TemperatureUnits.FAHRENHEIT
        self.sensors = [SensorInput() for _ in range(self.TOTAL_SENSORS)]


@dataclass
class X300ThermostatState(_StateBase):
    """
    Thermostat readings and settings of an X-300 in thermostat mode.

    Temperatures below zero are treated as "no reading" and ignored. The set
    temperature can only be changed within the module's settable range once
    that range is known.
    """
    MODE: ClassVar[X300OperationMode] = X300OperationMode.THERMOSTAT

    units: TemperatureUnits = TemperatureUnits.FAHRENHEIT
    indoor_temperature: float = Const.MIN_TEMP_ABSOLUTE
    outdoor_temperature: float = Const.MIN_TEMP_ABSOLUTE
    set_temperature: float = Const.MIN_TEMP_ABSOLUTE
    heat: RelayState = RelayState.OFF
    cool: RelayState = RelayState.OFF
    fan: RelayState = RelayState.OFF
    min_24h_temperature: float = 0.0
    max_24h_temperature: float = 0.0
    min_yesterday_temperature: float = 0.0
    max_yesterday_temperature: float = 0.0
    heat_mode: HeatMode = HeatMode.OFF
    fan_mode: FanMode = FanMode.AUTO
    filter_change_days: int = Const.DEFAULT_FILTER_CHANGE_DAYS
    min_set_temperature: float = 0.0
    max_set_temperature: float = 0.0
    time: Epoch = field(default_factory=Epoch)
    serial: Optional[str] = None
    holding: bool = False
    filter_reset_requested: bool = False

    @staticmethod
    def _reading(current: float, value: float) -> float:
        return value if value >= Const.MIN_TEMP_ABSOLUTE else current

    def set_or_override_indoor_temperature(self, temp: float) -> None:
        self.indoor_temperature = self._reading(self.indoor_temperature, temp)

    def set_or_override_outdoor_temperature(self, temp: float) -> None:
        self.outdoor_temperature = self._reading(self.outdoor_temperature, temp)

    def set_or_override_set_temperature(self, temp: float) -> None:
        self.set_temperature = self._reading(self.set_temperature, temp)

    def set_or_override_min_24h_temperature(self, temp: float) -> None:
        self.min_24h_temperature = self._reading(self.min_24h_temperature, temp)

    def set_or_override_max_24h_temperature(self, temp: float) -> None:
        self.max_24h_temperature = self._reading(self.max_24h_temperature, temp)

    def set_or_override_min_yesterday_temperature(self, temp: float) -> None:
        self.min_yesterday_temperature = self._reading(self.min_yesterday_temperature, temp)

    def set_or_override_max_yesterday_temperature(self, temp: float) -> None:
        self.max_yesterday_temperature = self._reading(self.max_yesterday_temperature, temp)

    def set_or_override_min_set_temperature(self, temp: float) -> None:
        self.min_set_temperature = self._reading(self.min_set_temperature, temp)

    def set_or_override_max_set_temperature(self, temp: float) -> None:
        self.max_set_temperature = self._reading(self.max_set_temperature, temp)

    def set_or_override_filter_change_days(self, days: int) -> None:
        if days >= 0:
            self.filter_change_days = days

    def set_or_override_time(self, seconds: int) -> None:
        if seconds >= 0:
            self.time = Epoch(seconds)

    def set_or_override_serial(self, serial: Optional[str]) -> None:
        self.serial = parse_mac(serial) if serial else None

    def change_set_temperature(self, temp: float) -> None:
        """Change the target temperature, checking it against the settable range"""
        if temp < Const.MIN_TEMP_ABSOLUTE:
            return
        if self.max_set_temperature > 0 and not self.min_set_temperature <= temp <= self.max_set_temperature:
            raise ValueError(f"Set temperature must be within {self.min_set_temperature} and {self.max_set_temperature}, got {temp}")
        self.set_temperature = temp

    def hold_temperature(self) -> None:
        self.holding = True

    def release_hold(self) -> None:
        self.holding = False

    def request_filter_reset(self, requesting: bool = True) -> None:
        self.filter_reset_requested = requesting

    def reset(self) -> None:
        for name, value in X300ThermostatState().__dict__.items():
            setattr(self, name, value)


# ============================
# X-301
# ============================

@dataclass
class X301State(CountingInputBankMixin, ModuleInfoMixin, RelayBankState):
    TOTAL_RELAYS: ClassVar[int] = Const.X301_TOTAL_RELAYS
    TOTAL_INPUTS: ClassVar[int] = Const.X301_TOTAL_INPUTS

    inputs: list[StandardInput] = field(default_factory=lambda: [StandardInput() for _ in range(Const.X301_TOTAL_INPUTS)])
    high_times: list[float] = field(default_factory=lambda: [0.0] * Const.X301_TOTAL_INPUTS)
    ext_vars: list[float] = field(default_factory=lambda: [0.0] * ModuleInfoMixin.TOTAL_EXT_VARS)
    serial: Optional[str] = None
    time: Epoch = field(default_factory=Epoch)

    def reset(self) -> None:
        super().reset()
        self.inputs = [StandardInput() for _ in range(self.TOTAL_INPUTS)]
        self.high_times = [0.0] * self.TOTAL_INPUTS
        self.ext_vars = [0.0] * self.TOTAL_EXT_VARS
        self.serial = None
        self.time = Epoch()


# ============================
# Temperature Module
# ============================

@dataclass
class TemperatureModuleState(SensorBankMixin, RelayBankState):
    TOTAL_RELAYS: ClassVar[int] = Const.TEMPERATURE_MODULE_TOTAL_RELAYS
    TOTAL_SENSORS: ClassVar[int] = Const.TEMPERATURE_MODULE_TOTAL_SENSORS

    units: TemperatureUnits = TemperatureUnits.FAHRENHEIT
    sensors: list[SensorInput] = field(default_factory=lambda: [SensorInput() for _ in range(Const.TEMPERATURE_MODULE_TOTAL_SENSORS)])

    def reset(self) -> None:
        super().reset()
        self.units = TemperatureUnits.FAHRENHEIT
        self.sensors = [SensorInput() for _ in range(self.TOTAL_SENSORS)]
