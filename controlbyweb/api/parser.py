"""
XML field mapping for ControlByWeb modules.

Every parse_* function walks a fixed list of child tags of a state.xml,
diagnostics.xml or event{N}.xml root node and copies what it finds into a
state object. Missing or unparsable fields are skipped, leaving the default.
"""

import re
import xml.etree.ElementTree as ET
from datetime import datetime
from typing import Optional, Type, TypeVar

from .models import (
    Diagnostics,
    ModuleEvent,
    Relay,
    SensorInput,
    StandardInput,
    WebRelay10PlusEvent,
    WebSwitchPlusEvent,
    X300Diagnostics,
    X301Event,
    parse_mac,
)
from .states import (
    TemperatureModuleState,
    WebRelay10PlusState,
    WebRelay10State,
    WebRelayQuadState,
    WebRelayState,
    WebSwitchPlusState,
    WebSwitchState,
    X300TempMonitorState,
    X300ThermostatState,
    X301State,
)
from .types import (
    Const,
    FanMode,
    HeatMode,
    InputState,
    PowerUpFlag,
    RebootState,
    RelayState,
    TemperatureUnits,
    WebRelay10Action,
    WebSwitchAction,
    X301Action,
)

D = TypeVar("D", bound=Diagnostics)

_EVENT_TAG = re.compile(r"event(\d+)$")
_DATETIME_FORMATS = (
    "%m/%d/%Y %H:%M:%S",
    "%m/%d/%Y %I:%M:%S %p",
    "%Y-%m-%d %H:%M:%S",
    "%m/%d/%Y",
)


# ============================
# Primitive helpers
# ============================

def child_text(node: Optional[ET.Element], name: str) -> Optional[str]:
    """Stripped text of a named child, or None when absent or empty"""
    if node is None:
        return None
    child = node.find(name)
    if child is None or child.text is None:
        return None
    text = child.text.strip()
    return text or None


def try_int(text: Optional[str]) -> Optional[int]:
    if text is None:
        return None
    try:
        return int(text)
    except ValueError:
        return None


def try_float(text: Optional[str]) -> Optional[float]:
    if text is None:
        return None
    try:
        return float(text)
    except ValueError:
        return None


def try_mac(text: Optional[str]) -> Optional[str]:
    if text is None:
        return None
    try:
        return parse_mac(text)
    except ValueError:
        return None


def try_datetime(text: Optional[str]) -> Optional[datetime]:
    if text is None:
        return None
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        pass
    for fmt in _DATETIME_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    return None


def try_relay_state(text: Optional[str], auto_reboot_enabled: bool = False) -> Optional[RelayState]:
    code = try_int(text)
    if code is None:
        return None
    try:
        return RelayState.from_code(code, auto_reboot_enabled)
    except ValueError:
        return None


def try_input_state(text: Optional[str]) -> Optional[InputState]:
    code = try_int(text)
    if code is None:
        return None
    try:
        return InputState(code)
    except ValueError:
        return None


def try_reboot_state(text: Optional[str]) -> Optional[RebootState]:
    code = try_int(text)
    if code is None:
        return None
    try:
        return RebootState(code)
    except ValueError:
        return None


def try_sensor(text: Optional[str]) -> Optional[SensorInput]:
    """A sensor tag that is present but holds no number (e.g. "x.x") means no sensor is attached"""
    if text is None:
        return None
    if text.lower() == Const.NO_READING:
        return SensorInput()
    temperature = try_float(text)
    return SensorInput() if temperature is None else SensorInput.with_temperature(temperature)


# ============================
# Shared field groups
# ============================

def _parse_relay_bank(node: ET.Element, state, tag: str = "relay{}state") -> None:
    for r in range(1, state.TOTAL_RELAYS + 1):
        relay_state = try_relay_state(child_text(node, tag.format(r)))
        if relay_state is not None:
            state.set_or_override_relay(r, Relay(relay_state))


def _parse_module_info(node: ET.Element, state) -> None:
    for e in range(state.TOTAL_EXT_VARS):
        value = try_float(child_text(node, f"extvar{e}"))
        if value is not None:
            state.set_or_override_ext_var(e, value)

    serial = try_mac(child_text(node, "serialNumber"))
    if serial is not None:
        state.set_or_override_serial(serial)

    seconds = try_int(child_text(node, "time"))
    if seconds is not None:
        state.set_or_override_time(seconds)


def _parse_units(node: ET.Element, state) -> None:
    units = child_text(node, "units")
    if units is not None:
        state.set_or_override_units(TemperatureUnits.from_string(units))


def _parse_sensor_bank(node: ET.Element, state) -> None:
    for s in range(1, state.TOTAL_SENSORS + 1):
        sensor = try_sensor(child_text(node, f"sensor{s}temp"))
        if sensor is not None:
            state.set_or_override_sensor(s, sensor)


def _parse_counting_inputs(node: ET.Element, state) -> None:
    """A trigger count is kept even when the input state itself is missing"""
    for i in range(1, state.TOTAL_INPUTS + 1):
        input_state = try_input_state(child_text(node, f"input{i}state"))
        count = try_int(child_text(node, f"count{i}"))
        if input_state is not None or count is not None:
            if input_state is None:
                input_state = InputState.OFF
            state.set_or_override_input(i, StandardInput(input_state, max(0, count or 0)))

        high_time = try_float(child_text(node, f"hightime{i}"))
        if high_time is not None:
            state.set_or_override_high_time(i, high_time)


# ============================
# State documents
# ============================

def parse_webrelay_state(node: ET.Element, auto_reboot_enabled: bool = False) -> WebRelayState:
    state = WebRelayState()

    relay_state = try_relay_state(child_text(node, "relaystate"), auto_reboot_enabled)
    if relay_state is not None:
        state.set_or_override_relay_state(relay_state)

    input_state = try_input_state(child_text(node, "inputstate"))
    if input_state is not None:
        state.input_state = input_state

    reboot_state = try_reboot_state(child_text(node, "rebootstate"))
    if reboot_state is not None:
        state.reboot_state = reboot_state

    total = try_int(child_text(node, "totalreboots"))
    if total is not None:
        state.set_or_override_total_reboots(total)
    return state


def parse_webrelay_quad_state(node: ET.Element) -> WebRelayQuadState:
    state = WebRelayQuadState()
    _parse_relay_bank(node, state)
    return state


def parse_webrelay10_state(node: ET.Element) -> WebRelay10State:
    state = WebRelay10State()
    _parse_relay_bank(node, state)
    _parse_module_info(node, state)
    return state


def parse_webrelay10_plus_state(node: ET.Element) -> WebRelay10PlusState:
    state = WebRelay10PlusState()
    _parse_relay_bank(node, state)
    _parse_module_info(node, state)
    _parse_counting_inputs(node, state)
    _parse_units(node, state)
    _parse_sensor_bank(node, state)
    return state


def _fill_webswitch_state(node: ET.Element, state: WebSwitchState) -> None:
    for r in range(1, state.TOTAL_RELAYS + 1):
        relay_state = try_relay_state(child_text(node, f"relay{r}state"))
        if relay_state is not None:
            state.set_or_override_relay(r, Relay(relay_state))

        reboot_state = try_reboot_state(child_text(node, f"reboot{r}state"))
        if reboot_state is not None:
            state.set_or_override_reboot_state(r, reboot_state)

        failures = try_int(child_text(node, f"failures{r}"))
        if failures is not None:
            state.set_or_override_failures(r, failures)

        attempts = try_int(child_text(node, f"rbtAttempts{r}"))
        if attempts is not None:
            state.set_or_override_reboot_attempts(r, attempts)

        total = try_int(child_text(node, f"totalreboots{r}"))
        if total is not None:
            state.set_or_override_total_reboots(r, total)

    _parse_module_info(node, state)


def parse_webswitch_state(node: ET.Element) -> WebSwitchState:
    state = WebSwitchState()
    _fill_webswitch_state(node, state)
    return state


def parse_webswitch_plus_state(node: ET.Element) -> WebSwitchPlusState:
    state = WebSwitchPlusState()
    _fill_webswitch_state(node, state)

    for i in range(1, state.TOTAL_INPUTS + 1):
        input_state = try_input_state(child_text(node, f"input{i}state"))
        if input_state is not None:
            state.set_or_override_input(i, StandardInput(input_state))

    _parse_units(node, state)
    _parse_sensor_bank(node, state)
    return state


def parse_x300_temp_monitor_state(node: ET.Element) -> X300TempMonitorState:
    state = X300TempMonitorState()
    _parse_units(node, state)
    _parse_sensor_bank(node, state)
    _parse_relay_bank(node, state)
    return state


def parse_x300_thermostat_state(node: ET.Element) -> X300ThermostatState:
    state = X300ThermostatState()

    units = child_text(node, "units")
    if units is not None:
        state.units = TemperatureUnits.from_string(units)

    temperatures = (
        ("indoorTemp", state.set_or_override_indoor_temperature),
        ("outdoorTemp", state.set_or_override_outdoor_temperature),
        ("setTemp", state.set_or_override_set_temperature),
        ("minTemp", state.set_or_override_min_24h_temperature),
        ("maxTemp", state.set_or_override_max_24h_temperature),
        ("minTempY", state.set_or_override_min_yesterday_temperature),
        ("maxTempY", state.set_or_override_max_yesterday_temperature),
        ("minSTemp", state.set_or_override_min_set_temperature),
        ("maxSTemp", state.set_or_override_max_set_temperature),
    )
    for tag, setter in temperatures:
        value = try_float(child_text(node, tag))
        if value is not None:
            setter(value)

    for tag in ("heat", "cool", "fan"):
        relay_state = try_relay_state(child_text(node, tag))
        if relay_state is not None:
            setattr(state, tag, relay_state)

    heat_mode = try_int(child_text(node, "heatMode"))
    if heat_mode is not None:
        try:
            state.heat_mode = HeatMode(heat_mode)
        except ValueError:
            pass

    fan_mode = try_int(child_text(node, "fanMode"))
    if fan_mode is not None:
        try:
            state.fan_mode = FanMode(fan_mode)
        except ValueError:
            pass

    days = try_int(child_text(node, "filtChng"))
    if days is not None:
        state.set_or_override_filter_change_days(days)

    seconds = try_int(child_text(node, "time"))
    if seconds is not None:
        state.set_or_override_time(seconds)

    serial = try_mac(child_text(node, "serialNumber"))
    if serial is not None:
        state.set_or_override_serial(serial)
    return state


def parse_x301_state(node: ET.Element) -> X301State:
    state = X301State()
    _parse_counting_inputs(node, state)
    _parse_relay_bank(node, state)
    _parse_module_info(node, state)
    return state


def parse_temperature_module_state(node: ET.Element) -> TemperatureModuleState:
    state = TemperatureModuleState()
    _parse_units(node, state)
    _parse_sensor_bank(node, state)
    _parse_relay_bank(node, state)
    return state


# ============================
# Diagnostics
# ============================

def parse_diagnostics(node: ET.Element, diagnostics_type: Type[D] = Diagnostics) -> D:
    """Modules without a memory power-up flag ignore the memoryPowerUpFlag tag"""
    diagnostics = diagnostics_type()

    memory_flag = try_int(child_text(node, "memoryPowerUpFlag"))
    if memory_flag is not None and diagnostics.memory_power_up_flag_supported:
        diagnostics.set_memory_power_up_flag(PowerUpFlag.from_code(memory_flag))

    device_flag = try_int(child_text(node, "devicePowerUpFlag"))
    if device_flag is not None:
        diagnostics.set_device_power_up_flag(PowerUpFlag.from_code(device_flag))

    count = try_int(child_text(node, "powerLossCounter"))
    if count is not None:
        diagnostics.set_power_loss_count(count)

    if isinstance(diagnostics, X300Diagnostics):
        for tag, setter in (("internalTemp", diagnostics.set_internal_temp),
                            ("vin", diagnostics.set_voltage_in),
                            ("fiveVolt", diagnostics.set_internal_voltage)):
            value = try_float(child_text(node, tag))
            if value is not None:
                setter(value)
    return diagnostics


# ============================
# Events
# ============================

def event_id_from_tag(tag: str) -> Optional[int]:
    match = _EVENT_TAG.search(tag)
    return int(match.group(1)) if match else None


def _fill_event(node: ET.Element, event: ModuleEvent, fallback_id: Optional[int]) -> None:
    event_id = event_id_from_tag(node.tag)
    if event_id is None:
        event_id = fallback_id
    if event_id is not None and Const.MIN_EVENT_ID <= event_id <= Const.MAX_EVENT_ID:
        event.set_or_override_id(event_id)

    if child_text(node, "active") == "yes":
        event.active = True

    current_time = try_datetime(child_text(node, "currentTime"))
    if current_time is not None:
        event.current_time = current_time

    next_event = try_datetime(child_text(node, "nextEvent"))
    if next_event is not None:
        event.next_event = next_event

    period = child_text(node, "period")
    if period is not None:
        event.period = period

    count = try_int(child_text(node, "count"))
    if count is not None:
        event.set_or_override_count(count)

    relay = try_int(child_text(node, "relay"))
    if relay is not None and 1 <= relay <= event.MAX_RELAY:
        event.set_or_override_relay(relay)

    duration = try_float(child_text(node, "pulseDuration"))
    if duration is not None:
        event.set_or_override_pulse_duration(duration)

    description = child_text(node, "description")
    if description is not None:
        event.set_or_override_description(description[:Const.MAX_EVENT_DESCRIPTION])


def parse_webrelay10_plus_event(node: ET.Element, fallback_id: Optional[int] = None) -> WebRelay10PlusEvent:
    event = WebRelay10PlusEvent()
    _fill_event(node, event, fallback_id)
    action = child_text(node, "action")
    if action is not None:
        event.action = WebRelay10Action.from_string(action)
    return event


def parse_webswitch_plus_event(node: ET.Element, fallback_id: Optional[int] = None) -> WebSwitchPlusEvent:
    event = WebSwitchPlusEvent()
    _fill_event(node, event, fallback_id)
    action = child_text(node, "action")
    if action is not None:
        event.action = WebSwitchAction.from_string(action)
    return event


def parse_x301_event(node: ET.Element, fallback_id: Optional[int] = None) -> X301Event:
    event = X301Event()
    _fill_event(node, event, fallback_id)
    action = child_text(node, "action")
    if action is not None:
        event.action = X301Action.from_string(action)
    return event
