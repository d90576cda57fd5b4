"""
X-300 controller.

The X-300 runs either as a thermostat (heat, cool and fan relays driven by its
own set point) or as an eight sensor temperature monitor with three freely
controllable relays. The mode is configured on the module itself, so the
controller has to be told which one to expect; operations that belong to the
other mode raise CbwModeError.
"""

import xml.etree.ElementTree as ET
from typing import Any, Optional

from ..api.models import Relay, X300Diagnostics
from ..api.module import CbwModule, DiagnosticsMixin
from ..api.parser import parse_x300_temp_monitor_state, parse_x300_thermostat_state
from ..api.states import X300TempMonitorState, X300ThermostatState
from ..api.types import Const, FanMode, HeatMode, RelayState, X300OperationMode
from ..exceptions import CbwModeError


class X300Controller(DiagnosticsMixin, CbwModule):
    MODEL = "X-300"
    TOTAL_RELAYS = Const.X300_TOTAL_RELAYS
    DIAGNOSTICS_TYPE = X300Diagnostics

    # Query values for momentary thermostat commands
    HOLD_TOGGLE = 1
    FILTER_RESET = 1

    def __init__(self, *args, mode: X300OperationMode = X300OperationMode.TEMPERATURE_MONITOR, **kwargs):
        super().__init__(*args, **kwargs)
        self._mode = X300OperationMode(mode)

    @property
    def mode(self) -> X300OperationMode:
        return self._mode

    async def change_mode(self, mode: X300OperationMode) -> None:
        """Tell the controller which mode the module is configured for"""
        async with self._poll_lock:
            self._mode = X300OperationMode(mode)
        self.logger.info(f"{self.name}: mode changed to {self._mode.name}")

    def _require_mode(self, mode: X300OperationMode, action: str) -> None:
        if self._mode != mode:
            raise CbwModeError(f"Must be in {mode.name.lower().replace('_', ' ')} mode to {action}")

    # ============================
    # State
    # ============================

    def parse_state(self, node: ET.Element) -> X300ThermostatState | X300TempMonitorState:
        match self._mode:
            case X300OperationMode.THERMOSTAT:
                return parse_x300_thermostat_state(node)
            case X300OperationMode.TEMPERATURE_MONITOR:
                return parse_x300_temp_monitor_state(node)
        raise CbwModeError(f"Unknown operation mode {self._mode}")

    async def get_thermostat_state(self) -> X300ThermostatState:
        self._require_mode(X300OperationMode.THERMOSTAT, "read thermostat state")
        return parse_x300_thermostat_state(await self.get_state_node())

    async def get_temp_monitor_state(self) -> X300TempMonitorState:
        self._require_mode(X300OperationMode.TEMPERATURE_MONITOR, "read temperature monitor state")
        return parse_x300_temp_monitor_state(await self.get_state_node())

    async def set_state(self, state: X300ThermostatState | X300TempMonitorState) -> None:
        if isinstance(state, X300ThermostatState):
            await self.set_thermostat(state)
            return
        self._require_mode(X300OperationMode.TEMPERATURE_MONITOR, "set relays")
        await self._set_relay_bank(state, self.TOTAL_RELAYS)

    # ============================
    # Thermostat mode
    # ============================

    async def _thermostat_command(self, action: str, query: dict[str, Any]) -> None:
        self._require_mode(X300OperationMode.THERMOSTAT, action)
        await self.send_command("/state.xml", query, no_reply=True)

    async def set_temperature(self, temperature: float) -> None:
        await self._thermostat_command("set temperature", {"setTemp": float(temperature)})

    async def set_heat_mode(self, mode: HeatMode) -> None:
        await self._thermostat_command("set heat mode", {"heatMode": HeatMode(mode).value})

    async def hold(self) -> None:
        await self._thermostat_command("hold temperature", {"hold": self.HOLD_TOGGLE})

    async def change_fan_mode(self, mode: FanMode) -> None:
        await self._thermostat_command("change fan mode", {"fanMode": FanMode(mode).value})

    async def reset_filter_counter(self) -> None:
        await self._thermostat_command("reset filter", {"rstFilt": self.FILTER_RESET})

    async def set_thermostat(self, state: X300ThermostatState) -> None:
        """Write set point, heat mode, fan mode and the hold and filter reset requests in one command"""
        query: dict[str, Any] = {
            "setTemp": float(state.set_temperature),
            "heatMode": state.heat_mode.value,
        }
        if state.holding:
            query["hold"] = self.HOLD_TOGGLE
        query["fanMode"] = state.fan_mode.value
        if state.filter_reset_requested:
            query["rstFilt"] = self.FILTER_RESET
        await self._thermostat_command("set thermostat", query)

    # ============================
    # Temperature monitor mode
    # ============================

    async def pulse_relay(self, relay_num: int, pulse_time: float = Const.DEFAULT_PULSE_TIME) -> None:
        """Pulse times below the minimum fall back to the default pulse time"""
        self._check_relay_number(relay_num, self.TOTAL_RELAYS)
        if pulse_time > Const.MAX_PULSE_DURATION:
            raise ValueError(f"Pulse time cannot exceed {Const.MAX_PULSE_DURATION}, got {pulse_time}")
        self._require_mode(X300OperationMode.TEMPERATURE_MONITOR, "pulse relay")
        if pulse_time < Const.MIN_PULSE_TIME:
            pulse_time = Const.DEFAULT_PULSE_TIME
        await self.send_command("/state.xml", {
            f"relay{relay_num}state": RelayState.PULSE.code,
            "pulseTime": float(pulse_time),
        }, no_reply=True)

    async def set_relay(self, relay_num: int, relay: Optional[Relay]) -> None:
        """Set one relay. None switches it off."""
        self._check_relay_number(relay_num, self.TOTAL_RELAYS)
        self._require_mode(X300OperationMode.TEMPERATURE_MONITOR, "set relay")
        relay = relay or Relay(RelayState.OFF)
        query: dict[str, Any] = {f"relay{relay_num}state": relay.state.code}
        if relay.state == RelayState.PULSE:
            query[f"pulseTime{relay_num}"] = relay.pulse_time
        await self.send_command("/state.xml", query, no_reply=True)
