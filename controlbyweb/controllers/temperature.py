"""
Temperature Module controller.

Four temperature sensor ports and two relays. Sensors are registered with the
module through its index.srv form rather than state.xml.
"""

import xml.etree.ElementTree as ET

from ..api.module import CbwModule
from ..api.parser import parse_temperature_module_state
from ..api.states import TemperatureModuleState
from ..api.types import Const, RelayState


class TemperatureModuleController(CbwModule):
    MODEL = "Temperature Module"
    TOTAL_RELAYS = TemperatureModuleState.TOTAL_RELAYS
    TOTAL_SENSORS = TemperatureModuleState.TOTAL_SENSORS

    # Temperature sent for a port with no sensor attached
    NO_SENSOR_TEMP = "XX.X"

    def parse_state(self, node: ET.Element) -> TemperatureModuleState:
        return parse_temperature_module_state(node)

    async def pulse_relay(self, relay_num: int, pulse_time: float = Const.DEFAULT_PULSE_TIME) -> None:
        """Pulse times below the minimum fall back to the default pulse time"""
        self._check_relay_number(relay_num, self.TOTAL_RELAYS)
        if pulse_time > Const.MAX_PULSE_DURATION:
            raise ValueError(f"Pulse time cannot exceed {Const.MAX_PULSE_DURATION}, got {pulse_time}")
        if pulse_time < Const.MIN_PULSE_TIME:
            pulse_time = Const.DEFAULT_PULSE_TIME
        await self.send_command("/state.xml", {
            f"relay{relay_num}state": RelayState.PULSE.code,
            "pulseTime": float(pulse_time),
        }, no_reply=True)

    async def set_state(self, state: TemperatureModuleState) -> None:
        """Write units, relays and sensor ports that differ from the module, one command each"""
        current = await self.get_state()

        if state.units != current.units:
            await self.send_command("/state.xml", {"units": state.units.value}, no_reply=True)

        for r in range(1, self.TOTAL_RELAYS + 1):
            relay = state.get_relay(r)
            if relay == current.get_relay(r):
                continue
            if relay.state == RelayState.PULSE:
                await self.pulse_relay(r, relay.pulse_time)
            else:
                await self.send_command("/state.xml", {f"relay{r}state": relay.state.code}, no_reply=True)

        for s in range(1, self.TOTAL_SENSORS + 1):
            sensor = state.get_sensor(s)
            if sensor == current.get_sensor(s):
                continue
            temperature = float(sensor.temperature) if sensor.has_sensor else self.NO_SENSOR_TEMP
            await self.send_command("/index.srv", {"setTemp": temperature, str(s): "Apply"}, no_reply=True)

    async def add_or_replace_sensor_input(self, sensor_num: int) -> TemperatureModuleState:
        """Register a new sensor on a port, replacing any sensor already there, and return the resulting state"""
        if not 1 <= sensor_num <= self.TOTAL_SENSORS:
            raise ValueError(f"Sensor number must be 1-{self.TOTAL_SENSORS}, got {sensor_num}")
        state = await self.get_state()
        sensor = state.get_sensor(sensor_num)
        if sensor.has_sensor:
            sensor.remove_sensor()
        sensor.add_sensor()
        await self.set_state(state)
        return await self.get_state()
