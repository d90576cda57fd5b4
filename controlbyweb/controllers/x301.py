"""
X-301 controller.

The X-301 is a two input, two relay module with a diagnostics page and a
schedule of up to one hundred events. Its inputs count triggers and report how
long they were last held high.
"""

import xml.etree.ElementTree as ET

from ..api.models import Relay, X301Diagnostics, X301Event
from ..api.module import CbwModule, DiagnosticsMixin, EventsMixin
from ..api.parser import parse_x301_event, parse_x301_state
from ..api.states import X301State
from ..api.types import Const, RelayState
from ..exceptions import CbwUnsupportedMethodError


class X301Controller(DiagnosticsMixin, EventsMixin, CbwModule):
    MODEL = "X-301"
    TOTAL_RELAYS = X301State.TOTAL_RELAYS
    DIAGNOSTICS_TYPE = X301Diagnostics

    def parse_state(self, node: ET.Element) -> X301State:
        return parse_x301_state(node)

    def parse_event(self, node: ET.Element, event_id: int) -> X301Event:
        return parse_x301_event(node, fallback_id=event_id)

    async def set_state(self, state: X301State) -> None:
        """Send one command for each relay that differs from the module"""
        current = await self.get_state()
        for r in range(1, self.TOTAL_RELAYS + 1):
            relay = state.get_relay(r)
            if relay == current.get_relay(r):
                continue
            query = {f"relay{r}state": relay.state.code}
            if relay.state == RelayState.PULSE:
                query["pulseTime"] = relay.pulse_time
            await self.send_command("/state.xml", query, no_reply=True)

    async def _switch_relay(self, relay_num: int, state: RelayState) -> None:
        self._check_relay_number(relay_num, self.TOTAL_RELAYS)
        current = await self.get_state()
        if current.get_relay(relay_num).state == state:
            return
        await self.send_command("/state.xml", {f"relay{relay_num}state": state.code}, no_reply=True)

    async def switch_relay_on(self, relay_num: int) -> None:
        await self._switch_relay(relay_num, RelayState.ON)

    async def switch_relay_off(self, relay_num: int) -> None:
        await self._switch_relay(relay_num, RelayState.OFF)

    async def pulse_relay(self, relay_num: int, pulse_time: float = Const.DEFAULT_PULSE_TIME) -> None:
        """Does nothing for pulses shorter than the minimum, or if the relay is already pulsing for pulse_time"""
        self._check_relay_number(relay_num, self.TOTAL_RELAYS)
        if pulse_time > Const.MAX_PULSE_DURATION:
            raise ValueError(f"Pulse time cannot exceed {Const.MAX_PULSE_DURATION}, got {pulse_time}")
        if pulse_time < Const.MIN_PULSE_TIME:
            return
        target = Relay(RelayState.PULSE, pulse_time)
        current = await self.get_state()
        if current.get_relay(relay_num) == target:
            return
        await self.send_command("/state.xml", {
            f"relay{relay_num}state": RelayState.PULSE.code,
            "pulseTime": target.pulse_time,
        }, no_reply=True)

    async def set_event(self, event: X301Event) -> None:
        # event{N}.xml leaves out the weekdays and description eventSetup.srv needs
        raise CbwUnsupportedMethodError("set_event", "X-301 events cannot be written back to the module.")
