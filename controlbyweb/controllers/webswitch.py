"""
WebSwitch and WebSwitch Plus controllers.

A WebSwitch has two relays, each able to auto-reboot the equipment plugged
into it, and reports reboot statistics per relay. The Plus adds two inputs,
three temperature sensor ports and scheduled events.
"""

import xml.etree.ElementTree as ET

from ..api.models import Diagnostics, LimitedDiagnostics, Relay, WebSwitchPlusEvent
from ..api.module import CbwModule, DiagnosticsMixin, EventsMixin
from ..api.parser import parse_webswitch_plus_event, parse_webswitch_plus_state, parse_webswitch_state
from ..api.states import WebSwitchPlusState, WebSwitchState
from ..api.types import Const, RelayState


class WebSwitchController(DiagnosticsMixin, CbwModule):
    MODEL = "WebSwitch"
    TOTAL_RELAYS = WebSwitchState.TOTAL_RELAYS
    DIAGNOSTICS_TYPE = LimitedDiagnostics

    def parse_state(self, node: ET.Element) -> WebSwitchState:
        return parse_webswitch_state(node)

    async def set_state(self, state: WebSwitchState) -> None:
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
        """Does nothing if the relay is already pulsing with the same pulse time"""
        self._check_relay_number(relay_num, self.TOTAL_RELAYS)
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


class WebSwitchPlusController(EventsMixin, WebSwitchController):
    MODEL = "WebSwitch Plus"
    DIAGNOSTICS_TYPE = Diagnostics

    def parse_state(self, node: ET.Element) -> WebSwitchPlusState:
        return parse_webswitch_plus_state(node)

    def parse_event(self, node: ET.Element, event_id: int) -> WebSwitchPlusEvent:
        return parse_webswitch_plus_event(node, fallback_id=event_id)
