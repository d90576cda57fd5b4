"""
WebRelay-10 and WebRelay-10 Plus controllers.

Both have ten relays, five external variables and a diagnostics page, and
publish their schedule as event0.xml - event99.xml. The Plus adds two counting
inputs and three temperature sensor ports.
"""

import xml.etree.ElementTree as ET

from ..api.models import Diagnostics, LimitedDiagnostics, WebRelay10PlusEvent
from ..api.module import CbwModule, DiagnosticsMixin, EventsMixin
from ..api.parser import parse_webrelay10_plus_event, parse_webrelay10_plus_state, parse_webrelay10_state
from ..api.states import WebRelay10PlusState, WebRelay10State
from ..api.types import Const, RelayState


class WebRelay10Controller(DiagnosticsMixin, EventsMixin, CbwModule):
    MODEL = "WebRelay-10"
    TOTAL_RELAYS = WebRelay10State.TOTAL_RELAYS
    DIAGNOSTICS_TYPE = LimitedDiagnostics

    def parse_state(self, node: ET.Element) -> WebRelay10State:
        return parse_webrelay10_state(node)

    def parse_event(self, node: ET.Element, event_id: int) -> WebRelay10PlusEvent:
        return parse_webrelay10_plus_event(node, fallback_id=event_id)

    async def pulse_relay(self, relay_num: int, pulse_time: float = Const.DEFAULT_PULSE_TIME) -> None:
        await self._pulse_relay(relay_num, pulse_time, self.TOTAL_RELAYS)

    async def set_state(self, state: WebRelay10State) -> None:
        await self._set_relay_bank(state, self.TOTAL_RELAYS)

    async def change_relay_state(self, relay_num: int, state: RelayState) -> WebRelay10State:
        return await self._change_relay_state(relay_num, state, self.TOTAL_RELAYS)

    async def switch_relay_on(self, relay_num: int) -> WebRelay10State:
        return await self.change_relay_state(relay_num, RelayState.ON)

    async def switch_relay_off(self, relay_num: int) -> WebRelay10State:
        return await self.change_relay_state(relay_num, RelayState.OFF)


class WebRelay10PlusController(WebRelay10Controller):
    MODEL = "WebRelay-10 Plus"
    DIAGNOSTICS_TYPE = Diagnostics

    def parse_state(self, node: ET.Element) -> WebRelay10PlusState:
        return parse_webrelay10_plus_state(node)
