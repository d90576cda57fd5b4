"""
WebRelay and WebRelay-Quad controllers.

The WebRelay is a single relay module with one input and an optional
auto-reboot feature (the relay is power-cycled when a monitored host stops
answering pings). The WebRelay-Quad has four plain relays.
"""

import xml.etree.ElementTree as ET
from typing import Any

from ..api.module import CbwModule
from ..api.parser import parse_webrelay_quad_state, parse_webrelay_state
from ..api.states import WebRelayQuadState, WebRelayState
from ..api.types import Const, RelayState


class WebRelayController(CbwModule):
    """Controller for a single relay WebRelay module"""

    MODEL = "WebRelay"

    def __init__(self, *args, auto_reboot_enabled: bool = False, **kwargs):
        super().__init__(*args, **kwargs)
        self.auto_reboot_enabled = auto_reboot_enabled

    def parse_state(self, node: ET.Element) -> WebRelayState:
        return parse_webrelay_state(node, self.auto_reboot_enabled)

    async def pulse_relay(self, pulse_time: float = Const.DEFAULT_PULSE_TIME) -> None:
        """Pulses shorter than the minimum pulse time are ignored"""
        if pulse_time < Const.MIN_PULSE_TIME:
            return
        if pulse_time > Const.MAX_PULSE_DURATION:
            raise ValueError(f"Pulse time cannot exceed {Const.MAX_PULSE_DURATION}, got {pulse_time}")
        await self.send_command("/state.xml", {
            "relaystate": RelayState.PULSE.code,
            "pulseTime": float(pulse_time),
        }, no_reply=True)

    async def clear_reboot_counter(self) -> None:
        await self.send_command("/state.xml", {"totalReboots": 0}, no_reply=True)

    async def set_state(self, state: WebRelayState) -> None:
        """
        Apply a state to the module.

        Only the relay and the reboot counter can be written. The relay is only
        sent when it differs from the module, and the reboot counter can only
        be cleared (a target of zero).
        """
        current = await self.get_state()
        if state.relay.state != current.relay.state:
            query: dict[str, Any] = {"relayState": state.relay.state.code}
            if state.relay.state == RelayState.PULSE and not self.auto_reboot_enabled:
                query["pulseTime"] = state.relay.pulse_time
            await self.send_command("/state.xml", query, no_reply=True)

        if state.total_reboots == 0 and current.total_reboots != 0:
            await self.clear_reboot_counter()

    async def change_relay_state(self, state: RelayState) -> WebRelayState:
        if state == RelayState.PULSE and not self.auto_reboot_enabled:
            await self.pulse_relay()
            return await self.get_state()
        response = await self.send_command("/state.xml", {"relayState": state.code})
        return self.parse_state(self._require_root(response))

    async def switch_relay_on(self) -> WebRelayState:
        return await self.change_relay_state(RelayState.ON)

    async def switch_relay_off(self) -> WebRelayState:
        return await self.change_relay_state(RelayState.OFF)


class WebRelayQuadController(CbwModule):
    """Controller for the four relay WebRelay-Quad"""

    MODEL = "WebRelay-Quad"
    TOTAL_RELAYS = WebRelayQuadState.TOTAL_RELAYS

    def parse_state(self, node: ET.Element) -> WebRelayQuadState:
        return parse_webrelay_quad_state(node)

    async def pulse_relay(self, relay_num: int, pulse_time: float = Const.DEFAULT_PULSE_TIME) -> None:
        await self._pulse_relay(relay_num, pulse_time, self.TOTAL_RELAYS)

    async def set_state(self, state: WebRelayQuadState) -> None:
        await self._set_relay_bank(state, self.TOTAL_RELAYS)

    async def change_relay_state(self, relay_num: int, state: RelayState) -> WebRelayQuadState:
        return await self._change_relay_state(relay_num, state, self.TOTAL_RELAYS)

    async def switch_relay_on(self, relay_num: int) -> WebRelayQuadState:
        return await self.change_relay_state(relay_num, RelayState.ON)

    async def switch_relay_off(self, relay_num: int) -> WebRelayQuadState:
        return await self.change_relay_state(relay_num, RelayState.OFF)
