"""
Shared controller behaviour for ControlByWeb modules.

Every module type is driven the same way: send a command to state.xml (or
diagnostics.xml, or event{N}.xml), read back an XML document and map it into a
state object. CbwModule implements that cycle plus the optional background
poller. Device classes only provide the field mapping and their own commands.
"""

import asyncio
import logging
import time
import traceback
import xml.etree.ElementTree as ET
from typing import Any, Awaitable, Callable, Optional

from colorama import Fore, Style

from ..exceptions import CbwBadResponseError, CbwError
from ..io import CbwClient, Request, Response
from .models import Diagnostics, EventCollection, ModuleEvent
from .parser import parse_diagnostics
from .types import Const, PowerUpFlag, RelayState

"""
===================================================================================
This module implements the command/poll cycle shared by all controllers.
===================================================================================
"""

PollCallback = Callable[..., Awaitable[None]]


class CbwModule:
    """Base class for ControlByWeb module controllers"""

    MODEL = "ControlByWeb module"

    def __init__(self,
                 host: Optional[str] = None,
                 port: int = Const.DEFAULT_PORT,
                 password: Optional[str] = None,
                 poll_interval: float = Const.DEFAULT_POLL_INTERVAL,
                 timeout: Optional[float] = None,
                 name: Optional[str] = None,
                 logger: Optional[logging.Logger] = None,
                 print_traffic: bool = False):
        if not 1 <= port <= 65535:
            raise ValueError(f"Port must be 1-65535, got {port}")
        if poll_interval <= 0:
            raise ValueError(f"Poll interval must be greater than zero, got {poll_interval}")
        self.name = name or (f"{self.MODEL} at {host}" if host else self.MODEL)
        self.password = password
        self.poll_interval = poll_interval
        self.logger = logger or logging.getLogger(__name__)
        self.print_traffic = print_traffic
        self.client = CbwClient(host, port, timeout=timeout, logger=self.logger)

        # Poll callbacks, called as polled(module, state) and poll_failed(module, error)
        self.polled: Optional[PollCallback] = None
        self.poll_failed: Optional[PollCallback] = None
        self._polling = False
        self._poll_lock = asyncio.Lock()
        self._poll_task: Optional[asyncio.Task] = None

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, host={self.host!r}, port={self.port})"

    async def __aenter__(self):
        """Async context manager entry"""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit"""
        await self.close()

    # ============================
    # Connection
    # ============================

    @property
    def host(self) -> Optional[str]:
        return self.client.host

    @property
    def port(self) -> int:
        return self.client.port

    @property
    def auth_enabled(self) -> bool:
        return bool(self.password)

    def is_connected(self) -> bool:
        return self.client.is_connected()

    async def connect(self) -> None:
        await self.client.connect()

    async def disconnect(self) -> None:
        await self.client.disconnect()

    async def close(self) -> None:
        await self.end_poll_cycle()
        await self.disconnect()

    # ============================
    # Commands
    # ============================

    async def send_command(self,
                           path: str,
                           query: Optional[dict[str, Any]] = None,
                           no_reply: Optional[bool] = False,
                           auth: bool = True) -> Response:
        """Send one command to the module and return its parsed reply"""
        req = Request(path=path, query=query or {}, no_reply=no_reply,
                      password=self.password if auth else None)
        request_line = req.command().split("\r\n", 1)[0]
        self.logger.debug(f"{self.name}: {request_line}")

        start = time.time()
        response = await self.client.send_request(req)

        if self.print_traffic:
            rtt_ms = (time.time() - start) * 1000
            received = " ".join(response.text.split()) if response.text else "(no reply)"
            print(Fore.MAGENTA + f"REQUEST: {request_line}  "
                + Fore.WHITE + Style.DIM + f"RTT: {rtt_ms:.0f}ms".ljust(10)
                + Style.BRIGHT + Fore.CYAN + f"  RESPONSE: {received}"
                + Style.RESET_ALL)
        return response

    def _require_root(self, response: Response, tag: Optional[str] = None) -> ET.Element:
        if response.root is None:
            raise CbwBadResponseError(f"{self.name} sent an empty response", response=response.text)
        if tag is not None and response.root.tag != tag:
            raise CbwBadResponseError(f"Expected <{tag}> from {self.name}, got <{response.root.tag}>", response=response.text)
        return response.root

    async def get_state_node(self) -> ET.Element:
        response = await self.send_command("/state.xml")
        return self._require_root(response)

    async def get_diagnostics_node(self) -> ET.Element:
        # diagnostics.xml never requires a password
        response = await self.send_command("/diagnostics.xml", auth=False)
        return self._require_root(response)

    async def get_event_node(self, event_id: int) -> Optional[ET.Element]:
        """Root of event{N}.xml, or None when the module sends nothing back"""
        if not Const.MIN_EVENT_ID <= event_id <= Const.MAX_EVENT_ID:
            raise ValueError(f"Event id must be {Const.MIN_EVENT_ID}-{Const.MAX_EVENT_ID}, got {event_id}")
        response = await self.send_command(f"/event{event_id}.xml", no_reply=None)
        if response.root is None:
            return None
        return self._require_root(response, tag=f"event{event_id}")

    # ============================
    # State
    # ============================

    def parse_state(self, node: ET.Element):
        raise NotImplementedError

    async def get_state(self):
        return self.parse_state(await self.get_state_node())

    async def reset_state(self) -> None:
        """Return every output to its power-on default"""
        state = await self.get_state()
        state.reset()
        await self.set_state(state)

    async def set_state(self, state) -> None:
        raise NotImplementedError

    # ============================
    # Relay helpers
    # ============================

    @staticmethod
    def _check_relay_number(relay_num: int, total_relays: int) -> None:
        if not 1 <= relay_num <= total_relays:
            raise ValueError(f"Relay number must be 1-{total_relays}, got {relay_num}")

    async def _pulse_relay(self, relay_num: int, pulse_time: float, total_relays: int) -> None:
        """Pulses shorter than the minimum pulse time are ignored"""
        self._check_relay_number(relay_num, total_relays)
        if pulse_time < Const.MIN_PULSE_TIME:
            return
        if pulse_time > Const.MAX_PULSE_DURATION:
            raise ValueError(f"Pulse time cannot exceed {Const.MAX_PULSE_DURATION}, got {pulse_time}")
        await self.send_command("/state.xml", {
            f"relay{relay_num}state": RelayState.PULSE.code,
            "pulseTime": float(pulse_time),
        }, no_reply=True)

    async def _change_relay_state(self, relay_num: int, state: RelayState, total_relays: int):
        """Change one relay and return the resulting state. Nothing is sent if the relay is already there."""
        self._check_relay_number(relay_num, total_relays)
        current = await self.get_state()
        if current.get_relay(relay_num).state == state:
            return current

        query: dict[str, Any] = {f"relay{relay_num}state": state.code}
        if state == RelayState.PULSE:
            query[f"pulseTime{relay_num}"] = Const.DEFAULT_PULSE_TIME
        response = await self.send_command("/state.xml", query)
        return self.parse_state(self._require_root(response))

    async def _set_relay_bank(self, state, total_relays: int) -> None:
        """Send all relays that differ from the module's current state in a single command"""
        current = await self.get_state()
        query: dict[str, Any] = {}
        for r in range(1, total_relays + 1):
            relay = state.get_relay(r)
            if relay.state == current.get_relay(r).state:
                continue
            query[f"relay{r}state"] = relay.state.code
            if relay.state == RelayState.PULSE:
                query[f"pulseTime{r}"] = relay.pulse_time
        if not query:
            self.logger.debug(f"{self.name}: relays already in requested state")
            return
        await self.send_command("/state.xml", query, no_reply=True)

    # ============================
    # Polling
    # ============================

    @property
    def is_polling(self) -> bool:
        return self._polling

    async def begin_poll_cycle(self) -> None:
        """Start polling get_state() every poll_interval seconds. Does nothing if already polling."""
        async with self._poll_lock:
            if self._polling:
                return
            self._polling = True
            self._poll_task = asyncio.create_task(self._poll_loop())
        self.logger.info(f"{self.name}: polling every {self.poll_interval}s")

    async def end_poll_cycle(self) -> None:
        async with self._poll_lock:
            was_polling = self._polling
            self._polling = False
            task = self._poll_task
            self._poll_task = None
        if task is None or task is asyncio.current_task():
            return
        if not task.done():
            task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        if was_polling:
            self.logger.info(f"{self.name}: polling stopped")

    async def _poll_loop(self) -> None:
        try:
            while self._polling:
                state = await self.get_state()
                if self.polled:
                    await self.polled(self, state)
                if not self._polling:
                    break
                await asyncio.sleep(self.poll_interval)
        except (CbwError, OSError) as e:
            self.logger.error(f"{self.name}: poll failed: {e}")
            async with self._poll_lock:
                self._polling = False
            if self.poll_failed:
                await self.poll_failed(self, e)
        except Exception as e:
            self.logger.error(f"{self.name}: poll loop error: {e}")
            # log the stack trace
            self.logger.error(traceback.format_exc())
            async with self._poll_lock:
                self._polling = False


class DiagnosticsMixin:
    """Diagnostics queries and power-up flag commands, for modules with a diagnostics.xml page"""

    DIAGNOSTICS_TYPE: type[Diagnostics] = Diagnostics

    async def get_diagnostics(self) -> Diagnostics:
        return parse_diagnostics(await self.get_diagnostics_node(), self.DIAGNOSTICS_TYPE)

    async def clear_power_loss_counter(self) -> None:
        await self.send_command("/diagnostics.xml", {"powerLossCounter": 0}, no_reply=True)

    async def clear_mem_power_up_flag(self) -> None:
        await self.send_command("/diagnostics.xml", {"memoryPowerUpFlag": PowerUpFlag.OFF.value}, no_reply=True)

    async def clear_device_power_up_flag(self) -> None:
        await self.send_command("/diagnostics.xml", {"devicePowerUpFlag": PowerUpFlag.OFF.value}, no_reply=True)

    async def clear_power_up_flags(self) -> None:
        await self.send_command("/diagnostics.xml", {
            "memoryPowerUpFlag": PowerUpFlag.OFF.value,
            "devicePowerUpFlag": PowerUpFlag.OFF.value,
        }, no_reply=True)


class EventsMixin:
    """Scheduled event queries, for modules that expose event{N}.xml"""

    def parse_event(self, node: ET.Element, event_id: int) -> ModuleEvent:
        raise NotImplementedError

    async def get_event(self, event_id: int) -> Optional[ModuleEvent]:
        node = await self.get_event_node(event_id)
        return self.parse_event(node, event_id) if node is not None else None

    async def get_events(self) -> EventCollection:
        """Read every event slot. Slots the module does not answer for are left out."""
        events = EventCollection()
        for event_id in range(Const.MIN_EVENT_ID, Const.MAX_EVENT_ID + 1):
            event = await self.get_event(event_id)
            if event is not None:
                events.append(event)
        return events
