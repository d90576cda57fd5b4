"""
ControlByWeb Python Library

A Python library for controlling ControlByWeb network relay and temperature
modules: WebRelay, WebRelay-Quad, WebRelay-10 (Plus), WebSwitch (Plus), the
X-300, the X-301 and the Temperature Module.

This library provides three distinct layers of abstraction:

1. **io**: Wire-level protocol (one HTTP-style command per TCP connection, XML replies)
2. **api**: Value objects, state objects, XML mapping and the shared command/poll cycle
3. **controllers**: One controller class per module type (high-level objects)

Example usage:
    import controlbyweb

    async with controlbyweb.WebRelayQuadController(host="192.168.1.100") as quad:
        state = await quad.switch_relay_on(2)
        print(state.get_relay(2).state)

    # Background polling
    relay = controlbyweb.WebRelayController(host="192.168.1.101", poll_interval=5)
    relay.polled = on_state         # async def on_state(module, state)
    relay.poll_failed = on_failure  # async def on_failure(module, error)
    await relay.begin_poll_cycle()
"""

# Controllers (recommended for most users)
from .controllers import (
    WebRelayController,
    WebRelayQuadController,
    WebRelay10Controller,
    WebRelay10PlusController,
    WebSwitchController,
    WebSwitchPlusController,
    X300Controller,
    X301Controller,
    TemperatureModuleController,
)

# API-level models
from .api.module import CbwModule
from .api.models import (
    Relay, StandardInput, SensorInput, Epoch,
    Diagnostics, LimitedDiagnostics, X300Diagnostics, X301Diagnostics,
    ModuleEvent, WebRelay10PlusEvent, WebSwitchPlusEvent, X301Event, EventCollection,
)
from .api.states import (
    WebRelayState, WebRelayQuadState, WebRelay10State, WebRelay10PlusState,
    WebSwitchState, WebSwitchPlusState, X300ThermostatState, X300TempMonitorState,
    X301State, TemperatureModuleState,
)

# Low-level models
from .io import CbwClient, Request, Response

# Shared types and exceptions
from .api.types import (
    RelayState, InputState, PowerUpFlag, RebootState, TemperatureUnits, PeriodUnits,
    HeatMode, FanMode, X300OperationMode, WebRelay10Action, WebSwitchAction, X301Action,
)
from .exceptions import (
    CbwError, CbwTimeoutError, CbwConnectionError, CbwUnauthorizedError,
    CbwBadResponseError, CbwConfigurationError, CbwModeError, CbwUnsupportedMethodError,
)

# Configuration and utilities
from .config import ModuleConfig, load_config, create_controller
from .utils import run_with_keyboard_interrupt

__version__ = "0.1.0"
__author__ = "Simon Wright"

# Public API - these are the main classes users should import
__all__ = [
    # Controllers (recommended)
    "WebRelayController",
    "WebRelayQuadController",
    "WebRelay10Controller",
    "WebRelay10PlusController",
    "WebSwitchController",
    "WebSwitchPlusController",
    "X300Controller",
    "X301Controller",
    "TemperatureModuleController",

    # API-level models (for advanced users)
    "CbwModule",
    "Relay",
    "StandardInput",
    "SensorInput",
    "Epoch",
    "Diagnostics",
    "LimitedDiagnostics",
    "X300Diagnostics",
    "X301Diagnostics",
    "ModuleEvent",
    "WebRelay10PlusEvent",
    "WebSwitchPlusEvent",
    "X301Event",
    "EventCollection",

    # States
    "WebRelayState",
    "WebRelayQuadState",
    "WebRelay10State",
    "WebRelay10PlusState",
    "WebSwitchState",
    "WebSwitchPlusState",
    "X300ThermostatState",
    "X300TempMonitorState",
    "X301State",
    "TemperatureModuleState",

    # Low-level models (for advanced users)
    "CbwClient",
    "Request",
    "Response",

    # Types
    "RelayState",
    "InputState",
    "PowerUpFlag",
    "RebootState",
    "TemperatureUnits",
    "PeriodUnits",
    "HeatMode",
    "FanMode",
    "X300OperationMode",
    "WebRelay10Action",
    "WebSwitchAction",
    "X301Action",

    # Exceptions
    "CbwError",
    "CbwTimeoutError",
    "CbwConnectionError",
    "CbwUnauthorizedError",
    "CbwBadResponseError",
    "CbwConfigurationError",
    "CbwModeError",
    "CbwUnsupportedMethodError",

    # Configuration and utilities
    "ModuleConfig",
    "load_config",
    "create_controller",
    "run_with_keyboard_interrupt",
]
