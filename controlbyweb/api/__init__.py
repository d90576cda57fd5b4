"""
API-level models and shared controller behaviour.

This module contains models and types that belong to the API layer:
- CbwModule (command/poll cycle shared by every controller)
- Relay, StandardInput, SensorInput, Diagnostics, events (value objects)
- Per-device state objects and their XML parsers
- Types and enums used by the API layer
"""

from .models import (
    Relay, StandardInput, SensorInput, Epoch,
    Diagnostics, LimitedDiagnostics, X300Diagnostics,
    ModuleEvent, WebRelay10PlusEvent, WebSwitchPlusEvent, EventCollection,
)
from .module import CbwModule, DiagnosticsMixin, EventsMixin
from .states import (
    WebRelayState, WebRelayQuadState, WebRelay10State, WebRelay10PlusState,
    WebSwitchState, WebSwitchPlusState, X300ThermostatState, X300TempMonitorState,
)
from .types import (
    RelayState, InputState, PowerUpFlag, RebootState, TemperatureUnits, PeriodUnits,
    HeatMode, FanMode, X300OperationMode, WebRelay10Action, WebSwitchAction, Const,
)

__all__ = [
    # Controller base
    "CbwModule",
    "DiagnosticsMixin",
    "EventsMixin",

    # Value objects
    "Relay",
    "StandardInput",
    "SensorInput",
    "Epoch",
    "Diagnostics",
    "LimitedDiagnostics",
    "X300Diagnostics",
    "ModuleEvent",
    "WebRelay10PlusEvent",
    "WebSwitchPlusEvent",
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
    "Const",
]
