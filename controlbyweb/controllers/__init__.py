"""
Device controllers.

One controller class per ControlByWeb module type. Each builds on CbwModule
and adds the commands and state mapping of its device.
"""

from .webrelay import WebRelayController, WebRelayQuadController
from .webrelay10 import WebRelay10Controller, WebRelay10PlusController
from .webswitch import WebSwitchController, WebSwitchPlusController
from .temperature import TemperatureModuleController
from .x300 import X300Controller
from .x301 import X301Controller

__all__ = [
    "WebRelayController",
    "WebRelayQuadController",
    "WebRelay10Controller",
    "WebRelay10PlusController",
    "WebSwitchController",
    "WebSwitchPlusController",
    "X300Controller",
    "X301Controller",
    "TemperatureModuleController",
]
