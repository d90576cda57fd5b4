"""
YAML configuration for ControlByWeb modules.

A configuration file lists modules under a top-level ``controlbyweb`` key:

    controlbyweb:
      - name: Gate
        type: webrelay
        host: 192.168.1.20
        password: webrelay
        auto_reboot: false
      - name: Plant room
        type: x300
        host: 192.168.1.21
        mode: thermostat
        poll_interval: 30
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional

import yaml

from .api.module import CbwModule
from .api.types import Const, X300OperationMode
from .controllers import (
    WebRelay10Controller,
    WebRelay10PlusController,
    WebRelayController,
    WebRelayQuadController,
    WebSwitchController,
    WebSwitchPlusController,
    TemperatureModuleController,
    X300Controller,
    X301Controller,
)
from .exceptions import CbwConfigurationError

CONFIG_KEY = "controlbyweb"

MODULE_TYPES: dict[str, type[CbwModule]] = {
    "webrelay": WebRelayController,
    "webrelayquad": WebRelayQuadController,
    "webrelay10": WebRelay10Controller,
    "webrelay10plus": WebRelay10PlusController,
    "webswitch": WebSwitchController,
    "webswitchplus": WebSwitchPlusController,
    "x300": X300Controller,
    "x301": X301Controller,
    "temperaturemodule": TemperatureModuleController,
}

X300_MODES = {
    "thermostat": X300OperationMode.THERMOSTAT,
    "temperaturemonitor": X300OperationMode.TEMPERATURE_MONITOR,
    "tempmonitor": X300OperationMode.TEMPERATURE_MONITOR,
}


def _normalise(name: str) -> str:
    return "".join(c for c in name.lower() if c.isalnum())


@dataclass
class ModuleConfig:
    """One configured module"""
    type: str
    host: str
    name: Optional[str] = None
    port: int = Const.DEFAULT_PORT
    password: Optional[str] = None
    poll_interval: float = Const.DEFAULT_POLL_INTERVAL
    timeout: Optional[float] = None
    auto_reboot: bool = False
    mode: Optional[str] = None

    def __post_init__(self):
        if _normalise(self.type) not in MODULE_TYPES:
            raise CbwConfigurationError(f"Unknown module type {self.type!r}, expected one of {', '.join(MODULE_TYPES)}")
        if not self.host:
            raise CbwConfigurationError(f"Module {self.name or self.type!r} has no host")
        if not isinstance(self.port, int) or not 1 <= self.port <= 65535:
            raise CbwConfigurationError(f"Port must be 1-65535, got {self.port!r}")
        if not isinstance(self.poll_interval, (int, float)) or self.poll_interval <= 0:
            raise CbwConfigurationError(f"poll_interval must be a positive number, got {self.poll_interval!r}")
        if self.mode is not None and _normalise(self.mode) not in X300_MODES:
            raise CbwConfigurationError(f"Unknown X-300 mode {self.mode!r}")

    @property
    def controller_class(self) -> type[CbwModule]:
        return MODULE_TYPES[_normalise(self.type)]

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ModuleConfig":
        if not isinstance(data, dict):
            raise CbwConfigurationError(f"Module entry must be a mapping, got {type(data).__name__}")
        try:
            return cls(**data)
        except TypeError as e:
            raise CbwConfigurationError(f"Invalid module entry {data!r}: {e}") from e


def parse_config(config: Any) -> list[ModuleConfig]:
    """Validate an already loaded configuration document"""
    if not isinstance(config, dict) or CONFIG_KEY not in config:
        raise CbwConfigurationError(f"Configuration must contain a '{CONFIG_KEY}' list")
    entries = config[CONFIG_KEY]
    if not isinstance(entries, list) or not entries:
        raise CbwConfigurationError(f"'{CONFIG_KEY}' must be a non-empty list of modules")
    return [ModuleConfig.from_dict(entry) for entry in entries]


def load_config(path: str) -> list[ModuleConfig]:
    try:
        with open(path) as f:
            config = yaml.safe_load(f)
    except OSError as e:
        raise CbwConfigurationError(f"Unable to read configuration {path}: {e}") from e
    except yaml.YAMLError as e:
        raise CbwConfigurationError(f"Unable to parse configuration {path}: {e}") from e
    return parse_config(config)


def create_controller(config: ModuleConfig,
                      logger: Optional[logging.Logger] = None,
                      print_traffic: bool = False) -> CbwModule:
    """Build the controller matching a module entry"""
    kwargs: dict[str, Any] = dict(
        host=config.host,
        port=config.port,
        password=config.password,
        poll_interval=config.poll_interval,
        timeout=config.timeout,
        name=config.name,
        logger=logger,
        print_traffic=print_traffic,
    )
    controller_class = config.controller_class
    if controller_class is WebRelayController:
        kwargs["auto_reboot_enabled"] = config.auto_reboot
    elif controller_class is X300Controller and config.mode is not None:
        kwargs["mode"] = X300_MODES[_normalise(config.mode)]
    return controller_class(**kwargs)
