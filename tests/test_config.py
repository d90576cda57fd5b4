import pytest

from controlbyweb import (
    TemperatureModuleController,
    WebRelay10PlusController,
    WebRelayController,
    WebRelayQuadController,
    WebSwitchPlusController,
    X300Controller,
    X301Controller,
)
from controlbyweb.api.types import X300OperationMode
from controlbyweb.cli import build_parser, poll
from controlbyweb.config import ModuleConfig, create_controller, load_config, parse_config
from controlbyweb.exceptions import CbwConfigurationError

from fake_module import FakeModule, document

CONFIG = """
controlbyweb:
  - name: Gate
    type: webrelay
    host: 192.0.2.20
    password: webrelay
    auto_reboot: true
  - name: Irrigation
    type: WebRelay-Quad
    host: 192.0.2.22
    port: 8080
  - name: Rack
    type: webswitch plus
    host: 192.0.2.23
    poll_interval: 2.5
  - name: Plant room
    type: x300
    host: 192.0.2.21
    mode: thermostat
"""


def write_config(tmp_path, text):
    path = tmp_path / "config.yaml"
    path.write_text(text)
    return str(path)


def test_load_config(tmp_path):
    configs = load_config(write_config(tmp_path, CONFIG))
    assert [c.name for c in configs] == ["Gate", "Irrigation", "Rack", "Plant room"]
    assert configs[0].password == "webrelay"
    assert configs[1].port == 8080
    assert configs[2].poll_interval == 2.5
    assert configs[3].mode == "thermostat"


def test_controller_classes(tmp_path):
    configs = load_config(write_config(tmp_path, CONFIG))
    assert [c.controller_class for c in configs] == [
        WebRelayController,
        WebRelayQuadController,
        WebSwitchPlusController,
        X300Controller,
    ]


def test_create_controller(tmp_path):
    gate, irrigation, rack, plant_room = [create_controller(c) for c in load_config(write_config(tmp_path, CONFIG))]
    assert gate.auto_reboot_enabled
    assert gate.auth_enabled
    assert irrigation.port == 8080
    assert rack.poll_interval == 2.5
    assert rack.name == "Rack"
    assert plant_room.mode == X300OperationMode.THERMOSTAT


def test_create_controller_x300_monitor():
    controller = create_controller(ModuleConfig(type="x300", host="192.0.2.1", mode="Temperature Monitor"))
    assert controller.mode == X300OperationMode.TEMPERATURE_MONITOR


def test_create_controller_webrelay10_plus():
    controller = create_controller(ModuleConfig(type="webrelay10plus", host="192.0.2.1"))
    assert isinstance(controller, WebRelay10PlusController)


@pytest.mark.parametrize("module_type, controller_class", [
    ("x301", X301Controller),
    ("X-301", X301Controller),
    ("temperature module", TemperatureModuleController),
])
def test_create_controller_other_modules(module_type, controller_class):
    controller = create_controller(ModuleConfig(type=module_type, host="192.0.2.1"))
    assert type(controller) is controller_class


@pytest.mark.parametrize("entry", [
    {"type": "webrelay9000", "host": "192.0.2.1"},
    {"type": "webrelay", "host": ""},
    {"type": "webrelay"},
    {"type": "webrelay", "host": "192.0.2.1", "port": 70000},
    {"type": "webrelay", "host": "192.0.2.1", "poll_interval": 0},
    {"type": "x300", "host": "192.0.2.1", "mode": "sauna"},
    {"type": "webrelay", "host": "192.0.2.1", "colour": "red"},
    "webrelay",
])
def test_bad_module_entries(entry):
    with pytest.raises(CbwConfigurationError):
        parse_config({"controlbyweb": [entry]})


@pytest.mark.parametrize("config", [None, {}, {"controlbyweb": []}, {"controlbyweb": "webrelay"}])
def test_bad_documents(config):
    with pytest.raises(CbwConfigurationError):
        parse_config(config)


def test_missing_file(tmp_path):
    with pytest.raises(CbwConfigurationError):
        load_config(str(tmp_path / "missing.yaml"))


def test_invalid_yaml(tmp_path):
    with pytest.raises(CbwConfigurationError):
        load_config(write_config(tmp_path, "controlbyweb: [\n  - {type: webrelay"))


# ============================
# Command line
# ============================

def test_build_parser():
    args = build_parser().parse_args(["modules.yaml", "--once", "-v"])
    assert args.config == "modules.yaml"
    assert args.once
    assert args.verbose
    assert not args.traffic
    assert build_parser().parse_args([]).config == "config.yaml"


@pytest.mark.asyncio
async def test_poll_once(tmp_path, capsys):
    async with FakeModule({"/state.xml": document(relay1state=1)}) as device:
        path = write_config(tmp_path, f"""
controlbyweb:
  - name: Irrigation
    type: webrelay-quad
    host: 127.0.0.1
    port: {device.port}
""")
        await poll(path, once=True, traffic=True)

    output = capsys.readouterr().out
    assert "REQUEST: GET /state.xml?noReply=0 HTTP/1.1" in output
    assert "Irrigation: WebRelayQuadState(" in output
    assert len(device.commands) == 1
