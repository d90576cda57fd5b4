import pytest

from controlbyweb import X300Controller
from controlbyweb.api.models import Relay, X300Diagnostics
from controlbyweb.api.states import X300TempMonitorState, X300ThermostatState
from controlbyweb.api.types import FanMode, HeatMode, RelayState, X300OperationMode
from controlbyweb.exceptions import CbwModeError

from fake_module import FakeModule, document

MONITOR = document(units="C", sensor1temp=18.5, sensor2temp="x.x", relay1state=0, relay2state=1, relay3state=0)
THERMOSTAT = document(
    units="F", indoorTemp=70.0, setTemp=72.0, heat=1, cool=0, fan=1,
    heatMode=1, fanMode=1, filtChng=30, minSTemp=50.0, maxSTemp=90.0,
)


def thermostat(port: int) -> X300Controller:
    return X300Controller(host="127.0.0.1", port=port, mode=X300OperationMode.THERMOSTAT)


def test_x300_defaults_to_temperature_monitor():
    assert X300Controller(host="192.0.2.1").mode == X300OperationMode.TEMPERATURE_MONITOR


# ============================
# Temperature monitor mode
# ============================

@pytest.mark.asyncio
async def test_x300_monitor_state():
    async with FakeModule({"/state.xml": MONITOR}) as device:
        x300 = X300Controller(host="127.0.0.1", port=device.port)
        state = await x300.get_state()
        same = await x300.get_temp_monitor_state()

    assert isinstance(state, X300TempMonitorState)
    assert state == same
    assert state.get_sensor(1).temperature == 18.5
    assert not state.get_sensor(2).has_sensor
    assert state.get_relay(2).state == RelayState.ON


@pytest.mark.asyncio
async def test_x300_pulse_relay():
    async with FakeModule() as device:
        x300 = X300Controller(host="127.0.0.1", port=device.port)
        await x300.pulse_relay(2, 4.5)
        await x300.pulse_relay(3, 0)
        with pytest.raises(ValueError):
            await x300.pulse_relay(4)
        with pytest.raises(ValueError):
            await x300.pulse_relay(1, 90000)

    assert device.queries == [
        {"relay2state": "2", "pulseTime": "4.5", "noReply": "1"},
        {"relay3state": "2", "pulseTime": "1.5", "noReply": "1"},
    ]


@pytest.mark.asyncio
async def test_x300_set_relay():
    async with FakeModule() as device:
        x300 = X300Controller(host="127.0.0.1", port=device.port)
        await x300.set_relay(1, Relay(RelayState.PULSE, 2.0))
        await x300.set_relay(3, None)

    assert device.queries == [
        {"relay1state": "2", "pulseTime1": "2", "noReply": "1"},
        {"relay3state": "0", "noReply": "1"},
    ]


@pytest.mark.asyncio
async def test_x300_monitor_set_state():
    target = X300TempMonitorState()
    target.set_or_override_relay(1, Relay(RelayState.ON))

    async with FakeModule({"/state.xml": MONITOR}) as device:
        x300 = X300Controller(host="127.0.0.1", port=device.port)
        await x300.set_state(target)

    assert device.queries[-1] == {"relay1state": "1", "relay2state": "0", "noReply": "1"}


@pytest.mark.asyncio
async def test_x300_thermostat_commands_need_thermostat_mode():
    async with FakeModule() as device:
        x300 = X300Controller(host="127.0.0.1", port=device.port)
        with pytest.raises(CbwModeError):
            await x300.set_temperature(70)
        with pytest.raises(CbwModeError):
            await x300.hold()
        with pytest.raises(CbwModeError):
            await x300.get_thermostat_state()

    assert device.commands == []


# ============================
# Thermostat mode
# ============================

@pytest.mark.asyncio
async def test_x300_thermostat_state():
    async with FakeModule({"/state.xml": THERMOSTAT}) as device:
        x300 = thermostat(device.port)
        state = await x300.get_state()
        same = await x300.get_thermostat_state()

    assert isinstance(state, X300ThermostatState)
    assert state == same
    assert state.indoor_temperature == 70.0
    assert state.heat == RelayState.ON
    assert state.heat_mode == HeatMode.HEAT_ONLY
    assert state.fan_mode == FanMode.AUTO
    assert state.filter_change_days == 30


@pytest.mark.asyncio
async def test_x300_thermostat_commands():
    async with FakeModule() as device:
        x300 = thermostat(device.port)
        await x300.set_temperature(21.5)
        await x300.set_heat_mode(HeatMode.COOL_ONLY)
        await x300.hold()
        await x300.change_fan_mode(FanMode.ON)
        await x300.reset_filter_counter()

    assert device.queries == [
        {"setTemp": "21.5", "noReply": "1"},
        {"heatMode": "2", "noReply": "1"},
        {"hold": "1", "noReply": "1"},
        {"fanMode": "0", "noReply": "1"},
        {"rstFilt": "1", "noReply": "1"},
    ]


@pytest.mark.asyncio
async def test_x300_set_thermostat():
    state = X300ThermostatState(set_temperature=68.0, heat_mode=HeatMode.AUTO, fan_mode=FanMode.ON)
    state.hold_temperature()

    async with FakeModule() as device:
        x300 = thermostat(device.port)
        await x300.set_state(state)

    assert device.request_lines == ["GET /state.xml?setTemp=68&heatMode=3&hold=1&fanMode=0&noReply=1 HTTP/1.1"]


@pytest.mark.asyncio
async def test_x300_set_thermostat_with_filter_reset():
    state = X300ThermostatState(set_temperature=70.5)
    state.request_filter_reset()

    async with FakeModule() as device:
        x300 = thermostat(device.port)
        await x300.set_thermostat(state)

    assert device.queries == [{"setTemp": "70.5", "heatMode": "0", "fanMode": "1", "rstFilt": "1", "noReply": "1"}]


@pytest.mark.asyncio
async def test_x300_relay_commands_need_monitor_mode():
    async with FakeModule() as device:
        x300 = thermostat(device.port)
        with pytest.raises(CbwModeError):
            await x300.pulse_relay(1)
        with pytest.raises(CbwModeError):
            await x300.set_relay(1, None)
        with pytest.raises(CbwModeError):
            await x300.get_temp_monitor_state()

    assert device.commands == []


@pytest.mark.asyncio
async def test_x300_change_mode():
    async with FakeModule({"/state.xml": THERMOSTAT}) as device:
        x300 = X300Controller(host="127.0.0.1", port=device.port)
        await x300.change_mode(X300OperationMode.THERMOSTAT)
        assert x300.mode == X300OperationMode.THERMOSTAT
        assert isinstance(await x300.get_state(), X300ThermostatState)


@pytest.mark.asyncio
async def test_x300_diagnostics():
    reply = document(devicePowerUpFlag=0, powerLossCounter=1, internalTemp=40.5, vin=24.1, fiveVolt=4.98)
    async with FakeModule({"/diagnostics.xml": reply}) as device:
        x300 = X300Controller(host="127.0.0.1", port=device.port)
        diagnostics = await x300.get_diagnostics()

    assert isinstance(diagnostics, X300Diagnostics)
    assert diagnostics.internal_temperature == 40.5
    assert diagnostics.voltage_in == 24.1
    assert diagnostics.internal_5volt == 4.98
    assert diagnostics.power_loss_count == 1
