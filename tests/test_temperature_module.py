import pytest

from controlbyweb import TemperatureModuleController
from controlbyweb.api.models import Relay, SensorInput
from controlbyweb.api.states import TemperatureModuleState
from controlbyweb.api.types import RelayState, TemperatureUnits

from fake_module import FakeModule, document

STATE = document(units="F", sensor1temp=18.5, sensor2temp="x.x", relay1state=0, relay2state=1)


@pytest.mark.asyncio
async def test_temperature_module_get_state():
    async with FakeModule({"/state.xml": STATE}) as device:
        module = TemperatureModuleController(host="127.0.0.1", port=device.port)
        state = await module.get_state()

    assert isinstance(state, TemperatureModuleState)
    assert state.units == TemperatureUnits.FAHRENHEIT
    assert state.get_sensor(1) == SensorInput.with_temperature(18.5)
    assert not state.get_sensor(2).has_sensor
    assert not state.get_sensor(4).has_sensor
    assert state.get_relay(2).state == RelayState.ON


@pytest.mark.asyncio
async def test_temperature_module_pulse_relay():
    async with FakeModule() as device:
        module = TemperatureModuleController(host="127.0.0.1", port=device.port)
        await module.pulse_relay(1, 3.0)
        await module.pulse_relay(2, 0)
        with pytest.raises(ValueError):
            await module.pulse_relay(3)
        with pytest.raises(ValueError):
            await module.pulse_relay(1, 90000)

    assert device.queries == [
        {"relay1state": "2", "pulseTime": "3", "noReply": "1"},
        {"relay2state": "2", "pulseTime": "1.5", "noReply": "1"},
    ]


@pytest.mark.asyncio
async def test_temperature_module_set_state():
    target = TemperatureModuleState(units=TemperatureUnits.CELSIUS)
    target.set_or_override_relay(1, Relay(RelayState.PULSE, 2.0))
    target.set_or_override_sensor(2, SensorInput.with_temperature(20.0))

    async with FakeModule({"/state.xml": STATE}) as device:
        module = TemperatureModuleController(host="127.0.0.1", port=device.port)
        await module.set_state(target)

    assert device.requests == [
        ("/state.xml", {"noReply": "0"}),
        ("/state.xml", {"units": "C", "noReply": "1"}),
        ("/state.xml", {"relay1state": "2", "pulseTime": "2", "noReply": "1"}),
        ("/state.xml", {"relay2state": "0", "noReply": "1"}),
        ("/index.srv", {"setTemp": "XX.X", "1": "Apply", "noReply": "1"}),
        ("/index.srv", {"setTemp": "20", "2": "Apply", "noReply": "1"}),
    ]


@pytest.mark.asyncio
async def test_temperature_module_set_state_unchanged():
    async with FakeModule({"/state.xml": STATE}) as device:
        module = TemperatureModuleController(host="127.0.0.1", port=device.port)
        state = await module.get_state()
        await module.set_state(state.clone())

    assert len(device.commands) == 2


@pytest.mark.asyncio
async def test_temperature_module_add_or_replace_sensor():
    async with FakeModule({"/state.xml": STATE}) as device:
        module = TemperatureModuleController(host="127.0.0.1", port=device.port)
        state = await module.add_or_replace_sensor_input(1)
        with pytest.raises(ValueError):
            await module.add_or_replace_sensor_input(5)

    assert isinstance(state, TemperatureModuleState)
    assert device.requests == [
        ("/state.xml", {"noReply": "0"}),
        ("/state.xml", {"noReply": "0"}),
        ("/index.srv", {"setTemp": "0", "1": "Apply", "noReply": "1"}),
        ("/state.xml", {"noReply": "0"}),
    ]


def test_temperature_module_has_no_diagnostics_or_events():
    assert not hasattr(TemperatureModuleController, "get_diagnostics")
    assert not hasattr(TemperatureModuleController, "get_events")
