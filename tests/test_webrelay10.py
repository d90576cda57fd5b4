import pytest

from controlbyweb import WebRelay10Controller, WebRelay10PlusController
from controlbyweb.api.models import Diagnostics, LimitedDiagnostics, Relay, WebRelay10PlusEvent
from controlbyweb.api.states import WebRelay10PlusState, WebRelay10State
from controlbyweb.api.types import InputState, PowerUpFlag, RelayState, WebRelay10Action
from controlbyweb.exceptions import CbwBadResponseError

from fake_module import FakeModule, document

STATE = document(
    relay1state=0, relay2state=1, relay10state=1,
    extvar0=3.5, serialNumber="00:0C:C8:02:03:04", time=1700000000,
    input1state=1, count1=4, units="C", sensor1temp=22.0,
)
DIAGNOSTICS = document(memoryPowerUpFlag=1, devicePowerUpFlag=0, powerLossCounter=2)


def event_reply(path: str, query: dict) -> str:
    # Only schedules 0 and 5 are configured
    if path == "/event0.xml":
        return document("event0", active="yes", period="h", count=0, relay=3, action="turn relay(s) on")
    if path == "/event5.xml":
        return document("event5", active="no", period="0", relay=10, description="Pump")
    return ""


EVENT_REPLIES = {f"/event{n}.xml": event_reply for n in range(100)}


@pytest.mark.asyncio
async def test_webrelay10_get_state():
    async with FakeModule({"/state.xml": STATE}) as device:
        module = WebRelay10Controller(host="127.0.0.1", port=device.port)
        state = await module.get_state()

    assert type(state) is WebRelay10State
    assert state.get_relay(2).state == RelayState.ON
    assert state.get_relay(10).state == RelayState.ON
    assert state.get_ext_var(0) == 3.5
    assert state.serial == "00:0C:C8:02:03:04"


@pytest.mark.asyncio
async def test_webrelay10_plus_get_state():
    async with FakeModule({"/state.xml": STATE}) as device:
        module = WebRelay10PlusController(host="127.0.0.1", port=device.port)
        state = await module.get_state()

    assert isinstance(state, WebRelay10PlusState)
    assert state.get_input(1).state == InputState.ON
    assert state.get_input(1).trigger_count == 4
    assert state.get_sensor(1).temperature == 22.0


@pytest.mark.asyncio
async def test_webrelay10_relay_commands():
    async with FakeModule({"/state.xml": STATE}) as device:
        module = WebRelay10Controller(host="127.0.0.1", port=device.port)
        await module.switch_relay_off(10)
        await module.pulse_relay(7, 4)

    assert device.queries == [
        {"noReply": "0"},
        {"relay10state": "0", "noReply": "0"},
        {"relay7state": "2", "pulseTime": "4", "noReply": "1"},
    ]


@pytest.mark.asyncio
async def test_webrelay10_set_state():
    target = WebRelay10State()
    target.set_or_override_relay(1, Relay(RelayState.OFF, 9))

    async with FakeModule({"/state.xml": STATE}) as device:
        module = WebRelay10Controller(host="127.0.0.1", port=device.port)
        await module.set_state(target)

    assert device.queries[-1] == {"relay2state": "0", "relay10state": "0", "noReply": "1"}


@pytest.mark.asyncio
async def test_webrelay10_diagnostics():
    async with FakeModule({"/diagnostics.xml": DIAGNOSTICS}) as device:
        module = WebRelay10Controller(host="127.0.0.1", port=device.port, password="secret")
        diagnostics = await module.get_diagnostics()

    assert isinstance(diagnostics, LimitedDiagnostics)
    assert diagnostics.memory_power_up_flag == PowerUpFlag.OFF
    assert diagnostics.device_power_up_flag == PowerUpFlag.OFF
    assert diagnostics.power_loss_count == 2
    assert device.requests == [("/diagnostics.xml", {"noReply": "0"})]
    # diagnostics.xml is read without a password
    assert device.headers() == []


@pytest.mark.asyncio
async def test_webrelay10_plus_diagnostics_report_memory_flag():
    async with FakeModule({"/diagnostics.xml": DIAGNOSTICS}) as device:
        module = WebRelay10PlusController(host="127.0.0.1", port=device.port)
        diagnostics = await module.get_diagnostics()

    assert type(diagnostics) is Diagnostics
    assert diagnostics.memory_power_up_flag == PowerUpFlag.ON
    assert diagnostics.power_loss_count == 2


@pytest.mark.asyncio
async def test_webrelay10_clear_diagnostics():
    async with FakeModule() as device:
        module = WebRelay10Controller(host="127.0.0.1", port=device.port, password="secret")
        await module.clear_power_loss_counter()
        await module.clear_device_power_up_flag()
        await module.clear_power_up_flags()

    assert [path for path, _ in device.requests] == ["/diagnostics.xml"] * 3
    assert device.queries == [
        {"powerLossCounter": "0", "noReply": "1"},
        {"devicePowerUpFlag": "0", "noReply": "1"},
        {"memoryPowerUpFlag": "0", "devicePowerUpFlag": "0", "noReply": "1"},
    ]
    assert device.headers()[0].startswith("Authorization: Basic ")


@pytest.mark.asyncio
async def test_webrelay10_get_event():
    async with FakeModule(EVENT_REPLIES) as device:
        module = WebRelay10Controller(host="127.0.0.1", port=device.port)
        event = await module.get_event(0)
        missing = await module.get_event(1)

    assert isinstance(event, WebRelay10PlusEvent)
    assert event.id == 0
    assert event.always_on
    assert event.relay == 3
    assert event.action == WebRelay10Action.TURN_RELAY_ON
    assert missing is None
    assert device.request_lines[0] == "GET /event0.xml HTTP/1.1"


@pytest.mark.asyncio
async def test_webrelay10_get_event_wrong_document():
    async with FakeModule({"/event3.xml": document("event4")}) as device:
        module = WebRelay10Controller(host="127.0.0.1", port=device.port)
        with pytest.raises(CbwBadResponseError):
            await module.get_event(3)


@pytest.mark.asyncio
async def test_webrelay10_get_event_out_of_range():
    module = WebRelay10Controller(host="127.0.0.1")
    with pytest.raises(ValueError):
        await module.get_event(100)


@pytest.mark.asyncio
async def test_webrelay10_get_events():
    async with FakeModule(EVENT_REPLIES) as device:
        module = WebRelay10PlusController(host="127.0.0.1", port=device.port)
        events = await module.get_events()

    assert len(device.requests) == 100
    assert [event.id for event in events] == [0, 5]
    pump = events.get_event_by_id(5)
    assert pump.relay == 10
    assert pump.description == "Pump"
    assert pump.is_disabled
