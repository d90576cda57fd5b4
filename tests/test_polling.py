import asyncio

import pytest

from controlbyweb import WebRelayQuadController
from controlbyweb.api.types import RelayState
from controlbyweb.exceptions import CbwBadResponseError, CbwConnectionError

from fake_module import FakeModule, document


@pytest.mark.asyncio
async def test_poll_cycle_reports_states():
    states = []
    done = asyncio.Event()

    async def polled(module, state):
        states.append(state)
        if len(states) == 3:
            done.set()

    async with FakeModule({"/state.xml": document(relay2state=1)}) as device:
        quad = WebRelayQuadController(host="127.0.0.1", port=device.port, poll_interval=0.05)
        quad.polled = polled
        await quad.begin_poll_cycle()
        assert quad.is_polling
        await asyncio.wait_for(done.wait(), timeout=5)
        await quad.end_poll_cycle()

    assert not quad.is_polling
    assert all(state.get_relay(2).state == RelayState.ON for state in states)


@pytest.mark.asyncio
async def test_begin_poll_cycle_twice_starts_one_poller():
    async with FakeModule({"/state.xml": document(relay1state=0)}) as device:
        quad = WebRelayQuadController(host="127.0.0.1", port=device.port, poll_interval=10)
        await quad.begin_poll_cycle()
        task = quad._poll_task
        await quad.begin_poll_cycle()
        assert quad._poll_task is task
        await quad.close()

    assert not quad.is_polling
    assert task.done()


@pytest.mark.asyncio
async def test_poll_cycle_stops_on_bad_response():
    failures = []
    failed = asyncio.Event()

    async def poll_failed(module, error):
        failures.append((module, error))
        failed.set()

    async with FakeModule({"/state.xml": "garbage"}) as device:
        quad = WebRelayQuadController(host="127.0.0.1", port=device.port, poll_interval=0.05)
        quad.poll_failed = poll_failed
        await quad.begin_poll_cycle()
        await asyncio.wait_for(failed.wait(), timeout=5)

    assert not quad.is_polling
    assert failures[0][0] is quad
    assert isinstance(failures[0][1], CbwBadResponseError)
    assert len(device.commands) == 1
    await quad.end_poll_cycle()


@pytest.mark.asyncio
async def test_poll_cycle_stops_when_module_unreachable():
    failed = asyncio.Event()
    errors = []

    async def poll_failed(module, error):
        errors.append(error)
        failed.set()

    async with FakeModule() as device:
        port = device.port
    quad = WebRelayQuadController(host="127.0.0.1", port=port, poll_interval=0.05, timeout=1)
    quad.poll_failed = poll_failed
    await quad.begin_poll_cycle()
    await asyncio.wait_for(failed.wait(), timeout=5)

    assert not quad.is_polling
    assert isinstance(errors[0], CbwConnectionError)
    await quad.close()


@pytest.mark.asyncio
async def test_poll_cycle_survives_without_callbacks():
    async with FakeModule({"/state.xml": document(relay1state=1)}) as device:
        quad = WebRelayQuadController(host="127.0.0.1", port=device.port, poll_interval=0.05)
        await quad.begin_poll_cycle()
        await asyncio.sleep(0.3)
        assert quad.is_polling
        await quad.end_poll_cycle()

    assert len(device.commands) >= 2
