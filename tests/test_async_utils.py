import asyncio

import pytest

from notibell.utils.concurrency import async_utils
from notibell.utils.concurrency.async_utils import AsyncTaskManager, retry_async


@pytest.fixture
def no_sleep(monkeypatch):
    delays = []

    async def fake_sleep(delay):
        delays.append(delay)

    monkeypatch.setattr(async_utils.asyncio, "sleep", fake_sleep)
    return delays


@pytest.mark.asyncio
async def test_retry_async_retries_until_success(no_sleep):
    calls = 0

    @retry_async(attempts=3, base_delay=0.1, jitter=0, exceptions=(ValueError,))
    async def flaky():
        nonlocal calls
        calls += 1
        if calls < 3:
            raise ValueError("nope")
        return "ok"

    assert await flaky() == "ok"
    assert calls == 3
    assert no_sleep == [0.1, 0.2]


@pytest.mark.asyncio
async def test_retry_async_reraises_after_last_attempt(no_sleep):
    @retry_async(attempts=2, base_delay=0, jitter=0, exceptions=(ValueError,))
    async def always_fails():
        raise ValueError("still broken")

    with pytest.raises(ValueError):
        await always_fails()


@pytest.mark.asyncio
async def test_retry_async_ignores_other_exceptions(no_sleep):
    calls = 0

    @retry_async(attempts=3, exceptions=(ValueError,))
    async def wrong_error():
        nonlocal calls
        calls += 1
        raise KeyError("x")

    with pytest.raises(KeyError):
        await wrong_error()
    assert calls == 1
    assert no_sleep == []


@pytest.mark.asyncio
async def test_task_manager_tracks_and_forgets_tasks():
    mgr = AsyncTaskManager("tst")

    async def work():
        return 7

    handle = mgr.create_task(work())
    assert len(mgr) == 1
    assert await handle == 7
    await asyncio.sleep(0)
    assert len(mgr) == 0


@pytest.mark.asyncio
async def test_task_manager_duplicate_id_rejected():
    mgr = AsyncTaskManager("tst")
    started = asyncio.Event()

    async def worker():
        started.set()
        await asyncio.Event().wait()

    mgr.create_task(worker(), task_id="w")
    with pytest.raises(KeyError):
        coro = worker()
        try:
            mgr.create_task(coro, task_id="w")
        finally:
            coro.close()
    await mgr.stop_all_tasks(timeout=0.5)
    assert len(mgr) == 0


@pytest.mark.asyncio
async def test_cancel_all_cancels_running_tasks():
    mgr = AsyncTaskManager("tst")
    started = asyncio.Event()

    async def worker():
        started.set()
        await asyncio.Event().wait()

    handle = mgr.create_task(worker())
    await started.wait()
    mgr.cancel_all()
    with pytest.raises(asyncio.CancelledError):
        await handle
    assert handle.done()


@pytest.mark.asyncio
async def test_on_error_callback_receives_exception():
    mgr = AsyncTaskManager("tst")
    seen = []

    async def boom():
        raise RuntimeError("bad")

    async def on_error(exc):
        seen.append(exc)

    handle = mgr.create_task(boom(), on_error=on_error)
    with pytest.raises(RuntimeError):
        await handle
    assert isinstance(seen[0], RuntimeError)
