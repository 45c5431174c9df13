import asyncio

import pytest

from flashdeck.core.task_queue import BackgroundQueue


def test_enqueue_before_start_raises():
    q = BackgroundQueue()
    assert q.started is False
    with pytest.raises(RuntimeError):
        q.enqueue(lambda: asyncio.sleep(0))


def test_jobs_run_and_stop_drains():
    done = []

    async def scenario():
        q = BackgroundQueue(concurrency=3)
        q.start()
        for i in range(10):
            async def job(i=i):
                await asyncio.sleep(0)
                done.append(i)

            q.enqueue(job)
        await q.stop()
        assert q.started is False
        assert q.pending() == 0

    asyncio.run(scenario())
    assert sorted(done) == list(range(10))


def test_failing_job_does_not_kill_worker(caplog):
    done = []

    async def boom():
        raise ValueError("boom")

    async def ok():
        done.append(True)

    async def scenario():
        q = BackgroundQueue(concurrency=1)
        q.start()
        q.enqueue(boom)
        q.enqueue(ok)
        await q.stop()

    asyncio.run(scenario())
    assert done == [True]
    assert "job failed" in caplog.text


def test_concurrency_is_at_least_one():
    assert BackgroundQueue(concurrency=0).concurrency == 1
