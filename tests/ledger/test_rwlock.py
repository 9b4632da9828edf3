"""Tests for the asyncio reader/writer lock."""

import asyncio

import pytest

from sialeaderboard.ledger.rwlock import ReadWriteLock


@pytest.mark.asyncio
class TestReadWriteLock:

    async def test_readers_share(self):
        lock = ReadWriteLock()
        async with lock.read():
            async with lock.read():
                assert lock.readers == 2
        assert lock.readers == 0

    async def test_writer_excludes_readers(self):
        lock = ReadWriteLock()
        order = []

        async def reader():
            async with lock.read():
                order.append("read")

        async with lock.write():
            task = asyncio.create_task(reader())
            await asyncio.sleep(0.01)
            assert order == []
            order.append("write_done")
        await asyncio.wait_for(task, timeout=1)
        assert order == ["write_done", "read"]

    async def test_writer_waits_for_readers(self):
        lock = ReadWriteLock()
        acquired = asyncio.Event()

        async def writer():
            async with lock.write():
                acquired.set()

        async with lock.read():
            task = asyncio.create_task(writer())
            await asyncio.sleep(0.01)
            assert not acquired.is_set()
        await asyncio.wait_for(task, timeout=1)
        assert acquired.is_set()

    async def test_waiting_writer_blocks_new_readers(self):
        lock = ReadWriteLock()
        order = []

        async def writer():
            async with lock.write():
                order.append("write")

        async def late_reader():
            async with lock.read():
                order.append("late_read")

        async with lock.read():
            w = asyncio.create_task(writer())
            await asyncio.sleep(0.01)
            r = asyncio.create_task(late_reader())
            await asyncio.sleep(0.01)
            assert order == []
        await asyncio.wait_for(asyncio.gather(w, r), timeout=1)
        assert order == ["write", "late_read"]

    async def test_cancelled_writer_releases_readers(self):
        lock = ReadWriteLock()

        async def writer():
            async with lock.write():
                pass

        async with lock.read():
            w = asyncio.create_task(writer())
            await asyncio.sleep(0.01)
            w.cancel()
            with pytest.raises(asyncio.CancelledError):
                await w
            # no writer queued any more, so a new reader gets in
            async with lock.read():
                assert lock.readers == 2

    async def test_released_on_exception(self):
        lock = ReadWriteLock()
        with pytest.raises(RuntimeError):
            async with lock.write():
                raise RuntimeError("boom")
        assert not lock.write_locked
        async with lock.read():
            assert lock.readers == 1

    async def test_reader_cancelled_during_release_still_releases(self):
        lock = ReadWriteLock()
        entered = asyncio.Event()
        leave = asyncio.Event()

        async def reader():
            async with lock.read():
                entered.set()
                await leave.wait()

        task = asyncio.create_task(reader())
        await entered.wait()

        # Hold the internal condition so the reader parks inside its release.
        await lock._cond.acquire()
        leave.set()
        await asyncio.sleep(0.01)
        task.cancel()
        await asyncio.sleep(0)
        lock._cond.release()
        with pytest.raises(asyncio.CancelledError):
            await task

        async def writer():
            async with lock.write():
                assert lock.readers == 0

        await asyncio.wait_for(writer(), timeout=1)
        assert lock.readers == 0

    async def test_writer_cancelled_during_release_still_releases(self):
        lock = ReadWriteLock()
        entered = asyncio.Event()
        leave = asyncio.Event()

        async def writer():
            async with lock.write():
                entered.set()
                await leave.wait()

        task = asyncio.create_task(writer())
        await entered.wait()

        await lock._cond.acquire()
        leave.set()
        await asyncio.sleep(0.01)
        task.cancel()
        await asyncio.sleep(0)
        lock._cond.release()
        with pytest.raises(asyncio.CancelledError):
            await task

        async def reader():
            async with lock.read():
                assert not lock.write_locked

        await asyncio.wait_for(reader(), timeout=1)
