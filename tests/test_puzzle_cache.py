from __future__ import annotations

import asyncio
import gc
import unittest

from torteu.errors import FetchError
from torteu.puzzle_cache import DailyPuzzleSource

from puzzle_fixtures import FakeSource, MutableNow, make_clock, make_puzzle


class TestDailyPuzzleSource(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self.now = MutableNow()
        self.source = FakeSource([make_puzzle("a"), make_puzzle("b")])
        self.puzzles = DailyPuzzleSource(self.source, make_clock(self.now))

    async def test_memoizes_within_a_day(self) -> None:
        first = await self.puzzles.fetch_daily_puzzle()
        second = await self.puzzles.fetch_daily_puzzle()
        self.assertIs(first, second)
        self.assertEqual(self.source.calls, 1)
        self.assertEqual(self.source.days, [69])

    async def test_concurrent_callers_share_one_request(self) -> None:
        self.source.gate = asyncio.Event()
        waiters = [asyncio.create_task(self.puzzles.fetch_daily_puzzle()) for _ in range(3)]
        await asyncio.sleep(0)
        self.source.gate.set()
        results = await asyncio.gather(*waiters)

        self.assertEqual(self.source.calls, 1)
        self.assertTrue(all(r is results[0] for r in results))

    async def test_cancelled_waiter_does_not_cancel_shared_request(self) -> None:
        self.source.gate = asyncio.Event()
        first = asyncio.create_task(self.puzzles.fetch_daily_puzzle())
        second = asyncio.create_task(self.puzzles.fetch_daily_puzzle())
        await asyncio.sleep(0)
        first.cancel()
        self.source.gate.set()

        puzzle = await second
        self.assertEqual(puzzle.puzzle_id, make_puzzle("a").puzzle_id)
        self.assertEqual(self.source.calls, 1)

    async def test_failure_after_every_waiter_left_is_retrieved(self) -> None:
        loop = asyncio.get_running_loop()
        reported = []
        loop.set_exception_handler(lambda _loop, context: reported.append(context))
        self.addCleanup(loop.set_exception_handler, None)

        self.source.gate = asyncio.Event()
        self.source.error = FetchError("offline")
        waiter = asyncio.create_task(self.puzzles.fetch_daily_puzzle())
        await asyncio.sleep(0)
        waiter.cancel()
        with self.assertRaises(asyncio.CancelledError):
            await waiter

        self.source.gate.set()
        for _ in range(3):
            await asyncio.sleep(0)
        del waiter
        gc.collect()

        self.assertEqual(self.source.calls, 1)
        self.assertEqual(reported, [])

    async def test_force_refresh_replaces_cache(self) -> None:
        await self.puzzles.fetch_daily_puzzle()
        refreshed = await self.puzzles.fetch_daily_puzzle(force_refresh=True)
        self.assertEqual(refreshed.puzzle_id, make_puzzle("b").puzzle_id)
        self.assertIs(self.puzzles.cached, refreshed)

    async def test_failed_refresh_keeps_previous_puzzle(self) -> None:
        original = await self.puzzles.fetch_daily_puzzle()
        self.source.error = FetchError("boom", status_code=503)

        with self.assertRaises(FetchError):
            await self.puzzles.fetch_daily_puzzle(force_refresh=True)

        self.assertIs(self.puzzles.cached, original)
        self.assertIs(await self.puzzles.fetch_daily_puzzle(), original)
        self.assertEqual(self.source.calls, 2)

    async def test_failure_surfaces_and_allows_retry(self) -> None:
        self.source.error = FetchError("offline")
        with self.assertRaises(FetchError):
            await self.puzzles.fetch_daily_puzzle()
        self.assertIsNone(self.puzzles.cached)

        self.source.error = None
        await self.puzzles.fetch_daily_puzzle()
        self.assertEqual(self.source.calls, 2)

    async def test_new_civil_day_fetches_again(self) -> None:
        await self.puzzles.fetch_daily_puzzle()
        self.now.advance(days=1)
        puzzle = await self.puzzles.fetch_daily_puzzle()

        self.assertEqual(self.source.calls, 2)
        self.assertEqual(self.source.days, [69, 70])
        self.assertEqual(puzzle.puzzle_id, make_puzzle("b").puzzle_id)

    async def test_reset(self) -> None:
        await self.puzzles.fetch_daily_puzzle()
        self.puzzles.reset()
        self.assertIsNone(self.puzzles.cached)
        await self.puzzles.fetch_daily_puzzle()
        self.assertEqual(self.source.calls, 2)


if __name__ == "__main__":
    unittest.main()
