from __future__ import annotations

import datetime as dt
import random
import unittest

from torteu.engine import GameEngine
from torteu.errors import PreconditionError
from torteu.session import Outcome, Session, Status
from torteu.session_store import MemorySessionStore
from torteu.utils import best_match, shuffled

from puzzle_fixtures import make_puzzle

TODAY = dt.date(2025, 3, 10)


def new_engine(store=None, mistakes: int = 4) -> GameEngine:
    puzzle = make_puzzle()
    return GameEngine(puzzle, Session.fresh(puzzle, TODAY, mistakes), store=store, rng=random.Random(7))


def pick(engine: GameEngine, *texts: str) -> None:
    engine.deselect_all()
    for t in texts:
        engine.select(t)


class TestSelection(unittest.TestCase):
    def test_select_toggles(self) -> None:
        engine = new_engine()
        engine.select("A")
        self.assertEqual([i.text for i in engine.session.selected], ["A"])
        engine.select("A")
        self.assertEqual(engine.session.selected, [])

    def test_selection_capped_at_four_without_displacement(self) -> None:
        engine = new_engine()
        for t in "ABCDE":
            engine.select(t)
        self.assertEqual(sorted(i.text for i in engine.session.selected), ["A", "B", "C", "D"])

        engine.select("A")
        engine.select("E")
        self.assertEqual(sorted(i.text for i in engine.session.selected), ["B", "C", "D", "E"])

    def test_selection_never_exceeds_four_for_random_calls(self) -> None:
        engine = new_engine()
        rng = random.Random(3)
        texts = [i.text for i in engine.session.items]
        for _ in range(500):
            engine.select(rng.choice(texts))
            self.assertLessEqual(len(engine.session.selected), 4)

    def test_unknown_item_ignored(self) -> None:
        engine = new_engine()
        engine.select("ZZZ")
        self.assertEqual(engine.session.selected, [])

    def test_deselect_all(self) -> None:
        engine = new_engine()
        pick(engine, "A", "F", "K")
        engine.deselect_all()
        self.assertEqual(engine.session.selected, [])

    def test_shuffle_keeps_pool_and_selection(self) -> None:
        engine = new_engine()
        pick(engine, "A", "F")
        before = {(i.text, i.level, i.selected) for i in engine.session.items}
        history = list(engine.session.guess_history)

        engine.shuffle()

        self.assertEqual({(i.text, i.level, i.selected) for i in engine.session.items}, before)
        self.assertEqual(len(engine.session.items), 16)
        self.assertEqual(engine.session.guess_history, history)
        self.assertEqual(engine.session.mistakes_remaining, 4)


class TestSubmit(unittest.TestCase):
    def test_correct_group_clears_category(self) -> None:
        engine = new_engine()
        pick(engine, "A", "B", "C", "D")

        self.assertEqual(engine.submit(), Outcome.CORRECT)
        self.assertEqual([c.name for c in engine.session.cleared_categories], ["L1"])
        self.assertFalse({"A", "B", "C", "D"} & {i.text for i in engine.session.items})
        self.assertEqual(len(engine.session.items), 12)
        self.assertEqual(engine.session.mistakes_remaining, 4)
        self.assertEqual(engine.status, Status.IN_PROGRESS)

    def test_win_only_when_all_four_cleared(self) -> None:
        engine = new_engine()
        pick(engine, "M", "N", "O", "P")
        self.assertEqual(engine.submit(), Outcome.CORRECT)
        pick(engine, "A", "B", "C", "D")
        self.assertEqual(engine.submit(), Outcome.CORRECT)
        pick(engine, "E", "F", "G", "H")
        self.assertEqual(engine.submit(), Outcome.CORRECT)
        self.assertEqual(engine.status, Status.IN_PROGRESS)

        pick(engine, "I", "J", "K", "L")
        self.assertEqual(engine.submit(), Outcome.WIN)
        self.assertEqual(engine.status, Status.WON)
        self.assertEqual([c.level for c in engine.session.cleared_categories], [4, 1, 2, 3])
        self.assertEqual(engine.session.items, [])

    def test_one_away(self) -> None:
        engine = new_engine()
        pick(engine, "A", "B", "C", "E")

        self.assertEqual(engine.submit(), Outcome.ONE_AWAY)
        self.assertEqual(engine.session.mistakes_remaining, 3)
        self.assertEqual(len(engine.session.guess_history), 1)
        self.assertEqual(len(engine.session.selected), 4)

    def test_two_two_split_is_incorrect(self) -> None:
        engine = new_engine()
        pick(engine, "A", "B", "E", "F")
        self.assertEqual(engine.submit(), Outcome.INCORRECT)
        self.assertEqual(engine.session.mistakes_remaining, 3)

    def test_last_mistake_loses(self) -> None:
        engine = new_engine(mistakes=1)
        pick(engine, "A", "B", "C", "E")

        self.assertEqual(engine.submit(), Outcome.LOSS)
        self.assertEqual(engine.session.mistakes_remaining, 0)
        self.assertEqual(engine.status, Status.LOST)

    def test_duplicate_in_any_order_changes_nothing(self) -> None:
        engine = new_engine()
        pick(engine, "A", "B", "C", "E")
        engine.submit()
        history = list(engine.session.guess_history)

        pick(engine, "E", "C", "B", "A")
        self.assertEqual(engine.submit(), Outcome.DUPLICATE)
        self.assertEqual(engine.session.guess_history, history)
        self.assertEqual(engine.session.mistakes_remaining, 3)
        self.assertEqual(engine.session.cleared_categories, [])

    def test_submit_requires_exactly_four(self) -> None:
        engine = new_engine()
        pick(engine, "A", "B", "C")
        with self.assertRaises(PreconditionError):
            engine.submit()
        self.assertEqual(engine.session.guess_history, [])
        self.assertEqual(engine.session.mistakes_remaining, 4)

    def test_submit_after_game_over_rejected(self) -> None:
        engine = new_engine(mistakes=1)
        pick(engine, "A", "B", "E", "F")
        engine.submit()
        pick(engine, "I", "J", "K", "L")
        with self.assertRaises(PreconditionError):
            engine.submit()
        self.assertEqual(engine.status, Status.LOST)

    def test_random_play_keeps_invariants(self) -> None:
        rng = random.Random(11)
        for _ in range(30):
            engine = new_engine()
            previous = engine.session.mistakes_remaining
            while not engine.status.is_terminal:
                pool = [i.text for i in engine.session.items]
                pick(engine, *rng.sample(pool, 4))
                engine.submit()
                s = engine.session
                self.assertLessEqual(s.mistakes_remaining, previous)
                self.assertGreaterEqual(s.mistakes_remaining, 0)
                previous = s.mistakes_remaining
                self.assertEqual(len(s.cleared_categories) == 4, s.status is Status.WON)
                self.assertEqual(s.mistakes_remaining == 0, s.status is Status.LOST)

    def test_submit_persists_session(self) -> None:
        store = MemorySessionStore()
        engine = new_engine(store=store)
        pick(engine, "A", "B", "C", "E")
        engine.submit()

        loaded = store.load(engine.puzzle.puzzle_id, TODAY)
        self.assertEqual(loaded, engine.session)

    def test_duplicate_does_not_persist(self) -> None:
        store = MemorySessionStore()
        engine = new_engine(store=store)
        pick(engine, "A", "B", "C", "E")
        engine.submit()
        saved = store.payload

        engine.select("A")
        engine.select("A")
        self.assertEqual(engine.submit(), Outcome.DUPLICATE)
        self.assertEqual(store.payload, saved)


class TestEndOfGame(unittest.TestCase):
    def test_resolve_loss_reveals_in_level_order(self) -> None:
        engine = new_engine(mistakes=1)
        pick(engine, "E", "F", "G", "H")
        engine.submit()
        pick(engine, "A", "B", "C", "I")
        self.assertEqual(engine.submit(), Outcome.LOSS)

        remaining = engine.resolve_loss()
        self.assertEqual([c.level for c in remaining], [1, 3, 4])
        self.assertEqual(engine.session.selected, [])

        for category in remaining:
            engine.reveal_category(category)
        engine.finish_loss()

        self.assertEqual(engine.session.items, [])
        self.assertEqual(engine.status, Status.LOST)
        self.assertEqual([c.level for c in engine.session.cleared_categories], [2])

    def test_finish_loss_is_idempotent(self) -> None:
        engine = new_engine(mistakes=1)
        pick(engine, "A", "B", "E", "F")
        engine.submit()
        engine.finish_loss()
        engine.finish_loss()
        self.assertEqual(engine.status, Status.LOST)

    def test_resolve_win(self) -> None:
        engine = new_engine()
        with self.assertRaises(PreconditionError):
            engine.resolve_win()

        for group in ("ABCD", "EFGH", "IJKL", "MNOP"):
            pick(engine, *group)
            engine.submit()
        engine.resolve_win()
        engine.resolve_win()
        self.assertEqual(engine.status, Status.WON)

    def test_snapshot_is_detached(self) -> None:
        engine = new_engine()
        pick(engine, "A", "B")
        snap = engine.snapshot()
        self.assertEqual({i.text for i in snap.selected}, {"A", "B"})
        self.assertFalse(snap.is_won or snap.is_lost)

        snap.items[0].selected = not snap.items[0].selected
        self.assertEqual(len(engine.session.selected), 2)


class TestBestMatch(unittest.TestCase):
    def test_ties_go_to_lowest_level(self) -> None:
        groups = [frozenset("ABCD"), frozenset("EFGH"), frozenset("IJKL"), frozenset("MNOP")]
        self.assertEqual(best_match(frozenset("EFAB"), groups), (0, 2))
        self.assertEqual(best_match(frozenset("MNOP"), groups), (3, 4))


class TestShuffled(unittest.TestCase):
    def test_copy_follows_rng(self) -> None:
        items = list("ABCDEFGHIJKLMNOP")
        expected = list(items)
        random.Random(42).shuffle(expected)

        self.assertEqual(shuffled(items, random.Random(42)), expected)
        self.assertEqual(items, list("ABCDEFGHIJKLMNOP"))
        self.assertEqual(sorted(shuffled(tuple(items))), items)


if __name__ == "__main__":
    unittest.main()
