import unittest

import pytest

from dice_derby import game_engine as engine
from dice_derby.game_state import GameState, Phase, Reason, initial_state
from dice_derby.odds_table import BetCategory, BetKey
from dice_derby.payout import InvalidRankingError

BLUE = BetKey.color(BetCategory.COLOR_BLUE)
BLACK = BetKey.color(BetCategory.COLOR_BLACK)
WIN_2 = BetKey.for_horse(BetCategory.WIN, 2)
SHOW_7 = BetKey.for_horse(BetCategory.SHOW, 7)
IN_ORDER = (1, 2, 3, 4, 5, 6, 7)


def _ok(result: engine.CommandResult) -> GameState:
    assert result.success, result.message
    return result.state


def _betting(turns=2, names=("Ann", "Bo")) -> GameState:
    state = _ok(engine.configure(initial_state(), turns, list(names)))
    return _ok(engine.enter_betting(state))


def _to_racing(state: GameState) -> GameState:
    while state.phase is Phase.BET:
        state = _ok(engine.advance_bettor(state))
    return state


class ConfigureTests(unittest.TestCase):
    def test_creates_players_with_starting_coins(self):
        state = _ok(engine.configure(initial_state(), 2, ["Ann", "  ", "Cy"]))
        self.assertEqual(state.phase, Phase.START)
        self.assertEqual(state.max_turns, 2)
        self.assertEqual([p.player_id for p in state.players], [0, 1, 2])
        self.assertEqual([p.name for p in state.players], ["Ann", "Player 2", "Cy"])
        self.assertTrue(all(p.coins == engine.INITIAL_COINS for p in state.players))

    def test_rejects_out_of_range_settings(self):
        start = initial_state()
        for turns, names in ((0, ["Ann"]), (4, ["Ann"]), (True, ["Ann"]), (2, []), (2, ["p"] * 6)):
            result = engine.configure(start, turns, names)
            self.assertFalse(result.success)
            self.assertEqual(result.reason, Reason.INVALID_CONFIGURATION)
            self.assertIs(result.state, start)

    def test_betting_needs_players(self):
        result = engine.enter_betting(initial_state())
        self.assertEqual(result.reason, Reason.NOT_CONFIGURED)


class BettingPhaseTests(unittest.TestCase):
    def test_enter_betting_grants_income(self):
        state = _betting()
        self.assertEqual(state.phase, Phase.BET)
        self.assertEqual(state.current_bettor_index, 0)
        self.assertEqual([p.coins for p in state.players], [10, 10])
        self.assertEqual(engine.current_bettor(state).name, "Ann")

    def test_only_the_current_bettor_may_wager(self):
        state = _betting()
        result = engine.place_bet(state, 1, BLUE, 1)
        self.assertEqual(result.reason, Reason.NOT_CURRENT_BETTOR)
        self.assertIs(result.state, state)

        result = engine.place_bet(state, 9, BLUE, 1)
        self.assertEqual(result.reason, Reason.UNKNOWN_PLAYER)

        state = _ok(engine.advance_bettor(state))
        state = _ok(engine.place_bet(state, 1, BLUE, 1))
        self.assertEqual(state.player(1).coins, 9)
        self.assertEqual(state.player(0).coins, 10)

    def test_ledger_rejections_leave_state_unchanged(self):
        state = _ok(engine.place_bet(_betting(), 0, BLUE, 4))
        for amount, reason in ((11, Reason.INSUFFICIENT_FUNDS), (0, Reason.INVALID_AMOUNT), (1.5, Reason.INVALID_AMOUNT)):
            result = engine.place_bet(state, 0, WIN_2, amount)
            self.assertFalse(result.success)
            self.assertEqual(result.reason, reason)
            self.assertIs(result.state, state)

    def test_remove_bet_refunds(self):
        state = _ok(engine.place_bet(_betting(), 0, BLUE, 4))
        state = _ok(engine.remove_bet(state, 0, BLUE))
        self.assertEqual(state.player(0).coins, 10)
        state = _ok(engine.remove_bet(state, 0, WIN_2))
        self.assertEqual(state.player(0).coins, 10)

    def test_bets_outside_bet_phase_are_rejected(self):
        start = _ok(engine.configure(initial_state(), 1, ["Ann"]))
        self.assertEqual(engine.place_bet(start, 0, BLUE, 1).reason, Reason.INVALID_PHASE)
        racing = _to_racing(_betting())
        self.assertEqual(engine.remove_bet(racing, 0, BLUE).reason, Reason.INVALID_PHASE)

    def test_last_bettor_moves_to_racing(self):
        state = _betting(names=("Ann", "Bo", "Cy"))
        state = _ok(engine.advance_bettor(state))
        state = _ok(engine.advance_bettor(state))
        self.assertEqual(state.phase, Phase.BET)
        self.assertEqual(state.current_bettor_index, 2)
        state = _ok(engine.advance_bettor(state))
        self.assertEqual(state.phase, Phase.RACING)
        self.assertIsNone(engine.current_bettor(state))


class RaceAndCollectTests(unittest.TestCase):
    def test_start_race_only_while_racing(self):
        self.assertEqual(engine.start_race(_betting()).reason, Reason.INVALID_PHASE)
        racing = _to_racing(_betting())
        self.assertIs(_ok(engine.start_race(racing)), racing)

    def test_race_finished_settles_and_records_history(self):
        state = _betting()
        state = _ok(engine.place_bet(state, 0, BLUE, 3))
        state = _ok(engine.place_bet(state, 0, WIN_2, 2))
        state = _ok(engine.advance_bettor(state))
        state = _ok(engine.place_bet(state, 1, BLACK, 4))
        state = _ok(engine.place_bet(state, 1, SHOW_7, 1))
        state = _ok(engine.advance_bettor(state))

        state = _ok(engine.race_finished(state, [2, 1, 3, 4, 5, 6, 7]))
        self.assertEqual(state.phase, Phase.COLLECT)
        self.assertEqual(state.final_ranking, (2, 1, 3, 4, 5, 6, 7))
        ann, bo = state.players
        self.assertEqual((ann.coins, ann.last_earned), (21, 16))
        self.assertEqual((bo.coins, bo.last_earned), (25, 20))
        self.assertEqual(dict(ann.bets), {})

        self.assertEqual(len(state.turn_history), 1)
        record = state.turn_history[0]
        self.assertEqual(record.turn, 1)
        self.assertEqual(record.winner, 2)
        self.assertEqual([(s.name, s.coins, s.last_earned) for s in record.player_snapshots],
                         [("Ann", 21, 16), ("Bo", 25, 20)])

    def test_malformed_ranking_raises(self):
        racing = _to_racing(_betting())
        with self.assertRaises(InvalidRankingError):
            engine.race_finished(racing, [1, 1, 2, 3, 4, 5, 6])
        with self.assertRaises(InvalidRankingError):
            engine.race_finished(racing, [1, 2, 3])

    def test_race_finished_outside_racing_is_rejected(self):
        state = _betting()
        result = engine.race_finished(state, IN_ORDER)
        self.assertEqual(result.reason, Reason.INVALID_PHASE)
        self.assertIs(result.state, state)

    def test_collect_gates(self):
        collect = _ok(engine.race_finished(_to_racing(_betting()), IN_ORDER))
        self.assertEqual(engine.enter_betting(collect).reason, Reason.INVALID_PHASE)

        next_turn = _ok(engine.next_turn(collect))
        self.assertEqual(engine.next_turn(next_turn).reason, Reason.INVALID_PHASE)
        self.assertEqual(engine.finish_game(next_turn).reason, Reason.INVALID_PHASE)


def test_two_turn_game_ends_in_result():
    state = _ok(engine.race_finished(_to_racing(_betting(turns=2)), IN_ORDER))
    assert state.phase is Phase.COLLECT
    assert not engine.is_last_turn(state)

    state = _ok(engine.next_turn(state))
    assert state.current_turn == 2
    assert state.final_ranking == ()
    state = _ok(engine.enter_betting(state))
    assert state.phase is Phase.BET
    assert [p.coins for p in state.players] == [15, 15]
    assert all(p.last_earned == 0 for p in state.players)

    state = _ok(engine.race_finished(_to_racing(state), (7, 6, 5, 4, 3, 2, 1)))
    assert engine.is_last_turn(state)
    rejected = engine.next_turn(state)
    assert rejected.reason is Reason.NO_TURNS_REMAINING
    assert rejected.state is state

    state = _ok(engine.finish_game(state))
    assert state.phase is Phase.RESULT
    assert [record.turn for record in state.turn_history] == [1, 2]


def test_reset_matches_a_fresh_engine():
    state = _ok(engine.race_finished(_to_racing(_betting(turns=1)), IN_ORDER))
    state = _ok(engine.finish_game(state))
    fresh = _ok(engine.reset(state))
    assert fresh == initial_state()
    assert fresh.players == ()
    assert fresh.turn_history == ()
    assert fresh.current_turn == 1
    assert fresh.phase is Phase.START


def test_reset_only_from_result():
    state = _betting()
    assert engine.reset(state).reason is Reason.INVALID_PHASE


def test_final_standings_order_by_coins_then_id():
    state = _ok(engine.configure(initial_state(), 1, ["Ann", "Bo", "Cy"]))
    state = _ok(engine.enter_betting(state))
    state = _ok(engine.place_bet(state, 0, BLUE, 10))
    state = _ok(engine.advance_bettor(state))
    state = _ok(engine.place_bet(state, 1, WIN_2, 10))
    state = _to_racing(state)
    state = _ok(engine.race_finished(state, (1, 2, 3, 4, 5, 6, 7)))
    standings = engine.final_standings(state)
    assert [(s.rank, s.player.name, s.player.coins) for s in standings] == [
        (1, "Ann", 20),
        (2, "Cy", 10),
        (3, "Bo", 0),
    ]


def test_dispatch_by_name():
    state = engine.dispatch(initial_state(), "configure", 1, ["Ann"]).state
    assert len(state.players) == 1
    with pytest.raises(ValueError):
        engine.dispatch(state, "teleport")
