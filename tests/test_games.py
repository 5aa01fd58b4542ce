import unittest

from hexabets.domain.cards import (
    HILO_MULTIPLIER,
    BlackjackParams,
    HiLoParams,
    blackjack_score,
    dealer_must_draw,
    resolve_blackjack,
    resolve_hilo,
)
from hexabets.domain.fairness import SeededStream
from hexabets.domain.games import (
    GAMES,
    KENO_DRAW_SIZE,
    PLINKO_MULTIPLIERS,
    CoinflipParams,
    DiceParams,
    KenoParams,
    LimboParams,
    PlinkoParams,
    RouletteParams,
    WheelParams,
    dice_multiplier,
    floor_cents,
    keno_draw,
    resolve_coinflip,
    resolve_dice,
    resolve_keno,
    resolve_limbo,
    resolve_plinko,
    resolve_roulette,
    resolve_wheel,
    roulette_wins,
)
from hexabets.domain.mines import MinesBoard, mines_multiplier, place_mines
from hexabets.errors import InvalidParameters, StaleBoard

from tests.helpers import CONFORMANCE_SEED, ScriptedStream, rank_fraction, scripted_ranks


class TestConformance(unittest.TestCase):
    def test_coinflip_vector(self):
        """Fixed seed, playerSeed='test', nonce=0 lands on heads."""
        stream = SeededStream(CONFORMANCE_SEED, "test")
        result = resolve_coinflip(100, stream, 0, CoinflipParams(pick="heads"))
        self.assertEqual(result.outcome["result"], "heads")
        self.assertTrue(result.won)
        self.assertEqual(result.payout, 198.0)

        losing = resolve_coinflip(100, stream, 0, CoinflipParams(pick="tails"))
        self.assertFalse(losing.won)
        self.assertEqual(losing.payout, 0.0)
        self.assertEqual(losing.balance_delta(100), -100)


class TestDice(unittest.TestCase):
    def test_multiplier_law(self):
        self.assertAlmostEqual(dice_multiplier(50, False), 0.99 / (50 / 100))
        self.assertAlmostEqual(dice_multiplier(50, False), 1.98)
        self.assertAlmostEqual(dice_multiplier(25, False), 0.99 / 0.25)

    def test_roll_under_wins(self):
        result = resolve_dice(10, ScriptedStream({0: 0.30001}), 0, DiceParams(target=50, over=False))
        self.assertEqual(result.outcome["roll"], 30.0)
        self.assertTrue(result.won)
        self.assertEqual(result.payout, 19.8)

    def test_roll_over(self):
        params = DiceParams(target=50, over=True)
        self.assertTrue(resolve_dice(10, ScriptedStream({0: 0.75}), 0, params).won)
        self.assertFalse(resolve_dice(10, ScriptedStream({0: 0.5}), 0, params).won)

    def test_payout_floors(self):
        # 1 * 0.99 / 0.07 = 14.142857... floors to 14.14
        result = resolve_dice(1, ScriptedStream({0: 0.0101}), 0, DiceParams(target=7))
        self.assertEqual(result.payout, 14.14)
        self.assertEqual(floor_cents(1.019), 1.01)

    def test_target_out_of_range(self):
        with self.assertRaises(InvalidParameters):
            DiceParams(target=0).validate()
        with self.assertRaises(InvalidParameters):
            DiceParams(target=100).validate()


class TestSimpleGames(unittest.TestCase):
    def test_coinflip_faces(self):
        self.assertEqual(resolve_coinflip(1, ScriptedStream({0: 0.49}), 0, CoinflipParams()).outcome["result"], "heads")
        self.assertEqual(resolve_coinflip(1, ScriptedStream({0: 0.5}), 0, CoinflipParams()).outcome["result"], "tails")
        with self.assertRaises(InvalidParameters):
            CoinflipParams(pick="edge").validate()

    def test_limbo(self):
        params = LimboParams(target=2.0)
        won = resolve_limbo(10, ScriptedStream({0: 0.49}), 0, params)
        self.assertTrue(won.won)
        self.assertEqual(won.payout, 19.8)
        self.assertFalse(resolve_limbo(10, ScriptedStream({0: 0.495}), 0, params).won)
        with self.assertRaises(InvalidParameters):
            LimboParams(target=1.0).validate()

    def test_roulette_predicates(self):
        self.assertTrue(roulette_wins("red", None, 1))
        self.assertFalse(roulette_wins("black", None, 0))
        self.assertTrue(roulette_wins("black", None, 2))
        self.assertFalse(roulette_wins("even", None, 0))
        self.assertFalse(roulette_wins("odd", None, 0))
        self.assertTrue(roulette_wins("odd", None, 35))
        self.assertTrue(roulette_wins("number", 17, 17))

    def test_roulette_edge_on_payout(self):
        # pocket = int(0.5 * 37) = 18, red
        result = resolve_roulette(10, ScriptedStream({0: 0.5}), 0, RouletteParams(type="red"))
        self.assertEqual(result.outcome["result"], 18)
        self.assertTrue(result.won)
        self.assertEqual(result.payout, 19.6)
        straight = resolve_roulette(1, ScriptedStream({0: 0.5}), 0, RouletteParams(type="number", number=18))
        self.assertEqual(straight.payout, 35.28)

    def test_roulette_validation(self):
        with self.assertRaises(InvalidParameters):
            RouletteParams(type="number").validate()
        with self.assertRaises(InvalidParameters):
            RouletteParams(type="number", number=37).validate()
        with self.assertRaises(InvalidParameters):
            RouletteParams(type="column").validate()

    def test_plinko_sums_steps(self):
        all_left = resolve_plinko(10, ScriptedStream(default=0.1), 0, PlinkoParams())
        self.assertEqual(all_left.outcome["index"], 0)
        self.assertEqual(all_left.payout, 2.0)

        half = ScriptedStream({i: 0.9 for i in range(6)}, default=0.1)
        middle = resolve_plinko(10, half, 0, PlinkoParams())
        self.assertEqual(middle.outcome["index"], 6)
        self.assertEqual(middle.outcome["path"], [1] * 6 + [0] * 6)
        self.assertEqual(middle.payout, 30.0)

    def test_plinko_table_symmetric(self):
        self.assertEqual(PLINKO_MULTIPLIERS, tuple(reversed(PLINKO_MULTIPLIERS)))

    def test_wheel_segment(self):
        result = resolve_wheel(10, ScriptedStream({0: 0.99}), 0, WheelParams())
        self.assertEqual(result.outcome["index"], 19)
        self.assertEqual(result.outcome["multiplier"], 20)
        self.assertEqual(result.payout, 198.0)

    def test_registry_covers_single_draw_games(self):
        self.assertEqual(set(GAMES), {"dice", "coinflip", "limbo", "roulette", "plinko", "keno", "wheel"})


class TestKeno(unittest.TestCase):
    def test_draw_is_a_shuffle_prefix(self):
        stream = SeededStream(CONFORMANCE_SEED, "keno")
        drawn = keno_draw(stream, 0)
        self.assertEqual(len(drawn), KENO_DRAW_SIZE)
        self.assertEqual(len(set(drawn)), KENO_DRAW_SIZE)
        self.assertTrue(all(1 <= n <= 40 for n in drawn))
        self.assertEqual(drawn, keno_draw(stream, 0))

    def test_paytable_lookup(self):
        # every swap picks index 0, pool ends as [2, 3, ..., 40, 1] before slicing
        stream = ScriptedStream(default=0.0)
        drawn = keno_draw(stream, 0)
        result = resolve_keno(10, stream, 0, KenoParams(picks=[drawn[0], drawn[1], 40]))
        self.assertEqual(result.outcome["hits"], 2)
        self.assertEqual(result.outcome["multiplier"], 2)
        self.assertEqual(result.payout, 20.0)

    def test_validation(self):
        for picks in ([], list(range(1, 12)), [1, 1], [0], [41]):
            with self.assertRaises(InvalidParameters):
                KenoParams(picks=picks).validate()
        KenoParams(picks=[1, 40]).validate()


class TestHiLo(unittest.TestCase):
    def test_higher_wins(self):
        stream = ScriptedStream({0: rank_fraction(5), 2: rank_fraction(9)})
        result = resolve_hilo(10, stream, 0, HiLoParams(guess="higher"))
        self.assertTrue(result.won)
        self.assertEqual(result.outcome["result"], "win")
        self.assertEqual(result.payout, 19.2)
        self.assertEqual(HILO_MULTIPLIER, 1.92)

    def test_wrong_guess_loses(self):
        stream = ScriptedStream({0: rank_fraction(5), 2: rank_fraction(9)})
        result = resolve_hilo(10, stream, 0, HiLoParams(guess="lower"))
        self.assertFalse(result.won)
        self.assertEqual(result.outcome["result"], "lose")
        self.assertEqual(result.payout, 0.0)

    def test_tie_is_a_push(self):
        stream = ScriptedStream({0: rank_fraction(12), 2: rank_fraction(12)})
        result = resolve_hilo(10, stream, 0, HiLoParams(guess="higher"))
        self.assertFalse(result.won)
        self.assertTrue(result.push)
        self.assertEqual(result.outcome["result"], "tie")
        self.assertEqual(result.balance_delta(10), 0)

    def test_suit_is_cosmetic(self):
        a = ScriptedStream({0: rank_fraction(5), 1: 0.0, 2: rank_fraction(9), 3: 0.0})
        b = ScriptedStream({0: rank_fraction(5), 1: 0.9, 2: rank_fraction(9), 3: 0.6})
        self.assertEqual(
            resolve_hilo(10, a, 0, HiLoParams()).payout,
            resolve_hilo(10, b, 0, HiLoParams()).payout,
        )


class TestBlackjack(unittest.TestCase):
    def test_scores(self):
        self.assertEqual(blackjack_score([14, 13]), 21)
        self.assertEqual(blackjack_score([14, 14, 9]), 21)
        self.assertEqual(blackjack_score([14, 14, 14]), 13)
        self.assertEqual(blackjack_score([11, 12, 2]), 22)

    def test_dealer_rule(self):
        self.assertTrue(dealer_must_draw([10, 6]))
        self.assertFalse(dealer_must_draw([10, 9]))
        self.assertFalse(dealer_must_draw([10, 7]))

    def test_player_wins(self):
        # player A K, dealer 10 6 then draws a 2
        stream = scripted_ranks([14, 13, 10, 6, 2])
        result = resolve_blackjack(10, stream, 0, BlackjackParams())
        self.assertEqual(result.outcome["dealer"], [10, 6, 2])
        self.assertEqual(result.outcome["result"], "win")
        self.assertEqual(result.payout, 19.8)

    def test_push_returns_stake(self):
        stream = scripted_ranks([10, 9, 13, 9])
        result = resolve_blackjack(10, stream, 0, BlackjackParams(actions=["stand"]))
        self.assertEqual(result.outcome["result"], "push")
        self.assertTrue(result.push)
        self.assertEqual(result.payout, 10)
        self.assertEqual(result.balance_delta(10), 0)

    def test_bust_is_distinct_from_loss(self):
        stream = scripted_ranks([10, 6, 10, 7, 10])
        bust = resolve_blackjack(10, stream, 0, BlackjackParams(actions=["hit", "hit"]))
        self.assertEqual(bust.outcome["player"], [10, 6, 10])
        self.assertEqual(bust.outcome["result"], "bust")

        loss = resolve_blackjack(10, scripted_ranks([10, 6, 10, 8]), 0, BlackjackParams(actions=["stand"]))
        self.assertEqual(loss.outcome["result"], "lose")
        self.assertEqual(loss.payout, 0.0)

    def test_dealer_bust_pays(self):
        stream = scripted_ranks([10, 2, 10, 6, 10])
        result = resolve_blackjack(10, stream, 0, BlackjackParams())
        self.assertEqual(result.outcome["dealer_score"], 26)
        self.assertTrue(result.won)

    def test_action_validation(self):
        with self.assertRaises(InvalidParameters):
            BlackjackParams(actions=["double"]).validate()
        with self.assertRaises(InvalidParameters):
            BlackjackParams(actions=["hit"] * 13).validate()


class TestMines(unittest.TestCase):
    def test_placement(self):
        stream = SeededStream(CONFORMANCE_SEED, "mines")
        mines = place_mines(stream, 0)
        self.assertEqual(len(mines), 3)
        self.assertTrue(all(0 <= x < 5 and 0 <= y < 5 for x, y in mines))
        self.assertEqual(mines, place_mines(stream, 0))

    def test_five_reveals_double_the_stake(self):
        board = MinesBoard(bet_amount=1, mined_cells=frozenset({(0, 0), (1, 1), (2, 2)}))
        for cell in [(0, 1), (0, 2), (0, 3), (0, 4), (1, 0)]:
            self.assertTrue(board.reveal(*cell))
        self.assertEqual(len(board.revealed_cells), 5)
        self.assertEqual(board.multiplier, 2.0)
        self.assertEqual(board.payout, 2.0)
        self.assertEqual(mines_multiplier(5), 1 + 5 * 0.2)

    def test_repeat_reveal_is_idempotent(self):
        board = MinesBoard(bet_amount=1, mined_cells=frozenset({(0, 0), (1, 1), (2, 2)}))
        board.reveal(4, 4)
        board.reveal(4, 4)
        self.assertEqual(len(board.revealed_cells), 1)

    def test_mine_forfeits_board(self):
        board = MinesBoard(bet_amount=1, mined_cells=frozenset({(0, 0), (1, 1), (2, 2)}))
        self.assertFalse(board.reveal(1, 1))
        self.assertTrue(board.forfeited)
        with self.assertRaises(StaleBoard):
            board.reveal(3, 3)

    def test_out_of_grid(self):
        board = MinesBoard(bet_amount=1, mined_cells=frozenset({(0, 0), (1, 1), (2, 2)}))
        with self.assertRaises(InvalidParameters):
            board.reveal(5, 0)


if __name__ == "__main__":
    unittest.main()
