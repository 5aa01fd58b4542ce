"""Single-bet game rules.

Every resolver shares one contract::

    resolve(bet_amount, stream, sequence_number, params) -> GameResult

``stream`` is a SeededStream bound to one commitment epoch and the player's seed.
Resolvers that need several values read ``sequence_number``, ``sequence_number + 1``
and so on, never the same number twice for different purposes. ``params.validate()``
runs before any sequence number is allocated.
"""

import math
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

from hexabets.domain.fairness import SeededStream
from hexabets.errors import InvalidParameters

DICE_HOUSE_EDGE = 0.01
COINFLIP_MULTIPLIER = 1.98
LIMBO_EDGE_FACTOR = 0.99
ROULETTE_EDGE_FACTOR = 0.98
WHEEL_EDGE_FACTOR = 0.99

ROULETTE_POCKETS = 37
ROULETTE_RED = frozenset({1, 3, 5, 7, 9, 12, 14, 16, 18, 19, 21, 23, 25, 27, 30, 32, 34, 36})
ROULETTE_MULTIPLIERS = {"number": 36, "red": 2, "black": 2, "even": 2, "odd": 2}

PLINKO_ROWS = 12
PLINKO_MULTIPLIERS = (0.2, 0.3, 0.5, 0.8, 1, 1.2, 3, 1.2, 1, 0.8, 0.5, 0.3, 0.2)

KENO_POOL_SIZE = 40
KENO_DRAW_SIZE = 20
KENO_MAX_PICKS = 10
KENO_PAYTABLE: Dict[int, Tuple[float, ...]] = {
    1: (0, 1.9),
    2: (0, 1, 3.5),
    3: (0, 0.5, 2, 9),
    4: (0, 0.5, 2, 7, 28),
    5: (0, 0, 1, 5, 12, 50),
    6: (0, 0, 0.5, 3, 10, 30, 75),
    7: (0, 0, 0.5, 2, 7, 20, 50, 120),
    8: (0, 0, 0.5, 2, 5, 15, 40, 90, 200),
    9: (0, 0, 0.5, 1, 3, 10, 25, 60, 120, 300),
    10: (0, 0, 0.5, 1, 2, 7, 20, 50, 100, 200, 500),
}

WHEEL_SEGMENTS = (1, 1, 1, 2, 2, 3, 5, 10, 1, 1, 1, 2, 2, 3, 5, 1, 1, 2, 3, 20)


def floor_cents(amount: float) -> float:
    """Floor to the currency unit (0.01). Payouts never round up."""
    # round() first so 1.98 * 100 stored as 197.99999... does not lose a cent
    return math.floor(round(amount * 100, 6)) / 100


def is_valid_stake(amount) -> bool:
    """A stake must be a finite, strictly positive number."""
    return amount is not None and math.isfinite(amount) and amount > 0


@dataclass(frozen=True)
class GameResult:
    outcome: dict
    won: bool
    payout: float
    push: bool = False

    def balance_delta(self, bet_amount: float) -> float:
        """Signed change the wallet collaborator has to apply."""
        return round(self.payout - bet_amount, 2)


# ==============================================================================
# ==== Dice ====================================================================
# ==============================================================================


@dataclass(frozen=True)
class DiceParams:
    target: float = 50.0
    over: bool = False

    def validate(self):
        if not 1 <= self.target <= 99:
            raise InvalidParameters("target must be between 1 and 99")


def dice_multiplier(target: float, over: bool, house_edge: float = DICE_HOUSE_EDGE) -> float:
    """Fair odds for the chosen side with the house edge taken off."""
    if over:
        probability = (100 - target - 0.01) / 100
    else:
        probability = target / 100
    return (1 - house_edge) / probability


def resolve_dice(
    bet_amount: float, stream: SeededStream, sequence_number: int, params: DiceParams
) -> GameResult:
    roll = math.floor(stream.fraction(sequence_number) * 10000) / 100
    won = roll > params.target if params.over else roll < params.target
    multiplier = dice_multiplier(params.target, params.over)
    payout = floor_cents(bet_amount * multiplier) if won else 0.0
    return GameResult(
        outcome={"roll": roll, "target": params.target, "over": params.over, "multiplier": multiplier},
        won=won,
        payout=payout,
    )


# ==============================================================================
# ==== Coinflip ================================================================
# ==============================================================================


@dataclass(frozen=True)
class CoinflipParams:
    pick: str = "heads"

    def validate(self):
        if self.pick not in ("heads", "tails"):
            raise InvalidParameters("pick must be 'heads' or 'tails'")


def resolve_coinflip(
    bet_amount: float, stream: SeededStream, sequence_number: int, params: CoinflipParams
) -> GameResult:
    result = "heads" if stream.fraction(sequence_number) < 0.5 else "tails"
    won = result == params.pick
    payout = floor_cents(bet_amount * COINFLIP_MULTIPLIER) if won else 0.0
    return GameResult(outcome={"result": result, "pick": params.pick}, won=won, payout=payout)


# ==============================================================================
# ==== Limbo ===================================================================
# ==============================================================================


@dataclass(frozen=True)
class LimboParams:
    target: float = 2.0

    def validate(self):
        if not self.target > 1.0:
            raise InvalidParameters("target multiplier must be greater than 1.0")


def resolve_limbo(
    bet_amount: float, stream: SeededStream, sequence_number: int, params: LimboParams
) -> GameResult:
    roll = stream.fraction(sequence_number)
    won = roll < (1 / params.target) * LIMBO_EDGE_FACTOR
    payout = floor_cents(bet_amount * params.target * LIMBO_EDGE_FACTOR) if won else 0.0
    return GameResult(outcome={"roll": roll, "target": params.target}, won=won, payout=payout)


# ==============================================================================
# ==== Roulette ================================================================
# ==============================================================================


@dataclass(frozen=True)
class RouletteParams:
    type: str = "red"
    number: Optional[int] = None

    def validate(self):
        if self.type not in ROULETTE_MULTIPLIERS:
            raise InvalidParameters(f"unknown roulette bet type: {self.type}")
        if self.type == "number":
            if self.number is None or not 0 <= self.number < ROULETTE_POCKETS:
                raise InvalidParameters("number bets need a number between 0 and 36")


def roulette_wins(bet_type: str, number: Optional[int], pocket: int) -> bool:
    if bet_type == "number":
        return pocket == number
    if bet_type == "red":
        return pocket in ROULETTE_RED
    if bet_type == "black":
        return pocket != 0 and pocket not in ROULETTE_RED
    if bet_type == "even":
        return pocket != 0 and pocket % 2 == 0
    if bet_type == "odd":
        return pocket % 2 == 1
    return False


def resolve_roulette(
    bet_amount: float, stream: SeededStream, sequence_number: int, params: RouletteParams
) -> GameResult:
    pocket = stream.integer(sequence_number, ROULETTE_POCKETS)
    won = roulette_wins(params.type, params.number, pocket)
    multiplier = ROULETTE_MULTIPLIERS[params.type]
    # edge discounts the payout, win probability stays the true one
    payout = floor_cents(bet_amount * multiplier * ROULETTE_EDGE_FACTOR) if won else 0.0
    return GameResult(outcome={"result": pocket, "type": params.type}, won=won, payout=payout)


# ==============================================================================
# ==== Plinko ==================================================================
# ==============================================================================


@dataclass(frozen=True)
class PlinkoParams:
    def validate(self):
        pass


def resolve_plinko(
    bet_amount: float, stream: SeededStream, sequence_number: int, params: PlinkoParams
) -> GameResult:
    path = [0 if stream.fraction(sequence_number + i) < 0.5 else 1 for i in range(PLINKO_ROWS)]
    index = sum(path)
    multiplier = PLINKO_MULTIPLIERS[index]
    payout = floor_cents(bet_amount * multiplier)
    return GameResult(
        outcome={"index": index, "path": path, "multiplier": multiplier},
        won=payout > bet_amount,
        payout=payout,
    )


# ==============================================================================
# ==== Keno ====================================================================
# ==============================================================================


@dataclass(frozen=True)
class KenoParams:
    picks: List[int] = field(default_factory=list)

    def validate(self):
        if not 1 <= len(self.picks) <= KENO_MAX_PICKS:
            raise InvalidParameters(f"pick 1..{KENO_MAX_PICKS} numbers")
        if len(set(self.picks)) != len(self.picks):
            raise InvalidParameters("picks must be distinct")
        if any(not 1 <= pick <= KENO_POOL_SIZE for pick in self.picks):
            raise InvalidParameters(f"picks must be between 1 and {KENO_POOL_SIZE}")


def keno_draw(stream: SeededStream, sequence_number: int) -> List[int]:
    """Fisher-Yates over 1..40, one draw per swap at sequence_number + i."""
    pool = list(range(1, KENO_POOL_SIZE + 1))
    for i in range(len(pool) - 1, 0, -1):
        j = stream.integer(sequence_number + i, i + 1)
        pool[i], pool[j] = pool[j], pool[i]
    return pool[:KENO_DRAW_SIZE]


def resolve_keno(
    bet_amount: float, stream: SeededStream, sequence_number: int, params: KenoParams
) -> GameResult:
    drawn = keno_draw(stream, sequence_number)
    drawn_set = set(drawn)
    hits = sum(1 for pick in params.picks if pick in drawn_set)
    multiplier = KENO_PAYTABLE[len(params.picks)][hits]
    payout = floor_cents(bet_amount * multiplier)
    return GameResult(
        outcome={"draw": drawn, "hits": hits, "multiplier": multiplier},
        won=payout > bet_amount,
        payout=payout,
    )


# ==============================================================================
# ==== Wheel ===================================================================
# ==============================================================================


@dataclass(frozen=True)
class WheelParams:
    def validate(self):
        pass


def resolve_wheel(
    bet_amount: float, stream: SeededStream, sequence_number: int, params: WheelParams
) -> GameResult:
    index = stream.integer(sequence_number, len(WHEEL_SEGMENTS))
    multiplier = WHEEL_SEGMENTS[index]
    payout = floor_cents(bet_amount * multiplier * WHEEL_EDGE_FACTOR)
    return GameResult(
        outcome={"index": index, "multiplier": multiplier},
        won=payout > bet_amount,
        payout=payout,
    )


@dataclass(frozen=True)
class GameDefinition:
    name: str
    params: type
    resolve: Callable[..., GameResult]
    draws: int = 1


GAMES: Dict[str, GameDefinition] = {
    "dice": GameDefinition("dice", DiceParams, resolve_dice),
    "coinflip": GameDefinition("coinflip", CoinflipParams, resolve_coinflip),
    "limbo": GameDefinition("limbo", LimboParams, resolve_limbo),
    "roulette": GameDefinition("roulette", RouletteParams, resolve_roulette),
    "plinko": GameDefinition("plinko", PlinkoParams, resolve_plinko, draws=PLINKO_ROWS),
    # draws 1..39 are used, 0 stays unused so the block starts on the bet's own number
    "keno": GameDefinition("keno", KenoParams, resolve_keno, draws=KENO_POOL_SIZE),
    "wheel": GameDefinition("wheel", WheelParams, resolve_wheel),
}
