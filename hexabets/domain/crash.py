"""Crash round math. Time is always passed in, never read here."""

import math

from hexabets.domain.games import floor_cents

CRASH_EDGE_FACTOR = 0.99
DEFAULT_SCALE = 0.5
DEFAULT_GROWTH_RATE = 1.2


def crash_point_from_fraction(
    fraction: float, scale: float = DEFAULT_SCALE, cap: float = math.inf
) -> float:
    """Heavy-tailed crash point ``max(1, scale / (1 - u))`` floored to 0.01 and capped."""
    if not 0.0 <= fraction < 1.0:
        raise ValueError("fraction must be in [0, 1)")
    crash = max(1.0, scale / (1.0 - fraction))
    return min(math.floor(crash * 100) / 100, cap)


def multiplier_at(elapsed: float, growth_rate: float = DEFAULT_GROWTH_RATE) -> float:
    """Multiplier after ``elapsed`` seconds, linear and non-decreasing, floored to 0.01."""
    return math.floor((1.0 + max(0.0, elapsed) * growth_rate) * 100) / 100


def cashout_payout(bet_amount: float, multiplier: float) -> float:
    return floor_cents(bet_amount * multiplier * CRASH_EDGE_FACTOR)
