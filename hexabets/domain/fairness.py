"""Provably-fair derivation rules.

A draw is HMAC-SHA256 keyed by the secret seed over ``"{player_seed}:{sequence_number}"``.
The first 13 hex digits (52 bits) of the digest are read as an integer and divided
by 2**52, which yields a fraction in [0, 1) with no double-precision bias.

The secret seed is used as a text key (its hex encoding), and the commit hash is
SHA-256 over that same text, so any party holding the revealed seed can recompute
every draw with a stock HMAC implementation.
"""

import hashlib
import hmac
from dataclasses import dataclass

FRACTION_BITS = 52
FRACTION_HEX_DIGITS = FRACTION_BITS // 4
FRACTION_SCALE = 2**FRACTION_BITS


def sha256_hex(value: str) -> str:
    return hashlib.sha256(value.encode("utf-8")).hexdigest()


def hmac_sha256_hex(key: str, message: str) -> str:
    return hmac.new(
        key=key.encode("utf-8"),
        msg=message.encode("utf-8"),
        digestmod=hashlib.sha256,
    ).hexdigest()


def derive_fraction(secret_seed: str, player_seed: str, sequence_number: int) -> float:
    """Return the reproducible fraction in [0, 1) for one draw.

    Args:
        secret_seed (str): Hex-encoded operator seed of the epoch the draw belongs to
        player_seed (str): Non-secret player seed
        sequence_number (int): Non-negative sequence number within the epoch

    Returns:
        float: fraction in [0, 1)
    """
    if sequence_number < 0:
        raise ValueError("sequence_number must be non-negative")
    digest = hmac_sha256_hex(secret_seed, f"{player_seed}:{sequence_number}")
    return int(digest[:FRACTION_HEX_DIGITS], 16) / FRACTION_SCALE


def draw_int(
    secret_seed: str, player_seed: str, sequence_number: int, upper_bound: int
) -> int:
    """Return an integer in [0, upper_bound)."""
    if upper_bound <= 0:
        raise ValueError("upper_bound must be positive")
    return int(derive_fraction(secret_seed, player_seed, sequence_number) * upper_bound)


def verify_commitment(revealed_seed: str, commit_hash: str) -> bool:
    return hmac.compare_digest(sha256_hex(revealed_seed), commit_hash.lower())


def verify_fraction(revealed_seed: str, player_seed: str, sequence_number: int) -> float:
    """Recompute a past draw once its epoch's seed has been revealed."""
    return derive_fraction(revealed_seed, player_seed, sequence_number)


@dataclass(frozen=True)
class SeededStream:
    """Draw source bound to one epoch's secret seed and one player seed.

    Resolvers consume this instead of the live commitment, so a bet that is
    being resolved while the seed rotates still reads a single epoch.
    """

    secret_seed: str
    player_seed: str
    commit_hash: str = ""

    def fraction(self, sequence_number: int) -> float:
        return derive_fraction(self.secret_seed, self.player_seed, sequence_number)

    def integer(self, sequence_number: int, upper_bound: int) -> int:
        return draw_int(self.secret_seed, self.player_seed, sequence_number, upper_bound)

    def __repr__(self) -> str:
        # the secret must never end up in logs or tracebacks
        return f"SeededStream(player_seed={self.player_seed!r}, commit_hash={self.commit_hash!r})"
