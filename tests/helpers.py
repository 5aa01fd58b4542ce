"""Shared fixtures for the HexaBets test suite."""

import asyncio

from hexabets.domain.cards import RANKS

CONFORMANCE_SEED = "00112233445566778899aabbccddeeff00112233445566778899aabbccddeeff"
CONFORMANCE_COMMIT_HASH = "2a8abfa8cb9906290437854193ca6bca41d4d4e26d1d454bd66a35158095e737"


class ScriptedStream:
    """Stands in for SeededStream with fractions chosen per sequence number."""

    def __init__(self, fractions=None, default=0.0):
        self.fractions = dict(fractions or {})
        self.default = default
        self.player_seed = "scripted"
        self.commit_hash = "scripted"

    def fraction(self, sequence_number):
        return self.fractions.get(sequence_number, self.default)

    def integer(self, sequence_number, upper_bound):
        return int(self.fraction(sequence_number) * upper_bound)


def rank_fraction(rank):
    """Fraction that draws exactly ``rank`` from the 13-rank space."""
    return (RANKS.index(rank) + 0.5) / len(RANKS)


def scripted_ranks(ranks, base=0):
    """Rank draws at base, base+1, ... as used by blackjack."""
    return ScriptedStream({base + i: rank_fraction(rank) for i, rank in enumerate(ranks)})


class FakeClock:
    """Virtual time: ``sleep`` advances the clock and yields once to the loop."""

    def __init__(self, now=0.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds

    async def sleep(self, seconds):
        self.now += seconds
        await asyncio.sleep(0)


def drain(queue):
    events = []
    while not queue.empty():
        events.append(queue.get_nowait())
    return events
