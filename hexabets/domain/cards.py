"""Card games played from a reserved block of sequence numbers.

A card is two draws: the rank at ``n`` and the suit at ``n + 1``. The suit is
cosmetic and never affects an outcome.
"""

from dataclasses import dataclass, field
from typing import List, Tuple

from hexabets.domain.fairness import SeededStream
from hexabets.domain.games import GameResult, floor_cents
from hexabets.errors import InvalidParameters

# 11=J, 12=Q, 13=K, 14=A
RANKS = (2, 3, 4, 5, 6, 7, 8, 9, 10, 11, 12, 13, 14)
SUITS = ("♠", "♥", "♦", "♣")
ACE = 14

HILO_MULTIPLIER = 1.92
HILO_DRAWS = 4

BLACKJACK_MULTIPLIER = 1.98
BLACKJACK_DRAWS = 32
BLACKJACK_MAX_ACTIONS = 12
DEALER_STANDS_ON = 17


def draw_rank(stream: SeededStream, sequence_number: int) -> int:
    return RANKS[stream.integer(sequence_number, len(RANKS))]


def draw_card(stream: SeededStream, sequence_number: int) -> dict:
    return {
        "rank": draw_rank(stream, sequence_number),
        "suit": SUITS[stream.integer(sequence_number + 1, len(SUITS))],
    }


# ==============================================================================
# ==== Hi-Lo ===================================================================
# ==============================================================================


@dataclass(frozen=True)
class HiLoParams:
    guess: str = "higher"

    def validate(self):
        if self.guess not in ("higher", "lower"):
            raise InvalidParameters("guess must be 'higher' or 'lower'")


def deal_hilo(stream: SeededStream, nonce_base: int) -> dict:
    return draw_card(stream, nonce_base)


def resolve_hilo(
    bet_amount: float, stream: SeededStream, nonce_base: int, params: HiLoParams
) -> GameResult:
    """Compare the next card against the current one.

    An equal rank is a push: the stake comes back, it is neither a win nor a loss.
    """
    current = draw_card(stream, nonce_base)
    following = draw_card(stream, nonce_base + 2)
    outcome = {"current": current, "next": following, "guess": params.guess}

    if following["rank"] == current["rank"]:
        return GameResult(outcome={**outcome, "result": "tie"}, won=False, payout=bet_amount, push=True)

    if params.guess == "higher":
        won = following["rank"] > current["rank"]
    else:
        won = following["rank"] < current["rank"]
    payout = floor_cents(bet_amount * HILO_MULTIPLIER) if won else 0.0
    return GameResult(outcome={**outcome, "result": "win" if won else "lose"}, won=won, payout=payout)


# ==============================================================================
# ==== Blackjack ===============================================================
# ==============================================================================


@dataclass(frozen=True)
class BlackjackParams:
    actions: List[str] = field(default_factory=list)

    def validate(self):
        if len(self.actions) > BLACKJACK_MAX_ACTIONS:
            raise InvalidParameters(f"at most {BLACKJACK_MAX_ACTIONS} actions")
        if any(action not in ("hit", "stand") for action in self.actions):
            raise InvalidParameters("actions must be 'hit' or 'stand'")


def blackjack_score(hand: List[int]) -> int:
    """Face cards count 10, aces count 11 and drop to 1 one at a time while busting."""
    total = 0
    aces = 0
    for rank in hand:
        if rank == ACE:
            total += 11
            aces += 1
        elif rank >= 11:
            total += 10
        else:
            total += rank
    while total > 21 and aces > 0:
        total -= 10
        aces -= 1
    return total


def dealer_must_draw(hand: List[int]) -> bool:
    return blackjack_score(hand) < DEALER_STANDS_ON


def deal_blackjack(stream: SeededStream, nonce_base: int) -> Tuple[List[int], List[int]]:
    player = [draw_rank(stream, nonce_base), draw_rank(stream, nonce_base + 1)]
    dealer = [draw_rank(stream, nonce_base + 2), draw_rank(stream, nonce_base + 3)]
    return player, dealer


def resolve_blackjack(
    bet_amount: float, stream: SeededStream, nonce_base: int, params: BlackjackParams
) -> GameResult:
    player, dealer = deal_blackjack(stream, nonce_base)
    n = nonce_base + 4
    for action in params.actions:
        if action == "stand" or blackjack_score(player) > 21:
            break
        player.append(draw_rank(stream, n))
        n += 1

    while dealer_must_draw(dealer):
        dealer.append(draw_rank(stream, n))
        n += 1

    player_score = blackjack_score(player)
    dealer_score = blackjack_score(dealer)
    outcome = {"player": player, "dealer": dealer, "player_score": player_score, "dealer_score": dealer_score}

    if player_score > 21:
        return GameResult(outcome={**outcome, "result": "bust"}, won=False, payout=0.0)
    if dealer_score > 21 or player_score > dealer_score:
        payout = floor_cents(bet_amount * BLACKJACK_MULTIPLIER)
        return GameResult(outcome={**outcome, "result": "win"}, won=True, payout=payout)
    if player_score == dealer_score:
        return GameResult(outcome={**outcome, "result": "push"}, won=False, payout=bet_amount, push=True)
    return GameResult(outcome={**outcome, "result": "lose"}, won=False, payout=0.0)
