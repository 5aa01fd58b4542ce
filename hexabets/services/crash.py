import asyncio
import logging
import math
import time
from asyncio import Lock
from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable, Dict, Optional, Set

from uuid6 import uuid7

from hexabets.domain.crash import cashout_payout, crash_point_from_fraction, multiplier_at
from hexabets.domain.games import is_valid_stake
from hexabets.errors import InvalidBet, RaceViolation
from hexabets.manager import ConnectionManager
from hexabets.services.commitment import CommitmentManager

CRASH_PLAYER_SEED = "crash"


class Phase(str, Enum):
    idle = "idle"
    running = "running"
    ended = "ended"


@dataclass
class CrashRound:
    round_id: str
    crash_multiplier: float
    started_at: float
    sequence_number: int
    commit_hash: str
    phase: Phase = Phase.running
    multiplier: float = 1.0  # highest multiplier broadcast so far
    bets: Dict[str, float] = field(default_factory=dict)
    cashed_out: Set[str] = field(default_factory=set)


class CrashRoundScheduler:
    """Free-running crash rounds: Idle -> Running -> Ended -> (delay) -> Idle.

    One task owns the timer. Ticks and cashouts take the same lock, so a cashout
    is judged against a multiplier that is not being updated at that moment.
    Clock and sleep are injectable so tests can drive virtual time.
    """

    def __init__(
        self,
        commitments: CommitmentManager,
        broadcaster: ConnectionManager,
        *,
        tick_interval: float = 0.2,
        round_delay: float = 3.0,
        growth_rate: float = 1.2,
        scale: float = 0.5,
        max_multiplier: float = 1000.0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable] = asyncio.sleep,
    ):
        self.commitments = commitments
        self.broadcaster = broadcaster
        self.tick_interval = tick_interval
        self.round_delay = round_delay
        self.growth_rate = growth_rate
        self.scale = scale
        self.max_multiplier = max_multiplier
        self._clock = clock
        self._sleep = sleep
        self._lock = Lock()
        self._round: Optional[CrashRound] = None
        self._pending_bets: Dict[str, float] = {}
        self._task: Optional[asyncio.Task] = None

    @property
    def phase(self) -> Phase:
        if self._round is None:
            return Phase.idle
        return self._round.phase

    @property
    def current_round(self) -> Optional[CrashRound]:
        return self._round

    # ==== Lifecycle ============================================================

    def start(self):
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self.run())
            logging.info("Crash scheduler started")

    async def stop(self):
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logging.info("Crash scheduler stopped")

    async def run(self):
        while True:
            await self.begin_round()
            while not await self.tick():
                await self._sleep(self.tick_interval)
            await self._sleep(self.round_delay)
            self.reset()

    # ==== State machine ========================================================

    async def begin_round(self) -> CrashRound:
        async with self._lock:
            if self.phase == Phase.running:
                return self._round
            ticket = self.commitments.open_draw(CRASH_PLAYER_SEED)
            crash_multiplier = crash_point_from_fraction(
                ticket.stream.fraction(ticket.sequence_number), self.scale, self.max_multiplier
            )
            self._round = CrashRound(
                round_id=str(uuid7()),
                crash_multiplier=crash_multiplier,
                started_at=self._clock(),
                sequence_number=ticket.sequence_number,
                commit_hash=ticket.commit_hash,
                bets=self._pending_bets,
            )
            self._pending_bets = {}
            logging.info(
                f"Crash round {self._round.round_id} started: commit_hash={ticket.commit_hash} "
                f"nonce={ticket.sequence_number} bets={len(self._round.bets)}"
            )
            self.broadcaster.broadcast(
                {
                    "event": "crash:start",
                    "data": {
                        "round_id": self._round.round_id,
                        "commit_hash": ticket.commit_hash,
                        "player_seed": CRASH_PLAYER_SEED,
                        "nonce": ticket.sequence_number,
                    },
                }
            )
        await self.tick()
        return self._round

    async def tick(self) -> bool:
        """Advance the running round by the elapsed time and broadcast it

        Returns:
            bool: True once the round has ended (or no round is running)
        """
        async with self._lock:
            current_round = self._round
            if current_round is None or current_round.phase != Phase.running:
                return True

            elapsed = self._clock() - current_round.started_at
            multiplier = min(multiplier_at(elapsed, self.growth_rate), current_round.crash_multiplier)
            multiplier = max(multiplier, current_round.multiplier)
            current_round.multiplier = multiplier
            logging.debug(f"Crash round {current_round.round_id} tick: {multiplier}x")
            self.broadcaster.broadcast(
                {"event": "crash:tick", "data": {"round_id": current_round.round_id, "multiplier": multiplier}}
            )

            if multiplier < current_round.crash_multiplier:
                return False

            current_round.phase = Phase.ended
            self.broadcaster.broadcast(
                {
                    "event": "crash:end",
                    "data": {
                        "round_id": current_round.round_id,
                        "multiplier": current_round.crash_multiplier,
                        "nonce": current_round.sequence_number,
                        "commit_hash": current_round.commit_hash,
                    },
                }
            )
            logging.info(f"Crash round {current_round.round_id} ended at {current_round.crash_multiplier}x")
            return True

    def reset(self):
        """Ended -> Idle. The finished round is dropped."""
        if self.phase == Phase.ended:
            self._round = None

    def snapshot(self) -> dict:
        """The ``crash:status`` event a new subscriber receives first."""
        current_round = self._round
        data = {"phase": self.phase.value}
        if current_round is not None:
            data["round_id"] = current_round.round_id
            data["commit_hash"] = current_round.commit_hash
            data["multiplier"] = current_round.multiplier
            if current_round.phase == Phase.ended:
                data["multiplier"] = current_round.crash_multiplier
        return {"event": "crash:status", "data": data}

    def subscribe(self):
        # subscribe and snapshot happen without an await in between, so no tick slips past
        return self.broadcaster.subscribe(self.snapshot())

    # ==== Bets and cashouts ====================================================

    async def place_bet(self, participant: str, bet_amount: float):
        """Register a stake for the next round. Only allowed while no round is running.

        Raises:
            InvalidBet: Non-positive stake, a round is running, or a stake is already queued
        """
        if not is_valid_stake(bet_amount):
            raise InvalidBet("bet must be a positive amount")
        async with self._lock:
            if self.phase == Phase.running:
                raise InvalidBet("round already running, wait for the next one")
            if participant in self._pending_bets:
                raise InvalidBet("already holding a bet for the next round")
            self._pending_bets[participant] = bet_amount

    async def cancel_pending_bet(self, participant: str) -> Optional[float]:
        async with self._lock:
            return self._pending_bets.pop(participant, None)

    async def cashout(
        self, bet_amount: float, claimed_multiplier: float, participant: Optional[str] = None
    ) -> float:
        """Pay ``bet x claimed x edge`` if the claim was observable in the current round

        Args:
            bet_amount (float): Stake, replaced by the registered stake when participant is given
            claimed_multiplier (float): Multiplier the client says it cashed out at
            participant (Optional[str]): Participant whose registered stake is settled

        Raises:
            RaceViolation: No running round, or the claim is not a multiplier broadcast in this round

        Returns:
            float: payout
        """
        async with self._lock:
            current_round = self._round
            if current_round is None or current_round.phase != Phase.running:
                logging.warning(f"Cashout rejected, no running round: claimed={claimed_multiplier}")
                raise RaceViolation("no running round")
            if participant is not None:
                if participant not in current_round.bets or participant in current_round.cashed_out:
                    raise InvalidBet("no open bet in this round")
                bet_amount = current_round.bets[participant]
            if not is_valid_stake(bet_amount):
                raise InvalidBet("bet must be a positive amount")
            if not math.isfinite(claimed_multiplier) or not 1.0 <= claimed_multiplier <= current_round.multiplier:
                logging.warning(
                    f"Cashout rejected in round {current_round.round_id}: "
                    f"claimed={claimed_multiplier} broadcast={current_round.multiplier}"
                )
                raise RaceViolation("claimed multiplier was never broadcast")
            payout = cashout_payout(bet_amount, claimed_multiplier)
            if participant is not None:
                current_round.cashed_out.add(participant)
            return payout
