import logging
import re
import secrets
import threading
from dataclasses import dataclass
from typing import Optional

from hexabets.domain.fairness import SeededStream, derive_fraction, draw_int, sha256_hex
from hexabets.errors import RandomnessFailure

SEED_BYTES = 32
_SEED_PATTERN = re.compile(r"^[0-9a-f]{64}$")


def generate_secret_seed() -> str:
    """Return 256 fresh bits from the OS CSPRNG, hex-encoded.

    Raises:
        RandomnessFailure: The secure random source is unavailable
    """
    try:
        return secrets.token_hex(SEED_BYTES)
    except Exception as e:
        logging.critical(f"Secure random source failed: {e}")
        raise RandomnessFailure("secure random source unavailable") from e


@dataclass(frozen=True)
class Rotation:
    revealed_seed: str
    revealed_commit_hash: str
    new_commit_hash: str


@dataclass(frozen=True)
class DrawTicket:
    """Everything needed to resolve and later verify one bet."""

    stream: SeededStream
    sequence_number: int

    @property
    def commit_hash(self) -> str:
        return self.stream.commit_hash


class NonceAllocator:
    """Issues unique, increasing sequence numbers within one commitment epoch."""

    def __init__(self):
        self._counter = 0
        self._lock = threading.Lock()

    def next(self) -> int:
        return self.reserve(1)

    def reserve(self, count: int) -> int:
        """Reserve ``count`` consecutive sequence numbers and return the first one.

        Args:
            count (int): Number of draws the caller needs

        Returns:
            int: First sequence number of the block
        """
        if count < 1:
            raise ValueError("count must be at least 1")
        with self._lock:
            base = self._counter
            self._counter += count
        return base

    def peek(self) -> int:
        with self._lock:
            return self._counter

    def reset(self):
        with self._lock:
            self._counter = 0


class CommitmentManager:
    """Owns the live secret seed and its issue/commit/reveal lifecycle.

    Exactly one commitment is live at a time. Rotation holds the same lock that
    every draw takes while snapshotting the seed, so a draw belongs to exactly
    one epoch and never observes a half-swapped seed.
    """

    def __init__(self, secret_seed: Optional[str] = None, nonces: Optional[NonceAllocator] = None):
        if secret_seed is not None and not _SEED_PATTERN.match(secret_seed):
            raise ValueError("secret_seed must be 64 lowercase hex characters")
        self._secret_seed: str = secret_seed or generate_secret_seed()
        self._commit_hash: str = sha256_hex(self._secret_seed)
        self._epoch = 0
        self._lock = threading.RLock()
        self.nonces = nonces or NonceAllocator()

    @property
    def epoch(self) -> int:
        with self._lock:
            return self._epoch

    def get_commitment(self) -> str:
        """Return the published commit hash. The live seed is never exposed."""
        with self._lock:
            return self._commit_hash

    def rotate(self) -> Rotation:
        """Swap in a fresh seed, reset the sequence counter and reveal the old seed."""
        # generate outside the lock, a failing source must not leave a torn state
        new_seed = generate_secret_seed()
        with self._lock:
            revealed = self._secret_seed
            revealed_hash = self._commit_hash
            self._secret_seed = new_seed
            self._commit_hash = sha256_hex(new_seed)
            self._epoch += 1
            self.nonces.reset()
            new_hash = self._commit_hash
            epoch = self._epoch
        logging.info(f"Commitment rotated: epoch={epoch} new_commit_hash={new_hash}")
        return Rotation(
            revealed_seed=revealed,
            revealed_commit_hash=revealed_hash,
            new_commit_hash=new_hash,
        )

    def bind(self, player_seed: str) -> SeededStream:
        with self._lock:
            return SeededStream(self._secret_seed, player_seed, self._commit_hash)

    def open_draw(
        self, player_seed: str, sequence_number: Optional[int] = None, count: int = 1
    ) -> DrawTicket:
        """Snapshot the current epoch and settle the sequence number in one step.

        Args:
            player_seed (str): Player seed of the bet
            sequence_number (Optional[int]): Caller-supplied sequence number, allocated if None
            count (int): Consecutive draws to reserve when allocating

        Returns:
            DrawTicket: epoch-bound stream and the first sequence number
        """
        if sequence_number is not None and sequence_number < 0:
            raise ValueError("sequence_number must be non-negative")
        with self._lock:
            stream = SeededStream(self._secret_seed, player_seed, self._commit_hash)
            if sequence_number is None:
                sequence_number = self.nonces.reserve(count)
        return DrawTicket(stream=stream, sequence_number=sequence_number)


class RandomStream:
    """Reads draws from whatever commitment is live at call time.

    Two calls with the same sequence number straddling a rotation return
    different fractions; they belong to different epochs.
    """

    def __init__(self, commitments: CommitmentManager):
        self.commitments = commitments

    def derive_fraction(self, player_seed: str, sequence_number: int) -> float:
        stream = self.commitments.bind(player_seed)
        return derive_fraction(stream.secret_seed, player_seed, sequence_number)

    def draw_int(self, player_seed: str, sequence_number: int, upper_bound: int) -> int:
        stream = self.commitments.bind(player_seed)
        return draw_int(stream.secret_seed, player_seed, sequence_number, upper_bound)

    def bind(self, player_seed: str) -> SeededStream:
        return self.commitments.bind(player_seed)
