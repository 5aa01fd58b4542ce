import logging
import time
from asyncio import Lock
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from hexabets.domain.mines import MinesBoard
from hexabets.services.commitment import DrawTicket
from hexabets.errors import InvalidParameters, StaleBoard


class SessionLocks:
    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self.locks: Dict[str, Lock] = {}  # one Lock per session id
        self.last_used: Dict[str, float] = {}
        self.lock = Lock()  # guards the locks dict itself
        self._clock = clock

    async def get_lock(self, session_id: str) -> Lock:
        """Get the Lock of the specified session, creating it on first use

        Args:
            session_id (str): Session identifier

        Returns:
            Lock: Lock serializing every request of that session
        """
        async with self.lock:
            if session_id not in self.locks:
                self.locks[session_id] = Lock()
            self.last_used[session_id] = self._clock()
            return self.locks[session_id]

    async def evict_idle(self, max_idle_seconds: float) -> List[str]:
        """Drop the locks of sessions unused for longer than ``max_idle_seconds``.

        A lock that is currently held is kept regardless of its age.
        """
        async with self.lock:
            now = self._clock()
            expired = [
                session_id
                for session_id, lock in self.locks.items()
                if not lock.locked() and now - self.last_used[session_id] > max_idle_seconds
            ]
            for session_id in expired:
                del self.locks[session_id]
                del self.last_used[session_id]
        if expired:
            logging.info(f"Released {len(expired)} idle session locks")
        return expired


@dataclass
class _StoredBoard:
    board: MinesBoard
    touched_at: float


class BoardStore:
    """One mines board per session.

    A board is created on demand, replaced by the next "new board" request and
    dropped on a mine hit or cashout. Boards idle longer than the TTL are evicted.
    Callers hold the session's lock from SessionLocks while mutating a board.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._boards: Dict[str, _StoredBoard] = {}
        self._clock = clock

    def put(self, session_id: str, board: MinesBoard) -> Optional[MinesBoard]:
        previous = self._boards.get(session_id)
        self._boards[session_id] = _StoredBoard(board, self._clock())
        return previous.board if previous else None

    def get(self, session_id: str) -> MinesBoard:
        """Return the live board of a session

        Raises:
            StaleBoard: There is no board, or it was forfeited
        """
        stored = self._boards.get(session_id)
        if stored is None or stored.board.forfeited:
            logging.warning(f"Stale board access: session={session_id}")
            raise StaleBoard("no active board, start a new one")
        stored.touched_at = self._clock()
        return stored.board

    def discard(self, session_id: str) -> Optional[MinesBoard]:
        stored = self._boards.pop(session_id, None)
        return stored.board if stored else None

    def evict_stale(self, max_idle_seconds: float) -> List[str]:
        now = self._clock()
        expired = [
            session_id
            for session_id, stored in self._boards.items()
            if now - stored.touched_at > max_idle_seconds
        ]
        for session_id in expired:
            del self._boards[session_id]
        if expired:
            logging.info(f"Evicted {len(expired)} idle mines boards")
        return expired

    def __len__(self) -> int:
        return len(self._boards)


class HandRegistry:
    """Hands dealt by a two-phase game, each playable once by the session that got it.

    The dealt ticket keeps its epoch's stream, so a hand finishes under the
    commitment it was dealt from even if the seed rotates in between.
    """

    def __init__(self):
        self._dealt: Dict[Tuple[str, str], DrawTicket] = {}

    def issue(self, session_id: str, game: str, ticket: DrawTicket):
        self._dealt[(session_id, game)] = ticket

    def get(self, session_id: str, game: str, nonce_base: int) -> DrawTicket:
        """Return the open hand dealt to this session

        Raises:
            InvalidParameters: Unknown or already played hand
        """
        ticket = self._dealt.get((session_id, game))
        if ticket is None or ticket.sequence_number != nonce_base:
            raise InvalidParameters(f"no open {game} hand for nonceBase {nonce_base}")
        return ticket

    def consume(self, session_id: str, game: str):
        self._dealt.pop((session_id, game), None)
