import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from hexabets.domain.cards import (
    BLACKJACK_DRAWS,
    HILO_DRAWS,
    BlackjackParams,
    HiLoParams,
    deal_blackjack,
    deal_hilo,
    resolve_blackjack,
    resolve_hilo,
)
from hexabets.domain.games import GAMES, GameResult
from hexabets.domain.mines import MINE_COUNT, MinesBoard, place_mines
from hexabets.errors import InvalidBet, InvalidParameters
from hexabets.services.commitment import CommitmentManager, DrawTicket
from hexabets.services.sessions import BoardStore, HandRegistry, SessionLocks
from hexabets.services.wallet import InMemoryWallet


@dataclass(frozen=True)
class Settlement:
    game: str
    result: GameResult
    sequence_number: int
    commit_hash: str
    player_seed: str
    balance: float


class BetService:
    """Runs one bet from request to balance delta.

    Order per bet: validate parameters, take the session lock, check funds,
    snapshot the commitment and settle the sequence number, resolve, then hand
    the signed delta to the wallet. Parameter errors never consume a sequence number.
    """

    def __init__(
        self,
        commitments: CommitmentManager,
        wallet: InMemoryWallet,
        default_player_seed: str = "client",
        session_locks: Optional[SessionLocks] = None,
        boards: Optional[BoardStore] = None,
        hands: Optional[HandRegistry] = None,
    ):
        self.commitments = commitments
        self.wallet = wallet
        self.default_player_seed = default_player_seed
        self.session_locks = session_locks or SessionLocks()
        self.boards = boards or BoardStore()
        self.hands = hands or HandRegistry()

    def _player_seed(self, player_seed: Optional[str]) -> str:
        return player_seed or self.default_player_seed

    def _settle(self, session_id: str, game: str, bet_amount: float, ticket: DrawTicket, result: GameResult) -> Settlement:
        balance = self.wallet.apply(session_id, result.balance_delta(bet_amount))
        logging.debug(
            f"Resolved {game}: session={session_id} nonce={ticket.sequence_number} "
            f"won={result.won} payout={result.payout}"
        )
        return Settlement(
            game=game,
            result=result,
            sequence_number=ticket.sequence_number,
            commit_hash=ticket.commit_hash,
            player_seed=ticket.stream.player_seed,
            balance=balance,
        )

    async def place(
        self,
        session_id: str,
        game: str,
        bet_amount: float,
        params,
        player_seed: Optional[str] = None,
        sequence_number: Optional[int] = None,
    ) -> Settlement:
        """Resolve a single-draw game and apply its balance delta

        Args:
            session_id (str): Session placing the bet
            game (str): Key of hexabets.domain.games.GAMES
            bet_amount (float): Stake
            params: Parameters dataclass of that game
            player_seed (Optional[str]): Player seed, the configured default when None
            sequence_number (Optional[int]): Caller-chosen sequence number, allocated when None

        Returns:
            Settlement: result, sequence number and new balance
        """
        definition = GAMES.get(game)
        if definition is None:
            raise InvalidParameters(f"unknown game: {game}")
        params.validate()

        lock = await self.session_locks.get_lock(session_id)
        async with lock:
            self.wallet.ensure_funds(session_id, bet_amount)
            ticket = self.commitments.open_draw(
                self._player_seed(player_seed), sequence_number, count=definition.draws
            )
            result = definition.resolve(bet_amount, ticket.stream, ticket.sequence_number, params)
            return self._settle(session_id, game, bet_amount, ticket, result)

    # ==== Two-phase card games =================================================

    async def deal_hilo(self, session_id: str, player_seed: Optional[str] = None) -> Tuple[DrawTicket, dict]:
        lock = await self.session_locks.get_lock(session_id)
        async with lock:
            ticket = self.commitments.open_draw(self._player_seed(player_seed), count=HILO_DRAWS)
            self.hands.issue(session_id, "hilo", ticket)
        return ticket, deal_hilo(ticket.stream, ticket.sequence_number)

    async def play_hilo(self, session_id: str, bet_amount: float, nonce_base: int, params: HiLoParams) -> Settlement:
        params.validate()
        lock = await self.session_locks.get_lock(session_id)
        async with lock:
            ticket = self.hands.get(session_id, "hilo", nonce_base)
            self.wallet.ensure_funds(session_id, bet_amount)
            self.hands.consume(session_id, "hilo")
            result = resolve_hilo(bet_amount, ticket.stream, ticket.sequence_number, params)
            return self._settle(session_id, "hilo", bet_amount, ticket, result)

    async def deal_blackjack(self, session_id: str, player_seed: Optional[str] = None):
        lock = await self.session_locks.get_lock(session_id)
        async with lock:
            ticket = self.commitments.open_draw(self._player_seed(player_seed), count=BLACKJACK_DRAWS)
            self.hands.issue(session_id, "blackjack", ticket)
        player, dealer = deal_blackjack(ticket.stream, ticket.sequence_number)
        return ticket, player, dealer

    async def play_blackjack(
        self, session_id: str, bet_amount: float, nonce_base: int, params: BlackjackParams
    ) -> Settlement:
        params.validate()
        lock = await self.session_locks.get_lock(session_id)
        async with lock:
            ticket = self.hands.get(session_id, "blackjack", nonce_base)
            self.wallet.ensure_funds(session_id, bet_amount)
            self.hands.consume(session_id, "blackjack")
            result = resolve_blackjack(bet_amount, ticket.stream, ticket.sequence_number, params)
            return self._settle(session_id, "blackjack", bet_amount, ticket, result)

    # ==== Mines ================================================================

    async def new_mines_board(
        self,
        session_id: str,
        bet_amount: float,
        player_seed: Optional[str] = None,
        sequence_number: Optional[int] = None,
    ) -> Tuple[MinesBoard, float]:
        """Debit the stake and lay out a fresh board, replacing any previous one."""
        lock = await self.session_locks.get_lock(session_id)
        async with lock:
            self.wallet.ensure_funds(session_id, bet_amount)
            ticket = self.commitments.open_draw(self._player_seed(player_seed), sequence_number, count=MINE_COUNT)
            board = MinesBoard(
                bet_amount=bet_amount,
                mined_cells=place_mines(ticket.stream, ticket.sequence_number),
                sequence_number=ticket.sequence_number,
                commit_hash=ticket.commit_hash,
            )
            self.boards.put(session_id, board)
            balance = self.wallet.apply(session_id, -bet_amount)
        return board, balance

    async def reveal_mine(self, session_id: str, x: int, y: int) -> Tuple[MinesBoard, bool]:
        lock = await self.session_locks.get_lock(session_id)
        async with lock:
            board = self.boards.get(session_id)
            safe = board.reveal(x, y)
            if not safe:
                self.boards.discard(session_id)
                logging.debug(f"Mine hit: session={session_id} cell=({x}, {y})")
        return board, safe

    async def cashout_mines(self, session_id: str) -> Tuple[MinesBoard, float, float]:
        lock = await self.session_locks.get_lock(session_id)
        async with lock:
            board = self.boards.get(session_id)
            if not board.revealed_cells:
                raise InvalidBet("reveal at least one cell before cashing out")
            self.boards.discard(session_id)
            payout = board.payout
            balance = self.wallet.apply(session_id, payout)
        return board, payout, balance

    async def evict_idle_sessions(self, max_idle_seconds: float):
        """Drop idle boards and the locks of idle sessions.

        An evicted board's stake was debited at creation and stays forfeited.
        Runs on the event loop, so it never interleaves with a board mutation.
        """
        self.boards.evict_stale(max_idle_seconds)
        await self.session_locks.evict_idle(max_idle_seconds)
