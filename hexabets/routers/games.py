import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header

from hexabets.domain.cards import BlackjackParams, HiLoParams
from hexabets.domain.games import (
    CoinflipParams,
    DiceParams,
    KenoParams,
    LimboParams,
    PlinkoParams,
    RouletteParams,
    WheelParams,
)
from hexabets.domain.mines import MinesBoard
from hexabets.errors import HexaBetsError
from hexabets.models.bet_models import (
    BalanceResponseModel,
    BetRequestModel,
    BetResponseModel,
    BlackjackDealResponseModel,
    BlackjackPlayRequestModel,
    CoinflipRequestModel,
    DealRequestModel,
    DiceRequestModel,
    HiLoDealResponseModel,
    HiLoGuessRequestModel,
    KenoRequestModel,
    LimboRequestModel,
    MinesBoardResponseModel,
    MinesNewRequestModel,
    MinesRevealRequestModel,
    PlinkoRequestModel,
    RouletteRequestModel,
    WheelRequestModel,
)
from hexabets.routers.errors import to_http_exception
from hexabets.services.betting import Settlement
from hexabets.shared_state import bet_service, wallet

game_router = APIRouter(prefix="/api")


def get_session_id(x_session_id: Optional[str] = Header(default=None)) -> str:
    return x_session_id or "guest"


def to_response(settlement: Settlement) -> BetResponseModel:
    return BetResponseModel(
        game=settlement.game,
        outcome=settlement.result.outcome,
        won=settlement.result.won,
        push=settlement.result.push,
        payout=settlement.result.payout,
        balance=settlement.balance,
        nonce=settlement.sequence_number,
        commit_hash=settlement.commit_hash,
        player_seed=settlement.player_seed,
    )


async def place(session_id: str, game: str, request: BetRequestModel, params) -> BetResponseModel:
    try:
        settlement = await bet_service.place(
            session_id,
            game,
            request.bet,
            params,
            player_seed=request.player_seed,
            sequence_number=request.nonce,
        )
    except HexaBetsError as e:
        logging.info(f"Rejected {game} bet from {session_id}: {e}")
        raise to_http_exception(e)
    return to_response(settlement)


def board_response(board: MinesBoard, balance: float, boom: bool = False) -> MinesBoardResponseModel:
    over = boom or board.cleared
    return MinesBoardResponseModel(
        boom=boom,
        safe_count=len(board.revealed_cells),
        multiplier=board.multiplier,
        payout=0.0 if boom else board.payout,
        balance=balance,
        nonce=board.sequence_number,
        commit_hash=board.commit_hash,
        mines=[list(cell) for cell in sorted(board.mined_cells)] if over else None,
    )


class WalletAPI:
    @staticmethod
    @game_router.get("/balance", response_model=BalanceResponseModel)
    async def get_balance(session_id: str = Depends(get_session_id)):
        return BalanceResponseModel(session=session_id, balance=wallet.balance(session_id))


class SingleDrawAPI:
    @staticmethod
    @game_router.post("/dice", response_model=BetResponseModel)
    async def dice(request: DiceRequestModel, session_id: str = Depends(get_session_id)):
        return await place(session_id, "dice", request, DiceParams(target=request.target, over=request.over))

    @staticmethod
    @game_router.post("/coinflip", response_model=BetResponseModel)
    async def coinflip(request: CoinflipRequestModel, session_id: str = Depends(get_session_id)):
        return await place(session_id, "coinflip", request, CoinflipParams(pick=request.pick))

    @staticmethod
    @game_router.post("/limbo", response_model=BetResponseModel)
    async def limbo(request: LimboRequestModel, session_id: str = Depends(get_session_id)):
        return await place(session_id, "limbo", request, LimboParams(target=request.target))

    @staticmethod
    @game_router.post("/roulette", response_model=BetResponseModel)
    async def roulette(request: RouletteRequestModel, session_id: str = Depends(get_session_id)):
        params = RouletteParams(type=request.type, number=request.number)
        return await place(session_id, "roulette", request, params)

    @staticmethod
    @game_router.post("/plinko", response_model=BetResponseModel)
    async def plinko(request: PlinkoRequestModel, session_id: str = Depends(get_session_id)):
        return await place(session_id, "plinko", request, PlinkoParams())

    @staticmethod
    @game_router.post("/keno", response_model=BetResponseModel)
    async def keno(request: KenoRequestModel, session_id: str = Depends(get_session_id)):
        return await place(session_id, "keno", request, KenoParams(picks=list(request.picks)))

    @staticmethod
    @game_router.post("/wheel", response_model=BetResponseModel)
    async def wheel(request: WheelRequestModel, session_id: str = Depends(get_session_id)):
        return await place(session_id, "wheel", request, WheelParams())


class CardAPI:
    @staticmethod
    @game_router.post("/hilo/start", response_model=HiLoDealResponseModel)
    async def hilo_start(request: DealRequestModel, session_id: str = Depends(get_session_id)):
        ticket, current = await bet_service.deal_hilo(session_id, request.player_seed)
        return HiLoDealResponseModel(
            current=current, nonce_base=ticket.sequence_number, commit_hash=ticket.commit_hash
        )

    @staticmethod
    @game_router.post("/hilo/guess", response_model=BetResponseModel)
    async def hilo_guess(request: HiLoGuessRequestModel, session_id: str = Depends(get_session_id)):
        try:
            settlement = await bet_service.play_hilo(
                session_id, request.bet, request.nonce_base, HiLoParams(guess=request.guess)
            )
        except HexaBetsError as e:
            raise to_http_exception(e)
        return to_response(settlement)

    @staticmethod
    @game_router.post("/blackjack/start", response_model=BlackjackDealResponseModel)
    async def blackjack_start(request: DealRequestModel, session_id: str = Depends(get_session_id)):
        ticket, player, dealer = await bet_service.deal_blackjack(session_id, request.player_seed)
        # only the dealer's up card is shown before play
        return BlackjackDealResponseModel(
            player=player,
            dealer=dealer[:1],
            nonce_base=ticket.sequence_number,
            commit_hash=ticket.commit_hash,
        )

    @staticmethod
    @game_router.post("/blackjack/play", response_model=BetResponseModel)
    async def blackjack_play(request: BlackjackPlayRequestModel, session_id: str = Depends(get_session_id)):
        try:
            settlement = await bet_service.play_blackjack(
                session_id, request.bet, request.nonce_base, BlackjackParams(actions=list(request.actions))
            )
        except HexaBetsError as e:
            raise to_http_exception(e)
        return to_response(settlement)


class MinesAPI:
    @staticmethod
    @game_router.post("/mines/new", response_model=MinesBoardResponseModel)
    async def new_board(request: MinesNewRequestModel, session_id: str = Depends(get_session_id)):
        try:
            board, balance = await bet_service.new_mines_board(
                session_id, request.bet, request.player_seed, request.nonce
            )
        except HexaBetsError as e:
            raise to_http_exception(e)
        return board_response(board, balance)

    @staticmethod
    @game_router.post("/mines/reveal", response_model=MinesBoardResponseModel)
    async def reveal(request: MinesRevealRequestModel, session_id: str = Depends(get_session_id)):
        try:
            board, safe = await bet_service.reveal_mine(session_id, request.x, request.y)
        except HexaBetsError as e:
            raise to_http_exception(e)
        return board_response(board, wallet.balance(session_id), boom=not safe)

    @staticmethod
    @game_router.post("/mines/cashout", response_model=MinesBoardResponseModel)
    async def cashout(session_id: str = Depends(get_session_id)):
        try:
            board, payout, balance = await bet_service.cashout_mines(session_id)
        except HexaBetsError as e:
            raise to_http_exception(e)
        response = board_response(board, balance)
        response.mines = [list(cell) for cell in sorted(board.mined_cells)]
        return response
