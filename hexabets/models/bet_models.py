from pydantic import BaseModel, Field
from typing import Optional, List


class BetRequestModel(BaseModel):
    bet: float = Field(default=0, allow_inf_nan=False)
    player_seed: Optional[str] = Field(default=None, alias="playerSeed")
    nonce: Optional[int] = Field(default=None, ge=0)

    class Config:
        populate_by_name = True


class DiceRequestModel(BetRequestModel):
    target: float = 50.0
    over: bool = False


class CoinflipRequestModel(BetRequestModel):
    pick: str = "heads"


class LimboRequestModel(BetRequestModel):
    target: float = 2.0


class RouletteRequestModel(BetRequestModel):
    type: str = "red"
    number: Optional[int] = None


class PlinkoRequestModel(BetRequestModel):
    pass


class KenoRequestModel(BetRequestModel):
    picks: List[int] = []


class WheelRequestModel(BetRequestModel):
    pass


class BetResponseModel(BaseModel):
    game: str
    outcome: dict
    won: bool
    push: bool = False
    payout: float
    balance: float
    nonce: int
    commit_hash: str = Field(alias="commitHash")
    player_seed: str = Field(alias="playerSeed")

    class Config:
        populate_by_name = True


class DealRequestModel(BaseModel):
    player_seed: Optional[str] = Field(default=None, alias="playerSeed")

    class Config:
        populate_by_name = True


class HiLoDealResponseModel(BaseModel):
    current: dict
    nonce_base: int = Field(alias="nonceBase")
    commit_hash: str = Field(alias="commitHash")

    class Config:
        populate_by_name = True


class HiLoGuessRequestModel(BaseModel):
    bet: float = Field(default=0, allow_inf_nan=False)
    guess: str = "higher"
    nonce_base: int = Field(alias="nonceBase")

    class Config:
        populate_by_name = True


class BlackjackDealResponseModel(BaseModel):
    player: List[int]
    dealer: List[int]
    nonce_base: int = Field(alias="nonceBase")
    commit_hash: str = Field(alias="commitHash")

    class Config:
        populate_by_name = True


class BlackjackPlayRequestModel(BaseModel):
    bet: float = Field(default=0, allow_inf_nan=False)
    nonce_base: int = Field(alias="nonceBase")
    actions: List[str] = []

    class Config:
        populate_by_name = True


class MinesNewRequestModel(BetRequestModel):
    pass


class MinesRevealRequestModel(BaseModel):
    x: int
    y: int


class MinesBoardResponseModel(BaseModel):
    boom: bool = False
    safe_count: int = Field(default=0, alias="safeCount")
    multiplier: float
    payout: float
    balance: float
    nonce: int
    commit_hash: str = Field(alias="commitHash")
    mines: Optional[List[List[int]]] = None  # revealed only once the board is over

    class Config:
        populate_by_name = True


class BalanceResponseModel(BaseModel):
    session: str
    balance: float
