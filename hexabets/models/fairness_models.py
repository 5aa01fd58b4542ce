from pydantic import BaseModel, Field
from typing import Optional


class CommitmentModel(BaseModel):
    commit_hash: str = Field(alias="commitHash")
    player_seed_default: str = Field(alias="playerSeedDefault")

    class Config:
        populate_by_name = True


class RotationModel(BaseModel):
    revealed_seed: str = Field(alias="revealedSeed")
    new_commit_hash: str = Field(alias="newCommitHash")

    class Config:
        populate_by_name = True


class VerifyRequestModel(BaseModel):
    revealed_seed: str = Field(alias="revealedSeed")
    player_seed: str = Field(alias="playerSeed")
    nonce: int = Field(ge=0)
    commit_hash: Optional[str] = Field(default=None, alias="commitHash")

    class Config:
        populate_by_name = True


class VerifyResponseModel(BaseModel):
    fraction: float
    commitment_matches: Optional[bool] = Field(default=None, alias="commitmentMatches")

    class Config:
        populate_by_name = True
