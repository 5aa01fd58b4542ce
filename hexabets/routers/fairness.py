import logging

from fastapi import APIRouter, HTTPException, status

from hexabets import load_settings
from hexabets.domain.fairness import verify_commitment, verify_fraction
from hexabets.models.fairness_models import (
    CommitmentModel,
    RotationModel,
    VerifyRequestModel,
    VerifyResponseModel,
)
from hexabets.shared_state import commitments

fairness_router = APIRouter(prefix="/api/seed")


class SeedAPI:
    @staticmethod
    @fairness_router.get("", response_model=CommitmentModel)
    async def get_commitment():
        return CommitmentModel(
            commit_hash=commitments.get_commitment(),
            player_seed_default=load_settings.default_player_seed,
        )

    @staticmethod
    @fairness_router.post("/rotate", response_model=RotationModel)
    async def rotate():
        """Reveal the retired seed and publish the new commitment.

        Every draw made before this call can now be recomputed from ``revealedSeed``.
        """
        rotation = commitments.rotate()
        return RotationModel(
            revealed_seed=rotation.revealed_seed,
            new_commit_hash=rotation.new_commit_hash,
        )

    @staticmethod
    @fairness_router.post("/verify", response_model=VerifyResponseModel)
    async def verify(request: VerifyRequestModel):
        if not request.revealed_seed:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="revealedSeed is required")
        fraction = verify_fraction(request.revealed_seed, request.player_seed, request.nonce)
        matches = None
        if request.commit_hash is not None:
            matches = verify_commitment(request.revealed_seed, request.commit_hash)
            logging.info(f"Verification request: commit_hash={request.commit_hash} matches={matches}")
        return VerifyResponseModel(fraction=fraction, commitment_matches=matches)
