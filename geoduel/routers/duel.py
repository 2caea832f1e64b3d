import logging

from fastapi import APIRouter, Depends, status

from geoduel.authentication.app_check import verify_app_check
from geoduel.dependencies import get_duel_engine
from geoduel.errors import DuelError
from geoduel.models.dc_models import (
    GuessRequestModel,
    GuessResponseModel,
    StartMatchResponseModel,
)
from geoduel.services.duel_engine import DuelEngine

duel_router = APIRouter(dependencies=[Depends(verify_app_check)])


class DuelServer:
    @staticmethod
    @duel_router.post("/ai-duel/start", response_model=StartMatchResponseModel)
    async def start_match(
        engine: DuelEngine = Depends(get_duel_engine),
    ) -> StartMatchResponseModel:
        """Create a match and send its first round to the client

        Returns:
            StartMatchResponseModel: match_id, total_rounds, first round (index and image only),
                scores and status
        """
        try:
            return await engine.create_match()
        except DuelError:
            raise
        except Exception:
            logging.exception("Failed to start AI duel")
            raise DuelError(status.HTTP_500_INTERNAL_SERVER_ERROR, "ai_duel_start_failed")

    @staticmethod
    @duel_router.post(
        "/ai-duel/guess",
        response_model=GuessResponseModel,
        response_model_exclude_unset=True,
    )
    async def submit_guess(
        guess_request: GuessRequestModel,
        engine: DuelEngine = Depends(get_duel_engine),
    ) -> GuessResponseModel:
        """Receive the player's guess for the current round

        Args:
            guess_request (GuessRequestModel): matchId, roundIndex and guess sent by the client

        Returns:
            GuessResponseModel: Both results, the truth, scores, history and the next round
        """
        try:
            return await engine.submit_guess(
                guess_request.match_id, guess_request.round_index, guess_request.guess
            )
        except DuelError:
            raise
        except Exception:
            logging.exception("Failed to process AI duel guess")
            raise DuelError(status.HTTP_500_INTERNAL_SERVER_ERROR, "ai_duel_guess_failed")
