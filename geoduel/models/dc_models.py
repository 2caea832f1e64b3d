from typing import Any, List, Optional
from uuid import UUID

from geoduel.models.schema_models import (
    CamelModel,
    CoordinatesSchema,
    CorrectCountrySchema,
    GuessResultSchema,
    MatchStatus,
    PlayerResultSchema,
    RoundSummarySchema,
)


class ClientRoundModel(CamelModel):
    """What the client may see of a round before it is resolved."""

    round_index: int
    image_url: str


class ScoresModel(CamelModel):
    player: int
    ai: int


class GuessRequestModel(CamelModel):
    # Loosely typed on purpose: the engine reports bad values as invalid_request.
    match_id: Optional[Any] = None
    round_index: Optional[Any] = None
    guess: Optional[Any] = None


class StartMatchResponseModel(CamelModel):
    match_id: UUID
    total_rounds: int
    round: ClientRoundModel
    scores: ScoresModel
    status: MatchStatus


class GuessResponseModel(CamelModel):
    match_id: UUID
    round_index: int
    total_rounds: int
    player_result: Optional[PlayerResultSchema] = None
    ai_result: Optional[GuessResultSchema] = None
    correct_country: CorrectCountrySchema
    coordinates: CoordinatesSchema
    scores: ScoresModel
    status: MatchStatus
    history: List[RoundSummarySchema]
    next_round: Optional[ClientRoundModel] = None


class HealthModel(CamelModel):
    status: str
    timestamp: str


class AiTestResponseModel(GuessResultSchema):
    image_url: str
