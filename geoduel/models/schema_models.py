from pydantic import BaseModel
from pydantic.alias_generators import to_camel
from enum import Enum
from typing import List, Optional
from uuid import UUID
from datetime import datetime


class CamelModel(BaseModel):
    """Base for every model that crosses the wire; fields are camelCase in JSON."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


class FallbackReason(str, Enum):
    missing_api_key = "missing_api_key"
    request_failure = "request_failure"
    bad_response = "bad_response"
    empty_response = "empty_response"
    parse_error = "parse_error"
    invalid_payload = "invalid_payload"


class MatchStatus(str, Enum):
    in_progress = "in-progress"
    completed = "completed"


class CoordinatesSchema(CamelModel):
    lat: float
    lon: float


class ImagePayloadSchema(CamelModel):
    image_url: str
    coordinates: CoordinatesSchema
    country_name: str
    country_code: Optional[str] = None


class ProposedGuessSchema(BaseModel):
    """A model-supplied guess after validation, before it is scored."""

    country_name: str
    confidence: Optional[float] = None
    explanation: str


class GuessCandidateSchema(CamelModel):
    country_name: str
    confidence: float
    explanation: str
    is_correct: bool


class GuessResultSchema(CamelModel):
    country_name: str
    confidence: float
    explanation: str
    is_correct: bool
    candidates: List[GuessCandidateSchema]
    fallback_reason: Optional[FallbackReason] = None


class PlayerGuessSchema(CamelModel):
    guess: str
    is_correct: bool


class PlayerResultSchema(CamelModel):
    guess: str
    normalized_guess: str
    is_correct: bool


class CorrectCountrySchema(CamelModel):
    name: str
    code: Optional[str] = None


class RoundSummarySchema(CamelModel):
    round_index: int
    correct_country: CorrectCountrySchema
    coordinates: CoordinatesSchema
    player: Optional[PlayerResultSchema] = None
    ai: Optional[GuessResultSchema] = None


class RoundSchema(BaseModel):
    index: int
    image_url: str
    coordinates: CoordinatesSchema
    country_name: str
    country_code: Optional[str] = None
    resolved: bool = False
    player: Optional[PlayerGuessSchema] = None
    ai_guess: Optional[GuessResultSchema] = None


class MatchSchema(BaseModel):
    id: UUID
    rounds: List[RoundSchema]
    total_rounds: int
    current_round: int = 0
    player_score: int = 0
    ai_score: int = 0
    status: MatchStatus = MatchStatus.in_progress
    created_at: datetime
    history: List[RoundSummarySchema] = []
