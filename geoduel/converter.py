from typing import List, Optional

from geoduel.domain.country_rules import normalize_country
from geoduel.models.dc_models import (
    ClientRoundModel,
    GuessResponseModel,
    ScoresModel,
    StartMatchResponseModel,
)
from geoduel.models.schema_models import (
    CorrectCountrySchema,
    GuessResultSchema,
    MatchSchema,
    MatchStatus,
    PlayerResultSchema,
    RoundSchema,
    RoundSummarySchema,
)


class DataConverter:
    """This class is used to convert stored match state into client payloads.

    Fields are passed explicitly everywhere: the guess endpoint drops unset
    fields, so an omitted ``next_round`` or ``fallback_reason`` is left out of
    the JSON rather than sent as null.
    """

    def serialize_round_for_client(self, round_data: Optional[RoundSchema]) -> Optional[ClientRoundModel]:
        """Only the index and the image; ground truth stays on the server until resolution."""
        if round_data is None:
            return None
        return ClientRoundModel(round_index=round_data.index, image_url=round_data.image_url)

    def scores(self, match: MatchSchema) -> ScoresModel:
        return ScoresModel(player=match.player_score, ai=match.ai_score)

    def correct_country(self, round_data: RoundSchema) -> CorrectCountrySchema:
        return CorrectCountrySchema(name=round_data.country_name, code=round_data.country_code)

    def build_player_result(self, round_data: RoundSchema) -> Optional[PlayerResultSchema]:
        if round_data.player is None:
            return None
        return PlayerResultSchema(
            guess=round_data.player.guess,
            normalized_guess=normalize_country(round_data.player.guess),
            is_correct=round_data.player.is_correct,
        )

    def build_round_summary(self, round_data: RoundSchema) -> RoundSummarySchema:
        """Convert a resolved round to its history entry

        Args:
            round_data (RoundSchema): Round that has just been resolved

        Returns:
            RoundSummarySchema: Truth, both guesses and the AI candidates of the round
        """
        ai_guess = round_data.ai_guess
        ai_summary = None
        if ai_guess is not None:
            ai_summary = GuessResultSchema(
                country_name=ai_guess.country_name,
                confidence=ai_guess.confidence,
                explanation=ai_guess.explanation,
                is_correct=ai_guess.is_correct,
                candidates=list(ai_guess.candidates),
                fallback_reason=ai_guess.fallback_reason,
            )
        return RoundSummarySchema(
            round_index=round_data.index,
            correct_country=self.correct_country(round_data),
            coordinates=round_data.coordinates,
            player=self.build_player_result(round_data),
            ai=ai_summary,
        )

    def history_content(self, match: MatchSchema) -> List[dict]:
        return [summary.model_dump(by_alias=True, mode="json") for summary in match.history]

    def build_start_payload(self, match: MatchSchema) -> StartMatchResponseModel:
        return StartMatchResponseModel(
            match_id=match.id,
            total_rounds=match.total_rounds,
            round=self.serialize_round_for_client(match.rounds[0]),
            scores=self.scores(match),
            status=match.status,
        )

    def build_guess_payload(self, match: MatchSchema, round_data: RoundSchema) -> GuessResponseModel:
        """Convert the match state after a guess into the response for the client

        Args:
            match (MatchSchema): Match the round belongs to
            round_data (RoundSchema): The round the guess was submitted for

        Returns:
            GuessResponseModel: Resolution payload; ``next_round`` only while the match is in progress
        """
        fields = dict(
            match_id=match.id,
            round_index=round_data.index,
            total_rounds=match.total_rounds,
            player_result=self.build_player_result(round_data),
            ai_result=round_data.ai_guess,
            correct_country=self.correct_country(round_data),
            coordinates=round_data.coordinates,
            scores=self.scores(match),
            status=match.status,
            history=list(match.history),
        )
        if match.status != MatchStatus.completed:
            fields["next_round"] = self.serialize_round_for_client(match.rounds[match.current_round])
        return GuessResponseModel(**fields)
