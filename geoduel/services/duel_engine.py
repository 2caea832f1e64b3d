"""Round and match state machine for AI duels.

A match holds a fixed list of rounds fetched up front. Guesses must target
``current_round``; resolving a round scores both sides, appends a history
entry and either advances ``current_round`` or completes the match.
"""

import logging
from datetime import datetime
from typing import Any, Callable, Optional
from uuid import UUID

from uuid6 import uuid7

from geoduel.converter import DataConverter
from geoduel.domain.country_rules import match_guess
from geoduel.errors import (
    InvalidRequestError,
    MatchCompletedError,
    MatchNotFoundError,
    RoundNotFoundError,
    RoundOutOfSyncError,
)
from geoduel.models.dc_models import GuessResponseModel, StartMatchResponseModel
from geoduel.models.schema_models import (
    MatchSchema,
    MatchStatus,
    PlayerGuessSchema,
    RoundSchema,
)
from geoduel.models.settings_models import DuelSettings
from geoduel.services.image_source import ImageSource
from geoduel.services.inference import AiGuessClient
from geoduel.services.match_store import MatchStore

data_converter = DataConverter()


def is_valid_round_index(round_index: Any) -> bool:
    return (
        isinstance(round_index, (int, float))
        and not isinstance(round_index, bool)
        and round_index >= 0
    )


def parse_match_id(match_id: Any) -> Optional[UUID]:
    if isinstance(match_id, UUID):
        return match_id
    try:
        return UUID(str(match_id))
    except ValueError:
        return None


class DuelEngine:
    def __init__(
        self,
        settings: DuelSettings,
        store: MatchStore,
        image_source: ImageSource,
        ai_client: AiGuessClient,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.settings = settings
        self.store = store
        self.image_source = image_source
        self.ai_client = ai_client
        self.clock = clock

    async def create_round(self, round_index: int) -> RoundSchema:
        image = await self.image_source.next_image()
        return RoundSchema(
            index=round_index,
            image_url=image.image_url,
            coordinates=image.coordinates,
            country_name=image.country_name,
            country_code=image.country_code,
        )

    async def create_match(self) -> StartMatchResponseModel:
        """Fetch every round, register the match and return its first round

        Returns:
            StartMatchResponseModel: match_id, total_rounds, first round, zero scores and status
        """
        await self.store.prune_expired(self.clock())

        rounds = []
        for round_index in range(self.settings.ai_match_rounds):
            rounds.append(await self.create_round(round_index))

        match = MatchSchema(
            id=uuid7(),
            rounds=rounds,
            total_rounds=len(rounds),
            current_round=0,
            player_score=0,
            ai_score=0,
            status=MatchStatus.in_progress,
            created_at=self.clock(),
            history=[],
        )
        await self.store.put(match)
        logging.info(f"Started AI duel {match.id} with {match.total_rounds} rounds")
        return data_converter.build_start_payload(match)

    async def submit_guess(self, match_id: Any, round_index: Any, guess: Any) -> GuessResponseModel:
        """Resolve the current round of a match with the player's guess

        Args:
            match_id (Any): ID to identify this match, as sent by the client
            round_index (Any): Round the client believes is current
            guess (Any): Player's free-text guess; anything but a string counts as empty

        Raises:
            InvalidRequestError: match_id missing or round_index not a non-negative number
            MatchNotFoundError: Unknown or expired match
            MatchCompletedError: The match has already ended
            RoundOutOfSyncError: round_index is not the current round
            RoundNotFoundError: round_index is outside the match

        Returns:
            GuessResponseModel: Resolution payload for the round
        """
        if not match_id or not is_valid_round_index(round_index):
            raise InvalidRequestError()

        await self.store.prune_expired(self.clock())
        match_uuid = parse_match_id(match_id)
        match = await self.store.get(match_uuid) if match_uuid is not None else None
        if match is None:
            raise MatchNotFoundError()

        match_lock = await self.store.get_match_lock(match.id)
        if match_lock is None:
            raise MatchNotFoundError()
        async with match_lock:
            if match.status == MatchStatus.completed:
                raise MatchCompletedError(
                    scores=data_converter.scores(match).model_dump(),
                    history=data_converter.history_content(match),
                )

            if round_index != match.current_round:
                expected_round = data_converter.serialize_round_for_client(
                    match.rounds[match.current_round]
                )
                raise RoundOutOfSyncError(expected_round.model_dump(by_alias=True))

            if round_index >= len(match.rounds):
                raise RoundNotFoundError()

            round_data = match.rounds[int(round_index)]
            if not round_data.resolved:
                await self.resolve_round(match, round_data, guess)

            return data_converter.build_guess_payload(match, round_data)

    async def resolve_round(self, match: MatchSchema, round_data: RoundSchema, guess: Any) -> None:
        """Score both sides and move the match forward.

        The AI guess is fetched before any state changes, so the round is
        committed in one step.
        """
        player_guess = guess if isinstance(guess, str) else ""
        player_is_correct = match_guess(
            player_guess, round_data.country_name, round_data.country_code
        )

        ai_guess = round_data.ai_guess
        ai_scores = False
        if ai_guess is None:
            ai_guess = await self.ai_client.generate_guess(round_data)
            ai_scores = ai_guess.is_correct

        round_data.player = PlayerGuessSchema(guess=player_guess, is_correct=player_is_correct)
        round_data.ai_guess = ai_guess
        if player_is_correct:
            match.player_score += 1
        if ai_scores:
            match.ai_score += 1

        match.history.append(data_converter.build_round_summary(round_data))
        round_data.resolved = True

        if round_data.index + 1 >= match.total_rounds:
            match.status = MatchStatus.completed
        else:
            match.current_round = round_data.index + 1

        logging.info(
            f"Resolved round {round_data.index} of match {match.id}: "
            f"player={player_is_correct} ai={ai_guess.is_correct} "
            f"scores={match.player_score}-{match.ai_score} status={match.status.value}"
        )
