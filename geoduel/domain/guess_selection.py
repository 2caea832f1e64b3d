"""Turning AI candidate guesses into the one guess the opponent plays.

Two paths produce the same ``GuessResultSchema`` shape:

- model path: validated model output, scored against the truth, then a
  weighted draw by confidence;
- fallback path: the true country plus random countries from a fixed pool,
  then a uniform draw.
"""

from typing import Any, List, Optional, Sequence, Union

import numpy as np

from geoduel.domain.country_rules import match_guess
from geoduel.models.schema_models import (
    FallbackReason,
    GuessCandidateSchema,
    GuessResultSchema,
    ProposedGuessSchema,
)

DEFAULT_EXPLANATION = "Guess derived from the model output."
CORRECT_DEFAULT_CONFIDENCE = 0.8
INCORRECT_DEFAULT_CONFIDENCE = 0.45

FALLBACK_CORRECT_CONFIDENCE = 0.85
FALLBACK_RANDOM_CONFIDENCE = 0.35
FALLBACK_CANDIDATE_COUNT = 3
FALLBACK_COUNTRY_POOL = [
    "Brazil",
    "United States",
    "Canada",
    "France",
    "Germany",
    "South Africa",
    "Australia",
    "Japan",
    "India",
    "Argentina",
]
FALLBACK_CORRECT_EXPLANATION = "Correct country included to keep fallback behaviour plausible."
FALLBACK_MISSING_KEY_EXPLANATION = (
    "Random fallback guess because no inference API key is configured."
)
FALLBACK_FAILED_REQUEST_EXPLANATION = (
    "Random fallback guess because the inference request failed ({reason})."
)


def validate_proposed_guesses(payload: Any) -> List[ProposedGuessSchema]:
    """Keep the usable entries of a ``{"guesses": [...]}`` payload.

    Args:
        payload (Any): Parsed JSON returned by the model

    Returns:
        List[ProposedGuessSchema]: Entries with a non-empty countryName, in model order.
            Empty when the payload is not an object holding a guesses list.
    """
    guesses = payload.get("guesses") if isinstance(payload, dict) else None
    if not isinstance(guesses, list):
        return []

    proposals = []
    for guess in guesses:
        if not isinstance(guess, dict):
            continue
        country_name = guess.get("countryName")
        if not isinstance(country_name, str) or not country_name.strip():
            continue

        explanation = guess.get("explanation")
        if not isinstance(explanation, str) or not explanation.strip():
            explanation = DEFAULT_EXPLANATION

        confidence = guess.get("confidence")
        if (
            isinstance(confidence, (int, float))
            and not isinstance(confidence, bool)
            and confidence >= 0
        ):
            confidence = float(min(confidence, 1))
        else:
            confidence = None

        proposals.append(
            ProposedGuessSchema(
                country_name=country_name.strip(),
                confidence=confidence,
                explanation=explanation.strip(),
            )
        )
    return proposals


def decorate_candidates(
    proposals: Sequence[ProposedGuessSchema],
    country_name: Optional[str],
    country_code: Optional[str],
) -> List[GuessCandidateSchema]:
    """Score each proposal against the truth and give it a definite confidence."""
    candidates = []
    for proposal in proposals:
        is_correct = match_guess(proposal.country_name, country_name, country_code)
        confidence = proposal.confidence
        if confidence is None:
            confidence = CORRECT_DEFAULT_CONFIDENCE if is_correct else INCORRECT_DEFAULT_CONFIDENCE
        candidates.append(
            GuessCandidateSchema(
                country_name=proposal.country_name,
                confidence=confidence,
                explanation=proposal.explanation,
                is_correct=is_correct,
            )
        )
    return candidates


def weighted_choice(
    candidates: Sequence[GuessCandidateSchema], rng: np.random.Generator
) -> GuessCandidateSchema:
    """Draw one candidate with probability proportional to its confidence.

    The draw is uniform in [0, total) and the first candidate whose running
    total is strictly greater than the draw wins. If rounding leaves nothing
    selected the first candidate is returned.
    """
    total_weight = sum(candidate.confidence for candidate in candidates)
    draw = float(rng.random()) * total_weight
    cumulative = 0.0
    for candidate in candidates:
        cumulative += candidate.confidence
        if draw < cumulative:
            return candidate
    return candidates[0]


def build_model_guess(
    proposals: Sequence[ProposedGuessSchema],
    country_name: Optional[str],
    country_code: Optional[str],
    rng: np.random.Generator,
) -> GuessResultSchema:
    candidates = decorate_candidates(proposals, country_name, country_code)
    chosen = weighted_choice(candidates, rng)
    return GuessResultSchema(
        country_name=chosen.country_name,
        confidence=chosen.confidence,
        explanation=chosen.explanation,
        is_correct=chosen.is_correct,
        candidates=candidates,
    )


def _coerce_reason(reason: Union[FallbackReason, str]) -> FallbackReason:
    try:
        return FallbackReason(reason)
    except ValueError:
        return FallbackReason.request_failure


def synthesize_fallback_guess(
    country_name: Optional[str],
    country_code: Optional[str],
    reason: Union[FallbackReason, str],
    rng: np.random.Generator,
) -> GuessResultSchema:
    """Produce a guess without the model.

    The true country is always one of the three candidates so a duel against
    the fallback opponent stays winnable for both sides.

    Args:
        country_name (Optional[str]): Ground-truth country name of the round
        country_code (Optional[str]): Ground-truth ISO code of the round
        reason (Union[FallbackReason, str]): Why the model path was skipped
        rng (np.random.Generator): Source of the pool picks and the final draw

    Returns:
        GuessResultSchema: Three unique candidates, one picked uniformly, with fallback_reason set
    """
    fallback_reason = _coerce_reason(reason)
    if fallback_reason == FallbackReason.missing_api_key:
        random_explanation = FALLBACK_MISSING_KEY_EXPLANATION
    else:
        random_explanation = FALLBACK_FAILED_REQUEST_EXPLANATION.format(
            reason=fallback_reason.value
        )

    candidates: List[GuessCandidateSchema] = []
    seen = set()

    if country_name:
        seen.add(country_name)
        candidates.append(
            GuessCandidateSchema(
                country_name=country_name,
                confidence=FALLBACK_CORRECT_CONFIDENCE,
                explanation=FALLBACK_CORRECT_EXPLANATION,
                is_correct=match_guess(country_name, country_name, country_code),
            )
        )

    while len(candidates) < FALLBACK_CANDIDATE_COUNT:
        guess = FALLBACK_COUNTRY_POOL[int(rng.integers(len(FALLBACK_COUNTRY_POOL)))]
        if guess in seen:
            continue
        seen.add(guess)
        candidates.append(
            GuessCandidateSchema(
                country_name=guess,
                confidence=FALLBACK_RANDOM_CONFIDENCE,
                explanation=random_explanation,
                is_correct=match_guess(guess, country_name, country_code),
            )
        )

    chosen = candidates[int(rng.integers(len(candidates)))]
    return GuessResultSchema(
        country_name=chosen.country_name,
        confidence=chosen.confidence,
        explanation=chosen.explanation,
        is_correct=chosen.is_correct,
        candidates=candidates,
        fallback_reason=fallback_reason,
    )
