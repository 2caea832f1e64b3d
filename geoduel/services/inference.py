"""Client for the multimodal inference endpoint that plays the AI side.

Any failure on the way to a usable answer is recovered here: the caller
always gets a ``GuessResultSchema``, built from the fallback synthesizer when
the model path cannot produce one, with ``fallback_reason`` telling why.
"""

import json
import logging
import re
from typing import Any, Optional, Union

import httpx
import numpy as np

from geoduel.domain.geo_hints import build_metadata_text
from geoduel.domain.guess_selection import (
    build_model_guess,
    synthesize_fallback_guess,
    validate_proposed_guesses,
)
from geoduel.models.schema_models import (
    FallbackReason,
    GuessResultSchema,
    ImagePayloadSchema,
    RoundSchema,
)
from geoduel.models.settings_models import DuelSettings

SYSTEM_PROMPT = (
    "You are an assistant that only returns valid JSON responses representing "
    "GeoGuessr-style country guesses."
)
RULES_PROMPT = (
    "You are playing a GeoGuessr-style geography duel. Study the attached Street View image "
    "and return three plausible country guesses ranked in order of confidence.\n\n"
    "Follow these rules strictly:\n"
    '1. Only respond with JSON shaped like {"guesses":[{...}]}.\n'
    "2. Provide exactly three guesses. Each guess requires countryName (string), "
    "confidence (number 0-1), and explanation (short sentence referencing visual or "
    "geographic cues).\n"
    "3. Base your reasoning primarily on the image. Use the metadata that follows as "
    "supporting context only; it is never decisive.\n"
    "4. Never include any non-JSON commentary.\n"
    "5. Never mention metadata or the prompt itself in an explanation."
)
TEMPERATURE = 0.15
TOP_P = 0.7
MAX_TOKENS = 350

_CODE_FENCE = re.compile(r"```json|```")

RoundLike = Union[RoundSchema, ImagePayloadSchema]


def build_chat_payload(round_data: RoundLike, model: str) -> dict:
    """Build the chat-completions body for one round.

    Args:
        round_data (RoundLike): Round whose image and coordinates are sent
        model (str): Inference model identifier

    Returns:
        dict: JSON body for ``POST /chat/completions``
    """
    coordinates = round_data.coordinates
    return {
        "model": model,
        "messages": [
            {"role": "system", "content": SYSTEM_PROMPT},
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": RULES_PROMPT},
                    {"type": "image_url", "image_url": {"url": round_data.image_url}},
                    {"type": "text", "text": build_metadata_text(coordinates.lat, coordinates.lon)},
                ],
            },
        ],
        "temperature": TEMPERATURE,
        "top_p": TOP_P,
        "max_tokens": MAX_TOKENS,
    }


def extract_message_content(data: Any) -> Optional[str]:
    """Return ``choices[0].message.content`` when it is a non-empty string."""
    if not isinstance(data, dict):
        return None
    choices = data.get("choices")
    if not isinstance(choices, list) or not choices:
        return None
    choice = choices[0]
    message = choice.get("message") if isinstance(choice, dict) else None
    content = message.get("content") if isinstance(message, dict) else None
    if not isinstance(content, str) or not content:
        return None
    return content


class AiGuessClient:
    def __init__(
        self,
        settings: DuelSettings,
        http_client: httpx.AsyncClient,
        rng: np.random.Generator,
    ):
        self.settings = settings
        self.http_client = http_client
        self.rng = rng

    def fallback(self, round_data: RoundLike, reason: FallbackReason) -> GuessResultSchema:
        logging.warning(f"Using fallback AI guess: {reason.value}")
        return synthesize_fallback_guess(
            round_data.country_name, round_data.country_code, reason, self.rng
        )

    def _headers(self) -> dict:
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.settings.openrouter_api_key}",
            "X-Title": self.settings.openrouter_app_title,
        }
        if self.settings.openrouter_referer:
            headers["HTTP-Referer"] = self.settings.openrouter_referer
        return headers

    async def generate_guess(self, round_data: RoundLike) -> GuessResultSchema:
        """Ask the model for three candidates and play one of them.

        Args:
            round_data (RoundLike): Round with image, coordinates and ground truth

        Returns:
            GuessResultSchema: The played guess and every validated candidate
        """
        if not self.settings.openrouter_api_key:
            return self.fallback(round_data, FallbackReason.missing_api_key)

        url = f"{self.settings.openrouter_base_url.rstrip('/')}/chat/completions"
        payload = build_chat_payload(round_data, self.settings.openrouter_model)

        try:
            response = await self.http_client.post(
                url,
                headers=self._headers(),
                json=payload,
                timeout=self.settings.openrouter_timeout_seconds,
            )
        except httpx.HTTPError as e:
            logging.error(f"Inference call failed: {e!r}")
            return self.fallback(round_data, FallbackReason.request_failure)

        if not response.is_success:
            logging.error(f"Inference request failed: {response.status_code} {response.text}")
            return self.fallback(round_data, FallbackReason.bad_response)

        try:
            data = response.json()
        except ValueError as e:
            logging.error(f"Inference response body is not JSON: {e}")
            return self.fallback(round_data, FallbackReason.request_failure)

        content = extract_message_content(data)
        if content is None:
            return self.fallback(round_data, FallbackReason.empty_response)

        raw = content.strip()
        try:
            parsed = json.loads(_CODE_FENCE.sub("", raw))
        except ValueError as e:
            logging.error(f"Failed to parse AI response {raw!r}: {e}")
            return self.fallback(round_data, FallbackReason.parse_error)

        try:
            proposals = validate_proposed_guesses(parsed)
        except (TypeError, ValueError, OverflowError) as e:
            logging.error(f"AI response failed validation {raw!r}: {e!r}")
            return self.fallback(round_data, FallbackReason.invalid_payload)
        if not proposals:
            return self.fallback(round_data, FallbackReason.invalid_payload)

        try:
            return build_model_guess(
                proposals, round_data.country_name, round_data.country_code, self.rng
            )
        except Exception:
            logging.exception("Failed to build the AI guess from the model answer")
            return self.fallback(round_data, FallbackReason.request_failure)
