import asyncio
import json
from typing import Callable, List, Optional

import httpx
import numpy as np
import pytest

from geoduel.models.schema_models import (
    CoordinatesSchema,
    GuessResultSchema,
    ImagePayloadSchema,
)
from geoduel.models.settings_models import DuelSettings
from geoduel.services.duel_engine import DuelEngine
from geoduel.services.inference import AiGuessClient
from geoduel.services.match_store import MatchStore


def make_image(
    country_name: str = "Japan",
    country_code: Optional[str] = "JP",
    lat: float = 35.68,
    lon: float = 139.69,
    image_url: str = "https://images.example.test/tokyo.jpg",
) -> ImagePayloadSchema:
    return ImagePayloadSchema(
        image_url=image_url,
        coordinates=CoordinatesSchema(lat=lat, lon=lon),
        country_name=country_name,
        country_code=country_code,
    )


def chat_response(content, status_code: int = 200) -> httpx.Response:
    """Chat-completions response whose first message carries ``content``."""
    if not isinstance(content, str):
        content = json.dumps(content)
    return httpx.Response(
        status_code, json={"choices": [{"message": {"role": "assistant", "content": content}}]}
    )


class FakeImageSource:
    def __init__(self, images: List[ImagePayloadSchema]):
        self.images = list(images)
        self.calls = 0

    async def next_image(self) -> ImagePayloadSchema:
        image = self.images[self.calls % len(self.images)]
        self.calls += 1
        return image.model_copy(
            update={"image_url": f"{image.image_url}?n={self.calls}"}
        )


class FixedRandom:
    """Stands in for numpy's Generator where a test needs an exact draw."""

    def __init__(self, value: float = 0.0, indices=(0,)):
        self.value = value
        self.indices = list(indices)
        self.calls = 0

    def random(self) -> float:
        return self.value

    def integers(self, high: int) -> int:
        index = self.indices[self.calls % len(self.indices)]
        self.calls += 1
        return index % high


class SlowAiClient:
    """AI client that yields to the event loop before answering."""

    def __init__(self, result: GuessResultSchema, delay: float = 0.01):
        self.result = result
        self.delay = delay
        self.calls = 0

    async def generate_guess(self, round_data) -> GuessResultSchema:
        self.calls += 1
        await asyncio.sleep(self.delay)
        return self.result


class Clock:
    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(2024)


@pytest.fixture
def japan_images() -> List[ImagePayloadSchema]:
    return [make_image()]


@pytest.fixture
def make_settings() -> Callable[..., DuelSettings]:
    def _make(**overrides) -> DuelSettings:
        values = dict(
            ai_match_rounds=5,
            ai_match_expiry_minutes=60,
            openrouter_api_key="",
            openrouter_base_url="https://inference.example.test/api/v1",
            app_check_enabled=False,
        )
        values.update(overrides)
        return DuelSettings(**values)

    return _make


@pytest.fixture
def make_ai_client(make_settings, rng):
    def _make(handler=None, settings: Optional[DuelSettings] = None, random_source=None) -> AiGuessClient:
        if handler is None:
            handler = lambda request: httpx.Response(500)
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return AiGuessClient(
            settings or make_settings(openrouter_api_key="test-key"),
            http_client,
            random_source if random_source is not None else rng,
        )

    return _make


@pytest.fixture
def make_engine(make_settings, make_ai_client, japan_images):
    def _make(
        settings: Optional[DuelSettings] = None,
        images: Optional[List[ImagePayloadSchema]] = None,
        ai_client=None,
        clock=None,
    ) -> DuelEngine:
        settings = settings or make_settings()
        kwargs = {}
        if clock is not None:
            kwargs["clock"] = clock
        return DuelEngine(
            settings=settings,
            store=MatchStore(settings.ai_match_expiry_minutes),
            image_source=FakeImageSource(images or japan_images),
            ai_client=ai_client or make_ai_client(settings=settings),
            **kwargs,
        )

    return _make
