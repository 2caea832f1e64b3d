import logging
import secrets
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, status

from geoduel.dependencies import get_ai_client, get_image_source, get_settings
from geoduel.errors import DuelError
from geoduel.models.dc_models import AiTestResponseModel, HealthModel
from geoduel.models.schema_models import ImagePayloadSchema
from geoduel.models.settings_models import DuelSettings
from geoduel.services.image_source import ImageSource
from geoduel.services.inference import AiGuessClient

rest_router = APIRouter()


class HealthAPI:
    @staticmethod
    @rest_router.get("/health", response_model=HealthModel)
    async def health() -> HealthModel:
        return HealthModel(status="ok", timestamp=datetime.now(timezone.utc).isoformat())


class ImageAPI:
    @staticmethod
    @rest_router.get(
        "/getImage",
        response_model=ImagePayloadSchema,
    )
    async def get_image(
        image_source: ImageSource = Depends(get_image_source),
    ) -> ImagePayloadSchema:
        try:
            return await image_source.next_image()
        except Exception:
            logging.exception("Failed to fetch image")
            raise DuelError(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


class AiTestAPI:
    @staticmethod
    @rest_router.get("/test-ai", response_model=AiTestResponseModel, response_model_exclude_unset=True)
    async def test_ai(
        key: Optional[str] = None,
        settings: DuelSettings = Depends(get_settings),
        image_source: ImageSource = Depends(get_image_source),
        ai_client: AiGuessClient = Depends(get_ai_client),
    ) -> AiTestResponseModel:
        """Run the AI opponent on a fresh image; needs ``key`` to equal AI_TESTING_KEY."""
        if not settings.ai_testing_key or not key or not secrets.compare_digest(
            key.encode(), settings.ai_testing_key.encode()
        ):
            raise DuelError(status.HTTP_401_UNAUTHORIZED, "unauthorized")
        try:
            image = await image_source.next_image()
            ai_guess = await ai_client.generate_guess(image)
        except Exception:
            logging.exception("AI test run failed")
            raise DuelError(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")
        fields = ai_guess.model_dump(exclude_unset=True)
        return AiTestResponseModel(**fields, image_url=image.image_url)
