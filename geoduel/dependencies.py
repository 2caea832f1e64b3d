from fastapi import Request

from geoduel.models.settings_models import DuelSettings
from geoduel.services.duel_engine import DuelEngine
from geoduel.services.image_source import ImageSource
from geoduel.services.inference import AiGuessClient


def get_duel_engine(request: Request) -> DuelEngine:
    return request.app.state.duel_engine


def get_ai_client(request: Request) -> AiGuessClient:
    return request.app.state.duel_engine.ai_client


def get_image_source(request: Request) -> ImageSource:
    return request.app.state.duel_engine.image_source


def get_settings(request: Request) -> DuelSettings:
    return request.app.state.settings
