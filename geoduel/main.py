import logging
from contextlib import asynccontextmanager
from typing import Optional

import httpx
import numpy as np
import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.middleware.cors import CORSMiddleware

from geoduel.authentication.app_check import AppCheck
from geoduel.errors import DuelError, ImageSourceError
from geoduel.models.settings_models import DuelSettings
from geoduel.routers import duel, restapi
from geoduel.services.duel_engine import DuelEngine
from geoduel.services.image_source import CatalogueImageSource, ImageSource
from geoduel.services.inference import AiGuessClient
from geoduel.services.match_store import MatchStore

logging.basicConfig(level=logging.INFO)


async def duel_error_handler(request: Request, exc: DuelError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_content())


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logging.info(f"Rejected request to {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST, content={"error": "invalid_request"}
    )


async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logging.exception(f"Unhandled error on {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"error": "server_error"}
    )


def create_app(
    settings: Optional[DuelSettings] = None,
    image_source: Optional[ImageSource] = None,
    http_client: Optional[httpx.AsyncClient] = None,
    rng: Optional[np.random.Generator] = None,
    store: Optional[MatchStore] = None,
) -> FastAPI:
    """Wire the duel engine and its collaborators into a FastAPI app.

    Anything not passed in is built from the environment, so tests can swap
    in fakes for the image source, the inference transport and the random source.
    """
    settings = settings or DuelSettings.from_env()
    rng = rng if rng is not None else np.random.default_rng()
    owns_http_client = http_client is None
    if http_client is None:
        http_client = httpx.AsyncClient(
            timeout=httpx.Timeout(settings.openrouter_timeout_seconds, connect=10.0)
        )
    if image_source is None:
        image_source = CatalogueImageSource(
            settings.image_catalogue_path, settings.image_prefetch_size, rng
        )

    engine = DuelEngine(
        settings=settings,
        store=store or MatchStore(settings.ai_match_expiry_minutes),
        image_source=image_source,
        ai_client=AiGuessClient(settings, http_client, rng),
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Prefill the image cache on startup and close the HTTP client on shutdown."""
        fill = getattr(image_source, "fill", None)
        if fill is not None:
            try:
                added = await fill()
                logging.info(f"Image cache pre-filled with {added} images")
            except ImageSourceError as e:
                logging.error(f"Failed to pre-fill image cache: {e}")
        try:
            yield
        finally:
            if owns_http_client:
                await http_client.aclose()
            logging.info("Stop Server")

    app = FastAPI(lifespan=lifespan)
    app.state.settings = settings
    app.state.duel_engine = engine
    app.state.app_check = AppCheck(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origin_regex=".*",
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(DuelError, duel_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)
    app.include_router(duel.duel_router)
    app.include_router(restapi.rest_router)
    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run("geoduel.main:app", host="0.0.0.0", port=8080)
