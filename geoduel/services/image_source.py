"""Where round images and their ground truth come from.

The engine only relies on ``ImageSource.next_image``. ``CatalogueImageSource``
serves a JSON catalogue of street-level images through a small prefetch
cache; the catalogue is a list (or ``{"images": [...]}``) of objects shaped
like ``{"imageUrl", "coordinates": {"lat", "lon"}, "countryName", "countryCode"}``.
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import List, Optional, Protocol

import numpy as np
from pydantic import ValidationError

from geoduel.errors import ImageSourceError
from geoduel.models.schema_models import ImagePayloadSchema


class ImageSource(Protocol):
    async def next_image(self) -> ImagePayloadSchema:
        ...


class CatalogueImageSource:
    def __init__(self, catalogue_path: str, prefetch_size: int, rng: np.random.Generator):
        self.catalogue_path: Optional[Path] = Path(catalogue_path) if catalogue_path else None
        self.prefetch_size = max(1, prefetch_size)
        self.rng = rng
        self.cache: List[ImagePayloadSchema] = []
        self.lock = asyncio.Lock()
        self._catalogue: Optional[List[ImagePayloadSchema]] = None

    def load_catalogue(self) -> List[ImagePayloadSchema]:
        """Read and validate the catalogue once; invalid entries are skipped."""
        if self._catalogue is not None:
            return self._catalogue
        if self.catalogue_path is None:
            raise ImageSourceError("IMAGE_CATALOGUE_PATH is not configured")

        try:
            raw = json.loads(self.catalogue_path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise ImageSourceError(f"Could not read image catalogue: {e}") from e

        entries = raw.get("images") if isinstance(raw, dict) else raw
        if not isinstance(entries, list):
            raise ImageSourceError("Image catalogue must be a list of images")

        catalogue = []
        for position, entry in enumerate(entries):
            try:
                catalogue.append(ImagePayloadSchema.model_validate(entry))
            except ValidationError as e:
                logging.warning(f"Skipping catalogue entry {position}: {e.error_count()} errors")
        if not catalogue:
            raise ImageSourceError("Image catalogue has no usable entries")

        logging.info(f"Loaded {len(catalogue)} images from {self.catalogue_path}")
        self._catalogue = catalogue
        return catalogue

    async def _ensure_catalogue(self) -> List[ImagePayloadSchema]:
        if self._catalogue is not None:
            return self._catalogue
        return await asyncio.to_thread(self.load_catalogue)

    def _fill_locked(self, catalogue: List[ImagePayloadSchema], count: int) -> int:
        added = 0
        for position in self.rng.permutation(len(catalogue)):
            if len(self.cache) >= count:
                break
            image = catalogue[int(position)]
            if image in self.cache:
                continue
            self.cache.append(image)
            added += 1
        return added

    async def fill(self, count: Optional[int] = None) -> int:
        """Top the cache up to ``count`` images (prefetch size by default)."""
        async with self.lock:
            catalogue = await self._ensure_catalogue()
            return self._fill_locked(catalogue, count or self.prefetch_size)

    async def next_image(self) -> ImagePayloadSchema:
        async with self.lock:
            if not self.cache:
                self._fill_locked(await self._ensure_catalogue(), self.prefetch_size)
            if not self.cache:
                raise ImageSourceError("Could not fetch an image right now")
            return self.cache.pop()
