import json
import threading

import numpy as np
import pytest

from geoduel.errors import ImageSourceError
from geoduel.services.image_source import CatalogueImageSource


def write_catalogue(path, entries):
    path.write_text(json.dumps(entries), encoding="utf-8")
    return str(path)


def entry(n: int, country: str = "Japan", code: str = "JP") -> dict:
    return {
        "imageUrl": f"https://images.example.test/{n}.jpg",
        "coordinates": {"lat": 35.0 + n, "lon": 139.0},
        "countryName": country,
        "countryCode": code,
    }


async def test_fill_and_pop_each_image_once_per_cycle(tmp_path):
    path = write_catalogue(tmp_path / "catalogue.json", [entry(n) for n in range(4)])
    source = CatalogueImageSource(path, prefetch_size=4, rng=np.random.default_rng(3))

    assert await source.fill() == 4
    urls = [(await source.next_image()).image_url for _ in range(4)]
    assert sorted(urls) == [f"https://images.example.test/{n}.jpg" for n in range(4)]
    assert source.cache == []

    # An empty cache refills on demand.
    image = await source.next_image()
    assert image.country_name == "Japan"
    assert len(source.cache) == 3


async def test_fill_does_not_exceed_requested_size(tmp_path):
    path = write_catalogue(tmp_path / "catalogue.json", [entry(n) for n in range(10)])
    source = CatalogueImageSource(path, prefetch_size=3, rng=np.random.default_rng(3))
    assert await source.fill() == 3
    assert await source.fill() == 0
    assert len(source.cache) == 3


async def test_wrapped_catalogue_and_invalid_entries(tmp_path):
    entries = [entry(1), {"imageUrl": "https://images.example.test/broken.jpg"}, entry(2, "Peru", None)]
    path = write_catalogue(tmp_path / "catalogue.json", {"images": entries})
    source = CatalogueImageSource(path, prefetch_size=5, rng=np.random.default_rng(0))

    catalogue = source.load_catalogue()
    assert [image.country_name for image in catalogue] == ["Japan", "Peru"]
    assert catalogue[1].country_code is None


async def test_unconfigured_catalogue(tmp_path):
    source = CatalogueImageSource("", prefetch_size=5, rng=np.random.default_rng(0))
    with pytest.raises(ImageSourceError):
        await source.next_image()


@pytest.mark.parametrize("content", ["not json", json.dumps({"images": "nope"}), json.dumps([{}])])
async def test_unusable_catalogue(tmp_path, content):
    path = tmp_path / "catalogue.json"
    path.write_text(content, encoding="utf-8")
    source = CatalogueImageSource(str(path), prefetch_size=5, rng=np.random.default_rng(0))
    with pytest.raises(ImageSourceError):
        await source.fill()


async def test_missing_file(tmp_path):
    source = CatalogueImageSource(
        str(tmp_path / "absent.json"), prefetch_size=5, rng=np.random.default_rng(0)
    )
    with pytest.raises(ImageSourceError):
        await source.next_image()


async def test_catalogue_is_read_off_the_event_loop_once(tmp_path):
    path = write_catalogue(tmp_path / "catalogue.json", [entry(n) for n in range(6)])
    source = CatalogueImageSource(path, prefetch_size=2, rng=np.random.default_rng(1))
    load = source.load_catalogue
    threads = []

    def recording_load():
        threads.append(threading.get_ident())
        return load()

    source.load_catalogue = recording_load
    await source.fill()
    source.cache.clear()
    await source.next_image()

    assert threads and threads[0] != threading.get_ident()
    assert len(threads) == 1
