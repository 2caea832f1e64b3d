import pytest

from geoduel.domain.geo_hints import build_metadata_text, climate_band, summarize_hemisphere


@pytest.mark.parametrize(
    "lat, lon, expected",
    [
        (35.6, 139.7, "Northern Hemisphere & Eastern Hemisphere"),
        (-33.9, 18.4, "Southern Hemisphere & Eastern Hemisphere"),
        (40.7, -74.0, "Northern Hemisphere & Western Hemisphere"),
        (-34.6, -58.4, "Southern Hemisphere & Western Hemisphere"),
        (0.0, 0.0, "Northern Hemisphere & Eastern Hemisphere"),
    ],
)
def test_summarize_hemisphere(lat, lon, expected):
    assert summarize_hemisphere(lat, lon) == expected


@pytest.mark.parametrize(
    "lat, expected",
    [
        (0.0, "tropical"),
        (-14.99, "tropical"),
        (15.0, "subtropical"),
        (34.9, "subtropical"),
        (35.0, "temperate"),
        (-54.9, "temperate"),
        (55.0, "cool temperate"),
        (65.9, "cool temperate"),
        (66.0, "polar"),
        (-78.0, "polar"),
    ],
)
def test_climate_band(lat, expected):
    assert climate_band(lat) == expected


def test_metadata_text_lists_both_hints():
    text = build_metadata_text(-33.9, 18.4)
    assert "Southern Hemisphere & Eastern Hemisphere" in text
    assert "subtropical" in text
