"""Coarse geographic hints handed to the model as supporting context."""


def summarize_hemisphere(lat: float, lon: float) -> str:
    hemispheres = [
        "Northern Hemisphere" if lat >= 0 else "Southern Hemisphere",
        "Eastern Hemisphere" if lon >= 0 else "Western Hemisphere",
    ]
    return " & ".join(hemispheres)


def climate_band(lat: float) -> str:
    abs_lat = abs(lat)
    if abs_lat < 15:
        return "tropical"
    if abs_lat < 35:
        return "subtropical"
    if abs_lat < 55:
        return "temperate"
    if abs_lat < 66:
        return "cool temperate"
    return "polar"


def build_metadata_text(lat: float, lon: float) -> str:
    return (
        "Supporting metadata:\n"
        f"- Hemispheres: {summarize_hemisphere(lat, lon)}\n"
        f"- Approximate climate band: {climate_band(lat)}"
    )
