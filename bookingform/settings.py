"""Compiler settings"""
from functools import lru_cache

from pydantic_settings import BaseSettings


class CompilerSettings(BaseSettings):
    """Environment-driven settings for compiled booking forms.

    Values come from ``BOOKINGFORM_*`` environment variables or a ``.env``
    file. They are passed explicitly to the compiler; nothing in the
    package reads them implicitly.
    """

    # Geocoder widget (loaded by the browser runtime)
    geocoder_access_token: str = ""
    geocoder_script_url: str = (
        "https://api.mapbox.com/mapbox-gl-js/plugins/mapbox-gl-geocoder/v5.0.0/mapbox-gl-geocoder.min.js"
    )
    geocoder_css_url: str = (
        "https://api.mapbox.com/mapbox-gl-js/plugins/mapbox-gl-geocoder/v5.0.0/mapbox-gl-geocoder.css"
    )
    geocoder_countries: str = "PK,US,GB,CA,AE"

    # Backend endpoints the runtime calls
    api_base_url: str = ""
    api_anon_key: str = ""

    # Rendering
    default_padding: str = "1.5rem"
    resize_settle_delay_ms: int = 150
    debug: bool = False

    class Config:
        env_prefix = "BOOKINGFORM_"
        env_file = ".env"
        case_sensitive = False


@lru_cache()
def get_settings() -> CompilerSettings:
    """Get cached settings instance"""
    return CompilerSettings()
