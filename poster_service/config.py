"""
Configuration loader for the guest poster service.

Environment variables are centralized here to keep the rest of the code
focused on rendering and to make operational tuning clear.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional, Tuple

from PIL import ImageColor
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    # Filesystem layout
    uploads_dir: Path = Field(Path("uploads"))
    output_dir: Path = Field(Path("guest_posters"))
    summary_filename: str = Field("wedding_guest_list.csv")

    # Rendering
    poster_filename_prefix: str = Field("Virginia & Alfred wedding invitation")
    poster_font_path: Optional[Path] = Field(None)
    poster_font_size: int = Field(70, gt=0)
    poster_text_y: float = Field(640.0)
    poster_text_color: str = Field("#FFFFFF")

    # Concurrency
    render_max_workers: int = Field(4, ge=1)
    job_workers: int = Field(1, ge=1)
    max_finished_jobs: int = Field(500, ge=1)

    # API
    host: str = Field("0.0.0.0")
    port: int = Field(8080)
    public_base_url: str = Field("http://localhost:8080")
    max_upload_bytes: int = Field(10 << 20, gt=0)
    log_level: str = Field("INFO")

    @field_validator("poster_text_color")
    @classmethod
    def validate_text_color(cls, v: str) -> str:
        try:
            ImageColor.getrgb(v)
        except ValueError as exc:
            raise ValueError(f"POSTER_TEXT_COLOR is not a colour Pillow understands: {v!r}") from exc
        return v

    @field_validator("poster_filename_prefix")
    @classmethod
    def validate_prefix(cls, v: str) -> str:
        if "/" in v or "\\" in v:
            raise ValueError("POSTER_FILENAME_PREFIX must not contain path separators")
        return v


@lru_cache()
def get_settings() -> Settings:
    """Return cached settings to avoid reparsing env on every call."""
    return Settings()


def text_fill(settings: Optional[Settings] = None) -> Tuple[int, ...]:
    """Resolve the configured text colour into an RGB(A) tuple."""
    settings = settings or get_settings()
    return ImageColor.getrgb(settings.poster_text_color)


def poster_filename(name: str, settings: Optional[Settings] = None) -> str:
    """
    Derive the output filename for one guest.

    The mapping depends only on the name, so rendering the same guest twice
    always targets the same file.
    """
    settings = settings or get_settings()
    return f"{settings.poster_filename_prefix} - {name}.png"


def poster_name_prefix(settings: Optional[Settings] = None) -> str:
    settings = settings or get_settings()
    return f"{settings.poster_filename_prefix} - "
