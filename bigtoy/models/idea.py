"""
Shared data models for ideas and analysis requests.
"""

from enum import Enum
from typing import Any, Dict, Optional
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from bigtoy.constants import LANGUAGES


class Idea(BaseModel):
    """One contrarian startup idea generated from a photo.

    Whitespace is stripped and every field must be non-empty, so a
    validated instance is always safe to render.
    """

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True, str_min_length=1)

    source: str = Field(..., description="Idea Source: the insight or hidden tension spotted in the photo")
    strategy: str = Field(..., description="Business Strategy: how the idea earns money")
    marketing: str = Field(..., description="Marketing Hook: punchy positioning or tagline")
    market_potential: str = Field(..., description="Market Potential: demand signals and underserved segments")
    target_audience: str = Field(..., description="Target Audience: the most receptive customer cohort")

    @classmethod
    def from_raw(cls, raw: Any) -> Optional["Idea"]:
        """
        Build an idea from a decoded JSON element.

        Args:
            raw: Element of the ``ideas`` array, possibly partially populated

        Returns:
            The idea, or None when the element is not renderable yet
        """
        if not isinstance(raw, dict):
            return None
        try:
            return cls.model_validate(raw)
        except ValidationError:
            return None


class Language(str, Enum):
    """Languages the idea service can answer in."""

    EN = "en"
    ZH = "zh"
    FR = "fr"
    JA = "ja"

    @classmethod
    def parse(cls, value: Any) -> "Language":
        """Case-insensitive lookup that falls back to English."""
        if isinstance(value, Language):
            return value
        try:
            return cls(str(value or "").strip().lower())
        except ValueError:
            return cls.EN

    @property
    def label(self) -> str:
        return LANGUAGES[self.value][0]

    @property
    def flag(self) -> str:
        return LANGUAGES[self.value][1]

    @property
    def short(self) -> str:
        return LANGUAGES[self.value][2]


class AnalysisRequest(BaseModel):
    """Parameters of one call to the Idea-Generation Endpoint."""

    model_config = ConfigDict(frozen=True)

    user_id: str
    image_url: str
    language: Language = Language.EN

    @field_validator("user_id")
    @classmethod
    def _require_user_id(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("userId is required")
        return value

    @field_validator("image_url")
    @classmethod
    def _require_absolute_url(cls, value: str) -> str:
        value = value.strip()
        parsed = urlparse(value)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError(f"image_url must be an absolute http(s) URL: {value!r}")
        return value

    @field_validator("language", mode="before")
    @classmethod
    def _normalize_language(cls, value: Any) -> Language:
        return Language.parse(value)

    def to_payload(self) -> Dict[str, str]:
        """JSON body expected by the endpoint."""
        return {
            "userId": self.user_id,
            "image_url": self.image_url,
            "language": self.language.value,
        }
