from datetime import timedelta
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ImportMetadata(BaseModel):
    """
    Static facts about the input media, as reported by the ``format`` section of ffprobe.

    ffprobe encodes most numbers as strings. Sizes and rates are plain integer strings,
    while ``start_time`` and ``duration`` are seconds with an optional fraction.
    """

    model_config = ConfigDict(frozen=True)

    filename: str
    nb_streams: int = Field(ge=0)
    nb_programs: int = Field(ge=0)
    format_name: str
    format_long_name: Optional[str] = None
    start_time: timedelta
    duration: timedelta
    size: int = Field(ge=0)
    bit_rate: int = Field(ge=0)
    probe_score: int = Field(ge=0, le=255)
    tags: Dict[str, str] = Field(default_factory=dict)

    @field_validator("start_time", "duration", mode="before")
    @classmethod
    def parse_seconds(cls, value: Any) -> Any:
        if isinstance(value, str):
            return timedelta(seconds=float(value))
        if isinstance(value, (int, float)):
            return timedelta(seconds=value)
        return value

    @field_validator("tags", mode="after")
    @classmethod
    def sort_tags(cls, value: Dict[str, str]) -> Dict[str, str]:
        return dict(sorted(value.items()))
