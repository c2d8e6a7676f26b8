from datetime import datetime
from pydantic import BaseModel, Field, field_validator

from streamtally.utils.timeutils import parse_timestamp


class StreamingEventSchema(BaseModel):
    """One row of the raw play log."""

    user_id: str = Field(..., alias="userId", min_length=1)
    song_id: str = Field(..., alias="songId", min_length=1)
    timestamp: datetime
    duration_ms: int = Field(..., alias="durationMs", ge=0, description="How long user listened")

    @field_validator("timestamp", mode="before")
    @classmethod
    def _utc_timestamp(cls, value):
        if isinstance(value, str):
            return parse_timestamp(value)
        return value

    class Config:
        populate_by_name = True
        frozen = True


class SongMetadataSchema(BaseModel):

    song_id: str = Field(..., alias="songId")
    title: str = Field(..., min_length=1)
    artist: str = Field(..., min_length=1)
    release_date: str = Field(default="", alias="releaseDate")

    class Config:
        populate_by_name = True
        frozen = True


class SongCatalogFile(BaseModel):
    songs: list[SongMetadataSchema] = Field(default_factory=list)


class EnrichedEventSchema(StreamingEventSchema):
    """
    Interchange record between enrichment and analytics.
    Field aliases are the on-disk names and must not change.
    """

    title: str = Field(..., min_length=1)
    artist: str = Field(..., min_length=1)
    release_date: str = Field(default="", alias="releaseDate")
