import httpx
import structlog
from types import MappingProxyType
from collections.abc import Mapping
from typing import Dict, Iterable, Iterator, Optional
from pydantic import ValidationError
from prometheus_client import Counter

from streamtally.api.schemas import SongMetadataSchema


logger = structlog.get_logger("metadata_client")


PROGRESS_EVERY = 10

METADATA_LOOKUP_FAILURES = Counter(
    'streamtally_metadata_lookup_failures_total',
    'Songs whose metadata could not be fetched'
)


class SongCatalog(Mapping):
    """
    Read-only songId -> metadata lookup handed to the enrichment step.
    Contents are fixed at construction.
    """

    def __init__(self, songs: Mapping[str, SongMetadataSchema]):
        self._songs = MappingProxyType(dict(songs))

    @classmethod
    def from_songs(cls, songs: Iterable[SongMetadataSchema]) -> "SongCatalog":
        return cls({song.song_id: song for song in songs})

    def __getitem__(self, song_id: str) -> SongMetadataSchema:
        return self._songs[song_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self._songs)

    def __len__(self) -> int:
        return len(self._songs)


class MetadataClient:
    def __init__(self, base_url: str, timeout: float = 5.0, transport: Optional[httpx.BaseTransport] = None):
        self.client = httpx.Client(base_url=base_url, timeout=timeout, transport=transport)

    def close(self):
        self.client.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def ping(self) -> dict:
        resp = self.client.get("/test")
        resp.raise_for_status()
        return resp.json()

    def fetch(self, song_id: str) -> Optional[SongMetadataSchema]:
        """Returns None when the service has no usable metadata for the song."""
        try:
            resp = self.client.get(f"/songs/{song_id}")
        except httpx.HTTPError as e:
            logger.error("metadata_request_failed", song_id=song_id, error=str(e))
            METADATA_LOOKUP_FAILURES.inc()
            return None

        if resp.status_code != 200:
            logger.error("metadata_fetch_failed", song_id=song_id, status=resp.status_code)
            METADATA_LOOKUP_FAILURES.inc()
            return None

        try:
            return SongMetadataSchema.model_validate(resp.json())
        except (ValueError, ValidationError) as e:
            logger.error("metadata_payload_invalid", song_id=song_id, error=str(e))
            METADATA_LOOKUP_FAILURES.inc()
            return None

    def build_catalog(self, song_ids: Iterable[str]) -> SongCatalog:
        unique_ids = list(dict.fromkeys(song_ids))
        logger.info("unique_songs_found", count=len(unique_ids))

        songs: Dict[str, SongMetadataSchema] = {}
        for i, song_id in enumerate(unique_ids, 1):
            metadata = self.fetch(song_id)
            if metadata is not None:
                songs[song_id] = metadata

            if i % PROGRESS_EVERY == 0:
                logger.info("metadata_progress", fetched=i, total=len(unique_ids))

        return SongCatalog(songs)
