import csv
import orjson
import structlog
from pathlib import Path
from typing import Iterable, List
from pydantic import TypeAdapter, ValidationError
from prometheus_client import Counter

from streamtally.api.schemas import EnrichedEventSchema, StreamingEventSchema
from streamtally.domains.analytics.engine import EnrichedEvent
from streamtally.domains.ingestion.metadata import SongCatalog
from streamtally.errors import DatasetFormatError, DatasetNotFoundError
from streamtally.utils.timeutils import to_iso


logger = structlog.get_logger("enricher")


CSV_COLUMNS = ["userId", "songId", "timestamp", "durationMs"]

ENRICHED_EVENTS = Counter('streamtally_enriched_events_total', 'Events joined with song metadata')
SKIPPED_EVENTS = Counter('streamtally_skipped_events_total', 'Events dropped because metadata was unavailable')
INVALID_ROWS = Counter('streamtally_invalid_rows_total', 'CSV rows that failed validation')

_enriched_list = TypeAdapter(List[EnrichedEventSchema])


def read_streaming_events(path) -> List[StreamingEventSchema]:
    path = Path(path)
    if not path.exists():
        raise DatasetNotFoundError(path)

    events = []
    with open(path, newline="", encoding="utf-8") as f:
        reader = csv.DictReader(f)
        missing = [c for c in CSV_COLUMNS if c not in (reader.fieldnames or [])]
        if missing:
            raise DatasetFormatError(f"{path} is missing columns: {', '.join(missing)}")

        for row in reader:
            try:
                events.append(StreamingEventSchema.model_validate(row))
            except ValidationError as e:
                logger.warning("invalid_event_row", line=reader.line_num, errors=e.error_count())
                INVALID_ROWS.inc()

    logger.info("events_parsed", count=len(events), source=str(path))
    return events


def enrich_events(events: Iterable[StreamingEventSchema], catalog: SongCatalog) -> List[EnrichedEventSchema]:
    """Joins plays with catalog metadata; plays of unknown songs are dropped."""
    enriched = []
    for event in events:
        metadata = catalog.get(event.song_id)
        if metadata is None:
            logger.warning("event_skipped_no_metadata", song_id=event.song_id)
            SKIPPED_EVENTS.inc()
            continue

        enriched.append(EnrichedEventSchema(
            user_id=event.user_id,
            song_id=event.song_id,
            timestamp=event.timestamp,
            duration_ms=event.duration_ms,
            title=metadata.title,
            artist=metadata.artist,
            release_date=metadata.release_date,
        ))

    ENRICHED_EVENTS.inc(len(enriched))
    logger.info("events_enriched", count=len(enriched))
    return enriched


def write_enriched_events(path, events: Iterable[EnrichedEventSchema]):
    payload = [
        {
            "userId": event.user_id,
            "songId": event.song_id,
            "timestamp": to_iso(event.timestamp),
            "durationMs": event.duration_ms,
            "title": event.title,
            "artist": event.artist,
            "releaseDate": event.release_date,
        }
        for event in events
    ]
    Path(path).write_bytes(orjson.dumps(payload, option=orjson.OPT_INDENT_2))
    logger.info("output_written", path=str(path), count=len(payload))


def load_enriched_events(path) -> List[EnrichedEvent]:
    path = Path(path)
    if not path.exists():
        raise DatasetNotFoundError(path, hint="Please run the ingestion step first.")

    try:
        records = _enriched_list.validate_python(orjson.loads(path.read_bytes()))
    except (orjson.JSONDecodeError, ValidationError) as e:
        raise DatasetFormatError(f"{path} is not a valid enriched dataset: {e}") from e

    return [to_domain(record) for record in records]


def to_domain(record: EnrichedEventSchema) -> EnrichedEvent:
    return EnrichedEvent(
        user_id=record.user_id,
        song_id=record.song_id,
        timestamp=record.timestamp,
        duration_ms=record.duration_ms,
        title=record.title,
        artist=record.artist,
        release_date=record.release_date,
    )
