import argparse
import sys
import httpx
import structlog
from rich.console import Console

from streamtally import settings
from streamtally.domains.analytics import engine, report
from streamtally.domains.ingestion.enricher import (
    enrich_events,
    load_enriched_events,
    read_streaming_events,
    write_enriched_events,
)
from streamtally.domains.ingestion.metadata import MetadataClient
from streamtally.errors import StreamTallyError
from streamtally.utils import metrics
from streamtally.utils.logging import configure_logging
from streamtally.utils.timeutils import parse_timestamp


logger = structlog.get_logger("cli")

err_console = Console(stderr=True)


def _instant(value: str):
    try:
        return parse_timestamp(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid date: {value!r}")


def _emit(lines):
    for line in lines:
        print(line)


def cmd_ingest(args):
    with MetadataClient(args.metadata_url, timeout=settings.METADATA_TIMEOUT_S) as client:
        try:
            logger.info("metadata_service_check", response=client.ping())
        except httpx.HTTPError as e:
            raise StreamTallyError(f"metadata service at {args.metadata_url} is unavailable: {e}") from e

        events = read_streaming_events(args.csv)
        catalog = client.build_catalog(event.song_id for event in events)

    enriched = enrich_events(events, catalog)
    write_enriched_events(args.output, enriched)
    logger.info("ingestion_completed", parsed=len(events), enriched=len(enriched))
    metrics.publish(args.metrics_textfile)


def cmd_top_songs(args):
    events = load_enriched_events(args.data)
    _emit(report.format_top_songs(engine.top_songs(events, args.start, args.end, args.n)))


def cmd_timeline(args):
    events = load_enriched_events(args.data)
    result = engine.timeline(events, args.user_id, args.months)
    _emit(report.format_timeline(result, args.user_id, args.months))


def cmd_payout(args):
    events = load_enriched_events(args.data)
    amount = engine.payout(
        events,
        args.artist,
        args.months,
        rate_per_minute=settings.ROYALTY_RATE_PER_MINUTE,
        min_billable_ms=settings.MIN_BILLABLE_MS,
    )
    _emit(report.format_payout(amount))


def cmd_serve(args):
    import uvicorn

    uvicorn.run("streamtally.api.main:app", host=args.host, port=args.port, log_config=None)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="streamtally", description="Streaming play analytics")
    parser.add_argument("--data", default=settings.OUTPUT_JSON, help="Enriched events JSON file")
    sub = parser.add_subparsers(dest="command", required=True)

    ingest = sub.add_parser("ingest", help="Enrich the raw play log with song metadata")
    ingest.add_argument("--csv", default=settings.EVENTS_CSV)
    ingest.add_argument("--output", default=settings.OUTPUT_JSON)
    ingest.add_argument("--metadata-url", default=settings.METADATA_SERVICE_URL)
    ingest.add_argument("--metrics-textfile", default=settings.METRICS_TEXTFILE)
    ingest.set_defaults(func=cmd_ingest)

    top = sub.add_parser("top-songs", help="Most played songs in a date range")
    top.add_argument("start", type=_instant)
    top.add_argument("end", type=_instant)
    top.add_argument("n", type=int)
    top.set_defaults(func=cmd_top_songs)

    tl = sub.add_parser("timeline", help="Top song and artist per month for a user")
    tl.add_argument("user_id")
    tl.add_argument("months", type=int)
    tl.set_defaults(func=cmd_timeline)

    pay = sub.add_parser("payout", help="Royalty payout for an artist")
    pay.add_argument("artist")
    pay.add_argument("months", type=int)
    pay.set_defaults(func=cmd_payout)

    serve = sub.add_parser("serve", help="Run the song metadata service")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=3000)
    serve.set_defaults(func=cmd_serve)

    return parser


def main(argv=None) -> int:
    configure_logging(debug=settings.DEBUG, level=settings.LOG_LEVEL)
    args = build_parser().parse_args(argv)

    try:
        args.func(args)
    except StreamTallyError as e:
        err_console.print(f"[bold red]Error:[/bold red] {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
