import argparse
import csv
import random
import uuid
from datetime import datetime, timedelta, timezone
from pathlib import Path

import orjson
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from streamtally.domains.ingestion.enricher import CSV_COLUMNS
from streamtally.utils.timeutils import to_iso


# Configuration
SONG_COUNT = 200
USER_COUNT = 50
EVENT_COUNT = 20000
DAYS_BACK = 365
UNKNOWN_SONG_SHARE = 0.01

ARTISTS = ["Drake", "Taylor Swift", "The Weeknd", "Bad Bunny", "Dua Lipa", "Kendrick Lamar", "SZA", "Rosalía"]
WORDS = ["Midnight", "Echo", "Golden", "River", "Neon", "Paper", "Summer", "Ghost", "Velvet", "Signal"]

console = Console()


def generate_songs(count: int) -> list:
    songs = []
    for _ in range(count):
        released = datetime(2015, 1, 1) + timedelta(days=random.randint(0, 3000))
        songs.append({
            "songId": str(uuid.uuid4()),
            "title": " ".join(random.sample(WORDS, 2)),
            "artist": random.choice(ARTISTS),
            "releaseDate": released.strftime("%Y-%m-%d"),
        })
    return songs


def generate_events(songs: list, users: int, count: int, days_back: int) -> list:
    """
    Plays spread over the last `days_back` days. A small share references
    songs the catalog does not know, to exercise the skip path.
    """
    user_ids = [str(uuid.uuid4()) for _ in range(users)]
    song_ids = [song["songId"] for song in songs]
    now = datetime.now(timezone.utc)

    events = []
    for _ in range(count):
        if random.random() < UNKNOWN_SONG_SHARE:
            song_id = str(uuid.uuid4())
        else:
            song_id = random.choice(song_ids)

        events.append({
            "userId": random.choice(user_ids),
            "songId": song_id,
            "timestamp": to_iso(now - timedelta(seconds=random.randint(0, days_back * 86400))),
            "durationMs": random.randint(1000, 300000),
        })
    events.sort(key=lambda e: e["timestamp"])
    return events


def main():
    parser = argparse.ArgumentParser(description="Generate a synthetic songs catalog and play log")
    parser.add_argument("--out-dir", default="static/data")
    parser.add_argument("--songs", type=int, default=SONG_COUNT)
    parser.add_argument("--users", type=int, default=USER_COUNT)
    parser.add_argument("--events", type=int, default=EVENT_COUNT)
    parser.add_argument("--days", type=int, default=DAYS_BACK)
    parser.add_argument("--seed", type=int)
    args = parser.parse_args()

    if args.seed is not None:
        random.seed(args.seed)

    out_dir = Path(args.out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    console.print(
        Panel(
            f"Songs: [bold]{args.songs}[/bold]\n"
            f"Users: [bold]{args.users}[/bold]\n"
            f"Events: [bold]{args.events}[/bold] over [bold]{args.days}[/bold] days",
            title="StreamTally dataset generator",
        )
    )

    songs = generate_songs(args.songs)
    events = generate_events(songs, args.users, args.events, args.days)

    songs_path = out_dir / "songs.json"
    songs_path.write_bytes(orjson.dumps({"songs": songs}, option=orjson.OPT_INDENT_2))

    events_path = out_dir / "streamingEvents.csv"
    with open(events_path, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=CSV_COLUMNS)
        writer.writeheader()
        writer.writerows(events)

    table = Table(title="Generated files", show_header=True, header_style="bold magenta")
    table.add_column("File", style="dim")
    table.add_column("Records", style="bold yellow")
    table.add_row(str(songs_path), f"{len(songs):,}")
    table.add_row(str(events_path), f"{len(events):,}")
    console.print(table)


if __name__ == "__main__":
    main()
