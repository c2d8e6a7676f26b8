from decouple import config


DEBUG = config("DEBUG", default=False, cast=bool)
LOG_LEVEL = config("LOG_LEVEL", default="INFO")

# Metadata service
METADATA_SERVICE_URL = config("METADATA_SERVICE_URL", default="http://localhost:3000")
METADATA_TIMEOUT_S = config("METADATA_TIMEOUT_S", default=5.0, cast=float)
SONGS_FILE = config("SONGS_FILE", default="static/data/songs.json")

# Datasets
EVENTS_CSV = config("EVENTS_CSV", default="static/data/streamingEvents.csv")
OUTPUT_JSON = config("OUTPUT_JSON", default="output.json")

# Empty disables the node_exporter textfile
METRICS_TEXTFILE = config("METRICS_TEXTFILE", default="")

# Royalties
ROYALTY_RATE_PER_MINUTE = config("ROYALTY_RATE_PER_MINUTE", default=0.001, cast=float)
MIN_BILLABLE_MS = config("MIN_BILLABLE_MS", default=10000, cast=int)
