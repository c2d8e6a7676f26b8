import orjson
import structlog
from contextlib import asynccontextmanager
from pathlib import Path
from pydantic import ValidationError

from fastapi import FastAPI

from streamtally.api.schemas import SongCatalogFile
from streamtally.api.v1.songs import router as songs_router
from streamtally.domains.ingestion.metadata import SongCatalog
from streamtally.settings import DEBUG, LOG_LEVEL, SONGS_FILE
from streamtally.utils.logging import configure_logging


configure_logging(debug=DEBUG, level=LOG_LEVEL)

logger = structlog.get_logger("metadata_service")


def load_catalog(songs_file) -> SongCatalog:
    try:
        data = SongCatalogFile.model_validate(orjson.loads(Path(songs_file).read_bytes()))
    except (OSError, orjson.JSONDecodeError, ValidationError) as e:
        logger.error("songs_data_load_failed", path=str(songs_file), error=str(e))
        return SongCatalog({})

    logger.info("songs_data_loaded", path=str(songs_file), count=len(data.songs))
    return SongCatalog.from_songs(data.songs)


def create_app(songs_file=SONGS_FILE) -> FastAPI:

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("application_starting")
        app.state.catalog = load_catalog(songs_file)
        try:
            yield
        finally:
            logger.info("application_stopping")

    app = FastAPI(
        title="StreamTally Metadata API",
        version="1.0.0",
        lifespan=lifespan
    )

    app.include_router(songs_router, tags=["Songs"])

    @app.get("/health")
    async def health_check():
        return {"status": "ok", "service": "metadata"}

    return app


app = create_app()
