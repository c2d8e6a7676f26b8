import structlog
from fastapi import APIRouter, HTTPException
from starlette.requests import Request
from streamtally.api.schemas import SongMetadataSchema


router = APIRouter()
logger = structlog.get_logger()

@router.get("/test")
async def test_endpoint():
    return {"message": "Hello World!"}


@router.get("/songs/{song_id}", response_model=SongMetadataSchema, response_model_by_alias=True)
async def get_song(song_id: str, request: Request):
    log = logger.bind(song_id=song_id)

    catalog = getattr(request.app.state, "catalog", None)
    if catalog is None:
        log.error("catalog_unavailable")
        raise HTTPException(status_code=500, detail="Internal server error")

    song = catalog.get(song_id)
    if song is None:
        log.info("song_not_found")
        raise HTTPException(status_code=404, detail="Song not found")

    return song
