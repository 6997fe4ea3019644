from typing import Annotated

from fastapi import APIRouter, HTTPException, Query, Response, UploadFile

from app.api.deps import AuthCurrent, GeneratorCurrent, SessionCurrent, StoreCurrent
from app.catalog import reader, writer
from app.core import pipeline
from app.core.errors import Unauthenticated
from app.models import (
    AssetResult,
    AudioGenerate,
    AudioResult,
    PodcastCreate,
    PodcastCreateResult,
    PodcastGenerate,
    PodcastResult,
    ThumbnailGenerate,
    ViewsResult,
)

router = APIRouter(prefix="/podcasts", tags=["Podcasts"])

IMAGE_CONTENT_TYPES = {"image/png", "image/jpeg", "image/webp"}


@router.get("", response_model=list[PodcastResult])
async def search_podcasts(session: SessionCurrent, search: str = "") -> list[PodcastResult]:
    podcasts = await reader.search(session, search)
    return [PodcastResult(**podcast.to_dict()) for podcast in podcasts]


@router.get("/trending", response_model=list[PodcastResult])
async def get_trending_podcasts(
    session: SessionCurrent, limit: Annotated[int | None, Query(ge=1)] = None
) -> list[PodcastResult]:
    podcasts = await reader.get_trending(session, limit)
    return [PodcastResult(**podcast.to_dict()) for podcast in podcasts]


@router.post("", response_model=PodcastCreateResult)
async def create_podcast(
    req: PodcastCreate, auth: AuthCurrent, session: SessionCurrent
) -> PodcastCreateResult:
    podcast_id = await writer.create_podcast(session, auth, req)
    return PodcastCreateResult(id=podcast_id)


@router.post("/generate", response_model=PodcastCreateResult)
async def generate_podcast(
    req: PodcastGenerate,
    auth: AuthCurrent,
    session: SessionCurrent,
    generator: GeneratorCurrent,
    store: StoreCurrent,
) -> PodcastCreateResult:
    podcast_id = await writer.create_generated_podcast(session, generator, store, auth, req)
    return PodcastCreateResult(id=podcast_id)


@router.post("/audio", response_model=AudioResult)
async def generate_audio(
    req: AudioGenerate, auth: AuthCurrent, generator: GeneratorCurrent, store: StoreCurrent
) -> AudioResult:
    if auth is None:
        raise Unauthenticated()

    audio = await pipeline.generate_podcast_audio(
        generator, store, req.voice_prompt, req.voice_type
    )
    return AudioResult(
        storage_id=audio.asset.reference, url=audio.asset.url, audio_duration=audio.duration
    )


@router.post("/thumbnail", response_model=AssetResult)
async def generate_thumbnail(
    req: ThumbnailGenerate, auth: AuthCurrent, generator: GeneratorCurrent, store: StoreCurrent
) -> AssetResult:
    if auth is None:
        raise Unauthenticated()

    asset = await pipeline.generate_thumbnail(generator, store, req.image_prompt)
    return AssetResult(storage_id=asset.reference, url=asset.url)


@router.post("/thumbnail/upload", response_model=AssetResult)
async def upload_thumbnail(file: UploadFile, auth: AuthCurrent, store: StoreCurrent) -> AssetResult:
    if auth is None:
        raise Unauthenticated()

    if file.content_type not in IMAGE_CONTENT_TYPES:
        raise HTTPException(status_code=415, detail="Unsupported image type")

    data = await file.read()
    if not data:
        raise HTTPException(status_code=400, detail="Uploaded image is empty")

    asset = await pipeline.upload_thumbnail(store, data, file.content_type)
    return AssetResult(storage_id=asset.reference, url=asset.url)


@router.get("/{podcast_id}", response_model=PodcastResult)
async def get_podcast(podcast_id: int, session: SessionCurrent) -> PodcastResult:
    podcast = await reader.get_podcast(session, podcast_id)
    return PodcastResult(**podcast.to_dict())


@router.get("/{podcast_id}/similar", response_model=list[PodcastResult])
async def get_similar_podcasts(podcast_id: int, session: SessionCurrent) -> list[PodcastResult]:
    podcasts = await reader.get_similar_by_voice(session, podcast_id)
    return [PodcastResult(**podcast.to_dict()) for podcast in podcasts]


@router.post("/{podcast_id}/views", response_model=ViewsResult)
async def update_podcast_views(podcast_id: int, session: SessionCurrent) -> ViewsResult:
    views = await writer.update_podcast_views(session, podcast_id)
    return ViewsResult(id=podcast_id, views=views)


@router.delete("/{podcast_id}")
async def delete_podcast(
    podcast_id: int, auth: AuthCurrent, session: SessionCurrent, store: StoreCurrent
):
    if auth is None:
        raise Unauthenticated()

    podcast = await reader.get_podcast(session, podcast_id)
    if podcast.author_id != auth.subject:
        raise HTTPException(status_code=404, detail="Podcast not found")

    await writer.delete_podcast(
        session, store, podcast_id, podcast.image_storage_id, podcast.audio_storage_id
    )

    return Response(status_code=204)
