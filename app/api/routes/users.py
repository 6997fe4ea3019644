from fastapi import APIRouter, Response

from app.api.deps import AdminKey, SessionCurrent
from app.catalog import reader, writer
from app.models import (
    AuthorPodcastsResult,
    PodcastResult,
    TopAuthorPodcast,
    TopAuthorResult,
    UserCreate,
    UserResult,
    UserUpdate,
)

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("/top", response_model=list[TopAuthorResult])
async def get_top_authors(session: SessionCurrent) -> list[TopAuthorResult]:
    authors = await reader.get_top_authors(session)
    return [
        TopAuthorResult(
            **author.user.to_dict(),
            total_podcasts=author.total_podcasts,
            podcasts=[TopAuthorPodcast(title=p.title, id=p.id) for p in author.podcasts],
        )
        for author in authors
    ]


@router.get("/{clerk_id}", response_model=UserResult)
async def get_user(clerk_id: str, session: SessionCurrent) -> UserResult:
    user = await reader.get_user_by_identity(session, clerk_id)
    return UserResult(**user.to_dict())


@router.get("/{clerk_id}/podcasts", response_model=AuthorPodcastsResult)
async def get_author_podcasts(clerk_id: str, session: SessionCurrent) -> AuthorPodcastsResult:
    result = await reader.get_by_author(session, clerk_id)
    return AuthorPodcastsResult(
        podcasts=[PodcastResult(**podcast.to_dict()) for podcast in result.podcasts],
        listeners=result.listeners,
    )


# Identity provider lifecycle events
@router.post("", response_model=UserResult, dependencies=[AdminKey])
async def create_user(req: UserCreate, session: SessionCurrent) -> UserResult:
    user = await writer.create_user(session, req)
    return UserResult(**user.to_dict())


@router.patch("/{clerk_id}", response_model=UserResult, dependencies=[AdminKey])
async def update_user(clerk_id: str, req: UserUpdate, session: SessionCurrent) -> UserResult:
    user = await writer.repair_author_denormalization(session, clerk_id, req.image_url, req.email)
    return UserResult(**user.to_dict())


@router.delete("/{clerk_id}", dependencies=[AdminKey])
async def delete_user(clerk_id: str, session: SessionCurrent):
    await writer.delete_user(session, clerk_id)
    return Response(status_code=204)
