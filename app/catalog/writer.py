import asyncio
import logging

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.ai import MediaGenerator
from app.core.errors import AuthorNotFound, NotFound, Unauthenticated
from app.core.pipeline import StoredAudio, generate_podcast_audio, generate_thumbnail
from app.core.storage import ObjectStore, StoredAsset
from app.models import (
    AuthContext,
    Podcast,
    PodcastCreate,
    PodcastGenerate,
    User,
    UserCreate,
    UserUpdate,
)

logger = logging.getLogger(__name__)


async def resolve_author(session: AsyncSession, auth: AuthContext | None) -> User:
    if auth is None:
        raise Unauthenticated()

    stmt = select(User).where(User.email == auth.email).order_by(User.id).limit(1)
    user = (await session.execute(stmt)).scalar_one_or_none()
    if not user:
        raise AuthorNotFound()

    return user


async def create_podcast(
    session: AsyncSession, auth: AuthContext | None, fields: PodcastCreate
) -> int:
    user = await resolve_author(session, auth)

    podcast = Podcast(
        **fields.model_dump(),
        author=user.name,
        author_id=user.clerk_id,
        author_image_url=user.image_url,
        user_id=user.id,
    )
    session.add(podcast)
    await session.commit()

    logger.info("Created podcast %s for author %s", podcast.id, user.clerk_id)
    return podcast.id


async def _discard(store: ObjectStore, reference: str) -> None:
    # Cleanup never blocks the catalog write that follows it.
    try:
        await store.delete(reference)
    except Exception:
        logger.warning("Could not delete storage object %s", reference, exc_info=True)


async def create_generated_podcast(
    session: AsyncSession,
    generator: MediaGenerator,
    store: ObjectStore,
    auth: AuthContext | None,
    req: PodcastGenerate,
) -> int:
    """Generate audio and thumbnail concurrently, then insert the podcast.

    Either both assets are stored and exactly one podcast is written, or the
    first failure is raised after removing whichever asset did get stored.
    A failed insert removes both stored assets before re-raising.
    """
    await resolve_author(session, auth)

    audio, image = await asyncio.gather(
        generate_podcast_audio(generator, store, req.voice_prompt, req.voice_type),
        generate_thumbnail(generator, store, req.image_prompt),
        return_exceptions=True,
    )

    failure = next((r for r in (audio, image) if isinstance(r, BaseException)), None)
    if failure is not None:
        if isinstance(audio, StoredAudio):
            await _discard(store, audio.asset.reference)
        if isinstance(image, StoredAsset):
            await _discard(store, image.reference)
        raise failure

    fields = PodcastCreate(
        title=req.title,
        description=req.description,
        audio_storage_id=audio.asset.reference,
        audio_url=audio.asset.url,
        image_storage_id=image.reference,
        image_url=image.url,
        voice_prompt=req.voice_prompt,
        image_prompt=req.image_prompt,
        voice_type=req.voice_type,
        audio_duration=audio.duration,
    )
    try:
        return await create_podcast(session, auth, fields)
    except Exception:
        await session.rollback()
        await asyncio.gather(
            _discard(store, audio.asset.reference), _discard(store, image.reference)
        )
        raise


async def update_podcast_views(session: AsyncSession, podcast_id: int) -> int:
    # Single statement increment; concurrent viewers cannot lose an update.
    stmt = (
        update(Podcast)
        .where(Podcast.id == podcast_id)
        .values(views=Podcast.views + 1)
        .returning(Podcast.views)
    )
    views = (await session.execute(stmt)).scalar_one_or_none()
    if views is None:
        await session.rollback()
        raise NotFound("Podcast not found")

    await session.commit()
    return views


async def delete_podcast(
    session: AsyncSession,
    store: ObjectStore,
    podcast_id: int,
    image_ref: str,
    audio_ref: str,
) -> None:
    podcast = await session.get(Podcast, podcast_id)
    if not podcast:
        raise NotFound("Podcast not found")

    await asyncio.gather(_discard(store, image_ref), _discard(store, audio_ref))

    await session.delete(podcast)
    await session.commit()

    logger.info("Deleted podcast %s", podcast_id)


async def create_user(session: AsyncSession, fields: UserCreate) -> User:
    user = User(**fields.model_dump())
    session.add(user)
    await session.commit()
    return user


async def repair_author_denormalization(
    session: AsyncSession, identity_key: str, new_avatar_url: str, new_email: str
) -> User:
    stmt = select(User).where(User.clerk_id == identity_key)
    user = (await session.execute(stmt)).scalar_one_or_none()
    if not user:
        raise NotFound("User not found")

    user.update(UserUpdate(image_url=new_avatar_url, email=new_email).model_dump())
    await session.commit()

    result = await session.execute(
        update(Podcast)
        .where(Podcast.author_id == identity_key)
        .values(author_image_url=new_avatar_url)
        .execution_options(synchronize_session=False)
    )
    await session.commit()

    logger.info("Refreshed author avatar on %d podcasts of %s", result.rowcount, identity_key)
    return user


async def delete_user(session: AsyncSession, identity_key: str) -> None:
    stmt = select(User).where(User.clerk_id == identity_key)
    user = (await session.execute(stmt)).scalar_one_or_none()
    if not user:
        raise NotFound("User not found")

    # Podcasts stay; they are looked up by author_id, not by the user row.
    await session.execute(
        update(Podcast)
        .where(Podcast.user_id == user.id)
        .values(user_id=None)
        .execution_options(synchronize_session=False)
    )
    await session.delete(user)
    await session.commit()
