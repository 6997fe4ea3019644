import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Sequence

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import InstrumentedAttribute

from app.core.config import settings
from app.core.errors import NotFound
from app.models import Podcast, User

logger = logging.getLogger(__name__)

# Strongest signal first; the first stage with any match wins.
SEARCH_STAGES: tuple[InstrumentedAttribute[str], ...] = (
    Podcast.author,
    Podcast.title,
    Podcast.description,
)


@dataclass
class AuthorPodcasts:
    podcasts: list[Podcast] = field(default_factory=list)
    listeners: int = 0


@dataclass
class TopAuthor:
    user: User
    total_podcasts: int
    podcasts: list[Podcast]


async def get_podcast(session: AsyncSession, podcast_id: int) -> Podcast:
    podcast = await session.get(Podcast, podcast_id)
    if not podcast:
        raise NotFound("Podcast not found")
    return podcast


async def get_all_podcasts(session: AsyncSession) -> Sequence[Podcast]:
    stmt = select(Podcast).order_by(Podcast.id.desc())
    return (await session.execute(stmt)).scalars().all()


async def get_trending(session: AsyncSession, limit: int | None = None) -> Sequence[Podcast]:
    limit = settings.trending_limit if limit is None else limit
    stmt = select(Podcast).order_by(Podcast.views.desc(), Podcast.id).limit(limit)
    return (await session.execute(stmt)).scalars().all()


async def get_similar_by_voice(session: AsyncSession, podcast_id: int) -> Sequence[Podcast]:
    podcast = await session.get(Podcast, podcast_id)
    if not podcast:
        return []

    stmt = (
        select(Podcast)
        .where(Podcast.voice_type == podcast.voice_type)
        .where(Podcast.id != podcast_id)
        .order_by(Podcast.id)
    )
    return (await session.execute(stmt)).scalars().all()


async def get_by_author(session: AsyncSession, author_id: str) -> AuthorPodcasts:
    stmt = select(Podcast).where(Podcast.author_id == author_id).order_by(Podcast.id)
    podcasts = list((await session.execute(stmt)).scalars().all())
    return AuthorPodcasts(podcasts=podcasts, listeners=sum(p.views for p in podcasts))


def _match(session: AsyncSession, column: InstrumentedAttribute[str], term: str) -> Select:
    if session.get_bind().dialect.name == "postgresql":
        document = func.to_tsvector("simple", column)
        query = func.plainto_tsquery("simple", term)
        rank = func.ts_rank(document, query)
        return select(Podcast).where(document.op("@@")(query)).order_by(rank.desc(), Podcast.id)

    return select(Podcast).where(column.icontains(term, autoescape=True)).order_by(Podcast.id)


async def search(
    session: AsyncSession, term: str | None, limit: int | None = None
) -> Sequence[Podcast]:
    term = (term or "").strip()
    if not term:
        return await get_all_podcasts(session)

    limit = settings.search_limit if limit is None else limit
    results: Sequence[Podcast] = []
    for column in SEARCH_STAGES:
        stmt = _match(session, column, term).limit(limit)
        results = (await session.execute(stmt)).scalars().all()
        if results:
            logger.debug("Search %r matched %d on %s", term, len(results), column.key)
            break

    return results


async def get_top_authors(session: AsyncSession) -> list[TopAuthor]:
    users = (await session.execute(select(User).order_by(User.id))).scalars().all()

    stmt = select(Podcast).order_by(Podcast.views.desc(), Podcast.id)
    by_author: dict[str, list[Podcast]] = defaultdict(list)
    for podcast in (await session.execute(stmt)).scalars():
        by_author[podcast.author_id].append(podcast)

    authors = [
        TopAuthor(
            user=user,
            total_podcasts=len(by_author[user.clerk_id]),
            podcasts=by_author[user.clerk_id],
        )
        for user in users
    ]
    return sorted(authors, key=lambda a: a.total_podcasts, reverse=True)


async def get_user_by_identity(session: AsyncSession, identity_key: str) -> User:
    stmt = select(User).where(User.clerk_id == identity_key)
    user = (await session.execute(stmt)).scalar_one_or_none()
    if not user:
        raise NotFound("User not found")
    return user
