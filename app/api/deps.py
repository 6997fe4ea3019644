from typing import Annotated, AsyncGenerator

from fastapi import Depends, HTTPException, Security
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.ai import MediaGenerator, generator
from app.core.database import async_session
from app.core.security import (
    admin_api_key_header,
    bearer_scheme,
    verify_admin_key,
    verify_token,
)
from app.core.storage import ObjectStore, object_store
from app.models import AuthContext


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    async with async_session() as session:
        yield session


SessionCurrent = Annotated[AsyncSession, Depends(get_session)]

CredentialsCurrent = Annotated[HTTPAuthorizationCredentials | None, Security(bearer_scheme)]


async def get_auth(credentials: CredentialsCurrent) -> AuthContext | None:
    if credentials is None:
        return None
    return verify_token(credentials.credentials)


AuthCurrent = Annotated[AuthContext | None, Depends(get_auth)]


async def get_admin_key(api_key: Annotated[str | None, Security(admin_api_key_header)]) -> str:
    """Verify admin API key using FastAPI's built-in APIKeyHeader"""
    if not api_key:
        raise HTTPException(status_code=403, detail="Admin API key required in X-Admin-Key header")

    if not verify_admin_key(api_key):
        raise HTTPException(status_code=403, detail="Invalid admin API key")

    return api_key


AdminKey = Depends(get_admin_key)


async def get_generator() -> MediaGenerator:
    return generator


GeneratorCurrent = Annotated[MediaGenerator, Depends(get_generator)]


async def get_store() -> ObjectStore:
    return object_store


StoreCurrent = Annotated[ObjectStore, Depends(get_store)]
