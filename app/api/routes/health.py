from fastapi import APIRouter, HTTPException
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from app.api.deps import SessionCurrent

router = APIRouter(prefix="/health", tags=["Health"])


@router.get("")
async def check_health(session: SessionCurrent):
    try:
        await session.scalar(select(1))
    except SQLAlchemyError:
        raise HTTPException(status_code=503, detail="Database connection failed")
