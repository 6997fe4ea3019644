from fastapi import APIRouter

from app.api.routes import assets, health, podcasts, users

api_router = APIRouter()
api_router.include_router(health.router)
api_router.include_router(podcasts.router)
api_router.include_router(users.router)
api_router.include_router(assets.router)
