"""Main API router."""

from fastapi import APIRouter

from src.api.auth import router as auth_router
from src.api.comments import router as comments_router
from src.api.dashboard import router as dashboard_router
from src.api.likes import router as likes_router
from src.api.playlists import router as playlists_router
from src.api.subscriptions import router as subscriptions_router
from src.api.tweets import router as tweets_router
from src.api.users import router as users_router
from src.api.videos import router as videos_router

api_router = APIRouter(prefix="/api")

api_router.include_router(auth_router, prefix="/auth", tags=["auth"])
api_router.include_router(comments_router, prefix="/comments", tags=["comments"])
api_router.include_router(dashboard_router, prefix="/dashboard", tags=["dashboard"])
api_router.include_router(likes_router, prefix="/likes", tags=["likes"])
api_router.include_router(playlists_router, prefix="/playlists", tags=["playlists"])
api_router.include_router(subscriptions_router, prefix="/subscriptions", tags=["subscriptions"])
api_router.include_router(tweets_router, prefix="/tweets", tags=["tweets"])
api_router.include_router(users_router, prefix="/users", tags=["users"])
api_router.include_router(videos_router, prefix="/videos", tags=["videos"])
