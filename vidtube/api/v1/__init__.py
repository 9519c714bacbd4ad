"""API v1 routes."""

from fastapi import APIRouter

from vidtube.api.v1 import accounts, auth, health

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(auth.router, prefix="/users", tags=["auth"])
router.include_router(accounts.router, prefix="/users", tags=["accounts"])
