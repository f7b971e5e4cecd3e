"""API v1 routes."""

from fastapi import APIRouter

from coop_members.api.v1 import auth, health, members

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(members.router, prefix="/members", tags=["members"])
