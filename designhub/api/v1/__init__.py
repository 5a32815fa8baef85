"""API v1 routes."""

from fastapi import APIRouter

from designhub.api.v1 import admin, auth, contests, health, practices, upload, user

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(user.router, prefix="/user", tags=["user"])
router.include_router(admin.router, prefix="/admin", tags=["admin"])
router.include_router(contests.router, prefix="/contests", tags=["contests"])
router.include_router(practices.router, prefix="/practices", tags=["practices"])
router.include_router(upload.router, prefix="/upload", tags=["upload"])
