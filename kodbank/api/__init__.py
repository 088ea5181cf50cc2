"""API routes."""

from fastapi import APIRouter

from kodbank.api import admin, auth, bank, health

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(bank.router, prefix="/bank", tags=["bank"])
router.include_router(admin.router, prefix="/admin", tags=["admin"])
