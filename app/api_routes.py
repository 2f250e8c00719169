from __future__ import annotations
from fastapi import APIRouter
from app.routes.analyze import router as analyze_router
from app.routes.health import router as health_router

AVAILABLE_ROUTES = ["GET /health", "POST /api/analyze"]

router = APIRouter()
router.include_router(health_router, tags=["health"])
router.include_router(analyze_router)
