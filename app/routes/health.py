from __future__ import annotations

from fastapi import APIRouter

from app.services.responses import iso_timestamp

router = APIRouter()


@router.get("/health")
def health():
    return {
        "status": "OK",
        "message": "Le serveur backend fonctionne correctement",
        "timestamp": iso_timestamp(),
    }
