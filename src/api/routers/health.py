from __future__ import annotations

from fastapi import APIRouter

from core.constraint import APP_VERSION
from models.schemas import HealthStatus

router = APIRouter(tags=["health"])


@router.get("/health", summary="Health check", response_model=HealthStatus)
def health() -> HealthStatus:
    return HealthStatus(status="ok", version=APP_VERSION)


__all__ = ["router"]
