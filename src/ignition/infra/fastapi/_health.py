"""Liveness endpoint.

Reports only that the process is serving requests; the platform and UAA are
not probed so an outage there does not take the app out of rotation.
"""

from __future__ import annotations

from fastapi import APIRouter

router = APIRouter(tags=["health"])


@router.get("/healthz")
async def healthz() -> dict[str, str]:
    return {"status": "ok"}
