"""Root status endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Request, status

from teamsync_api.settings import Settings

from .schemas import ApiStatusResponse

router = APIRouter()


@router.get(
    "/",
    response_model=ApiStatusResponse,
    status_code=status.HTTP_200_OK,
    summary="API status",
)
async def read_status(request: Request) -> ApiStatusResponse:
    """Report that the API is up; only reachable once startup seeding finished."""

    settings: Settings = request.app.state.settings
    return ApiStatusResponse(message="API is running", version=settings.app_version)


__all__ = ["router"]
