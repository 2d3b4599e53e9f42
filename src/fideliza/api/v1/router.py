"""Primary API router definition."""

from fastapi import APIRouter

from . import customers, dashboard, public, redemptions, rewards

api_router = APIRouter()

api_router.include_router(public.router)
api_router.include_router(customers.router)
api_router.include_router(rewards.router)
api_router.include_router(redemptions.router)
api_router.include_router(dashboard.router)


@api_router.get("/health", tags=["health"])
async def healthcheck() -> dict[str, str]:
    """Basic health probe endpoint."""
    return {"status": "ok"}
