"""Unauthenticated endpoints: leaderboard, referral redirect, health."""
from fastapi import APIRouter, Depends
from fastapi.responses import RedirectResponse

from backend.app.api.deps import get_store
from backend.app.core.store import RecordStore
from backend.app.schemas import LeaderboardResponse, OkResponse
from backend.app.services.leaderboard import compute_leaderboard
from backend.app.services.referrals import registration_deep_link

router = APIRouter()
redirect_router = APIRouter()


@router.get("/leaderboard", response_model=LeaderboardResponse)
async def get_leaderboard(store: RecordStore = Depends(get_store)):
    """Top users by earnings and by referral count (recomputed on each request)."""
    return await compute_leaderboard(store)


@router.get("/health", response_model=OkResponse)
async def health_check():
    return {"ok": True}


@redirect_router.get("/r/{code}", include_in_schema=False)
async def referral_redirect(code: str):
    """Shared referral link -> registration screen of the web client with the code prefilled."""
    return RedirectResponse(url=registration_deep_link(code), status_code=302)
