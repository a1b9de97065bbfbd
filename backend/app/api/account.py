from fastapi import APIRouter, Depends, HTTPException, Request

from backend.app.api.deps import get_store
from backend.app.core.auth import get_current_user_jwt
from backend.app.core.exceptions import ServiceError
from backend.app.core.logging import get_logger
from backend.app.core.settings import get_settings
from backend.app.core.store import RecordStore
from backend.app.schemas import MeResponse, ReferralLinkResponse, WithdrawRequest, WithdrawResponse
from backend.app.services.referrals import build_referral_link
from backend.app.services.users import UserService
from backend.app.services.wallet import WalletService

router = APIRouter()
logger = get_logger(__name__)


def _handle_service_error(e: ServiceError):
    """Convert service exceptions to HTTP exceptions."""
    raise HTTPException(status_code=e.status_code, detail=e.message)


def request_origin(request: Request) -> str:
    """Public origin of the app, honouring reverse-proxy headers."""
    base_url = get_settings().PUBLIC_BASE_URL
    if base_url:
        return base_url.rstrip("/")
    proto = request.headers.get("x-forwarded-proto") or "http"
    host = request.headers.get("x-forwarded-host") or request.headers.get("host") or request.url.netloc
    return f"{proto}://{host}"


@router.get("/me", response_model=MeResponse)
async def get_me(
    user_id: str = Depends(get_current_user_jwt),
    store: RecordStore = Depends(get_store),
):
    """Профиль, кошелек и заявки на вывод текущего пользователя"""
    try:
        user = await UserService(store).get_user_or_404(user_id)
        wallet_service = WalletService(store)
        wallet = await wallet_service.get_wallet(user.id)
        withdraws = await wallet_service.list_withdrawals(user.id)
    except ServiceError as e:
        _handle_service_error(e)

    return {"user": user.public(), "wallet": wallet, "withdraws": withdraws}


@router.get("/referral/link", response_model=ReferralLinkResponse)
async def get_referral_link(
    request: Request,
    user_id: str = Depends(get_current_user_jwt),
    store: RecordStore = Depends(get_store),
):
    try:
        user = await UserService(store).get_user_or_404(user_id)
    except ServiceError as e:
        _handle_service_error(e)

    return {"link": build_referral_link(request_origin(request), user.referral_code)}


@router.post("/withdraw", response_model=WithdrawResponse)
async def withdraw(
    data: WithdrawRequest,
    user_id: str = Depends(get_current_user_jwt),
    store: RecordStore = Depends(get_store),
):
    """
    Request a payout. The balance is debited now; the request stays pending.
    """
    service = WalletService(store)
    try:
        withdrawal = await service.request_withdrawal(
            user_id=user_id,
            amount=data.amount,
            method=data.method,
            details=data.details,
        )
    except ServiceError as e:
        if e.status_code != 404:
            logger.info("Withdrawal rejected", user_id=user_id, reason=e.message)
        _handle_service_error(e)

    return {"ok": True, "withdraw": withdrawal}
