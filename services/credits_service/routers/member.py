"""Member-facing credit endpoints."""

from fastapi import APIRouter, Depends
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.db.session import get_async_db
from services.credits_service.schemas import MyCreditsResponse
from services.credits_service.services.ledger_ops import get_my_credits
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/credits", tags=["credits"])


@router.get("/me", response_model=MyCreditsResponse)
async def read_my_credits(
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Current balance and full ledger of the caller."""
    return await get_my_credits(db, actor=current_user)
