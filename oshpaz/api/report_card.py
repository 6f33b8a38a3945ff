"""
Report Card API endpoints.

Free users get the grade and calorie numbers only.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ..core import report_card
from ..core.report_card import ReportCardResult, strip_for_free_tier
from ..dependencies import ServiceContainer, get_services
from ..models import DailyReportCard
from ..utils.auth import get_current_tg_id

router = APIRouter(prefix="/api/report-card", tags=["report-card"])


async def _respond(result: ReportCardResult, tg_id: str, services: ServiceContainer) -> DailyReportCard:
    if result.status == report_card.USER_NOT_FOUND:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    if result.status == report_card.NO_MEALS:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No confirmed meals today"
        )
    if result.report is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Report card generation failed"
        )

    if await services.subscriptions.is_premium(tg_id, services.clock.now()):
        return result.report
    return strip_for_free_tier(result.report)


@router.get("/today", response_model=DailyReportCard)
async def today_report(
    language: Optional[str] = Query(None, pattern="^(uz|en)$"),
    tg_id: str = Depends(get_current_tg_id),
    services: ServiceContainer = Depends(get_services)
):
    """Today's report card, generated on first request and cached for the day."""
    result = await services.report_cards.get_today(tg_id, language)
    return await _respond(result, tg_id, services)


@router.post("/refresh", response_model=DailyReportCard)
async def refresh_report(
    language: Optional[str] = Query(None, pattern="^(uz|en)$"),
    tg_id: str = Depends(get_current_tg_id),
    services: ServiceContainer = Depends(get_services)
):
    """Regenerate today's report card, replacing the cached one."""
    result = await services.report_cards.generate(tg_id, language, force_refresh=True)
    return await _respond(result, tg_id, services)
