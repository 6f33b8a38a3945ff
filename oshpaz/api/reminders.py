"""
Reminder settings API endpoints.
"""

from fastapi import APIRouter, Depends, HTTPException, status

from ..dependencies import ServiceContainer, get_services
from ..models import ReminderSettings, ReminderSettingsUpdate
from ..utils.auth import get_current_tg_id

router = APIRouter(prefix="/api/reminders", tags=["reminders"])


@router.get("", response_model=ReminderSettings)
async def get_reminders(
    tg_id: str = Depends(get_current_tg_id),
    services: ServiceContainer = Depends(get_services)
):
    user = await services.users.get(tg_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user.reminders


@router.put("", response_model=ReminderSettings)
async def update_reminders(
    update: ReminderSettingsUpdate,
    tg_id: str = Depends(get_current_tg_id),
    services: ServiceContainer = Depends(get_services)
):
    """Replace the given categories; omitted ones keep their settings."""
    user = await services.users.get(tg_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    for category in update.model_fields_set:
        value = getattr(update, category)
        if value is not None:
            setattr(user.reminders, category, value)
    await services.users.save(user)
    return user.reminders
