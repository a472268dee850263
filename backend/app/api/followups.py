"""Scheduled follow-up trigger and dry-run health check."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from backend.app.db.session import get_db
from backend.app.dependencies.auth import get_current_user, require_cron_caller
from backend.app.models.user import User
from backend.app.schemas.follow_up import CronHealthRead, FollowUpRunRead
from backend.app.services.email import Mailer, get_mailer
from backend.app.services.follow_up_dispatch import preview_due_follow_ups, send_scheduled_follow_ups

router = APIRouter(tags=["followups"])


@router.post("/followup-cron", response_model=FollowUpRunRead)
async def run_follow_up_cron(
    db: Session = Depends(get_db),
    mailer: Mailer = Depends(get_mailer),
    caller: str = Depends(require_cron_caller),
):
    result = await send_scheduled_follow_ups(db, mailer)
    return {
        "success": result.ok,
        "processed": result.processed,
        "sent_count": result.sent_count,
        "marked_sent": result.marked_sent,
        "failures": [
            {"interaction_id": failure.interaction_id, "recipient": failure.recipient, "error": failure.error}
            for failure in result.failures
        ],
        "triggered_by": caller,
    }


@router.get("/cron-health", response_model=CronHealthRead)
async def cron_health(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    due = preview_due_follow_ups(db)
    return {"ok": True, "count": len(due), "interactions": due}
