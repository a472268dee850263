"""Scheduled follow-up sending.

Finds interactions whose follow-up date has arrived, emails the student and/or
staff member, and marks them sent. Each interaction is handled on its own: a
failed send is recorded and the interaction stays unsent for the next run,
while the remaining interactions are still processed.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.app.core.exceptions import EmailDeliveryError
from backend.app.core.logging_config import get_logger
from backend.app.core.time import utc_today
from backend.app.models.interaction import Interaction
from backend.app.services.email import FOLLOW_UP_SUBJECT, build_follow_up_email
from backend.app.services.system_settings import get_system_settings

logger = get_logger(__name__)


@dataclass
class FollowUpFailure:
    interaction_id: int
    recipient: Optional[str]
    error: str


@dataclass
class FollowUpRunResult:
    processed: int = 0
    sent_count: int = 0
    marked_sent: List[int] = field(default_factory=list)
    failures: List[FollowUpFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


def find_due_follow_ups(db: Session, today: Optional[date] = None) -> List[Interaction]:
    today_str = (today or utc_today()).isoformat()
    return (
        db.query(Interaction)
        .filter(
            Interaction.follow_up_required.is_(True),
            Interaction.follow_up_sent.is_(False),
            Interaction.follow_up_date.isnot(None),
            Interaction.follow_up_date <= today_str,
            Interaction.is_archived.is_(False),
            or_(Interaction.follow_up_student.is_(True), Interaction.follow_up_staff.is_(True)),
        )
        .order_by(Interaction.follow_up_date.asc(), Interaction.id.asc())
        .all()
    )


def preview_due_follow_ups(db: Session, today: Optional[date] = None) -> List[dict]:
    return [
        {
            "id": interaction.id,
            "follow_up_date": interaction.follow_up_date,
            "follow_up_student": interaction.follow_up_student,
            "follow_up_student_email": interaction.follow_up_student_email,
            "follow_up_staff": interaction.follow_up_staff,
            "follow_up_staff_email": interaction.follow_up_staff_email,
        }
        for interaction in find_due_follow_ups(db, today)
    ]


def _recipients(interaction: Interaction) -> List[tuple[str, str]]:
    recipients = []
    if interaction.follow_up_student and interaction.follow_up_student_email:
        recipients.append(("student", interaction.follow_up_student_email))
    if interaction.follow_up_staff and interaction.follow_up_staff_email:
        recipients.append(("staff", interaction.follow_up_staff_email))
    return recipients


async def send_scheduled_follow_ups(db: Session, mailer, *, today: Optional[date] = None) -> FollowUpRunResult:
    """Send every due follow-up; one failure never blocks the rest of the batch."""
    result = FollowUpRunResult()
    system_settings = get_system_settings(db)
    from_address = getattr(system_settings, "from_email", None) or None
    bcc = None
    if system_settings is not None and system_settings.bcc_admin and system_settings.admin_email:
        bcc = system_settings.admin_email

    interactions = find_due_follow_ups(db, today)
    logger.info("Starting scheduled follow-up run for %d interaction(s)", len(interactions))

    for interaction in interactions:
        result.processed += 1
        failed = False
        for recipient_type, address in _recipients(interaction):
            try:
                await mailer.send(
                    address,
                    FOLLOW_UP_SUBJECT,
                    build_follow_up_email(interaction, recipient_type),
                    from_address=from_address,
                    bcc=bcc,
                )
            except EmailDeliveryError as exc:
                failed = True
                result.failures.append(FollowUpFailure(interaction.id, address, exc.message))
                logger.error("Follow-up %s email for interaction %s failed: %s", recipient_type, interaction.id, exc.message)
                continue
            result.sent_count += 1

        if failed:
            continue
        interaction_id = interaction.id
        try:
            interaction.follow_up_sent = True
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            result.failures.append(FollowUpFailure(interaction_id, None, f"Could not mark follow-up sent: {exc}"))
            logger.error("Marking interaction %s sent failed: %s", interaction_id, exc, exc_info=True)
            continue
        result.marked_sent.append(interaction_id)

    logger.info(
        "Follow-up run finished: %d sent, %d marked sent, %d failure(s)",
        result.sent_count,
        len(result.marked_sent),
        len(result.failures),
    )
    return result
