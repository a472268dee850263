"""Test and custom email sending."""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from backend.app.core.exceptions import EmailDeliveryError
from backend.app.dependencies.auth import get_current_user
from backend.app.models.user import User
from backend.app.schemas.email import EmailSendRequest, EmailSendResponse
from backend.app.services.email import Mailer, build_custom_email_html, build_test_email, get_mailer

router = APIRouter(prefix="/email", tags=["email"])


@router.post("/test", response_model=EmailSendResponse)
async def send_test_email(
    payload: EmailSendRequest,
    mailer: Mailer = Depends(get_mailer),
    current_user: User = Depends(get_current_user),
):
    recipient = payload.recipient
    if not recipient:
        return JSONResponse(status_code=400, content={"success": False, "message": "Email address is required"})

    if payload.body:
        subject = payload.subject or build_test_email()["subject"]
        text = payload.body
        html = build_custom_email_html(payload.body)
    else:
        message = build_test_email()
        subject = payload.subject or message["subject"]
        text = message["text"]
        html = message["html"]

    try:
        message_id = await mailer.send(recipient, subject, text, html, reply_to=payload.reply_to)
    except EmailDeliveryError as exc:
        return JSONResponse(status_code=502, content={"success": False, "message": exc.message})

    return {"success": True, "message": f"Email sent successfully to {recipient}", "message_id": message_id}
