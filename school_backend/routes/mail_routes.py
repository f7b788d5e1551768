import logging
import smtplib

from fastapi import APIRouter, Depends, HTTPException, status

from school_backend.auth.dependencies import CurrentUser, require_admin
from school_backend.core.config import Settings, get_settings
from school_backend.schemas import MessageResponse, SendTestEmailRequest
from school_backend.services import mailer

router = APIRouter(tags=['mail'])

logger = logging.getLogger(__name__)


@router.post('/send-test-email', response_model=MessageResponse)
def send_test_email(
    data: SendTestEmailRequest,
    current_user: CurrentUser = Depends(require_admin),
    settings: Settings = Depends(get_settings),
):
    try:
        mailer.send_email(
            settings,
            to=data.email,
            subject='Test Email',
            text=f'Hello {data.name},\nThis is a test email.',
        )
    except mailer.MailNotConfiguredError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
    except (smtplib.SMTPException, OSError) as exc:
        logger.exception('Error sending test email')
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail='Error sending test email',
        ) from exc

    return MessageResponse(message='Test email sent successfully')
