from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
import logging

from app.database.base import get_db
from app.models.user import User
from app.schemas.message import MessageSendRequest, MessageSendResponse
from app.auth.security import get_current_db_user
from app.services.connection_service import ConnectionService
from app.utils.knock import get_knock_client

router = APIRouter()

logger = logging.getLogger(__name__)


@router.post("/send", response_model=MessageSendResponse)
def send_message(
        request: MessageSendRequest,
        user: User = Depends(get_current_db_user),
        db: Session = Depends(get_db),
        knock=Depends(get_knock_client)
):
    """
    Relay a message to the other party of an accepted connection.

    Messages are not stored; a failed delivery is returned with the
    notification service's status code.
    """
    ConnectionService(db, knock).send_message(
        user, request.connection_id, request.message, request.recipient_type
    )
    return {"success": True, "message": "Message sent successfully"}
