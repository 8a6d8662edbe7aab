from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
import logging

from app.database.base import get_db
from app.models.user import User
from app.schemas.connection import ConnectNotificationRequest, ConnectNotificationResponse
from app.auth.security import get_current_db_user
from app.services.connection_service import ConnectionService
from app.services.errors import UpstreamServiceError
from app.utils.knock import get_knock_client

router = APIRouter()

logger = logging.getLogger(__name__)


@router.post("/connect", response_model=ConnectNotificationResponse, status_code=status.HTTP_201_CREATED)
def connect_and_notify(
        request: ConnectNotificationRequest,
        user: User = Depends(get_current_db_user),
        db: Session = Depends(get_db),
        knock=Depends(get_knock_client)
):
    """
    Create a connection request and notify the stakeholder.

    The connection is kept when the notification fails; the error response
    then carries the upstream status and the ``connection_id``.
    """
    service = ConnectionService(db, knock)
    connection = service.create_connection(user, request.stakeholder_id, request.message)

    try:
        service.notify_connection_request(user, connection, request.startup_name)
    except UpstreamServiceError as e:
        logger.error(f"Connection {connection.id} created but notification failed: {e.message}")
        raise UpstreamServiceError(
            f"Connection created but notification failed: {e.message}",
            status_code=e.status_code,
            payload={"connection_id": connection.id},
        )

    return {
        "message": "Connection request sent successfully",
        "connection": connection,
        "notification_sent": True,
    }
