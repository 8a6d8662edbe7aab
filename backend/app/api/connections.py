from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
import logging

from app.database.base import get_db
from app.models.user import User
from app.schemas.connection import (
    ConnectionCreate, ConnectionRespond, ConnectionCreateResponse, ConnectionListResponse
)
from app.auth.security import get_current_db_user
from app.services.connection_service import ConnectionService
from app.utils.knock import get_knock_client

router = APIRouter()

logger = logging.getLogger(__name__)


@router.post("", response_model=ConnectionCreateResponse, status_code=status.HTTP_201_CREATED)
def create_connection(
        request: ConnectionCreate,
        user: User = Depends(get_current_db_user),
        db: Session = Depends(get_db)
):
    """
    Request a connection with a stakeholder. Startups only.

    A second request for the same stakeholder returns 409 together with the
    existing connection.
    """
    connection = ConnectionService(db).create_connection(user, request.stakeholder_id, request.message)
    return {"message": "Connection request sent successfully", "connection": connection}


@router.get("", response_model=ConnectionListResponse)
def list_connections(
        user: User = Depends(get_current_db_user),
        db: Session = Depends(get_db)
):
    return {"connections": ConnectionService(db).list_connections(user)}


@router.patch("/{connection_id}", response_model=ConnectionCreateResponse)
def respond_to_connection(
        connection_id: str,
        request: ConnectionRespond,
        user: User = Depends(get_current_db_user),
        db: Session = Depends(get_db),
        knock=Depends(get_knock_client)
):
    """
    Accept or decline a pending connection request addressed to the caller.

    The initiating startup is notified when possible; a failed notification
    does not affect the response.
    """
    service = ConnectionService(db, knock)
    connection = service.respond(user, connection_id, request.status, request.response)
    return {"message": f"Connection {connection.status} successfully", "connection": connection}
