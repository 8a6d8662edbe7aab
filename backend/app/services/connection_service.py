"""
Connection lifecycle between startups and stakeholders, and the messaging
relay gated on it.

A connection starts ``pending`` and is moved once, by the targeted
stakeholder, to ``accepted`` or ``declined``. Messages may only be relayed on
``accepted`` connections.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

import config
from app.models import Connection, ConnectionStatus, Stakeholder, Startup, User, UserType
from app.schemas.connection import ConnectionResponse
from app.services.errors import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    PlatformError,
    UpstreamServiceError,
)
from app.utils.audit import log_activity
from app.utils.constants import DEFAULT_CONNECTION_MESSAGE

logger = logging.getLogger(__name__)


def serialize_connection(connection: Connection) -> Dict[str, Any]:
    return ConnectionResponse.model_validate(connection).model_dump(mode="json")


class ConnectionService:

    def __init__(self, db: Session, notifier=None):
        self.db = db
        self.notifier = notifier
        self.workflow = config.KNOCK_CONNECTION_WORKFLOW

    # Profile resolution

    def get_startup_profile(self, user: User) -> Startup:
        startup = self.db.query(Startup).filter(Startup.user_id == user.id).first()
        if not startup:
            raise NotFoundError("Startup profile not found")
        return startup

    def get_stakeholder_profile(self, user: User) -> Stakeholder:
        stakeholder = self.db.query(Stakeholder).filter(Stakeholder.user_id == user.id).first()
        if not stakeholder:
            raise NotFoundError("Stakeholder profile not found")
        return stakeholder

    def get_own_profile(self, user: User) -> Tuple[UserType, Any]:
        if user.user_type == UserType.STARTUP.value:
            return UserType.STARTUP, self.get_startup_profile(user)
        if user.user_type == UserType.STAKEHOLDER.value:
            return UserType.STAKEHOLDER, self.get_stakeholder_profile(user)
        raise PermissionDeniedError("Access denied - admin users have no connections")

    def get_connection(self, connection_id: str) -> Connection:
        connection = self.db.query(Connection).filter(Connection.id == connection_id).first()
        if not connection:
            raise NotFoundError("Connection not found")
        return connection

    def find_existing(self, startup_id: str, stakeholder_id: str) -> Optional[Connection]:
        return self.db.query(Connection).filter(
            Connection.startup_id == startup_id,
            Connection.stakeholder_id == stakeholder_id
        ).first()

    # Create

    def create_connection(self, user: User, stakeholder_id: str, message: Optional[str] = None) -> Connection:
        """
        Create a pending connection from the caller's startup to a stakeholder.

        Raises:
            PermissionDeniedError: caller is not a startup
            NotFoundError: caller has no startup profile, or the stakeholder does not exist
            ConflictError: a connection for this pair already exists; the payload
                carries the existing connection
        """
        if user.user_type != UserType.STARTUP.value:
            raise PermissionDeniedError("Only startups can send connection requests")

        startup = self.get_startup_profile(user)

        stakeholder = self.db.query(Stakeholder).filter(Stakeholder.id == stakeholder_id).first()
        if not stakeholder:
            raise NotFoundError("Stakeholder not found")

        existing = self.find_existing(startup.id, stakeholder.id)
        if existing:
            raise ConflictError(
                "Connection request already exists",
                payload={"connection": serialize_connection(existing)},
            )

        connection = Connection(
            startup_id=startup.id,
            stakeholder_id=stakeholder.id,
            status=ConnectionStatus.PENDING.value,
            initiated_by=user.id,
            message=message or DEFAULT_CONNECTION_MESSAGE,
        )
        self.db.add(connection)
        try:
            self.db.commit()
        except IntegrityError:
            # Lost a race against a concurrent create for the same pair
            self.db.rollback()
            existing = self.find_existing(startup.id, stakeholder.id)
            if existing is None:
                raise
            raise ConflictError(
                "Connection request already exists",
                payload={"connection": serialize_connection(existing)},
            )
        self.db.refresh(connection)

        logger.info(f"Connection {connection.id} created: startup {startup.id} -> stakeholder {stakeholder.id}")
        log_activity(
            self.db,
            "connection_created",
            user.id,
            f"Connection {connection.id} requested with stakeholder {stakeholder.id}"
        )
        return connection

    def notify_connection_request(self, user: User, connection: Connection,
                                  startup_name: Optional[str] = None) -> None:
        """
        Tell the stakeholder about a new request. Failures propagate as
        UpstreamServiceError; the connection itself is already committed.
        """
        row = self.db.query(Stakeholder, User).join(User, User.id == Stakeholder.user_id).filter(
            Stakeholder.id == connection.stakeholder_id
        ).first()
        if not row:
            raise NotFoundError("Stakeholder not found")
        stakeholder, stakeholder_user = row

        if startup_name is None:
            startup_name = self.get_startup_profile(user).company_name

        self.notifier.trigger_workflow(
            self.workflow,
            [stakeholder_user.clerk_id],
            {
                "startupName": startup_name or "A startup",
                "message": connection.message or "wants to connect with you",
                "requestorId": user.clerk_id,
                "stakeholderName": stakeholder_user.full_name,
                "stakeholderOrganization": stakeholder.organization_name or "their organization",
            },
        )

    # Respond

    def respond(self, user: User, connection_id: str, status: ConnectionStatus,
                response_text: Optional[str] = None) -> Connection:
        """
        Move a pending connection to ``accepted`` or ``declined``.

        The status write is conditional on the row still being pending, so a
        second response (sequential or concurrent) gets a ConflictError and
        leaves the record unchanged. Notifying the startup is best-effort.
        """
        if status not in (ConnectionStatus.ACCEPTED, ConnectionStatus.DECLINED):
            raise PlatformError("Valid status is required (accepted or declined)", status_code=400)

        if user.user_type != UserType.STAKEHOLDER.value:
            raise PermissionDeniedError("Only stakeholders can respond to connection requests")

        stakeholder = self.get_stakeholder_profile(user)
        connection = self.get_connection(connection_id)

        if connection.stakeholder_id != stakeholder.id:
            raise PermissionDeniedError("You can only respond to your own connection requests")

        if connection.status != ConnectionStatus.PENDING.value:
            raise ConflictError(
                "This connection request has already been responded to",
                payload={"connection": serialize_connection(connection)},
            )

        try:
            updated = self.db.query(Connection).filter(
                Connection.id == connection_id,
                Connection.status == ConnectionStatus.PENDING.value
            ).update(
                {
                    Connection.status: status.value,
                    Connection.response: response_text or None,
                    Connection.updated_at: datetime.now(timezone.utc),
                },
                synchronize_session=False
            )
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(connection)
        if updated == 0:
            raise ConflictError(
                "This connection request has already been responded to",
                payload={"connection": serialize_connection(connection)},
            )

        logger.info(f"Connection {connection.id} {status.value} by stakeholder {stakeholder.id}")
        log_activity(
            self.db,
            "connection_responded",
            user.id,
            f"Connection {connection.id} {status.value}"
        )

        self._notify_response(user, stakeholder, connection, status, response_text)
        return connection

    def _notify_response(self, user: User, stakeholder: Stakeholder, connection: Connection,
                         status: ConnectionStatus, response_text: Optional[str]) -> None:
        if self.notifier is None:
            return
        try:
            row = self.db.query(Startup, User).join(User, User.id == Startup.user_id).filter(
                Startup.id == connection.startup_id
            ).first()
            if not row:
                logger.error(f"Startup for connection {connection.id} not found, skipping notification")
                return
            startup, startup_user = row

            self.notifier.identify_user(
                startup_user.clerk_id,
                name=startup_user.full_name,
                email=startup_user.email,
                company=startup.company_name,
                user_type=UserType.STARTUP.value,
            )

            message = f"{status.value} your connection request"
            if response_text:
                message += f': "{response_text}"'

            self.notifier.trigger_workflow(
                self.workflow,
                [startup_user.clerk_id],
                {
                    "startupName": startup.company_name,
                    "message": message,
                    "stakeholderName": user.full_name,
                    "stakeholderOrganization": stakeholder.organization_name or "Unknown Organization",
                    "requestorId": user.clerk_id,
                },
            )
        except Exception as e:
            # The status change is already committed; the notification is advisory
            logger.error(f"Error sending notification to startup for connection {connection.id}: {str(e)}")

    # Read

    def list_connections(self, user: User) -> List[Dict[str, Any]]:
        """Caller's connections, oldest first, with counterparty display fields"""
        role, profile = self.get_own_profile(user)

        results = []
        if role == UserType.STARTUP:
            rows = self.db.query(Connection, Stakeholder, User).join(
                Stakeholder, Connection.stakeholder_id == Stakeholder.id
            ).join(
                User, Stakeholder.user_id == User.id
            ).filter(
                Connection.startup_id == profile.id
            ).order_by(Connection.created_at).all()

            for connection, stakeholder, counterpart in rows:
                item = serialize_connection(connection)
                item.update({
                    "stakeholder_name": counterpart.full_name,
                    "stakeholder_organization": stakeholder.organization_name,
                    "stakeholder_type": stakeholder.stakeholder_type,
                    "stakeholder_email": counterpart.email,
                })
                results.append(item)
        else:
            rows = self.db.query(Connection, Startup, User).join(
                Startup, Connection.startup_id == Startup.id
            ).join(
                User, Startup.user_id == User.id
            ).filter(
                Connection.stakeholder_id == profile.id
            ).order_by(Connection.created_at).all()

            for connection, startup, counterpart in rows:
                item = serialize_connection(connection)
                item.update({
                    "startup_name": startup.company_name,
                    "startup_stage": startup.stage,
                    "startup_focus_areas": startup.focus_areas or [],
                    "startup_description": startup.description,
                    "founder_name": counterpart.full_name,
                    "founder_email": counterpart.email,
                })
                results.append(item)
        return results

    # Messaging relay

    def send_message(self, user: User, connection_id: str, message: str, recipient_type: UserType) -> None:
        """
        Relay a free-text message to the other party of an accepted connection.

        Nothing is stored locally. The workflow trigger is the primary effect,
        so its failure propagates (UpstreamServiceError with Knock's status).
        """
        if self.notifier is None:
            raise UpstreamServiceError("Notification service not configured", status_code=500)

        connection = self.get_connection(connection_id)

        if connection.status != ConnectionStatus.ACCEPTED.value:
            raise PermissionDeniedError("Can only send messages to accepted connections")

        if user.user_type == UserType.STARTUP.value:
            startup = self.db.query(Startup).filter(Startup.user_id == user.id).first()
            if not startup or connection.startup_id != startup.id:
                raise PermissionDeniedError("You can only send messages for your own connections")
            sender_organization = startup.company_name
            counterpart_type = UserType.STAKEHOLDER

            row = self.db.query(Stakeholder, User).join(User, User.id == Stakeholder.user_id).filter(
                Stakeholder.id == connection.stakeholder_id
            ).first()
            if not row:
                raise NotFoundError("Recipient not found")
            recipient_profile, recipient = row
            recipient_organization = recipient_profile.organization_name
            startup_name = sender_organization
            stakeholder_name = recipient.full_name
            stakeholder_organization = recipient_organization
        elif user.user_type == UserType.STAKEHOLDER.value:
            stakeholder = self.db.query(Stakeholder).filter(Stakeholder.user_id == user.id).first()
            if not stakeholder or connection.stakeholder_id != stakeholder.id:
                raise PermissionDeniedError("You can only send messages for your own connections")
            sender_organization = stakeholder.organization_name
            counterpart_type = UserType.STARTUP

            row = self.db.query(Startup, User).join(User, User.id == Startup.user_id).filter(
                Startup.id == connection.startup_id
            ).first()
            if not row:
                raise NotFoundError("Recipient not found")
            recipient_profile, recipient = row
            recipient_organization = recipient_profile.company_name
            startup_name = recipient_organization
            stakeholder_name = user.full_name
            stakeholder_organization = sender_organization
        else:
            raise PermissionDeniedError("Invalid user type")

        if recipient_type != counterpart_type:
            raise PlatformError(
                f"recipient_type must be '{counterpart_type.value}' for this connection",
                status_code=400,
            )

        sender_name = user.full_name
        self.notifier.identify_user(
            user.clerk_id,
            name=sender_name,
            email=user.email,
            company=sender_organization,
            user_type=user.user_type,
        )
        self.notifier.identify_user(
            recipient.clerk_id,
            name=recipient.full_name,
            email=recipient.email,
            company=recipient_organization,
            user_type=counterpart_type.value,
        )

        self.notifier.trigger_workflow(
            self.workflow,
            [recipient.clerk_id],
            {
                "startupName": startup_name,
                "message": f"{sender_name}: {message}",
                "requestorId": user.clerk_id,
                "stakeholderName": stakeholder_name,
                "stakeholderOrganization": stakeholder_organization,
                "messageType": "continuous_message",
                "senderName": sender_name,
                "senderOrganization": sender_organization,
            },
        )

        logger.info(f"Message relayed on connection {connection.id} from user {user.id}")
        log_activity(
            self.db,
            "message_sent",
            user.id,
            f"Message sent on connection {connection.id}"
        )
