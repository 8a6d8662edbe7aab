from .user import User, UserType
from .startup import Startup, StartupStage
from .stakeholder import Stakeholder, StakeholderType
from .connection import Connection, ConnectionStatus
from .audit_log import AuditLog

__all__ = [
    "User",
    "UserType",
    "Startup",
    "StartupStage",
    "Stakeholder",
    "StakeholderType",
    "Connection",
    "ConnectionStatus",
    "AuditLog",
]
