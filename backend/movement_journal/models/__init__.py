from .auth import User, UserDistrict, SessionToken
from .movements import Movement
from .knowledge import KnowledgeBaseEntry
from .notifications import Notification
from .audit import AuditLog

__all__ = [
    'User', 'UserDistrict', 'SessionToken',
    'Movement',
    'KnowledgeBaseEntry',
    'Notification',
    'AuditLog',
]
