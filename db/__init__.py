# This project was developed with assistance from AI tools.
__version__ = "0.1.0"

from .database import Base, SessionLocal, engine, get_db
from .enums import AuditAction, UserRole, UserStatus
from .models import AuditLog, MetadataCache, User

__all__ = [
    "Base",
    "SessionLocal",
    "engine",
    "get_db",
    "__version__",
    # Enums
    "AuditAction",
    "UserRole",
    "UserStatus",
    # Models
    "AuditLog",
    "MetadataCache",
    "User",
]
