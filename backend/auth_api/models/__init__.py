from auth_api.core.database import Base
from auth_api.models.auth import Auth, Role
from auth_api.models.user import User

__all__ = [
    "Base",
    "Auth",
    "Role",
    "User",
]
