import logging
from typing import List, Tuple

from sqlalchemy.orm import Session

from auth_api.core.errors import ForbiddenError, NotFoundError
from auth_api.models.auth import Auth, Role
from auth_api.models.user import User
from auth_api.schemas.user import UserUpdate
from auth_api.services.identity_store import IdentityStore

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, db: Session):
        self.store = IdentityStore(db)

    def list_users(self, page: int, limit: int) -> Tuple[List[User], int]:
        return self.store.list_users(page=page, limit=limit)

    def get_profile(self, auth: Auth) -> User:
        user = self.store.get_user_for_auth(auth.id)
        if not user:
            raise NotFoundError("User not found")
        return user

    def update_profile(self, actor: Auth, user_id: str, changes: UserUpdate) -> User:
        """Owners may edit their own profile; admins may edit any."""
        user = self.store.get_user(user_id)
        if not user:
            raise NotFoundError("User not found")
        if user.auth_id != actor.id and actor.role != Role.ADMIN:
            raise ForbiddenError("You can only update your own profile")
        for field, value in changes.model_dump(exclude_unset=True).items():
            setattr(user, field, value)
        self.store.save(user)
        logger.info("Profile %s updated by account %s", user.id, actor.id)
        return user

    def set_blocked(self, auth_id: str, blocked: bool) -> Auth:
        auth = self.store.get_auth(auth_id)
        if not auth:
            raise NotFoundError("User not found")
        auth.is_blocked = blocked
        self.store.save(auth)
        logger.info("Account %s %s", auth.id, "blocked" if blocked else "unblocked")
        return auth
