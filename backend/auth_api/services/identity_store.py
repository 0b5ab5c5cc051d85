"""Persistence of Auth/User pairs. Multi-record writes go through one transaction."""

import logging
import uuid
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from auth_api.models.auth import Auth
from auth_api.models.user import User

logger = logging.getLogger(__name__)


class IdentityStore:
    def __init__(self, db: Session):
        self.db = db

    def get_auth(self, auth_id: str) -> Optional[Auth]:
        return self.db.query(Auth).filter(Auth.id == auth_id).first()

    def get_auth_by_email(self, email: str) -> Optional[Auth]:
        return self.db.query(Auth).filter(Auth.email == email).first()

    def get_auth_by_google_id(self, google_id: str) -> Optional[Auth]:
        return self.db.query(Auth).filter(Auth.google_id == google_id).first()

    def get_user(self, user_id: str) -> Optional[User]:
        return self.db.query(User).filter(User.id == user_id).first()

    def get_user_for_auth(self, auth_id: str) -> Optional[User]:
        return self.db.query(User).filter(User.auth_id == auth_id).first()

    def save(self, *records) -> None:
        for record in records:
            self.db.add(record)
        self.db.commit()
        for record in records:
            self.db.refresh(record)

    def _build_user(self, auth: Auth, **profile) -> User:
        return User(id=str(uuid.uuid4()), auth_id=auth.id, **profile)

    def create_account(
        self,
        auth: Auth,
        name: Optional[str] = None,
        phone_number: Optional[str] = None,
        avatar: Optional[str] = None,
    ) -> User:
        """Create an Auth and its User in one transaction. Nothing is kept if either write fails."""
        if not auth.id:
            auth.id = str(uuid.uuid4())
        try:
            self.db.add(auth)
            self.db.flush()
            user = self._build_user(auth, name=name, phone_number=phone_number, avatar=avatar)
            self.db.add(user)
            self.db.flush()
            self.db.commit()
        except Exception:
            logger.warning("Account creation rolled back (auth_id=%s)", auth.id)
            self.db.rollback()
            raise
        self.db.refresh(auth)
        self.db.refresh(user)
        return user

    def delete_account(self, auth: Auth) -> None:
        """Delete an Auth and its User in one transaction."""
        try:
            user = self.get_user_for_auth(auth.id)
            if user is not None:
                self.db.delete(user)
                self.db.flush()
            self.db.delete(auth)
            self.db.commit()
        except Exception:
            logger.warning("Account removal rolled back (auth_id=%s)", auth.id)
            self.db.rollback()
            raise

    def list_users(self, page: int = 1, limit: int = 20) -> Tuple[List[User], int]:
        query = self.db.query(User)
        total = query.count()
        users = (
            query.order_by(User.created_at.desc(), User.id)
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return users, total
