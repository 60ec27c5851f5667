from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .. import models
from ..auth import hash_password, verify_password
from ..errors import AuthError, ConflictError

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


class UserStore:
    def __init__(self, db: Session) -> None:
        self.db = db

    def find_by_email(self, email: str) -> Optional[models.User]:
        return (
            self.db.query(models.User)
            .filter(models.User.email == normalize_email(email))
            .first()
        )

    def register(self, name: str, email: str, password: str) -> models.User:
        email = normalize_email(email)
        if self.find_by_email(email) is not None:
            raise ConflictError("Email already registered")

        user = models.User(name=name.strip(), email=email, password_hash=hash_password(password))
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError:
            # lost a race with a concurrent registration
            self.db.rollback()
            raise ConflictError("Email already registered")
        self.db.refresh(user)
        logger.info("user %s registered", user.id)
        return user

    def authenticate(self, email: str, password: str) -> models.User:
        user = self.find_by_email(email)
        if user is None or not verify_password(password, user.password_hash):
            raise AuthError("Invalid email or password")
        return user

    def delete(self, user: models.User) -> None:
        user_id = user.id
        # children first, in case the backend does not cascade
        self.db.query(models.Perk).filter(models.Perk.owner_id == user_id).delete(synchronize_session=False)
        self.db.query(models.User).filter(models.User.id == user_id).delete(synchronize_session=False)
        self.db.commit()
        logger.info("user %s deleted", user_id)
