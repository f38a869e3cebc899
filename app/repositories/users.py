"""User directory: persistence of user records and their credential state."""

import logging
from datetime import datetime

from sqlalchemy import event, inspect
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, undefer

from app.errors import DuplicateEmailError
from app.models.user import Role, User
from app.services.password import hash_password

logger = logging.getLogger("lms")


def normalize_email(email: str) -> str:
    return email.strip().lower()


@event.listens_for(Session, "before_flush")
def _hash_modified_passwords(session: Session, flush_context, instances) -> None:
    """Hash any user password assigned since the last flush.

    Only attributes with pending changes are touched, so saving a user for an
    unrelated reason never rehashes the stored hash.
    """
    for obj in list(session.new) + list(session.dirty):
        if not isinstance(obj, User):
            continue
        history = inspect(obj).attrs.password.history
        if not history.added:
            continue
        value = history.added[-1]
        if value:
            obj.password = hash_password(value)


class UserDirectory:
    """Lookup and save operations for users, bound to one database session."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def create(
        self,
        full_name: str,
        email: str,
        password: str,
        avatar_public_id: str | None = None,
        avatar_secure_url: str | None = None,
        role: Role = Role.USER,
    ) -> User:
        """Insert a new user. Raises DuplicateEmailError if the email is taken.

        Uniqueness is enforced by the unique index on ``user.email``, so two
        concurrent registrations cannot both succeed.
        """
        user = User(
            full_name=full_name,
            email=normalize_email(email),
            password=password,
            role=role,
            avatar_public_id=avatar_public_id,
            avatar_secure_url=avatar_secure_url,
        )
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise DuplicateEmailError() from e
        self.db.refresh(user)
        logger.info("Created user id=%s", user.id)
        return user

    def find_by_email(self, email: str, with_password: bool = False) -> User | None:
        query = self.db.query(User).filter(User.email == normalize_email(email))
        if with_password:
            query = query.options(undefer(User.password))
        return query.first()

    def find_by_id(self, user_id: int, with_password: bool = False) -> User | None:
        query = self.db.query(User).filter(User.id == user_id)
        if with_password:
            query = query.options(undefer(User.password))
        return query.first()

    def find_by_reset_digest(self, digest: str, now: datetime | None = None) -> User | None:
        """Find the user holding an unexpired reset token with this digest."""
        now = now or datetime.utcnow()
        return (
            self.db.query(User)
            .filter(
                User.forgot_password_digest == digest,
                User.forgot_password_expiry.is_not(None),
                User.forgot_password_expiry > now,
            )
            .first()
        )

    def save(self, user: User) -> User:
        """Persist pending changes to ``user``."""
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        return user
