"""Credential store — user registration and lookup."""
from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, select

from inkpost.errors import CriticalError, UsernameTaken
from inkpost.models.user import User
from inkpost.utils.crypto import hash_password, verify_password

logger = logging.getLogger(__name__)


class CredentialStore:
    __slots__ = ("session",)

    def __init__(self, session: Session) -> None:
        self.session = session

    def register(self, login: str, password: str) -> User:
        """Create a user with an argon2-hashed password.

        Every new user is an admin for now. There is no non-admin role yet.
        """
        try:
            if self.find_by_login(login) is not None:
                raise UsernameTaken()
            user = User(login=login, hashed_password=hash_password(password), is_admin=True)
            self.session.add(user)
            self.session.commit()
            self.session.refresh(user)
        except IntegrityError as exc:
            self.session.rollback()
            raise UsernameTaken() from exc
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.exception("Failed to register user %r", login)
            raise CriticalError("Critical error inserting user") from exc

        logger.info("Registered user %r (id=%d)", user.login, user.id)
        return user

    def find_by_login(self, login: str) -> User | None:
        return self.session.exec(select(User).where(User.login == login)).first()

    def find_by_id(self, user_id: int) -> User | None:
        return self.session.get(User, user_id)

    def authenticate(self, login: str, password: str) -> User | None:
        """Return the user if the password matches, otherwise None."""
        try:
            user = self.find_by_login(login)
        except SQLAlchemyError as exc:
            logger.exception("Failed to look up user %r", login)
            raise CriticalError("Critical error during login") from exc
        if user is None or not verify_password(user.hashed_password, password):
            logger.info("Failed login for %r", login)
            return None
        logger.info("User %r logged in", login)
        return user
