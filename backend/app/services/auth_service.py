"""
Ulyngo Backend — Auth Service
===============================

What:  Registration and login.
How:   Stateless; receives the request's AsyncSession on each call. Flushes
       only, the session dependency commits.
Who:   /api/auth routes.
"""

import logging

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import utcnow
from app.exceptions import AuthenticationError, ConflictError, DatabaseError
from app.models.user import ROLE_USER, User
from app.schemas.auth import LoginRequest, LoginResponse, RegisterRequest, UserSummary
from app.services.activity_service import record_activity
from app.services.security import create_access_token, hash_password, verify_password

logger = logging.getLogger(__name__)


class AuthService:
    async def register(self, db: AsyncSession, body: RegisterRequest) -> User:
        """
        Creates a user with role 'user' and logs a `register` activity.

        Raises:
            ConflictError: Username or email is already taken.
            DatabaseError: Any other persistence failure.
        """
        existing = await db.execute(
            select(User.id).where(or_(User.username == body.username, User.email == body.email))
        )
        if existing.first() is not None:
            raise ConflictError(message="Username or email already registered")

        user = User(
            username=body.username,
            email=str(body.email),
            password_hash=hash_password(body.password),
            role=ROLE_USER,
            whatsapp=body.whatsapp,
            last_active_at=body.last_active_at,
        )
        try:
            db.add(user)
            await db.flush()
            await record_activity(
                db, user.id, "register", data={"username": user.username}
            )
        except IntegrityError as e:
            # Lost a race with a concurrent registration
            raise ConflictError(message="Username or email already registered") from e
        except SQLAlchemyError as e:
            logger.error("Database error registering %r: %s", body.username, e)
            raise DatabaseError(context={"error_type": type(e).__name__}) from e

        logger.info("User registered: %s (%s)", user.username, user.id)
        return user

    async def login(self, db: AsyncSession, body: LoginRequest) -> LoginResponse:
        """
        Verifies credentials and issues a bearer token.

        Unknown user and wrong password produce the same 401.
        """
        result = await db.execute(
            select(User).where(User.username == body.username, User.deleted_at.is_(None))
        )
        user = result.scalar_one_or_none()

        if user is None or not verify_password(body.password, user.password_hash):
            logger.info("Failed login for username %r", body.username)
            raise AuthenticationError(message="Invalid credentials")

        token = create_access_token(user.id, user.username, user.role)

        user.last_active_at = utcnow()
        await record_activity(db, user.id, "login")

        logger.info("User logged in: %s", user.username)
        return LoginResponse(token=token, user=UserSummary.model_validate(user))


auth_service = AuthService()
