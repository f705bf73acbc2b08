"""
Auth Service.

Account creation, credential checks, and session token issuance.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from snack.backend.core.exceptions import (
    AuthenticationError,
    ConflictError,
    ValidationError,
)
from snack.backend.core.security import (
    create_access_token,
    create_refresh_token,
    decode_token,
    hash_password,
    verify_password,
)
from snack.backend.domain.usernames import normalize_username, validate_username
from snack.backend.models.user import User
from snack.backend.repositories.user import UserRepository
from snack.backend.schemas.auth import SignupRequest, TokenPair
from snack.backend.services.base import BaseService


class AuthService(BaseService):
    """Signup, signin, and refresh for web and mobile sessions."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.users = UserRepository(session)

    def issue_tokens(self, user: User) -> TokenPair:
        claims = {"sub": user.id}
        return TokenPair(
            access_token=create_access_token(claims),
            refresh_token=create_refresh_token(claims),
        )

    async def signup(self, data: SignupRequest) -> tuple[User, TokenPair]:
        """
        Create an account and sign it in.

        The welcome email is left to the caller, to send once the account
        is committed.

        Raises:
            ValidationError: If the username is malformed or reserved
            ConflictError: If the email or username is already taken
        """
        email = data.email.strip().lower()
        if await self.users.get_by_email(email) is not None:
            raise ConflictError("Email already registered")

        username = None
        if data.username:
            reason = validate_username(data.username)
            if reason:
                raise ValidationError(reason, details={"username": reason})
            username = normalize_username(data.username)
            if await self.users.username_taken(username):
                raise ConflictError("Username already taken")

        self._log_operation("Creating account", username=username)

        user = await self._execute_db_operation(
            "signup",
            self.users.create(
                email=email,
                hashed_password=hash_password(data.password),
                username=username,
            ),
            conflict_message="Email or username already registered",
        )

        return user, self.issue_tokens(user)

    async def signin(self, email: str, password: str) -> tuple[User, TokenPair]:
        """
        Raises:
            AuthenticationError: On unknown email or wrong password
        """
        user = await self.users.get_by_email(email)
        if user is None or not verify_password(password, user.hashed_password):
            self._log_debug("Signin rejected")
            raise AuthenticationError("Invalid email or password")

        self._log_operation("User signed in", user_id=user.id)
        return user, self.issue_tokens(user)

    async def refresh(self, refresh_token: str) -> str:
        """
        Exchange a refresh token for a new access token.

        Raises:
            AuthenticationError: If the token is invalid, not a refresh
                token, or belongs to a deleted account
        """
        payload = decode_token(refresh_token, expected_type="refresh")
        user = await self.users.get_by_id_or_none(payload.get("sub", ""))
        if user is None:
            raise AuthenticationError("Account no longer exists")
        return create_access_token({"sub": user.id})

    async def get_user_for_token(self, access_token: str) -> User:
        """
        Raises:
            AuthenticationError: If the token is invalid or the user is gone
        """
        payload = decode_token(access_token, expected_type="access")
        user = await self.users.get_by_id_or_none(payload.get("sub", ""))
        if user is None:
            raise AuthenticationError("Account no longer exists")
        return user
