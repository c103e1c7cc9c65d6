"""Startup authentication guard.

Decides whether the app opens on the login screen or the main view, and
drives the login/register forms. It is the only component that sends the
user back to the login prompt.
"""

import asyncio
from collections.abc import Awaitable, Callable
from enum import Enum

from todogether.auth.client import AuthClient
from todogether.auth.schemas import AuthFailure, AuthResult, RegisterRequest, User
from todogether.core.exceptions import AppError
from todogether.core.logging import get_logger
from todogether.core.protocols import AuthView

logger = get_logger(__name__)

LOGIN_FORM = "login"
REGISTER_FORM = "register"

MSG_FILL_ALL_FIELDS = "Please fill in all fields"
MSG_PASSWORDS_DIFFER = "Passwords do not match"
MSG_PASSWORD_TOO_SHORT = "Password must be at least {min_length} characters"
MSG_INVITE_REQUIRED = "Invite code is required"
MSG_LOGIN_FAILED = "Login failed. Wrong username or password."
MSG_REGISTER_FAILED = "Registration failed. The username may already be taken."


class AuthState(str, Enum):
    """Guard states."""

    UNVALIDATED = "unvalidated"
    VALIDATING = "validating"
    AUTHENTICATED = "authenticated"
    LOGIN_PROMPT = "login_prompt"


class NullView:
    """View that renders nothing, for headless use."""

    def show_login(self) -> None:
        pass

    def show_app(self, user: User | None) -> None:
        pass

    def show_error(self, form: str, message: str) -> None:
        pass

    def hide_error(self, form: str) -> None:
        pass

    def set_loading(self, form: str, loading: bool) -> None:
        pass


class AuthGuard:
    """State machine: UNVALIDATED -> VALIDATING -> AUTHENTICATED | LOGIN_PROMPT."""

    def __init__(
        self,
        auth_client: AuthClient,
        view: AuthView | None = None,
        validation_timeout: float = 10.0,
        min_password_length: int = 6,
        on_authenticated: Callable[[User], Awaitable[None]] | None = None,
        on_logout: Callable[[], Awaitable[None]] | None = None,
    ):
        """Initialize the guard.

        Args:
            auth_client: Session owner
            view: Render target; defaults to a view that renders nothing
            validation_timeout: Hard deadline for startup token validation
            min_password_length: Minimum accepted password length on register
            on_authenticated: Awaited after a successful login or register
            on_logout: Awaited after logout, e.g. to stop background sync
        """
        self.auth_client = auth_client
        self.view: AuthView = view or NullView()
        self.validation_timeout = validation_timeout
        self.min_password_length = min_password_length
        self.on_authenticated = on_authenticated
        self.on_logout = on_logout

        self.state = AuthState.UNVALIDATED
        self.current_user: User | None = None
        self.invite_token: str | None = None

    def is_user_authenticated(self) -> bool:
        return self.state is AuthState.AUTHENTICATED and self.auth_client.is_authenticated

    # --- Startup ---

    async def init(self) -> bool:
        """Validate the stored session.

        Returns:
            True if the app view was shown, False if the login prompt was shown
        """
        if not self.auth_client.is_authenticated:
            logger.info("guard_no_session")
            self._to_login_prompt()
            return False

        self.state = AuthState.VALIDATING
        logger.info("guard_validating", timeout=self.validation_timeout)
        try:
            user = await asyncio.wait_for(self._validate_tokens(), timeout=self.validation_timeout)
        except TimeoutError:
            logger.warning("guard_validation_timeout", timeout=self.validation_timeout)
            self.auth_client.clear_tokens()
            self._to_login_prompt()
            return False
        except AppError as e:
            logger.warning("guard_validation_failed", error=e.message, code=e.code)
            self.auth_client.clear_tokens()
            self._to_login_prompt()
            return False
        except Exception as e:
            logger.error("guard_validation_error", error=str(e), error_type=type(e).__name__)
            self.auth_client.clear_tokens()
            self._to_login_prompt()
            return False

        self._to_authenticated(user)
        return True

    async def _validate_tokens(self) -> User:
        await self.auth_client.ensure_valid_token()
        return await self.auth_client.get_current_user()

    # --- Forms ---

    async def handle_login(self, username: str, password: str) -> bool:
        """Submit the login form.

        Returns:
            True if the user is now authenticated
        """
        if not username or not password:
            self.view.show_error(LOGIN_FORM, MSG_FILL_ALL_FIELDS)
            return False

        self.view.set_loading(LOGIN_FORM, True)
        self.view.hide_error(LOGIN_FORM)
        try:
            result = await self.auth_client.login(username, password)
        except AppError as e:
            logger.error("guard_login_error", error=e.message)
            self.view.show_error(LOGIN_FORM, MSG_LOGIN_FAILED)
            return False
        finally:
            self.view.set_loading(LOGIN_FORM, False)

        return await self._complete(LOGIN_FORM, result)

    async def handle_register(
        self,
        username: str,
        password: str,
        password_confirm: str,
        invite_code: str | None = None,
        has_invite_code: bool = False,
    ) -> bool:
        """Submit the register form.

        Returns:
            True if the account was created and the user is authenticated
        """
        error = self._validate_register_form(
            username, password, password_confirm, invite_code, has_invite_code
        )
        if error:
            self.view.show_error(REGISTER_FORM, error)
            return False

        request = RegisterRequest(
            username=username,
            password=password,
            invite_token=invite_code if has_invite_code else None,
        )

        self.view.set_loading(REGISTER_FORM, True)
        self.view.hide_error(REGISTER_FORM)
        try:
            result = await self.auth_client.register(request)
        except AppError as e:
            logger.error("guard_register_error", error=e.message)
            self.view.show_error(REGISTER_FORM, MSG_REGISTER_FAILED)
            return False
        finally:
            self.view.set_loading(REGISTER_FORM, False)

        if result.success:
            self.invite_token = result.invite_token
        return await self._complete(REGISTER_FORM, result)

    def _validate_register_form(
        self,
        username: str,
        password: str,
        password_confirm: str,
        invite_code: str | None,
        has_invite_code: bool,
    ) -> str | None:
        if not username or not password or not password_confirm:
            return MSG_FILL_ALL_FIELDS
        if password != password_confirm:
            return MSG_PASSWORDS_DIFFER
        if len(password) < self.min_password_length:
            return MSG_PASSWORD_TOO_SHORT.format(min_length=self.min_password_length)
        if has_invite_code and not invite_code:
            return MSG_INVITE_REQUIRED
        return None

    async def _complete(self, form: str, result: AuthResult) -> bool:
        if isinstance(result, AuthFailure):
            logger.info("guard_credentials_rejected", form=form, message=result.message)
            self.view.show_error(form, result.message)
            return False

        self._to_authenticated(result.user)
        if self.on_authenticated is not None:
            await self.on_authenticated(result.user)
        return True

    # --- Logout ---

    async def logout(self) -> None:
        """Log out. Always lands on the login prompt, reachable server or not."""
        await self.auth_client.logout()
        self.current_user = None
        self._to_login_prompt()
        if self.on_logout is not None:
            await self.on_logout()

    # --- Transitions ---

    def _to_login_prompt(self) -> None:
        self.state = AuthState.LOGIN_PROMPT
        self.current_user = None
        self.view.show_login()

    def _to_authenticated(self, user: User) -> None:
        self.state = AuthState.AUTHENTICATED
        self.current_user = user
        logger.info("guard_authenticated", username=user.username)
        self.view.show_app(user)
