"""Protocol interfaces for dependency injection."""

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from todogether.auth.schemas import User


@runtime_checkable
class KeyValueStorage(Protocol):
    """Durable string key-value storage."""

    def get(self, key: str) -> str | None:
        """Return the stored value or None if the key is absent."""
        ...

    def set(self, key: str, value: str) -> None:
        """Store a value, replacing any previous one in a single write."""
        ...

    def delete(self, key: str) -> None:
        """Remove a key. Removing a missing key is not an error."""
        ...


@runtime_checkable
class AuthView(Protocol):
    """Render target driven by the auth guard.

    ``form`` is either ``"login"`` or ``"register"``.
    """

    def show_login(self) -> None:
        """Show the login screen and hide everything else."""
        ...

    def show_app(self, user: "User | None") -> None:
        """Show the main application for the given user."""
        ...

    def show_error(self, form: str, message: str) -> None:
        """Display an inline error on a form."""
        ...

    def hide_error(self, form: str) -> None:
        """Clear the inline error of a form."""
        ...

    def set_loading(self, form: str, loading: bool) -> None:
        """Toggle the busy indicator of a form's submit button."""
        ...
