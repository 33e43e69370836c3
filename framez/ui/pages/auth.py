"""Login and registration screens."""
from __future__ import annotations

from supabase import AsyncClient

from ...errors import BackendRequestError, ValidationError
from ...services.auth_service import register_user, sign_in
from ..components.feedback import Notifier, alert_for_error
from ..router import Navigator, Route


class LoginScreen:
    def __init__(self, client: AsyncClient, notify: Notifier, navigate: Navigator) -> None:
        self._client = client
        self._notify = notify
        self._navigate = navigate
        self.email = ""
        self.password = ""
        self.show_password = False
        self.loading = False

    @property
    def submit_label(self) -> str:
        return "Signing in..." if self.loading else "Sign In"

    def toggle_password_visibility(self) -> None:
        self.show_password = not self.show_password

    def go_to_register(self) -> None:
        self._navigate(Route.REGISTER)

    async def submit(self) -> bool:
        if self.loading:
            return False
        self.loading = True
        try:
            await sign_in(self._client, email=self.email, password=self.password)
        except ValidationError as exc:
            self._notify(alert_for_error(exc))
            return False
        except BackendRequestError as exc:
            self._notify(alert_for_error(exc, title="Login Failed"))
            return False
        finally:
            self.loading = False
        self._navigate(Route.FEED)
        return True


class RegisterScreen:
    def __init__(self, client: AsyncClient, notify: Notifier, navigate: Navigator) -> None:
        self._client = client
        self._notify = notify
        self._navigate = navigate
        self.display_name = ""
        self.email = ""
        self.password = ""
        self.show_password = False
        self.loading = False

    @property
    def submit_label(self) -> str:
        return "Creating account..." if self.loading else "Sign Up"

    def toggle_password_visibility(self) -> None:
        self.show_password = not self.show_password

    def go_to_login(self) -> None:
        self._navigate(Route.LOGIN)

    async def submit(self) -> bool:
        if self.loading:
            return False
        self.loading = True
        try:
            await register_user(
                self._client,
                email=self.email,
                password=self.password,
                display_name=self.display_name,
            )
        except ValidationError as exc:
            self._notify(alert_for_error(exc))
            return False
        except BackendRequestError as exc:
            self._notify(alert_for_error(exc, title="Registration Failed"))
            return False
        finally:
            self.loading = False
        self._navigate(Route.FEED)
        return True


__all__ = ["LoginScreen", "RegisterScreen"]
