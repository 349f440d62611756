from typing import Optional

from .base import ApiSession, Store


class AuthStore(Store):
    """Sesión del usuario: token bearer + usuario actual."""

    def __init__(self, api: ApiSession):
        super().__init__(api)
        self.user: Optional[dict] = None

    @property
    def token(self) -> Optional[str]:
        return self.api.token

    @property
    def is_authenticated(self) -> bool:
        return bool(self.api.token and self.user)

    def _set_session(self, res: dict) -> dict:
        self.api.token = res["token"]
        self.user = res.get("data")
        return self.user

    def _clear_session(self):
        self.api.token = None
        self.user = None

    def load_user(self):
        if not self.api.token:
            return None

        def call():
            self.user = self.api.get("/api/auth/me")["data"]
            return self.user

        user = self._run("Load user", call)
        if user is None:
            # Token vencido o inválido
            self._clear_session()
        return user

    def register(self, name: str, email: str, password: str, **extra):
        payload = dict(extra, name=name, email=email, password=password)
        return self._run("Register", lambda: self._set_session(self.api.post("/api/auth/register", json=payload)))

    def login(self, email: str, password: str):
        payload = {"email": email, "password": password}
        return self._run("Login", lambda: self._set_session(self.api.post("/api/auth/login", json=payload)))

    def logout(self) -> bool:
        if self.api.token:
            self._run("Logout", lambda: self.api.get("/api/auth/logout"))
        self._clear_session()
        return True

    def update_details(self, **fields):
        def call():
            self.user = self.api.put("/api/auth/update-details", json=fields)["data"]
            return self.user

        return self._run("Update details", call)

    def update_password(self, current_password: str, new_password: str):
        payload = {"currentPassword": current_password, "newPassword": new_password}
        return self._run("Update password", lambda: self._set_session(self.api.put("/api/auth/update-password", json=payload)))

    def forgot_password(self, email: str):
        return self._run(
            "Forgot password",
            lambda: self.api.post("/api/auth/forgotpassword", json={"email": email}).get("message"),
        )

    def reset_password(self, reset_token: str, password: str):
        return self._run(
            "Reset password",
            lambda: self._set_session(self.api.put(f"/api/auth/resetpassword/{reset_token}", json={"password": password})),
        )
