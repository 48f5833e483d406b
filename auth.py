# filename: auth.py
# Controle de acesso: Anonymous <-> SignedIn(username), guardado na sessão.
from typing import MutableMapping, Optional

from db import CredentialStore
from errors import AuthenticationFailed, AuthorizationRequired

SESSION_KEY = "username"
SIGN_IN_REQUIRED = "You must be signed in to do that."
INVALID_CREDENTIALS = "Invalid Credentials"


class AuthGate:
    def __init__(self, session: MutableMapping):
        self._session = session

    @property
    def username(self) -> Optional[str]:
        return self._session.get(SESSION_KEY)

    @property
    def signed_in(self) -> bool:
        return self.username is not None

    def sign_in(self, credentials: CredentialStore, username: str, password: str) -> str:
        username = (username or "").strip()
        if not credentials.verify(username, password):
            raise AuthenticationFailed(INVALID_CREDENTIALS)
        self._session[SESSION_KEY] = username
        return username

    def sign_in_new_user(self, username: str) -> None:
        self._session[SESSION_KEY] = username.strip()

    def sign_out(self) -> None:
        self._session.pop(SESSION_KEY, None)

    def require_signed_in(self) -> str:
        if not self.signed_in:
            raise AuthorizationRequired(SIGN_IN_REQUIRED)
        return self.username
