from __future__ import annotations

from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from ..core.constants import DEFAULT_TOKEN_MAX_AGE_SECONDS
from ..core.exceptions import AuthenticationError


class SignedTokenService:
    """Bearer credentials carrying an employee id, signed with the app secret.

    Issuing belongs to the login flow; verification is what the HTTP layer and
    the live channel need.
    """

    SALT = "crm-core-access"

    def __init__(self, secret_key: str, *, max_age_seconds: int = DEFAULT_TOKEN_MAX_AGE_SECONDS):
        self._serializer = URLSafeTimedSerializer(secret_key, salt=self.SALT)
        self._max_age = int(max_age_seconds)

    def issue(self, employee_id: int) -> str:
        return self._serializer.dumps({"sub": int(employee_id)})

    def verify(self, token: str | None) -> int:
        if not token:
            raise AuthenticationError("Missing bearer token")
        try:
            data = self._serializer.loads(token, max_age=self._max_age)
        except SignatureExpired:
            raise AuthenticationError("Token expired")
        except BadSignature:
            raise AuthenticationError("Invalid token")

        try:
            return int(data["sub"])
        except (KeyError, TypeError, ValueError):
            raise AuthenticationError("Invalid token")
