"""OAuth2 client-credentials token cache."""

from dataclasses import dataclass
from datetime import datetime, timedelta

REFRESH_MARGIN = timedelta(seconds=60)


@dataclass
class TokenCache:
    """Access token plus its expiry, owned by one API client."""

    access_token: str | None = None
    expires_at: datetime | None = None

    def valid_token(self, now: datetime) -> str | None:
        """Return the token unless missing or within a minute of expiry."""
        if not self.access_token or self.expires_at is None:
            return None
        if self.expires_at <= now + REFRESH_MARGIN:
            return None
        return self.access_token

    def store(self, access_token: str, expires_in: int, now: datetime) -> None:
        self.access_token = access_token
        self.expires_at = now + timedelta(seconds=expires_in)

    def clear(self) -> None:
        self.access_token = None
        self.expires_at = None
