"""XApp token value object and its on-disk mirror."""

import json
import logging
import os
import tempfile
from datetime import UTC, datetime
from pathlib import Path

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from .consts import TOKEN_EXPIRY_KEY, TOKEN_KEY

logger = logging.getLogger("emergence-api.token_store")


class AccessToken(BaseModel):
    """Short-lived bearer credential.

    Validity is computed on every access, so a token ages from valid to
    invalid without anything being mutated.
    """

    model_config = ConfigDict(frozen=True)

    token: str = ""
    expiration: datetime | None = None

    @field_validator("expiration")
    @classmethod
    def _assume_utc(cls, value: datetime | None) -> datetime | None:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value

    def is_valid_at(self, moment: datetime) -> bool:
        """Check validity at a given instant."""
        if not self.token or self.expiration is None:
            return False
        return moment < self.expiration

    @property
    def is_valid(self) -> bool:
        return self.is_valid_at(datetime.now(UTC))


class TokenStore:
    """Write-through persistence for the XApp token.

    The file is a flat JSON object of defaults keyed by ``TokenKey`` and
    ``TokenExpiry``. Reads never raise: anything missing or malformed loads
    as an empty, invalid token.
    """

    def __init__(self, path: str | Path):
        """Initialize TokenStore.

        Args:
            path: Location of the token file. ``~`` is expanded.
        """
        self.path = Path(os.path.expanduser(str(path)))

    def load(self) -> AccessToken:
        """Read the persisted token.

        Returns:
            The stored AccessToken, or an empty one if absent or corrupt.
        """
        try:
            with open(self.path) as f:
                defaults = json.load(f)
        except FileNotFoundError:
            logger.debug(f"No persisted token at {self.path}")
            return AccessToken()
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable token file {self.path}: {e}")
            return AccessToken()

        if not isinstance(defaults, dict):
            logger.warning(f"Ignoring malformed token file {self.path}")
            return AccessToken()

        try:
            return AccessToken(
                token=defaults.get(TOKEN_KEY) or "",
                expiration=defaults.get(TOKEN_EXPIRY_KEY),
            )
        except ValidationError as e:
            logger.warning(f"Ignoring malformed token fields in {self.path}: {e}")
            return AccessToken()

    def save(self, token: AccessToken) -> None:
        """Persist both token fields, durably, before returning.

        The file is replaced atomically. Failures are logged and swallowed:
        the next load simply yields an invalid token and triggers a refresh.

        Args:
            token: Token to persist.
        """
        defaults = {
            TOKEN_KEY: token.token,
            TOKEN_EXPIRY_KEY: (
                token.expiration.isoformat() if token.expiration else None
            ),
        }

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
            )
        except OSError as e:
            logger.warning(f"Failed to persist token to {self.path}: {e}")
            return

        try:
            with os.fdopen(fd, "w", encoding="utf-8") as tmp_file:
                json.dump(defaults, tmp_file)
                tmp_file.flush()
                os.fsync(tmp_file.fileno())
            os.replace(tmp_name, self.path)
            logger.debug(f"Persisted token to {self.path}")
        except OSError as e:
            logger.warning(f"Failed to persist token to {self.path}: {e}")
            try:
                os.remove(tmp_name)
            except OSError:
                pass
