from typing import Optional

from config import YamlConfig
from logger import setup_logger

logger = setup_logger(__name__)

TOKEN_KEY = "token"
USERNAME_KEY = "username"


class AuthContext:
    """Credentials of the signed-in user, backed by the local settings file."""

    def __init__(self, storage: YamlConfig) -> None:
        self.storage = storage
        self.token: Optional[str] = None
        self.username: Optional[str] = None

    @classmethod
    def from_storage(cls, storage: YamlConfig) -> "AuthContext":
        ctx = cls(storage)
        ctx.reload()
        return ctx

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    def reload(self) -> None:
        data = self.storage.load()
        token = data.get(TOKEN_KEY)
        self.token = token if isinstance(token, str) and token else None
        self.username = data.get(USERNAME_KEY)

    def store(self, username: str, token: str) -> None:
        data = self.storage.load()
        data[TOKEN_KEY] = token
        data[USERNAME_KEY] = username
        self.storage.save(data)
        self.token = token
        self.username = username
        logger.info("Signed in as %s", username)

    def clear(self) -> None:
        """Forget the credentials in memory and in storage."""
        self.storage.delete(TOKEN_KEY, USERNAME_KEY)
        if self.username:
            logger.info("Signed out %s", self.username)
        self.token = None
        self.username = None

    def headers(self) -> dict:
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}
