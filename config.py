import os
from typing import Optional

import yaml
import keyring

from settings_schema import ClientSettings, validate_settings

APP_VERSION = "1.0.0"

# marker written to the file in place of a value held by the keyring
IN_KEYRING = "<keyring>"


class YamlConfig:
    """Client state in a YAML file. With ``ENCRYPT_SETTINGS=1`` the
    credentials listed in ``SENSITIVE_KEYS`` live in the system keyring and
    the file only records that they exist."""

    SENSITIVE_KEYS = {"token"}

    def __init__(self, path: str = "settings.yaml", service: str = "workout-tracker") -> None:
        self.path = path
        self.service = service
        self.encrypt = os.environ.get("ENCRYPT_SETTINGS") == "1"

    def _secret(self, key: str) -> Optional[str]:
        return keyring.get_password(self.service, key)

    def load(self) -> dict:
        if not os.path.exists(self.path):
            return {}
        with open(self.path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if not self.encrypt:
            return data
        for key in self.SENSITIVE_KEYS & set(data):
            secret = self._secret(key)
            if secret is None:
                del data[key]
            else:
                data[key] = secret
        return data

    def save(self, data: dict) -> None:
        out = dict(data)
        if self.encrypt:
            for key in self.SENSITIVE_KEYS & set(out):
                keyring.set_password(self.service, key, str(out[key]))
                out[key] = IN_KEYRING
        with open(self.path, "w", encoding="utf-8") as f:
            yaml.safe_dump(out, f)

    def delete(self, *keys: str) -> None:
        """Remove ``keys`` from the file and, when encrypting, the keyring."""
        data = self.load()
        for key in keys:
            data.pop(key, None)
            if self.encrypt and key in self.SENSITIVE_KEYS and self._secret(key) is not None:
                keyring.delete_password(self.service, key)
        self.save(data)


def load_settings(path: str = "settings.yaml") -> ClientSettings:
    """Read client settings from ``path`` with environment overrides."""
    stored = YamlConfig(path).load()
    data = {k: stored[k] for k in ClientSettings.model_fields if k in stored}
    if os.environ.get("API_BASE_URL"):
        data["api_base_url"] = os.environ["API_BASE_URL"]
    if os.environ.get("LOG_LEVEL"):
        data["log_level"] = os.environ["LOG_LEVEL"]
    return validate_settings(data)
