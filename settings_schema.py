from pydantic import BaseModel, Field, ValidationError, field_validator

DEFAULT_API_BASE_URL = "http://localhost:8080/api/v1.0"


class ClientSettings(BaseModel):
    api_base_url: str = DEFAULT_API_BASE_URL
    request_timeout: float = Field(10.0, gt=0)
    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def known_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level {v}")
        return level


def validate_settings(data: dict) -> ClientSettings:
    try:
        return ClientSettings(**data)
    except ValidationError as e:
        raise ValueError(str(e))
