from pydantic_settings import BaseSettings
from pydantic import ConfigDict, field_validator
import json


class Settings(BaseSettings):
    # Database
    DATABASE_URL: str = "sqlite:///./rental_admin.db"

    # JWT session
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 12
    SESSION_COOKIE_NAME: str = "session"
    SESSION_COOKIE_SECURE: bool = False

    # Sign-in policy: lower-cased email -> "admin" | "staff"
    ROLE_POLICY: dict[str, str] = {}

    # Uploads are written to UPLOAD_DIR and served under UPLOAD_URL_PREFIX
    UPLOAD_DIR: str = "public/uploads"
    UPLOAD_URL_PREFIX: str = "/uploads"

    # Activity log
    ACTIVITY_LOG_PATH: str = "logs.json"
    ACTIVITY_LOG_LIMIT: int = 100

    LOG_LEVEL: str = "INFO"

    @field_validator("ROLE_POLICY", mode="before")
    @classmethod
    def parse_role_policy(cls, v):
        """Accept the policy as a JSON object string or a mapping; keys are lower-cased."""
        if isinstance(v, str):
            try:
                v = json.loads(v) if v.strip() else {}
            except json.JSONDecodeError:
                raise ValueError(f"Invalid JSON in ROLE_POLICY: {v}")
        if not isinstance(v, dict):
            raise ValueError("ROLE_POLICY must be a JSON object of email -> role")
        policy = {}
        for email, role in v.items():
            role = str(role).lower()
            if role not in ("admin", "staff"):
                raise ValueError(f"Unknown role {role!r} for {email} in ROLE_POLICY")
            policy[str(email).strip().lower()] = role
        return policy

    @field_validator("UPLOAD_URL_PREFIX")
    @classmethod
    def normalise_prefix(cls, v: str) -> str:
        return "/" + v.strip("/")

    model_config = ConfigDict(env_file=".env")


settings = Settings()
