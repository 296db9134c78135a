"""Application configuration via environment variables."""

from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Server
    host: str = "0.0.0.0"
    port: int = 8080
    log_level: str = "info"
    json_logs: bool = True

    # Redis
    redis_addr: str = "localhost:6379"
    redis_password: str = ""
    redis_channel: str = "starling_events"

    # Webhook verification. Empty secret disables verification.
    # hmac: secret is the shared HMAC-SHA512 key
    # rsa: secret is a base64 DER (SubjectPublicKeyInfo) RSA public key
    webhook_secret: str = ""
    webhook_verification_mode: Literal["hmac", "rsa"] = "hmac"

    # Limits and timeouts (seconds)
    max_body_bytes: int = 1024 * 1024
    read_timeout: float = 10.0
    publish_timeout: float = 5.0
    health_timeout: float = 2.0
    startup_timeout: float = 5.0
    shutdown_timeout: float = 5.0

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
        "frozen": True,
        # unset and empty variables both fall back to the defaults
        "env_ignore_empty": True,
    }

    @property
    def verification_enabled(self) -> bool:
        """Return False when no secret is configured (open mode)."""
        return self.webhook_secret != ""

    @property
    def redis_host(self) -> str:
        host, sep, _ = self.redis_addr.rpartition(":")
        return host if sep else self.redis_addr

    @property
    def redis_port(self) -> int:
        _, sep, port = self.redis_addr.rpartition(":")
        return int(port) if sep and port else 6379


def load_settings() -> Settings:
    """Build settings from the process environment (and .env, if present)."""
    return Settings()
