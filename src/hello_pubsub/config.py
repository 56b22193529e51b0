import logging
import os
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class DecodePolicy(str, Enum):
    """What the handler does with a present but undecodable payload."""

    FAIL = "fail"
    FALLBACK = "fallback"


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application configuration loaded from environment variables."""

    # --- Variables with Defaults ---
    service_name: str
    environment: str
    log_level: str
    malformed_payload_policy: DecodePolicy

    # --- Opaque deployment parameters ---
    trigger_topic: str | None = None

    @classmethod
    def load_from_env(cls) -> "AppConfig":
        """
        Loads configuration from environment variables, performing validation and type casting.
        Fails fast with a ConfigurationError if anything is invalid.
        """
        try:
            service_name = os.getenv("SERVICE_NAME", "hello-pubsub").strip()
            if not service_name:
                raise ValueError("SERVICE_NAME must not be empty.")

            environment = os.getenv("ENVIRONMENT", "dev").strip()
            if not environment:
                raise ValueError("ENVIRONMENT must not be empty.")

            # --- Handle special-case variables like log level ---
            # The greeting is an INFO record, so anything stricter would drop it.
            log_level = os.getenv("LOG_LEVEL", "INFO").upper()
            allowed_log_levels = ["DEBUG", "INFO"]
            if log_level not in allowed_log_levels:
                raise ValueError(
                    f"LOG_LEVEL must be one of {allowed_log_levels}, not '{log_level}'"
                )

            raw_policy = os.getenv("MALFORMED_PAYLOAD_POLICY", "fail").strip().lower()
            try:
                malformed_payload_policy = DecodePolicy(raw_policy)
            except ValueError:
                allowed = [p.value for p in DecodePolicy]
                raise ValueError(
                    f"MALFORMED_PAYLOAD_POLICY must be one of {allowed}, not '{raw_policy}'"
                )

            trigger_topic = os.getenv("TRIGGER_TOPIC") or None

        except ValueError as e:
            raise ConfigurationError(
                f"Invalid value for an environment variable: {e}"
            ) from e

        return cls(
            service_name=service_name,
            environment=environment,
            log_level=log_level,
            malformed_payload_policy=malformed_payload_policy,
            trigger_topic=trigger_topic,
        )


# --- Singleton Factory Function (Lazy-loaded and Cached) ---
@lru_cache(maxsize=1)
def get_config() -> AppConfig:
    """
    Loads the application configuration from environment variables.
    The result is cached using lru_cache, so the environment is only read once
    on the first call.
    """
    logger.info("Loading application configuration from environment...")
    return AppConfig.load_from_env()
