"""Client configuration loaded from environment variables."""

from pydantic import Field
from pydantic_settings import BaseSettings


class CelcatConfig(BaseSettings):
    """Celcat client configuration loaded from environment variables.

    Every field can be set through a CELCAT_-prefixed variable, e.g.
    CELCAT_URL or CELCAT_LOG_LEVEL. For local development, create a .env file
    in the project root.
    """

    url: str = Field(
        default="https://services-web.u-cergy.fr/calendar",
        description="Base address of the Celcat web calendar",
    )
    username: str = Field(
        default="",
        description="Celcat (LDAP) username",
    )
    password: str = Field(
        default="",
        description="Celcat (LDAP) password",
    )

    # Logging
    log_json: bool = Field(
        default=False,
        description="Output logs in JSON format (for production)",
    )
    log_level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    model_config = {
        "env_prefix": "CELCAT_",
        "case_sensitive": False,
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


# Singleton pattern
_config: CelcatConfig | None = None


def get_config() -> CelcatConfig:
    """Get the client configuration singleton.

    Returns:
        CelcatConfig: Client configuration instance
    """
    global _config
    if _config is None:
        _config = CelcatConfig()
    return _config
