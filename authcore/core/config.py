import logging
import tomllib
from enum import StrEnum
from importlib.metadata import PackageNotFoundError, metadata
from pathlib import Path

from pydantic import computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from yarl import URL

DISTRIBUTION_NAME = "authcore"
PROJECT_TOML_PATH = Path(__file__).parent.parent.parent / "pyproject.toml"


def load_project_metadata() -> dict[str, str]:
    """
    Name, version and description of the installed distribution.

    A source checkout that was never installed has no distribution metadata,
    there the values come from pyproject.toml instead.
    """
    try:
        dist = metadata(DISTRIBUTION_NAME)
    except PackageNotFoundError:
        with open(PROJECT_TOML_PATH, "rb") as f:
            project = tomllib.load(f)["project"]
        return {key: project[key] for key in ("name", "version", "description")}

    return {"name": dist["Name"], "version": dist["Version"], "description": dist["Summary"]}


PROJECT_METADATA = load_project_metadata()

SYMMETRIC_JWT_ALGORITHMS = ("HS256", "HS384", "HS512")


class Environment(StrEnum):
    LOCAL = "local"
    DEV = "dev"
    STG = "stg"
    PRD = "prd"


class Settings(BaseSettings):
    """
    Application settings.

    These parameters can be configured
    with environment variables.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_ignore_empty=False,
        extra="ignore",
    )

    # App variables
    app_name: str = PROJECT_METADATA["name"]
    app_version: str = PROJECT_METADATA["version"]
    app_description: str = PROJECT_METADATA["description"]

    # Current working environment
    current_environment: Environment
    log_level: int = logging.INFO
    log_dir: Path = Path("logs")
    log_to_file: bool = True
    debug: bool = False

    # Variables for Redis
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_user: str | None = None
    redis_pass: str | None = None
    redis_base: int | None = None
    redis_max_pool_connections: int = 50  # Maximum number of connections in the Redis pool
    redis_socket_connect_timeout: int = 5  # Socket connect timeout in seconds
    redis_socket_timeout: int = 5  # Socket timeout in seconds

    # Token security settings
    secret_key: str
    jwt_algorithm: str = "HS256"
    access_token_expire_seconds: int = 15 * 60
    refresh_token_expire_seconds: int = 7 * 24 * 60 * 60

    @field_validator("jwt_algorithm")
    @classmethod
    def validate_jwt_algorithm(cls, value: str) -> str:
        """Only HMAC algorithms are accepted, tokens are signed with a shared secret."""
        if value not in SYMMETRIC_JWT_ALGORITHMS:
            raise ValueError(f"jwt_algorithm must be one of {', '.join(SYMMETRIC_JWT_ALGORITHMS)}")

        return value

    @field_validator("access_token_expire_seconds", "refresh_token_expire_seconds")
    @classmethod
    def validate_token_lifetime(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("Token lifetimes must be positive")

        return value

    @computed_field
    @property
    def redis_url(self) -> URL:
        """
        Assemble REDIS URL from settings.
        """
        path = ""

        if self.redis_base is not None:
            path = f"/{self.redis_base}"

        return URL.build(
            scheme="redis",
            host=self.redis_host,
            port=self.redis_port,
            user=self.redis_user,
            password=self.redis_pass,
            path=path,
        )


settings = Settings()  # type: ignore
