"""Exporter settings loaded from the environment."""

import os
from collections.abc import Mapping
from dataclasses import dataclass, field

from cmexporter.core.errors import ScrapeConfigError
from cmexporter.core.models import ConnectionConfig

VALID_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def _number(environ: Mapping[str, str], key: str, default: str, cast: type) -> int | float:
    raw = environ.get(key, default).strip() or default
    try:
        value = cast(raw)
    except ValueError:
        raise ScrapeConfigError(f"{key} must be a number, got {raw!r}") from None
    if value <= 0:
        raise ScrapeConfigError(f"{key} must be positive, got {raw!r}")
    return value


@dataclass(frozen=True)
class ExporterSettings:
    """Process-wide settings, read once at startup.

    Attributes:
        host: Upstream manager host.
        port: Upstream manager API port.
        api_version: Upstream API version segment.
        username: Basic auth user.
        password: Basic auth password.
        cluster_scope: Optional cluster every query is restricted to.
        query_timeout: Per-query timeout in seconds.
        scrape_timeout: Deadline for one whole scrape in seconds.
        max_concurrency: Number of modules scraped at once.
        namespace: Prefix for every exported metric name.
        log_level: Level for the exporter's own logging.
        log_buffer_size: Number of log records kept for /logs.
    """

    host: str
    port: int = 7180
    api_version: str = "v19"
    username: str = ""
    password: str = field(default="", repr=False)
    cluster_scope: str = ""
    query_timeout: float = 10.0
    scrape_timeout: float = 30.0
    max_concurrency: int = 4
    namespace: str = "cm"
    log_level: str = "INFO"
    log_buffer_size: int = 1000

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "ExporterSettings":
        """Build settings from CM_* and LOG_* environment variables.

        Raises:
            ScrapeConfigError: If CM_HOST is missing or a number is invalid.
        """
        env = os.environ if environ is None else environ
        host = env.get("CM_HOST", "").strip()
        if not host:
            raise ScrapeConfigError("CM_HOST is required")
        log_level = env.get("LOG_LEVEL", "INFO").strip().upper()
        if log_level not in VALID_LEVELS:
            log_level = "INFO"
        return cls(
            host=host,
            port=int(_number(env, "CM_PORT", "7180", int)),
            api_version=env.get("CM_API_VERSION", "v19").strip() or "v19",
            username=env.get("CM_USERNAME", ""),
            password=env.get("CM_PASSWORD", ""),
            cluster_scope=env.get("CM_CLUSTER_SCOPE", "").strip(),
            query_timeout=float(_number(env, "CM_QUERY_TIMEOUT", "10", float)),
            scrape_timeout=float(_number(env, "CM_SCRAPE_TIMEOUT", "30", float)),
            max_concurrency=int(_number(env, "CM_MAX_CONCURRENCY", "4", int)),
            namespace=env.get("CM_NAMESPACE", "cm").strip(),
            log_level=log_level,
            log_buffer_size=int(_number(env, "LOG_BUFFER_SIZE", "1000", int)),
        )

    def connection(self) -> ConnectionConfig:
        """Return the immutable upstream connection config."""
        return ConnectionConfig(
            host=self.host,
            port=self.port,
            api_version=self.api_version,
            username=self.username,
            password=self.password,
        )
