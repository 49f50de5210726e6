"""
Server configuration derived from environment variables.

The loader turns a mapping of raw environment strings into one immutable
``Config``. Parsing is permissive: optional settings that are missing or
malformed fall back to defaults, and only a few conditions raise (see
``app.core.errors``).

Two ways to get at the result:

- ``load_config`` returns a fresh object. The application factory takes it
  explicitly and exposes it through a FastAPI dependency.
- ``init_config`` does the same and also publishes the object as process-wide
  state for code that reads it through ``config()``.
"""

from __future__ import annotations

import dataclasses
import logging
import re
from dataclasses import dataclass
from enum import Enum
from importlib import metadata
from pathlib import Path
from typing import Any, Mapping, Optional

from app.core.errors import (
    ConfigNotInitializedError,
    InvalidNumberError,
    UnknownOverrideError,
    UnknownRouteTypeError,
)
from app.core.stripe import StripePrice, load_stripe_config


logger = logging.getLogger(__name__)

ROOT_DIR = Path(__file__).resolve().parents[2]
STRIPE_CONFIG_PATH = Path(__file__).resolve().parents[1] / "stripe_config.json"

DEFAULT_APP_NAME = "Joplin Server"
DEFAULT_APP_PORT = 22300
DEFAULT_JOPLINAPP_BASE_URL = "https://joplinapp.org"
UNKNOWN_VERSION = "0.0.0"

INTEGER_PATTERN = re.compile(r"[+-]?\d+", re.ASCII)

# Deliberately not a valid address so that admins notice it must be set.
DEFAULT_SUPPORT_EMAIL = "SUPPORT_EMAIL"

DOCKER_HOST_ALIAS = "host.docker.internal"
LOOPBACK_HOSTS = ("localhost", "127.0.0.1")
JOPLIN_CLOUD_DOMAINS = (".joplincloud.com", ".joplincloud.local")

EnvVariables = Mapping[str, Optional[str]]


class Env(str, Enum):
    DEV = "dev"
    TEST = "test"
    PROD = "prod"
    BUILD_TYPES = "buildTypes"


class RouteType(str, Enum):
    WEB = "Web"
    API = "Api"
    USER_CONTENT = "UserContent"


class DatabaseConfigClient(str, Enum):
    NULL = "null"
    POSTGRESQL = "pg"
    SQLITE = "sqlite3"


@dataclass(frozen=True)
class DatabaseConfig:
    """Connection settings for the database layer.

    ``client`` tells which of the optional fields are meaningful: host, port,
    user and password for PostgreSQL, ``async_stack_traces`` for SQLite.
    """

    client: DatabaseConfigClient
    name: str
    slow_query_log_enabled: bool = False
    slow_query_log_min_duration: int = 10000  # ms
    auto_migration: bool = True
    host: Optional[str] = None
    port: Optional[int] = None
    user: Optional[str] = None
    password: Optional[str] = None
    async_stack_traces: bool = False


@dataclass(frozen=True)
class MailerConfig:
    enabled: bool
    host: str
    port: int
    secure: bool
    auth_user: str
    auth_password: str
    no_reply_name: str
    no_reply_email: str


@dataclass(frozen=True)
class StripeConfig:
    enabled: bool
    secret_key: str
    webhook_secret: str
    publishable_key: str = ""
    webhook_base_url: str = ""
    prices: tuple[StripePrice, ...] = ()


@dataclass(frozen=True)
class Config:
    """Immutable server configuration. Overrides are applied when it is built."""

    app_version: str
    app_name: str
    is_joplin_cloud: bool
    env: Env
    root_dir: Path
    view_dir: Path
    layout_dir: Path
    temp_dir: Path
    log_dir: Path
    database: DatabaseConfig
    mailer: MailerConfig
    stripe: StripeConfig
    port: int
    base_url: str
    show_error_stack_traces: bool
    api_base_url: str
    user_content_base_url: str
    joplin_app_base_url: str
    signup_enabled: bool
    terms_enabled: bool
    account_types_enabled: bool
    support_email: str
    support_name: str
    business_email: str
    cookie_secure: bool


def env_read_string(value: Optional[str], default: str = "") -> str:
    return default if value is None else value


def env_read_bool(value: Optional[str], default: bool = False) -> bool:
    if value is None:
        return default
    return value == "1"


def env_read_int(value: Optional[str], default: Optional[int] = None) -> int:
    """Parse an integer variable, using ``default`` (or 0) when it is unset or empty.

    Raises
    ------
    InvalidNumberError
        If the value is set but is not an integer.
    """
    if not value or not value.strip():
        return 0 if default is None else default
    # ASCII digits only: int() alone would also take "8_080" and non-Latin digits.
    if not INTEGER_PATTERN.fullmatch(value.strip()):
        raise InvalidNumberError(value)
    return int(value.strip())


def app_version() -> str:
    try:
        return metadata.version("joplin-server")
    except metadata.PackageNotFoundError:
        logger.warning("Package joplin-server is not installed, reporting version %s", UNKNOWN_VERSION)
        return UNKNOWN_VERSION


def database_host_from_env(in_docker: bool, env: EnvVariables) -> Optional[str]:
    host = env.get("POSTGRES_HOST")
    if not host:
        return None

    # Inside a container, localhost is the container itself. Docker exposes the
    # host machine under a dedicated alias.
    if in_docker and host in LOOPBACK_HOSTS:
        logger.debug("Running in Docker: using %s instead of %s", DOCKER_HOST_ALIAS, host)
        return DOCKER_HOST_ALIAS
    return host


def database_config_from_env(in_docker: bool, env: EnvVariables) -> DatabaseConfig:
    shared = dict(
        slow_query_log_enabled=env_read_bool(env.get("DB_SLOW_QUERY_LOG_ENABLED")),
        slow_query_log_min_duration=env_read_int(env.get("DB_SLOW_QUERY_LOG_MIN_DURATION"), 10000),
        auto_migration=env_read_bool(env.get("DB_AUTO_MIGRATION"), default=True),
    )

    if env.get("DB_CLIENT") == "pg":
        return DatabaseConfig(
            client=DatabaseConfigClient.POSTGRESQL,
            name=env.get("POSTGRES_DATABASE") or "joplin",
            user=env.get("POSTGRES_USER") or "joplin",
            password=env.get("POSTGRES_PASSWORD") or "joplin",
            port=env_read_int(env.get("POSTGRES_PORT"), 5432),
            host=database_host_from_env(in_docker, env) or "localhost",
            **shared,
        )

    return DatabaseConfig(
        client=DatabaseConfigClient.SQLITE,
        name=env_read_string(env.get("SQLITE_DATABASE")),
        async_stack_traces=True,
        **shared,
    )


def mailer_config_from_env(env: EnvVariables) -> MailerConfig:
    return MailerConfig(
        enabled=env.get("MAILER_ENABLED") != "0",
        host=env.get("MAILER_HOST") or "",
        port=env_read_int(env.get("MAILER_PORT"), 587),
        # MAILER_SECURE has never been able to turn this off.
        secure=True,
        auth_user=env.get("MAILER_AUTH_USER") or "",
        auth_password=env.get("MAILER_AUTH_PASSWORD") or "",
        no_reply_name=env.get("MAILER_NOREPLY_NAME") or "",
        no_reply_email=env.get("MAILER_NOREPLY_EMAIL") or "",
    )


def stripe_config_from_env(env_type: Env, env: EnvVariables, path: Path = STRIPE_CONFIG_PATH) -> StripeConfig:
    stripe_env = Env.DEV if env_type == Env.BUILD_TYPES else env_type
    public = load_stripe_config(stripe_env.value, path)
    secret_key = env.get("STRIPE_SECRET_KEY") or ""

    return StripeConfig(
        enabled=bool(secret_key),
        secret_key=secret_key,
        webhook_secret=env.get("STRIPE_WEBHOOK_SECRET") or "",
        publishable_key=public.publishable_key,
        webhook_base_url=public.webhook_base_url,
        prices=tuple(public.prices),
    )


def base_url_from_env(env: EnvVariables, app_port: int) -> str:
    if env.get("APP_BASE_URL"):
        return env["APP_BASE_URL"].rstrip("/\\")
    return f"http://localhost:{app_port}"


def is_joplin_cloud_url(url: str) -> bool:
    return any(domain in url for domain in JOPLIN_CLOUD_DOMAINS)


def apply_overrides(config: Config, overrides: Optional[Mapping[str, Any]]) -> Config:
    """Return a copy of ``config`` where each key of ``overrides`` replaces that field.

    The merge is shallow: an override for ``database`` replaces the whole
    ``DatabaseConfig``. Derived fields are not recomputed.
    """
    if not overrides:
        return config

    known = {f.name for f in dataclasses.fields(Config)}
    unknown = [name for name in overrides if name not in known]
    if unknown:
        raise UnknownOverrideError(unknown)
    return dataclasses.replace(config, **overrides)


def load_config(
    env_type: Env,
    env: EnvVariables,
    overrides: Optional[Mapping[str, Any]] = None,
    *,
    stripe_config_path: Path = STRIPE_CONFIG_PATH,
) -> Config:
    """Build a ``Config`` from environment variables.

    Parameters
    ----------
    env_type : Env
        Deployment environment. Selects the Stripe public config variant and
        whether error stack traces are shown by default.
    env : Mapping[str, str]
        Raw environment variables, typically ``os.environ``.
    overrides : Mapping[str, Any], optional
        Field values that win over the computed ones.

    Returns
    -------
    Config
        Frozen configuration safe to share across the application.
    """
    env_type = Env(env_type)
    in_docker = bool(env.get("RUNNING_IN_DOCKER"))

    app_name = env.get("APP_NAME") or DEFAULT_APP_NAME
    view_dir = ROOT_DIR / "app" / "views"
    app_port = env_read_int(env.get("APP_PORT"), DEFAULT_APP_PORT)
    app_base_url = base_url_from_env(env, app_port)
    api_base_url = env.get("API_BASE_URL") or app_base_url
    support_email = env.get("SUPPORT_EMAIL") or DEFAULT_SUPPORT_EMAIL

    loaded = Config(
        app_version=app_version(),
        app_name=app_name,
        is_joplin_cloud=is_joplin_cloud_url(api_base_url),
        env=env_type,
        root_dir=ROOT_DIR,
        view_dir=view_dir,
        layout_dir=view_dir / "layouts",
        temp_dir=ROOT_DIR / "temp",
        log_dir=ROOT_DIR / "logs",
        database=database_config_from_env(in_docker, env),
        mailer=mailer_config_from_env(env),
        stripe=stripe_config_from_env(env_type, env, stripe_config_path),
        port=app_port,
        base_url=app_base_url,
        show_error_stack_traces=env_read_bool(env.get("ERROR_STACK_TRACES"), default=env_type == Env.DEV),
        api_base_url=api_base_url,
        user_content_base_url=env.get("USER_CONTENT_BASE_URL") or app_base_url,
        joplin_app_base_url=env_read_string(env.get("JOPLINAPP_BASE_URL"), DEFAULT_JOPLINAPP_BASE_URL),
        signup_enabled=env.get("SIGNUP_ENABLED") == "1",
        terms_enabled=env.get("TERMS_ENABLED") == "1",
        account_types_enabled=env.get("ACCOUNT_TYPES_ENABLED") == "1",
        support_email=support_email,
        support_name=env.get("SUPPORT_NAME") or app_name,
        business_email=env.get("BUSINESS_EMAIL") or support_email,
        cookie_secure=env.get("COOKIES_SECURE") == "1",
    )
    return apply_overrides(loaded, overrides)


_config: Optional[Config] = None
_running_in_docker: bool = False


def init_config(
    env_type: Env,
    env: EnvVariables,
    overrides: Optional[Mapping[str, Any]] = None,
    *,
    stripe_config_path: Path = STRIPE_CONFIG_PATH,
) -> Config:
    """Build the config and publish it as process-wide state.

    Meant to run once at startup, before any request is served. Calling it
    again replaces the previous config.
    """
    global _config, _running_in_docker

    _running_in_docker = bool(env.get("RUNNING_IN_DOCKER"))
    _config = load_config(env_type, env, overrides, stripe_config_path=stripe_config_path)

    logger.info(
        "Config initialized",
        extra={
            "env": _config.env.value,
            "base_url": _config.base_url,
            "database_client": _config.database.client.value,
            "running_in_docker": _running_in_docker,
        },
    )
    return _config


def config() -> Config:
    if _config is None:
        raise ConfigNotInitializedError()
    return _config


def running_in_docker() -> bool:
    return _running_in_docker


def base_url(route_type: RouteType) -> str:
    if route_type == RouteType.WEB:
        return config().base_url
    if route_type == RouteType.API:
        return config().api_base_url
    if route_type == RouteType.USER_CONTENT:
        return config().user_content_base_url
    raise UnknownRouteTypeError(route_type)


def show_item_urls(config: Config) -> bool:
    """Whether item URLs can be shown to users.

    User content on a separate domain would need cross-domain cookies, which
    are not supported, so URLs are only shown when both domains are the same.
    """
    return config.user_content_base_url == config.base_url
