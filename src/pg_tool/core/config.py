"""Configuration management for pg-tool.

Connection options, connection string formatting, TOML config files,
environment variables, named profiles and precedence resolution.

Precedence order (highest to lowest):
1. CLI flags (--host, --port, etc.)
2. --dsn flag (parsed into components)
3. Environment variables (PGHOST, PGPORT, PGDATABASE, PGUSER, PGPASSWORD, PGSSLMODE)
4. Named profile (--profile or PG_TOOL_PROFILE env var)
5. Built-in defaults
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any
from urllib.parse import parse_qs, quote, unquote, urlparse

import structlog
from pydantic import BaseModel, field_validator, model_validator

from pg_tool.core.exceptions import ConfigError, InvalidArgumentError

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "pg-tool" / "config.toml"

HOST_DEFAULT = "localhost"
PORT_DEFAULT = "5432"

VALID_SSLMODES = frozenset(
    {"disable", "allow", "prefer", "require", "verify-ca", "verify-full"}
)

_PG_ENV_VARS: dict[str, str] = {
    "PGHOST": "host",
    "PGPORT": "port",
    "PGDATABASE": "name",
    "PGUSER": "user",
    "PGPASSWORD": "password",  # pragma: allowlist secret
    "PGSSLMODE": "sslmode",
}


def parse_dsn(dsn: str) -> dict[str, str]:
    """Supports postgresql:// and postgres:// schemes with an sslmode param."""
    parsed = urlparse(dsn)
    if parsed.scheme not in ("postgresql", "postgres"):
        msg = f"Invalid DSN scheme: '{parsed.scheme}'. Expected 'postgresql' or 'postgres'"
        raise ConfigError(msg)

    result: dict[str, str] = {}
    if parsed.hostname:
        result["host"] = parsed.hostname
    try:
        port = parsed.port
    except ValueError as e:
        raise ConfigError(f"Invalid port in DSN: {e}") from e
    if port:
        result["port"] = str(port)
    if parsed.path and parsed.path.strip("/"):
        result["name"] = parsed.path.strip("/")
    if parsed.username:
        result["user"] = unquote(parsed.username)
    if parsed.password:
        result["password"] = unquote(parsed.password)
    query_params = parse_qs(parsed.query)
    if "sslmode" in query_params:
        result["sslmode"] = query_params["sslmode"][0]
    return result


class ConnectionOptions(BaseModel):
    """Settings for a PostgreSQL connection.

    Every field is a string and may be left empty; host and port pick up
    their defaults when a connection string is formatted.
    """

    host: str = ""
    user: str = ""
    password: str = ""
    name: str = ""
    sslmode: str = ""
    port: str = ""

    @field_validator("port", mode="before")
    @classmethod
    def coerce_port(cls, v: Any) -> Any:
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator("port")
    @classmethod
    def validate_port(cls, v: str) -> str:
        if not v:
            return v
        if not v.isdigit() or not (1 <= int(v) <= 65535):
            msg = f"Invalid port: {v}. Must be 1-65535"
            raise ValueError(msg)
        return v

    @field_validator("sslmode")
    @classmethod
    def validate_sslmode(cls, v: str) -> str:
        if v and v not in VALID_SSLMODES:
            msg = f"Invalid sslmode: '{v}'. Must be one of: {', '.join(sorted(VALID_SSLMODES))}"
            raise ValueError(msg)
        return v


def _kv_escape(value: str) -> str:
    """Quote a value for libpq's keyword=value syntax when needed."""
    if value and not any(c in value for c in " '\\\t\n"):
        return value
    escaped = value.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


def format_connection_string(options: ConnectionOptions, *, uri_format: bool = True) -> str:
    """Format a connection string in either the URI or key-value format.

    Fills in the default host and port on ``options`` when they are unset.
    Raises InvalidArgumentError when no password is set.
    """
    log = structlog.get_logger()
    if not options.host:
        log.info("no host provided, defaulting to localhost")
        options.host = HOST_DEFAULT
    if not options.password:
        raise InvalidArgumentError("password required")
    if not options.port:
        options.port = PORT_DEFAULT
    if options.sslmode == "disable":
        log.warning("running sslmode=disable")

    if uri_format:
        ssl_param = f"?sslmode={options.sslmode}" if options.sslmode else ""
        return (
            f"postgres://{quote(options.user, safe='')}:{quote(options.password, safe='')}"
            f"@{options.host}:{options.port}/{quote(options.name, safe='')}{ssl_param}"
        )

    pairs = [
        ("host", options.host),
        ("user", options.user),
        ("password", options.password),
        ("dbname", options.name),
        ("sslmode", options.sslmode),
        ("port", options.port),
    ]
    return " ".join(f"{key}={_kv_escape(value)}" for key, value in pairs)


class ProfileConfig(ConnectionOptions):
    dsn: str | None = None

    @model_validator(mode="before")
    @classmethod
    def parse_dsn_into_components(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("dsn"):
            for key, value in parse_dsn(data["dsn"]).items():
                data.setdefault(key, value)
        return data


class AppConfig(BaseModel):
    default_timeout: float | None = None
    default_format: str | None = None
    default_profile: str | None = None
    profiles: dict[str, ProfileConfig] = {}


class ResolvedConfig(BaseModel):
    options: ConnectionOptions
    statement_timeout: float | None = None
    default_format: str | None = None
    active_profile: str | None = None
    sources: dict[str, str] = {}


def load_config(config_path: Path | None = None) -> AppConfig:
    """Load configuration from TOML file.

    Returns default AppConfig if file doesn't exist.
    Raises ConfigError on malformed TOML or invalid config.
    """
    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH

    if not config_path.exists():
        return AppConfig()

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        msg = f"Malformed TOML in {config_path}: {e}"
        raise ConfigError(msg) from e

    try:
        return AppConfig.model_validate(data)
    except Exception as e:
        msg = f"Invalid configuration in {config_path}: {e}"
        raise ConfigError(msg) from e


def resolve_config(
    config: AppConfig,
    profile_name: str | None = None,
    dsn: str | None = None,
    **cli_overrides: Any,
) -> ResolvedConfig:
    """Resolve connection options using the precedence chain.

    CLI > DSN > env > profile > built-in defaults.
    """
    fields = list(ConnectionOptions.model_fields)
    resolved: dict[str, Any] = dict.fromkeys(fields, "")
    sources: dict[str, str] = dict.fromkeys(fields, "default")

    # Layer 1: Named profile
    effective_profile = (
        profile_name or os.environ.get("PG_TOOL_PROFILE") or config.default_profile
    )
    if effective_profile:
        if effective_profile not in config.profiles:
            available = (
                ", ".join(sorted(config.profiles.keys())) if config.profiles else "none"
            )
            msg = f"Unknown profile: '{effective_profile}'. Available profiles: {available}"
            raise ConfigError(msg)
        profile = config.profiles[effective_profile]
        for key in fields:
            value = getattr(profile, key)
            if value:
                resolved[key] = value
                sources[key] = f"profile: {effective_profile}"

    # Layer 2: Environment variables
    for env_var, field_name in _PG_ENV_VARS.items():
        value = os.environ.get(env_var)
        if value is not None:
            resolved[field_name] = value
            sources[field_name] = f"env: {env_var}"

    # Layer 3: DSN flag
    if dsn:
        for key, value in parse_dsn(dsn).items():
            resolved[key] = value
            sources[key] = "dsn"

    # Layer 4: CLI flags (highest priority)
    cli_to_field = {
        "host": "host",
        "port": "port",
        "database": "name",
        "user": "user",
        "password": "password",  # pragma: allowlist secret
        "sslmode": "sslmode",
    }
    for cli_name, field_name in cli_to_field.items():
        value = cli_overrides.get(cli_name)
        if value is not None:
            resolved[field_name] = value
            sources[field_name] = f"cli: --{cli_name}"

    try:
        options = ConnectionOptions(**resolved)
    except ValueError as e:
        raise ConfigError(f"Invalid connection options: {e}") from e

    timeout = cli_overrides.get("timeout")
    if timeout is None:
        timeout = config.default_timeout

    return ResolvedConfig(
        options=options,
        statement_timeout=timeout,
        default_format=config.default_format,
        active_profile=effective_profile,
        sources=sources,
    )
