from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import jsonschema
import yaml
from dotenv import load_dotenv
from jsonschema.exceptions import ValidationError

from ircrm.excel.normalizers import DEFAULT_SERIAL_RANGE
from ircrm.services.exporter import DEFAULT_COMPRESSION_LEVEL
from ircrm.services.importer import DEFAULT_BATCH_SIZE

"""Configuration loading.

- YAML (config/ircrm.yml by default) validated against config_schema.json
- defaults applied for every optional key
- environment wins over the file for connection settings and the acting user:
  DATABASE_URL / PGDSN, then PGHOST / PGPORT / PGUSER / PGPASSWORD / PGDATABASE,
  and IRCRM_USER_ID
- `.env` in the working directory is loaded first (overriding the process env)
"""

__all__ = [
    "ConfigError",
    "DatabaseConfig",
    "AppConfig",
    "DEFAULT_CONFIG_PATH",
    "SCHEMA_PATH",
    "load_env_file",
    "load_config",
    "resolve_dsn",
    "resolve_user_id",
]

SCHEMA_PATH = Path(__file__).with_name("config_schema.json")
DEFAULT_CONFIG_PATH = Path("config/ircrm.yml")


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class DatabaseConfig:
    """Fallback connection settings (environment variables take precedence)."""
    host: str | None = None
    port: int | None = None
    user: str | None = None
    password: str | None = None
    database: str | None = None
    dsn: str | None = None


@dataclass(frozen=True)
class AppConfig:
    storage_root: Path
    user_id: str | None = None
    timezone: str = "UTC"
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    batch_size: int = DEFAULT_BATCH_SIZE
    serial_date_range: tuple[float, float] = DEFAULT_SERIAL_RANGE
    output_directory: Path = Path(".")
    compression_level: int = DEFAULT_COMPRESSION_LEVEL


def _validate_config_schema(data: dict[str, Any]) -> None:
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")
    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def load_env_file(path: Path = Path(".env"), override: bool = True) -> bool:
    """Load a .env file into os.environ; returns False when there is none."""
    if not path.exists():
        return False
    return load_dotenv(dotenv_path=path, override=override)


def load_config(path: Path) -> AppConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError("config root must be a mapping")

    _validate_config_schema(data)

    tz = data.get("timezone", "UTC")
    try:
        ZoneInfo(tz)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ConfigError(f"unknown timezone: {tz}") from e

    low, high = data.get("import", {}).get("serial_date_range", DEFAULT_SERIAL_RANGE)
    if low >= high:
        raise ConfigError(f"serial_date_range must be increasing, got [{low}, {high}]")

    db_raw = data.get("database", {})
    imp = data.get("import", {})
    exp = data.get("export", {})
    return AppConfig(
        storage_root=Path(data["storage"]["root"]),
        user_id=data.get("user_id"),
        timezone=tz,
        database=DatabaseConfig(
            host=db_raw.get("host"),
            port=db_raw.get("port"),
            user=db_raw.get("user"),
            password=db_raw.get("password"),
            database=db_raw.get("database"),
            dsn=db_raw.get("dsn"),
        ),
        batch_size=imp.get("batch_size", DEFAULT_BATCH_SIZE),
        serial_date_range=(low, high),
        output_directory=Path(exp.get("output_directory", ".")),
        compression_level=exp.get("compression_level", DEFAULT_COMPRESSION_LEVEL),
    )


def resolve_dsn(db_cfg: DatabaseConfig) -> str:
    """Connection string: full DSN from env/config, else individual PG* settings."""
    dsn = os.getenv("DATABASE_URL") or os.getenv("PGDSN") or db_cfg.dsn
    if dsn:
        return dsn
    host = os.getenv("PGHOST", db_cfg.host or "localhost")
    port = os.getenv("PGPORT", str(db_cfg.port) if db_cfg.port else "5432")
    user = os.getenv("PGUSER", db_cfg.user or "postgres")
    password = os.getenv("PGPASSWORD", db_cfg.password or "")
    database = os.getenv("PGDATABASE", db_cfg.database or "postgres")
    dsn = f"host={host} port={port} user={user} dbname={database}"
    if password:
        dsn += f" password={password}"
    return dsn


def resolve_user_id(cfg: AppConfig) -> str | None:
    return os.getenv("IRCRM_USER_ID") or cfg.user_id or None
