"""Configuration and logging setup for PachiNavi.

Settings live in ``~/.config/pachinavi/config.toml`` (or the file named by
``PACHINAVI_CONFIG``). A missing file means defaults.
"""

import logging
import os
from decimal import Decimal
from pathlib import Path
from typing import Optional

import toml
from pydantic import BaseModel, Field

from pachinavi.models import Party

CONFIG_ENV_VAR = "PACHINAVI_CONFIG"


def get_config_dir() -> Path:
    """Get the configuration directory."""
    return Path.home() / ".config" / "pachinavi"


def get_config_path() -> Path:
    """Get the configuration file path."""
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return get_config_dir() / "config.toml"


class Settings(BaseModel):
    """Resolved configuration."""

    db_path: Path = Field(
        default_factory=lambda: get_config_dir() / "pachinavi.db",
        description="SQLite database file",
    )
    default_tax_rate: Decimal = Field(default=Decimal("0.10"), ge=0, description="Tax rate")
    default_payment_method: str = Field(
        default="bank transfer", description="Payment method recorded on mark paid"
    )
    log_level: str = Field(default="WARNING", description="Logging level")
    companies: dict[str, Party] = Field(
        default_factory=dict, description="Company profiles by user ID"
    )

    model_config = {"frozen": True}


def load_config(path: Optional[Path] = None) -> Settings:
    """Load settings from a TOML file.

    Args:
        path: Config file path; defaults to :func:`get_config_path`.

    Returns:
        Settings, with defaults for anything not configured.

    Raises:
        ValueError: If the file exists but is not valid TOML.
    """
    config_path = Path(path) if path else get_config_path()
    if not config_path.exists():
        return Settings()

    try:
        raw = toml.load(config_path)
    except toml.TomlDecodeError as e:
        raise ValueError(f"Invalid config file {config_path}: {e}") from e

    values: dict = {}
    store = raw.get("store", {})
    if "db_path" in store:
        values["db_path"] = Path(store["db_path"]).expanduser()

    trade = raw.get("trade", {})
    if "default_tax_rate" in trade:
        values["default_tax_rate"] = Decimal(str(trade["default_tax_rate"]))
    if "default_payment_method" in trade:
        values["default_payment_method"] = trade["default_payment_method"]

    log = raw.get("logging", {})
    if "level" in log:
        values["log_level"] = str(log["level"]).upper()

    companies = {}
    for user_id, profile in raw.get("companies", {}).items():
        companies[user_id] = Party(user_id=user_id, **profile)
    values["companies"] = companies

    return Settings(**values)


def create_template_config(path: Optional[Path] = None) -> Path:
    """Write a template configuration file.

    Args:
        path: Destination; defaults to :func:`get_config_path`.

    Returns:
        Path of the written file.
    """
    config_path = Path(path) if path else get_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)

    template = {
        "store": {
            "db_path": str(get_config_dir() / "pachinavi.db"),
        },
        "trade": {
            "default_tax_rate": 0.1,
            "default_payment_method": "bank transfer",
        },
        "logging": {
            "level": "WARNING",
        },
        "companies": {
            "user-a": {
                "company_name": "Pachitech Co., Ltd.",
                "address": "1-1-1 Marunouchi, Chiyoda-ku, Tokyo",
                "tel": "03-1234-5678",
                "contact_name": "Taro Tanaka",
            },
        },
    }

    with open(config_path, "w") as f:
        toml.dump(template, f)

    return config_path


def setup_logging(level: str = "WARNING") -> None:
    """Route log records to a rich console handler."""
    from rich.logging import RichHandler

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
        force=True,
    )
