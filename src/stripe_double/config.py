"""
Configuration for the Stripe test double.

Reads the ``[tool.stripe-double]`` table from a project's pyproject.toml and
holds the process-wide settings used by new sessions and fixture loads.
"""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_WEBHOOK_FIXTURE_PATH = Path("./tests/fixtures/stripe_webhooks")


class StripeDoubleConfig(BaseModel):
    """Settings for mock sessions."""

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    # Project fixtures; searched before the bundled webhook_fixtures directory.
    webhook_fixture_path: Path = DEFAULT_WEBHOOK_FIXTURE_PATH
    id_prefix: str = "test_"
    strict_routing: bool = False
    default_list_limit: int = Field(default=10, ge=1, le=100)
    api_base: str = "https://api.stripe.com"
    webhook_secret: str = "whsec_test_secret"

    def resolve_fixture_path(self, project_root: Path) -> Path:
        """Get the absolute project fixture directory."""
        if self.webhook_fixture_path.is_absolute():
            return self.webhook_fixture_path
        return project_root / self.webhook_fixture_path


def load_config(project_root: Path) -> StripeDoubleConfig:
    """
    Load configuration from a project's pyproject.toml.

    Args:
        project_root: Directory containing pyproject.toml

    Returns:
        StripeDoubleConfig with parsed values or defaults
    """
    toml_path = project_root / "pyproject.toml"
    if not toml_path.exists():
        return StripeDoubleConfig()

    with open(toml_path, "rb") as f:
        data = tomllib.load(f)

    section: dict[str, Any] = data.get("tool", {}).get("stripe-double", {})
    if not section:
        return StripeDoubleConfig()

    # Keys may use dashes, as is usual in pyproject tables
    config = StripeDoubleConfig(**{k.replace("-", "_"): v for k, v in section.items()})
    config.webhook_fixture_path = config.resolve_fixture_path(project_root)
    return config


# Process-wide settings shared by the default session
_config = StripeDoubleConfig()


def get_config() -> StripeDoubleConfig:
    return _config


def set_config(config: StripeDoubleConfig) -> StripeDoubleConfig:
    """Replace the process-wide config, returning the previous one so callers can restore it."""
    global _config
    previous = _config
    _config = config
    return previous


def get_webhook_fixture_path() -> Path:
    return _config.webhook_fixture_path


def set_webhook_fixture_path(path: str | Path) -> None:
    """Point project fixture lookups at ``path``. Takes effect on the next load."""
    _config.webhook_fixture_path = Path(path)
