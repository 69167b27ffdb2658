"""Tests for configuration loading and the process-wide settings."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from stripe_double.config import (
    DEFAULT_WEBHOOK_FIXTURE_PATH,
    StripeDoubleConfig,
    get_config,
    get_webhook_fixture_path,
    load_config,
    set_webhook_fixture_path,
)


class TestDefaults:
    def test_defaults(self) -> None:
        config = StripeDoubleConfig()
        assert config.webhook_fixture_path == DEFAULT_WEBHOOK_FIXTURE_PATH
        assert config.id_prefix == "test_"
        assert config.strict_routing is False
        assert config.default_list_limit == 10

    def test_unknown_fields_rejected(self) -> None:
        with pytest.raises(ValidationError):
            StripeDoubleConfig(colour="blue")  # type: ignore[call-arg]

    def test_list_limit_bounds(self) -> None:
        with pytest.raises(ValidationError):
            StripeDoubleConfig(default_list_limit=0)


class TestLoadConfig:
    def test_missing_pyproject_gives_defaults(self, tmp_path: Path) -> None:
        assert load_config(tmp_path) == StripeDoubleConfig()

    def test_reads_tool_table(self, tmp_path: Path) -> None:
        (tmp_path / "pyproject.toml").write_text(
            '[tool.stripe-double]\n'
            'webhook-fixture-path = "qa/webhooks"\n'
            'strict-routing = true\n'
            'id_prefix = "ci_"\n'
        )
        config = load_config(tmp_path)
        assert config.webhook_fixture_path == tmp_path / "qa" / "webhooks"
        assert config.strict_routing is True
        assert config.id_prefix == "ci_"

    def test_other_tables_ignored(self, tmp_path: Path) -> None:
        (tmp_path / "pyproject.toml").write_text('[project]\nname = "app"\n')
        assert load_config(tmp_path) == StripeDoubleConfig()


class TestProcessConfig:
    def test_set_and_restore_fixture_path(self, dummy_fixture_dir: Path) -> None:
        original = get_webhook_fixture_path()
        set_webhook_fixture_path(str(dummy_fixture_dir))
        assert get_webhook_fixture_path() == dummy_fixture_dir
        assert get_config().webhook_fixture_path == dummy_fixture_dir
        set_webhook_fixture_path(original)
        assert get_webhook_fixture_path() == original

    def test_isolated_between_tests(self, project_fixture_dir: Path) -> None:
        # The previous test changed the path; the autouse fixture resets it
        assert get_webhook_fixture_path() == project_fixture_dir
