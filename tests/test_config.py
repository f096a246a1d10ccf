"""Tests for RunConfig and AuthSettings."""

import argparse
from pathlib import Path

import pytest
from pydantic import SecretStr

from src.cardsync.api.auth import INTERACTIVE_CLIENT_ID, AuthMode
from src.cardsync.api.exceptions import ConfigurationError
from src.cardsync.config import AuthSettings, RunConfig
from src.cardsync.identities.domain.entities import ReportingDetail


def make_args(**overrides):
    values = {
        "path": "users.csv",
        "ufo_url": None,
        "domain": None,
        "interactive": False,
        "client_id": None,
        "client_secret": None,
        "strict_columns": False,
        "validate_only": False,
        "reporting": "full",
    }
    values.update(overrides)
    return argparse.Namespace(**values)


class TestAuthSettings:
    """Tests for auth mode validation."""

    def test_interactive_mode(self):
        settings = AuthSettings(tenant_url="https://t.example", interactive=True)
        settings.validate()
        assert settings.mode == AuthMode.INTERACTIVE

    def test_client_credentials_mode(self):
        settings = AuthSettings(
            tenant_url="https://t.example",
            client_id="worker",
            client_secret=SecretStr("s3cret"),
        )
        settings.validate()
        assert settings.mode == AuthMode.CLIENT_CREDENTIALS

    def test_missing_tenant_url(self):
        with pytest.raises(ConfigurationError) as exc:
            AuthSettings(interactive=True).validate()
        assert exc.value.details["missing_keys"] == ["CARDSYNC_UFO_URL"]

    def test_both_modes_rejected(self):
        settings = AuthSettings(
            tenant_url="https://t.example",
            interactive=True,
            client_secret=SecretStr("s3cret"),
        )
        with pytest.raises(ConfigurationError):
            settings.validate()

    def test_neither_mode_rejected(self):
        with pytest.raises(ConfigurationError) as exc:
            AuthSettings(tenant_url="https://t.example").validate()
        assert exc.value.details["missing_keys"] == [
            "CARDSYNC_CLIENT_ID",
            "CARDSYNC_CLIENT_SECRET",
        ]

    def test_id_without_secret(self):
        settings = AuthSettings(tenant_url="https://t.example", client_id="worker")
        with pytest.raises(ConfigurationError) as exc:
            settings.validate()
        assert exc.value.details["missing_keys"] == ["CARDSYNC_CLIENT_SECRET"]


class TestRunConfigFromArgs:
    """Tests for merging flags and environment."""

    def test_flags_only(self):
        args = make_args(
            ufo_url="https://t.example",
            domain="acme.com",
            client_id="worker",
            client_secret="s3cret",
        )

        config = RunConfig.from_args(args, env={})

        assert config.path == Path("users.csv")
        assert config.domain == "acme.com"
        assert config.auth.tenant_url == "https://t.example"
        assert config.auth.client_secret.get_secret_value() == "s3cret"
        assert config.identity_type == "CardNumber"
        assert config.log_file == Path("results.log")
        assert config.reporting == ReportingDetail.FULL_RESULTS_LOG
        assert config.request_timeout is None
        assert config.auth.interactive_client_id == INTERACTIVE_CLIENT_ID

    def test_environment_fallback(self):
        env = {
            "CARDSYNC_UFO_URL": "https://env.example",
            "CARDSYNC_DOMAIN": "env.com",
            "CARDSYNC_CLIENT_ID": "env-id",
            "CARDSYNC_CLIENT_SECRET": "env-secret",
            "CARDSYNC_IDENTITY_TYPE": "Pin",
            "CARDSYNC_LOG_FILE": "out/env.log",
            "CARDSYNC_REQUEST_TIMEOUT": "12.5",
        }

        config = RunConfig.from_args(make_args(), env=env)
        config.validate()

        assert config.auth.tenant_url == "https://env.example"
        assert config.domain == "env.com"
        assert config.auth.client_id == "env-id"
        assert config.identity_type == "Pin"
        assert config.log_file == Path("out/env.log")
        assert config.request_timeout == 12.5

    def test_flags_override_environment(self):
        env = {"CARDSYNC_DOMAIN": "env.com"}
        config = RunConfig.from_args(make_args(domain="flag.com"), env=env)
        assert config.domain == "flag.com"

    def test_interactive_ignores_env_credentials(self):
        env = {"CARDSYNC_CLIENT_ID": "env-id", "CARDSYNC_CLIENT_SECRET": "env-secret"}
        args = make_args(interactive=True, ufo_url="https://t.example", domain="acme.com")

        config = RunConfig.from_args(args, env=env)
        config.validate()

        assert config.auth.mode == AuthMode.INTERACTIVE
        assert config.auth.client_secret is None

    def test_basic_reporting(self):
        config = RunConfig.from_args(make_args(reporting="basic"), env={})
        assert config.reporting == ReportingDetail.BASIC_ERRORS_ONLY

    def test_bad_timeout(self):
        with pytest.raises(ConfigurationError):
            RunConfig.from_args(make_args(), env={"CARDSYNC_REQUEST_TIMEOUT": "soon"})

    def test_repr_hides_secret(self):
        args = make_args(
            ufo_url="https://t.example",
            domain="acme.com",
            client_id="worker",
            client_secret="s3cret",
        )
        config = RunConfig.from_args(args, env={})

        assert "s3cret" not in repr(config)
        assert "s3cret" not in repr(config.auth)


class TestRunConfigValidate:
    """Tests for startup checks."""

    @pytest.fixture(autouse=True)
    def workdir(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)

    def test_missing_domain(self):
        config = RunConfig.from_args(make_args(interactive=True, ufo_url="https://t"), env={})
        with pytest.raises(ConfigurationError) as exc:
            config.validate()
        assert "CARDSYNC_DOMAIN" in str(exc.value)

    def test_validate_only_skips_auth(self):
        config = RunConfig.from_args(make_args(domain="acme.com", validate_only=True), env={})
        config.validate()
        assert config.validate_only is True

    def test_auth_checked_when_submitting(self):
        config = RunConfig.from_args(make_args(domain="acme.com"), env={})
        with pytest.raises(ConfigurationError):
            config.validate()

    def test_log_file_is_directory(self, tmp_path):
        config = RunConfig.from_args(
            make_args(domain="acme.com", validate_only=True, log_file=str(tmp_path)),
            env={},
        )
        with pytest.raises(ConfigurationError) as exc:
            config.validate()
        assert "is a directory" in exc.value.message
        assert exc.value.details["log_file"] == str(tmp_path)

    def test_log_file_in_missing_directory(self, tmp_path):
        log_file = tmp_path / "logs" / "nightly" / "run.log"
        config = RunConfig.from_args(
            make_args(domain="acme.com", validate_only=True, log_file=str(log_file)),
            env={},
        )
        config.validate()

    def test_basic_reporting_skips_log_file_check(self, tmp_path):
        config = RunConfig.from_args(
            make_args(
                domain="acme.com",
                validate_only=True,
                reporting="basic",
                log_file=str(tmp_path),
            ),
            env={},
        )
        config.validate()
