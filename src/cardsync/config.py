"""Run configuration for the identity batch.

Settings come from CLI flags first and environment variables second
(a ``.env`` file is loaded by the CLI via python-dotenv).

Environment Variables:
    CARDSYNC_UFO_URL: Tenant URL used for authentication and API calls
    CARDSYNC_DOMAIN: Email domain appended to each login
    CARDSYNC_CLIENT_ID: OAuth2 client ID (client credentials mode)
    CARDSYNC_CLIENT_SECRET: OAuth2 client secret (client credentials mode)
    CARDSYNC_INTERACTIVE_CLIENT_ID: Public client ID for interactive login
    CARDSYNC_IDENTITY_TYPE: Identity kind to assign (default: CardNumber)
    CARDSYNC_LOG_FILE: Results table destination (default: results.log)
    CARDSYNC_REQUEST_TIMEOUT: Seconds per API request (default: no limit)
"""

import argparse
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

from pydantic import SecretStr

from .api.auth import INTERACTIVE_CLIENT_ID, AuthMode
from .api.exceptions import ConfigurationError
from .api.identities import DEFAULT_IDENTITY_TYPE
from .identities.domain.entities import ReportingDetail

DEFAULT_LOG_FILE = "results.log"


@dataclass
class AuthSettings:
    """Tenant URL and credentials for exactly one auth mode."""

    tenant_url: Optional[str] = None
    interactive: bool = False
    client_id: Optional[str] = None
    client_secret: Optional[SecretStr] = None
    interactive_client_id: str = INTERACTIVE_CLIENT_ID

    @property
    def mode(self) -> AuthMode:
        return AuthMode.INTERACTIVE if self.interactive else AuthMode.CLIENT_CREDENTIALS

    def validate(self) -> None:
        """Check that one, and only one, auth mode is fully configured.

        Raises:
            ConfigurationError: If the tenant URL is missing, both modes are
                selected, or client credentials are incomplete
        """
        if not self.tenant_url:
            raise ConfigurationError(
                "A tenant URL is required (--ufo-url or CARDSYNC_UFO_URL)",
                missing_keys=["CARDSYNC_UFO_URL"],
            )

        has_credentials = bool(self.client_id or self.client_secret)
        if self.interactive and has_credentials:
            raise ConfigurationError(
                "--interactive cannot be combined with --client-id/--client-secret"
            )
        if self.interactive:
            return

        missing = []
        if not self.client_id:
            missing.append("CARDSYNC_CLIENT_ID")
        if not self.client_secret or not self.client_secret.get_secret_value():
            missing.append("CARDSYNC_CLIENT_SECRET")
        if missing:
            raise ConfigurationError(
                "Choose --interactive or provide both --client-id and --client-secret. "
                f"Missing: {', '.join(missing)}",
                missing_keys=missing,
            )


@dataclass
class RunConfig:
    """Everything one run of the pipeline needs."""

    path: Path
    domain: Optional[str]
    auth: AuthSettings = field(default_factory=AuthSettings)
    identity_type: str = DEFAULT_IDENTITY_TYPE
    log_file: Path = Path(DEFAULT_LOG_FILE)
    reporting: ReportingDetail = ReportingDetail.FULL_RESULTS_LOG
    strict_columns: bool = False
    validate_only: bool = False
    request_timeout: Optional[float] = None

    @classmethod
    def from_args(
        cls,
        args: argparse.Namespace,
        env: Optional[Mapping[str, str]] = None,
    ) -> "RunConfig":
        """Merge parsed CLI arguments with environment defaults.

        Raises:
            ConfigurationError: If CARDSYNC_REQUEST_TIMEOUT is not a number
        """
        env = os.environ if env is None else env
        interactive = bool(getattr(args, "interactive", False))

        client_id = getattr(args, "client_id", None)
        client_secret = getattr(args, "client_secret", None)
        if not interactive:
            client_id = client_id or env.get("CARDSYNC_CLIENT_ID")
            client_secret = client_secret or env.get("CARDSYNC_CLIENT_SECRET")

        auth = AuthSettings(
            tenant_url=getattr(args, "ufo_url", None) or env.get("CARDSYNC_UFO_URL"),
            interactive=interactive,
            client_id=client_id,
            client_secret=SecretStr(client_secret) if client_secret else None,
            interactive_client_id=env.get("CARDSYNC_INTERACTIVE_CLIENT_ID", INTERACTIVE_CLIENT_ID),
        )

        timeout_raw = env.get("CARDSYNC_REQUEST_TIMEOUT")
        try:
            request_timeout = float(timeout_raw) if timeout_raw else None
        except ValueError:
            raise ConfigurationError(
                f"CARDSYNC_REQUEST_TIMEOUT must be a number of seconds, got {timeout_raw!r}"
            )

        reporting = getattr(args, "reporting", ReportingDetail.FULL_RESULTS_LOG)
        return cls(
            path=Path(args.path),
            domain=getattr(args, "domain", None) or env.get("CARDSYNC_DOMAIN"),
            auth=auth,
            identity_type=(
                getattr(args, "identity_type", None)
                or env.get("CARDSYNC_IDENTITY_TYPE")
                or DEFAULT_IDENTITY_TYPE
            ),
            log_file=Path(
                getattr(args, "log_file", None)
                or env.get("CARDSYNC_LOG_FILE")
                or DEFAULT_LOG_FILE
            ),
            reporting=ReportingDetail(reporting),
            strict_columns=bool(getattr(args, "strict_columns", False)),
            validate_only=bool(getattr(args, "validate_only", False)),
            request_timeout=request_timeout,
        )

    def validate(self) -> None:
        """Startup checks; runs before any file is read or login attempted.

        Raises:
            ConfigurationError: If the domain or log file is unusable, or auth
                is misconfigured
        """
        if not self.domain:
            raise ConfigurationError(
                "An email domain is required (--domain or CARDSYNC_DOMAIN)",
                missing_keys=["CARDSYNC_DOMAIN"],
            )
        if not self.identity_type:
            raise ConfigurationError("Identity type must not be empty")
        if self.reporting == ReportingDetail.FULL_RESULTS_LOG:
            self._check_log_file()
        if not self.validate_only:
            self.auth.validate()

    def _check_log_file(self) -> None:
        """Fail before the batch if the results table could not be written."""
        path = self.log_file
        if path.is_dir():
            raise ConfigurationError(
                f"Log file {path} is a directory",
                details={"log_file": str(path)},
            )
        if path.exists():
            writable = os.access(path, os.W_OK)
        else:
            # Missing parents are created at write time; check the nearest one that exists.
            parent = path.parent
            while not parent.exists() and parent != parent.parent:
                parent = parent.parent
            writable = parent.is_dir() and os.access(parent, os.W_OK | os.X_OK)
        if not writable:
            raise ConfigurationError(
                f"Log file {path} is not writable",
                details={"log_file": str(path)},
            )

    def __repr__(self) -> str:
        return (
            f"RunConfig("
            f"path={str(self.path)!r}, "
            f"domain={self.domain!r}, "
            f"mode={self.auth.mode.value}, "
            f"tenant={self.auth.tenant_url!r}, "
            f"identity_type={self.identity_type!r}, "
            f"reporting={self.reporting.value}, "
            f"validate_only={self.validate_only})"
        )
