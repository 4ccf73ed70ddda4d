from __future__ import annotations

import os
import sys
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal

from devicepolicy import DevicePolicies
from devicepolicy.client import API_TOKEN_ENV, BASE_URL_ENV, _maybe_load_dotenv
from devicepolicy.exceptions import (
    AuthenticationError,
    AuthorizationError,
    DecodeError,
    DevicePolicyError,
    NotFoundError,
    RateLimitError,
    ServerError,
    WriteNotAllowedError,
)
from devicepolicy.policies import Policies, WritePolicy
from devicepolicy.types import BASE_URL

from .errors import CLIError
from .logging import set_redaction_api_token
from .results import CommandMeta, CommandResult, ErrorInfo

OutputFormat = Literal["table", "json"]


@dataclass
class CLIContext:
    output: OutputFormat
    quiet: bool
    verbosity: int
    dotenv: bool
    env_file: Path
    api_token_file: str | None
    timeout: float | None
    readonly: bool
    base_url: str | None

    _client: DevicePolicies | None = None

    def load_dotenv_if_requested(self) -> None:
        try:
            _maybe_load_dotenv(load_dotenv=self.dotenv, dotenv_path=self.env_file, override=False)
        except ImportError as exc:
            raise CLIError(
                "Optional .env support requires python-dotenv; install `devicepolicy-sdk[cli]`.",
                exit_code=2,
                error_type="usage_error",
            ) from exc

    def resolve_api_token(self) -> str:
        if self.api_token_file is not None:
            if self.api_token_file == "-":
                token = sys.stdin.read().strip()
                if not token:
                    raise CLIError(
                        "Empty API token provided via stdin.", exit_code=2, error_type="usage_error"
                    )
                return token
            path = Path(self.api_token_file)
            token = path.read_text(encoding="utf-8").strip()
            if not token:
                raise CLIError(
                    f"Empty API token file: {path}", exit_code=2, error_type="usage_error"
                )
            return token

        env_token = os.getenv(API_TOKEN_ENV, "").strip()
        if env_token:
            return env_token

        raise CLIError(
            f"Missing API token. Set {API_TOKEN_ENV} or use --api-token-file.",
            exit_code=2,
            error_type="usage_error",
        )

    def get_client(self) -> DevicePolicies:
        if self._client is not None:
            return self._client

        self.load_dotenv_if_requested()
        token = self.resolve_api_token()
        set_redaction_api_token(token)
        base_url = self.base_url or os.getenv(BASE_URL_ENV) or BASE_URL
        policies = Policies(write=WritePolicy.DENY) if self.readonly else Policies()

        self._client = DevicePolicies(
            api_token=token,
            base_url=base_url,
            timeout=self.timeout if self.timeout is not None else 30.0,
            log_requests=self.verbosity >= 2,
            policies=policies,
        )
        return self._client

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None


def exit_code_for_exception(exc: Exception) -> int:
    if isinstance(exc, CLIError):
        return exc.exit_code
    if isinstance(exc, (AuthenticationError, AuthorizationError)):
        return 3
    if isinstance(exc, NotFoundError):
        return 4
    if isinstance(exc, (RateLimitError, ServerError)):
        return 5
    if isinstance(exc, WriteNotAllowedError):
        return 2
    return 1


def error_info_for_exception(exc: Exception) -> ErrorInfo:
    if isinstance(exc, CLIError):
        return ErrorInfo(
            type=exc.error_type, message=exc.message, hint=exc.hint, details=exc.details
        )
    if isinstance(exc, WriteNotAllowedError):
        return ErrorInfo(
            type="write_not_allowed",
            message=str(exc),
            hint="Drop --readonly to allow writes.",
            details={"method": exc.method, "url": exc.url},
        )
    if isinstance(exc, DecodeError):
        return ErrorInfo(type="decode_error", message=str(exc), details={"shape": exc.shape})
    if isinstance(exc, DevicePolicyError):
        details: dict[str, Any] | None = None
        status_code = getattr(exc, "status_code", None)
        errors = getattr(exc, "errors", None)
        if status_code is not None or errors:
            details = {"statusCode": status_code, "errors": errors or []}
        return ErrorInfo(type=exc.__class__.__name__, message=str(exc), details=details)
    return ErrorInfo(type="internal_error", message=str(exc) or exc.__class__.__name__)


def build_result(
    *,
    ok: bool,
    command: str,
    started_at: float,
    data: Any | None,
    warnings: list[str],
    pagination: dict[str, Any] | None = None,
    resolved: dict[str, Any] | None = None,
    error: ErrorInfo | None = None,
) -> CommandResult:
    duration_ms = int(max(0.0, (time.time() - started_at) * 1000))
    meta = CommandMeta(duration_ms=duration_ms, pagination=pagination, resolved=resolved)
    return CommandResult(
        ok=ok,
        command=command,
        data=data,
        warnings=warnings,
        meta=meta,
        error=error,
    )
