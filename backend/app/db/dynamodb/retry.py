from __future__ import annotations

import random
import time
from dataclasses import dataclass
from typing import Any, Callable, TypeVar

from botocore.exceptions import BotoCoreError, ClientError

from ...observability.logging import get_logger
from .errors import (
    DdbConflict,
    DdbError,
    DdbInternal,
    DdbThrottled,
    DdbUnavailable,
    DdbValidation,
)

T = TypeVar("T")

log = get_logger("dynamodb")


@dataclass(frozen=True, slots=True)
class RetryPolicy:
    max_attempts: int = 6
    base_delay_s: float = 0.05
    max_delay_s: float = 1.5


_RETRYABLE_CODES = {
    "ProvisionedThroughputExceededException",
    "ThrottlingException",
    "RequestLimitExceeded",
    "InternalServerError",
    "ServiceUnavailable",
}

# ClientError code -> (error class, message). Anything not listed here and not
# retryable is reported as DdbInternal.
_NON_RETRYABLE: dict[str, tuple[type[DdbError], str]] = {
    "ConditionalCheckFailedException": (DdbConflict, "DynamoDB conditional check failed"),
    "ValidationException": (DdbValidation, "DynamoDB request validation failed"),
    "ParamValidationError": (DdbValidation, "DynamoDB request validation failed"),
    "ResourceNotFoundException": (DdbUnavailable, "DynamoDB table not found"),
    "AccessDeniedException": (DdbUnavailable, "DynamoDB access denied"),
    "UnrecognizedClientException": (DdbUnavailable, "DynamoDB access denied"),
}


def _backoff_delay(policy: RetryPolicy, attempt: int) -> float:
    # Full jitter exponential backoff.
    exp = min(policy.max_delay_s, policy.base_delay_s * (2 ** max(0, attempt - 1)))
    return random.random() * exp


def _client_error_parts(e: ClientError) -> tuple[str, str | None]:
    resp = e.response or {}
    code = str((resp.get("Error") or {}).get("Code") or "")
    request_id = (resp.get("ResponseMetadata") or {}).get("RequestId")
    return code, request_id


def map_botocore_error(
    *,
    operation: str,
    table_name: str | None,
    key: dict[str, Any] | None,
    exc: Exception,
) -> DdbError:
    if isinstance(exc, DdbError):
        return exc

    ctx: dict[str, Any] = {"operation": operation, "table_name": table_name, "key": key, "cause": exc}

    if isinstance(exc, ClientError):
        code, aws_request_id = _client_error_parts(exc)
        if code in _NON_RETRYABLE:
            cls, message = _NON_RETRYABLE[code]
            return cls(message=message, aws_request_id=aws_request_id, retryable=False, **ctx)
        if code in _RETRYABLE_CODES:
            return DdbThrottled(
                message="DynamoDB request throttled or unavailable",
                aws_request_id=aws_request_id,
                retryable=True,
                **ctx,
            )
        return DdbInternal(
            message=f"DynamoDB request failed ({code or 'ClientError'})",
            aws_request_id=aws_request_id,
            retryable=False,
            **ctx,
        )

    if isinstance(exc, BotoCoreError):
        return DdbUnavailable(message="DynamoDB client error", retryable=True, **ctx)

    return DdbInternal(message="Unexpected DynamoDB error", retryable=False, **ctx)


def ddb_call(
    operation: str,
    fn: Callable[[], T],
    *,
    table_name: str | None = None,
    key: dict[str, Any] | None = None,
    retry_policy: RetryPolicy | None = None,
) -> T:
    """Run one DynamoDB call, retrying transient faults and mapping the rest."""
    policy = retry_policy or RetryPolicy()
    attempts = max(1, int(policy.max_attempts))

    for attempt in range(1, attempts + 1):
        try:
            return fn()
        except Exception as e:  # noqa: BLE001
            mapped = map_botocore_error(operation=operation, table_name=table_name, key=key, exc=e)
            if not mapped.retryable or attempt == attempts:
                if mapped is e:
                    raise
                raise mapped from e

            delay = _backoff_delay(policy, attempt)
            log.warning(
                "ddb_retry",
                operation=operation,
                table=table_name,
                attempt=attempt,
                delay_s=round(delay, 3),
                error=mapped.message,
            )
            time.sleep(delay)

    raise DdbInternal(message="DynamoDB retry loop exhausted", operation=operation, table_name=table_name)
