"""
Response envelope builder.

Wraps emulator results in the ItemResponse/FeedResponse shapes the real
SDK returns, with synthetic timing and payload diagnostics.

Author: LocalCosmos Team
Date: 2026-10-17
"""

import time
from typing import Any, List, Optional

from .models import (
    ClientSideRequestStatistics,
    FeedResponse,
    ItemResponse,
    ResponseDiagnostics,
)
from .paths import byte_length

# Constant request charge; cost accounting is not emulated
DEFAULT_REQUEST_CHARGE = 1.0


class ResponseTimer:
    """Measures elapsed time of one operation."""

    def __init__(self) -> None:
        self.started = time.monotonic()

    def elapsed_ms(self) -> float:
        """Elapsed milliseconds, never negative."""
        return max(0.0, (time.monotonic() - self.started) * 1000.0)


def _diagnostics(timer: ResponseTimer, payload: Any) -> ResponseDiagnostics:
    return ResponseDiagnostics(
        client_side_request_statistics=ClientSideRequestStatistics(
            request_duration_in_ms=timer.elapsed_ms(),
            total_response_payload_length_in_bytes=byte_length(payload)
        )
    )


def item_response(
    resource: Optional[Any],
    timer: ResponseTimer,
    request_charge: float = DEFAULT_REQUEST_CHARGE
) -> ItemResponse:
    """Build a single-resource envelope.

    Args:
        resource: Document, or None when absent
        timer: Timer started before the operation ran
        request_charge: Request units to report

    Returns:
        ItemResponse
    """
    return ItemResponse(
        resource=resource,
        request_charge=request_charge,
        diagnostics=_diagnostics(timer, resource)
    )


def feed_response(
    resources: List[Any],
    timer: ResponseTimer,
    request_charge: float = DEFAULT_REQUEST_CHARGE
) -> FeedResponse:
    """Build a list envelope.

    Args:
        resources: Result list
        timer: Timer started before the operation ran
        request_charge: Request units to report

    Returns:
        FeedResponse
    """
    return FeedResponse(
        resources=resources,
        request_charge=request_charge,
        diagnostics=_diagnostics(timer, resources)
    )
