"""Mock payment gateway: weighted authorization outcomes and auth tokens."""

from __future__ import annotations

import random
import secrets
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional, Tuple

from .. import models

SUCCESS = "SUCCESS"
INSUFFICIENT_FUNDS = "INSUFFICIENT_FUNDS"
INCORRECT_DETAILS = "INCORRECT_DETAILS"
SERVER_ERROR = "SERVER_ERROR"
OUTCOMES = (SUCCESS, INSUFFICIENT_FUNDS, INCORRECT_DETAILS, SERVER_ERROR)

# cumulative upper bounds of each outcome's share of [0, 1)
OUTCOME_THRESHOLDS: Tuple[Tuple[float, str], ...] = (
    (0.60, SUCCESS),
    (0.77, INSUFFICIENT_FUNDS),
    (0.94, INCORRECT_DETAILS),
    (1.00, SERVER_ERROR),
)


@dataclass(frozen=True)
class GatewayResponse:
    order_status: str
    auth_outcome: str
    gateway_code: str
    gateway_message: str


GATEWAY_RESPONSES = {
    SUCCESS: GatewayResponse(models.AUTHORIZED, models.AUTH_SUCCESS, "00", "Approved"),
    INSUFFICIENT_FUNDS: GatewayResponse(models.DECLINED, models.AUTH_DECLINED, "51", "Insufficient funds"),
    INCORRECT_DETAILS: GatewayResponse(models.DECLINED, models.AUTH_DECLINED, "14", "Incorrect card details"),
    SERVER_ERROR: GatewayResponse(models.ERROR, models.AUTH_ERROR, "XX", "Authorization server error"),
}


def outcome_for_draw(draw: float) -> str:
    if not 0.0 <= draw < 1.0:
        raise ValueError(f"draw must be in [0, 1), got {draw!r}")
    for upper, outcome in OUTCOME_THRESHOLDS:
        if draw < upper:
            return outcome
    return SERVER_ERROR


class OutcomeGenerator(ABC):
    @abstractmethod
    def next_outcome(self) -> str: ...


class WeightedOutcomeGenerator(OutcomeGenerator):
    """Stand-in for a real processor: 60% approve, 17% + 17% decline, 6% error."""

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self._rng = rng or random.Random()

    def next_outcome(self) -> str:
        return outcome_for_draw(self._rng.random())


class FixedOutcomeGenerator(OutcomeGenerator):
    """Replays the given outcomes in order, then keeps repeating the last one."""

    def __init__(self, *outcomes: str) -> None:
        if not outcomes:
            raise ValueError("at least one outcome is required")
        unknown = [outcome for outcome in outcomes if outcome not in GATEWAY_RESPONSES]
        if unknown:
            raise ValueError(f"unknown outcomes: {unknown}")
        self._outcomes = list(outcomes)
        self._index = 0

    def next_outcome(self) -> str:
        outcome = self._outcomes[min(self._index, len(self._outcomes) - 1)]
        self._index += 1
        return outcome


def generate_auth_token(
    order_id: str, now: Optional[datetime] = None, ttl_days: int = 7
) -> Tuple[str, datetime]:
    issued_at = now or models.utcnow()
    token = f"{order_id}_{secrets.token_hex(8)}"
    return token, issued_at + timedelta(days=ttl_days)
