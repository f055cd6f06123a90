from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Tuple

from .config import Settings


class SubmissionFlag(str, Enum):
    zero_hours = "ZERO_HOURS"
    excessive_hours = "EXCESSIVE_HOURS"
    high_hourly_rate = "HIGH_HOURLY_RATE"


ZERO_HOURS_REJECTION = "System Auto-Rejection: Zero hours submitted."


@dataclass(frozen=True)
class SubmissionPolicy:
    hours_review_threshold: Decimal = Decimal("100")
    hourly_rate_threshold: Decimal = Decimal("300")
    currency_symbol: str = "R"

    @classmethod
    def from_settings(cls, settings: Settings) -> "SubmissionPolicy":
        return cls(
            hours_review_threshold=Decimal(settings.hours_review_threshold),
            hourly_rate_threshold=Decimal(settings.hourly_rate_threshold),
            currency_symbol=settings.currency_symbol,
        )


@dataclass(frozen=True)
class SubmissionDecision:
    rejected: bool
    reason_code: str | None = None
    message: str | None = None
    flags: Tuple[Tuple[str, str], ...] = ()

    @property
    def flag_messages(self) -> list[str]:
        return [message for _, message in self.flags]


def _plain(value: Decimal) -> str:
    return format(value.normalize(), "f")


def evaluate_submission(
    *,
    hours_worked: Decimal,
    hourly_rate: Decimal,
    policy: SubmissionPolicy,
) -> SubmissionDecision:
    """Run the automated submission rules in order.

    Zero or negative hours rejects outright and skips the remaining rules.
    Otherwise each threshold rule that fires contributes a flag; flags never
    block the claim from going to review.
    """
    hours = Decimal(hours_worked)
    rate = Decimal(hourly_rate)

    if hours <= 0:
        return SubmissionDecision(
            True,
            reason_code=SubmissionFlag.zero_hours.value,
            message=ZERO_HOURS_REJECTION,
        )

    flags = []

    if hours > policy.hours_review_threshold:
        flags.append((
            SubmissionFlag.excessive_hours.value,
            f"System Flag: Hours exceed typical limit ({_plain(policy.hours_review_threshold)}h). Review required.",
        ))

    if rate > policy.hourly_rate_threshold:
        flags.append((
            SubmissionFlag.high_hourly_rate.value,
            "System Flag: Hourly rate is above standard threshold "
            f"({policy.currency_symbol}{_plain(policy.hourly_rate_threshold)}).",
        ))

    return SubmissionDecision(False, flags=tuple(flags))
