# payroll_api/services/payroll_policy.py
from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Mapping, Optional, Tuple

from payroll_api.common.errors import ValidationError

LOP_PRORATE = "prorate"
LOP_DEDUCT = "deduct"
LOP_MODES = (LOP_PRORATE, LOP_DEDUCT)

LOSS_OF_PAY_LINE = "Loss of Pay"

# full years of experience -> tenure increment percent
DEFAULT_TENURE_TABLE = ((1, 5), (2, 8), (3, 10), (4, 15), (5, 15))

# (minimum average rating, extra percent), best first
DEFAULT_RATING_TABLE = (
    (Decimal("4.5"), Decimal("5")),
    (Decimal("4.0"), Decimal("3")),
    (Decimal("3.5"), Decimal("2")),
)


@dataclass(frozen=True)
class PayrollPolicy:
    loss_of_pay_mode: str = LOP_PRORATE
    bulk_max_workers: int = 4
    min_tenure_days: int = 180
    rating_window_days: int = 180
    tenure_table: Tuple[Tuple[int, int], ...] = DEFAULT_TENURE_TABLE
    rating_table: Tuple[Tuple[Decimal, Decimal], ...] = field(default=DEFAULT_RATING_TABLE)

    def __post_init__(self):
        if self.loss_of_pay_mode not in LOP_MODES:
            raise ValidationError(
                f"loss_of_pay_mode must be one of {', '.join(LOP_MODES)}, got {self.loss_of_pay_mode!r}"
            )
        if self.bulk_max_workers < 1:
            raise ValidationError("bulk_max_workers must be at least 1")

    @classmethod
    def from_config(cls, config: Mapping, loss_of_pay_mode: Optional[str] = None) -> "PayrollPolicy":
        """Build from a Flask config (or any mapping) using the PAYROLL_* / INCREMENT_* keys."""
        mode = loss_of_pay_mode or config.get("PAYROLL_LOSS_OF_PAY_MODE") or LOP_PRORATE
        return cls(
            loss_of_pay_mode=str(mode).strip().lower(),
            bulk_max_workers=int(config.get("PAYROLL_BULK_MAX_WORKERS") or 4),
            min_tenure_days=int(config.get("INCREMENT_MIN_TENURE_DAYS") or 180),
            rating_window_days=int(config.get("INCREMENT_RATING_WINDOW_DAYS") or 180),
        )

    def tenure_percent(self, years: int) -> int:
        for y, pct in self.tenure_table:
            if y == years:
                return pct
        return 0

    def rating_percent(self, avg_rating) -> Decimal:
        if avg_rating is None:
            return Decimal("0")
        for floor, pct in self.rating_table:
            if Decimal(str(avg_rating)) >= floor:
                return pct
        return Decimal("0")
