from dataclasses import asdict, dataclass
from typing import Any, Mapping, Union

Amount = Union[int, float]


@dataclass(frozen=True)
class PriceSummary:
    baseAmount: Amount
    fireworksAmount: Amount
    totalAmount: Amount
    advancePayment: Amount
    remainingAmount: Amount

    def as_dict(self) -> dict:
        return asdict(self)


def as_amount(value: Any) -> Amount:
    """Backend money values arrive as ints, floats or numeric strings.

    Whole numbers come back as int, fractions are kept as float and
    anything unparseable counts as 0.
    """
    if value is None or value == "" or isinstance(value, bool):
        return 0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0
    if number != number or number in (float("inf"), float("-inf")):
        return 0
    return int(number) if number.is_integer() else number


def compute_summary(base_amount: Amount, fireworks: bool, fireworks_amount: Amount | None,
                    advance_payment: Amount) -> PriceSummary:
    """Remaining is not clamped: an advance above the total shows as a negative balance."""
    base = base_amount or 0
    extra = (fireworks_amount or 0) if fireworks else 0
    advance = advance_payment or 0
    total = base + extra
    return PriceSummary(
        baseAmount=base,
        fireworksAmount=extra,
        totalAmount=total,
        advancePayment=advance,
        remainingAmount=total - advance,
    )


def price_summary(draft) -> PriceSummary:
    """Summary for a BookingDraft or BookingRecord."""
    return compute_summary(draft.amount, draft.fireworks, draft.fireworksAmount, draft.advancePayment)


def price_summary_from_payload(data: Mapping) -> PriceSummary:
    """Same formula over a raw backend booking dict."""
    return compute_summary(
        as_amount(data.get("amount")),
        bool(data.get("fireworks")),
        as_amount(data.get("fireworksAmount")),
        as_amount(data.get("advancePayment")),
    )
