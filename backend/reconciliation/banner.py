# reconciliation/banner.py
"""
Control vs subledger reconciliation banner.

A page that shows a control account (AR, AP, ...) passes its balance and
the subledger total; the banner appears only when they differ by a cent
or more.

Usage:
    summary = ReconciliationSummary(control_balance, subledger_balance)
    html = render_reconciliation_banner(
        "AR reconciliation",
        "Control vs customer balances.",
        summary,
        details_href="/staff/reconciliation?type=ar",
    )
"""
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from django.template.loader import render_to_string


TOLERANCE = Decimal("0.01")
CENTS = Decimal("0.01")


def _to_decimal(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    # str() first so floats keep their printed value, not their binary one
    return Decimal(str(value))


def format_amount(value) -> str:
    """
    Fixed two decimal places, halves rounded away from zero.

    Rounding is decimal, so 1.005 becomes "1.01". A binary-float
    formatter such as JavaScript's toFixed gives "1.00" for the same input.
    """
    return str(_to_decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP))


@dataclass(frozen=True)
class ReconciliationSummary:
    """
    Balances compared by the banner.

    ``difference`` defaults to ``control_balance - subledger_balance``
    when not given.
    """
    control_balance: Decimal
    subledger_balance: Decimal
    difference: Optional[Decimal] = None

    def __post_init__(self):
        control = _to_decimal(self.control_balance)
        subledger = _to_decimal(self.subledger_balance)
        object.__setattr__(self, "control_balance", control)
        object.__setattr__(self, "subledger_balance", subledger)
        if self.difference is None:
            object.__setattr__(self, "difference", control - subledger)
        else:
            object.__setattr__(self, "difference", _to_decimal(self.difference))


def should_show_banner(summary: ReconciliationSummary) -> bool:
    return abs(summary.difference) >= TOLERANCE


def render_reconciliation_banner(
    title: str,
    description: str,
    summary: ReconciliationSummary,
    details_href: str,
) -> str:
    """Banner HTML, or an empty string when the balances agree."""
    if not should_show_banner(summary):
        return ""

    return render_to_string("reconciliation/banner.html", {
        "title": title,
        "description": description,
        "control_balance": format_amount(summary.control_balance),
        "subledger_balance": format_amount(summary.subledger_balance),
        "difference": format_amount(summary.difference),
        "details_href": details_href,
    })
