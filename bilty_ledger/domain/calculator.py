"""Dependent-field calculator - keeps a record's derived amounts in step with its inputs"""

from dataclasses import replace
from decimal import Decimal

from bilty_ledger.domain.models import ComputedRate, FixedRate, RateMode, TransportRecord
from bilty_ledger.utils.date_utils import coerce_iso, days_between
from bilty_ledger.utils.money import ZERO, format_amount, parse_amount

FIXED_RATE_MARKER = "FIX"


def rate_mode(record: TransportRecord) -> RateMode:
    """Classify the record's rate: hand-entered total ("FIX" anywhere in rate) or weight × rate"""
    if FIXED_RATE_MARKER in (record.rate or "").upper():
        return FixedRate(manual_total=record.total)
    return ComputedRate(weight=parse_amount(record.weight), rate=parse_amount(record.rate))


def is_total_editable(record: TransportRecord) -> bool:
    return isinstance(rate_mode(record), FixedRate)


def compute_total(record: TransportRecord) -> str:
    """
    Resolve the record's total.

    Fixed rates keep the operator's figure. Computed rates write weight × rate,
    but only when both operands are positive; otherwise the current total is
    kept so a half-typed weight or rate does not wipe a corrected value.
    """
    mode = rate_mode(record)
    if isinstance(mode, FixedRate):
        return mode.manual_total
    if mode.weight <= 0 or mode.rate <= 0:
        return record.total
    return format_amount(mode.weight * mode.rate)


def compute_days_in_hold(record: TransportRecord) -> int:
    """
    Days the truck was held: SMS date to LR date (loading) plus date of
    reach to date of unload (unloading). A pair with a blank end adds 0.
    """
    loading = days_between(coerce_iso(record.sms_date), coerce_iso(record.lr_date))
    unloading = days_between(coerce_iso(record.date_of_reach), coerce_iso(record.date_of_unload))
    return loading + unloading


def compute_holding_amount(days_in_hold: int, holding_charge_per_day: str) -> Decimal:
    per_day = parse_amount(holding_charge_per_day)
    if days_in_hold <= 0 or per_day <= 0:
        return ZERO
    return per_day * days_in_hold


def compute_net_amount(freight_amount: Decimal, record: TransportRecord) -> Decimal:
    return (
        freight_amount
        - parse_amount(record.balance_paid_amount)
        - parse_amount(record.commission)
        - parse_amount(record.advance)
        - parse_amount(record.lump_sum_allocated_amount)
    )


def recompute_derived_fields(record: TransportRecord) -> TransportRecord:
    """
    Return a copy of the record with every derived field recalculated.

    Order: total, freight amount, days in hold, total holding amount, net
    amount. Each step reads only raw inputs or earlier results, so the output
    depends on nothing but the record passed in. Malformed numbers count as 0.
    """
    total = compute_total(record)
    freight = parse_amount(total) - parse_amount(record.bilty_charge)
    days_in_hold = compute_days_in_hold(record)
    holding_amount = compute_holding_amount(days_in_hold, record.holding_charge_per_day)

    with_total = replace(record, total=total)
    net = compute_net_amount(freight, with_total)

    return replace(
        with_total,
        freight_amount=format_amount(freight),
        days_in_hold=str(days_in_hold),
        total_holding_amount=format_amount(holding_amount),
        net_amount=format_amount(net),
        lump_sum_allocated_amount=record.lump_sum_allocated_amount or "0",
    )
