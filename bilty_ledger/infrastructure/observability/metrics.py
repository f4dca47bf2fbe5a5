"""Prometheus metrics for record entry, payment allocation and store health"""

from decimal import Decimal
from prometheus_client import Counter, Histogram

# Record metrics
records_created_counter = Counter(
    "bilty_records_created_total",
    "Transport records created",
)

# Allocation metrics
allocation_counter = Counter(
    "bilty_payment_allocations_total",
    "Payment allocations processed",
    ["kind"],  # company | lump_sum
)

allocated_amount_counter = Counter(
    "bilty_allocated_amount_total",
    "Amount applied to transport records",
    ["kind"],
)

unallocated_remainder_counter = Counter(
    "bilty_unallocated_remainder_total",
    "Company payment amount left over after every unpaid record was covered",
)

allocation_records_histogram = Histogram(
    "bilty_allocation_records_touched",
    "Records updated by one allocation",
    buckets=[0, 1, 2, 5, 10, 25, 50],
)

# Store metrics
store_failures_counter = Counter(
    "bilty_store_failures_total",
    "Record store operations that failed and were rolled back",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_allocation(kind: str, applied: Decimal, records_touched: int, remainder: Decimal = Decimal("0")) -> None:
    """Record allocation metrics for monitoring collections and overpayments"""
    allocation_counter.labels(kind=kind).inc()
    allocated_amount_counter.labels(kind=kind).inc(float(applied))
    allocation_records_histogram.observe(records_touched)
    if remainder > 0:
        unallocated_remainder_counter.inc(float(remainder))
