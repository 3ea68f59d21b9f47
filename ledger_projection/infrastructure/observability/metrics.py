"""Prometheus metrics for projection runs, plan building and simulations"""

from prometheus_client import Counter, Histogram

# Projection metrics
projection_counter = Counter(
    "ledger_projection_runs_total",
    "Total projections computed",
    ["mode"],  # baseline | simulation
)

projection_duration_histogram = Histogram(
    "ledger_projection_duration_seconds",
    "Time spent computing one projection",
    buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0],
)

projected_days_histogram = Histogram(
    "ledger_projection_days",
    "Days covered by a projection",
    buckets=[31, 93, 186, 366, 731, 1462],
)

card_bills_counter = Counter(
    "ledger_card_bills_projected_total",
    "Card bill due entries synthesized by projections",
)

# Construction metrics
installment_plan_counter = Counter(
    "ledger_installment_plans_total",
    "Installment plans built",
    ["bucket"],  # 1x, 2-6x, 7-12x, 13x+
)

recurrence_counter = Counter(
    "ledger_recurrence_series_total",
    "Recurrence series expanded",
    ["frequency"],
)

simulation_entries_counter = Counter(
    "ledger_simulation_entries_total",
    "Entries added to simulation overlays",
    ["launch_type"],  # single | installments | recurring
)


def record_projection(simulating: bool, days: int, card_bills: int) -> None:
    """Record projection outcome for usage monitoring"""
    projection_counter.labels(mode="simulation" if simulating else "baseline").inc()
    projected_days_histogram.observe(days)
    card_bills_counter.inc(card_bills)


def record_installment_plan(installment_count: int) -> None:
    """Record plan size distribution"""
    if installment_count == 1:
        bucket = "1x"
    elif installment_count <= 6:
        bucket = "2-6x"
    elif installment_count <= 12:
        bucket = "7-12x"
    else:
        bucket = "13x+"

    installment_plan_counter.labels(bucket=bucket).inc()


def record_recurrence(frequency: str) -> None:
    recurrence_counter.labels(frequency=frequency).inc()


def record_simulation_entries(launch_type: str, count: int) -> None:
    simulation_entries_counter.labels(launch_type=launch_type).inc(count)
