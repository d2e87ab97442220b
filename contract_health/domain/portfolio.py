"""Portfolio-level health aggregates across many contracts"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Iterable, List

from contract_health.domain.models import CurrencyTotals, HealthGrade, PortfolioEntry, PortfolioSummary

# Contracts scoring below this need attention even without overdue events
ATTENTION_THRESHOLD = 50


def needs_attention(entry: PortfolioEntry) -> bool:
    return entry.overdue_events > 0 or entry.result.overall < ATTENTION_THRESHOLD


def totals_by_currency(entries: Iterable[PortfolioEntry]) -> Dict[str, CurrencyTotals]:
    """Contract value, collected and outstanding amounts, never summed across currencies"""
    totals: Dict[str, CurrencyTotals] = {}
    for entry in entries:
        if entry.contract is None:
            continue
        bucket = totals.setdefault(entry.contract.currency, CurrencyTotals())
        bucket.contract_count += 1
        bucket.total_value += entry.contract.total_value
        if entry.invoice_summary is not None:
            bucket.total_collected += entry.invoice_summary.total_collected
            bucket.total_outstanding += entry.invoice_summary.total_outstanding
    return dict(sorted(totals.items()))


def summarize_portfolio(entries: Iterable[PortfolioEntry]) -> PortfolioSummary:
    """
    Aggregate per-contract health results.

    - avg_health_score: rounded mean of overall scores (0 for an empty portfolio)
    - needs_attention_count: contracts with overdue events or overall < ATTENTION_THRESHOLD
    - grade_distribution: count per grade, every grade listed
    - totals_by_currency: money totals per currency for entries that carry a contract
    """
    entries: List[PortfolioEntry] = list(entries)

    distribution = {grade.value: 0 for grade in HealthGrade}
    for entry in entries:
        distribution[entry.result.grade.value] += 1

    if entries:
        mean = Decimal(sum(e.result.overall for e in entries)) / Decimal(len(entries))
        avg_health_score = int(mean.quantize(Decimal(1), rounding=ROUND_HALF_UP))
    else:
        avg_health_score = 0

    return PortfolioSummary(
        contract_count=len(entries),
        avg_health_score=avg_health_score,
        needs_attention_count=sum(1 for e in entries if needs_attention(e)),
        total_overdue_events=sum(e.overdue_events for e in entries),
        grade_distribution=distribution,
        totals_by_currency=totals_by_currency(entries),
    )
