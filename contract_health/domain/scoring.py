"""Contract health scoring engine - pillar-based scoring of a single contract

compute_health(contract, events, invoice_summary) -> HealthResult

Pillars and nominal weights (sum to 1.0):
- 40%: Payment timeliness (collection rate, overdue invoices)
- 35%: Service delivery (past-dated service events completed)
- 25%: Contract vitality (status, pending-acceptance age, end-date overrun)

Neutral-score policy: a pillar with no qualifying data is reported at
NEUTRAL_SCORE with applicable=False and is left out of the weighted average;
the remaining weights are renormalized. A NoApplicableDataWarning is issued
for each such pillar and data_completeness reports the share of weight that
was actually backed by data.

The engine is pure: no I/O, no shared state. The only implicit input is
`as_of`, which defaults to today and should be passed explicitly by callers
that need reproducible results.
"""

import warnings
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

from contract_health.domain.exceptions import NoApplicableDataWarning
from contract_health.domain.models import (
    ContractSnapshot,
    ContractStatus,
    EventStatus,
    EventType,
    HealthGrade,
    HealthIssue,
    HealthPillar,
    HealthResult,
    InvoiceSummary,
    IssueSeverity,
    ScheduleEvent,
)
from contract_health.domain.parsing import validate_inputs
from contract_health.utils.date_utils import days_elapsed, is_past

PAYMENT_TIMELINESS = "payment_timeliness"
SERVICE_DELIVERY = "service_delivery"
CONTRACT_VITALITY = "contract_vitality"

PILLAR_WEIGHTS: Dict[str, float] = {
    PAYMENT_TIMELINESS: 0.40,
    SERVICE_DELIVERY: 0.35,
    CONTRACT_VITALITY: 0.25,
}

PILLAR_LABELS: Dict[str, str] = {
    PAYMENT_TIMELINESS: "Payment Timeliness",
    SERVICE_DELIVERY: "Service Delivery",
    CONTRACT_VITALITY: "Contract Vitality",
}

# Score for a pillar with nothing to judge: "nothing due yet, nothing overdue"
NEUTRAL_SCORE = 100

# Points lost per unpaid invoice past its due date
OVERDUE_INVOICE_PENALTY = 15
LOW_COLLECTION_PCT = 50

# Pending acceptance: full credit for a week, then 5 points a day down to 20
PENDING_GRACE_DAYS = 7
PENDING_DECAY_PER_DAY = 5
PENDING_FLOOR = 20

# Still open after end_date
OVERRUN_PENALTY = 40

STATUS_BASE_SCORES: Dict[ContractStatus, int] = {
    ContractStatus.ACTIVE: 100,
    ContractStatus.COMPLETED: 100,
    ContractStatus.DRAFT: 80,
    ContractStatus.PENDING_ACCEPTANCE: 100,
    ContractStatus.EXPIRED: 60,
    ContractStatus.CANCELLED: 40,
}

OPEN_STATUSES = frozenset(
    {ContractStatus.DRAFT, ContractStatus.PENDING_ACCEPTANCE, ContractStatus.ACTIVE}
)

GRADE_THRESHOLDS: List[Tuple[int, HealthGrade, str]] = [
    (85, HealthGrade.EXCELLENT, "Excellent"),
    (65, HealthGrade.GOOD, "Good"),
    (40, HealthGrade.WARNING, "Needs Attention"),
    (0, HealthGrade.CRITICAL, "Critical"),
]


def _round_half_up(value: Union[Decimal, int]) -> int:
    return int(Decimal(value).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def clamp_score(value: int) -> int:
    return max(0, min(100, value))


def score_to_grade(score: int) -> HealthGrade:
    for minimum, grade, _ in GRADE_THRESHOLDS:
        if score >= minimum:
            return grade
    return HealthGrade.CRITICAL


def grade_label(grade: HealthGrade) -> str:
    for _, g, label in GRADE_THRESHOLDS:
        if g == grade:
            return label
    raise ValueError(f"Unknown grade: {grade}")


def _plural(count: int, noun: str) -> str:
    return f"{count} {noun}{'' if count == 1 else 's'}"


def _pillar(
    pillar_id: str,
    score: int,
    issues: List[HealthIssue],
    applicable: bool = True,
) -> HealthPillar:
    score = clamp_score(score)
    return HealthPillar(
        id=pillar_id,
        label=PILLAR_LABELS[pillar_id],
        score=score,
        grade=score_to_grade(score),
        weight=PILLAR_WEIGHTS[pillar_id],
        applicable=applicable,
        issues=issues,
    )


def _is_missed(event: ScheduleEvent, as_of: date) -> bool:
    """Past its date and not completed (cancelled events never count)"""
    if event.status in (EventStatus.COMPLETED, EventStatus.CANCELLED):
        return False
    return is_past(event.scheduled_date, as_of)


def count_overdue_events(events: Iterable[ScheduleEvent], as_of: date) -> int:
    """Events of any type past their date and not completed or cancelled"""
    return sum(1 for e in events if _is_missed(e, as_of))


def score_payment_timeliness(
    invoice_summary: InvoiceSummary,
    events: Sequence[ScheduleEvent],
    as_of: date,
) -> HealthPillar:
    """
    Score collection performance.

    - Nothing invoiced and nothing overdue: not applicable (neutral, never a ratio against zero)
    - Otherwise: collection % (capped at 100) minus OVERDUE_INVOICE_PENALTY per overdue invoice
    - Past-due billing events are reported as issues but do not move the score
    """
    issues: List[HealthIssue] = []

    missed_billing = sum(
        1 for e in events
        if e.event_type == EventType.BILLING and _is_missed(e, as_of)
    )
    if missed_billing:
        issues.append(HealthIssue(
            field="billing_events",
            message=f"{_plural(missed_billing, 'billing event')} past due",
            severity=IssueSeverity.WARNING,
        ))

    overdue = invoice_summary.overdue_count
    if invoice_summary.total_invoiced == 0 and overdue == 0:
        return _pillar(PAYMENT_TIMELINESS, NEUTRAL_SCORE, issues, applicable=False)

    if invoice_summary.total_collected >= invoice_summary.total_invoiced:
        collection = Decimal(1)
    else:
        collection = invoice_summary.total_collected / invoice_summary.total_invoiced
    collection_pct = _round_half_up(collection * 100)

    score = max(0, collection_pct - OVERDUE_INVOICE_PENALTY * overdue)

    if overdue > 0:
        issues.append(HealthIssue(
            field="overdue_invoices",
            message=_plural(overdue, "overdue invoice"),
            severity=IssueSeverity.CRITICAL,
        ))

    if invoice_summary.total_outstanding > 0 and collection_pct < LOW_COLLECTION_PCT:
        issues.append(HealthIssue(
            field="collection",
            message=f"Only {collection_pct}% collected",
            severity=IssueSeverity.WARNING,
        ))

    return _pillar(PAYMENT_TIMELINESS, score, issues)


def score_service_delivery(
    contract: ContractSnapshot,
    events: Sequence[ScheduleEvent],
    as_of: date,
) -> HealthPillar:
    """
    Score the share of past-dated service events that were completed.

    Events dated today or later are not due yet and stay out of the denominator.
    A due event that is not completed (overdue, or pending past its date) is missed.
    """
    issues: List[HealthIssue] = []

    if not events and contract.status == ContractStatus.ACTIVE:
        issues.append(HealthIssue(
            field="events",
            message="Active contract has no scheduled events",
            severity=IssueSeverity.WARNING,
        ))

    due = [
        e for e in events
        if e.event_type == EventType.SERVICE
        and e.status != EventStatus.CANCELLED
        and is_past(e.scheduled_date, as_of)
    ]
    if not due:
        return _pillar(SERVICE_DELIVERY, NEUTRAL_SCORE, issues, applicable=False)

    completed = sum(1 for e in due if e.status == EventStatus.COMPLETED)
    missed = len(due) - completed

    score = _round_half_up(Decimal(100 * completed) / Decimal(len(due)))

    if missed:
        issues.append(HealthIssue(
            field="service_events",
            message=f"{_plural(missed, 'service event')} past due without completion",
            severity=IssueSeverity.CRITICAL,
        ))

    return _pillar(SERVICE_DELIVERY, score, issues)


def score_contract_vitality(contract: ContractSnapshot, as_of: date) -> HealthPillar:
    """Score lifecycle state: status, stale acceptance, still open past end_date"""
    issues: List[HealthIssue] = []
    score = STATUS_BASE_SCORES[contract.status]

    if contract.status == ContractStatus.PENDING_ACCEPTANCE:
        waited = days_elapsed(contract.created_at, as_of)
        days_past_grace = waited - PENDING_GRACE_DAYS
        if days_past_grace > 0:
            score = max(PENDING_FLOOR, score - PENDING_DECAY_PER_DAY * days_past_grace)
            issues.append(HealthIssue(
                field="status",
                message=f"Awaiting acceptance for {waited} days",
                severity=IssueSeverity.WARNING,
            ))
    elif contract.status == ContractStatus.CANCELLED:
        issues.append(HealthIssue(field="status", message="Contract was cancelled", severity=IssueSeverity.WARNING))
    elif contract.status == ContractStatus.EXPIRED:
        issues.append(HealthIssue(field="status", message="Contract expired", severity=IssueSeverity.WARNING))
    elif contract.status == ContractStatus.DRAFT:
        issues.append(HealthIssue(field="status", message="Contract is still a draft", severity=IssueSeverity.INFO))

    if (
        contract.end_date is not None
        and contract.status in OPEN_STATUSES
        and is_past(contract.end_date, as_of)
    ):
        score = max(0, score - OVERRUN_PENALTY)
        issues.append(HealthIssue(
            field="end_date",
            message=f"Contract passed its end date ({contract.end_date.isoformat()}) without being closed",
            severity=IssueSeverity.CRITICAL,
        ))

    return _pillar(CONTRACT_VITALITY, score, issues)


def combine_pillars(pillars: Sequence[HealthPillar]) -> Tuple[int, float]:
    """
    Weighted average over applicable pillars, weights renormalized to 1.0.

    Returns: (overall, data_completeness)
    """
    applicable = [p for p in pillars if p.applicable]
    if not applicable:
        return NEUTRAL_SCORE, 0.0

    total_weight = sum(Decimal(str(p.weight)) for p in applicable)
    weighted = sum(Decimal(str(p.weight)) * p.score for p in applicable) / total_weight

    return clamp_score(_round_half_up(weighted)), float(round(total_weight, 2))


def compute_health(
    contract: ContractSnapshot,
    events: Iterable[ScheduleEvent],
    invoice_summary: InvoiceSummary,
    *,
    as_of: Optional[date] = None,
) -> HealthResult:
    """
    Main entry point: score a contract from its snapshot, events and invoice summary.

    Raises:
        InvalidInputError: malformed input (wrong types, negative amounts, bad date ordering)
    """
    events = list(events)
    validate_inputs(contract, events, invoice_summary)

    if as_of is None:
        as_of = date.today()
    elif isinstance(as_of, datetime):
        as_of = as_of.date()

    pillars = [
        score_payment_timeliness(invoice_summary, events, as_of),
        score_service_delivery(contract, events, as_of),
        score_contract_vitality(contract, as_of),
    ]

    for p in pillars:
        if not p.applicable:
            warnings.warn(
                f"No applicable data for {p.label}; scored as neutral {NEUTRAL_SCORE}",
                NoApplicableDataWarning,
                stacklevel=2,
            )

    overall, data_completeness = combine_pillars(pillars)
    grade = score_to_grade(overall)

    return HealthResult(
        overall=overall,
        grade=grade,
        grade_label=grade_label(grade),
        pillars=pillars,
        data_completeness=data_completeness,
        as_of=as_of,
    )
