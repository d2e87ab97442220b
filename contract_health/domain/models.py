"""Domain models - pure Python dataclasses representing contract health entities"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Dict, List, Optional


class ContractStatus(str, Enum):
    DRAFT = "draft"
    PENDING_ACCEPTANCE = "pending_acceptance"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    EXPIRED = "expired"


class EventType(str, Enum):
    SERVICE = "service"
    BILLING = "billing"


class EventStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"


class HealthGrade(str, Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    WARNING = "warning"
    CRITICAL = "critical"


class IssueSeverity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"


@dataclass(frozen=True)
class ContractSnapshot:
    """Read-only contract fields needed for scoring"""

    status: ContractStatus
    start_date: date
    end_date: Optional[date]  # None for open-ended contracts
    total_value: Decimal
    currency: str
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class ScheduleEvent:
    """One scheduled service or billing occurrence tied to a contract"""

    event_type: EventType
    scheduled_date: date
    status: EventStatus
    amount: Optional[Decimal] = None  # populated for billing events
    currency: Optional[str] = None


@dataclass(frozen=True)
class InvoiceSummary:
    """Aggregate billing state for a contract"""

    total_invoiced: Decimal
    total_collected: Decimal
    total_outstanding: Decimal
    overdue_count: int


@dataclass
class HealthIssue:
    field: str
    message: str
    severity: IssueSeverity


@dataclass
class HealthPillar:
    """One independently scored sub-dimension of contract health"""

    id: str
    label: str
    score: int
    grade: HealthGrade
    weight: float  # nominal weight; renormalized over applicable pillars
    applicable: bool = True
    issues: List[HealthIssue] = field(default_factory=list)


@dataclass
class HealthResult:
    """Output of a health computation (never persisted by the scorer)"""

    overall: int
    grade: HealthGrade
    grade_label: str
    pillars: List[HealthPillar]
    data_completeness: float
    as_of: date

    @property
    def insufficient_data(self) -> bool:
        return any(not p.applicable for p in self.pillars)

    def pillar(self, pillar_id: str) -> HealthPillar:
        for p in self.pillars:
            if p.id == pillar_id:
                return p
        raise KeyError(pillar_id)


@dataclass
class PortfolioEntry:
    contract_id: str
    result: HealthResult
    overdue_events: int = 0
    contract: Optional[ContractSnapshot] = None
    invoice_summary: Optional[InvoiceSummary] = None


@dataclass
class CurrencyTotals:
    """Money totals for the contracts of one currency"""

    contract_count: int = 0
    total_value: Decimal = Decimal("0")
    total_collected: Decimal = Decimal("0")
    total_outstanding: Decimal = Decimal("0")


@dataclass
class PortfolioSummary:
    """Aggregate health across a set of contracts"""

    contract_count: int
    avg_health_score: int
    needs_attention_count: int
    total_overdue_events: int
    grade_distribution: Dict[str, int]
    totals_by_currency: Dict[str, CurrencyTotals] = field(default_factory=dict)
