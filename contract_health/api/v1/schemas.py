"""Pydantic schemas for API request/response validation"""

from pydantic import BaseModel, Field
from datetime import date, datetime
from decimal import Decimal
from typing import Dict, List, Optional

from contract_health.domain.models import (
    ContractSnapshot,
    ContractStatus,
    EventStatus,
    EventType,
    HealthGrade,
    HealthResult,
    InvoiceSummary,
    IssueSeverity,
    PortfolioSummary,
    ScheduleEvent,
)

CURRENCY_FIELD = Field(..., pattern=r"^[A-Z]{3}$", description="ISO-4217 currency code")


class ContractSnapshotSchema(BaseModel):
    """Contract fields consumed by the scorer"""

    status: ContractStatus
    start_date: date
    end_date: Optional[date] = None
    total_value: Decimal = Field(..., ge=0)
    currency: str = CURRENCY_FIELD
    created_at: datetime
    updated_at: datetime

    def to_domain(self) -> ContractSnapshot:
        return ContractSnapshot(**self.model_dump())


class ScheduleEventSchema(BaseModel):
    """One scheduled service or billing occurrence"""

    event_type: EventType
    scheduled_date: date
    status: EventStatus
    amount: Optional[Decimal] = Field(None, ge=0)
    currency: Optional[str] = Field(None, pattern=r"^[A-Z]{3}$")

    def to_domain(self) -> ScheduleEvent:
        return ScheduleEvent(**self.model_dump())


class InvoiceSummarySchema(BaseModel):
    """Aggregate billing state"""

    total_invoiced: Decimal = Field(Decimal("0"), ge=0)
    total_collected: Decimal = Field(Decimal("0"), ge=0)
    total_outstanding: Decimal = Field(Decimal("0"), ge=0)
    overdue_count: int = Field(0, ge=0)

    def to_domain(self) -> InvoiceSummary:
        return InvoiceSummary(**self.model_dump())


class HealthRequest(BaseModel):
    """Request body for POST /v1/health/compute"""

    contract: ContractSnapshotSchema
    events: List[ScheduleEventSchema] = Field(default_factory=list)
    invoice_summary: InvoiceSummarySchema = Field(default_factory=InvoiceSummarySchema)
    as_of: Optional[date] = Field(None, description="Reference day; defaults to today")


class HealthIssueSchema(BaseModel):
    field: str
    message: str
    severity: IssueSeverity


class HealthPillarSchema(BaseModel):
    id: str
    label: str
    score: int
    grade: HealthGrade
    weight: float
    applicable: bool
    issues: List[HealthIssueSchema]


class HealthResponse(BaseModel):
    """Computed contract health"""

    contract_id: Optional[str] = None
    health_score: int
    grade: HealthGrade
    grade_label: str
    data_completeness: float
    insufficient_data: bool
    as_of: date
    pillars: List[HealthPillarSchema]

    @classmethod
    def from_result(cls, result: HealthResult, contract_id: Optional[str] = None) -> "HealthResponse":
        return cls(
            contract_id=contract_id,
            health_score=result.overall,
            grade=result.grade,
            grade_label=result.grade_label,
            data_completeness=result.data_completeness,
            insufficient_data=result.insufficient_data,
            as_of=result.as_of,
            pillars=[
                HealthPillarSchema(
                    id=p.id,
                    label=p.label,
                    score=p.score,
                    grade=p.grade,
                    weight=p.weight,
                    applicable=p.applicable,
                    issues=[
                        HealthIssueSchema(field=i.field, message=i.message, severity=i.severity)
                        for i in p.issues
                    ],
                )
                for p in result.pillars
            ],
        )


class HistoryItem(BaseModel):
    """Single recorded health snapshot"""

    snapshot_id: str
    health_score: int
    grade: HealthGrade
    data_completeness: float
    as_of: date
    created_at: str


class HistoryResponse(BaseModel):
    """Response for GET /v1/contracts/{contract_id}/health/history"""

    contract_id: str
    snapshots: List[HistoryItem]


class PortfolioContract(BaseModel):
    """One contract in a portfolio request"""

    contract_id: str = Field(..., min_length=1)
    contract: ContractSnapshotSchema
    events: List[ScheduleEventSchema] = Field(default_factory=list)
    invoice_summary: InvoiceSummarySchema = Field(default_factory=InvoiceSummarySchema)


class PortfolioRequest(BaseModel):
    """Request body for POST /v1/portfolio/health"""

    contracts: List[PortfolioContract]
    as_of: Optional[date] = None


class PortfolioItem(BaseModel):
    contract_id: str
    health_score: int
    grade: HealthGrade
    overdue_events: int
    needs_attention: bool


class CurrencyTotalsSchema(BaseModel):
    contract_count: int
    total_value: Decimal
    total_collected: Decimal
    total_outstanding: Decimal


class PortfolioSummarySchema(BaseModel):
    contract_count: int
    avg_health_score: int
    needs_attention_count: int
    total_overdue_events: int
    grade_distribution: Dict[str, int]
    totals_by_currency: Dict[str, CurrencyTotalsSchema]

    @classmethod
    def from_summary(cls, summary: PortfolioSummary) -> "PortfolioSummarySchema":
        return cls(
            contract_count=summary.contract_count,
            avg_health_score=summary.avg_health_score,
            needs_attention_count=summary.needs_attention_count,
            total_overdue_events=summary.total_overdue_events,
            grade_distribution=summary.grade_distribution,
            totals_by_currency={
                currency: CurrencyTotalsSchema(**vars(totals))
                for currency, totals in summary.totals_by_currency.items()
            },
        )


class PortfolioResponse(BaseModel):
    """Response for POST /v1/portfolio/health"""

    contracts: List[PortfolioItem]
    summary: PortfolioSummarySchema
