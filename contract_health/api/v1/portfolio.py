"""POST /v1/portfolio/health - Batch scoring with portfolio aggregates"""

import logging
from datetime import date

from fastapi import APIRouter, HTTPException, Request

from contract_health.api.v1.schemas import (
    PortfolioItem,
    PortfolioRequest,
    PortfolioResponse,
    PortfolioSummarySchema,
)
from contract_health.api.dependencies import get_request_id
from contract_health.domain.exceptions import InvalidInputError
from contract_health.domain.models import PortfolioEntry
from contract_health.domain.portfolio import needs_attention, summarize_portfolio
from contract_health.domain.scoring import compute_health, count_overdue_events
from contract_health.infrastructure.observability.metrics import invalid_input_counter, record_health

router = APIRouter()


@router.post("/portfolio/health", response_model=PortfolioResponse)
def compute_portfolio_health(request_body: PortfolioRequest, request: Request):
    """
    Score each contract and aggregate the portfolio.

    All contracts are scored against the same reference day. One malformed
    contract rejects the whole batch (422 naming the contract).
    """
    request_id = get_request_id(request)
    as_of = request_body.as_of or date.today()

    entries = []
    for item in request_body.contracts:
        contract = item.contract.to_domain()
        events = [e.to_domain() for e in item.events]
        invoice_summary = item.invoice_summary.to_domain()
        try:
            result = compute_health(
                contract,
                events,
                invoice_summary,
                as_of=as_of,
            )
        except InvalidInputError as e:
            invalid_input_counter.inc()
            logging.warning(
                f"Invalid portfolio input: {e}",
                extra={"request_id": request_id, "contract_id": item.contract_id, "field": e.field},
            )
            raise HTTPException(status_code=422, detail=f"contract {item.contract_id}: {e}")

        record_health(result)
        entries.append(
            PortfolioEntry(
                contract_id=item.contract_id,
                result=result,
                overdue_events=count_overdue_events(events, as_of),
                contract=contract,
                invoice_summary=invoice_summary,
            )
        )

    summary = summarize_portfolio(entries)
    logging.info(
        "Portfolio health computed",
        extra={
            "request_id": request_id,
            "step": "portfolio_complete",
            "contract_count": summary.contract_count,
            "avg_health_score": summary.avg_health_score,
            "needs_attention_count": summary.needs_attention_count,
        },
    )

    return PortfolioResponse(
        contracts=[
            PortfolioItem(
                contract_id=e.contract_id,
                health_score=e.result.overall,
                grade=e.result.grade,
                overdue_events=e.overdue_events,
                needs_attention=needs_attention(e),
            )
            for e in entries
        ],
        summary=PortfolioSummarySchema.from_summary(summary),
    )
