"""Contract health endpoints

POST /v1/health/compute                - score an inline payload
GET  /v1/contracts/{contract_id}/health - score a contract from the contracts API and record it
"""

import time
import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from contract_health.api.v1.schemas import HealthRequest, HealthResponse
from contract_health.api.dependencies import get_contract_source, get_request_id
from contract_health.infrastructure.database.session import get_db
from contract_health.infrastructure.database.repositories import HealthSnapshotRepository
from contract_health.infrastructure.clients.contracts import ContractSourceClient
from contract_health.domain.scoring import compute_health
from contract_health.domain.exceptions import ContractNotFoundError, ContractSourceError, InvalidInputError
from contract_health.infrastructure.observability.metrics import (
    contract_source_failures_counter,
    invalid_input_counter,
    record_health,
)
from contract_health.infrastructure.observability.logging import log_health_computed

router = APIRouter()


@router.post("/health/compute", response_model=HealthResponse)
def compute_contract_health(request_body: HealthRequest, request: Request):
    """
    Score a contract from an inline snapshot, events and invoice summary.

    Nothing is persisted; callers that want history use the contract endpoint.
    """
    start_time = time.perf_counter()
    request_id = get_request_id(request)

    try:
        result = compute_health(
            request_body.contract.to_domain(),
            [e.to_domain() for e in request_body.events],
            request_body.invoice_summary.to_domain(),
            as_of=request_body.as_of,
        )
    except InvalidInputError as e:
        invalid_input_counter.inc()
        logging.warning(f"Invalid health input: {e}", extra={"request_id": request_id, "field": e.field})
        raise HTTPException(status_code=422, detail=str(e))

    duration_ms = (time.perf_counter() - start_time) * 1000
    record_health(result)
    log_health_computed(request_id, None, result.overall, result.grade.value, result.data_completeness, duration_ms)

    return HealthResponse.from_result(result)


@router.get("/contracts/{contract_id}/health", response_model=HealthResponse)
async def get_contract_health(
    contract_id: str,
    request: Request,
    as_of: Optional[date] = Query(None, description="Reference day; defaults to today"),
    db: Session = Depends(get_db),
    contract_source: ContractSourceClient = Depends(get_contract_source),
):
    """
    Score a stored contract.

    Flow:
    1. Fetch snapshot, schedule events and invoice summary from the contracts API
    2. Compute health
    3. Record a health snapshot for history
    4. Return the full breakdown
    """
    start_time = time.perf_counter()
    request_id = get_request_id(request)

    try:
        contract, events, invoice_summary = await contract_source.get_health_inputs(contract_id)

        result = compute_health(contract, events, invoice_summary, as_of=as_of)

        HealthSnapshotRepository(db).create_snapshot(contract_id, result)
        db.commit()

    except ContractNotFoundError as e:
        db.rollback()
        raise HTTPException(status_code=404, detail=str(e))

    except ContractSourceError as e:
        contract_source_failures_counter.inc()
        db.rollback()
        logging.error(f"Contracts API error: {e}", extra={"request_id": request_id, "contract_id": contract_id})
        raise HTTPException(status_code=503, detail="Contracts service unavailable")

    except InvalidInputError as e:
        invalid_input_counter.inc()
        db.rollback()
        logging.warning(
            f"Invalid contract data: {e}",
            extra={"request_id": request_id, "contract_id": contract_id, "field": e.field},
        )
        raise HTTPException(status_code=422, detail=str(e))

    except Exception as e:
        db.rollback()
        logging.exception(f"Unexpected error: {e}", extra={"request_id": request_id, "contract_id": contract_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    duration_ms = (time.perf_counter() - start_time) * 1000
    record_health(result)
    log_health_computed(request_id, contract_id, result.overall, result.grade.value, result.data_completeness, duration_ms)

    return HealthResponse.from_result(result, contract_id=contract_id)
