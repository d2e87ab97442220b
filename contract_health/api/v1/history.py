"""GET /v1/contracts/{contract_id}/health/history - Recorded health snapshots"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from contract_health.api.v1.schemas import HistoryResponse, HistoryItem
from contract_health.config import settings
from contract_health.infrastructure.database.session import get_db
from contract_health.infrastructure.database.repositories import HealthSnapshotRepository

router = APIRouter()


@router.get("/contracts/{contract_id}/health/history", response_model=HistoryResponse)
def get_health_history(
    contract_id: str,
    limit: Optional[int] = Query(None, ge=1, le=100, description="Maximum snapshots to return"),
    db: Session = Depends(get_db),
):
    """
    Retrieve recorded health snapshots for a contract, newest first.
    """
    snapshot_repo = HealthSnapshotRepository(db)
    snapshots = snapshot_repo.get_snapshots_by_contract(contract_id, limit=limit or settings.history_limit)

    history_items = [
        HistoryItem(
            snapshot_id=str(s.id),
            health_score=s.overall,
            grade=s.grade,
            data_completeness=s.data_completeness,
            as_of=s.as_of,
            created_at=s.created_at.isoformat(),
        )
        for s in snapshots
    ]

    return HistoryResponse(contract_id=contract_id, snapshots=history_items)
