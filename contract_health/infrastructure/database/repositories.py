"""Data access layer for health snapshots"""

from typing import List
from sqlalchemy.orm import Session
from contract_health.infrastructure.database.models import ContractHealthSnapshot
from contract_health.domain.models import HealthResult


class HealthSnapshotRepository:
    """Repository for recorded contract health"""

    def __init__(self, db: Session):
        self.db = db

    def create_snapshot(self, contract_id: str, result: HealthResult) -> ContractHealthSnapshot:
        """Persist a health result without committing"""
        db_snapshot = ContractHealthSnapshot(
            contract_id=contract_id,
            overall=result.overall,
            grade=result.grade.value,
            data_completeness=result.data_completeness,
            pillars=[
                {
                    "id": p.id,
                    "score": p.score,
                    "grade": p.grade.value,
                    "applicable": p.applicable,
                    "issue_count": len(p.issues),
                }
                for p in result.pillars
            ],
            as_of=result.as_of,
        )
        self.db.add(db_snapshot)
        self.db.flush()  # Get ID without committing
        return db_snapshot

    def get_snapshots_by_contract(self, contract_id: str, limit: int = 20) -> List[ContractHealthSnapshot]:
        """Fetch recent snapshots for a contract, newest first"""
        return (
            self.db.query(ContractHealthSnapshot)
            .filter(ContractHealthSnapshot.contract_id == contract_id)
            .order_by(ContractHealthSnapshot.created_at.desc(), ContractHealthSnapshot.as_of.desc())
            .limit(limit)
            .all()
        )
