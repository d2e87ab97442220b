"""SQLAlchemy ORM models for recorded health snapshots"""

import uuid
from sqlalchemy import Column, Date, DateTime, Float, Integer, JSON, Text, Uuid
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class ContractHealthSnapshot(Base):
    """Health score recorded for a contract on a given day"""

    __tablename__ = "contract_health_snapshot"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    contract_id = Column(Text, nullable=False, index=True)
    overall = Column(Integer, nullable=False)
    grade = Column(Text, nullable=False)
    data_completeness = Column(Float, nullable=False)
    pillars = Column(JSON, nullable=False)
    as_of = Column(Date, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
