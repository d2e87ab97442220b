"""Dependency injection for FastAPI endpoints"""

from fastapi import Request
from contract_health.infrastructure.clients.contracts import ContractSourceClient


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_contract_source() -> ContractSourceClient:
    """Provide contracts API client instance"""
    return ContractSourceClient()
