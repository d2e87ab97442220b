"""Contracts API HTTP client for fetching health scoring inputs"""

from typing import Any, Dict, List, Tuple

import httpx

from contract_health.config import settings
from contract_health.domain.exceptions import ContractNotFoundError, ContractSourceError
from contract_health.domain.models import ContractSnapshot, InvoiceSummary, ScheduleEvent
from contract_health.domain.parsing import parse_contract, parse_events, parse_invoice_summary


class ContractSourceClient:
    """Client for the upstream contracts API (edge functions backed by Postgres)"""

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = (base_url or settings.contracts_api_base).rstrip("/")
        self.api_key = api_key if api_key is not None else settings.contracts_api_key
        self.timeout = timeout or settings.http_timeout_seconds
        self.transport = transport

    def _headers(self) -> Dict[str, str]:
        if not self.api_key:
            return {}
        return {"apikey": self.api_key, "Authorization": f"Bearer {self.api_key}"}

    async def _get_json(self, client: httpx.AsyncClient, contract_id: str, path: str) -> Any:
        try:
            response = await client.get(f"{self.base_url}{path}", headers=self._headers())
            if response.status_code == 404:
                raise ContractNotFoundError(f"Contract {contract_id} not found")
            response.raise_for_status()
            return response.json()

        except httpx.TimeoutException as e:
            raise ContractSourceError(f"Contracts API timeout after {self.timeout}s") from e
        except httpx.HTTPStatusError as e:
            raise ContractSourceError(f"Contracts API error: {e.response.status_code}") from e
        except httpx.RequestError as e:
            raise ContractSourceError(f"Contracts API unreachable: {e}") from e
        except ValueError as e:
            raise ContractSourceError(f"Contracts API returned invalid JSON: {e}") from e

    async def get_health_inputs(
        self, contract_id: str
    ) -> Tuple[ContractSnapshot, List[ScheduleEvent], InvoiceSummary]:
        """
        Fetch contract snapshot, schedule events and invoice summary.

        Raises:
            ContractNotFoundError: Contract does not exist upstream
            ContractSourceError: On timeout, HTTP errors, or non-JSON response
            InvalidInputError: Upstream data is malformed
        """
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            contract_data = await self._get_json(client, contract_id, f"/contracts/{contract_id}")
            events_data = await self._get_json(client, contract_id, f"/contracts/{contract_id}/events")
            summary_data = await self._get_json(client, contract_id, f"/contracts/{contract_id}/invoice-summary")

        if isinstance(events_data, dict):
            events_data = events_data.get("events", [])

        return (
            parse_contract(contract_data),
            parse_events(events_data),
            parse_invoice_summary(summary_data),
        )
