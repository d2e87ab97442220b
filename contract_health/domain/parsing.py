"""Boundary parsing and validation for contract health inputs

Upstream payloads are loosely typed JSON. Everything is converted into the
typed domain models here, and anything that cannot be converted (or that
converts into something nonsensical, like a negative amount) is rejected
with an InvalidInputError naming the offending field.
"""

import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Iterable, List, Mapping, Optional, Type, TypeVar

from contract_health.domain.exceptions import InvalidInputError
from contract_health.domain.models import (
    ContractSnapshot,
    ContractStatus,
    EventStatus,
    EventType,
    InvoiceSummary,
    ScheduleEvent,
)

E = TypeVar("E", bound=Enum)

CURRENCY_PATTERN = re.compile(r"^[A-Z]{3}$")

# Money is held to 15 integer digits and 6 decimal places
MAX_AMOUNT_DIGITS = 15
MAX_DECIMAL_PLACES = 6


def _require(data: Mapping[str, Any], key: str, path: str) -> Any:
    if key not in data or data[key] is None:
        raise InvalidInputError(f"{path}.{key}", "is required")
    return data[key]


def _parse_enum(enum_cls: Type[E], value: Any, path: str) -> E:
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise InvalidInputError(path, f"{value!r} is not one of: {allowed}") from None


def _parse_date(value: Any, path: str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value)
        except ValueError:
            pass
        # Timestamps are accepted for date fields; only the day matters
        try:
            return datetime.fromisoformat(value).date()
        except ValueError:
            pass
    raise InvalidInputError(path, f"{value!r} is not a valid date")


def _parse_datetime(value: Any, path: str) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value)
        except ValueError:
            pass
    raise InvalidInputError(path, f"{value!r} is not a valid timestamp")


def _parse_amount(value: Any, path: str) -> Decimal:
    if isinstance(value, bool):
        raise InvalidInputError(path, "must be a number")
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise InvalidInputError(path, f"{value!r} is not a valid amount") from None
    check_amount(amount, path)
    return amount


def _parse_count(value: Any, path: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidInputError(path, "must be an integer")
    if value < 0:
        raise InvalidInputError(path, "must not be negative")
    return value


def _normalize_currency(value: Any) -> Any:
    return value.strip().upper() if isinstance(value, str) else value


def check_amount(amount: Any, path: str) -> None:
    if not isinstance(amount, Decimal):
        raise InvalidInputError(path, "must be a Decimal amount")
    if not amount.is_finite():
        raise InvalidInputError(path, "must be a finite amount")
    if amount < 0:
        raise InvalidInputError(path, "must not be negative")
    if amount and amount.adjusted() >= MAX_AMOUNT_DIGITS:
        raise InvalidInputError(path, f"exceeds {MAX_AMOUNT_DIGITS} integer digits")
    if amount.normalize().as_tuple().exponent < -MAX_DECIMAL_PLACES:
        raise InvalidInputError(path, f"has more than {MAX_DECIMAL_PLACES} decimal places")


def check_currency(currency: Any, path: str) -> None:
    if not isinstance(currency, str) or not CURRENCY_PATTERN.match(currency):
        raise InvalidInputError(path, f"{currency!r} is not a three-letter currency code")


def parse_contract(data: Mapping[str, Any]) -> ContractSnapshot:
    """Build a ContractSnapshot from a contracts API record"""
    if not isinstance(data, Mapping):
        raise InvalidInputError("contract", "must be an object")
    path = "contract"
    end_date_raw = data.get("end_date")
    contract = ContractSnapshot(
        status=_parse_enum(ContractStatus, _require(data, "status", path), f"{path}.status"),
        start_date=_parse_date(_require(data, "start_date", path), f"{path}.start_date"),
        end_date=_parse_date(end_date_raw, f"{path}.end_date") if end_date_raw is not None else None,
        total_value=_parse_amount(_require(data, "total_value", path), f"{path}.total_value"),
        currency=_normalize_currency(_require(data, "currency", path)),
        created_at=_parse_datetime(_require(data, "created_at", path), f"{path}.created_at"),
        updated_at=_parse_datetime(_require(data, "updated_at", path), f"{path}.updated_at"),
    )
    validate_contract(contract)
    return contract


def parse_event(data: Mapping[str, Any], path: str = "event") -> ScheduleEvent:
    if not isinstance(data, Mapping):
        raise InvalidInputError(path, "must be an object")
    amount_raw = data.get("amount")
    event = ScheduleEvent(
        event_type=_parse_enum(EventType, _require(data, "event_type", path), f"{path}.event_type"),
        scheduled_date=_parse_date(_require(data, "scheduled_date", path), f"{path}.scheduled_date"),
        status=_parse_enum(EventStatus, _require(data, "status", path), f"{path}.status"),
        amount=_parse_amount(amount_raw, f"{path}.amount") if amount_raw is not None else None,
        currency=_normalize_currency(data.get("currency")),
    )
    validate_event(event, path)
    return event


def parse_events(items: Iterable[Mapping[str, Any]]) -> List[ScheduleEvent]:
    if isinstance(items, (str, bytes, Mapping)):
        raise InvalidInputError("events", "must be a list")
    return [parse_event(item, f"events[{i}]") for i, item in enumerate(items)]


def parse_invoice_summary(data: Optional[Mapping[str, Any]]) -> InvoiceSummary:
    """Build an InvoiceSummary; a missing summary means nothing has been invoiced"""
    if data is None:
        return InvoiceSummary(Decimal("0"), Decimal("0"), Decimal("0"), 0)
    if not isinstance(data, Mapping):
        raise InvalidInputError("invoice_summary", "must be an object")
    path = "invoice_summary"
    summary = InvoiceSummary(
        total_invoiced=_parse_amount(data.get("total_invoiced", 0), f"{path}.total_invoiced"),
        total_collected=_parse_amount(data.get("total_collected", 0), f"{path}.total_collected"),
        total_outstanding=_parse_amount(data.get("total_outstanding", 0), f"{path}.total_outstanding"),
        overdue_count=_parse_count(data.get("overdue_count", 0), f"{path}.overdue_count"),
    )
    validate_invoice_summary(summary)
    return summary


def validate_contract(contract: ContractSnapshot) -> None:
    path = "contract"
    if not isinstance(contract.status, ContractStatus):
        raise InvalidInputError(f"{path}.status", "must be a ContractStatus")
    for name in ("start_date", "end_date"):
        value = getattr(contract, name)
        if name == "end_date" and value is None:
            continue
        if not isinstance(value, date) or isinstance(value, datetime):
            raise InvalidInputError(f"{path}.{name}", "must be a calendar date")
    for name in ("created_at", "updated_at"):
        if not isinstance(getattr(contract, name), datetime):
            raise InvalidInputError(f"{path}.{name}", "must be a timestamp")
    check_amount(contract.total_value, f"{path}.total_value")
    check_currency(contract.currency, f"{path}.currency")
    if contract.end_date is not None and contract.end_date < contract.start_date:
        raise InvalidInputError(f"{path}.end_date", "is before start_date")
    try:
        if contract.updated_at < contract.created_at:
            raise InvalidInputError(f"{path}.updated_at", "is before created_at")
    except TypeError:
        raise InvalidInputError(f"{path}.updated_at", "mixes naive and timezone-aware timestamps") from None


def validate_event(event: ScheduleEvent, path: str = "event") -> None:
    if not isinstance(event.event_type, EventType):
        raise InvalidInputError(f"{path}.event_type", "must be an EventType")
    if not isinstance(event.status, EventStatus):
        raise InvalidInputError(f"{path}.status", "must be an EventStatus")
    if not isinstance(event.scheduled_date, date) or isinstance(event.scheduled_date, datetime):
        raise InvalidInputError(f"{path}.scheduled_date", "must be a calendar date")
    if event.amount is not None:
        check_amount(event.amount, f"{path}.amount")
    if event.currency is not None:
        check_currency(event.currency, f"{path}.currency")


def validate_invoice_summary(summary: InvoiceSummary) -> None:
    path = "invoice_summary"
    check_amount(summary.total_invoiced, f"{path}.total_invoiced")
    check_amount(summary.total_collected, f"{path}.total_collected")
    check_amount(summary.total_outstanding, f"{path}.total_outstanding")
    if isinstance(summary.overdue_count, bool) or not isinstance(summary.overdue_count, int):
        raise InvalidInputError(f"{path}.overdue_count", "must be an integer")
    if summary.overdue_count < 0:
        raise InvalidInputError(f"{path}.overdue_count", "must not be negative")


def validate_inputs(
    contract: ContractSnapshot,
    events: Iterable[ScheduleEvent],
    invoice_summary: InvoiceSummary,
) -> None:
    """Check already-typed inputs before scoring"""
    validate_contract(contract)
    for i, event in enumerate(events):
        validate_event(event, f"events[{i}]")
    validate_invoice_summary(invoice_summary)
