"""Expense, doctor and patient records as returned by the clinic expense API.

Records are frozen dataclasses parsed from the API's JSON payloads. A fetched page of
expenses is held as an immutable snapshot and replaced wholesale on every fetch.
"""
import datetime
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from dateutil import parser as date_parser


def _to_float(value: Any, field_name: str, record_id: str) -> float:
    if value is None or value == '':
        logging.warning(f'Expense "{record_id}" has no "{field_name}" value, using 0.')
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        logging.warning(f'Expense "{record_id}" has an invalid "{field_name}" value: {value!r}, using 0.')
        return 0.0


def parse_timestamp(value: Any) -> datetime.datetime:
    """Parse an API timestamp into a local naive datetime.

    Aware timestamps (the API sends UTC ISO strings) are converted to local time so
    that the calendar day matches what the user sees.

    Raises:
        ValueError: If the value cannot be parsed.
    """
    if isinstance(value, datetime.datetime):
        dt = value
    elif isinstance(value, datetime.date):
        dt = datetime.datetime.combine(value, datetime.time())
    elif isinstance(value, str) and value:
        try:
            dt = date_parser.isoparse(value)
        except ValueError:
            dt = date_parser.parse(value)
    else:
        raise ValueError(f'Invalid timestamp: {value!r}')

    if dt.tzinfo is not None:
        dt = dt.astimezone().replace(tzinfo=None)
    return dt


@dataclass(frozen=True, slots=True)
class Doctor:
    """A clinic user with the doctor role."""
    id: str
    name: str
    role: int = 1

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> 'Doctor':
        return cls(
            id=str(payload.get('_id', payload.get('id', ''))),
            name=str(payload.get('name', '')),
            role=int(payload.get('role', 1) or 0),
        )


@dataclass(frozen=True, slots=True)
class Patient:
    id: str
    first_name: str
    patient_number: str

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> 'Patient':
        return cls(
            id=str(payload.get('_id', payload.get('id', ''))),
            first_name=str(payload.get('firstName', '') or ''),
            patient_number=str(payload.get('patientNumber', '') or ''),
        )

    @property
    def display_name(self) -> str:
        return f'{self.first_name} - {self.patient_number}'


@dataclass(frozen=True, slots=True)
class ExpenseRecord:
    """One billing transaction linking a doctor, a patient and monetary totals.

    ``grand_total`` is the final billed amount and the only figure used for earnings.
    """
    id: str
    doctor: Doctor
    patient: Optional[Patient]
    created_at: datetime.datetime
    total_cost: float
    grand_total: float
    paid: Any
    payment_method: str

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> 'ExpenseRecord':
        """Build a record from the API's JSON shape.

        Raises:
            ValueError: If the payload has no id or no parsable creation timestamp.
        """
        record_id = payload.get('_id') or payload.get('id')
        if not record_id:
            raise ValueError(f'Expense payload has no id: {payload!r}')
        record_id = str(record_id)

        doctor = payload.get('doctor') or {}
        if not isinstance(doctor, dict):
            doctor = {'_id': doctor}

        patient = payload.get('patient')

        return cls(
            id=record_id,
            doctor=Doctor.from_dict(doctor),
            patient=Patient.from_dict(patient) if isinstance(patient, dict) else None,
            created_at=parse_timestamp(payload.get('created_at')),
            total_cost=_to_float(payload.get('totalCost'), 'totalCost', record_id),
            grand_total=_to_float(payload.get('grandTotal'), 'grandTotal', record_id),
            paid=payload.get('paid', ''),
            payment_method=str(payload.get('paymentMethod', '') or ''),
        )

    @property
    def short_id(self) -> str:
        return self.id[:7]

    @property
    def day(self) -> datetime.date:
        return self.created_at.date()


@dataclass(frozen=True, slots=True)
class ExpensePage:
    """A single page of expenses and the total number of matching records."""
    records: tuple[ExpenseRecord, ...] = ()
    total_count: int = 0

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> 'ExpensePage':
        """Parse the ``{expense: [...], totalExpenses: n}`` list response.

        Raises:
            ValueError: If the payload is not a list response.
        """
        if not isinstance(payload, dict):
            raise ValueError(f'Expected a JSON object, got {type(payload).__name__}.')

        items = payload.get('expense', payload.get('expenses', []))
        if items is None:
            items = []
        if not isinstance(items, list):
            raise ValueError(f'"expense" must be a list, got {type(items).__name__}.')

        records = tuple(ExpenseRecord.from_dict(item) for item in items)

        try:
            total = int(payload.get('totalExpenses', len(records)) or 0)
        except (TypeError, ValueError) as ex:
            raise ValueError(f'Invalid "totalExpenses": {payload.get("totalExpenses")!r}') from ex

        return cls(records=records, total_count=max(total, len(records)))

    @property
    def is_empty(self) -> bool:
        return not self.records
