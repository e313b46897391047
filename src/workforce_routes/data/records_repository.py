"""Record providers for lodgings, work sites, work orders and vehicles.

Rows are read from the records database when Supabase is configured and from
the records HTTP API otherwise.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, Optional, TypeVar

import httpx

from ..config import settings
from ..db.supabase import get_supabase_client
from ..errors import RecordNotFound
from ..models.domain import Lodging, Vehicle, WorkOrder, WorkSite

T = TypeVar("T")

# (database table, records API path)
LODGING_SOURCE = ("alojamento", "/alojamento")
WORKSITE_SOURCE = ("canteiros", "/canteiros")
WORK_ORDER_SOURCE = ("ordens_servico", "/ordens")
VEHICLE_SOURCE = ("veiculos", "/veiculos")


def _first(row: dict, *names: str) -> Any:
    for name in names:
        value = row.get(name)
        if value is not None:
            return value
    return None


def _text(row: dict, *names: str) -> str:
    value = _first(row, *names)
    return "" if value is None else str(value).strip()


def _optional_int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    return int(value)


def lodging_from_row(row: dict) -> Lodging:
    # The records API aliases the Portuguese columns to English names.
    active = _first(row, "ativa", "active")
    return Lodging(
        id=int(row["id"]),
        street=_text(row, "rua", "street"),
        number=_text(row, "numero", "number"),
        neighborhood=_text(row, "bairro", "neighborhood"),
        city=_text(row, "cidade", "city"),
        postal_code=_text(row, "cep", "postalCode", "postal_code"),
        residents=_optional_int(_first(row, "moradores", "residents")),
        active=True if active is None else bool(int(active)),
    )


def worksite_from_row(row: dict) -> WorkSite:
    return WorkSite(
        id=int(row["id"]),
        code=_text(row, "codigo", "code"),
        responsible=_text(row, "responsavel", "responsible"),
        street=_text(row, "rua", "street"),
        number=_text(row, "numero", "number"),
        neighborhood=_text(row, "bairro", "neighborhood"),
        city=_text(row, "cidade", "city"),
        postal_code=_text(row, "cep", "postal_code"),
        state=_text(row, "estado", "state") or None,
        complement=_text(row, "complemento", "complement") or None,
        status=_text(row, "status") or "ativo",
    )


def work_order_from_row(row: dict) -> WorkOrder:
    created_at = _first(row, "data_criacao", "created_at")
    return WorkOrder(
        id=int(row["id"]),
        service_role=_text(row, "servico_funcao", "servico", "service_role"),
        worksite_id=_optional_int(_first(row, "canteiro_id", "worksite_id")),
        service_id=_optional_int(_first(row, "servico_id", "service_id")),
        employee_name=_text(row, "funcionario_nome", "funcionario", "employee_name") or None,
        employee_registration=_text(row, "funcionario_matricula", "matricula", "employee_registration") or None,
        created_at=str(created_at) if created_at is not None else None,
    )


def vehicle_from_row(row: dict) -> Vehicle:
    return Vehicle(
        id=int(row["id"]),
        fleet=_text(row, "frota", "fleet"),
        vehicle_type=_text(row, "tipo_veiculo", "vehicle_type"),
        plate=_text(row, "placa", "plate"),
        capacity=int(_first(row, "capacidade", "capacity") or 0),
    )


def _parse_rows(rows: Iterable[dict], parser: Callable[[dict], T], label: str) -> tuple[T, ...]:
    records: list[T] = []
    for row in rows:
        try:
            records.append(parser(row))
        except (KeyError, ValueError, TypeError) as e:
            logging.warning(f"Skipping invalid {label} row: {e}")
            continue
    return tuple(records)


class RecordsRepository:
    """Read-only access to the records the route planner can reference."""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
        use_database: bool = True,
    ) -> None:
        self.base_url = (base_url or settings.records_api_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.http_timeout_seconds
        self.use_database = use_database
        self._transport = transport

    def _load_rows_from_database(self, table: str) -> list[dict] | None:
        """Return rows from Supabase, or None if the database is unavailable or empty."""
        if not self.use_database:
            return None
        supabase = get_supabase_client()
        if not supabase:
            return None
        try:
            response = supabase.table(table).select("*").execute()
        except Exception as e:
            logging.debug(f"Database query on '{table}' failed, falling back to records API: {e}")
            return None
        return response.data or None

    def _load_rows_from_api(self, path: str) -> list[dict]:
        url = f"{self.base_url}{path}"
        try:
            with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
                response = client.get(url)
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as e:
            raise ConnectionError(f"Records API at {url} answered {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise ConnectionError(f"Failed to reach records API at {url}: {e}") from e
        if not isinstance(data, list):
            raise ValueError(f"Records API at {url} did not return a list.")
        return data

    def _rows(self, source: tuple[str, str]) -> list[dict]:
        table, path = source
        rows = self._load_rows_from_database(table)
        if rows is not None:
            return rows
        return self._load_rows_from_api(path)

    def list_lodgings(self) -> tuple[Lodging, ...]:
        lodgings = _parse_rows(self._rows(LODGING_SOURCE), lodging_from_row, "lodging")
        return tuple(lodging for lodging in lodgings if lodging.active)

    def list_worksites(self) -> tuple[WorkSite, ...]:
        return _parse_rows(self._rows(WORKSITE_SOURCE), worksite_from_row, "work site")

    def list_work_orders(self) -> tuple[WorkOrder, ...]:
        return _parse_rows(self._rows(WORK_ORDER_SOURCE), work_order_from_row, "work order")

    def list_vehicles(self) -> tuple[Vehicle, ...]:
        return _parse_rows(self._rows(VEHICLE_SOURCE), vehicle_from_row, "vehicle")

    def get_lodging(self, record_id: int) -> Lodging:
        return _find(self.list_lodgings(), record_id, "Lodging")

    def get_worksite(self, record_id: int) -> WorkSite:
        return _find(self.list_worksites(), record_id, "Work site")

    def get_work_order(self, record_id: int) -> WorkOrder:
        return _find(self.list_work_orders(), record_id, "Work order")

    def get_vehicle(self, record_id: int) -> Vehicle:
        return _find(self.list_vehicles(), record_id, "Vehicle")


def _find(records: Iterable[T], record_id: int, label: str) -> T:
    for record in records:
        if record.id == int(record_id):  # type: ignore[attr-defined]
            return record
    raise RecordNotFound(f"find {label.lower()}", f"{label} {record_id} not found.")
