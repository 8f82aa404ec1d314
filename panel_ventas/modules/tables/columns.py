# panel_ventas/modules/tables/columns.py
"""Catálogo de columnas: base fijas + campos personalizados del cliente."""
import json
import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from pydantic import ValidationError

from .schemas import FieldDefinition

logger = logging.getLogger(__name__)

CUSTOM_PREFIX = "campos_adicionales."
DYNAMIC_KEY = "campos_adicionales"

Value = Union[str, int, float, bool, date, datetime, None]


@dataclass(frozen=True)
class Row:
    """Fila normalizada: campos base fijos + mapa de campos dinámicos"""
    fixed: Dict[str, Value]
    dynamic: Dict[str, Value] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "Row":
        fixed = {k: v for k, v in payload.items() if k != DYNAMIC_KEY}
        dynamic = payload.get(DYNAMIC_KEY)
        if isinstance(dynamic, str):
            # Algunos endpoints devuelven campos_adicionales serializado
            try:
                dynamic = json.loads(dynamic)
            except ValueError:
                dynamic = None
        return cls(fixed=fixed, dynamic=dict(dynamic) if isinstance(dynamic, dict) else {})

    def value(self, column_id: str) -> Value:
        """Valor crudo de una columna (base o personalizada)"""
        if column_id.startswith(CUSTOM_PREFIX):
            field_id = column_id[len(CUSTOM_PREFIX):]
            if self.dynamic.get(field_id) is not None:
                return self.dynamic[field_id]
            return self.fixed.get(field_id)
        return self.fixed.get(column_id)


@dataclass(frozen=True)
class ColumnDefinition:
    id: str
    label: str
    accessor: Callable[[Row], str]
    is_custom: bool = False


def _display(value: Value) -> str:
    if value is None:
        return ""
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return str(value)


def _base_accessor(column_id: str) -> Callable[[Row], str]:
    return lambda row: _display(row.fixed.get(column_id))


def _custom_accessor(definition: FieldDefinition) -> Callable[[Row], str]:
    column_id = f"{CUSTOM_PREFIX}{definition.id}"

    def accessor(row: Row) -> str:
        raw = row.value(column_id)
        if raw is None:
            return ""
        if isinstance(raw, (date, datetime)):
            return raw.isoformat()
        if definition.type == "date" or isinstance(raw, str):
            return str(raw)
        try:
            return json.dumps(raw, ensure_ascii=False)
        except (TypeError, ValueError):
            return str(raw)

    return accessor


def base_columns(specs: Sequence[Tuple[str, str]]) -> List[ColumnDefinition]:
    """Construir columnas base a partir de pares (id, etiqueta)"""
    return [ColumnDefinition(id=cid, label=label, accessor=_base_accessor(cid)) for cid, label in specs]


def normalize_field_definitions(payload: Any) -> List[FieldDefinition]:
    """
    Normalizar la respuesta del endpoint de campos.

    Acepta ``{"fields": [...]}`` o una lista directa. Las entradas sin ``id``
    o inválidas se descartan; si traen ``order`` se ordenan por él.
    """
    if isinstance(payload, dict):
        payload = payload.get("fields") or []
    if not isinstance(payload, list):
        return []

    definitions = []
    for item in payload:
        if not isinstance(item, dict) or not item.get("id"):
            continue
        try:
            definitions.append(FieldDefinition(**item))
        except ValidationError as e:
            logger.warning(f"Campo ignorado {item.get('id')!r}: {e.errors()[0]['msg']}")

    # sorted es estable: sin `order` conservan el orden recibido
    return sorted(definitions, key=lambda d: d.order if d.order is not None else 0)


def build_custom_columns(fields: Iterable[FieldDefinition], reserved: Iterable[str]) -> List[ColumnDefinition]:
    """Columnas para campos personalizados, excluyendo nombres reservados"""
    reserved_ids = set(reserved)
    seen = set()
    columns = []
    for definition in fields:
        if definition.id in reserved_ids:
            logger.debug(f"Campo {definition.id!r} colisiona con una columna base, se omite")
            continue
        if definition.id in seen:
            continue
        seen.add(definition.id)
        columns.append(ColumnDefinition(
            id=f"{CUSTOM_PREFIX}{definition.id}",
            label=definition.label or definition.id,
            accessor=_custom_accessor(definition),
            is_custom=True,
        ))
    return columns


class ColumnCatalog:
    """Catálogo ordenado de columnas: primero las base, después las personalizadas"""

    def __init__(self, base: Sequence[ColumnDefinition], custom: Sequence[ColumnDefinition] = ()):
        self.base = list(base)
        self.custom = list(custom)
        self.columns = self.base + self.custom
        self._by_id = {c.id: c for c in self.columns}
        if len(self._by_id) != len(self.columns):
            raise ValueError("IDs de columna duplicados en el catálogo")

    def __iter__(self):
        return iter(self.columns)

    def __len__(self):
        return len(self.columns)

    def __contains__(self, column_id: str) -> bool:
        return column_id in self._by_id

    def ids(self) -> List[str]:
        return [c.id for c in self.columns]

    def get(self, column_id: str) -> Optional[ColumnDefinition]:
        return self._by_id.get(column_id)

    def default_visible(self, count: int) -> List[str]:
        return [c.id for c in self.base[:count]]
