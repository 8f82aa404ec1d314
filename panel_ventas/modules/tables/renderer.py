# panel_ventas/modules/tables/renderer.py
"""Filtrado, orden, paginación y proyección de columnas en memoria.

Ninguna función modifica la lista de filas recibida: todas devuelven listas
nuevas.
"""
import math
from dataclasses import dataclass, field
from functools import cmp_to_key
from html import escape
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from .columns import ColumnCatalog, ColumnDefinition, Row
from .schemas import ColumnPreferences, SortOrder

def filter_rows(
    rows: Sequence[Row],
    term: Optional[str],
    fields: Sequence[str],
    equals: Optional[Mapping[str, Optional[str]]] = None
) -> List[Row]:
    """Búsqueda por subcadena sin mayúsculas en cualquiera de `fields`"""
    needle = (term or "").strip().lower()
    exact = {
        key: str(value).lower()
        for key, value in (equals or {}).items()
        if value not in (None, "", "all")
    }

    result = []
    for row in rows:
        if exact and any(str(row.value(key) or "").lower() != value for key, value in exact.items()):
            continue
        if needle and not any(
            needle in str(row.value(name)).lower()
            for name in fields
            if row.value(name) is not None
        ):
            continue
        result.append(row)
    return result

def _compare(a, b) -> int:
    try:
        if a < b:
            return -1
        if a > b:
            return 1
        return 0
    except TypeError:
        # Tipos no comparables entre sí se tratan como iguales
        return 0

def sort_rows(rows: Sequence[Row], key: str, order: SortOrder = SortOrder.ASC) -> List[Row]:
    """
    Orden estable por el valor crudo de una columna.

    Las filas sin valor conservan su orden relativo y quedan al final en
    ambas direcciones. La tabla del dashboard las trataba como iguales a
    cualquier otro valor (comparación 0), lo que las dejaba intercaladas.
    """
    present = [row for row in rows if row.value(key) is not None]
    missing = [row for row in rows if row.value(key) is None]
    present.sort(
        key=cmp_to_key(lambda a, b: _compare(a.value(key), b.value(key))),
        reverse=SortOrder(order) == SortOrder.DESC
    )
    return present + missing

def next_sort(current_key: str, current_order: SortOrder, clicked: str) -> Tuple[str, SortOrder]:
    """Clic en encabezado: misma columna alterna el sentido, otra empieza en asc"""
    if clicked == current_key:
        flipped = SortOrder.DESC if SortOrder(current_order) == SortOrder.ASC else SortOrder.ASC
        return current_key, flipped
    return clicked, SortOrder.ASC

@dataclass
class PageSlice:
    rows: List[Row]
    page: int
    per_page: int
    total_pages: int
    total_results: int

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_prev(self) -> bool:
        return self.page > 1

def paginate(
    rows: Sequence[Row],
    page: int,
    per_page: int,
    allowed: Sequence[int],
    default_per_page: int
) -> PageSlice:
    """Cortar en páginas de tamaño fijo; página fuera de rango se ajusta"""
    size = per_page if per_page in allowed else default_per_page
    total = len(rows)
    total_pages = max(1, math.ceil(total / size))
    current = min(max(1, page), total_pages)
    start = (current - 1) * size
    return PageSlice(
        rows=list(rows[start:start + size]),
        page=current,
        per_page=size,
        total_pages=total_pages,
        total_results=total
    )

def project_columns(
    catalog: ColumnCatalog,
    prefs: ColumnPreferences
) -> Tuple[List[ColumnDefinition], List[ColumnDefinition]]:
    """(columnas ordenadas, columnas a renderizar) según las preferencias"""
    ordered = []
    seen = set()
    for column_id in prefs.order:
        column = catalog.get(column_id)
        if column is None or column_id in seen:
            continue
        seen.add(column_id)
        ordered.append(column)
    visible = set(prefs.visible)
    return ordered, [c for c in ordered if c.id in visible]

def select_columns(
    catalog: ColumnCatalog,
    render_columns: Sequence[ColumnDefinition],
    chosen: Optional[Sequence[str]] = None
) -> List[ColumnDefinition]:
    """Columnas elegidas por el usuario (en su orden) o la proyección actual"""
    if not chosen:
        return list(render_columns)
    picked = []
    for column_id in dict.fromkeys(chosen):
        column = catalog.get(column_id)
        if column is not None:
            picked.append(column)
    return picked or list(render_columns)

def cells(columns: Sequence[ColumnDefinition], row: Row) -> Dict[str, str]:
    return {column.id: column.accessor(row) for column in columns}

@dataclass
class TablePage:
    columns: List[ColumnDefinition]
    rows: List[Dict[str, str]]
    slice: PageSlice
    placeholder: Optional[str] = None
    title: str = ""
    warnings: List[str] = field(default_factory=list)

def render_page(
    columns: Sequence[ColumnDefinition],
    page: PageSlice,
    empty_message: str,
    title: str = ""
) -> TablePage:
    if not columns or not page.rows:
        return TablePage(columns=list(columns), rows=[], slice=page, placeholder=empty_message, title=title)
    return TablePage(
        columns=list(columns),
        rows=[cells(columns, row) for row in page.rows],
        slice=page,
        title=title
    )

def render_html(table: TablePage) -> str:
    """Fragmento ``<table>``; sin filas o sin columnas muestra una fila aviso"""
    header = "".join(f"<th data-column=\"{escape(c.id)}\">{escape(c.label)}</th>" for c in table.columns)
    lines = ["<table class=\"tabla-configurable\">"]
    if table.title:
        lines.append(f"<caption>{escape(table.title)}</caption>")
    lines.append(f"<thead><tr>{header}</tr></thead>")
    lines.append("<tbody>")
    if table.placeholder is not None:
        colspan = max(1, len(table.columns))
        lines.append(f"<tr><td colspan=\"{colspan}\" class=\"sin-resultados\">{escape(table.placeholder)}</td></tr>")
    else:
        for row in table.rows:
            tds = "".join(f"<td>{escape(row.get(c.id, ''))}</td>" for c in table.columns)
            lines.append(f"<tr>{tds}</tr>")
    lines.append("</tbody>")
    lines.append("</table>")
    return "\n".join(lines)
