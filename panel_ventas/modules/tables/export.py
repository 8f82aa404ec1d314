# panel_ventas/modules/tables/export.py
import csv
import io
import re
from dataclasses import dataclass
from html import escape
from typing import Optional, Sequence
from urllib.parse import quote

from openpyxl import Workbook
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.styles import Font

from .columns import ColumnDefinition, Row
from .schemas import ExportFormat

NEWLINES = re.compile(r"[\r\n]+")

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

@dataclass
class ExportFile:
    content: bytes
    media_type: str
    filename: str
    disposition: Optional[str] = None   # tal como lo envió el backend

    @property
    def content_disposition(self) -> str:
        return self.disposition or f"attachment; filename=\"{self.filename}\""

def flatten(value: str) -> str:
    """Saltos de línea a espacios: una fila por línea en el CSV"""
    return NEWLINES.sub(" ", value)

def export_filename(entity: str, cliente_id: str, fmt: ExportFormat) -> str:
    tenant = re.sub(r"[^\w\-]+", "_", str(cliente_id)).strip("_") or "cliente"
    return f"{entity}_{tenant}_personalizado.{ExportFormat(fmt).value}"

def to_csv(columns: Sequence[ColumnDefinition], rows: Sequence[Row]) -> str:
    """Encabezado + una línea por fila, todos los campos entre comillas"""
    buf = io.StringIO()
    writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow([flatten(c.label) for c in columns])
    for row in rows:
        writer.writerow([flatten(c.accessor(row)) for c in columns])
    return buf.getvalue()

def to_html_xls(columns: Sequence[ColumnDefinition], rows: Sequence[Row], title: str = "") -> str:
    """Tabla HTML que las hojas de cálculo abren como .xls"""
    head = "".join(f"<th>{escape(c.label, quote=False)}</th>" for c in columns)
    body = "".join(
        "<tr>" + "".join(f"<td>{escape(c.accessor(row), quote=False)}</td>" for c in columns) + "</tr>"
        for row in rows
    )
    return (
        "<html><head><meta charset=\"utf-8\">"
        f"<title>{escape(title, quote=False)}</title></head><body>"
        f"<table><thead><tr>{head}</tr></thead><tbody>{body}</tbody></table>"
        "</body></html>"
    )

def _text_cell(ws, row: int, column: int, text: str):
    """Celda de texto literal: sin fórmulas y sin caracteres de control"""
    cell = ws.cell(row=row, column=column)
    cell.value = ILLEGAL_CHARACTERS_RE.sub("", text)
    # Un valor que empieza con "=" se guardaría como fórmula
    cell.data_type = "s"
    return cell

def to_xlsx(columns: Sequence[ColumnDefinition], rows: Sequence[Row], sheet_name: str = "Datos") -> bytes:
    wb = Workbook()
    ws = wb.active
    # Excel limita el título de la hoja a 31 caracteres
    ws.title = (re.sub(r"[\[\]\*\?/\\:]", " ", sheet_name).strip() or "Datos")[:31]
    for col, column in enumerate(columns, start=1):
        _text_cell(ws, 1, col, column.label).font = Font(bold=True)
    for row_idx, row in enumerate(rows, start=2):
        for col, column in enumerate(columns, start=1):
            _text_cell(ws, row_idx, col, column.accessor(row))

    out = io.BytesIO()
    wb.save(out)
    return out.getvalue()

def build_export(
    fmt: ExportFormat,
    columns: Sequence[ColumnDefinition],
    rows: Sequence[Row],
    entity: str,
    cliente_id: str,
    title: str = ""
) -> ExportFile:
    fmt = ExportFormat(fmt)
    filename = export_filename(entity, cliente_id, fmt)
    if fmt == ExportFormat.CSV:
        return ExportFile(to_csv(columns, rows).encode("utf-8"), "text/csv; charset=utf-8", filename)
    if fmt == ExportFormat.XLS:
        return ExportFile(to_html_xls(columns, rows, title).encode("utf-8"), "application/vnd.ms-excel", filename)
    return ExportFile(to_xlsx(columns, rows, title or entity), XLSX_MEDIA_TYPE, filename)

def build_download_url(base_url: str, path: str, token: Optional[str] = None) -> str:
    """``<API_BASE>/<path>`` con ``token`` agregado como parámetro de consulta"""
    url = f"{base_url.rstrip('/')}/{path.lstrip('/')}"
    if token:
        separator = "&" if "?" in url else "?"
        url = f"{url}{separator}token={quote(token, safe='')}"
    return url

def download_filename(path: str, fallback: str) -> str:
    name = path.split("?", 1)[0].rstrip("/").split("/")[-1]
    return name or fallback
