import csv
import io

from openpyxl import load_workbook

from panel_ventas.modules.tables.columns import Row, base_columns, build_custom_columns, normalize_field_definitions
from panel_ventas.modules.tables.export import (
    XLSX_MEDIA_TYPE, build_download_url, build_export, download_filename, export_filename, to_csv, to_html_xls,
    to_xlsx
)
from panel_ventas.modules.tables.schemas import ExportFormat

COLUMNS = base_columns([("id", "ID"), ("nombre", "Nombre")]) + build_custom_columns(
    normalize_field_definitions([{"id": "beca", "label": "Beca", "type": "number"}]), ()
)

ROWS = [
    Row.from_payload({"id": 1, "nombre": 'Ana "la"\nLópez', "campos_adicionales": {"beca": 50}}),
    Row.from_payload({"id": 2, "nombre": "a <b> & c", "campos_adicionales": {}}),
]


def test_csv_quotes_every_field_and_flattens_newlines():
    assert to_csv(COLUMNS, ROWS) == (
        '"ID","Nombre","Beca"\n'
        '"1","Ana ""la"" López","50"\n'
        '"2","a <b> & c",""\n'
    )


def test_csv_with_no_rows_has_only_header():
    assert to_csv(COLUMNS, []) == '"ID","Nombre","Beca"\n'


def test_html_xls_escapes_markup():
    html = to_html_xls(COLUMNS, ROWS, title="Ventas")
    assert "<th>Nombre</th>" in html
    assert "<td>a &lt;b&gt; &amp; c</td>" in html
    assert '<meta charset="utf-8">' in html
    assert html.count("<tr>") == 3


def test_export_filename_includes_tenant():
    assert export_filename("ventas", "anahuac", ExportFormat.CSV) == "ventas_anahuac_personalizado.csv"
    assert export_filename("contactos", "5", "xls") == "contactos_5_personalizado.xls"
    assert export_filename("ventas", "a/b c", ExportFormat.XLSX) == "ventas_a_b_c_personalizado.xlsx"


def test_build_export_media_types():
    csv_file = build_export(ExportFormat.CSV, COLUMNS, ROWS, "ventas", "anahuac")
    assert csv_file.media_type.startswith("text/csv")
    assert csv_file.content.decode("utf-8").startswith('"ID"')
    assert csv_file.content_disposition == 'attachment; filename="ventas_anahuac_personalizado.csv"'

    xls_file = build_export(ExportFormat.XLS, COLUMNS, ROWS, "ventas", "anahuac")
    assert xls_file.media_type == "application/vnd.ms-excel"
    assert xls_file.filename.endswith(".xls")


def test_build_export_xlsx_workbook():
    export = build_export(ExportFormat.XLSX, COLUMNS, ROWS, "ventas", "anahuac", title="Registro de Ventas anahuac")
    assert export.media_type == XLSX_MEDIA_TYPE

    ws = load_workbook(io.BytesIO(export.content)).active
    assert ws.title == "Registro de Ventas anahuac"
    assert [c.value for c in ws[1]] == ["ID", "Nombre", "Beca"]
    assert ws[1][0].font.bold
    assert [c.value for c in ws[2]] == ["1", 'Ana "la"\nLópez', "50"]
    assert ws.max_row == 3


def test_download_url_appends_token():
    assert build_download_url("http://backend.test/", "/exports/v.xlsx") == "http://backend.test/exports/v.xlsx"
    assert build_download_url("http://backend.test", "exports/v.xlsx", "abc") == "http://backend.test/exports/v.xlsx?token=abc"
    assert build_download_url("http://backend.test", "exports/v.xlsx?d=1", "a.b+c") == (
        "http://backend.test/exports/v.xlsx?d=1&token=a.b%2Bc"
    )


def test_download_filename():
    assert download_filename("exports/ventas_anahuac.xlsx", "ventas.xlsx") == "ventas_anahuac.xlsx"
    assert download_filename("exports/", "ventas.xlsx") == "exports"
    assert download_filename("", "ventas.xlsx") == "ventas.xlsx"


def test_csv_reparses_to_flattened_values():
    rows = [Row.from_payload({"id": i, "nombre": f'uno, "dos"\r\ntres {i}'}) for i in range(3)]
    text = to_csv(COLUMNS[:2], rows)
    assert len(text.splitlines()) == 4
    parsed = list(csv.reader(io.StringIO(text)))
    assert parsed[1] == ["0", 'uno, "dos" tres 0']


def test_xlsx_keeps_formula_like_text_as_string():
    columns = base_columns([("nombre", "Nombre")])
    rows = [Row.from_payload({"nombre": "=1+1"}), Row.from_payload({"nombre": '=HYPERLINK("http://x")'})]
    ws = load_workbook(io.BytesIO(to_xlsx(columns, rows))).active
    assert ws["A2"].data_type == "s"
    assert ws["A2"].value == "=1+1"
    assert ws["A3"].value == '=HYPERLINK("http://x")'


def test_xlsx_drops_control_characters():
    columns = base_columns([("nombre", "Nombre\x07")])
    rows = [Row.from_payload({"nombre": "Ana\x0bLópez"})]
    ws = load_workbook(io.BytesIO(to_xlsx(columns, rows))).active
    assert ws["A1"].value == "Nombre"
    assert ws["A2"].value == "AnaLópez"
