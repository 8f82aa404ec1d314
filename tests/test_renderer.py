from panel_ventas.modules.tables.columns import ColumnCatalog, Row, base_columns
from panel_ventas.modules.tables.renderer import (
    filter_rows, next_sort, paginate, project_columns, render_html, render_page,
    select_columns, sort_rows
)
from panel_ventas.modules.tables.schemas import ColumnPreferences, SortOrder


def make_rows(*payloads):
    return [Row.from_payload(p) for p in payloads]


def ids(rows):
    return [r.fixed["id"] for r in rows]


ROWS = make_rows(
    {"id": 1, "nombre": "Ana", "asesor": "Carlos", "monto": 300, "estado": "ganado"},
    {"id": 2, "nombre": "Bob", "asesor": None, "monto": None, "estado": "perdido"},
    {"id": 3, "nombre": "ana maría", "asesor": "Diana", "monto": 100, "estado": "Ganado"},
    {"id": 4, "nombre": "Zoe", "asesor": "Carlos", "monto": 300, "estado": None},
)


def test_filter_is_case_insensitive_substring():
    assert ids(filter_rows(ROWS, "ANA", ["nombre"])) == [1, 3]
    assert ids(filter_rows(ROWS, "carl", ["nombre", "asesor"])) == [1, 4]
    assert ids(filter_rows(ROWS, "", ["nombre"])) == [1, 2, 3, 4]
    assert filter_rows(ROWS, "nadie", ["nombre"]) == []


def test_filter_by_exact_value():
    assert ids(filter_rows(ROWS, None, [], {"estado": "ganado"})) == [1, 3]
    assert ids(filter_rows(ROWS, None, [], {"estado": "all"})) == [1, 2, 3, 4]
    assert ids(filter_rows(ROWS, "ana", ["nombre"], {"estado": "ganado"})) == [1, 3]


def test_sort_missing_values_last_in_both_directions():
    assert ids(sort_rows(ROWS, "monto", SortOrder.ASC)) == [3, 1, 4, 2]
    assert ids(sort_rows(ROWS, "monto", SortOrder.DESC)) == [1, 4, 3, 2]


def test_sort_is_stable_and_does_not_mutate():
    original = list(ROWS)
    sort_rows(ROWS, "nombre", SortOrder.DESC)
    assert ROWS == original
    # 1 y 4 empatan en monto: conservan su orden relativo
    assert ids(sort_rows(ROWS, "monto", "asc"))[1:3] == [1, 4]


def test_next_sort_toggles_same_column():
    assert next_sort("nombre", SortOrder.ASC, "nombre") == ("nombre", SortOrder.DESC)
    assert next_sort("nombre", SortOrder.DESC, "nombre") == ("nombre", SortOrder.ASC)
    assert next_sort("nombre", SortOrder.DESC, "monto") == ("monto", SortOrder.ASC)


def test_paginate_slices_and_clamps():
    rows = make_rows(*({"id": i} for i in range(1, 24)))
    page = paginate(rows, 3, 10, (5, 10, 20, 50), 10)
    assert ids(page.rows) == [21, 22, 23]
    assert page.total_pages == 3
    assert page.has_prev and not page.has_next

    assert paginate(rows, 99, 10, (5, 10, 20, 50), 10).page == 3
    assert paginate(rows, 1, 7, (5, 10, 20, 50), 10).per_page == 10


def test_paginate_empty_has_one_page():
    page = paginate([], 4, 50, (25, 50, 100), 50)
    assert (page.page, page.total_pages, page.total_results) == (1, 1, 0)
    assert not page.has_next and not page.has_prev


def test_project_columns_follows_order_and_visibility():
    catalog = ColumnCatalog(base_columns([("id", "ID"), ("nombre", "Nombre"), ("asesor", "Asesor")]))
    prefs = ColumnPreferences(visible=["asesor", "id", "fantasma"], order=["asesor", "fantasma", "nombre", "id", "id"])
    ordered, render = project_columns(catalog, prefs)
    assert [c.id for c in ordered] == ["asesor", "nombre", "id"]
    assert [c.id for c in render] == ["asesor", "id"]


def test_select_columns_falls_back_to_projection():
    catalog = ColumnCatalog(base_columns([("id", "ID"), ("nombre", "Nombre")]))
    render = [catalog.get("id")]
    assert [c.id for c in select_columns(catalog, render, ["nombre", "nombre", "x"])] == ["nombre"]
    assert select_columns(catalog, render, ["x"]) == render
    assert select_columns(catalog, render, None) == render


def test_render_page_produces_display_strings():
    columns = base_columns([("nombre", "Nombre"), ("monto", "Monto")])
    table = render_page(columns, paginate(ROWS[:2], 1, 10, (10,), 10), "Sin datos")
    assert table.placeholder is None
    assert table.rows == [{"nombre": "Ana", "monto": "300"}, {"nombre": "Bob", "monto": ""}]


def test_placeholder_when_no_visible_columns():
    table = render_page([], paginate(ROWS, 1, 10, (10,), 10), "No se encontraron resultados.")
    assert table.rows == []
    html = render_html(table)
    assert '<td colspan="1" class="sin-resultados">No se encontraron resultados.</td>' in html


def test_placeholder_spans_all_columns_when_no_rows():
    columns = base_columns([("id", "ID"), ("nombre", "Nombre"), ("asesor", "Asesor")])
    html = render_html(render_page(columns, paginate([], 1, 10, (10,), 10), "Vacío"))
    assert 'colspan="3"' in html
    assert '<th data-column="nombre">Nombre</th>' in html


def test_render_html_escapes_values():
    columns = base_columns([("nombre", "Nombre")])
    rows = make_rows({"nombre": "<b>Ana</b> & co"})
    html = render_html(render_page(columns, paginate(rows, 1, 10, (10,), 10), "", title="Ventas"))
    assert "<td>&lt;b&gt;Ana&lt;/b&gt; &amp; co</td>" in html
    assert "<caption>Ventas</caption>" in html


def test_search_example_keeps_original_order():
    rows = make_rows({"id": 1, "nombre": "Ana"}, {"id": 2, "nombre": "Bob"}, {"id": 3, "nombre": "Ana"})
    assert ids(filter_rows(rows, "ana", ["nombre"])) == [1, 3]


def test_descending_is_reverse_of_ascending_without_ties():
    rows = make_rows({"id": 1, "monto": 5}, {"id": 2, "monto": 1}, {"id": 3, "monto": 9}, {"id": 4})
    asc = ids(sort_rows(rows, "monto", SortOrder.ASC))
    desc = ids(sort_rows(rows, "monto", SortOrder.DESC))
    assert asc[:3] == list(reversed(desc[:3]))
    assert asc[3] == desc[3] == 4
