# panel_ventas/modules/tables/definition.py
from dataclasses import dataclass, field
from typing import Optional, Sequence, Tuple

@dataclass(frozen=True)
class TableDefinition:
    """Parámetros de una instancia de tabla configurable (ventas, contactos...)"""
    entity: str                              # nombre usado en rutas y archivos
    feature: str                             # prefijo de la clave de preferencias
    title: str
    base_columns: Sequence[Tuple[str, str]]  # (id, etiqueta)
    search_fields: Sequence[str]
    fields_path: str                         # ruta de campos, con {cliente_id}
    rows_path: str                           # ruta de filas, con {cliente_id}
    rows_params: Tuple[Tuple[str, str], ...] = ()
    default_sort: str = "id"
    default_order: str = "desc"
    per_page_options: Sequence[int] = (5, 10, 20, 50)
    default_per_page: int = 10
    extra_reserved: Sequence[str] = ()
    equals_filters: Sequence[str] = ()       # filtros de igualdad exacta (p.ej. estado)
    server_export_paths: Sequence[str] = ()  # responden JSON {path}; alternativas ante 404
    server_export_params: Tuple[Tuple[str, str], ...] = ()
    download_export_paths: Sequence[str] = ()  # responden el archivo; alternativas ante 404
    download_export_params: Tuple[Tuple[str, str], ...] = ()
    download_export_query: Sequence[str] = ()  # parámetros de la consulta que se reenvían
    default_visible: Optional[int] = None    # None -> settings.default_visible_columns
    empty_message: str = field(default="No se encontraron resultados.")

    @property
    def reserved_names(self) -> Tuple[str, ...]:
        """Nombres que un campo personalizado no puede usar"""
        return tuple(cid for cid, _ in self.base_columns) + tuple(self.extra_reserved)

    def format_path(self, template: str, cliente_id: str) -> str:
        return template.format(cliente_id=cliente_id)

    def format_params(self, params: Tuple[Tuple[str, str], ...], cliente_id: str) -> dict:
        return {key: value.format(cliente_id=cliente_id) for key, value in params}
