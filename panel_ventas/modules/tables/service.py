# panel_ventas/modules/tables/service.py
from typing import Awaitable, Callable, Dict, List, Optional, Sequence, Tuple, TypeVar
import logging

from fastapi import HTTPException

from panel_ventas.config.settings import settings
from panel_ventas.core.auth.schemas import CurrentUser
from panel_ventas.shared.services.backend_client import BackendClient, BackendError

from .columns import ColumnCatalog, Row, base_columns, build_custom_columns, normalize_field_definitions
from .definition import TableDefinition
from .export import XLSX_MEDIA_TYPE, ExportFile, build_download_url, build_export, download_filename
from .preferences import (
    PreferenceStore, build_scope_key, move_column, resolve_preferences, toggle_visibility
)
from .renderer import (
    TablePage, filter_rows, paginate, project_columns, render_page, select_columns, sort_rows
)
from .repository import PreferenceRepository
from .schemas import (
    BackendExportFormat, ColumnInfo, ColumnPreferences, ColumnsResponse, ExportFormat, MoveDirection,
    PreferencesResponse, ServerExportResponse, SortOrder
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

class ExportError(HTTPException):
    """Fallo de la exportación generada por el backend"""
    def __init__(self, detail: str, status_code: int = 502):
        super().__init__(status_code=status_code, detail=detail)

class TableService:
    def __init__(
        self,
        definition: TableDefinition,
        repository: PreferenceRepository,
        client: BackendClient,
        user: CurrentUser
    ):
        self.definition = definition
        self.repository = repository
        self.client = client
        self.user = user
        self.visible_count = definition.default_visible or settings.default_visible_columns

    # ==================== CATÁLOGO Y PREFERENCIAS ====================

    def scope_key(self, cliente_id: str) -> str:
        return build_scope_key(self.definition.feature, self.user.scope_id, cliente_id)

    def store(self, cliente_id: str) -> PreferenceStore:
        return PreferenceStore(self.repository, self.scope_key(cliente_id))

    async def load_catalog(self, cliente_id: str) -> Tuple[ColumnCatalog, bool]:
        """
        Catálogo base + campos personalizados del cliente.

        Si el backend falla se registra y se devuelven solo las columnas base.
        """
        base = base_columns(self.definition.base_columns)
        path = self.definition.format_path(self.definition.fields_path, cliente_id)
        try:
            payload = await self.client.get_field_definitions(path, token=self.user.token)
        except BackendError as e:
            logger.warning(f"Campos de {self.definition.entity} no disponibles para cliente {cliente_id}: {e.detail}")
            return ColumnCatalog(base), False

        fields = normalize_field_definitions(payload)
        custom = build_custom_columns(fields, self.definition.reserved_names)
        return ColumnCatalog(base, custom), True

    async def _context(self, cliente_id: str) -> Tuple[ColumnCatalog, bool, PreferenceStore, ColumnPreferences]:
        catalog, loaded = await self.load_catalog(cliente_id)
        store = self.store(cliente_id)
        prefs = resolve_preferences(store, catalog, self.visible_count, include_new_columns=loaded)
        return catalog, loaded, store, prefs

    async def get_columns(self, cliente_id: str) -> ColumnsResponse:
        catalog, loaded, store, prefs = await self._context(cliente_id)
        ordered, _ = project_columns(catalog, prefs)
        visible = set(prefs.visible)
        return ColumnsResponse(
            success=True,
            message=f"{len(catalog)} columnas disponibles",
            entity=self.definition.entity,
            cliente_id=cliente_id,
            scope_key=store.scope_key,
            columns=[
                ColumnInfo(id=c.id, label=c.label, is_custom=c.is_custom, visible=c.id in visible)
                for c in ordered
            ],
            preferences=prefs,
            custom_fields_loaded=loaded
        )

    async def get_preferences(self, cliente_id: str) -> PreferencesResponse:
        _, _, store, prefs = await self._context(cliente_id)
        return PreferencesResponse(success=True, scope_key=store.scope_key, preferences=prefs)

    async def save_preferences(self, cliente_id: str, prefs: ColumnPreferences) -> PreferencesResponse:
        """Confirmar cambios del diálogo de columnas"""
        store = self.store(cliente_id)
        visible = list(dict.fromkeys(prefs.visible))
        order = list(dict.fromkeys(prefs.order))
        persisted = store.save(visible, order)
        return PreferencesResponse(
            success=True,
            message="Preferencias guardadas" if persisted else "No se pudieron guardar las preferencias",
            scope_key=store.scope_key,
            preferences=ColumnPreferences(visible=visible, order=order),
            persisted=persisted
        )

    async def reset_preferences(self, cliente_id: str) -> PreferencesResponse:
        catalog, _ = await self.load_catalog(cliente_id)
        store = self.store(cliente_id)
        prefs, persisted = store.reset(catalog, self.visible_count)
        return PreferencesResponse(
            success=True,
            message="Preferencias restablecidas",
            scope_key=store.scope_key,
            preferences=prefs,
            persisted=persisted
        )

    @staticmethod
    def draft_move(draft: ColumnPreferences, column_id: str, direction: MoveDirection) -> ColumnPreferences:
        return ColumnPreferences(visible=list(draft.visible), order=move_column(draft.order, column_id, direction))

    @staticmethod
    def draft_toggle(draft: ColumnPreferences, column_id: str) -> ColumnPreferences:
        return ColumnPreferences(visible=toggle_visibility(draft.visible, column_id), order=list(draft.order))

    # ==================== FILAS ====================

    async def fetch_rows(self, cliente_id: str) -> Tuple[List[Row], List[str]]:
        """Filas del backend; ante un fallo se devuelve una lista vacía y un aviso"""
        path = self.definition.format_path(self.definition.rows_path, cliente_id)
        params = self.definition.format_params(self.definition.rows_params, cliente_id)
        try:
            payload = await self.client.get_rows(path, params=params, token=self.user.token)
        except BackendError as e:
            logger.error(f"Error cargando {self.definition.entity} del cliente {cliente_id}: {e.detail}")
            return [], [f"No se pudieron cargar los datos: {e.detail}"]
        return [Row.from_payload(item) for item in payload], []

    def _sort_key(self, catalog: ColumnCatalog, sort_by: Optional[str]) -> str:
        if sort_by and sort_by in catalog:
            return sort_by
        return self.definition.default_sort

    async def _prepared_rows(
        self,
        cliente_id: str,
        catalog: ColumnCatalog,
        search: Optional[str],
        sort_by: Optional[str],
        sort_order: Optional[SortOrder],
        filters: Optional[Dict[str, Optional[str]]]
    ) -> Tuple[List[Row], str, SortOrder, List[str]]:
        rows, warnings = await self.fetch_rows(cliente_id)
        equals = {k: v for k, v in (filters or {}).items() if k in self.definition.equals_filters}
        filtered = filter_rows(rows, search, self.definition.search_fields, equals)
        key = self._sort_key(catalog, sort_by)
        order = SortOrder(sort_order or self.definition.default_order)
        return sort_rows(filtered, key, order), key, order, warnings

    async def get_page(
        self,
        cliente_id: str,
        search: Optional[str] = None,
        sort_by: Optional[str] = None,
        sort_order: Optional[SortOrder] = None,
        page: int = 1,
        per_page: Optional[int] = None,
        filters: Optional[Dict[str, Optional[str]]] = None
    ) -> Tuple[TablePage, str, SortOrder]:
        catalog, loaded, _, prefs = await self._context(cliente_id)
        rows, key, order, warnings = await self._prepared_rows(
            cliente_id, catalog, search, sort_by, sort_order, filters
        )
        page_slice = paginate(
            rows,
            page,
            per_page or self.definition.default_per_page,
            self.definition.per_page_options,
            self.definition.default_per_page
        )
        _, render_columns = project_columns(catalog, prefs)
        table = render_page(render_columns, page_slice, self.definition.empty_message, self.definition.title)
        if not loaded:
            warnings.append("Campos personalizados no disponibles")
        table.warnings = warnings
        return table, key, order

    # ==================== EXPORTACIÓN ====================

    async def export(
        self,
        cliente_id: str,
        fmt: ExportFormat,
        columns: Optional[Sequence[str]] = None,
        search: Optional[str] = None,
        sort_by: Optional[str] = None,
        sort_order: Optional[SortOrder] = None,
        filters: Optional[Dict[str, Optional[str]]] = None
    ) -> ExportFile:
        """Exportar todas las filas filtradas (no solo la página actual)"""
        catalog, _, _, prefs = await self._context(cliente_id)
        rows, _, _, _ = await self._prepared_rows(cliente_id, catalog, search, sort_by, sort_order, filters)
        _, render_columns = project_columns(catalog, prefs)
        chosen = select_columns(catalog, render_columns, columns)
        logger.info(f"Exportando {len(rows)} {self.definition.entity} ({fmt}) del cliente {cliente_id}")
        return build_export(
            fmt, chosen, rows, self.definition.entity, cliente_id,
            title=f"{self.definition.title} {cliente_id}"
        )

    async def _first_available(self, paths: Sequence[str], cliente_id: str, fetch: Callable[[str], Awaitable[T]]) -> T:
        """Probar las rutas en orden; un 404 pasa a la siguiente"""
        for path in paths:
            try:
                return await fetch(self.definition.format_path(path, cliente_id))
            except BackendError as e:
                if e.upstream_status == 404:
                    logger.info(f"Ruta de exportación {path} no existe, probando alternativa")
                    continue
                raise ExportError(f"Error al exportar: {e.detail}", status_code=e.status_code)
        raise ExportError("Error al exportar: ruta de exportación no encontrada")

    async def server_export(self, cliente_id: str) -> ServerExportResponse:
        """Solicitar el reporte completo al backend y devolver el enlace de descarga"""
        if not self.definition.server_export_paths:
            raise HTTPException(404, detail=f"Exportación de servidor no disponible para {self.definition.entity}")

        params = self.definition.format_params(self.definition.server_export_params, cliente_id)
        data = await self._first_available(
            self.definition.server_export_paths,
            cliente_id,
            lambda path: self.client.request_export(path, params=params, token=self.user.token)
        )
        if not data.get("path"):
            raise ExportError("No se recibió la ruta del archivo")

        file_path = str(data["path"])
        return ServerExportResponse(
            success=True,
            message=data.get("message") or "Archivo exportado correctamente",
            download_url=build_download_url(self.client.base_url, file_path, self.user.token),
            filename=download_filename(file_path, f"{self.definition.entity}.xlsx"),
            records=data.get("records"),
            backend_response=data
        )

    async def download_export(
        self,
        cliente_id: str,
        search: Optional[str] = None,
        filters: Optional[Dict[str, Optional[str]]] = None,
        backend_format: Optional[BackendExportFormat] = None
    ) -> ExportFile:
        """
        Archivo generado por el backend, reenviado tal cual.

        Se conservan el tipo de contenido y el nombre que envía el backend.
        """
        if not self.definition.download_export_paths:
            raise HTTPException(404, detail=f"Descarga del backend no disponible para {self.definition.entity}")

        params = self.definition.format_params(self.definition.download_export_params, cliente_id)
        fmt = BackendExportFormat(backend_format) if backend_format else None
        query = {"search": search, "format": fmt.value if fmt else None, **(filters or {})}
        params.update({
            key: value for key, value in query.items()
            if key in self.definition.download_export_query and value not in (None, "", "all")
        })

        backend_file = await self._first_available(
            self.definition.download_export_paths,
            cliente_id,
            lambda path: self.client.download(path, params=params, token=self.user.token, accept=XLSX_MEDIA_TYPE)
        )
        ext = "csv" if fmt == BackendExportFormat.CSV else "xlsx"
        logger.info(f"Exportación del backend de {self.definition.entity} para cliente {cliente_id}: {len(backend_file.content)} bytes")
        return ExportFile(
            content=backend_file.content,
            media_type=backend_file.media_type or XLSX_MEDIA_TYPE,
            filename=f"{self.definition.entity}.{ext}",
            disposition=backend_file.content_disposition
        )
