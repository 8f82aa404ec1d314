# panel_ventas/modules/tables/router.py
import io
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import HTMLResponse, StreamingResponse
from sqlalchemy.orm import Session

from panel_ventas.config.database import get_db
from panel_ventas.config.settings import settings
from panel_ventas.core.auth.dependencies import get_current_user
from panel_ventas.core.auth.schemas import CurrentUser
from panel_ventas.shared.services.backend_client import BackendClient, get_backend_client

from .definition import TableDefinition
from .renderer import render_html
from .repository import InMemoryPreferenceRepository, PreferenceRepository, SqlPreferenceRepository
from .schemas import (
    BackendExportFormat, ColumnInfo, ColumnPreferences, ColumnsResponse, DraftMoveRequest, DraftToggleRequest,
    ExportFormat, PaginationInfo, PreferencesResponse, ServerExportResponse, SortOrder,
    TablePageResponse
)
from .service import TableService

logger = logging.getLogger(__name__)

_memory_repository = InMemoryPreferenceRepository()

def get_preference_repository(db: Session = Depends(get_db)) -> PreferenceRepository:
    """Repositorio de preferencias según configuración"""
    if settings.preferences_backend == "memory":
        return _memory_repository
    return SqlPreferenceRepository(db)

def build_table_router(definition: TableDefinition) -> APIRouter:
    """Endpoints de una tabla configurable"""
    router = APIRouter()

    def get_service(
        current_user: CurrentUser = Depends(get_current_user),
        repository: PreferenceRepository = Depends(get_preference_repository),
        client: BackendClient = Depends(get_backend_client)
    ) -> TableService:
        return TableService(definition, repository, client, current_user)

    def extra_filters(estado: Optional[str] = Query(None, description="Filtro exacto por estado")) -> dict:
        return {"estado": estado}

    @router.get("/{cliente_id}/columns", response_model=ColumnsResponse)
    async def get_columns(cliente_id: str, service: TableService = Depends(get_service)):
        """
        Catálogo de columnas del cliente con las preferencias del usuario

        **Incluye:**
        - Columnas base y personalizadas en el orden del usuario
        - Marca de visibilidad por columna
        - Si los campos personalizados se pudieron cargar
        """
        return await service.get_columns(cliente_id)

    @router.get("/{cliente_id}/preferences", response_model=PreferencesResponse)
    async def get_preferences(cliente_id: str, service: TableService = Depends(get_service)):
        """Preferencias efectivas (guardadas o por defecto)"""
        return await service.get_preferences(cliente_id)

    @router.put("/{cliente_id}/preferences", response_model=PreferencesResponse)
    async def save_preferences(
        cliente_id: str,
        prefs: ColumnPreferences,
        service: TableService = Depends(get_service)
    ):
        """Confirmar los cambios del diálogo de gestión de columnas"""
        return await service.save_preferences(cliente_id, prefs)

    @router.post("/{cliente_id}/preferences/reset", response_model=PreferencesResponse)
    async def reset_preferences(cliente_id: str, service: TableService = Depends(get_service)):
        """Restablecer columnas visibles y orden por defecto"""
        return await service.reset_preferences(cliente_id)

    @router.post("/{cliente_id}/preferences/draft/move", response_model=ColumnPreferences)
    async def move_column(cliente_id: str, request: DraftMoveRequest):
        """Mover una columna en el borrador del diálogo (no se guarda)"""
        draft = ColumnPreferences(visible=request.visible, order=request.order)
        return TableService.draft_move(draft, request.column_id, request.direction)

    @router.post("/{cliente_id}/preferences/draft/toggle", response_model=ColumnPreferences)
    async def toggle_column(cliente_id: str, request: DraftToggleRequest):
        """Mostrar u ocultar una columna en el borrador del diálogo (no se guarda)"""
        draft = ColumnPreferences(visible=request.visible, order=request.order)
        return TableService.draft_toggle(draft, request.column_id)

    @router.get("/{cliente_id}/rows", response_model=TablePageResponse)
    async def get_rows(
        cliente_id: str,
        search: str = Query("", description="Texto a buscar"),
        sort_by: Optional[str] = Query(None, description="Columna de ordenamiento"),
        sort_order: Optional[SortOrder] = Query(None),
        page: int = Query(1, ge=1),
        per_page: Optional[int] = Query(None, description=f"Opciones: {list(definition.per_page_options)}"),
        filters: dict = Depends(extra_filters),
        service: TableService = Depends(get_service)
    ):
        """
        Página de la tabla ya filtrada, ordenada y proyectada

        Si el usuario ocultó todas las columnas o no hay resultados se
        devuelve `placeholder` en lugar de filas.
        """
        table, key, order = await service.get_page(
            cliente_id, search, sort_by, sort_order, page, per_page, filters
        )
        page_slice = table.slice
        return TablePageResponse(
            success=True,
            message=f"{page_slice.total_results} resultados",
            entity=definition.entity,
            cliente_id=cliente_id,
            columns=[ColumnInfo(id=c.id, label=c.label, is_custom=c.is_custom, visible=True) for c in table.columns],
            rows=table.rows,
            pagination=PaginationInfo(
                current_page=page_slice.page,
                total_pages=page_slice.total_pages,
                total_results=page_slice.total_results,
                per_page=page_slice.per_page,
                per_page_options=list(definition.per_page_options),
                has_next=page_slice.has_next,
                has_prev=page_slice.has_prev
            ),
            sort_by=key,
            sort_order=order,
            search=search,
            placeholder=table.placeholder,
            warnings=table.warnings
        )

    @router.get("/{cliente_id}/table", response_class=HTMLResponse)
    async def get_table_html(
        cliente_id: str,
        search: str = Query(""),
        sort_by: Optional[str] = Query(None),
        sort_order: Optional[SortOrder] = Query(None),
        page: int = Query(1, ge=1),
        per_page: Optional[int] = Query(None),
        filters: dict = Depends(extra_filters),
        service: TableService = Depends(get_service)
    ):
        """Misma página que `/rows` renderizada como `<table>`"""
        table, _, _ = await service.get_page(cliente_id, search, sort_by, sort_order, page, per_page, filters)
        return HTMLResponse(render_html(table))

    @router.get("/{cliente_id}/export")
    async def export_table(
        cliente_id: str,
        fmt: ExportFormat = Query(ExportFormat.CSV, alias="format", description="csv, xls o xlsx"),
        columns: Optional[List[str]] = Query(None, description="Columnas a exportar; por defecto las visibles"),
        search: str = Query(""),
        sort_by: Optional[str] = Query(None),
        sort_order: Optional[SortOrder] = Query(None),
        filters: dict = Depends(extra_filters),
        service: TableService = Depends(get_service)
    ):
        """
        Exportar la tabla sin pasar por el backend

        **Formatos:**
        - csv: texto UTF-8 separado por comas
        - xls: tabla HTML compatible con Excel
        - xlsx: libro de Excel real
        """
        try:
            export_file = await service.export(
                cliente_id, fmt, columns, search, sort_by, sort_order, filters
            )
        except HTTPException:
            raise
        except Exception as e:
            logger.exception("Error inesperado exportando tabla")
            raise HTTPException(status_code=500, detail=f"Error exportando: {str(e)}")

        return StreamingResponse(
            io.BytesIO(export_file.content),
            media_type=export_file.media_type,
            headers={"Content-Disposition": export_file.content_disposition}
        )

    @router.get("/{cliente_id}/export/server", response_model=ServerExportResponse)
    async def export_server(cliente_id: str, service: TableService = Depends(get_service)):
        """Reporte completo generado por el backend: devuelve el enlace de descarga"""
        return await service.server_export(cliente_id)

    @router.get("/{cliente_id}/export/server/download")
    async def download_server_export(
        cliente_id: str,
        search: str = Query(""),
        backend_format: Optional[BackendExportFormat] = Query(None, alias="format", description="excel o csv"),
        filters: dict = Depends(extra_filters),
        service: TableService = Depends(get_service)
    ):
        """
        Archivo generado por el backend, reenviado con su tipo y nombre

        Ventas prueba `/api/ventas/exportar` y, si no existe, `/api/exportar-excel`.
        Contactos reenvía `search`, `estado` y `format`.
        """
        export_file = await service.download_export(cliente_id, search, filters, backend_format)
        return StreamingResponse(
            io.BytesIO(export_file.content),
            media_type=export_file.media_type,
            headers={
                "Content-Disposition": export_file.content_disposition,
                "Cache-Control": "no-store"
            }
        )

    @router.get("/health")
    async def table_health(client: BackendClient = Depends(get_backend_client)):
        """Health check del módulo y del backend de ventas"""
        backend_ok = await client.health_check()
        return {
            "service": definition.entity,
            "status": "healthy",
            "backend": "healthy" if backend_ok else "unavailable",
            "version": "1.0.0",
            "features": [
                "Columnas configurables por usuario",
                "Campos personalizados por cliente",
                "Búsqueda, orden y paginación",
                "Exportación CSV, XLS y XLSX",
                "Exportación desde el backend"
            ]
        }

    return router
