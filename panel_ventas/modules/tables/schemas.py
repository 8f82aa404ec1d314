# panel_ventas/modules/tables/schemas.py
from pydantic import BaseModel, Field, validator
from typing import List, Optional, Dict, Any
from enum import Enum

from panel_ventas.shared.schemas.common import BaseResponse

class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"

class ExportFormat(str, Enum):
    CSV = "csv"
    XLS = "xls"      # tabla HTML servida como Excel
    XLSX = "xlsx"    # OOXML real

class BackendExportFormat(str, Enum):
    """Formatos que acepta la exportación de contactos del backend"""
    EXCEL = "excel"
    CSV = "csv"

class MoveDirection(str, Enum):
    UP = "up"
    DOWN = "down"

class FieldDefinition(BaseModel):
    """Campo personalizado definido por el cliente en el backend"""
    id: str = Field(..., description="Identificador del campo")
    label: Optional[str] = Field(None, description="Etiqueta visible")
    type: str = Field("text", description="text, number, email, tel, date, select...")
    options: Optional[List[str]] = None
    order: Optional[int] = None

    @validator('id', pre=True)
    def coerce_id(cls, v):
        return str(v).strip() if v is not None else v

    @validator('type', pre=True)
    def default_type(cls, v):
        return v or "text"

class ColumnPreferences(BaseModel):
    """Columnas visibles y orden de izquierda a derecha"""
    visible: List[str] = Field(default_factory=list)
    order: List[str] = Field(default_factory=list)

class ColumnInfo(BaseModel):
    id: str
    label: str
    is_custom: bool = False
    visible: bool = False

class ColumnsResponse(BaseResponse):
    entity: str
    cliente_id: str
    scope_key: str
    columns: List[ColumnInfo]
    preferences: ColumnPreferences
    custom_fields_loaded: bool

class PreferencesResponse(BaseResponse):
    scope_key: str
    preferences: ColumnPreferences
    persisted: bool = True

class DraftMoveRequest(ColumnPreferences):
    column_id: str
    direction: MoveDirection

class DraftToggleRequest(ColumnPreferences):
    column_id: str

class PaginationInfo(BaseModel):
    current_page: int
    total_pages: int
    total_results: int
    per_page: int
    per_page_options: List[int]
    has_next: bool
    has_prev: bool

class TablePageResponse(BaseResponse):
    entity: str
    cliente_id: str
    columns: List[ColumnInfo]
    rows: List[Dict[str, str]]
    pagination: PaginationInfo
    sort_by: str
    sort_order: SortOrder
    search: str = ""
    placeholder: Optional[str] = None
    warnings: List[str] = Field(default_factory=list)

class ServerExportResponse(BaseResponse):
    download_url: str
    filename: str
    records: Optional[int] = None
    backend_response: Dict[str, Any] = Field(default_factory=dict)
