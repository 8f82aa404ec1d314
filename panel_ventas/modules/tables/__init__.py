# panel_ventas/modules/tables/__init__.py
"""
Módulo de Tablas Configurables - Núcleo común de ventas y contactos

Este módulo implementa el patrón de tabla configurable por usuario:
- Catálogo de columnas base + campos personalizados del cliente
- Preferencias de columnas visibles y orden por usuario y cliente
- Búsqueda, orden, paginación y proyección en memoria
- Exportación CSV, XLS (HTML) y XLSX, y enlace a exportación del backend

Arquitectura:
- definition.py: Parámetros de cada instancia de tabla
- columns.py: Catálogo de columnas y filas normalizadas
- repository.py: Persistencia de preferencias
- preferences.py: Lectura, guardado y combinación de preferencias
- renderer.py: Filtrado, orden, paginación y HTML
- export.py: Generación de archivos
- service.py: Orquestación de lo anterior
- router.py: Fábrica de endpoints
- schemas.py: Modelos de request/response
"""

from .definition import TableDefinition
from .router import build_table_router, get_preference_repository
from .service import TableService, ExportError
from .repository import PreferenceRepository, SqlPreferenceRepository, InMemoryPreferenceRepository

__all__ = [
    "TableDefinition",
    "build_table_router",
    "get_preference_repository",
    "TableService",
    "ExportError",
    "PreferenceRepository",
    "SqlPreferenceRepository",
    "InMemoryPreferenceRepository"
]
