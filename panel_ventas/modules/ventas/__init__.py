# panel_ventas/modules/ventas/__init__.py
"""
Módulo de Ventas - Tabla configurable de ventas por cliente

- Columnas base de la venta + campos personalizados del cliente
- Búsqueda por nombre, apellido, email, asesor y cliente
- Exportación local y reporte del backend (/api/exportar-excel)

Arquitectura:
- definition.py: Columnas, rutas del backend y opciones de la tabla
- router.py: Endpoints generados con el núcleo de tablas
"""

from .router import router
from .definition import VENTAS_TABLE

__all__ = [
    "router",
    "VENTAS_TABLE"
]
