# panel_ventas/modules/contactos/__init__.py
"""
Módulo de Contactos - Tabla configurable de contactos por cliente

Arquitectura:
- definition.py: Columnas, estados y rutas del backend
- router.py: Endpoints generados con el núcleo de tablas + estados
"""

from .router import router
from .definition import CONTACTOS_TABLE, ESTADOS_CONTACTO

__all__ = [
    "router",
    "CONTACTOS_TABLE",
    "ESTADOS_CONTACTO"
]
