# panel_ventas/api/v1/router.py
from fastapi import APIRouter
from panel_ventas.modules.ventas import router as ventas_router
from panel_ventas.modules.contactos import router as contactos_router


# Crear router principal de la API v1
api_router = APIRouter()

# ==================== TABLAS CONFIGURABLES ====================

api_router.include_router(
    ventas_router,
    prefix="/ventas",
    tags=["Ventas"]
)

api_router.include_router(
    contactos_router,
    prefix="/contactos",
    tags=["Contactos"]
)

# ==================== ENDPOINT RAÍZ ====================

@api_router.get("/")
async def api_root():
    """Root endpoint de la API"""
    return {
        "message": "Panel de Ventas API v1",
        "version": "1.0.0",
        "status": "active",
        "docs": "/docs",
        "available_endpoints": {
            "ventas": "/api/v1/ventas/{cliente_id}/rows",
            "contactos": "/api/v1/contactos/{cliente_id}/rows"
        },
        "table_operations": [
            "columns",
            "preferences",
            "preferences/reset",
            "preferences/draft/move",
            "preferences/draft/toggle",
            "rows",
            "table",
            "export",
            "export/server",
            "export/server/download"
        ]
    }
