# panel_ventas/modules/contactos/router.py
from panel_ventas.modules.tables import build_table_router
from .definition import CONTACTOS_TABLE, ESTADOS_CONTACTO

router = build_table_router(CONTACTOS_TABLE)

@router.get("/estados")
async def get_estados():
    """Estados válidos para el filtro `estado`"""
    return {"estados": list(ESTADOS_CONTACTO)}
