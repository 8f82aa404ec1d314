# panel_ventas/modules/ventas/router.py
from panel_ventas.modules.tables import build_table_router
from .definition import VENTAS_TABLE

router = build_table_router(VENTAS_TABLE)
