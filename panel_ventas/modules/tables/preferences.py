# panel_ventas/modules/tables/preferences.py
import json
import logging
from typing import List, Optional, Sequence, Tuple

from pydantic import ValidationError

from .columns import ColumnCatalog
from .repository import PreferenceRepository
from .schemas import ColumnPreferences, MoveDirection

logger = logging.getLogger(__name__)

SCHEMA_VERSION = "v1"

def build_scope_key(feature: str, user_scope: str, cliente_id: str) -> str:
    """``<feature>:columns:v1:<usuario|anonymous>:<cliente>``"""
    return f"{feature}:columns:{SCHEMA_VERSION}:{user_scope}:{cliente_id}"

def default_preferences(catalog: ColumnCatalog, visible_count: int) -> ColumnPreferences:
    """Primeras N columnas base visibles; todas las del catálogo en el orden"""
    return ColumnPreferences(
        visible=catalog.default_visible(visible_count),
        order=catalog.ids()
    )

def merge_new_columns(order: Sequence[str], catalog_ids: Sequence[str]) -> List[str]:
    """
    Agregar al final las columnas del catálogo que aún no están en el orden.

    El orden previo no se altera (tampoco se quitan IDs obsoletos) y cada
    columna nueva aparece una sola vez.
    """
    merged = list(order)
    known = set(merged)
    for column_id in catalog_ids:
        if column_id not in known:
            merged.append(column_id)
            known.add(column_id)
    return merged

def move_column(order: Sequence[str], column_id: str, direction: MoveDirection) -> List[str]:
    """Intercambiar una columna con su vecina; sin cambios en los bordes"""
    current = list(order)
    if column_id not in current:
        return current
    idx = current.index(column_id)
    swap_with = idx - 1 if MoveDirection(direction) == MoveDirection.UP else idx + 1
    if swap_with < 0 or swap_with >= len(current):
        return current
    current[idx], current[swap_with] = current[swap_with], current[idx]
    return current

def toggle_visibility(visible: Sequence[str], column_id: str) -> List[str]:
    if column_id in visible:
        return [cid for cid in visible if cid != column_id]
    return list(visible) + [column_id]

class PreferenceStore:
    """Preferencias de columnas de un usuario para un cliente"""

    def __init__(self, repository: PreferenceRepository, scope_key: str):
        self.repository = repository
        self.scope_key = scope_key

    def load(self) -> Optional[ColumnPreferences]:
        """Leer preferencias; ausentes o corruptas devuelven None"""
        try:
            raw = self.repository.get(self.scope_key)
        except Exception as e:
            logger.warning(f"No se pudieron leer preferencias {self.scope_key}: {e}")
            return None

        if raw is None:
            return None

        try:
            data = json.loads(raw)
            if not isinstance(data, dict) or "visible" not in data or "order" not in data:
                raise ValueError("se esperaba {visible, order}")
            return ColumnPreferences(visible=data["visible"], order=data["order"])
        except (ValueError, TypeError, ValidationError) as e:
            logger.warning(f"Preferencias corruptas en {self.scope_key}, se ignoran: {e}")
            return None

    def save(self, visible: Sequence[str], order: Sequence[str]) -> bool:
        """Guardar preferencias; los fallos de escritura no se propagan"""
        raw = json.dumps({"visible": list(visible), "order": list(order)}, ensure_ascii=False)
        try:
            self.repository.put(self.scope_key, raw)
            return True
        except Exception as e:
            logger.warning(f"No se pudieron guardar preferencias {self.scope_key}: {e}")
            return False

    def reset(self, catalog: ColumnCatalog, visible_count: int) -> Tuple[ColumnPreferences, bool]:
        """Restaurar valores por defecto y persistirlos"""
        prefs = default_preferences(catalog, visible_count)
        persisted = self.save(prefs.visible, prefs.order)
        return prefs, persisted

def resolve_preferences(
    store: PreferenceStore,
    catalog: ColumnCatalog,
    visible_count: int,
    include_new_columns: bool = True
) -> ColumnPreferences:
    """
    Preferencias efectivas para renderizar.

    Sin preferencias guardadas se usan las de defecto (sin escribir). Con
    preferencias guardadas, las columnas nuevas del catálogo se agregan al
    final del orden y, si hubo cambios, se persisten.
    """
    stored = store.load()
    if stored is None:
        return default_preferences(catalog, visible_count)

    if not include_new_columns:
        return stored

    merged_order = merge_new_columns(stored.order, catalog.ids())
    if merged_order != stored.order:
        logger.info(f"{len(merged_order) - len(stored.order)} columnas nuevas agregadas a {store.scope_key}")
        store.save(stored.visible, merged_order)
    return ColumnPreferences(visible=stored.visible, order=merged_order)
