# panel_ventas/modules/tables/repository.py
from abc import ABC, abstractmethod
from typing import Dict, Optional
import logging

from sqlalchemy.orm import Session

from panel_ventas.shared.database.models import ColumnPreference

logger = logging.getLogger(__name__)

class PreferenceRepository(ABC):
    """Almacén clave/valor de preferencias; guarda el JSON tal cual"""

    @abstractmethod
    def get(self, scope_key: str) -> Optional[str]:
        ...

    @abstractmethod
    def put(self, scope_key: str, raw: str) -> None:
        ...

class SqlPreferenceRepository(PreferenceRepository):
    def __init__(self, db: Session):
        self.db = db

    def get(self, scope_key: str) -> Optional[str]:
        """Obtener el JSON guardado para una clave"""
        record = self.db.query(ColumnPreference).filter(
            ColumnPreference.scope_key == scope_key
        ).first()
        return record.payload if record else None

    def put(self, scope_key: str, raw: str) -> None:
        """Crear o reemplazar la entrada (última escritura gana)"""
        try:
            record = self.db.query(ColumnPreference).filter(
                ColumnPreference.scope_key == scope_key
            ).first()
            if record:
                record.payload = raw
            else:
                self.db.add(ColumnPreference(scope_key=scope_key, payload=raw))
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

class InMemoryPreferenceRepository(PreferenceRepository):
    """Repositorio en memoria del proceso (pruebas y despliegues sin BD)"""

    def __init__(self, data: Optional[Dict[str, str]] = None):
        self.data = data if data is not None else {}

    def get(self, scope_key: str) -> Optional[str]:
        return self.data.get(scope_key)

    def put(self, scope_key: str, raw: str) -> None:
        self.data[scope_key] = raw
