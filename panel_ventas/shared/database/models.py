# panel_ventas/shared/database/models.py
from sqlalchemy import Column, Integer, String, DateTime, Text, func

from panel_ventas.config.database import Base

# =====================================================
# MIXIN PARA TIMESTAMPS
# =====================================================
class TimestampMixin:
    """Mixin que agrega campos created_at y updated_at"""
    created_at = Column(DateTime, nullable=False, server_default=func.current_timestamp())
    updated_at = Column(DateTime, nullable=False, server_default=func.current_timestamp(), onupdate=func.current_timestamp())


# =====================================================
# PREFERENCIAS DE TABLAS
# =====================================================

class ColumnPreference(Base, TimestampMixin):
    """Preferencias de columnas por usuario y cliente.

    `scope_key` sigue el formato ``<tabla>:columns:v1:<usuario|anonymous>:<cliente>``
    y `payload` guarda el JSON ``{"visible": [...], "order": [...]}`` tal cual
    se serializó, igual que una entrada de almacenamiento local.
    """
    __tablename__ = "column_preferences"

    id = Column(Integer, primary_key=True, index=True)
    scope_key = Column(String(255), unique=True, nullable=False, index=True)
    payload = Column(Text, nullable=False)

    def __repr__(self):
        return f"<ColumnPreference {self.scope_key}>"
