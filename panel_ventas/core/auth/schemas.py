from pydantic import BaseModel, Field
from typing import Optional

ANONYMOUS_USER = "anonymous"

class CurrentUser(BaseModel):
    """Usuario que consulta la tabla, extraído del token del backend de ventas"""
    user_id: Optional[str] = Field(None, description="ID del usuario en el backend de ventas (numérico o UUID)")
    email: Optional[str] = None
    role: Optional[str] = None
    token: Optional[str] = Field(None, description="Token original, se reenvía al backend")

    @property
    def scope_id(self) -> str:
        """Identificador usado para aislar preferencias por usuario"""
        return ANONYMOUS_USER if self.user_id is None else self.user_id

    class Config:
        json_schema_extra = {
            "example": {
                "user_id": "12",
                "email": "asesor@ventas.com",
                "role": "asesor"
            }
        }
