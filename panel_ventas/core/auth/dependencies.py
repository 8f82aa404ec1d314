from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from typing import Optional

from panel_ventas.core.auth.service import AuthService
from panel_ventas.core.auth.schemas import CurrentUser

# Sin auto_error: las tablas también funcionan para usuarios anónimos
security = HTTPBearer(auto_error=False)

class AuthenticationError(HTTPException):
    def __init__(self, detail: str = "Could not validate credentials"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )

async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> CurrentUser:
    """Obtener usuario actual desde el token; sin token se trata como anónimo"""

    if credentials is None:
        return CurrentUser()

    payload = AuthService.verify_token(credentials.credentials)
    if payload is None:
        raise AuthenticationError("Token inválido o expirado")

    user_id = payload.get("user_id", payload.get("id"))
    if user_id is None:
        raise AuthenticationError("Payload del token inválido")

    return CurrentUser(
        user_id=str(user_id),
        email=payload.get("email"),
        role=payload.get("role"),
        token=credentials.credentials
    )
