from datetime import datetime, timedelta
from typing import Optional
import logging

from jose import jwt, JWTError
from panel_ventas.config.settings import settings

logger = logging.getLogger(__name__)

class AuthService:
    """Servicio de tokens (la sesión la gestiona el backend de ventas)"""

    @staticmethod
    def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
        """Crear token de acceso"""
        to_encode = data.copy()

        if expires_delta:
            expire = datetime.utcnow() + expires_delta
        else:
            expire = datetime.utcnow() + timedelta(minutes=60)

        to_encode.update({"exp": expire})

        return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)

    @staticmethod
    def verify_token(token: str) -> Optional[dict]:
        """Verificar y decodificar token"""
        try:
            return jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
        except JWTError as e:
            logger.warning(f"Token rechazado: {e}")
            return None
