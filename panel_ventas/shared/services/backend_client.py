# panel_ventas/shared/services/backend_client.py
import httpx
import logging
from dataclasses import dataclass
from typing import Dict, Any, List, Optional, Union
from fastapi import HTTPException

from panel_ventas.config.settings import settings

logger = logging.getLogger(__name__)

# Claves bajo las que el backend puede envolver listas de filas
ROW_ENVELOPE_KEYS = ("ventas", "contactos", "contacts", "items", "data", "results")

class BackendError(HTTPException):
    """Error comunicándose con el backend de ventas"""
    def __init__(self, detail: str, status_code: int = 502, upstream_status: Optional[int] = None):
        super().__init__(status_code=status_code, detail=detail)
        self.upstream_status = upstream_status

@dataclass
class BackendFile:
    """Archivo binario devuelto por el backend"""
    content: bytes
    media_type: Optional[str] = None
    content_disposition: Optional[str] = None

class BackendClient:
    """Cliente para el backend de ventas (API_BASE del dashboard)"""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.base_url = (base_url or settings.sales_api_url).rstrip("/")
        self.timeout = timeout or settings.sales_api_timeout
        self.transport = transport

    def _get_headers(self, token: Optional[str] = None) -> Dict[str, str]:
        """Headers con autenticación opcional"""
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    async def _get(
        self,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        token: Optional[str] = None,
        accept: str = "application/json"
    ) -> httpx.Response:
        url = f"{self.base_url}/{path.lstrip('/')}"
        clean_params = {k: v for k, v in (params or {}).items() if v not in (None, "")}
        headers = self._get_headers(token)
        headers["Accept"] = accept

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.get(url, params=clean_params, headers=headers)
        except httpx.TimeoutException:
            logger.error(f"Timeout consultando backend: GET {path}")
            raise BackendError("Timeout consultando el backend de ventas", status_code=504)
        except httpx.HTTPError as e:
            logger.error(f"Error de red consultando backend GET {path}: {e}")
            raise BackendError(f"Error comunicándose con el backend de ventas: {str(e)}")

        if response.status_code != 200:
            error_msg = f"Error del backend: {response.status_code} - {response.text[:200]}"
            logger.error(f"GET {path} -> {error_msg}")
            raise BackendError(error_msg, upstream_status=response.status_code)
        return response

    async def _get_json(
        self,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        token: Optional[str] = None
    ) -> Union[Dict[str, Any], List[Any]]:
        response = await self._get(path, params=params, token=token)
        try:
            return response.json()
        except ValueError:
            logger.error(f"Respuesta no JSON del backend en GET {path}")
            raise BackendError("Respuesta no válida del servidor")

    async def get_field_definitions(self, path: str, token: Optional[str] = None) -> List[Dict[str, Any]]:
        """
        Obtener definiciones de campos personalizados de un cliente.

        Acepta ``{"fields": [...]}`` o una lista directa y siempre devuelve la lista.
        """
        data = await self._get_json(path, token=token)
        if isinstance(data, dict):
            data = data.get("fields") or []
        if not isinstance(data, list):
            raise BackendError("Formato de campos no reconocido")
        logger.info(f"Campos obtenidos de {path}: {len(data)}")
        return [item for item in data if isinstance(item, dict)]

    async def get_rows(
        self,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        token: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        """Obtener filas (ventas o contactos); tolera lista directa o envuelta"""
        data = await self._get_json(path, params=params, token=token)
        if isinstance(data, dict):
            for key in ROW_ENVELOPE_KEYS:
                if isinstance(data.get(key), list):
                    data = data[key]
                    break
            else:
                raise BackendError("Formato de filas no reconocido")
        return [item for item in data if isinstance(item, dict)]

    async def request_export(
        self,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        token: Optional[str] = None
    ) -> Dict[str, Any]:
        """Solicitar exportación al backend; responde ``{"path": ...}``"""
        data = await self._get_json(path, params=params, token=token)
        if not isinstance(data, dict):
            raise BackendError("Respuesta de exportación no válida")
        return data

    async def download(
        self,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        token: Optional[str] = None,
        accept: str = "*/*"
    ) -> BackendFile:
        """Descargar un archivo generado por el backend (bytes + cabeceras)"""
        response = await self._get(path, params=params, token=token, accept=accept)
        logger.info(f"Archivo recibido de {path}: {len(response.content)} bytes")
        return BackendFile(
            content=response.content,
            media_type=response.headers.get("Content-Type"),
            content_disposition=response.headers.get("Content-Disposition")
        )

    async def health_check(self) -> bool:
        """Verificar salud del backend de ventas"""
        try:
            async with httpx.AsyncClient(timeout=10, transport=self.transport) as client:
                response = await client.get(f"{self.base_url}/health")
                return response.status_code == 200
        except httpx.HTTPError as e:
            logger.warning(f"Backend de ventas no disponible: {e}")
            return False

def get_backend_client() -> BackendClient:
    """Dependency para FastAPI"""
    return BackendClient()
