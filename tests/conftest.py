import httpx
import pytest
from fastapi.testclient import TestClient

from panel_ventas.main import app
from panel_ventas.core.auth.service import AuthService
from panel_ventas.modules.tables import InMemoryPreferenceRepository, get_preference_repository
from panel_ventas.shared.services.backend_client import BackendClient, get_backend_client

BACKEND_URL = "http://backend.test"

VENTAS = [
    {"id": 1, "nombre": "Ana", "apellido": "López", "email": "ana@uni.mx", "telefono": "555-1",
     "asesor": "Carlos", "fecha_venta": "2024-03-01", "cliente": "anahuac",
     "campos_adicionales": {"matricula": "A001", "beca": 50}},
    {"id": 2, "nombre": "Bob", "apellido": "Pérez", "email": "bob@uni.mx", "telefono": "555-2",
     "asesor": "Diana", "fecha_venta": "2024-03-03", "cliente": "anahuac",
     "campos_adicionales": {"matricula": "A002"}},
    {"id": 3, "nombre": "Ana", "apellido": "Ruiz", "email": "aruiz@uni.mx", "telefono": "555-3",
     "asesor": "Carlos", "fecha_venta": "2024-03-02", "cliente": "anahuac",
     "campos_adicionales": {"matricula": "A003", "beca": 25}},
]

VENTAS_FIELDS = {
    "fields": [
        {"id": "beca", "label": "Beca", "type": "number", "order": 2},
        {"id": "matricula", "label": "Matrícula", "type": "text", "order": 1},
        {"id": "email", "label": "Correo duplicado", "type": "email", "order": 3},
    ]
}

CONTACTOS = {
    "contacts": [
        {"id": 10, "nombre": "Lucía", "apellido": "Mora", "correo": "lucia@mail.com",
         "estado": "interesado", "updated_at": "2024-05-02", "campos_adicionales": {"semestre": 3}},
        {"id": 11, "nombre": "Mario", "apellido": "Soto", "correo": "mario@mail.com",
         "estado": "ganado", "updated_at": "2024-05-03", "campos_adicionales": {}},
        {"id": 12, "nombre": "Luis", "apellido": "Vega", "correo": "luis@mail.com",
         "estado": "interesado", "updated_at": "2024-05-01", "campos_adicionales": {"semestre": 1}},
    ],
    "total_pages": 1
}

CONTACT_FIELDS = [
    {"id": "semestre", "label": "Semestre", "type": "number"},
]


class FakeBackend:
    """Backend de ventas simulado para httpx.MockTransport"""

    def __init__(self):
        self.routes = {
            "/api/clientes/anahuac/campos": (200, VENTAS_FIELDS),
            "/api/ventas": (200, VENTAS),
            "/api/clientes/5/contact-fields": (200, CONTACT_FIELDS),
            "/api/clientes/5/contactos": (200, CONTACTOS),
            "/api/exportar-excel": (200, {"path": "exports/ventas_anahuac.xlsx", "records": 3}),
        }
        self.requests = []

    def set(self, path, status, payload):
        self.routes[path] = (status, payload)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        status, payload = self.routes.get(request.url.path, (404, {"error": "not found"}))
        if isinstance(payload, Exception):
            raise payload
        if isinstance(payload, httpx.Response):
            return payload
        return httpx.Response(status, json=payload)


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def backend_client(backend):
    return BackendClient(base_url=BACKEND_URL, timeout=5, transport=httpx.MockTransport(backend.handler))


@pytest.fixture
def repository():
    return InMemoryPreferenceRepository()


@pytest.fixture
def client(backend_client, repository):
    app.dependency_overrides[get_backend_client] = lambda: backend_client
    app.dependency_overrides[get_preference_repository] = lambda: repository
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def token():
    return AuthService.create_access_token({"user_id": 7, "email": "asesor@uni.mx", "role": "asesor"})


@pytest.fixture
def auth_headers(token):
    return {"Authorization": f"Bearer {token}"}
