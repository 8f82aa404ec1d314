# panel_ventas/config/settings.py
from pydantic_settings import BaseSettings
from typing import List
import os

class Settings(BaseSettings):
    # App Info
    app_name: str = "Panel de Ventas API"
    version: str = "1.0.0"
    debug: bool = False

    # Base de datos para preferencias de columnas
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./panel_ventas.db")
    preferences_backend: str = "database"  # database | memory

    # Security - el token lo emite el backend de ventas, aquí solo se decodifica
    secret_key: str = os.getenv("SECRET_KEY", "change-in-production")
    algorithm: str = "HS256"

    # Backend de ventas (API_BASE del dashboard)
    sales_api_url: str = os.getenv(
        "SALES_API_URL",
        "http://localhost:5000"
    )
    sales_api_timeout: int = int(os.getenv("SALES_API_TIMEOUT", "30"))

    # Tablas
    default_visible_columns: int = 8
    cors_origins: List[str] = ["*"]

    # Server
    host: str = "0.0.0.0"
    port: int = int(os.getenv("PORT", 10000))

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = 'ignore'

settings = Settings()
