# tancat/config.py

from decimal import Decimal
from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Database
    DATABASE_URL: str = "sqlite:///./tancat.db"

    # Reservas
    # Porcentaje del total que se exige como seña
    PORCENTAJE_SENA: Decimal = Decimal("30")
    # Exceso de seña aceptado sobre el total (lo cobrado se topea al total)
    TOLERANCIA_SENA: Decimal = Decimal("0")
    # Tiempo máximo de espera por el bloqueo de un turno/fecha
    TIMEOUT_BLOQUEO_SEGUNDOS: float = 5.0

    # Rangos de consulta
    MAX_DIAS_DISPONIBILIDAD: int = 90
    MAX_DIAS_REPORTE: int = 366

    # Logging
    LOG_LEVEL: str = "INFO"

    # CORS
    FRONTEND_URLS: str = "http://localhost:5173,http://localhost:3000"

    @property
    def allowed_origins(self) -> List[str]:
        """FRONTEND_URLS separado por comas, sin vacíos ni repetidos"""
        origenes = []
        for url in self.FRONTEND_URLS.split(","):
            url = url.strip().rstrip("/")
            if url and url not in origenes:
                origenes.append(url)
        return origenes

    class Config:
        env_file = ".env"


settings = Settings()
