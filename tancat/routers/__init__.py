from .catalogo import router as catalogo_router
from .disponibilidad import router as disponibilidad_router
from .reservas import router as reservas_router
from .reportes import router as reportes_router

__all__ = [
    "catalogo_router", "disponibilidad_router", "reservas_router", "reportes_router"
]
