# tancat/main.py
import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from tancat.config import settings
from tancat.core.exceptions import ErrorInfraestructura, ErrorNegocio
from tancat.core.transacciones import aplicar_timeout, traducir_error_operacional
from tancat.database import get_db, init_db
from tancat.routers import catalogo, disponibilidad, reservas, reportes

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info("TANCAT API iniciada")
    yield


app = FastAPI(
    title="TANCAT - Sistema de Reservas",
    description="API de reservas, disponibilidad y reportes de canchas",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# Configuración CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "Accept", "Origin"],
    max_age=600,
)


# Errores de negocio: 4xx con el motivo y el campo que falló
@app.exception_handler(ErrorNegocio)
async def manejar_error_negocio(request: Request, exc: ErrorNegocio):
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "campo": exc.campo, "tipo": type(exc).__name__},
    )


# Errores de infraestructura: 5xx sin detalle interno
@app.exception_handler(ErrorInfraestructura)
async def manejar_error_infraestructura(request: Request, exc: ErrorInfraestructura):
    logger.error(f"❌ {type(exc).__name__} en {request.method} {request.url.path}: {exc.detail}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": "Error interno del servidor", "tipo": type(exc).__name__},
    )


@app.exception_handler(OperationalError)
async def manejar_error_base(request: Request, exc: OperationalError):
    logger.error(f"❌ Error de base de datos en {request.method} {request.url.path}: {exc}")
    return await manejar_error_infraestructura(request, traducir_error_operacional(exc))


# Routers
app.include_router(catalogo.router, tags=["Catálogo"])
app.include_router(disponibilidad.router, prefix="/disponibilidad", tags=["Disponibilidad"])
app.include_router(reservas.router, prefix="/reservas", tags=["Reservas"])
app.include_router(reportes.router, prefix="/reportes", tags=["Reportes"])


@app.get("/")
def indice():
    return {"servicio": app.title, "version": app.version, "documentacion": app.docs_url}


@app.get("/health")
def estado_servicio(db: Session = Depends(get_db)):
    """Verifica que la base responda; si no, el manejador de errores devuelve 503/504"""
    aplicar_timeout(db)
    db.execute(text("SELECT 1"))
    return {"estado": "ok", "base_de_datos": db.get_bind().dialect.name}
