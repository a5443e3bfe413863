# tancat/core/transacciones.py

import time
from contextlib import contextmanager
from functools import wraps
from typing import Optional

from sqlalchemy import text
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from tancat.config import settings
from tancat.core.exceptions import StoreUnavailable, Timeout

_MENSAJES_TIMEOUT = ("locked", "timeout", "timed out", "canceling statement", "lock_timeout")

# Espera mínima que se le pasa a la base cuando el plazo ya se consumió
_ESPERA_MINIMA = 0.001


def traducir_error_operacional(exc: OperationalError):
    """Convierte un OperationalError de SQLAlchemy en un error de infraestructura."""
    mensaje = str(exc.orig if exc.orig is not None else exc).lower()
    if any(fragmento in mensaje for fragmento in _MENSAJES_TIMEOUT):
        return Timeout()
    return StoreUnavailable()


def aplicar_timeout(db: Session, timeout: Optional[float] = None):
    """
    Acota las esperas de la sesión por bloqueos de la base.

    En SQLite fija busy_timeout en la conexión (queda en el pool, por eso
    sin timeout se vuelve al valor por defecto). En PostgreSQL usa
    SET LOCAL, que vale solo para la transacción en curso.
    """
    if timeout is None:
        timeout = settings.TIMEOUT_BLOQUEO_SEGUNDOS
    milisegundos = max(int(timeout * 1000), 1)

    dialecto = db.get_bind().dialect.name
    if dialecto == "sqlite":
        db.execute(text(f"PRAGMA busy_timeout = {milisegundos}"))
    elif dialecto == "postgresql":
        db.execute(text(f"SET LOCAL lock_timeout = '{milisegundos}ms'"))
        db.execute(text(f"SET LOCAL statement_timeout = '{milisegundos}ms'"))


class Plazo:
    """Tiempo restante de una operación que pasa por varias esperas."""

    def __init__(self, segundos: float):
        self.segundos = segundos
        self._inicio = time.monotonic()

    def restante(self) -> float:
        transcurrido = time.monotonic() - self._inicio
        return max(self.segundos - transcurrido, _ESPERA_MINIMA)


@contextmanager
def transaccion(session_factory, timeout: Optional[float] = None):
    """
    Abre una sesión y confirma todo al salir del bloque, o nada.

    Cualquier excepción deshace la transacción completa; los
    OperationalError se traducen a Timeout / StoreUnavailable.
    """
    db = session_factory()
    try:
        aplicar_timeout(db, timeout)
        yield db
        db.commit()
    except OperationalError as exc:
        db.rollback()
        raise traducir_error_operacional(exc) from exc
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def con_timeout(funcion):
    """
    Agrega el argumento `timeout` a una consulta de solo lectura sobre `db`.

    La espera por bloqueos queda acotada y los OperationalError salen
    como Timeout / StoreUnavailable.
    """
    @wraps(funcion)
    def envoltura(db: Session, *args, timeout: Optional[float] = None, **kwargs):
        try:
            aplicar_timeout(db, timeout)
            return funcion(db, *args, **kwargs)
        except OperationalError as exc:
            raise traducir_error_operacional(exc) from exc
    return envoltura
