# tancat/core/exceptions.py

from typing import Optional


class ReservaError(Exception):
    """
    Base de todos los errores del motor de reservas.

    status_code es el código HTTP con el que la capa de presentación
    debe responder; el motor no lo usa.
    """
    status_code = 500
    detail = "Error en el motor de reservas"

    def __init__(self, detail: Optional[str] = None, campo: Optional[str] = None):
        self.detail = detail or self.detail
        self.campo = campo
        super().__init__(self.detail)


# =======================================================
# Errores de negocio (4xx): resultados esperados
# =======================================================
class ErrorNegocio(ReservaError):
    status_code = 400


class NotFound(ErrorNegocio):
    status_code = 404
    detail = "Recurso no encontrado"


class InvalidRange(ErrorNegocio):
    status_code = 422
    detail = "Rango de fechas inválido"


class SlotUnavailable(ErrorNegocio):
    status_code = 409
    detail = "El turno ya está reservado para esa fecha"


class InvalidTransition(ErrorNegocio):
    status_code = 409
    detail = "Transición de estado no permitida"


class InvalidAmount(ErrorNegocio):
    status_code = 422
    detail = "Monto inválido"


class TooEarly(ErrorNegocio):
    status_code = 409
    detail = "La reserva no puede finalizarse antes de su fecha"


class NoRateDefined(ErrorNegocio):
    status_code = 422
    detail = "No hay tarifa definida para el turno"


# =======================================================
# Errores de infraestructura (5xx): el detalle no se expone
# =======================================================
class ErrorInfraestructura(ReservaError):
    status_code = 503


class Timeout(ErrorInfraestructura):
    status_code = 504
    detail = "Tiempo de espera agotado"


class StoreUnavailable(ErrorInfraestructura):
    status_code = 503
    detail = "Base de datos no disponible"


class UnsupportedStore(ErrorInfraestructura):
    status_code = 501
    detail = "Operación no soportada por el motor de base de datos configurado"
