# tancat/services/reservas.py
# Ciclo de vida de las reservas: pendiente -> confirmada -> finalizada,
# con cancelación posible desde pendiente o confirmada.

import logging
from datetime import date
from decimal import Decimal
from typing import Callable, List, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from tancat.config import Settings, settings as default_settings
from tancat.core.bloqueos import BloqueosPorClave
from tancat.core.exceptions import (
    InvalidAmount,
    InvalidTransition,
    NotFound,
    SlotUnavailable,
    TooEarly,
)
from tancat.core.montos import a_decimal
from tancat.core.transacciones import Plazo, transaccion
from tancat.database import SessionLocal
from tancat.models.cancelacion import Cancelacion
from tancat.models.cancha import Cancha
from tancat.models.reserva import (
    Reserva,
    ESTADO_CANCELADA,
    ESTADO_CONFIRMADA,
    ESTADO_FINALIZADA,
    ESTADO_PENDIENTE,
)
from tancat.models.turno import Turno
from tancat.schemas.reserva import ReservaResponse
from tancat.services.catalogo import obtener_cliente, obtener_turno
from tancat.services.disponibilidad import buscar_reserva_activa
from tancat.services.precios import calcular_precio

logger = logging.getLogger(__name__)

MOTIVO_POR_DEFECTO = "Cancelación sin motivo informado"

# Transiciones válidas; finalizada y cancelada son terminales
TRANSICIONES = {
    ESTADO_PENDIENTE: {ESTADO_CONFIRMADA, ESTADO_CANCELADA},
    ESTADO_CONFIRMADA: {ESTADO_FINALIZADA, ESTADO_CANCELADA},
    ESTADO_FINALIZADA: set(),
    ESTADO_CANCELADA: set(),
}


def validar_transicion(estado_actual: str, estado_nuevo: str):
    if estado_nuevo not in TRANSICIONES.get(estado_actual, set()):
        raise InvalidTransition(
            f"No se puede pasar de '{estado_actual}' a '{estado_nuevo}'",
            campo="estado",
        )


class ServicioReservas:
    """
    Crea y hace avanzar reservas.

    Toda operación que escribe se serializa por la clave (turno, fecha)
    con un bloqueo del proceso, y dentro de él hace la verificación y la
    escritura en una sola transacción. El índice único parcial sobre
    reserva(id_turno, fecha_reserva) respalda la garantía entre procesos.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session] = SessionLocal,
        bloqueos: Optional[BloqueosPorClave] = None,
        hoy: Callable[[], date] = date.today,
        config: Optional[Settings] = None,
    ):
        self._session_factory = session_factory
        self._bloqueos = bloqueos if bloqueos is not None else BloqueosPorClave()
        self._hoy = hoy
        self._config = config if config is not None else default_settings

    def _timeout(self, timeout: Optional[float]) -> float:
        return self._config.TIMEOUT_BLOQUEO_SEGUNDOS if timeout is None else timeout

    # ========== CREAR ==========

    def crear_reserva(
        self,
        id_turno: int,
        fecha_reserva: date,
        id_cliente: int,
        precio_solicitado: Optional[Decimal] = None,
        observaciones: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> ReservaResponse:
        if precio_solicitado is not None and a_decimal(precio_solicitado) < 0:
            raise InvalidAmount("El precio no puede ser negativo", campo="precio_solicitado")

        plazo = Plazo(self._timeout(timeout))
        with self._bloqueos.adquirir((id_turno, fecha_reserva), plazo.restante()):
            with transaccion(self._session_factory, plazo.restante()) as db:
                turno = obtener_turno(db, id_turno)
                obtener_cliente(db, id_cliente)

                cancha = turno.cancha
                if not (turno.vigente_en(fecha_reserva) and cancha.activo and cancha.sede.activo):
                    raise SlotUnavailable(
                        f"El turno {id_turno} no se ofrece el {fecha_reserva.isoformat()}",
                        campo="id_turno",
                    )

                # Re-verificación dentro del bloqueo: la disponibilidad mostrada no es autoritativa
                existente = buscar_reserva_activa(db, id_turno, fecha_reserva, para_actualizar=True)
                if existente:
                    raise SlotUnavailable(
                        f"El turno {id_turno} ya está reservado el {fecha_reserva.isoformat()} "
                        f"(reserva {existente.id_reserva}, {existente.estado})",
                        campo="id_turno",
                    )

                precio = calcular_precio(
                    db,
                    turno.id_cancha,
                    fecha_reserva,
                    turno.hora_inicio,
                    turno.hora_fin,
                    precio_solicitado=precio_solicitado,
                    porcentaje_sena=self._config.PORCENTAJE_SENA,
                )

                reserva = Reserva(
                    id_turno=id_turno,
                    id_cliente=id_cliente,
                    fecha_reserva=fecha_reserva,
                    estado=ESTADO_PENDIENTE,
                    precio_total=precio.total,
                    sena_requerida=precio.sena_requerida,
                    sena_pagada=Decimal("0"),
                    observaciones=observaciones,
                )
                db.add(reserva)
                try:
                    db.flush()
                except IntegrityError as exc:
                    # Otro proceso ganó la carrera: el índice único parcial lo rechaza
                    raise SlotUnavailable(
                        f"El turno {id_turno} ya está reservado el {fecha_reserva.isoformat()}",
                        campo="id_turno",
                    ) from exc

                db.refresh(reserva)
                resultado = ReservaResponse.model_validate(reserva)

        logger.info(
            f"Reserva {resultado.id_reserva} creada: turno {id_turno}, fecha {fecha_reserva}, "
            f"total {resultado.precio_total}, seña {resultado.sena_requerida}"
        )
        return resultado

    # ========== TRANSICIONES ==========

    def _clave(self, id_reserva: int, timeout: float) -> Tuple[int, date]:
        # turno y fecha no cambian nunca, se pueden leer fuera del bloqueo
        with transaccion(self._session_factory, timeout) as db:
            fila = db.query(Reserva.id_turno, Reserva.fecha_reserva).filter(
                Reserva.id_reserva == id_reserva
            ).first()
            if not fila:
                raise NotFound(f"Reserva {id_reserva} no encontrada", campo="id_reserva")
            return fila.id_turno, fila.fecha_reserva

    def _transicionar(self, id_reserva: int, timeout: Optional[float], aplicar) -> ReservaResponse:
        plazo = Plazo(self._timeout(timeout))
        clave = self._clave(id_reserva, plazo.restante())
        with self._bloqueos.adquirir(clave, plazo.restante()):
            with transaccion(self._session_factory, plazo.restante()) as db:
                reserva = db.query(Reserva).filter(
                    Reserva.id_reserva == id_reserva
                ).with_for_update().first()
                aplicar(db, reserva)
                db.flush()
                db.refresh(reserva)
                return ReservaResponse.model_validate(reserva)

    def confirmar_reserva(self, id_reserva: int, sena_pagada: Decimal, timeout: Optional[float] = None) -> ReservaResponse:
        """pendiente -> confirmada al recibir la seña."""
        sena_pagada = a_decimal(sena_pagada)

        def aplicar(db: Session, reserva: Reserva):
            validar_transicion(reserva.estado, ESTADO_CONFIRMADA)

            total = a_decimal(reserva.precio_total)
            if sena_pagada < 0:
                raise InvalidAmount("La seña no puede ser negativa", campo="sena_pagada")
            if sena_pagada > total + a_decimal(self._config.TOLERANCIA_SENA):
                raise InvalidAmount(
                    f"La seña ({sena_pagada}) supera el total de la reserva ({total})",
                    campo="sena_pagada",
                )

            # Dentro de la tolerancia se registra como máximo el total
            reserva.sena_pagada = min(sena_pagada, total)
            reserva.estado = ESTADO_CONFIRMADA

        resultado = self._transicionar(id_reserva, timeout, aplicar)
        logger.info(f"Reserva {id_reserva} confirmada con seña {resultado.sena_pagada}")
        return resultado

    def cancelar_reserva(self, id_reserva: int, motivo: Optional[str] = None, timeout: Optional[float] = None) -> ReservaResponse:
        """
        pendiente/confirmada -> cancelada, liberando el turno para esa fecha.

        Cancelar dos veces no es un error: la segunda llamada no hace nada.
        """
        def aplicar(db: Session, reserva: Reserva):
            if reserva.estado == ESTADO_CANCELADA:
                return
            validar_transicion(reserva.estado, ESTADO_CANCELADA)

            db.add(Cancelacion(
                id_reserva=reserva.id_reserva,
                motivo=motivo or MOTIVO_POR_DEFECTO,
                estado_anterior=reserva.estado,
            ))
            reserva.estado = ESTADO_CANCELADA
            logger.info(f"Reserva {id_reserva} cancelada. Motivo: {motivo or MOTIVO_POR_DEFECTO}")

        return self._transicionar(id_reserva, timeout, aplicar)

    def finalizar_reserva(self, id_reserva: int, timeout: Optional[float] = None) -> ReservaResponse:
        """confirmada -> finalizada, solo desde la fecha del turno en adelante."""
        def aplicar(db: Session, reserva: Reserva):
            validar_transicion(reserva.estado, ESTADO_FINALIZADA)
            hoy = self._hoy()
            if reserva.fecha_reserva > hoy:
                raise TooEarly(
                    f"La reserva es para el {reserva.fecha_reserva.isoformat()}; "
                    f"no puede finalizarse el {hoy.isoformat()}",
                    campo="fecha_reserva",
                )
            reserva.estado = ESTADO_FINALIZADA

        resultado = self._transicionar(id_reserva, timeout, aplicar)
        logger.info(f"Reserva {id_reserva} finalizada")
        return resultado

    # ========== CONSULTAS ==========

    def obtener_reserva(self, id_reserva: int) -> ReservaResponse:
        with transaccion(self._session_factory) as db:
            reserva = db.query(Reserva).filter(Reserva.id_reserva == id_reserva).first()
            if not reserva:
                raise NotFound(f"Reserva {id_reserva} no encontrada", campo="id_reserva")
            return ReservaResponse.model_validate(reserva)

    def listar_reservas(
        self,
        fecha_desde: Optional[date] = None,
        fecha_hasta: Optional[date] = None,
        id_sede: Optional[int] = None,
        estado: Optional[str] = None,
        id_cliente: Optional[int] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[ReservaResponse]:
        with transaccion(self._session_factory) as db:
            query = db.query(Reserva)

            if id_sede is not None:
                query = query.join(Turno).join(Cancha).filter(Cancha.id_sede == id_sede)

            if fecha_desde:
                query = query.filter(Reserva.fecha_reserva >= fecha_desde)

            if fecha_hasta:
                query = query.filter(Reserva.fecha_reserva <= fecha_hasta)

            if estado:
                query = query.filter(Reserva.estado == estado)

            if id_cliente is not None:
                query = query.filter(Reserva.id_cliente == id_cliente)

            reservas = query.order_by(
                Reserva.fecha_reserva.desc(), Reserva.id_reserva
            ).offset(skip).limit(limit).all()

            return [ReservaResponse.model_validate(r) for r in reservas]
