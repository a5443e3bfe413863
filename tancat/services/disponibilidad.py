# tancat/services/disponibilidad.py

from datetime import date, timedelta
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from sqlalchemy.orm import Session

from tancat.config import settings
from tancat.core.exceptions import InvalidRange
from tancat.core.transacciones import con_timeout
from tancat.models.reserva import Reserva, ESTADO_CANCELADA
from tancat.models.turno import Turno
from tancat.schemas.disponibilidad import (
    DisponibilidadResponse,
    EstadoDisponibilidad,
    TurnoDisponibilidad,
)
from tancat.services.catalogo import listar_turnos

Clave = Tuple[int, date]


def validar_rango(fecha_desde: date, fecha_hasta: date, max_dias: Optional[int] = None) -> int:
    """Valida [desde, hasta] inclusivo y devuelve la cantidad de días."""
    if fecha_desde > fecha_hasta:
        raise InvalidRange(
            f"La fecha desde ({fecha_desde}) es posterior a la fecha hasta ({fecha_hasta})",
            campo="fecha_desde",
        )
    dias = (fecha_hasta - fecha_desde).days + 1
    if max_dias is not None and dias > max_dias:
        raise InvalidRange(
            f"El rango de {dias} días supera el máximo de {max_dias}",
            campo="fecha_hasta",
        )
    return dias


def fechas_en_rango(fecha_desde: date, fecha_hasta: date) -> Iterator[date]:
    fecha = fecha_desde
    while fecha <= fecha_hasta:
        yield fecha
        fecha += timedelta(days=1)


def expandir_turnos(turnos: List[Turno], fecha_desde: date, fecha_hasta: date) -> Iterator[Tuple[Turno, date]]:
    """Producto turnos x fechas, salteando las fechas en que el turno no se ofrece."""
    for fecha in fechas_en_rango(fecha_desde, fecha_hasta):
        for turno in turnos:
            if turno.vigente_en(fecha):
                yield turno, fecha


def reservas_activas(
    db: Session,
    ids_turno: Iterable[int],
    fecha_desde: date,
    fecha_hasta: date,
) -> Dict[Clave, Reserva]:
    """Reservas no canceladas de los turnos en el rango, por (id_turno, fecha)"""
    ids_turno = list(ids_turno)
    if not ids_turno:
        return {}

    reservas = db.query(Reserva).filter(
        Reserva.id_turno.in_(ids_turno),
        Reserva.fecha_reserva >= fecha_desde,
        Reserva.fecha_reserva <= fecha_hasta,
        Reserva.estado != ESTADO_CANCELADA,
    ).all()

    return {(r.id_turno, r.fecha_reserva): r for r in reservas}


def buscar_reserva_activa(db: Session, id_turno: int, fecha: date, para_actualizar: bool = False) -> Optional[Reserva]:
    query = db.query(Reserva).filter(
        Reserva.id_turno == id_turno,
        Reserva.fecha_reserva == fecha,
        Reserva.estado != ESTADO_CANCELADA,
    )
    if para_actualizar:
        query = query.with_for_update()
    return query.first()


@con_timeout
def calcular_disponibilidad(
    db: Session,
    id_sede: int,
    fecha_desde: date,
    fecha_hasta: date,
    id_deporte: Optional[int] = None,
    max_dias: Optional[int] = None,
) -> DisponibilidadResponse:
    """
    Estado libre/ocupado de cada par (turno, fecha) de la sede en el rango.

    Los turnos ocupados informan además el estado de la reserva, ya que
    una reserva pendiente es solo una retención. La lectura no es
    autoritativa: crear_reserva vuelve a verificar al confirmar.
    """
    if max_dias is None:
        max_dias = settings.MAX_DIAS_DISPONIBILIDAD
    validar_rango(fecha_desde, fecha_hasta, max_dias)

    turnos = listar_turnos(db, id_sede, id_deporte)
    ocupadas = reservas_activas(db, (t.id_turno for t in turnos), fecha_desde, fecha_hasta)

    resultado = []
    for turno, fecha in expandir_turnos(turnos, fecha_desde, fecha_hasta):
        reserva = ocupadas.get((turno.id_turno, fecha))
        resultado.append(TurnoDisponibilidad(
            id_turno=turno.id_turno,
            id_cancha=turno.id_cancha,
            numero_cancha=turno.cancha.numero,
            id_deporte=turno.cancha.id_deporte,
            fecha=fecha,
            hora_inicio=turno.hora_inicio,
            hora_fin=turno.hora_fin,
            estado=EstadoDisponibilidad.OCUPADO if reserva else EstadoDisponibilidad.LIBRE,
            estado_reserva=reserva.estado if reserva else None,
            id_reserva=reserva.id_reserva if reserva else None,
        ))

    ocupados = sum(1 for t in resultado if t.estado == EstadoDisponibilidad.OCUPADO)
    return DisponibilidadResponse(
        id_sede=id_sede,
        id_deporte=id_deporte,
        fecha_desde=fecha_desde,
        fecha_hasta=fecha_hasta,
        total_libres=len(resultado) - ocupados,
        total_ocupados=ocupados,
        turnos=resultado,
    )
