# tancat/services/catalogo.py
# Catálogo de sedes, deportes, canchas y turnos (configuración administrativa)

import logging
from datetime import date
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from tancat.core.exceptions import InvalidRange, NotFound
from tancat.models.cancha import Cancha
from tancat.models.cliente import Cliente
from tancat.models.deporte import Deporte
from tancat.models.sede import Sede
from tancat.models.tarifa import Tarifa
from tancat.models.turno import Turno
from tancat.schemas.catalogo import (
    CanchaCreate,
    CanchaDetalle,
    CombinacionSede,
    DeporteEnSede,
    ClienteCreate,
    DeporteCreate,
    SedeCreate,
    TarifaCreate,
    TurnoCreate,
)

logger = logging.getLogger(__name__)


def obtener_sede(db: Session, id_sede: int) -> Sede:
    sede = db.query(Sede).filter(Sede.id_sede == id_sede).first()
    if not sede:
        raise NotFound(f"Sede {id_sede} no encontrada", campo="id_sede")
    return sede


def obtener_deporte(db: Session, id_deporte: int) -> Deporte:
    deporte = db.query(Deporte).filter(Deporte.id_deporte == id_deporte).first()
    if not deporte:
        raise NotFound(f"Deporte {id_deporte} no encontrado", campo="id_deporte")
    return deporte


def obtener_cancha(db: Session, id_cancha: int) -> Cancha:
    cancha = db.query(Cancha).filter(Cancha.id_cancha == id_cancha).first()
    if not cancha:
        raise NotFound(f"Cancha {id_cancha} no encontrada", campo="id_cancha")
    return cancha


def obtener_turno(db: Session, id_turno: int) -> Turno:
    turno = db.query(Turno).options(
        joinedload(Turno.cancha).joinedload(Cancha.sede)
    ).filter(Turno.id_turno == id_turno).first()
    if not turno:
        raise NotFound(f"Turno {id_turno} no encontrado", campo="id_turno")
    return turno


def obtener_cliente(db: Session, id_cliente: int) -> Cliente:
    cliente = db.query(Cliente).filter(Cliente.id_cliente == id_cliente).first()
    if not cliente:
        raise NotFound(f"Cliente {id_cliente} no encontrado", campo="id_cliente")
    return cliente


def listar_turnos(db: Session, id_sede: int, id_deporte: Optional[int] = None) -> List[Turno]:
    """
    Turnos activos de las canchas activas de una sede, opcionalmente
    de un solo deporte.

    Ordenados por deporte, número de cancha y hora de inicio. Los turnos
    con fecha de baja futura se incluyen; cada llamador decide con
    Turno.vigente_en(fecha) en qué fechas se ofrecen.
    """
    sede = obtener_sede(db, id_sede)
    if id_deporte is not None:
        obtener_deporte(db, id_deporte)

    if not sede.activo:
        return []

    query = db.query(Turno).join(Cancha).options(
        joinedload(Turno.cancha)
    ).filter(
        Cancha.id_sede == id_sede,
        Cancha.activo.is_(True),
        Turno.activo.is_(True),
    )

    if id_deporte is not None:
        query = query.filter(Cancha.id_deporte == id_deporte)

    return query.order_by(
        Cancha.id_deporte, Cancha.numero, Turno.hora_inicio, Turno.id_turno
    ).all()


def listar_sedes(db: Session, incluir_inactivas: bool = False) -> List[Sede]:
    query = db.query(Sede)
    if not incluir_inactivas:
        query = query.filter(Sede.activo.is_(True))
    return query.order_by(Sede.id_sede).all()


def listar_deportes(db: Session) -> List[Deporte]:
    return db.query(Deporte).order_by(Deporte.nombre, Deporte.id_deporte).all()


def listar_canchas(
    db: Session,
    id_sede: Optional[int] = None,
    id_deporte: Optional[int] = None,
) -> List[CanchaDetalle]:
    """Canchas activas de sedes activas, ordenadas por sede, deporte y número."""
    query = db.query(Cancha, Sede.nombre, Deporte.nombre)\
        .join(Sede, Cancha.id_sede == Sede.id_sede)\
        .join(Deporte, Cancha.id_deporte == Deporte.id_deporte)\
        .filter(Cancha.activo.is_(True), Sede.activo.is_(True))

    if id_sede is not None:
        query = query.filter(Cancha.id_sede == id_sede)
    if id_deporte is not None:
        query = query.filter(Cancha.id_deporte == id_deporte)

    filas = query.order_by(Sede.nombre, Deporte.nombre, Cancha.numero).all()
    return [
        CanchaDetalle(
            id_cancha=cancha.id_cancha,
            numero=cancha.numero,
            id_sede=cancha.id_sede,
            sede=nombre_sede,
            id_deporte=cancha.id_deporte,
            deporte=nombre_deporte,
        )
        for cancha, nombre_sede, nombre_deporte in filas
    ]


def combinaciones_disponibles(db: Session) -> List[CombinacionSede]:
    """
    Pares sede-deporte que tienen al menos una cancha activa, agrupados
    por sede, con la cantidad de canchas de cada deporte.

    Sirve para descubrir los ids que pide la consulta de disponibilidad.
    """
    cantidad_canchas = func.count(Cancha.id_cancha)
    filas = db.query(
        Sede.id_sede,
        Sede.nombre.label("sede"),
        Sede.direccion,
        Deporte.id_deporte,
        Deporte.nombre.label("deporte"),
        cantidad_canchas.label("cantidad_canchas"),
    ).select_from(Sede)\
     .join(Cancha, Cancha.id_sede == Sede.id_sede)\
     .join(Deporte, Cancha.id_deporte == Deporte.id_deporte)\
     .filter(Sede.activo.is_(True), Cancha.activo.is_(True))\
     .group_by(Sede.id_sede, Sede.nombre, Sede.direccion, Deporte.id_deporte, Deporte.nombre)\
     .order_by(Sede.nombre, Sede.id_sede, Deporte.nombre)\
     .all()

    combinaciones = {}
    for fila in filas:
        if fila.id_sede not in combinaciones:
            combinaciones[fila.id_sede] = CombinacionSede(
                id_sede=fila.id_sede, sede=fila.sede, direccion=fila.direccion, deportes=[]
            )
        combinaciones[fila.id_sede].deportes.append(DeporteEnSede(
            id_deporte=fila.id_deporte,
            deporte=fila.deporte,
            cantidad_canchas=fila.cantidad_canchas,
        ))

    return list(combinaciones.values())


# ========== ALTAS Y BAJAS ==========

def crear_sede(db: Session, datos: SedeCreate) -> Sede:
    sede = Sede(**datos.model_dump())
    db.add(sede)
    db.commit()
    db.refresh(sede)
    logger.info(f"Sede creada: {sede.nombre} (ID: {sede.id_sede})")
    return sede


def desactivar_sede(db: Session, id_sede: int) -> Sede:
    sede = obtener_sede(db, id_sede)
    sede.activo = False
    db.commit()
    db.refresh(sede)
    logger.info(f"Sede {id_sede} desactivada")
    return sede


def crear_deporte(db: Session, datos: DeporteCreate) -> Deporte:
    deporte = Deporte(**datos.model_dump())
    db.add(deporte)
    db.commit()
    db.refresh(deporte)
    return deporte


def crear_cancha(db: Session, datos: CanchaCreate) -> Cancha:
    obtener_sede(db, datos.id_sede)
    obtener_deporte(db, datos.id_deporte)

    cancha = Cancha(**datos.model_dump())
    db.add(cancha)
    db.commit()
    db.refresh(cancha)
    logger.info(f"Cancha {cancha.numero} creada en sede {cancha.id_sede}")
    return cancha


def crear_turno(db: Session, datos: TurnoCreate) -> Turno:
    obtener_cancha(db, datos.id_cancha)
    if datos.hora_fin <= datos.hora_inicio:
        raise InvalidRange("La hora de fin debe ser posterior a la de inicio", campo="hora_fin")

    turno = Turno(**datos.model_dump())
    db.add(turno)
    db.commit()
    db.refresh(turno)
    return turno


def desactivar_turno(db: Session, id_turno: int, desde: Optional[date] = None) -> Turno:
    """
    Da de baja un turno.

    Sin fecha, el turno deja de existir para la disponibilidad. Con fecha,
    se sigue ofreciendo en las fechas anteriores y se retira desde esa fecha.
    """
    turno = obtener_turno(db, id_turno)
    if desde is None:
        turno.activo = False
    else:
        turno.fecha_baja = desde
    db.commit()
    db.refresh(turno)
    logger.info(f"Turno {id_turno} dado de baja (desde: {desde or 'siempre'})")
    return turno


def crear_cliente(db: Session, datos: ClienteCreate) -> Cliente:
    valores = datos.model_dump(exclude_none=True)
    cliente = Cliente(**valores)
    db.add(cliente)
    db.commit()
    db.refresh(cliente)
    return cliente


def crear_tarifa(db: Session, datos: TarifaCreate) -> Tarifa:
    obtener_deporte(db, datos.id_deporte)
    if datos.id_sede is not None:
        obtener_sede(db, datos.id_sede)
    if datos.hora_desde and datos.hora_hasta and datos.hora_hasta <= datos.hora_desde:
        raise InvalidRange("La franja horaria de la tarifa es inválida", campo="hora_hasta")

    tarifa = Tarifa(**datos.model_dump())
    db.add(tarifa)
    db.commit()
    db.refresh(tarifa)
    return tarifa
