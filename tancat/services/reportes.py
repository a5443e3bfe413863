# tancat/services/reportes.py
# Reportes de solo lectura: ingresos, ocupación y clientes

from collections import Counter
from datetime import date
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import and_, distinct, func, literal_column
from sqlalchemy.orm import Session

from tancat.config import settings
from tancat.core.exceptions import UnsupportedStore
from tancat.core.montos import a_decimal, porcentaje, redondear_centesimos
from tancat.core.transacciones import con_timeout
from tancat.models.cancha import Cancha
from tancat.models.cliente import Cliente
from tancat.models.deporte import Deporte
from tancat.models.reserva import Reserva, ESTADO_CANCELADA, ESTADOS_FACTURABLES
from tancat.models.sede import Sede
from tancat.models.turno import Turno
from tancat.schemas.reportes import (
    ClienteFrecuente,
    ClientesDeporte,
    EstadisticasReservas,
    Granularidad,
    IngresoDeporte,
    IngresoPeriodo,
    IngresoSede,
    NuevosClientesMes,
    OcupacionCancha,
    ReporteOcupacion,
    ReporteReservas,
    ResumenIngresos,
)
from tancat.schemas.reserva import ReservaDetalle
from tancat.services.disponibilidad import expandir_turnos, validar_rango

CANTIDAD_EXTREMOS = 3


def expresion_periodo(columna, granularidad: Granularidad, dialecto: str):
    """
    Expresión SQL que trunca una fecha al período y la devuelve como texto:
    día 'YYYY-MM-DD', semana (lunes) 'YYYY-MM-DD', mes 'YYYY-MM'.
    """
    granularidad = Granularidad(granularidad)

    if dialecto == "sqlite":
        if granularidad == Granularidad.MES:
            return func.strftime("%Y-%m", columna)
        if granularidad == Granularidad.SEMANA:
            # 'weekday 0' avanza al domingo; seis días antes es el lunes
            return func.strftime("%Y-%m-%d", func.date(columna, "weekday 0", "-6 days"))
        return func.strftime("%Y-%m-%d", columna)

    if dialecto == "postgresql":
        # Formatos literales: GROUP BY tiene que repetir exactamente la expresión del SELECT
        if granularidad == Granularidad.MES:
            return func.to_char(columna, literal_column("'YYYY-MM'"))
        if granularidad == Granularidad.SEMANA:
            semana = func.date_trunc(literal_column("'week'"), columna)
            return func.to_char(semana, literal_column("'YYYY-MM-DD'"))
        return func.to_char(columna, literal_column("'YYYY-MM-DD'"))

    raise UnsupportedStore(f"Reportes por período no soportados en {dialecto}")


def _filtro_facturables(fecha_desde: date, fecha_hasta: date):
    return and_(
        Reserva.fecha_reserva >= fecha_desde,
        Reserva.fecha_reserva <= fecha_hasta,
        Reserva.estado.in_(ESTADOS_FACTURABLES),
    )


def _filtrar_sede_deporte(query, id_sede: Optional[int], id_deporte: Optional[int]):
    if id_sede is not None:
        query = query.filter(Cancha.id_sede == id_sede)
    if id_deporte is not None:
        query = query.filter(Cancha.id_deporte == id_deporte)
    return query


# ========== INGRESOS ==========

@con_timeout
def ingresos_por_periodo(
    db: Session,
    fecha_desde: date,
    fecha_hasta: date,
    granularidad: Granularidad = Granularidad.DIA,
    id_sede: Optional[int] = None,
    id_deporte: Optional[int] = None,
) -> List[IngresoPeriodo]:
    """Reservas confirmadas/finalizadas agrupadas por período, en orden ascendente."""
    validar_rango(fecha_desde, fecha_hasta)
    periodo = expresion_periodo(
        Reserva.fecha_reserva, granularidad, db.get_bind().dialect.name
    ).label("periodo")

    query = db.query(
        periodo,
        func.count(Reserva.id_reserva).label("total_reservas"),
        func.sum(Reserva.precio_total).label("ingresos_totales"),
        func.sum(Reserva.sena_pagada).label("senas_cobradas"),
    ).select_from(Reserva)\
     .join(Turno)\
     .join(Cancha)\
     .filter(_filtro_facturables(fecha_desde, fecha_hasta))

    query = _filtrar_sede_deporte(query, id_sede, id_deporte)
    resultados = query.group_by(periodo).order_by(periodo).all()

    return [
        IngresoPeriodo(
            periodo=resultado.periodo,
            total_reservas=resultado.total_reservas,
            ingresos_totales=redondear_centesimos(resultado.ingresos_totales),
            senas_cobradas=redondear_centesimos(resultado.senas_cobradas),
        )
        for resultado in resultados
    ]


@con_timeout
def resumen_ingresos(
    db: Session,
    fecha_desde: date,
    fecha_hasta: date,
    id_sede: Optional[int] = None,
    id_deporte: Optional[int] = None,
) -> ResumenIngresos:
    validar_rango(fecha_desde, fecha_hasta)
    query = db.query(
        func.count(Reserva.id_reserva).label("total_reservas"),
        func.sum(Reserva.precio_total).label("ingresos_totales"),
        func.sum(Reserva.sena_pagada).label("senas_cobradas"),
    ).select_from(Reserva)\
     .join(Turno)\
     .join(Cancha)\
     .filter(_filtro_facturables(fecha_desde, fecha_hasta))

    resultado = _filtrar_sede_deporte(query, id_sede, id_deporte).first()

    return ResumenIngresos(
        fecha_desde=fecha_desde,
        fecha_hasta=fecha_hasta,
        total_reservas=resultado.total_reservas or 0,
        ingresos_totales=redondear_centesimos(resultado.ingresos_totales),
        senas_cobradas=redondear_centesimos(resultado.senas_cobradas),
    )


@con_timeout
def ingresos_por_deporte(
    db: Session,
    fecha_desde: date,
    fecha_hasta: date,
    id_sede: Optional[int] = None,
) -> List[IngresoDeporte]:
    """Ordenado por ingresos descendente; a igual ingreso, por id de deporte."""
    validar_rango(fecha_desde, fecha_hasta)
    ingresos = func.sum(Reserva.precio_total)

    query = db.query(
        Deporte.id_deporte,
        Deporte.nombre.label("deporte"),
        func.count(Reserva.id_reserva).label("total_reservas"),
        ingresos.label("ingresos_totales"),
        func.avg(Reserva.precio_total).label("precio_promedio"),
    ).select_from(Reserva)\
     .join(Turno)\
     .join(Cancha)\
     .join(Deporte)\
     .filter(_filtro_facturables(fecha_desde, fecha_hasta))

    query = _filtrar_sede_deporte(query, id_sede, None)
    resultados = query.group_by(Deporte.id_deporte, Deporte.nombre)\
        .order_by(ingresos.desc(), Deporte.id_deporte.asc())\
        .all()

    return [
        IngresoDeporte(
            id_deporte=resultado.id_deporte,
            deporte=resultado.deporte,
            total_reservas=resultado.total_reservas,
            ingresos_totales=redondear_centesimos(resultado.ingresos_totales),
            precio_promedio=redondear_centesimos(resultado.precio_promedio),
        )
        for resultado in resultados
    ]


@con_timeout
def ingresos_por_sede(
    db: Session,
    fecha_desde: date,
    fecha_hasta: date,
    id_deporte: Optional[int] = None,
) -> List[IngresoSede]:
    """Ordenado por ingresos descendente; a igual ingreso, por id de sede."""
    validar_rango(fecha_desde, fecha_hasta)
    ingresos = func.sum(Reserva.precio_total)

    query = db.query(
        Sede.id_sede,
        Sede.nombre.label("sede"),
        func.count(Reserva.id_reserva).label("total_reservas"),
        ingresos.label("ingresos_totales"),
        func.avg(Reserva.precio_total).label("precio_promedio"),
    ).select_from(Reserva)\
     .join(Turno)\
     .join(Cancha)\
     .join(Sede)\
     .filter(_filtro_facturables(fecha_desde, fecha_hasta))

    query = _filtrar_sede_deporte(query, None, id_deporte)
    resultados = query.group_by(Sede.id_sede, Sede.nombre)\
        .order_by(ingresos.desc(), Sede.id_sede.asc())\
        .all()

    return [
        IngresoSede(
            id_sede=resultado.id_sede,
            sede=resultado.sede,
            total_reservas=resultado.total_reservas,
            ingresos_totales=redondear_centesimos(resultado.ingresos_totales),
            precio_promedio=redondear_centesimos(resultado.precio_promedio),
        )
        for resultado in resultados
    ]


# ========== OCUPACIÓN ==========

def ordenar_ocupacion(filas: List[OcupacionCancha]) -> List[OcupacionCancha]:
    """Mayor ocupación primero; a igual porcentaje, por id de cancha."""
    return sorted(filas, key=lambda f: (-f.porcentaje_ocupacion, f.id_cancha))


@con_timeout
def ocupacion_por_cancha(
    db: Session,
    fecha_desde: date,
    fecha_hasta: date,
    id_sede: Optional[int] = None,
    id_deporte: Optional[int] = None,
) -> ReporteOcupacion:
    """
    Porcentaje de pares (turno, fecha) ocupados por cancha.

    Los disponibles salen de la misma expansión que usa la disponibilidad;
    solo cuentan como ocupadas las reservas no canceladas sobre esos pares,
    así el porcentaje queda siempre entre 0 y 100.
    """
    validar_rango(fecha_desde, fecha_hasta, settings.MAX_DIAS_REPORTE)

    canchas_query = db.query(Cancha, Sede.nombre, Deporte.nombre)\
        .join(Sede, Cancha.id_sede == Sede.id_sede)\
        .join(Deporte, Cancha.id_deporte == Deporte.id_deporte)\
        .filter(Cancha.activo.is_(True), Sede.activo.is_(True))
    canchas = _filtrar_sede_deporte(canchas_query, id_sede, id_deporte).all()
    ids_cancha = [cancha.id_cancha for cancha, _, _ in canchas]

    turnos = []
    if ids_cancha:
        turnos = db.query(Turno).filter(
            Turno.id_cancha.in_(ids_cancha),
            Turno.activo.is_(True),
        ).all()

    disponibles_por_cancha = Counter()
    pares_disponibles = set()
    for turno, fecha in expandir_turnos(turnos, fecha_desde, fecha_hasta):
        disponibles_por_cancha[turno.id_cancha] += 1
        pares_disponibles.add((turno.id_turno, fecha))

    ocupados_por_cancha = Counter()
    if turnos:
        reservas = db.query(Reserva.id_turno, Reserva.fecha_reserva, Turno.id_cancha)\
            .join(Turno)\
            .filter(
                Reserva.id_turno.in_([t.id_turno for t in turnos]),
                Reserva.fecha_reserva >= fecha_desde,
                Reserva.fecha_reserva <= fecha_hasta,
                Reserva.estado != ESTADO_CANCELADA,
            ).all()
        for reserva in reservas:
            if (reserva.id_turno, reserva.fecha_reserva) in pares_disponibles:
                ocupados_por_cancha[reserva.id_cancha] += 1

    filas = []
    for cancha, nombre_sede, nombre_deporte in canchas:
        disponibles = disponibles_por_cancha[cancha.id_cancha]
        ocupados = ocupados_por_cancha[cancha.id_cancha]
        filas.append(OcupacionCancha(
            id_cancha=cancha.id_cancha,
            cancha=f"{nombre_deporte} - Cancha {cancha.numero}",
            sede=nombre_sede,
            deporte=nombre_deporte,
            turnos_disponibles=disponibles,
            turnos_ocupados=ocupados,
            porcentaje_ocupacion=porcentaje(ocupados, disponibles),
        ))

    filas = ordenar_ocupacion(filas)
    promedio = (
        redondear_centesimos(sum(f.porcentaje_ocupacion for f in filas) / len(filas))
        if filas else redondear_centesimos(0)
    )

    return ReporteOcupacion(
        fecha_desde=fecha_desde,
        fecha_hasta=fecha_hasta,
        ocupacion_promedio=promedio,
        total_canchas=len(filas),
        canchas_mas_ocupadas=filas[:CANTIDAD_EXTREMOS],
        canchas_menos_ocupadas=list(reversed(filas[-CANTIDAD_EXTREMOS:])),
        ocupacion_por_cancha=filas,
    )


# ========== CLIENTES ==========

@con_timeout
def clientes_frecuentes(
    db: Session,
    fecha_desde: date,
    fecha_hasta: date,
    limite: int = 20,
) -> List[ClienteFrecuente]:
    """Clientes con más reservas confirmadas/finalizadas en el rango."""
    validar_rango(fecha_desde, fecha_hasta)
    total_reservas = func.count(Reserva.id_reserva)

    resultados = db.query(
        Cliente.id_cliente,
        Cliente.nombre,
        Cliente.apellido,
        Cliente.telefono,
        Cliente.email,
        total_reservas.label("total_reservas"),
        func.sum(Reserva.precio_total).label("gasto_total"),
        func.avg(Reserva.precio_total).label("gasto_promedio"),
        func.min(Reserva.fecha_reserva).label("primera_reserva"),
        func.max(Reserva.fecha_reserva).label("ultima_reserva"),
    ).join(Reserva, Reserva.id_cliente == Cliente.id_cliente)\
     .filter(_filtro_facturables(fecha_desde, fecha_hasta))\
     .group_by(Cliente.id_cliente, Cliente.nombre, Cliente.apellido, Cliente.telefono, Cliente.email)\
     .order_by(total_reservas.desc(), Cliente.id_cliente.asc())\
     .limit(limite)\
     .all()

    return [
        ClienteFrecuente(
            id_cliente=resultado.id_cliente,
            nombre=f"{resultado.nombre} {resultado.apellido}",
            telefono=resultado.telefono,
            email=resultado.email,
            total_reservas=resultado.total_reservas,
            gasto_total=redondear_centesimos(resultado.gasto_total),
            gasto_promedio=redondear_centesimos(resultado.gasto_promedio),
            primera_reserva=resultado.primera_reserva,
            ultima_reserva=resultado.ultima_reserva,
        )
        for resultado in resultados
    ]


@con_timeout
def clientes_por_deporte(db: Session, fecha_desde: date, fecha_hasta: date) -> List[ClientesDeporte]:
    validar_rango(fecha_desde, fecha_hasta)
    clientes_unicos = func.count(distinct(Reserva.id_cliente))

    resultados = db.query(
        Deporte.id_deporte,
        Deporte.nombre.label("deporte"),
        clientes_unicos.label("clientes_unicos"),
        func.count(Reserva.id_reserva).label("total_reservas"),
        func.sum(Reserva.precio_total).label("ingresos_totales"),
    ).select_from(Reserva)\
     .join(Turno)\
     .join(Cancha)\
     .join(Deporte)\
     .filter(_filtro_facturables(fecha_desde, fecha_hasta))\
     .group_by(Deporte.id_deporte, Deporte.nombre)\
     .order_by(clientes_unicos.desc(), Deporte.id_deporte.asc())\
     .all()

    return [
        ClientesDeporte(
            id_deporte=resultado.id_deporte,
            deporte=resultado.deporte,
            clientes_unicos=resultado.clientes_unicos,
            total_reservas=resultado.total_reservas,
            ingresos_totales=redondear_centesimos(resultado.ingresos_totales),
        )
        for resultado in resultados
    ]


@con_timeout
def nuevos_clientes_por_mes(db: Session, fecha_desde: date, fecha_hasta: date) -> List[NuevosClientesMes]:
    validar_rango(fecha_desde, fecha_hasta)
    mes = expresion_periodo(
        Cliente.fecha_registro, Granularidad.MES, db.get_bind().dialect.name
    ).label("mes")

    resultados = db.query(
        mes,
        func.count(Cliente.id_cliente).label("nuevos_clientes"),
    ).filter(
        Cliente.fecha_registro >= fecha_desde,
        Cliente.fecha_registro <= fecha_hasta,
    ).group_by(mes).order_by(mes).all()

    return [
        NuevosClientesMes(mes=resultado.mes, nuevos_clientes=resultado.nuevos_clientes)
        for resultado in resultados
    ]


# ========== DETALLE DE RESERVAS ==========

@con_timeout
def reporte_reservas(
    db: Session,
    fecha_desde: date,
    fecha_hasta: date,
    id_sede: Optional[int] = None,
) -> ReporteReservas:
    """
    Listado de reservas del rango (todos los estados) con estadísticas.

    Ingresos y señas solo suman reservas confirmadas o finalizadas; los
    conteos por estado y deporte incluyen todas.
    """
    validar_rango(fecha_desde, fecha_hasta)

    query = db.query(
        Reserva.id_reserva,
        Reserva.fecha_reserva,
        Reserva.estado,
        Reserva.precio_total,
        Reserva.sena_pagada,
        Turno.hora_inicio,
        Turno.hora_fin,
        Cancha.numero.label("cancha_numero"),
        Deporte.nombre.label("deporte"),
        Sede.nombre.label("sede"),
        Cliente.nombre.label("cliente_nombre"),
        Cliente.apellido.label("cliente_apellido"),
        Cliente.telefono.label("cliente_telefono"),
    ).select_from(Reserva)\
     .join(Turno, Reserva.id_turno == Turno.id_turno)\
     .join(Cancha, Turno.id_cancha == Cancha.id_cancha)\
     .join(Deporte, Cancha.id_deporte == Deporte.id_deporte)\
     .join(Sede, Cancha.id_sede == Sede.id_sede)\
     .join(Cliente, Reserva.id_cliente == Cliente.id_cliente)\
     .filter(
         Reserva.fecha_reserva >= fecha_desde,
         Reserva.fecha_reserva <= fecha_hasta,
     )

    query = _filtrar_sede_deporte(query, id_sede, None)
    filas = query.order_by(
        Reserva.fecha_reserva.desc(), Turno.hora_inicio.asc(), Reserva.id_reserva.asc()
    ).all()

    reservas = [
        ReservaDetalle(
            id_reserva=fila.id_reserva,
            fecha=fila.fecha_reserva,
            hora_inicio=fila.hora_inicio,
            hora_fin=fila.hora_fin,
            cliente=f"{fila.cliente_nombre} {fila.cliente_apellido}",
            telefono=fila.cliente_telefono,
            cancha=f"{fila.deporte} - Cancha {fila.cancha_numero}",
            sede=fila.sede,
            deporte=fila.deporte,
            estado=fila.estado,
            precio_total=redondear_centesimos(fila.precio_total),
            sena_pagada=redondear_centesimos(fila.sena_pagada),
        )
        for fila in filas
    ]

    facturables = [r for r in reservas if r.estado in ESTADOS_FACTURABLES]
    estadisticas = EstadisticasReservas(
        total_reservas=len(reservas),
        ingresos_totales=redondear_centesimos(sum((r.precio_total for r in facturables), Decimal("0"))),
        senas_cobradas=redondear_centesimos(sum((a_decimal(r.sena_pagada) for r in facturables), Decimal("0"))),
        reservas_por_estado=dict(Counter(r.estado for r in reservas)),
        reservas_por_deporte=dict(Counter(r.deporte for r in reservas)),
    )

    return ReporteReservas(
        fecha_desde=fecha_desde,
        fecha_hasta=fecha_hasta,
        id_sede=id_sede,
        estadisticas=estadisticas,
        reservas=reservas,
    )
