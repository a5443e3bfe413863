# tancat/services/precios.py

from datetime import date, datetime, time
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from tancat.config import settings
from tancat.core.exceptions import InvalidAmount, NoRateDefined
from tancat.core.montos import CIEN, a_decimal, redondear_moneda
from tancat.models.tarifa import Tarifa
from tancat.schemas.catalogo import Precio
from tancat.services.catalogo import obtener_cancha


def calcular_duracion_horas(hora_inicio: time, hora_fin: time) -> Decimal:
    """Duración del turno en horas (exacta, sin redondear)"""
    inicio = datetime.combine(date.min, hora_inicio)
    fin = datetime.combine(date.min, hora_fin)
    segundos = int((fin - inicio).total_seconds())
    return Decimal(segundos) / Decimal(3600)


def calcular_sena(total: Decimal, porcentaje_sena: Optional[Decimal] = None) -> Decimal:
    if porcentaje_sena is None:
        porcentaje_sena = settings.PORCENTAJE_SENA
    return redondear_moneda(a_decimal(total) * a_decimal(porcentaje_sena) / CIEN)


def _aplica_franja(tarifa: Tarifa, hora_inicio: time) -> bool:
    if tarifa.hora_desde is not None and hora_inicio < tarifa.hora_desde:
        return False
    if tarifa.hora_hasta is not None and hora_inicio >= tarifa.hora_hasta:
        return False
    return True


def _especificidad(tarifa: Tarifa) -> int:
    return sum((
        tarifa.id_sede is not None,
        tarifa.dia_semana is not None,
        tarifa.hora_desde is not None or tarifa.hora_hasta is not None,
    ))


def elegir_tarifa(tarifas: List[Tarifa], fecha: date, hora_inicio: time) -> Optional[Tarifa]:
    """
    Elige la tarifa más específica que aplica a la fecha y hora.

    Las tarifas con sede, día de la semana o franja (hora pico) pesan más
    que las generales del deporte; a igual peso gana el id más bajo.
    """
    candidatas = [
        t for t in tarifas
        if (t.dia_semana is None or t.dia_semana == fecha.weekday())
        and _aplica_franja(t, hora_inicio)
    ]
    if not candidatas:
        return None
    return min(candidatas, key=lambda t: (-_especificidad(t), t.id_tarifa))


def buscar_tarifa(db: Session, id_deporte: int, id_sede: int, fecha: date, hora_inicio: time) -> Tarifa:
    tarifas = db.query(Tarifa).filter(
        Tarifa.id_deporte == id_deporte,
        Tarifa.activo.is_(True),
        or_(Tarifa.id_sede.is_(None), Tarifa.id_sede == id_sede),
    ).all()

    tarifa = elegir_tarifa(tarifas, fecha, hora_inicio)
    if tarifa is None:
        raise NoRateDefined(
            f"No hay tarifa para el deporte {id_deporte} en la sede {id_sede} "
            f"el {fecha.isoformat()} a las {hora_inicio.strftime('%H:%M')}"
        )
    return tarifa


def calcular_precio(
    db: Session,
    id_cancha: int,
    fecha: date,
    hora_inicio: time,
    hora_fin: time,
    precio_solicitado: Optional[Decimal] = None,
    porcentaje_sena: Optional[Decimal] = None,
) -> Precio:
    """
    Precio total y seña requerida para una cancha en una fecha y franja.

    total = precio por hora de la tarifa x duración, redondeado a la unidad.
    Si se indica precio_solicitado reemplaza al de la tarifa.
    """
    cancha = obtener_cancha(db, id_cancha)

    if precio_solicitado is not None:
        if a_decimal(precio_solicitado) < 0:
            raise InvalidAmount("El precio no puede ser negativo", campo="precio_solicitado")
        total = redondear_moneda(precio_solicitado)
        id_tarifa = None
    else:
        tarifa = buscar_tarifa(db, cancha.id_deporte, cancha.id_sede, fecha, hora_inicio)
        duracion = calcular_duracion_horas(hora_inicio, hora_fin)
        total = redondear_moneda(a_decimal(tarifa.precio_hora) * duracion)
        id_tarifa = tarifa.id_tarifa

    return Precio(
        total=total,
        sena_requerida=calcular_sena(total, porcentaje_sena),
        id_tarifa=id_tarifa,
    )
