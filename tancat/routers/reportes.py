# tancat/routers/reportes.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from datetime import date, timedelta
from typing import Optional

from tancat.database import get_db
from tancat.schemas.reportes import Granularidad, ReporteOcupacion, ReporteReservas
from tancat.services import reportes

router = APIRouter()

def _rango(fecha_desde: Optional[date], fecha_hasta: Optional[date], dias: int):
    """Por defecto, los últimos `dias` días hasta hoy"""
    fecha_hasta = fecha_hasta or date.today()
    fecha_desde = fecha_desde or fecha_hasta - timedelta(days=dias)
    return fecha_desde, fecha_hasta

@router.get("/")
def get_reportes_disponibles():
    return {
        "disponibles": [
            {"id": "reservas", "endpoint": "/reportes/reservas",
             "parametros": ["fecha_desde", "fecha_hasta", "id_sede"]},
            {"id": "ingresos", "endpoint": "/reportes/ingresos",
             "parametros": ["fecha_desde", "fecha_hasta", "granularidad", "id_sede", "id_deporte"]},
            {"id": "ocupacion", "endpoint": "/reportes/ocupacion",
             "parametros": ["fecha_desde", "fecha_hasta", "id_sede", "id_deporte"]},
            {"id": "clientes", "endpoint": "/reportes/clientes",
             "parametros": ["fecha_desde", "fecha_hasta", "limite"]},
        ]
    }

@router.get("/reservas", response_model=ReporteReservas)
def reporte_reservas(
    fecha_desde: Optional[date] = Query(None, description="Fecha de inicio del reporte"),
    fecha_hasta: Optional[date] = Query(None, description="Fecha de fin del reporte"),
    id_sede: Optional[int] = Query(None, description="Filtrar por sede"),
    db: Session = Depends(get_db)
):
    fecha_desde, fecha_hasta = _rango(fecha_desde, fecha_hasta, 30)
    return reportes.reporte_reservas(db, fecha_desde, fecha_hasta, id_sede)

@router.get("/ingresos")
def reporte_ingresos(
    fecha_desde: Optional[date] = Query(None, description="Fecha de inicio del reporte"),
    fecha_hasta: Optional[date] = Query(None, description="Fecha de fin del reporte"),
    granularidad: Granularidad = Query(Granularidad.DIA, description="day, week o month"),
    id_sede: Optional[int] = Query(None, description="Filtrar por sede"),
    id_deporte: Optional[int] = Query(None, description="Filtrar por deporte"),
    db: Session = Depends(get_db)
):
    fecha_desde, fecha_hasta = _rango(fecha_desde, fecha_hasta, 30)
    return {
        "fecha_desde": fecha_desde,
        "fecha_hasta": fecha_hasta,
        "granularidad": granularidad,
        "resumen": reportes.resumen_ingresos(db, fecha_desde, fecha_hasta, id_sede, id_deporte),
        "ingresos_por_periodo": reportes.ingresos_por_periodo(
            db, fecha_desde, fecha_hasta, granularidad, id_sede, id_deporte
        ),
        "ingresos_por_deporte": reportes.ingresos_por_deporte(db, fecha_desde, fecha_hasta, id_sede),
        "ingresos_por_sede": reportes.ingresos_por_sede(db, fecha_desde, fecha_hasta, id_deporte),
    }

@router.get("/ocupacion", response_model=ReporteOcupacion)
def reporte_ocupacion(
    fecha_desde: Optional[date] = Query(None, description="Fecha de inicio del reporte"),
    fecha_hasta: Optional[date] = Query(None, description="Fecha de fin del reporte"),
    id_sede: Optional[int] = Query(None, description="Filtrar por sede"),
    id_deporte: Optional[int] = Query(None, description="Filtrar por deporte"),
    db: Session = Depends(get_db)
):
    fecha_desde, fecha_hasta = _rango(fecha_desde, fecha_hasta, 7)
    return reportes.ocupacion_por_cancha(db, fecha_desde, fecha_hasta, id_sede, id_deporte)

@router.get("/clientes")
def reporte_clientes(
    fecha_desde: Optional[date] = Query(None, description="Fecha de inicio del reporte"),
    fecha_hasta: Optional[date] = Query(None, description="Fecha de fin del reporte"),
    limite: int = Query(20, ge=1, le=100, description="Cantidad de clientes frecuentes"),
    db: Session = Depends(get_db)
):
    fecha_desde, fecha_hasta = _rango(fecha_desde, fecha_hasta, 90)
    return {
        "fecha_desde": fecha_desde,
        "fecha_hasta": fecha_hasta,
        "clientes_frecuentes": reportes.clientes_frecuentes(db, fecha_desde, fecha_hasta, limite),
        "clientes_por_deporte": reportes.clientes_por_deporte(db, fecha_desde, fecha_hasta),
        "nuevos_clientes_por_mes": reportes.nuevos_clientes_por_mes(db, fecha_desde, fecha_hasta),
    }
