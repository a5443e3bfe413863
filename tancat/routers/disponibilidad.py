# tancat/routers/disponibilidad.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from datetime import date
from typing import Optional

from tancat.database import get_db
from tancat.schemas.disponibilidad import DisponibilidadResponse
from tancat.services.disponibilidad import calcular_disponibilidad

router = APIRouter()

@router.get("/", response_model=DisponibilidadResponse)
def get_disponibilidad(
    id_sede: int = Query(..., description="Sede a consultar"),
    fecha_desde: date = Query(..., description="Fecha en formato YYYY-MM-DD"),
    fecha_hasta: date = Query(..., description="Fecha en formato YYYY-MM-DD"),
    id_deporte: Optional[int] = Query(None, description="Filtrar por deporte"),
    db: Session = Depends(get_db)
):
    """Turnos libres y ocupados de una sede en un rango de fechas"""
    return calcular_disponibilidad(db, id_sede, fecha_desde, fecha_hasta, id_deporte)
