# tancat/routers/catalogo.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from datetime import date, time
from typing import List, Optional

from tancat.database import get_db
from tancat.schemas.catalogo import (
    SedeCreate, SedeResponse, DeporteCreate, DeporteResponse,
    CanchaCreate, CanchaResponse, CanchaDetalle, CombinacionSede, TurnoCreate, TurnoResponse,
    ClienteCreate, ClienteResponse, TarifaCreate, TarifaResponse, Precio,
)
from tancat.services import catalogo
from tancat.services.precios import calcular_precio

router = APIRouter()

@router.get("/sedes", response_model=List[SedeResponse])
def get_sedes(
    incluir_inactivas: bool = Query(False, description="Incluir sedes dadas de baja"),
    db: Session = Depends(get_db)
):
    return catalogo.listar_sedes(db, incluir_inactivas)

@router.get("/sedes/{sede_id}", response_model=SedeResponse)
def get_sede(sede_id: int, db: Session = Depends(get_db)):
    return catalogo.obtener_sede(db, sede_id)

@router.post("/sedes", response_model=SedeResponse)
def create_sede(sede_data: SedeCreate, db: Session = Depends(get_db)):
    return catalogo.crear_sede(db, sede_data)

@router.delete("/sedes/{sede_id}", response_model=SedeResponse)
def desactivar_sede(sede_id: int, db: Session = Depends(get_db)):
    """Baja lógica: la sede deja de ofrecer turnos"""
    return catalogo.desactivar_sede(db, sede_id)

@router.get("/sedes/{sede_id}/turnos", response_model=List[TurnoResponse])
def get_turnos_sede(
    sede_id: int,
    id_deporte: Optional[int] = Query(None, description="Filtrar por deporte"),
    db: Session = Depends(get_db)
):
    return catalogo.listar_turnos(db, sede_id, id_deporte)

@router.get("/deportes", response_model=List[DeporteResponse])
def get_deportes(db: Session = Depends(get_db)):
    return catalogo.listar_deportes(db)

@router.get("/canchas", response_model=List[CanchaDetalle])
def get_canchas(
    id_sede: Optional[int] = Query(None, description="Filtrar por sede"),
    id_deporte: Optional[int] = Query(None, description="Filtrar por deporte"),
    db: Session = Depends(get_db)
):
    return catalogo.listar_canchas(db, id_sede, id_deporte)

@router.get("/combinaciones-disponibles", response_model=List[CombinacionSede])
def get_combinaciones_disponibles(db: Session = Depends(get_db)):
    """Sedes con los deportes que ofrecen y cuántas canchas tiene cada uno"""
    return catalogo.combinaciones_disponibles(db)

@router.post("/deportes", response_model=DeporteResponse)
def create_deporte(deporte_data: DeporteCreate, db: Session = Depends(get_db)):
    return catalogo.crear_deporte(db, deporte_data)

@router.post("/canchas", response_model=CanchaResponse)
def create_cancha(cancha_data: CanchaCreate, db: Session = Depends(get_db)):
    return catalogo.crear_cancha(db, cancha_data)

@router.get("/canchas/{cancha_id}/precio", response_model=Precio)
def get_precio_cancha(
    cancha_id: int,
    fecha: date = Query(..., description="Fecha en formato YYYY-MM-DD"),
    hora_inicio: time = Query(...),
    hora_fin: time = Query(...),
    db: Session = Depends(get_db)
):
    return calcular_precio(db, cancha_id, fecha, hora_inicio, hora_fin)

@router.post("/turnos", response_model=TurnoResponse)
def create_turno(turno_data: TurnoCreate, db: Session = Depends(get_db)):
    return catalogo.crear_turno(db, turno_data)

@router.delete("/turnos/{turno_id}", response_model=TurnoResponse)
def desactivar_turno(
    turno_id: int,
    desde: Optional[date] = Query(None, description="Fecha desde la que deja de ofrecerse"),
    db: Session = Depends(get_db)
):
    return catalogo.desactivar_turno(db, turno_id, desde)

@router.post("/clientes", response_model=ClienteResponse)
def create_cliente(cliente_data: ClienteCreate, db: Session = Depends(get_db)):
    return catalogo.crear_cliente(db, cliente_data)

@router.post("/tarifas", response_model=TarifaResponse)
def create_tarifa(tarifa_data: TarifaCreate, db: Session = Depends(get_db)):
    return catalogo.crear_tarifa(db, tarifa_data)
