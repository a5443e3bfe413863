# tancat/routers/reservas.py
from fastapi import APIRouter, Depends, Query
from datetime import date
from typing import List, Optional

from tancat.schemas.reserva import (
    ReservaCreate, ReservaResponse, ConfirmacionReserva, CancelacionReserva
)
from tancat.services.reservas import ServicioReservas

router = APIRouter()

_servicio = ServicioReservas()

def get_servicio_reservas() -> ServicioReservas:
    return _servicio

@router.post("/", response_model=ReservaResponse, status_code=201)
def create_reserva(
    reserva_data: ReservaCreate,
    servicio: ServicioReservas = Depends(get_servicio_reservas)
):
    """Crea una reserva pendiente; 409 si el turno ya está tomado para esa fecha"""
    return servicio.crear_reserva(
        id_turno=reserva_data.id_turno,
        fecha_reserva=reserva_data.fecha_reserva,
        id_cliente=reserva_data.id_cliente,
        precio_solicitado=reserva_data.precio_solicitado,
        observaciones=reserva_data.observaciones,
    )

@router.get("/", response_model=List[ReservaResponse])
def get_reservas(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    estado: Optional[str] = Query(None, pattern="^(pendiente|confirmada|finalizada|cancelada)$"),
    fecha_desde: Optional[date] = None,
    fecha_hasta: Optional[date] = None,
    id_sede: Optional[int] = None,
    id_cliente: Optional[int] = None,
    servicio: ServicioReservas = Depends(get_servicio_reservas)
):
    return servicio.listar_reservas(
        fecha_desde=fecha_desde,
        fecha_hasta=fecha_hasta,
        id_sede=id_sede,
        estado=estado,
        id_cliente=id_cliente,
        skip=skip,
        limit=limit,
    )

@router.get("/{reserva_id}", response_model=ReservaResponse)
def get_reserva(reserva_id: int, servicio: ServicioReservas = Depends(get_servicio_reservas)):
    return servicio.obtener_reserva(reserva_id)

@router.post("/{reserva_id}/confirmar", response_model=ReservaResponse)
def confirmar_reserva(
    reserva_id: int,
    datos: ConfirmacionReserva,
    servicio: ServicioReservas = Depends(get_servicio_reservas)
):
    return servicio.confirmar_reserva(reserva_id, datos.sena_pagada)

@router.post("/{reserva_id}/cancelar", response_model=ReservaResponse)
def cancelar_reserva(
    reserva_id: int,
    datos: Optional[CancelacionReserva] = None,
    servicio: ServicioReservas = Depends(get_servicio_reservas)
):
    """Cancelar es idempotente: una reserva ya cancelada responde 200 sin cambios"""
    motivo = datos.motivo if datos else None
    return servicio.cancelar_reserva(reserva_id, motivo)

@router.post("/{reserva_id}/finalizar", response_model=ReservaResponse)
def finalizar_reserva(reserva_id: int, servicio: ServicioReservas = Depends(get_servicio_reservas)):
    return servicio.finalizar_reserva(reserva_id)
