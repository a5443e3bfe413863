from pydantic import BaseModel
from typing import List, Optional
from datetime import date, time
from enum import Enum

class EstadoDisponibilidad(str, Enum):
    LIBRE = "free"
    OCUPADO = "occupied"

class TurnoDisponibilidad(BaseModel):
    id_turno: int
    id_cancha: int
    numero_cancha: int
    id_deporte: int
    fecha: date
    hora_inicio: time
    hora_fin: time
    estado: EstadoDisponibilidad
    # Solo para turnos ocupados: pendiente (seña no recibida) o confirmada
    estado_reserva: Optional[str] = None
    id_reserva: Optional[int] = None

class DisponibilidadResponse(BaseModel):
    id_sede: int
    id_deporte: Optional[int] = None
    fecha_desde: date
    fecha_hasta: date
    total_libres: int
    total_ocupados: int
    turnos: List[TurnoDisponibilidad]
