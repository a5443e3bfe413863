from pydantic import BaseModel, Field, computed_field
from typing import Optional
from datetime import date, time, datetime
from decimal import Decimal

class ReservaCreate(BaseModel):
    id_turno: int = Field(..., description="ID del turno")
    fecha_reserva: date = Field(..., description="Fecha para la que se reserva el turno")
    id_cliente: int = Field(..., description="ID del cliente")
    precio_solicitado: Optional[Decimal] = Field(None, description="Precio acordado; reemplaza al de la tarifa")
    observaciones: Optional[str] = None

class ConfirmacionReserva(BaseModel):
    sena_pagada: Decimal = Field(..., description="Seña recibida")

class CancelacionReserva(BaseModel):
    motivo: Optional[str] = Field(None, description="Motivo de la cancelación")

class ReservaResponse(BaseModel):
    id_reserva: int
    id_turno: int
    id_cliente: int
    fecha_reserva: date
    estado: str
    precio_total: Decimal
    sena_requerida: Decimal
    sena_pagada: Decimal
    observaciones: Optional[str] = None
    fecha_creacion: Optional[datetime] = None

    @computed_field
    @property
    def saldo_pendiente(self) -> Decimal:
        """Lo que falta cobrar: total menos seña pagada"""
        return self.precio_total - self.sena_pagada
    
    class Config:
        from_attributes = True

class ReservaDetalle(BaseModel):
    """Fila del reporte detallado de reservas"""
    id_reserva: int
    fecha: date
    hora_inicio: time
    hora_fin: time
    cliente: str
    telefono: Optional[str] = None
    cancha: str
    sede: str
    deporte: str
    estado: str
    precio_total: Decimal
    sena_pagada: Decimal
