# tancat/schemas/catalogo.py
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import date, time, datetime
from decimal import Decimal

# ---------- Sede ----------
class SedeBase(BaseModel):
    nombre: str = Field(..., min_length=1, max_length=100)
    direccion: Optional[str] = Field(None, max_length=150)

class SedeCreate(SedeBase):
    pass

class SedeResponse(SedeBase):
    id_sede: int
    activo: bool
    
    class Config:
        from_attributes = True

# ---------- Deporte ----------
class DeporteCreate(BaseModel):
    nombre: str = Field(..., min_length=1, max_length=100, description="Pádel, tenis, fútbol 5, etc.")

class DeporteResponse(DeporteCreate):
    id_deporte: int
    
    class Config:
        from_attributes = True

# ---------- Cancha ----------
class CanchaCreate(BaseModel):
    id_sede: int
    id_deporte: int
    numero: int = Field(..., ge=1, description="Número de cancha dentro de la sede")

class CanchaResponse(CanchaCreate):
    id_cancha: int
    activo: bool
    
    class Config:
        from_attributes = True

class CanchaDetalle(BaseModel):
    """Cancha con los nombres de su sede y deporte"""
    id_cancha: int
    numero: int
    id_sede: int
    sede: str
    id_deporte: int
    deporte: str

# ---------- Combinaciones sede-deporte ----------
class DeporteEnSede(BaseModel):
    id_deporte: int
    deporte: str
    cantidad_canchas: int

class CombinacionSede(BaseModel):
    id_sede: int
    sede: str
    direccion: Optional[str] = None
    deportes: List[DeporteEnSede]

# ---------- Turno ----------
class TurnoCreate(BaseModel):
    id_cancha: int
    hora_inicio: time
    hora_fin: time
    dia_semana: Optional[int] = Field(None, ge=0, le=6, description="0 = lunes ... 6 = domingo; vacío = todos los días")

class TurnoResponse(TurnoCreate):
    id_turno: int
    activo: bool
    fecha_baja: Optional[date] = None
    
    class Config:
        from_attributes = True

# ---------- Cliente ----------
class ClienteCreate(BaseModel):
    nombre: str = Field(..., min_length=1, max_length=100)
    apellido: str = Field(..., min_length=1, max_length=100)
    telefono: Optional[str] = Field(None, max_length=30)
    email: Optional[str] = Field(None, max_length=150)
    fecha_registro: Optional[date] = None

class ClienteResponse(ClienteCreate):
    id_cliente: int
    fecha_registro: date
    
    class Config:
        from_attributes = True

# ---------- Tarifa ----------
class TarifaCreate(BaseModel):
    id_deporte: int
    precio_hora: Decimal = Field(..., ge=0, description="Precio por hora de uso")
    id_sede: Optional[int] = None
    dia_semana: Optional[int] = Field(None, ge=0, le=6, description="0 = lunes, 6 = domingo")
    hora_desde: Optional[time] = None
    hora_hasta: Optional[time] = None

class TarifaResponse(TarifaCreate):
    id_tarifa: int
    activo: bool
    
    class Config:
        from_attributes = True

class Precio(BaseModel):
    total: Decimal
    sena_requerida: Decimal
    id_tarifa: Optional[int] = None
