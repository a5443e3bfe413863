from pydantic import BaseModel
from typing import Dict, List, Optional
from datetime import date
from decimal import Decimal
from enum import Enum

from tancat.schemas.reserva import ReservaDetalle

class Granularidad(str, Enum):
    DIA = "day"
    SEMANA = "week"
    MES = "month"

class IngresoPeriodo(BaseModel):
    periodo: str
    total_reservas: int
    ingresos_totales: Decimal
    senas_cobradas: Decimal

class IngresoDeporte(BaseModel):
    id_deporte: int
    deporte: str
    total_reservas: int
    ingresos_totales: Decimal
    precio_promedio: Decimal

class IngresoSede(BaseModel):
    id_sede: int
    sede: str
    total_reservas: int
    ingresos_totales: Decimal
    precio_promedio: Decimal

class ResumenIngresos(BaseModel):
    fecha_desde: date
    fecha_hasta: date
    total_reservas: int
    ingresos_totales: Decimal
    senas_cobradas: Decimal

class OcupacionCancha(BaseModel):
    id_cancha: int
    cancha: str
    sede: str
    deporte: str
    turnos_disponibles: int
    turnos_ocupados: int
    porcentaje_ocupacion: Decimal

class ReporteOcupacion(BaseModel):
    fecha_desde: date
    fecha_hasta: date
    ocupacion_promedio: Decimal
    total_canchas: int
    canchas_mas_ocupadas: List[OcupacionCancha]
    canchas_menos_ocupadas: List[OcupacionCancha]
    ocupacion_por_cancha: List[OcupacionCancha]

class ClienteFrecuente(BaseModel):
    id_cliente: int
    nombre: str
    telefono: Optional[str] = None
    email: Optional[str] = None
    total_reservas: int
    gasto_total: Decimal
    gasto_promedio: Decimal
    primera_reserva: date
    ultima_reserva: date

class ClientesDeporte(BaseModel):
    id_deporte: int
    deporte: str
    clientes_unicos: int
    total_reservas: int
    ingresos_totales: Decimal

class NuevosClientesMes(BaseModel):
    mes: str
    nuevos_clientes: int

class EstadisticasReservas(BaseModel):
    total_reservas: int
    ingresos_totales: Decimal
    senas_cobradas: Decimal
    reservas_por_estado: Dict[str, int]
    reservas_por_deporte: Dict[str, int]

class ReporteReservas(BaseModel):
    fecha_desde: date
    fecha_hasta: date
    id_sede: Optional[int] = None
    estadisticas: EstadisticasReservas
    reservas: List[ReservaDetalle]
