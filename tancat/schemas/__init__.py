from .catalogo import *
from .reserva import *
from .disponibilidad import *
from .reportes import *

__all__ = [
    # Catálogo
    "SedeCreate", "SedeResponse", "DeporteCreate", "DeporteResponse",
    "CanchaCreate", "CanchaResponse", "CanchaDetalle", "DeporteEnSede", "CombinacionSede", "TurnoCreate", "TurnoResponse",
    "ClienteCreate", "ClienteResponse", "TarifaCreate", "TarifaResponse", "Precio",
    
    # Reserva
    "ReservaCreate", "ConfirmacionReserva", "CancelacionReserva",
    "ReservaResponse", "ReservaDetalle",
    
    # Disponibilidad
    "EstadoDisponibilidad", "TurnoDisponibilidad", "DisponibilidadResponse",
    
    # Reportes
    "Granularidad", "IngresoPeriodo", "IngresoDeporte", "IngresoSede",
    "ResumenIngresos", "OcupacionCancha", "ReporteOcupacion", "ClienteFrecuente",
    "ClientesDeporte", "NuevosClientesMes", "EstadisticasReservas", "ReporteReservas",
]
