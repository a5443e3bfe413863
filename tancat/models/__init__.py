from .sede import Sede
from .deporte import Deporte
from .cancha import Cancha
from .turno import Turno
from .cliente import Cliente
from .tarifa import Tarifa
from .reserva import Reserva
from .cancelacion import Cancelacion

__all__ = [
    "Sede", "Deporte", "Cancha", "Turno", "Cliente", "Tarifa",
    "Reserva", "Cancelacion"
]
