# tancat/core/bloqueos.py

import threading
from contextlib import contextmanager
from typing import Dict, Hashable, Optional

from tancat.core.exceptions import Timeout


class _Entrada:
    __slots__ = ("lock", "usuarios")

    def __init__(self):
        self.lock = threading.Lock()
        self.usuarios = 0


class BloqueosPorClave:
    """
    Bloqueos por clave (turno, fecha) dentro del proceso.

    Dos operaciones sobre la misma clave se serializan; claves distintas
    nunca compiten. Las entradas se eliminan cuando nadie las usa.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._entradas: Dict[Hashable, _Entrada] = {}

    @contextmanager
    def adquirir(self, clave: Hashable, timeout: Optional[float] = None):
        with self._lock:
            entrada = self._entradas.get(clave)
            if entrada is None:
                entrada = self._entradas[clave] = _Entrada()
            entrada.usuarios += 1

        try:
            obtenido = entrada.lock.acquire(timeout=-1 if timeout is None else timeout)
            if not obtenido:
                raise Timeout(f"No se pudo adquirir el bloqueo para {clave}")
            try:
                yield
            finally:
                entrada.lock.release()
        finally:
            with self._lock:
                entrada.usuarios -= 1
                if entrada.usuarios == 0:
                    del self._entradas[clave]

    def __len__(self):
        with self._lock:
            return len(self._entradas)
