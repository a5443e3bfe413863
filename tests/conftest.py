"""
Fixtures compartidas.

Cada test usa una base SQLite nueva en un directorio temporal, un
ServicioReservas con "hoy" fijo y un catálogo chico: una sede con una
cancha de pádel que ofrece un turno diario de 18:00 a 19:00 a 1000 por hora.
"""

from datetime import date, time
from decimal import Decimal
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from tancat.database import crear_engine, get_db, init_db
from tancat.main import app
from tancat.routers.reservas import get_servicio_reservas
from tancat.schemas.catalogo import (
    CanchaCreate,
    ClienteCreate,
    DeporteCreate,
    SedeCreate,
    TarifaCreate,
    TurnoCreate,
)
from tancat.services import catalogo
from tancat.services.reservas import ServicioReservas

HOY = date(2024, 6, 10)


# ── Utilidades ─────────────────────────────────────────────────────────────


def agregar_cancha(db, id_sede, id_deporte, numero, horarios=((18, 19),)):
    """Crea una cancha con un turno por cada par (hora de inicio, hora de fin)."""
    cancha = catalogo.crear_cancha(
        db, CanchaCreate(id_sede=id_sede, id_deporte=id_deporte, numero=numero)
    )
    turnos = [
        catalogo.crear_turno(
            db,
            TurnoCreate(id_cancha=cancha.id_cancha, hora_inicio=time(inicio), hora_fin=time(fin)),
        )
        for inicio, fin in horarios
    ]
    return cancha, turnos


def agregar_cliente(db, nombre, apellido="Test", fecha_registro=None):
    return catalogo.crear_cliente(
        db,
        ClienteCreate(
            nombre=nombre,
            apellido=apellido,
            telefono="11-5555-0000",
            email=f"{nombre.lower()}@example.com",
            fecha_registro=fecha_registro,
        ),
    )


# ── Fixtures ───────────────────────────────────────────────────────────────


@pytest.fixture()
def engine(tmp_path):
    engine = crear_engine(f"sqlite:///{tmp_path / 'test.db'}", timeout=5)
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture()
def servicio(session_factory):
    return ServicioReservas(session_factory, hoy=lambda: HOY)


@pytest.fixture()
def escenario(db):
    """Sede Centro, pádel, cancha 1 con turno diario 18-19, tarifa 1000/h y tres clientes."""
    sede = catalogo.crear_sede(db, SedeCreate(nombre="Sede Centro", direccion="Av. Siempre Viva 742"))
    padel = catalogo.crear_deporte(db, DeporteCreate(nombre="Pádel"))
    cancha, (turno,) = agregar_cancha(db, sede.id_sede, padel.id_deporte, 1)
    tarifa = catalogo.crear_tarifa(
        db, TarifaCreate(id_deporte=padel.id_deporte, precio_hora=Decimal("1000"))
    )
    clientes = [
        agregar_cliente(db, "Ana", fecha_registro=date(2024, 5, 2)),
        agregar_cliente(db, "Bruno", fecha_registro=date(2024, 5, 20)),
        agregar_cliente(db, "Carla", fecha_registro=date(2024, 6, 3)),
    ]
    return SimpleNamespace(
        id_sede=sede.id_sede,
        id_deporte=padel.id_deporte,
        id_cancha=cancha.id_cancha,
        id_turno=turno.id_turno,
        id_tarifa=tarifa.id_tarifa,
        clientes=[c.id_cliente for c in clientes],
    )


@pytest.fixture()
def client(session_factory, servicio):
    """TestClient apuntando a la base temporal (sin lifespan, no crea la base por defecto)."""

    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_servicio_reservas] = lambda: servicio
    yield TestClient(app)
    app.dependency_overrides.clear()
