"""Ciclo de vida de las reservas."""

from datetime import date, time
from decimal import Decimal

import pytest
from sqlalchemy.exc import IntegrityError

from tancat.config import Settings
from tancat.core.exceptions import (
    InvalidAmount,
    InvalidTransition,
    NotFound,
    SlotUnavailable,
    TooEarly,
)
from tancat.models.cancelacion import Cancelacion
from tancat.models.reserva import Reserva
from tancat.schemas.catalogo import TurnoCreate
from tancat.schemas.disponibilidad import EstadoDisponibilidad
from tancat.services import catalogo
from tancat.services.disponibilidad import calcular_disponibilidad
from tancat.services.reservas import ServicioReservas, validar_transicion
from tests.conftest import HOY

JUNIO_1 = date(2024, 6, 1)
FUTURO = date(2024, 6, 20)


class TestEscenarioCompleto:
    def test_book_conflict_confirm_cancel_rebook(self, db, servicio, escenario):
        ana, bruno, carla = escenario.clientes

        reserva = servicio.crear_reserva(escenario.id_turno, JUNIO_1, ana)
        assert reserva.precio_total == Decimal("1000")
        assert reserva.sena_requerida == Decimal("300")
        assert reserva.sena_pagada == Decimal("0")
        assert reserva.estado == "pendiente"

        with pytest.raises(SlotUnavailable):
            servicio.crear_reserva(escenario.id_turno, JUNIO_1, bruno)

        confirmada = servicio.confirmar_reserva(reserva.id_reserva, Decimal("300"))
        assert confirmada.estado == "confirmada"
        assert confirmada.sena_pagada == Decimal("300")

        disponibilidad = calcular_disponibilidad(db, escenario.id_sede, JUNIO_1, JUNIO_1)
        (turno,) = disponibilidad.turnos
        assert turno.estado == EstadoDisponibilidad.OCUPADO
        assert turno.estado_reserva == "confirmada"

        cancelada = servicio.cancelar_reserva(reserva.id_reserva, "no viene")
        assert cancelada.estado == "cancelada"

        tercera = servicio.crear_reserva(escenario.id_turno, JUNIO_1, carla)
        assert tercera.estado == "pendiente"
        assert tercera.id_reserva != reserva.id_reserva


class TestCrearReserva:
    def test_conflict_performs_no_write(self, db, servicio, escenario):
        servicio.crear_reserva(escenario.id_turno, JUNIO_1, escenario.clientes[0])
        with pytest.raises(SlotUnavailable):
            servicio.crear_reserva(escenario.id_turno, JUNIO_1, escenario.clientes[1])
        assert db.query(Reserva).count() == 1

    def test_same_slot_other_date_is_free(self, servicio, escenario):
        servicio.crear_reserva(escenario.id_turno, JUNIO_1, escenario.clientes[0])
        otra = servicio.crear_reserva(escenario.id_turno, date(2024, 6, 2), escenario.clientes[1])
        assert otra.estado == "pendiente"

    def test_weekday_slot_rejects_other_days(self, db, servicio, escenario):
        sabados = catalogo.crear_turno(db, TurnoCreate(
            id_cancha=escenario.id_cancha, hora_inicio=time(10), hora_fin=time(11), dia_semana=5,
        ))
        with pytest.raises(SlotUnavailable):
            servicio.crear_reserva(sabados.id_turno, date(2024, 6, 3), escenario.clientes[0])
        assert db.query(Reserva).count() == 0

        reserva = servicio.crear_reserva(sabados.id_turno, JUNIO_1, escenario.clientes[0])
        assert reserva.estado == "pendiente"

    def test_unknown_slot(self, servicio, escenario):
        with pytest.raises(NotFound):
            servicio.crear_reserva(999, JUNIO_1, escenario.clientes[0])

    def test_unknown_client(self, servicio, escenario):
        with pytest.raises(NotFound):
            servicio.crear_reserva(escenario.id_turno, JUNIO_1, 999)

    def test_inactive_slot_cannot_be_booked(self, db, servicio, escenario):
        catalogo.desactivar_turno(db, escenario.id_turno, desde=date(2024, 6, 15))
        servicio.crear_reserva(escenario.id_turno, date(2024, 6, 14), escenario.clientes[0])
        with pytest.raises(SlotUnavailable):
            servicio.crear_reserva(escenario.id_turno, date(2024, 6, 15), escenario.clientes[0])

    def test_requested_price(self, servicio, escenario):
        reserva = servicio.crear_reserva(
            escenario.id_turno, JUNIO_1, escenario.clientes[0], precio_solicitado=Decimal("700")
        )
        assert reserva.precio_total == Decimal("700")
        assert reserva.sena_requerida == Decimal("210")

    def test_negative_requested_price(self, servicio, escenario):
        with pytest.raises(InvalidAmount):
            servicio.crear_reserva(
                escenario.id_turno, JUNIO_1, escenario.clientes[0], precio_solicitado=Decimal("-5")
            )

    def test_partial_unique_index_rejects_second_active_row(self, db, servicio, escenario):
        servicio.crear_reserva(escenario.id_turno, JUNIO_1, escenario.clientes[0])
        db.add(Reserva(
            id_turno=escenario.id_turno, id_cliente=escenario.clientes[1], fecha_reserva=JUNIO_1,
            estado="pendiente", precio_total=Decimal("1000"), sena_requerida=Decimal("300"),
            sena_pagada=Decimal("0"),
        ))
        with pytest.raises(IntegrityError):
            db.commit()
        db.rollback()

    def test_partial_unique_index_ignores_cancelled_rows(self, db, servicio, escenario):
        reserva = servicio.crear_reserva(escenario.id_turno, JUNIO_1, escenario.clientes[0])
        servicio.cancelar_reserva(reserva.id_reserva)
        db.add(Reserva(
            id_turno=escenario.id_turno, id_cliente=escenario.clientes[1], fecha_reserva=JUNIO_1,
            estado="pendiente", precio_total=Decimal("1000"), sena_requerida=Decimal("300"),
            sena_pagada=Decimal("0"),
        ))
        db.commit()
        assert db.query(Reserva).count() == 2


class TestConfirmarReserva:
    def test_only_from_pending(self, servicio, escenario):
        reserva = servicio.crear_reserva(escenario.id_turno, JUNIO_1, escenario.clientes[0])
        servicio.confirmar_reserva(reserva.id_reserva, Decimal("300"))
        with pytest.raises(InvalidTransition):
            servicio.confirmar_reserva(reserva.id_reserva, Decimal("300"))

    def test_cannot_confirm_cancelled(self, servicio, escenario):
        reserva = servicio.crear_reserva(escenario.id_turno, JUNIO_1, escenario.clientes[0])
        servicio.cancelar_reserva(reserva.id_reserva)
        with pytest.raises(InvalidTransition):
            servicio.confirmar_reserva(reserva.id_reserva, Decimal("300"))

    def test_negative_deposit(self, servicio, escenario):
        reserva = servicio.crear_reserva(escenario.id_turno, JUNIO_1, escenario.clientes[0])
        with pytest.raises(InvalidAmount):
            servicio.confirmar_reserva(reserva.id_reserva, Decimal("-1"))
        assert servicio.obtener_reserva(reserva.id_reserva).estado == "pendiente"

    def test_deposit_above_total(self, servicio, escenario):
        reserva = servicio.crear_reserva(escenario.id_turno, JUNIO_1, escenario.clientes[0])
        with pytest.raises(InvalidAmount):
            servicio.confirmar_reserva(reserva.id_reserva, Decimal("1000.01"))

    def test_full_payment_is_accepted(self, servicio, escenario):
        reserva = servicio.crear_reserva(escenario.id_turno, JUNIO_1, escenario.clientes[0])
        confirmada = servicio.confirmar_reserva(reserva.id_reserva, Decimal("1000"))
        assert confirmada.sena_pagada == confirmada.precio_total

    def test_outstanding_balance_follows_deposit(self, servicio, escenario):
        reserva = servicio.crear_reserva(escenario.id_turno, JUNIO_1, escenario.clientes[0])
        assert reserva.saldo_pendiente == Decimal("1000")

        confirmada = servicio.confirmar_reserva(reserva.id_reserva, Decimal("300"))
        assert confirmada.saldo_pendiente == Decimal("700")

    def test_tolerance_caps_deposit_at_total(self, session_factory, escenario):
        config = Settings(TOLERANCIA_SENA=Decimal("50"))
        servicio = ServicioReservas(session_factory, hoy=lambda: HOY, config=config)
        reserva = servicio.crear_reserva(escenario.id_turno, JUNIO_1, escenario.clientes[0])

        confirmada = servicio.confirmar_reserva(reserva.id_reserva, Decimal("1020"))
        assert confirmada.sena_pagada == Decimal("1000")
        assert confirmada.sena_pagada <= confirmada.precio_total

    def test_unknown_reservation(self, servicio, escenario):
        with pytest.raises(NotFound):
            servicio.confirmar_reserva(999, Decimal("300"))


class TestCancelarReserva:
    def test_double_cancel_is_a_noop(self, db, servicio, escenario):
        reserva = servicio.crear_reserva(escenario.id_turno, JUNIO_1, escenario.clientes[0])
        primera = servicio.cancelar_reserva(reserva.id_reserva, "lluvia")
        segunda = servicio.cancelar_reserva(reserva.id_reserva, "otra vez")

        assert primera.estado == segunda.estado == "cancelada"
        cancelaciones = db.query(Cancelacion).all()
        assert len(cancelaciones) == 1
        assert cancelaciones[0].motivo == "lluvia"
        assert cancelaciones[0].estado_anterior == "pendiente"

    def test_cancel_confirmed(self, servicio, escenario):
        reserva = servicio.crear_reserva(escenario.id_turno, JUNIO_1, escenario.clientes[0])
        servicio.confirmar_reserva(reserva.id_reserva, Decimal("300"))
        assert servicio.cancelar_reserva(reserva.id_reserva).estado == "cancelada"

    def test_cannot_cancel_finalized(self, servicio, escenario):
        reserva = servicio.crear_reserva(escenario.id_turno, JUNIO_1, escenario.clientes[0])
        servicio.confirmar_reserva(reserva.id_reserva, Decimal("300"))
        servicio.finalizar_reserva(reserva.id_reserva)
        with pytest.raises(InvalidTransition):
            servicio.cancelar_reserva(reserva.id_reserva)

    def test_reservation_is_never_deleted(self, db, servicio, escenario):
        reserva = servicio.crear_reserva(escenario.id_turno, JUNIO_1, escenario.clientes[0])
        servicio.cancelar_reserva(reserva.id_reserva)
        assert db.query(Reserva).filter(Reserva.id_reserva == reserva.id_reserva).count() == 1


class TestFinalizarReserva:
    def test_past_confirmed_reservation(self, servicio, escenario):
        reserva = servicio.crear_reserva(escenario.id_turno, JUNIO_1, escenario.clientes[0])
        servicio.confirmar_reserva(reserva.id_reserva, Decimal("300"))
        assert servicio.finalizar_reserva(reserva.id_reserva).estado == "finalizada"

    def test_on_the_slot_date(self, servicio, escenario):
        reserva = servicio.crear_reserva(escenario.id_turno, HOY, escenario.clientes[0])
        servicio.confirmar_reserva(reserva.id_reserva, Decimal("300"))
        assert servicio.finalizar_reserva(reserva.id_reserva).estado == "finalizada"

    def test_future_reservation_is_too_early(self, servicio, escenario):
        reserva = servicio.crear_reserva(escenario.id_turno, FUTURO, escenario.clientes[0])
        servicio.confirmar_reserva(reserva.id_reserva, Decimal("300"))
        with pytest.raises(TooEarly):
            servicio.finalizar_reserva(reserva.id_reserva)
        assert servicio.obtener_reserva(reserva.id_reserva).estado == "confirmada"

    def test_pending_cannot_be_finalized(self, servicio, escenario):
        reserva = servicio.crear_reserva(escenario.id_turno, JUNIO_1, escenario.clientes[0])
        with pytest.raises(InvalidTransition):
            servicio.finalizar_reserva(reserva.id_reserva)

    def test_finalized_is_terminal(self, servicio, escenario):
        reserva = servicio.crear_reserva(escenario.id_turno, JUNIO_1, escenario.clientes[0])
        servicio.confirmar_reserva(reserva.id_reserva, Decimal("300"))
        servicio.finalizar_reserva(reserva.id_reserva)
        with pytest.raises(InvalidTransition):
            servicio.finalizar_reserva(reserva.id_reserva)


class TestTransiciones:
    @pytest.mark.parametrize("actual,nuevo", [
        ("pendiente", "confirmada"),
        ("pendiente", "cancelada"),
        ("confirmada", "finalizada"),
        ("confirmada", "cancelada"),
    ])
    def test_valid(self, actual, nuevo):
        validar_transicion(actual, nuevo)

    @pytest.mark.parametrize("actual,nuevo", [
        ("confirmada", "pendiente"),
        ("pendiente", "finalizada"),
        ("finalizada", "cancelada"),
        ("cancelada", "pendiente"),
        ("cancelada", "confirmada"),
    ])
    def test_invalid(self, actual, nuevo):
        with pytest.raises(InvalidTransition):
            validar_transicion(actual, nuevo)


class TestConsultas:
    def test_list_filters(self, servicio, escenario):
        a = servicio.crear_reserva(escenario.id_turno, JUNIO_1, escenario.clientes[0])
        b = servicio.crear_reserva(escenario.id_turno, date(2024, 6, 2), escenario.clientes[1])
        servicio.cancelar_reserva(a.id_reserva)

        assert [r.id_reserva for r in servicio.listar_reservas(estado="pendiente")] == [b.id_reserva]
        assert [r.id_reserva for r in servicio.listar_reservas(id_cliente=escenario.clientes[0])] == [a.id_reserva]
        assert len(servicio.listar_reservas(id_sede=escenario.id_sede)) == 2
        assert servicio.listar_reservas(id_sede=999) == []
        assert [r.id_reserva for r in servicio.listar_reservas(fecha_desde=date(2024, 6, 2))] == [b.id_reserva]

    def test_get_unknown(self, servicio, escenario):
        with pytest.raises(NotFound):
            servicio.obtener_reserva(999)
