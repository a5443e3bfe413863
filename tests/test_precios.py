"""Cálculo de precios y señas."""

from datetime import date, time
from decimal import Decimal

import pytest

from tancat.core.exceptions import InvalidAmount, NoRateDefined
from tancat.models.tarifa import Tarifa
from tancat.schemas.catalogo import DeporteCreate, TarifaCreate
from tancat.services import catalogo
from tancat.services.precios import (
    calcular_duracion_horas,
    calcular_precio,
    calcular_sena,
    elegir_tarifa,
)
from tests.conftest import agregar_cancha

SABADO = date(2024, 6, 1)
LUNES = date(2024, 6, 3)


class TestRedondeo:
    def test_deposit_is_thirty_percent_by_default(self):
        assert calcular_sena(Decimal("1000")) == Decimal("300")

    def test_deposit_rounds_half_up(self):
        # 30% de 1005 = 301.5 -> 302
        assert calcular_sena(Decimal("1005")) == Decimal("302")
        # 50% de 5 = 2.5 -> 3 (redondeo bancario daría 2)
        assert calcular_sena(Decimal("5"), Decimal("50")) == Decimal("3")

    def test_duration_in_hours(self):
        assert calcular_duracion_horas(time(18), time(19)) == Decimal("1")
        assert calcular_duracion_horas(time(18), time(19, 30)) == Decimal("1.5")


class TestElegirTarifa:
    def test_most_specific_rate_wins(self):
        general = Tarifa(id_tarifa=1, id_deporte=1, precio_hora=Decimal("1000"))
        pico = Tarifa(
            id_tarifa=2, id_deporte=1, precio_hora=Decimal("1500"),
            hora_desde=time(18), hora_hasta=time(23),
        )
        assert elegir_tarifa([general, pico], LUNES, time(18)) is pico
        assert elegir_tarifa([general, pico], LUNES, time(10)) is general

    def test_weekday_rate_only_applies_that_day(self):
        general = Tarifa(id_tarifa=1, id_deporte=1, precio_hora=Decimal("1000"))
        finde = Tarifa(id_tarifa=2, id_deporte=1, dia_semana=5, precio_hora=Decimal("1200"))
        assert elegir_tarifa([general, finde], SABADO, time(18)) is finde
        assert elegir_tarifa([general, finde], LUNES, time(18)) is general

    def test_ties_go_to_lowest_id(self):
        a = Tarifa(id_tarifa=7, id_deporte=1, precio_hora=Decimal("900"))
        b = Tarifa(id_tarifa=3, id_deporte=1, precio_hora=Decimal("800"))
        assert elegir_tarifa([a, b], LUNES, time(18)) is b

    def test_no_candidates(self):
        finde = Tarifa(id_tarifa=2, id_deporte=1, dia_semana=5, precio_hora=Decimal("1200"))
        assert elegir_tarifa([finde], LUNES, time(18)) is None


class TestCalcularPrecio:
    def test_rate_times_duration(self, db, escenario):
        precio = calcular_precio(db, escenario.id_cancha, SABADO, time(18), time(19))
        assert precio.total == Decimal("1000")
        assert precio.sena_requerida == Decimal("300")
        assert precio.id_tarifa == escenario.id_tarifa

    def test_venue_rate_overrides_general(self, db, escenario):
        catalogo.crear_tarifa(db, TarifaCreate(
            id_deporte=escenario.id_deporte, id_sede=escenario.id_sede,
            precio_hora=Decimal("1100"),
        ))
        precio = calcular_precio(db, escenario.id_cancha, SABADO, time(18), time(20))
        assert precio.total == Decimal("2200")
        assert precio.sena_requerida == Decimal("660")

    def test_requested_price_overrides_rate(self, db, escenario):
        precio = calcular_precio(
            db, escenario.id_cancha, SABADO, time(18), time(19), precio_solicitado=Decimal("850")
        )
        assert precio.total == Decimal("850")
        assert precio.sena_requerida == Decimal("255")
        assert precio.id_tarifa is None

    def test_negative_requested_price(self, db, escenario):
        with pytest.raises(InvalidAmount):
            calcular_precio(
                db, escenario.id_cancha, SABADO, time(18), time(19), precio_solicitado=Decimal("-1")
            )

    def test_no_rate_for_sport(self, db, escenario):
        futbol = catalogo.crear_deporte(db, DeporteCreate(nombre="Fútbol 5"))
        cancha, _ = agregar_cancha(db, escenario.id_sede, futbol.id_deporte, 1)
        with pytest.raises(NoRateDefined):
            calcular_precio(db, cancha.id_cancha, SABADO, time(18), time(19))
