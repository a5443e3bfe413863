# tancat/core/montos.py

from decimal import Decimal, ROUND_HALF_UP

UNIDAD_MONEDA = Decimal("1")
CENTESIMOS = Decimal("0.01")
CIEN = Decimal("100")


def a_decimal(valor) -> Decimal:
    """Normaliza lo que devuelve la base (None, float, str, Decimal) a Decimal."""
    if valor is None:
        return Decimal("0")
    if isinstance(valor, Decimal):
        return valor
    return Decimal(str(valor))


def redondear_moneda(valor) -> Decimal:
    """Redondeo half-up a la unidad monetaria (nunca redondeo bancario)."""
    return a_decimal(valor).quantize(UNIDAD_MONEDA, rounding=ROUND_HALF_UP)


def redondear_centesimos(valor) -> Decimal:
    return a_decimal(valor).quantize(CENTESIMOS, rounding=ROUND_HALF_UP)


def porcentaje(parte, total) -> Decimal:
    """parte / total * 100 con dos decimales; 0 cuando total es 0."""
    if not total:
        return redondear_centesimos(0)
    return redondear_centesimos(a_decimal(parte) * CIEN / a_decimal(total))
