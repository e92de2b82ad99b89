"""
Cálculo de IVA y totales a partir de los items de una factura.

Cada importe intermedio se redondea a centavos por separado (por línea, por
alícuota y por total). Cambiar ese orden produce diferencias de un centavo
contra lo que ya se emitió, así que se mantiene tal cual.
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, List

from .constants import ALICUOTAS_IVA
from .rules import es_exento
from .types import AlicuotaIVA, Item, Totales, to_decimal

CENTAVOS = Decimal('0.01')


def redondear(valor) -> Decimal:
    """Redondea a 2 decimales, mitades hacia arriba (lejos de cero)."""
    return to_decimal(valor).quantize(CENTAVOS, rounding=ROUND_HALF_UP)


def porcentaje_alicuota(alicuota_id) -> Decimal:
    alicuota = ALICUOTAS_IVA.get(alicuota_id)
    if not alicuota:
        return Decimal('0')
    return Decimal(str(alicuota['porcentaje']))


def calcular_iva(precio_neto, alicuota_id) -> Decimal:
    """
    Calcula el IVA de un importe neto.

    Args:
        precio_neto: Importe sin IVA
        alicuota_id: ID de la alícuota (ej: 5 para 21%). Si no existe se toma 0%.

    Returns:
        Importe del IVA redondeado a centavos
    """
    porcentaje = porcentaje_alicuota(alicuota_id)
    return redondear(to_decimal(precio_neto) * porcentaje / Decimal('100'))


def calcular_precio_total(precio_neto, alicuota_id) -> Decimal:
    """Precio final (neto + IVA)."""
    iva = calcular_iva(precio_neto, alicuota_id)
    return redondear(to_decimal(precio_neto) + iva)


def agrupar_iva_por_alicuota(items: Iterable[Item], condicion_iva=None) -> List[AlicuotaIVA]:
    """
    Agrupa base imponible e IVA por alícuota, como lo exige ARCA.

    Si el receptor es exento no se discrimina IVA y se devuelve una lista vacía.
    """
    if es_exento(condicion_iva):
        return []

    bases: dict[int, Decimal] = {}
    importes: dict[int, Decimal] = {}

    for item in items:
        alicuota_id = int(item.alicuota_iva)
        neto = item.neto
        bases[alicuota_id] = bases.get(alicuota_id, Decimal('0')) + neto
        importes[alicuota_id] = importes.get(alicuota_id, Decimal('0')) + calcular_iva(neto, alicuota_id)

    return [
        AlicuotaIVA(
            id=alicuota_id,
            base_imponible=redondear(bases[alicuota_id]),
            importe=redondear(importes[alicuota_id]),
        )
        for alicuota_id in sorted(bases.keys())
    ]


def calcular_totales(items: Iterable[Item], condicion_iva=None) -> Totales:
    total_neto = Decimal('0')
    total_iva = Decimal('0')
    exento = es_exento(condicion_iva)

    for item in items:
        neto = item.neto
        total_neto += neto
        if not exento:
            total_iva += calcular_iva(neto, item.alicuota_iva)

    return Totales(
        neto=redondear(total_neto),
        iva=redondear(total_iva),
        total=redondear(total_neto + total_iva),
    )
