from datetime import date
from decimal import Decimal
from typing import Optional

from ..calculos import agrupar_iva_por_alicuota, calcular_totales, redondear
from ..constants import ALICUOTA_EXENTA
from ..fechas import resolver_fecha, resolver_fecha_opcional
from ..rules import es_comprobante_tipo_c, es_exento
from ..types import SolicitudFactura, Totales, to_decimal
from .factura_builder import FacturaBuilder


def transformar_a_formato_arca(
    solicitud: SolicitudFactura,
    numero_comprobante: int,
    punto_venta: int,
    hoy: Optional[date] = None,
) -> dict:
    """
    Transforma la factura amigable al registro que espera ARCA.

    Args:
        solicitud: Factura validada en formato amigable
        numero_comprobante: Número asignado (último autorizado + 1)
        punto_venta: Punto de venta efectivo
        hoy: Fecha a usar cuando la solicitud no trae fecha

    Returns:
        Registro plano con los campos de FECAEDetRequest
    """
    condicion_iva = solicitud.cliente.condicion_iva
    receptor_exento = es_exento(condicion_iva)
    tipo_c = es_comprobante_tipo_c(solicitud.tipo_comprobante)

    totales = calcular_totales(solicitud.items, condicion_iva)
    iva_agrupado = agrupar_iva_por_alicuota(solicitud.items, condicion_iva)
    if tipo_c:
        # Comprobante C: el importe es final, sin IVA discriminado
        totales = Totales(neto=totales.neto, iva=Decimal('0'), total=totales.neto)
        iva_agrupado = []

    no_gravado = redondear(solicitud.importe_no_gravado)
    exento = redondear(solicitud.importe_exento)
    tributos = redondear(sum(
        (to_decimal(tributo.get('Importe')) for tributo in solicitud.tributos),
        Decimal('0'),
    ))
    total = redondear(totales.total + no_gravado + exento + tributos)

    builder = FacturaBuilder()
    builder.set_comprobante(
        tipo=solicitud.tipo_comprobante,
        punto_venta=punto_venta,
        numero=numero_comprobante,
        concepto=solicitud.concepto,
    )
    builder.set_receptor(
        doc_tipo=solicitud.cliente.tipo_documento,
        doc_nro=solicitud.cliente.numero_documento,
    )
    builder.set_condicion_iva_receptor(condicion_iva)
    builder.set_importes(
        total=total,
        neto=totales.neto,
        iva=totales.iva,
        tributos=tributos,
        no_gravado=no_gravado,
        exento=exento,
    )
    builder.set_moneda(solicitud.moneda, solicitud.cotizacion)

    fecha_desde = resolver_fecha_opcional(solicitud.fecha_servicio_desde)
    fecha_hasta = resolver_fecha_opcional(solicitud.fecha_servicio_hasta)
    vto_pago = None
    if fecha_desde or fecha_hasta:
        vto_pago = resolver_fecha_opcional(solicitud.fecha_vto_pago) or fecha_hasta

    builder.set_fechas(
        emision=resolver_fecha(solicitud.fecha, hoy=hoy),
        desde=fecha_desde,
        hasta=fecha_hasta,
        vto_pago=vto_pago,
    )

    if receptor_exento and not tipo_c:
        # Operación exenta: se informa toda la base en la alícuota 0%
        builder.add_iva(alicuota_id=ALICUOTA_EXENTA, base_imponible=totales.neto, importe=0)
    else:
        for alicuota in iva_agrupado:
            builder.add_iva(
                alicuota_id=alicuota.id,
                base_imponible=alicuota.base_imponible,
                importe=alicuota.importe,
            )

    for asociado in solicitud.comprobantes_asociados:
        builder.add_comprobante_asociado(
            tipo=asociado.tipo,
            punto_venta=asociado.punto_venta,
            numero=asociado.numero,
            cuit=asociado.cuit_emisor,
            fecha=resolver_fecha_opcional(asociado.fecha),
        )

    for tributo in solicitud.tributos:
        builder.add_tributo(tributo)

    if solicitud.opcionales:
        builder.set_opcionales(solicitud.opcionales)

    return builder.build()
