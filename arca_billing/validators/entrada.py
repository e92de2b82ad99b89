from decimal import Decimal, InvalidOperation

from ..constants import CONDICIONES_IVA, TIPOS_COMPROBANTE, TIPOS_CONCEPTO
from ..fechas import es_fecha_valida
from ..rules import es_alicuota_valida, requiere_fechas_servicio
from ..types import ResultadoValidacion
from .identidad import validar_importe, validar_punto_venta

CAMPOS_FECHA = ('fecha', 'fecha_servicio_desde', 'fecha_servicio_hasta', 'fecha_vto_pago')


def _numero_positivo(value) -> bool:
    if value is None or isinstance(value, bool):
        return False
    try:
        numero = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return False
    return numero.is_finite() and numero > 0


def _entero(value):
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def validar_datos_entrada(datos) -> ResultadoValidacion:
    """
    Valida la factura en formato amigable antes de numerarla.

    No consulta a ARCA: si hay errores el comprobante nunca se envía.
    """
    resultado = ResultadoValidacion()
    errores = resultado.errores

    if not isinstance(datos, dict):
        errores.append('Los datos de la factura deben ser un objeto')
        return resultado

    tipo = datos.get('tipo_comprobante')
    if tipo is None:
        errores.append('tipo_comprobante es obligatorio')
    elif _entero(tipo) not in TIPOS_COMPROBANTE:
        errores.append(f'tipo_comprobante {tipo} no es un tipo de comprobante válido')

    concepto = datos.get('concepto')
    if concepto is not None and _entero(concepto) not in TIPOS_CONCEPTO:
        errores.append(f'concepto {concepto} no es válido (1=Productos, 2=Servicios, 3=Ambos)')

    if datos.get('punto_venta') is not None:
        valid_pv = validar_punto_venta(datos['punto_venta'])
        if not valid_pv.valido:
            errores.append(valid_pv.error)

    cliente = datos.get('cliente')
    if not cliente:
        errores.append('cliente es obligatorio')
    elif not isinstance(cliente, dict):
        errores.append('cliente debe ser un objeto')
    else:
        if cliente.get('tipo_documento') is None:
            errores.append('cliente.tipo_documento es obligatorio')
        elif _entero(cliente['tipo_documento']) is None:
            errores.append('cliente.tipo_documento debe ser numérico')
        if cliente.get('numero_documento') is None:
            errores.append('cliente.numero_documento es obligatorio')
        if not cliente.get('condicion_iva'):
            errores.append('cliente.condicion_iva es obligatorio')
        elif _entero(cliente['condicion_iva']) not in CONDICIONES_IVA:
            errores.append(f'cliente.condicion_iva {cliente["condicion_iva"]} no es válida')

    items = datos.get('items')
    if not items or not isinstance(items, (list, tuple)):
        errores.append('Debe incluir al menos un item')
    else:
        for index, item in enumerate(items):
            if not isinstance(item, dict):
                errores.append(f'items[{index}] debe ser un objeto')
                continue
            if not item.get('descripcion'):
                errores.append(f'items[{index}].descripcion es obligatorio')
            for campo in ('cantidad', 'precio_unitario'):
                if item.get(campo) is None:
                    errores.append(f'items[{index}].{campo} es obligatorio')
                elif not _numero_positivo(item[campo]):
                    errores.append(f'items[{index}].{campo} debe ser un número mayor a 0')
            if item.get('alicuota_iva') is None:
                errores.append(f'items[{index}].alicuota_iva es obligatorio')
            elif not es_alicuota_valida(item['alicuota_iva']):
                errores.append(f'items[{index}].alicuota_iva {item["alicuota_iva"]} no es una alícuota válida')

    if requiere_fechas_servicio(concepto):
        if not datos.get('fecha_servicio_desde') or not datos.get('fecha_servicio_hasta'):
            errores.append('Para servicios debe incluir fecha_servicio_desde y fecha_servicio_hasta')

    for campo in CAMPOS_FECHA:
        valor = datos.get(campo)
        if valor not in (None, '') and not es_fecha_valida(valor):
            errores.append(f'{campo} {valor!r} no es una fecha válida (YYYYMMDD o YYYY-MM-DD)')

    if datos.get('cotizacion') is not None and not _numero_positivo(datos['cotizacion']):
        errores.append('cotizacion debe ser un número mayor a 0')

    asociados = datos.get('comprobantes_asociados')
    if asociados:
        if not isinstance(asociados, (list, tuple)):
            errores.append('comprobantes_asociados debe ser una lista')
        else:
            for index, asociado in enumerate(asociados):
                if not isinstance(asociado, dict):
                    errores.append(f'comprobantes_asociados[{index}] debe ser un objeto')
                    continue
                fecha_asociado = asociado.get('fecha')
                if fecha_asociado not in (None, '') and not es_fecha_valida(fecha_asociado):
                    errores.append(f'comprobantes_asociados[{index}].fecha no es una fecha válida')

    tributos = datos.get('tributos')
    if tributos:
        if not isinstance(tributos, (list, tuple)):
            errores.append('tributos debe ser una lista')
        else:
            for index, tributo in enumerate(tributos):
                if not isinstance(tributo, dict) or tributo.get('Importe') is None:
                    errores.append(f'tributos[{index}].Importe es obligatorio')
                    continue
                valid_importe = validar_importe(tributo['Importe'], f'tributos[{index}].Importe')
                if not valid_importe.valido:
                    errores.append(valid_importe.error)

    return resultado
