from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Optional

from ..constants import (
    ALICUOTA_EXENTA,
    CONDICIONES_IVA,
    DOCUMENTOS_CON_CUIT,
    TIPOS_COMPROBANTE,
    TIPOS_CONCEPTO,
    TOLERANCIA_IMPORTES,
    TipoDocumento,
)
from ..rules import (
    es_combinacion_valida,
    es_comprobante_tipo_c,
    es_exento,
    nombre_comprobante,
    requiere_comprobante_asociado,
    requiere_fechas_servicio,
)
from ..types import ResultadoValidacion
from .identidad import (
    validar_cuit,
    validar_dni,
    validar_fecha,
    validar_importe,
    validar_punto_venta,
)

TOLERANCIA = Decimal(str(TOLERANCIA_IMPORTES))

CAMPOS_OBLIGATORIOS = ('CantReg', 'PtoVta', 'CbteTipo', 'Concepto', 'CbteDesde', 'CbteHasta', 'MonId')
# Pueden valer 0 legítimamente, solo se exige que estén presentes
CAMPOS_PRESENTES = ('DocTipo', 'DocNro', 'ImpTotal', 'ImpNeto', 'ImpIVA', 'MonCotiz')
IMPORTES = ('ImpTotal', 'ImpNeto', 'ImpIVA', 'ImpTotConc', 'ImpOpEx', 'ImpTrib')


def _decimal(value) -> Optional[Decimal]:
    if value is None or isinstance(value, bool):
        return None
    try:
        numero = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None
    return numero if numero.is_finite() else None


def _difiere(a: Decimal, b: Decimal) -> bool:
    return abs(a - b) > TOLERANCIA


def validar_datos_comprobante(datos: dict, hoy: Optional[date] = None) -> ResultadoValidacion:
    """
    Valida la estructura completa de un comprobante antes de enviarlo a ARCA.

    Recolecta todos los errores en lugar de cortar en el primero.

    Args:
        datos: Comprobante en formato ARCA (salida de transformar_a_formato_arca)
        hoy: Fecha de referencia para la ventana de emisión (default: hoy)

    Returns:
        ResultadoValidacion con la lista de errores encontrados
    """
    resultado = ResultadoValidacion()
    errores = resultado.errores

    # 1. Campos obligatorios
    for campo in CAMPOS_OBLIGATORIOS:
        if not datos.get(campo):
            errores.append(f'{campo} es obligatorio')
    for campo in CAMPOS_PRESENTES:
        if datos.get(campo) is None:
            errores.append(f'{campo} es obligatorio')

    if datos.get('CantReg') and datos['CantReg'] != 1:
        errores.append('CantReg debe ser 1 (un comprobante por solicitud)')

    tipo_cbte = datos.get('CbteTipo')
    if tipo_cbte and tipo_cbte not in TIPOS_COMPROBANTE:
        errores.append(f'CbteTipo {tipo_cbte} no es un tipo de comprobante válido')

    concepto = datos.get('Concepto')
    if concepto and concepto not in TIPOS_CONCEPTO:
        errores.append(f'Concepto {concepto} no es válido')

    if datos.get('CbteDesde') != datos.get('CbteHasta'):
        errores.append('CbteDesde y CbteHasta deben ser iguales (un comprobante por solicitud)')

    # 2. Punto de venta
    if datos.get('PtoVta') is not None:
        valid_pv = validar_punto_venta(datos['PtoVta'])
        if not valid_pv.valido:
            errores.append(valid_pv.error)

    # 3. Fecha del comprobante
    if datos.get('CbteFch'):
        valid_fecha = validar_fecha(datos['CbteFch'], hoy=hoy)
        if not valid_fecha.valido:
            errores.append(valid_fecha.error)

    # 4. Documento según el tipo
    doc_tipo = datos.get('DocTipo')
    doc_nro = datos.get('DocNro')
    if doc_nro not in (None, 0):
        valid_doc = None
        if doc_tipo in DOCUMENTOS_CON_CUIT:
            valid_doc = validar_cuit(doc_nro)
        elif doc_tipo == TipoDocumento.DNI:
            valid_doc = validar_dni(doc_nro)
        if valid_doc is not None and not valid_doc.valido:
            errores.append(valid_doc.error)
            resultado.documento_invalido = True

    # 5. Formato de importes
    for campo in IMPORTES:
        if datos.get(campo) is None:
            continue
        valid_importe = validar_importe(datos[campo], campo)
        if not valid_importe.valido:
            errores.append(valid_importe.error)

    # 6. Coherencia de importes
    imp_total = _decimal(datos.get('ImpTotal'))
    imp_neto = _decimal(datos.get('ImpNeto'))
    imp_iva = _decimal(datos.get('ImpIVA'))
    imp_tot_conc = _decimal(datos.get('ImpTotConc') or 0)
    imp_op_ex = _decimal(datos.get('ImpOpEx') or 0)
    imp_trib = _decimal(datos.get('ImpTrib') or 0)

    componentes = (imp_neto, imp_iva, imp_tot_conc, imp_op_ex, imp_trib)
    if imp_total is not None and None not in componentes:
        total_calculado = sum(componentes, Decimal('0'))
        if _difiere(total_calculado, imp_total):
            errores.append(
                f'ImpTotal ({imp_total}) no coincide con la suma de componentes ({total_calculado:.2f})'
            )

    # 7. Alícuotas de IVA
    alicuotas = datos.get('Iva') or []
    tipo_c = es_comprobante_tipo_c(tipo_cbte)
    if tipo_c:
        if alicuotas:
            errores.append('Los comprobantes C no discriminan IVA: no deben incluir el array Iva')
        if imp_iva is not None and imp_iva != 0:
            errores.append('Para comprobantes C ImpIVA debe ser 0')
    elif not alicuotas and ((imp_neto or 0) > 0 or (imp_iva or 0) > 0):
        errores.append('Si ImpNeto o ImpIVA son mayores a 0, debe incluir el array Iva con las alícuotas')

    if alicuotas and not tipo_c:
        suma_base = Decimal('0')
        suma_iva = Decimal('0')

        for index, alicuota in enumerate(alicuotas):
            if not alicuota.get('Id'):
                errores.append(f'Iva[{index}].Id es obligatorio')
            if alicuota.get('BaseImp') is None:
                errores.append(f'Iva[{index}].BaseImp es obligatorio')
            if alicuota.get('Importe') is None:
                errores.append(f'Iva[{index}].Importe es obligatorio')

            suma_base += _decimal(alicuota.get('BaseImp') or 0) or Decimal('0')
            suma_iva += _decimal(alicuota.get('Importe') or 0) or Decimal('0')

        if imp_neto is not None and _difiere(suma_base, imp_neto):
            errores.append(
                f'La suma de BaseImp en Iva ({suma_base:.2f}) debe coincidir con ImpNeto ({imp_neto})'
            )

        if imp_iva is not None and _difiere(suma_iva, imp_iva):
            errores.append(
                f'La suma de Importe en Iva ({suma_iva:.2f}) debe coincidir con ImpIVA ({imp_iva})'
            )

    # 8. Receptor exento: solo alícuota 0% y sin IVA
    condicion_iva = datos.get('CondicionIVAReceptorId')
    if es_exento(condicion_iva) and not tipo_c:
        ids = [alicuota.get('Id') for alicuota in alicuotas]
        if ALICUOTA_EXENTA not in ids:
            errores.append(
                f'Para receptores exentos el array Iva debe incluir la alícuota 0% (Id {int(ALICUOTA_EXENTA)})'
            )
        if any(alicuota_id != ALICUOTA_EXENTA for alicuota_id in ids):
            errores.append(
                f'Para receptores exentos solo se admite la alícuota 0% (Id {int(ALICUOTA_EXENTA)})'
            )
        if imp_iva is None or imp_iva != 0:
            errores.append('Para receptores exentos ImpIVA debe ser 0')

    # 9. Combinación tipo de comprobante / condición IVA
    if condicion_iva:
        if condicion_iva not in CONDICIONES_IVA:
            errores.append(f'CondicionIVAReceptorId {condicion_iva} no es válida')
        elif tipo_cbte in TIPOS_COMPROBANTE and not es_combinacion_valida(tipo_cbte, condicion_iva):
            errores.append(
                f'La combinación de tipo de comprobante ({nombre_comprobante(tipo_cbte)}) '
                f'y condición IVA del receptor ({CONDICIONES_IVA[condicion_iva]}) no es válida'
            )

    # 10. Notas de crédito/débito
    if requiere_comprobante_asociado(tipo_cbte):
        asociados = datos.get('CbtesAsoc') or []
        if not asociados:
            errores.append('Las notas de crédito/débito requieren al menos un comprobante asociado')
        for index, asociado in enumerate(asociados):
            if not (asociado.get('Tipo') and asociado.get('PtoVta') and asociado.get('Nro')):
                errores.append(
                    f'CbtesAsoc[{index}] debe indicar Tipo, PtoVta y Nro del comprobante asociado'
                )

    # 11. Fechas de servicio
    if requiere_fechas_servicio(concepto):
        desde = datos.get('FchServDesde')
        hasta = datos.get('FchServHasta')
        if not desde or not hasta:
            errores.append('Para servicios debe incluir FchServDesde y FchServHasta')
        elif str(desde) > str(hasta):
            errores.append('FchServDesde no puede ser posterior a FchServHasta')

    # 12. Otros tributos
    tributos = datos.get('Tributos') or []
    if tributos and imp_trib is not None:
        suma_tributos = sum(
            (_decimal(tributo.get('Importe')) or Decimal('0') for tributo in tributos),
            Decimal('0'),
        )
        if _difiere(suma_tributos, imp_trib):
            errores.append(
                f'La suma de Importe en Tributos ({suma_tributos:.2f}) debe coincidir con ImpTrib ({imp_trib})'
            )

    return resultado
