from .constants import (
    ALICUOTAS_IVA,
    COMBINACIONES_PERMITIDAS,
    LETRAS_COMPROBANTE,
    NOTAS_CREDITO,
    NOTAS_DEBITO,
    TIPOS_COMPROBANTE,
    Concepto,
    CondicionIVA,
    TipoComprobante,
    TipoDocumento,
)


def _as_int(value) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def es_exento(condicion_iva) -> bool:
    return _as_int(condicion_iva) == CondicionIVA.EXENTO


def es_nota_credito(tipo_comprobante) -> bool:
    return _as_int(tipo_comprobante) in NOTAS_CREDITO


def es_nota_debito(tipo_comprobante) -> bool:
    return _as_int(tipo_comprobante) in NOTAS_DEBITO


def requiere_comprobante_asociado(tipo_comprobante) -> bool:
    """Las notas de crédito y débito deben referenciar el comprobante original."""
    return es_nota_credito(tipo_comprobante) or es_nota_debito(tipo_comprobante)


def requiere_fechas_servicio(concepto) -> bool:
    return _as_int(concepto) in (Concepto.SERVICIOS, Concepto.PRODUCTOS_Y_SERVICIOS)


def letra_comprobante(tipo_comprobante) -> str | None:
    tipo = _as_int(tipo_comprobante)
    if tipo not in TIPOS_COMPROBANTE:
        return None
    return LETRAS_COMPROBANTE[TipoComprobante(tipo)]


def es_combinacion_valida(tipo_comprobante, condicion_iva) -> bool:
    """
    Indica si ARCA admite emitir el tipo de comprobante al receptor.

    Las letras A y M solo se emiten a responsables inscriptos; la letra B
    nunca a un responsable inscripto. C y E no restringen la condición.
    """
    letra = letra_comprobante(tipo_comprobante)
    if letra is None:
        return False

    permitidas = COMBINACIONES_PERMITIDAS[letra]
    if permitidas is None:
        return True
    return _as_int(condicion_iva) in permitidas


def es_alicuota_valida(alicuota_id) -> bool:
    return _as_int(alicuota_id) in ALICUOTAS_IVA


def es_comprobante_tipo_c(tipo_comprobante) -> bool:
    """Los comprobantes C no discriminan IVA."""
    return letra_comprobante(tipo_comprobante) == 'C'


def nombre_comprobante(codigo) -> str:
    return TIPOS_COMPROBANTE.get(_as_int(codigo), 'Comprobante Desconocido')


def determinar_tipo_documento(numero) -> int:
    """Infiere el tipo de documento por la cantidad de dígitos."""
    digitos = ''.join(c for c in str(numero or '') if c.isdigit())
    if not digitos or int(digitos) == 0:
        return TipoDocumento.CONSUMIDOR_FINAL
    if len(digitos) == 11:
        return TipoDocumento.CUIT
    if len(digitos) in (7, 8):
        return TipoDocumento.DNI
    return TipoDocumento.CONSUMIDOR_FINAL


def determinar_tipo_comprobante(condicion_iva, nota_credito: bool = False) -> int:
    """Sugiere el comprobante para un emisor responsable inscripto."""
    if _as_int(condicion_iva) in COMBINACIONES_PERMITIDAS['A']:
        return TipoComprobante.NOTA_CREDITO_A if nota_credito else TipoComprobante.FACTURA_A
    return TipoComprobante.NOTA_CREDITO_B if nota_credito else TipoComprobante.FACTURA_B
