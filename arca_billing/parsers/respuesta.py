from ..fechas import formatear_fecha
from ..types import CAEResponse


def formatear_respuesta_arca(respuesta: CAEResponse, datos_arca: dict) -> dict:
    """
    Arma la respuesta amigable a partir de la autorización de ARCA.

    Si ARCA no devuelve el número asignado se usa el del comprobante enviado.
    """
    vencimiento = respuesta.cae_vencimiento.isoformat() if respuesta.cae_vencimiento else None

    return {
        'exito': True,
        'comprobante': {
            'numero': respuesta.numero_comprobante or datos_arca.get('CbteDesde'),
            'punto_venta': datos_arca.get('PtoVta'),
            'tipo': datos_arca.get('CbteTipo'),
            'fecha': formatear_fecha(datos_arca.get('CbteFch')),
            'total': datos_arca.get('ImpTotal'),
        },
        'autorizacion': {
            'cae': respuesta.cae,
            'vencimiento': vencimiento,
            'resultado': respuesta.resultado or 'A',
        },
        'cliente': {
            'tipo_documento': datos_arca.get('DocTipo'),
            'numero_documento': datos_arca.get('DocNro'),
            'condicion_iva': datos_arca.get('CondicionIVAReceptorId'),
        },
        'importes': {
            'neto': datos_arca.get('ImpNeto'),
            'iva': datos_arca.get('ImpIVA'),
            'total': datos_arca.get('ImpTotal'),
        },
    }
