from .identidad import (
    asegurar_cuit,
    limpiar_documento,
    validar_cuit,
    validar_dni,
    validar_fecha,
    validar_importe,
    validar_punto_venta,
)
from .entrada import validar_datos_entrada
from .comprobante import validar_datos_comprobante

__all__ = [
    'asegurar_cuit',
    'limpiar_documento',
    'validar_cuit',
    'validar_dni',
    'validar_fecha',
    'validar_importe',
    'validar_punto_venta',
    'validar_datos_entrada',
    'validar_datos_comprobante',
]
