import os

from .constants import CUIT_PRUEBA, PUNTO_VENTA_MAX, PUNTO_VENTA_MIN
from .validators import validar_cuit

AMBIENTES = ('testing', 'production')


class Config:
    # Emisor
    ARCA_CUIT = os.environ.get('ARCA_CUIT', CUIT_PRUEBA)
    ARCA_PUNTO_VENTA = int(os.environ.get('ARCA_PUNTO_VENTA', '1'))

    # ARCA
    ARCA_AMBIENTE = os.environ.get('ARCA_AMBIENTE', 'testing')
    ARCA_CERT_PATH = os.environ.get('ARCA_CERT_PATH')
    ARCA_KEY_PATH = os.environ.get('ARCA_KEY_PATH')
    ARCA_TA_CACHE_DIR = os.environ.get('ARCA_TA_CACHE_DIR')


class DevelopmentConfig(Config):
    ARCA_AMBIENTE = 'testing'


class ProductionConfig(Config):
    ARCA_AMBIENTE = 'production'


class TestingConfig(Config):
    TESTING = True
    ARCA_AMBIENTE = 'testing'
    ARCA_CUIT = CUIT_PRUEBA
    ARCA_PUNTO_VENTA = 1
    ARCA_CERT_PATH = None
    ARCA_KEY_PATH = None
    ARCA_TA_CACHE_DIR = None


def validar_configuracion(config, requiere_certificados: bool = True) -> list[str]:
    """Devuelve la lista de problemas de configuración (vacía si está todo bien)."""
    errores = []

    if not config.ARCA_CUIT:
        errores.append('ARCA_CUIT no está configurado')
    else:
        valid_cuit = validar_cuit(config.ARCA_CUIT)
        if not valid_cuit.valido:
            errores.append(f'ARCA_CUIT: {valid_cuit.error}')

    if config.ARCA_AMBIENTE not in AMBIENTES:
        errores.append(f'ARCA_AMBIENTE debe ser uno de: {", ".join(AMBIENTES)}')

    if not PUNTO_VENTA_MIN <= int(config.ARCA_PUNTO_VENTA) <= PUNTO_VENTA_MAX:
        errores.append(f'ARCA_PUNTO_VENTA debe ser entre {PUNTO_VENTA_MIN} y {PUNTO_VENTA_MAX}')

    if requiere_certificados and (not config.ARCA_CERT_PATH or not config.ARCA_KEY_PATH):
        errores.append('Se deben configurar ARCA_CERT_PATH y ARCA_KEY_PATH')

    return errores
