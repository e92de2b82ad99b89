from .client import ArcaClient
from .contexto import FacturacionContext, crear_contexto
from .exceptions import (
    ArcaError,
    ArcaAuthError,
    ArcaNetworkError,
    ArcaValidationError,
    AuthorityError,
    IdentityChecksumError,
    InputValidationError,
    NotFoundError,
    StructuralValidationError,
)
from .services import EstadoFacturacion, FacturacionService, ProcesoFacturacion

__all__ = [
    'ArcaClient',
    'FacturacionContext',
    'crear_contexto',
    'FacturacionService',
    'EstadoFacturacion',
    'ProcesoFacturacion',
    'ArcaError',
    'ArcaAuthError',
    'ArcaNetworkError',
    'ArcaValidationError',
    'AuthorityError',
    'IdentityChecksumError',
    'InputValidationError',
    'NotFoundError',
    'StructuralValidationError',
]
