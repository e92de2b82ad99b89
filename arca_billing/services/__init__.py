from .wsfe import WSFEService
from .numeracion import SecuenciaLocks, asignar_siguiente_numero
from .facturacion import EstadoFacturacion, FacturacionService, ProcesoFacturacion

__all__ = [
    'WSFEService',
    'SecuenciaLocks',
    'asignar_siguiente_numero',
    'EstadoFacturacion',
    'FacturacionService',
    'ProcesoFacturacion',
]
