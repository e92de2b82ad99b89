import logging
from dataclasses import dataclass, field

from .client import ArcaClient
from .config import Config, validar_configuracion
from .exceptions import ArcaError
from .services.numeracion import SecuenciaLocks

logger = logging.getLogger(__name__)


@dataclass
class FacturacionContext:
    """Dependencias compartidas por los servicios de facturación."""
    config: object
    client: object
    secuencias: SecuenciaLocks = field(default_factory=SecuenciaLocks)


def crear_contexto(config_class=Config, client=None) -> FacturacionContext:
    """
    Arma el contexto de facturación.

    Si no se pasa un cliente se crea un ArcaClient con los certificados
    configurados, validando antes la configuración.

    Raises:
        ArcaError: si la configuración es inválida
    """
    config = config_class()

    if client is None:
        errores = validar_configuracion(config)
        if errores:
            raise ArcaError('Configuración de ARCA inválida:\n' + '\n'.join(errores))
        client = ArcaClient.from_config(config)
        logger.info(
            'Cliente ARCA creado para CUIT %s (ambiente %s)',
            config.ARCA_CUIT,
            config.ARCA_AMBIENTE,
        )

    return FacturacionContext(config=config, client=client)
