import logging
import threading
from contextlib import contextmanager

from ..exceptions import ArcaError, AuthorityError

logger = logging.getLogger(__name__)


class SecuenciaLocks:
    """
    Serializa la numeración por (punto de venta, tipo de comprobante).

    ARCA exige números correlativos: entre FECompUltimoAutorizado y
    FECAESolicitar no puede colarse otra emisión del mismo par, o ambas
    pedirían el mismo número.
    """

    def __init__(self):
        self._locks: dict[tuple[int, int], threading.Lock] = {}
        self._guard = threading.Lock()

    def _lock_para(self, punto_venta: int, tipo_cbte: int) -> threading.Lock:
        key = (int(punto_venta), int(tipo_cbte))
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.Lock()
                self._locks[key] = lock
            return lock

    @contextmanager
    def reservar(self, punto_venta: int, tipo_cbte: int):
        lock = self._lock_para(punto_venta, tipo_cbte)
        with lock:
            yield


def asignar_siguiente_numero(client, punto_venta: int, tipo_cbte: int) -> int:
    """
    Consulta el último comprobante autorizado y devuelve el siguiente.

    Raises:
        AuthorityError: si falla la consulta a ARCA
    """
    try:
        ultimo = client.fe_comp_ultimo_autorizado(
            punto_venta=punto_venta,
            tipo_cbte=tipo_cbte,
        )
    except (ArcaError, ConnectionError, TimeoutError, OSError) as e:
        raise AuthorityError(
            f'Error al consultar último comprobante: {str(e)}',
            etapa='numeracion',
        ) from e

    siguiente = int(ultimo or 0) + 1
    logger.info(
        'Numeración PV %s tipo %s: último autorizado %s, siguiente %s',
        punto_venta,
        tipo_cbte,
        ultimo,
        siguiente,
    )
    return siguiente
