import fcntl
import logging
import os
import pickle
import shutil
import tempfile
import time
import unicodedata
from contextlib import contextmanager
from typing import Optional

import arca_arg.auth as arca_auth
import arca_arg.settings as arca_settings
import arca_arg.webservice as arca_ws
from arca_arg.settings import WSDL_FEV1_HOM, WSDL_FEV1_PROD
from arca_arg.webservice import ArcaWebService

from .exceptions import ArcaAuthError, ArcaError, ArcaNetworkError

logger = logging.getLogger(__name__)

INTENTOS_TA = 3
TA_VIGENTE = 'ya posee un ta valido'

# (clave del dict devuelto, atributo de FECompConsultar)
CAMPOS_CONSULTA = (
    ('tipo_cbte', 'CbteTipo'),
    ('punto_venta', 'PtoVta'),
    ('cbte_desde', 'CbteDesde'),
    ('cbte_hasta', 'CbteHasta'),
    ('concepto', 'Concepto'),
    ('doc_tipo', 'DocTipo'),
    ('doc_nro', 'DocNro'),
    ('imp_total', 'ImpTotal'),
    ('imp_neto', 'ImpNeto'),
    ('imp_iva', 'ImpIVA'),
    ('imp_trib', 'ImpTrib'),
    ('imp_op_ex', 'ImpOpEx'),
    ('imp_tot_conc', 'ImpTotConc'),
    ('mon_id', 'MonId'),
    ('mon_cotiz', 'MonCotiz'),
    ('resultado', 'Resultado'),
)


def _sin_acentos(texto: str) -> str:
    normalizado = unicodedata.normalize('NFKD', (texto or '').lower())
    return ''.join(c for c in normalizado if not unicodedata.combining(c))


def _como_lista(valor) -> list:
    if not valor:
        return []
    return valor if isinstance(valor, list) else [valor]


def _mensajes(contenedor, atributo: str) -> list:
    """Convierte Obs/Err de WSFE en [{'code', 'msg'}]."""
    if not contenedor:
        return []
    items = getattr(contenedor, atributo, contenedor)
    return [
        {'code': getattr(item, 'Code', None), 'msg': getattr(item, 'Msg', '')}
        for item in _como_lista(items)
    ]


def _texto(valor) -> Optional[str]:
    return str(valor) if valor else None


class ArcaClient:
    """
    Adaptador de WSFE sobre arca_arg.

    arca_arg se configura con variables globales (arca_arg.settings y copias
    importadas por valor en auth/webservice). Cada operación vuelve a aplicar
    los datos de esta instancia antes de llamar al servicio, así pueden
    convivir clientes de distintos CUIT en el mismo proceso.
    """

    def __init__(
        self,
        cuit: str,
        cert: bytes,
        key: bytes,
        ambiente: str = 'testing',
        ta_cache_dir: Optional[str] = None,
    ):
        self.cuit = str(cuit).replace('-', '')
        self.ambiente = ambiente
        self.is_production = ambiente == 'production'

        self._dir_temporal = tempfile.mkdtemp(prefix='arca_')
        self._ruta_cert = self._escribir('cert.pem', cert)
        self._ruta_key = self._escribir('key.key', key)

        # El TA se guarda fuera del directorio temporal, por CUIT y ambiente,
        # para reutilizarlo entre procesos y no pedir login a WSAA cada vez.
        raiz = (
            ta_cache_dir
            or os.getenv('ARCA_TA_CACHE_DIR')
            or os.path.join(tempfile.gettempdir(), 'arca_ta_cache')
        )
        self._ruta_ta = os.path.join(raiz, self.ambiente, self.cuit, '')
        os.makedirs(self._ruta_ta, exist_ok=True)

        self._wsfe: Optional[ArcaWebService] = None
        self._aplicar_settings()

    @classmethod
    def from_config(cls, config) -> 'ArcaClient':
        """Crea el cliente con el CUIT, ambiente y certificados de la configuración."""
        try:
            with open(config.ARCA_CERT_PATH, 'rb') as f:
                cert = f.read()
            with open(config.ARCA_KEY_PATH, 'rb') as f:
                key = f.read()
        except (OSError, TypeError) as e:
            raise ArcaAuthError(f'No se pudieron leer los certificados de ARCA: {str(e)}')

        return cls(
            cuit=config.ARCA_CUIT,
            cert=cert,
            key=key,
            ambiente=config.ARCA_AMBIENTE,
            ta_cache_dir=config.ARCA_TA_CACHE_DIR,
        )

    def _escribir(self, nombre: str, contenido: bytes) -> str:
        ruta = os.path.join(self._dir_temporal, nombre)
        with open(ruta, 'wb') as f:
            f.write(contenido)
        return ruta

    def _aplicar_settings(self):
        wsdl_wsaa = arca_settings.WSDL_WSAA_PROD if self.is_production else arca_settings.WSDL_WSAA_HOM

        for modulo in (arca_settings, arca_auth):
            modulo.PRIVATE_KEY_PATH = self._ruta_key
            modulo.CERT_PATH = self._ruta_cert
            modulo.TA_FILES_PATH = self._ruta_ta
            modulo.PROD = self.is_production

        arca_settings.CUIT = self.cuit
        arca_auth.WSDL_WSAA = wsdl_wsaa
        arca_ws.CUIT = self.cuit

    @property
    def wsfe(self) -> ArcaWebService:
        if self._wsfe is None:
            wsdl = WSDL_FEV1_PROD if self.is_production else WSDL_FEV1_HOM
            self._wsfe = self._crear_webservice(wsdl, 'wsfe')
        return self._wsfe

    def _crear_webservice(self, wsdl: str, servicio: str) -> ArcaWebService:
        """
        Inicializa el webservice (login WSAA incluido).

        Si WSAA responde que ya hay un TA vigente, otro proceso lo acaba de
        pedir: se reintenta para que arca_arg tome el TA del cache compartido.
        """
        with self._lock_ta(servicio):
            ultimo_error = None
            for intento in range(INTENTOS_TA):
                self._aplicar_settings()
                try:
                    return ArcaWebService(wsdl, servicio, enable_logging=False)
                except Exception as e:
                    ultimo_error = e
                    if TA_VIGENTE not in _sin_acentos(str(e)) or intento == INTENTOS_TA - 1:
                        break
                    logger.warning(
                        'WSAA informa TA vigente para %s (intento %s), reintentando con cache local',
                        servicio,
                        intento + 1,
                    )
                    if not self._ta_local_vigente(servicio):
                        time.sleep(intento + 1)

        raise ArcaAuthError(f'Error al conectar con {servicio.upper()}: {ultimo_error}')

    @contextmanager
    def _lock_ta(self, servicio: str):
        """Lock de archivo para que un solo proceso renueve el TA a la vez."""
        with open(os.path.join(self._ruta_ta, f'{servicio}.lock'), 'a+') as lock_file:
            fcntl.flock(lock_file.fileno(), fcntl.LOCK_EX)
            try:
                yield
            finally:
                fcntl.flock(lock_file.fileno(), fcntl.LOCK_UN)

    def _ta_local_vigente(self, servicio: str) -> bool:
        ruta = os.path.join(self._ruta_ta, f'{servicio}.pkl')
        try:
            with open(ruta, 'rb') as f:
                ticket = pickle.load(f)
        except (OSError, pickle.UnpicklingError, EOFError, AttributeError, ValueError):
            return False

        vencido = getattr(ticket, 'is_expired', None)
        if isinstance(vencido, bool):
            return not vencido

        expira = getattr(ticket, 'expires', None)
        if isinstance(expira, (int, float)):
            return time.time() < float(expira)

        return False

    def cerrar(self):
        """Borra los certificados temporales."""
        shutil.rmtree(self._dir_temporal, ignore_errors=True)

    def __del__(self):
        try:
            self.cerrar()
        except AttributeError:
            pass

    def _auth(self, ws: ArcaWebService):
        auth = ws.get_type('FEAuthRequest')
        auth['Token'] = ws.token
        auth['Sign'] = ws.sign
        auth['Cuit'] = ws.cuit
        return auth

    def _enviar(self, metodo: str, datos: dict, accion: str, con_auth: bool = True):
        try:
            self._aplicar_settings()
            ws = self.wsfe
            if con_auth:
                datos = {'Auth': self._auth(ws), **datos}
            return ws.send_request(metodo, datos)
        except ArcaError:
            raise
        except Exception as e:
            raise ArcaNetworkError(f'Error al {accion}: {str(e)}')

    def fe_comp_ultimo_autorizado(self, punto_venta: int, tipo_cbte: int) -> int:
        """Último número autorizado para el punto de venta y tipo de comprobante."""
        result = self._enviar(
            'FECompUltimoAutorizado',
            {'PtoVta': punto_venta, 'CbteTipo': tipo_cbte},
            'consultar último comprobante',
        )
        return result.CbteNro

    def fe_cae_solicitar(self, request_data: dict) -> dict:
        """
        Solicita el CAE de un comprobante.

        Args:
            request_data: request armado con armar_fe_cae_req()

        Returns:
            dict con resultado, cae, cae_vencimiento (YYYYMMDD), numero_comprobante,
            observaciones y errores ([{'code', 'msg'}])
        """
        cabecera = request_data['FeCAEReq']['FeCabReq']
        detalle = request_data['FeCAEReq']['FeDetReq']['FECAEDetRequest']
        # zeep espera un único FECAEDetRequest, no una lista
        if isinstance(detalle, list):
            detalle = detalle[0]

        logger.info(
            'FECAESolicitar PV %s tipo %s número %s',
            cabecera.get('PtoVta'),
            cabecera.get('CbteTipo'),
            detalle.get('CbteDesde'),
        )

        result = self._enviar(
            'FECAESolicitar',
            {'FeCAEReq': {'FeCabReq': cabecera, 'FeDetReq': {'FECAEDetRequest': detalle}}},
            'solicitar CAE',
        )
        return self._parsear_cae(result)

    def fe_comp_consultar(self, tipo_cbte: int, punto_venta: int, numero: int) -> dict:
        """Datos de un comprobante emitido, o {'encontrado': False}."""
        result = self._enviar(
            'FECompConsultar',
            {'FeCompConsReq': {'CbteTipo': tipo_cbte, 'CbteNro': numero, 'PtoVta': punto_venta}},
            'consultar comprobante',
        )

        cbte = getattr(result, 'ResultGet', None)
        if not cbte:
            return {'encontrado': False}

        datos = {clave: getattr(cbte, atributo, None) for clave, atributo in CAMPOS_CONSULTA}
        datos.update({
            'encontrado': True,
            'fecha_cbte': _texto(getattr(cbte, 'CbteFch', None)),
            'cae': _texto(getattr(cbte, 'CodAutorizacion', None)),
            'cae_vto': _texto(getattr(cbte, 'FchVto', None)),
        })
        return datos

    def fe_param_get_tipos_cbte(self) -> list:
        return self._parametros('FEParamGetTiposCbte', 'CbteTipo', 'obtener tipos de comprobante')

    def fe_param_get_tipos_doc(self) -> list:
        return self._parametros('FEParamGetTiposDoc', 'DocTipo', 'obtener tipos de documento')

    def fe_param_get_tipos_iva(self) -> list:
        return self._parametros('FEParamGetTiposIva', 'IvaTipo', 'obtener alícuotas de IVA')

    def fe_param_get_ptos_venta(self) -> list:
        result = self._enviar('FEParamGetPtosVenta', {}, 'obtener puntos de venta')
        return [
            {
                'PtoVta': punto.Nro,
                'emision_tipo': getattr(punto, 'EmisionTipo', None),
                'bloqueado': getattr(punto, 'Bloqueado', None),
                'fecha_baja': getattr(punto, 'FchBaja', None),
            }
            for punto in self._resultados(result, 'PtoVenta')
        ]

    def fe_dummy(self) -> dict:
        """Estado de los servidores de aplicación, base de datos y autenticación."""
        result = self._enviar('FEDummy', {}, 'verificar estado del servidor', con_auth=False)
        return {
            'app_server': getattr(result, 'AppServer', None),
            'db_server': getattr(result, 'DbServer', None),
            'auth_server': getattr(result, 'AuthServer', None),
        }

    def fe_param_get_cotizacion(self, moneda_id: str, fecha: Optional[int] = None) -> dict:
        datos = {'MonId': moneda_id}
        if fecha:
            datos['FchCotiz'] = str(fecha)

        result = self._enviar('FEParamGetCotizacion', datos, 'obtener cotización')
        cotizacion = getattr(result, 'ResultGet', None)
        if not cotizacion:
            raise ArcaError(f'Sin cotización para la moneda {moneda_id}')

        return {
            'moneda': cotizacion.MonId,
            'cotizacion': cotizacion.MonCotiz,
            'fecha': _texto(cotizacion.FchCotiz),
        }

    def _parametros(self, metodo: str, atributo: str, accion: str) -> list:
        result = self._enviar(metodo, {}, accion)
        return [
            {'id': p.Id, 'descripcion': p.Desc, 'desde': p.FchDesde, 'hasta': p.FchHasta}
            for p in self._resultados(result, atributo)
        ]

    def _resultados(self, result, atributo: str) -> list:
        contenedor = getattr(result, 'ResultGet', None)
        return _como_lista(getattr(contenedor, atributo, None)) if contenedor else []

    def _parsear_cae(self, result) -> dict:
        cabecera = getattr(result, 'FeCabResp', None)
        detalles = getattr(getattr(result, 'FeDetResp', None), 'FECAEDetResponse', None)
        detalle = _como_lista(detalles)[0] if detalles else None

        respuesta = {
            'resultado': getattr(cabecera, 'Resultado', None),
            'reproceso': getattr(cabecera, 'Reproceso', None),
            'cae': None,
            'cae_vencimiento': None,
            'numero_comprobante': None,
            'observaciones': [],
            'errores': _mensajes(getattr(result, 'Errors', None), 'Err'),
        }

        if detalle is not None:
            respuesta.update({
                'resultado': detalle.Resultado,
                'cae': _texto(detalle.CAE),
                'cae_vencimiento': _texto(detalle.CAEFchVto),
                'numero_comprobante': detalle.CbteDesde,
                'observaciones': _mensajes(getattr(detalle, 'Observaciones', None), 'Obs'),
            })

        return respuesta
