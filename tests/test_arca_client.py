import os
import pickle
import time
import tempfile
from types import SimpleNamespace

import pytest

from arca_billing import config
from arca_billing.client import ArcaClient
from arca_billing.exceptions import ArcaAuthError, ArcaError, ArcaNetworkError


class _FakeTicket:
    def __init__(self, is_expired):
        self.is_expired = is_expired


class _FakeWS:
    """Imita ArcaWebService: guarda los requests y devuelve respuestas fijas."""

    token = 'token'
    sign = 'sign'
    cuit = '20409378472'

    def __init__(self, responses=None, error=None):
        self.responses = responses or {}
        self.error = error
        self.requests = []

    def get_type(self, name):
        assert name == 'FEAuthRequest'
        return {}

    def send_request(self, method, data):
        self.requests.append((method, data))
        if self.error:
            raise self.error
        return self.responses.get(method)


def _client(**kwargs):
    return ArcaClient(
        cuit='20-40937847-2',
        cert=b'cert',
        key=b'key',
        ambiente='testing',
        **kwargs,
    )


class TestArcaClientTAFallback:
    def test_uses_shared_ta_cache_dir_from_env(self, monkeypatch):
        custom_root = os.path.join(tempfile.gettempdir(), 'arca_cache_test_shared')
        monkeypatch.setenv('ARCA_TA_CACHE_DIR', custom_root)

        client = _client()

        assert client.cuit == '20409378472'
        assert client._ruta_ta.startswith(custom_root)
        assert client._ruta_ta.endswith(os.sep)

    def test_explicit_ta_cache_dir_wins_over_env(self, monkeypatch, tmp_path):
        monkeypatch.setenv('ARCA_TA_CACHE_DIR', os.path.join(tempfile.gettempdir(), 'otro'))

        client = _client(ta_cache_dir=str(tmp_path))

        assert client._ruta_ta.startswith(str(tmp_path))

    def test_ta_local_vigente_true_when_not_expired(self, tmp_path):
        client = _client(ta_cache_dir=str(tmp_path))

        ta_file = os.path.join(client._ruta_ta, 'wsfe.pkl')
        with open(ta_file, 'wb') as f:
            pickle.dump(_FakeTicket(is_expired=False), f)

        assert client._ta_local_vigente('wsfe') is True

    def test_ta_local_vigente_false_when_expired(self, tmp_path):
        client = _client(ta_cache_dir=str(tmp_path))

        ta_file = os.path.join(client._ruta_ta, 'wsfe.pkl')
        with open(ta_file, 'wb') as f:
            pickle.dump(_FakeTicket(is_expired=True), f)

        assert client._ta_local_vigente('wsfe') is False

    def test_ta_local_vigente_false_without_file(self, tmp_path):
        client = _client(ta_cache_dir=str(tmp_path))

        assert client._ta_local_vigente('wsfe') is False

    def test_wsfe_retries_when_arca_reports_existing_ta(self, monkeypatch, tmp_path):
        client = _client(ta_cache_dir=str(tmp_path))

        calls = {'count': 0}

        def _fake_ws(_wsdl, service, enable_logging=False):
            assert service == 'wsfe'
            calls['count'] += 1
            if calls['count'] == 1:
                raise Exception('El CEE ya posee un TA valido para el acceso al WSN solicitado')
            return _FakeWS()

        monkeypatch.setattr('arca_billing.client.ArcaWebService', _fake_ws)
        monkeypatch.setattr(time, 'sleep', lambda _seconds: None)

        ws = client.wsfe

        assert isinstance(ws, _FakeWS)
        assert calls['count'] == 2

    def test_wsfe_fallback_handles_accented_valido_message(self, monkeypatch, tmp_path):
        client = _client(ta_cache_dir=str(tmp_path))

        calls = {'count': 0}

        def _fake_ws(_wsdl, service, enable_logging=False):
            calls['count'] += 1
            if calls['count'] == 1:
                raise Exception('El CEE ya posee un TA válido para el acceso al WSN solicitado')
            return _FakeWS()

        monkeypatch.setattr('arca_billing.client.ArcaWebService', _fake_ws)
        monkeypatch.setattr(time, 'sleep', lambda _seconds: None)

        assert isinstance(client.wsfe, _FakeWS)
        assert calls['count'] == 2

    def test_wsfe_no_espera_si_hay_ta_local_vigente(self, monkeypatch, tmp_path):
        client = _client(ta_cache_dir=str(tmp_path))

        calls = {'count': 0}
        sleeps = []

        def _fake_ws(_wsdl, service, enable_logging=False):
            calls['count'] += 1
            if calls['count'] == 1:
                raise Exception('El CEE ya posee un TA valido para el acceso al WSN solicitado')
            return _FakeWS()

        monkeypatch.setattr('arca_billing.client.ArcaWebService', _fake_ws)
        monkeypatch.setattr(client, '_ta_local_vigente', lambda _service: True)
        monkeypatch.setattr(time, 'sleep', sleeps.append)

        assert isinstance(client.wsfe, _FakeWS)
        assert sleeps == []

    def test_wsfe_agota_reintentos(self, monkeypatch, tmp_path):
        client = _client(ta_cache_dir=str(tmp_path))

        def _fake_ws(_wsdl, service, enable_logging=False):
            raise Exception('El CEE ya posee un TA valido para el acceso al WSN solicitado')

        monkeypatch.setattr('arca_billing.client.ArcaWebService', _fake_ws)
        monkeypatch.setattr(time, 'sleep', lambda _seconds: None)

        with pytest.raises(ArcaAuthError, match='ya posee un TA valido'):
            client.wsfe

    def test_cerrar_borra_certificados(self, tmp_path):
        client = _client(ta_cache_dir=str(tmp_path))
        ruta_cert = client._ruta_cert

        client.cerrar()

        assert not os.path.exists(ruta_cert)

    def test_wsfe_other_errors_raise_auth_error(self, monkeypatch, tmp_path):
        client = _client(ta_cache_dir=str(tmp_path))

        def _fake_ws(_wsdl, service, enable_logging=False):
            raise Exception('Certificado no emitido por AC de confianza')

        monkeypatch.setattr('arca_billing.client.ArcaWebService', _fake_ws)

        with pytest.raises(ArcaAuthError, match='Error al conectar con WSFE'):
            client.wsfe


class TestArcaClientFromConfig:
    def test_from_config_reads_certificates(self, tmp_path):
        cert_path = tmp_path / 'cert.pem'
        key_path = tmp_path / 'key.key'
        cert_path.write_bytes(b'cert-data')
        key_path.write_bytes(b'key-data')

        class _Config(config.TestingConfig):
            ARCA_CERT_PATH = str(cert_path)
            ARCA_KEY_PATH = str(key_path)
            ARCA_TA_CACHE_DIR = str(tmp_path / 'ta')

        client = ArcaClient.from_config(_Config())

        with open(client._ruta_cert, 'rb') as f:
            assert f.read() == b'cert-data'
        assert client.ambiente == 'testing'
        assert client._ruta_ta.startswith(str(tmp_path / 'ta'))

    def test_from_config_missing_certificates(self, tmp_path):
        class _Config(config.TestingConfig):
            ARCA_CERT_PATH = str(tmp_path / 'no-existe.pem')
            ARCA_KEY_PATH = str(tmp_path / 'no-existe.key')

        with pytest.raises(ArcaAuthError, match='No se pudieron leer los certificados'):
            ArcaClient.from_config(_Config())


class TestArcaClientWSFE:
    def test_ultimo_autorizado_envia_auth(self, tmp_path):
        client = _client(ta_cache_dir=str(tmp_path))
        ws = _FakeWS({'FECompUltimoAutorizado': SimpleNamespace(CbteNro=41)})
        client._wsfe = ws

        assert client.fe_comp_ultimo_autorizado(punto_venta=1, tipo_cbte=6) == 41

        method, data = ws.requests[0]
        assert method == 'FECompUltimoAutorizado'
        assert data == {
            'Auth': {'Token': 'token', 'Sign': 'sign', 'Cuit': '20409378472'},
            'PtoVta': 1,
            'CbteTipo': 6,
        }

    def test_errores_de_transporte_se_envuelven(self, tmp_path):
        client = _client(ta_cache_dir=str(tmp_path))
        client._wsfe = _FakeWS(error=ConnectionError('reset by peer'))

        with pytest.raises(ArcaNetworkError, match='Error al consultar último comprobante: reset by peer') as exc:
            client.fe_comp_ultimo_autorizado(punto_venta=1, tipo_cbte=6)

        assert isinstance(exc.value, ArcaError)

    def test_cae_solicitar_aprobado(self, tmp_path):
        client = _client(ta_cache_dir=str(tmp_path))
        det = SimpleNamespace(
            CAE='74123456789012',
            CAEFchVto='20261231',
            CbteDesde=42,
            Resultado='A',
            Observaciones=None,
        )
        result = SimpleNamespace(
            FeCabResp=SimpleNamespace(Resultado='A', Reproceso='N'),
            FeDetResp=SimpleNamespace(FECAEDetResponse=[det]),
            Errors=None,
        )
        ws = _FakeWS({'FECAESolicitar': result})
        client._wsfe = ws

        request = {
            'FeCAEReq': {
                'FeCabReq': {'CantReg': 1, 'PtoVta': 1, 'CbteTipo': 6},
                'FeDetReq': {'FECAEDetRequest': [{'CbteDesde': 42, 'CbteHasta': 42}]},
            }
        }
        respuesta = client.fe_cae_solicitar(request)

        assert respuesta['resultado'] == 'A'
        assert respuesta['cae'] == '74123456789012'
        assert respuesta['cae_vencimiento'] == '20261231'
        assert respuesta['numero_comprobante'] == 42

        _method, data = ws.requests[0]
        assert data['FeCAEReq']['FeDetReq']['FECAEDetRequest'] == {'CbteDesde': 42, 'CbteHasta': 42}

    def test_cae_solicitar_rechazado(self, tmp_path):
        client = _client(ta_cache_dir=str(tmp_path))
        obs = SimpleNamespace(Code=10016, Msg='El numero o fecha del comprobante no se corresponde')
        det = SimpleNamespace(
            CAE=None,
            CAEFchVto=None,
            CbteDesde=42,
            Resultado='R',
            Observaciones=SimpleNamespace(Obs=[obs]),
        )
        result = SimpleNamespace(
            FeCabResp=SimpleNamespace(Resultado='R', Reproceso='N'),
            FeDetResp=SimpleNamespace(FECAEDetResponse=[det]),
            Errors=SimpleNamespace(Err=SimpleNamespace(Code=600, Msg='No autorizado')),
        )
        client._wsfe = _FakeWS({'FECAESolicitar': result})

        respuesta = client.fe_cae_solicitar({
            'FeCAEReq': {
                'FeCabReq': {'CantReg': 1, 'PtoVta': 1, 'CbteTipo': 6},
                'FeDetReq': {'FECAEDetRequest': [{'CbteDesde': 42}]},
            }
        })

        assert respuesta['resultado'] == 'R'
        assert respuesta['cae'] is None
        assert respuesta['observaciones'] == [
            {'code': 10016, 'msg': 'El numero o fecha del comprobante no se corresponde'},
        ]
        assert respuesta['errores'] == [{'code': 600, 'msg': 'No autorizado'}]

    def test_comp_consultar_no_encontrado(self, tmp_path):
        client = _client(ta_cache_dir=str(tmp_path))
        client._wsfe = _FakeWS({'FECompConsultar': SimpleNamespace(ResultGet=None)})

        assert client.fe_comp_consultar(tipo_cbte=6, punto_venta=1, numero=99) == {'encontrado': False}

    def test_param_tipos_iva_acepta_un_solo_elemento(self, tmp_path):
        client = _client(ta_cache_dir=str(tmp_path))
        iva = SimpleNamespace(Id=5, Desc='21%', FchDesde='20090220', FchHasta='NULL')
        client._wsfe = _FakeWS({
            'FEParamGetTiposIva': SimpleNamespace(ResultGet=SimpleNamespace(IvaTipo=iva)),
        })

        assert client.fe_param_get_tipos_iva() == [
            {'id': 5, 'descripcion': '21%', 'desde': '20090220', 'hasta': 'NULL'},
        ]

    def test_ptos_venta_vacio(self, tmp_path):
        client = _client(ta_cache_dir=str(tmp_path))
        client._wsfe = _FakeWS({'FEParamGetPtosVenta': SimpleNamespace(ResultGet=None)})

        assert client.fe_param_get_ptos_venta() == []

    def test_dummy_no_envia_auth(self, tmp_path):
        client = _client(ta_cache_dir=str(tmp_path))
        ws = _FakeWS({'FEDummy': SimpleNamespace(AppServer='OK', DbServer='OK', AuthServer='OK')})
        client._wsfe = ws

        assert client.fe_dummy() == {'app_server': 'OK', 'db_server': 'OK', 'auth_server': 'OK'}
        assert ws.requests == [('FEDummy', {})]

    def test_cotizacion(self, tmp_path):
        client = _client(ta_cache_dir=str(tmp_path))
        ws = _FakeWS({
            'FEParamGetCotizacion': SimpleNamespace(
                ResultGet=SimpleNamespace(MonId='DOL', MonCotiz=1050.5, FchCotiz='20260310'),
            ),
        })
        client._wsfe = ws

        assert client.fe_param_get_cotizacion('DOL', 20260310) == {
            'moneda': 'DOL',
            'cotizacion': 1050.5,
            'fecha': '20260310',
        }
        assert ws.requests[0][1]['FchCotiz'] == '20260310'
