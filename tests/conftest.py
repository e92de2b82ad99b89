from datetime import date

import pytest

from arca_billing.config import TestingConfig
from arca_billing.contexto import crear_contexto

CUIT_RI = '20123456786'


class FakeArcaClient:
    """Cliente ARCA en memoria: registra las llamadas y aprueba todo."""

    def __init__(self, ultimo=41, resultado='A', errores=None, observaciones=None):
        self.ultimo = ultimo
        self.resultado = resultado
        self.errores = errores or []
        self.observaciones = observaciones or []
        self.ultimo_calls = []
        self.cae_requests = []

    def fe_comp_ultimo_autorizado(self, punto_venta, tipo_cbte):
        self.ultimo_calls.append((punto_venta, tipo_cbte))
        return self.ultimo

    def fe_cae_solicitar(self, request_data):
        self.cae_requests.append(request_data)
        det = request_data['FeCAEReq']['FeDetReq']['FECAEDetRequest'][0]
        aprobado = self.resultado == 'A'
        return {
            'resultado': self.resultado,
            'cae': '74123456789012' if aprobado else None,
            'cae_vencimiento': '20261231' if aprobado else None,
            'numero_comprobante': det['CbteDesde'],
            'errores': self.errores,
            'observaciones': self.observaciones,
        }

    def fe_comp_consultar(self, tipo_cbte, punto_venta, numero):
        if numero > self.ultimo:
            return {'encontrado': False}
        return {
            'encontrado': True,
            'tipo_cbte': tipo_cbte,
            'punto_venta': punto_venta,
            'cbte_desde': numero,
            'cbte_hasta': numero,
            'fecha_cbte': '20260115',
            'imp_total': 121.0,
            'cae': '74123456789012',
            'cae_vto': '20260125',
            'resultado': 'A',
        }

    def fe_param_get_tipos_cbte(self):
        return [{'id': 6, 'descripcion': 'Factura B', 'desde': '20100917', 'hasta': 'NULL'}]

    def fe_param_get_tipos_doc(self):
        return [{'id': 80, 'descripcion': 'CUIT', 'desde': '20080725', 'hasta': 'NULL'}]

    def fe_param_get_tipos_iva(self):
        return [{'id': 5, 'descripcion': '21%', 'desde': '20090220', 'hasta': 'NULL'}]

    def fe_param_get_ptos_venta(self):
        return []

    def fe_dummy(self):
        return {'app_server': 'OK', 'db_server': 'OK', 'auth_server': 'OK'}

    def fe_param_get_cotizacion(self, moneda_id, fecha=None):
        return {'moneda': moneda_id, 'cotizacion': 1050.5, 'fecha': fecha}


@pytest.fixture
def hoy():
    return date.today()


@pytest.fixture
def fake_client():
    return FakeArcaClient()


@pytest.fixture
def contexto(fake_client):
    return crear_contexto(TestingConfig, client=fake_client)


@pytest.fixture
def items_basicos():
    return [
        {'descripcion': 'Producto 1', 'cantidad': 2, 'precio_unitario': 100, 'alicuota_iva': 5},
        {'descripcion': 'Producto 2', 'cantidad': 1, 'precio_unitario': 50, 'alicuota_iva': 5},
    ]


@pytest.fixture
def factura_b(items_basicos):
    return {
        'tipo_comprobante': 6,
        'concepto': 1,
        'cliente': {
            'tipo_documento': 99,
            'numero_documento': 0,
            'condicion_iva': 5,
        },
        'items': items_basicos,
    }


@pytest.fixture
def factura_a(items_basicos):
    return {
        'tipo_comprobante': 1,
        'concepto': 1,
        'cliente': {
            'tipo_documento': 80,
            'numero_documento': CUIT_RI,
            'condicion_iva': 1,
        },
        'items': items_basicos,
    }
