from datetime import date

import pytest

from arca_billing.validators import validar_datos_comprobante

HOY = date(2026, 3, 10)


@pytest.fixture
def comprobante():
    return {
        'CantReg': 1,
        'PtoVta': 1,
        'CbteTipo': 6,
        'Concepto': 1,
        'DocTipo': 99,
        'DocNro': 0,
        'CbteDesde': 42,
        'CbteHasta': 42,
        'CbteFch': 20260310,
        'ImpTotal': 302.5,
        'ImpTotConc': 0.0,
        'ImpNeto': 250.0,
        'ImpOpEx': 0.0,
        'ImpTrib': 0.0,
        'ImpIVA': 52.5,
        'MonId': 'PES',
        'MonCotiz': 1.0,
        'CondicionIVAReceptorId': 5,
        'Iva': [{'Id': 5, 'BaseImp': 250.0, 'Importe': 52.5}],
    }


def _errores(datos):
    return validar_datos_comprobante(datos, hoy=HOY).errores


class TestValidarDatosComprobante:
    def test_comprobante_valido(self, comprobante):
        resultado = validar_datos_comprobante(comprobante, hoy=HOY)
        assert resultado.valido is True
        assert resultado.documento_invalido is False

    def test_nota_credito_sin_asociado(self, comprobante):
        comprobante['CbteTipo'] = 8
        errores = _errores(comprobante)

        assert any('asociado' in e for e in errores)

    def test_asociado_incompleto(self, comprobante):
        comprobante['CbteTipo'] = 8
        comprobante['CbtesAsoc'] = [{'Tipo': 6, 'PtoVta': 1}]
        errores = _errores(comprobante)

        assert errores == ['CbtesAsoc[0] debe indicar Tipo, PtoVta y Nro del comprobante asociado']

    def test_total_no_coincide(self, comprobante):
        comprobante['ImpTotal'] = 310.0
        errores = _errores(comprobante)

        assert len(errores) == 1
        assert errores[0].startswith('ImpTotal (310.0) no coincide')

    def test_tolerancia_de_un_centavo(self, comprobante):
        comprobante['ImpTotal'] = 302.51
        assert _errores(comprobante) == []

    def test_neto_sin_alicuotas(self, comprobante):
        del comprobante['Iva']
        errores = _errores(comprobante)

        assert 'Si ImpNeto o ImpIVA son mayores a 0, debe incluir el array Iva con las alícuotas' in errores

    def test_suma_de_alicuotas(self, comprobante):
        comprobante['Iva'] = [{'Id': 5, 'BaseImp': 200.0, 'Importe': 42.0}]
        errores = _errores(comprobante)

        assert any('BaseImp' in e and 'ImpNeto' in e for e in errores)
        assert any('Importe en Iva' in e and 'ImpIVA' in e for e in errores)

    def test_exento_con_iva(self, comprobante):
        comprobante['CondicionIVAReceptorId'] = 4
        errores = _errores(comprobante)

        assert 'Para receptores exentos ImpIVA debe ser 0' in errores
        assert any('debe incluir la alícuota 0%' in e for e in errores)
        assert any('solo se admite la alícuota 0%' in e for e in errores)

    def test_exento_valido(self, comprobante):
        comprobante.update({
            'CondicionIVAReceptorId': 4,
            'ImpIVA': 0.0,
            'ImpTotal': 250.0,
            'Iva': [{'Id': 3, 'BaseImp': 250.0, 'Importe': 0.0}],
        })
        assert _errores(comprobante) == []

    def test_combinacion_invalida(self, comprobante):
        comprobante['CondicionIVAReceptorId'] = 1
        errores = _errores(comprobante)

        assert any('combinación de tipo de comprobante (Factura B)' in e for e in errores)

    def test_servicios_sin_fechas(self, comprobante):
        comprobante['Concepto'] = 2
        assert 'Para servicios debe incluir FchServDesde y FchServHasta' in _errores(comprobante)

    def test_servicios_fechas_invertidas(self, comprobante):
        comprobante.update({'Concepto': 3, 'FchServDesde': 20260301, 'FchServHasta': 20260201})
        assert 'FchServDesde no puede ser posterior a FchServHasta' in _errores(comprobante)

    def test_cuit_invalido_marca_documento(self, comprobante):
        comprobante.update({'DocTipo': 80, 'DocNro': 20409378471})
        resultado = validar_datos_comprobante(comprobante, hoy=HOY)

        assert 'CUIT inválido (dígito verificador incorrecto)' in resultado.errores
        assert resultado.documento_invalido is True

    def test_dni_invalido(self, comprobante):
        comprobante.update({'DocTipo': 96, 'DocNro': 123})
        resultado = validar_datos_comprobante(comprobante, hoy=HOY)

        assert 'DNI debe tener 7 u 8 dígitos' in resultado.errores
        assert resultado.documento_invalido is True

    def test_fecha_fuera_de_ventana(self, comprobante):
        comprobante['CbteFch'] = 20260201
        errores = _errores(comprobante)

        assert len(errores) == 1
        assert 'dentro de los 10 días' in errores[0]

    def test_rango_de_numeracion(self, comprobante):
        comprobante['CbteHasta'] = 43
        assert 'CbteDesde y CbteHasta deben ser iguales (un comprobante por solicitud)' in _errores(comprobante)

    def test_tributos_deben_sumar_imp_trib(self, comprobante):
        comprobante['Tributos'] = [{'Id': 2, 'Desc': 'IIBB', 'BaseImp': 250, 'Alic': 3, 'Importe': 7.5}]
        errores = _errores(comprobante)

        assert any('Tributos' in e and 'ImpTrib' in e for e in errores)

    def test_recolecta_todos_los_errores(self, comprobante):
        comprobante.update({'PtoVta': 0, 'CbteTipo': 8, 'Concepto': 2, 'ImpNeto': -1})
        errores = _errores(comprobante)

        assert len(errores) >= 4
        assert 'PtoVta es obligatorio' in errores
        assert 'ImpNeto no puede ser negativo' in errores

    def test_comprobante_c_no_admite_iva(self, comprobante):
        comprobante['CbteTipo'] = 11
        errores = _errores(comprobante)

        assert errores == [
            'Los comprobantes C no discriminan IVA: no deben incluir el array Iva',
            'Para comprobantes C ImpIVA debe ser 0',
        ]

    def test_comprobante_c_sin_iva_es_valido(self, comprobante):
        comprobante.update({'CbteTipo': 11, 'ImpIVA': 0.0, 'ImpTotal': 250.0})
        del comprobante['Iva']

        assert _errores(comprobante) == []
