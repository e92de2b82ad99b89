from arca_billing.constants import ALICUOTA_EXENTA, ALICUOTAS_IVA, TipoComprobante, TipoDocumento
from arca_billing.rules import (
    determinar_tipo_comprobante,
    determinar_tipo_documento,
    es_alicuota_valida,
    es_combinacion_valida,
    es_comprobante_tipo_c,
    es_exento,
    letra_comprobante,
    nombre_comprobante,
    requiere_comprobante_asociado,
    requiere_fechas_servicio,
)


class TestReglasComprobante:
    def test_alicuota_exenta_es_cero_por_ciento(self):
        assert int(ALICUOTA_EXENTA) == 3
        assert ALICUOTAS_IVA[ALICUOTA_EXENTA]['porcentaje'] == 0

    def test_es_exento_acepta_string(self):
        assert es_exento(4) is True
        assert es_exento('4') is True
        assert es_exento(5) is False
        assert es_exento(None) is False

    def test_notas_requieren_asociado(self):
        assert requiere_comprobante_asociado(3) is True
        assert requiere_comprobante_asociado(8) is True
        assert requiere_comprobante_asociado(12) is True
        assert requiere_comprobante_asociado(6) is False

    def test_servicios_requieren_fechas(self):
        assert requiere_fechas_servicio(1) is False
        assert requiere_fechas_servicio(2) is True
        assert requiere_fechas_servicio(3) is True

    def test_letra_comprobante(self):
        assert letra_comprobante(1) == 'A'
        assert letra_comprobante(8) == 'B'
        assert letra_comprobante(13) == 'C'
        assert letra_comprobante(99) is None

    def test_nombre_comprobante(self):
        assert nombre_comprobante(6) == 'Factura B'
        assert nombre_comprobante(999) == 'Comprobante Desconocido'


class TestCombinaciones:
    def test_factura_a_solo_responsable_inscripto(self):
        assert es_combinacion_valida(1, 1) is True
        assert es_combinacion_valida(1, 11) is True
        assert es_combinacion_valida(1, 5) is False
        assert es_combinacion_valida(1, 6) is False

    def test_factura_b_nunca_a_responsable_inscripto(self):
        assert es_combinacion_valida(6, 1) is False
        assert es_combinacion_valida(6, 4) is True
        assert es_combinacion_valida(6, 5) is True
        assert es_combinacion_valida(6, 6) is True

    def test_factura_c_sin_restriccion(self):
        for condicion in (1, 4, 5, 6):
            assert es_combinacion_valida(11, condicion) is True

    def test_tipo_desconocido_no_es_valido(self):
        assert es_combinacion_valida(99, 1) is False


class TestDeterminarTipos:
    def test_documento_por_cantidad_de_digitos(self):
        assert determinar_tipo_documento('20-40937847-2') == TipoDocumento.CUIT
        assert determinar_tipo_documento('30.123.456') == TipoDocumento.DNI
        assert determinar_tipo_documento(1234567) == TipoDocumento.DNI
        assert determinar_tipo_documento(0) == TipoDocumento.CONSUMIDOR_FINAL
        assert determinar_tipo_documento(None) == TipoDocumento.CONSUMIDOR_FINAL
        assert determinar_tipo_documento('123') == TipoDocumento.CONSUMIDOR_FINAL

    def test_comprobante_segun_condicion(self):
        assert determinar_tipo_comprobante(1) == TipoComprobante.FACTURA_A
        assert determinar_tipo_comprobante(5) == TipoComprobante.FACTURA_B
        assert determinar_tipo_comprobante(1, nota_credito=True) == TipoComprobante.NOTA_CREDITO_A
        assert determinar_tipo_comprobante(6, nota_credito=True) == TipoComprobante.NOTA_CREDITO_B

    def test_alicuota_valida(self):
        assert es_alicuota_valida(5) is True
        assert es_alicuota_valida('3') is True
        assert es_alicuota_valida(7) is False
        assert es_alicuota_valida(None) is False

    def test_comprobante_tipo_c(self):
        assert es_comprobante_tipo_c(11) is True
        assert es_comprobante_tipo_c('13') is True
        assert es_comprobante_tipo_c(6) is False
        assert es_comprobante_tipo_c(None) is False
