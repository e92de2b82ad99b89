import logging
from typing import Optional

from ..builders import armar_fe_cae_req
from ..exceptions import ArcaError, AuthorityError, NotFoundError
from ..fechas import formatear_fecha
from ..parsers import CAEParser
from ..types import CAEResponse

logger = logging.getLogger(__name__)

ERRORES_TRANSPORTE = (ArcaError, ConnectionError, TimeoutError, OSError)


class WSFEService:
    """
    Servicio de alto nivel para interactuar con WSFE (Facturación Electrónica).
    Provee métodos simplificados sobre ArcaClient.
    """

    def __init__(self, client):
        self.client = client

    def autorizar(self, datos_arca: dict) -> CAEResponse:
        """
        Autoriza un comprobante y obtiene el CAE.

        Args:
            datos_arca: Registro generado por transformar_a_formato_arca()

        Returns:
            CAEResponse aprobada

        Raises:
            AuthorityError: si ARCA rechaza el comprobante o falla la comunicación
        """
        request_data = armar_fe_cae_req(datos_arca)

        try:
            result = self.client.fe_cae_solicitar(request_data)
        except ERRORES_TRANSPORTE as e:
            raise AuthorityError(f'Error al solicitar CAE: {str(e)}', etapa='envio') from e

        respuesta = CAEParser.parse(result)

        if respuesta.aprobado and respuesta.cae:
            return respuesta

        # Los errores pueden venir como errores o como observaciones de rechazo
        all_messages = respuesta.errores + respuesta.observaciones
        error_msg = CAEParser.format_error_message(all_messages) or 'Error desconocido al autorizar comprobante'
        logger.warning(
            'ARCA rechazó comprobante %s-%s tipo %s: %s',
            datos_arca.get('PtoVta'),
            datos_arca.get('CbteDesde'),
            datos_arca.get('CbteTipo'),
            error_msg,
        )
        raise AuthorityError(
            f'ARCA rechazó el comprobante: {error_msg}',
            etapa='envio',
            codigo=respuesta.errores[0].get('code') if respuesta.errores else None,
            errores=respuesta.errores,
            observaciones=respuesta.observaciones,
        )

    def consultar_comprobante(
        self,
        tipo_cbte: int,
        punto_venta: int,
        numero: int
    ) -> dict:
        """
        Consulta un comprobante ya autorizado en ARCA.

        Raises:
            NotFoundError: si ARCA no tiene registro del comprobante
        """
        try:
            result = self.client.fe_comp_consultar(
                tipo_cbte=tipo_cbte,
                punto_venta=punto_venta,
                numero=numero,
            )
        except ERRORES_TRANSPORTE as e:
            raise AuthorityError(f'Error al consultar comprobante: {str(e)}', etapa='consulta') from e

        if not isinstance(result, dict) or not result.get('encontrado'):
            raise NotFoundError(f'Comprobante {punto_venta}-{numero} tipo {tipo_cbte} no encontrado')

        return {
            **result,
            'fecha_cbte': formatear_fecha(result.get('fecha_cbte')),
            'cae_vto': formatear_fecha(result.get('cae_vto')),
        }

    def ultimo_autorizado(self, punto_venta: int, tipo_cbte: int) -> int:
        """Obtiene el último número de comprobante autorizado."""
        try:
            return int(self.client.fe_comp_ultimo_autorizado(
                punto_venta=punto_venta,
                tipo_cbte=tipo_cbte,
            ) or 0)
        except ERRORES_TRANSPORTE as e:
            raise AuthorityError(f'Error al consultar último comprobante: {str(e)}', etapa='consulta') from e

    def tipos_comprobante(self) -> list:
        return self._consultar('fe_param_get_tipos_cbte', 'tipos de comprobante')

    def tipos_documento(self) -> list:
        return self._consultar('fe_param_get_tipos_doc', 'tipos de documento')

    def alicuotas_iva(self) -> list:
        return self._consultar('fe_param_get_tipos_iva', 'alícuotas de IVA')

    def puntos_venta(self) -> list:
        return self._consultar('fe_param_get_ptos_venta', 'puntos de venta')

    def estado_servidor(self) -> dict:
        return self._consultar('fe_dummy', 'estado del servidor')

    def cotizacion(self, moneda_id: str, fecha: Optional[int] = None) -> dict:
        return self._consultar('fe_param_get_cotizacion', 'cotización', moneda_id, fecha)

    def _consultar(self, metodo: str, descripcion: str, *args):
        try:
            return getattr(self.client, metodo)(*args)
        except ERRORES_TRANSPORTE as e:
            raise AuthorityError(f'Error al obtener {descripcion}: {str(e)}', etapa='consulta') from e
