import logging
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import List, Optional

from ..builders import transformar_a_formato_arca
from ..constants import CondicionIVA, TipoComprobante, TipoDocumento
from ..exceptions import (
    ArcaError,
    IdentityChecksumError,
    InputValidationError,
    NotFoundError,
    StructuralValidationError,
)
from ..fechas import resolver_fecha_opcional
from ..parsers import formatear_respuesta_arca
from ..rules import determinar_tipo_documento, nombre_comprobante
from ..types import SolicitudFactura
from ..validators import validar_datos_comprobante, validar_datos_entrada
from .numeracion import asignar_siguiente_numero
from .wsfe import WSFEService

logger = logging.getLogger(__name__)


class EstadoFacturacion(str, Enum):
    VALIDANDO_ENTRADA = 'validando_entrada'
    NUMERANDO = 'numerando'
    TRANSFORMANDO = 'transformando'
    VALIDANDO_ESTRUCTURA = 'validando_estructura'
    ENVIANDO = 'enviando'
    FORMATEANDO = 'formateando'
    COMPLETADO = 'completado'
    FALLIDO = 'fallido'


TRANSICIONES = {
    EstadoFacturacion.VALIDANDO_ENTRADA: {EstadoFacturacion.NUMERANDO, EstadoFacturacion.FALLIDO},
    EstadoFacturacion.NUMERANDO: {EstadoFacturacion.TRANSFORMANDO, EstadoFacturacion.FALLIDO},
    EstadoFacturacion.TRANSFORMANDO: {EstadoFacturacion.VALIDANDO_ESTRUCTURA, EstadoFacturacion.FALLIDO},
    EstadoFacturacion.VALIDANDO_ESTRUCTURA: {EstadoFacturacion.ENVIANDO, EstadoFacturacion.FALLIDO},
    EstadoFacturacion.ENVIANDO: {EstadoFacturacion.FORMATEANDO, EstadoFacturacion.FALLIDO},
    EstadoFacturacion.FORMATEANDO: {EstadoFacturacion.COMPLETADO, EstadoFacturacion.FALLIDO},
    EstadoFacturacion.COMPLETADO: set(),
    EstadoFacturacion.FALLIDO: set(),
}


@dataclass
class ProcesoFacturacion:
    """Estado de una emisión: etapa actual, recorrido y resultado o error."""
    estado: EstadoFacturacion = EstadoFacturacion.VALIDANDO_ENTRADA
    transiciones: List[EstadoFacturacion] = field(
        default_factory=lambda: [EstadoFacturacion.VALIDANDO_ENTRADA]
    )
    error: Optional[Exception] = None
    etapa_fallida: Optional[EstadoFacturacion] = None
    resultado: Optional[dict] = None
    datos_arca: Optional[dict] = None
    numero: Optional[int] = None
    punto_venta: Optional[int] = None

    @property
    def completado(self) -> bool:
        return self.estado == EstadoFacturacion.COMPLETADO

    def avanzar(self, destino: EstadoFacturacion):
        if destino not in TRANSICIONES[self.estado]:
            raise ValueError(f'Transición inválida: {self.estado.value} -> {destino.value}')
        self.estado = destino
        self.transiciones.append(destino)

    def fallar(self, error: Exception):
        self.error = error
        self.etapa_fallida = self.estado
        self.avanzar(EstadoFacturacion.FALLIDO)


class FacturacionService:
    """
    Emite comprobantes electrónicos de punta a punta:
    validación, numeración, armado, validación final, envío y respuesta.
    """

    def __init__(self, contexto):
        self.contexto = contexto
        self.config = contexto.config
        self.client = contexto.client
        self.secuencias = contexto.secuencias
        self.wsfe = WSFEService(contexto.client)

    def procesar(self, datos: dict, hoy: Optional[date] = None) -> ProcesoFacturacion:
        """
        Ejecuta el proceso completo sin lanzar excepciones.

        El error (si lo hay) y la etapa en la que ocurrió quedan en el
        ProcesoFacturacion devuelto.
        """
        proceso = ProcesoFacturacion()
        try:
            self._ejecutar(proceso, datos, hoy)
        except ArcaError as e:
            logger.warning('Facturación fallida en etapa %s: %s', proceso.estado.value, e)
            proceso.fallar(e)
        except Exception as e:
            logger.exception('Fallo inesperado en facturación (etapa %s)', proceso.estado.value)
            proceso.fallar(e)
        return proceso

    def crear_factura(self, datos: dict, hoy: Optional[date] = None) -> dict:
        """
        Emite una factura y devuelve la respuesta amigable.

        Raises:
            InputValidationError, StructuralValidationError, AuthorityError
        """
        proceso = self.procesar(datos, hoy=hoy)
        if proceso.error is not None:
            raise proceso.error
        return proceso.resultado

    def _ejecutar(self, proceso: ProcesoFacturacion, datos: dict, hoy: Optional[date]):
        validacion = validar_datos_entrada(datos)
        if not validacion.valido:
            raise InputValidationError('Datos inválidos', validacion.errores)

        solicitud = SolicitudFactura.from_dict(datos)
        punto_venta = solicitud.punto_venta or int(self.config.ARCA_PUNTO_VENTA)
        tipo_cbte = solicitud.tipo_comprobante
        proceso.punto_venta = punto_venta

        proceso.avanzar(EstadoFacturacion.NUMERANDO)
        with self.secuencias.reservar(punto_venta, tipo_cbte):
            numero = asignar_siguiente_numero(self.client, punto_venta, tipo_cbte)
            proceso.numero = numero
            logger.info(
                'Emitiendo %s %04d-%08d',
                nombre_comprobante(tipo_cbte),
                punto_venta,
                numero,
            )

            proceso.avanzar(EstadoFacturacion.TRANSFORMANDO)
            datos_arca = transformar_a_formato_arca(solicitud, numero, punto_venta, hoy=hoy)
            proceso.datos_arca = datos_arca

            proceso.avanzar(EstadoFacturacion.VALIDANDO_ESTRUCTURA)
            validacion_final = validar_datos_comprobante(datos_arca, hoy=hoy)
            if not validacion_final.valido:
                error_cls = (
                    IdentityChecksumError
                    if validacion_final.documento_invalido
                    else StructuralValidationError
                )
                raise error_cls('Estructura ARCA inválida', validacion_final.errores)

            proceso.avanzar(EstadoFacturacion.ENVIANDO)
            respuesta = self.wsfe.autorizar(datos_arca)

        proceso.avanzar(EstadoFacturacion.FORMATEANDO)
        resultado = formatear_respuesta_arca(respuesta, datos_arca)
        resultado['items'] = [dict(item) for item in datos['items']]
        resultado['datos_arca'] = datos_arca
        proceso.resultado = resultado
        proceso.avanzar(EstadoFacturacion.COMPLETADO)

        logger.info(
            'Comprobante %04d-%08d autorizado. CAE %s vence %s',
            punto_venta,
            numero,
            respuesta.cae,
            resultado['autorizacion']['vencimiento'],
        )

    # Atajos por tipo de receptor

    def crear_factura_consumidor_final(self, items: list, **opciones) -> dict:
        dni = opciones.pop('dni', None)
        datos = {
            'tipo_comprobante': TipoComprobante.FACTURA_B,
            'concepto': opciones.pop('concepto', None) or 1,
            'cliente': {
                'tipo_documento': determinar_tipo_documento(dni) if dni else TipoDocumento.CONSUMIDOR_FINAL,
                'numero_documento': dni or 0,
                'condicion_iva': CondicionIVA.CONSUMIDOR_FINAL,
            },
            'items': items,
            **opciones,
        }
        return self.crear_factura(datos)

    def crear_factura_responsable_inscripto(self, cuit: str, items: list, **opciones) -> dict:
        return self.crear_factura(
            self._datos_con_cuit(TipoComprobante.FACTURA_A, cuit, CondicionIVA.RESPONSABLE_INSCRIPTO, items, opciones)
        )

    def crear_factura_monotributista(self, cuit: str, items: list, **opciones) -> dict:
        # Un monotributista no puede recibir factura A
        return self.crear_factura(
            self._datos_con_cuit(TipoComprobante.FACTURA_B, cuit, CondicionIVA.MONOTRIBUTO, items, opciones)
        )

    def crear_factura_exento(self, cuit_o_dni, items: list, **opciones) -> dict:
        datos = {
            'tipo_comprobante': TipoComprobante.FACTURA_B,
            'concepto': opciones.pop('concepto', None) or 1,
            'cliente': {
                'tipo_documento': determinar_tipo_documento(cuit_o_dni),
                'numero_documento': cuit_o_dni or 0,
                'condicion_iva': CondicionIVA.EXENTO,
            },
            'items': items,
            **opciones,
        }
        return self.crear_factura(datos)

    def crear_nota_credito(self, datos: dict) -> dict:
        return self.crear_factura(datos)

    def _datos_con_cuit(self, tipo_cbte, cuit, condicion_iva, items, opciones: dict) -> dict:
        return {
            'tipo_comprobante': tipo_cbte,
            'concepto': opciones.pop('concepto', None) or 1,
            'cliente': {
                'tipo_documento': TipoDocumento.CUIT,
                'numero_documento': cuit,
                'condicion_iva': condicion_iva,
            },
            'items': items,
            **opciones,
        }

    # Consultas

    def consultar_factura(self, numero: int, punto_venta: int, tipo: int) -> dict:
        try:
            info = self.wsfe.consultar_comprobante(tipo, punto_venta, numero)
        except NotFoundError:
            return {'encontrada': False, 'mensaje': 'Comprobante no encontrado'}
        return {'encontrada': True, 'datos': info}

    def obtener_ultimo_numero(self, tipo: int, punto_venta: Optional[int] = None) -> int:
        pv = punto_venta or int(self.config.ARCA_PUNTO_VENTA)
        return self.wsfe.ultimo_autorizado(pv, tipo)

    def verificar_salud(self) -> dict:
        """Estado de ARCA y del emisor configurado. No lanza excepciones."""
        try:
            servidor = self.wsfe.estado_servidor()
            ultimo = self.wsfe.ultimo_autorizado(
                int(self.config.ARCA_PUNTO_VENTA),
                TipoComprobante.FACTURA_B,
            )
        except ArcaError as e:
            logger.warning('Verificación de salud fallida: %s', e)
            return {
                'estado': 'ERROR',
                'error': str(e),
                'mensaje': 'Error al verificar el servicio',
            }

        return {
            'estado': 'OK',
            'servidor': servidor,
            'ultimo_comprobante': ultimo,
            'ambiente': self.config.ARCA_AMBIENTE,
            'cuit': self.config.ARCA_CUIT,
            'mensaje': 'Servicio de facturación operativo',
        }

    def obtener_tipos_comprobante(self) -> list:
        return self.wsfe.tipos_comprobante()

    def obtener_tipos_documento(self) -> list:
        return self.wsfe.tipos_documento()

    def obtener_alicuotas_iva(self) -> list:
        return self.wsfe.alicuotas_iva()

    def obtener_puntos_venta(self) -> list:
        """
        Puntos de venta habilitados.

        En homologación ARCA suele no devolver puntos de venta; se informa el 1.
        """
        try:
            puntos = self.wsfe.puntos_venta()
        except ArcaError as e:
            if self.config.ARCA_AMBIENTE != 'testing':
                raise
            logger.warning('No se pudieron obtener puntos de venta en homologación: %s', e)
            puntos = []

        if not puntos and self.config.ARCA_AMBIENTE == 'testing':
            return [{'PtoVta': 1}]
        return puntos

    def obtener_cotizacion(self, moneda_id: str, fecha=None) -> dict:
        return self.wsfe.cotizacion(moneda_id, resolver_fecha_opcional(fecha))
