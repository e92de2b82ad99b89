import re
from decimal import Decimal
from typing import Optional, List, Union

from ..types import to_decimal


class FacturaBuilder:
    """
    Builder para armar el registro de un comprobante en formato ARCA.

    No valida reglas de negocio: eso lo hace validar_datos_comprobante sobre
    el resultado de build(), para poder informar todos los errores juntos.
    """

    def __init__(self):
        self._tipo_cbte: Optional[int] = None
        self._punto_venta: Optional[int] = None
        self._numero: Optional[int] = None
        self._concepto: Optional[int] = None
        self._fecha_emision: Optional[int] = None
        self._fecha_desde: Optional[int] = None
        self._fecha_hasta: Optional[int] = None
        self._fecha_vto_pago: Optional[int] = None
        self._doc_tipo: Optional[int] = None
        self._doc_nro: int = 0
        self._importe_total: Optional[Decimal] = None
        self._importe_neto: Optional[Decimal] = None
        self._importe_iva: Decimal = Decimal('0')
        self._importe_tributos: Decimal = Decimal('0')
        self._importe_no_gravado: Decimal = Decimal('0')
        self._importe_exento: Decimal = Decimal('0')
        self._moneda: str = 'PES'
        self._cotizacion: Decimal = Decimal('1')
        self._alicuotas_iva: List[dict] = []
        self._cbtes_asoc: List[dict] = []
        self._tributos: List[dict] = []
        self._opcionales: Union[dict, list, None] = None
        self._condicion_iva_receptor_id: Optional[int] = None

    def set_comprobante(
        self,
        tipo: int,
        punto_venta: int,
        numero: int,
        concepto: int
    ) -> 'FacturaBuilder':
        """Configura los datos del comprobante."""
        self._tipo_cbte = tipo
        self._punto_venta = punto_venta
        self._numero = numero
        self._concepto = concepto
        return self

    def set_fechas(
        self,
        emision: int,
        desde: Optional[int] = None,
        hasta: Optional[int] = None,
        vto_pago: Optional[int] = None
    ) -> 'FacturaBuilder':
        """Configura las fechas del comprobante (enteros YYYYMMDD)."""
        self._fecha_emision = emision
        self._fecha_desde = desde
        self._fecha_hasta = hasta
        self._fecha_vto_pago = vto_pago
        return self

    def set_receptor(self, doc_tipo: int, doc_nro) -> 'FacturaBuilder':
        """Configura el receptor. Un número vacío o no numérico se informa como 0."""
        nro = re.sub(r'\D', '', str(doc_nro if doc_nro is not None else ''))

        self._doc_tipo = doc_tipo
        self._doc_nro = int(nro) if nro else 0
        return self

    def set_importes(
        self,
        total,
        neto,
        iva=0,
        tributos=0,
        no_gravado=0,
        exento=0
    ) -> 'FacturaBuilder':
        """Configura los importes del comprobante."""
        self._importe_total = to_decimal(total)
        self._importe_neto = to_decimal(neto)
        self._importe_iva = to_decimal(iva)
        self._importe_tributos = to_decimal(tributos)
        self._importe_no_gravado = to_decimal(no_gravado)
        self._importe_exento = to_decimal(exento)
        return self

    def set_moneda(self, moneda: str, cotizacion=1) -> 'FacturaBuilder':
        """Configura la moneda del comprobante."""
        self._moneda = moneda
        self._cotizacion = to_decimal(cotizacion, Decimal('1'))
        return self

    def add_iva(
        self,
        alicuota_id: int,
        base_imponible,
        importe
    ) -> 'FacturaBuilder':
        """Agrega una alícuota de IVA."""
        self._alicuotas_iva.append({
            'Id': int(alicuota_id),
            'BaseImp': float(to_decimal(base_imponible)),
            'Importe': float(to_decimal(importe)),
        })
        return self

    def add_comprobante_asociado(
        self,
        tipo: Optional[int],
        punto_venta: Optional[int],
        numero: Optional[int],
        cuit: Optional[str] = None,
        fecha: Optional[int] = None
    ) -> 'FacturaBuilder':
        """Agrega un comprobante asociado (para NC/ND)."""
        asociado = {
            'Tipo': tipo,
            'PtoVta': punto_venta,
            'Nro': numero,
        }
        if cuit:
            asociado['Cuit'] = str(cuit).replace('-', '')
        if fecha:
            asociado['CbteFch'] = fecha
        self._cbtes_asoc.append(asociado)
        return self

    def add_tributo(self, tributo: dict) -> 'FacturaBuilder':
        """Agrega un tributo tal como lo informa el usuario."""
        self._tributos.append(tributo)
        return self

    def set_opcionales(self, opcionales) -> 'FacturaBuilder':
        self._opcionales = opcionales
        return self

    def set_condicion_iva_receptor(self, condicion_iva_id: int) -> 'FacturaBuilder':
        """Configura la condición IVA del receptor (RG 5616)."""
        self._condicion_iva_receptor_id = int(condicion_iva_id)
        return self

    def build(self) -> dict:
        """Construye el registro del comprobante en formato ARCA."""
        datos = {
            'CantReg': 1,
            'PtoVta': self._punto_venta,
            'CbteTipo': self._tipo_cbte,
            'Concepto': self._concepto,
            'DocTipo': self._doc_tipo,
            'DocNro': self._doc_nro,
            'CbteDesde': self._numero,
            'CbteHasta': self._numero,
            'CbteFch': self._fecha_emision,
            'ImpTotal': float(self._importe_total) if self._importe_total is not None else None,
            'ImpTotConc': float(self._importe_no_gravado),
            'ImpNeto': float(self._importe_neto) if self._importe_neto is not None else None,
            'ImpOpEx': float(self._importe_exento),
            'ImpTrib': float(self._importe_tributos),
            'ImpIVA': float(self._importe_iva),
            'MonId': self._moneda,
            'MonCotiz': float(self._cotizacion),
        }

        # RG 5616: condición frente al IVA del receptor
        if self._condicion_iva_receptor_id is not None:
            datos['CondicionIVAReceptorId'] = self._condicion_iva_receptor_id

        # Fechas de servicio
        if self._fecha_desde:
            datos['FchServDesde'] = self._fecha_desde
        if self._fecha_hasta:
            datos['FchServHasta'] = self._fecha_hasta
        if self._fecha_vto_pago:
            datos['FchVtoPago'] = self._fecha_vto_pago

        if self._alicuotas_iva:
            datos['Iva'] = list(self._alicuotas_iva)

        if self._cbtes_asoc:
            datos['CbtesAsoc'] = list(self._cbtes_asoc)

        if self._tributos:
            datos['Tributos'] = list(self._tributos)

        if self._opcionales:
            datos['Opcionales'] = self._opcionales

        return datos


def _lista_opcionales(opcionales) -> list:
    if isinstance(opcionales, dict):
        return [{'Id': opcional_id, 'Valor': valor} for opcional_id, valor in opcionales.items()]
    return list(opcionales)


def armar_fe_cae_req(datos: dict) -> dict:
    """
    Arma el request de FECAESolicitar a partir del registro plano.

    WSFE recibe las fechas como strings YYYYMMDD y las listas envueltas en
    su elemento contenedor (AlicIva, CbteAsoc, Tributo, Opcional).
    """
    cabecera = {
        'CantReg': datos.get('CantReg', 1),
        'PtoVta': datos.get('PtoVta'),
        'CbteTipo': datos.get('CbteTipo'),
    }

    det_request = {
        key: value
        for key, value in datos.items()
        if key not in ('CantReg', 'PtoVta', 'CbteTipo', 'Iva', 'CbtesAsoc', 'Tributos', 'Opcionales')
    }

    for campo in ('CbteFch', 'FchServDesde', 'FchServHasta', 'FchVtoPago'):
        if det_request.get(campo) is not None:
            det_request[campo] = str(det_request[campo])

    if datos.get('Iva'):
        det_request['Iva'] = {'AlicIva': list(datos['Iva'])}

    if datos.get('CbtesAsoc'):
        det_request['CbtesAsoc'] = {'CbteAsoc': list(datos['CbtesAsoc'])}

    if datos.get('Tributos'):
        det_request['Tributos'] = {'Tributo': list(datos['Tributos'])}

    if datos.get('Opcionales'):
        det_request['Opcionales'] = {'Opcional': _lista_opcionales(datos['Opcionales'])}

    return {
        'FeCAEReq': {
            'FeCabReq': cabecera,
            'FeDetReq': {
                'FECAEDetRequest': [det_request]
            }
        }
    }
