from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Optional, List, Tuple, Union


FechaEntrada = Union[int, str, date, None]


def to_decimal(value, default: Decimal = Decimal('0')) -> Decimal:
    """Convierte números/strings a Decimal sin arrastrar errores de float."""
    if value is None or value == '':
        return default
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        return default


@dataclass(frozen=True)
class Cliente:
    """Receptor del comprobante."""
    tipo_documento: int
    numero_documento: Union[str, int, None]
    condicion_iva: int


@dataclass(frozen=True)
class Item:
    """Línea de la factura. El precio unitario es neto (sin IVA)."""
    descripcion: str
    cantidad: Decimal
    precio_unitario: Decimal
    alicuota_iva: int

    @property
    def neto(self) -> Decimal:
        return self.cantidad * self.precio_unitario

    @classmethod
    def from_dict(cls, data: dict) -> 'Item':
        return cls(
            descripcion=data.get('descripcion') or '',
            cantidad=to_decimal(data.get('cantidad')),
            precio_unitario=to_decimal(data.get('precio_unitario')),
            alicuota_iva=int(data['alicuota_iva']),
        )


@dataclass(frozen=True)
class ComprobanteAsociado:
    """Representa un comprobante asociado (para NC/ND)."""
    tipo: Optional[int]
    punto_venta: Optional[int]
    numero: Optional[int]
    cuit_emisor: Optional[str] = None
    fecha: FechaEntrada = None

    @classmethod
    def from_dict(cls, data: dict) -> 'ComprobanteAsociado':
        return cls(
            tipo=data.get('tipo'),
            punto_venta=data.get('punto_venta'),
            numero=data.get('numero'),
            cuit_emisor=data.get('cuit_emisor') or data.get('cuit'),
            fecha=data.get('fecha'),
        )


@dataclass(frozen=True)
class SolicitudFactura:
    """Factura en formato amigable, tal como la envía el usuario."""
    tipo_comprobante: int
    cliente: Cliente
    items: Tuple[Item, ...]
    concepto: int = 1
    punto_venta: Optional[int] = None
    fecha: FechaEntrada = None
    moneda: str = 'PES'
    cotizacion: Decimal = Decimal('1')
    fecha_servicio_desde: FechaEntrada = None
    fecha_servicio_hasta: FechaEntrada = None
    fecha_vto_pago: FechaEntrada = None
    comprobantes_asociados: Tuple[ComprobanteAsociado, ...] = ()
    tributos: Tuple[dict, ...] = ()
    opcionales: Union[dict, list, None] = None
    importe_no_gravado: Decimal = Decimal('0')
    importe_exento: Decimal = Decimal('0')

    @classmethod
    def from_dict(cls, data: dict) -> 'SolicitudFactura':
        """Arma la solicitud desde el dict de entrada ya validado."""
        cliente = data['cliente']
        return cls(
            tipo_comprobante=int(data['tipo_comprobante']),
            concepto=int(data.get('concepto') or 1),
            punto_venta=int(data['punto_venta']) if data.get('punto_venta') else None,
            cliente=Cliente(
                tipo_documento=int(cliente['tipo_documento']),
                numero_documento=cliente.get('numero_documento'),
                condicion_iva=int(cliente['condicion_iva']),
            ),
            items=tuple(Item.from_dict(item) for item in data['items']),
            fecha=data.get('fecha'),
            moneda=data.get('moneda') or 'PES',
            cotizacion=to_decimal(data.get('cotizacion'), Decimal('1')),
            fecha_servicio_desde=data.get('fecha_servicio_desde'),
            fecha_servicio_hasta=data.get('fecha_servicio_hasta'),
            fecha_vto_pago=data.get('fecha_vto_pago'),
            comprobantes_asociados=tuple(
                ComprobanteAsociado.from_dict(asoc)
                for asoc in (data.get('comprobantes_asociados') or [])
            ),
            tributos=tuple(data.get('tributos') or []),
            opcionales=data.get('opcionales') or None,
            importe_no_gravado=to_decimal(data.get('importe_no_gravado')),
            importe_exento=to_decimal(data.get('importe_exento')),
        )


@dataclass(frozen=True)
class AlicuotaIVA:
    """Importe de IVA agrupado por alícuota."""
    id: int
    base_imponible: Decimal
    importe: Decimal


@dataclass(frozen=True)
class Totales:
    neto: Decimal
    iva: Decimal
    total: Decimal


@dataclass(frozen=True)
class Validacion:
    """Resultado de una validación puntual (CUIT, fecha, importe...)."""
    valido: bool
    error: Optional[str] = None


@dataclass
class ResultadoValidacion:
    """Resultado agregado: contiene todos los errores encontrados."""
    errores: List[str] = field(default_factory=list)
    documento_invalido: bool = False

    @property
    def valido(self) -> bool:
        return not self.errores


@dataclass
class CAEResponse:
    """Respuesta de solicitud de CAE."""
    resultado: str
    cae: Optional[str] = None
    cae_vencimiento: Optional[date] = None
    numero_comprobante: Optional[int] = None
    errores: List[dict] = field(default_factory=list)
    observaciones: List[dict] = field(default_factory=list)

    @property
    def aprobado(self) -> bool:
        return self.resultado == 'A'
