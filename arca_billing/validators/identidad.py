import re
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Optional

from ..constants import DIAS_VENTANA_FECHA, PUNTO_VENTA_MAX, PUNTO_VENTA_MIN
from ..exceptions import IdentityChecksumError
from ..types import Validacion

MULTIPLICADORES_CUIT = (5, 4, 3, 2, 7, 6, 5, 4, 3, 2)


def limpiar_documento(documento) -> str:
    """Elimina guiones, puntos y espacios de un número de documento."""
    return re.sub(r'[-.\s]', '', str(documento if documento is not None else ''))


def digito_verificador_cuit(primeros_diez: str) -> int:
    suma = sum(int(d) * m for d, m in zip(primeros_diez, MULTIPLICADORES_CUIT))
    verificador = 11 - (suma % 11)
    if verificador == 11:
        return 0
    if verificador == 10:
        return 9
    return verificador


def validar_cuit(cuit) -> Validacion:
    """Verifica formato y dígito verificador (módulo 11) de un CUIT/CUIL."""
    cuit_limpio = limpiar_documento(cuit)

    if not re.fullmatch(r'\d{11}', cuit_limpio):
        return Validacion(False, 'CUIT debe tener 11 dígitos')

    if digito_verificador_cuit(cuit_limpio[:10]) != int(cuit_limpio[10]):
        return Validacion(False, 'CUIT inválido (dígito verificador incorrecto)')

    return Validacion(True)


def asegurar_cuit(cuit) -> str:
    """Devuelve el CUIT limpio o lanza IdentityChecksumError."""
    resultado = validar_cuit(cuit)
    if not resultado.valido:
        raise IdentityChecksumError(f'CUIT {cuit} rechazado', [resultado.error])
    return limpiar_documento(cuit)


def validar_dni(dni) -> Validacion:
    dni_limpio = str(dni if dni is not None else '').replace('.', '')

    if not re.fullmatch(r'\d{7,8}', dni_limpio):
        return Validacion(False, 'DNI debe tener 7 u 8 dígitos')

    return Validacion(True)


def validar_fecha(fecha, hoy: Optional[date] = None) -> Validacion:
    """
    Valida una fecha YYYYMMDD.

    ARCA solo acepta comprobantes con fecha dentro de los 10 días anteriores
    o posteriores a la fecha de envío.
    """
    fecha_str = str(fecha)

    if not re.fullmatch(r'\d{8}', fecha_str):
        return Validacion(False, 'Fecha debe estar en formato YYYYMMDD')

    anio = int(fecha_str[0:4])
    mes = int(fecha_str[4:6])
    dia = int(fecha_str[6:8])

    if mes < 1 or mes > 12:
        return Validacion(False, 'Mes inválido')

    if dia < 1 or dia > 31:
        return Validacion(False, 'Día inválido')

    try:
        fecha_date = date(anio, mes, dia)
    except ValueError:
        return Validacion(False, f'Fecha inexistente: {fecha_str}')

    hoy = hoy or date.today()
    if abs((fecha_date - hoy).days) > DIAS_VENTANA_FECHA:
        return Validacion(
            False,
            f'La fecha debe estar dentro de los {DIAS_VENTANA_FECHA} días anteriores o posteriores a hoy',
        )

    return Validacion(True)


def validar_punto_venta(punto_venta) -> Validacion:
    try:
        pv = int(punto_venta)
    except (TypeError, ValueError):
        pv = None

    if pv is None or isinstance(punto_venta, bool) or pv < PUNTO_VENTA_MIN or pv > PUNTO_VENTA_MAX:
        return Validacion(False, f'Punto de venta debe ser entre {PUNTO_VENTA_MIN} y {PUNTO_VENTA_MAX}')

    return Validacion(True)


def validar_importe(importe, nombre: str = 'Importe') -> Validacion:
    """Los importes deben ser números no negativos con máximo 2 decimales."""
    if importe is None or isinstance(importe, bool):
        return Validacion(False, f'{nombre} debe ser un número')

    try:
        valor = Decimal(str(importe))
    except (InvalidOperation, ValueError):
        return Validacion(False, f'{nombre} debe ser un número')

    if not valor.is_finite():
        return Validacion(False, f'{nombre} debe ser un número')

    if valor < 0:
        return Validacion(False, f'{nombre} no puede ser negativo')

    if valor.normalize().as_tuple().exponent < -2:
        return Validacion(False, f'{nombre} debe tener máximo 2 decimales')

    return Validacion(True)
