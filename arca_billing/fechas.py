import re
from datetime import date, datetime
from typing import Optional


def fecha_a_formato_arca(fecha: date) -> int:
    """Convierte una fecha a entero YYYYMMDD."""
    return int(fecha.strftime('%Y%m%d'))


def fecha_actual(hoy: Optional[date] = None) -> int:
    return fecha_a_formato_arca(hoy or date.today())


def formatear_fecha(fecha_yyyymmdd) -> Optional[str]:
    """Convierte YYYYMMDD a YYYY-MM-DD."""
    if fecha_yyyymmdd is None:
        return None
    raw = str(fecha_yyyymmdd)
    return f'{raw[0:4]}-{raw[4:6]}-{raw[6:8]}'


def parse_fecha(value) -> Optional[date]:
    """Acepta date, datetime, YYYYMMDD (int o str) o YYYY-MM-DD."""
    if isinstance(value, datetime):
        return value.date()

    if isinstance(value, date):
        return value

    if value is None:
        return None

    raw = str(value).strip()
    if not raw:
        return None

    for fmt in ('%Y%m%d', '%Y-%m-%d'):
        try:
            return datetime.strptime(raw, fmt).date()
        except ValueError:
            continue

    return None


def _fecha_numerica(value) -> Optional[int]:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None


def es_fecha_valida(value) -> bool:
    """True si value es una fecha real: date, YYYYMMDD (int o str) o YYYY-MM-DD."""
    if isinstance(value, bool):
        return False
    if isinstance(value, (date, datetime)):
        return True
    if not isinstance(value, (int, str)):
        return False
    raw = str(value).strip()
    if not re.fullmatch(r'\d{8}|\d{4}-\d{2}-\d{2}', raw):
        return False
    return parse_fecha(raw) is not None


def resolver_fecha(value, hoy: Optional[date] = None) -> int:
    """
    Obtiene la fecha a informar en formato numérico.

    Prioridad: fecha numérica explícita, luego fecha calendario convertida,
    y por último la fecha de hoy (solo si no se informó ninguna).

    Raises:
        ValueError: la fecha informada no se puede interpretar
    """
    if value is None or value == '':
        return fecha_actual(hoy)
    return resolver_fecha_opcional(value)


def resolver_fecha_opcional(value) -> Optional[int]:
    if value is None or value == '':
        return None

    numerica = _fecha_numerica(value)
    if numerica is not None:
        return numerica

    parsed = parse_fecha(value)
    if parsed is None:
        raise ValueError(f'Fecha inválida: {value!r}')
    return fecha_a_formato_arca(parsed)
