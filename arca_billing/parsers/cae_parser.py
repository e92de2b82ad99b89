from typing import List

from ..fechas import parse_fecha
from ..types import CAEResponse


def _campo(response: dict, *claves):
    """Primer valor presente entre los nombres normalizados y los de WSFE."""
    for clave in claves:
        valor = response.get(clave)
        if valor:
            return valor
    return None


def _mensajes(items) -> List[dict]:
    return [{'code': item.get('code'), 'message': item.get('msg')} for item in (items or [])]


class CAEParser:
    """Convierte la respuesta de FECAESolicitar en un CAEResponse."""

    @staticmethod
    def parse(response: dict) -> CAEResponse:
        """
        Acepta tanto el dict de ArcaClient (resultado, cae, cae_vencimiento,
        numero_comprobante) como los nombres de WSFE (Resultado, CAE,
        CAEFchVto, CbteDesde). Sin resultado se asume rechazo.
        """
        cae = _campo(response, 'cae', 'CAE')
        numero = _campo(response, 'numero_comprobante', 'CbteDesde')

        return CAEResponse(
            resultado=_campo(response, 'resultado', 'Resultado') or 'R',
            cae=str(cae) if cae else None,
            cae_vencimiento=parse_fecha(_campo(response, 'cae_vencimiento', 'CAEFchVto')),
            numero_comprobante=int(numero) if numero is not None else None,
            errores=_mensajes(response.get('errores')),
            observaciones=_mensajes(response.get('observaciones')),
        )

    @staticmethod
    def format_error_message(errors: List[dict]) -> str:
        """'[codigo] mensaje; [codigo] mensaje'"""
        return '; '.join(
            f"[{e.get('code', '?')}] {e.get('message', 'Error desconocido')}"
            for e in errors or []
        )
