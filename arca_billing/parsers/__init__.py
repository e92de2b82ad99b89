from .cae_parser import CAEParser
from .respuesta import formatear_respuesta_arca

__all__ = ['CAEParser', 'formatear_respuesta_arca']
