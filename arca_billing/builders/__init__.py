from .factura_builder import FacturaBuilder, armar_fe_cae_req
from .transformador import transformar_a_formato_arca

__all__ = ['FacturaBuilder', 'armar_fe_cae_req', 'transformar_a_formato_arca']
