from typing import List, Optional


class ArcaError(Exception):
    """Error base de ARCA."""
    pass


class ArcaAuthError(ArcaError):
    """Error de autenticación con ARCA."""
    pass


class ArcaNetworkError(ArcaError):
    """Error de red al comunicarse con ARCA."""
    pass


class ArcaValidationError(ArcaError):
    """Error de validación de datos para ARCA.

    Agrupa todos los mensajes detectados en una sola excepción.
    """

    def __init__(self, mensaje: str, errores: Optional[List[str]] = None):
        self.errores = list(errores or [])
        if self.errores:
            mensaje = mensaje + ':\n' + '\n'.join(self.errores)
        super().__init__(mensaje)


class InputValidationError(ArcaValidationError):
    """Los datos de entrada de la factura son incompletos o inválidos."""
    pass


class StructuralValidationError(ArcaValidationError):
    """El comprobante armado no cumple las reglas de ARCA."""
    pass


class IdentityChecksumError(StructuralValidationError):
    """CUIT/CUIL/DNI con formato o dígito verificador incorrecto."""
    pass


class AuthorityError(ArcaError):
    """ARCA rechazó el comprobante o falló la comunicación.

    `etapa` indica en qué paso del proceso ocurrió (numeracion, envio, consulta).
    """

    def __init__(
        self,
        mensaje: str,
        etapa: Optional[str] = None,
        codigo: Optional[str] = None,
        errores: Optional[List[dict]] = None,
        observaciones: Optional[List[dict]] = None,
    ):
        super().__init__(mensaje)
        self.etapa = etapa
        self.codigo = codigo
        self.errores = list(errores or [])
        self.observaciones = list(observaciones or [])


class NotFoundError(ArcaError):
    """El comprobante consultado no existe en ARCA."""
    pass
