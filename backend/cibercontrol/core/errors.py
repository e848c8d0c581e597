"""
Errores de dominio.

Los servicios nunca lanzan HTTPException: lanzan estas clases y la app las
traduce a respuestas en ``main.create_app``. Cada error queda acotado a la
accion del operador que lo provoco.
"""


class CiberControlError(Exception):
    """Base de todos los errores de la aplicacion."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConflictError(CiberControlError):
    """La PC o la sesion ya no esta en el estado esperado (ocupada, cerrada, etc)."""

    status_code = 409


class ValidationError(CiberControlError):
    """Cantidad, monto o datos de entrada fuera de rango."""

    status_code = 422


class NotFoundError(CiberControlError):
    status_code = 404


class StoreError(CiberControlError):
    """Fallo de la base de datos (red, restriccion del servidor, timeout)."""

    status_code = 503
