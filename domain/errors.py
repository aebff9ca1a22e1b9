# domain/errors.py
"""
Jerarquía de errores del cliente de correo.

Las excepciones de librerías (imapclient, dnspython, smtplib, sockets) se
capturan en infraestructura y se relanzan como alguna de estas clases,
encadenando la excepción de origen con `raise ... from exc`.
"""
from __future__ import annotations


class MailError(Exception):
    """Base de todos los errores de la aplicación."""


# ───────── entrada ─────────
class InvalidAddressFormat(MailError):
    """La dirección no contiene '@'."""


class AddressParseError(MailError):
    """La dirección no es un mailbox RFC 5322 válido."""


class InvalidUID(MailError):
    """UID vacío, no numérico o fuera de rango uint32."""


# ───────── descubrimiento / conexión ─────────
class DiscoveryError(MailError):
    """Fallo en la consulta SRV o respuesta sin candidatos."""


class NoSuchServer(DiscoveryError):
    """Registro SRV con destino vacío ('.')."""


class ConnectError(MailError):
    pass


class AuthError(MailError):
    pass


# ───────── protocolo ─────────
class MailboxSelectError(MailError):
    def __init__(self, mailbox: str, reason: object = None) -> None:
        self.mailbox = mailbox
        msg = f"No se pudo seleccionar {mailbox}"
        if reason is not None:
            msg = f"{msg}: {reason}"
        super().__init__(msg)


class FetchError(MailError):
    pass


class BodyStructureFetchError(FetchError):
    pass


class MessageNotFound(MailError):
    pass


class DecodeError(MailError):
    pass


# ───────── envío ─────────
class RandomnessError(MailError):
    pass


class DeliveryError(MailError):
    pass


# ───────── cierre de sesión ─────────
class LogoutError(MailError):
    pass


class CombinedMailError(MailError):
    """
    Fallo de la operación y fallo del cierre de sesión a la vez.
    Conserva ambos en `errors` (primero el de la operación).
    """

    def __init__(self, *errors: BaseException) -> None:
        self.errors = tuple(errors)
        super().__init__("\n".join(str(e) for e in self.errors))
