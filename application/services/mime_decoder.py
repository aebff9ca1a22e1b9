# application/services/mime_decoder.py
from __future__ import annotations
import logging
import pyzmail
from domain.errors import DecodeError

logger = logging.getLogger(__name__)


def decode_message_part(mime: bytes, text: bytes) -> str:
    """
    Une la cabecera MIME de la parte con su cuerpo crudo, lo parsea como un
    mensaje de una sola parte y devuelve el texto ya decodificado
    (transfer-encoding + charset). Cualquier fallo -> DecodeError.
    """
    raw = (mime or b"") + (text or b"")
    try:
        msg = pyzmail.PyzMessage.factory(raw)
    except Exception as exc:
        raise DecodeError(f"No se pudo parsear la parte MIME: {exc}") from exc

    part = msg.text_part
    if part is None:
        logger.debug("Parte sin text/plain decodificable (%d bytes)", len(raw))
        return ""

    try:
        payload = part.get_payload()
    except Exception as exc:
        raise DecodeError(f"No se pudo decodificar la parte: {exc}") from exc
    if payload is None:
        raise DecodeError("Parte text/plain sin contenido")
    if isinstance(payload, str):
        return payload

    try:
        decoded, charset = pyzmail.decode_text(payload, part.charset, None)
    except (LookupError, UnicodeError) as exc:
        raise DecodeError(f"Charset no soportado: {part.charset or 'desconocido'}") from exc
    if not isinstance(decoded, str):
        raise DecodeError(f"Charset no soportado: {part.charset or 'desconocido'}")
    logger.debug("Parte decodificada con charset=%s", charset)
    return decoded
