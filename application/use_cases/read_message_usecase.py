# application/use_cases/read_message_usecase.py
from __future__ import annotations
import logging
from typing import Callable
from application.services.body_structure import find_plain_text_path
from application.services.mime_decoder import decode_message_part
from domain.errors import MessageNotFound
from domain.models import Message
from infrastructure.email.imap_client import IMAPSession

logger = logging.getLogger(__name__)


class ReadMessageUseCase:
    def __init__(self, *, open_session: Callable[[str, str], IMAPSession]) -> None:
        self.open_session = open_session

    def get_message(self, email: str, password: str, mailbox: str, uid: int) -> Message:
        """
        Devuelve el mensaje con `body` = primera parte text/plain decodificada.
        Si no hay ninguna (sin contar reenvíos), solo los metadatos.
        El servidor puede marcar el mensaje como leído al traer la parte.
        """
        with self.open_session(email, password) as session:
            session.select(mailbox)
            structure = session.fetch_body_structure(uid)
            path = find_plain_text_path(structure)

            if path is None:
                logger.info("UID=%s sin parte text/plain en %s; solo metadatos", uid, mailbox)
                messages = session.fetch_summaries([uid])
                if not messages:
                    raise MessageNotFound(f"Mensaje no encontrado: UID={uid}")
                return messages[0]

            message, mime, text = session.fetch_part(uid, path)

        message.body = decode_message_part(mime, text)
        return message
