# infrastructure/email/imap_client.py
from __future__ import annotations
import logging
from typing import Any, Callable, Iterable
from imapclient import IMAPClient, SEEN
from imapclient.exceptions import IMAPClientError
from imapclient.response_types import BodyData
from pyzmail.parse import decode_mail_header
from domain.errors import (
    AuthError,
    BodyStructureFetchError,
    CombinedMailError,
    ConnectError,
    FetchError,
    LogoutError,
    MailError,
    MailboxSelectError,
    MessageNotFound,
    NoSuchServer,
)
from domain.models import BodyPart, Message
from infrastructure.discovery.srv_lookup import lookup_service
from utils.addresses import email_domain
from utils.observers import AttemptObserver, LoggingAttemptObserver

logger = logging.getLogger(__name__)

IMAP_SERVICE = "imaps"
SUMMARY_ITEMS = ["ENVELOPE", "FLAGS", "UID"]


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8", errors="replace")
    return str(value)


def _address(addr: Any) -> str:
    mailbox = _text(getattr(addr, "mailbox", None))
    host = _text(getattr(addr, "host", None))
    if not host:
        return mailbox
    return f"{mailbox}@{host}"


def message_from_fetch(uid: int, data: dict) -> Message:
    """Resumen (UID, \\Seen, remitente, asunto) a partir de una respuesta FETCH."""
    env = data.get(b"ENVELOPE")
    from_addr = ""
    subject = ""
    if env is not None:
        if env.from_:
            from_addr = _address(env.from_[0])
        if env.subject:
            subject = decode_mail_header(_text(env.subject))
    flags = data.get(b"FLAGS") or ()
    return Message(uid=int(uid), seen=SEEN in flags, from_addr=from_addr, subject=subject)


def body_part_from_imap(data: Any, path: tuple[int, ...] = (), *, root: bool = True) -> BodyPart:
    """
    Convierte el BODYSTRUCTURE de imapclient en un árbol de BodyPart.
    Raíz single-part -> path (1,). Un message/rfc822 lleva como hijo la
    estructura del mensaje encapsulado.
    """
    if not isinstance(data, BodyData):
        data = BodyData.create(data)

    if data.is_multipart:
        children = tuple(
            body_part_from_imap(child, path + (i,), root=False)
            for i, child in enumerate(data[0], start=1)
        )
        return BodyPart(f"multipart/{_text(data[1])}".lower(), path, children)

    own_path = path + (1,) if root else path
    media_type = f"{_text(data[0])}/{_text(data[1])}".lower()
    children: tuple[BodyPart, ...] = ()
    if media_type == "message/rfc822" and len(data) > 8 and isinstance(data[8], tuple) and data[8]:
        children = (body_part_from_imap(data[8], own_path, root=True),)
    return BodyPart(media_type, own_path, children)


class IMAPSession:
    """
    Sesión IMAP de un solo uso: se abre por petición y se cierra al salir
    del bloque `with`, pase lo que pase.
    """

    def __init__(self, client: IMAPClient) -> None:
        self.client = client

    # ───────── conexión ─────────
    @classmethod
    def open(
        cls,
        email: str,
        password: str,
        *,
        timeout: float | None = None,
        server: tuple[str, int] | None = None,
        discover: Callable[..., list[tuple[str, int]]] = lookup_service,
        observer: AttemptObserver | None = None,
        client_factory: Callable[..., IMAPClient] = IMAPClient,
    ) -> "IMAPSession":
        observer = observer or LoggingAttemptObserver()
        if server:
            candidates = [server]
        else:
            candidates = discover(IMAP_SERVICE, "tcp", email_domain(email), timeout=timeout)

        client: IMAPClient | None = None
        last_exc: BaseException | None = None
        for host, port in candidates:
            if not host:
                last_exc = NoSuchServer(f"Registro SRV IMAP sin destino para {email_domain(email)}")
                observer.attempt_failed(IMAP_SERVICE, host, port, last_exc)
                continue
            try:
                client = client_factory(host, port=port, ssl=True, timeout=timeout)
            except (IMAPClientError, OSError) as exc:
                last_exc = exc
                observer.attempt_failed(IMAP_SERVICE, host, port, exc)
                continue
            observer.attempt_succeeded(IMAP_SERVICE, host, port)
            break
        if client is None:
            raise ConnectError(f"No se pudo conectar a ningún servidor IMAP: {last_exc}") from last_exc

        try:
            client.login(email, password)
        except (IMAPClientError, OSError) as exc:
            cls._release(client)
            raise AuthError(f"Login IMAP rechazado para {email}: {exc}") from exc
        return cls(client)

    @staticmethod
    def _release(client: IMAPClient) -> None:
        try:
            client.shutdown()
        except OSError as exc:
            logger.debug("Socket IMAP ya cerrado: %s", exc)

    def close(self) -> None:
        try:
            self.client.logout()
        except (IMAPClientError, OSError) as exc:
            self._release(self.client)
            raise LogoutError(f"Error cerrando IMAP: {exc}") from exc

    def __enter__(self) -> "IMAPSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            self.close()
        except MailError as teardown:
            if exc is None:
                raise
            raise CombinedMailError(exc, teardown) from exc

    # ───────── buzones ─────────
    def list_mailbox_names(self, pattern: str = "%") -> list[str]:
        try:
            folders = self.client.list_folders("", pattern)
        except (IMAPClientError, OSError) as exc:
            raise FetchError(f"Fallo en LIST: {exc}") from exc
        return [_text(name) for _flags, _delim, name in folders]

    def select(self, mailbox: str, readonly: bool = False) -> int:
        """Selecciona el buzón y devuelve el número de mensajes (EXISTS)."""
        try:
            resp = self.client.select_folder(mailbox, readonly=readonly)
        except (IMAPClientError, OSError) as exc:
            raise MailboxSelectError(mailbox, exc) from exc
        return int(resp.get(b"EXISTS", 0))

    # ───────── fetch ─────────
    def _fetch(self, messages: Any, items: list[str], what: str) -> dict:
        try:
            return self.client.fetch(messages, items)
        except (IMAPClientError, OSError) as exc:
            raise FetchError(f"Fallo en FETCH {what}: {exc}") from exc

    def fetch_uid_range(self, start: int, end: int) -> list[int]:
        """UIDs de las posiciones de secuencia start+1..end (ambas incluidas)."""
        if start > end:
            raise ValueError(f"start no puede ser mayor que end: {start} > {end}")
        if start == end:
            return []
        self.client.use_uid = False
        try:
            resp = self._fetch(f"{start + 1}:{end}", ["UID"], f"UID {start + 1}:{end}")
        finally:
            self.client.use_uid = True
        return [int(data[b"UID"]) for data in resp.values() if b"UID" in data]

    def fetch_summaries(self, uids: Iterable[int]) -> list[Message]:
        uids = list(uids)
        if not uids:
            return []
        resp = self._fetch(uids, SUMMARY_ITEMS, "resúmenes")
        messages = [message_from_fetch(uid, data) for uid, data in resp.items()]
        messages.sort(key=lambda m: m.uid, reverse=True)
        return messages

    def fetch_body_structure(self, uid: int) -> BodyPart:
        try:
            resp = self.client.fetch([uid], ["BODYSTRUCTURE"])
        except (IMAPClientError, OSError) as exc:
            raise BodyStructureFetchError(f"Fallo en FETCH BODYSTRUCTURE UID={uid}: {exc}") from exc
        data = resp.get(uid)
        if not data or b"BODYSTRUCTURE" not in data:
            raise MessageNotFound(f"Mensaje no encontrado: UID={uid}")
        return body_part_from_imap(data[b"BODYSTRUCTURE"])

    def fetch_part(self, uid: int, path: tuple[int, ...]) -> tuple[Message, bytes, bytes]:
        """
        Trae la cabecera MIME y el cuerpo crudo de la parte `path`, junto con
        el resumen del mensaje. No usa PEEK: el servidor puede marcarlo \\Seen.
        """
        section = ".".join(str(n) for n in path)
        mime_key = f"BODY[{section}.MIME]"
        text_key = f"BODY[{section}]"
        resp = self._fetch([uid], [mime_key, text_key] + SUMMARY_ITEMS, f"parte {section} UID={uid}")
        data = resp.get(uid)
        if not data:
            raise MessageNotFound(f"Mensaje no encontrado: UID={uid}")
        mime = data.get(mime_key.encode("ascii")) or b""
        text = data.get(text_key.encode("ascii")) or b""
        return message_from_fetch(uid, data), mime, text
