# interface_adapters/controllers/mail_controller.py
from __future__ import annotations
import functools
import logging
from typing import Any
from application.use_cases.mail_catalog_usecase import MailCatalogUseCase
from application.use_cases.read_message_usecase import ReadMessageUseCase
from application.use_cases.send_message_usecase import SendMessageUseCase
from config.settings import Settings
from domain.errors import (
    AddressParseError,
    AuthError,
    InvalidAddressFormat,
    InvalidUID,
    MailError,
    MessageNotFound,
    RandomnessError,
)
from infrastructure.email.imap_client import IMAPSession
from utils.observers import AttemptObserver, LoggingAttemptObserver

logger = logging.getLogger(__name__)

UINT32_MAX = 2**32 - 1


def parse_uid(raw: str) -> int:
    value = (raw or "").strip()
    if not (value.isascii() and value.isdigit()):
        raise InvalidUID(f"UID inválido: {raw!r}")
    uid = int(value)
    if uid > UINT32_MAX:
        raise InvalidUID(f"UID fuera de rango: {raw!r}")
    return uid


def parse_uid_list(raw: str) -> list[int]:
    return [parse_uid(part) for part in (raw or "").split(",")]


def status_for(exc: BaseException) -> int:
    """Código HTTP equivalente para cada tipo de error."""
    if isinstance(exc, (InvalidAddressFormat, AddressParseError, InvalidUID)):
        return 400
    if isinstance(exc, AuthError):
        return 401
    if isinstance(exc, MessageNotFound):
        return 404
    if isinstance(exc, RandomnessError):
        return 500
    if isinstance(exc, MailError):
        return 502
    return 500


class MailController:
    """
    Punto de entrada de las cinco operaciones. Cada llamada recibe las
    credenciales y abre su propia sesión; devuelve estructuras JSON.
    """

    def __init__(self, settings: Settings, observer: AttemptObserver | None = None) -> None:
        self.settings = settings
        self.observer = observer or LoggingAttemptObserver()
        open_session = functools.partial(
            IMAPSession.open,
            timeout=settings.timeout(),
            server=settings.imap_server(),
            observer=self.observer,
        )
        self.catalog = MailCatalogUseCase(open_session=open_session)
        self.reader = ReadMessageUseCase(open_session=open_session)

    # ───────────────────────── lectura ─────────────────────────
    def get_account(self, email: str, password: str) -> dict[str, Any]:
        return self._run("account", lambda: self.catalog.get_account(email, password).to_dict())

    def get_mailbox(self, email: str, password: str, name: str) -> dict[str, Any]:
        return self._run(f"mailbox/{name}", lambda: self.catalog.get_mailbox(email, password, name).to_dict())

    def get_messages(self, email: str, password: str, mailbox: str, uids: str) -> list[dict[str, Any]]:
        where = f"mailbox/{mailbox}/messages/{uids}"
        parsed = self._run(where, lambda: parse_uid_list(uids))
        return self._run(
            where,
            lambda: [m.to_dict() for m in self.catalog.get_messages(email, password, mailbox, parsed)],
        )

    def get_message(self, email: str, password: str, mailbox: str, uid: str) -> dict[str, Any]:
        where = f"mailbox/{mailbox}/message/{uid}"
        parsed = self._run(where, lambda: parse_uid(uid))
        return self._run(where, lambda: self.reader.get_message(email, password, mailbox, parsed).to_dict())

    # ───────────────────────── envío ─────────────────────────
    def send_message(self, email: str, password: str, payload: dict[str, Any]) -> None:
        def send() -> None:
            host, port = self.settings.smtp_server() or ("", 0)
            sender = SendMessageUseCase(
                email,
                password,
                host=host,
                port=port,
                observer=self.observer,
                timeout=self.settings.timeout(),
            )
            sender.send(
                str(payload.get("from") or ""),
                str(payload.get("to") or ""),
                str(payload.get("subject") or ""),
                str(payload.get("body") or ""),
            )

        self._run("send", send)

    def _run(self, where: str, fn):
        try:
            return fn()
        except MailError as exc:
            if status_for(exc) >= 500:
                logger.exception("%s: %s", where, exc)
            else:
                logger.warning("%s: %s", where, exc)
            raise
