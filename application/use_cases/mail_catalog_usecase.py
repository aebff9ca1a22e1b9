# application/use_cases/mail_catalog_usecase.py
from __future__ import annotations
import logging
from typing import Callable, Iterable
from domain.models import Account, Mailbox, Message
from infrastructure.email.imap_client import IMAPSession

logger = logging.getLogger(__name__)

INBOX = "INBOX"
UID_BATCH_SIZE = 500
PAGE_SIZE = 25

SessionFactory = Callable[[str, str], IMAPSession]


class MailCatalogUseCase:
    """Listado de buzones, UIDs paginados y resúmenes de mensajes."""

    def __init__(self, *, open_session: SessionFactory) -> None:
        self.open_session = open_session

    def get_account(self, email: str, password: str) -> Account:
        with self.open_session(email, password) as session:
            names = session.list_mailbox_names("%")

        # INBOX siempre existe (RFC 3501) y va primero
        mailboxes = [Mailbox(name=INBOX)]
        mailboxes += [Mailbox(name=n) for n in names if n != INBOX]
        logger.info("Cuenta %s: %d buzones", email, len(mailboxes))
        return Account(mailboxes=mailboxes)

    def get_mailbox(self, email: str, password: str, name: str) -> Mailbox:
        mbx = Mailbox(name=name)
        with self.open_session(email, password) as session:
            total = session.select(name, readonly=True)
            if total == 0:
                mbx.uids = []
                mbx.messages = []
                return mbx

            found: set[int] = set()
            for start in range(0, total, UID_BATCH_SIZE):
                end = min(start + UID_BATCH_SIZE, total)
                found.update(session.fetch_uid_range(start, end))

            mbx.uids = sorted(found, reverse=True)
            mbx.messages = session.fetch_summaries(mbx.uids[:PAGE_SIZE])

        logger.info("Buzón %s: %d mensajes, página de %d", name, len(mbx.uids), len(mbx.messages))
        return mbx

    def get_messages(self, email: str, password: str, mailbox: str, uids: Iterable[int]) -> list[Message]:
        with self.open_session(email, password) as session:
            session.select(mailbox, readonly=True)
            return session.fetch_summaries(uids)
