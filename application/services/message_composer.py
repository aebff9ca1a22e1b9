# application/services/message_composer.py
from __future__ import annotations
import secrets
import time
import unicodedata
from dataclasses import dataclass
from datetime import datetime, timezone
from email import policy
from email.headerregistry import Address
from email.message import EmailMessage
from email.utils import format_datetime
from typing import Callable
from domain.errors import AddressParseError, RandomnessError

# Cc: controles; Zl/Zp: saltos de línea para str.splitlines()
STRIPPED_CATEGORIES = frozenset({"Cc", "Zl", "Zp"})


@dataclass(frozen=True)
class OutgoingMessage:
    from_addr: str
    to_addr: str
    data: bytes


def sanitize(value: str) -> str:
    """Quita controles Unicode y separadores de línea/párrafo (U+2028, U+2029)."""
    return "".join(ch for ch in (value or "") if unicodedata.category(ch) not in STRIPPED_CATEGORIES)


def parse_address(value: str) -> Address:
    """Un único mailbox RFC 5322 ("Nombre <user@dominio>" o "user@dominio")."""
    try:
        header = policy.default.header_factory("to", value)
    except Exception as exc:
        raise AddressParseError(f"Dirección inválida {value!r}: {exc}") from exc
    addresses = getattr(header, "addresses", ())
    if header.defects or len(addresses) != 1:
        raise AddressParseError(f"Dirección inválida: {value!r}")
    addr = addresses[0]
    if not addr.username or not addr.domain:
        raise AddressParseError(f"Dirección inválida: {value!r}")
    return addr


def new_message_id(
    domain: str,
    *,
    now: Callable[[], float] = time.time,
    random_bytes: Callable[[int], bytes] = secrets.token_bytes,
) -> str:
    try:
        rnd = random_bytes(16)
    except (OSError, NotImplementedError) as exc:
        raise RandomnessError(f"Fuente de aleatoriedad no disponible: {exc}") from exc
    return f"<{int(now())}.{rnd.hex()}@{domain}>"


def compose_message(
    from_: str,
    to: str,
    subject: str,
    body: str,
    *,
    domain: str,
    date: datetime | None = None,
    message_id: str | None = None,
) -> OutgoingMessage:
    """
    Construye el mensaje text/plain (utf-8, quoted-printable) con CRLF.
    Valida direcciones y genera el Message-ID antes de cualquier conexión.
    """
    from_addr = parse_address(sanitize(from_))
    to_addr = parse_address(sanitize(to))
    subject = sanitize(subject)
    mid = message_id or new_message_id(domain)
    date = date or datetime.now(timezone.utc)

    msg = EmailMessage(policy=policy.SMTP)
    msg["From"] = from_addr
    msg["To"] = to_addr
    msg["Subject"] = subject
    msg["Date"] = format_datetime(date.astimezone(timezone.utc))
    msg["Message-ID"] = mid
    msg.set_content(body or "", subtype="plain", charset="utf-8", cte="quoted-printable")
    return OutgoingMessage(from_addr=from_addr.addr_spec, to_addr=to_addr.addr_spec, data=msg.as_bytes())
