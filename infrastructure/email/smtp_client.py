# infrastructure/email/smtp_client.py
from __future__ import annotations
import logging
import smtplib
import ssl
from typing import Callable, Iterable
from domain.errors import DeliveryError

logger = logging.getLogger(__name__)


class SMTPSubmission:
    """
    Envío por submission con TLS implícito (puerto 465) y SASL PLAIN
    (authzid vacío, usuario = dirección de la cuenta).
    """

    def __init__(
        self,
        timeout: float | None = None,
        smtp_factory: Callable[..., smtplib.SMTP_SSL] = smtplib.SMTP_SSL,
    ) -> None:
        self.timeout = timeout
        self.smtp_factory = smtp_factory

    def _connect(self, host: str, port: int) -> smtplib.SMTP_SSL:
        kwargs = {"context": ssl.create_default_context()}
        if self.timeout:
            kwargs["timeout"] = self.timeout
        return self.smtp_factory(host, port, **kwargs)

    def send_mail_tls(
        self,
        host: str,
        port: int,
        username: str,
        password: str,
        from_addr: str,
        to_addrs: Iterable[str],
        message: bytes,
    ) -> None:
        to_addrs = list(to_addrs)
        try:
            with self._connect(host, port) as smtp:
                smtp.ehlo()
                smtp.user, smtp.password = username, password
                smtp.auth("PLAIN", smtp.auth_plain)
                smtp.sendmail(from_addr, to_addrs, message)
        except (smtplib.SMTPException, OSError) as exc:
            raise DeliveryError(f"Fallo enviando por {host}:{port}: {exc}") from exc
        logger.info("Mensaje entregado a %s:%s para %s", host, port, ", ".join(to_addrs))
