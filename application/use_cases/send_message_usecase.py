# application/use_cases/send_message_usecase.py
from __future__ import annotations
import logging
from typing import Callable
from application.services.message_composer import OutgoingMessage, compose_message
from domain.errors import DeliveryError, NoSuchServer
from infrastructure.discovery.srv_lookup import lookup_service
from infrastructure.email.smtp_client import SMTPSubmission
from utils.addresses import email_domain
from utils.observers import AttemptObserver, LoggingAttemptObserver

logger = logging.getLogger(__name__)

SUBMISSION_SERVICE = "submissions"


class SendMessageUseCase:
    """
    Compone y envía un mensaje de texto plano. Sin servidor fijo, descubre
    los candidatos por SRV en el dominio del remitente y prueba en orden.
    """

    def __init__(
        self,
        email: str,
        password: str,
        *,
        host: str = "",
        port: int = 0,
        transport: SMTPSubmission | None = None,
        discover: Callable[..., list[tuple[str, int]]] = lookup_service,
        observer: AttemptObserver | None = None,
        timeout: float | None = None,
    ) -> None:
        self.email = email
        self.password = password
        self.domain = email_domain(email)
        self.host = host
        self.port = port
        self.timeout = timeout
        self.transport = transport or SMTPSubmission(timeout=timeout)
        self.discover = discover
        self.observer = observer or LoggingAttemptObserver()

    def with_server(self, host: str, port: int) -> "SendMessageUseCase":
        return SendMessageUseCase(
            self.email,
            self.password,
            host=host,
            port=port,
            transport=self.transport,
            discover=self.discover,
            observer=self.observer,
            timeout=self.timeout,
        )

    def send(self, from_: str, to: str, subject: str, body: str) -> None:
        message = compose_message(from_, to, subject, body, domain=self.domain)
        self.deliver(message)

    def deliver(self, message: OutgoingMessage) -> None:
        if self.host:
            self._deliver_direct(message)
            return

        candidates = self.discover(SUBMISSION_SERVICE, "tcp", self.domain, timeout=self.timeout)
        last_exc: Exception | None = None
        for host, port in candidates:
            if not host:
                last_exc = NoSuchServer(f"Registro SRV sin destino para {self.domain}")
                self.observer.attempt_failed(SUBMISSION_SERVICE, host, port, last_exc)
                continue
            try:
                self.with_server(host, port).deliver(message)
                return
            except DeliveryError as exc:
                last_exc = exc

        raise DeliveryError(f"Ningún servidor de envío aceptó el mensaje: {last_exc}") from last_exc

    def _deliver_direct(self, message: OutgoingMessage) -> None:
        try:
            self.transport.send_mail_tls(
                self.host,
                self.port,
                self.email,
                self.password,
                message.from_addr,
                [message.to_addr],
                message.data,
            )
        except DeliveryError as exc:
            self.observer.attempt_failed(SUBMISSION_SERVICE, self.host, self.port, exc)
            raise
        self.observer.attempt_succeeded(SUBMISSION_SERVICE, self.host, self.port)
