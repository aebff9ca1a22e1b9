# utils/observers.py
from __future__ import annotations
import logging
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AttemptEvent:
    service: str
    host: str
    port: int
    ok: bool
    error: BaseException | None = None


class AttemptObserver:
    """
    Recibe los intentos de conexión contra cada candidato descubierto
    (IMAP y SMTP). Las implementaciones no deben lanzar excepciones.
    """

    def attempt_failed(self, service: str, host: str, port: int, error: BaseException) -> None:
        pass

    def attempt_succeeded(self, service: str, host: str, port: int) -> None:
        pass


class LoggingAttemptObserver(AttemptObserver):
    def attempt_failed(self, service: str, host: str, port: int, error: BaseException) -> None:
        logger.warning("Fallo conectando a %s %s:%s: %s", service, host or "-", port, error)

    def attempt_succeeded(self, service: str, host: str, port: int) -> None:
        logger.info("Conectado a %s %s:%s", service, host, port)


@dataclass
class RecordingAttemptObserver(AttemptObserver):
    events: list[AttemptEvent] = field(default_factory=list)

    def attempt_failed(self, service: str, host: str, port: int, error: BaseException) -> None:
        self.events.append(AttemptEvent(service, host, port, ok=False, error=error))

    def attempt_succeeded(self, service: str, host: str, port: int) -> None:
        self.events.append(AttemptEvent(service, host, port, ok=True))

    def failures(self) -> list[AttemptEvent]:
        return [e for e in self.events if not e.ok]
