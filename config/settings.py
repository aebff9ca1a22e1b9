# config/settings.py
from __future__ import annotations
from dataclasses import dataclass
import os
from dotenv import load_dotenv

load_dotenv()

@dataclass(frozen=True)
class Settings:
    # Credenciales (solo CLI; el controlador las recibe por llamada)
    MAIL_EMAIL: str = os.getenv("MAIL_EMAIL", "")
    MAIL_PASSWORD: str = os.getenv("MAIL_PASSWORD", "")

    # Timeout (s) para DNS, IMAP y SMTP. 0 = sin timeout
    MAIL_TIMEOUT: float = float(os.getenv("MAIL_TIMEOUT", 30))

    # IMAP: vacío -> descubrimiento SRV (_imaps._tcp)
    IMAP_HOST: str = os.getenv("IMAP_HOST", "")
    IMAP_PORT: int = int(os.getenv("IMAP_PORT", 993))

    # SMTP: vacío -> descubrimiento SRV (_submissions._tcp)
    SMTP_HOST: str = os.getenv("SMTP_HOST", "")
    SMTP_PORT: int = int(os.getenv("SMTP_PORT", 465))

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # ───────── helpers ─────────
    def timeout(self) -> float | None:
        return self.MAIL_TIMEOUT if self.MAIL_TIMEOUT and self.MAIL_TIMEOUT > 0 else None

    def imap_server(self) -> tuple[str, int] | None:
        host = (self.IMAP_HOST or "").strip()
        return (host, self.IMAP_PORT) if host else None

    def smtp_server(self) -> tuple[str, int] | None:
        host = (self.SMTP_HOST or "").strip()
        return (host, self.SMTP_PORT) if host else None
