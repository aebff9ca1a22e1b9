# domain/models.py
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any


@dataclass
class Message:
    uid: int
    seen: bool = False
    from_addr: str = ""
    subject: str = ""
    body: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "uid": self.uid,
            "seen": self.seen,
            "from": self.from_addr,
            "subject": self.subject,
            "body": self.body,
        }


@dataclass
class Mailbox:
    name: str
    uids: list[int] = field(default_factory=list)
    messages: list[Message] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "uids": list(self.uids),
            "messages": [m.to_dict() for m in self.messages],
        }


@dataclass
class Account:
    mailboxes: list[Mailbox] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"mailboxes": [{"name": m.name} for m in self.mailboxes]}


@dataclass(frozen=True)
class BodyPart:
    """
    Nodo de la estructura MIME de un mensaje (BODYSTRUCTURE).
    `path` son los índices 1-based desde la raíz, tal cual se usan en BODY[1.2].
    """
    media_type: str
    path: tuple[int, ...] = ()
    children: tuple["BodyPart", ...] = ()

    @property
    def section(self) -> str:
        return ".".join(str(n) for n in self.path)
