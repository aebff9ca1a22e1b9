"""In-memory fakes for the IMAP server, SRV lookup and SMTP transport."""

from __future__ import annotations

import functools
from dataclasses import dataclass, field

from imapclient.exceptions import IMAPClientError, LoginError
from imapclient.response_types import Address, BodyData, Envelope

from domain.errors import DeliveryError, DiscoveryError
from infrastructure.email.imap_client import IMAPSession
from utils.observers import RecordingAttemptObserver


PLAIN = (b"TEXT", b"PLAIN", (b"CHARSET", b"utf-8"), None, None, b"7BIT", 12, 1)
HTML = (b"TEXT", b"HTML", (b"CHARSET", b"utf-8"), None, None, b"7BIT", 40, 1)


def forwarded(inner):
    return (b"MESSAGE", b"RFC822", None, None, None, b"7BIT", 300, (None,) * 10, inner, 12)


def multipart(subtype, *parts):
    return tuple(parts) + (subtype, (b"BOUNDARY", b"xyz"), None, None)


@dataclass
class FakeMessage:
    uid: int
    subject: bytes = b"Hello"
    sender: tuple = (b"alice", b"example.com")
    seen: bool = False
    structure: tuple = PLAIN
    sections: dict = field(default_factory=dict)

    def envelope(self):
        from_ = (Address(b"Alice", None, self.sender[0], self.sender[1]),) if self.sender else None
        return Envelope(
            date=None, subject=self.subject, from_=from_, sender=None, reply_to=None,
            to=None, cc=None, bcc=None, in_reply_to=None, message_id=None,
        )


class FakeIMAPClient:
    """Enough of IMAPClient for the session: sequence and UID FETCH on an in-memory store."""

    def __init__(self, folders=(), mailboxes=None, fail_login=False, fail_logout=False, fail_fetch=False):
        self.folders = list(folders)
        self.mailboxes = mailboxes or {}
        self.fail_login = fail_login
        self.fail_logout = fail_logout
        self.fail_fetch = fail_fetch
        self.use_uid = True
        self.selected = None
        self.readonly = None
        self.fetches = []
        self.logged_in = None
        self.logged_out = False
        self.shut_down = False

    def login(self, user, password):
        if self.fail_login:
            raise LoginError("[AUTHENTICATIONFAILED] Invalid credentials")
        self.logged_in = (user, password)

    def logout(self):
        self.logged_out = True
        if self.fail_logout:
            raise IMAPClientError("logout failed")
        self.shut_down = True
        return b"BYE"

    def shutdown(self):
        self.shut_down = True

    def list_folders(self, directory="", pattern="*"):
        return [((b"\\HasNoChildren",), b"/", name) for name in self.folders]

    def select_folder(self, folder, readonly=False):
        if folder not in self.mailboxes:
            raise IMAPClientError(f"select failed: Mailbox doesn't exist: {folder}")
        self.selected, self.readonly = folder, readonly
        return {b"EXISTS": len(self.mailboxes[folder]), b"FLAGS": ()}

    def _messages(self):
        return sorted(self.mailboxes[self.selected], key=lambda m: m.uid)

    def fetch(self, messages, data):
        self.fetches.append((messages, list(data), self.use_uid))
        if self.fail_fetch:
            raise IMAPClientError("fetch failed")
        store = self._messages()
        if not self.use_uid:
            first, last = (int(n) for n in messages.split(":"))
            return {
                seq: {b"UID": store[seq - 1].uid, b"SEQ": seq}
                for seq in range(first, min(last, len(store)) + 1)
            }

        by_uid = {m.uid: m for m in store}
        out = {}
        for uid in messages:
            msg = by_uid.get(uid)
            if msg is None:
                continue
            item = {b"SEQ": store.index(msg) + 1}
            for name in data:
                if name == "ENVELOPE":
                    item[b"ENVELOPE"] = msg.envelope()
                elif name == "FLAGS":
                    item[b"FLAGS"] = (b"\\Seen",) if msg.seen else ()
                elif name == "BODYSTRUCTURE":
                    item[b"BODYSTRUCTURE"] = BodyData.create(msg.structure)
                elif name.startswith("BODY["):
                    section = name[len("BODY["):-1]
                    if section.endswith(".MIME"):
                        value = msg.sections.get(section[:-len(".MIME")], (b"", b""))[0]
                    else:
                        value = msg.sections.get(section, (b"", b""))[1]
                    item[name.encode("ascii")] = value
            out[uid] = item
        return out


class FakeTransport:
    def __init__(self, failing_hosts=()):
        self.failing_hosts = set(failing_hosts)
        self.sent = []
        self.attempts = []

    def send_mail_tls(self, host, port, username, password, from_addr, to_addrs, message):
        self.attempts.append((host, port))
        if host in self.failing_hosts:
            raise DeliveryError(f"Fallo enviando por {host}:{port}: connection refused")
        self.sent.append({
            "host": host, "port": port, "username": username, "password": password,
            "from": from_addr, "to": list(to_addrs), "data": message,
        })


class FakeDiscovery:
    def __init__(self, records=None, error=None):
        self.records = records or {}
        self.error = error
        self.queries = []

    def __call__(self, service, proto, domain, *, timeout=None):
        self.queries.append((service, proto, domain))
        if self.error is not None:
            raise self.error
        candidates = self.records.get((service, domain))
        if not candidates:
            raise DiscoveryError(f"Sin registros SRV para _{service}._{proto}.{domain}")
        return list(candidates)


def session_factory(client):
    return functools.partial(
        IMAPSession.open,
        server=("imap.example.com", 993),
        client_factory=lambda *args, **kwargs: client,
        observer=RecordingAttemptObserver(),
    )
