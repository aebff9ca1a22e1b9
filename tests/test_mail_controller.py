from __future__ import annotations

import pytest

from config.settings import Settings
from domain.errors import (
    AuthError,
    ConnectError,
    DeliveryError,
    InvalidAddressFormat,
    InvalidUID,
    LogoutError,
    MessageNotFound,
    RandomnessError,
)
from interface_adapters.controllers.mail_controller import (
    MailController,
    parse_uid,
    parse_uid_list,
    status_for,
)
from tests.helpers import FakeIMAPClient, FakeMessage, session_factory


def controller_for(client, **settings):
    controller = MailController(Settings(**settings))
    open_session = session_factory(client)
    controller.catalog.open_session = open_session
    controller.reader.open_session = open_session
    return controller


def test_parse_uid_list() -> None:
    assert parse_uid_list("30,29, 28") == [30, 29, 28]
    assert parse_uid("4294967295") == 4294967295


@pytest.mark.parametrize("raw", ["", "abc", "-1", "1.5", "4294967296", "1,,2"])
def test_malformed_uids_are_rejected(raw) -> None:
    with pytest.raises(InvalidUID):
        parse_uid_list(raw)


@pytest.mark.parametrize("exc, status", [
    (InvalidUID("x"), 400),
    (InvalidAddressFormat("x"), 400),
    (AuthError("x"), 401),
    (MessageNotFound("x"), 404),
    (ConnectError("x"), 502),
    (DeliveryError("x"), 502),
    (LogoutError("x"), 502),
    (RandomnessError("x"), 500),
    (RuntimeError("x"), 500),
])
def test_status_for(exc, status) -> None:
    assert status_for(exc) == status


def test_bad_uid_is_rejected_before_connecting() -> None:
    client = FakeIMAPClient(mailboxes={"INBOX": [FakeMessage(1)]})
    controller = controller_for(client)

    with pytest.raises(InvalidUID):
        controller.get_message("alice@example.com", "pw", "INBOX", "one")

    assert client.logged_in is None


def test_read_operations_return_json_structures() -> None:
    client = FakeIMAPClient(
        folders=["Sent", "INBOX"],
        mailboxes={"INBOX": [FakeMessage(uid, subject=b"s%d" % uid) for uid in (1, 2, 3)]},
    )
    controller = controller_for(client)

    assert controller.get_account("alice@example.com", "pw") == {
        "mailboxes": [{"name": "INBOX"}, {"name": "Sent"}],
    }
    mailbox = controller.get_mailbox("alice@example.com", "pw", "INBOX")
    assert mailbox["uids"] == [3, 2, 1]
    assert [m["uid"] for m in mailbox["messages"]] == [3, 2, 1]
    assert [m["subject"] for m in controller.get_messages("alice@example.com", "pw", "INBOX", "1,3")] == ["s3", "s1"]


def test_send_uses_configured_server(monkeypatch) -> None:
    sent = []

    def fake_send(self, from_, to, subject, body):
        sent.append((self.host, self.port, from_, to, subject, body))

    monkeypatch.setattr(
        "application.use_cases.send_message_usecase.SendMessageUseCase.send", fake_send,
    )
    controller = MailController(Settings(SMTP_HOST="smtp.local", SMTP_PORT=2465))

    controller.send_message("alice@example.com", "pw", {
        "from": "alice@example.com", "to": "bob@example.org", "subject": "Hi", "body": "Text",
    })

    assert sent == [("smtp.local", 2465, "alice@example.com", "bob@example.org", "Hi", "Text")]


def test_settings_helpers() -> None:
    settings = Settings(MAIL_TIMEOUT=0, IMAP_HOST=" imap.local ", IMAP_PORT=1993, SMTP_HOST="")

    assert settings.timeout() is None
    assert settings.imap_server() == ("imap.local", 1993)
    assert settings.smtp_server() is None
