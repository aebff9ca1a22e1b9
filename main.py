# main.py
# Punto de entrada: ejecuta una operación de correo y la imprime como JSON
from __future__ import annotations
import argparse
import json
import logging
import sys
from config.settings import Settings
from domain.errors import MailError
from interface_adapters.controllers.mail_controller import MailController, status_for

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="correo",
        description="Cliente de correo mínimo (IMAP/SMTP). Credenciales en MAIL_EMAIL / MAIL_PASSWORD.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("account", help="lista los buzones")

    p = sub.add_parser("mailbox", help="UIDs y primera página de un buzón")
    p.add_argument("name")

    p = sub.add_parser("messages", help="resúmenes de una lista de UIDs")
    p.add_argument("name")
    p.add_argument("uids", help="UIDs separados por comas")

    p = sub.add_parser("message", help="un mensaje con su cuerpo de texto")
    p.add_argument("name")
    p.add_argument("uid")

    p = sub.add_parser("send", help="envía un mensaje de texto (cuerpo por stdin)")
    p.add_argument("--from", dest="from_", default="")
    p.add_argument("--to", required=True)
    p.add_argument("--subject", default="")
    return parser


def run(args: argparse.Namespace, settings: Settings, controller: MailController) -> object:
    email, password = settings.MAIL_EMAIL, settings.MAIL_PASSWORD
    if args.command == "account":
        return controller.get_account(email, password)
    if args.command == "mailbox":
        return controller.get_mailbox(email, password, args.name)
    if args.command == "messages":
        return controller.get_messages(email, password, args.name, args.uids)
    if args.command == "message":
        return controller.get_message(email, password, args.name, args.uid)

    controller.send_message(email, password, {
        "from": args.from_ or email,
        "to": args.to,
        "subject": args.subject,
        "body": sys.stdin.read(),
    })
    return {"sent": True}


def main(argv: list[str] | None = None) -> int:
    settings = Settings()
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(message)s",
        stream=sys.stderr,
    )
    args = build_parser().parse_args(argv)
    logger.info("=== Correo: %s (%s) ===", args.command, settings.MAIL_EMAIL or "-")
    controller = MailController(settings=settings)

    try:
        result = run(args, settings, controller)
    except MailError as exc:
        # El detalle ya quedó en el log; hacia fuera, solo el código
        print(json.dumps({"error": status_for(exc)}))
        return 1
    print(json.dumps(result, ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
