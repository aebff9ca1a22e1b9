# utils/addresses.py
from __future__ import annotations
from domain.errors import InvalidAddressFormat


def email_domain(email: str) -> str:
    """Dominio de una dirección: todo lo que sigue a la última '@'."""
    at = (email or "").rfind("@")
    if at < 0:
        raise InvalidAddressFormat(f"Formato de dirección inválido: {email!r}")
    return email[at + 1:]
