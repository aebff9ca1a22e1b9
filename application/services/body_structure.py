# application/services/body_structure.py
from __future__ import annotations
from typing import Callable, Iterator
from domain.models import BodyPart

PLAIN_TEXT = "text/plain"
FORWARDED = "message/rfc822"


def walk(root: BodyPart, descend: Callable[[BodyPart], bool]) -> Iterator[BodyPart]:
    """
    Recorrido en preorden (hermanos en orden estructural). `descend` decide
    si se visitan los hijos de cada nodo. Al ser un generador, el consumidor
    corta el recorrido en cuanto deja de iterar.
    """
    stack = [root]
    while stack:
        part = stack.pop()
        yield part
        if part.children and descend(part):
            stack.extend(reversed(part.children))


def _expand(part: BodyPart) -> bool:
    # El contenido de un reenvío no cuenta como cuerpo del mensaje
    return part.media_type != FORWARDED


def find_plain_text_path(root: BodyPart) -> tuple[int, ...] | None:
    """Ruta de la primera parte text/plain, o None si no hay ninguna."""
    for part in walk(root, _expand):
        if part.media_type == PLAIN_TEXT:
            return part.path
    return None
