# infrastructure/discovery/srv_lookup.py
from __future__ import annotations
import logging
import dns.exception
import dns.resolver
from domain.errors import DiscoveryError

logger = logging.getLogger(__name__)


def lookup_service(service: str, proto: str, domain: str, *, timeout: float | None = None) -> list[tuple[str, int]]:
    """
    Consulta SRV `_<service>._<proto>.<domain>` y devuelve [(host, puerto)]
    ordenados por prioridad ascendente y peso descendente.
    El host va sin punto final; un destino '.' queda como "".
    """
    qname = f"_{service}._{proto}.{domain}"
    try:
        resolver = dns.resolver.Resolver()
        if timeout:
            resolver.lifetime = timeout
        answer = resolver.resolve(qname, "SRV")
    except dns.exception.DNSException as exc:
        raise DiscoveryError(f"Fallo en la consulta SRV {qname}: {exc}") from exc

    records = sorted(answer, key=lambda r: (r.priority, -r.weight))
    candidates = [(str(r.target).rstrip("."), int(r.port)) for r in records]
    if not candidates:
        raise DiscoveryError(f"Sin registros SRV para {qname}")
    logger.debug("SRV %s -> %s", qname, candidates)
    return candidates
