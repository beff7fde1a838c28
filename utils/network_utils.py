import ipaddress
import os
from typing import Optional, Tuple


def should_trust_proxy_headers() -> bool:
    return os.environ.get("JUMPER_TRUST_PROXY_HEADERS", "0") == "1"


def _parse_ip_candidate(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    candidate = value.strip()
    if not candidate or candidate.lower() == "unknown":
        return None

    if candidate.startswith("[") and "]" in candidate:
        candidate = candidate[1 : candidate.index("]")]
    if "%" in candidate:
        candidate = candidate.split("%", 1)[0]

    try:
        return str(ipaddress.ip_address(candidate))
    except ValueError:
        # Handle IPv4 addresses that may include port suffixes.
        if ":" in candidate and candidate.count(":") == 1:
            host, _, _port = candidate.partition(":")
            try:
                return str(ipaddress.ip_address(host))
            except ValueError:
                return None
        return None


def extract_client_ip(
    remote_addr: Optional[str],
    x_forwarded_for: Optional[str],
    trust_proxy_headers: Optional[bool] = None,
) -> str:
    trust_proxy = (
        should_trust_proxy_headers()
        if trust_proxy_headers is None
        else trust_proxy_headers
    )

    if trust_proxy and x_forwarded_for:
        first_hop = x_forwarded_for.split(",", 1)[0].strip()
        parsed = _parse_ip_candidate(first_hop)
        if parsed:
            return parsed

    parsed_remote = _parse_ip_candidate(remote_addr)
    return parsed_remote or ""


def split_host_port(netloc: Optional[str]) -> Tuple[str, str]:
    """Split ``host[:port]`` (IPv6 hosts in brackets) into its two parts."""
    if not netloc:
        return "", ""
    if netloc.startswith("["):
        host, _, rest = netloc[1:].partition("]")
        return host, rest[1:] if rest.startswith(":") else ""
    if netloc.count(":") == 1:
        host, _, port = netloc.partition(":")
        return host, port
    return netloc, ""
