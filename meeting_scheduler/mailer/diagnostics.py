"""
SMTP connectivity diagnostics
"""
import logging
import socket
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Iterable, List

logger = logging.getLogger(__name__)


def resolve_host(host: str) -> List[str]:
    """Resolve a hostname to its addresses; raises OSError when lookup fails"""
    infos = socket.getaddrinfo(host, None, proto=socket.IPPROTO_TCP)
    addresses = []
    for info in infos:
        address = info[4][0]
        if address not in addresses:
            addresses.append(address)
    return addresses


def log_dns_lookup(host: str):
    """Log the resolution of the SMTP host; failures are only logged"""
    logger.info(f"Testing DNS lookup for {host}")
    try:
        addresses = resolve_host(host)
        logger.info(f"SMTP server resolved to: {addresses}")
    except OSError as e:
        logger.error(f"DNS lookup failed: {e}")


def probe_port(host: str, port: int, timeout: float) -> str:
    """Try a TCP connection and describe the outcome"""
    try:
        with socket.create_connection((host, port), timeout=timeout):
            return "Connected successfully"
    except socket.timeout:
        return "Connection timed out"
    except OSError as e:
        return f"Error: {e}"


def probe_smtp_ports(host: str, ports: Iterable[int], timeout: float = 5) -> Dict[str, str]:
    """Probe all ports concurrently; keys are the port numbers as strings"""
    ports = list(ports)
    with ThreadPoolExecutor(max_workers=max(1, len(ports))) as executor:
        outcomes = list(executor.map(lambda port: probe_port(host, port, timeout), ports))

    results = {str(port): outcome for port, outcome in zip(ports, outcomes)}
    logger.info(f"SMTP probe of {host}: {results}")
    return results
