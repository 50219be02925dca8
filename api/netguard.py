import ipaddress
import logging
import socket
from urllib.parse import urljoin, urlparse

import requests

from . import config

logger = logging.getLogger(__name__)

MAX_REDIRECTS = 5


class BlockedURL(ValueError):
    pass


class UnresolvableHost(BlockedURL):
    """The host has no DNS answer. A fetch failure, not a policy refusal."""


def _resolve_addresses(host: str) -> list[str]:
    infos = socket.getaddrinfo(host, None, proto=socket.IPPROTO_TCP)
    return [info[4][0] for info in infos]


def _host_allowed(host: str, allowed_hosts) -> bool:
    if not allowed_hosts:
        return True
    return any(host == allowed or host.endswith("." + allowed) for allowed in allowed_hosts)


def _is_public_address(address: str) -> bool:
    # Strip IPv6 zone ids ("fe80::1%eth0")
    ip = ipaddress.ip_address(address.split("%", 1)[0])
    if isinstance(ip, ipaddress.IPv6Address) and ip.ipv4_mapped:
        ip = ip.ipv4_mapped
    return ip.is_global and not ip.is_multicast


def check_url(url: str, allowed_hosts=None, allow_private=None) -> None:
    """
    Raise BlockedURL unless `url` is safe to fetch from the server.

    Caller-supplied URLs are fetched server side, so internal addresses
    (metadata endpoints, localhost, RFC1918 ranges) are refused unless
    ALLOW_PRIVATE_NETWORKS is set. ALLOWED_HOSTS further narrows the hosts.
    Raises UnresolvableHost when the name does not resolve at all.
    """
    if allowed_hosts is None:
        allowed_hosts = config.ALLOWED_HOSTS
    if allow_private is None:
        allow_private = config.ALLOW_PRIVATE_NETWORKS

    try:
        parsed = urlparse(url)
        hostname = parsed.hostname
    except ValueError as e:
        # e.g. "http://[::1/a.jpg" -> Invalid IPv6 URL
        raise BlockedURL(f"malformed URL {url!r}: {e}") from e

    if parsed.scheme not in ("http", "https") or not hostname:
        raise BlockedURL(f"unsupported URL: {url!r}")

    host = hostname.lower().rstrip(".")
    if not _host_allowed(host, allowed_hosts):
        raise BlockedURL(f"host not in ALLOWED_HOSTS: {host}")

    if allow_private:
        return

    try:
        addresses = _resolve_addresses(host)
    except (socket.gaierror, UnicodeError) as e:
        raise UnresolvableHost(f"could not resolve host {host}: {e}") from e

    if not addresses:
        raise UnresolvableHost(f"could not resolve host {host}")
    for address in addresses:
        if not _is_public_address(address):
            raise BlockedURL(f"host {host} resolves to non-public address {address}")


def is_allowed_url(url: str) -> bool:
    try:
        check_url(url)
    except BlockedURL as e:
        logger.info("Refusing outbound request: %s", e)
        return False
    return True


def follow_redirects(send, url: str, max_redirects: int = MAX_REDIRECTS):
    """
    Follow redirects by hand so every hop goes through check_url.

    `send(url)` must issue the request with allow_redirects=False and return
    the response. The final non-redirect response is returned open.
    """
    for _ in range(max_redirects + 1):
        response = send(url)
        if not response.is_redirect:
            return response
        location = urljoin(url, response.headers.get("location", ""))
        response.close()
        check_url(location)
        logger.debug("Following redirect %s -> %s", url, location)
        url = location
    raise requests.TooManyRedirects(f"Exceeded {max_redirects} redirects")
