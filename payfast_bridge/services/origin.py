import asyncio
import ipaddress
import logging
import socket
from collections.abc import Awaitable, Callable, Iterable

logger = logging.getLogger(__name__)

IPAddress = ipaddress.IPv4Address | ipaddress.IPv6Address
Resolver = Callable[[str], Awaitable[Iterable[str]]]


async def resolve_host(hostname: str) -> set[str]:
    loop = asyncio.get_running_loop()
    infos = await loop.getaddrinfo(hostname, None, proto=socket.IPPROTO_TCP)
    return {info[4][0] for info in infos}


def parse_ip(value: str | None) -> IPAddress | None:
    if not value:
        return None
    # Drop an IPv6 zone id ("fe80::1%eth0") before parsing.
    candidate = value.strip().split("%", 1)[0]
    try:
        address = ipaddress.ip_address(candidate)
    except ValueError:
        return None
    if isinstance(address, ipaddress.IPv6Address) and address.ipv4_mapped is not None:
        return address.ipv4_mapped
    return address


class OriginVerifier:
    """Checks that a notification came from one of the gateway's hosts.

    An address is trusted when it falls inside a configured network or equals
    an address one of the gateway hostnames currently resolves to. Hostnames
    are resolved on every check so DNS changes on the gateway side are picked
    up without a restart.
    """

    def __init__(
        self,
        hosts: Iterable[str],
        trusted_networks: Iterable[str] = (),
        timeout_seconds: float = 3.0,
        resolver: Resolver = resolve_host,
    ):
        self.hosts = tuple(hosts)
        self.trusted_networks = tuple(ipaddress.ip_network(net, strict=False) for net in trusted_networks)
        self.timeout_seconds = timeout_seconds
        self._resolver = resolver

    async def is_trusted(self, client_ip: str | None) -> bool:
        address = parse_ip(client_ip)
        if address is None:
            logger.warning("Unparseable notification origin. client_ip=%r", client_ip)
            return False
        if any(address in network for network in self.trusted_networks):
            return True
        return address in await self.gateway_addresses()

    async def gateway_addresses(self) -> set[IPAddress]:
        resolved = await asyncio.gather(*(self._resolve(host) for host in self.hosts))
        return set().union(*resolved)

    async def _resolve(self, hostname: str) -> set[IPAddress]:
        try:
            raw_addresses = await asyncio.wait_for(self._resolver(hostname), timeout=self.timeout_seconds)
        except (OSError, asyncio.TimeoutError):
            logger.warning("Could not resolve gateway host. hostname=%s", hostname, exc_info=True)
            return set()
        return {address for address in map(parse_ip, raw_addresses) if address is not None}
