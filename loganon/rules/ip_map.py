import ipaddress
import re

from loganon.config.settings import IpSection, RuleDefinition, Settings
from loganon.rules.base import BaseRule, StatsSink
from loganon.rules.exceptions import RuleConfigurationError
from loganon.rules.state import MappingCategory, MappingState


def is_valid_ipv4(candidate: str) -> bool:
    """Four non-empty decimal octets, each 0-255."""
    parts = candidate.split(".")
    if len(parts) != 4:
        return False
    for part in parts:
        if not part or not part.isascii() or not part.isdigit():
            return False
        if int(part) > 255:
            return False
    return True


def parse_keep_networks(cidrs: list[str]) -> list[ipaddress.IPv4Network]:
    networks: list[ipaddress.IPv4Network] = []
    for entry in cidrs:
        try:
            network = ipaddress.ip_network(entry.strip(), strict=False)
        except ValueError as exc:
            raise RuleConfigurationError(f"invalid ip.keep_cidrs entry {entry!r}: {exc}") from exc
        if not isinstance(network, ipaddress.IPv4Network):
            raise RuleConfigurationError(f"ip.keep_cidrs entry {entry!r} is not IPv4")
        networks.append(network)
    return networks


class IpMapRule(BaseRule):
    """Map public IPv4 addresses to repeated-octet substitutes.

    ``8.8.8.8`` becomes ``111.111.111.111`` with the default base, the next
    unique address ``122.122.122.122`` and so on. Addresses inside a keep
    range are left alone, CIDR suffix included.
    """

    # permissive on purpose; octets are validated per match
    _IP_RE = re.compile(r"\b(\d{1,3}(?:\.\d{1,3}){3})(?:/(\d{1,2}))?\b", re.ASCII)

    def __init__(
        self,
        name: str,
        state: MappingState,
        stats: StatsSink,
        ip: IpSection,
    ) -> None:
        super().__init__(name, state, stats)
        self._ip = ip
        self._keep = parse_keep_networks(ip.keep_cidrs)

    @classmethod
    def build(
        cls,
        definition: RuleDefinition,
        settings: Settings,
        state: MappingState,
        stats: StatsSink,
    ) -> "IpMapRule":
        return cls(definition.name, state, stats, ip=settings.ip)

    def apply(self, line: str) -> str:
        return self._splice(line, self._IP_RE, self._rewrite)

    def _rewrite(self, match: re.Match[str]) -> str | None:
        address, cidr = match.group(1), match.group(2)
        if not is_valid_ipv4(address):
            return None
        try:
            parsed = ipaddress.IPv4Address(address)
        except ValueError:
            # leading zeros are ambiguous (octal in some parsers)
            return None
        if self._should_keep(parsed):
            return None

        suffix = ""
        if cidr is not None and self._ip.preserve_cidr and 0 <= int(cidr) <= 32:
            suffix = f"/{cidr}"
        return self._map_public(address) + suffix

    def _should_keep(self, address: ipaddress.IPv4Address) -> bool:
        return any(address in network for network in self._keep)

    def _map_public(self, address: str) -> str:
        return self._state.get_or_create(
            MappingCategory.PUBLIC_IP, address, self._synthesize
        )

    def _synthesize(self, index: int) -> str:
        octet = self._ip.public_base + (index - 1) * self._ip.public_step
        if octet < 1:
            octet = 1
        if octet > 254:
            octet = 1 + (octet - 1) % 254
        return ".".join([str(octet)] * 4)
