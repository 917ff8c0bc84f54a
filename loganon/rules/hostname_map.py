import re

from loganon.config.settings import HostnameMapSection, RuleDefinition, Settings
from loganon.rules.base import BaseRule, StatsSink
from loganon.rules.hostnames import HostnameMapper
from loganon.rules.state import MappingState


class HostnameMapRule(BaseRule):
    """Rewrite dotted tokens that pass the FQDN guard.

    The pattern is deliberately liberal; numbers such as ``0.000803442``,
    IPv4 literals, names like ``http.log.access.log0`` whose last label is
    not alphabetic, and hosts that already look anonymized are skipped.
    """

    _HOST_RE = re.compile(
        r"\b([a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?(?:\.[a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?)+)\b",
        re.IGNORECASE | re.ASCII,
    )

    def __init__(
        self,
        name: str,
        state: MappingState,
        stats: StatsSink,
        config: HostnameMapSection,
    ) -> None:
        super().__init__(name, state, stats)
        self._mapper = HostnameMapper(state, config)

    @classmethod
    def build(
        cls,
        definition: RuleDefinition,
        settings: Settings,
        state: MappingState,
        stats: StatsSink,
    ) -> "HostnameMapRule":
        return cls(definition.name, state, stats, config=settings.hostname_map)

    def apply(self, line: str) -> str:
        return self._splice(line, self._HOST_RE, self._rewrite)

    def _rewrite(self, match: re.Match[str]) -> str | None:
        token = match.group(1)
        if not self._mapper.accepts(token):
            return None
        return self._mapper.map_host(token)
