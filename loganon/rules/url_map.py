import re
from urllib.parse import urlsplit

from loganon.config.settings import HostnameMapSection, RuleDefinition, Settings
from loganon.rules.base import BaseRule, StatsSink
from loganon.rules.hostnames import HostnameMapper
from loganon.rules.state import MappingState

_TRAILING_PUNCT = ")]}.,;"


def split_trailing_punctuation(raw: str) -> tuple[str, str]:
    """Split log punctuation that follows a URL, e.g. ``(see http://x/).``"""
    trimmed = raw.rstrip(_TRAILING_PUNCT)
    return trimmed, raw[len(trimmed):]


class UrlMapRule(BaseRule):
    """Rewrite the host of ``http(s)://`` URLs.

    Uses the same :class:`HostnameMapper` tables as ``hostname_map``, so a
    host seen bare and inside a URL gets one substitute. Userinfo, port,
    path, query and fragment are kept exactly as written.
    """

    _URL_RE = re.compile(r"\bhttps?://[^\s\"'<>]+", re.IGNORECASE | re.ASCII)

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
    ) -> "UrlMapRule":
        return cls(definition.name, state, stats, config=settings.hostname_map)

    def apply(self, line: str) -> str:
        return self._splice(line, self._URL_RE, self._rewrite)

    def _rewrite(self, match: re.Match[str]) -> str | None:
        url, trail = split_trailing_punctuation(match.group(0))
        try:
            parts = urlsplit(url)
            _ = parts.port
        except ValueError:
            return None
        if not parts.netloc or not parts.hostname:
            return None

        userinfo, at, hostport = parts.netloc.rpartition("@")
        host, colon, port = hostport.partition(":")
        if not host or not self._mapper.accepts_url_host(host):
            return None

        netloc = f"{userinfo}{at}{self._mapper.map_host(host)}{colon}{port}"
        start = len(parts.scheme) + len("://")
        end = start + len(parts.netloc)
        return url[:start] + netloc + url[end:] + trail
