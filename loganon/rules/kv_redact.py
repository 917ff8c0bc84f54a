import re
from collections.abc import Callable

from loganon.config.settings import KeysSection, RuleDefinition, Settings
from loganon.rules.base import BaseRule, StatsSink
from loganon.rules.state import MappingState

_UNSAFE_KEY_CHARS_RE = re.compile(r"[^a-z0-9_]")

_Rewrite = Callable[[re.Match[str]], str | None]


def sanitize_key(key: str) -> str:
    """Keep the label grep-friendly: ``api-key`` becomes ``api_key``."""
    return _UNSAFE_KEY_CHARS_RE.sub("_", key.lower())


class KvRedactRule(BaseRule):
    """Redact the values of sensitive keys.

    Pass one handles quoted pairs (``"key": "value"`` or ``'key': 'value'``),
    pass two handles loose forms (``key=value``, ``key: value``, with or
    without quotes) on pass one's output. The key keeps its original
    spelling, quote style and separator.
    """

    # alternation instead of a backreference so each branch pins its quote
    _QUOTED_RE = re.compile(
        r"\"([A-Za-z0-9_.-]+)\"(\s*:\s*)\"([^\"\n\r]*)\""
        r"|'([A-Za-z0-9_.-]+)'(\s*:\s*)'([^'\n\r]*)'",
        re.ASCII,
    )
    # runs start only where the previous char cannot extend the key
    _LOOSE_RE = re.compile(
        r"(?<![A-Za-z0-9_.-])([A-Za-z0-9_.-]+)(\s*[:=]\s*)([\"']?)([^\s,\"'}\]]+)([\"']?)",
        re.ASCII,
    )

    def __init__(
        self,
        name: str,
        state: MappingState,
        stats: StatsSink,
        keys: KeysSection,
    ) -> None:
        super().__init__(name, state, stats)
        self._keys = {k.strip().lower() for k in keys.redact_value if k.strip()}
        self._placeholder = keys.placeholder

    @classmethod
    def build(
        cls,
        definition: RuleDefinition,
        settings: Settings,
        state: MappingState,
        stats: StatsSink,
    ) -> "KvRedactRule":
        return cls(definition.name, state, stats, keys=settings.keys)

    def apply(self, line: str) -> str:
        if not self._keys:
            return line
        redacted = 0

        def counting(rewrite: _Rewrite) -> Callable[[re.Match[str]], str]:
            def replace(match: re.Match[str]) -> str:
                nonlocal redacted
                replacement = rewrite(match)
                if replacement is None:
                    return match.group(0)
                redacted += 1
                return replacement

            return replace

        line = self._QUOTED_RE.sub(counting(self._redact_quoted), line)
        line = self._LOOSE_RE.sub(counting(self._redact_loose), line)
        self._count(redacted)
        return line

    def _label(self, key: str) -> str:
        return self._placeholder.replace("{key}", sanitize_key(key))

    def _redact_quoted(self, match: re.Match[str]) -> str | None:
        if match.group(1) is not None:
            raw_key, separator, quote = match.group(1), match.group(2), '"'
        else:
            raw_key, separator, quote = match.group(4), match.group(5), "'"
        if raw_key.lower() not in self._keys:
            return None
        return f"{quote}{raw_key}{quote}{separator}{quote}{self._label(raw_key)}{quote}"

    def _redact_loose(self, match: re.Match[str]) -> str | None:
        raw_key, separator, quote = match.group(1), match.group(2), match.group(3)
        if raw_key.lower() not in self._keys:
            return None
        # the opening quote decides both sides
        return f"{raw_key}{separator}{quote}{self._label(raw_key)}{quote}"
