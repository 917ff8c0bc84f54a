import re

from loganon.config.settings import RuleDefinition, Settings
from loganon.rules.base import BaseRule, StatsSink, compile_pattern
from loganon.rules.exceptions import RuleConfigurationError
from loganon.rules.state import MappingState


class RegexReplaceRule(BaseRule):
    """Replace every match of a user pattern with a literal string."""

    def __init__(
        self,
        name: str,
        state: MappingState,
        stats: StatsSink,
        pattern: re.Pattern[str],
        replacement: str,
    ) -> None:
        super().__init__(name, state, stats)
        if not replacement:
            raise RuleConfigurationError("replacement is required for regex_replace")
        self._pattern = pattern
        self._replacement = replacement

    @classmethod
    def build(
        cls,
        definition: RuleDefinition,
        settings: Settings,
        state: MappingState,
        stats: StatsSink,
    ) -> "RegexReplaceRule":
        return cls(
            definition.name,
            state,
            stats,
            pattern=compile_pattern(definition.pattern, definition.name),
            replacement=definition.replacement,
        )

    def apply(self, line: str) -> str:
        # callable replacement: no \1 or \g<name> expansion
        replacement = self._replacement
        line, n = self._pattern.subn(lambda _match: replacement, line)
        self._count(n)
        return line
