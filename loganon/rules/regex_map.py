import re

from loganon.config.settings import RuleDefinition, Settings
from loganon.rules.base import BaseRule, StatsSink, compile_pattern
from loganon.rules.exceptions import RuleConfigurationError
from loganon.rules.state import MappingCategory, MappingState


class RegexMapRule(BaseRule):
    """Map each match of a user pattern to ``<prefix><N>``.

    With ``group > 0`` only that capture group is replaced, the rest of the
    match stays. Substitutes are memoized per rule on the exact matched text.
    """

    def __init__(
        self,
        name: str,
        state: MappingState,
        stats: StatsSink,
        pattern: re.Pattern[str],
        replacement_prefix: str,
        group: int = 0,
    ) -> None:
        super().__init__(name, state, stats)
        if not replacement_prefix:
            raise RuleConfigurationError("replacement_prefix is required for regex_map")
        if group < 0 or group > pattern.groups:
            raise RuleConfigurationError(
                f"group {group} is out of range for a pattern with {pattern.groups} groups"
            )
        self._pattern = pattern
        self._prefix = replacement_prefix
        self._group = group
        self._category = MappingCategory.for_rule(name)

    @classmethod
    def build(
        cls,
        definition: RuleDefinition,
        settings: Settings,
        state: MappingState,
        stats: StatsSink,
    ) -> "RegexMapRule":
        return cls(
            definition.name,
            state,
            stats,
            pattern=compile_pattern(definition.pattern, definition.name),
            replacement_prefix=definition.replacement_prefix,
            group=definition.group,
        )

    def apply(self, line: str) -> str:
        parts: list[str] = []
        last = 0
        replaced = 0
        for match in self._pattern.finditer(line):
            start, end = match.span()
            if self._group and match.start(self._group) != -1:
                start, end = match.span(self._group)
            parts.append(line[last:start])
            parts.append(self._map_value(line[start:end]))
            last = end
            replaced += 1
        if not replaced:
            return line
        parts.append(line[last:])
        self._count(replaced)
        return "".join(parts)

    def _map_value(self, original: str) -> str:
        prefix = self._prefix
        return self._state.get_or_create(self._category, original, lambda n: f"{prefix}{n}")
