import re

from loganon.config.settings import RuleDefinition, Settings, StaticPair
from loganon.rules.base import BaseRule, StatsSink
from loganon.rules.state import MappingState


class StaticReplaceRule(BaseRule):
    """Replace configured literals, in order, across the whole line."""

    def __init__(
        self,
        name: str,
        state: MappingState,
        stats: StatsSink,
        pairs: list[StaticPair],
        ignore_case: bool = False,
    ) -> None:
        super().__init__(name, state, stats)
        self._ignore_case = ignore_case
        self._pairs: list[tuple[str, str, re.Pattern[str] | None]] = []
        for pair in pairs:
            if not pair.from_ or pair.from_ == pair.to:
                continue
            compiled = re.compile(re.escape(pair.from_), re.IGNORECASE) if ignore_case else None
            self._pairs.append((pair.from_, pair.to, compiled))

    @classmethod
    def build(
        cls,
        definition: RuleDefinition,
        settings: Settings,
        state: MappingState,
        stats: StatsSink,
    ) -> "StaticReplaceRule":
        return cls(
            definition.name,
            state,
            stats,
            pairs=settings.static_replace.values,
            ignore_case=settings.static_replace.ignore_case,
        )

    def apply(self, line: str) -> str:
        replaced = 0
        for literal, replacement, compiled in self._pairs:
            if compiled is not None:
                # callable replacement keeps backslashes in *replacement* literal
                line, n = compiled.subn(lambda _m, r=replacement: r, line)
            else:
                n = line.count(literal)
                if n:
                    line = line.replace(literal, replacement)
            replaced += n
        self._count(replaced)
        return line
