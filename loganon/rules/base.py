import re
from abc import ABC, abstractmethod
from typing import Protocol

from loganon.config.settings import RuleDefinition, Settings
from loganon.rules.exceptions import RuleConfigurationError
from loganon.rules.state import MappingState


def compile_pattern(pattern: str, rule_name: str, flags: int = 0) -> re.Pattern[str]:
    """Compile a user-supplied pattern, reporting failures as configuration errors."""
    if not pattern:
        raise RuleConfigurationError(f"pattern is required for rule {rule_name!r}")
    try:
        return re.compile(pattern, flags)
    except re.error as exc:
        raise RuleConfigurationError(f"invalid pattern {pattern!r}: {exc}") from exc


class StatsSink(Protocol):
    def inc(self, rule_name: str, n: int) -> None: ...


class TokenRewriter(Protocol):
    def __call__(self, match: re.Match[str]) -> str | None: ...


class BaseRule(ABC):
    """Contract for all line transformers.

    A rule is bound at construction to its compiled pattern(s), the run's
    shared :class:`MappingState`, the stats sink and its rule name. It keeps
    no other mutable state.
    """

    def __init__(self, name: str, state: MappingState, stats: StatsSink) -> None:
        self.name = name
        self._state = state
        self._stats = stats

    @classmethod
    @abstractmethod
    def build(
        cls,
        definition: RuleDefinition,
        settings: Settings,
        state: MappingState,
        stats: StatsSink,
    ) -> "BaseRule":
        """Create the rule from its definition and the global sections.

        Raises:
            RuleConfigurationError: when a required field is missing or a
                pattern does not compile.
        """

    @abstractmethod
    def apply(self, line: str) -> str:
        """Rewrite the sensitive tokens of one line.

        Args:
            line: One line of text, without its terminator.

        Returns:
            The line with every accepted token replaced. Tokens that fail
            validation are left as they are and are not counted.
        """

    def _count(self, n: int) -> None:
        if n > 0:
            self._stats.inc(self.name, n)

    def _splice(
        self,
        line: str,
        pattern: re.Pattern[str],
        rewrite: TokenRewriter,
    ) -> str:
        """Replace every accepted match of *pattern* in *line*.

        *rewrite* returns the replacement for a match, or ``None`` to leave
        the match untouched.
        """
        parts: list[str] = []
        last = 0
        replaced = 0
        for match in pattern.finditer(line):
            replacement = rewrite(match)
            if replacement is None:
                continue
            start, end = match.span()
            parts.append(line[last:start])
            parts.append(replacement)
            last = end
            replaced += 1
        if not replaced:
            return line
        parts.append(line[last:])
        self._count(replaced)
        return "".join(parts)
