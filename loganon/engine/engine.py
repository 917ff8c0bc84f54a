from collections.abc import Iterable, Iterator
from types import TracebackType

from loganon.config.settings import RuleDefinition, Settings
from loganon.engine.exceptions import ConstructionError, ProcessingError
from loganon.engine.stats import Stats
from loganon.logging.logger import Log
from loganon.rules.base import BaseRule
from loganon.rules.factory import RuleFactory
from loganon.rules.state import MappingState

STATIC_REPLACE_RULE_NAME = "static_replace"


class Engine:
    """Runs the ordered rule pipeline over one line at a time.

    Pipeline: static replacements (when configured) -> user rules in
    declared order. Each rule sees the output of the previous one. The
    engine owns the run's :class:`MappingState` and clears it on close.
    """

    def __init__(self, rules: list[BaseRule], state: MappingState, stats: Stats) -> None:
        self._rules = rules
        self._state = state
        self._stats = stats
        self._closed = False

    @classmethod
    def build(cls, settings: Settings) -> "Engine":
        return build_engine(settings)

    @property
    def rule_names(self) -> list[str]:
        return [rule.name for rule in self._rules]

    @property
    def stats(self) -> dict[str, int]:
        return self._stats.snapshot()

    def stats_report(self) -> list[str]:
        return self._stats.render()

    def apply(self, line: str) -> str:
        """Transform one line through every rule in order."""
        if self._closed:
            raise ProcessingError("engine is closed")
        for rule in self._rules:
            try:
                line = rule.apply(line)
            except Exception as exc:
                raise ProcessingError(f"rule '{rule.name}' failed: {exc}") from exc
        return line

    def apply_lines(self, lines: Iterable[str]) -> Iterator[str]:
        for line in lines:
            yield self.apply(line)

    def close(self) -> None:
        """Drop every mapping table so original values stop being reachable."""
        if self._closed:
            return
        self._state.clear()
        self._rules = []
        self._closed = True
        Log.debug("Engine closed, mapping state cleared")

    def __enter__(self) -> "Engine":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


def build_engine(settings: Settings) -> Engine:
    """Build an Engine with a fresh state and stats sink.

    Raises:
        ConstructionError: naming the rule that could not be built.
    """
    stats = Stats()
    state = MappingState()
    rules: list[BaseRule] = []

    definitions: list[RuleDefinition] = []
    if settings.static_replace.values:
        definitions.append(RuleDefinition(name=STATIC_REPLACE_RULE_NAME, type="static"))
    definitions.extend(rule for rule in settings.rules if rule.enabled)

    for definition in definitions:
        try:
            rules.append(RuleFactory.create(definition, settings, state, stats))
        except Exception as exc:
            raise ConstructionError(
                f"build rule '{definition.name}' ({definition.type}): {exc}"
            ) from exc
        Log.debug(f"Built rule '{definition.name}' ({definition.type})")

    skipped = len(settings.rules) - sum(1 for rule in settings.rules if rule.enabled)
    if not rules:
        Log.warning("No rules active: input will be copied unchanged")
    Log.info(f"Engine ready: {len(rules)} rules active, {skipped} disabled")
    return Engine(rules, state, stats)
