"""Per-run pseudonymization tables.

A :class:`MappingState` holds, for each category of sensitive value, a
memoization table from the normalized original to its substitute and a
monotonic counter used to generate the next substitute. One instance is
shared by every rule of an engine for the whole run and is cleared when
the engine closes.
"""

from collections.abc import Callable

from loganon.rules.exceptions import StateClosedError


class MappingCategory:
    """Names of the built-in mapping tables."""

    EMAIL_LOCAL = "email_local"
    EMAIL_DOMAIN = "email_domain"
    PUBLIC_IP = "public_ip"
    HOSTNAME_FLAT = "hostname_flat"
    HOSTNAME_FIRST_LABEL = "hostname_first_label"
    HOSTNAME_OTHER_LABEL = "hostname_other_label"

    BUILTIN: tuple[str, ...] = (
        EMAIL_LOCAL,
        EMAIL_DOMAIN,
        PUBLIC_IP,
        HOSTNAME_FLAT,
        HOSTNAME_FIRST_LABEL,
        HOSTNAME_OTHER_LABEL,
    )

    @staticmethod
    def for_rule(rule_name: str) -> str:
        """Dynamic category owned by a user-defined regex_map rule."""
        return f"regex:{rule_name}"


class MappingState:
    """Memoization tables and counters for one run.

    Not synchronized: one sequential caller per instance.
    """

    def __init__(self) -> None:
        self._tables: dict[str, dict[str, str]] = {
            category: {} for category in MappingCategory.BUILTIN
        }
        self._counters: dict[str, int] = {
            category: 0 for category in MappingCategory.BUILTIN
        }
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def get_or_create(
        self,
        category: str,
        key: str,
        generate: Callable[[int], str],
    ) -> str:
        """Return the substitute for *key*, generating one on first sight.

        *generate* receives the category counter after it was incremented,
        so the first unique key of a category gets 1.
        """
        if self._closed:
            raise StateClosedError("mapping state was cleared")
        table = self._tables.setdefault(category, {})
        existing = table.get(key)
        if existing is not None:
            return existing
        counter = self._counters.get(category, 0) + 1
        self._counters[category] = counter
        substitute = generate(counter)
        table[key] = substitute
        return substitute

    def counter(self, category: str) -> int:
        return self._counters.get(category, 0)

    def size(self, category: str) -> int:
        return len(self._tables.get(category, {}))

    def clear(self) -> None:
        """Drop every table and counter; the state cannot be used afterwards."""
        for table in self._tables.values():
            table.clear()
        self._tables = {}
        self._counters = {}
        self._closed = True
