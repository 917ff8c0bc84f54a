import threading


class Stats:
    """Per-rule replacement counters, safe to share between threads."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._counts: dict[str, int] = {}

    def inc(self, rule_name: str, n: int) -> None:
        if n <= 0:
            return
        with self._lock:
            self._counts[rule_name] = self._counts.get(rule_name, 0) + n

    def snapshot(self) -> dict[str, int]:
        """Point-in-time copy of all counters."""
        with self._lock:
            return dict(self._counts)

    def render(self) -> list[str]:
        """``"<rule>: <count>"`` lines sorted by rule name."""
        snapshot = self.snapshot()
        return [f"{name}: {snapshot[name]}" for name in sorted(snapshot)]
