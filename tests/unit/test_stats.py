import threading

from loganon.engine.stats import Stats


class TestInc:
    def test_accumulates_per_rule(self, stats: Stats) -> None:
        stats.inc("ips", 2)
        stats.inc("ips", 3)
        stats.inc("emails", 1)
        assert stats.snapshot() == {"ips": 5, "emails": 1}

    def test_ignores_non_positive(self, stats: Stats) -> None:
        stats.inc("ips", 0)
        stats.inc("ips", -4)
        assert stats.snapshot() == {}

    def test_concurrent_increments_are_not_lost(self, stats: Stats) -> None:
        def worker() -> None:
            for _ in range(1000):
                stats.inc("shared", 1)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert stats.snapshot() == {"shared": 8000}


class TestSnapshot:
    def test_is_a_copy(self, stats: Stats) -> None:
        stats.inc("ips", 1)
        snapshot = stats.snapshot()
        snapshot["ips"] = 99
        assert stats.snapshot() == {"ips": 1}

    def test_render_is_sorted(self, stats: Stats) -> None:
        stats.inc("urls", 1)
        stats.inc("emails", 4)
        assert stats.render() == ["emails: 4", "urls: 1"]
