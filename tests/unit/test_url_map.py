import pytest

from loganon.config.settings import HostnameMapSection
from loganon.engine.stats import Stats
from loganon.rules.hostname_map import HostnameMapRule
from loganon.rules.state import MappingState
from loganon.rules.url_map import UrlMapRule, split_trailing_punctuation


def _rule(state: MappingState, stats: Stats, **config: object) -> UrlMapRule:
    return UrlMapRule("urls", state, stats, config=HostnameMapSection(**config))


class TestSplitTrailingPunctuation:
    def test_splits_closing_punctuation(self) -> None:
        assert split_trailing_punctuation("http://a.com/x).") == ("http://a.com/x", ").")

    def test_keeps_clean_url(self) -> None:
        assert split_trailing_punctuation("http://a.com/x") == ("http://a.com/x", "")


class TestUrlRewrite:
    def test_flat_mode_host(self, state: MappingState, stats: Stats) -> None:
        rule = _rule(state, stats)
        out = rule.apply("https://api.internal.corp.com/v1/x")
        assert out == "https://host1.example1.com/v1/x"
        assert stats.snapshot() == {"urls": 1}

    def test_preserves_port_path_query_fragment(
        self, state: MappingState, stats: Stats
    ) -> None:
        rule = _rule(state, stats)
        out = rule.apply("GET http://Api.Corp.com:8443/a%20b?q=1&r=%2F#frag")
        assert out == "GET http://host1.example1.com:8443/a%20b?q=1&r=%2F#frag"

    def test_preserves_userinfo(self, state: MappingState, stats: Stats) -> None:
        rule = _rule(state, stats)
        out = rule.apply("https://bob@git.corp.com/repo.git")
        assert out == "https://bob@host1.example1.com/repo.git"

    def test_reattaches_trailing_punctuation(self, state: MappingState, stats: Stats) -> None:
        rule = _rule(state, stats)
        out = rule.apply("(see https://docs.corp.com/page).")
        assert out == "(see https://host1.example1.com/page)."

    def test_stops_at_quotes(self, state: MappingState, stats: Stats) -> None:
        rule = _rule(state, stats)
        out = rule.apply('url="http://a.corp.com/x" next')
        assert out == 'url="http://host1.example1.com/x" next'

    def test_structured_mode(self, state: MappingState, stats: Stats) -> None:
        rule = _rule(state, stats, mode="structured")
        assert rule.apply("http://api.eu.corp.com/") == "http://host1.sub1.example.com/"


class TestUrlSkips:
    @pytest.mark.parametrize(
        "line",
        [
            "http:///nohost",
            "http://10.0.0.1:8080/health",
            "http://[::1]:8080/",
            "http://host3.example3.com/x",
            "http://[bad/",
        ],
    )
    def test_leaves_unmappable_urls(self, state: MappingState, stats: Stats, line: str) -> None:
        rule = _rule(state, stats)
        assert rule.apply(line) == line
        assert stats.snapshot() == {}


class TestSharedWithHostnameMap:
    def test_bare_and_url_host_match(self, state: MappingState, stats: Stats) -> None:
        config = HostnameMapSection()
        hosts = HostnameMapRule("hosts", state, stats, config=config)
        urls = UrlMapRule("urls", state, stats, config=config)

        bare = hosts.apply("ping api.corp.com")
        in_url = urls.apply("fetch https://api.corp.com/status")

        assert bare == "ping host1.example1.com"
        assert in_url == "fetch https://host1.example1.com/status"
