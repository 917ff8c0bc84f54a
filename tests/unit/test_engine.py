import pytest

from loganon.config.settings import RuleDefinition, Settings
from loganon.engine.engine import STATIC_REPLACE_RULE_NAME, Engine, build_engine
from loganon.engine.exceptions import ConstructionError, ProcessingError
from loganon.engine.stats import Stats
from loganon.rules.base import BaseRule, StatsSink
from loganon.rules.exceptions import StateClosedError
from loganon.rules.state import MappingCategory, MappingState


class ExplodingRule(BaseRule):
    @classmethod
    def build(
        cls,
        definition: RuleDefinition,
        settings: Settings,
        state: MappingState,
        stats: StatsSink,
    ) -> "ExplodingRule":
        return cls(definition.name, state, stats)

    def apply(self, line: str) -> str:
        raise RuntimeError("boom")


def _settings(**kwargs: object) -> Settings:
    return Settings(**kwargs)


class TestBuildEngine:
    def test_empty_config_is_identity(self) -> None:
        engine = build_engine(_settings())
        assert engine.rule_names == []
        assert engine.apply("10.1.2.3 a@b.com") == "10.1.2.3 a@b.com"

    def test_static_replace_runs_first(self) -> None:
        settings = _settings(
            static_replace={"values": [{"from": "acme", "to": "org"}]},
            rules=[{"name": "ips", "type": "ip_map"}],
        )
        engine = build_engine(settings)
        assert engine.rule_names == [STATIC_REPLACE_RULE_NAME, "ips"]

    def test_disabled_rules_are_skipped(self) -> None:
        settings = _settings(
            rules=[
                {"name": "ips", "type": "ip_map"},
                {"name": "mails", "type": "email_map", "enabled": False},
            ]
        )
        engine = build_engine(settings)
        assert engine.rule_names == ["ips"]
        assert engine.apply("a@b.com") == "a@b.com"

    def test_disabled_rule_is_not_validated(self) -> None:
        settings = _settings(rules=[{"name": "off", "type": "nope", "enabled": False}])
        assert build_engine(settings).rule_names == []

    def test_unknown_type_names_rule(self) -> None:
        settings = _settings(rules=[{"name": "weird", "type": "dns_map"}])
        with pytest.raises(ConstructionError, match=r"build rule 'weird' \(dns_map\)"):
            build_engine(settings)

    def test_missing_field_names_rule(self) -> None:
        settings = _settings(rules=[{"name": "ids", "type": "regex_map", "pattern": "x"}])
        with pytest.raises(ConstructionError, match="replacement_prefix"):
            build_engine(settings)

    def test_build_classmethod(self) -> None:
        engine = Engine.build(_settings(rules=[{"name": "ips", "type": "ip_map"}]))
        assert engine.rule_names == ["ips"]


class TestEngineApply:
    def test_rules_see_previous_output(self) -> None:
        settings = _settings(
            rules=[
                {"name": "first", "type": "regex_replace", "pattern": "a", "replacement": "b"},
                {"name": "second", "type": "regex_replace", "pattern": "b", "replacement": "c"},
            ]
        )
        assert build_engine(settings).apply("a") == "c"

    def test_order_matters(self) -> None:
        settings = _settings(
            rules=[
                {"name": "second", "type": "regex_replace", "pattern": "b", "replacement": "c"},
                {"name": "first", "type": "regex_replace", "pattern": "a", "replacement": "b"},
            ]
        )
        assert build_engine(settings).apply("a") == "b"

    def test_mappings_shared_across_lines(self) -> None:
        settings = _settings(rules=[{"name": "ips", "type": "ip_map"}])
        engine = build_engine(settings)
        out = list(engine.apply_lines(["8.8.8.8", "1.1.1.1", "from 8.8.8.8"]))
        assert out == ["111.111.111.111", "122.122.122.122", "from 111.111.111.111"]

    def test_stats_collected(self) -> None:
        settings = _settings(rules=[{"name": "ips", "type": "ip_map"}])
        engine = build_engine(settings)
        engine.apply("8.8.8.8 8.8.4.4 10.0.0.1")
        assert engine.stats == {"ips": 2}
        assert engine.stats_report() == ["ips: 2"]

    def test_rule_failure_is_wrapped(self) -> None:
        state = MappingState()
        stats = Stats()
        engine = Engine([ExplodingRule("bad", state, stats)], state, stats)
        with pytest.raises(ProcessingError, match="rule 'bad' failed: boom"):
            engine.apply("x")


class TestEngineClose:
    def test_close_clears_state(self) -> None:
        state = MappingState()
        stats = Stats()
        engine = Engine([], state, stats)
        state.get_or_create(MappingCategory.PUBLIC_IP, "8.8.8.8", lambda n: f"v{n}")

        engine.close()

        assert state.closed
        assert state.size(MappingCategory.PUBLIC_IP) == 0
        with pytest.raises(StateClosedError):
            state.get_or_create(MappingCategory.PUBLIC_IP, "8.8.8.8", lambda n: f"v{n}")

    def test_apply_after_close_raises(self) -> None:
        engine = build_engine(_settings())
        engine.close()
        with pytest.raises(ProcessingError, match="closed"):
            engine.apply("x")

    def test_close_is_idempotent(self) -> None:
        engine = build_engine(_settings())
        engine.close()
        engine.close()

    def test_context_manager_closes(self) -> None:
        with build_engine(_settings(rules=[{"name": "ips", "type": "ip_map"}])) as engine:
            assert engine.apply("8.8.8.8") == "111.111.111.111"
        with pytest.raises(ProcessingError):
            engine.apply("8.8.8.8")

    def test_stats_survive_close(self) -> None:
        engine = build_engine(_settings(rules=[{"name": "ips", "type": "ip_map"}]))
        engine.apply("8.8.8.8")
        engine.close()
        assert engine.stats == {"ips": 1}
