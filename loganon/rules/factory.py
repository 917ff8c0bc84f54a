from loganon.config.settings import RuleDefinition, Settings
from loganon.rules.base import BaseRule, StatsSink
from loganon.rules.email_map import EmailMapRule
from loganon.rules.exceptions import RuleConfigurationError
from loganon.rules.hostname_map import HostnameMapRule
from loganon.rules.ip_map import IpMapRule
from loganon.rules.kv_redact import KvRedactRule
from loganon.rules.regex_map import RegexMapRule
from loganon.rules.regex_replace import RegexReplaceRule
from loganon.rules.state import MappingState
from loganon.rules.static_replace import StaticReplaceRule
from loganon.rules.url_map import UrlMapRule


class RuleFactory:
    """Creates a rule from its type tag; tags are case-sensitive."""

    RULES: dict[str, type[BaseRule]] = {
        "static": StaticReplaceRule,
        "email_map": EmailMapRule,
        "ip_map": IpMapRule,
        "hostname_map": HostnameMapRule,
        "url_map": UrlMapRule,
        "kv_redact": KvRedactRule,
        "regex_map": RegexMapRule,
        "regex_replace": RegexReplaceRule,
    }

    @classmethod
    def create(
        cls,
        definition: RuleDefinition,
        settings: Settings,
        state: MappingState,
        stats: StatsSink,
    ) -> BaseRule:
        rule_cls = cls.RULES.get(definition.type)
        if rule_cls is None:
            raise RuleConfigurationError(
                f"unknown rule type '{definition.type}'. Choose from: {list(cls.RULES)}"
            )
        return rule_cls.build(definition, settings, state, stats)
