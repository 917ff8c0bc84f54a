from loganon.rules.base import BaseRule
from loganon.rules.email_map import EmailMapRule
from loganon.rules.factory import RuleFactory
from loganon.rules.hostname_map import HostnameMapRule
from loganon.rules.ip_map import IpMapRule
from loganon.rules.kv_redact import KvRedactRule
from loganon.rules.regex_map import RegexMapRule
from loganon.rules.regex_replace import RegexReplaceRule
from loganon.rules.state import MappingCategory, MappingState
from loganon.rules.static_replace import StaticReplaceRule
from loganon.rules.url_map import UrlMapRule

__all__ = [
    "BaseRule",
    "EmailMapRule",
    "HostnameMapRule",
    "IpMapRule",
    "KvRedactRule",
    "MappingCategory",
    "MappingState",
    "RegexMapRule",
    "RegexReplaceRule",
    "RuleFactory",
    "StaticReplaceRule",
    "UrlMapRule",
]
