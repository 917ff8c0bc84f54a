import re

from loganon.config.settings import EmailSection, RuleDefinition, Settings
from loganon.rules.base import BaseRule, StatsSink
from loganon.rules.state import MappingCategory, MappingState


class EmailMapRule(BaseRule):
    """Map ``local@domain`` addresses to ``user<N>@example<M>.com``.

    The local part and the domain are pseudonymized independently, so two
    mailboxes on one domain keep sharing a domain substitute. Domains are
    case-folded before lookup; local parts are kept verbatim.
    """

    _EMAIL_RE = re.compile(
        r"(?<![A-Za-z0-9._%+\-])([A-Za-z0-9._%+\-]+)@([A-Za-z0-9.\-]+\.[A-Za-z]{2,})\b",
        re.ASCII,
    )

    def __init__(
        self,
        name: str,
        state: MappingState,
        stats: StatsSink,
        email: EmailSection,
    ) -> None:
        super().__init__(name, state, stats)
        self._email = email

    @classmethod
    def build(
        cls,
        definition: RuleDefinition,
        settings: Settings,
        state: MappingState,
        stats: StatsSink,
    ) -> "EmailMapRule":
        return cls(definition.name, state, stats, email=settings.email)

    def apply(self, line: str) -> str:
        return self._splice(line, self._EMAIL_RE, self._rewrite)

    def _rewrite(self, match: re.Match[str]) -> str:
        local, domain = match.group(1), match.group(2)
        return f"{self._map_local(local)}@{self._map_domain(domain)}"

    def _map_local(self, local: str) -> str:
        prefix = self._email.user_prefix
        return self._state.get_or_create(
            MappingCategory.EMAIL_LOCAL,
            local,
            lambda n: prefix if n == 1 else f"{prefix}{n}",
        )

    def _map_domain(self, domain: str) -> str:
        email = self._email
        return self._state.get_or_create(
            MappingCategory.EMAIL_DOMAIN,
            domain.lower(),
            lambda n: f"{email.domain_prefix}{email.domain_start_index + n - 1}.{email.domain_tld}",
        )
