"""Hostname validation and pseudonymization shared by hostname_map and url_map.

Two modes:

* ``flat``: every unique hostname becomes ``host<N>.example<N>.com``.
* ``structured``: label depth is preserved. The trailing one or two labels
  become the configured root domain and every remaining label is mapped on
  its own, so ``api.eu.corp.com`` and ``web.eu.corp.com`` share the
  substitute of ``eu``.
"""

import re

from loganon.config.settings import HostnameMapSection
from loganon.rules.state import MappingCategory, MappingState

_IPV4_SHAPE_RE = re.compile(r"[0-9]+(?:\.[0-9]+){3}", re.ASCII)
_ALPHA_RE = re.compile(r"[A-Za-z]")
_TLD_RE = re.compile(r"[A-Za-z]{2,24}", re.ASCII)


def looks_like_ipv4(token: str) -> bool:
    return _IPV4_SHAPE_RE.fullmatch(token) is not None


def contains_alpha(token: str) -> bool:
    return _ALPHA_RE.search(token) is not None


def looks_like_fqdn(token: str) -> bool:
    """At least two labels and a last label of 2-24 ASCII letters."""
    labels = token.rstrip(".").split(".")
    if len(labels) < 2:
        return False
    return _TLD_RE.fullmatch(labels[-1]) is not None


class HostnameMapper:
    """Decides whether a token is a hostname and maps it deterministically."""

    def __init__(self, state: MappingState, config: HostnameMapSection) -> None:
        self._state = state
        self._config = config
        prefixes = [p.strip() for p in config.deny_prefixes if p.strip()]
        self._anonymized_re: re.Pattern[str] | None = None
        if prefixes:
            alternation = "|".join(re.escape(p) for p in prefixes)
            self._anonymized_re = re.compile(
                rf"(?:{alternation})[0-9]+", re.IGNORECASE | re.ASCII
            )
        self._root_labels = config.root_domain.split(".")

    def is_anonymized(self, host: str) -> bool:
        """True when the first label reads ``<deny prefix><digits>``."""
        if self._anonymized_re is None:
            return False
        first_label = host.split(".", 1)[0]
        return self._anonymized_re.fullmatch(first_label) is not None

    def accepts(self, token: str) -> bool:
        """FQDN guard for free-text tokens."""
        if not contains_alpha(token):
            return False
        if looks_like_ipv4(token):
            return False
        if not looks_like_fqdn(token):
            return False
        return not self.is_anonymized(token)

    def accepts_url_host(self, host: str) -> bool:
        """Guard for a host parsed out of a URL, where the TLD shape is not required."""
        if ":" in host or not contains_alpha(host) or looks_like_ipv4(host):
            return False
        return not self.is_anonymized(host)

    def map_host(self, host: str) -> str:
        trailing_dot = "." if host.endswith(".") and len(host) > 1 else ""
        key = host.lower().rstrip(".")
        if self._config.mode == "structured":
            mapped = self._map_structured(key)
        else:
            mapped = self._state.get_or_create(
                MappingCategory.HOSTNAME_FLAT,
                key,
                lambda n: f"host{n}.example{n}.com",
            )
        return mapped + trailing_dot

    def _map_structured(self, host: str) -> str:
        labels = host.split(".")
        if len(labels) == 1:
            return self._map_label(MappingCategory.HOSTNAME_FIRST_LABEL, labels[0])

        keep = min(len(self._root_labels), len(labels) - 1)
        root = list(self._root_labels[-keep:])
        real_tld = labels[-1]
        if self._config.preserve_tld and real_tld.isascii() and real_tld.isalpha():
            root[-1] = real_tld

        mapped: list[str] = []
        for position, label in enumerate(labels[: len(labels) - keep]):
            category = (
                MappingCategory.HOSTNAME_FIRST_LABEL
                if position == 0
                else MappingCategory.HOSTNAME_OTHER_LABEL
            )
            mapped.append(self._map_label(category, label))
        return ".".join(mapped + root)

    def _map_label(self, category: str, label: str) -> str:
        if category == MappingCategory.HOSTNAME_FIRST_LABEL:
            prefix = self._config.first_label_prefix
        else:
            prefix = self._config.other_label_prefix
        return self._state.get_or_create(category, label, lambda n: f"{prefix}{n}")
