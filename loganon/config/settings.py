import ipaddress
import os
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    TomlConfigSettingsSource,
)

DEFAULT_CONFIG_FILENAME = ".loganon.toml"

# IANA special-purpose IPv4 ranges that are never pseudonymized.
DEFAULT_KEEP_CIDRS: tuple[str, ...] = (
    "0.0.0.0/8",  # "this" network, RFC 1122
    "10.0.0.0/8",  # private, RFC 1918
    "100.64.0.0/10",  # shared address space / CGNAT, RFC 6598
    "127.0.0.0/8",  # loopback
    "169.254.0.0/16",  # link-local, RFC 3927
    "172.16.0.0/12",  # private, RFC 1918
    "192.0.0.0/24",  # IETF protocol assignments, RFC 6890
    "192.0.2.0/24",  # TEST-NET-1, RFC 5737
    "192.88.99.0/24",  # 6to4 relay anycast, RFC 7526
    "192.168.0.0/16",  # private, RFC 1918
    "198.18.0.0/15",  # benchmarking, RFC 2544
    "198.51.100.0/24",  # TEST-NET-2, RFC 5737
    "203.0.113.0/24",  # TEST-NET-3, RFC 5737
    "224.0.0.0/4",  # multicast
    "240.0.0.0/4",  # reserved
    "255.255.255.255/32",  # limited broadcast
)


class EngineSection(BaseModel):
    stats: bool = False


class StaticPair(BaseModel):
    """A literal from -> to replacement."""

    model_config = ConfigDict(populate_by_name=True)

    from_: str = Field(alias="from")
    to: str = ""

    @field_validator("from_")
    @classmethod
    def _from_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("static_replace value 'from' is required")
        return value


class StaticReplaceSection(BaseModel):
    ignore_case: bool = False
    values: list[StaticPair] = Field(default_factory=list)


class HostnameMapSection(BaseModel):
    mode: Literal["flat", "structured"] = "flat"
    deny_prefixes: list[str] = Field(default_factory=lambda: ["host", "example"])
    root_domain: str = "example.com"
    preserve_tld: bool = False
    first_label_prefix: str = "host"
    other_label_prefix: str = "sub"

    @field_validator("root_domain")
    @classmethod
    def _root_domain_labels(cls, value: str) -> str:
        labels = value.strip().strip(".").split(".")
        if not all(labels):
            raise ValueError(f"hostname_map.root_domain is not a valid domain: {value!r}")
        if len(labels) > 2:
            raise ValueError("hostname_map.root_domain must have one or two labels")
        return ".".join(labels).lower()


class IpSection(BaseModel):
    public_base: int = Field(default=111, ge=1, le=255)
    public_step: int = Field(default=11, ge=0, le=255)
    preserve_cidr: bool = True
    keep_cidrs: list[str] = Field(default_factory=lambda: list(DEFAULT_KEEP_CIDRS))

    @field_validator("keep_cidrs")
    @classmethod
    def _parse_keep_cidrs(cls, value: list[str]) -> list[str]:
        if not value:
            return list(DEFAULT_KEEP_CIDRS)
        cleaned: list[str] = []
        for entry in value:
            try:
                network = ipaddress.ip_network(entry.strip(), strict=False)
            except ValueError as exc:
                raise ValueError(f"invalid ip.keep_cidrs entry {entry!r}: {exc}") from exc
            if network.version != 4:
                raise ValueError(f"ip.keep_cidrs entry {entry!r} is not an IPv4 network")
            cleaned.append(entry.strip())
        return cleaned


class EmailSection(BaseModel):
    user_prefix: str = "user"
    domain_prefix: str = "example"
    domain_start_index: int = Field(default=1, ge=0)
    domain_tld: str = "com"


class KeysSection(BaseModel):
    redact_value: list[str] = Field(default_factory=list)
    placeholder: str = "REDACTED_{key}"


class RuleDefinition(BaseModel):
    """One user rule; type-specific fields are checked when the rule is built."""

    name: str
    type: str
    enabled: bool = True
    pattern: str = ""
    group: int = 0
    replacement: str = ""
    replacement_prefix: str = ""

    @field_validator("name", "type")
    @classmethod
    def _required(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be empty")
        return value


class Settings(BaseSettings):
    """Anonymizer configuration.

    Sources, highest priority first: constructor arguments, ``LOGANON_*``
    environment variables (``__`` separates nested sections), ``.env``,
    then the TOML file named by ``toml_file`` in the model config.
    """

    model_config = SettingsConfigDict(
        env_prefix="LOGANON_",
        env_nested_delimiter="__",
        env_file=".env",
        extra="ignore",
    )

    version: int = 1
    log_level: str = "WARNING"

    engine: EngineSection = Field(default_factory=EngineSection)
    static_replace: StaticReplaceSection = Field(default_factory=StaticReplaceSection)
    hostname_map: HostnameMapSection = Field(default_factory=HostnameMapSection)
    ip: IpSection = Field(default_factory=IpSection)
    email: EmailSection = Field(default_factory=EmailSection)
    keys: KeysSection = Field(default_factory=KeysSection)
    rules: list[RuleDefinition] = Field(default_factory=list)

    @field_validator("version")
    @classmethod
    def _supported_version(cls, value: int) -> int:
        if value != 1:
            raise ValueError(f"unsupported version: {value}")
        return value

    @model_validator(mode="after")
    def _unique_rule_names(self) -> "Settings":
        seen: set[str] = set()
        for index, rule in enumerate(self.rules):
            if rule.name in seen:
                raise ValueError(f"rules[{index}].name {rule.name!r} is not unique")
            seen.add(rule.name)
        return self

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            TomlConfigSettingsSource(settings_cls),
        )

    @classmethod
    def from_toml(cls, path: Path | str) -> "Settings":
        """Load settings with *path* as the TOML source."""
        toml_path = Path(path).expanduser()
        if not toml_path.is_file():
            raise FileNotFoundError(f"config file not found: {toml_path}")

        class _FileSettings(cls):  # type: ignore[misc, valid-type]
            model_config = SettingsConfigDict(toml_file=toml_path)

        return _FileSettings()


def default_config_path() -> Path:
    """``$LOGANON_CONFIG`` if set, otherwise ``~/.loganon.toml``."""
    override = os.environ.get("LOGANON_CONFIG", "").strip()
    if override:
        return Path(override).expanduser()
    return Path.home() / DEFAULT_CONFIG_FILENAME
