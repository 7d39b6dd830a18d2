"""
ceno.config: Configuration loading and validation.

Configuration comes from a YAML file and the process environment. Every
section has a working default so the subsystem can run without a file.
"""

import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Mapping

import yaml

PACKAGE_DIR = Path(__file__).resolve().parent

DEFAULT_LOCALE = "en-us"
DEFAULT_LANG_ENV_VAR = "CENOLANG"
DEFAULT_TRANSLATIONS_DIR = str(PACKAGE_DIR / "translations")
DEFAULT_CONTACT_EMAIL = "ceno@equalit.ie"


class LogLevel(str, Enum):
    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"


@dataclass
class LocaleConfig:
    env_var: str = DEFAULT_LANG_ENV_VAR
    default: str = DEFAULT_LOCALE
    translations_dir: str = DEFAULT_TRANSLATIONS_DIR
    language: str | None = None


@dataclass
class ViewsConfig:
    directory: str = "views"
    error_template: str = "error.html"


@dataclass
class ReportConfig:
    timeout_seconds: float = 10.0


@dataclass
class ContactConfig:
    email: str = DEFAULT_CONTACT_EMAIL


@dataclass
class LoggingConfig:
    level: LogLevel = LogLevel.INFO


@dataclass
class CenoConfig:
    locale: LocaleConfig = field(default_factory=LocaleConfig)
    views: ViewsConfig = field(default_factory=ViewsConfig)
    report: ReportConfig = field(default_factory=ReportConfig)
    contact: ContactConfig = field(default_factory=ContactConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CenoConfig":
        """Parse configuration from a dictionary."""

        def parse_locale(d: dict) -> LocaleConfig:
            return LocaleConfig(
                env_var=d.get("env_var", DEFAULT_LANG_ENV_VAR),
                default=d.get("default", DEFAULT_LOCALE),
                translations_dir=d.get("translations_dir", DEFAULT_TRANSLATIONS_DIR),
                language=d.get("language"),
            )

        def parse_views(d: dict) -> ViewsConfig:
            return ViewsConfig(
                directory=d.get("directory", "views"),
                error_template=d.get("error_template", "error.html"),
            )

        def parse_report(d: dict) -> ReportConfig:
            return ReportConfig(
                timeout_seconds=d.get("timeout_seconds", 10.0),
            )

        def parse_contact(d: dict) -> ContactConfig:
            return ContactConfig(
                email=d.get("email", DEFAULT_CONTACT_EMAIL),
            )

        def parse_logging(d: dict) -> LoggingConfig:
            return LoggingConfig(
                level=LogLevel(d.get("level", "info")),
            )

        return cls(
            locale=parse_locale(data.get("locale", {})),
            views=parse_views(data.get("views", {})),
            report=parse_report(data.get("report", {})),
            contact=parse_contact(data.get("contact", {})),
            logging=parse_logging(data.get("logging", {})),
        )

    @classmethod
    def from_yaml(cls, path: Path) -> "CenoConfig":
        """Load configuration from a YAML file."""
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        return cls.from_dict(data)

    def language(self, environ: Mapping[str, str] | None = None) -> str | None:
        """
        Return the UI language asked for, if any.

        An explicit ``locale.language`` wins over the environment variable.
        The result is not checked against the available catalogs.
        """
        if self.locale.language:
            return self.locale.language
        env = os.environ if environ is None else environ
        return env.get(self.locale.env_var) or None

    def validate(self) -> list[str]:
        """Validate configuration and return list of errors."""
        errors = []

        if not self.locale.env_var:
            errors.append("locale.env_var is required")
        if not self.locale.default:
            errors.append("locale.default is required")
        if not self.locale.translations_dir:
            errors.append("locale.translations_dir is required")
        if not self.views.directory:
            errors.append("views.directory is required")
        if not self.views.error_template:
            errors.append("views.error_template is required")

        if self.report.timeout_seconds <= 0:
            errors.append("report.timeout_seconds must be > 0")

        return errors
