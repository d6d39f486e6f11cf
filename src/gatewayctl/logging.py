"""Centralized logging configuration for gatewayctl.

All entry points should call configure_logging() early.

Logging Levels:
- DEBUG: launchctl invocations and their output
- INFO: Reconciliation decisions (skip, reinstall, disable)
- WARNING: Best-effort steps that failed and were skipped
- ERROR: Failures reported back to the caller

Gateway tokens and passwords end up in plist contents and launchctl output,
so every handler gets a redaction filter.
"""

import logging
import os
import re
from dataclasses import dataclass, field

DEFAULT_REDACT_PATTERNS: list[str] = [
    # ENV-style assignments: GATEWAY_TOKEN=secret or GATEWAY_PASSWORD: secret
    r"\b[A-Z0-9_]*(?:KEY|TOKEN|SECRET|PASSWORD|PASSWD)\s*[=:]\s*([^\s\"'<]{4,})",
    # Plist environment entries: <key>GATEWAY_TOKEN</key><string>secret</string>
    r"<key>[A-Z0-9_]*(?:TOKEN|PASSWORD)</key>\s*<string>([^<]+)</string>",
    # Bearer tokens in headers
    r"\bBearer\s+([A-Za-z0-9._\-+=]{8,})\b",
]

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


@dataclass
class SecretRedactor:
    """Redacts gateway credentials from log messages.

    Matched secrets are replaced with partially masked versions so that two
    log lines can still be correlated without exposing the value.
    """

    patterns: list[re.Pattern[str]] = field(default_factory=list)
    enabled: bool = True

    def __post_init__(self) -> None:
        if not self.patterns:
            self.patterns = [
                re.compile(p, re.IGNORECASE) for p in DEFAULT_REDACT_PATTERNS
            ]

    def redact(self, text: str) -> str:
        """Redact secrets from text, preserving partial info for debugging."""
        if not self.enabled or not text:
            return text
        result = text
        for pattern in self.patterns:
            result = pattern.sub(self._mask_match, result)
        return result

    def _mask_match(self, match: re.Match[str]) -> str:
        full = match.group(0)
        token = match.group(1) if match.lastindex else full

        # Already masked
        if "..." in token:
            return full

        if len(token) < 12:
            masked = "***"
        else:
            masked = f"{token[:4]}...{token[-4:]}"
        return full.replace(token, masked) if token != full else masked


class RedactingFilter(logging.Filter):
    """Logging filter that rewrites record messages through a SecretRedactor."""

    def __init__(self, redactor: SecretRedactor | None = None):
        super().__init__()
        self._redactor = redactor or SecretRedactor()

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = self._redactor.redact(message)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


class ComponentFormatter(logging.Formatter):
    """Formatter that extracts component name from logger path.

    - gatewayctl.launchd.agent -> launchd
    - gatewayctl.config.loader -> config
    """

    def format(self, record: logging.LogRecord) -> str:
        parts = record.name.split(".")
        if len(parts) >= 2 and parts[0] == "gatewayctl":
            record.component = parts[1]
        else:
            record.component = parts[0]
        return super().format(record)


def resolve_level(level: str | None = None) -> str:
    """Resolve a log level name, defaulting from GATEWAYCTL_LOG_LEVEL or INFO."""
    if level is None:
        level = os.environ.get("GATEWAYCTL_LOG_LEVEL", "INFO")
    level = level.upper()
    if level not in LOG_LEVELS:
        level = "INFO"
    return level


def configure_logging(level: str | None = None, use_rich: bool = False) -> None:
    """Configure logging for gatewayctl.

    Call this once at application startup.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR).
            If None, uses GATEWAYCTL_LOG_LEVEL env var or INFO.
        use_rich: Use Rich handler for colorful console output.
    """
    log_level = getattr(logging, resolve_level(level))

    if use_rich:
        from rich.logging import RichHandler

        console_handler: logging.Handler = RichHandler(
            rich_tracebacks=False,
            show_path=False,
            show_time=True,
            markup=False,
        )
        console_handler.setFormatter(ComponentFormatter("%(component)s | %(message)s"))
    else:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(
            logging.Formatter(
                "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
                datefmt="%H:%M:%S",
            )
        )
    console_handler.addFilter(RedactingFilter())

    logging.basicConfig(
        level=log_level,
        handlers=[console_handler],
        force=True,
    )
