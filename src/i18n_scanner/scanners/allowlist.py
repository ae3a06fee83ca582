from __future__ import annotations

from i18n_scanner.models import RuleConfiguration


def is_allowed(value: str, config: RuleConfiguration) -> bool:
    if not value or not value.strip():
        return True
    return any(pattern.matches(value) for pattern in config.allow_patterns)
