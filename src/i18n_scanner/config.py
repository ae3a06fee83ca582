from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any

from i18n_scanner.models import (
    DEFAULT_POLICY_KEY,
    AllowPattern,
    CallPattern,
    ElementPolicy,
    PolicyOverride,
    RuleConfiguration,
)


class ConfigError(ValueError):
    pass


DEFAULT_NOTIFICATION_CALL_NAMES = (
    # Ant Design message
    "message.error",
    "message.success",
    "message.warning",
    "message.info",
    "message.loading",
    "Message.error",
    "Message.success",
    "Message.warning",
    "Message.info",
    "toast.error",
    "toast.success",
    "toast.warning",
    "toast.info",
    "notification.error",
    "notification.success",
    "notification.warning",
    "notification.info",
    "notification.open",
    # Browser dialogs
    "alert",
    "confirm",
    "prompt",
    "showMessage",
    "showError",
    "showSuccess",
    "showWarning",
)

DEFAULT_USER_FACING_PROPERTY_NAMES = (
    "title",
    "message",
    "description",
    "content",
    "label",
    "placeholder",
    "tooltip",
    "helpText",
    "errorMessage",
    "successMessage",
    "warningMessage",
    "text",
    "body",
    "detail",
)

DEFAULT_ALLOW_PATTERNS = (
    r"^t\(['\"]",
    r"^i18n\.",
    r"^\$\{.*\}$",
    r"^(true|false|null|undefined)$",
    r"^\d+$",
    r"^['\"]?\s*['\"]?$",
    r"^console\.",
    r"^process\.env\.",
    r"^import\(",
    r"^require\(",
)

DEFAULT_CHECK_PROPS = (
    "title",
    "aria-label",
    "alt",
    "placeholder",
    "data-tooltip",
    "data-title",
    "data-message",
    "data-content",
)

DEFAULT_ELEMENT_CHECK_PROPS = {
    "img": ("alt", "title", "aria-label"),
    "input": ("placeholder", "title", "aria-label"),
    "button": ("title", "aria-label"),
    "a": ("title", "aria-label"),
    "area": ("alt", "title", "aria-label"),
}

DEFAULT_MINIMUM_STATIC_TEMPLATE_LENGTH = 3

OPTION_NAMES = (
    "notificationCallNames",
    "userFacingPropertyNames",
    "allowPatterns",
    "markupAttributeRules",
    "minimumStaticTemplateLength",
    "checkFreeStandingProperties",
)


def default_configuration() -> RuleConfiguration:
    return build_configuration({})


def build_configuration(raw: dict[str, Any]) -> RuleConfiguration:
    if not isinstance(raw, dict):
        raise ConfigError("Configuration must be a JSON object")

    unknown = sorted(key for key in raw if key not in OPTION_NAMES)
    if unknown:
        raise ConfigError(f"Unknown configuration keys: {', '.join(unknown)}")

    call_names = raw.get("notificationCallNames", DEFAULT_NOTIFICATION_CALL_NAMES)
    property_names = raw.get("userFacingPropertyNames", DEFAULT_USER_FACING_PROPERTY_NAMES)
    allow_raw = raw.get("allowPatterns")

    if allow_raw is None:
        allow_patterns = tuple(
            AllowPattern(text=pattern, regex=re.compile(pattern)) for pattern in DEFAULT_ALLOW_PATTERNS
        )
    else:
        if not isinstance(allow_raw, list):
            raise ConfigError("'allowPatterns' must be a list")
        allow_patterns = tuple(parse_allow_pattern(item) for item in allow_raw)

    default_policy, element_policies, component_policies = _build_policies(raw.get("markupAttributeRules"))

    minimum = raw.get("minimumStaticTemplateLength", DEFAULT_MINIMUM_STATIC_TEMPLATE_LENGTH)
    if isinstance(minimum, bool) or not isinstance(minimum, int) or minimum < 0:
        raise ConfigError("'minimumStaticTemplateLength' must be a non-negative integer")

    free_standing = raw.get("checkFreeStandingProperties", False)
    if not isinstance(free_standing, bool):
        raise ConfigError("'checkFreeStandingProperties' must be a boolean")

    return RuleConfiguration(
        notification_call_names=tuple(
            parse_call_pattern(item) for item in _ensure_string_list(call_names, "notificationCallNames")
        ),
        user_facing_property_names=frozenset(_ensure_string_list(property_names, "userFacingPropertyNames")),
        allow_patterns=allow_patterns,
        default_policy=default_policy,
        element_policies=element_policies,
        component_policies=component_policies,
        minimum_static_template_length=minimum,
        check_free_standing_properties=free_standing,
    )


def load_config(path: str | Path) -> RuleConfiguration:
    config_path = Path(path)
    if not config_path.exists():
        raise ConfigError(f"Config file not found: {config_path}")

    try:
        with config_path.open("r", encoding="utf-8") as handle:
            raw = json.load(handle)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Config file is not valid JSON: {config_path}: {exc}") from exc

    return build_configuration(raw)


def parse_call_pattern(text: str) -> CallPattern:
    value = text.strip()
    if not value:
        raise ConfigError("Notification call names must not be empty")

    segments = tuple(value.split("."))
    if any(not segment for segment in segments):
        raise ConfigError(f"Notification call name has an empty segment: {text!r}")

    return CallPattern(text=value, segments=segments, wildcard="*" in value)


def parse_allow_pattern(item: object) -> AllowPattern:
    if isinstance(item, str):
        return AllowPattern(text=item)

    if not isinstance(item, dict) or len(item) != 1:
        raise ConfigError("Allow patterns must be strings or objects with one 'regex' or 'substring' key")

    if "substring" in item:
        return AllowPattern(text=str(item["substring"]))
    if "regex" in item:
        pattern = str(item["regex"])
        try:
            return AllowPattern(text=pattern, regex=re.compile(pattern))
        except re.error as exc:
            raise ConfigError(f"Invalid allow pattern {pattern!r}: {exc}") from exc

    raise ConfigError(f"Unsupported allow pattern entry: {item!r}")


def _build_policies(
    raw: object,
) -> tuple[ElementPolicy, dict[str, ElementPolicy], dict[str, ElementPolicy]]:
    base = ElementPolicy(check_props=DEFAULT_CHECK_PROPS)
    overrides: dict[str, PolicyOverride] = {
        tag: PolicyOverride(check_props=props) for tag, props in DEFAULT_ELEMENT_CHECK_PROPS.items()
    }

    if raw is not None:
        if not isinstance(raw, dict):
            raise ConfigError("'markupAttributeRules' must be an object")
        for key, value in raw.items():
            overrides[str(key)] = _parse_override(str(key), value)

    default_override = overrides.pop(DEFAULT_POLICY_KEY, None)
    default_policy = default_override.apply(base) if default_override else base

    element_policies: dict[str, ElementPolicy] = {}
    component_policies: dict[str, ElementPolicy] = {}
    for key, override in overrides.items():
        if _is_component_key(key):
            component_policies[key] = override.apply(default_policy)
        else:
            element_policies[key] = override.apply(default_policy)

    return default_policy, element_policies, component_policies


def _parse_override(key: str, value: object) -> PolicyOverride:
    if isinstance(value, list):
        return PolicyOverride(check_props=tuple(_ensure_string_list(value, key)))
    if not isinstance(value, dict):
        raise ConfigError(f"Markup rule for {key!r} must be an object or a list of attribute names")

    check_props = value.get("checkProps")
    allow_strings = value.get("allowStrings")
    allow_numbers = value.get("allowNumbers")
    for name, flag in (("allowStrings", allow_strings), ("allowNumbers", allow_numbers)):
        if flag is not None and not isinstance(flag, bool):
            raise ConfigError(f"Markup rule {key!r}: '{name}' must be a boolean")

    return PolicyOverride(
        check_props=None if check_props is None else tuple(_ensure_string_list(check_props, key)),
        allow_strings=allow_strings,
        allow_numbers=allow_numbers,
    )


def _is_component_key(key: str) -> bool:
    if ":" in key:
        return True
    return key[:1].isupper()


def _ensure_string_list(value: object, name: str) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, (list, tuple)):
        raise ConfigError(f"'{name}' must be a list of strings")
    return [str(item) for item in value]
