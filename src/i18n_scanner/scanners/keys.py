from __future__ import annotations

import re


HANGUL = "가-힣"

CONTEXT_PREFIXES = {
    "message.error": "error",
    "message.success": "success",
    "message.warning": "warning",
    "message.info": "info",
    "Message.error": "error",
    "Message.success": "success",
    "Message.warning": "warning",
    "Message.info": "info",
    "toast.error": "error",
    "toast.success": "success",
    "toast.warning": "warning",
    "toast.info": "info",
    "notification.error": "error",
    "notification.success": "success",
    "notification.warning": "warning",
    "notification.info": "info",
    "alert": "alert",
    "confirm": "confirm",
    "title": "title",
    "description": "description",
    "label": "label",
    "placeholder": "placeholder",
    "tooltip": "tooltip",
    "helpText": "help",
}

DEFAULT_PREFIX = "common"


def suggest_key(context: str, value: str, native_script: str = HANGUL) -> str:
    strip_re = re.compile(rf"[^a-zA-Z0-9\s{native_script}]")
    native_re = re.compile(rf"[{native_script}]")

    words = strip_re.sub("", value).split()
    parts: list[str] = []
    for index, word in enumerate(words):
        if index == 0:
            parts.append(word.lower())
        elif native_re.search(word):
            parts.append(word)
        else:
            parts.append(word[:1].upper() + word[1:].lower())

    return f"{context_prefix(context)}.{''.join(parts)}"


def context_prefix(context: str | None) -> str:
    if not context:
        return DEFAULT_PREFIX
    return CONTEXT_PREFIXES.get(context, DEFAULT_PREFIX)
