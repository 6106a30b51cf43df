"""QR URL extraction from charge response ``actions``.

The gateway has renamed its QR action across API versions, so extraction
walks an ordered chain of strategies and returns the URL of the first
action any strategy accepts.
"""
from __future__ import annotations

from typing import Any, Callable, Iterable

QR_ACTION_V2 = "generate-qr-code-v2"
QR_ACTION_V1 = "generate-qr-code"

ActionMatcher = Callable[[str], bool]


def _name_equals(expected: str) -> ActionMatcher:
    def match(name: str) -> bool:
        return name.lower() == expected

    return match


def _name_contains_qr(name: str) -> bool:
    return "qr" in name.lower()


def _any_action(name: str) -> bool:
    return True


QR_EXTRACTION_STRATEGIES: tuple[tuple[str, ActionMatcher], ...] = (
    ("qr_v2", _name_equals(QR_ACTION_V2)),
    ("qr_v1", _name_equals(QR_ACTION_V1)),
    ("qr_substring", _name_contains_qr),
    ("any_url", _any_action),
)


def _usable_actions(actions: Iterable[Any] | None) -> list[tuple[str, str]]:
    out: list[tuple[str, str]] = []
    for action in actions or []:
        if not isinstance(action, dict):
            continue
        url = action.get("url")
        if not isinstance(url, str) or not url:
            continue
        out.append((str(action.get("name") or ""), url))
    return out


def extract_qr_url(actions: Iterable[Any] | None) -> str | None:
    usable = _usable_actions(actions)
    for _, matcher in QR_EXTRACTION_STRATEGIES:
        for name, url in usable:
            if matcher(name):
                return url
    return None


def extract_qr_url_from_response(response: dict[str, Any] | None) -> str | None:
    if not isinstance(response, dict):
        return None
    return extract_qr_url(response.get("actions"))
