"""Sanitize editor-supplied HTML before it is persisted.

The policy is plain data (``SanitizerPolicy``); ``sanitize_html`` feeds it to
bleach. Forbidden tags are removed together with their content in a first
pass, then bleach enforces the tag and attribute allow-lists and unwraps
anything else. ``style`` values are kept as written.
"""

from __future__ import annotations

import re
import threading
from dataclasses import dataclass, field
from typing import Pattern

import bleach
from bleach.css_sanitizer import CSSSanitizer
from bleach.html5lib_shim import convert_entities
from bs4 import BeautifulSoup
from bs4.element import PreformattedString

_ALLOWED_TAGS: tuple[str, ...] = (
    "section",
    "article",
    "div",
    "span",
    "h1",
    "h2",
    "h3",
    "h4",
    "h5",
    "h6",
    "p",
    "ul",
    "ol",
    "li",
    "a",
    "img",
    "button",
    "small",
    "strong",
    "em",
    "i",
    "b",
    "svg",
    "path",
    "figure",
    "figcaption",
)

_ALLOWED_ATTRIBUTES: tuple[str, ...] = (
    "class",
    "id",
    "href",
    "target",
    "rel",
    "alt",
    "src",
    "loading",
    "data-aos",
    "data-aos-delay",
    "style",
    "aria-label",
    "role",
    "title",
    "viewBox",
    "d",
)


_FORBIDDEN_TAGS: tuple[str, ...] = ("script",)

_FORBIDDEN_ATTRIBUTE = re.compile(r"^on", re.IGNORECASE)

_ALLOWED_PROTOCOLS: tuple[str, ...] = (
    "http",
    "https",
    "ftp",
    "ftps",
    "mailto",
    "tel",
    "callto",
    "sms",
    "cid",
    "xmpp",
    "matrix",
    "data",
)

# data: URIs are only honoured on these (tag, attribute) pairs.
_DATA_URI_ATTRIBUTES: tuple[tuple[str, str], ...] = (("img", "src"),)

# Elements whose body html.parser keeps as text but bleach later reparses as
# markup once the element itself is stripped.
_RAW_TEXT_TAGS: tuple[str, ...] = (
    "style",
    "textarea",
    "title",
    "xmp",
    "iframe",
    "noembed",
    "noframes",
    "noscript",
    "plaintext",
)

_URI_NOISE = re.compile(r"[`\000-\040\177-\240\s]+")


@dataclass(frozen=True)
class SanitizerPolicy:
    allowed_tags: frozenset[str]
    allowed_attributes: frozenset[str]
    forbidden_tags: frozenset[str]
    forbidden_attribute: Pattern[str]
    allowed_protocols: frozenset[str]
    data_uri_attributes: frozenset[tuple[str, str]] = frozenset()
    _attribute_lookup: frozenset[str] = field(
        init=False, repr=False, compare=False, default=frozenset()
    )

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "_attribute_lookup",
            frozenset(attr.lower() for attr in self.allowed_attributes),
        )

    def allows_tag(self, name: str) -> bool:
        name = name.lower()
        return name in self.allowed_tags and name not in self.forbidden_tags

    def allows_attribute(self, name: str) -> bool:
        if self.forbidden_attribute.match(name):
            return False
        return name.lower() in self._attribute_lookup

    def allows_value(self, tag: str, name: str, value: str) -> bool:
        if not _is_data_uri(value):
            return True
        return (tag.lower(), name.lower()) in self.data_uri_attributes


PROJECTS_POLICY = SanitizerPolicy(
    allowed_tags=frozenset(_ALLOWED_TAGS),
    allowed_attributes=frozenset(_ALLOWED_ATTRIBUTES),
    forbidden_tags=frozenset(_FORBIDDEN_TAGS),
    forbidden_attribute=_FORBIDDEN_ATTRIBUTE,
    allowed_protocols=frozenset(_ALLOWED_PROTOCOLS),
    data_uri_attributes=frozenset(_DATA_URI_ATTRIBUTES),
)


def _is_data_uri(value: str) -> bool:
    # Normalised the way bleach does before it checks the scheme.
    normalized = _URI_NOISE.sub("", convert_entities(value or "")).lower()
    return normalized.startswith("data:")


class PassthroughCSSSanitizer(CSSSanitizer):
    """Keep ``style`` values untouched; bleach blanks them without a sanitizer."""

    def sanitize_css(self, style: str) -> str:
        return style


# bleach.Cleaner is not thread-safe, so each thread keeps its own per policy.
_local = threading.local()


def _cleaner_for(policy: SanitizerPolicy) -> bleach.Cleaner:
    cache = getattr(_local, "cleaners", None)
    if cache is None:
        cache = _local.cleaners = {}
    cleaner = cache.get(policy)
    if cleaner is None:

        def attribute_filter(tag: str, name: str, value: str) -> bool:
            return policy.allows_attribute(name) and policy.allows_value(tag, name, value)

        cleaner = cache[policy] = bleach.Cleaner(
            tags=policy.allowed_tags - policy.forbidden_tags,
            attributes=attribute_filter,
            protocols=policy.allowed_protocols,
            strip=True,
            strip_comments=True,
            css_sanitizer=PassthroughCSSSanitizer(),
        )
    return cleaner


def _inner_markup(element) -> str:
    # Raw text is taken as written so it is reparsed the way bleach would.
    return "".join(
        child.output_ready() if isinstance(child, PreformattedString) else str(child)
        for child in element.contents
    )


def _unwrap_raw_text(soup: BeautifulSoup, policy: SanitizerPolicy) -> None:
    while True:
        pending = [el for el in soup.find_all(_RAW_TEXT_TAGS) if not policy.allows_tag(el.name)]
        if not pending:
            return
        for element in pending:
            if element.parent is None:
                continue
            fragment = BeautifulSoup(_inner_markup(element), "html.parser")
            for child in list(fragment.contents):
                element.insert_before(child)
            element.decompose()


def _drop_forbidden_elements(raw: str, policy: SanitizerPolicy) -> str:
    soup = BeautifulSoup(raw, "html.parser")
    _unwrap_raw_text(soup, policy)
    for element in soup.find_all(list(policy.forbidden_tags)):
        element.decompose()
    return str(soup)


def sanitize_html(raw: str | None, policy: SanitizerPolicy = PROJECTS_POLICY) -> str:
    """Return ``raw`` reduced to what ``policy`` allows. Never raises."""

    if not raw:
        return ""
    if not isinstance(raw, str):
        raw = str(raw)

    cleaned = _cleaner_for(policy).clean(_drop_forbidden_elements(raw, policy))
    return cleaned.strip()
