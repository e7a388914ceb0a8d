"""
HTML rendering of daily change digests.

Rendering is pure: missing or malformed optional fields fall back to simpler
output and never raise.
"""

import html
from typing import List, NamedTuple, Optional

from models.digest import UserDigest
from models.resource import Application, ChangeRecord, ResourceType, application_for_type
from models.types import LanguageCode
from shared.config import get_environment
from shared.errors import UnknownResourceTypeError

LANGUAGE_FI = "fi"
LANGUAGE_EN = "en"
LANGUAGE_SV = "sv"
LANGUAGE_UND = "und"

LABEL_LANGUAGE_PRIORITY: tuple[LanguageCode, ...] = (
    LANGUAGE_FI,
    LANGUAGE_EN,
    LANGUAGE_SV,
    LANGUAGE_UND,
)

REASON_LABELS: dict[str, str] = {
    "1": "Content changed",
    "2": "Status changed",
    "3": "Source schema content changed",
    "4": "Target schema content changed",
    "5": "Source schema has new revision",
    "6": "Target schema has new revision",
}
UNKNOWN_REASON_LABEL = ""

PROD_ENVIRONMENT = "prod"

DIGEST_SUBJECT = "Summary of changes to your subscribed MSCR content"

GREETING = "Dear MSCR user,<br/>"
PREAMBLE = "This is your summary of the changes to MSCR content that you have subscribed to."
DISCLAIMER = "This is an automatically generated message. Please, do not reply to this message."


class DigestSection(NamedTuple):
    title: str
    application: Application
    resource_type: ResourceType


DIGEST_SECTIONS: tuple[DigestSection, ...] = (
    DigestSection("Schemas", Application.DATAMODEL, ResourceType.SCHEMA),
    DigestSection("Crosswalks", Application.DATAMODEL, ResourceType.CROSSWALK),
)


def validate_sections(sections: tuple[DigestSection, ...] = DIGEST_SECTIONS) -> None:
    """
    Check every section's resource type belongs to the section's application.

    Raises:
        UnknownResourceTypeError: If a section is inconsistent with the type mapping
    """
    for section in sections:
        if application_for_type(section.resource_type.value) != section.application:
            raise UnknownResourceTypeError(
                f"{section.resource_type.value} (section {section.title!r} "
                f"expects application {section.application.value})"
            )


def reason_label(code: str) -> str:
    return REASON_LABELS.get(code, UNKNOWN_REASON_LABEL)


class DigestRenderer:
    """Turns a UserDigest into the HTML body of a digest email."""

    subject = DIGEST_SUBJECT

    def __init__(self, environment: Optional[str] = None):
        self.environment = environment if environment is not None else get_environment()

    def render(self, digest: UserDigest) -> str:
        parts: List[str] = [
            "<body>",
            GREETING,
            "<br/>",
            PREAMBLE,
            "<br/>",
        ]
        for section in DIGEST_SECTIONS:
            records = [
                record
                for record in digest.records_for(section.application)
                if record.is_type(section.resource_type)
            ]
            if not records:
                continue
            parts.append(f"<h3>{section.title}</h3>")
            parts.append("<ul>")
            parts.extend(self.render_item(record) for record in records)
            parts.append("</ul>")
        parts.extend(["<br/>", "<br/>", DISCLAIMER, "</body>"])
        return "".join(parts)

    def render_item(self, record: ChangeRecord) -> str:
        """Render one change as a list item: linked label, status and reasons."""
        label = (
            self._pref_label_value(record.pref_label)
            or record.local_name
            or record.uri
        )
        link = html.escape(self.build_link(record.uri), quote=True)
        item = f'<li><a href="{link}">{html.escape(label)}</a>'
        if record.status:
            item += f": {html.escape(record.status)}"
        item += " - "
        item += "/".join(reason_label(code) for code in record.reason_codes)
        item += "</li>"
        return item

    def build_link(self, uri: str) -> str:
        """Percent-encode '#' and tag non-production links with the environment."""
        encoded_uri = uri.replace("#", "%23")
        if self.environment.lower() == PROD_ENVIRONMENT:
            return encoded_uri
        return f"{encoded_uri}?env={self.environment}"

    @staticmethod
    def _pref_label_value(pref_label: object) -> Optional[str]:
        # Malformed label mappings count as "no label"
        if not isinstance(pref_label, dict):
            return None
        for language in LABEL_LANGUAGE_PRIORITY:
            value = pref_label.get(language)
            if isinstance(value, str) and value:
                return value
        return None
