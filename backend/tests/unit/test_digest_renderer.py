"""
Unit tests for notifications/digest_renderer.py

Tests label fallback order, reason lookups, link decoration and section
presence in the rendered HTML body.
"""

import os
import unittest
from unittest.mock import patch

from models.digest import UserDigest
from models.resource import Application, ChangeRecord, ResourceType
from notifications.digest_renderer import (
    DIGEST_SECTIONS,
    LABEL_LANGUAGE_PRIORITY,
    REASON_LABELS,
    DigestRenderer,
    DigestSection,
    reason_label,
    validate_sections,
)
from shared.errors import UnknownResourceTypeError
from tests.fixtures.resource_factory import create_test_record


def _digest(*records):
    return UserDigest(user_id="u1", buckets={Application.DATAMODEL: sorted(records)})


class TestReasonLabels(unittest.TestCase):
    """Tests for the reason code lookup table."""

    def test_content_changed(self):
        self.assertEqual(reason_label("1"), "Content changed")

    def test_unknown_code_is_empty(self):
        self.assertEqual(reason_label("99"), "")
        self.assertEqual(reason_label(""), "")

    def test_table_covers_closed_vocabulary(self):
        self.assertEqual(sorted(REASON_LABELS), ["1", "2", "3", "4", "5", "6"])
        self.assertTrue(all(REASON_LABELS.values()))


class TestLabelLanguagePriority(unittest.TestCase):
    def test_priority_order(self):
        self.assertEqual(LABEL_LANGUAGE_PRIORITY, ("fi", "en", "sv", "und"))


class TestBuildLink(unittest.TestCase):
    """Tests for DigestRenderer.build_link()."""

    def test_staging_link_has_env_suffix(self):
        renderer = DigestRenderer(environment="staging")

        self.assertEqual(
            renderer.build_link("https://example.org/ns#Foo"),
            "https://example.org/ns%23Foo?env=staging",
        )

    def test_prod_link_has_no_suffix(self):
        renderer = DigestRenderer(environment="prod")

        self.assertEqual(
            renderer.build_link("https://example.org/ns#Foo"),
            "https://example.org/ns%23Foo",
        )

    def test_prod_match_case_insensitive(self):
        self.assertEqual(
            DigestRenderer(environment="PROD").build_link("https://example.org/a"),
            "https://example.org/a",
        )

    def test_production_is_not_prod(self):
        """Only the exact label 'prod' drops the suffix."""
        self.assertEqual(
            DigestRenderer(environment="production").build_link("https://example.org/a"),
            "https://example.org/a?env=production",
        )

    @patch.dict(os.environ, {"MESSAGING_ENV": "test"})
    def test_environment_defaults_from_config(self):
        self.assertEqual(DigestRenderer().environment, "test")


class TestRenderItem(unittest.TestCase):
    """Tests for DigestRenderer.render_item()."""

    def setUp(self):
        self.renderer = DigestRenderer(environment="prod")

    def _label(self, **kwargs):
        item = self.renderer.render_item(create_test_record(**kwargs))
        return item.split('">', 1)[1].split("</a>", 1)[0]

    def test_prefers_finnish(self):
        self.assertEqual(
            self._label(pref_label={"en": "Schema", "fi": "Skeema", "sv": "Schema sv"}),
            "Skeema",
        )

    def test_english_before_swedish(self):
        self.assertEqual(self._label(pref_label={"sv": "Schema sv", "en": "Schema"}), "Schema")

    def test_swedish_before_und(self):
        self.assertEqual(self._label(pref_label={"sv": "Schema sv", "und": "Schema und"}), "Schema sv")

    def test_und_fallback(self):
        self.assertEqual(self._label(pref_label={"und": "Schema und", "de": "Schema de"}), "Schema und")

    def test_local_name_when_no_known_language(self):
        self.assertEqual(self._label(pref_label={"de": "Schema de"}, local_name="schemaLocal"), "schemaLocal")

    def test_uri_when_nothing_else(self):
        self.assertEqual(
            self._label(uri="https://example.org/a", pref_label={}, local_name=None),
            "https://example.org/a",
        )

    def test_empty_label_value_falls_through(self):
        self.assertEqual(self._label(pref_label={"fi": "", "en": "Schema"}), "Schema")

    def test_malformed_label_falls_through(self):
        """A malformed mapping that bypassed validation still renders."""
        record = ChangeRecord.model_construct(
            uri="https://example.org/a",
            type="schema",
            pref_label=["not", "a", "mapping"],
            local_name="fallback",
            status=None,
            created=None,
            reason_codes=(),
        )

        item = self.renderer.render_item(record)

        self.assertIn(">fallback</a>", item)

    def test_full_item_format(self):
        record = create_test_record(
            uri="https://example.org/ns#Foo",
            pref_label={"en": "Foo"},
            status="VALID",
            reason_codes=["1", "2"],
        )

        self.assertEqual(
            self.renderer.render_item(record),
            '<li><a href="https://example.org/ns%23Foo">Foo</a>: VALID - Content changed/Status changed</li>',
        )

    def test_status_omitted_when_absent(self):
        record = create_test_record(pref_label={"en": "Foo"}, status=None, reason_codes=["1"])

        item = self.renderer.render_item(record)

        self.assertIn("Foo</a> - Content changed</li>", item)

    def test_status_verbatim(self):
        record = create_test_record(status="SUPERSEDED")

        self.assertIn(": SUPERSEDED - ", self.renderer.render_item(record))

    def test_unknown_reason_renders_empty(self):
        record = create_test_record(reason_codes=["1", "99"])

        self.assertIn(" - Content changed/</li>", self.renderer.render_item(record))

    def test_no_reasons(self):
        record = create_test_record(reason_codes=[])

        self.assertTrue(self.renderer.render_item(record).endswith(" - </li>"))

    def test_label_is_escaped(self):
        record = create_test_record(pref_label={"en": "<b>Bold</b> & co"})

        self.assertIn("&lt;b&gt;Bold&lt;/b&gt; &amp; co", self.renderer.render_item(record))


class TestRender(unittest.TestCase):
    """Tests for DigestRenderer.render()."""

    def setUp(self):
        self.renderer = DigestRenderer(environment="staging")

    def test_skeleton(self):
        html = self.renderer.render(_digest(create_test_record()))

        self.assertTrue(html.startswith("<body>Dear MSCR user,<br/>"))
        self.assertIn("This is your summary of the changes to MSCR content", html)
        self.assertTrue(
            html.endswith(
                "This is an automatically generated message. Please, do not reply to this message.</body>"
            )
        )

    def test_both_sections_one_item_each(self):
        schema = create_test_record(uri="https://example.org/s", type="schema")
        crosswalk = create_test_record(uri="https://example.org/c", type="crosswalk")

        html = self.renderer.render(_digest(schema, crosswalk))

        self.assertIn("<h3>Schemas</h3>", html)
        self.assertIn("<h3>Crosswalks</h3>", html)
        schemas = html.split("<h3>Schemas</h3>", 1)[1].split("</ul>", 1)[0]
        crosswalks = html.split("<h3>Crosswalks</h3>", 1)[1].split("</ul>", 1)[0]
        self.assertEqual(schemas.count("<li>"), 1)
        self.assertEqual(crosswalks.count("<li>"), 1)
        self.assertIn("https://example.org/s?env=staging", schemas)
        self.assertIn("https://example.org/c?env=staging", crosswalks)

    def test_schemas_section_before_crosswalks(self):
        html = self.renderer.render(
            _digest(
                create_test_record(uri="https://example.org/a", type="crosswalk"),
                create_test_record(uri="https://example.org/b", type="schema"),
            )
        )

        self.assertLess(html.index("<h3>Schemas</h3>"), html.index("<h3>Crosswalks</h3>"))

    def test_only_schema_section_when_no_crosswalks(self):
        html = self.renderer.render(_digest(create_test_record(type="schema")))

        self.assertIn("<h3>Schemas</h3>", html)
        self.assertNotIn("Crosswalks", html)

    def test_only_crosswalk_section_when_no_schemas(self):
        html = self.renderer.render(_digest(create_test_record(type="crosswalk")))

        self.assertNotIn("Schemas", html)
        self.assertIn("<h3>Crosswalks</h3>", html)

    def test_type_match_case_insensitive(self):
        html = self.renderer.render(_digest(create_test_record(type="SCHEMA")))

        self.assertIn("<h3>Schemas</h3>", html)

    def test_other_types_not_listed(self):
        html = self.renderer.render(_digest(create_test_record(type="library")))

        self.assertNotIn("<h3>", html)
        self.assertNotIn("<li>", html)

    def test_items_keep_sorted_order(self):
        uris = ["https://example.org/c", "https://example.org/a", "https://example.org/b"]
        html = self.renderer.render(_digest(*[create_test_record(uri=u, type="schema") for u in uris]))

        positions = [html.index(f'href="{u}?env=staging"') for u in sorted(uris)]
        self.assertEqual(positions, sorted(positions))

    def test_render_is_deterministic(self):
        digest = _digest(
            create_test_record(uri="https://example.org/a", type="schema"),
            create_test_record(uri="https://example.org/b", type="crosswalk"),
        )

        self.assertEqual(self.renderer.render(digest), self.renderer.render(digest))


class TestValidateSections(unittest.TestCase):
    def test_default_sections_valid(self):
        validate_sections(DIGEST_SECTIONS)

    def test_mismatched_application_raises(self):
        sections = (DigestSection("Code lists", Application.DATAMODEL, ResourceType.CODELIST),)

        with self.assertRaises(UnknownResourceTypeError):
            validate_sections(sections)


if __name__ == "__main__":
    unittest.main()
