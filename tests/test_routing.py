"""Tests for archive_upload/routing.py"""

from pathlib import Path

import pytest

from archive_upload.models import FileRecord
from archive_upload.routing import (
    DEFAULT_RULES,
    BucketId,
    Classifier,
    RoutingRules,
    Skip,
    Upload,
    build_rule_table,
    classify,
)

ROOT = Path("/data/archive")


def _record(relative_path: str, root: Path = ROOT) -> FileRecord:
    return FileRecord.from_relative(root, relative_path)


class TestSkipRules:
    """Skip rules run before any upload routing"""

    @pytest.mark.parametrize("rel", ["README", "clients/notes", "a/b/c/Makefile", ".DS_Store"])
    def test_no_extension_skipped_regardless_of_folder(self, rel):
        """Files without an extension are skipped even under a people folder hint"""
        assert classify(_record(rel)) == Skip("no_extension")

    def test_no_extension_routed_when_toggle_disabled(self):
        """With the toggle off, extension-less files fall through to the default"""
        rules = RoutingRules(skip_no_extension=False)
        assert classify(_record("misc/README"), rules) == Upload(BucketId.PEOPLE)

    @pytest.mark.parametrize("rel,ext", [("cache/x.tmp", ".tmp"), ("Thumbs.DB", ".db")])
    def test_skip_extensions(self, rel, ext):
        """Noise extensions are skipped with the extension in the reason"""
        assert classify(_record(rel)) == Skip(f"skip_ext:{ext}")

    def test_skip_extension_beats_folder_hint(self):
        """A skip extension under clients/ is still skipped"""
        assert classify(_record("clients/cache.tmp")) == Skip("skip_ext:.tmp")


class TestFolderHints:
    """People folder hints override type routing"""

    def test_pdf_under_clients_goes_to_people(self):
        """A PDF would go to Product but the clients/ hint wins"""
        assert classify(_record("clients/contract.pdf")) == Upload(BucketId.PEOPLE)

    @pytest.mark.parametrize(
        "rel", ["Clients/photo.JPG", "work/PROSPECTS/deck.psd", "2021/client-list.mp4"]
    )
    def test_hint_match_is_case_insensitive(self, rel):
        """Hints match any part of the relative path, ignoring case"""
        assert classify(_record(rel)) == Upload(BucketId.PEOPLE)

    def test_hint_in_root_path_is_ignored(self):
        """A hint that only appears in the absolute root does not affect routing"""
        record = _record("photos/beach.jpg", root=Path("/mnt/clients_backup"))
        assert classify(record) == Upload(BucketId.PERFORMANCE)


class TestTypeRouting:
    """Extension routing precedence"""

    @pytest.mark.parametrize(
        "rel,bucket",
        [
            ("reports/summary.pdf", BucketId.PRODUCT),
            ("shots/a.JPEG", BucketId.PERFORMANCE),
            ("shots/clip.mov", BucketId.PERFORMANCE),
            ("design/logo.psd", BucketId.PRODUCT),
            ("backup/site.zip", BucketId.PRODUCT),
            ("hr/roster.xlsx", BucketId.PEOPLE),
            ("mail/thread.eml", BucketId.PEOPLE),
            ("code/script.py", BucketId.PEOPLE),
        ],
    )
    def test_extension_routes(self, rel, bucket):
        """Each type class routes to its bucket; unknown types default to People"""
        assert classify(_record(rel)) == Upload(bucket)

    def test_overlapping_sets_resolve_by_order(self):
        """An extension in two sets takes the earlier rule's bucket"""
        rules = RoutingRules(doc_exts=DEFAULT_RULES.doc_exts | {".pdf"})
        assert classify(_record("x/file.pdf"), rules) == Upload(BucketId.PRODUCT)

    def test_media_before_creative_when_overlapping(self):
        """Media beats creative-source when both list the extension"""
        rules = RoutingRules(creative_source_exts=DEFAULT_RULES.creative_source_exts | {".png"})
        assert classify(_record("x/file.png"), rules) == Upload(BucketId.PERFORMANCE)


class TestClassifier:
    """Classifier object behaviour"""

    def test_classification_is_deterministic(self):
        """Calling classify twice yields identical decisions"""
        classifier = Classifier()
        record = _record("reports/q1.pdf")
        assert classifier.classify(record) == classifier.classify(record)
        assert classifier(record) == classifier.classify(record)

    def test_rule_table_ends_with_catch_all(self):
        """The last rule matches anything, so classification is total"""
        table = build_rule_table(DEFAULT_RULES)
        assert table[-1].name == "default"
        assert table[-1].matches("", "")
        assert [rule.name for rule in table][:3] == [
            "no_extension",
            "skip_ext",
            "people_folder_hint",
        ]
