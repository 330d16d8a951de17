"""
Routing rules: decide which bucket a file goes to, or why it is skipped.

Rules are an ordered table of (predicate, decision) pairs evaluated in a single
pass; the first match wins and the last rule always matches, so every file gets
exactly one decision. Edit the extension sets in ``RoutingRules`` to change what
goes where.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Union

from .models import FileRecord


class BucketId(Enum):
    """Logical upload destinations; each maps to a backend bucket name in config."""

    PEOPLE = "people"
    PERFORMANCE = "performance"
    PRODUCT = "product"


@dataclass(frozen=True)
class Upload:
    bucket: BucketId


@dataclass(frozen=True)
class Skip:
    reason: str


RoutingDecision = Union[Upload, Skip]


IMAGE_EXTS = frozenset(
    {".jpg", ".jpeg", ".png", ".webp", ".gif", ".tif", ".tiff", ".heic", ".heif", ".bmp"}
)
VIDEO_EXTS = frozenset({".mp4", ".mov", ".m4v", ".avi", ".mkv", ".webm"})
PDF_EXTS = frozenset({".pdf"})
DOC_EXTS = frozenset(
    {
        ".doc", ".docx", ".rtf", ".txt",
        ".xls", ".xlsx", ".csv", ".ods",
        ".ppt", ".pptx", ".thmx",
        ".msg", ".eml",
        ".pub",
    }
)
CREATIVE_SOURCE_EXTS = frozenset(
    {".psd", ".ai", ".indd", ".dwg", ".dxf", ".zip", ".rar", ".7z"}
)
SKIP_EXTS = frozenset({".ds_store", ".tmp", ".db"})
PEOPLE_FOLDER_HINTS = ("client", "clients", "prospect", "prospects")


@dataclass(frozen=True)
class RoutingRules:  # pylint: disable=too-many-instance-attributes
    """The fixed rule tables. Extensions are lower-case and include the dot."""

    skip_no_extension: bool = True
    skip_exts: frozenset = SKIP_EXTS
    people_folder_hints: tuple = PEOPLE_FOLDER_HINTS
    pdf_exts: frozenset = PDF_EXTS
    media_exts: frozenset = IMAGE_EXTS | VIDEO_EXTS
    creative_source_exts: frozenset = CREATIVE_SOURCE_EXTS
    doc_exts: frozenset = DOC_EXTS


DEFAULT_RULES = RoutingRules()


@dataclass(frozen=True)
class Rule:
    """A named predicate and the decision it produces when it matches."""

    name: str
    matches: Callable[[str, str], bool]
    decide: Callable[[str], RoutingDecision]


def _upload_to(bucket: BucketId) -> Callable[[str], RoutingDecision]:
    decision = Upload(bucket)
    return lambda _ext: decision


def build_rule_table(rules: RoutingRules) -> tuple[Rule, ...]:
    """Return the ordered rule table. Order is part of the routing contract."""
    hints = tuple(hint.lower() for hint in rules.people_folder_hints)
    return (
        Rule(
            "no_extension",
            lambda ext, _rel: rules.skip_no_extension and not ext,
            lambda _ext: Skip("no_extension"),
        ),
        Rule(
            "skip_ext",
            lambda ext, _rel: ext in rules.skip_exts,
            lambda ext: Skip(f"skip_ext:{ext}"),
        ),
        Rule(
            "people_folder_hint",
            lambda _ext, rel: any(hint in rel for hint in hints),
            _upload_to(BucketId.PEOPLE),
        ),
        Rule("pdf", lambda ext, _rel: ext in rules.pdf_exts, _upload_to(BucketId.PRODUCT)),
        Rule("media", lambda ext, _rel: ext in rules.media_exts, _upload_to(BucketId.PERFORMANCE)),
        Rule(
            "creative_source",
            lambda ext, _rel: ext in rules.creative_source_exts,
            _upload_to(BucketId.PRODUCT),
        ),
        Rule("office_doc", lambda ext, _rel: ext in rules.doc_exts, _upload_to(BucketId.PEOPLE)),
        Rule("default", lambda _ext, _rel: True, _upload_to(BucketId.PEOPLE)),
    )


class Classifier:  # pylint: disable=too-few-public-methods
    """Evaluates the rule table against file records. Holds no state beyond the table."""

    def __init__(self, rules: RoutingRules = DEFAULT_RULES):
        self.rules = rules
        self.table = build_rule_table(rules)

    def __call__(self, record: FileRecord) -> RoutingDecision:
        return self.classify(record)

    def classify(self, record: FileRecord) -> RoutingDecision:
        """Return the decision of the first matching rule."""
        ext = record.extension
        # Hints are matched on the path below the root only.
        rel_lower = record.relative_path.lower()
        for rule in self.table:
            if rule.matches(ext, rel_lower):
                return rule.decide(ext)
        raise AssertionError("routing table has no catch-all rule")


_DEFAULT_CLASSIFIER = Classifier()


def classify(record: FileRecord, rules: RoutingRules | None = None) -> RoutingDecision:
    """Classify a file with the default rules, or with *rules* when given."""
    if rules is None:
        return _DEFAULT_CLASSIFIER.classify(record)
    return Classifier(rules).classify(record)
