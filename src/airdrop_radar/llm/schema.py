"""Canonical analysis schema shared by the remote and local analyzers."""

import json
import math
from dataclasses import dataclass, fields
from typing import Any

from ..errors import MalformedResponseError

CATEGORIES = (
    "Layer 1/Layer 2",
    "DeFi",
    "NFT",
    "AI/ML",
    "Gaming/Metaverse",
    "TestNet",
    "Quest",
    "Fundraising",
    "Points/Farming",
    "Cross-chain/Bridge",
    "Privacy/Security",
    "Infrastructure",
    "Social/Creator Economy",
    "Governance",
)
GENERAL_CATEGORY = "General"

LEVELS = ("none", "low", "medium", "high")

TIMELINE_IMMEDIATE = "immediate"
TIMELINE_WEEK = "1 week"
TIMELINE_MONTH = "1 month"
TIMELINE_QUARTER = "3 months"
TIMELINE_UNCERTAIN = "uncertain"
TIMELINES = (TIMELINE_IMMEDIATE, TIMELINE_WEEK, TIMELINE_MONTH, TIMELINE_QUARTER, TIMELINE_UNCERTAIN)

MAX_SCORE = 10
OPPORTUNITY_THRESHOLD = 4
MAX_ENTITIES = 5


def clamp_score(value: int) -> int:
    return max(0, min(MAX_SCORE, int(value)))


@dataclass(frozen=True)
class AnalysisResult:
    """Opportunity analysis of a corpus. Immutable once built."""
    content_summary: str
    category: str
    potential_score: int
    has_opportunity: bool
    summary: str
    key_points: tuple[str, ...]
    action_steps: tuple[str, ...]
    opportunity_type: str
    mentioned_entities: tuple[str, ...]
    risk_level: str
    confidence_level: str
    estimated_timeline: str
    additional_context: str

    def __post_init__(self):
        object.__setattr__(self, "potential_score", clamp_score(self.potential_score))
        for name in ("key_points", "action_steps", "mentioned_entities"):
            object.__setattr__(self, name, tuple(getattr(self, name)))

    def to_dict(self) -> dict:
        data = {f.name: getattr(self, f.name) for f in fields(self)}
        for name in ("key_points", "action_steps", "mentioned_entities"):
            data[name] = list(data[name])
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "AnalysisResult":
        """Rebuild a result stored with to_dict()."""
        return cls(**{name: data[name] for name in CANONICAL_KEYS})


CANONICAL_KEYS = tuple(f.name for f in fields(AnalysisResult))


EMPTY_ANALYSIS = AnalysisResult(
    content_summary="কোনো কন্টেন্ট বিশ্লেষণ করার জন্য পাওয়া যায়নি।",
    category=GENERAL_CATEGORY,
    potential_score=0,
    has_opportunity=False,
    summary="কোনো কন্টেন্ট বিশ্লেষণ করার জন্য পাওয়া যায়নি।",
    key_points=("কন্টেন্ট খালি বা অনুপস্থিত",),
    action_steps=("বৈধ টুইটার URL প্রদান করুন",),
    opportunity_type="None",
    mentioned_entities=(),
    risk_level="none",
    confidence_level="none",
    estimated_timeline=TIMELINE_UNCERTAIN,
    additional_context="কোনো তথ্য নেই",
)


# --- Parsing remote payloads ---

def _string(data: dict, key: str) -> str:
    value = data[key]
    if not isinstance(value, str):
        raise MalformedResponseError(f"'{key}' must be a string, got {type(value).__name__}")
    return value.strip()


def _string_list(data: dict, key: str) -> list[str]:
    value = data[key]
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise MalformedResponseError(f"'{key}' must be a list of strings")
    return [item.strip() for item in value]


def _level(data: dict, key: str) -> str:
    value = _string(data, key).lower()
    if value not in LEVELS:
        raise MalformedResponseError(f"'{key}' must be one of {', '.join(LEVELS)}, got {value!r}")
    return value


def _score(data: dict) -> int:
    value = data["potential_score"]
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool):
        raise MalformedResponseError("'potential_score' must be a number")
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError as e:
            raise MalformedResponseError(f"'potential_score' is not numeric: {value!r}") from e
    if not isinstance(value, (int, float)):
        raise MalformedResponseError("'potential_score' must be a number")
    # json.loads accepts NaN and Infinity
    if not math.isfinite(value):
        raise MalformedResponseError(f"'potential_score' is not finite: {value!r}")
    return clamp_score(round(value))


def _category(value: str) -> str:
    for category in CATEGORIES:
        if category.lower() == value.lower():
            return category
    return GENERAL_CATEGORY


def _timeline(value: str) -> str:
    value = value.lower()
    if value not in TIMELINES:
        raise MalformedResponseError(f"'estimated_timeline' must be one of {', '.join(TIMELINES)}")
    return value


def validate_analysis(data: Any) -> AnalysisResult:
    """Build an AnalysisResult from a decoded payload.

    The payload must be an object with exactly the canonical keys. Raises
    MalformedResponseError otherwise.
    """
    if not isinstance(data, dict):
        raise MalformedResponseError(f"Expected a JSON object, got {type(data).__name__}")

    keys = set(data)
    expected = set(CANONICAL_KEYS)
    if keys != expected:
        missing = sorted(expected - keys)
        extra = sorted(keys - expected)
        raise MalformedResponseError(f"Key mismatch (missing={missing}, unexpected={extra})")

    score = _score(data)
    flag = data["has_opportunity"]
    has_opportunity = flag if isinstance(flag, bool) else score >= OPPORTUNITY_THRESHOLD

    return AnalysisResult(
        content_summary=_string(data, "content_summary"),
        category=_category(_string(data, "category")),
        potential_score=score,
        has_opportunity=has_opportunity,
        summary=_string(data, "summary"),
        key_points=_string_list(data, "key_points"),
        action_steps=_string_list(data, "action_steps"),
        opportunity_type=_string(data, "opportunity_type"),
        mentioned_entities=_string_list(data, "mentioned_entities")[:MAX_ENTITIES],
        risk_level=_level(data, "risk_level"),
        confidence_level=_level(data, "confidence_level"),
        estimated_timeline=_timeline(_string(data, "estimated_timeline")),
        additional_context=_string(data, "additional_context"),
    )


def parse_analysis(text: str | None) -> AnalysisResult:
    """Parse a raw response body into an AnalysisResult."""
    if not text or not text.strip():
        raise MalformedResponseError("Empty response")

    try:
        data = json.loads(text.strip())
    except json.JSONDecodeError as e:
        raise MalformedResponseError(f"Response is not valid JSON: {e}") from e

    return validate_analysis(data)
