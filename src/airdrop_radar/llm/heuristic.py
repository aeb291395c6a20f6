"""Deterministic keyword-based airdrop analysis.

Used whenever the inference service is not configured or cannot give a usable
answer. The scoring works on the lower-cased corpus:

- every occurrence of a direct airdrop indicator adds 3
- every occurrence of a category keyword adds 2
- every occurrence of an action keyword adds 1

and the total is clamped to [0, 10]. Categories are checked in CATEGORY_KEYWORDS
order and the last one with a match is selected. Narrative fields are picked
from fixed Bengali templates by the selected category and the distinct
keywords that matched.
"""

import re
from dataclasses import dataclass
from typing import Callable

from .schema import (
    AnalysisResult,
    GENERAL_CATEGORY,
    MAX_ENTITIES,
    OPPORTUNITY_THRESHOLD,
    TIMELINE_IMMEDIATE,
    TIMELINE_MONTH,
    TIMELINE_QUARTER,
    TIMELINE_UNCERTAIN,
    TIMELINE_WEEK,
    clamp_score,
)

AIRDROP_WEIGHT = 3
CATEGORY_WEIGHT = 2
ACTION_WEIGHT = 1

HIGH_CONFIDENCE_SCORE = 7
HIGH_POTENTIAL_SCORE = 8

# Checked in this order; the last category with a match wins
CATEGORY_KEYWORDS = {
    "layer1_layer2": ["layer 1", "layer 2", "l1", "l2", "blockchain", "mainnet", "scaling", "rollup", "sidechain"],
    "defi": ["defi", "dex", "swap", "liquidity", "yield", "farming", "staking", "lending", "protocol"],
    "nft": ["nft", "mint", "collection", "pfp", "avatar", "opensea", "metadata", "rare"],
    "ai_ml": ["ai", "artificial intelligence", "machine learning", "ml", "neural", "gpt", "llm", "agent"],
    "gaming": ["gaming", "play-to-earn", "p2e", "metaverse", "gamefi", "rpg", "mmorpg"],
    "testnet": ["testnet", "alpha", "beta", "sandbox", "devnet", "preview", "test network"],
    "quest": ["quest", "task", "mission", "challenge", "bounty", "galxe", "zealy", "crew3"],
    "fundraising": ["funding", "raise", "seed", "series a", "ico", "ido", "ieo", "presale", "round"],
    "points": ["points", "farming", "rewards", "earn", "accumulate", "multiplier", "boost"],
    "crosschain": ["bridge", "cross-chain", "multichain", "interoperability", "wrapped", "portal"],
    "privacy": ["privacy", "anonymous", "zero-knowledge", "zk", "private", "encryption"],
    "infrastructure": ["oracle", "rpc", "api", "indexer", "infrastructure", "node", "validator"],
}

CATEGORY_NAMES = {
    "layer1_layer2": "Layer 1/Layer 2",
    "defi": "DeFi",
    "nft": "NFT",
    "ai_ml": "AI/ML",
    "gaming": "Gaming/Metaverse",
    "testnet": "TestNet",
    "quest": "Quest",
    "fundraising": "Fundraising",
    "points": "Points/Farming",
    "crosschain": "Cross-chain/Bridge",
    "privacy": "Privacy/Security",
    "infrastructure": "Infrastructure",
}

AIRDROP_KEYWORDS = [
    "airdrop", "drop", "token distribution", "free tokens", "claim",
    "whitelist", "early access", "early adopter", "genesis user",
    "retroactive", "snapshot", "eligibility", "allocation",
]

ACTION_KEYWORDS = [
    "join", "participate", "follow", "retweet", "like", "share",
    "connect wallet", "mint", "stake", "provide liquidity", "swap",
    "bridge", "deposit", "claim", "register", "sign up", "invite",
    "complete tasks", "verify", "kyc", "discord", "telegram",
]

HIGH_RISK_PHRASES = ["guaranteed", "100%", "quick rich", "pump"]
LOW_RISK_SIGNALS = ["testnet", "beta", "official"]

OPPORTUNITY_TYPES = {
    "testnet": "TestNet Rewards",
    "nft": "NFT Mint",
    "defi": "DeFi Farming",
    "quest": "Quest Program",
    "points": "Points Farming",
    "fundraising": "Token Launch",
}
DEFAULT_OPPORTUNITY_TYPE = "Early Access"
NO_OPPORTUNITY_TYPE = "General Information"

ENTITY_RE = re.compile(r"[@#]([A-Za-z0-9_]+)")


@dataclass(frozen=True)
class KeywordMatches:
    """Which keywords of one set appeared, and how often in total."""
    keywords: tuple[str, ...] = ()
    hits: int = 0

    def __bool__(self) -> bool:
        return self.hits > 0

    def __contains__(self, keyword: str) -> bool:
        return keyword in self.keywords


def match_keywords(text: str, keywords: list[str]) -> KeywordMatches:
    counts = [(keyword, text.count(keyword)) for keyword in keywords]
    return KeywordMatches(
        keywords=tuple(keyword for keyword, count in counts if count),
        hits=sum(count for _, count in counts),
    )


@dataclass(frozen=True)
class Signals:
    """Everything the templates need to know about one corpus."""
    text: str
    airdrop: KeywordMatches
    categories: dict[str, KeywordMatches]
    actions: KeywordMatches
    entities: tuple[str, ...]
    category_key: str | None
    score: int

    @property
    def category(self) -> str:
        return CATEGORY_NAMES.get(self.category_key, GENERAL_CATEGORY)

    @property
    def has_opportunity(self) -> bool:
        return self.score >= OPPORTUNITY_THRESHOLD

    def category_has(self, category_key: str, *keywords: str) -> bool:
        matches = self.categories.get(category_key, KeywordMatches())
        return any(keyword in matches for keyword in keywords)


def extract_entities(corpus: str) -> list[str]:
    """@handles and #tags in document order, sigil stripped, longer than 2 chars.

    Repeats are kept; only the first MAX_ENTITIES survive.
    """
    names = [name for name in ENTITY_RE.findall(corpus) if len(name) > 2]
    return names[:MAX_ENTITIES]


def collect_signals(corpus: str) -> Signals:
    text = corpus.lower()

    airdrop = match_keywords(text, AIRDROP_KEYWORDS)
    actions = match_keywords(text, ACTION_KEYWORDS)

    categories = {}
    category_key = None
    for key, keywords in CATEGORY_KEYWORDS.items():
        matches = match_keywords(text, keywords)
        if matches:
            categories[key] = matches
            category_key = key

    score = (
        airdrop.hits * AIRDROP_WEIGHT
        + sum(m.hits for m in categories.values()) * CATEGORY_WEIGHT
        + actions.hits * ACTION_WEIGHT
    )

    return Signals(
        text=text,
        airdrop=airdrop,
        categories=categories,
        actions=actions,
        entities=tuple(extract_entities(corpus)),
        category_key=category_key,
        score=clamp_score(score),
    )


# --- Field builders ---

def assess_risk(signals: Signals) -> str:
    text = signals.text
    if any(phrase in text for phrase in HIGH_RISK_PHRASES):
        return "high"
    if signals.entities and (any(s in text for s in LOW_RISK_SIGNALS) or signals.airdrop):
        return "low"
    return "medium"


def estimate_timeline(signals: Signals) -> str:
    text = signals.text
    if any(word in text for word in ("now", "today", "live")):
        return TIMELINE_IMMEDIATE
    if "week" in text or "7 days" in text:
        return TIMELINE_WEEK
    if "month" in text or "30 days" in text:
        return TIMELINE_MONTH
    if any(word in text for word in ("quarter", "q1", "q2")):
        return TIMELINE_QUARTER
    if signals.airdrop or len(signals.actions.keywords) >= 3:
        return TIMELINE_MONTH
    return TIMELINE_UNCERTAIN


def confidence_for(score: int) -> str:
    if score >= HIGH_CONFIDENCE_SCORE:
        return "high"
    if score >= OPPORTUNITY_THRESHOLD:
        return "medium"
    return "low"


def opportunity_type_for(category_key: str | None) -> str:
    if category_key is None:
        return NO_OPPORTUNITY_TYPE
    return OPPORTUNITY_TYPES.get(category_key, DEFAULT_OPPORTUNITY_TYPE)


Rule = tuple[Callable[[Signals], bool], str]

KEY_POINT_RULES: list[Rule] = [
    (lambda s: s.category_key == "layer1_layer2", "নতুন ব্লকচেইন নেটওয়ার্ক লঞ্চ হচ্ছে"),
    (lambda s: s.category_key == "defi", "DeFi প্রোটোকলে লিকুইডিটি প্রদানের সুযোগ"),
    (lambda s: s.category_key == "nft", "NFT মিন্টিং বা কালেকশনের সুযোগ"),
    (lambda s: s.category_key == "ai_ml", "AI ভিত্তিক প্রজেক্টে আর্লি এক্সেস"),
    (lambda s: s.category_key == "gaming", "গেমিং এবং Play-to-Earn সুযোগ"),
    (lambda s: s.category_has("testnet", "testnet"), "টেস্টনেট এক্টিভিটির সুযোগ রয়েছে"),
    (lambda s: "airdrop" in s.airdrop, "এয়ারড্রপের সরাসরি উল্লেখ পাওয়া গেছে"),
    (lambda s: "early access" in s.airdrop, "আর্লি এক্সেস প্রোগ্রাম উপলব্ধ"),
    (
        lambda s: s.category_has("points", "farming") or "stake" in s.actions,
        "ফার্মিং বা স্টেকিং রিওয়ার্ড",
    ),
    (lambda s: s.category_has("quest", "quest", "task"), "কোয়েস্ট বা টাস্ক কমপ্লিট করার সুযোগ"),
]
KEY_POINT_FALLBACK = "সাধারণ ক্রিপ্টো তথ্য ও আপডেট"

ACTION_STEP_RULES: list[Rule] = [
    (lambda s: s.category_key == "testnet", "টেস্টনেট এ একাউন্ট তৈরি করুন এবং ট্রানজেকশন করুন"),
    (
        lambda s: s.category_key == "nft" or "whitelist" in s.airdrop or "early access" in s.airdrop,
        "হোয়াইটলিস্টের জন্য রেজিস্ট্রেশন করুন",
    ),
    (lambda s: s.category_key == "defi", "প্রোটোকলে লিকুইডিটি প্রদান করুন"),
    (lambda s: s.category_key == "quest", "সকল কোয়েস্ট টাস্ক সম্পূর্ণ করুন"),
    (lambda s: "follow" in s.actions, "সোশ্যাল মিডিয়া চ্যানেল ফলো করুন"),
    (lambda s: "connect wallet" in s.actions, "ওয়ালেট কানেক্ট করুন এবং ভেরিফাই করুন"),
    (
        lambda s: "discord" in s.actions or "telegram" in s.actions,
        "কমিউনিটি চ্যানেলে যোগ দিন এবং সক্রিয় থাকুন",
    ),
    (lambda s: "invite" in s.actions, "রেফারেল প্রোগ্রামে অংশগ্রহণ করুন"),
]
ACTION_STEP_FALLBACK = "প্রজেক্টের অফিসিয়াল চ্যানেল চেক করুন এবং নিয়মিত আপডেট ফলো করুন"
ACTION_STEP_REVIEW = "প্রজেক্টের রোডম্যাপ এবং টোকেনোমিক্স যাচাই করুন"
NO_ACTION_NEEDED = "আপাতত কোনো নির্দিষ্ট কর্মপ্রণালী প্রয়োজন নেই"


def apply_rules(rules: list[Rule], signals: Signals, fallback: str) -> list[str]:
    fired = [text for predicate, text in rules if predicate(signals)]
    return fired or [fallback]


def build_key_points(signals: Signals) -> list[str]:
    return apply_rules(KEY_POINT_RULES, signals, KEY_POINT_FALLBACK)


def build_action_steps(signals: Signals) -> list[str]:
    if not signals.has_opportunity:
        return [NO_ACTION_NEEDED]
    return apply_rules(ACTION_STEP_RULES, signals, ACTION_STEP_FALLBACK) + [ACTION_STEP_REVIEW]


def build_additional_context(signals: Signals, risk_level: str) -> str:
    if risk_level == "high":
        return "সতর্কতা: উচ্চ ঝুঁকিপূর্ণ, যাচাই করে এগিয়ে চলুন"
    if signals.score >= HIGH_POTENTIAL_SCORE:
        return "উচ্চ সম্ভাবনাময় সুযোগ, দ্রুত পদক্ষেপ নিন"
    if signals.category_key in ("testnet", "quest"):
        return "সক্রিয় অংশগ্রহণ প্রয়োজন, নিয়মিত ফলো আপ করুন"
    return "নিয়মিত আপডেটের জন্য প্রজেক্ট ফলো করুন"


def build_summaries(signals: Signals) -> tuple[str, str]:
    """Return (content_summary, summary)."""
    if not signals.has_opportunity:
        return (
            "এই পোস্টে সাধারণ ক্রিপ্টো/ওয়েব৩ তথ্য রয়েছে",
            "এই পোস্টে এয়ারড্রপের সরাসরি সম্ভাবনা কম। তবে ভবিষ্যতে সুযোগ তৈরি হতে পারে।",
        )

    strength = "উচ্চ" if signals.score >= HIGH_CONFIDENCE_SCORE else "মাঝারি"
    if signals.airdrop:
        reason = "সরাসরি এয়ারড্রপের উল্লেখ পাওয়া গেছে।"
    else:
        reason = "আর্লি পার্টিসিপেশনের মাধ্যমে রিওয়ার্ড পাওয়ার সুযোগ আছে।"
    return (
        f"এই পোস্টে {signals.category} সম্পর্কিত একটি প্রজেক্টের তথ্য রয়েছে",
        f"এই প্রজেক্টে এয়ারড্রপের {strength} সম্ভাবনা রয়েছে। {reason}",
    )


def heuristic_analysis(corpus: str) -> AnalysisResult:
    """Analyze a corpus with the keyword heuristic. Pure and deterministic."""
    signals = collect_signals(corpus)
    risk_level = assess_risk(signals)
    content_summary, summary = build_summaries(signals)

    return AnalysisResult(
        content_summary=content_summary,
        category=signals.category,
        potential_score=signals.score,
        has_opportunity=signals.has_opportunity,
        summary=summary,
        key_points=build_key_points(signals),
        action_steps=build_action_steps(signals),
        opportunity_type=opportunity_type_for(signals.category_key),
        mentioned_entities=signals.entities,
        risk_level=risk_level,
        confidence_level=confidence_for(signals.score),
        estimated_timeline=estimate_timeline(signals),
        additional_context=build_additional_context(signals, risk_level),
    )


class LocalHeuristicStrategy:
    """Analysis strategy backed by heuristic_analysis()."""

    name = "local"

    async def analyze(self, corpus: str) -> AnalysisResult:
        return heuristic_analysis(corpus)
