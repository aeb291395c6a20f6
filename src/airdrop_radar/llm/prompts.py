"""LLM prompt templates."""

SYSTEM_PROMPT = (
    "You are an expert crypto airdrop analyst. Analyze content for potential airdrop "
    "opportunities and provide responses in Bengali language. Return only valid JSON."
)


ANALYZE_PROMPT = """You are an expert crypto/web3 analyst specializing in identifying airdrop opportunities, new blockchain projects, and early-stage investment opportunities. Analyze the following content comprehensively.

CONTENT TO ANALYZE:
{content}

ANALYSIS FRAMEWORK:
First, provide a general summary of what this content is about, then conduct detailed airdrop/opportunity analysis.

DETECTION CATEGORIES:
{categories}

SCORING CRITERIA (0-10, additive, capped at 10):
- Direct airdrop mention: +3 points
- Testnet/beta access: +2 points
- New project launch: +2 points
- Early access program: +2 points
- Points/farming system: +2 points
- Quest/task opportunities: +1 point
- Fundraising news: +1 point
- Partnership announcements: +1 point

INSTRUCTIONS:
1. First, provide a brief summary of the content in Bengali
2. Identify the project category (use one of the category names above exactly, or "General")
3. Rate airdrop potential (0-10) based on the scoring criteria
4. List specific actionable opportunities
5. Return ONLY valid JSON in this exact format:

{{
  "content_summary": "এই পোস্টে [বিষয়ের সংক্ষিপ্ত বর্ণনা]",
  "category": "TestNet",
  "potential_score": 8,
  "has_opportunity": true,
  "summary": "এই প্রজেক্টে এয়ারড্রপের উচ্চ সম্ভাবনা রয়েছে কারণ [কারণ]",
  "key_points": [
    "নতুন Layer 2 সলিউশন লঞ্চ হচ্ছে",
    "টেস্টনেট পার্টিসিপেশনের সুযোগ"
  ],
  "action_steps": [
    "প্রজেক্টের টেস্টনেট ব্যবহার করুন",
    "কমিউনিটিতে অ্যাক্টিভ থাকুন"
  ],
  "opportunity_type": "TestNet Rewards/Early Access/Quest Program/Farming/NFT Mint/Token Launch",
  "mentioned_entities": ["ProjectName1", "ProjectName2"],
  "risk_level": "low|medium|high",
  "confidence_level": "low|medium|high",
  "estimated_timeline": "immediate|1 week|1 month|3 months|uncertain",
  "additional_context": "অতিরিক্ত গুরুত্বপূর্ণ তথ্য বা সতর্কতা"
}}

IMPORTANT:
- If content is about general market discussion without specific opportunities, set has_opportunity to false
- For high-value opportunities (fundraising, major launches), increase potential_score
- List at most 5 mentioned_entities
- risk_level, confidence_level and estimated_timeline must use the English values shown above
- Provide actionable, specific steps rather than generic advice

Return ONLY the JSON object with exactly these keys, no additional text."""


CATEGORY_DESCRIPTIONS = {
    "Layer 1/Layer 2": "New blockchains, scaling solutions, rollups",
    "DeFi": "DEXs, lending protocols, yield farming, liquidity mining, staking",
    "NFT": "Mint opportunities, NFT drops, gaming NFTs, utility NFTs",
    "AI/ML": "AI-based crypto projects, machine learning tokens, AI agents",
    "Gaming/Metaverse": "Play-to-earn, gaming tokens, virtual world projects",
    "TestNet": "Alpha/beta testing, testnet rewards, early access programs",
    "Quest": "Task-based rewards, social media quests, community challenges",
    "Fundraising": "ICO, IDO, IEO, seed rounds, venture funding announcements",
    "Points/Farming": "Point accumulation systems, farming opportunities, reward programs",
    "Cross-chain/Bridge": "Interoperability projects, bridge protocols, multi-chain solutions",
    "Privacy/Security": "Privacy coins, security-focused projects, encryption protocols",
    "Infrastructure": "Oracles, storage solutions, indexing protocols, middleware",
    "Social/Creator Economy": "Creator tokens, social tokens, community platforms",
    "Governance": "DAO launches, governance tokens, voting mechanisms",
}
