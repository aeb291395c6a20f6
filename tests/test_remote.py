"""Tests for llm/remote.py using a fake chat-completions client."""
import asyncio
import json
from types import SimpleNamespace

import httpx
import openai
import pytest

from airdrop_radar.errors import MalformedResponseError, RemoteAnalysisError
from airdrop_radar.llm.analyzer import OpportunityAnalyzer
from airdrop_radar.llm.heuristic import heuristic_analysis
from airdrop_radar.llm.prompts import SYSTEM_PROMPT
from airdrop_radar.llm.remote import AnalyzerSettings, RemoteAnalysisStrategy, build_messages
from airdrop_radar.llm.schema import CATEGORIES, EMPTY_ANALYSIS

CORPUS = "Join our testnet airdrop now, connect wallet and claim"


class FakeCompletions:
    def __init__(self, content=None, error=None, delay=0.0):
        self.content = content
        self.error = error
        self.delay = delay
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def fake_client(**kwargs):
    completions = FakeCompletions(**kwargs)
    return SimpleNamespace(chat=SimpleNamespace(completions=completions)), completions


def strategy(client, **settings):
    return RemoteAnalysisStrategy(AnalyzerSettings(api_key="sk-test", **settings), client=client)


def valid_content():
    data = EMPTY_ANALYSIS.to_dict()
    data.update(category="TestNet", potential_score=8, has_opportunity=True, risk_level="low")
    return json.dumps(data, ensure_ascii=False)


class TestRequest:
    @pytest.mark.asyncio
    async def test_request_parameters(self):
        client, completions = fake_client(content=valid_content())
        await strategy(client, model="some/model").analyze(CORPUS)

        call = completions.calls[0]
        assert call["model"] == "some/model"
        assert call["temperature"] == 0.3
        assert call["max_tokens"] == 1200
        system, user = call["messages"]
        assert system == {"role": "system", "content": SYSTEM_PROMPT}
        assert user["role"] == "user"
        assert CORPUS in user["content"]

    def test_prompt_lists_every_category(self):
        prompt = build_messages("gm")[1]["content"]
        for name in CATEGORIES:
            assert name in prompt
        assert "potential_score" in prompt

    @pytest.mark.asyncio
    async def test_single_call_per_analysis(self):
        client, completions = fake_client(content="nope")
        with pytest.raises(MalformedResponseError):
            await strategy(client).analyze(CORPUS)
        assert len(completions.calls) == 1


class TestResponse:
    @pytest.mark.asyncio
    async def test_valid_response(self):
        client, _ = fake_client(content=valid_content())
        result = await strategy(client).analyze(CORPUS)

        assert result.category == "TestNet"
        assert result.potential_score == 8
        assert result.risk_level == "low"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("content", [None, "", "I think this is an airdrop", '{"category": "DeFi"}'])
    async def test_malformed_response(self, content):
        client, _ = fake_client(content=content)
        with pytest.raises(MalformedResponseError):
            await strategy(client).analyze(CORPUS)

    @pytest.mark.asyncio
    async def test_no_choices(self):
        client, completions = fake_client()
        async def create(**kwargs):
            return SimpleNamespace(choices=[])
        completions.create = create

        with pytest.raises(RemoteAnalysisError):
            await strategy(client).analyze(CORPUS)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("score", ["NaN", "Infinity", '"nan"'])
    async def test_non_finite_score_falls_back_to_local(self, score):
        content = valid_content().replace('"potential_score": 8', f'"potential_score": {score}')
        client, _ = fake_client(content=content)
        analyzer = OpportunityAnalyzer(primary=strategy(client))

        assert await analyzer.analyze(CORPUS) == heuristic_analysis(CORPUS)


class TestFailures:
    @pytest.mark.asyncio
    async def test_timeout(self):
        client, _ = fake_client(content=valid_content(), delay=1.0)
        with pytest.raises(RemoteAnalysisError, match="timed out"):
            await strategy(client, timeout=0.01).analyze(CORPUS)

    @pytest.mark.asyncio
    async def test_connection_error(self):
        request = httpx.Request("POST", "https://openrouter.ai/api/v1/chat/completions")
        client, _ = fake_client(error=openai.APIConnectionError(request=request))
        with pytest.raises(RemoteAnalysisError):
            await strategy(client).analyze(CORPUS)

    @pytest.mark.asyncio
    async def test_error_status(self):
        request = httpx.Request("POST", "https://openrouter.ai/api/v1/chat/completions")
        response = httpx.Response(429, request=request)
        error = openai.RateLimitError("rate limited", response=response, body=None)
        client, _ = fake_client(error=error)
        with pytest.raises(RemoteAnalysisError):
            await strategy(client).analyze(CORPUS)


class TestConstruction:
    def test_requires_key(self):
        with pytest.raises(ValueError):
            RemoteAnalysisStrategy(AnalyzerSettings(api_key=None))

    def test_client_never_retries(self):
        remote = RemoteAnalysisStrategy(AnalyzerSettings(api_key="sk-test", base_url="https://example.test/v1"))
        assert remote.client.max_retries == 0
        assert str(remote.client.base_url).startswith("https://example.test/v1")
