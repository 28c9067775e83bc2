"""
Tests for the AI gateway client and solution generation
"""
import json

import httpx
import pytest

from techmate.core.errors import (
    GenerationError,
    MissingCredentialsError,
    PaymentRequiredError,
    RateLimitExceededError,
    ValidationError,
)
from techmate.services.ai_client import AIClient
from techmate.services.solution_service import (
    NOT_SPECIFIED,
    SOLUTION_SECTIONS,
    build_user_prompt,
    generate_solution,
)
from tests.conftest import FIVE_PART_SOLUTION


def make_client(handler, api_key="test-key"):
    return AIClient(
        base_url="https://gateway.test/v1",
        api_key=api_key,
        model="test-model",
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler))
    )


def completion(content):
    return httpx.Response(200, json={"choices": [{"message": {"role": "assistant", "content": content}}]})


@pytest.mark.asyncio
async def test_generate_solution_sends_prompts_and_returns_content():
    captured = {}

    def handler(request):
        captured["url"] = str(request.url)
        captured["auth"] = request.headers["Authorization"]
        captured["body"] = json.loads(request.content)
        return completion(FIVE_PART_SOLUTION)

    solution = await generate_solution(
        "motor faz ruído anómalo",
        machine_name="Torno CNC",
        machine_location="Pavilhão A",
        client=make_client(handler)
    )

    assert solution == FIVE_PART_SOLUTION
    assert captured["url"] == "https://gateway.test/v1/chat/completions"
    assert captured["auth"] == "Bearer test-key"
    body = captured["body"]
    assert body["model"] == "test-model"
    assert body["max_tokens"] == 2000
    system, user = body["messages"]
    assert system["role"] == "system"
    for section in SOLUTION_SECTIONS:
        assert section in system["content"]
    assert user["role"] == "user"
    assert "Máquina: Torno CNC" in user["content"]
    assert "Localização: Pavilhão A" in user["content"]
    assert "motor faz ruído anómalo" in user["content"]


def test_user_prompt_without_machine_context():
    prompt = build_user_prompt("fuga de óleo")

    assert f"Máquina: {NOT_SPECIFIED}" in prompt
    assert f"Localização: {NOT_SPECIFIED}" in prompt
    assert "Problema Reportado:\nfuga de óleo" in prompt


@pytest.mark.asyncio
async def test_empty_description_is_rejected_before_any_request():
    def handler(request):
        raise AssertionError("gateway must not be called")

    with pytest.raises(ValidationError) as exc_info:
        await generate_solution("   ", client=make_client(handler))

    assert exc_info.value.message == "Problem description is required"


@pytest.mark.asyncio
@pytest.mark.parametrize("status_code, error_class", [
    (429, RateLimitExceededError),
    (402, PaymentRequiredError),
])
async def test_gateway_quota_errors_are_distinct(status_code, error_class):
    client = make_client(lambda request: httpx.Response(status_code, json={"error": "quota"}))

    with pytest.raises(error_class) as exc_info:
        await generate_solution("motor parado", client=client)

    assert exc_info.value.status_code == status_code


@pytest.mark.asyncio
async def test_gateway_server_error():
    client = make_client(lambda request: httpx.Response(500, text="upstream exploded"))

    with pytest.raises(GenerationError) as exc_info:
        await generate_solution("motor parado", client=client)

    assert type(exc_info.value) is GenerationError
    assert exc_info.value.detail == "AI Gateway error: 500"
    assert exc_info.value.status_code == 500


@pytest.mark.asyncio
async def test_missing_api_key():
    def handler(request):
        raise AssertionError("gateway must not be called")

    with pytest.raises(MissingCredentialsError):
        await generate_solution("motor parado", client=make_client(handler, api_key=""))


@pytest.mark.asyncio
async def test_empty_answer_is_a_generation_error():
    client = make_client(lambda request: completion(""))

    with pytest.raises(GenerationError):
        await client.chat_completion([{"role": "user", "content": "olá"}])


@pytest.mark.asyncio
async def test_malformed_answer_is_a_generation_error():
    client = make_client(lambda request: httpx.Response(200, json={"choices": []}))

    with pytest.raises(GenerationError):
        await client.chat_completion([{"role": "user", "content": "olá"}])


@pytest.mark.asyncio
async def test_network_failure_is_a_generation_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(GenerationError):
        await make_client(handler).chat_completion([{"role": "user", "content": "olá"}])
