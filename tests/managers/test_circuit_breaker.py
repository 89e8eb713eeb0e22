# tests/managers/test_circuit_breaker.py
"""Tests for the Gemini circuit breakers."""

from asyncio import Event, create_task, sleep
from unittest.mock import AsyncMock, MagicMock

import pytest
from pytest_mock.plugin import MockerFixture

from itera.clients.ai_client import AiClient
from itera.errors import AiError, CircuitBreakerError
from itera.managers.circuit_breaker import (
    CircuitBreaker,
    CircuitState,
    ai_circuit_breaker,
    image_circuit_breaker,
)
from itera.services.prompts import validation_prompt


class Clock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock(mocker: MockerFixture) -> Clock:
    fake = Clock()
    mocker.patch("itera.managers.circuit_breaker.monotonic", fake)
    return fake


async def _fail() -> None:
    raise AiError("500 INTERNAL")


async def _ok() -> str:
    return "ok"


async def _trip(breaker: CircuitBreaker) -> None:
    for _ in range(breaker.failure_threshold):
        with pytest.raises(AiError):
            await breaker.call(_fail)


def test_text_and_image_breakers_are_separate() -> None:
    assert ai_circuit_breaker is not image_circuit_breaker
    assert (ai_circuit_breaker.name, image_circuit_breaker.name) == ("gemini_ai", "gemini_image")
    assert image_circuit_breaker.failure_threshold > ai_circuit_breaker.failure_threshold


class TestCircuitBreaker:
    @pytest.mark.asyncio
    async def test_opens_after_consecutive_failures(self, clock: Clock) -> None:
        breaker = CircuitBreaker("gemini_ai", failure_threshold=3, cooldown=60.0)

        await _trip(breaker)

        assert breaker.state == CircuitState.OPEN
        with pytest.raises(CircuitBreakerError) as exc_info:
            await breaker.call(_ok)
        assert exc_info.value.circuit_name == "gemini_ai"
        assert exc_info.value.retry_after == 60.0

    @pytest.mark.asyncio
    async def test_success_resets_the_count(self, clock: Clock) -> None:
        breaker = CircuitBreaker("gemini_ai", failure_threshold=2)

        with pytest.raises(AiError):
            await breaker.call(_fail)
        await breaker.call(_ok)
        with pytest.raises(AiError):
            await breaker.call(_fail)

        assert breaker.state == CircuitState.CLOSED
        assert breaker.failures == 1

    @pytest.mark.asyncio
    async def test_trial_success_closes(self, clock: Clock) -> None:
        breaker = CircuitBreaker("gemini_image", failure_threshold=1, cooldown=30.0)
        await _trip(breaker)

        clock.now += 30.0
        assert breaker.state == CircuitState.TRIAL

        assert await breaker.call(_ok) == "ok"
        assert breaker.state == CircuitState.CLOSED
        assert breaker.failures == 0

    @pytest.mark.asyncio
    async def test_trial_failure_reopens(self, clock: Clock) -> None:
        breaker = CircuitBreaker("gemini_image", failure_threshold=2, cooldown=30.0)
        await _trip(breaker)

        clock.now += 30.0
        with pytest.raises(AiError):
            await breaker.call(_fail)

        assert breaker.state == CircuitState.OPEN
        with pytest.raises(CircuitBreakerError):
            await breaker.call(_ok)

    @pytest.mark.asyncio
    async def test_one_trial_at_a_time(self, clock: Clock) -> None:
        breaker = CircuitBreaker("gemini_ai", failure_threshold=1, cooldown=10.0)
        await _trip(breaker)
        clock.now += 10.0
        release = Event()

        async def slow() -> str:
            await release.wait()
            return "ok"

        trial = create_task(breaker.call(slow))
        await sleep(0)
        with pytest.raises(CircuitBreakerError):
            await breaker.call(_ok)

        release.set()
        assert await trial == "ok"
        assert breaker.state == CircuitState.CLOSED

    @pytest.mark.asyncio
    async def test_reset(self, clock: Clock) -> None:
        breaker = CircuitBreaker("gemini_ai", failure_threshold=1)
        await _trip(breaker)

        breaker.reset()

        assert breaker.state == CircuitState.CLOSED
        assert await breaker.call(_ok) == "ok"


class TestClientBreakers:
    @pytest.fixture
    def mock_genai(self) -> MagicMock:
        client = MagicMock()
        client.models.generate_content = AsyncMock(side_effect=Exception("500 INTERNAL"))
        return client

    @pytest.mark.asyncio
    async def test_image_failures_leave_text_calls_open(
        self,
        clock: Clock,
        mock_genai: MagicMock,
    ) -> None:
        text = CircuitBreaker("gemini_ai", failure_threshold=2)
        image = CircuitBreaker("gemini_image", failure_threshold=2)
        client = AiClient(client=mock_genai, circuit_breaker=text, image_breaker=image)

        for _ in range(2):
            with pytest.raises(AiError):
                await client.generate_image("A sunny beach")
        with pytest.raises(CircuitBreakerError):
            await client.generate_image("A sunny beach")

        assert image.state == CircuitState.OPEN
        assert text.state == CircuitState.CLOSED
        with pytest.raises(AiError):
            await client.generate_json(validation_prompt("Paris"))
        assert mock_genai.models.generate_content.await_count == 3
