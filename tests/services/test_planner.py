# tests/services/test_planner.py
"""End-to-end orchestration tests for Planner with a fake Gemini client."""

from asyncio import Event, create_task, gather
from asyncio import sleep as async_sleep
from copy import deepcopy
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

import pytest
from orjson import dumps, loads
from pydantic import SecretStr
from pytest_mock.plugin import MockerFixture

from itera.clients.kv_store import MemoryStore
from itera.configs.settings import (
    ACTIVITY_SWAP_ERROR,
    AUTH_ERROR_MESSAGE,
    INVALID_DESTINATION_MESSAGE,
    INVALID_FORMAT_MESSAGE,
    INVALID_RESPONSE_MESSAGE,
    ITINERARY_GENERATION_ERROR,
    QUOTA_ERROR_MESSAGE,
    SNAPSHOT_KEY,
    settings,
)
from itera.errors import (
    ActivitySwapError,
    AiAuthenticationError,
    AiError,
    AiQuotaExceededError,
    InvalidDestinationError,
    ItineraryGenerationError,
    PlanStateError,
)
from itera.managers.snapshot import strip_images
from itera.schemas.trip import TripPreferences
from itera.services.planner import Planner
from itera.services.prompts import PromptKind, PromptRequest

VALID_PARIS = '{"isValid": true, "correctedName": "Paris"}'


@pytest.fixture
def planner(mock_ai_client: MagicMock, memory_store: MemoryStore) -> Planner:
    return Planner(mock_ai_client, store=memory_store)


@pytest.fixture
async def generated(
    planner: Planner,
    mock_ai_client: MagicMock,
    sample_preferences: TripPreferences,
    plan_json: str,
) -> Planner:
    """A planner holding a freshly generated 3-day Paris plan."""
    mock_ai_client.answers[PromptKind.VALIDATE_DESTINATION].append(VALID_PARIS)
    mock_ai_client.answers[PromptKind.GENERATE_PLAN].append(plan_json)
    await planner.generate(sample_preferences)
    return planner


def _requests(mock_ai_client: MagicMock, kind: PromptKind) -> list[Any]:
    return [
        call.args[0]
        for call in mock_ai_client.generate_json.await_args_list
        if call.args[0].kind is kind
    ]


class TestGenerate:
    """Tests for Planner.generate."""

    @pytest.mark.asyncio
    async def test_corrected_destination_round_trip(
        self,
        planner: Planner,
        mock_ai_client: MagicMock,
        memory_store: MemoryStore,
        sample_preferences: TripPreferences,
        plan_json: str,
    ) -> None:
        """'Pari' is corrected to 'Paris', planned, imaged, persisted and restorable."""
        mock_ai_client.answers[PromptKind.VALIDATE_DESTINATION].append(VALID_PARIS)
        mock_ai_client.answers[PromptKind.GENERATE_PLAN].append(plan_json)

        plan = await planner.generate(sample_preferences.with_destination("Pari"))

        assert len(plan.itinerary) == 3
        assert all(a.image_url for a in plan.activities())
        assert planner.plan is plan
        assert planner.preferences is not None
        assert planner.preferences.destination == "Paris"
        assert "Destination: Paris" in _requests(mock_ai_client, PromptKind.GENERATE_PLAN)[0].text

        raw = await memory_store.get(SNAPSHOT_KEY)
        assert raw is not None
        assert "imageUrl" not in raw
        assert "data:image" not in raw
        assert loads(raw)["preferences"]["destination"] == "Paris"

        reloaded = Planner(mock_ai_client, store=memory_store)
        saved = await reloaded.load_saved()
        assert saved is not None
        assert reloaded.restore_saved() == strip_images(plan)
        assert reloaded.preferences == planner.preferences

    @pytest.mark.asyncio
    async def test_invalid_destination_blocks_generation(
        self,
        planner: Planner,
        mock_ai_client: MagicMock,
        sample_preferences: TripPreferences,
    ) -> None:
        mock_ai_client.answers[PromptKind.VALIDATE_DESTINATION].append(
            '{"isValid": false, "correctedName": ""}',
        )

        with pytest.raises(InvalidDestinationError) as exc_info:
            await planner.generate(sample_preferences.with_destination("Narnia"))

        assert str(exc_info.value) == INVALID_DESTINATION_MESSAGE
        assert exc_info.value.destination == "Narnia"
        assert _requests(mock_ai_client, PromptKind.GENERATE_PLAN) == []
        assert planner.plan is None

    @pytest.mark.asyncio
    async def test_validation_outage_does_not_block(
        self,
        planner: Planner,
        mock_ai_client: MagicMock,
        sample_preferences: TripPreferences,
        plan_json: str,
    ) -> None:
        mock_ai_client.answers[PromptKind.VALIDATE_DESTINATION].append(AiError("busy"))
        mock_ai_client.answers[PromptKind.GENERATE_PLAN].append(plan_json)

        await planner.generate(sample_preferences)

        assert planner.preferences == sample_preferences

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("answer", "message"),
        [
            (AiQuotaExceededError("429 RESOURCE_EXHAUSTED"), QUOTA_ERROR_MESSAGE),
            (AiAuthenticationError("API key not valid"), AUTH_ERROR_MESSAGE),
            ("this is not json", INVALID_RESPONSE_MESSAGE),
            ('{"itinerary": []}', INVALID_RESPONSE_MESSAGE),
            (AiError("500 internal"), ITINERARY_GENERATION_ERROR),
        ],
    )
    async def test_failure_messages(
        self,
        planner: Planner,
        mock_ai_client: MagicMock,
        memory_store: MemoryStore,
        sample_preferences: TripPreferences,
        answer: str | Exception,
        message: str,
    ) -> None:
        mock_ai_client.answers[PromptKind.VALIDATE_DESTINATION].append(VALID_PARIS)
        mock_ai_client.answers[PromptKind.GENERATE_PLAN].append(answer)

        with pytest.raises(ItineraryGenerationError) as exc_info:
            await planner.generate(sample_preferences)

        assert str(exc_info.value) == message
        assert planner.plan is None
        assert await memory_store.get(SNAPSHOT_KEY) is None

    @pytest.mark.asyncio
    async def test_failure_keeps_previous_plan(
        self,
        generated: Planner,
        mock_ai_client: MagicMock,
        memory_store: MemoryStore,
        sample_preferences: TripPreferences,
    ) -> None:
        before = generated.plan
        stored = await memory_store.get(SNAPSHOT_KEY)
        mock_ai_client.answers[PromptKind.VALIDATE_DESTINATION].append(VALID_PARIS)
        mock_ai_client.answers[PromptKind.GENERATE_PLAN].append(AiQuotaExceededError())

        with pytest.raises(ItineraryGenerationError):
            await generated.generate(sample_preferences)

        assert generated.plan is before
        assert await memory_store.get(SNAPSHOT_KEY) == stored


class TestSwap:
    """Tests for Planner.swap."""

    @pytest.mark.asyncio
    async def test_swap_replaces_one_slot(
        self,
        generated: Planner,
        mock_ai_client: MagicMock,
        memory_store: MemoryStore,
        activity_json: str,
    ) -> None:
        before = generated.plan
        assert before is not None
        mock_ai_client.answers[PromptKind.SWAP_ACTIVITY].append(activity_json)

        after = await generated.swap(1, 2)

        assert after.itinerary[1].activities[2].description == "Guided tour of the Louvre"
        assert after.itinerary[1].activities[2].image_url is not None
        assert after.itinerary[0] == before.itinerary[0]
        assert after.itinerary[2] == before.itinerary[2]
        assert after.itinerary[1].activities[:2] == before.itinerary[1].activities[:2]
        assert after.weather_forecast == before.weather_forecast
        assert generated.plan is after

        raw = await memory_store.get(SNAPSHOT_KEY)
        assert raw is not None
        assert "Guided tour of the Louvre" in raw
        assert "imageUrl" not in raw

    @pytest.mark.asyncio
    async def test_malformed_answer_leaves_state_and_storage(
        self,
        generated: Planner,
        mock_ai_client: MagicMock,
        memory_store: MemoryStore,
    ) -> None:
        before = generated.plan
        stored = await memory_store.get(SNAPSHOT_KEY)
        mock_ai_client.answers[PromptKind.SWAP_ACTIVITY].append("Here's a fun idea: a picnic!")

        with pytest.raises(ActivitySwapError) as exc_info:
            await generated.swap(0, 0)

        assert str(exc_info.value) == INVALID_FORMAT_MESSAGE
        assert generated.plan is before
        assert await memory_store.get(SNAPSHOT_KEY) == stored

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("answer", "message"),
        [
            (AiQuotaExceededError(), QUOTA_ERROR_MESSAGE),
            (AiAuthenticationError(), AUTH_ERROR_MESSAGE),
            (AiError("overloaded"), ACTIVITY_SWAP_ERROR),
            ('{"time": "Morning"}', ACTIVITY_SWAP_ERROR),
        ],
    )
    async def test_failure_messages(
        self,
        generated: Planner,
        mock_ai_client: MagicMock,
        answer: str | Exception,
        message: str,
    ) -> None:
        before = generated.plan
        mock_ai_client.answers[PromptKind.SWAP_ACTIVITY].append(answer)

        with pytest.raises(ActivitySwapError) as exc_info:
            await generated.swap(0, 1)

        assert str(exc_info.value) == message
        assert generated.plan is before

    @pytest.mark.asyncio
    async def test_image_failure_does_not_fail_swap(
        self,
        generated: Planner,
        mock_ai_client: MagicMock,
        activity_json: str,
    ) -> None:
        mock_ai_client.failing_images = {"Guided tour of the Louvre"}
        mock_ai_client.answers[PromptKind.SWAP_ACTIVITY].append(activity_json)

        after = await generated.swap(0, 0)

        assert after.itinerary[0].activities[0].description == "Guided tour of the Louvre"
        assert after.itinerary[0].activities[0].image_url is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize(("day_index", "activity_index"), [(3, 0), (0, 3), (-1, 0)])
    async def test_out_of_range(
        self,
        generated: Planner,
        mock_ai_client: MagicMock,
        day_index: int,
        activity_index: int,
    ) -> None:
        with pytest.raises(PlanStateError):
            await generated.swap(day_index, activity_index)
        assert _requests(mock_ai_client, PromptKind.SWAP_ACTIVITY) == []

    @pytest.mark.asyncio
    async def test_without_plan(self, planner: Planner) -> None:
        with pytest.raises(PlanStateError):
            await planner.swap(0, 0)

    @pytest.mark.asyncio
    async def test_concurrent_swaps_both_apply(
        self,
        generated: Planner,
        mock_ai_client: MagicMock,
        activity_json: str,
    ) -> None:
        second = activity_json.replace("Guided tour of the Louvre", "Picnic on the Champ de Mars")
        mock_ai_client.answers[PromptKind.SWAP_ACTIVITY].extend([activity_json, second])

        await gather(generated.swap(0, 0), generated.swap(2, 1))

        plan = generated.plan
        assert plan is not None
        assert plan.itinerary[0].activities[0].description == "Guided tour of the Louvre"
        assert plan.itinerary[2].activities[1].description == "Picnic on the Champ de Mars"

    @pytest.mark.asyncio
    async def test_regeneration_during_swap_discards_the_swap(
        self,
        generated: Planner,
        mock_ai_client: MagicMock,
        memory_store: MemoryStore,
        sample_preferences: TripPreferences,
        plan_data: dict[str, Any],
        activity_json: str,
    ) -> None:
        """A swap answer for the old plan never lands in a newer plan."""
        release = Event()
        answer_queued = mock_ai_client.generate_json.side_effect

        async def held_swap(request: PromptRequest) -> str:
            if request.kind is PromptKind.SWAP_ACTIVITY:
                await release.wait()
            return await answer_queued(request)

        mock_ai_client.generate_json.side_effect = held_swap
        rome = deepcopy(plan_data)
        rome["itinerary"][0]["activities"][0]["description"] = "Colosseum"
        mock_ai_client.answers[PromptKind.SWAP_ACTIVITY].append(activity_json)
        mock_ai_client.answers[PromptKind.VALIDATE_DESTINATION].append(
            '{"isValid": true, "correctedName": "Rome"}',
        )
        mock_ai_client.answers[PromptKind.GENERATE_PLAN].append(dumps(rome).decode())

        swap = create_task(generated.swap(0, 0))
        await async_sleep(0)
        await generated.generate(sample_preferences.with_destination("Rome"))
        release.set()

        with pytest.raises(PlanStateError):
            await swap

        plan = generated.plan
        assert plan is not None
        assert plan.itinerary[0].activities[0].description == "Colosseum"
        raw = await memory_store.get(SNAPSHOT_KEY)
        assert raw is not None
        assert "Colosseum" in raw
        assert "Guided tour of the Louvre" not in raw


class TestSavedTrip:
    @pytest.mark.asyncio
    async def test_dismiss_keeps_current_plan(
        self,
        generated: Planner,
        memory_store: MemoryStore,
    ) -> None:
        plan = generated.plan
        await generated.dismiss_saved()

        assert generated.plan is plan
        assert await memory_store.get(SNAPSHOT_KEY) is None
        assert await generated.load_saved() is None

    @pytest.mark.asyncio
    async def test_reset_clears_everything(
        self,
        generated: Planner,
        memory_store: MemoryStore,
    ) -> None:
        await generated.reset()

        assert generated.plan is None
        assert generated.preferences is None
        assert await memory_store.get(SNAPSHOT_KEY) is None

    @pytest.mark.asyncio
    async def test_restore_without_saved_trip(self, planner: Planner) -> None:
        assert await planner.load_saved() is None
        with pytest.raises(PlanStateError):
            planner.restore_saved()


@pytest.mark.asyncio
async def test_close_closes_client(planner: Planner, mock_ai_client: MagicMock) -> None:
    await planner.close()
    mock_ai_client.close.assert_awaited_once()


@pytest.mark.asyncio
async def test_debouncer_validates_through_planner(
    planner: Planner,
    mock_ai_client: MagicMock,
) -> None:
    mock_ai_client.answers[PromptKind.VALIDATE_DESTINATION].append(VALID_PARIS)
    debouncer = planner.debouncer()

    debouncer.submit("Pari")
    await async_sleep(0.6)
    await debouncer.drain()

    assert debouncer.state.corrected_name == "Paris"
    assert len(_requests(mock_ai_client, PromptKind.VALIDATE_DESTINATION)) == 1


def test_from_settings(mocker: MockerFixture, tmp_path: Path) -> None:
    mocker.patch.object(settings, "GEMINI_API_KEY", SecretStr("fake-api-key"))
    mocker.patch.object(settings, "SNAPSHOT_DIR", tmp_path)
    mock_client_cls = mocker.patch("itera.clients.ai_client.Client")

    planner = Planner.from_settings()

    assert mock_client_cls.call_args.kwargs["api_key"] == "fake-api-key"
    assert planner.plan is None
