# itera/services/images.py

"""
Per-activity image generation with partial-failure tolerance.

Every activity image is requested at once; the batch is settled only when
all requests have finished, and results are merged back by original
position, so a plan with some missing images is still a complete plan.
"""

from asyncio import Semaphore, gather
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from logging import getLogger

from itera.configs.settings import file_logger, settings
from itera.errors import ImageGenerationError
from itera.schemas.itinerary import Activity, ItineraryPlan
from itera.services.prompts import image_prompt

logger = file_logger(getLogger(__name__))

ImageGenerator = Callable[[str], Awaitable[str]]


@dataclass(frozen=True)
class ImageOutcome:
    """Settled result of one image request."""

    index: int
    image_url: str | None = None
    error: ImageGenerationError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and bool(self.image_url)


class ImageFanOut:
    """
    Issue one image request per activity and merge the results.

    Args:
        generate_image: Coroutine function mapping a prompt to an image URL,
            usually ``AiClient.generate_image``.
        max_concurrency: Upper bound on in-flight requests; 0 means unbounded.
    """

    def __init__(
        self,
        generate_image: ImageGenerator,
        max_concurrency: int | None = None,
    ) -> None:
        self._generate_image = generate_image
        limit = settings.MAX_CONCURRENT_IMAGE_REQUESTS if max_concurrency is None else max_concurrency
        self._semaphore = Semaphore(limit) if limit > 0 else None

    async def generate_one(self, activity: Activity, destination: str) -> str:
        """
        Generate the image for a single activity.

        Raises:
            ImageGenerationError: Wrapping whatever made the request fail.
        """
        prompt = image_prompt(activity.description, destination)
        try:
            if self._semaphore is None:
                return await self._generate_image(prompt)
            async with self._semaphore:
                return await self._generate_image(prompt)
        except Exception as e:
            message = f'Image generation failed for "{activity.description}".'
            if "quota" in str(e).lower():
                message += " Quota may be exceeded."
            raise ImageGenerationError(detail=message) from e

    async def settle(self, activities: list[Activity], destination: str) -> list[ImageOutcome]:
        """
        Request every image concurrently and wait for all of them.

        Returns:
            Exactly one outcome per activity, in input order.
        """
        results = await gather(
            *(self.generate_one(activity, destination) for activity in activities),
            return_exceptions=True,
        )

        outcomes: list[ImageOutcome] = []
        for index, result in enumerate(results):
            if isinstance(result, ImageGenerationError):
                logger.warning(f"{result} ({result.__cause__})")
                outcomes.append(ImageOutcome(index=index, error=result))
            elif isinstance(result, BaseException):
                # CancelledError and friends are not ours to swallow.
                raise result
            else:
                outcomes.append(ImageOutcome(index=index, image_url=result))
        return outcomes

    async def attach_images(self, plan: ItineraryPlan, destination: str) -> ItineraryPlan:
        """
        Return a copy of the plan with an image on every activity that got one.

        Failed slots carry ``image_url=None``; every other field is unchanged.
        """
        activities = plan.activities()
        outcomes = await self.settle(activities, destination)

        failed = sum(1 for outcome in outcomes if not outcome.ok)
        if failed:
            logger.warning(f"{failed}/{len(outcomes)} activity images could not be generated")

        urls = iter(outcome.image_url if outcome.ok else None for outcome in outcomes)
        days = [
            day.model_copy(
                update={
                    "activities": [
                        activity.model_copy(update={"image_url": next(urls)})
                        for activity in day.activities
                    ],
                },
            )
            for day in plan.itinerary
        ]
        return plan.model_copy(update={"itinerary": days})

    async def image_for(self, activity: Activity, destination: str) -> str | None:
        """Single-activity path used by swaps: failure degrades to no image."""
        try:
            return await self.generate_one(activity, destination)
        except ImageGenerationError as e:
            logger.warning(f"{e} Continuing without image.")
            return None

