"""Free-tier quality heuristic deciding whether a paid reveal is worth it.

The score starts from the upstream confidence hint, is nudged by the free
contact availability probes, and is penalised for obviously thin records.
The confidence bucket is always re-derived from the final score.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Mapping, Sequence
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from ..errors import GatewayError
from ..models import ContactAvailability, Profile, QualityScore, ScoredProfile
from .response_parsing import parse_contact_status
from .utils.constants import (
    CONFIDENCE_BASE_SCORES,
    CONTACT_STATUS_PATHS,
    DEFAULT_BASE_SCORE,
    QUALITY_BATCH_SIZE,
)

logger = logging.getLogger(__name__)

ContactProbe = Callable[[str, str], Awaitable[dict[str, Any]]]


def confidence_bucket(score: int) -> str:
    if score >= 80:
        return "high"
    if score >= 60:
        return "medium"
    return "low"


def scoring_view(record: Mapping[str, Any]) -> Profile:
    """Typed view of an upstream record; a record that will not parse scores from defaults."""
    try:
        return Profile.model_validate(record)
    except PydanticValidationError as exc:
        url = record.get("linkedin_url")
        logger.warning("Scoring %s from defaults: %d unparseable fields", url, exc.error_count())
        return Profile(linkedin_url=url if isinstance(url, str) else "")


def score_profile(profile: Profile, availability: ContactAvailability) -> QualityScore:
    flags: list[str] = []

    hint = (profile.confidence_level or "").strip().lower()
    score = CONFIDENCE_BASE_SCORES.get(hint, DEFAULT_BASE_SCORE)

    has_work_email = availability.work_email or availability.work_email_verified
    if availability.work_email_verified:
        score += 15
    elif has_work_email:
        score += 5
    if availability.personal_email:
        score += 3
    if availability.phone:
        score += 2

    if len(profile.full_name.strip()) < 3:
        flags.append("incomplete_name")
        score -= 10
    if not profile.title.strip():
        flags.append("no_job_title")
        score -= 5
    if not has_work_email and not availability.personal_email:
        flags.append("no_contact_info")
        score -= 15

    score = min(100, max(0, score))
    cost_recommended = availability.work_email_verified or (score >= 70 and has_work_email)

    return QualityScore(
        overall=score,
        confidence=confidence_bucket(score),
        flags=flags,
        cost_recommended=cost_recommended,
    )


class QualityScorer:
    def __init__(
        self,
        probe: ContactProbe,
        *,
        batch_size: int = QUALITY_BATCH_SIZE,
        pause_seconds: float = 0.5,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self.probe = probe
        self.batch_size = batch_size
        self.pause_seconds = pause_seconds
        self._sleep = sleep

    async def _probe_one(self, linkedin_url: str, contact_type: str) -> tuple[bool, bool]:
        try:
            data = await self.probe(linkedin_url, contact_type)
        except GatewayError as exc:
            logger.warning("%s probe failed for %s: %s", contact_type, linkedin_url, exc)
            return False, False
        return parse_contact_status(data, contact_type)

    async def check_availability(self, linkedin_url: str) -> ContactAvailability:
        if not linkedin_url:
            return ContactAvailability()
        personal, work, phone = await asyncio.gather(
            *(self._probe_one(linkedin_url, contact_type) for contact_type in CONTACT_STATUS_PATHS)
        )
        return ContactAvailability(
            personal_email=personal[0],
            work_email=work[0],
            work_email_verified=work[1],
            phone=phone[0],
        )

    async def _score_one(self, profile: Profile) -> ScoredProfile:
        availability = await self.check_availability(profile.linkedin_url)
        return ScoredProfile(
            profile=profile,
            quality=score_profile(profile, availability),
            contact_availability=availability,
        )

    async def score_all(self, profiles: Sequence[Profile], rank: bool = True) -> list[ScoredProfile]:
        """Score in groups of ``batch_size``; best first unless ``rank`` is off."""
        results: list[ScoredProfile] = []
        for start in range(0, len(profiles), self.batch_size):
            group = profiles[start : start + self.batch_size]
            results.extend(await asyncio.gather(*(self._score_one(p) for p in group)))
            if start + self.batch_size < len(profiles) and self.pause_seconds > 0:
                await self._sleep(self.pause_seconds)

        if rank:
            results.sort(key=lambda item: item.quality.overall, reverse=True)
        logger.info(
            "Scored %d profiles: high=%d medium=%d low=%d cost_recommended=%d",
            len(results),
            sum(1 for r in results if r.quality.confidence == "high"),
            sum(1 for r in results if r.quality.confidence == "medium"),
            sum(1 for r in results if r.quality.confidence == "low"),
            sum(1 for r in results if r.quality.cost_recommended),
        )
        return results
