"""
Egg incubation lifecycle: Idle -> Incubating -> Hatching -> Idle

Progress is derived from absolute deadlines stored in the session, never from
counted ticks, so a reloaded client resumes exactly where it left off.
"""
import asyncio
import dataclasses
import logging
import random
import uuid
from enum import Enum
from typing import Callable, Dict, Mapping, Optional, Tuple

import i18n
from core.anticheat import ActionValidator
from core.config import CONFIG
from core.errors import ValidationError
from core.models import ACTION_PET_STAT_UPDATE, Egg, IncubationRecord, Pet
from game.state import SessionStore

logger = logging.getLogger(__name__)


class IncubationPhase(str, Enum):
    IDLE = "idle"
    INCUBATING = "incubating"
    HATCHING = "hatching"


def derive_pet_stats(
    egg: Egg,
    rng: random.Random,
    stat_ranges: Optional[Mapping[str, Tuple[int, int]]] = None
) -> Dict[str, int]:
    """Roll each base stat within its declared range and add the egg's bonus"""
    ranges = stat_ranges or CONFIG["STAT_RANGES"]
    return {
        stat: rng.randint(low, high) + egg.bonus(stat)
        for stat, (low, high) in ranges.items()
    }


def hatch_pet_id(record: IncubationRecord) -> str:
    """Stable pet id for one incubation of one user"""
    return str(uuid.uuid5(uuid.NAMESPACE_URL, f"xenopets:{record.user_id}:{record.egg.id}:{record.started_at}"))


class IncubationStateMachine:
    """
    Owns one user's incubation cycle.

    Only one hatch completion may be in flight per user, across every machine
    built on the same session; a poll that sees the deadline passed while a
    completion is pending does nothing. The record is cleared only after the
    pet was created, so a failed creation can be retried without losing the
    elapsed incubation.
    """

    def __init__(
        self,
        session: SessionStore,
        rng: Optional[random.Random] = None,
        clock: Optional[Callable[[], int]] = None,
        validator: Optional[ActionValidator] = None,
        duration_ms: Optional[int] = None,
        grace_ms: Optional[int] = None
    ):
        self.session = session
        self.user_id = session.user_id
        self.rng = rng or random.Random()
        self.clock = clock or session.clock
        self.validator = validator or session.validator
        self.duration_ms = CONFIG["INCUBATION_DURATION_MS"] if duration_ms is None else duration_ms
        self.grace_ms = CONFIG["HATCH_GRACE_MS"] if grace_ms is None else grace_ms
        self.hatch_failed = False

    @property
    def record(self) -> Optional[IncubationRecord]:
        return self.session.get_incubation(self.user_id)

    @property
    def phase(self) -> IncubationPhase:
        record = self.record
        if record is None:
            return IncubationPhase.IDLE
        if record.is_hatching:
            return IncubationPhase.HATCHING
        return IncubationPhase.INCUBATING

    @property
    def completion_in_flight(self) -> bool:
        return self.session.hatch_in_flight(self.user_id)

    def select_egg(self, egg: Egg) -> IncubationRecord:
        """
        Start incubating an egg.

        If the user already has an incubation, it is returned unchanged; the
        first selection wins.
        """
        existing = self.record
        if existing is not None:
            logger.debug(f"User {self.user_id} already incubating {existing.egg.id}, ignoring {egg.id}")
            return existing

        record = IncubationRecord(
            egg=egg,
            user_id=self.user_id,
            started_at=self.clock(),
            duration_ms=self.duration_ms
        )
        self.session.set_incubation(record)
        self.hatch_failed = False
        logger.info(f"User {self.user_id} started incubating {egg.id}, deadline {record.deadline}")
        self.session.add_notification(
            "success",
            i18n.get("incubation.egg_selected_title"),
            i18n.get("incubation.egg_selected_message", egg=egg.name)
        )
        return record

    def remaining(self) -> int:
        """Milliseconds until the egg hatches (0 when idle or past the deadline)"""
        record = self.record
        if record is None:
            return 0
        return record.remaining(self.clock())

    def grace_remaining(self) -> int:
        """Milliseconds left of the hatching animation grace period"""
        record = self.record
        if record is None or not record.is_hatching:
            return 0
        return max(0, record.hatching_started_at + self.grace_ms - self.clock())

    def check_hatch(self) -> IncubationPhase:
        """Move to Hatching once the deadline has passed. Safe to call repeatedly."""
        record = self.record
        if record is None or record.is_hatching:
            return self.phase
        now = self.clock()
        if record.remaining(now) > 0:
            return IncubationPhase.INCUBATING

        self.session.set_incubation(dataclasses.replace(record, hatching_started_at=now))
        logger.info(f"Egg {record.egg.id} of user {self.user_id} is hatching")
        return IncubationPhase.HATCHING

    def build_pet_attributes(self, record: IncubationRecord) -> Dict:
        """
        Backend attributes for the pet hatched from a record.

        The pet id is derived from the record, so every creation attempt for
        one incubation targets the same row.
        """
        stats = derive_pet_stats(record.egg, self.rng)
        defaults = CONFIG["PET_DEFAULTS"]
        pet = Pet(
            name=self.rng.choice(CONFIG["PET_NAMES"]),
            species=record.egg.species,
            owner_id=record.user_id,
            style=defaults.get("style", "Default"),
            personality=defaults.get("personality", "Sanguine"),
            level=defaults.get("level", 1),
            id=hatch_pet_id(record),
            **stats
        )
        return pet.to_record()

    async def complete_hatch(self) -> Optional[Pet]:
        """
        Create the pet once the hatching grace period is over.

        Returns:
            The new Pet, or None when not due, already in flight, rejected by
            the validator, or when the backend failed
        """
        record = self.record
        if record is None or not record.is_hatching or self.grace_remaining() > 0:
            return None

        if not self.session.begin_hatch(self.user_id):
            logger.debug(f"Hatch completion for user {self.user_id} already in flight")
            return None
        try:
            attributes = self.build_pet_attributes(record)
            stats = {key: value for key, value in attributes.items() if key in CONFIG["STAT_RANGES"]}
            try:
                self.validator.validate(ACTION_PET_STAT_UPDATE, {"stats": stats})
            except ValidationError as e:
                logger.error(f"Derived stats for egg {record.egg.id} rejected: {e}")
                self.hatch_failed = True
                self.session.add_notification("error", i18n.get("incubation.hatch_failed_title"), str(e))
                return None

            pet = await self.session.create_pet(attributes)
            if pet is None:
                logger.warning(f"Pet creation failed for user {self.user_id}; keeping incubation for retry")
                self.hatch_failed = True
                return None

            self.session.clear_incubation(self.user_id)
            self.hatch_failed = False
            logger.info(f"User {self.user_id} hatched {pet.name} the {pet.species}")
            self.session.add_notification(
                "success",
                i18n.get("incubation.hatched_title"),
                i18n.get("incubation.hatched_message", name=pet.name)
            )
            return pet
        finally:
            self.session.end_hatch(self.user_id)

    async def retry_hatch(self) -> Optional[Pet]:
        """User-triggered retry after a failed creation"""
        self.hatch_failed = False
        return await self.complete_hatch()

    async def tick(self) -> Optional[Pet]:
        """One poll: advance to Hatching when due, then complete when the grace period is over"""
        phase = self.check_hatch()
        if phase is IncubationPhase.HATCHING and not self.hatch_failed and self.grace_remaining() == 0:
            return await self.complete_hatch()
        return None

    async def run_poller(
        self,
        interval: Optional[float] = None,
        sleep: Optional[Callable] = None
    ) -> Optional[Pet]:
        """
        Poll at a low frequency until the cycle ends.

        Returns:
            The hatched Pet, or None if idle or the hatch failed (the record
            is kept; call retry_hatch to try again)
        """
        interval = CONFIG["POLL_INTERVAL_S"] if interval is None else interval
        sleep = sleep or asyncio.sleep

        while self.phase is not IncubationPhase.IDLE:
            pet = await self.tick()
            if pet is not None:
                return pet
            if self.hatch_failed:
                return None
            await sleep(interval)
        return None
