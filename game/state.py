"""Session state container shared by the incubation machine and the UI"""
import logging
from typing import Any, Callable, Dict, List, Optional, Set

import i18n
from core.anticheat import ActionValidator
from core.api_client import BackendClient, get_api_client
from core.error_classifier import classify_error
from core.errors import BackendError, TransportError, ValidationError
from core.models import IncubationRecord, Notification, PendingMutation, Pet, WorldPoint, now_ms
from core.state_manager import load_session, save_session

logger = logging.getLogger(__name__)


class SessionStore:
    """
    Single-writer game state for one running client.

    The incubation machine and the UI receive the same instance and talk to
    each other only through its methods. When a save path is given, incubation
    records and the selected world point are written on every change and
    restored on construction, so a reload resumes from the stored deadline.
    """

    def __init__(
        self,
        user_id: str,
        client: Optional[BackendClient] = None,
        validator: Optional[ActionValidator] = None,
        save_path: Optional[str] = None,
        clock: Callable[[], int] = now_ms
    ):
        self.user_id = user_id
        self.client = client if client is not None else get_api_client()
        self.validator = validator or ActionValidator()
        self.save_path = save_path
        self.clock = clock
        self.notifications: List[Notification] = []
        self.pets: List[Pet] = []
        self.profile: Optional[Dict[str, Any]] = None
        self.selected_point: Optional[WorldPoint] = None
        self._incubations: Dict[str, IncubationRecord] = {}
        self._hatches_in_flight: Set[str] = set()

        if save_path:
            saved = load_session(save_path)
            self._incubations = saved["incubations"]
            self.selected_point = saved["selected_point"]
            if self._incubations:
                logger.info(f"Restored {len(self._incubations)} incubation(s) from {save_path}")

    def _persist(self):
        if self.save_path:
            save_session(self._incubations, self.selected_point, self.save_path)

    # Incubation records

    def get_incubation(self, user_id: Optional[str] = None) -> Optional[IncubationRecord]:
        return self._incubations.get(user_id or self.user_id)

    def set_incubation(self, record: IncubationRecord):
        self._incubations[record.user_id] = record
        self._persist()

    def clear_incubation(self, user_id: Optional[str] = None):
        if self._incubations.pop(user_id or self.user_id, None) is not None:
            self._persist()

    def begin_hatch(self, user_id: Optional[str] = None) -> bool:
        """Claim the user's hatch completion. False if another one is already in flight."""
        user_id = user_id or self.user_id
        if user_id in self._hatches_in_flight:
            return False
        self._hatches_in_flight.add(user_id)
        return True

    def end_hatch(self, user_id: Optional[str] = None):
        self._hatches_in_flight.discard(user_id or self.user_id)

    def hatch_in_flight(self, user_id: Optional[str] = None) -> bool:
        return (user_id or self.user_id) in self._hatches_in_flight

    # World map selection

    def select_world_point(self, point: WorldPoint):
        """Cache the selected world point so the next screen can read it"""
        self.selected_point = point
        self._persist()

    def clear_world_point(self):
        self.selected_point = None
        self._persist()

    # Notifications

    def add_notification(self, type: str, title: str, message: str) -> Notification:
        notification = Notification(type=type, title=title, message=message, created_at=self.clock())
        self.notifications.append(notification)
        logger.debug(f"Notification [{type}] {title}: {message}")
        return notification

    def _notify_failure(self, error: Exception, title: str):
        user_message = classify_error(error)
        self.add_notification("error", title, user_message.message)

    # Backend operations

    async def refresh_profile(self) -> Optional[Dict[str, Any]]:
        """Reload the user's profile; keeps the cached one when the backend fails"""
        try:
            self.profile = await self.client.async_fetch_profile(self.user_id)
        except (TransportError, BackendError) as e:
            self._notify_failure(e, i18n.get("actions.failed_title"))
        return self.profile

    async def create_pet(self, attributes: Dict[str, Any]) -> Optional[Pet]:
        """
        Persist a new pet.

        Returns:
            The stored Pet, or None when the backend call failed (the failure
            is classified and shown as a notification)
        """
        try:
            row = await self.client.async_create_pet(attributes)
        except (TransportError, BackendError) as e:
            self._notify_failure(e, i18n.get("incubation.hatch_failed_title"))
            return None

        pet = Pet.from_record({**attributes, **row})
        self.pets.append(pet)
        return pet

    async def submit_mutation(self, mutation: PendingMutation) -> bool:
        """
        Validate a mutation against the anti-cheat bounds, then persist it.

        Returns:
            True if the backend accepted it; False after a rejected or failed
            mutation (reported as a notification)
        """
        try:
            self.validator.validate(mutation.kind, mutation.payload)
        except ValidationError as e:
            logger.warning(f"Mutation {mutation.kind} blocked: {e}")
            self.add_notification("error", i18n.get("actions.rejected_title"), str(e))
            return False

        try:
            await self.client.async_apply_mutation(mutation)
        except (TransportError, BackendError) as e:
            self._notify_failure(e, i18n.get("actions.failed_title"))
            return False
        return True
