"""Anti-cheat bounds validation for client-side game actions"""
import logging
import math
from numbers import Real
from typing import Any, Dict, Mapping, Optional

import i18n
from .config import CONFIG
from .errors import ValidationError
from .models import ACTION_CURRENCY_GAIN, ACTION_PET_STAT_UPDATE, ACTION_ITEM_ADD

logger = logging.getLogger(__name__)


def _check_number(value: Any, action_kind: str, field: str) -> None:
    # bool is a Number subclass but never a legitimate delta; NaN and inf compare past every bound
    if isinstance(value, bool) or not isinstance(value, Real) or not math.isfinite(value):
        raise ValidationError(
            i18n.get("errors.invalid_number", field=field),
            action_kind=action_kind,
            field=field
        )


class ActionValidator:
    """
    Rejects implausible state deltas before they are persisted.

    Bounds are inclusive maxima:
    - currency_gain: amount <= xenocoins_gain
    - pet_stat_update: abs(delta) <= pet_stat_change for every stat
    - item_add: quantity <= item_quantity

    Unknown action kinds pass through unchecked so new kinds are not blocked
    before they are enumerated here.
    """

    def __init__(self, bounds: Optional[Mapping[str, int]] = None):
        self.bounds: Dict[str, int] = dict(CONFIG["ACTION_BOUNDS"])
        if bounds:
            self.bounds.update(bounds)

    def validate(self, action_kind: str, payload: Optional[Mapping[str, Any]]) -> None:
        """
        Validate an action against the bound table.

        Args:
            action_kind: One of currency_gain, pet_stat_update, item_add
            payload: Action data (amount, stats or quantity)

        Raises:
            ValidationError: If any bound is exceeded
        """
        payload = payload or {}

        if action_kind == ACTION_CURRENCY_GAIN:
            self._validate_currency_gain(payload)
        elif action_kind == ACTION_PET_STAT_UPDATE:
            self._validate_stat_update(payload)
        elif action_kind == ACTION_ITEM_ADD:
            self._validate_item_add(payload)
        else:
            logger.debug(f"No bounds declared for action '{action_kind}', accepting")

    def _validate_currency_gain(self, payload: Mapping[str, Any]) -> None:
        amount = payload.get("amount")
        if amount is None:
            return
        _check_number(amount, ACTION_CURRENCY_GAIN, "amount")
        if amount > self.bounds["xenocoins_gain"]:
            logger.warning(f"Rejected currency gain of {amount} (max {self.bounds['xenocoins_gain']})")
            raise ValidationError(
                i18n.get("errors.invalid_currency_gain"),
                action_kind=ACTION_CURRENCY_GAIN,
                field="amount"
            )

    def _validate_stat_update(self, payload: Mapping[str, Any]) -> None:
        stats = payload.get("stats") or {}
        if not isinstance(stats, Mapping):
            logger.warning(f"Rejected stat update with non-mapping stats: {type(stats).__name__}")
            raise ValidationError(
                i18n.get("errors.invalid_stats"),
                action_kind=ACTION_PET_STAT_UPDATE,
                field="stats"
            )
        limit = self.bounds["pet_stat_change"]
        for stat, value in stats.items():
            _check_number(value, ACTION_PET_STAT_UPDATE, stat)
            if abs(value) > limit:
                logger.warning(f"Rejected stat change {stat}={value} (max |{limit}|)")
                raise ValidationError(
                    i18n.get("errors.invalid_stat_change", stat=stat),
                    action_kind=ACTION_PET_STAT_UPDATE,
                    field=stat
                )

    def _validate_item_add(self, payload: Mapping[str, Any]) -> None:
        quantity = payload.get("quantity")
        if quantity is None:
            return
        _check_number(quantity, ACTION_ITEM_ADD, "quantity")
        if quantity > self.bounds["item_quantity"]:
            logger.warning(f"Rejected item quantity {quantity} (max {self.bounds['item_quantity']})")
            raise ValidationError(
                i18n.get("errors.invalid_item_quantity"),
                action_kind=ACTION_ITEM_ADD,
                field="quantity"
            )


_default_validator = ActionValidator()


def validate_game_action(action_kind: str, payload: Optional[Mapping[str, Any]]) -> bool:
    """Validate with the default bound table. Returns True or raises ValidationError."""
    _default_validator.validate(action_kind, payload)
    return True
