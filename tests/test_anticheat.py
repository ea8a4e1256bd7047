"""Tests for anti-cheat action bounds"""
import pytest
from hypothesis import given, settings, strategies as st

from core.anticheat import ActionValidator, validate_game_action
from core.errors import ValidationError


class TestCurrencyGain:
    def test_boundary_accepted(self):
        assert validate_game_action("currency_gain", {"amount": 10000}) is True

    def test_above_boundary_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_game_action("currency_gain", {"amount": 10001})
        assert exc_info.value.action_kind == "currency_gain"
        assert exc_info.value.field == "amount"
        assert str(exc_info.value) == "Invalid currency gain amount"

    def test_missing_amount_passes(self):
        assert validate_game_action("currency_gain", {}) is True

    def test_non_numeric_amount_rejected(self):
        with pytest.raises(ValidationError):
            validate_game_action("currency_gain", {"amount": "9999999"})


class TestPetStatUpdate:
    def test_stat_of_ten_accepted(self):
        assert validate_game_action("pet_stat_update", {"stats": {"strength": 10}}) is True

    def test_stat_of_eleven_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_game_action("pet_stat_update", {"stats": {"strength": 11}})
        assert exc_info.value.field == "strength"
        assert "strength" in str(exc_info.value)

    def test_negative_delta_checked_by_absolute_value(self):
        assert validate_game_action("pet_stat_update", {"stats": {"hunger": -10}}) is True
        with pytest.raises(ValidationError):
            validate_game_action("pet_stat_update", {"stats": {"hunger": -11}})

    def test_violating_stat_is_named(self):
        stats = {"strength": 2, "luck": 3, "speed": 40}
        with pytest.raises(ValidationError) as exc_info:
            validate_game_action("pet_stat_update", {"stats": stats})
        assert exc_info.value.field == "speed"

    def test_empty_stats_pass(self):
        assert validate_game_action("pet_stat_update", {"stats": {}}) is True

    def test_boolean_is_not_a_delta(self):
        with pytest.raises(ValidationError):
            validate_game_action("pet_stat_update", {"stats": {"luck": True}})


class TestItemAdd:
    def test_boundary_accepted(self):
        assert validate_game_action("item_add", {"quantity": 100}) is True

    def test_above_boundary_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_game_action("item_add", {"quantity": 101})
        assert exc_info.value.field == "quantity"


class TestNonFiniteValues:
    """NaN and infinity compare false against every bound and must be refused"""

    @pytest.mark.parametrize("action_kind,payload,field", [
        ("currency_gain", {"amount": float("nan")}, "amount"),
        ("currency_gain", {"amount": float("inf")}, "amount"),
        ("item_add", {"quantity": float("nan")}, "quantity"),
        ("item_add", {"quantity": float("-inf")}, "quantity"),
        ("pet_stat_update", {"stats": {"strength": float("nan")}}, "strength"),
        ("pet_stat_update", {"stats": {"luck": float("inf")}}, "luck"),
    ])
    def test_non_finite_rejected(self, action_kind, payload, field):
        with pytest.raises(ValidationError) as exc_info:
            validate_game_action(action_kind, payload)
        assert exc_info.value.action_kind == action_kind
        assert exc_info.value.field == field

    def test_finite_float_within_bound_accepted(self):
        assert validate_game_action("currency_gain", {"amount": 9999.5}) is True


class TestMalformedStats:
    @pytest.mark.parametrize("stats", [[["strength", 50]], "strength=50", 7])
    def test_non_mapping_stats_rejected(self, stats):
        with pytest.raises(ValidationError) as exc_info:
            validate_game_action("pet_stat_update", {"stats": stats})
        assert exc_info.value.field == "stats"
        assert str(exc_info.value) == "Stat changes must be given per stat name"


class TestPermissiveDefaults:
    def test_unknown_action_passes_through(self):
        assert validate_game_action("feed_pet", {"amount": 10 ** 9}) is True

    def test_none_payload_passes(self):
        assert validate_game_action("currency_gain", None) is True

    def test_custom_bounds(self):
        validator = ActionValidator(bounds={"item_quantity": 5})
        validator.validate("item_add", {"quantity": 5})
        with pytest.raises(ValidationError):
            validator.validate("item_add", {"quantity": 6})

    def test_validation_never_mutates_payload(self):
        payload = {"stats": {"strength": 3, "luck": 50}}
        snapshot = {"stats": dict(payload["stats"])}
        with pytest.raises(ValidationError):
            validate_game_action("pet_stat_update", payload)
        assert payload == snapshot


class TestStatBoundProperties:
    """Property-based checks of the stat bound"""

    @given(stats=st.dictionaries(
        st.sampled_from(["strength", "dexterity", "intelligence", "speed", "luck"]),
        st.integers(min_value=-10, max_value=10)
    ))
    @settings(max_examples=200)
    def test_in_range_stats_always_accepted(self, stats):
        """Invariant: every stat within [-10, 10] passes regardless of how many are sent"""
        assert validate_game_action("pet_stat_update", {"stats": stats}) is True

    @given(
        stats=st.dictionaries(st.text(min_size=1, max_size=8), st.integers(min_value=-10, max_value=10)),
        bad_value=st.one_of(st.integers(min_value=11, max_value=10 ** 6), st.integers(min_value=-10 ** 6, max_value=-11))
    )
    @settings(max_examples=200)
    def test_one_violation_rejects_whole_update(self, stats, bad_value):
        """Invariant: a single out-of-range stat rejects the update and is named"""
        stats = {**stats, "__bad__": bad_value}
        with pytest.raises(ValidationError) as exc_info:
            validate_game_action("pet_stat_update", {"stats": stats})
        assert exc_info.value.field == "__bad__"
