"""Tests for the collection quantity ledger."""

import logging

import pytest

from cardkeeper.models.collection import LineItem
from cardkeeper.models.failure import (
    FailureKind,
    InvalidModificationError,
    NotFoundError,
)
from cardkeeper.models.modification import QuantityModification, QuantityOperator
from cardkeeper.services.quantity_ledger import (
    QUANTITY_RULES,
    add_line_item,
    apply_modifications,
    normalize_tags,
    parse_modifications,
    remove_line_item,
    update_line_item,
    validate_modifications,
)

add = QuantityModification.add
subtract = QuantityModification.subtract
set_ = QuantityModification.set


def quantities(items: list[LineItem]) -> dict[str, int]:
    return {item.item_id: item.quantity for item in items}


class TestQuantityRules:
    def test_every_operator_has_a_rule(self) -> None:
        assert set(QUANTITY_RULES) == set(QuantityOperator)

    def test_subtract_floors_at_zero(self) -> None:
        assert QUANTITY_RULES[QuantityOperator.SUBTRACT](2, 5) == 0


class TestApplyModifications:
    def test_set_is_idempotent(self) -> None:
        start = [LineItem("a", 1)]

        once = apply_modifications(start, [set_("a", 3)])
        twice = apply_modifications(start, [set_("a", 3), set_("a", 3)])

        assert once == twice == [LineItem("a", 3)]

    def test_subtract_on_absent_item_creates_nothing(self) -> None:
        assert apply_modifications([], [subtract("a", 5)]) == []

    def test_line_item_removed_when_net_reaches_zero(self) -> None:
        result = apply_modifications([LineItem("a", 2)], [add("a", 1), subtract("a", 3)])
        assert result == []

    def test_add_creates_line_item(self) -> None:
        assert apply_modifications([], [add("a", 2)]) == [LineItem("a", 2)]

    def test_add_zero_on_absent_item_creates_nothing(self) -> None:
        assert apply_modifications([], [add("a", 0)]) == []

    def test_add_increments(self) -> None:
        assert apply_modifications([LineItem("a", 2)], [add("a", 3)]) == [LineItem("a", 5)]

    def test_set_zero_removes(self) -> None:
        result = apply_modifications([LineItem("a", 4), LineItem("b", 1)], [set_("a", 0)])
        assert result == [LineItem("b", 1)]

    def test_set_zero_on_absent_item_is_noop(self) -> None:
        assert apply_modifications([LineItem("b", 1)], [set_("a", 0)]) == [LineItem("b", 1)]

    def test_subtract_below_zero_removes(self) -> None:
        assert apply_modifications([LineItem("a", 2)], [subtract("a", 10)]) == []

    def test_same_item_folds_left(self) -> None:
        """Order matters: set then add differs from add then set."""
        start = [LineItem("a", 1)]

        assert apply_modifications(start, [set_("a", 2), add("a", 3)]) == [LineItem("a", 5)]
        assert apply_modifications(start, [add("a", 3), set_("a", 2)]) == [LineItem("a", 2)]

    def test_removed_then_readded_is_appended(self) -> None:
        start = [LineItem("a", 1), LineItem("b", 1)]
        result = apply_modifications(start, [subtract("a", 1), add("a", 2)])
        assert result == [LineItem("b", 1), LineItem("a", 2)]

    def test_distinct_items_are_independent(self) -> None:
        start = [LineItem("a", 1), LineItem("b", 4)]
        result = apply_modifications(start, [add("a", 1), subtract("b", 1), add("c", 1)])
        assert quantities(result) == {"a": 2, "b": 3, "c": 1}

    def test_existing_items_keep_position_notes_and_tags(self) -> None:
        start = [
            LineItem("a", 1, notes="foil", tags=("trade",)),
            LineItem("b", 2),
        ]
        result = apply_modifications(start, [add("c", 1), add("a", 2)])

        assert [item.item_id for item in result] == ["a", "b", "c"]
        assert result[0] == LineItem("a", 3, notes="foil", tags=("trade",))

    def test_does_not_mutate_input(self) -> None:
        start = [LineItem("a", 2)]
        batch = [subtract("a", 2)]

        apply_modifications(start, batch)

        assert start == [LineItem("a", 2)]
        assert batch == [subtract("a", 2)]

    def test_empty_batch(self) -> None:
        assert apply_modifications([LineItem("a", 2)], []) == [LineItem("a", 2)]

    def test_duplicate_input_lines_are_merged(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING):
            result = apply_modifications([LineItem("a", 2), LineItem("a", 3)], [add("a", 1)])

        assert result == [LineItem("a", 6)]
        assert "duplicate" in caplog.text

    def test_invariants_hold(self) -> None:
        start = [LineItem("a", 3), LineItem("b", 1)]
        batch = [
            subtract("a", 1),
            add("c", 2),
            set_("b", 0),
            add("a", 4),
            subtract("c", 2),
            set_("d", 1),
        ]
        result = apply_modifications(start, batch)

        assert all(item.quantity >= 1 for item in result)
        assert len({item.item_id for item in result}) == len(result)
        assert quantities(result) == {"a": 6, "d": 1}


class TestFailClosed:
    def test_negative_amount_rejects_whole_batch(self) -> None:
        start = [LineItem("a", 2)]

        with pytest.raises(InvalidModificationError) as exc_info:
            apply_modifications(start, [add("a", 1), subtract("a", -1)])

        error = exc_info.value
        assert error.index == 1
        assert error.kind is FailureKind.INVALID_MODIFICATION
        assert "position 1" in error.message
        assert start == [LineItem("a", 2)]

    def test_reports_first_invalid_entry(self) -> None:
        batch = [add("a", 1), add("", 1), set_("b", -2)]

        with pytest.raises(InvalidModificationError) as exc_info:
            validate_modifications(batch)

        assert exc_info.value.index == 1

    def test_unknown_operator(self) -> None:
        bad = QuantityModification("a", "multiply", 2)  # type: ignore[arg-type]

        with pytest.raises(InvalidModificationError, match="unknown operator"):
            apply_modifications([], [bad])

    @pytest.mark.parametrize("amount", [1.5, "2", True, None])
    def test_non_integer_amount(self, amount) -> None:
        with pytest.raises(InvalidModificationError, match="integer"):
            apply_modifications([], [QuantityModification("a", QuantityOperator.ADD, amount)])


class TestParseModifications:
    def test_parses_entries(self) -> None:
        result = parse_modifications(
            [
                {"item_id": "a", "operator": "add", "amount": 2},
                {"cardId": "b", "operator": "set", "amount": 0},
            ]
        )
        assert result == [add("a", 2), set_("b", 0)]

    def test_missing_item_id(self) -> None:
        with pytest.raises(InvalidModificationError) as exc_info:
            parse_modifications([{"operator": "add", "amount": 1}])
        assert exc_info.value.index == 0

    def test_bad_operator(self) -> None:
        with pytest.raises(InvalidModificationError, match="add, subtract, set"):
            parse_modifications(
                [
                    {"item_id": "a", "operator": "add", "amount": 1},
                    {"item_id": "b", "operator": "remove", "amount": 1},
                ]
            )

    def test_string_amount_rejected(self) -> None:
        with pytest.raises(InvalidModificationError, match="integer"):
            parse_modifications([{"item_id": "a", "operator": "add", "amount": "3"}])

    def test_negative_amount_rejected(self) -> None:
        with pytest.raises(InvalidModificationError) as exc_info:
            parse_modifications([{"item_id": "a", "operator": "subtract", "amount": -1}])
        assert "zero or more" in exc_info.value.reason


class TestNormalizeTags:
    def test_strips_and_dedupes(self) -> None:
        assert normalize_tags([" trade ", "foil", "trade", ""]) == ("trade", "foil")

    def test_none(self) -> None:
        assert normalize_tags(None) == ()


class TestAddLineItem:
    def test_appends_new_card(self) -> None:
        result = add_line_item([LineItem("a", 1)], LineItem("b", 2, notes="NM", tags=("x",)))
        assert result == [LineItem("a", 1), LineItem("b", 2, notes="NM", tags=("x",))]

    def test_merges_into_existing(self) -> None:
        start = [LineItem("a", 1, notes="old", tags=("keep",))]

        result = add_line_item(start, LineItem("a", 2))

        assert result == [LineItem("a", 3, notes="old", tags=("keep",))]

    def test_given_notes_and_tags_replace(self) -> None:
        start = [LineItem("a", 1, notes="old", tags=("keep",))]

        result = add_line_item(start, LineItem("a", 1, notes="new", tags=("swap",)))

        assert result == [LineItem("a", 2, notes="new", tags=("swap",))]

    def test_zero_quantity_rejected(self) -> None:
        with pytest.raises(InvalidModificationError):
            add_line_item([], LineItem("a", 0))


class TestUpdateLineItem:
    def test_updates_notes_only(self) -> None:
        start = [LineItem("a", 2, notes="old", tags=("t",))]
        result = update_line_item(start, "a", notes="new")
        assert result == [LineItem("a", 2, notes="new", tags=("t",))]

    def test_empty_tags_clear(self) -> None:
        result = update_line_item([LineItem("a", 2, tags=("t",))], "a", tags=[])
        assert result == [LineItem("a", 2)]

    def test_quantity_sets(self) -> None:
        result = update_line_item([LineItem("a", 2), LineItem("b", 1)], "a", quantity=5)
        assert result == [LineItem("a", 5), LineItem("b", 1)]

    def test_quantity_zero_removes(self) -> None:
        assert update_line_item([LineItem("a", 2)], "a", quantity=0) == []

    def test_negative_quantity_rejected(self) -> None:
        with pytest.raises(InvalidModificationError):
            update_line_item([LineItem("a", 2)], "a", quantity=-1)

    def test_missing_item(self) -> None:
        with pytest.raises(NotFoundError) as exc_info:
            update_line_item([LineItem("a", 2)], "b", notes="x")
        assert exc_info.value.status_code == 404


class TestRemoveLineItem:
    def test_removes_regardless_of_quantity(self) -> None:
        result = remove_line_item([LineItem("a", 9), LineItem("b", 1)], "a")
        assert result == [LineItem("b", 1)]

    def test_missing_item(self) -> None:
        with pytest.raises(NotFoundError):
            remove_line_item([LineItem("a", 1)], "b")
