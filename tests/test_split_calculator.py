"""
Tests for the split calculator

Covers item arithmetic, per-person splitting, the grand total and the
graceful handling of malformed snapshots.
"""

import pytest
from decimal import Decimal

from easesplit.calculator import (
    SplitCalculator,
    compute_grand_total,
    compute_item_base,
    compute_item_tax,
    compute_item_total,
    compute_per_person_totals,
)
from easesplit.models.split import Item, Person


@pytest.fixture
def alice():
    return Person(id="alice", name="Alice")


@pytest.fixture
def bob():
    return Person(id="bob", name="Bob")


@pytest.fixture
def carol():
    return Person(id="carol", name="Carol")


class TestItemArithmetic:
    """Tests for base / tax / total of a single item."""

    def test_base_is_price_times_quantity(self):
        """Base multiplies unit price by quantity."""
        item = Item(name="Pizza", price=Decimal("12.50"), quantity=3)
        assert compute_item_base(item) == Decimal("37.50")

    def test_tax_is_percentage_of_base(self):
        """Tax is base * tax_percent / 100."""
        item = Item(name="Pizza", price=Decimal("10"), quantity=2, tax_percent=Decimal("13"))
        assert compute_item_tax(item) == Decimal("2.6")

    def test_total_is_base_plus_tax(self):
        """Total adds tax to the base."""
        item = Item(name="Wine", price=Decimal("20"), tax_percent=Decimal("15"))
        assert compute_item_total(item) == Decimal("23")

    def test_zero_tax_total_equals_base(self):
        """Without tax the total is just the base."""
        item = Item(name="Water", price=Decimal("1.25"), quantity=4)
        assert compute_item_total(item) == compute_item_base(item)

    def test_nan_price_falls_back_to_zero(self):
        """A NaN price never propagates into the base."""
        item = Item.model_construct(name="Broken", price=float("nan"), quantity=2)
        base = compute_item_base(item)
        assert base.is_finite()
        assert base == Decimal("0")

    def test_missing_quantity_falls_back_to_one(self):
        """An item without a quantity is treated as one unit."""
        item = Item.model_construct(name="Soup", price=Decimal("7"), quantity=None)
        assert compute_item_base(item) == Decimal("7")

    def test_string_fields_fall_back(self):
        """Half-typed text in numeric fields uses the fallbacks."""
        item = Item.model_construct(
            name="Typing",
            price="12.",
            quantity="two",
            tax_percent="13%",
        )
        assert compute_item_base(item) == Decimal("0")
        assert compute_item_tax(item) == Decimal("0")

    def test_invalid_tax_falls_back_to_zero(self):
        """An infinite tax rate is ignored rather than exploding the total."""
        item = Item.model_construct(name="Cake", price=Decimal("8"), quantity=1, tax_percent=float("inf"))
        assert compute_item_total(item) == Decimal("8")

    def test_float_fields_are_accepted(self):
        """Plain floats from a caller are used at their decimal value."""
        item = Item.model_construct(name="Tea", price=2.5, quantity=2, tax_percent=10.0)
        assert compute_item_total(item) == Decimal("5.5")


class TestPerPersonTotals:
    """Tests for compute_per_person_totals."""

    def test_two_people_share_taxed_item(self, alice, bob):
        """10 at 10% tax split two ways is 5.50 each."""
        items = [Item(
            name="Dinner",
            price=Decimal("10"),
            quantity=1,
            tax_percent=Decimal("10"),
            shared_by=["alice", "bob"],
        )]
        totals = compute_per_person_totals([alice, bob], items)
        assert totals == {"alice": Decimal("5.5"), "bob": Decimal("5.5")}
        assert compute_grand_total(items) == Decimal("11")

    def test_every_person_appears_even_with_nothing_owed(self, alice, bob, carol):
        """People with no items still get a zero entry."""
        items = [Item(name="Coffee", price=Decimal("3"), shared_by=["alice"])]
        totals = compute_per_person_totals([alice, bob, carol], items)
        assert list(totals) == ["alice", "bob", "carol"]
        assert totals["bob"] == Decimal("0")
        assert totals["carol"] == Decimal("0")

    def test_unshared_item_contributes_to_nobody(self, alice, bob):
        """An item shared by nobody adds nothing to any person."""
        items = [Item(name="Mystery", price=Decimal("40"))]
        totals = compute_per_person_totals([alice, bob], items)
        assert all(amount == Decimal("0") for amount in totals.values())
        assert compute_grand_total(items) == Decimal("40")

    def test_split_is_lossless(self, alice, bob, carol):
        """Shares across sharers add back up to the item total."""
        item = Item(
            name="Platter",
            price=Decimal("10"),
            tax_percent=Decimal("13"),
            shared_by=["alice", "bob", "carol"],
        )
        totals = compute_per_person_totals([alice, bob, carol], [item])
        assert abs(sum(totals.values()) - compute_item_total(item)) < Decimal("1e-20")

    def test_duplicate_sharer_is_not_double_counted(self, alice, bob):
        """A repeated id in an unvalidated snapshot still counts once."""
        item = Item.model_construct(
            id="x",
            name="Fries",
            price=Decimal("6"),
            quantity=1,
            tax_percent=Decimal("0"),
            shared_by=["alice", "alice", "bob"],
        )
        totals = compute_per_person_totals([alice, bob], [item])
        assert totals == {"alice": Decimal("3"), "bob": Decimal("3")}

    def test_unknown_sharer_is_dropped(self, alice):
        """A stale id gets its share computed and discarded, not an error."""
        item = Item(name="Nachos", price=Decimal("9"), shared_by=["alice", "ghost"])
        totals = compute_per_person_totals([alice], [item])
        assert totals == {"alice": Decimal("4.5")}
        assert "ghost" not in totals

    def test_only_unknown_sharers(self, alice):
        """An item shared only by unknown ids changes nobody's total."""
        item = Item(name="Dessert", price=Decimal("5"), shared_by=["ghost"])
        assert compute_per_person_totals([alice], [item]) == {"alice": Decimal("0")}

    def test_shares_accumulate_across_items(self, alice, bob):
        """A person's total sums their shares of every item."""
        items = [
            Item(name="Burger", price=Decimal("12"), shared_by=["alice"]),
            Item(name="Salad", price=Decimal("8"), shared_by=["alice", "bob"]),
            Item(name="Beer", price=Decimal("6"), quantity=2, shared_by=["bob"]),
        ]
        totals = compute_per_person_totals([alice, bob], items)
        assert totals["alice"] == Decimal("16")
        assert totals["bob"] == Decimal("16")

    def test_no_people(self):
        """An empty people snapshot gives an empty mapping."""
        item = Item(name="Bread", price=Decimal("2"), shared_by=["alice"])
        assert compute_per_person_totals([], [item]) == {}

    def test_malformed_shared_by_is_treated_as_empty(self, alice):
        """A non-list shared_by in a corrupt snapshot is ignored."""
        item = Item.model_construct(name="Odd", price=Decimal("5"), quantity=1, shared_by=None)
        assert compute_per_person_totals([alice], [item]) == {"alice": Decimal("0")}


class TestGrandTotal:
    """Tests for compute_grand_total."""

    def test_empty_items(self):
        """No items means a zero total."""
        assert compute_grand_total([]) == Decimal("0")

    def test_independent_of_assignment(self, alice):
        """Assigning items doesn't change the grand total."""
        unassigned = [
            Item(id="a", name="Tacos", price=Decimal("9"), tax_percent=Decimal("5")),
            Item(id="b", name="Soda", price=Decimal("2"), quantity=3),
        ]
        assigned = [item.model_copy(update={"shared_by": ["alice"]}) for item in unassigned]
        assert compute_grand_total(unassigned) == compute_grand_total(assigned)

    def test_equals_sum_of_item_totals(self):
        """Grand total is the sum of per-item totals."""
        items = [
            Item(name="Ramen", price=Decimal("14"), tax_percent=Decimal("18")),
            Item(name="Gyoza", price=Decimal("6.5"), quantity=2, tax_percent=Decimal("5")),
        ]
        assert compute_grand_total(items) == sum(compute_item_total(i) for i in items)

    def test_idempotent(self, alice, bob):
        """Running twice on the same snapshot gives identical results."""
        people = [alice, bob]
        items = [Item(name="Pie", price=Decimal("7"), tax_percent=Decimal("13"), shared_by=["alice", "bob"])]
        assert compute_grand_total(items) == compute_grand_total(items)
        assert compute_per_person_totals(people, items) == compute_per_person_totals(people, items)


class TestHugeAmounts:
    """Tests for amounts beyond the decimal context's range."""

    def test_overflowing_base_falls_back_to_zero(self):
        """A product too large for the context is treated as invalid."""
        item = Item.model_construct(name="Typo", price=Decimal("9E+999999"), quantity=10, tax_percent=Decimal("0"))
        assert compute_item_base(item) == Decimal("0")
        assert compute_item_total(item) == Decimal("0")

    def test_overflowing_tax_falls_back_to_zero(self):
        """A finite base taxed past the range gives zero tax, not an error."""
        item = Item.model_construct(name="Typo", price=Decimal("9E+999999"), quantity=1, tax_percent=Decimal("500"))
        assert compute_item_base(item) == Decimal("9E+999999")
        assert compute_item_tax(item) == Decimal("0")

    def test_overflowing_sums_do_not_raise(self, alice):
        """Totals that overflow while accumulating come back as zero."""
        items = [
            Item(name="Big", price=Decimal("9E+999999"), shared_by=["alice"]),
            Item(name="Bigger", price=Decimal("9E+999999"), shared_by=["alice"]),
        ]
        assert compute_grand_total(items) == Decimal("0")
        assert compute_per_person_totals([alice], items) == {"alice": Decimal("0")}

    def test_summary_with_overflowing_item(self, alice):
        """summarize completes for an item whose charge overflows."""
        item = Item(name="Typo", price=Decimal("9E+999999"), quantity=10, shared_by=["alice"])
        summary = SplitCalculator().summarize([alice], [item])
        assert summary.items[0].total == Decimal("0")
        assert summary.grand_total == Decimal("0")
        assert summary.per_person == {"alice": Decimal("0")}


class TestSummarize:
    """Tests for SplitCalculator.summarize."""

    def test_summary_contents(self, alice, bob):
        """Summary carries item breakdowns, named shares and totals."""
        items = [
            Item(id="i1", name="Steak", price=Decimal("30"), tax_percent=Decimal("10"), shared_by=["alice"]),
            Item(id="i2", name="Bread", price=Decimal("4")),
        ]
        summary = SplitCalculator().summarize([alice, bob], items)

        assert [b.item_id for b in summary.items] == ["i1", "i2"]
        assert summary.items[0].base == Decimal("30")
        assert summary.items[0].tax == Decimal("3")
        assert summary.items[0].total == Decimal("33")
        assert summary.items[0].share_count == 1
        assert summary.items[1].share_count == 0

        assert [s.name for s in summary.shares] == ["Alice", "Bob"]
        assert summary.per_person == {"alice": Decimal("33"), "bob": Decimal("0")}
        assert summary.grand_total == Decimal("37")
        assert summary.unassigned_total == Decimal("4")

    def test_facade_methods_match_functions(self, alice):
        """The class exposes the same computations as the module functions."""
        calculator = SplitCalculator()
        item = Item(name="Olives", price=Decimal("5"), tax_percent=Decimal("5"), shared_by=["alice"])
        assert calculator.compute_item_total(item) == compute_item_total(item)
        assert calculator.compute_per_person_totals([alice], [item]) == {"alice": Decimal("5.25")}


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
