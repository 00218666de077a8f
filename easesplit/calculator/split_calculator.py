"""
Split Calculator

Derives what each person owes and the grand total from snapshots of the
current people and items.

DESIGN DECISION: Every function here is pure. The caller passes the
current people/items on each call and gets fresh result values back.
Nothing raises on malformed input: numeric fields are coerced through
to_safe_number, and shares owed by ids that are not in the people
snapshot are dropped. Arithmetic runs with the decimal traps cleared, so
a result too large for the context comes back non-finite and is replaced
by zero like any other invalid amount.

Amounts stay at full Decimal precision. Rounding for display belongs
to the caller.
"""

from collections.abc import Hashable, Iterable, Iterator, Sequence
from contextlib import contextmanager
from decimal import Decimal, localcontext
from typing import Any

from easesplit.audit.logger import get_logger
from easesplit.calculator.numeric import (
    PRICE_FALLBACK,
    QUANTITY_FALLBACK,
    TAX_PERCENT_FALLBACK,
    to_safe_number,
)
from easesplit.models.split import (
    Item,
    ItemBreakdown,
    Person,
    PersonShare,
    SplitSummary,
)

logger = get_logger(__name__)

HUNDRED = Decimal("100")
ZERO = Decimal("0")


@contextmanager
def _untrapped() -> Iterator[None]:
    """Overflow and invalid operations yield Infinity/NaN instead of raising."""
    with localcontext() as ctx:
        ctx.clear_traps()
        yield


def _sharers(item: Any) -> list[str]:
    """Distinct ids splitting an item, first-seen order."""
    shared_by = getattr(item, "shared_by", None)
    if not shared_by or isinstance(shared_by, (str, bytes)):
        return []
    if not isinstance(shared_by, Iterable):
        return []
    return list(dict.fromkeys(pid for pid in shared_by if isinstance(pid, Hashable)))


def compute_item_base(item: Item) -> Decimal:
    """price x quantity, with invalid fields replaced by their fallbacks."""
    price = to_safe_number(getattr(item, "price", None), PRICE_FALLBACK)
    quantity = to_safe_number(getattr(item, "quantity", None), QUANTITY_FALLBACK)
    with _untrapped():
        return to_safe_number(price * quantity, ZERO)


def compute_item_tax(item: Item) -> Decimal:
    """Tax on the item base at its tax_percent rate."""
    tax_percent = to_safe_number(getattr(item, "tax_percent", None), TAX_PERCENT_FALLBACK)
    base = compute_item_base(item)
    with _untrapped():
        return to_safe_number(base * tax_percent / HUNDRED, ZERO)


def compute_item_total(item: Item) -> Decimal:
    """Full charge for the item before splitting."""
    base = compute_item_base(item)
    tax = compute_item_tax(item)
    with _untrapped():
        return to_safe_number(base + tax, ZERO)


def compute_per_person_totals(
    people: Sequence[Person],
    items: Sequence[Item],
) -> dict[str, Decimal]:
    """
    Amount owed by each person.

    Every person in the snapshot gets an entry, even at zero, so the caller
    can render a stable list. Items shared by nobody contribute nothing here.
    Each other item is split evenly among its distinct sharers.

    Args:
        people: Current people snapshot
        items: Current items snapshot

    Returns:
        {person_id: amount} in the order of `people`
    """
    totals: dict[str, Decimal] = {person.id: ZERO for person in people}

    with _untrapped():
        for item in items:
            sharers = _sharers(item)
            if not sharers:
                continue

            share = compute_item_total(item) / len(sharers)

            for person_id in sharers:
                if person_id in totals:
                    totals[person_id] += share
                else:
                    # Stale id (person removed): the share has nowhere to land
                    logger.debug(
                        "share_dropped_for_unknown_person",
                        item_id=getattr(item, "id", None),
                        person_id=person_id,
                        share=str(share),
                    )

    return {person_id: to_safe_number(amount, ZERO) for person_id, amount in totals.items()}


def compute_grand_total(items: Sequence[Item]) -> Decimal:
    """Sum of every item's total, assigned or not."""
    with _untrapped():
        total = sum((compute_item_total(item) for item in items), ZERO)
    return to_safe_number(total, ZERO)


class SplitCalculator:
    """
    Object facade over the split functions.

    Holds no state between calls; one instance can serve any number of
    sessions.
    """

    compute_item_base = staticmethod(compute_item_base)
    compute_item_tax = staticmethod(compute_item_tax)
    compute_item_total = staticmethod(compute_item_total)
    compute_per_person_totals = staticmethod(compute_per_person_totals)
    compute_grand_total = staticmethod(compute_grand_total)

    def summarize(
        self,
        people: Sequence[Person],
        items: Sequence[Item],
    ) -> SplitSummary:
        """
        Build the full summary a caller displays after each mutation.

        Includes a per-item breakdown, per-person amounts with names,
        the grand total and the value still unassigned.
        """
        breakdowns = []
        unassigned = ZERO

        for item in items:
            base = compute_item_base(item)
            tax = compute_item_tax(item)
            total = compute_item_total(item)
            share_count = len(_sharers(item))
            if share_count == 0:
                with _untrapped():
                    unassigned += total
            breakdowns.append(ItemBreakdown(
                item_id=str(getattr(item, "id", "")),
                name=str(getattr(item, "name", "")),
                base=base,
                tax=tax,
                total=total,
                share_count=share_count,
            ))

        totals = compute_per_person_totals(people, items)
        shares = [
            PersonShare(person_id=person.id, name=person.name, amount=totals[person.id])
            for person in people
        ]

        return SplitSummary(
            items=breakdowns,
            shares=shares,
            grand_total=compute_grand_total(items),
            unassigned_total=to_safe_number(unassigned, ZERO),
        )
