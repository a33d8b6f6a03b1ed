"""Field-level structural diff between two snapshots."""

from __future__ import annotations

from collections.abc import Sequence

from services.state.change_tracking.domain import FieldDiff, Scalar, Snapshot


def values_equal(left: Scalar, right: Scalar) -> bool:
    """Compare two scalars without bool/int or int/float coercion."""
    return type(left) is type(right) and left == right


def diff_snapshots(
    before: Snapshot,
    after: Snapshot,
    fields: Sequence[str],
) -> list[FieldDiff]:
    """Return one diff per changed field, in ``fields`` order.

    Only ``values`` are compared; reference sub-objects follow their foreign
    keys and are not diffed on their own.
    """
    diffs: list[FieldDiff] = []
    for field in fields:
        old = before.value(field)
        new = after.value(field)
        if not values_equal(old, new):
            diffs.append(FieldDiff(field=field, before=old, after=new))
    return diffs
