"""
Category/Tag Assignment Reconciler

WHY: The product form sends the full desired set of categories and tags.
Rewriting every mapping row on each save would churn the join tables, so we
diff the persisted set against the desired set and only touch the difference.

RULES:
- to_add = desired - current, to_remove = current - desired, per kind
- Ids in both sets are never written
- Adding a pair that already exists is a no-op success
- A second call with the same desired sets performs zero mutations

FAILURE MODES:
- Best-effort (atomic=False): every planned op is attempted, failures are
  collected in ReconcileResult.failed, applied ops stay applied.
- Atomic (atomic=True): all ops share one transaction; the first failure
  rolls everything back and the result is marked rolled_back.
"""

from __future__ import annotations

import logging
from typing import Iterable

from ..validation import ValidationError
from .exceptions import PersistenceFailure
from .persistence import KIND_CATEGORY, KIND_TAG
from .results import MappingOp, ReconcileResult
from .tenant_service import require_owned

logger = logging.getLogger(__name__)


def diff_assignments(current: Iterable[int], desired: Iterable[int]) -> tuple[set[int], set[int]]:
    """Return (to_add, to_remove) moving `current` to `desired`."""
    current_set = set(current)
    desired_set = set(desired)
    return desired_set - current_set, current_set - desired_set


def _normalize_ids(ids: Iterable | None, field: str) -> set[int]:
    if ids is None:
        return set()
    if isinstance(ids, (str, bytes, dict)):
        raise ValidationError(f"{field} must be a list of ids")
    normalized = set()
    for raw in ids:
        # ints or digit strings; floats are rejected, never truncated
        if isinstance(raw, int) and not isinstance(raw, bool):
            normalized.add(raw)
        elif isinstance(raw, str) and raw.strip().isdigit():
            normalized.add(int(raw.strip()))
        else:
            raise ValidationError(f"{field} must contain integer ids")
    return normalized


class AssignmentReconciler:
    """Moves a product's category and tag mappings to a desired state."""

    def __init__(self, store, seller_id: int, *, atomic: bool = False):
        self.store = store
        self.seller_id = seller_id
        self.atomic = atomic

    def plan(self, product_id: int, category_ids: Iterable | None, tag_ids: Iterable | None) -> list[MappingOp]:
        """
        Validate inputs and compute the ops needed, without writing anything.

        Raises:
            NotFoundError / UnauthorizedError: product missing or foreign
            ValidationError: malformed ids, or ids not owned by the seller
        """
        require_owned(self.store.get_product(product_id), self.seller_id, "Product", product_id)

        desired = {
            KIND_CATEGORY: _normalize_ids(category_ids, "category_ids"),
            KIND_TAG: _normalize_ids(tag_ids, "tag_ids"),
        }

        for kind, ids in desired.items():
            unknown = ids - self.store.owned_target_ids(self.seller_id, kind, ids)
            if unknown:
                listed = ", ".join(str(i) for i in sorted(unknown))
                raise ValidationError(f"Unknown {kind} ids: {listed}")

        ops: list[MappingOp] = []
        for kind, ids in desired.items():
            to_add, to_remove = diff_assignments(self.store.fetch_mappings(product_id, kind), ids)
            ops.extend(MappingOp(kind, "remove", target_id) for target_id in sorted(to_remove))
            ops.extend(MappingOp(kind, "add", target_id) for target_id in sorted(to_add))
        return ops

    def reconcile(self, product_id: int, category_ids: Iterable | None, tag_ids: Iterable | None) -> ReconcileResult:
        """Apply the minimal add/remove set and report what happened."""
        ops = self.plan(product_id, category_ids, tag_ids)
        result = ReconcileResult(product_id=product_id)
        if not ops:
            return result

        if self.atomic:
            self._apply_atomic(product_id, ops, result)
        else:
            self._apply_best_effort(product_id, ops, result)

        if not result.success:
            logger.warning(
                "Reconciliation of product %s incomplete: %d failed, rolled_back=%s",
                product_id, len(result.failed), result.rolled_back,
            )
        return result

    def _apply(self, product_id: int, op: MappingOp) -> None:
        if op.action == "add":
            self.store.add_mapping(product_id, op.kind, op.target_id)
        else:
            self.store.remove_mapping(product_id, op.kind, op.target_id)

    def _apply_best_effort(self, product_id: int, ops: list[MappingOp], result: ReconcileResult) -> None:
        for op in ops:
            try:
                self._apply(product_id, op)
            except PersistenceFailure as exc:
                op.error = str(exc)
                result.failed.append(op)
            else:
                result.record(op)

    def _apply_atomic(self, product_id: int, ops: list[MappingOp], result: ReconcileResult) -> None:
        applied: list[MappingOp] = []
        current = ops[0]
        try:
            with self.store.atomic():
                for op in ops:
                    current = op
                    self._apply(product_id, op)
                    applied.append(op)
        except PersistenceFailure as exc:
            current.error = str(exc)
            result.failed.append(current)
            result.rolled_back = True
            return
        for op in applied:
            result.record(op)
