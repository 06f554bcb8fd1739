"""
Pure ordering rules for board columns.

Every column of a project keeps a dense, zero-based ``order``: the orders of
its n tasks are exactly 0..n-1. Nothing in this module touches a store; it
only computes which ranges have to shift and where the moved task lands, so
the same plan can be applied by a bulk update against any backend or
previewed in memory.
"""
from dataclasses import dataclass
from typing import Dict, Iterable, Mapping, Optional, Sequence, Tuple

from .models import TaskStatus

Placement = Tuple[TaskStatus, int]

@dataclass(frozen=True)
class OrderShift:
    """Add ``delta`` to every order in ``[lower, upper]`` of one column.

    Either bound may be ``None`` for an open range.
    """
    status: TaskStatus
    delta: int
    lower: Optional[int] = None
    upper: Optional[int] = None

    def matches(self, status: TaskStatus, order: int) -> bool:
        if status != self.status:
            return False
        if self.lower is not None and order < self.lower:
            return False
        if self.upper is not None and order > self.upper:
            return False
        return True

@dataclass(frozen=True)
class MovePlan:
    source_status: TaskStatus
    source_order: int
    target_status: TaskStatus
    target_order: int
    shifts: Tuple[OrderShift, ...] = ()

    @property
    def cross_column(self) -> bool:
        return self.source_status != self.target_status

    @property
    def is_noop(self) -> bool:
        return not self.cross_column and self.source_order == self.target_order

def append_position(column_size: int) -> int:
    """Order given to a task created at the end of a column."""
    return column_size

def clamp_target(target_order: int, column_size: int, same_column: bool) -> int:
    """Clamp a requested position into the range the column can hold.

    ``column_size`` is the destination's current size. A task moving within
    its own column can land on 0..n-1; one arriving from another column on
    0..n.
    """
    if target_order < 0:
        raise ValueError(f"order must be non-negative, got {target_order}")
    highest = column_size - 1 if same_column else column_size
    return min(target_order, max(highest, 0))

def plan_move(source_status: TaskStatus, source_order: int,
              target_status: TaskStatus, target_order: int,
              target_size: int) -> MovePlan:
    """Compute the shifts needed to move one task.

    Args:
        source_status: Column the task currently sits in.
        source_order: The task's current order.
        target_status: Destination column.
        target_order: Requested position, clamped to the destination.
        target_size: Number of tasks currently in the destination column,
            the moving task included when it is the same column.

    Returns:
        A MovePlan whose shifts, applied to every task except the moved one,
        keep both columns dense once the task takes ``target_order``.
    """
    same = source_status == target_status
    target_order = clamp_target(target_order, target_size, same)

    if not same:
        shifts = (
            OrderShift(source_status, -1, lower=source_order + 1),
            OrderShift(target_status, +1, lower=target_order),
        )
    elif target_order > source_order:
        shifts = (OrderShift(source_status, -1, lower=source_order + 1, upper=target_order),)
    elif target_order < source_order:
        shifts = (OrderShift(source_status, +1, lower=target_order, upper=source_order - 1),)
    else:
        shifts = ()

    return MovePlan(source_status, source_order, target_status, target_order, shifts)

def plan_delete(status: TaskStatus, order: int) -> OrderShift:
    """Shift closing the gap left by removing the task at ``order``."""
    return OrderShift(status, -1, lower=order + 1)

def apply_plan(placements: Mapping[str, Placement], task_id: str,
               plan: MovePlan) -> Dict[str, Placement]:
    """Apply a plan to an in-memory snapshot of one project's placements.

    Returns only the entries whose placement changes, i.e. the minimal set of
    writes a store has to make.
    """
    changed: Dict[str, Placement] = {}
    for other_id, (status, order) in placements.items():
        if other_id == task_id:
            continue
        new_order = order
        for shift in plan.shifts:
            if shift.matches(status, order):
                new_order += shift.delta
        if new_order != order:
            changed[other_id] = (status, new_order)

    if (plan.target_status, plan.target_order) != placements[task_id]:
        changed[task_id] = (plan.target_status, plan.target_order)
    return changed

def is_dense(orders: Iterable[int]) -> bool:
    orders = list(orders)
    return sorted(orders) == list(range(len(orders)))

def renumber(ids_in_order: Sequence[str]) -> Dict[str, int]:
    """Dense orders for ids already sorted into display order."""
    return {task_id: index for index, task_id in enumerate(ids_in_order)}
