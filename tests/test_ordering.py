"""Unit tests for the pure ordering rules."""

import pytest

from taskboard.models import TaskStatus
from taskboard.ordering import (
    OrderShift, MovePlan, append_position, clamp_target, plan_move,
    plan_delete, apply_plan, is_dense, renumber
)

TODO = TaskStatus.TODO
DOING = TaskStatus.IN_PROGRESS
DONE = TaskStatus.DONE


def reordered(columns, task_id, target_status, target_order):
    """Expected columns after a move, computed by list insertion."""
    result = {status: list(ids) for status, ids in columns.items()}
    source = next(s for s, ids in result.items() if task_id in ids)
    result[source].remove(task_id)
    destination = result[target_status]
    destination.insert(min(target_order, len(destination)), task_id)
    return result


class TestOrderShift:
    """Range matching of a single shift."""

    def test_matches_closed_range(self):
        """Both bounds are inclusive."""
        shift = OrderShift(TODO, -1, lower=1, upper=3)
        assert [o for o in range(5) if shift.matches(TODO, o)] == [1, 2, 3]

    def test_matches_open_range(self):
        """A missing upper bound runs to the end of the column."""
        shift = OrderShift(TODO, +1, lower=2)
        assert [o for o in range(5) if shift.matches(TODO, o)] == [2, 3, 4]

    def test_never_matches_other_column(self):
        """Shifts are scoped to their own column."""
        shift = OrderShift(TODO, +1)
        assert not shift.matches(DONE, 0)


class TestPlanMove:
    """Test the shifts computed for each kind of move."""

    def test_cross_column(self):
        """The source closes its gap and the target opens a slot."""
        plan = plan_move(TODO, 1, DOING, 0, target_size=2)
        assert plan.cross_column
        assert plan.shifts == (
            OrderShift(TODO, -1, lower=2),
            OrderShift(DOING, +1, lower=0),
        )
        assert (plan.target_status, plan.target_order) == (DOING, 0)

    def test_same_column_later(self):
        """Tasks between the old and new slot move up."""
        plan = plan_move(TODO, 0, TODO, 2, target_size=3)
        assert plan.shifts == (OrderShift(TODO, -1, lower=1, upper=2),)
        assert plan.target_order == 2

    def test_same_column_earlier(self):
        """Tasks between the new and old slot move down."""
        plan = plan_move(TODO, 2, TODO, 0, target_size=3)
        assert plan.shifts == (OrderShift(TODO, +1, lower=0, upper=1),)
        assert plan.target_order == 0

    def test_same_position_is_noop(self):
        """Moving onto the current slot needs no shifts."""
        plan = plan_move(DONE, 1, DONE, 1, target_size=3)
        assert plan.is_noop
        assert plan.shifts == ()

    def test_clamps_within_column(self):
        """Within a column the last slot is n-1."""
        plan = plan_move(TODO, 0, TODO, 10, target_size=3)
        assert plan.target_order == 2

    def test_clamps_to_end_of_other_column(self):
        """Into another column the last slot is n."""
        plan = plan_move(TODO, 0, DONE, 10, target_size=2)
        assert plan.target_order == 2
        assert plan.shifts[1] == OrderShift(DONE, +1, lower=2)

    def test_empty_destination(self):
        """An empty destination only has slot 0."""
        plan = plan_move(TODO, 0, DONE, 4, target_size=0)
        assert plan.target_order == 0

    def test_clamp_to_own_last_slot_is_noop(self):
        """The last task clamped onto its own slot does not move."""
        plan = plan_move(TODO, 2, TODO, 99, target_size=3)
        assert plan.is_noop

    def test_negative_order(self):
        """Negative orders are refused."""
        with pytest.raises(ValueError):
            plan_move(TODO, 0, DONE, -1, target_size=0)


class TestPositions:
    """Creation and deletion positions."""

    def test_append_position(self):
        """New tasks go after the last one."""
        assert append_position(0) == 0
        assert append_position(3) == 3

    def test_clamp_target(self):
        """Clamping depends on whether the task already sits in the column."""
        assert clamp_target(1, 3, same_column=True) == 1
        assert clamp_target(5, 3, same_column=True) == 2
        assert clamp_target(5, 3, same_column=False) == 3

    def test_plan_delete(self):
        """Everything after the deleted slot moves up."""
        assert plan_delete(DONE, 1) == OrderShift(DONE, -1, lower=2)


class TestApplyPlan:
    """Plans applied to in-memory placements."""

    def test_move_to_front(self):
        """Every task of the column is listed when all of them change."""
        placements = {"A": (TODO, 0), "B": (TODO, 1), "C": (TODO, 2)}
        plan = plan_move(TODO, 2, TODO, 0, target_size=3)

        assert apply_plan(placements, "C", plan) == {
            "A": (TODO, 1),
            "B": (TODO, 2),
            "C": (TODO, 0),
        }

    def test_move_across_columns_returns_only_changes(self):
        """Untouched tasks are left out of the result."""
        placements = {"A": (TODO, 0), "B": (TODO, 1), "C": (DOING, 0)}
        plan = plan_move(TODO, 0, DOING, 1, target_size=1)

        assert apply_plan(placements, "A", plan) == {
            "B": (TODO, 0),
            "A": (DOING, 1),
        }

    def test_noop_changes_nothing(self):
        """A no-op plan yields no changes."""
        placements = {"A": (TODO, 0), "B": (TODO, 1)}
        plan = plan_move(TODO, 1, TODO, 1, target_size=2)
        assert apply_plan(placements, "B", plan) == {}

    def test_every_move_keeps_columns_dense(self):
        """Every possible move on a small board agrees with list insertion."""
        columns = {TODO: ["a", "b", "c"], DOING: ["d"], DONE: []}
        placements = {tid: (status, i) for status, ids in columns.items() for i, tid in enumerate(ids)}

        for task_id, (status, order) in placements.items():
            for target_status in TaskStatus:
                for target_order in range(5):
                    plan = plan_move(status, order, target_status, target_order,
                                     target_size=len(columns[target_status]))
                    result = dict(placements)
                    result.update(apply_plan(placements, task_id, plan))

                    for s in TaskStatus:
                        assert is_dense(o for st, o in result.values() if st == s)

                    expected = reordered(columns, task_id, target_status, target_order)
                    for s, ids in expected.items():
                        assert [tid for tid, _ in sorted(
                            ((tid, o) for tid, (st, o) in result.items() if st == s),
                            key=lambda item: item[1])] == ids


class TestDensity:
    """Density checks and renumbering."""

    @pytest.mark.parametrize("orders,dense", [
        ([], True),
        ([0], True),
        ([2, 0, 1], True),
        ([0, 2], False),
        ([0, 0, 1], False),
        ([1, 2], False),
    ])
    def test_is_dense(self, orders, dense):
        """Only permutations of 0..n-1 are dense."""
        assert is_dense(orders) is dense

    def test_renumber(self):
        """Ids get their index as order."""
        assert renumber(["x", "y", "z"]) == {"x": 0, "y": 1, "z": 2}
        assert renumber([]) == {}

    def test_plan_is_frozen(self):
        """Plans cannot be changed after they are computed."""
        plan = MovePlan(TODO, 0, TODO, 0)
        with pytest.raises(AttributeError):
            plan.target_order = 3
