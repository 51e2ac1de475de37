"""Tests for SLATracker and KitchenWorkloadEstimator."""
from datetime import timedelta

import pytest

from core.domain.entities.store import Store
from core.domain.enums.order_status import OrderStatus
from core.domain.enums.workload_level import WorkloadLevel
from core.domain.services.sla import SLATracker
from core.domain.services.workload import KitchenWorkloadEstimator

from factories import NOW, build_order


class TestSLATracker:

    def test_estimate_is_prep_plus_buffer(self):
        order = build_order(prep_minutes=12, quantity=2)
        assert SLATracker().estimate(order, NOW) == NOW + timedelta(minutes=24 + 15)

    def test_custom_buffer(self):
        order = build_order(prep_minutes=10)
        tracker = SLATracker(delivery_buffer=timedelta(minutes=5))
        assert tracker.stamp(order, NOW) == NOW + timedelta(minutes=15)
        assert order.estimated_delivery == NOW + timedelta(minutes=15)

    def test_negative_buffer_rejected(self):
        with pytest.raises(ValueError):
            SLATracker(delivery_buffer=timedelta(minutes=-1))

    def test_overdue_at_and_after_deadline(self):
        order = build_order(OrderStatus.PREPARING)
        order.set_estimate(NOW)
        assert not SLATracker.is_overdue(order, NOW - timedelta(seconds=1))
        assert SLATracker.is_overdue(order, NOW)
        assert SLATracker.time_remaining(order, NOW - timedelta(minutes=3)) == timedelta(minutes=3)

    def test_overdue_never_reverts_while_order_is_active(self):
        order = build_order(OrderStatus.OUT_FOR_DELIVERY)
        order.set_estimate(NOW)
        later = [NOW + timedelta(seconds=s) for s in (0, 1, 59, 3600, 86400 * 3)]

        assert all(SLATracker.is_overdue(order, t) for t in later)
        remaining = [SLATracker.time_remaining(order, t) for t in later]
        assert remaining == sorted(remaining, reverse=True)
        assert all(r <= timedelta(0) for r in remaining)

    def test_terminal_or_unestimated_orders_are_never_overdue(self):
        delivered = build_order(OrderStatus.DELIVERED)
        delivered.set_estimate(NOW - timedelta(hours=1))
        pending = build_order()
        assert not SLATracker.is_overdue(delivered, NOW)
        assert not SLATracker.is_overdue(pending, NOW)
        assert SLATracker.time_remaining(pending, NOW) is None

    def test_overdue_orders_most_late_first(self):
        a = build_order(OrderStatus.PREPARING, number=1001)
        b = build_order(OrderStatus.ACCEPTED, number=1002)
        c = build_order(OrderStatus.PREPARING, number=1003)
        a.set_estimate(NOW - timedelta(minutes=5))
        b.set_estimate(NOW - timedelta(minutes=30))
        c.set_estimate(NOW + timedelta(minutes=5))

        overdue = SLATracker().overdue_orders([a, b, c], NOW)
        assert overdue == [b, a]


class TestKitchenWorkloadEstimator:

    @pytest.fixture
    def store(self):
        return Store.create("Test", operating_hours=10, kitchen_capacity=1)

    @pytest.mark.parametrize(
        "per_hour, level",
        [(0, WorkloadLevel.LOW), (10, WorkloadLevel.LOW), (10.1, WorkloadLevel.MEDIUM),
         (15, WorkloadLevel.MEDIUM), (15.01, WorkloadLevel.HIGH)],
    )
    def test_classify_boundaries(self, per_hour, level):
        assert KitchenWorkloadEstimator().classify(per_hour) == level

    def test_empty_kitchen(self, store):
        workload = KitchenWorkloadEstimator().estimate([], store, NOW)
        assert workload.active_orders == 0
        assert workload.total_prep_time == 0
        assert workload.avg_prep_time == 0.0
        assert workload.workload_level == WorkloadLevel.LOW
        assert workload.estimated_completion_time == NOW

    def test_counts_only_accepted_and_preparing(self, store):
        orders = [
            build_order(OrderStatus.ACCEPTED, prep_minutes=10),
            build_order(OrderStatus.PREPARING, prep_minutes=20),
            build_order(OrderStatus.PENDING, prep_minutes=99),
            build_order(OrderStatus.READY_FOR_PICKUP, prep_minutes=99),
        ]
        workload = KitchenWorkloadEstimator().estimate(orders, store, NOW)
        assert workload.active_orders == 2
        assert workload.total_prep_time == 30
        assert workload.avg_prep_time == 15.0
        assert workload.estimated_completion_time == NOW + timedelta(minutes=30)
        assert workload.orders_per_hour == 0.4

    def test_parallel_kitchen_finishes_sooner(self):
        store = Store.create("Big", operating_hours=10, kitchen_capacity=2)
        orders = [build_order(OrderStatus.ACCEPTED, prep_minutes=20) for _ in range(2)]
        workload = KitchenWorkloadEstimator().estimate(orders, store, NOW)
        assert workload.estimated_completion_time == NOW + timedelta(minutes=20)

    def test_high_workload_from_todays_volume(self, store):
        orders = [build_order(OrderStatus.DELIVERED, number=1001 + i) for i in range(151)]
        orders.append(build_order(OrderStatus.PENDING, created_at=NOW - timedelta(days=1)))
        workload = KitchenWorkloadEstimator().estimate(orders, store, NOW)
        assert workload.orders_per_hour == 15.1
        assert workload.workload_level == WorkloadLevel.HIGH

    def test_prioritized_queue_shortest_first(self):
        long_order = build_order(OrderStatus.ACCEPTED, prep_minutes=30, number=1001)
        short_order = build_order(OrderStatus.PREPARING, prep_minutes=5, number=1002)
        tie = build_order(
            OrderStatus.ACCEPTED, prep_minutes=5, number=1003,
            created_at=NOW + timedelta(minutes=1),
        )
        queue = KitchenWorkloadEstimator().prioritized_queue(
            [long_order, tie, short_order, build_order()]
        )
        assert [entry.order_number for entry in queue] == ["#1002", "#1003", "#1001"]
        assert [entry.position for entry in queue] == [1, 2, 3]

    def test_delivery_status_includes_zero_counts(self):
        counts = KitchenWorkloadEstimator.delivery_status(
            [build_order(OrderStatus.PREPARING), build_order(OrderStatus.PREPARING),
             build_order(OrderStatus.DELIVERED)]
        )
        assert counts == {
            OrderStatus.ACCEPTED: 0,
            OrderStatus.PREPARING: 2,
            OrderStatus.READY_FOR_PICKUP: 0,
            OrderStatus.OUT_FOR_DELIVERY: 0,
        }
