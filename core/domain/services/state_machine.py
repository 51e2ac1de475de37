"""
Order State Machine.

Single source of truth for legal order statuses and for which role may
drive each edge. All checks run before any mutation, so a rejected
transition leaves the order (and its payment) untouched.
"""
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Dict, FrozenSet, List, Optional, Tuple, Union

from ..entities.order import DeliveryAssignment, Order
from ..entities.payment import Payment
from ..enums.order_status import OrderStatus, TERMINAL_STATUSES
from ..enums.payment_status import PaymentStatus
from ..enums.role import Role
from ..exceptions import InvalidTransition
from ..value_objects import Money
from .sla import SLATracker

Edge = Tuple[OrderStatus, OrderStatus]

_NON_TERMINAL = tuple(s for s in OrderStatus if s not in TERMINAL_STATUSES)

# Forward fulfillment path
_FORWARD_EDGES: Dict[Edge, FrozenSet[Role]] = {
    (OrderStatus.PENDING, OrderStatus.ACCEPTED): frozenset({Role.KITCHEN, Role.ADMIN}),
    (OrderStatus.ACCEPTED, OrderStatus.PREPARING): frozenset({Role.KITCHEN, Role.ADMIN}),
    (OrderStatus.PREPARING, OrderStatus.READY_FOR_PICKUP): frozenset({Role.KITCHEN, Role.ADMIN}),
    (OrderStatus.READY_FOR_PICKUP, OrderStatus.OUT_FOR_DELIVERY): frozenset({Role.DELIVERY, Role.ADMIN}),
    (OrderStatus.OUT_FOR_DELIVERY, OrderStatus.DELIVERED): frozenset({Role.DELIVERY, Role.ADMIN}),
}

_ABORT_ROLES = frozenset({Role.ADMIN, Role.SYSTEM})

AUTHORIZED_ROLES: Dict[Edge, FrozenSet[Role]] = dict(_FORWARD_EDGES)
for _status in _NON_TERMINAL:
    AUTHORIZED_ROLES[(_status, OrderStatus.CANCELLED)] = _ABORT_ROLES
    AUTHORIZED_ROLES[(_status, OrderStatus.REFUNDED)] = _ABORT_ROLES

ALLOWED_TRANSITIONS: FrozenSet[Edge] = frozenset(AUTHORIZED_ROLES)


def is_valid_transition(current: OrderStatus, requested: OrderStatus) -> bool:
    """True if (current, requested) is in the adjacency table."""
    return (current, requested) in ALLOWED_TRANSITIONS


@dataclass(frozen=True)
class Actor:
    """Caller identity as resolved upstream: a role and an optional id."""
    role: Role
    actor_id: Optional[str] = None


@dataclass(frozen=True)
class DeliveryFeeSchedule:
    """Courier pay: flat fee plus a per-kilometre rate, rounded half-up to cents."""
    base_fee: Money = Money(Decimal("2.50"))
    per_km_fee: Money = Money(Decimal("0.50"))

    def earnings(self, distance_km: Decimal) -> Money:
        return (self.base_fee + self.per_km_fee * distance_km).rounded()


def _to_distance(value: Union[Decimal, float, int, str, None]) -> Decimal:
    if value is None:
        return Decimal("0")
    try:
        distance = Decimal(str(value))
    except InvalidOperation:
        raise ValueError(f"Invalid distance: {value!r}")
    if distance < 0:
        raise ValueError(f"Distance cannot be negative, got: {value}")
    return distance


class OrderStateMachine:
    """
    Validates and applies order status transitions.

    Side effects of a successful transition, applied together:
    - ACCEPTED: SLA estimate stamped
    - OUT_FOR_DELIVERY: delivery assignment created
    - DELIVERED: actual_delivery stamped
    - CANCELLED / REFUNDED: courier released, COMPLETED payment marked refund-eligible
    """

    def __init__(
        self,
        sla_tracker: Optional[SLATracker] = None,
        fee_schedule: Optional[DeliveryFeeSchedule] = None,
    ):
        self.sla_tracker = sla_tracker or SLATracker()
        self.fee_schedule = fee_schedule or DeliveryFeeSchedule()

    @staticmethod
    def authorized_roles(current: OrderStatus, requested: OrderStatus) -> FrozenSet[Role]:
        return AUTHORIZED_ROLES.get((current, requested), frozenset())

    def allowed_transitions(self, order: Order, role: Role) -> List[OrderStatus]:
        """Targets ``role`` may request from the order's current status."""
        return [
            target
            for (source, target), roles in AUTHORIZED_ROLES.items()
            if source == order.status and role in roles
        ]

    def check(
        self,
        order: Order,
        requested: OrderStatus,
        actor: Actor,
    ) -> None:
        """
        Raise InvalidTransition unless ``actor`` may move ``order`` to ``requested``.

        Checks, in order: adjacency table, role authorization, and for a
        DELIVERY actor completing a delivery, that it is the assigned courier.
        """
        current = order.status
        if not is_valid_transition(current, requested):
            reason = "order is in a terminal state" if current.is_terminal else "edge not allowed"
            raise InvalidTransition(
                order.order_id, current.value, requested.value, actor.role.value, reason
            )

        if actor.role not in self.authorized_roles(current, requested):
            raise InvalidTransition(
                order.order_id, current.value, requested.value, actor.role.value,
                "role not authorized",
            )

        if (
            requested == OrderStatus.DELIVERED
            and actor.role == Role.DELIVERY
            and actor.actor_id
            and order.courier_id
            and actor.actor_id != order.courier_id
        ):
            raise InvalidTransition(
                order.order_id, current.value, requested.value, actor.role.value,
                f"courier {actor.actor_id} is not assigned to this order",
            )

    def transition(
        self,
        order: Order,
        requested: OrderStatus,
        actor: Actor,
        now: datetime,
        payment: Optional[Payment] = None,
        courier_id: Optional[str] = None,
        distance_km: Union[Decimal, float, int, str, None] = None,
        reason: Optional[str] = None,
    ) -> Order:
        """
        Move ``order`` to ``requested`` on behalf of ``actor``.

        Args:
            order: Order aggregate (mutated in place)
            requested: Target status
            actor: Acting role and id
            now: Transition time
            payment: Linked payment, flagged refund-eligible on cancel/refund
            courier_id: Explicit courier for OUT_FOR_DELIVERY (admin dispatch)
            distance_km: Delivery distance for courier earnings
            reason: Free-text note stored on the status event

        Returns:
            The same order, transitioned

        Raises:
            InvalidTransition: nothing was changed
            ValueError: malformed distance, nothing was changed
        """
        self.check(order, requested, actor)
        distance = _to_distance(distance_km)

        order.change_status(
            requested, now,
            role=actor.role.value, actor_id=actor.actor_id, reason=reason,
        )

        if requested == OrderStatus.ACCEPTED:
            self.sla_tracker.stamp(order, now)

        elif requested == OrderStatus.OUT_FOR_DELIVERY:
            assignee = courier_id or (actor.actor_id if actor.role == Role.DELIVERY else None)
            if assignee:
                order.assign_courier(
                    DeliveryAssignment(
                        courier_id=assignee,
                        assigned_at=now,
                        distance_km=distance,
                        earnings=self.fee_schedule.earnings(distance),
                    )
                )

        elif requested == OrderStatus.DELIVERED:
            order.mark_delivered(now)

        elif requested in (OrderStatus.CANCELLED, OrderStatus.REFUNDED):
            order.release_courier()
            if payment is not None and payment.status == PaymentStatus.COMPLETED:
                payment.mark_refund_eligible()

        return order
