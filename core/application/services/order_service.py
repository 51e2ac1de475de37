"""Application service for Order operations."""

import logging
from contextlib import nullcontext
from datetime import datetime, timedelta
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.ext.asyncio import async_sessionmaker

from core.application.dtos.order_dto import (
    AllowedTransitionsDTO,
    AutoCancelResultDTO,
    CourierSummaryDTO,
    CreateOrderRequest,
    OrderDTO,
    OrderHistoryDTO,
    OrderListDTO,
    OrderSlaDTO,
    StatusChangeDTO,
    TransitionRequest,
    order_to_dto,
)
from core.application.dtos.store_dto import CreateStoreRequest, StoreDTO
from core.application.interfaces import Clock
from core.data.uow import create_uow
from core.domain.entities.order import Order, OrderItem
from core.domain.entities.payment import Payment
from core.domain.entities.store import Store
from core.domain.enums.order_status import OrderStatus
from core.domain.enums.role import Role
from core.domain.event_bus import EventBus
from core.domain.events import OrderStatusChangedEvent
from core.domain.exceptions import (
    InvalidTransition,
    OrderNotFound,
    StaleState,
    UnknownStore,
)
from core.domain.services.sla import SLATracker
from core.domain.services.state_machine import (
    Actor,
    DeliveryFeeSchedule,
    OrderStateMachine,
)
from core.domain.value_objects import Money
from core.settings.modules.fulfillment_settings import FulfillmentSettings

from .locks import LockRegistry

logger = logging.getLogger(__name__)


class OrderApplicationService:
    """
    Application service for orchestrating order operations.

    Responsibilities:
    - Coordinate domain + infrastructure
    - Handle transactions via UoW (one per order)
    - Serialize writers per order with LockRegistry
    - Transform between DTOs and domain entities
    """

    def __init__(
        self,
        session_factory: async_sessionmaker,
        clock: Clock,
        state_machine: Optional[OrderStateMachine] = None,
        locks: Optional[LockRegistry] = None,
        event_bus: Optional[EventBus] = None,
        settings: Optional[FulfillmentSettings] = None,
    ) -> None:
        """Initialize order application service.

        Args:
            session_factory: SQLAlchemy async session factory
            clock: Source of "now" for every transition
            state_machine: Transition rules (defaults built from settings)
            locks: Shared lock registry; pass the same one to PaymentApplicationService
            event_bus: Receives domain events after commit
            settings: Fulfillment settings
        """
        self._session_factory = session_factory
        self.clock = clock
        self.settings = settings or FulfillmentSettings()
        self.state_machine = state_machine or self._build_state_machine(self.settings)
        self.locks = locks or LockRegistry()
        self._event_bus = event_bus

    @staticmethod
    def _build_state_machine(settings: FulfillmentSettings) -> OrderStateMachine:
        return OrderStateMachine(
            sla_tracker=SLATracker(timedelta(minutes=settings.delivery_buffer_minutes)),
            fee_schedule=DeliveryFeeSchedule(
                base_fee=Money(settings.courier_base_fee, settings.currency),
                per_km_fee=Money(settings.courier_per_km_fee, settings.currency),
            ),
        )

    @property
    def sla_tracker(self) -> SLATracker:
        return self.state_machine.sla_tracker

    def _uow(self):
        return create_uow(self._session_factory, self._event_bus)

    # =========================================================================
    # STORES
    # =========================================================================

    async def create_store(self, request: CreateStoreRequest) -> StoreDTO:
        store = Store.create(
            name=request.name,
            operating_hours=request.operating_hours or self.settings.operating_hours,
            kitchen_capacity=request.kitchen_capacity or self.settings.kitchen_capacity,
            created_at=self.clock.now(),
        )
        async with self._uow() as uow:
            await uow.stores.add(store)
            await uow.commit()

        logger.info(f"Store created: {store.store_id} ({store.name})")
        return self._store_to_dto(store)

    async def get_store(self, store_id: str) -> StoreDTO:
        async with self._uow() as uow:
            store = await uow.stores.get(store_id)
        if store is None:
            raise UnknownStore(store_id)
        return self._store_to_dto(store)

    # =========================================================================
    # ORDER INTAKE
    # =========================================================================

    async def create_order(self, request: CreateOrderRequest) -> OrderDTO:
        """Place an order and its PENDING payment.

        Order numbers are allocated under the store lock, so two orders
        placed concurrently never share a number.

        Raises:
            UnknownStore: store does not exist
            ValueError: total does not match its components
        """
        currency = request.currency or self.settings.currency

        async with self.locks.store(request.store_id):
            async with self._uow() as uow:
                store = await uow.stores.get(request.store_id)
                if store is None:
                    raise UnknownStore(request.store_id)

                now = self.clock.now()
                order_number = store.allocate_order_number()
                order = Order.create(
                    order_number=order_number,
                    store_id=store.store_id,
                    customer_id=request.customer_id,
                    items=[
                        OrderItem(
                            menu_item_id=item.menu_item_id,
                            name=item.name,
                            quantity=item.quantity,
                            unit_price=Money(item.unit_price, currency),
                            prep_time_minutes=item.prep_time_minutes,
                        )
                        for item in request.items
                    ],
                    tax=Money(request.tax, currency),
                    delivery_fee=Money(request.delivery_fee, currency),
                    total=Money(request.total, currency) if request.total is not None else None,
                    created_at=now,
                    execution_id=uow.execution_id,
                )
                if self.settings.estimate_on_create:
                    self.sla_tracker.stamp(order, now)

                amount = request.payment_amount
                payment = Payment.create(
                    order_id=order.order_id,
                    store_id=store.store_id,
                    amount=Money(amount, currency) if amount is not None else order.total,
                    method=request.payment_method,
                    created_at=now,
                )

                await uow.stores.update(store)
                await uow.orders.add(order)
                await uow.payments.add(payment)
                uow.track(order, payment)
                await uow.commit()

        logger.info(
            f"✅ Order {order.order_number} created for store {order.store_id} "
            f"(order_id={order.order_id}, total={order.total})"
        )
        return order_to_dto(order)

    async def get_order(self, order_id: str) -> OrderDTO:
        async with self._uow() as uow:
            order = await uow.orders.get(order_id)
        if order is None:
            raise OrderNotFound(order_id)
        return order_to_dto(order)

    async def list_orders(
        self,
        store_id: str,
        status: Optional[OrderStatus] = None,
    ) -> OrderListDTO:
        async with self._uow() as uow:
            if await uow.stores.get(store_id) is None:
                raise UnknownStore(store_id)
            orders = await uow.orders.list_by_store(
                store_id, statuses=[status] if status else None
            )
        return OrderListDTO(orders=[order_to_dto(o) for o in orders], total=len(orders))

    async def get_order_history(self, order_id: str) -> OrderHistoryDTO:
        """Status changes of an order, oldest first, read from the event store."""
        async with self._uow() as uow:
            order = await uow.orders.get(order_id)
            if order is None:
                raise OrderNotFound(order_id)
            events = await uow.events.get_events(
                order_id, event_type=OrderStatusChangedEvent.__name__
            )

        return OrderHistoryDTO(
            order_id=order_id,
            created_at=order.created_at,
            transitions=[
                StatusChangeDTO(
                    previous_status=OrderStatus(event.previous_status),
                    new_status=OrderStatus(event.new_status),
                    role=Role(event.role) if event.role else None,
                    actor_id=event.actor_id,
                    reason=event.reason,
                    occurred_at=event.occurred_at,
                )
                for event in events
            ],
        )

    # =========================================================================
    # TRANSITIONS
    # =========================================================================

    async def transition_order(self, order_id: str, request: TransitionRequest) -> OrderDTO:
        """Move an order along the state machine on behalf of a role.

        The status the caller acts on is ``request.expected_status`` when
        given, otherwise the status read before taking the order lock. If
        the order moved in between, nothing is written.

        Raises:
            OrderNotFound: no such order
            InvalidTransition: edge or role not allowed; nothing was changed
            StaleState: order changed concurrently; nothing was changed
        """
        order = await self._transition(
            order_id,
            request.target_status,
            Actor(role=request.role, actor_id=request.actor_id),
            expected_status=request.expected_status,
            courier_id=request.courier_id,
            distance_km=request.distance_km,
            reason=request.reason,
        )
        return order_to_dto(order)

    async def _transition(
        self,
        order_id: str,
        target: OrderStatus,
        actor: Actor,
        expected_status: Optional[OrderStatus] = None,
        courier_id: Optional[str] = None,
        distance_km: Optional[Decimal] = None,
        reason: Optional[str] = None,
    ) -> Order:
        async with self._uow() as uow:
            snapshot = await uow.orders.get(order_id)
            if snapshot is None:
                raise OrderNotFound(order_id)
            payment_snapshot = await uow.payments.get_by_order(order_id)

        observed = expected_status or snapshot.status
        touches_payment = (
            target in (OrderStatus.CANCELLED, OrderStatus.REFUNDED)
            and payment_snapshot is not None
        )
        payment_lock = (
            self.locks.payment(payment_snapshot.payment_id) if touches_payment else nullcontext()
        )

        async with payment_lock:
            async with self.locks.order(order_id):
                async with self._uow() as uow:
                    order = await uow.orders.get(order_id)
                    if order is None:
                        raise OrderNotFound(order_id)
                    if order.status != observed:
                        logger.warning(
                            f"Order {order_id} moved from {observed.value} to "
                            f"{order.status.value} before {target.value} was applied"
                        )
                        raise StaleState(order_id, observed.value, order.status.value)

                    order.execution_id = uow.execution_id
                    payment = await uow.payments.get_by_order(order_id) if touches_payment else None
                    was_eligible = payment.refund_eligible if payment else False

                    self.state_machine.transition(
                        order,
                        target,
                        actor,
                        self.clock.now(),
                        payment=payment,
                        courier_id=courier_id,
                        distance_km=distance_km,
                        reason=reason,
                    )

                    await uow.orders.update(order)
                    if payment is not None and payment.refund_eligible != was_eligible:
                        if not await uow.payments.update(payment, payment.status):
                            raise StaleState(
                                order_id,
                                f"payment {payment.payment_id} {payment.status.value}",
                                "payment changed concurrently",
                            )
                    uow.track(order, payment)
                    await uow.commit()

        logger.info(
            f"Order {order.order_number} ({order_id}): {observed.value} -> {target.value} "
            f"by {actor.role.value}{f' {actor.actor_id}' if actor.actor_id else ''}"
        )
        return order

    async def allowed_transitions(self, order_id: str, role: Role) -> AllowedTransitionsDTO:
        async with self._uow() as uow:
            order = await uow.orders.get(order_id)
        if order is None:
            raise OrderNotFound(order_id)
        return AllowedTransitionsDTO(
            order_id=order_id,
            status=order.status,
            role=role,
            allowed=self.state_machine.allowed_transitions(order, role),
        )

    # =========================================================================
    # SLA
    # =========================================================================

    async def get_order_sla(self, order_id: str, now: Optional[datetime] = None) -> OrderSlaDTO:
        async with self._uow() as uow:
            order = await uow.orders.get(order_id)
        if order is None:
            raise OrderNotFound(order_id)

        now = now or self.clock.now()
        remaining = SLATracker.time_remaining(order, now)
        return OrderSlaDTO(
            order_id=order_id,
            status=order.status,
            estimated_delivery=order.estimated_delivery,
            time_remaining_seconds=remaining.total_seconds() if remaining is not None else None,
            overdue=SLATracker.is_overdue(order, now),
        )

    # =========================================================================
    # AUTOMATION
    # =========================================================================

    async def auto_cancel_stale_orders(self, store_id: str) -> AutoCancelResultDTO:
        """Cancel PENDING orders nobody accepted within the stale window.

        Each order is cancelled in its own transaction; an order accepted
        in the meantime is left alone and reported in ``failed_ids``.
        """
        minutes = self.settings.stale_pending_minutes
        cutoff = self.clock.now() - timedelta(minutes=minutes)

        async with self._uow() as uow:
            if await uow.stores.get(store_id) is None:
                raise UnknownStore(store_id)
            pending = await uow.orders.list_by_store(
                store_id, statuses=[OrderStatus.PENDING], created_before=cutoff
            )

        logger.info(f"Auto-cancel: {len(pending)} stale pending orders in store {store_id}")

        cancelled: List[str] = []
        failed_ids: List[str] = []
        for order in pending:
            try:
                await self._transition(
                    order.order_id,
                    OrderStatus.CANCELLED,
                    Actor(role=Role.SYSTEM),
                    expected_status=OrderStatus.PENDING,
                    reason=f"Not accepted within {minutes} minutes",
                )
                cancelled.append(order.order_id)
            except (InvalidTransition, StaleState) as e:
                logger.warning(f"Auto-cancel skipped order {order.order_id}: {e}")
                failed_ids.append(order.order_id)
            except Exception as e:
                logger.error(f"❌ Auto-cancel of order {order.order_id} failed: {e}", exc_info=True)
                failed_ids.append(order.order_id)

        return AutoCancelResultDTO(
            cancelled=len(cancelled),
            total=len(pending),
            order_ids=cancelled,
            failed_ids=failed_ids,
        )

    # =========================================================================
    # COURIERS
    # =========================================================================

    async def get_courier_summary(self, courier_id: str) -> CourierSummaryDTO:
        """Today's completed deliveries and earnings plus deliveries in progress."""
        async with self._uow() as uow:
            orders = await uow.orders.list_by_courier(courier_id)

        today = self.clock.now().date()
        delivered_today = [
            order for order in orders
            if order.status == OrderStatus.DELIVERED
            and order.actual_delivery is not None
            and order.actual_delivery.date() == today
        ]
        earnings = Money.zero(self.settings.currency)
        for order in delivered_today:
            earnings = earnings + order.delivery.earnings

        return CourierSummaryDTO(
            courier_id=courier_id,
            today_deliveries=len(delivered_today),
            today_earnings=earnings.amount,
            active_deliveries=[
                order.order_id for order in orders
                if order.status == OrderStatus.OUT_FOR_DELIVERY
            ],
            currency=earnings.currency,
        )

    @staticmethod
    def _store_to_dto(store: Store) -> StoreDTO:
        return StoreDTO(
            store_id=store.store_id,
            name=store.name,
            operating_hours=store.operating_hours,
            kitchen_capacity=store.kitchen_capacity,
            created_at=store.created_at,
        )
