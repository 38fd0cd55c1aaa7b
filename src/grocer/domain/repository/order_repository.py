"""Abstract repository for the Order aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from grocer.domain.model.order import Order, OrderHistory, OrderStatus, PaymentStatus


class OrderRepository(ABC):

    @abstractmethod
    def add(self, order: Order) -> None:
        """Insert a new order with its items, payment and history."""

    @abstractmethod
    def get(self, order_id: str) -> Order | None:
        """Return a fully loaded order, or None."""

    @abstractmethod
    def order_number_exists(self, order_number: str) -> bool:
        """Return True if the human-readable number is already taken."""

    @abstractmethod
    def list_for_user(
        self,
        user_id: str,
        page: int,
        limit: int,
        status: OrderStatus | None = None,
    ) -> tuple[list[Order], int]:
        """Newest-first page of a user's orders plus total count."""

    @abstractmethod
    def list_expired_ids(self, now: datetime) -> list[str]:
        """Ids of unpaid PENDING_PAYMENT orders whose ``auto_cancel_at`` <= now."""

    @abstractmethod
    def transition_status(
        self,
        order_id: str,
        from_status: OrderStatus,
        to_status: OrderStatus,
        payment_status: PaymentStatus,
    ) -> bool:
        """Conditionally move the order (and its payment) between statuses.

        Returns False when the order is no longer in ``from_status``; that
        is how concurrent sweeps or cancels lose the race harmlessly.
        """

    @abstractmethod
    def add_history(self, order_id: str, entry: OrderHistory) -> None:
        """Append a status-transition entry."""
