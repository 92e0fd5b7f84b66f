"""
Table Allocator.

A table is OCCUPIED exactly while `current_order` points at an order that is
neither completed nor cancelled. Binding is a compare-and-swap on the table
row, so two terminals seating different orders at the same table cannot both
succeed.
"""
import logging

from django.db import transaction
from django.db.models import Q
from django.utils import timezone

from core_backend.exceptions import (
    InvalidTransition,
    ServiceValidationError,
    TableNotFound,
    TableUnavailable,
)
from orders.models import Order
from .models import Table

logger = logging.getLogger(__name__)


class TableService:
    """Binds, releases and administers floor tables."""

    @staticmethod
    def get_table(table_id) -> Table:
        try:
            return Table.objects.select_related("current_order").get(pk=table_id)
        except (Table.DoesNotExist, ValueError, TypeError):
            raise TableNotFound(table_id)

    @staticmethod
    def available():
        return Table.objects.filter(status=Table.Status.AVAILABLE).order_by("number")

    @staticmethod
    def all_active():
        """Tables a POS can seat or resume: available or occupied."""
        return Table.objects.filter(
            status__in=[Table.Status.AVAILABLE, Table.Status.OCCUPIED]
        ).order_by("number")

    @staticmethod
    def get_active_order(table_id):
        """
        The non-terminal order seated at the table, with its items, or None.
        """
        table = TableService.get_table(table_id)
        if not table.current_order_id:
            return None
        order = (
            Order.objects.select_related("table", "server")
            .prefetch_related("items__product", "items__server")
            .filter(pk=table.current_order_id)
            .exclude(status__in=Order.TERMINAL_STATUSES)
            .first()
        )
        return order

    # --- Allocation ---

    @staticmethod
    @transaction.atomic
    def bind_table(table_id, order: Order) -> Table:
        """
        Seat `order` at the table.

        Succeeds when the table is available and unbound, or when it is still
        marked occupied by an order that has already finished (a stale binding,
        reclaimed with a warning). Rebinding the order already seated there is
        a no-op.

        Raises:
            TableNotFound: If the table does not exist
            TableUnavailable: If another active order holds the table, or it is reserved or being cleaned
        """
        bound = {
            "status": Table.Status.OCCUPIED,
            "current_order": order,
            "reserved_for": None,
            "updated_at": timezone.now(),
        }

        matched = Table.objects.filter(
            pk=table_id, status=Table.Status.AVAILABLE, current_order__isnull=True
        ).update(**bound)

        if not matched:
            matched = Table.objects.filter(
                Q(current_order__isnull=True) | Q(current_order__status__in=Order.TERMINAL_STATUSES),
                pk=table_id,
                status=Table.Status.OCCUPIED,
            ).update(**bound)
            if matched:
                logger.warning(f"Reclaimed stale binding on table {table_id} for order {order.order_number}")

        table = Table.objects.filter(pk=table_id).first()
        if table is None:
            raise TableNotFound(table_id)

        if not matched:
            if table.current_order_id == order.pk and table.status == Table.Status.OCCUPIED:
                return table
            raise TableUnavailable(table)

        logger.info(f"Table {table.number} bound to order {order.order_number}")
        return table

    @staticmethod
    @transaction.atomic
    def release_for_order(order: Order) -> int:
        """
        Free whichever table is seated with `order`.

        Matching on the order rather than the table id means a table that has
        since been rebound to another order is left alone.
        """
        released = Table.objects.filter(current_order=order).update(
            status=Table.Status.AVAILABLE,
            current_order=None,
            reserved_for=None,
            updated_at=timezone.now(),
        )
        if released:
            logger.info(f"Released table for order {order.order_number}")
        return released

    @staticmethod
    @transaction.atomic
    def release_table(table_id) -> Table:
        """Free the table regardless of which order it holds."""
        table = TableService._lock(table_id)
        if table.current_order_id:
            logger.warning(f"Force-releasing table {table.number} from order {table.current_order_id}")
        return TableService._clear(table, Table.Status.AVAILABLE)

    # --- Administrative transitions ---

    @staticmethod
    @transaction.atomic
    def reserve_table(table_id, reserved_for: str) -> Table:
        """
        Hold an available table for a guest.

        Raises:
            ServiceValidationError: If no name is given
            InvalidTransition: If the table is not available
        """
        reserved_for = (reserved_for or "").strip()
        if not reserved_for:
            raise ServiceValidationError("reserved_for is required to reserve a table.")

        table = TableService._lock(table_id)
        if table.status != Table.Status.AVAILABLE or table.current_order_id:
            raise InvalidTransition(
                table.status,
                Table.Status.RESERVED,
                message=f"Table {table.number} can only be reserved while available (currently {table.status}).",
            )

        table.status = Table.Status.RESERVED
        table.reserved_for = reserved_for
        table.save(update_fields=["status", "reserved_for", "updated_at"])
        logger.info(f"Table {table.number} reserved for {reserved_for}")
        return table

    @staticmethod
    @transaction.atomic
    def mark_cleaning(table_id, force: bool = False) -> Table:
        return TableService._administrative_clear(table_id, Table.Status.CLEANING, force)

    @staticmethod
    @transaction.atomic
    def mark_available(table_id, force: bool = False) -> Table:
        return TableService._administrative_clear(table_id, Table.Status.AVAILABLE, force)

    @staticmethod
    def update_status(table_id, new_status: str, reserved_for: str = None, force: bool = False) -> Table:
        """
        Dispatch an operator's status change to the matching transition.

        OCCUPIED cannot be requested directly: tables become occupied only by
        seating an order.
        """
        if new_status not in Table.Status.values:
            raise ServiceValidationError(f"'{new_status}' is not a valid table status.")

        if new_status == Table.Status.OCCUPIED:
            raise ServiceValidationError("Tables become occupied by seating an order, not by a status change.")
        if new_status == Table.Status.RESERVED:
            return TableService.reserve_table(table_id, reserved_for)
        if new_status == Table.Status.CLEANING:
            return TableService.mark_cleaning(table_id, force=force)
        return TableService.mark_available(table_id, force=force)

    @staticmethod
    @transaction.atomic
    def delete_table(table_id) -> None:
        """
        Raises:
            InvalidTransition: If the table is seated or any order references it
        """
        table = TableService._lock(table_id)
        if table.current_order_id or Order.objects.filter(table=table).exists():
            raise InvalidTransition(
                message=f"Table {table.number} is referenced by orders and cannot be deleted."
            )
        table.delete()
        logger.info(f"Table {table.number} deleted")

    # --- Helpers ---

    @staticmethod
    def _lock(table_id) -> Table:
        try:
            return Table.objects.select_for_update().get(pk=table_id)
        except (Table.DoesNotExist, ValueError, TypeError):
            raise TableNotFound(table_id)

    @staticmethod
    def _administrative_clear(table_id, target, force):
        table = TableService._lock(table_id)

        if table.current_order_id:
            order = Order.objects.filter(pk=table.current_order_id).only("status", "order_number").first()
            if order is not None and order.is_active:
                if not force:
                    raise InvalidTransition(
                        table.status,
                        target,
                        message=(
                            f"Table {table.number} is seated with active order {order.order_number}; "
                            f"complete or cancel it first."
                        ),
                    )
                logger.warning(f"Force-freeing table {table.number} from active order {order.order_number}")
            else:
                logger.warning(f"Cleared stale order reference on table {table.number}")

        return TableService._clear(table, target)

    @staticmethod
    def _clear(table, target):
        previous = table.status
        table.status = target
        table.current_order = None
        table.reserved_for = None
        table.save(update_fields=["status", "current_order", "reserved_for", "updated_at"])
        logger.info(f"Table {table.number}: {previous} -> {target}")
        return table
