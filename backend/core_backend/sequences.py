"""
Allocation of human-readable display numbers (ORD-001, PAY-001).

Display numbers are never primary keys. Two strategies exist:

- CounterSequenceAllocator: advances a SequenceCounter row under a row lock,
  so concurrent callers always receive distinct values.
- LatestRecordSequenceAllocator: reads the most recently created record and
  increments its number. Two callers that read before either writes get the
  same value; it is kept for single-writer deployments.
"""
import logging
import re
from functools import lru_cache

from django.apps import apps
from django.conf import settings
from django.db import IntegrityError, transaction
from django.db.models import F

from core_backend.exceptions import DuplicateSequenceNumber, ServiceValidationError

logger = logging.getLogger(__name__)

MAX_ALLOCATION_RETRIES = 5


class Sequence:
    """A named numbering sequence stored on one model field."""

    def __init__(self, name, prefix, model_label, field_name):
        self.name = name
        self.prefix = prefix
        self.model_label = model_label
        self.field_name = field_name
        self._pattern = re.compile(rf"^{re.escape(prefix)}(\d+)$")

    def __repr__(self):
        return f"Sequence({self.name!r}, prefix={self.prefix!r})"

    @property
    def model(self):
        return apps.get_model(self.model_label)

    def format(self, value: int) -> str:
        digits = getattr(settings, "SEQUENCE_MIN_DIGITS", 3)
        return f"{self.prefix}{value:0{digits}d}"

    def parse(self, number):
        """Return the trailing integer of a display number, or None if it does not match."""
        if not number:
            return None
        match = self._pattern.match(number)
        return int(match.group(1)) if match else None

    def latest_stored(self):
        """Parsed number of the most recently created record."""
        number = (
            self.model.objects.order_by("-pk")
            .values_list(self.field_name, flat=True)
            .first()
        )
        return self.parse(number) or 0

    def highest_stored(self):
        """Highest parsed number across all stored records."""
        numbers = self.model.objects.filter(
            **{f"{self.field_name}__startswith": self.prefix}
        ).values_list(self.field_name, flat=True)
        return max((self.parse(n) or 0 for n in numbers), default=0)


ORDER_SEQUENCE = Sequence("order", "ORD-", "orders.Order", "order_number")
PAYMENT_SEQUENCE = Sequence("payment", "PAY-", "payments.Payment", "payment_number")


class CounterSequenceAllocator:
    """Allocates from a locked SequenceCounter row."""

    name = "counter"

    def next_value(self, sequence: Sequence) -> int:
        from core_backend.models import SequenceCounter

        with transaction.atomic():
            counter = SequenceCounter.objects.select_for_update().filter(name=sequence.name).first()
            if counter is None:
                counter = self._seed(SequenceCounter, sequence)
            SequenceCounter.objects.filter(pk=counter.pk).update(last_value=F("last_value") + 1)
            counter.refresh_from_db(fields=["last_value"])
            return counter.last_value

    def _seed(self, counter_model, sequence):
        # First allocation for this sequence: continue after any numbers
        # already stored so existing data does not collide.
        highest = sequence.highest_stored()
        counter, created = counter_model.objects.select_for_update().get_or_create(
            name=sequence.name, defaults={"last_value": highest}
        )
        if created and highest:
            logger.warning(f"Seeded {sequence.name} counter from existing records at {highest}")
        return counter

    def next_number(self, sequence: Sequence) -> str:
        return sequence.format(self.next_value(sequence))


class LatestRecordSequenceAllocator:
    """Reads the newest record's number and adds one. Not serialized."""

    name = "latest"

    def next_value(self, sequence: Sequence) -> int:
        return sequence.latest_stored() + 1

    def next_number(self, sequence: Sequence) -> str:
        return sequence.format(self.next_value(sequence))


ALLOCATORS = {
    CounterSequenceAllocator.name: CounterSequenceAllocator,
    LatestRecordSequenceAllocator.name: LatestRecordSequenceAllocator,
}


@lru_cache(maxsize=None)
def _build_allocator(name):
    try:
        return ALLOCATORS[name]()
    except KeyError:
        raise ServiceValidationError(
            f"Unknown sequence allocator '{name}'. Expected one of: {', '.join(sorted(ALLOCATORS))}."
        )


def get_sequence_allocator():
    return _build_allocator(getattr(settings, "SEQUENCE_ALLOCATOR", "counter"))


def next_order_number() -> str:
    return get_sequence_allocator().next_number(ORDER_SEQUENCE)


def next_payment_number() -> str:
    return get_sequence_allocator().next_number(PAYMENT_SEQUENCE)


def save_with_sequence_number(instance, sequence: Sequence, save, allocator=None):
    """
    Assign the next display number to `instance` and persist it with `save`.

    A unique-constraint collision (possible with the latest-record strategy or
    with rows inserted behind the counter's back) triggers a fresh allocation.
    Each attempt runs in its own savepoint so a collision does not poison the
    surrounding transaction.
    """
    allocator = allocator or get_sequence_allocator()
    number = None
    for _ in range(MAX_ALLOCATION_RETRIES):
        number = allocator.next_number(sequence)
        setattr(instance, sequence.field_name, number)
        try:
            with transaction.atomic():
                save()
            return number
        except IntegrityError as e:
            logger.warning(f"{sequence.name} number {number} already taken, retrying: {e}")
            setattr(instance, sequence.field_name, None)
    raise DuplicateSequenceNumber(sequence=sequence.name, value=number)
