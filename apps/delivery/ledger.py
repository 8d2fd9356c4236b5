# apps/delivery/ledger.py
"""
Impression ledger: the durable record the rate limiter reads back.

Rows are only ever appended. ``client_budget_lock`` serializes the
read-check-write section for one client: a process-local mutex keeps threads
of this process apart, and a row lock on the client's ``ClientBudgetLock``
row keeps other processes out on databases with ``SELECT ... FOR UPDATE``.
"""
import logging
import threading
from contextlib import contextmanager

from django.db import DatabaseError, transaction
from django.db.models import Sum
from django.db.models.functions import Coalesce

from adserver.exceptions import PersistenceError
from .models import ClientBudgetLock, Impression

logger = logging.getLogger(__name__)


def record_impression(impression_id, client_id, ad_id, duration_seconds, timestamp):
    """Append one impression row inside its own savepoint."""
    try:
        with transaction.atomic():
            return Impression.objects.create(
                id=impression_id,
                client_id=client_id,
                ad_id=ad_id,
                duration_seconds=duration_seconds,
                timestamp=timestamp,
            )
    except DatabaseError as e:
        logger.error(f"Error recording impression {impression_id} for client {client_id}: {str(e)}")
        raise PersistenceError(f"Could not record impression for ad {ad_id}") from e


def sum_duration_since(client_id, since):
    """Seconds delivered to client_id with timestamp strictly after since; 0 if none."""
    try:
        return Impression.objects.filter(
            client_id=client_id,
            timestamp__gt=since,
        ).aggregate(total=Coalesce(Sum('duration_seconds'), 0))['total']
    except DatabaseError as e:
        logger.error(f"Error summing impressions for client {client_id}: {str(e)}")
        raise PersistenceError(f"Could not read budget for client {client_id}") from e


class _ClientLocks:
    """Per-client mutexes, dropped again once no thread holds or waits on them."""

    def __init__(self):
        self._guard = threading.Lock()
        self._locks = {}

    @contextmanager
    def hold(self, client_id):
        with self._guard:
            entry = self._locks.setdefault(client_id, [threading.Lock(), 0])
            entry[1] += 1
        try:
            with entry[0]:
                yield
        finally:
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[client_id]

    def __len__(self):
        with self._guard:
            return len(self._locks)


_client_locks = _ClientLocks()


@contextmanager
def client_budget_lock(client_id):
    """Run the body in one transaction holding client_id's budget lock.

    Everything written inside commits together when the block exits.
    """
    with _client_locks.hold(client_id):
        try:
            with transaction.atomic():
                # Recreated if pruned while this request waited on it
                ClientBudgetLock.objects.select_for_update().get_or_create(client_id=client_id)
                yield
        except DatabaseError as e:
            logger.error(f"Budget transaction failed for client {client_id}: {str(e)}")
            raise PersistenceError(f"Could not serve ads to client {client_id}") from e


def prune_client_locks(since):
    """Delete lock rows of clients with no impression after since.

    Such clients have their whole budget again; their row is recreated on the
    next request. Returns the number of rows removed.
    """
    recent_clients = Impression.objects.filter(timestamp__gt=since).values('client_id')
    try:
        with transaction.atomic():
            deleted, _ = ClientBudgetLock.objects.exclude(client_id__in=recent_clients).delete()
    except DatabaseError as e:
        logger.error(f"Error pruning budget locks: {str(e)}")
        raise PersistenceError("Could not prune budget locks") from e
    logger.info(f"Pruned {deleted} budget lock rows")
    return deleted
