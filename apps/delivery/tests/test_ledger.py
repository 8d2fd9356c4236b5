import threading
from datetime import timedelta
from unittest.mock import patch

from django.db import IntegrityError, OperationalError
from django.test import SimpleTestCase, TestCase
from django.utils import timezone

from adserver.exceptions import PersistenceError
from apps.delivery import ledger
from apps.delivery.models import ClientBudgetLock, Impression


class ImpressionLedgerTest(TestCase):
    def setUp(self):
        self.now = timezone.now()

    def record(self, id, client="client-1", duration=15, at=None):
        return ledger.record_impression(
            impression_id=id, client_id=client, ad_id=f"ad-{id}",
            duration_seconds=duration, timestamp=at or self.now,
        )

    def test_sum_counts_only_rows_after_since(self):
        since = self.now - timedelta(hours=1)
        self.record("on-boundary", at=since)
        self.record("inside", duration=20, at=since + timedelta(seconds=1))
        self.record("latest", duration=30)

        self.assertEqual(ledger.sum_duration_since("client-1", since), 50)

    def test_sum_is_per_client(self):
        self.record("mine", duration=15)
        self.record("theirs", client="client-2", duration=40)

        since = self.now - timedelta(hours=1)
        self.assertEqual(ledger.sum_duration_since("client-1", since), 15)
        self.assertEqual(ledger.sum_duration_since("client-2", since), 40)

    def test_sum_without_rows_is_zero(self):
        self.assertEqual(ledger.sum_duration_since("nobody", self.now - timedelta(hours=1)), 0)

    def test_record_stores_row(self):
        row = self.record("imp-1", duration=45)

        stored = Impression.objects.get(pk="imp-1")
        self.assertEqual(stored.ad_id, "ad-imp-1")
        self.assertEqual(stored.duration_seconds, 45)
        self.assertEqual(stored.timestamp, row.timestamp)

    def test_record_failure_is_persistence_error(self):
        with patch.object(Impression.objects, 'create', side_effect=OperationalError("disk full")):
            with self.assertRaises(PersistenceError):
                self.record("imp-1")
        self.assertFalse(Impression.objects.exists())

    def test_duplicate_id_keeps_connection_usable(self):
        self.record("imp-1")

        with self.assertRaises(PersistenceError) as ctx:
            self.record("imp-1")
        self.assertIsInstance(ctx.exception.__cause__, IntegrityError)

        # The savepoint was rolled back, so later writes still go through
        self.record("imp-2")
        self.assertEqual(Impression.objects.count(), 2)

    def test_sum_failure_is_persistence_error(self):
        with patch.object(Impression.objects, 'filter', side_effect=OperationalError("gone away")):
            with self.assertRaises(PersistenceError):
                ledger.sum_duration_since("client-1", self.now)


class ClientBudgetLockTest(TestCase):
    def test_lock_row_is_created_once(self):
        with ledger.client_budget_lock("client-1"):
            pass
        with ledger.client_budget_lock("client-1"):
            pass

        self.assertEqual(ClientBudgetLock.objects.filter(client_id="client-1").count(), 1)
        self.assertEqual(len(ledger._client_locks), 0)

    def test_writes_inside_lock_commit_together(self):
        with self.assertRaises(RuntimeError):
            with ledger.client_budget_lock("client-1"):
                ledger.record_impression("imp-1", "client-1", "ad-1", 15, timezone.now())
                raise RuntimeError("selection blew up")

        self.assertFalse(Impression.objects.exists())
        self.assertEqual(len(ledger._client_locks), 0)

    def test_database_error_is_persistence_error(self):
        with patch.object(ClientBudgetLock.objects, 'select_for_update',
                          side_effect=OperationalError("database is locked")):
            with self.assertRaises(PersistenceError):
                with ledger.client_budget_lock("client-1"):
                    pass
        self.assertEqual(len(ledger._client_locks), 0)

    def test_prune_keeps_only_clients_with_recent_impressions(self):
        now = timezone.now()
        for client_id in ("recent", "stale", "never-served"):
            with ledger.client_budget_lock(client_id):
                pass
        ledger.record_impression("imp-1", "recent", "ad-1", 15, now)
        ledger.record_impression("imp-2", "stale", "ad-1", 15, now - timedelta(hours=2))

        removed = ledger.prune_client_locks(now - timedelta(hours=1))

        self.assertEqual(removed, 2)
        self.assertEqual(list(ClientBudgetLock.objects.values_list('client_id', flat=True)), ["recent"])
        # Ledger rows are untouched
        self.assertEqual(Impression.objects.count(), 2)

    def test_lock_row_is_recreated_after_prune(self):
        with ledger.client_budget_lock("client-1"):
            pass
        ledger.prune_client_locks(timezone.now())

        with ledger.client_budget_lock("client-1"):
            pass

        self.assertTrue(ClientBudgetLock.objects.filter(client_id="client-1").exists())

    def test_prune_failure_is_persistence_error(self):
        with patch.object(ClientBudgetLock.objects, 'exclude', side_effect=OperationalError("gone away")):
            with self.assertRaises(PersistenceError):
                ledger.prune_client_locks(timezone.now())


class ClientLocksTest(SimpleTestCase):
    def setUp(self):
        self.locks = ledger._ClientLocks()

    def hold_in_thread(self, client_id, entered, release):
        def run():
            with self.locks.hold(client_id):
                entered.set()
                release.wait(5)
        thread = threading.Thread(target=run)
        thread.start()
        return thread

    def test_same_client_waits(self):
        first_in, release_first = threading.Event(), threading.Event()
        second_in, release_second = threading.Event(), threading.Event()
        release_second.set()

        first = self.hold_in_thread("client-1", first_in, release_first)
        self.assertTrue(first_in.wait(5))
        second = self.hold_in_thread("client-1", second_in, release_second)

        self.assertFalse(second_in.wait(0.2))
        release_first.set()
        self.assertTrue(second_in.wait(5))

        first.join(5)
        second.join(5)
        self.assertEqual(len(self.locks), 0)

    def test_different_clients_do_not_wait(self):
        first_in, release = threading.Event(), threading.Event()
        other_in = threading.Event()

        first = self.hold_in_thread("client-1", first_in, release)
        self.assertTrue(first_in.wait(5))
        other = self.hold_in_thread("client-2", other_in, release)

        self.assertTrue(other_in.wait(5))
        self.assertEqual(len(self.locks), 2)

        release.set()
        first.join(5)
        other.join(5)
        self.assertEqual(len(self.locks), 0)
