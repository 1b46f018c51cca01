# Overview: Pytest coverage for the store lock, unit-of-work rollback and retry helper.

import threading

import pytest
from sqlalchemy.exc import OperationalError

from orderbyte.extensions import db
from orderbyte.models import Order, StaffUser
from orderbyte.services import order_service, staff_service
from orderbyte.services.concurrency import run_with_retry, serialized


class TestConcurrentOrders:

    def test_parallel_placement(self, app):
        """Orders placed from many threads are all stored with correct totals."""
        errors = []

        def worker(n):
            with app.app_context():
                try:
                    order_service.create_order(
                        "bella-vista",
                        customer_name=f"Guest {n}",
                        table_number=str(n),
                        items=[{"itemId": "margherita", "quantity": 1}, {"itemId": "tiramisu", "quantity": 2}],
                        customer_session_id=f"S{n}",
                    )
                except Exception as exc:  # collected for the assertion below
                    errors.append(exc)

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(20)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert errors == []
        orders = order_service.list_orders("bella-vista")
        placed = [o for o in orders if o.customer_session_id and o.customer_session_id.startswith("S")]
        assert len(placed) == 20
        assert {o.total_amount for o in placed} == {27690 + 2 * 14650}
        assert len({o.id for o in placed}) == 20

    def test_parallel_status_changes(self, app):
        """Only one of many racing preparing->ready moves can win."""
        order_id = "order-1"
        results = []

        def worker():
            with app.app_context():
                try:
                    order_service.update_status(order_id, "ready", "bella-vista")
                    results.append("ok")
                except order_service.OrderTransitionError:
                    results.append("rejected")

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert results.count("ok") == 1
        assert results.count("rejected") == 7


class TestUnitOfWork:

    def test_failed_operation_leaves_no_partial_state(self, app):
        @serialized
        def create_then_fail():
            staff_service.create_staff("bella-vista", email="ghost@example.com", name="Ghost", role="chef")
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            create_then_fail()

        assert db.session.query(StaffUser).filter_by(email="ghost@example.com").count() == 0

    def test_rejected_order_writes_nothing(self, app):
        before = db.session.query(Order).count()
        with pytest.raises(order_service.OrderError):
            order_service.create_order(
                "bella-vista",
                customer_name="A",
                table_number="1",
                items=[{"itemId": "margherita", "quantity": 1}, {"itemId": "ghost", "quantity": 1}],
            )
        assert db.session.query(Order).count() == before


class TestRunWithRetry:

    def test_retries_operational_errors(self, app):
        calls = []

        def flaky():
            calls.append(1)
            if len(calls) < 3:
                raise OperationalError("SELECT 1", {}, Exception("database is locked"))
            return "done"

        assert run_with_retry(flaky, backoff_base=0) == "done"
        assert len(calls) == 3

    def test_gives_up(self, app):
        def always_locked():
            raise OperationalError("SELECT 1", {}, Exception("database is locked"))

        with pytest.raises(OperationalError):
            run_with_retry(always_locked, attempts=2, backoff_base=0)

    def test_other_errors_are_not_retried(self, app):
        calls = []

        def broken():
            calls.append(1)
            raise KeyError("x")

        with pytest.raises(KeyError):
            run_with_retry(broken, backoff_base=0)
        assert len(calls) == 1
