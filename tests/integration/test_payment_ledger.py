"""Integration tests for payment ledger mutations and their side effects."""

from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import func, select

from membership.errors import NotFoundError, ValidationFailedError
from membership.models import AuditLog, Member, Payment, PaymentKind, PaymentMethod, PaymentStatus
from membership.services.payment_service import PaymentService


def _count(db_session, model) -> int:
    return db_session.scalar(select(func.count(model.id)))


def _snapshot(payment: Payment) -> dict:
    return {column.name: getattr(payment, column.key) for column in Payment.__table__.columns}


@pytest.fixture
def member(make_member):
    return make_member(name="Maria")


class TestCreatePayment:
    """Test ledger entry creation."""

    def test_create_defaults_to_pending_with_reference(self, db_session, member):
        """Omitted status defaults to Pending; a reference is generated."""
        service = PaymentService(db_session)

        payment = service.create(
            member_id=member.id,
            amount=Decimal("150.00"),
            due_date=date(2025, 1, 15),
            actor="staff-1",
        )

        assert payment.id is not None
        assert payment.status == PaymentStatus.PENDING
        assert payment.kind == PaymentKind.DUES
        assert len(payment.reference) == 8
        assert payment.recorded_by == "staff-1"
        assert (payment.reference_month, payment.reference_year) == (1, 2025)
        db_session.refresh(member)
        assert member.last_payment_date is None

    def test_create_paid_sets_member_last_payment_date(self, db_session, member):
        """A Paid entry moves the owner's last payment date to its payment date."""
        service = PaymentService(db_session)

        service.create(
            member_id=member.id,
            amount=Decimal("150.00"),
            due_date=date(2025, 1, 15),
            payment_date=date(2025, 1, 12),
            method=PaymentMethod.PIX,
            status=PaymentStatus.PAID,
        )

        db_session.refresh(member)
        assert member.last_payment_date == date(2025, 1, 12)

    def test_latest_paid_entry_is_reflected(self, db_session, member):
        """Each newer settlement advances the member's last payment date."""
        service = PaymentService(db_session)
        for day in (date(2025, 1, 10), date(2025, 2, 10)):
            service.create(
                member_id=member.id,
                amount=Decimal("150.00"),
                due_date=day,
                payment_date=day,
                method=PaymentMethod.CASH,
                status=PaymentStatus.PAID,
            )

        db_session.refresh(member)
        assert member.last_payment_date == date(2025, 2, 10)

    def test_backdated_paid_entry_does_not_rewind(self, db_session, member):
        """An earlier-dated settlement leaves the last payment date alone."""
        service = PaymentService(db_session)
        service.create(
            member_id=member.id,
            amount=Decimal("150.00"),
            due_date=date(2025, 2, 10),
            payment_date=date(2025, 2, 10),
            status=PaymentStatus.PAID,
        )
        service.create(
            member_id=member.id,
            amount=Decimal("150.00"),
            due_date=date(2025, 1, 10),
            payment_date=date(2025, 1, 5),
            status=PaymentStatus.PAID,
        )

        db_session.refresh(member)
        assert member.last_payment_date == date(2025, 2, 10)

    def test_paid_without_date_uses_today(self, db_session, member):
        service = PaymentService(db_session)

        payment = service.create(
            member_id=member.id,
            amount=Decimal("20.00"),
            due_date=date(2025, 3, 1),
            status=PaymentStatus.PAID,
            today=date(2025, 3, 2),
        )

        assert payment.payment_date == date(2025, 3, 2)
        db_session.refresh(member)
        assert member.last_payment_date == date(2025, 3, 2)

    def test_unknown_member_rejected_without_writes(self, db_session):
        """Referencing a missing member is a validation failure."""
        service = PaymentService(db_session)

        with pytest.raises(ValidationFailedError):
            service.create(member_id=999, amount=Decimal("10.00"), due_date=date(2025, 1, 1))

        assert _count(db_session, Payment) == 0
        assert _count(db_session, AuditLog) == 0

    @pytest.mark.parametrize("period", [{"reference_month": 0}, {"reference_year": 0}])
    def test_explicit_zero_period_rejected(self, db_session, member, period):
        """A zero month or year is invalid, not a request for the default."""
        service = PaymentService(db_session)

        with pytest.raises(ValidationFailedError):
            service.create(
                member_id=member.id, amount=Decimal("10.00"), due_date=date(2025, 1, 1), **period
            )

        assert _count(db_session, Payment) == 0

    @pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-5.00")])
    def test_non_positive_amount_rejected(self, db_session, member, amount):
        service = PaymentService(db_session)

        with pytest.raises(ValidationFailedError):
            service.create(member_id=member.id, amount=amount, due_date=date(2025, 1, 1))

        assert _count(db_session, Payment) == 0

    def test_create_writes_audit_row(self, db_session, member):
        payment = PaymentService(db_session).create(
            member_id=member.id, amount=Decimal("10.00"), due_date=date(2025, 1, 1), actor="staff-9"
        )

        audit = db_session.scalar(select(AuditLog).where(AuditLog.entity_id == payment.id))
        assert audit.entity_type == "payment"
        assert audit.action == "create"
        assert audit.actor == "staff-9"
        assert audit.changes["status"] == "Pending"


class TestUpdatePayment:
    """Test partial updates."""

    @pytest.fixture
    def payment(self, db_session, member):
        return PaymentService(db_session).create(
            member_id=member.id,
            amount=Decimal("150.00"),
            due_date=date(2025, 1, 15),
            method=PaymentMethod.PIX,
            notes="January dues",
        )

    def test_empty_patch_changes_nothing(self, db_session, payment):
        """An empty patch leaves every column, including updated_at, untouched."""
        before = _snapshot(payment)
        audits_before = _count(db_session, AuditLog)

        PaymentService(db_session).update(payment.id, {})

        db_session.expire_all()
        after = _snapshot(db_session.get(Payment, payment.id))
        assert after == before
        assert _count(db_session, AuditLog) == audits_before

    def test_same_values_are_not_a_change(self, db_session, payment):
        audits_before = _count(db_session, AuditLog)

        PaymentService(db_session).update(
            payment.id, {"amount": Decimal("150.00"), "notes": "January dues"}
        )

        assert _count(db_session, AuditLog) == audits_before

    def test_only_given_fields_change(self, db_session, payment):
        PaymentService(db_session).update(payment.id, {"notes": "corrected", "amount": Decimal("140")})

        db_session.expire_all()
        updated = db_session.get(Payment, payment.id)
        assert updated.notes == "corrected"
        assert updated.amount == Decimal("140.00")
        assert updated.due_date == date(2025, 1, 15)
        assert updated.method == PaymentMethod.PIX
        assert updated.status == PaymentStatus.PENDING

    def test_update_to_paid_sets_last_payment_date(self, db_session, member, payment):
        PaymentService(db_session).update(
            payment.id, {"status": PaymentStatus.PAID, "payment_date": date(2025, 1, 20)}
        )

        db_session.refresh(member)
        assert member.last_payment_date == date(2025, 1, 20)

    def test_leaving_paid_keeps_last_payment_date(self, db_session, member, payment):
        service = PaymentService(db_session)
        service.update(payment.id, {"status": PaymentStatus.PAID, "payment_date": date(2025, 1, 20)})

        service.update(payment.id, {"status": PaymentStatus.PENDING})

        db_session.refresh(member)
        assert member.last_payment_date == date(2025, 1, 20)

    def test_update_records_diff_in_audit(self, db_session, payment):
        PaymentService(db_session).update(payment.id, {"notes": "changed"}, actor="staff-2")

        audit = db_session.scalar(
            select(AuditLog).where(AuditLog.action == "update", AuditLog.entity_id == payment.id)
        )
        assert audit.actor == "staff-2"
        assert audit.changes == {"notes": ["January dues", "changed"]}

    def test_cancelled_cannot_be_reopened(self, db_session, payment):
        service = PaymentService(db_session)
        service.update(payment.id, {"status": PaymentStatus.CANCELLED})

        with pytest.raises(ValidationFailedError):
            service.update(payment.id, {"status": PaymentStatus.PENDING})

    def test_member_cannot_change(self, db_session, make_member, payment):
        other = make_member()

        with pytest.raises(ValidationFailedError):
            PaymentService(db_session).update(payment.id, {"member_id": other.id})

    def test_non_positive_amount_leaves_entry_unchanged(self, db_session, payment):
        with pytest.raises(ValidationFailedError):
            PaymentService(db_session).update(payment.id, {"amount": Decimal("0")})

        db_session.expire_all()
        assert db_session.get(Payment, payment.id).amount == Decimal("150.00")

    def test_missing_payment(self, db_session):
        with pytest.raises(NotFoundError):
            PaymentService(db_session).update(404, {"notes": "x"})

    def test_paid_entry_cannot_lose_payment_date(self, db_session, member):
        """Clearing the date of an entry that stays Paid is rejected."""
        service = PaymentService(db_session)
        paid = service.create(
            member_id=member.id,
            amount=Decimal("150.00"),
            due_date=date(2025, 1, 10),
            payment_date=date(2025, 1, 10),
            status=PaymentStatus.PAID,
        )

        with pytest.raises(ValidationFailedError):
            service.update(paid.id, {"payment_date": None})

        db_session.expire_all()
        assert db_session.get(Payment, paid.id).payment_date == date(2025, 1, 10)

    def test_leaving_paid_may_clear_payment_date(self, db_session, member):
        service = PaymentService(db_session)
        paid = service.create(
            member_id=member.id,
            amount=Decimal("150.00"),
            due_date=date(2025, 1, 10),
            payment_date=date(2025, 1, 10),
            status=PaymentStatus.PAID,
        )

        service.update(paid.id, {"status": PaymentStatus.PENDING, "payment_date": None})

        db_session.expire_all()
        reopened = db_session.get(Payment, paid.id)
        assert reopened.status == PaymentStatus.PENDING
        assert reopened.payment_date is None


class TestDeletePayment:
    """Test hard deletion."""

    def test_delete_removes_entry_and_audits(self, db_session, member):
        service = PaymentService(db_session)
        payment = service.create(member_id=member.id, amount=Decimal("10.00"), due_date=date(2025, 1, 1))

        service.delete(payment.id, actor="staff-1")

        assert _count(db_session, Payment) == 0
        audit = db_session.scalar(select(AuditLog).where(AuditLog.action == "delete"))
        assert audit.entity_id == payment.id
        assert audit.actor == "staff-1"

    def test_delete_unknown_id_leaves_ledger_unchanged(self, db_session, member):
        service = PaymentService(db_session)
        service.create(member_id=member.id, amount=Decimal("10.00"), due_date=date(2025, 1, 1))

        with pytest.raises(NotFoundError):
            service.delete(12345)

        assert _count(db_session, Payment) == 1


class TestRegisterPayment:
    """Test settling a pending entry."""

    def test_register_scenario_updates_member_and_statement(self, db_session, make_member):
        """Pending 150.00 settled by PIX on 2025-01-14 shows up in the statement."""
        member = make_member(name="M", id=7)
        service = PaymentService(db_session)
        payment = service.create(member_id=7, amount=Decimal("150.00"), due_date=date(2025, 1, 15))

        service.register_payment(
            payment.id, method=PaymentMethod.PIX, paid_by="M", today=date(2025, 1, 14)
        )

        settled = service.get(payment.id)
        assert settled.status == PaymentStatus.PAID
        assert settled.payment_date == date(2025, 1, 14)
        assert settled.method == PaymentMethod.PIX
        assert settled.paid_by == "M"
        db_session.refresh(member)
        assert member.last_payment_date == date(2025, 1, 14)

        statement = service.statement_for(7)
        assert statement.total_paid == Decimal("150.00")
        assert statement.total_pending == Decimal("0")

    def test_register_cancelled_rejected(self, db_session, member):
        service = PaymentService(db_session)
        payment = service.create(
            member_id=member.id,
            amount=Decimal("10.00"),
            due_date=date(2025, 1, 1),
            status=PaymentStatus.CANCELLED,
        )

        with pytest.raises(ValidationFailedError):
            service.register_payment(payment.id, method=PaymentMethod.CASH)

        db_session.refresh(member)
        assert member.last_payment_date is None


class TestListingAndStatistics:
    """Test ledger queries."""

    def test_list_filters_and_orders_by_payment_date(self, db_session, make_member):
        alice = make_member(name="Alice", email="alice@example.com")
        bob = make_member(name="Bob", email="bob@example.com")
        service = PaymentService(db_session)
        early = service.create(
            member_id=alice.id, amount=Decimal("10.00"), due_date=date(2025, 1, 1),
            payment_date=date(2025, 1, 1), status=PaymentStatus.PAID,
        )
        late = service.create(
            member_id=alice.id, amount=Decimal("10.00"), due_date=date(2025, 2, 1),
            payment_date=date(2025, 2, 1), status=PaymentStatus.PAID,
        )
        pending = service.create(member_id=bob.id, amount=Decimal("10.00"), due_date=date(2025, 3, 1))

        assert [p.id for p in service.list_payments()] == [late.id, early.id, pending.id]
        assert [p.id for p in service.list_payments(search="Ali")] == [late.id, early.id]
        assert [p.id for p in service.list_payments(search="bob@")] == [pending.id]
        assert [p.id for p in service.list_payments(status=PaymentStatus.PENDING)] == [pending.id]
        assert [p.id for p in service.list_payments(member_id=bob.id)] == [pending.id]
        assert [
            p.id
            for p in service.list_payments(start_date=date(2025, 1, 15), end_date=date(2025, 2, 1))
        ] == [late.id]

    def test_statistics(self, db_session, member):
        service = PaymentService(db_session)
        service.create(
            member_id=member.id, amount=Decimal("100.00"), due_date=date(2025, 1, 1),
            payment_date=date(2025, 1, 1), status=PaymentStatus.PAID,
        )
        service.create(member_id=member.id, amount=Decimal("50.00"), due_date=date(2025, 2, 1))
        service.create(
            member_id=member.id, amount=Decimal("30.00"), due_date=date(2025, 1, 1),
            status=PaymentStatus.OVERDUE,
        )

        stats = service.statistics()

        assert stats.total_payments == 3
        assert stats.paid_count == 1
        assert stats.pending_count == 1
        assert stats.total_revenue == Decimal("100.00")

    def test_statement_for_missing_member(self, db_session):
        with pytest.raises(NotFoundError):
            PaymentService(db_session).statement_for(404)

    def test_statement_for_member_without_payments(self, db_session, member):
        statement = PaymentService(db_session).statement_for(member.id)

        assert statement.total_paid == Decimal("0")
        assert statement.total_pending == Decimal("0")
        assert statement.entries == []
        assert isinstance(statement.member, Member)


class TestHistory:
    """Test the per-entry audit trail."""

    def test_history_survives_deletion(self, db_session, member):
        service = PaymentService(db_session)
        payment = service.create(member_id=member.id, amount=Decimal("10.00"), due_date=date(2025, 1, 1))
        service.register_payment(payment.id, method=PaymentMethod.CASH, today=date(2025, 1, 2))
        service.delete(payment.id)

        assert [a.action for a in service.history(payment.id)] == ["create", "register", "delete"]

    def test_unknown_id_has_empty_history(self, db_session):
        assert PaymentService(db_session).history(999) == []
