"""Tests for the transfer workflow state machine."""

import uuid
from decimal import Decimal

import pytest

from land_registry import events, transfers
from land_registry.exceptions import BadRequest, Conflict, Forbidden, NotFound
from land_registry.models import AuditLog, LandRecord, LandTransfer, OwnershipHistory

Status = LandTransfer.Status
LandStatus = LandRecord.Status


def initiate(actor, land, new_owner, number='TRF-1', value='1000000', **extra):
    return transfers.initiate_transfer(
        actor,
        land_id=land.pk,
        new_owner_id=new_owner.pk,
        transfer_number=number,
        transfer_value=Decimal(value),
        **extra,
    )


@pytest.mark.django_db
class TestInitiate:
    """Tests for initiate_transfer."""

    def test_happy_path(self, land, owner, buyer):
        """Initiation locks the parcel and snapshots the current owner."""
        transfer = initiate(owner, land, buyer)

        assert transfer.status == Status.INITIATED
        assert transfer.tax_amount == Decimal('50000.00')
        assert transfer.current_owner_id == owner.pk
        assert transfer.initiated_by_id == owner.pk

        land.refresh_from_db()
        assert land.status == LandStatus.UNDER_REVIEW
        assert land.owner_id == owner.pk

    def test_explicit_tax_amount_is_kept(self, land, owner, buyer):
        transfer = initiate(owner, land, buyer, tax_amount=Decimal('1234.50'))
        assert transfer.tax_amount == Decimal('1234.50')

    def test_zero_tax_amount_is_kept(self, land, owner, buyer):
        """A supplied zero is an exemption, not a missing value."""
        transfer = initiate(owner, land, buyer, tax_amount=Decimal('0'))
        assert transfer.tax_amount == Decimal('0')

    def test_float_value_taxed_on_its_decimal_text(self, land, owner, buyer):
        transfer = transfers.initiate_transfer(
            owner, land_id=land.pk, new_owner_id=buyer.pk,
            transfer_number='TRF-F', transfer_value=1000000.1,
        )
        assert transfer.tax_amount == Decimal('50000.01')

    def test_officer_may_initiate_for_owner(self, land, owner, buyer, land_officer):
        transfer = initiate(land_officer, land, buyer)
        assert transfer.current_owner_id == owner.pk
        assert transfer.initiated_by_id == land_officer.pk

    def test_duplicate_transfer_number(self, make_land, owner, buyer, transfer):
        """The second initiation fails and leaves the first transfer alone."""
        second_land = make_land(owner)

        with pytest.raises(Conflict, match='Transfer number already exists'):
            initiate(owner, second_land, buyer, number='TRF-1')

        second_land.refresh_from_db()
        assert second_land.status == LandStatus.APPROVED
        assert LandTransfer.objects.count() == 1
        assert LandTransfer.objects.get(pk=transfer.pk).status == Status.INITIATED

    def test_duplicate_number_checked_before_land(self, owner, buyer, transfer):
        with pytest.raises(Conflict):
            transfers.initiate_transfer(
                owner, land_id=uuid.uuid4(), new_owner_id=buyer.pk,
                transfer_number='TRF-1', transfer_value=Decimal('10'),
            )

    def test_missing_land(self, owner, buyer):
        with pytest.raises(NotFound, match='Land record not found'):
            transfers.initiate_transfer(
                owner, land_id=uuid.uuid4(), new_owner_id=buyer.pk,
                transfer_number='TRF-9', transfer_value=Decimal('10'),
            )

    def test_stranger_cannot_initiate(self, land, outsider, buyer):
        with pytest.raises(Forbidden):
            initiate(outsider, land, buyer)
        land.refresh_from_db()
        assert land.status == LandStatus.APPROVED

    @pytest.mark.parametrize('status', [
        LandStatus.PENDING, LandStatus.REJECTED, LandStatus.TRANSFERRED, LandStatus.DISPUTED,
    ])
    def test_land_must_be_transferable(self, make_land, owner, buyer, status):
        land = make_land(owner, status=status)
        with pytest.raises(BadRequest, match='approved/active'):
            initiate(owner, land, buyer)
        assert not LandTransfer.objects.exists()

    def test_missing_new_owner(self, land, owner):
        with pytest.raises(NotFound, match='New owner not found'):
            transfers.initiate_transfer(
                owner, land_id=land.pk, new_owner_id=999999,
                transfer_number='TRF-1', transfer_value=Decimal('10'),
            )

    def test_self_transfer_rejected_for_any_role(self, land, owner, registrar):
        for actor in (owner, registrar):
            with pytest.raises(BadRequest, match='same owner'):
                initiate(actor, land, owner)
        land.refresh_from_db()
        assert land.status == LandStatus.APPROVED

    def test_second_transfer_on_locked_land(self, land, owner, buyer, outsider, transfer):
        with pytest.raises(BadRequest):
            initiate(owner, land, outsider, number='TRF-2')
        assert LandTransfer.objects.filter(land=land).count() == 1

    def test_audit_and_event(self, land, owner, buyer, django_capture_on_commit_callbacks):
        with django_capture_on_commit_callbacks(execute=True):
            transfer = initiate(owner, land, buyer)

        audit = AuditLog.objects.get(object_id=str(transfer.pk))
        assert audit.action == 'create'
        assert audit.user == owner

        assert [event['type'] for event in events.outbox] == ['transfer.initiated']
        assert events.outbox[0]['payload']['transfer_number'] == 'TRF-1'

    def test_no_event_before_commit(self, land, owner, buyer):
        initiate(owner, land, buyer)
        assert events.outbox == []


@pytest.mark.django_db
class TestApprove:
    """Tests for approve_transfer."""

    def test_happy_path(self, transfer, land, buyer, land_officer):
        """Approval completes the transfer and moves ownership together."""
        result = transfers.approve_transfer(transfer.pk, land_officer, 'Documents verified')

        assert result.status == Status.COMPLETED
        assert result.approved_by_id == land_officer.pk
        assert result.approved_at is not None
        assert result.completed_at is not None
        assert result.approval_notes == 'Documents verified'

        stored = LandTransfer.objects.get(pk=transfer.pk)
        land.refresh_from_db()
        assert stored.status == Status.COMPLETED
        assert land.owner_id == buyer.pk
        assert land.status == LandStatus.TRANSFERRED

    def test_records_ownership_history(self, transfer, land, owner, buyer, registrar):
        transfers.approve_transfer(transfer.pk, registrar)
        record = OwnershipHistory.objects.get(land=land)
        assert record.previous_owner_id == owner.pk
        assert record.new_owner_id == buyer.pk
        assert record.transfer_id == transfer.pk
        assert record.transfer_value == Decimal('1000000.00')

    def test_from_pending_approval(self, transfer, land_officer):
        LandTransfer.objects.filter(pk=transfer.pk).update(status=Status.PENDING_APPROVAL)
        result = transfers.approve_transfer(transfer.pk, land_officer)
        assert result.status == Status.COMPLETED

    def test_citizen_cannot_approve(self, transfer, land, owner):
        with pytest.raises(Forbidden):
            transfers.approve_transfer(transfer.pk, owner)
        land.refresh_from_db()
        assert land.owner_id == owner.pk
        assert LandTransfer.objects.get(pk=transfer.pk).status == Status.INITIATED

    def test_officer_outside_district_cannot_approve(self, transfer, other_land_officer):
        with pytest.raises(Forbidden, match='Access denied'):
            transfers.approve_transfer(transfer.pk, other_land_officer)

    def test_terminal_transfer_cannot_be_approved(self, transfer, land_officer):
        transfers.approve_transfer(transfer.pk, land_officer)
        with pytest.raises(BadRequest, match='cannot be approved'):
            transfers.approve_transfer(transfer.pk, land_officer)
        assert OwnershipHistory.objects.count() == 1

    def test_missing_transfer(self, land_officer):
        with pytest.raises(NotFound, match='Transfer not found'):
            transfers.approve_transfer(uuid.uuid4(), land_officer)

    def test_events_and_audit(self, transfer, land_officer, django_capture_on_commit_callbacks):
        with django_capture_on_commit_callbacks(execute=True):
            transfers.approve_transfer(transfer.pk, land_officer)

        assert [event['type'] for event in events.outbox] == [
            'transfer.approved', 'transfer.completed', 'land.ownership.transferred',
        ]
        ownership = events.outbox[-1]['payload']
        assert ownership['owner_id'] == transfer.new_owner_id
        assert ownership['previous_owner_id'] == transfer.current_owner_id

        actions = set(AuditLog.objects.filter(object_id=str(transfer.pk)).values_list('action', flat=True))
        assert {'approve', 'complete'} <= actions

    def test_failed_finalize_rolls_back_approval(self, transfer, land, owner, land_officer):
        """A parcel that left review undoes the approval along with everything after it."""
        LandRecord.objects.filter(pk=land.pk).update(status=LandStatus.APPROVED)

        with pytest.raises(BadRequest, match='not under review'):
            transfers.approve_transfer(transfer.pk, land_officer)

        stored = LandTransfer.objects.get(pk=transfer.pk)
        assert stored.status == Status.INITIATED
        assert stored.approved_by_id is None
        assert stored.approved_at is None
        assert not AuditLog.objects.filter(object_id=str(transfer.pk), action='approve').exists()
        assert not OwnershipHistory.objects.exists()
        land.refresh_from_db()
        assert land.owner_id == owner.pk


@pytest.mark.django_db
class TestReject:
    """Tests for reject_transfer."""

    def test_reject_path(self, transfer, land, owner, land_officer):
        result = transfers.reject_transfer(transfer.pk, land_officer, 'missing docs')

        assert result.status == Status.REJECTED
        assert result.rejection_reason == 'missing docs'
        assert result.approved_by_id == land_officer.pk

        land.refresh_from_db()
        assert land.status == LandStatus.APPROVED
        assert land.owner_id == owner.pk

    def test_citizen_cannot_reject(self, transfer, buyer):
        with pytest.raises(Forbidden):
            transfers.reject_transfer(transfer.pk, buyer, 'no')

    def test_cannot_reject_twice(self, transfer, registrar):
        transfers.reject_transfer(transfer.pk, registrar, 'missing docs')
        with pytest.raises(BadRequest, match='cannot be rejected'):
            transfers.reject_transfer(transfer.pk, registrar, 'again')

    def test_land_can_be_transferred_again(self, transfer, land, owner, buyer, registrar):
        transfers.reject_transfer(transfer.pk, registrar, 'missing docs')
        second = initiate(owner, land, buyer, number='TRF-2')
        assert second.status == Status.INITIATED


@pytest.mark.django_db
class TestCancel:
    """Tests for cancel_transfer."""

    def test_owner_cancels(self, transfer, land, owner):
        result = transfers.cancel_transfer(transfer.pk, owner)
        assert result.status == Status.CANCELLED
        land.refresh_from_db()
        assert land.status == LandStatus.APPROVED
        assert land.owner_id == owner.pk

    def test_new_owner_cannot_cancel(self, transfer, land, buyer):
        """Being party to the transfer is not enough."""
        with pytest.raises(Forbidden, match='Only the current owner'):
            transfers.cancel_transfer(transfer.pk, buyer)
        land.refresh_from_db()
        assert land.status == LandStatus.UNDER_REVIEW
        assert LandTransfer.objects.get(pk=transfer.pk).status == Status.INITIATED

    def test_stranger_cannot_cancel(self, transfer, outsider):
        with pytest.raises(Forbidden):
            transfers.cancel_transfer(transfer.pk, outsider)
        assert LandTransfer.objects.get(pk=transfer.pk).status == Status.INITIATED

    def test_officer_cannot_cancel(self, transfer, registrar):
        with pytest.raises(Forbidden):
            transfers.cancel_transfer(transfer.pk, registrar)

    def test_completed_transfer_cannot_be_cancelled(self, transfer, land, owner, buyer, land_officer):
        transfers.approve_transfer(transfer.pk, land_officer)
        with pytest.raises(BadRequest, match='cannot be cancelled'):
            transfers.cancel_transfer(transfer.pk, owner)
        land.refresh_from_db()
        assert land.owner_id == buyer.pk
        assert land.status == LandStatus.TRANSFERRED


@pytest.mark.django_db
class TestCompareAndSwap:
    """A transition computed from a stale read must not apply."""

    def test_stale_transition_is_refused(self, transfer):
        LandTransfer.objects.filter(pk=transfer.pk).update(status=Status.CANCELLED)

        with pytest.raises(BadRequest, match='stale'):
            transfers._transition(transfer, transfers.OPEN_STATUSES, 'stale', status=Status.APPROVED)

        assert LandTransfer.objects.get(pk=transfer.pk).status == Status.CANCELLED
        assert transfer.status == Status.INITIATED

    def test_concurrent_cancel_blocks_approval(self, transfer, land, owner, land_officer):
        transfers.cancel_transfer(transfer.pk, owner)
        with pytest.raises(BadRequest):
            transfers.approve_transfer(transfer.pk, land_officer)
        land.refresh_from_db()
        assert land.owner_id == owner.pk
        assert not OwnershipHistory.objects.exists()


class TestComputeTransferTax:
    """Tests for compute_transfer_tax."""

    def test_default_rate(self):
        assert transfers.compute_transfer_tax(Decimal('1000000')) == Decimal('50000.00')

    def test_rounds_to_cents(self):
        assert transfers.compute_transfer_tax(Decimal('10.15')) == Decimal('0.51')

    def test_configured_rate(self, settings):
        settings.LAND_TRANSFER_TAX_RATE = Decimal('0.1')
        assert transfers.compute_transfer_tax(Decimal('200')) == Decimal('20.00')

    def test_float_value_is_not_binary_rounded(self):
        assert transfers.compute_transfer_tax(1000000.1) == Decimal('50000.01')


class TestIsOpen:
    """Tests for LandTransfer.is_open."""

    @pytest.mark.parametrize('status', [Status.INITIATED, Status.PENDING_APPROVAL])
    def test_open(self, status):
        assert LandTransfer(status=status).is_open

    @pytest.mark.parametrize('status', [
        Status.APPROVED, Status.REJECTED, Status.COMPLETED, Status.CANCELLED,
    ])
    def test_closed(self, status):
        assert not LandTransfer(status=status).is_open
