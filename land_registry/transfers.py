"""
Land transfer workflow

A transfer moves INITIATED -> {APPROVED -> COMPLETED, REJECTED, CANCELLED}.
PENDING_APPROVAL is an optional intermediate state set by an officer through
``update_transfer``. Each transition runs inside one database transaction, is
guarded by a conditional UPDATE on the expected status, and writes the land
record through the gate in the same transaction.
"""

import logging
from decimal import ROUND_HALF_UP, Decimal

from django.conf import settings
from django.db import IntegrityError, transaction
from django.db.models import Count, Q
from django.utils import timezone

from . import cache, gate, permissions
from .events import LandEventType, build_event, land_payload, publish_event, transfer_payload
from .exceptions import BadRequest, Conflict, Forbidden, NotFound
from .models import AuditLog, LandRecord, LandTransfer, OwnershipHistory, User
from .serializers import serialize_transfer

logger = logging.getLogger(__name__)

Status = LandTransfer.Status
OPEN_STATUSES = LandTransfer.OPEN_STATUSES

AUDIT_ACTIONS = {
    LandEventType.TRANSFER_INITIATED: 'create',
    LandEventType.TRANSFER_UPDATED: 'update',
    LandEventType.TRANSFER_APPROVED: 'approve',
    LandEventType.TRANSFER_REJECTED: 'reject',
    LandEventType.TRANSFER_CANCELLED: 'cancel',
    LandEventType.TRANSFER_COMPLETED: 'complete',
}


def compute_transfer_tax(transfer_value):
    rate = getattr(settings, 'LAND_TRANSFER_TAX_RATE', Decimal('0.05'))
    return (Decimal(str(transfer_value)) * rate).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)


def _transfers():
    return LandTransfer.objects.select_related('land', 'current_owner', 'new_owner')


# ============================================================================
# EVENT APPLICATION
# ============================================================================

def _after_commit(keys, events):
    cache.invalidate(keys)
    for event in events:
        publish_event(event)


def apply_transfer_event(transfer, event_type, actor, changes=None):
    """
    Record a transfer state change.

    Writes the audit row in the current transaction and schedules cache
    invalidation and event publication for after commit. The invalidation
    set is derived from the transfer, so callers never list cache keys.
    """
    AuditLog.objects.create(
        user=actor,
        action=AUDIT_ACTIONS[event_type],
        model_name='LandTransfer',
        object_id=str(transfer.pk),
        object_repr=transfer.transfer_number,
        changes=changes,
    )

    events = [build_event(event_type, transfer_payload(transfer), user_id=actor.pk)]
    if event_type == LandEventType.TRANSFER_COMPLETED:
        events.append(build_event(
            LandEventType.LAND_OWNERSHIP_TRANSFERRED,
            dict(land_payload(transfer.land), previous_owner_id=transfer.current_owner_id,
                 transfer_id=str(transfer.pk)),
            user_id=actor.pk,
        ))

    keys = cache.transfer_cache_keys(transfer)
    transaction.on_commit(lambda: _after_commit(keys, events))
    logger.info(f"Transfer {transfer.transfer_number}: {event_type} by user {actor.pk}")


def _transition(transfer, expected, message, **fields):
    """Move the transfer to a new state only if it is still in an expected one"""
    fields['updated_at'] = timezone.now()
    updated = LandTransfer.objects.filter(pk=transfer.pk, status__in=expected).update(**fields)
    if not updated:
        raise BadRequest(message)
    for name, value in fields.items():
        setattr(transfer, name, value)


def _load_for_update(transfer_id, actor):
    transfer = _transfers().select_for_update().filter(pk=transfer_id).first()
    if transfer is None:
        raise NotFound('Transfer not found')
    if not permissions.can_view_transfer(actor, serialize_transfer(transfer)):
        raise Forbidden('Access denied')
    return transfer


# ============================================================================
# STATE TRANSITIONS
# ============================================================================

def initiate_transfer(actor, land_id, new_owner_id, transfer_number, transfer_value,
                      tax_amount=None, reason='', documents=None):
    """Open a transfer and lock the parcel under review"""
    if LandTransfer.objects.filter(transfer_number=transfer_number).exists():
        raise Conflict('Transfer number already exists')

    land = LandRecord.objects.select_related('owner').filter(pk=land_id).first()
    if land is None:
        raise NotFound('Land record not found')

    if land.owner_id != actor.pk and not permissions.has_capability(actor, permissions.INITIATE_TRANSFER):
        raise Forbidden('Only the land owner or authorized personnel can initiate transfers')

    if not gate.is_transferable(land):
        raise BadRequest('Land must be approved/active to be transferred')

    new_owner = User.objects.filter(pk=new_owner_id).first()
    if new_owner is None:
        raise NotFound('New owner not found')

    if new_owner.pk == land.owner_id:
        raise BadRequest('Cannot transfer land to the same owner')

    if tax_amount is None:
        tax_amount = compute_transfer_tax(transfer_value)

    try:
        with transaction.atomic():
            gate.lock(land)
            transfer = LandTransfer.objects.create(
                transfer_number=transfer_number,
                land=land,
                current_owner=land.owner,
                new_owner=new_owner,
                transfer_value=transfer_value,
                tax_amount=tax_amount,
                reason=reason or '',
                documents=documents or [],
                status=Status.INITIATED,
                initiated_by=actor,
            )
            apply_transfer_event(transfer, LandEventType.TRANSFER_INITIATED, actor)
    except IntegrityError:
        if LandTransfer.objects.filter(transfer_number=transfer_number).exists():
            raise Conflict('Transfer number already exists')
        raise BadRequest('Land already has a transfer in progress')

    return transfer


def approve_transfer(transfer_id, actor, approval_notes=''):
    """Approve a transfer and complete the ownership change in one step"""
    permissions.require_capability(
        actor, permissions.APPROVE_TRANSFER, 'Insufficient permissions to approve transfers'
    )

    with transaction.atomic():
        transfer = _load_for_update(transfer_id, actor)
        message = 'Transfer cannot be approved in current status'
        if not transfer.is_open:
            raise BadRequest(message)

        now = timezone.now()
        _transition(
            transfer, OPEN_STATUSES, message,
            status=Status.APPROVED, approved_by=actor, approved_at=now,
            approval_notes=approval_notes or '',
        )
        apply_transfer_event(transfer, LandEventType.TRANSFER_APPROVED, actor,
                             changes={'approval_notes': approval_notes or ''})

        gate.finalize(transfer.land, transfer.new_owner)
        OwnershipHistory.objects.create(
            land=transfer.land,
            previous_owner=transfer.current_owner,
            new_owner=transfer.new_owner,
            transfer=transfer,
            transfer_date=now.date(),
            transfer_value=transfer.transfer_value,
            recorded_by=actor,
        )

        _transition(transfer, [Status.APPROVED], message, status=Status.COMPLETED, completed_at=now)
        apply_transfer_event(transfer, LandEventType.TRANSFER_COMPLETED, actor)

    return transfer


def reject_transfer(transfer_id, actor, rejection_reason):
    """Reject a transfer and release the parcel"""
    permissions.require_capability(
        actor, permissions.REJECT_TRANSFER, 'Insufficient permissions to reject transfers'
    )

    with transaction.atomic():
        transfer = _load_for_update(transfer_id, actor)
        message = 'Transfer cannot be rejected in current status'
        if not transfer.is_open:
            raise BadRequest(message)

        _transition(
            transfer, OPEN_STATUSES, message,
            status=Status.REJECTED, rejection_reason=rejection_reason,
            approved_by=actor, approved_at=timezone.now(),
        )
        gate.restore(transfer.land)
        apply_transfer_event(transfer, LandEventType.TRANSFER_REJECTED, actor,
                             changes={'rejection_reason': rejection_reason})

    return transfer


def cancel_transfer(transfer_id, actor):
    """Withdraw a transfer; only the current owner may do this"""
    with transaction.atomic():
        transfer = _load_for_update(transfer_id, actor)

        if transfer.current_owner_id != actor.pk:
            raise Forbidden('Only the current owner can cancel the transfer')

        message = 'Transfer cannot be cancelled in current status'
        if not transfer.is_open:
            raise BadRequest(message)

        _transition(transfer, OPEN_STATUSES, message, status=Status.CANCELLED)
        gate.restore(transfer.land)
        apply_transfer_event(transfer, LandEventType.TRANSFER_CANCELLED, actor)

    return transfer


def update_transfer(transfer_id, actor, changes):
    """
    Patch an open transfer.

    Only whitelisted fields may change: the current owner may edit the
    commercial terms, officers may additionally move the transfer between
    INITIATED and PENDING_APPROVAL. Changing the value without an explicit
    tax amount recomputes the tax.
    """
    with transaction.atomic():
        transfer = _load_for_update(transfer_id, actor)

        if not transfer.is_open:
            raise BadRequest('Cannot update transfer in current status')

        allowed = permissions.updatable_transfer_fields(actor, transfer)
        if not allowed:
            raise Forbidden('Insufficient permissions to update transfer')

        rejected = sorted(set(changes) - allowed)
        if rejected:
            raise BadRequest(f"Fields cannot be updated: {', '.join(rejected)}")

        if 'status' in changes and changes['status'] not in OPEN_STATUSES:
            raise BadRequest('Status can only be set to initiated or pending_approval')

        fields = dict(changes)
        if ('transfer_value' in fields or 'tax_amount' in fields) and fields.get('tax_amount') is None:
            fields['tax_amount'] = compute_transfer_tax(fields.get('transfer_value', transfer.transfer_value))
        if 'documents' in fields and fields['documents'] is None:
            fields['documents'] = []
        if 'reason' in fields and fields['reason'] is None:
            fields['reason'] = ''

        if not fields:
            return transfer

        _transition(transfer, OPEN_STATUSES, 'Cannot update transfer in current status', **fields)
        apply_transfer_event(
            transfer, LandEventType.TRANSFER_UPDATED, actor,
            changes={name: str(value) if isinstance(value, Decimal) else value for name, value in changes.items()},
        )

    return transfer


# ============================================================================
# QUERIES
# ============================================================================

def visible_transfers(actor):
    return permissions.filter_visible_transfers(actor, _transfers()).order_by('-created_at')


def list_transfers(actor):
    return [serialize_transfer(transfer) for transfer in visible_transfers(actor)]


def get_transfer(transfer_id, actor):
    """Fetch one transfer snapshot, re-checking visibility even on a cache hit"""
    key = cache.transfer_key(transfer_id)
    snapshot = cache.fetch(key)
    if snapshot is None:
        transfer = _transfers().filter(pk=transfer_id).first()
        if transfer is None:
            raise NotFound('Transfer not found')
        snapshot = serialize_transfer(transfer)
        cache.store(key, snapshot, 'transfer')

    if not permissions.can_view_transfer(actor, snapshot):
        raise Forbidden('Access denied')
    return snapshot


def transfers_by_land(land_id, actor):
    return [
        serialize_transfer(transfer)
        for transfer in visible_transfers(actor).filter(land_id=land_id)
    ]


def _cached_list(key, kind, queryset):
    snapshots = cache.fetch(key)
    if snapshots is None:
        snapshots = [serialize_transfer(transfer) for transfer in queryset]
        cache.store(key, snapshots, kind)
    return snapshots


def transfers_by_user(user_id, actor):
    permissions.require_capability(actor, permissions.VIEW_TRANSFERS_BY_USER)
    snapshots = _cached_list(
        cache.user_transfers_key(user_id), 'user',
        _transfers().filter(Q(current_owner_id=user_id) | Q(new_owner_id=user_id)).order_by('-created_at'),
    )
    return [snapshot for snapshot in snapshots if permissions.can_view_transfer(actor, snapshot)]


def transfer_history(land_id, actor):
    if not LandRecord.objects.filter(pk=land_id).exists():
        raise NotFound('Land record not found')
    snapshots = _cached_list(
        cache.history_key(land_id), 'history',
        _transfers().filter(land_id=land_id).order_by('-created_at'),
    )
    return [snapshot for snapshot in snapshots if permissions.can_view_transfer(actor, snapshot)]


def transfers_by_district(district, actor):
    permissions.require_capability(actor, permissions.VIEW_TRANSFERS_BY_DISTRICT)
    snapshots = _cached_list(
        cache.district_key(district), 'district',
        _transfers().filter(land__district=district).order_by('-created_at'),
    )
    return [snapshot for snapshot in snapshots if permissions.can_view_transfer(actor, snapshot)]


def transfer_statistics(actor):
    """Counts by status over the transfers the actor can see"""
    key = cache.stats_key(permissions.visibility_scope(actor))
    stats = cache.fetch(key)
    if stats is None:
        stats = permissions.filter_visible_transfers(actor, LandTransfer.objects.all()).aggregate(
            total=Count('id'),
            pending=Count('id', filter=Q(status__in=OPEN_STATUSES)),
            approved=Count('id', filter=Q(status=Status.APPROVED)),
            completed=Count('id', filter=Q(status=Status.COMPLETED)),
            rejected=Count('id', filter=Q(status=Status.REJECTED)),
            cancelled=Count('id', filter=Q(status=Status.CANCELLED)),
        )
        cache.store(key, stats, 'stats')
    return stats


# ============================================================================
# CACHE ADMINISTRATION
# ============================================================================

def cache_health(actor):
    permissions.require_capability(actor, permissions.VIEW_CACHE_HEALTH)
    return cache.health()


def preload_transfer_cache(actor, limit=100):
    """Warm snapshots of the most recent in-flight transfers"""
    permissions.require_capability(actor, permissions.PRELOAD_CACHE)
    transfers = _transfers().filter(status__in=OPEN_STATUSES).order_by('-created_at')[:limit]
    warmed = cache.warm_transfers([serialize_transfer(transfer) for transfer in transfers])
    logger.info(f"Preloaded {warmed} transfer snapshots into cache")
    return warmed
