"""
Land registration

Only what the transfer workflow needs: registering a parcel, approving or
rejecting it, and reading it back under the visibility rules.
"""

import logging

from django.db import transaction
from django.utils import timezone

from . import cache, permissions
from .events import LandEventType, build_event, land_payload, publish_event
from .exceptions import BadRequest, Conflict, Forbidden, NotFound
from .models import AuditLog, LandRecord, LandTransfer

logger = logging.getLogger(__name__)

Status = LandRecord.Status

APPROVABLE_STATUSES = (Status.PENDING, Status.UNDER_REVIEW, Status.TRANSFERRED)


def polygon_center(geometry):
    """
    Validate a GeoJSON Polygon and return the vertex average of its outer ring.

    The closing position repeats the first one and is left out of the average.
    """
    if not isinstance(geometry, dict) or geometry.get('type') != 'Polygon':
        raise BadRequest('Invalid geometry data provided')

    try:
        ring = geometry['coordinates'][0]
        points = [(float(position[0]), float(position[1])) for position in ring]
    except (KeyError, IndexError, TypeError, ValueError):
        raise BadRequest('Invalid geometry data provided')

    if len(points) < 4 or points[0] != points[-1]:
        raise BadRequest('Invalid geometry data provided')

    vertices = points[:-1]
    lng = sum(point[0] for point in vertices) / len(vertices)
    lat = sum(point[1] for point in vertices) / len(vertices)
    return {'type': 'Point', 'coordinates': [lng, lat]}


def _has_open_transfer(land):
    return land.transfers.filter(status__in=LandTransfer.OPEN_STATUSES).exists()


def _land_cache_keys(land):
    """Transfer snapshots embed the parcel status, so every transfer of the parcel is stale"""
    keys = [cache.history_key(land.pk)]
    for transfer in land.transfers.select_related('land'):
        keys.extend(cache.transfer_cache_keys(transfer))
    return keys


def _publish_after_commit(event_type, land, actor, action=None):
    event = build_event(event_type, land_payload(land), user_id=actor.pk, action=action)
    keys = _land_cache_keys(land)

    def after_commit():
        cache.invalidate(keys)
        publish_event(event)

    transaction.on_commit(after_commit)


def _set_status(land, expected, **fields):
    """Write a status change only if the parcel still has the status it was read with"""
    fields['updated_at'] = timezone.now()
    updated = LandRecord.objects.filter(pk=land.pk, status=expected).update(**fields)
    if not updated:
        raise BadRequest('Land record status changed, please retry')
    for name, value in fields.items():
        setattr(land, name, value)


def register_land(actor, data):
    """Register a parcel owned by the actor, pending officer approval"""
    if LandRecord.objects.filter(parcel_number=data['parcel_number']).exists():
        raise Conflict('Parcel number already exists')
    if LandRecord.objects.filter(upi_number=data['upi_number']).exists():
        raise Conflict('UPI number already exists')

    geometry = data.get('geometry')
    center_point = polygon_center(geometry) if geometry else None

    with transaction.atomic():
        land = LandRecord.objects.create(
            parcel_number=data['parcel_number'],
            upi_number=data['upi_number'],
            owner=actor,
            area_sqm=data['area_sqm'],
            district=data['district'],
            sector=data['sector'],
            cell=data['cell'],
            village=data['village'],
            description=data.get('description') or '',
            land_use_type=data.get('land_use_type') or LandRecord.LandUse.RESIDENTIAL,
            market_value=data.get('market_value'),
            government_value=data.get('government_value'),
            geometry=geometry or None,
            center_point=center_point,
            documents=data.get('documents') or [],
            status=Status.PENDING,
            registered_by=actor,
        )
        AuditLog.objects.create(
            user=actor,
            action='create',
            model_name='LandRecord',
            object_id=str(land.pk),
            object_repr=land.parcel_number,
        )
        _publish_after_commit(LandEventType.LAND_REGISTERED, land, actor)

    logger.info(f"Land {land.parcel_number} registered by user {actor.pk}")
    return land


def get_land(land_id, actor, for_update=False):
    queryset = LandRecord.objects.select_related('owner')
    if for_update:
        queryset = queryset.select_for_update()
    land = queryset.filter(pk=land_id).first()
    if land is None:
        raise NotFound('Land record not found')
    if not permissions.can_view_land(actor, land):
        raise Forbidden('Access denied')
    return land


def list_lands(actor):
    return permissions.filter_visible_lands(
        actor, LandRecord.objects.select_related('owner')
    ).order_by('-created_at')


def approve_land(land_id, actor):
    """Approve a parcel so that it becomes transferable"""
    permissions.require_capability(
        actor, permissions.APPROVE_LAND, 'Insufficient permissions to approve land records'
    )

    with transaction.atomic():
        land = get_land(land_id, actor, for_update=True)
        if land.status not in APPROVABLE_STATUSES:
            raise BadRequest('Land record cannot be approved in current status')
        if land.status == Status.UNDER_REVIEW and _has_open_transfer(land):
            raise BadRequest('Land record has a transfer in progress')

        previous = land.status
        _set_status(land, previous, status=Status.APPROVED, approved_by=actor, approved_at=timezone.now())

        AuditLog.objects.create(
            user=actor,
            action='approve',
            model_name='LandRecord',
            object_id=str(land.pk),
            object_repr=land.parcel_number,
            changes={'status': {'old': previous, 'new': land.status}},
        )
        _publish_after_commit(LandEventType.LAND_STATUS_CHANGED, land, actor, action='approve')

    logger.info(f"Land {land.parcel_number} approved by user {actor.pk}")
    return land


def reject_land(land_id, actor, reason):
    """Reject a parcel registration"""
    permissions.require_capability(
        actor, permissions.REJECT_LAND, 'Insufficient permissions to reject land records'
    )

    with transaction.atomic():
        land = get_land(land_id, actor, for_update=True)
        if _has_open_transfer(land):
            raise BadRequest('Land record has a transfer in progress')

        previous = land.status
        _set_status(
            land, previous, status=Status.REJECTED, rejection_reason=reason,
            approved_by=actor, approved_at=timezone.now(),
        )

        AuditLog.objects.create(
            user=actor,
            action='reject',
            model_name='LandRecord',
            object_id=str(land.pk),
            object_repr=land.parcel_number,
            changes={'status': {'old': previous, 'new': land.status}, 'reason': reason},
        )
        _publish_after_commit(LandEventType.LAND_STATUS_CHANGED, land, actor, action='reject')

    logger.info(f"Land {land.parcel_number} rejected by user {actor.pk}")
    return land
