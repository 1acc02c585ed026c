"""
Land record gate used by the transfer workflow

Each mutation is a conditional UPDATE so that a parcel can only move between
the statuses the workflow expects, even under concurrent requests.
"""

import logging

from django.utils import timezone

from .exceptions import BadRequest
from .models import LandRecord

logger = logging.getLogger(__name__)

TRANSFERABLE_STATUSES = (LandRecord.Status.APPROVED, LandRecord.Status.ACTIVE)


def is_transferable(land):
    """A parcel may be transferred only once it is approved or active"""
    return land.status in TRANSFERABLE_STATUSES


def lock(land):
    """Place the parcel under review for the duration of a transfer"""
    updated = LandRecord.objects.filter(
        pk=land.pk, status__in=TRANSFERABLE_STATUSES
    ).update(status=LandRecord.Status.UNDER_REVIEW, updated_at=timezone.now())
    if not updated:
        raise BadRequest('Land must be approved/active to be transferred')
    land.status = LandRecord.Status.UNDER_REVIEW
    logger.info(f"Land {land.parcel_number} locked for transfer")


def finalize(land, new_owner):
    """Reassign ownership and mark the parcel transferred"""
    updated = LandRecord.objects.filter(
        pk=land.pk, status=LandRecord.Status.UNDER_REVIEW
    ).update(owner=new_owner, status=LandRecord.Status.TRANSFERRED, updated_at=timezone.now())
    if not updated:
        raise BadRequest('Land record is not under review for transfer')
    land.owner = new_owner
    land.status = LandRecord.Status.TRANSFERRED
    logger.info(f"Land {land.parcel_number} transferred to user {new_owner.pk}")


def restore(land):
    """Return the parcel to approved, leaving ownership untouched"""
    LandRecord.objects.filter(pk=land.pk).update(
        status=LandRecord.Status.APPROVED, updated_at=timezone.now()
    )
    land.status = LandRecord.Status.APPROVED
    logger.info(f"Land {land.parcel_number} restored to approved")
