"""
Capability table and record visibility rules

Every role check in the workflow goes through ``has_capability`` so that the
roles allowed to perform an operation are declared in one place.
"""

from django.db.models import Q

from .exceptions import Forbidden
from .models import User

Role = User.Role

OFFICER_ROLES = frozenset({Role.LAND_OFFICER, Role.DISTRICT_ADMIN, Role.REGISTRAR})

# Capability codenames
INITIATE_TRANSFER = 'transfer.initiate'
UPDATE_TRANSFER = 'transfer.update'
APPROVE_TRANSFER = 'transfer.approve'
REJECT_TRANSFER = 'transfer.reject'
VIEW_TRANSFERS_BY_USER = 'transfer.view_by_user'
VIEW_TRANSFERS_BY_DISTRICT = 'transfer.view_by_district'
VIEW_CACHE_HEALTH = 'transfer.cache_health'
PRELOAD_CACHE = 'transfer.cache_preload'
APPROVE_LAND = 'land.approve'
REJECT_LAND = 'land.reject'

# Roles granted each capability regardless of ownership. Owner-based access
# (initiate/update/cancel on one's own parcel) is checked by the caller.
CAPABILITIES = {
    INITIATE_TRANSFER: OFFICER_ROLES,
    UPDATE_TRANSFER: OFFICER_ROLES,
    APPROVE_TRANSFER: OFFICER_ROLES,
    REJECT_TRANSFER: OFFICER_ROLES,
    VIEW_TRANSFERS_BY_USER: OFFICER_ROLES | {Role.SUPER_ADMIN},
    VIEW_TRANSFERS_BY_DISTRICT: frozenset({Role.LAND_OFFICER, Role.DISTRICT_ADMIN, Role.SYSTEM_ADMIN}),
    VIEW_CACHE_HEALTH: frozenset({Role.SYSTEM_ADMIN, Role.DISTRICT_ADMIN}),
    PRELOAD_CACHE: frozenset({Role.SYSTEM_ADMIN}),
    APPROVE_LAND: OFFICER_ROLES,
    REJECT_LAND: OFFICER_ROLES,
}

# Transfer fields each party may patch while a transfer is open
OWNER_UPDATABLE_FIELDS = frozenset({'transfer_value', 'tax_amount', 'reason', 'documents'})
OFFICER_UPDATABLE_FIELDS = OWNER_UPDATABLE_FIELDS | {'status'}


def has_capability(user, capability):
    """Check whether the user's role grants a capability"""
    return user.role in CAPABILITIES.get(capability, frozenset())


def require_capability(user, capability, message='Insufficient permissions'):
    if not has_capability(user, capability):
        raise Forbidden(message)


def updatable_transfer_fields(user, transfer):
    """Return the set of transfer fields the user may change"""
    if has_capability(user, UPDATE_TRANSFER):
        return OFFICER_UPDATABLE_FIELDS
    if transfer.current_owner_id == user.pk:
        return OWNER_UPDATABLE_FIELDS
    return frozenset()


# ============================================================================
# VISIBILITY
# ============================================================================

def visibility_scope(user):
    """
    Describe which slice of the transfer register a user may see.

    Citizens see transfers they are party to, land officers see their
    district, every other role sees everything. The returned string doubles
    as a cache key fragment.
    """
    if user.role == Role.CITIZEN:
        return f"user:{user.pk}"
    if user.role == Role.LAND_OFFICER:
        return f"district:{user.district}"
    return 'all'


def filter_visible_transfers(user, queryset):
    if user.role == Role.CITIZEN:
        return queryset.filter(Q(current_owner=user) | Q(new_owner=user))
    if user.role == Role.LAND_OFFICER:
        return queryset.filter(land__district=user.district)
    return queryset


def can_view_transfer(user, snapshot):
    """Apply the visibility rule to a serialized transfer snapshot"""
    if user.role == Role.CITIZEN:
        return user.pk in (snapshot['current_owner']['id'], snapshot['new_owner']['id'])
    if user.role == Role.LAND_OFFICER:
        return snapshot['land']['district'] == user.district
    return True


def filter_visible_lands(user, queryset):
    if user.role == Role.CITIZEN:
        return queryset.filter(owner=user)
    if user.role == Role.LAND_OFFICER:
        return queryset.filter(district=user.district)
    return queryset


def can_view_land(user, land):
    if user.role == Role.CITIZEN:
        return land.owner_id == user.pk
    if user.role == Role.LAND_OFFICER:
        return land.district == user.district
    return True
