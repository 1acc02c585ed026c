"""
Land Administration Back Office - Django Models
Land records, ownership transfers and their audit trail
"""

import uuid

from django.contrib.auth.models import AbstractUser
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import Q


# ============================================================================
# CORE MODELS - User Management
# ============================================================================

class User(AbstractUser):
    """Extended user model with role and administrative location"""

    class Role(models.TextChoices):
        CITIZEN = 'citizen', 'Citizen'
        LAND_OFFICER = 'land_officer', 'Land Officer'
        DISTRICT_ADMIN = 'district_admin', 'District Administrator'
        REGISTRAR = 'registrar', 'Registrar'
        TAX_OFFICER = 'tax_officer', 'Tax Officer'
        URBAN_PLANNER = 'urban_planner', 'Urban Planner'
        SYSTEM_ADMIN = 'system_admin', 'System Administrator'
        SUPER_ADMIN = 'super_admin', 'Super Administrator'

    role = models.CharField(max_length=20, choices=Role.choices, default=Role.CITIZEN)
    phone_number = models.CharField(max_length=15, blank=True)
    national_id = models.CharField(max_length=20, unique=True, null=True, blank=True)

    district = models.CharField(max_length=100, blank=True)
    sector = models.CharField(max_length=100, blank=True)
    cell = models.CharField(max_length=100, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'users'

    def __str__(self):
        return f"{self.get_full_name() or self.username} ({self.username})"


# ============================================================================
# LAND RECORDS
# ============================================================================

class LandRecord(models.Model):
    """Registered land parcel and its current legal owner"""

    class Status(models.TextChoices):
        PENDING = 'pending', 'Pending'
        UNDER_REVIEW = 'under_review', 'Under Review'
        APPROVED = 'approved', 'Approved'
        ACTIVE = 'active', 'Active'
        REJECTED = 'rejected', 'Rejected'
        TRANSFERRED = 'transferred', 'Transferred'
        DISPUTED = 'disputed', 'Disputed'
        INACTIVE = 'inactive', 'Inactive'

    class LandUse(models.TextChoices):
        RESIDENTIAL = 'residential', 'Residential'
        COMMERCIAL = 'commercial', 'Commercial'
        AGRICULTURAL = 'agricultural', 'Agricultural'
        INDUSTRIAL = 'industrial', 'Industrial'
        MIXED_USE = 'mixed_use', 'Mixed Use'
        GOVERNMENT = 'government', 'Government'
        RECREATIONAL = 'recreational', 'Recreational'
        FOREST = 'forest', 'Forest'
        WETLAND = 'wetland', 'Wetland'

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    parcel_number = models.CharField(max_length=50, unique=True)
    upi_number = models.CharField(max_length=50, unique=True)

    owner = models.ForeignKey(User, on_delete=models.PROTECT, related_name='land_records')

    area_sqm = models.DecimalField(max_digits=12, decimal_places=2, validators=[MinValueValidator(0)])
    district = models.CharField(max_length=100)
    sector = models.CharField(max_length=100)
    cell = models.CharField(max_length=100)
    village = models.CharField(max_length=100)
    description = models.TextField(blank=True)

    land_use_type = models.CharField(max_length=20, choices=LandUse.choices, default=LandUse.RESIDENTIAL)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)

    market_value = models.DecimalField(max_digits=15, decimal_places=2, null=True, blank=True)
    government_value = models.DecimalField(max_digits=15, decimal_places=2, null=True, blank=True)

    # GeoJSON
    geometry = models.JSONField(null=True, blank=True)
    center_point = models.JSONField(null=True, blank=True)

    documents = models.JSONField(default=list, blank=True)

    registered_by = models.ForeignKey(
        User, on_delete=models.SET_NULL, null=True, blank=True, related_name='registered_lands'
    )
    approved_by = models.ForeignKey(
        User, on_delete=models.SET_NULL, null=True, blank=True, related_name='approved_lands'
    )
    approved_at = models.DateTimeField(null=True, blank=True)
    rejection_reason = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'land_records'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['district', 'status'], name='land_record_distric_7c1e2a_idx'),
        ]

    def __str__(self):
        return f"{self.parcel_number} - {self.owner}"


class OwnershipHistory(models.Model):
    """Land ownership transfer history"""
    land = models.ForeignKey(LandRecord, on_delete=models.CASCADE, related_name='ownership_history')
    previous_owner = models.ForeignKey(User, on_delete=models.PROTECT, related_name='previous_lands')
    new_owner = models.ForeignKey(User, on_delete=models.PROTECT, related_name='acquired_lands')
    transfer = models.OneToOneField(
        'LandTransfer', on_delete=models.SET_NULL, null=True, blank=True, related_name='ownership_record'
    )

    transfer_date = models.DateField()
    transfer_value = models.DecimalField(max_digits=15, decimal_places=2, null=True, blank=True)

    recorded_by = models.ForeignKey(
        User, on_delete=models.SET_NULL, null=True, related_name='recorded_ownership_changes'
    )
    recorded_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'land_ownership_history'
        verbose_name_plural = 'land ownership histories'
        ordering = ['-recorded_at']

    def __str__(self):
        return f"{self.land.parcel_number} - {self.transfer_date}"


# ============================================================================
# LAND TRANSFERS
# ============================================================================

class LandTransfer(models.Model):
    """Request to reassign ownership of a parcel"""

    class Status(models.TextChoices):
        INITIATED = 'initiated', 'Initiated'
        PENDING_APPROVAL = 'pending_approval', 'Pending Approval'
        APPROVED = 'approved', 'Approved'
        COMPLETED = 'completed', 'Completed'
        REJECTED = 'rejected', 'Rejected'
        CANCELLED = 'cancelled', 'Cancelled'

    OPEN_STATUSES = (Status.INITIATED, Status.PENDING_APPROVAL)

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    transfer_number = models.CharField(max_length=50, unique=True)

    land = models.ForeignKey(LandRecord, on_delete=models.PROTECT, related_name='transfers')
    current_owner = models.ForeignKey(User, on_delete=models.PROTECT, related_name='transfers_as_current_owner')
    new_owner = models.ForeignKey(User, on_delete=models.PROTECT, related_name='transfers_as_new_owner')

    transfer_value = models.DecimalField(max_digits=15, decimal_places=2, validators=[MinValueValidator(0)])
    tax_amount = models.DecimalField(max_digits=15, decimal_places=2, null=True, blank=True)

    status = models.CharField(max_length=20, choices=Status.choices, default=Status.INITIATED)

    reason = models.TextField(blank=True)
    documents = models.JSONField(default=list, blank=True)
    approval_notes = models.TextField(blank=True)

    initiated_by = models.ForeignKey(
        User, on_delete=models.SET_NULL, null=True, blank=True, related_name='initiated_transfers'
    )
    approved_by = models.ForeignKey(
        User, on_delete=models.SET_NULL, null=True, blank=True, related_name='approved_transfers'
    )
    approved_at = models.DateTimeField(null=True, blank=True)
    rejection_reason = models.TextField(blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'land_transfers'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['status'], name='land_transf_status_4b9d31_idx'),
            models.Index(fields=['land', 'status'], name='land_transf_land_id_a53f08_idx'),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=['land'],
                condition=Q(status__in=['initiated', 'pending_approval']),
                name='one_open_transfer_per_land',
            ),
        ]

    def __str__(self):
        return f"{self.transfer_number} - {self.land.parcel_number}"

    @property
    def is_open(self):
        return self.status in self.OPEN_STATUSES


# ============================================================================
# AUDIT TRAIL
# ============================================================================

class AuditLog(models.Model):
    """Audit trail of state-changing operations"""
    ACTION_CHOICES = [
        ('create', 'Create'),
        ('update', 'Update'),
        ('approve', 'Approve'),
        ('reject', 'Reject'),
        ('cancel', 'Cancel'),
        ('complete', 'Complete'),
    ]

    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True)
    action = models.CharField(max_length=20, choices=ACTION_CHOICES)

    model_name = models.CharField(max_length=100)
    object_id = models.CharField(max_length=50)
    object_repr = models.CharField(max_length=200)

    changes = models.JSONField(null=True, blank=True)

    timestamp = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'audit_logs'
        ordering = ['-timestamp']
        indexes = [
            models.Index(fields=['user', 'timestamp'], name='audit_logs_user_id_2f6c9e_idx'),
            models.Index(fields=['model_name', 'object_id'], name='audit_logs_model_n_e81d47_idx'),
        ]

    def __str__(self):
        return f"{self.user} - {self.action} - {self.model_name} - {self.timestamp}"
