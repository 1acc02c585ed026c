"""
Land Administration Back Office - Django Admin Configuration
"""

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .models import AuditLog, LandRecord, LandTransfer, OwnershipHistory, User


# ============================================================================
# CORE MODELS - User Management
# ============================================================================

@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ['username', 'get_full_name', 'email', 'role', 'district', 'is_staff']
    list_filter = ['role', 'is_active', 'is_staff', 'district']
    search_fields = ['username', 'first_name', 'last_name', 'email', 'phone_number', 'national_id']
    ordering = ['-date_joined']

    fieldsets = BaseUserAdmin.fieldsets + (
        ('Land Administration', {
            'fields': ('role', 'phone_number', 'national_id', 'district', 'sector', 'cell')
        }),
    )


# ============================================================================
# LAND RECORDS
# ============================================================================

class OwnershipHistoryInline(admin.TabularInline):
    model = OwnershipHistory
    fk_name = 'land'
    extra = 0
    readonly_fields = ['previous_owner', 'new_owner', 'transfer', 'transfer_date', 'transfer_value', 'recorded_by']


@admin.register(LandRecord)
class LandRecordAdmin(admin.ModelAdmin):
    list_display = ['parcel_number', 'upi_number', 'owner', 'district', 'land_use_type', 'status', 'created_at']
    list_filter = ['status', 'land_use_type', 'district']
    search_fields = ['parcel_number', 'upi_number', 'owner__username', 'owner__national_id']
    readonly_fields = ['id', 'center_point', 'created_at', 'updated_at']
    date_hierarchy = 'created_at'
    inlines = [OwnershipHistoryInline]


@admin.register(OwnershipHistory)
class OwnershipHistoryAdmin(admin.ModelAdmin):
    list_display = ['land', 'previous_owner', 'new_owner', 'transfer_date', 'transfer_value']
    search_fields = ['land__parcel_number', 'previous_owner__username', 'new_owner__username']
    date_hierarchy = 'transfer_date'


# ============================================================================
# LAND TRANSFERS
# ============================================================================

@admin.register(LandTransfer)
class LandTransferAdmin(admin.ModelAdmin):
    list_display = ['transfer_number', 'land', 'current_owner', 'new_owner', 'transfer_value', 'status', 'created_at']
    list_filter = ['status', 'land__district', 'created_at']
    search_fields = ['transfer_number', 'land__parcel_number', 'current_owner__username', 'new_owner__username']
    readonly_fields = ['id', 'status', 'approved_by', 'approved_at', 'completed_at', 'created_at', 'updated_at']
    date_hierarchy = 'created_at'


# ============================================================================
# AUDIT TRAIL
# ============================================================================

@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ['user', 'action', 'model_name', 'object_repr', 'timestamp']
    list_filter = ['action', 'model_name', 'timestamp']
    search_fields = ['user__username', 'object_repr', 'object_id']
    date_hierarchy = 'timestamp'
    readonly_fields = ['user', 'action', 'model_name', 'object_id', 'object_repr', 'changes', 'timestamp']
