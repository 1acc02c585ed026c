"""
Land Administration Back Office - JSON API Views
Land registration and land transfer endpoints
"""

import json
import logging
import re
from datetime import datetime
from functools import wraps

import openpyxl
from django.http import HttpResponse, JsonResponse
from django.views.decorators.http import require_http_methods
from openpyxl.styles import Alignment, Font, PatternFill

from . import lands, transfers
from .exceptions import BadRequest, LandAdminError
from .forms import (
    ApproveTransferForm, LandRecordForm, LandRejectForm,
    RejectTransferForm, TransferInitiateForm, TransferUpdateForm,
)
from .serializers import serialize_land, serialize_transfer

logger = logging.getLogger(__name__)

# Legacy request keys that do not map onto field names by case alone
KEY_ALIASES = {
    'area': 'area_sqm',
}


# ============================================================================
# HELPER FUNCTIONS
# ============================================================================

def api_login_required(view_func):
    """Reject anonymous requests with 401 instead of redirecting to a login page"""
    @wraps(view_func)
    def wrapper(request, *args, **kwargs):
        if not request.user.is_authenticated:
            return JsonResponse({'error': 'Authentication required'}, status=401)
        return view_func(request, *args, **kwargs)
    return wrapper


def handles_land_errors(view_func):
    """Translate workflow exceptions into JSON error responses"""
    @wraps(view_func)
    def wrapper(request, *args, **kwargs):
        try:
            return view_func(request, *args, **kwargs)
        except LandAdminError as e:
            logger.info(f"{request.method} {request.path} rejected: {e.message}")
            return JsonResponse({'error': e.message}, status=e.status_code)
    return wrapper


def to_snake_case(key):
    key = KEY_ALIASES.get(key, key)
    return re.sub(r'(?<!^)(?=[A-Z])', '_', key).lower()


def get_json_body(request):
    """Parse a JSON object body, accepting camelCase or snake_case keys"""
    if not request.body:
        return {}
    try:
        data = json.loads(request.body)
    except (ValueError, UnicodeDecodeError):
        raise BadRequest('Request body must be valid JSON')
    if not isinstance(data, dict):
        raise BadRequest('Request body must be a JSON object')
    return {to_snake_case(key): value for key, value in data.items()}


def validation_error(form):
    return JsonResponse(
        {'error': 'Validation failed', 'details': form.errors.get_json_data()},
        status=400,
    )


# ============================================================================
# LAND REGISTRATION
# ============================================================================

@api_login_required
@handles_land_errors
@require_http_methods(["GET", "POST"])
def land_collection(request):
    """List visible land records or register a new one"""
    if request.method == 'POST':
        form = LandRecordForm(get_json_body(request))
        if not form.is_valid():
            return validation_error(form)
        land = lands.register_land(request.user, form.cleaned_data)
        return JsonResponse(serialize_land(land), status=201)

    records = [serialize_land(land) for land in lands.list_lands(request.user)]
    return JsonResponse({'results': records, 'count': len(records)})


@api_login_required
@handles_land_errors
@require_http_methods(["GET"])
def land_detail(request, pk):
    """Land record detail with ownership history"""
    land = lands.get_land(pk, request.user)
    return JsonResponse(serialize_land(land, include_history=True))


@api_login_required
@handles_land_errors
@require_http_methods(["POST"])
def land_approve(request, pk):
    land = lands.approve_land(pk, request.user)
    return JsonResponse(serialize_land(land))


@api_login_required
@handles_land_errors
@require_http_methods(["POST"])
def land_reject(request, pk):
    form = LandRejectForm(get_json_body(request))
    if not form.is_valid():
        return validation_error(form)
    land = lands.reject_land(pk, request.user, form.cleaned_data['reason'])
    return JsonResponse(serialize_land(land))


# ============================================================================
# LAND TRANSFERS
# ============================================================================

@api_login_required
@handles_land_errors
@require_http_methods(["GET", "POST"])
def transfer_collection(request):
    """List visible transfers or initiate a new one"""
    if request.method == 'POST':
        form = TransferInitiateForm(get_json_body(request))
        if not form.is_valid():
            return validation_error(form)
        data = form.cleaned_data
        transfer = transfers.initiate_transfer(
            request.user,
            land_id=data['land_id'],
            new_owner_id=data['new_owner_id'],
            transfer_number=data['transfer_number'],
            transfer_value=data['transfer_value'],
            tax_amount=data.get('tax_amount'),
            reason=data.get('reason', ''),
            documents=data.get('documents'),
        )
        return JsonResponse(serialize_transfer(transfer), status=201)

    results = transfers.list_transfers(request.user)
    return JsonResponse({'results': results, 'count': len(results)})


@api_login_required
@handles_land_errors
@require_http_methods(["GET", "PATCH"])
def transfer_detail(request, pk):
    """Fetch or partially update a transfer"""
    if request.method == 'PATCH':
        payload = get_json_body(request)
        unknown = sorted(set(payload) - TransferUpdateForm.field_names())
        if unknown:
            raise BadRequest(f"Fields cannot be updated: {', '.join(unknown)}")
        form = TransferUpdateForm(payload)
        if not form.is_valid():
            return validation_error(form)
        transfer = transfers.update_transfer(pk, request.user, form.changes(payload))
        return JsonResponse(serialize_transfer(transfer))

    return JsonResponse(transfers.get_transfer(pk, request.user))


@api_login_required
@handles_land_errors
@require_http_methods(["POST"])
def transfer_approve(request, pk):
    form = ApproveTransferForm(get_json_body(request))
    if not form.is_valid():
        return validation_error(form)
    transfer = transfers.approve_transfer(pk, request.user, form.cleaned_data['approval_notes'])
    return JsonResponse(serialize_transfer(transfer))


@api_login_required
@handles_land_errors
@require_http_methods(["POST"])
def transfer_reject(request, pk):
    form = RejectTransferForm(get_json_body(request))
    if not form.is_valid():
        return validation_error(form)
    transfer = transfers.reject_transfer(pk, request.user, form.cleaned_data['rejection_reason'])
    return JsonResponse(serialize_transfer(transfer))


@api_login_required
@handles_land_errors
@require_http_methods(["POST"])
def transfer_cancel(request, pk):
    transfer = transfers.cancel_transfer(pk, request.user)
    return JsonResponse(serialize_transfer(transfer))


@api_login_required
@handles_land_errors
@require_http_methods(["GET"])
def transfer_statistics(request):
    return JsonResponse(transfers.transfer_statistics(request.user))


@api_login_required
@handles_land_errors
@require_http_methods(["GET"])
def transfers_by_land(request, land_id):
    results = transfers.transfers_by_land(land_id, request.user)
    return JsonResponse({'results': results, 'count': len(results)})


@api_login_required
@handles_land_errors
@require_http_methods(["GET"])
def transfers_by_user(request, user_id):
    results = transfers.transfers_by_user(user_id, request.user)
    return JsonResponse({'results': results, 'count': len(results)})


@api_login_required
@handles_land_errors
@require_http_methods(["GET"])
def transfers_by_district(request, district):
    results = transfers.transfers_by_district(district, request.user)
    return JsonResponse({'results': results, 'count': len(results)})


@api_login_required
@handles_land_errors
@require_http_methods(["GET"])
def transfer_history(request, land_id):
    results = transfers.transfer_history(land_id, request.user)
    return JsonResponse({'results': results, 'count': len(results)})


@api_login_required
@handles_land_errors
@require_http_methods(["GET"])
def transfer_cache_health(request):
    return JsonResponse(transfers.cache_health(request.user))


@api_login_required
@handles_land_errors
@require_http_methods(["POST"])
def transfer_cache_preload(request):
    warmed = transfers.preload_transfer_cache(request.user)
    return JsonResponse({'message': 'Cache preloading completed', 'preloaded': warmed})


# ============================================================================
# EXPORT FUNCTIONS
# ============================================================================

@api_login_required
@handles_land_errors
@require_http_methods(["GET"])
def transfer_export_excel(request):
    """Export visible transfers to Excel"""
    queryset = transfers.visible_transfers(request.user)

    status = request.GET.get('status', '')
    if status:
        queryset = queryset.filter(status=status)

    district = request.GET.get('district', '')
    if district:
        queryset = queryset.filter(land__district=district)

    # Create workbook
    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = "Land Transfers"

    # Define styles
    header_fill = PatternFill(start_color="3498db", end_color="3498db", fill_type="solid")
    header_font = Font(bold=True, color="FFFFFF", size=12)

    headers = [
        'Transfer Number', 'Parcel Number', 'UPI', 'District',
        'Current Owner', 'New Owner', 'Transfer Value', 'Tax Amount',
        'Status', 'Initiated', 'Completed',
    ]

    for col, header in enumerate(headers, 1):
        cell = ws.cell(row=1, column=col, value=header)
        cell.fill = header_fill
        cell.font = header_font
        cell.alignment = Alignment(horizontal='center', vertical='center')

    for row, transfer in enumerate(queryset, 2):
        ws.cell(row=row, column=1, value=transfer.transfer_number)
        ws.cell(row=row, column=2, value=transfer.land.parcel_number)
        ws.cell(row=row, column=3, value=transfer.land.upi_number)
        ws.cell(row=row, column=4, value=transfer.land.district)
        ws.cell(row=row, column=5, value=transfer.current_owner.get_full_name() or transfer.current_owner.username)
        ws.cell(row=row, column=6, value=transfer.new_owner.get_full_name() or transfer.new_owner.username)
        ws.cell(row=row, column=7, value=float(transfer.transfer_value))
        ws.cell(row=row, column=8, value=float(transfer.tax_amount) if transfer.tax_amount is not None else 0)
        ws.cell(row=row, column=9, value=transfer.get_status_display())
        ws.cell(row=row, column=10, value=transfer.created_at.strftime('%Y-%m-%d'))
        ws.cell(row=row, column=11, value=transfer.completed_at.strftime('%Y-%m-%d') if transfer.completed_at else '')

    # Adjust column widths
    for col in ws.columns:
        max_length = 0
        column = col[0].column_letter
        for cell in col:
            if cell.value:
                max_length = max(max_length, len(str(cell.value)))
        ws.column_dimensions[column].width = min(max_length + 2, 50)

    response = HttpResponse(
        content_type='application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'
    )
    response['Content-Disposition'] = f'attachment; filename=land_transfers_{datetime.now().strftime("%Y%m%d")}.xlsx'

    wb.save(response)
    return response
