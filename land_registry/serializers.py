"""Plain-dict snapshots of land records and transfers for JSON responses and the cache."""


def _decimal(value):
    return str(value) if value is not None else None


def _datetime(value):
    return value.isoformat() if value is not None else None


def serialize_user(user):
    if user is None:
        return None
    return {
        'id': user.pk,
        'username': user.username,
        'first_name': user.first_name,
        'last_name': user.last_name,
        'role': user.role,
        'district': user.district,
    }


def serialize_land_summary(land):
    return {
        'id': str(land.pk),
        'parcel_number': land.parcel_number,
        'upi_number': land.upi_number,
        'district': land.district,
        'status': land.status,
        'owner_id': land.owner_id,
    }


def serialize_land(land, include_history=False):
    data = {
        'id': str(land.pk),
        'parcel_number': land.parcel_number,
        'upi_number': land.upi_number,
        'owner': serialize_user(land.owner),
        'area_sqm': _decimal(land.area_sqm),
        'district': land.district,
        'sector': land.sector,
        'cell': land.cell,
        'village': land.village,
        'description': land.description,
        'land_use_type': land.land_use_type,
        'status': land.status,
        'market_value': _decimal(land.market_value),
        'government_value': _decimal(land.government_value),
        'geometry': land.geometry,
        'center_point': land.center_point,
        'documents': land.documents,
        'registered_by': land.registered_by_id,
        'approved_by': land.approved_by_id,
        'approved_at': _datetime(land.approved_at),
        'rejection_reason': land.rejection_reason,
        'created_at': _datetime(land.created_at),
        'updated_at': _datetime(land.updated_at),
    }
    if include_history:
        data['ownership_history'] = [
            {
                'previous_owner_id': record.previous_owner_id,
                'new_owner_id': record.new_owner_id,
                'transfer_id': str(record.transfer_id) if record.transfer_id else None,
                'transfer_date': record.transfer_date.isoformat(),
                'transfer_value': _decimal(record.transfer_value),
            }
            for record in land.ownership_history.all()
        ]
    return data


def serialize_transfer(transfer):
    return {
        'id': str(transfer.pk),
        'transfer_number': transfer.transfer_number,
        'land': serialize_land_summary(transfer.land),
        'current_owner': serialize_user(transfer.current_owner),
        'new_owner': serialize_user(transfer.new_owner),
        'transfer_value': _decimal(transfer.transfer_value),
        'tax_amount': _decimal(transfer.tax_amount),
        'status': transfer.status,
        'reason': transfer.reason,
        'documents': transfer.documents,
        'approval_notes': transfer.approval_notes,
        'initiated_by': transfer.initiated_by_id,
        'approved_by': transfer.approved_by_id,
        'approved_at': _datetime(transfer.approved_at),
        'rejection_reason': transfer.rejection_reason,
        'completed_at': _datetime(transfer.completed_at),
        'created_at': _datetime(transfer.created_at),
        'updated_at': _datetime(transfer.updated_at),
    }
