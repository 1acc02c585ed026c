# forms.py

from django import forms

from .models import LandRecord, LandTransfer


def _clean_document_list(value):
    if value in (None, ''):
        return []
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise forms.ValidationError("Documents must be a list of document references")
    return value


class LandRecordForm(forms.ModelForm):
    """Form for registering land records"""

    class Meta:
        model = LandRecord
        fields = [
            'parcel_number', 'upi_number', 'area_sqm',
            'district', 'sector', 'cell', 'village', 'description',
            'land_use_type', 'market_value', 'government_value',
            'geometry', 'documents',
        ]

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields['land_use_type'].required = False

    def clean_documents(self):
        return _clean_document_list(self.cleaned_data.get('documents'))

    def validate_unique(self):
        # Duplicate parcel and UPI numbers are reported by register_land as conflicts
        pass


class LandRejectForm(forms.Form):
    reason = forms.CharField()


class TransferInitiateForm(forms.Form):
    """Form for initiating a land transfer"""
    transfer_number = forms.CharField(max_length=50)
    land_id = forms.UUIDField()
    new_owner_id = forms.IntegerField(min_value=1)
    transfer_value = forms.DecimalField(max_digits=15, decimal_places=2, min_value=0)
    tax_amount = forms.DecimalField(max_digits=15, decimal_places=2, min_value=0, required=False)
    reason = forms.CharField(required=False)
    documents = forms.JSONField(required=False)

    def clean_documents(self):
        return _clean_document_list(self.cleaned_data.get('documents'))


class TransferUpdateForm(forms.Form):
    """
    Partial update of an open transfer.

    Only the keys present in the submitted data are treated as changes; which
    of them the caller may actually change is decided by the workflow.
    """
    transfer_value = forms.DecimalField(max_digits=15, decimal_places=2, min_value=0, required=False)
    tax_amount = forms.DecimalField(max_digits=15, decimal_places=2, min_value=0, required=False)
    reason = forms.CharField(required=False)
    documents = forms.JSONField(required=False)
    status = forms.ChoiceField(choices=LandTransfer.Status.choices, required=False)

    def clean_transfer_value(self):
        value = self.cleaned_data.get('transfer_value')
        if value is None and 'transfer_value' in self.data:
            raise forms.ValidationError("Transfer value cannot be empty")
        return value

    def clean_status(self):
        value = self.cleaned_data.get('status')
        if not value and 'status' in self.data:
            raise forms.ValidationError("Status cannot be empty")
        return value

    def clean_documents(self):
        return _clean_document_list(self.cleaned_data.get('documents'))

    def changes(self, submitted):
        """Return cleaned values for the fields that were actually submitted"""
        return {name: self.cleaned_data[name] for name in self.fields if name in submitted}

    @classmethod
    def field_names(cls):
        return set(cls.base_fields)


class ApproveTransferForm(forms.Form):
    approval_notes = forms.CharField()


class RejectTransferForm(forms.Form):
    rejection_reason = forms.CharField()
