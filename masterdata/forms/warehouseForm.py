from django import forms

from masterdata.models import Warehouse


class WarehouseForm(forms.ModelForm):
    class Meta:
        model = Warehouse
        fields = ["code", "name", "location", "address", "phone", "email"]

    def clean_code(self):
        # Stored upper-case; compare the same way so the unique check sees duplicates.
        return (self.cleaned_data.get("code") or "").strip().upper()
