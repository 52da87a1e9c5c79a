from django import forms

from masterdata.models import Radiator


class RadiatorForm(forms.ModelForm):
    class Meta:
        model = Radiator
        fields = [
            "brand",
            "code",
            "name",
            "year",
            "retail_price",
            "trade_price",
            "cost_price",
            "is_price_overridable",
            "max_discount_percent",
            "product_type",
            "dimensions",
            "notes",
        ]

    def clean_code(self):
        return (self.cleaned_data.get("code") or "").strip()

    def clean(self):
        cleaned = super().clean()
        for name in ("retail_price", "trade_price", "cost_price"):
            value = cleaned.get(name)
            if value is not None and value < 0:
                self.add_error(name, "Price cannot be negative.")
        return cleaned
