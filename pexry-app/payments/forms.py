from decimal import Decimal

from django import forms

from .models import WithdrawalRequest


class WithdrawalForm(forms.Form):
    amount = forms.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.01'))


class WithdrawalStatusForm(forms.Form):
    status = forms.ChoiceField(choices=WithdrawalRequest.STATUS_CHOICES)
    admin_note = forms.CharField(required=False, max_length=2000)
