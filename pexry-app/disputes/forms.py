from django import forms

from .models import Dispute


class DisputeCreateForm(forms.Form):
    order_id = forms.IntegerField(min_value=1)
    subject = forms.CharField(min_length=5, max_length=200)
    description = forms.CharField(min_length=10)
    category = forms.ChoiceField(choices=Dispute.CATEGORY_CHOICES)
    priority = forms.ChoiceField(choices=Dispute.PRIORITY_CHOICES, required=False)


class DisputeMessageForm(forms.Form):
    message = forms.CharField(min_length=1, max_length=5000)


class DisputeStatusForm(forms.Form):
    status = forms.ChoiceField(choices=Dispute.STATUS_CHOICES)
    resolution = forms.CharField(required=False, max_length=5000)


class DisputeEvidenceForm(forms.Form):
    file = forms.FileField()
    description = forms.CharField(required=False, max_length=255)
