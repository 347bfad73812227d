from django import forms

from .models import Conversation


class ConversationCreateForm(forms.Form):
    type = forms.ChoiceField(choices=Conversation.TYPE_CHOICES)
    subject = forms.CharField(min_length=1, max_length=200)
    message = forms.CharField(min_length=1)
    recipient_id = forms.IntegerField(required=False, min_value=1)
    category = forms.ChoiceField(choices=Conversation.CATEGORY_CHOICES, required=False)
    priority = forms.ChoiceField(choices=Conversation.PRIORITY_CHOICES, required=False)
    product_id = forms.IntegerField(required=False, min_value=1)
    order_id = forms.IntegerField(required=False, min_value=1)


class MessageForm(forms.Form):
    message = forms.CharField(min_length=1)
    is_internal = forms.BooleanField(required=False)


class ConversationStatusForm(forms.Form):
    status = forms.ChoiceField(choices=Conversation.STATUS_CHOICES)
