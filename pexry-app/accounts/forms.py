from django import forms
from .models import Profile, UserAgent


class UserAgentForm(forms.ModelForm):
    username = forms.CharField(max_length=150, required=False)
    password = forms.CharField(min_length=8, required=False, widget=forms.PasswordInput())

    class Meta:
        model = UserAgent
        fields = (
            'name', 'email', 'status', 'availability',
            'handle_payouts', 'handle_support_tickets', 'handle_live_chat',
            'view_user_data', 'manage_disputes',
        )

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields['status'].required = False
        self.fields['availability'].required = False

    def clean(self):
        cd = super().clean()
        for field in ('status', 'availability'):
            if not cd.get(field):
                cd.pop(field, None)
        return cd

    def validate_unique(self):
        # L'unicité de l'email est vérifiée par le service (réponse 409)
        pass


class UserAgentUpdateForm(UserAgentForm):
    """Mise à jour partielle : seuls les champs envoyés sont validés et retournés"""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        for field in self.fields.values():
            field.required = False

    def clean(self):
        cleaned_data = super().clean()
        return {k: v for k, v in cleaned_data.items() if k in self.data}


class AvailabilityForm(forms.Form):
    availability = forms.ChoiceField(choices=UserAgent.AVAILABILITY_CHOICES)


class WalletForm(forms.ModelForm):
    class Meta:
        model = Profile
        fields = ('display_name', 'usdt_wallet_address', 'usdt_network')

    def clean(self):
        cd = super().clean()
        if cd.get('usdt_wallet_address') and not cd.get('usdt_network'):
            self.add_error('usdt_network', 'Network is required when a wallet address is set')
        return cd
