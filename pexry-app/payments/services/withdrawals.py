"""
Service des demandes de retrait vendeur
"""
import logging
from decimal import Decimal, InvalidOperation

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import transaction

from accounts.models import Profile, UserAgent
from project.exceptions import Conflict
from ..models import WithdrawalRequest

logger = logging.getLogger(__name__)


def can_process_payouts(user):
    if user.is_superuser:
        return True
    return UserAgent.objects.filter(
        user_id=user.id, status=UserAgent.ACTIVE, handle_payouts=True,
    ).exists()


class WithdrawalService:

    @staticmethod
    @transaction.atomic
    def request_withdrawal(user, amount):
        """
        Crée une demande de retrait en attente
        Une seule demande en attente ou approuvée à la fois par vendeur
        """
        try:
            amount = Decimal(str(amount)).quantize(Decimal('0.01'))
        except (InvalidOperation, TypeError, ValueError):
            raise ValidationError('amount must be a number')

        minimum = getattr(settings, 'PEXRY_MIN_WITHDRAWAL', Decimal('10.00'))
        if amount < minimum:
            raise ValidationError(f'Minimum withdrawal amount is ${minimum:.2f}')

        profile = Profile.objects.select_for_update().get(user=user)
        if amount > profile.available_for_withdrawal:
            raise ValidationError('Amount exceeds your available balance')
        if not profile.usdt_wallet_address:
            raise ValidationError('Set a USDT wallet address before requesting a withdrawal')

        existing = WithdrawalRequest.objects.filter(
            user=user, status__in=WithdrawalRequest.OPEN_STATUSES,
        ).first()
        if existing:
            raise Conflict(
                f'User already has a {existing.status} withdrawal request. '
                'Please wait for it to be processed before submitting a new request.'
            )

        withdrawal = WithdrawalRequest.objects.create(
            user=user,
            amount=amount,
            wallet_address=profile.usdt_wallet_address,
            wallet_network=profile.usdt_network,
        )
        logger.info(f"Demande de retrait #{withdrawal.id} de {amount} USD par {user.username}")
        return withdrawal

    @staticmethod
    def update_status(actor, withdrawal, status, admin_note=None):
        """Changement de statut par un admin ; les effets de bord sont gérés par les signaux"""
        if not can_process_payouts(actor):
            raise PermissionError('You do not have permission to process withdrawals')
        if status not in dict(WithdrawalRequest.STATUS_CHOICES):
            raise ValidationError('Invalid status')
        if withdrawal.status == WithdrawalRequest.PAID and status != WithdrawalRequest.PAID:
            raise ValidationError('A paid withdrawal cannot change status')

        withdrawal.status = status
        if admin_note is not None:
            withdrawal.admin_note = admin_note
        if status == WithdrawalRequest.PAID and not withdrawal.paid_by_id:
            withdrawal.paid_by = actor
        withdrawal.save()
        return withdrawal
