"""
Signaux des demandes de retrait
Débit du solde et notifications lors des changements de statut
"""
import logging

from django.db.models.signals import post_save, pre_save
from django.dispatch import receiver
from django.utils import timezone

from accounts.services import BalanceService
from notifications.services import NotificationService
from .models import WithdrawalRequest

logger = logging.getLogger(__name__)


@receiver(pre_save, sender=WithdrawalRequest)
def remember_previous_withdrawal_status(sender, instance, **kwargs):
    if instance.pk:
        instance._previous_status = WithdrawalRequest.objects.filter(
            pk=instance.pk).values_list('status', flat=True).first()
    else:
        instance._previous_status = None
    if instance.status == WithdrawalRequest.PAID and not instance.paid_at:
        instance.paid_at = timezone.now()


@receiver(post_save, sender=WithdrawalRequest)
def process_withdrawal_status_change(sender, instance, created, **kwargs):
    if created or kwargs.get('raw'):
        return
    previous = getattr(instance, '_previous_status', None)
    if previous == instance.status:
        return

    logger.info(f"Retrait #{instance.id}: statut {previous} -> {instance.status}")

    if instance.status == WithdrawalRequest.PAID:
        BalanceService.debit_available(instance.user_id, instance.amount)

    if instance.status in (WithdrawalRequest.PAID, WithdrawalRequest.REJECTED, WithdrawalRequest.APPROVED):
        try:
            NotificationService.notify_withdrawal_status_update(
                user_id=instance.user_id,
                withdrawal_id=instance.id,
                amount=instance.amount,
                status=instance.status,
                rejection_reason=instance.admin_note if instance.status == WithdrawalRequest.REJECTED else None,
            )
        except Exception as e:
            logger.exception(f"Erreur lors de la notification du retrait #{instance.id}: {str(e)}")
