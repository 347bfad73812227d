"""
Service de notifications Pexry
Crée les notifications in-app et envoie l'email correspondant
Les échecs d'envoi d'email sont journalisés et n'interrompent jamais l'appelant
"""
import logging
from decimal import Decimal

from django.conf import settings
from django.contrib.auth.models import User
from django.core.mail import send_mail

from .models import Notification

logger = logging.getLogger(__name__)


def _money(amount):
    return f"${Decimal(amount):.2f}"


class NotificationService:
    """Émetteur de notifications (in-app + email)"""

    @staticmethod
    def create_notification(user_id, title, message, type=Notification.GENERAL,
                            priority=Notification.NORMAL, action_url=None, metadata=None):
        return Notification.objects.create(
            user_id=user_id,
            title=title,
            message=message,
            type=type,
            priority=priority,
            action_url=action_url,
            metadata=metadata or {},
        )

    @staticmethod
    def send_email(user_id, subject, body):
        """Envoie un email au destinataire s'il en a un ; retourne True si envoyé"""
        try:
            user = User.objects.filter(pk=user_id).only('email', 'username').first()
            if user is None or not user.email:
                return False
            send_mail(
                subject,
                f"Hi {user.username},\n\n{body}\n\nThe Pexry team",
                settings.DEFAULT_FROM_EMAIL,
                [user.email],
                fail_silently=False,
            )
            return True
        except Exception as e:
            logger.error(f"Erreur lors de l'envoi de l'email '{subject}' à l'utilisateur {user_id}: {e}")
            return False

    @staticmethod
    def notify_sale(seller_id, order_id, product_name, amount, buyer_name=None):
        notification = NotificationService.create_notification(
            user_id=seller_id,
            title='🎉 New Sale!',
            message=(
                f'Great news! You sold "{product_name}" for {_money(amount)}'
                f'{f" to {buyer_name}" if buyer_name else ""}.'
            ),
            type=Notification.SALE,
            priority=Notification.HIGH,
            action_url=f'/dashboard/orders/{order_id}',
            metadata={'order_id': order_id, 'order_amount': str(amount), 'product_name': product_name},
        )
        share = Decimal(amount) * getattr(settings, 'PEXRY_SELLER_SHARE', Decimal('0.90'))
        NotificationService.send_email(
            seller_id,
            f'New sale: {product_name}',
            f'You sold "{product_name}" for {_money(amount)} to {buyer_name or "Anonymous"}.\n'
            f'Your earnings: {_money(share)}.\nOrder #{order_id}',
        )
        return notification

    @staticmethod
    def notify_payment_confirmed(buyer_id, order_id, product_name, amount, transaction_id):
        """Email de confirmation à l'acheteur (pas de notification in-app)"""
        return NotificationService.send_email(
            buyer_id,
            f'Payment confirmed: {product_name}',
            f'Your payment of {_money(amount)} for "{product_name}" has been confirmed.\n'
            f'Order #{order_id} - transaction {transaction_id}',
        )

    @staticmethod
    def notify_dispute_opened(seller_id, buyer_id, dispute_id, order_id, product_name, subject):
        NotificationService.create_notification(
            user_id=seller_id,
            title='⚠️ New Dispute Opened',
            message=f'A dispute has been opened for your product "{product_name}". Subject: {subject}',
            type=Notification.DISPUTE_OPENED,
            priority=Notification.URGENT,
            action_url=f'/dashboard/disputes/{dispute_id}',
            metadata={'dispute_id': dispute_id, 'order_id': order_id, 'product_name': product_name, 'role': 'seller'},
        )
        NotificationService.send_email(
            seller_id,
            f'Dispute opened: {product_name}',
            f'A buyer opened a dispute on order #{order_id} ("{product_name}").\nSubject: {subject}',
        )

        buyer_notification = NotificationService.create_notification(
            user_id=buyer_id,
            title='📝 Dispute Submitted',
            message=f'Your dispute for "{product_name}" has been submitted and is being reviewed.',
            type=Notification.DISPUTE_OPENED,
            priority=Notification.HIGH,
            action_url=f'/dashboard/disputes/{dispute_id}',
            metadata={'dispute_id': dispute_id, 'order_id': order_id, 'product_name': product_name, 'role': 'buyer'},
        )
        NotificationService.send_email(
            buyer_id,
            f'Dispute submitted: {product_name}',
            f'Your dispute on order #{order_id} has been submitted and is being reviewed.\nSubject: {subject}',
        )
        return buyer_notification

    @staticmethod
    def notify_dispute_resolved(seller_id, buyer_id, dispute_id, resolution, in_favor_of_seller,
                                order_amount, product_name):
        winner_id, loser_id = (seller_id, buyer_id) if in_favor_of_seller else (buyer_id, seller_id)
        if in_favor_of_seller:
            outcome = f'Funds ({_money(order_amount)}) have been released to your account.'
        else:
            outcome = f'You will receive a refund of {_money(order_amount)}.'
        metadata = {
            'dispute_id': dispute_id,
            'resolution': resolution,
            'order_amount': str(order_amount),
            'product_name': product_name,
        }

        NotificationService.create_notification(
            user_id=winner_id,
            title='✅ Dispute Resolved in Your Favor',
            message=f'Good news! The dispute for "{product_name}" has been resolved in your favor. {outcome}',
            type=Notification.DISPUTE_RESOLVED,
            priority=Notification.HIGH,
            action_url=f'/dashboard/disputes/{dispute_id}',
            metadata=dict(metadata, won=True),
        )
        NotificationService.send_email(
            winner_id,
            f'Dispute resolved: {product_name}',
            f'The dispute for "{product_name}" has been resolved in your favor. {outcome}\nResolution: {resolution}',
        )

        loser_notification = NotificationService.create_notification(
            user_id=loser_id,
            title='❌ Dispute Resolved',
            message=(
                f'The dispute for "{product_name}" has been resolved. '
                f'Unfortunately, it was not resolved in your favor. Resolution: {resolution}'
            ),
            type=Notification.DISPUTE_RESOLVED,
            priority=Notification.NORMAL,
            action_url=f'/dashboard/disputes/{dispute_id}',
            metadata=dict(metadata, won=False),
        )
        NotificationService.send_email(
            loser_id,
            f'Dispute resolved: {product_name}',
            f'The dispute for "{product_name}" was not resolved in your favor.\nResolution: {resolution}',
        )
        return loser_notification

    @staticmethod
    def notify_withdrawal_status_update(user_id, withdrawal_id, amount, status, rejection_reason=None):
        if status == 'paid':
            title = '💰 Withdrawal Completed'
            message = f'Your withdrawal of {_money(amount)} has been processed and sent to your account.'
            type_, priority = Notification.WITHDRAWAL_PAID, Notification.HIGH
        elif status == 'rejected':
            title = '❌ Withdrawal Rejected'
            message = f'Your withdrawal request of {_money(amount)} was rejected.'
            if rejection_reason:
                message += f' Reason: {rejection_reason}'
            type_, priority = Notification.WITHDRAWAL_REJECTED, Notification.NORMAL
        else:
            title = '✅ Withdrawal Approved'
            message = f'Your withdrawal request of {_money(amount)} has been approved and will be processed soon.'
            type_, priority = Notification.GENERAL, Notification.NORMAL

        notification = NotificationService.create_notification(
            user_id=user_id,
            title=title,
            message=message,
            type=type_,
            priority=priority,
            action_url='/dashboard/payout',
            metadata={
                'withdrawal_id': withdrawal_id,
                'amount': str(amount),
                'status': status,
                'rejection_reason': rejection_reason,
            },
        )
        NotificationService.send_email(user_id, title, message)
        return notification

    @staticmethod
    def notify_support_resolved(user_id, conversation_id, subject):
        notification = NotificationService.create_notification(
            user_id=user_id,
            title='✅ Support Ticket Resolved',
            message=f'Your support ticket "{subject}" has been resolved by our team.',
            type=Notification.GENERAL,
            action_url=f'/dashboard/messages?conversation={conversation_id}',
            metadata={'conversation_id': conversation_id, 'subject': subject},
        )
        NotificationService.send_email(
            user_id, 'Support ticket resolved', f'Your support ticket "{subject}" has been resolved by our team.')
        return notification

    @staticmethod
    def notify_new_message(user_id, conversation_id, subject, sender_name=None):
        notification = NotificationService.create_notification(
            user_id=user_id,
            title='💬 New Message',
            message=f'You have a new message in "{subject}".',
            type=Notification.MESSAGE,
            action_url=f'/dashboard/messages?conversation={conversation_id}',
            metadata={'conversation_id': conversation_id, 'subject': subject},
        )
        NotificationService.send_email(
            user_id,
            f'New message: {subject}',
            f'{sender_name or "Someone"} sent you a new message in "{subject}".',
        )
        return notification
