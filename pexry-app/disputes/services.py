"""
Service des litiges
Ouverture, messages, changement de statut et libération des fonds bloqués
"""
import logging

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.db.models import Q
from django.http import Http404
from django.utils import timezone

from accounts.models import UserAgent
from accounts.services import BalanceService
from notifications.services import NotificationService
from orders.models import Order
from orders.signals import seller_share
from project.api import paginate
from project.exceptions import Conflict
from .models import Dispute, DisputeMessage

logger = logging.getLogger(__name__)


def can_manage_disputes(user):
    if user.is_superuser:
        return True
    return UserAgent.objects.filter(
        user_id=user.id, status=UserAgent.ACTIVE, manage_disputes=True,
    ).exists()


def is_transition_allowed(current, new):
    """
    'forward' : un statut ne peut qu'avancer dans STATUS_SEQUENCE (sauts autorisés)
    'free' : toute transition est acceptée
    """
    policy = getattr(settings, 'PEXRY_DISPUTE_TRANSITIONS', 'forward')
    if policy == 'free':
        return True
    sequence = Dispute.STATUS_SEQUENCE
    return sequence.index(new) >= sequence.index(current)


def is_in_favor_of_seller(status, resolution):
    return status == Dispute.RESOLVED or 'seller' in (resolution or '').lower()


class DisputeService:

    @staticmethod
    def _get(dispute_id, for_update=False):
        queryset = Dispute.objects.select_related('order__product', 'buyer', 'seller')
        if for_update:
            queryset = queryset.select_for_update()
        dispute = queryset.filter(id=dispute_id).first()
        if dispute is None:
            raise Http404('Dispute not found')
        return dispute

    @staticmethod
    def create_dispute(user, order_id, subject, description, category, priority=Dispute.MEDIUM):
        """
        Ouvre un litige sur une commande de l'acheteur
        Bloque la part vendeur si son solde disponible la couvre
        """
        order = Order.objects.select_related('product').filter(id=order_id).first()
        if order is None:
            raise Http404('Order not found')
        if order.user_id != user.id:
            raise PermissionError('You can only create disputes for your own orders')
        if not order.is_paid:
            raise ValidationError('Only paid orders can be disputed')
        seller_id = order.product.vendor_id
        if not seller_id:
            raise Http404('Product vendor not found')
        if Dispute.objects.filter(order_id=order.id).exists():
            raise Conflict('A dispute already exists for this order')

        hold_amount = seller_share(order.amount)
        try:
            with transaction.atomic():
                dispute = Dispute.objects.create(
                    order=order,
                    buyer=user,
                    seller_id=seller_id,
                    subject=subject,
                    description=description,
                    category=category,
                    priority=priority or Dispute.MEDIUM,
                    order_amount=order.amount,
                    hold_amount=hold_amount,
                )
                DisputeMessage.objects.create(dispute=dispute, author=user, message=description)
                if hold_amount > 0 and BalanceService.hold(seller_id, hold_amount):
                    dispute.funds_held = True
                    dispute.save(update_fields=['funds_held'])
        except IntegrityError:
            raise Conflict('A dispute already exists for this order')

        logger.info(
            f"Litige #{dispute.id} ouvert sur la commande #{order.id} "
            f"(blocage {hold_amount}, fonds bloqués: {dispute.funds_held})"
        )

        try:
            NotificationService.notify_dispute_opened(
                seller_id=seller_id,
                buyer_id=user.id,
                dispute_id=dispute.id,
                order_id=order.id,
                product_name=order.product.name,
                subject=subject,
            )
        except Exception as e:
            logger.exception(f"Échec des notifications du litige #{dispute.id}: {str(e)}")

        return dispute

    @staticmethod
    def add_message(user, dispute_id, message):
        """Ajoute un message d'une des parties ; un litige ouvert passe en cours"""
        dispute = DisputeService._get(dispute_id)
        if not dispute.is_participant(user):
            raise PermissionError('Not authorized to add messages to this dispute')
        if dispute.is_closed:
            raise ValidationError('This dispute is closed')

        dispute_message = DisputeMessage.objects.create(dispute=dispute, author=user, message=message)
        if dispute.status == Dispute.OPEN:
            Dispute.objects.filter(pk=dispute.pk, status=Dispute.OPEN).update(
                status=Dispute.IN_PROGRESS, updated_at=timezone.now())
            dispute.refresh_from_db()
        return dispute_message

    @staticmethod
    def add_evidence(user, dispute_id, file, description=''):
        dispute = DisputeService._get(dispute_id)
        if not dispute.is_participant(user):
            raise PermissionError('Not authorized to add evidence to this dispute')
        if dispute.is_closed:
            raise ValidationError('This dispute is closed')
        return dispute.evidence.create(uploaded_by=user, file=file, description=description or '')

    @staticmethod
    def _release_funds(dispute, in_favor_of_seller):
        amount = dispute.hold_amount
        if amount <= 0:
            return
        if in_favor_of_seller:
            if dispute.funds_held:
                BalanceService.release_hold(dispute.seller_id, amount)
        else:
            if dispute.funds_held:
                BalanceService.consume_hold(dispute.seller_id, amount)
            else:
                BalanceService.debit_available(dispute.seller_id, amount)
            BalanceService.credit_available(dispute.buyer_id, amount)

    @staticmethod
    def update_status(user, dispute_id, status, resolution=None):
        """
        Changement de statut (administrateurs et agents habilités)

        Le passage en résolu ou fermé libère les fonds une seule fois : au vendeur
        si le litige est résolu ou si la résolution le mentionne, sinon à l'acheteur.
        """
        if not can_manage_disputes(user):
            raise PermissionError('Only administrators can update dispute status')
        if status not in Dispute.STATUS_SEQUENCE:
            raise ValidationError('Invalid status')

        released_for_seller = None
        with transaction.atomic():
            dispute = DisputeService._get(dispute_id, for_update=True)
            if not is_transition_allowed(dispute.status, status):
                raise ValidationError(f'Cannot move a dispute from {dispute.status} to {status}')

            previous = dispute.status
            dispute.status = status
            if status in Dispute.RESOLUTION_STATUSES:
                if resolution is not None:
                    dispute.resolution = resolution
                dispute.resolved_by = user
                dispute.resolved_at = timezone.now()

                if not dispute.funds_released:
                    released_for_seller = is_in_favor_of_seller(status, dispute.resolution)
                    DisputeService._release_funds(dispute, released_for_seller)
                    dispute.funds_released = True
            dispute.save()

        logger.info(f"Litige #{dispute.id}: statut {previous} -> {status} par {user.username}")

        if released_for_seller is not None:
            logger.info(
                f"Litige #{dispute.id}: {dispute.hold_amount} libérés en faveur du "
                f"{'vendeur' if released_for_seller else 'acheteur'}"
            )
            try:
                NotificationService.notify_dispute_resolved(
                    seller_id=dispute.seller_id,
                    buyer_id=dispute.buyer_id,
                    dispute_id=dispute.id,
                    resolution=dispute.resolution or 'Dispute resolved',
                    in_favor_of_seller=released_for_seller,
                    order_amount=dispute.hold_amount,
                    product_name=dispute.order.product.name,
                )
            except Exception as e:
                logger.exception(f"Échec des notifications de résolution du litige #{dispute.id}: {str(e)}")

        return dispute

    @staticmethod
    def get_my_disputes(user, status=None, page=1, limit=10, serializer=None):
        disputes = Dispute.objects.filter(
            Q(buyer=user) | Q(seller=user)
        ).select_related('order__product', 'buyer', 'seller')
        if status:
            disputes = disputes.filter(status=status)
        return paginate(disputes.order_by('-created_at', '-id'), page, limit, serializer=serializer)

    @staticmethod
    def get_dispute(user, dispute_id):
        dispute = DisputeService._get(dispute_id)
        if not dispute.is_participant(user) and not can_manage_disputes(user):
            raise PermissionError('Not authorized to view this dispute')
        return dispute

    @staticmethod
    def mark_funds_released(user, dispute_id):
        if not can_manage_disputes(user):
            raise PermissionError('Only administrators can release dispute funds')
        updated = Dispute.objects.filter(id=dispute_id).update(funds_released=True, updated_at=timezone.now())
        if not updated:
            raise Http404('Dispute not found')
        logger.info(f"Litige #{dispute_id}: fonds marqués comme libérés par {user.username}")
