"""
Service de messagerie
Règles d'accès, envoi de messages et prise en charge des demandes de support par les agents
"""
import logging

from django.contrib.auth.models import User
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import F, Q, Value
from django.db.models.functions import Greatest
from django.http import Http404
from django.utils import timezone

from accounts.models import UserAgent
from accounts.services import UserAgentService, is_agent
from notifications.services import NotificationService
from orders.models import Order
from products.models import Product
from project.api import paginate
from .models import Conversation, ConversationMessage

logger = logging.getLogger(__name__)

AGENT_CONVERSATIONS_LIMIT = 50

STATUS_MESSAGES = {
    Conversation.RESOLVED: 'This conversation has been marked as resolved.',
    Conversation.CLOSED: 'This conversation has been closed.',
    Conversation.ACTIVE: 'This conversation has been reopened.',
    Conversation.WAITING: 'This conversation is waiting for a response.',
}


def is_staff_agent(user):
    """Agent support ou super admin"""
    return user.is_superuser or is_agent(user)


def has_access(user, conversation):
    """Participant, agent assigné, tout agent pour le support, ou super admin"""
    if user.is_superuser:
        return True
    if conversation.assigned_agent_id == user.id:
        return True
    if conversation.participants.filter(id=user.id).exists():
        return True
    return conversation.is_support and is_agent(user)


def _adjust_assigned_chats(user_id, delta):
    UserAgent.objects.filter(user_id=user_id).update(
        assigned_chats=Greatest(F('assigned_chats') + delta, Value(0)))


class ConversationService:

    @staticmethod
    def _get(conversation_id):
        conversation = Conversation.objects.filter(id=conversation_id).first()
        if conversation is None:
            raise Http404('Conversation not found')
        return conversation

    @staticmethod
    def get_my_conversations(user, type=None, page=1, limit=20, serializer=None):
        """Conversations de l'utilisateur, hors conversations résolues ou fermées"""
        conversations = Conversation.objects.filter(participants=user).exclude(
            status__in=Conversation.FINISHED_STATUSES)
        if type:
            conversations = conversations.filter(type=type)
        conversations = conversations.order_by(F('last_message_at').desc(nulls_last=True), '-id')
        return paginate(conversations, page, limit, serializer=serializer)

    @staticmethod
    def get_conversation(user, conversation_id):
        conversation = ConversationService._get(conversation_id)
        if not has_access(user, conversation):
            raise PermissionError('You can only view conversations you are part of')
        return conversation

    @staticmethod
    def create_conversation(user, type, subject, message, recipient_id=None, category=None,
                            priority=Conversation.NORMAL, product_id=None, order_id=None):
        """
        Crée une conversation avec son premier message
        Une demande de support est confiée à l'agent disponible le moins chargé
        """
        participants = [user]
        if type == Conversation.CONVERSATION:
            if not recipient_id:
                raise ValidationError('recipient_id is required for a conversation')
            recipient = User.objects.filter(id=recipient_id, is_active=True).first()
            if recipient is None:
                raise Http404('Recipient not found')
            if recipient.id != user.id:
                participants.append(recipient)

        product = None
        if product_id:
            product = Product.objects.filter(id=product_id).first()
            if product is None:
                raise Http404('Product not found')
        order = None
        if order_id:
            order = Order.objects.filter(id=order_id).first()
            if order is None:
                raise Http404('Order not found')
            if order.user_id != user.id and not is_staff_agent(user):
                raise PermissionError('You can only reference your own orders')

        now = timezone.now()
        with transaction.atomic():
            conversation = Conversation.objects.create(
                type=type,
                subject=subject,
                category=category or None,
                priority=priority or Conversation.NORMAL,
                product=product,
                order=order,
                last_message_at=now,
                last_message_by=user,
            )
            conversation.participants.set(participants)

            if type == Conversation.SUPPORT:
                agent = UserAgentService.get_available_agents().filter(user__isnull=False).first()
                if agent is not None:
                    conversation.assigned_agent_id = agent.user_id
                    conversation.save(update_fields=['assigned_agent', 'updated_at'])
                    conversation.participants.add(agent.user_id)
                    _adjust_assigned_chats(agent.user_id, 1)
                    UserAgent.objects.filter(pk=agent.pk).update(total_chats_handled=F('total_chats_handled') + 1)
                    logger.info(f"Demande de support #{conversation.id} assignée à l'agent {agent.email}")
                else:
                    logger.info(f"Aucun agent disponible pour la demande de support #{conversation.id}")

            first_message = ConversationMessage.objects.create(
                conversation=conversation, sender=user, message=message)

        ConversationService._notify_new_message(conversation, first_message)
        return conversation

    @staticmethod
    def send_message(user, conversation_id, message, is_internal=False):
        """Ajoute un message ; la conversation redevient active"""
        conversation = ConversationService._get(conversation_id)
        if not has_access(user, conversation):
            raise PermissionError('You can only send messages to conversations you are part of')
        if is_internal and not is_staff_agent(user):
            raise PermissionError('Only agents can post internal notes')

        conversation_message = ConversationMessage.objects.create(
            conversation=conversation, sender=user, message=message, is_internal=bool(is_internal))
        Conversation.objects.filter(pk=conversation.pk).update(
            status=Conversation.ACTIVE,
            last_message_at=conversation_message.created_at,
            last_message_by=user,
            updated_at=timezone.now(),
        )
        if not conversation_message.is_internal:
            ConversationService._notify_new_message(conversation, conversation_message)
        return conversation_message

    @staticmethod
    def _notify_new_message(conversation, conversation_message):
        """Notifie les participants (et l'agent assigné) autres que l'expéditeur"""
        recipients = set(conversation.participants.values_list('id', flat=True))
        if conversation.assigned_agent_id:
            recipients.add(conversation.assigned_agent_id)
        recipients.discard(conversation_message.sender_id)
        for recipient_id in sorted(recipients):
            try:
                NotificationService.notify_new_message(
                    user_id=recipient_id,
                    conversation_id=conversation.id,
                    subject=conversation.subject,
                    sender_name=conversation_message.sender.username,
                )
            except Exception as e:
                logger.exception(
                    f"Échec de la notification du message {conversation_message.id} "
                    f"pour l'utilisateur {recipient_id}: {str(e)}"
                )

    @staticmethod
    def mark_as_read(user, conversation_id):
        """Marque comme lus les messages reçus ; retourne le nombre de messages mis à jour"""
        conversation = ConversationService._get(conversation_id)
        if not has_access(user, conversation):
            raise PermissionError('You can only mark messages as read in your own conversations')
        return conversation.messages.filter(is_read=False).exclude(sender=user).update(is_read=True)

    @staticmethod
    def unread_count(user):
        messages = ConversationMessage.objects.filter(
            conversation__participants=user,
            is_read=False,
        ).exclude(sender=user).exclude(conversation__status__in=Conversation.FINISHED_STATUSES)
        if not is_staff_agent(user):
            messages = messages.filter(is_internal=False)
        return messages.distinct().count()

    @staticmethod
    def get_agent_conversations(user):
        if not is_staff_agent(user):
            raise PermissionError('Only agents can access this endpoint')
        return list(
            Conversation.objects.filter(assigned_agent=user)
            .exclude(status__in=Conversation.FINISHED_STATUSES)
            .order_by(F('last_message_at').desc(nulls_last=True), '-id')[:AGENT_CONVERSATIONS_LIMIT]
        )

    @staticmethod
    def get_all_support_conversations(user, status=None, page=1, limit=20, serializer=None):
        if not is_staff_agent(user):
            raise PermissionError('Only agents can access this endpoint')
        conversations = Conversation.objects.filter(type=Conversation.SUPPORT)
        if status:
            conversations = conversations.filter(status=status)
        else:
            conversations = conversations.exclude(status__in=Conversation.FINISHED_STATUSES)
        conversations = conversations.order_by(F('last_message_at').desc(nulls_last=True), '-id')
        return paginate(conversations, page, limit, serializer=serializer)

    @staticmethod
    @transaction.atomic
    def assign_self(user, conversation_id):
        if not is_staff_agent(user):
            raise PermissionError('Only agents can assign themselves to conversations')
        conversation = ConversationService._get(conversation_id)
        if not conversation.is_support:
            raise ValidationError('Can only assign agents to support conversations')

        previous_agent_id = conversation.assigned_agent_id
        conversation.assigned_agent = user
        conversation.status = Conversation.ACTIVE
        conversation.save(update_fields=['assigned_agent', 'status', 'updated_at'])

        if previous_agent_id != user.id:
            if previous_agent_id:
                _adjust_assigned_chats(previous_agent_id, -1)
            _adjust_assigned_chats(user.id, 1)
            UserAgent.objects.filter(user_id=user.id).update(total_chats_handled=F('total_chats_handled') + 1)
            logger.info(f"Agent {user.username} assigné à la demande de support #{conversation.id}")
        return conversation

    @staticmethod
    def update_status(user, conversation_id, status):
        """
        Change le statut et ajoute une note interne
        Seuls les agents peuvent résoudre ou fermer une conversation
        """
        conversation = ConversationService._get(conversation_id)
        staff = is_staff_agent(user)
        if not (staff or has_access(user, conversation)):
            raise PermissionError('You do not have permission to update this conversation')
        if status in Conversation.FINISHED_STATUSES and not staff:
            raise PermissionError('Only agents can resolve or close conversations')

        previous = conversation.status
        with transaction.atomic():
            conversation.status = status
            conversation.save(update_fields=['status', 'updated_at'])
            ConversationMessage.objects.create(
                conversation=conversation, sender=user, message=STATUS_MESSAGES[status], is_internal=True)
            if conversation.assigned_agent_id and previous != status:
                if status in Conversation.FINISHED_STATUSES and previous not in Conversation.FINISHED_STATUSES:
                    _adjust_assigned_chats(conversation.assigned_agent_id, -1)
                elif previous in Conversation.FINISHED_STATUSES and status not in Conversation.FINISHED_STATUSES:
                    _adjust_assigned_chats(conversation.assigned_agent_id, 1)

        logger.info(f"Conversation #{conversation.id}: statut {previous} -> {status} par {user.username}")

        if conversation.is_support and status == Conversation.RESOLVED and previous != status:
            requesters = conversation.participants.exclude(
                Q(id=user.id) | Q(id=conversation.assigned_agent_id) | Q(profile__is_agent=True))
            for requester_id in requesters.values_list('id', flat=True):
                try:
                    NotificationService.notify_support_resolved(requester_id, conversation.id, conversation.subject)
                except Exception as e:
                    logger.exception(f"Échec de la notification de résolution #{conversation.id}: {str(e)}")
        return conversation
