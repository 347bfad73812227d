"""
Services du module comptes
Mouvements de soldes vendeur et gestion des agents support
"""
import logging
from decimal import Decimal

from django.contrib.auth.models import User
from django.db import transaction
from django.db.models import F, Value
from django.db.models.functions import Greatest
from django.utils import timezone

from project.exceptions import Conflict
from .models import Profile, UserAgent

logger = logging.getLogger(__name__)

ZERO = Decimal('0.00')


def is_super_admin(user):
    return bool(user and user.is_authenticated and user.is_superuser)


def is_agent(user):
    if not (user and user.is_authenticated):
        return False
    return Profile.objects.filter(user_id=user.id, is_agent=True).exists()


def get_agent_record(user):
    return UserAgent.objects.filter(user_id=user.id).first()


class BalanceService:
    """
    Mouvements de soldes sur le profil.
    Chaque opération est une seule requête UPDATE avec des expressions F()
    pour rester correcte en cas d'écritures concurrentes
    """

    @staticmethod
    def credit_available(user_id, amount):
        amount = Decimal(amount)
        updated = Profile.objects.filter(user_id=user_id).update(
            available_for_withdrawal=F('available_for_withdrawal') + amount
        )
        if not updated:
            logger.warning(f"Profil introuvable pour l'utilisateur {user_id}, crédit de {amount} ignoré")
        return bool(updated)

    @staticmethod
    def debit_available(user_id, amount):
        """Débite le solde disponible sans jamais descendre sous zéro"""
        amount = Decimal(amount)
        return bool(Profile.objects.filter(user_id=user_id).update(
            available_for_withdrawal=Greatest(F('available_for_withdrawal') - amount, Value(ZERO))
        ))

    @staticmethod
    def hold(user_id, amount):
        """
        Bloque un montant du solde disponible
        Retourne False (sans rien modifier) si le solde est insuffisant
        """
        amount = Decimal(amount)
        return bool(Profile.objects.filter(
            user_id=user_id,
            available_for_withdrawal__gte=amount,
        ).update(
            available_for_withdrawal=F('available_for_withdrawal') - amount,
            balance_on_hold=F('balance_on_hold') + amount,
        ))

    @staticmethod
    def release_hold(user_id, amount):
        """Rend au vendeur un montant précédemment bloqué"""
        amount = Decimal(amount)
        return bool(Profile.objects.filter(user_id=user_id).update(
            balance_on_hold=Greatest(F('balance_on_hold') - amount, Value(ZERO)),
            available_for_withdrawal=F('available_for_withdrawal') + amount,
        ))

    @staticmethod
    def consume_hold(user_id, amount):
        """Retire définitivement un montant bloqué (remboursement acheteur)"""
        amount = Decimal(amount)
        return bool(Profile.objects.filter(user_id=user_id).update(
            balance_on_hold=Greatest(F('balance_on_hold') - amount, Value(ZERO)),
        ))


class UserAgentService:
    """Gestion des agents support (réservée aux super admins, sauf disponibilité)"""

    @staticmethod
    @transaction.atomic
    def create_agent(cleaned_data, password=None):
        email = cleaned_data['email'].lower()
        if UserAgent.objects.filter(email__iexact=email).exists():
            raise Conflict('Email already exists')

        user = User.objects.filter(email__iexact=email).first()
        if user is None:
            username = cleaned_data.get('username') or email.split('@')[0]
            base, suffix = username, 1
            while User.objects.filter(username=username).exists():
                suffix += 1
                username = f"{base}{suffix}"
            user = User.objects.create_user(username=username, email=email, password=password)
        elif password:
            user.set_password(password)
            user.save(update_fields=['password'])

        Profile.objects.filter(user=user).update(is_agent=True)

        fields = {k: v for k, v in cleaned_data.items() if k in UserAgentService._agent_fields()}
        fields['email'] = email
        agent = UserAgent.objects.create(user=user, **fields)
        logger.info(f"Agent support créé: {agent.email} (user {user.id})")
        return agent

    @staticmethod
    def update_agent(agent, cleaned_data):
        if 'email' in cleaned_data:
            email = cleaned_data['email'].lower()
            if UserAgent.objects.filter(email__iexact=email).exclude(pk=agent.pk).exists():
                raise Conflict('Email already exists')
            cleaned_data = dict(cleaned_data, email=email)
        for field, value in cleaned_data.items():
            if field in UserAgentService._agent_fields():
                setattr(agent, field, value)
        agent.save()
        return agent

    @staticmethod
    @transaction.atomic
    def delete_agent(agent):
        if agent.user_id:
            Profile.objects.filter(user_id=agent.user_id).update(is_agent=False)
        logger.info(f"Agent support supprimé: {agent.email}")
        agent.delete()

    @staticmethod
    def get_available_agents():
        return UserAgent.objects.filter(
            status=UserAgent.ACTIVE,
            availability=UserAgent.AVAILABLE,
            handle_live_chat=True,
        ).order_by('assigned_chats', 'id')

    @staticmethod
    def update_availability(user, availability):
        if not is_agent(user):
            raise PermissionError('Only user agents can update availability')
        agent = get_agent_record(user)
        if agent is None:
            raise UserAgent.DoesNotExist('Agent record not found')
        agent.availability = availability
        agent.last_login_at = timezone.now()
        agent.save(update_fields=['availability', 'last_login_at', 'updated_at'])
        return agent

    @staticmethod
    def _agent_fields():
        return ('name', 'email', 'status', 'availability') + UserAgent.PERMISSION_FIELDS


def serialize_agent(agent):
    return {
        'id': agent.id,
        'user_id': agent.user_id,
        'name': agent.name,
        'email': agent.email,
        'status': agent.status,
        'availability': agent.availability,
        'permissions': agent.permissions,
        'last_login_at': agent.last_login_at.isoformat() if agent.last_login_at else None,
        'assigned_chats': agent.assigned_chats,
        'total_chats_handled': agent.total_chats_handled,
        'created_at': agent.created_at.isoformat(),
    }
