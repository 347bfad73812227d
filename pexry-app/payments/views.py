"""
Vues des paiements : webhook NOWPayments et demandes de retrait
"""
import json
import logging
from decimal import Decimal

from django.db import transaction
from django.db.models import Sum
from django.http import JsonResponse
from django.shortcuts import get_object_or_404
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods

from accounts.models import Profile
from orders.services import OrderService
from project.api import (
    api_login_required, api_view, error_response, form_errors, get_int_param, get_request_data,
    paginate, MAX_PAGE_SIZE,
)
from .forms import WithdrawalForm, WithdrawalStatusForm
from .models import PaymentWebhookLog, WithdrawalRequest
from .services.nowpayments import nowpayments_service
from .services.withdrawals import WithdrawalService, can_process_payouts

logger = logging.getLogger(__name__)

SIGNATURE_HEADER = 'HTTP_X_NOWPAYMENTS_SIG'


def _reject_constant(value):
    raise ValueError(f'Non-finite number in payload: {value}')


def _parse_webhook_body(request):
    """
    Retourne (payload, réponse d'erreur)
    JSON ou formulaire URL-encodé, tout autre Content-Type est refusé
    NaN et Infinity ne sont pas du JSON valide pour la colonne payload
    """
    content_type = request.META.get('CONTENT_TYPE', '')
    if 'application/json' in content_type:
        try:
            payload = json.loads(request.body or b'{}', parse_constant=_reject_constant)
        except ValueError:
            return None, JsonResponse({'error': 'Invalid JSON'}, status=400)
        if not isinstance(payload, dict):
            return None, JsonResponse({'error': 'Invalid JSON'}, status=400)
        return payload, None
    if 'application/x-www-form-urlencoded' in content_type:
        return request.POST.dict(), None
    return None, JsonResponse({'error': 'Unsupported Content-Type'}, status=415)


def _clip(value, field_name):
    """Valeur reçue convertie en texte et tronquée à la longueur de la colonne du log"""
    if value is None:
        return None
    max_length = PaymentWebhookLog._meta.get_field(field_name).max_length
    return str(value)[:max_length]


def _write_webhook_log(webhook_log, **fields):
    """
    Crée ou met à jour la ligne d'audit
    Un échec d'écriture est journalisé et ne bloque jamais le traitement du webhook
    """
    try:
        with transaction.atomic():
            if webhook_log is None:
                return PaymentWebhookLog.objects.create(**fields)
            for name, value in fields.items():
                setattr(webhook_log, name, value)
            webhook_log.save()
            return webhook_log
    except Exception as e:
        logger.exception(f"Impossible d'enregistrer le log du webhook NOWPayments: {str(e)}")
        return webhook_log


@csrf_exempt
@require_http_methods(["POST"])
def nowpayments_webhook(request):
    """
    Notification IPN de NOWPayments

    Seul le statut "finished" modifie la commande. Les erreurs internes, y compris
    celles du journal d'audit, sont journalisées et la livraison est tout de même acquittée.
    """
    payload, error = _parse_webhook_body(request)
    if error is not None:
        logger.warning(f"Webhook NOWPayments rejeté ({error.status_code})")
        return error

    payment_status = payload.get('payment_status')
    order_reference = payload.get('order_id')
    payment_id = _clip(payload.get('payment_id'), 'payment_id')
    signature = request.META.get(SIGNATURE_HEADER, '')

    webhook_log = _write_webhook_log(
        None,
        payload=payload,
        content_type=_clip(request.META.get('CONTENT_TYPE', ''), 'content_type'),
        payment_status=_clip(payment_status, 'payment_status'),
        order_reference=_clip(order_reference, 'order_reference'),
        payment_id=payment_id,
        signature=_clip(signature, 'signature') or None,
    )

    outcome = {}
    if nowpayments_service.ipn_secret:
        if not nowpayments_service.verify_ipn_signature(payload, signature):
            logger.warning(f"Signature IPN invalide pour la commande {order_reference}")
            if webhook_log is not None:
                _write_webhook_log(webhook_log, error_message="Signature invalide")
            return JsonResponse({'error': 'Invalid signature'}, status=401)
        outcome['is_valid'] = True

    try:
        if payment_status == 'finished':
            order = OrderService.find_by_transaction_id(order_reference)
            if order is None:
                logger.warning(f"Webhook NOWPayments : commande {order_reference} introuvable")
                outcome['error_message'] = "Commande introuvable"
            else:
                with transaction.atomic():
                    OrderService.mark_paid(order, payment_id)
                outcome['order'] = order
                outcome['processed'] = True
        else:
            logger.info(f"Webhook NOWPayments ignoré : statut {payment_status} pour {order_reference}")
    except Exception as e:
        logger.exception(f"Erreur dans nowpayments_webhook: {str(e)}")
        outcome['error_message'] = str(e)

    if webhook_log is not None and outcome:
        _write_webhook_log(webhook_log, **outcome)
    return JsonResponse({'received': True})


def serialize_withdrawal(withdrawal, include_user=False):
    data = {
        'id': withdrawal.id,
        'amount': str(withdrawal.amount),
        'status': withdrawal.status,
        'admin_note': withdrawal.admin_note,
        'wallet_address': withdrawal.wallet_address,
        'wallet_network': withdrawal.wallet_network,
        'paid_at': withdrawal.paid_at.isoformat() if withdrawal.paid_at else None,
        'created_at': withdrawal.created_at.isoformat(),
        'updated_at': withdrawal.updated_at.isoformat(),
    }
    if include_user:
        data['user'] = {'id': withdrawal.user_id, 'username': withdrawal.user.username}
    return data


@require_http_methods(["GET"])
@api_login_required
def withdrawal_balance(request):
    """Solde disponible, solde bloqué et demande en cours"""
    profile, _ = Profile.objects.get_or_create(user=request.user)
    pending = WithdrawalRequest.objects.filter(
        user=request.user, status__in=WithdrawalRequest.OPEN_STATUSES,
    ).first()
    total_paid = WithdrawalRequest.objects.filter(
        user=request.user, status=WithdrawalRequest.PAID,
    ).aggregate(s=Sum('amount'))['s']
    return JsonResponse({
        'success': True,
        'available_for_withdrawal': str(profile.available_for_withdrawal),
        'balance_on_hold': str(profile.balance_on_hold),
        'total_withdrawn': str(total_paid or Decimal('0.00')),
        'pending_withdrawal': serialize_withdrawal(pending) if pending else None,
    })


@require_http_methods(["GET"])
@api_login_required
@api_view
def withdrawal_list(request):
    withdrawals = WithdrawalRequest.objects.filter(user=request.user)
    page = get_int_param(request.GET, 'page', 1, minimum=1)
    limit = get_int_param(request.GET, 'limit', 20, minimum=1, maximum=MAX_PAGE_SIZE)
    data = paginate(withdrawals.order_by('-created_at', '-id'), page, limit, serializer=serialize_withdrawal)
    return JsonResponse({'success': True, **data})


@require_http_methods(["POST"])
@api_login_required
@api_view
def withdrawal_create(request):
    form = WithdrawalForm(get_request_data(request))
    if not form.is_valid():
        raise form_errors(form)
    withdrawal = WithdrawalService.request_withdrawal(request.user, form.cleaned_data['amount'])
    return JsonResponse({'success': True, 'withdrawal': serialize_withdrawal(withdrawal)}, status=201)


@require_http_methods(["GET"])
@api_login_required
@api_view
def withdrawal_admin_list(request):
    """File des demandes pour les administrateurs et agents autorisés"""
    if not can_process_payouts(request.user):
        return error_response('You do not have permission to process withdrawals', 403)
    withdrawals = WithdrawalRequest.objects.select_related('user')
    status = request.GET.get('status')
    if status:
        withdrawals = withdrawals.filter(status=status)
    page = get_int_param(request.GET, 'page', 1, minimum=1)
    limit = get_int_param(request.GET, 'limit', 20, minimum=1, maximum=MAX_PAGE_SIZE)
    data = paginate(
        withdrawals.order_by('-created_at', '-id'), page, limit,
        serializer=lambda w: serialize_withdrawal(w, include_user=True),
    )
    return JsonResponse({'success': True, **data})


@require_http_methods(["POST"])
@api_login_required
@api_view
def withdrawal_update_status(request, withdrawal_id):
    if not can_process_payouts(request.user):
        raise PermissionError('You do not have permission to process withdrawals')
    withdrawal = get_object_or_404(WithdrawalRequest.objects.select_related('user'), id=withdrawal_id)
    form = WithdrawalStatusForm(get_request_data(request))
    if not form.is_valid():
        raise form_errors(form)
    admin_note = form.cleaned_data.get('admin_note') or None
    withdrawal = WithdrawalService.update_status(
        request.user, withdrawal, form.cleaned_data['status'], admin_note,
    )
    withdrawal.refresh_from_db()
    return JsonResponse({'success': True, 'withdrawal': serialize_withdrawal(withdrawal, include_user=True)})
