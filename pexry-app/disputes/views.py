"""
Vues JSON des litiges
"""
from django.core.exceptions import ValidationError
from django.http import JsonResponse
from django.views.decorators.http import require_http_methods

from project.api import (
    api_login_required, api_view, form_errors, get_int_param, get_request_data, paginate, MAX_PAGE_SIZE,
)
from .forms import DisputeCreateForm, DisputeEvidenceForm, DisputeMessageForm, DisputeStatusForm
from .models import Dispute
from .services import DisputeService, can_manage_disputes

STATUS_VALUES = [value for value, _ in Dispute.STATUS_CHOICES]


def _user_summary(user):
    return {'id': user.id, 'username': user.username}


def serialize_dispute_message(message):
    return {
        'id': message.id,
        'author': _user_summary(message.author),
        'message': message.message,
        'is_internal': message.is_internal,
        'created_at': message.created_at.isoformat(),
    }


def serialize_dispute(dispute, include_messages=False, include_internal=False):
    data = {
        'id': dispute.id,
        'order_id': dispute.order_id,
        'product': {'id': dispute.order.product_id, 'name': dispute.order.product.name},
        'buyer': _user_summary(dispute.buyer),
        'seller': _user_summary(dispute.seller),
        'subject': dispute.subject,
        'description': dispute.description,
        'status': dispute.status,
        'priority': dispute.priority,
        'category': dispute.category,
        'resolution': dispute.resolution,
        'resolved_at': dispute.resolved_at.isoformat() if dispute.resolved_at else None,
        'order_amount': str(dispute.order_amount),
        'hold_amount': str(dispute.hold_amount),
        'funds_released': dispute.funds_released,
        'created_at': dispute.created_at.isoformat(),
        'updated_at': dispute.updated_at.isoformat(),
    }
    if include_messages:
        messages = dispute.messages.select_related('author')
        if not include_internal:
            messages = messages.filter(is_internal=False)
        data['messages'] = [serialize_dispute_message(m) for m in messages]
        data['evidence'] = [
            {
                'id': e.id,
                'file': e.file.url if e.file else None,
                'description': e.description,
                'uploaded_by': e.uploaded_by_id,
                'created_at': e.created_at.isoformat(),
            }
            for e in dispute.evidence.all()
        ]
    return data


def _status_filter(params):
    status = params.get('status')
    if status and status not in STATUS_VALUES:
        raise ValidationError(f'status must be one of {", ".join(STATUS_VALUES)}')
    return status


def _detail_response(request, dispute, status=200):
    return JsonResponse({
        'success': True,
        'dispute': serialize_dispute(
            dispute, include_messages=True, include_internal=can_manage_disputes(request.user)),
    }, status=status)


@require_http_methods(["GET"])
@api_login_required
@api_view
def dispute_list(request):
    """Litiges où l'utilisateur est acheteur ou vendeur"""
    page = get_int_param(request.GET, 'page', 1, minimum=1)
    limit = get_int_param(request.GET, 'limit', 10, minimum=1, maximum=MAX_PAGE_SIZE)
    data = DisputeService.get_my_disputes(
        request.user, status=_status_filter(request.GET), page=page, limit=limit, serializer=serialize_dispute,
    )
    return JsonResponse({'success': True, **data})


@require_http_methods(["GET"])
@api_login_required
@api_view
def dispute_admin_list(request):
    if not can_manage_disputes(request.user):
        raise PermissionError('Only administrators can list all disputes')
    disputes = Dispute.objects.select_related('order__product', 'buyer', 'seller')
    status = _status_filter(request.GET)
    if status:
        disputes = disputes.filter(status=status)
    page = get_int_param(request.GET, 'page', 1, minimum=1)
    limit = get_int_param(request.GET, 'limit', 20, minimum=1, maximum=MAX_PAGE_SIZE)
    data = paginate(disputes.order_by('-created_at', '-id'), page, limit, serializer=serialize_dispute)
    return JsonResponse({'success': True, **data})


@require_http_methods(["POST"])
@api_login_required
@api_view
def dispute_create(request):
    form = DisputeCreateForm(get_request_data(request))
    if not form.is_valid():
        raise form_errors(form)
    cd = form.cleaned_data
    dispute = DisputeService.create_dispute(
        request.user,
        order_id=cd['order_id'],
        subject=cd['subject'],
        description=cd['description'],
        category=cd['category'],
        priority=cd.get('priority') or Dispute.MEDIUM,
    )
    return _detail_response(request, dispute, status=201)


@require_http_methods(["GET"])
@api_login_required
@api_view
def dispute_detail(request, dispute_id):
    dispute = DisputeService.get_dispute(request.user, dispute_id)
    return _detail_response(request, dispute)


@require_http_methods(["POST"])
@api_login_required
@api_view
def dispute_add_message(request, dispute_id):
    form = DisputeMessageForm(get_request_data(request))
    if not form.is_valid():
        raise form_errors(form)
    message = DisputeService.add_message(request.user, dispute_id, form.cleaned_data['message'])
    return JsonResponse({'success': True, 'message': serialize_dispute_message(message)}, status=201)


@require_http_methods(["POST"])
@api_login_required
@api_view
def dispute_add_evidence(request, dispute_id):
    form = DisputeEvidenceForm(request.POST, request.FILES)
    if not form.is_valid():
        raise form_errors(form)
    evidence = DisputeService.add_evidence(
        request.user, dispute_id, form.cleaned_data['file'], form.cleaned_data.get('description'),
    )
    return JsonResponse({
        'success': True,
        'evidence': {'id': evidence.id, 'file': evidence.file.url, 'description': evidence.description},
    }, status=201)


@require_http_methods(["POST"])
@api_login_required
@api_view
def dispute_update_status(request, dispute_id):
    form = DisputeStatusForm(get_request_data(request))
    if not form.is_valid():
        raise form_errors(form)
    dispute = DisputeService.update_status(
        request.user, dispute_id, form.cleaned_data['status'], form.cleaned_data.get('resolution') or None,
    )
    return _detail_response(request, dispute)


@require_http_methods(["POST"])
@api_login_required
@api_view
def mark_funds_released(request):
    dispute_id = get_request_data(request).get('dispute_id')
    if not dispute_id:
        raise ValidationError('Dispute ID is required')
    try:
        dispute_id = int(dispute_id)
    except (TypeError, ValueError):
        raise ValidationError('Dispute ID must be an integer')
    DisputeService.mark_funds_released(request.user, dispute_id)
    return JsonResponse({'success': True})
