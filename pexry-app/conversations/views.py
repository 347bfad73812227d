"""
Vues JSON de la messagerie et du support
"""
from django.core.exceptions import ValidationError
from django.http import JsonResponse
from django.views.decorators.http import require_http_methods

from project.api import api_login_required, api_view, form_errors, get_int_param, get_request_data, MAX_PAGE_SIZE
from .forms import ConversationCreateForm, ConversationStatusForm, MessageForm
from .models import Conversation
from .services import ConversationService, is_staff_agent

TYPE_VALUES = [value for value, _ in Conversation.TYPE_CHOICES]
STATUS_VALUES = [value for value, _ in Conversation.STATUS_CHOICES]


def _user_summary(user):
    if user is None:
        return None
    return {'id': user.id, 'username': user.username}


def serialize_message(message):
    return {
        'id': message.id,
        'sender': _user_summary(message.sender),
        'message': message.message,
        'is_read': message.is_read,
        'is_internal': message.is_internal,
        'created_at': message.created_at.isoformat(),
    }


def serialize_conversation(conversation, include_messages=False, include_internal=False):
    data = {
        'id': conversation.id,
        'subject': conversation.subject,
        'type': conversation.type,
        'category': conversation.category,
        'priority': conversation.priority,
        'status': conversation.status,
        'participants': [_user_summary(u) for u in conversation.participants.all()],
        'assigned_agent': _user_summary(conversation.assigned_agent),
        'product_id': conversation.product_id,
        'order_id': conversation.order_id,
        'last_message_at': conversation.last_message_at.isoformat() if conversation.last_message_at else None,
        'last_message_by': conversation.last_message_by_id,
        'created_at': conversation.created_at.isoformat(),
    }
    if include_messages:
        messages = conversation.messages.select_related('sender')
        if not include_internal:
            messages = messages.filter(is_internal=False)
        data['messages'] = [serialize_message(m) for m in messages]
    return data


def _choice_param(params, name, values):
    value = params.get(name)
    if value and value not in values:
        raise ValidationError(f'{name} must be one of {", ".join(values)}')
    return value or None


@require_http_methods(["GET"])
@api_login_required
@api_view
def conversation_list(request):
    page = get_int_param(request.GET, 'page', 1, minimum=1)
    limit = get_int_param(request.GET, 'limit', 20, minimum=1, maximum=MAX_PAGE_SIZE)
    data = ConversationService.get_my_conversations(
        request.user,
        type=_choice_param(request.GET, 'type', TYPE_VALUES),
        page=page, limit=limit, serializer=serialize_conversation,
    )
    return JsonResponse({'success': True, **data})


@require_http_methods(["POST"])
@api_login_required
@api_view
def conversation_create(request):
    form = ConversationCreateForm(get_request_data(request))
    if not form.is_valid():
        raise form_errors(form)
    cd = form.cleaned_data
    conversation = ConversationService.create_conversation(
        request.user,
        type=cd['type'],
        subject=cd['subject'],
        message=cd['message'],
        recipient_id=cd.get('recipient_id'),
        category=cd.get('category'),
        priority=cd.get('priority') or Conversation.NORMAL,
        product_id=cd.get('product_id'),
        order_id=cd.get('order_id'),
    )
    return JsonResponse({
        'success': True,
        'conversation_id': conversation.id,
        'conversation': serialize_conversation(conversation, include_messages=True),
    }, status=201)


@require_http_methods(["GET"])
@api_login_required
@api_view
def conversation_detail(request, conversation_id):
    conversation = ConversationService.get_conversation(request.user, conversation_id)
    return JsonResponse({
        'success': True,
        'conversation': serialize_conversation(
            conversation, include_messages=True, include_internal=is_staff_agent(request.user)),
    })


@require_http_methods(["POST"])
@api_login_required
@api_view
def send_message(request, conversation_id):
    form = MessageForm(get_request_data(request))
    if not form.is_valid():
        raise form_errors(form)
    message = ConversationService.send_message(
        request.user, conversation_id, form.cleaned_data['message'], form.cleaned_data.get('is_internal', False),
    )
    return JsonResponse({'success': True, 'message': serialize_message(message)}, status=201)


@require_http_methods(["POST"])
@api_login_required
@api_view
def mark_as_read(request, conversation_id):
    updated = ConversationService.mark_as_read(request.user, conversation_id)
    return JsonResponse({'success': True, 'updated': updated})


@require_http_methods(["GET"])
@api_login_required
def unread_count(request):
    return JsonResponse({'success': True, 'count': ConversationService.unread_count(request.user)})


@require_http_methods(["GET"])
@api_login_required
@api_view
def agent_conversations(request):
    """Conversations assignées à l'agent connecté"""
    conversations = ConversationService.get_agent_conversations(request.user)
    return JsonResponse({
        'success': True,
        'conversations': [serialize_conversation(c) for c in conversations],
    })


@require_http_methods(["GET"])
@api_login_required
@api_view
def support_conversations(request):
    page = get_int_param(request.GET, 'page', 1, minimum=1)
    limit = get_int_param(request.GET, 'limit', 20, minimum=1, maximum=MAX_PAGE_SIZE)
    data = ConversationService.get_all_support_conversations(
        request.user,
        status=_choice_param(request.GET, 'status', STATUS_VALUES),
        page=page, limit=limit, serializer=serialize_conversation,
    )
    return JsonResponse({'success': True, **data})


@require_http_methods(["POST"])
@api_login_required
@api_view
def assign_self(request, conversation_id):
    conversation = ConversationService.assign_self(request.user, conversation_id)
    return JsonResponse({'success': True, 'conversation': serialize_conversation(conversation)})


@require_http_methods(["POST"])
@api_login_required
@api_view
def update_status(request, conversation_id):
    form = ConversationStatusForm(get_request_data(request))
    if not form.is_valid():
        raise form_errors(form)
    conversation = ConversationService.update_status(request.user, conversation_id, form.cleaned_data['status'])
    return JsonResponse({'success': True, 'status': conversation.status})
