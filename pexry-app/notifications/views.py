"""
Vues JSON des notifications (toujours limitées à l'utilisateur connecté)
"""
from django.conf import settings
from django.core.exceptions import ValidationError
from django.http import Http404, JsonResponse
from django.utils import timezone
from django.views.decorators.http import require_http_methods

from project.api import (
    api_login_required, api_view, get_bool_param, get_int_param, get_request_data, paginate,
    MAX_PAGE_SIZE,
)
from .models import Notification
from .services import NotificationService

TYPE_VALUES = [value for value, _ in Notification.TYPE_CHOICES]


def serialize_notification(notification):
    return {
        'id': notification.id,
        'type': notification.type,
        'priority': notification.priority,
        'title': notification.title,
        'message': notification.message,
        'read': notification.read,
        'action_url': notification.action_url,
        'metadata': notification.metadata,
        'created_at': notification.created_at.isoformat(),
    }


def _get_own_notification(user, notification_id):
    notification = Notification.objects.filter(id=notification_id, user=user).first()
    if notification is None:
        raise Http404('Notification not found or access denied')
    return notification


@require_http_methods(["GET"])
@api_login_required
@api_view
def notification_list(request):
    params = request.GET
    notifications = Notification.objects.filter(user=request.user)
    if get_bool_param(params, 'unread_only'):
        notifications = notifications.filter(read=False)
    type_ = params.get('type')
    if type_:
        if type_ not in TYPE_VALUES:
            raise ValidationError(f'type must be one of {", ".join(TYPE_VALUES)}')
        notifications = notifications.filter(type=type_)

    page = get_int_param(params, 'page', 1, minimum=1)
    limit = get_int_param(params, 'limit', 20, minimum=1, maximum=MAX_PAGE_SIZE)
    data = paginate(notifications.order_by('-created_at', '-id'), page, limit, serializer=serialize_notification)
    return JsonResponse({'success': True, **data})


@require_http_methods(["GET"])
@api_login_required
def unread_count(request):
    count = Notification.objects.filter(user=request.user, read=False).count()
    return JsonResponse({'success': True, 'count': count})


@require_http_methods(["POST"])
@api_login_required
@api_view
def mark_as_read(request, notification_id):
    notification = _get_own_notification(request.user, notification_id)
    notification.mark_as_read()
    return JsonResponse({'success': True})


@require_http_methods(["POST"])
@api_login_required
def mark_all_as_read(request):
    updated = Notification.objects.filter(user=request.user, read=False).update(
        read=True, read_at=timezone.now(), updated_at=timezone.now())
    return JsonResponse({'success': True, 'updated': updated})


@require_http_methods(["POST"])
@api_login_required
@api_view
def delete_notification(request, notification_id):
    notification = _get_own_notification(request.user, notification_id)
    notification.delete()
    return JsonResponse({'success': True})


@require_http_methods(["POST"])
@api_login_required
@api_view
def create_test_notification(request):
    """Notification de test : disponible en DEBUG ou pour un super admin"""
    if not (settings.DEBUG or request.user.is_superuser):
        raise PermissionError('Test notifications are disabled')
    data = get_request_data(request)
    type_ = data.get('type') or Notification.GENERAL
    if type_ not in TYPE_VALUES:
        raise ValidationError(f'type must be one of {", ".join(TYPE_VALUES)}')
    notification = NotificationService.create_notification(
        user_id=request.user.id,
        title=data.get('title') or 'Test Notification',
        message=data.get('message') or 'This is a test notification to verify the system is working.',
        type=type_,
        metadata={'test': True},
    )
    return JsonResponse({'success': True, 'notification': serialize_notification(notification)}, status=201)
