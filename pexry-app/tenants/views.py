"""
Vues JSON des boutiques
"""
import logging

from django.http import Http404, JsonResponse
from django.shortcuts import get_object_or_404
from django.views.decorators.http import require_http_methods

from project.api import api_login_required, api_view, form_errors, get_request_data
from .forms import TenantForm
from .models import Tenant

logger = logging.getLogger(__name__)


def serialize_tenant(tenant):
    return {
        'id': tenant.id,
        'name': tenant.name,
        'slug': tenant.slug,
        'image': tenant.image.url if tenant.image else None,
        'owner_id': tenant.owner_id,
        'created_at': tenant.created_at.isoformat(),
    }


@require_http_methods(["GET"])
@api_view
def tenant_detail(request, slug):
    tenant = Tenant.objects.filter(slug=slug).first()
    if tenant is None:
        raise Http404('Shop not found')
    return JsonResponse({'success': True, 'tenant': serialize_tenant(tenant)})


@require_http_methods(["POST"])
@api_login_required
@api_view
def tenant_update(request, tenant_id):
    """Mise à jour du nom / de l'image : propriétaire ou super admin uniquement"""
    tenant = get_object_or_404(Tenant, id=tenant_id)
    if not tenant.can_be_edited_by(request.user):
        raise PermissionError('You do not have permission to update this shop')

    data = dict(get_request_data(request).items())
    data.setdefault('name', tenant.name)
    form = TenantForm(data, request.FILES or None, instance=tenant)
    if not form.is_valid():
        raise form_errors(form)
    tenant = form.save()
    logger.info(f"Boutique {tenant.slug} mise à jour par {request.user.username}")
    return JsonResponse({'success': True, 'tenant': serialize_tenant(tenant)})
