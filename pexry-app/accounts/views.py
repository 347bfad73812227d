"""
Vues JSON du module comptes : profil, portefeuille USDT et agents support
"""
from django.http import JsonResponse
from django.shortcuts import get_object_or_404
from django.views.decorators.http import require_http_methods

from project.api import (
    api_login_required, api_view, form_errors, get_int_param, get_request_data,
    paginate, super_admin_required, MAX_PAGE_SIZE,
)
from .forms import AvailabilityForm, UserAgentForm, UserAgentUpdateForm, WalletForm
from .models import Profile, UserAgent
from .services import UserAgentService, get_agent_record, is_agent, serialize_agent


def serialize_profile(profile):
    return {
        'id': profile.user_id,
        'username': profile.user.username,
        'email': profile.user.email,
        'display_name': profile.display_name,
        'roles': profile.roles,
        'usdt_wallet_address': profile.usdt_wallet_address,
        'usdt_network': profile.usdt_network,
        'available_for_withdrawal': str(profile.available_for_withdrawal),
        'balance_on_hold': str(profile.balance_on_hold),
    }


@require_http_methods(["GET", "POST"])
@api_login_required
@api_view
def my_profile(request):
    """Lecture et mise à jour du profil (adresse de retrait USDT)"""
    profile, _ = Profile.objects.select_related('user').get_or_create(user=request.user)
    if request.method == 'POST':
        form = WalletForm(get_request_data(request), instance=profile)
        if not form.is_valid():
            raise form_errors(form)
        profile = form.save()
    return JsonResponse({'success': True, 'profile': serialize_profile(profile)})


@require_http_methods(["GET"])
@super_admin_required
@api_view
def agent_list(request):
    agents = UserAgent.objects.all()
    status = request.GET.get('status')
    if status:
        agents = agents.filter(status=status)
    page = get_int_param(request.GET, 'page', 1, minimum=1)
    limit = get_int_param(request.GET, 'limit', 20, minimum=1, maximum=MAX_PAGE_SIZE)
    data = paginate(agents, page, limit, serializer=serialize_agent)
    return JsonResponse({'success': True, **data})


@require_http_methods(["POST"])
@super_admin_required
@api_view
def agent_create(request):
    form = UserAgentForm(get_request_data(request))
    if not form.is_valid():
        raise form_errors(form)
    data = dict(form.cleaned_data)
    password = data.pop('password', None) or None
    agent = UserAgentService.create_agent(data, password=password)
    return JsonResponse({'success': True, 'agent': serialize_agent(agent)}, status=201)


@require_http_methods(["POST"])
@super_admin_required
@api_view
def agent_update(request, agent_id):
    agent = get_object_or_404(UserAgent, id=agent_id)
    form = UserAgentUpdateForm(get_request_data(request), instance=agent)
    if not form.is_valid():
        raise form_errors(form)
    agent = UserAgentService.update_agent(agent, form.cleaned_data)
    return JsonResponse({'success': True, 'agent': serialize_agent(agent)})


@require_http_methods(["POST"])
@super_admin_required
@api_view
def agent_delete(request, agent_id):
    agent = get_object_or_404(UserAgent, id=agent_id)
    UserAgentService.delete_agent(agent)
    return JsonResponse({'success': True})


@require_http_methods(["GET"])
@api_login_required
@api_view
def available_agents(request):
    agents = UserAgentService.get_available_agents()
    return JsonResponse({'success': True, 'agents': [serialize_agent(a) for a in agents]})


@require_http_methods(["POST"])
@api_login_required
@api_view
def update_availability(request):
    form = AvailabilityForm(get_request_data(request))
    if not form.is_valid():
        raise form_errors(form)
    agent = UserAgentService.update_availability(request.user, form.cleaned_data['availability'])
    return JsonResponse({'success': True, 'agent': serialize_agent(agent)})


@require_http_methods(["GET"])
@api_login_required
@api_view
def current_agent(request):
    if not is_agent(request.user):
        raise PermissionError('Only user agents can access this resource')
    agent = get_agent_record(request.user)
    if agent is None:
        raise UserAgent.DoesNotExist('Agent record not found')
    return JsonResponse({'success': True, 'agent': serialize_agent(agent)})
