"""
Utilitaires communs pour les vues JSON de l'API Pexry
Lecture du corps de requête, pagination et traduction des exceptions en réponses HTTP
"""
import json
import logging
from functools import wraps

from django.core.exceptions import ObjectDoesNotExist, PermissionDenied, ValidationError
from django.core.paginator import Paginator
from django.http import Http404, JsonResponse

from .exceptions import ServiceError

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


def get_request_data(request):
    """
    Retourne les données envoyées par le client (JSON ou formulaire)
    Lève ValidationError si le JSON est invalide
    """
    if request.content_type == 'application/json':
        if not request.body:
            return {}
        try:
            data = json.loads(request.body)
        except (json.JSONDecodeError, UnicodeDecodeError):
            raise ValidationError('Invalid JSON')
        if not isinstance(data, dict):
            raise ValidationError('Invalid JSON')
        return data
    return request.POST


def get_int_param(params, name, default, minimum=None, maximum=None):
    """Lit un entier borné dans les paramètres de requête"""
    raw = params.get(name)
    if raw in (None, ''):
        return default
    try:
        value = int(raw)
    except (TypeError, ValueError):
        raise ValidationError(f'{name} must be an integer')
    if minimum is not None and value < minimum:
        raise ValidationError(f'{name} must be >= {minimum}')
    if maximum is not None and value > maximum:
        raise ValidationError(f'{name} must be <= {maximum}')
    return value


def get_bool_param(params, name, default=False):
    raw = params.get(name)
    if raw is None:
        return default
    if isinstance(raw, bool):
        return raw
    return str(raw).strip().lower() in ('1', 'true', 'yes', 'on')


def paginate(queryset, page=1, limit=DEFAULT_PAGE_SIZE, serializer=None):
    """
    Découpe un queryset en page et retourne le dictionnaire de réponse
    Une page hors limites retourne la dernière page disponible
    """
    paginator = Paginator(queryset, limit)
    page_obj = paginator.get_page(page)
    items = list(page_obj.object_list)
    if serializer is not None:
        items = [serializer(item) for item in items]
    return {
        'results': items,
        'total': paginator.count,
        'page': page_obj.number,
        'limit': limit,
        'total_pages': paginator.num_pages,
        'has_next': page_obj.has_next(),
        'has_previous': page_obj.has_previous(),
    }


def error_response(message, status, **extra):
    payload = {'success': False, 'error': message}
    payload.update(extra)
    return JsonResponse(payload, status=status)


def api_login_required(view_func):
    """Comme login_required, mais répond 401 en JSON au lieu de rediriger"""
    @wraps(view_func)
    def wrapper(request, *args, **kwargs):
        if not request.user.is_authenticated:
            return error_response('Authentication required', 401)
        return view_func(request, *args, **kwargs)
    return wrapper


def super_admin_required(view_func):
    """Réservé aux super administrateurs (is_superuser)"""
    @wraps(view_func)
    @api_login_required
    def wrapper(request, *args, **kwargs):
        if not request.user.is_superuser:
            return error_response('Super admin access required', 403)
        return view_func(request, *args, **kwargs)
    return wrapper


def api_view(view_func):
    """
    Traduit les exceptions levées par les services en réponses JSON

    Http404 / ObjectDoesNotExist -> 404
    PermissionError / PermissionDenied -> 403
    ValidationError -> 400
    ServiceError -> code porté par l'exception (409, 500, 504...)
    Toute autre exception -> 500 (journalisée)
    """
    @wraps(view_func)
    def wrapper(request, *args, **kwargs):
        try:
            return view_func(request, *args, **kwargs)
        except (Http404, ObjectDoesNotExist) as e:
            message = str(e) or 'Not found'
            if isinstance(e, ObjectDoesNotExist) and 'matching query does not exist' in message:
                message = 'Not found'
            return error_response(message, 404)
        except (PermissionError, PermissionDenied) as e:
            return error_response(str(e) or 'Forbidden', 403)
        except ValidationError as e:
            if hasattr(e, 'error_dict'):
                return error_response('Invalid input', 400, errors=e.message_dict)
            return error_response('; '.join(e.messages), 400)
        except ServiceError as e:
            if e.status_code >= 500:
                logger.error(f"{view_func.__name__}: {e.message}")
            return error_response(e.message, e.status_code)
        except Exception as e:
            logger.exception(f"Erreur dans {view_func.__name__}: {str(e)}")
            return error_response('An unexpected error occurred', 500)
    return wrapper


def form_errors(form):
    """Convertit les erreurs d'un formulaire Django en ValidationError"""
    return ValidationError({field: [str(m) for m in messages] for field, messages in form.errors.items()})
