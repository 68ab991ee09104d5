"""Request helpers shared by every app: audit logging, pagination, query parsing"""
import csv
import logging
from datetime import datetime

from django.core.paginator import Paginator
from django.http import HttpResponse

from .models import AuditLog

logger = logging.getLogger(__name__)


def get_client_ip(request):
    """Extract client IP address from request"""
    if not request or not hasattr(request, 'META'):
        return None
    forwarded = request.META.get('HTTP_X_FORWARDED_FOR')
    if forwarded:
        return forwarded.split(',')[0].strip() or None
    return request.META.get('REMOTE_ADDR') or None


def create_audit_log(request=None, action=None, model_name=None, object_id=None,
                     changes=None, user=None, object_name=None, object_reference=None):
    """
    Create an audit log entry

    Args:
        request: DRF/Django request (for user and IP) - optional if user is provided
        action: Action type (create, update, delete, status_change, ...)
        model_name: Name of the model being acted upon
        object_id: ID of the object
        changes: Dictionary of changes made
        user: Explicit acting user; wins over request.user
        object_name: Human-readable name of the object (customer name, budget title)
        object_reference: Reference identifier (order number, budget number)
    """
    if not action or not model_name or object_id in (None, ''):
        logger.warning(
            "Audit log creation skipped: missing required fields (action=%s, model_name=%s, object_id=%s)",
            action, model_name, object_id,
        )
        return None

    audit_user = user
    if audit_user is None and request is not None:
        audit_user = getattr(request, 'user', None)
    if audit_user is not None and not audit_user.is_authenticated:
        audit_user = None

    try:
        return AuditLog.objects.create(
            user=audit_user,
            action=action,
            model_name=model_name,
            object_id=str(object_id),
            object_name=object_name,
            object_reference=object_reference,
            changes=changes or {},
            ip_address=get_client_ip(request),
        )
    except Exception:
        # The business operation already succeeded; a lost audit row is only logged
        logger.exception("Failed to create audit log for %s #%s", model_name, object_id)
        return None


def paginate(request, queryset, serializer_class, default_limit=15, context=None):
    """Serialize one page of ``queryset`` into the list envelope used by every ledger endpoint"""
    try:
        page = max(int(request.query_params.get('page', 1)), 1)
        limit = max(int(request.query_params.get('limit', default_limit)), 1)
    except (TypeError, ValueError):
        page, limit = 1, default_limit

    paginator = Paginator(queryset, limit)
    page_obj = paginator.get_page(page)
    serializer = serializer_class(page_obj, many=True, context=context or {})
    return {
        'results': serializer.data,
        'count': paginator.count,
        'next': page_obj.next_page_number() if page_obj.has_next() else None,
        'previous': page_obj.previous_page_number() if page_obj.has_previous() else None,
        'page': page_obj.number,
        'page_size': limit,
        'total_pages': paginator.num_pages,
    }


def parse_date(value, default=None):
    """Parse a YYYY-MM-DD query parameter, falling back to ``default`` when absent or malformed"""
    if not value or not isinstance(value, str):
        return default
    try:
        return datetime.strptime(value[:10], '%Y-%m-%d').date()
    except ValueError:
        return default


def parse_year(value, default):
    """Parse a ``year`` query parameter; raises ValueError outside 1..9999"""
    try:
        year = int(value or default)
    except (TypeError, ValueError):
        raise ValueError('year must be an integer')
    if not 1 <= year <= 9999:
        raise ValueError('year must be between 1 and 9999')
    return year


def csv_response(filename, header, rows):
    """Attachment response with ``header`` followed by ``rows``; the BOM keeps accents intact in spreadsheets"""
    response = HttpResponse(content_type='text/csv; charset=utf-8')
    response['Content-Disposition'] = f'attachment; filename="{filename}"'
    response.write('\ufeff')
    writer = csv.writer(response)
    writer.writerow(header)
    for row in rows:
        writer.writerow(row)
    return response
