from datetime import date
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.shortcuts import get_object_or_404
from django.utils import timezone
from erp.core.utils import create_audit_log, parse_date, parse_year
from erp.finance.serializers import AccountPayableSerializer, AccountReceivableSerializer
from .models import CalendarEvent
from .serializers import CalendarEventSerializer
from .services import build_agenda, month_bounds, monthly_financial_alerts

MAX_AGENDA_DAYS = 366


def year_month_params(request):
    """``year``/``month`` query parameters, defaulting to the current month"""
    today = timezone.localdate()
    year = parse_year(request.query_params.get('year'), today.year)
    month = int(request.query_params.get('month') or today.month)
    if not 1 <= month <= 12:
        raise ValueError('month must be between 1 and 12')
    return year, month


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def event_list_create(request):
    """List calendar events (optionally within start_date..end_date) or create one"""
    if request.method == 'GET':
        queryset = CalendarEvent.objects.select_related('customer', 'project')
        start_date = parse_date(request.query_params.get('start_date'))
        end_date = parse_date(request.query_params.get('end_date'))
        if start_date:
            queryset = queryset.filter(end_date__date__gte=start_date)
        if end_date:
            queryset = queryset.filter(start_date__date__lte=end_date)
        event_type = request.query_params.get('event_type')
        if event_type:
            queryset = queryset.filter(event_type=event_type)
        return Response(CalendarEventSerializer(queryset.order_by('start_date'), many=True).data)
    else:
        serializer = CalendarEventSerializer(data=request.data)
        if serializer.is_valid():
            event = serializer.save(created_by=request.user)
            create_audit_log(request=request, action='create', model_name='CalendarEvent',
                             object_id=event.id, object_name=event.title)
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def event_detail(request, pk):
    """Retrieve, update or delete a calendar event"""
    event = get_object_or_404(CalendarEvent, pk=pk)

    if request.method == 'GET':
        return Response(CalendarEventSerializer(event).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = CalendarEventSerializer(event, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        create_audit_log(request=request, action='delete', model_name='CalendarEvent',
                         object_id=event.id, object_name=event.title)
        event.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def agenda(request):
    """Events, task deadlines, payables, receivables and recurring expenses for a date range.

    The range defaults to the current month.
    """
    today = timezone.localdate()
    default_start, default_end = month_bounds(today.year, today.month)
    start = parse_date(request.query_params.get('start_date'), default_start)
    end = parse_date(request.query_params.get('end_date'), default_end)
    if end < start:
        return Response({'error': 'end_date cannot be before start_date'}, status=status.HTTP_400_BAD_REQUEST)
    if end == date.max:
        return Response({'error': 'end_date is out of range'}, status=status.HTTP_400_BAD_REQUEST)
    if (end - start).days > MAX_AGENDA_DAYS:
        return Response({'error': f'The agenda covers at most {MAX_AGENDA_DAYS} days'}, status=status.HTTP_400_BAD_REQUEST)
    return Response(build_agenda(start, end))


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def financial_alerts(request):
    """Pending payables and receivables due in the requested month"""
    try:
        year, month = year_month_params(request)
    except ValueError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    payables, receivables = monthly_financial_alerts(year, month)
    return Response({
        'year': year,
        'month': month,
        'payables': AccountPayableSerializer(payables, many=True).data,
        'receivables': AccountReceivableSerializer(receivables, many=True).data,
    })
