from django.http import HttpResponse, JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods

from core.auth import admin_required
from core.errors import ValidationError
from core.http import json_view, read_json
from core.shortcuts import get_object

from . import services
from .models import BookingRequest
from .serializers import BookingReceiptSerializer, BookingRequestSerializer


@csrf_exempt
@require_http_methods(["POST"])
@json_view
def create_booking(request):
    booking = services.submit_booking_request(read_json(request))
    return JsonResponse({
        **BookingReceiptSerializer(booking).data,
        'message': 'Booking request submitted. Our team will contact you shortly.',
    }, status=201)


# Back-office

@require_http_methods(["GET"])
@json_view
@admin_required
def list_bookings(request):
    bookings = services.list_booking_requests(request.GET.get('status'))
    return JsonResponse({'results': BookingRequestSerializer(bookings, many=True).data})


@require_http_methods(["GET"])
@json_view
@admin_required
def booking_stats(request):
    return JsonResponse(BookingRequest.objects.status_counts())


@require_http_methods(["GET", "DELETE"])
@json_view
@admin_required
def manage_booking(request, booking_id):
    if request.method == 'DELETE':
        services.delete_booking_request(booking_id)
        return HttpResponse(status=204)
    booking = get_object(BookingRequest, booking_id, 'Booking request not found')
    return JsonResponse(BookingRequestSerializer(booking).data)


@require_http_methods(["POST", "PATCH"])
@json_view
@admin_required
def update_booking_status(request, booking_id):
    status = read_json(request).get('status')
    if not isinstance(status, str) or not status:
        raise ValidationError('Invalid input', errors={'status': 'This field is required'})
    booking = services.change_status(booking_id, status)
    return JsonResponse(BookingRequestSerializer(booking).data)
