from django.conf import settings
from django.http import HttpResponse, JsonResponse
from django.views.decorators.http import require_http_methods

from core.auth import admin_required
from core.http import json_view, read_json
from core.shortcuts import get_object

from . import services
from .models import Card, Category, Service
from .serializers import CardSerializer, CategorySerializer, ServiceSerializer


def _cards():
    return Card.objects.select_related('category')


@require_http_methods(["GET"])
@json_view
def list_cards(request):
    cards = _cards().browse(
        category=request.GET.get('category'),
        rarity=request.GET.get('rarity'),
        q=request.GET.get('q'),
    )
    return JsonResponse({'results': CardSerializer(cards, many=True).data})


@require_http_methods(["GET"])
@json_view
def featured_cards(request):
    cards = _cards().featured()[:settings.FEATURED_CARDS_LIMIT]
    return JsonResponse({'results': CardSerializer(cards, many=True).data})


@require_http_methods(["GET"])
@json_view
def get_card(request, card_id):
    card = get_object(_cards(), card_id, 'Card not found')
    return JsonResponse(CardSerializer(card).data)


@require_http_methods(["GET"])
@json_view
def list_categories(request):
    return JsonResponse({'results': CategorySerializer(Category.objects.all(), many=True).data})


@require_http_methods(["GET"])
@json_view
def list_services(request):
    available = Service.objects.filter(available=True)
    return JsonResponse({'results': ServiceSerializer(available, many=True).data})


@require_http_methods(["GET"])
@json_view
def contact(request):
    return JsonResponse(services.contact_settings())


@require_http_methods(["GET"])
@json_view
def storefront_config(request):
    return JsonResponse({
        'currency': settings.DEFAULT_CURRENCY,
        'currency_symbol': settings.CURRENCY_SYMBOL,
        'promo_validation_debounce_ms': settings.PROMO_VALIDATION_DEBOUNCE_MS,
    })


# Back-office

@require_http_methods(["GET", "POST"])
@json_view
@admin_required
def manage_cards(request):
    if request.method == 'POST':
        card = services.create_card(read_json(request))
        return JsonResponse(CardSerializer(card).data, status=201)
    return JsonResponse({'results': CardSerializer(_cards(), many=True).data})


@require_http_methods(["GET", "PATCH", "DELETE"])
@json_view
@admin_required
def manage_card(request, card_id):
    if request.method == 'PATCH':
        services.update_card(card_id, read_json(request))
    elif request.method == 'DELETE':
        services.delete_card(card_id)
        return HttpResponse(status=204)
    return JsonResponse(CardSerializer(get_object(_cards(), card_id)).data)


@require_http_methods(["POST"])
@json_view
@admin_required
def toggle_card(request, card_id):
    card = services.toggle_availability(Card, card_id)
    return JsonResponse({'id': card.id, 'available': card.available})


@require_http_methods(["GET", "POST"])
@json_view
@admin_required
def manage_categories(request):
    if request.method == 'POST':
        category = services.create_category(read_json(request))
        return JsonResponse(CategorySerializer(category).data, status=201)
    return JsonResponse({'results': CategorySerializer(Category.objects.all(), many=True).data})


@require_http_methods(["PATCH", "DELETE"])
@json_view
@admin_required
def manage_category(request, category_id):
    if request.method == 'DELETE':
        services.delete_category(category_id)
        return HttpResponse(status=204)
    category = services.update_category(category_id, read_json(request))
    return JsonResponse(CategorySerializer(category).data)


@require_http_methods(["GET", "POST"])
@json_view
@admin_required
def manage_services(request):
    if request.method == 'POST':
        service = services.create_service(read_json(request))
        return JsonResponse(ServiceSerializer(service).data, status=201)
    return JsonResponse({'results': ServiceSerializer(Service.objects.all(), many=True).data})


@require_http_methods(["GET", "PATCH", "DELETE"])
@json_view
@admin_required
def manage_service(request, service_id):
    if request.method == 'PATCH':
        service = services.update_service(service_id, read_json(request))
    elif request.method == 'DELETE':
        services.delete_service(service_id)
        return HttpResponse(status=204)
    else:
        service = get_object(Service, service_id)
    return JsonResponse(ServiceSerializer(service).data)


@require_http_methods(["POST"])
@json_view
@admin_required
def toggle_service(request, service_id):
    service = services.toggle_availability(Service, service_id)
    return JsonResponse({'id': service.id, 'available': service.available})


@require_http_methods(["GET", "PATCH"])
@json_view
@admin_required
def manage_contact(request):
    if request.method == 'PATCH':
        return JsonResponse(services.update_contact_settings(read_json(request)))
    return JsonResponse(services.contact_settings())


@require_http_methods(["GET"])
@json_view
@admin_required
def dashboard(request):
    return JsonResponse(services.dashboard_stats())
