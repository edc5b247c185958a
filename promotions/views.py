from django.http import HttpResponse, JsonResponse
from django.utils import timezone
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods

from catalog.services import catalog_item
from core.auth import admin_required
from core.http import json_view, parse_id, read_json
from core.shortcuts import get_object

from . import services
from .models import PromoCode, normalize_code
from .pricing import coerce_quantity, order_total
from .serializers import PromoCodeSerializer


def promo_status(code, promo):
    if not normalize_code(code):
        return 'empty'
    return 'valid' if promo else 'invalid'


@csrf_exempt
@require_http_methods(["GET", "POST"])
@json_view
def validate_code(request):
    if request.method == 'POST':
        code = read_json(request).get('code')
    else:
        code = request.GET.get('code')
    if code is not None and not isinstance(code, str):
        code = str(code)

    promo = PromoCode.objects.validate(code, timezone.now())
    return JsonResponse({
        'code': normalize_code(code),
        'status': promo_status(code, promo),
        'valid': promo is not None,
        'discount_percent': promo.discount_percent if promo else None,
    })


@csrf_exempt
@require_http_methods(["POST"])
@json_view
def quote(request):
    data = read_json(request)
    item = catalog_item(data.get('item_type', 'card'), parse_id(data.get('item_id')))
    quantity = coerce_quantity(data.get('quantity'))
    code = data.get('promo_code')
    if not isinstance(code, str):
        code = None
    promo = PromoCode.objects.validate(code, timezone.now())

    breakdown = order_total(item.unit_price, quantity, promo.discount_percent if promo else 0)
    return JsonResponse({
        'item': item.model_dump(),
        'quantity': quantity,
        'promo_status': promo_status(code, promo),
        'promo': {'code': promo.code, 'discount_percent': promo.discount_percent} if promo else None,
        **breakdown._asdict(),
    })


# Back-office

@require_http_methods(["GET", "POST"])
@json_view
@admin_required
def manage_promo_codes(request):
    if request.method == 'POST':
        promo = services.create_promo_code(read_json(request))
        return JsonResponse(PromoCodeSerializer(promo).data, status=201)
    promos = PromoCode.objects.search(request.GET.get('q'))
    serializer = PromoCodeSerializer(promos, many=True, context={'now': timezone.now()})
    return JsonResponse({'results': serializer.data})


@require_http_methods(["GET"])
@json_view
@admin_required
def promo_code_stats(request):
    return JsonResponse(services.promo_code_stats())


@require_http_methods(["GET", "PATCH", "DELETE"])
@json_view
@admin_required
def manage_promo_code(request, promo_id):
    if request.method == 'PATCH':
        promo = services.update_promo_code(promo_id, read_json(request))
    elif request.method == 'DELETE':
        services.delete_promo_code(promo_id)
        return HttpResponse(status=204)
    else:
        promo = get_object(PromoCode, promo_id, 'Promo code not found')
    return JsonResponse(PromoCodeSerializer(promo).data)


@require_http_methods(["POST"])
@json_view
@admin_required
def toggle_promo_code(request, promo_id):
    promo = services.toggle_promo_code(promo_id)
    return JsonResponse(PromoCodeSerializer(promo).data)
