import logging

from django.db import IntegrityError, transaction
from django.db.models import Count, Q, Sum
from django.utils import timezone

from core.errors import DuplicateError
from core.schemas import apply_changes, merge, parse
from core.shortcuts import get_object

from .models import PromoCode
from .schemas import PromoCodeInsert

logger = logging.getLogger(__name__)


def _check_unique(code, exclude_id=None):
    clash = PromoCode.objects.filter(code=code)
    if exclude_id is not None:
        clash = clash.exclude(pk=exclude_id)
    if clash.exists():
        raise DuplicateError(f'Promo code {code} already exists')


def create_promo_code(data):
    promo = parse(PromoCodeInsert, data)
    _check_unique(promo.code)
    try:
        with transaction.atomic():
            obj = PromoCode.objects.create(**promo.model_dump(), usage_count=0)
    except IntegrityError:
        raise DuplicateError(f'Promo code {promo.code} already exists')
    logger.info('Created promo code %s (%d%% off)', obj.code, obj.discount_percent)
    return obj


def update_promo_code(promo_id, changes):
    obj = get_object(PromoCode, promo_id, 'Promo code not found')
    promo = merge(obj, PromoCodeInsert, changes)
    if promo.code != obj.code:
        _check_unique(promo.code, exclude_id=obj.id)
    fields = apply_changes(obj, promo, changes)
    if fields:
        try:
            with transaction.atomic():
                obj.save(update_fields=fields + ['updated_at'])
        except IntegrityError:
            raise DuplicateError(f'Promo code {promo.code} already exists')
        logger.info('Updated promo code %s (%s)', obj.code, ', '.join(fields))
    return obj


def toggle_promo_code(promo_id):
    obj = get_object(PromoCode, promo_id, 'Promo code not found')
    obj.active = not obj.active
    obj.save(update_fields=['active', 'updated_at'])
    logger.info('Promo code %s %s', obj.code, 'activated' if obj.active else 'deactivated')
    return obj


def delete_promo_code(promo_id):
    obj = get_object(PromoCode, promo_id, 'Promo code not found')
    code = obj.code
    obj.delete()
    logger.info('Deleted promo code %s', code)


def promo_code_stats(now=None):
    now = now or timezone.now()
    stats = PromoCode.objects.aggregate(
        total=Count('id'),
        active=Count('id', filter=Q(active=True)),
        total_usage=Sum('usage_count'),
    )
    return {
        'total': stats['total'],
        'active': stats['active'],
        'total_usage': stats['total_usage'] or 0,
        'expired': PromoCode.objects.expired(now).count(),
    }
