import logging

from django.db import IntegrityError, transaction
from django.db.models import Count, Q

from core.errors import DuplicateError, NotFoundError, ValidationError
from core.schemas import apply_changes, merge, parse
from core.shortcuts import get_object

from .models import Card, Category, ContactSetting, Service
from .schemas import CardInsert, CatalogItem, CategoryInsert, ServiceInsert

logger = logging.getLogger(__name__)


def _check_category(category_id):
    if category_id is not None and not Category.objects.filter(pk=category_id).exists():
        raise ValidationError('Unknown category', errors={'category_id': 'Category does not exist'})


def _save(instance, fields):
    if fields:
        instance.save(update_fields=fields + ['updated_at'])
    return instance


# Categories

def _check_category_name(name, exclude_id=None):
    clash = Category.objects.filter(name__iexact=name)
    if exclude_id is not None:
        clash = clash.exclude(pk=exclude_id)
    if clash.exists():
        raise DuplicateError('Category already exists')


def create_category(data):
    category = parse(CategoryInsert, data)
    _check_category_name(category.name)
    try:
        with transaction.atomic():
            obj = Category.objects.create(name=category.name)
    except IntegrityError:
        raise DuplicateError('Category already exists')
    logger.info('Created category %s (%s)', obj.id, obj.name)
    return obj


def update_category(category_id, changes):
    obj = get_object(Category, category_id)
    category = merge(obj, CategoryInsert, changes)
    if category.name != obj.name:
        _check_category_name(category.name, exclude_id=obj.id)
    fields = apply_changes(obj, category, changes)
    try:
        with transaction.atomic():
            _save(obj, fields)
    except IntegrityError:
        raise DuplicateError('Category already exists')
    logger.info('Updated category %s', obj.id)
    return obj


def delete_category(category_id):
    obj = get_object(Category, category_id)
    orphaned = obj.cards.count()
    obj.delete()
    logger.info('Deleted category %s; %d cards left uncategorised', category_id, orphaned)


# Cards

def create_card(data):
    card = parse(CardInsert, data)
    _check_category(card.category_id)
    obj = Card.objects.create(**card.model_dump())
    logger.info('Created card %s (%s)', obj.id, obj.name)
    return obj


def update_card(card_id, changes):
    obj = get_object(Card, card_id)
    card = merge(obj, CardInsert, changes)
    if card.category_id != obj.category_id:
        _check_category(card.category_id)
    _save(obj, apply_changes(obj, card, changes))
    logger.info('Updated card %s', obj.id)
    return obj


def delete_card(card_id):
    obj = get_object(Card, card_id)
    obj.delete()
    logger.info('Deleted card %s', card_id)


# Services

def create_service(data):
    service = parse(ServiceInsert, data)
    obj = Service.objects.create(**service.model_dump())
    logger.info('Created service %s (%s)', obj.id, obj.name)
    return obj


def update_service(service_id, changes):
    obj = get_object(Service, service_id)
    service = merge(obj, ServiceInsert, changes)
    _save(obj, apply_changes(obj, service, changes))
    logger.info('Updated service %s', obj.id)
    return obj


def delete_service(service_id):
    obj = get_object(Service, service_id)
    obj.delete()
    logger.info('Deleted service %s', service_id)


def toggle_availability(model, pk):
    obj = get_object(model, pk)
    obj.available = not obj.available
    obj.save(update_fields=['available', 'updated_at'])
    logger.info('%s %s availability set to %s', model.__name__, obj.id, obj.available)
    return obj


# Contact settings

def contact_settings():
    return dict(ContactSetting.objects.values_list('key', 'value'))


def update_contact_settings(changes):
    known = set(ContactSetting.objects.values_list('key', flat=True))
    unknown = sorted(set(changes) - known)
    if unknown:
        raise NotFoundError(f"Unknown contact setting: {', '.join(unknown)}")
    bad = {key: 'Must be a string' for key, value in changes.items() if not isinstance(value, str)}
    if bad:
        raise ValidationError('Invalid input', errors=bad)

    current = contact_settings()
    with transaction.atomic():
        for key, value in changes.items():
            if current.get(key) == value:
                continue
            setting = ContactSetting.objects.get(key=key)
            setting.value = value
            setting.save(update_fields=['value', 'updated_at'])
            logger.info('Updated contact setting %s', key)
    return contact_settings()


# Booking support

def catalog_item(item_type, item_id):
    """Snapshot of a bookable card or service, priced as it is right now."""
    if item_type == 'card':
        card = get_object(Card, item_id, 'Card not found')
        return CatalogItem(
            item_type='card', item_id=card.id, name=card.name,
            unit_price=card.price, available=card.available,
        )
    if item_type == 'service':
        service = get_object(Service, item_id, 'Service not found')
        if not service.is_priced():
            raise ValidationError(
                'This service is priced on request',
                errors={'item_id': 'Service has no price and cannot be booked online'},
            )
        return CatalogItem(
            item_type='service', item_id=service.id, name=service.name,
            unit_price=service.price, available=service.available,
        )
    raise ValidationError('Invalid input', errors={'item_type': "Must be 'card' or 'service'"})


def dashboard_stats():
    cards = Card.objects.aggregate(
        total=Count('id'),
        available=Count('id', filter=Q(available=True)),
        out_of_stock=Count('id', filter=Q(available=False)),
    )
    return {
        'total_cards': cards['total'],
        'categories': Category.objects.count(),
        'available': cards['available'],
        'out_of_stock': cards['out_of_stock'],
    }
