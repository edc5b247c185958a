import logging

from django.db import transaction
from django.utils import timezone

from catalog.services import catalog_item
from core.errors import ValidationError
from core.schemas import parse
from core.shortcuts import get_object
from promotions.models import PromoCode, normalize_code
from promotions.pricing import order_total
from promotions.schemas import PromoSnapshot

from .models import BookingRequest
from .schemas import BookingRequestInsert, BookingSubmission

logger = logging.getLogger(__name__)


def create_booking_request(insert):
    """Persist a booking from already-priced snapshots. Always starts ``pending``."""
    if not isinstance(insert, BookingRequestInsert):
        insert = parse(BookingRequestInsert, insert)

    booking = BookingRequest.objects.create(
        item_type=insert.item.item_type,
        item_id=insert.item.item_id,
        item_name=insert.item.name,
        unit_price=insert.item.unit_price,
        full_name=insert.full_name,
        phone=insert.phone,
        email=insert.email,
        quantity=insert.quantity,
        message=insert.message or '',
        promo_code=insert.promo.code if insert.promo else None,
        discount_percent=insert.promo.discount_percent if insert.promo else None,
        final_price=insert.final_price,
        status=BookingRequest.PENDING,
    )
    logger.info(
        'Booking request %s created for %s x%d (final price %d, promo %s)',
        booking.id, booking.item_name, booking.quantity, booking.final_price, booking.promo_code or '-',
    )
    return booking


def submit_booking_request(data, now=None):
    """Customer flow: validate, snapshot the item, redeem the promo, price, persist.

    Everything after input validation runs in one transaction, so a booking
    that fails never consumes a promo code use.
    """
    submission = parse(BookingSubmission, data)
    now = now or timezone.now()

    with transaction.atomic():
        item = catalog_item(submission.item_type, submission.item_id)
        if not item.available:
            raise ValidationError(
                f'{item.name} is not available right now',
                errors={'item_id': 'Item is not available'},
            )

        promo = None
        if normalize_code(submission.promo_code):
            redeemed = PromoCode.objects.redeem(submission.promo_code, now)
            if redeemed is None:
                raise ValidationError(
                    'Promo code is not valid',
                    errors={'promo_code': 'Invalid, expired or fully used'},
                )
            promo = PromoSnapshot.of(redeemed)

        price = order_total(item.unit_price, submission.quantity, promo.discount_percent if promo else 0)
        return create_booking_request(parse(BookingRequestInsert, {
            'item': item,
            'promo': promo,
            'full_name': submission.full_name,
            'phone': submission.phone,
            'email': submission.email,
            'quantity': submission.quantity,
            'message': submission.message,
            'final_price': price.final_price,
        }))


def list_booking_requests(status=None):
    return BookingRequest.objects.with_status(status)


def change_status(booking_id, status):
    booking = get_object(BookingRequest, booking_id, 'Booking request not found')
    return booking.transition_to(status)


def delete_booking_request(booking_id):
    booking = get_object(BookingRequest, booking_id, 'Booking request not found')
    booking.delete()
    logger.info('Deleted booking request %s', booking_id)
