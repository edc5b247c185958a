import json
from datetime import timedelta
from unittest.mock import patch

from django.contrib.auth import get_user_model
from django.db import DatabaseError
from django.test import Client, SimpleTestCase, TestCase
from django.utils import timezone

from catalog.models import Card, Service
from catalog.schemas import CatalogItem
from core.errors import ValidationError
from promotions.models import PromoCode
from promotions.pricing import MAX_QUANTITY
from promotions.services import delete_promo_code, update_promo_code
from .models import BookingRequest
from .services import change_status, create_booking_request, submit_booking_request

User = get_user_model()


def make_card(**overrides):
    fields = {
        'name': 'Charizard', 'set_name': 'Base Set', 'rarity': 'Rare', 'condition': 'Near Mint',
        'price': 45000, 'image': 'https://cdn.example.com/charizard.png',
    }
    fields.update(overrides)
    return Card.objects.create(**fields)


def submission(item_id, **overrides):
    payload = {
        'item_id': item_id,
        'full_name': 'Asha Rao',
        'phone': '+91 98765 43210',
        'email': 'asha@example.com',
    }
    payload.update(overrides)
    return payload


class StatusTransitionTableTest(SimpleTestCase):
    def allowed(self, status):
        return set(BookingRequest(status=status).allowed_transitions())

    def test_transition_table(self):
        self.assertEqual(self.allowed('pending'), {'confirmed', 'cancelled'})
        self.assertEqual(self.allowed('confirmed'), {'completed', 'cancelled'})
        self.assertEqual(self.allowed('completed'), set())
        self.assertEqual(self.allowed('cancelled'), set())

    def test_terminal_states(self):
        self.assertTrue(BookingRequest(status='completed').is_terminal())
        self.assertTrue(BookingRequest(status='cancelled').is_terminal())
        self.assertFalse(BookingRequest(status='pending').is_terminal())


class BookingLifecycleTest(TestCase):
    def setUp(self):
        self.item = CatalogItem(item_type='card', item_id=1, name='Charizard', unit_price=45000)

    def insert(self, **overrides):
        data = {
            'item': self.item,
            'full_name': 'Asha Rao',
            'phone': '+91 98765 43210',
            'email': 'asha@example.com',
            'quantity': 1,
            'final_price': 45000,
        }
        data.update(overrides)
        return data

    def test_create_starts_pending(self):
        booking = create_booking_request(self.insert())
        self.assertEqual(booking.status, BookingRequest.PENDING)
        self.assertEqual((booking.item_name, booking.unit_price, booking.final_price), ('Charizard', 45000, 45000))
        self.assertIsNone(booking.promo_code)

    def test_empty_full_name_is_rejected_and_nothing_persisted(self):
        with self.assertRaises(ValidationError) as ctx:
            create_booking_request(self.insert(full_name=''))
        self.assertIn('full_name', ctx.exception.errors)
        self.assertFalse(BookingRequest.objects.exists())

    def test_whitespace_contact_fields_are_rejected(self):
        with self.assertRaises(ValidationError) as ctx:
            create_booking_request(self.insert(phone='   ', email=''))
        self.assertEqual(set(ctx.exception.errors), {'phone', 'email'})

    def test_invalid_quantity_defaults_to_one(self):
        for quantity in (None, 'abc', 0, -2):
            booking = create_booking_request(self.insert(quantity=quantity))
            self.assertEqual(booking.quantity, 1)

    def test_quantity_is_capped(self):
        with self.assertRaises(ValidationError) as ctx:
            create_booking_request(self.insert(quantity=MAX_QUANTITY + 1, final_price=45000 * (MAX_QUANTITY + 1)))
        self.assertIn('quantity', ctx.exception.errors)

    def test_final_price_must_match_snapshot(self):
        with self.assertRaises(ValidationError):
            create_booking_request(self.insert(quantity=2, final_price=45000))

    def test_promo_snapshot_is_copied(self):
        booking = create_booking_request(self.insert(
            quantity=2, promo={'code': 'TEN', 'discount_percent': 10}, final_price=81000,
        ))
        self.assertEqual((booking.promo_code, booking.discount_percent, booking.final_price), ('TEN', 10, 81000))

    def test_walks_the_state_machine(self):
        booking = create_booking_request(self.insert())
        booking.transition_to('confirmed')
        booking.transition_to('completed')
        booking.refresh_from_db()
        self.assertEqual(booking.status, 'completed')

    def test_no_transition_out_of_terminal_state(self):
        booking = create_booking_request(self.insert())
        booking.transition_to('cancelled')
        for status in ('pending', 'confirmed', 'completed', 'cancelled'):
            with self.assertRaises(ValidationError):
                booking.transition_to(status)

    def test_cannot_skip_confirmation(self):
        booking = create_booking_request(self.insert())
        with self.assertRaises(ValidationError):
            booking.transition_to('completed')
        booking.refresh_from_db()
        self.assertEqual(booking.status, 'pending')

    def test_stale_instance_cannot_transition(self):
        booking = create_booking_request(self.insert())
        stale = BookingRequest.objects.get(pk=booking.pk)
        change_status(booking.pk, 'cancelled')
        with self.assertRaises(ValidationError):
            stale.transition_to('confirmed')
        self.assertEqual(stale.status, 'cancelled')

    def test_transition_only_touches_status(self):
        promo = PromoCode.objects.create(code='TEN', discount_percent=10, usage_count=1)
        booking = create_booking_request(self.insert(
            quantity=2, promo={'code': 'TEN', 'discount_percent': 10}, final_price=81000,
        ))
        booking.transition_to('confirmed')
        promo.refresh_from_db()
        self.assertEqual(promo.usage_count, 1)
        booking.refresh_from_db()
        self.assertEqual(booking.final_price, 81000)


class SubmitBookingTest(TestCase):
    def setUp(self):
        self.card = make_card()
        self.now = timezone.now()

    def test_scenario_two_cards_with_ten_percent(self):
        PromoCode.objects.create(code='TEN', discount_percent=10)
        booking = submit_booking_request(submission(self.card.id, quantity=2, promo_code='ten'), self.now)
        self.assertEqual(booking.final_price, 81000)
        self.assertEqual(booking.promo_code, 'TEN')
        self.assertEqual(booking.discount_percent, 10)
        self.assertEqual(PromoCode.objects.get(code='TEN').usage_count, 1)

    def test_without_promo(self):
        booking = submit_booking_request(submission(self.card.id, promo_code='  '), self.now)
        self.assertEqual(booking.final_price, 45000)
        self.assertIsNone(booking.discount_percent)

    def test_final_price_survives_promo_edits_and_deletion(self):
        promo = PromoCode.objects.create(code='SAVE20', discount_percent=20)
        booking = submit_booking_request(submission(self.card.id, promo_code='SAVE20'), self.now)
        update_promo_code(promo.id, {'discount_percent': 50})
        booking.refresh_from_db()
        self.assertEqual((booking.final_price, booking.discount_percent), (36000, 20))
        delete_promo_code(promo.id)
        booking.refresh_from_db()
        self.assertEqual((booking.final_price, booking.promo_code), (36000, 'SAVE20'))

    def test_final_price_survives_catalog_price_change(self):
        booking = submit_booking_request(submission(self.card.id), self.now)
        Card.objects.filter(pk=self.card.pk).update(price=1)
        booking.refresh_from_db()
        self.assertEqual((booking.unit_price, booking.final_price), (45000, 45000))

    def test_used_up_promo_rejects_booking_without_side_effects(self):
        PromoCode.objects.create(code='SAVE20', discount_percent=20, usage_limit=1, usage_count=1)
        with self.assertRaises(ValidationError) as ctx:
            submit_booking_request(submission(self.card.id, promo_code='SAVE20'), self.now)
        self.assertIn('promo_code', ctx.exception.errors)
        self.assertFalse(BookingRequest.objects.exists())

    def test_expired_promo_rejects_booking(self):
        PromoCode.objects.create(code='OLD', discount_percent=20, expires_at=self.now - timedelta(days=1))
        with self.assertRaises(ValidationError):
            submit_booking_request(submission(self.card.id, promo_code='OLD'), self.now)

    def test_failed_booking_does_not_consume_promo(self):
        PromoCode.objects.create(code='ONCE', discount_percent=20, usage_limit=1)
        with patch('bookings.services.create_booking_request', side_effect=DatabaseError('disk full')):
            with self.assertRaises(DatabaseError):
                submit_booking_request(submission(self.card.id, promo_code='ONCE'), self.now)
        self.assertEqual(PromoCode.objects.get(code='ONCE').usage_count, 0)

    def test_contact_fields_checked_before_store_access(self):
        with self.assertNumQueries(0):
            with self.assertRaises(ValidationError):
                submit_booking_request(submission(self.card.id, full_name=''), self.now)

    def test_unavailable_card_is_rejected(self):
        sold = make_card(name='Sold Out', available=False)
        with self.assertRaises(ValidationError):
            submit_booking_request(submission(sold.id), self.now)

    def test_service_booking(self):
        service = Service.objects.create(name='PSA grading', price=2500)
        booking = submit_booking_request(submission(service.id, item_type='service', quantity=3), self.now)
        self.assertEqual((booking.item_type, booking.item_name, booking.final_price), ('service', 'PSA grading', 7500))

    def test_last_use_goes_to_one_booking_only(self):
        PromoCode.objects.create(code='ONCE', discount_percent=50, usage_limit=1)
        submit_booking_request(submission(self.card.id, promo_code='ONCE'), self.now)
        with self.assertRaises(ValidationError):
            submit_booking_request(submission(self.card.id, promo_code='ONCE'), self.now)
        self.assertEqual(BookingRequest.objects.count(), 1)


class CreateBookingEndpointTest(TestCase):
    def setUp(self):
        self.client = Client()
        self.card = make_card()

    def post(self, payload):
        return self.client.post('/api/bookings/', data=json.dumps(payload), content_type='application/json')

    def test_creates_pending_booking(self):
        PromoCode.objects.create(code='TEN', discount_percent=10)
        response = self.post(submission(self.card.id, quantity=2, promo_code='ten', message='Gift wrap please'))
        self.assertEqual(response.status_code, 201)
        data = response.json()
        self.assertEqual(data['status'], 'pending')
        self.assertEqual(data['final_price'], 81000)
        booking = BookingRequest.objects.get(id=data['id'])
        self.assertEqual(booking.message, 'Gift wrap please')

    def test_missing_contact_fields(self):
        response = self.post({'item_id': self.card.id, 'full_name': 'Asha'})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(set(response.json()['errors']), {'phone', 'email'})
        self.assertFalse(BookingRequest.objects.exists())

    def test_invalid_json(self):
        response = self.client.post('/api/bookings/', data='{oops', content_type='application/json')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['error'], 'Invalid JSON')

    def test_unknown_card(self):
        self.assertEqual(self.post(submission(424242)).status_code, 404)

    def test_oversized_quantity_is_rejected(self):
        response = self.post(submission(self.card.id, quantity=10**20))
        self.assertEqual(response.status_code, 400)
        self.assertIn('quantity', response.json()['errors'])
        self.assertFalse(BookingRequest.objects.exists())

    def test_order_total_must_fit_the_price_column(self):
        grail = make_card(name='Pikachu Illustrator', price=5_000_000)
        PromoCode.objects.create(code='ONCE', discount_percent=10, usage_limit=1)
        response = self.post(submission(grail.id, quantity=500, promo_code='ONCE'))
        self.assertEqual(response.status_code, 400)
        self.assertIn('quantity', response.json()['errors'])
        self.assertFalse(BookingRequest.objects.exists())
        self.assertEqual(PromoCode.objects.get(code='ONCE').usage_count, 0)

    def test_contact_fields_longer_than_their_columns(self):
        response = self.post(submission(self.card.id, phone='9' * 51, full_name='A' * 256))
        self.assertEqual(response.status_code, 400)
        self.assertEqual(set(response.json()['errors']), {'phone', 'full_name'})
        self.assertFalse(BookingRequest.objects.exists())

    def test_oversized_item_id_is_rejected(self):
        response = self.post(submission(10**20))
        self.assertEqual(response.status_code, 400)
        self.assertIn('item_id', response.json()['errors'])

    def test_store_failure_is_generic_500(self):
        with patch('bookings.views.services.submit_booking_request', side_effect=DatabaseError('boom')):
            with self.assertLogs('core.http', level='ERROR'):
                response = self.post(submission(self.card.id))
        self.assertEqual(response.status_code, 500)
        self.assertNotIn('boom', response.json()['error'])


class ManageBookingsTest(TestCase):
    def setUp(self):
        self.client = Client()
        self.client.force_login(User.objects.create_user('operator', password='pw-123456', is_staff=True))
        self.card = make_card()
        self.first = submit_booking_request(submission(self.card.id, full_name='First'))
        self.second = submit_booking_request(submission(self.card.id, full_name='Second'))
        self.second.transition_to('confirmed')

    def send(self, method, url, payload=None):
        return getattr(self.client, method)(url, data=json.dumps(payload or {}), content_type='application/json')

    def test_requires_admin(self):
        self.assertEqual(Client().get('/api/bookings/manage/').status_code, 401)
        shopper = Client()
        shopper.force_login(User.objects.create_user('shopper', password='pw-123456'))
        self.assertEqual(shopper.get('/api/bookings/manage/').status_code, 403)

    def test_lists_newest_first(self):
        names = [b['full_name'] for b in self.client.get('/api/bookings/manage/').json()['results']]
        self.assertEqual(names, ['Second', 'First'])

    def test_filter_by_status(self):
        response = self.client.get('/api/bookings/manage/', {'status': 'confirmed'})
        self.assertEqual([b['full_name'] for b in response.json()['results']], ['Second'])
        response = self.client.get('/api/bookings/manage/', {'status': 'all'})
        self.assertEqual(len(response.json()['results']), 2)
        self.assertEqual(self.client.get('/api/bookings/manage/', {'status': 'lost'}).status_code, 400)

    def test_status_counts(self):
        response = self.client.get('/api/bookings/manage/stats/')
        self.assertEqual(response.json(), {'pending': 1, 'confirmed': 1, 'completed': 0, 'cancelled': 0})

    def test_change_status(self):
        response = self.send('post', f'/api/bookings/manage/{self.first.id}/status/', {'status': 'confirmed'})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['allowed_transitions'], ['completed', 'cancelled'])

    def test_illegal_status_change_is_400(self):
        self.send('post', f'/api/bookings/manage/{self.first.id}/status/', {'status': 'cancelled'})
        response = self.send('post', f'/api/bookings/manage/{self.first.id}/status/', {'status': 'confirmed'})
        self.assertEqual(response.status_code, 400)
        self.first.refresh_from_db()
        self.assertEqual(self.first.status, 'cancelled')

    def test_missing_status_is_400(self):
        response = self.send('post', f'/api/bookings/manage/{self.first.id}/status/', {})
        self.assertEqual(response.status_code, 400)

    def test_delete_is_permanent(self):
        self.assertEqual(self.send('delete', f'/api/bookings/manage/{self.first.id}/').status_code, 204)
        self.assertEqual(self.client.get(f'/api/bookings/manage/{self.first.id}/').status_code, 404)
        self.assertEqual(self.send('post', f'/api/bookings/manage/{self.first.id}/status/', {'status': 'confirmed'}).status_code, 404)
