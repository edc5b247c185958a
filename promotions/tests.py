import json
from datetime import timedelta

from django.contrib.auth import get_user_model
from django.test import Client, SimpleTestCase, TestCase
from django.utils import timezone

from catalog.models import Card
from core.errors import DuplicateError, ValidationError
from .models import PromoCode, normalize_code
from .pricing import MAX_QUANTITY, coerce_quantity, compute_total, order_total
from .services import create_promo_code, delete_promo_code, toggle_promo_code, update_promo_code

User = get_user_model()


class ComputeTotalTest(SimpleTestCase):
    def test_scenario_two_cards_ten_percent(self):
        total = compute_total(45000, 2, 10)
        self.assertEqual(total.subtotal, 90000)
        self.assertEqual(total.discount_amount, 9000)
        self.assertEqual(total.final_price, 81000)

    def test_no_discount(self):
        self.assertEqual(compute_total(1500, 3), (4500, 0, 4500))

    def test_full_discount_is_free(self):
        self.assertEqual(compute_total(999, 1, 100).final_price, 0)

    def test_ties_round_half_up(self):
        # 12345 * 10% = 1234.5
        self.assertEqual(compute_total(12345, 1, 10).discount_amount, 1235)
        # 25 * 50% = 12.5
        self.assertEqual(compute_total(25, 1, 50), (25, 13, 12))
        # 15 * 10% = 1.5
        self.assertEqual(compute_total(15, 1, 10).discount_amount, 2)

    def test_rounds_to_nearest_below_tie(self):
        # 1234 * 15% = 185.1
        self.assertEqual(compute_total(1234, 1, 15).discount_amount, 185)
        # 999 * 33% = 329.67
        self.assertEqual(compute_total(999, 1, 33).discount_amount, 330)

    def test_final_price_stays_within_bounds(self):
        for subtotal in (0, 1, 7, 99, 1001, 45000, 123457):
            for percent in range(0, 101):
                total = compute_total(subtotal, 1, percent)
                self.assertGreaterEqual(total.final_price, 0)
                self.assertLessEqual(total.final_price, subtotal)
                self.assertEqual(total.subtotal, total.discount_amount + total.final_price)

    def test_rejects_contract_violations(self):
        with self.assertRaises(ValueError):
            compute_total(-1, 1, 0)
        with self.assertRaises(ValueError):
            compute_total(100, 0, 0)
        with self.assertRaises(ValueError):
            compute_total(100, 1, 101)

    def test_coerce_quantity(self):
        self.assertEqual(coerce_quantity(None), 1)
        self.assertEqual(coerce_quantity('abc'), 1)
        self.assertEqual(coerce_quantity(0), 1)
        self.assertEqual(coerce_quantity(-4), 1)
        self.assertEqual(coerce_quantity('3'), 3)
        self.assertEqual(coerce_quantity(2), 2)

    def test_order_total_fits_the_price_columns(self):
        self.assertEqual(order_total(45000, MAX_QUANTITY, 10).final_price, 40500000)
        with self.assertRaises(ValidationError) as ctx:
            order_total(1, MAX_QUANTITY + 1)
        self.assertIn('quantity', ctx.exception.errors)
        with self.assertRaises(ValidationError):
            order_total(5_000_000, 500)


class PromoCodeStateTest(SimpleTestCase):
    def setUp(self):
        self.now = timezone.now()

    def promo(self, **overrides):
        fields = {'code': 'SAVE20', 'discount_percent': 20, 'active': True, 'usage_limit': None, 'usage_count': 0, 'expires_at': None}
        fields.update(overrides)
        return PromoCode(**fields)

    def test_inactive_is_never_usable(self):
        for overrides in ({}, {'expires_at': self.now + timedelta(days=30)}, {'usage_limit': 100, 'usage_count': 0}):
            self.assertFalse(self.promo(active=False, **overrides).is_usable(self.now))

    def test_usable_when_all_constraints_hold(self):
        promo = self.promo(usage_limit=5, usage_count=4, expires_at=self.now + timedelta(hours=1))
        self.assertTrue(promo.is_usable(self.now))

    def test_expiry_instant_is_not_usable(self):
        self.assertFalse(self.promo(expires_at=self.now).is_usable(self.now))

    def test_display_status_priority(self):
        past = self.now - timedelta(days=1)
        self.assertEqual(self.promo(active=False, expires_at=past, usage_limit=1, usage_count=1).display_status(self.now), 'Inactive')
        self.assertEqual(self.promo(expires_at=past, usage_limit=1, usage_count=1).display_status(self.now), 'Expired')
        self.assertEqual(self.promo(usage_limit=1, usage_count=1).display_status(self.now), 'Limit Reached')
        self.assertEqual(self.promo().display_status(self.now), 'Active')

    def test_normalize_code(self):
        self.assertEqual(normalize_code('  save20 '), 'SAVE20')
        self.assertEqual(normalize_code('   '), '')
        self.assertEqual(normalize_code(None), '')


class PromoValidatorTest(TestCase):
    def setUp(self):
        self.now = timezone.now()

    def make(self, code='SAVE20', **fields):
        return PromoCode.objects.create(code=code, discount_percent=fields.pop('discount_percent', 20), **fields)

    def test_empty_input_is_no_code(self):
        self.make()
        with self.assertNumQueries(0):
            self.assertIsNone(PromoCode.objects.validate('', self.now))
            self.assertIsNone(PromoCode.objects.validate('   ', self.now))
            self.assertIsNone(PromoCode.objects.validate(None, self.now))

    def test_case_insensitive(self):
        promo = self.make()
        self.assertEqual(PromoCode.objects.validate('save20', self.now), promo)
        self.assertEqual(PromoCode.objects.validate(' SAVE20 ', self.now), promo)

    def test_unknown_code(self):
        self.assertIsNone(PromoCode.objects.validate('NOPE', self.now))

    def test_limit_reached_is_invalid_even_when_active(self):
        self.make(usage_limit=1, usage_count=1, active=True)
        self.assertIsNone(PromoCode.objects.validate('SAVE20', self.now))

    def test_expired_is_invalid(self):
        self.make(expires_at=self.now - timedelta(days=1), usage_limit=10, usage_count=0)
        self.assertIsNone(PromoCode.objects.validate('SAVE20', self.now))

    def test_inactive_is_invalid(self):
        self.make(active=False)
        self.assertIsNone(PromoCode.objects.validate('SAVE20', self.now))

    def test_validation_has_no_side_effects(self):
        promo = self.make(usage_limit=3)
        for _ in range(5):
            PromoCode.objects.validate('SAVE20', self.now)
        promo.refresh_from_db()
        self.assertEqual(promo.usage_count, 0)

    def test_codes_are_stored_uppercase(self):
        self.make(code=' spring10 ')
        self.assertTrue(PromoCode.objects.filter(code='SPRING10').exists())


class PromoRedeemTest(TestCase):
    def setUp(self):
        self.now = timezone.now()

    def test_redeem_increments_usage(self):
        PromoCode.objects.create(code='SAVE20', discount_percent=20, usage_limit=2)
        promo = PromoCode.objects.redeem('save20', self.now)
        self.assertEqual(promo.usage_count, 1)

    def test_redeem_stops_at_limit(self):
        PromoCode.objects.create(code='ONCE', discount_percent=15, usage_limit=1)
        self.assertIsNotNone(PromoCode.objects.redeem('ONCE', self.now))
        with self.assertLogs('promotions.models', level='WARNING'):
            self.assertIsNone(PromoCode.objects.redeem('ONCE', self.now))
        self.assertEqual(PromoCode.objects.get(code='ONCE').usage_count, 1)

    def test_stale_read_cannot_oversell(self):
        PromoCode.objects.create(code='ONCE', discount_percent=15, usage_limit=1)
        # Both callers saw the code as usable before either redeemed it.
        self.assertIsNotNone(PromoCode.objects.validate('ONCE', self.now))
        self.assertIsNotNone(PromoCode.objects.validate('ONCE', self.now))
        results = [PromoCode.objects.redeem('ONCE', self.now), PromoCode.objects.redeem('ONCE', self.now)]
        self.assertEqual(sum(r is not None for r in results), 1)

    def test_unlimited_codes_keep_counting(self):
        PromoCode.objects.create(code='ALWAYS', discount_percent=5)
        for _ in range(3):
            PromoCode.objects.redeem('ALWAYS', self.now)
        self.assertEqual(PromoCode.objects.get(code='ALWAYS').usage_count, 3)

    def test_expired_and_inactive_codes_are_not_redeemed(self):
        PromoCode.objects.create(code='OLD', discount_percent=5, expires_at=self.now - timedelta(minutes=1))
        PromoCode.objects.create(code='OFF', discount_percent=5, active=False)
        self.assertIsNone(PromoCode.objects.redeem('OLD', self.now))
        self.assertIsNone(PromoCode.objects.redeem('OFF', self.now))
        self.assertEqual(sum(PromoCode.objects.values_list('usage_count', flat=True)), 0)


class PromoLifecycleTest(TestCase):
    def test_create_normalizes_and_defaults(self):
        promo = create_promo_code({'code': ' welcome ', 'discount_percent': 10})
        self.assertEqual(promo.code, 'WELCOME')
        self.assertTrue(promo.active)
        self.assertEqual(promo.usage_count, 0)
        self.assertIsNone(promo.usage_limit)

    def test_create_ignores_usage_count_in_payload(self):
        promo = create_promo_code({'code': 'FRESH', 'discount_percent': 10, 'usage_count': 99})
        self.assertEqual(promo.usage_count, 0)

    def test_duplicate_code_differing_only_by_case(self):
        create_promo_code({'code': 'SAVE20', 'discount_percent': 20})
        with self.assertRaises(DuplicateError):
            create_promo_code({'code': 'save20', 'discount_percent': 30})

    def test_discount_percent_bounds(self):
        for percent in (0, 101, -5):
            with self.assertRaises(ValidationError):
                create_promo_code({'code': f'P{percent}', 'discount_percent': percent})
        self.assertEqual(create_promo_code({'code': 'MAX', 'discount_percent': 100}).discount_percent, 100)

    def test_usage_limit_must_be_positive(self):
        with self.assertRaises(ValidationError):
            create_promo_code({'code': 'ZERO', 'discount_percent': 10, 'usage_limit': 0})

    def test_naive_expiry_is_treated_as_utc(self):
        promo = create_promo_code({'code': 'NYE', 'discount_percent': 10, 'expires_at': '2030-12-31T23:59:00'})
        self.assertTrue(timezone.is_aware(promo.expires_at))

    def test_update_rechecks_uniqueness_only_when_code_changes(self):
        create_promo_code({'code': 'TAKEN', 'discount_percent': 10})
        promo = create_promo_code({'code': 'MINE', 'discount_percent': 10})
        update_promo_code(promo.id, {'code': 'mine', 'discount_percent': 25})
        promo.refresh_from_db()
        self.assertEqual(promo.discount_percent, 25)
        with self.assertRaises(DuplicateError):
            update_promo_code(promo.id, {'code': 'taken'})

    def test_update_can_clear_limit_and_expiry(self):
        promo = create_promo_code({'code': 'TEMP', 'discount_percent': 10, 'usage_limit': 5, 'expires_at': '2030-01-01T00:00:00Z'})
        update_promo_code(promo.id, {'usage_limit': None, 'expires_at': None})
        promo.refresh_from_db()
        self.assertIsNone(promo.usage_limit)
        self.assertIsNone(promo.expires_at)

    def test_toggle_and_delete(self):
        promo = create_promo_code({'code': 'FLIP', 'discount_percent': 10})
        self.assertFalse(toggle_promo_code(promo.id).active)
        self.assertTrue(toggle_promo_code(promo.id).active)
        delete_promo_code(promo.id)
        self.assertFalse(PromoCode.objects.exists())


class ValidateEndpointTest(TestCase):
    def setUp(self):
        self.client = Client()
        PromoCode.objects.create(code='SAVE20', discount_percent=20)

    def post(self, payload):
        return self.client.post('/api/promotions/validate/', data=json.dumps(payload), content_type='application/json')

    def test_valid_code(self):
        response = self.post({'code': 'save20'})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {'code': 'SAVE20', 'status': 'valid', 'valid': True, 'discount_percent': 20})

    def test_invalid_code_is_not_an_error(self):
        response = self.post({'code': 'bogus'})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['status'], 'invalid')
        self.assertFalse(response.json()['valid'])

    def test_blank_code(self):
        self.assertEqual(self.post({'code': '  '}).json()['status'], 'empty')
        self.assertEqual(self.client.get('/api/promotions/validate/').json()['status'], 'empty')

    def test_get_with_query_string(self):
        response = self.client.get('/api/promotions/validate/', {'code': 'Save20'})
        self.assertTrue(response.json()['valid'])


class QuoteEndpointTest(TestCase):
    def setUp(self):
        self.client = Client()
        self.card = Card.objects.create(
            name='Charizard', set_name='Base Set', rarity='Rare', condition='Mint',
            price=45000, image='https://cdn.example.com/c.png',
        )
        PromoCode.objects.create(code='TEN', discount_percent=10, usage_limit=1)

    def quote(self, payload):
        return self.client.post('/api/promotions/quote/', data=json.dumps(payload), content_type='application/json')

    def test_quote_with_promo(self):
        response = self.quote({'item_id': self.card.id, 'quantity': 2, 'promo_code': 'ten'})
        data = response.json()
        self.assertEqual(response.status_code, 200)
        self.assertEqual((data['subtotal'], data['discount_amount'], data['final_price']), (90000, 9000, 81000))
        self.assertEqual(data['promo'], {'code': 'TEN', 'discount_percent': 10})
        self.assertEqual(PromoCode.objects.get(code='TEN').usage_count, 0)

    def test_quote_with_invalid_promo_charges_full_price(self):
        data = self.quote({'item_id': self.card.id, 'quantity': 'many', 'promo_code': 'NOPE'}).json()
        self.assertEqual(data['quantity'], 1)
        self.assertEqual(data['promo_status'], 'invalid')
        self.assertEqual(data['final_price'], 45000)

    def test_quote_for_missing_item(self):
        self.assertEqual(self.quote({'item_id': 987654}).status_code, 404)

    def test_quote_rejects_oversized_quantity(self):
        response = self.quote({'item_id': self.card.id, 'quantity': 10**20})
        self.assertEqual(response.status_code, 400)
        self.assertIn('quantity', response.json()['errors'])

    def test_quote_rejects_total_that_cannot_be_stored(self):
        Card.objects.filter(pk=self.card.pk).update(price=5_000_000)
        response = self.quote({'item_id': self.card.id, 'quantity': 500})
        self.assertEqual(response.status_code, 400)
        self.assertIn('quantity', response.json()['errors'])


class ManagePromoCodesTest(TestCase):
    def setUp(self):
        self.client = Client()
        self.client.force_login(User.objects.create_user('operator', password='pw-123456', is_staff=True))

    def send(self, method, url, payload=None):
        return getattr(self.client, method)(url, data=json.dumps(payload or {}), content_type='application/json')

    def test_requires_admin(self):
        self.assertEqual(Client().get('/api/promotions/manage/').status_code, 401)

    def test_create_and_duplicate(self):
        response = self.send('post', '/api/promotions/manage/', {'code': 'diwali', 'discount_percent': 15})
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()['code'], 'DIWALI')
        self.assertEqual(response.json()['status'], 'Active')
        response = self.send('post', '/api/promotions/manage/', {'code': 'Diwali', 'discount_percent': 20})
        self.assertEqual(response.status_code, 409)

    def test_list_search_and_status(self):
        PromoCode.objects.create(code='SUMMER10', discount_percent=10, active=False)
        PromoCode.objects.create(code='WINTER10', discount_percent=10)
        response = self.client.get('/api/promotions/manage/', {'q': 'summ'})
        results = response.json()['results']
        self.assertEqual([(r['code'], r['status']) for r in results], [('SUMMER10', 'Inactive')])

    def test_patch_toggle_delete(self):
        promo = PromoCode.objects.create(code='EDIT', discount_percent=10)
        response = self.send('patch', f'/api/promotions/manage/{promo.id}/', {'discount_percent': 30})
        self.assertEqual(response.json()['discount_percent'], 30)
        response = self.send('post', f'/api/promotions/manage/{promo.id}/toggle/')
        self.assertFalse(response.json()['active'])
        self.assertEqual(self.send('delete', f'/api/promotions/manage/{promo.id}/').status_code, 204)
        self.assertEqual(self.client.get(f'/api/promotions/manage/{promo.id}/').status_code, 404)

    def test_patch_rejects_bad_percent(self):
        promo = PromoCode.objects.create(code='EDIT', discount_percent=10)
        response = self.send('patch', f'/api/promotions/manage/{promo.id}/', {'discount_percent': 150})
        self.assertEqual(response.status_code, 400)
        self.assertIn('discount_percent', response.json()['errors'])

    def test_stats(self):
        now = timezone.now()
        PromoCode.objects.create(code='A', discount_percent=10, usage_count=3)
        PromoCode.objects.create(code='B', discount_percent=10, active=False, usage_count=2)
        PromoCode.objects.create(code='C', discount_percent=10, expires_at=now - timedelta(days=2))
        response = self.client.get('/api/promotions/manage/stats/')
        self.assertEqual(response.json(), {'total': 3, 'active': 2, 'total_usage': 5, 'expired': 1})
