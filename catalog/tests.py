import json

from django.contrib.auth import get_user_model
from django.test import Client, TestCase

from core.errors import NotFoundError, ValidationError
from core.schemas import MAX_INT
from .models import Card, Category, ContactSetting, Service
from .services import catalog_item, update_card

User = get_user_model()


def make_card(**overrides):
    fields = {
        'name': 'Charizard',
        'set_name': 'Base Set',
        'rarity': 'Rare',
        'condition': 'Near Mint',
        'price': 45000,
        'image': 'https://cdn.example.com/charizard.png',
    }
    fields.update(overrides)
    return Card.objects.create(**fields)


class CollectionBrowseTest(TestCase):
    def setUp(self):
        self.client = Client()
        self.pokemon = Category.objects.create(name='Pokemon')
        self.yugioh = Category.objects.create(name='Yu-Gi-Oh')
        self.charizard = make_card(category=self.pokemon, featured=True)
        self.blastoise = make_card(name='Blastoise', rarity='Ultra Rare', category=self.pokemon)
        self.dragon = make_card(name='Blue-Eyes White Dragon', set_name='Legend of Blue Eyes', category=self.yugioh)
        self.sold = make_card(name='Pikachu Illustrator', rarity='Grail', category=self.pokemon, available=False)

    def names(self, response):
        self.assertEqual(response.status_code, 200)
        return {card['name'] for card in response.json()['results']}

    def test_lists_only_available_cards(self):
        names = self.names(self.client.get('/api/catalog/cards/'))
        self.assertEqual(names, {'Charizard', 'Blastoise', 'Blue-Eyes White Dragon'})

    def test_all_is_the_identity_filter(self):
        names = self.names(self.client.get('/api/catalog/cards/', {'category': 'All', 'rarity': 'All'}))
        self.assertEqual(len(names), 3)

    def test_filters_by_category_name_and_rarity(self):
        names = self.names(self.client.get('/api/catalog/cards/', {'category': 'Pokemon', 'rarity': 'Ultra Rare'}))
        self.assertEqual(names, {'Blastoise'})

    def test_search_matches_name_or_set_case_insensitively(self):
        self.assertEqual(self.names(self.client.get('/api/catalog/cards/', {'q': 'BLUE'})), {'Blue-Eyes White Dragon'})
        self.assertEqual(self.names(self.client.get('/api/catalog/cards/', {'q': 'base set'})), {'Charizard', 'Blastoise'})

    def test_card_payload_embeds_category(self):
        response = self.client.get(f'/api/catalog/cards/{self.charizard.id}/')
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data['category'], {'id': self.pokemon.id, 'name': 'Pokemon'})
        self.assertEqual(data['price'], 45000)

    def test_missing_card_is_404(self):
        response = self.client.get('/api/catalog/cards/999999/')
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()['error'], 'Card not found')

    def test_oversized_card_id_is_404(self):
        self.assertEqual(self.client.get('/api/catalog/cards/99999999999999999999/').status_code, 404)

    def test_featured_cards_are_featured_and_available(self):
        make_card(name='Hidden Gem', featured=True, available=False)
        names = self.names(self.client.get('/api/catalog/cards/featured/'))
        self.assertEqual(names, {'Charizard'})

    def test_featured_cards_are_limited(self):
        for i in range(6):
            make_card(name=f'Promo {i}', featured=True)
        response = self.client.get('/api/catalog/cards/featured/')
        self.assertEqual(len(response.json()['results']), 4)

    def test_services_list_hides_unavailable(self):
        Service.objects.create(name='Grading', price=1500)
        Service.objects.create(name='Sleeving', available=False)
        response = self.client.get('/api/catalog/services/')
        self.assertEqual([s['name'] for s in response.json()['results']], ['Grading'])


class CatalogItemTest(TestCase):
    def test_card_snapshot(self):
        card = make_card(price=1200)
        item = catalog_item('card', card.id)
        self.assertEqual((item.item_type, item.item_id, item.name, item.unit_price), ('card', card.id, 'Charizard', 1200))

    def test_service_without_price_cannot_be_booked(self):
        service = Service.objects.create(name='Custom framing')
        with self.assertRaises(ValidationError):
            catalog_item('service', service.id)

    def test_unknown_item(self):
        with self.assertRaises(NotFoundError):
            catalog_item('card', 424242)
        with self.assertRaises(ValidationError):
            catalog_item('sticker', 1)


class AdminClientMixin:
    def setUp(self):
        self.client = Client()
        self.admin = User.objects.create_user('operator', password='pw-123456', is_staff=True)
        self.client.force_login(self.admin)

    def send(self, method, url, payload=None):
        return getattr(self.client, method)(url, data=json.dumps(payload or {}), content_type='application/json')


class ManageCardsTest(AdminClientMixin, TestCase):
    def test_anonymous_is_rejected(self):
        response = Client().get('/api/catalog/manage/cards/')
        self.assertEqual(response.status_code, 401)

    def test_shopper_is_rejected(self):
        shopper = User.objects.create_user('shopper', password='pw-123456')
        client = Client()
        client.force_login(shopper)
        self.assertEqual(client.get('/api/catalog/manage/cards/').status_code, 403)

    def test_create_card(self):
        category = Category.objects.create(name='Pokemon')
        response = self.send('post', '/api/catalog/manage/cards/', {
            'name': 'Mewtwo', 'set_name': 'Base Set', 'rarity': 'Rare', 'condition': 'Mint',
            'price': 9000, 'image': 'https://cdn.example.com/mewtwo.png', 'category_id': category.id,
        })
        self.assertEqual(response.status_code, 201)
        card = Card.objects.get(name='Mewtwo')
        self.assertEqual(card.category, category)
        self.assertTrue(card.available)
        self.assertFalse(card.featured)

    def test_create_card_rejects_bad_input(self):
        response = self.send('post', '/api/catalog/manage/cards/', {
            'name': '', 'set_name': 'Base Set', 'rarity': 'Legendary', 'condition': 'Mint',
            'price': -1, 'image': 'x',
        })
        self.assertEqual(response.status_code, 400)
        self.assertEqual(set(response.json()['errors']), {'name', 'rarity', 'price'})
        self.assertFalse(Card.objects.exists())

    def test_create_card_rejects_values_too_large_to_store(self):
        response = self.send('post', '/api/catalog/manage/cards/', {
            'name': 'Mew', 'set_name': 'Promo', 'rarity': 'Rare', 'condition': 'Mint',
            'price': MAX_INT + 1, 'image': 'https://cdn.example.com/' + 'm' * 1000,
        })
        self.assertEqual(response.status_code, 400)
        self.assertEqual(set(response.json()['errors']), {'price', 'image'})
        self.assertFalse(Card.objects.exists())

    def test_create_card_with_unknown_category(self):
        response = self.send('post', '/api/catalog/manage/cards/', {
            'name': 'Mew', 'set_name': 'Promo', 'rarity': 'Rare', 'condition': 'Mint',
            'price': 100, 'image': 'x', 'category_id': 9999,
        })
        self.assertEqual(response.status_code, 400)
        self.assertIn('category_id', response.json()['errors'])

    def test_partial_update_only_touches_given_fields(self):
        card = make_card()
        response = self.send('patch', f'/api/catalog/manage/cards/{card.id}/', {'price': 50000})
        self.assertEqual(response.status_code, 200)
        card.refresh_from_db()
        self.assertEqual(card.price, 50000)
        self.assertEqual(card.name, 'Charizard')

    def test_partial_update_is_validated(self):
        card = make_card()
        with self.assertRaises(ValidationError):
            update_card(card.id, {'condition': 'Destroyed'})

    def test_toggle_availability(self):
        card = make_card()
        response = self.send('post', f'/api/catalog/manage/cards/{card.id}/toggle-availability/')
        self.assertEqual(response.json(), {'id': card.id, 'available': False})
        response = self.send('post', f'/api/catalog/manage/cards/{card.id}/toggle-availability/')
        self.assertTrue(response.json()['available'])

    def test_delete_card(self):
        card = make_card()
        self.assertEqual(self.send('delete', f'/api/catalog/manage/cards/{card.id}/').status_code, 204)
        self.assertFalse(Card.objects.filter(pk=card.id).exists())
        self.assertEqual(self.send('delete', f'/api/catalog/manage/cards/{card.id}/').status_code, 404)

    def test_admin_list_includes_unavailable(self):
        make_card(available=False)
        response = self.client.get('/api/catalog/manage/cards/')
        self.assertEqual(len(response.json()['results']), 1)

    def test_dashboard_counts(self):
        Category.objects.create(name='Pokemon')
        make_card()
        make_card(name='Sold', available=False)
        response = self.client.get('/api/catalog/manage/dashboard/')
        self.assertEqual(response.json(), {'total_cards': 2, 'categories': 1, 'available': 1, 'out_of_stock': 1})


class ManageCategoriesTest(AdminClientMixin, TestCase):
    def test_duplicate_category_is_409(self):
        Category.objects.create(name='Pokemon')
        response = self.send('post', '/api/catalog/manage/categories/', {'name': ' pokemon '})
        self.assertEqual(response.status_code, 409)

    def test_blank_category_name_is_400(self):
        response = self.send('post', '/api/catalog/manage/categories/', {'name': '   '})
        self.assertEqual(response.status_code, 400)

    def test_rename_category(self):
        category = Category.objects.create(name='Pokemon')
        response = self.send('patch', f'/api/catalog/manage/categories/{category.id}/', {'name': 'Pokémon'})
        self.assertEqual(response.json()['name'], 'Pokémon')

    def test_deleting_category_uncategorises_cards(self):
        category = Category.objects.create(name='Pokemon')
        card = make_card(category=category)
        self.assertEqual(self.send('delete', f'/api/catalog/manage/categories/{category.id}/').status_code, 204)
        card.refresh_from_db()
        self.assertIsNone(card.category_id)


class ManageServicesTest(AdminClientMixin, TestCase):
    def test_create_service_without_price(self):
        response = self.send('post', '/api/catalog/manage/services/', {'name': 'Collection appraisal'})
        self.assertEqual(response.status_code, 201)
        self.assertIsNone(response.json()['price'])

    def test_update_and_toggle_service(self):
        service = Service.objects.create(name='Grading', price=1500)
        response = self.send('patch', f'/api/catalog/manage/services/{service.id}/', {'price': 1800})
        self.assertEqual(response.json()['price'], 1800)
        response = self.send('post', f'/api/catalog/manage/services/{service.id}/toggle-availability/')
        self.assertFalse(response.json()['available'])


class ContactSettingsTest(AdminClientMixin, TestCase):
    def test_public_settings_are_a_flat_mapping(self):
        ContactSetting.objects.filter(key='email').update(value='hello@example.com')
        data = Client().get('/api/catalog/contact/').json()
        self.assertEqual(data['email'], 'hello@example.com')
        self.assertIn('instagram_handle', data)

    def test_update_known_keys(self):
        response = self.send('patch', '/api/catalog/manage/contact/', {'location': 'Mumbai', 'response_time': '24h'})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['location'], 'Mumbai')
        self.assertEqual(ContactSetting.objects.get(key='response_time').value, '24h')

    def test_unknown_key_is_404(self):
        response = self.send('patch', '/api/catalog/manage/contact/', {'fax': '123'})
        self.assertEqual(response.status_code, 404)

    def test_storefront_config_publishes_debounce(self):
        data = Client().get('/api/catalog/config/').json()
        self.assertEqual(data['promo_validation_debounce_ms'], 500)
        self.assertEqual(data['currency'], 'INR')
