import os
from io import StringIO
from typing import Annotated, Optional
from unittest.mock import patch

from django.contrib.auth import get_user_model
from django.contrib.auth.models import AnonymousUser
from django.core.management import call_command
from django.db import DatabaseError
from django.http import JsonResponse
from django.test import Client, RequestFactory, SimpleTestCase, TestCase
from pydantic import Field, StringConstraints

from .auth import admin_required, is_admin
from .errors import DuplicateError, NotFoundError, ValidationError
from .http import json_view, read_json
from .schemas import MAX_INT, Amount, Insert, parse

User = get_user_model()


class Widget(Insert):
    name: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
    size: int = Field(ge=1)
    price: Amount = 0
    note: Optional[str] = None


class JsonViewTest(SimpleTestCase):
    def setUp(self):
        self.factory = RequestFactory()

    def call(self, exc):
        @json_view
        def view(request):
            raise exc
        return view(self.factory.get('/'))

    def test_storefront_errors_map_to_status_codes(self):
        self.assertEqual(self.call(ValidationError()).status_code, 400)
        self.assertEqual(self.call(NotFoundError()).status_code, 404)
        self.assertEqual(self.call(DuplicateError()).status_code, 409)

    def test_validation_error_carries_field_errors(self):
        response = self.call(ValidationError('Invalid input', errors={'name': 'required'}))
        self.assertEqual(response.json(), {'error': 'Invalid input', 'errors': {'name': 'required'}})

    def test_database_error_becomes_generic_store_error(self):
        with self.assertLogs('core.http', level='ERROR'):
            response = self.call(DatabaseError('connection reset by peer'))
        self.assertEqual(response.status_code, 500)
        self.assertNotIn('connection reset', response.json()['error'])

    def test_passes_through_successful_responses(self):
        @json_view
        def view(request):
            return JsonResponse({'ok': True})
        self.assertEqual(view(self.factory.get('/')).json(), {'ok': True})


class ReadJsonTest(SimpleTestCase):
    def setUp(self):
        self.factory = RequestFactory()

    def test_invalid_json_is_a_validation_error(self):
        request = self.factory.post('/', data='{not json', content_type='application/json')
        with self.assertRaises(ValidationError):
            read_json(request)

    def test_non_object_body_is_rejected(self):
        request = self.factory.post('/', data='[1, 2]', content_type='application/json')
        with self.assertRaises(ValidationError):
            read_json(request)

    def test_empty_body_is_an_empty_object(self):
        request = self.factory.post('/', data='', content_type='application/json')
        self.assertEqual(read_json(request), {})


class ParseTest(SimpleTestCase):
    def test_builds_frozen_insert(self):
        widget = parse(Widget, {'name': '  Gear ', 'size': 3})
        self.assertEqual(widget.name, 'Gear')
        with self.assertRaises(Exception):
            widget.size = 4

    def test_collects_field_errors(self):
        with self.assertRaises(ValidationError) as ctx:
            parse(Widget, {'name': '   ', 'size': 0})
        self.assertEqual(set(ctx.exception.errors), {'name', 'size'})

    def test_amount_fits_an_integer_column(self):
        self.assertEqual(parse(Widget, {'name': 'Gear', 'size': 1, 'price': MAX_INT}).price, MAX_INT)
        with self.assertRaises(ValidationError) as ctx:
            parse(Widget, {'name': 'Gear', 'size': 1, 'price': MAX_INT + 1})
        self.assertEqual(set(ctx.exception.errors), {'price'})


class AdminGateTest(TestCase):
    def setUp(self):
        self.factory = RequestFactory()

        @json_view
        @admin_required
        def view(request):
            return JsonResponse({'ok': True})
        self.view = view

    def request_as(self, user):
        request = self.factory.get('/')
        request.user = user
        return self.view(request)

    def test_anonymous_gets_401(self):
        self.assertEqual(self.request_as(AnonymousUser()).status_code, 401)

    def test_non_staff_gets_403(self):
        user = User.objects.create_user('shopper', password='pw-123456')
        self.assertFalse(is_admin(user))
        self.assertEqual(self.request_as(user).status_code, 403)

    def test_staff_passes(self):
        user = User.objects.create_user('operator', password='pw-123456', is_staff=True)
        self.assertTrue(is_admin(user))
        self.assertEqual(self.request_as(user).status_code, 200)


class EnsureAdminCommandTest(TestCase):
    def test_skips_without_password(self):
        out = StringIO()
        with patch.dict(os.environ, {}, clear=False):
            os.environ.pop('DJANGO_SUPERUSER_PASSWORD', None)
            call_command('ensure_admin', stdout=out)
        self.assertFalse(User.objects.filter(is_staff=True).exists())
        self.assertIn('skipping', out.getvalue())

    def test_creates_admin_once(self):
        out = StringIO()
        with patch.dict(os.environ, {'DJANGO_SUPERUSER_PASSWORD': 'a-long-password'}):
            call_command('ensure_admin', '--username', 'boss', stdout=out)
            call_command('ensure_admin', '--username', 'other', stdout=out)
        self.assertEqual(list(User.objects.filter(is_staff=True).values_list('username', flat=True)), ['boss'])
        self.assertIn('already exists', out.getvalue())


class CsrfTokenTest(TestCase):
    def setUp(self):
        self.client = Client(enforce_csrf_checks=True)
        self.client.force_login(User.objects.create_user('operator', password='pw-123456', is_staff=True))

    def create_category(self, **headers):
        return self.client.post(
            '/api/catalog/manage/categories/', data='{"name": "Pokemon"}',
            content_type='application/json', **headers,
        )

    def test_sets_cookie_and_returns_token(self):
        response = self.client.get('/api/csrf/')
        self.assertEqual(response.status_code, 200)
        self.assertIn('csrftoken', response.cookies)
        self.assertTrue(response.json()['csrf_token'])

    def test_back_office_writes_need_the_token(self):
        self.assertEqual(self.create_category().status_code, 403)
        token = self.client.get('/api/csrf/').json()['csrf_token']
        self.assertEqual(self.create_category(HTTP_X_CSRFTOKEN=token).status_code, 201)
