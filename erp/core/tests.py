"""
Test suite for Core module
Tests: authentication, tax/company settings, audit log, the status transition guard
"""
from datetime import date
from django.test import TestCase, SimpleTestCase
from rest_framework import status
from decimal import Decimal
from erp.core.exceptions import InvalidTransition
from erp.core.models import AuditLog, TaxSetting
from erp.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from erp.core.transitions import TransitionTable, ANY
from erp.core.utils import parse_date
from erp.parties.models import Customer


class TransitionTableTests(SimpleTestCase):
    """Validation rules of the transition guard"""

    def setUp(self):
        self.table = TransitionTable('Ticket', {
            'open': ['closed'],
            'closed': [],
        })

    def test_allowed_move(self):
        self.assertTrue(self.table.can_transition('open', 'closed'))
        self.table.validate('open', 'closed')

    def test_terminal_state_rejects_everything(self):
        with self.assertRaises(InvalidTransition) as ctx:
            self.table.validate('closed', 'open')
        self.assertEqual(ctx.exception.current, 'closed')
        self.assertEqual(ctx.exception.allowed, ())

    def test_same_state_is_not_a_transition(self):
        with self.assertRaises(InvalidTransition):
            self.table.validate('open', 'open')

    def test_unknown_state(self):
        with self.assertRaises(InvalidTransition):
            self.table.validate('archived', 'open')

    def test_error_payload_lists_allowed_targets(self):
        with self.assertRaises(InvalidTransition) as ctx:
            self.table.validate('open', 'archived')
        data = ctx.exception.as_response_data()
        self.assertEqual(data['code'], 'invalid_transition')
        self.assertEqual(data['allowed'], ['closed'])
        self.assertIn('error', data)

    def test_effects_for_specific_and_wildcard_sources(self):
        calls = []
        table = TransitionTable('Ticket', {'open': ['closed'], 'closed': []})

        @table.on('open', 'closed')
        def specific(instance, previous, user=None):
            calls.append('specific')

        @table.on(ANY, 'closed')
        def wildcard(instance, previous, user=None):
            calls.append('wildcard')

        for effect in table.effects_for('open', 'closed'):
            effect(None, previous='open')
        self.assertEqual(calls, ['specific', 'wildcard'])
        self.assertEqual(table.effects_for('closed', 'open'), [])


class ParseDateTests(SimpleTestCase):
    def test_parses_iso_dates(self):
        self.assertEqual(parse_date('2025-06-10'), date(2025, 6, 10))
        self.assertEqual(parse_date('2025-06-10T14:00:00Z'), date(2025, 6, 10))

    def test_malformed_values_fall_back_to_default(self):
        fallback = date(2000, 1, 1)
        self.assertEqual(parse_date('10/06/2025', fallback), fallback)
        self.assertEqual(parse_date(20250101, fallback), fallback)
        self.assertEqual(parse_date(['2025-06-10'], fallback), fallback)
        self.assertIsNone(parse_date(None))


class AuthTests(TestCase):
    """Test JWT login, refresh and the current-user endpoint"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.user = TestDataFactory.create_user(username='maria', password='s3cret-pass')

    def test_login_returns_tokens_and_user(self):
        response = self.client.post('/api/v1/auth/login/', {'username': 'maria', 'password': 's3cret-pass'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('access', response.data)
        self.assertIn('refresh', response.data)
        self.assertEqual(response.data['user']['username'], 'maria')

    def test_login_wrong_password(self):
        response = self.client.post('/api/v1/auth/login/', {'username': 'maria', 'password': 'nope'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_refresh(self):
        login = self.client.post('/api/v1/auth/login/', {'username': 'maria', 'password': 's3cret-pass'}, format='json')
        response = self.client.post('/api/v1/auth/refresh/', {'refresh': login.data['refresh']}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('access', response.data)

    def test_me_requires_authentication(self):
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_me(self):
        self.client.authenticate_user(self.user)
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['username'], 'maria')
        self.assertFalse(response.data['is_admin'])

    def test_register(self):
        response = self.client.post('/api/v1/auth/register/', {
            'username': 'joao',
            'email': 'joao@test.com',
            'password': 'another-pass-123',
            'password_confirm': 'another-pass-123',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertIn('access', response.data)

    def test_user_list_is_admin_only(self):
        self.client.authenticate_user(self.user)
        response = self.client.get('/api/v1/users/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        admin = TestDataFactory.create_user(role='admin')
        self.client.authenticate_user(admin)
        response = self.client.get('/api/v1/users/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)


class TaxSettingsTests(TestCase):
    """Test the active tax settings endpoint"""

    def setUp(self):
        self.admin = TestDataFactory.create_user(role='admin')
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()

    def test_get_without_settings(self):
        self.client.authenticate_user(self.user)
        response = self.client.get('/api/v1/settings/tax/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_admin_creates_then_updates(self):
        self.client.authenticate_user(self.admin)
        response = self.client.put('/api/v1/settings/tax/', {
            'cbs_rate': '12.00', 'ibs_rate': '5.00', 'irpj_rate': '15.00', 'csll_rate': '9.00',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(TaxSetting.objects.count(), 1)

        response = self.client.put('/api/v1/settings/tax/', {'cbs_rate': '8.50'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(TaxSetting.get_active().cbs_rate, Decimal('8.50'))
        self.assertEqual(TaxSetting.get_active().ibs_rate, Decimal('5.00'))

    def test_rate_above_100_rejected(self):
        self.client.authenticate_user(self.admin)
        response = self.client.put('/api/v1/settings/tax/', {'cbs_rate': '120'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_regular_user_cannot_write(self):
        self.client.authenticate_user(self.user)
        response = self.client.put('/api/v1/settings/tax/', {'cbs_rate': '1'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class CompanySettingsTests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_upsert(self):
        response = self.client.put('/api/v1/settings/company/', {'company_name': 'Oficina Ltda'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        response = self.client.put('/api/v1/settings/company/', {'city': 'Campinas'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        response = self.client.get('/api/v1/settings/company/')
        self.assertEqual(response.data['company_name'], 'Oficina Ltda')
        self.assertEqual(response.data['city'], 'Campinas')


class AuditLogTests(TestCase):
    """Audit entries are stamped with the acting user"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_create_customer_is_audited(self):
        response = self.client.post('/api/v1/customers/', {'name': 'Ana Souza'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        customer = Customer.objects.get(name='Ana Souza')
        self.assertEqual(customer.created_by, self.user)

        log = AuditLog.objects.get(model_name='Customer', object_id=str(customer.id))
        self.assertEqual(log.action, 'create')
        self.assertEqual(log.user, self.user)

    def test_users_only_see_their_own_logs(self):
        other = TestDataFactory.create_user()
        AuditLog.objects.create(user=other, action='create', model_name='Customer', object_id='1')
        AuditLog.objects.create(user=self.user, action='create', model_name='Customer', object_id='2')
        response = self.client.get('/api/v1/audit-logs/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([entry['object_id'] for entry in response.data], ['2'])


class GlobalSearchTests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_search_across_entities(self):
        customer = TestDataFactory.create_customer(name='Padaria Central')
        TestDataFactory.create_order(user=self.user, customer=customer)
        response = self.client.get('/api/v1/search/?q=Padaria')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['customers']), 1)

    def test_empty_query(self):
        response = self.client.get('/api/v1/search/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['customers'], [])
