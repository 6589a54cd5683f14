"""
Integration tests for the cash payment endpoint.

The posting procedures live in MySQL, so these tests stop at the
``Transaction.execute`` seam: they assert on the ordered procedure
calls the view queues instead of running them.
"""
import uuid
from unittest import mock

from django.db import DatabaseError
from rest_framework import status
from rest_framework.test import APITestCase, APIClient

from core.models import AuditEvent, Project, SessionToken, User
from core.services.cash import CAUTION_WITH_ITEMS_MESSAGE, MISSING_ITEMS_MESSAGE


def procedure_name(sql: str) -> str:
    return sql.split()[1].split('(')[0]


class CashCreateTests(APITestCase):
    url = '/api/cash'

    def setUp(self) -> None:
        self.project = Project.objects.create(name='Test Hospital', abbr='TST')
        self.other_project = Project.objects.create(name='Other Hospital', abbr='OTH')
        self.user = User.objects.create_user(
            username='cashier',
            password='P@ssw0rd1',
            display_name='Main Cashier',
        )
        self.user.projects.add(self.project)

        self.debtor_uuid = str(uuid.uuid4())
        self.invoice_uuids = [str(uuid.uuid4()), str(uuid.uuid4())]

        execute_patcher = mock.patch('core.db.Transaction.execute', autospec=True, return_value=[])
        publish_patcher = mock.patch('core.topic.publish')
        self.execute = execute_patcher.start()
        self.publish = publish_patcher.start()
        self.addCleanup(execute_patcher.stop)
        self.addCleanup(publish_patcher.stop)

    def authenticate(self, user: User, project: Project = None) -> APIClient:
        token = SessionToken.objects.create(user=user, project=project)
        client = APIClient()
        client.credentials(HTTP_AUTHORIZATION=f'Token {token.key}')
        return client

    def payment(self, **overrides) -> dict:
        data = {
            'amount': '150.00',
            'currency_id': 1,
            'cashbox_id': 2,
            'debtor_uuid': self.debtor_uuid,
            'date': '2026-10-16T09:30:00Z',
            'is_caution': False,
            'description': 'Consultation fees',
            'items': [{'invoice_uuid': u} for u in self.invoice_uuids],
        }
        data.update(overrides)
        return data

    def post(self, payment: dict, user: User = None):
        if user is None:
            client = self.authenticate(self.user, self.project)
        else:
            client = self.authenticate(user)
        return client.post(self.url, {'payment': payment}, format='json')

    def queued_queries(self) -> list:
        self.assertEqual(self.execute.call_count, 1)
        trx = self.execute.call_args[0][0]
        return trx.queries

    # -- rejections ---------------------------------------------------------

    def test_invoice_payment_without_items_is_rejected(self):
        for items in ([], None):
            payment = self.payment()
            if items is None:
                payment.pop('items')
            else:
                payment['items'] = items
            response = self.post(payment)
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
            self.assertFalse(response.data['ok'])
            self.assertEqual(response.data['error']['code'], 'bad_request')
            self.assertEqual(response.data['error']['message'], MISSING_ITEMS_MESSAGE)
        self.execute.assert_not_called()
        self.publish.assert_not_called()
        self.assertFalse(AuditEvent.objects.filter(action='cash_create').exists())

    def test_caution_payment_with_items_is_rejected(self):
        response = self.post(self.payment(is_caution=True))
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error']['message'], CAUTION_WITH_ITEMS_MESSAGE)
        self.execute.assert_not_called()
        self.publish.assert_not_called()

    def test_malformed_payload_is_rejected(self):
        client = self.authenticate(self.user, self.project)
        response = client.post(self.url, {'amount': 10}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.post(self.payment(debtor_uuid='not-a-uuid'))
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('debtor_uuid', response.data['error']['message']['payment'])

        response = self.post(self.payment(amount='-5'))
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.execute.assert_not_called()

    def test_user_without_project_is_forbidden(self):
        user = User.objects.create_user(username='drifter', password='P@ssw0rd1')
        response = self.post(self.payment(), user=user)
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.execute.assert_not_called()

    def test_revoked_project_is_forbidden(self):
        self.user.projects.remove(self.project)
        response = self.post(self.payment())
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.execute.assert_not_called()

    def test_anonymous_request_is_rejected(self):
        response = APIClient().post(self.url, {'payment': self.payment()}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    # -- invoice payments ---------------------------------------------------

    def test_invoice_payment_runs_posting_sequence(self):
        response = self.post(self.payment())
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['ok'])

        queries = self.queued_queries()
        self.assertEqual([procedure_name(sql) for sql, _ in queries], [
            'StageCash',
            'StageCashItem',
            'StageCashItem',
            'CalculateCashInvoiceBalances',
            'WriteCash',
            'WriteCashItems',
            'PostCash',
        ])

        cash_uuid = uuid.UUID(response.data['uuid']).bytes
        for _, params in queries[3:]:
            self.assertEqual(params, [cash_uuid])

    def test_items_carry_parent_and_generated_uuids(self):
        given = str(uuid.uuid4())
        items = [{'uuid': given, 'invoice_uuid': self.invoice_uuids[0]},
                 {'invoice_uuid': self.invoice_uuids[1]}]
        response = self.post(self.payment(items=items))
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        cash_uuid = uuid.UUID(response.data['uuid']).bytes

        item_rows = [params for sql, params in self.queued_queries() if procedure_name(sql) == 'StageCashItem']
        self.assertEqual(len(item_rows), 2)
        for row, invoice_uuid in zip(item_rows, self.invoice_uuids):
            item_uuid, parent_uuid, invoice_bid = row
            self.assertEqual(parent_uuid, cash_uuid)
            self.assertEqual(len(item_uuid), 16)
            self.assertEqual(invoice_bid, uuid.UUID(invoice_uuid).bytes)
        self.assertEqual(item_rows[0][0], uuid.UUID(given).bytes)
        self.assertNotEqual(item_rows[1][0], item_rows[0][0])

    def test_item_without_invoice_is_staged_with_null_invoice(self):
        items = [{'invoice_uuid': self.invoice_uuids[0]}, {}, {'invoice_uuid': None}]
        response = self.post(self.payment(items=items))
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

        item_rows = [params for sql, params in self.queued_queries() if procedure_name(sql) == 'StageCashItem']
        self.assertEqual([row[2] for row in item_rows], [uuid.UUID(self.invoice_uuids[0]).bytes, None, None])
        for row in item_rows:
            self.assertEqual(len(row[0]), 16)

    def test_session_values_override_client_values(self):
        response = self.post(self.payment(project_id=self.other_project.id, user_id=9999))
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

        sql, params = self.queued_queries()[0]
        self.assertEqual(procedure_name(sql), 'StageCash')
        self.assertEqual(len(params), 10)
        amount, currency_id, cashbox_id, debtor, project_id, _date, user_id, is_caution, description, cash_uuid = params
        self.assertEqual(str(amount), '150.0000')
        self.assertEqual((currency_id, cashbox_id), (1, 2))
        self.assertEqual(debtor, uuid.UUID(self.debtor_uuid).bytes)
        self.assertEqual(project_id, self.project.id)
        self.assertEqual(user_id, self.user.id)
        self.assertEqual(is_caution, 0)
        self.assertEqual(description, 'Consultation fees')
        self.assertEqual(cash_uuid, uuid.UUID(response.data['uuid']).bytes)

    def test_client_uuid_is_kept(self):
        given = str(uuid.uuid4())
        response = self.post(self.payment(uuid=given))
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['uuid'], given)

    def test_description_is_sanitised(self):
        response = self.post(self.payment(description='<script>x</script>Paid <b>cash</b>'))
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        description = self.queued_queries()[0][1][8]
        self.assertNotIn('<', description)
        self.assertIn('Paid cash', description)

    def test_description_keeps_plain_text_characters(self):
        response = self.post(self.payment(description=' Smith & Sons <i>ward 3</i> '))
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(self.queued_queries()[0][1][8], 'Smith & Sons ward 3')

    def test_creation_event_published_once(self):
        with self.captureOnCommitCallbacks(execute=True):
            response = self.post(self.payment())
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.publish.assert_called_once()
        channel, event = self.publish.call_args[0]
        self.assertEqual(channel, 'finance')
        self.assertEqual(event, {
            'event': 'create',
            'entity': 'payment',
            'user_id': self.user.id,
            'user': 'Main Cashier',
            'uuid': response.data['uuid'],
        })

    def test_creation_event_waits_for_commit(self):
        with self.captureOnCommitCallbacks() as callbacks:
            response = self.post(self.payment())
            self.assertEqual(response.status_code, status.HTTP_201_CREATED)
            self.publish.assert_not_called()
        self.assertEqual(len(callbacks), 1)
        callbacks[0]()
        self.publish.assert_called_once()
        self.assertEqual(self.publish.call_args[0][1]['uuid'], response.data['uuid'])

    def test_creation_is_audited(self):
        response = self.post(self.payment())
        event = AuditEvent.objects.get(action='cash_create')
        self.assertEqual(event.object_id, response.data['uuid'])
        self.assertEqual(event.user, self.user)
        self.assertEqual(event.detail['items'], 2)

    def test_legacy_path_is_routed(self):
        client = self.authenticate(self.user, self.project)
        response = client.post('/cash', {'payment': self.payment()}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

    # -- caution payments ---------------------------------------------------

    def test_caution_payment_skips_item_procedures(self):
        payment = self.payment(is_caution=True)
        payment.pop('items')
        response = self.post(payment)
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

        queries = self.queued_queries()
        self.assertEqual([procedure_name(sql) for sql, _ in queries], ['StageCash', 'WriteCash', 'PostCash'])
        self.assertEqual(queries[0][1][7], 1)

    def test_caution_payment_with_empty_items_is_accepted(self):
        response = self.post(self.payment(is_caution=True, items=[]))
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

    # -- failures -----------------------------------------------------------

    def test_database_failure_propagates_to_error_handler(self):
        self.execute.side_effect = DatabaseError('PostCash failed')
        with self.captureOnCommitCallbacks(execute=True) as callbacks:
            response = self.post(self.payment())
        self.assertEqual(callbacks, [])
        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertFalse(response.data['ok'])
        self.assertEqual(response.data['error']['code'], 'server_error')
        self.assertIn('PostCash failed', response.data['error']['message'])
        self.publish.assert_not_called()
        self.assertFalse(AuditEvent.objects.filter(action='cash_create').exists())

    def test_publish_failure_does_not_fail_committed_payment(self):
        self.publish.side_effect = RuntimeError('channel layer down')
        with self.captureOnCommitCallbacks(execute=True):
            response = self.post(self.payment())
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.publish.assert_called_once()
        self.assertTrue(AuditEvent.objects.filter(action='cash_create', object_id=response.data['uuid']).exists())
