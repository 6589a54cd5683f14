"""
Cash payment intake.

A cash payment is money received at a cashbox, either against one or
more previous invoices (one cash item per invoice) or as a standalone
caution deposit. This module validates the kind of payment, shapes the
payload into the positional rows the posting procedures expect and
runs the posting sequence in a single transaction:

    StageCash -> StageCashItem* -> CalculateCashInvoiceBalances
              -> WriteCash -> WriteCashItems -> PostCash

Balance calculation and posting happen inside those procedures.
"""
from __future__ import annotations

import logging
import uuid
from typing import Any, Dict, List, Optional

from django.db import transaction
from django.utils import timezone

from core import db, topic
from core.exceptions import BadRequest
from core.services.audit import log_action
from core.util import take

logger = logging.getLogger(__name__)

CASH_ORDER = take(
    'amount', 'currency_id', 'cashbox_id', 'debtor_uuid', 'project_id', 'date',
    'user_id', 'is_caution', 'description', 'uuid',
)

CASH_ITEM_ORDER = take('uuid', 'cash_uuid', 'invoice_uuid')

MISSING_ITEMS_MESSAGE = 'You must submit cash items with the payments against previous invoices.'
CAUTION_WITH_ITEMS_MESSAGE = (
    'You submitted payment against items marked as a caution payment. '
    'Please submit either a caution with no items or a payment marked with is_caution = 0.'
)


def check_payment_kind(payment: Dict[str, Any]) -> None:
    """Reject invoice payments without items and cautions with items."""
    is_invoice_payment = not payment.get('is_caution')
    has_items = bool(payment.get('items'))

    if is_invoice_payment and not has_items:
        raise BadRequest(MISSING_ITEMS_MESSAGE)
    if not is_invoice_payment and has_items:
        raise BadRequest(CAUTION_WITH_ITEMS_MESSAGE)


def process_cash_items(cash_uuid: bytes, items: List[Dict[str, Any]]) -> List[list]:
    """Return the cash items as rows of ``(uuid, cash_uuid, invoice_uuid)``.

    Missing item uuids are generated and every identifier is converted
    to its binary form.
    """
    rows = []
    for item in items:
        item = dict(item, cash_uuid=cash_uuid, uuid=item.get('uuid') or uuid.uuid4())
        item = db.convert(item, ['uuid', 'invoice_uuid'])
        rows.append(CASH_ITEM_ORDER(item))
    return rows


def process_cash(cash_uuid: bytes, payment: Dict[str, Any]) -> list:
    """Return the payment as the ordered row consumed by ``StageCash``."""
    payment = dict(payment, uuid=cash_uuid)
    payment.pop('items', None)
    payment = db.convert(payment, ['debtor_uuid'])
    payment['date'] = payment.get('date') or timezone.now()
    payment['is_caution'] = int(bool(payment.get('is_caution')))
    return CASH_ORDER(payment)


def build_posting_transaction(cash_uuid: bytes, cash_row: list,
                              item_rows: Optional[List[list]] = None) -> db.Transaction:
    is_invoice_payment = item_rows is not None
    trx = db.transaction()
    trx.add_procedure('StageCash', *cash_row)

    if is_invoice_payment:
        for row in item_rows:
            trx.add_procedure('StageCashItem', *row)
        trx.add_procedure('CalculateCashInvoiceBalances', cash_uuid)

    trx.add_procedure('WriteCash', cash_uuid)

    if is_invoice_payment:
        trx.add_procedure('WriteCashItems', cash_uuid)

    trx.add_procedure('PostCash', cash_uuid)
    return trx


def _publish_created(user, readable_uuid: str) -> None:
    try:
        topic.publish(topic.channels.FINANCE, {
            'event': topic.events.CREATE,
            'entity': topic.entities.PAYMENT,
            'user_id': user.id,
            'user': user.get_display_name(),
            'uuid': readable_uuid,
        })
    except Exception:
        # the payment is committed; subscribers only miss a notification
        logger.exception('failed to publish creation of cash payment %s', readable_uuid)


def create_cash_payment(payment: Dict[str, Any], user, project_id: int) -> bytes:
    """Post a cash payment on behalf of ``user`` and return its binary uuid.

    ``project_id`` is the project bound to the caller's credential and,
    with ``user.id``, overrides whatever the client sent. Validation
    happens before anything touches the database; database errors
    propagate unchanged. The creation event goes out once the
    surrounding transaction commits.
    """
    check_payment_kind(payment)

    cash_uuid = db.bid(payment.get('uuid') or uuid.uuid4())

    payment = dict(payment, project_id=project_id, user_id=user.id)

    item_rows = None
    if not payment.get('is_caution'):
        item_rows = process_cash_items(cash_uuid, payment['items'])

    cash_row = process_cash(cash_uuid, payment)

    readable_uuid = db.unparse(cash_uuid)

    with transaction.atomic():
        build_posting_transaction(cash_uuid, cash_row, item_rows).execute()
        log_action(user=user, action='cash_create', object_type='cash', object_id=readable_uuid,
                   detail={'items': len(item_rows or []), 'is_caution': bool(payment.get('is_caution'))})
        transaction.on_commit(lambda: _publish_created(user, readable_uuid))

    logger.info('cash payment %s posted by user %s (project %s)', readable_uuid, user.id, project_id)

    return cash_uuid
