"""
Integration tests for order listing, lookup and status changes.
"""
import pytest
from decimal import Decimal

from orderhub.exceptions import BusinessLogicError, NotFoundError
from orderhub.models import Order, OrderStatus, PaymentStatus
from orderhub.services.order_service import (
    list_orders_for_distributor, list_orders_for_retailer, get_order_details, update_order_status
)


@pytest.fixture
def orders(session, distributor, retailer):
    """Three orders in different states."""
    created = []
    for number, status, payment in [
        ('ORD-20260101-00000001', OrderStatus.PENDING, PaymentStatus.PENDING),
        ('ORD-20260101-00000002', OrderStatus.PROCESSING, PaymentStatus.PAID),
        ('ORD-20260101-00000003', OrderStatus.CANCELLED, PaymentStatus.FAILED),
    ]:
        order = Order(
            order_number=number,
            distributor_id=distributor.id,
            retailer_id=retailer.id,
            status=status.value,
            payment_status=payment.value,
            subtotal=Decimal('10.00'),
            total=Decimal('11.00'),
            tax=Decimal('1.00')
        )
        session.add(order)
        created.append(order)
    session.commit()
    return created


class TestListing:

    def test_newest_first(self, session, distributor, orders):
        listed = list_orders_for_distributor(session, distributor.id)
        assert [o.order_number for o in listed] == [
            'ORD-20260101-00000003', 'ORD-20260101-00000002', 'ORD-20260101-00000001'
        ]

    @pytest.mark.parametrize('status, expected', [
        ('pending', ['ORD-20260101-00000001']),
        ('confirmed', ['ORD-20260101-00000002']),
        ('shipped', ['ORD-20260101-00000002']),
        ('delivered', []),
        ('all', ['ORD-20260101-00000003', 'ORD-20260101-00000002', 'ORD-20260101-00000001']),
    ])
    def test_status_filter(self, session, distributor, orders, status, expected):
        listed = list_orders_for_distributor(session, distributor.id, status=status)
        assert [o.order_number for o in listed] == expected

    def test_payment_filter(self, session, distributor, orders):
        listed = list_orders_for_distributor(session, distributor.id, payment_status='paid')
        assert [o.order_number for o in listed] == ['ORD-20260101-00000002']

        with pytest.raises(BusinessLogicError):
            list_orders_for_distributor(session, distributor.id, payment_status='refunded')

    def test_retailer_listing(self, session, retailer, orders):
        listed = list_orders_for_retailer(session, retailer.id, status='cancelled')
        assert [o.order_number for o in listed] == ['ORD-20260101-00000003']


class TestDetails:

    def test_scoped_lookup(self, session, distributor, retailer, orders):
        order_id = orders[0].id
        assert get_order_details(session, order_id, distributor_id=distributor.id).id == order_id
        assert get_order_details(session, order_id, retailer_id=retailer.id).id == order_id

    def test_wrong_scope_is_not_found(self, session, distributor, orders):
        with pytest.raises(NotFoundError):
            get_order_details(session, orders[0].id, distributor_id=distributor.id + 1000)

    def test_unscoped_lookup_is_refused(self, session, orders):
        with pytest.raises(BusinessLogicError):
            get_order_details(session, orders[0].id)


class TestStatusChanges:

    def test_pending_to_processing_to_completed(self, session, distributor, orders):
        order = update_order_status(session, orders[0].id, 'processing', distributor.id)
        assert order.status == OrderStatus.PROCESSING.value

        order = update_order_status(session, orders[0].id, 'delivered', distributor.id)
        assert order.status == OrderStatus.COMPLETED.value

    def test_cannot_skip_processing(self, session, distributor, orders):
        with pytest.raises(BusinessLogicError):
            update_order_status(session, orders[0].id, 'completed', distributor.id)
        assert session.get(Order, orders[0].id).status == OrderStatus.PENDING.value

    def test_cancelled_is_terminal(self, session, distributor, orders):
        with pytest.raises(BusinessLogicError):
            update_order_status(session, orders[2].id, 'pending', distributor.id)

    def test_unknown_status(self, session, distributor, orders):
        with pytest.raises(BusinessLogicError):
            update_order_status(session, orders[0].id, 'teleported', distributor.id)
