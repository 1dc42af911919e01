"""
Integration tests for the catalog loader and partnership workflow.
"""
import pytest
from decimal import Decimal

from orderhub.exceptions import AuthenticationError, BusinessLogicError, NotFoundError, ResolutionError
from orderhub.models import Partnership, PartnershipStatus, Product, UserRole
from orderhub.services.catalog_service import (
    CatalogProduct, PLACEHOLDER_IMAGE, load_catalog, resolve_distributor_id, resolve_retailer_id,
    list_partner_retailers, list_available_retailers, list_partner_distributors, has_accepted_partnership
)
from orderhub.services.partnership_service import send_partnership_request, respond_to_partnership
from orderhub.services.retailer_service import split_contact_name, generate_temporary_password


class TestIdentityResolution:

    def test_resolves_profiles(self, session, distributor_user, distributor, retailer_user, retailer):
        assert resolve_distributor_id(session, distributor_user.id) == distributor.id
        assert resolve_retailer_id(session, retailer_user.id) == retailer.id

    def test_missing_user_is_authentication_error(self, session):
        with pytest.raises(AuthenticationError) as exc:
            resolve_distributor_id(session, None)
        assert exc.value.status_code == 401

    def test_wrong_profile_is_resolution_error(self, session, distributor_user, retailer_user):
        with pytest.raises(ResolutionError):
            resolve_retailer_id(session, distributor_user.id)
        with pytest.raises(ResolutionError):
            resolve_distributor_id(session, retailer_user.id)


class TestCatalogLoader:

    def test_loads_distributor_products(self, session, distributor, products):
        catalog = load_catalog(session, distributor.id)
        product_a, product_b = products

        assert list(catalog) == [product_a.id, product_b.id]
        a = catalog[product_a.id]
        assert a.name == 'Product A'
        assert a.price == Decimal('10.00')
        assert a.case_size == 12
        assert a.category == 'Produce'

        b = catalog[product_b.id]
        assert b.description == ''
        assert b.category == 'Uncategorized'
        assert b.image_url == PLACEHOLDER_IMAGE

    def test_other_distributors_products_are_excluded(self, session, products, account_factory):
        _, other = account_factory(UserRole.DISTRIBUTOR.value, 'Other Wholesale')
        session.add(Product(distributor_id=other.id, name='Foreign', price=Decimal('1.00'), case_size=1))
        session.commit()

        names = [p.name for p in load_catalog(session, other.id).values()]
        assert names == ['Foreign']

    def test_empty_catalog(self, session, distributor):
        assert load_catalog(session, distributor.id) == {}

    def test_to_dict_uses_string_prices(self, session, distributor, products):
        data = load_catalog(session, distributor.id)[products[1].id].to_dict()
        assert data['price'] == '5.50'
        assert data['stock_quantity'] == 15


class TestCatalogProductBoundary:
    """Malformed rows fail loudly instead of being patched."""

    def _product(self, **overrides):
        values = dict(id=1, name='Milk', price=Decimal('2.00'), case_size=6, stock_quantity=3)
        values.update(overrides)
        return Product(**values)

    @pytest.mark.parametrize('overrides', [
        {'name': ''},
        {'name': None},
        {'price': None},
        {'price': Decimal('-0.01')},
        {'case_size': 0},
        {'case_size': None},
    ])
    def test_invalid_rows_raise(self, overrides):
        with pytest.raises(ResolutionError):
            CatalogProduct.from_model(self._product(**overrides))

    def test_valid_row(self):
        product = CatalogProduct.from_model(self._product())
        assert product.price == Decimal('2.00')
        assert product.category == 'Uncategorized'


class TestPartnerLists:

    def test_partner_and_available_retailers(self, session, distributor, retailer, partnership, account_factory):
        _, newcomer = account_factory(UserRole.RETAILER.value, 'New Grocer')

        partners = list_partner_retailers(session, distributor.id)
        assert [(r.id, r.name, r.address) for r in partners] == [(retailer.id, 'Corner Market', '22 Main St')]

        available = list_available_retailers(session, distributor.id)
        assert [r.id for r in available] == [newcomer.id]

    def test_pending_request_is_neither_partner_nor_available(self, session, distributor, retailer):
        send_partnership_request(session, distributor.id, retailer.id)

        assert list_partner_retailers(session, distributor.id) == []
        assert list_available_retailers(session, distributor.id) == []
        assert has_accepted_partnership(session, distributor.id, retailer.id) is False

    def test_partner_distributors(self, session, distributor, retailer, partnership):
        distributors = list_partner_distributors(session, retailer.id)
        assert [(d.id, d.name) for d in distributors] == [(distributor.id, 'Fresh Foods Co')]
        assert has_accepted_partnership(session, distributor.id, retailer.id) is True


class TestPartnershipService:

    def test_request_then_accept(self, session, distributor, retailer):
        request = send_partnership_request(session, distributor.id, retailer.id)
        assert request.status == PartnershipStatus.PENDING.value

        accepted = respond_to_partnership(session, request.id, retailer.id, accept=True)
        assert accepted.status == PartnershipStatus.ACCEPTED.value

    def test_reject(self, session, distributor, retailer):
        request = send_partnership_request(session, distributor.id, retailer.id)
        rejected = respond_to_partnership(session, request.id, retailer.id, accept=False)
        assert rejected.status == PartnershipStatus.REJECTED.value

    def test_duplicate_request(self, session, distributor, retailer, partnership):
        with pytest.raises(BusinessLogicError):
            send_partnership_request(session, distributor.id, retailer.id)
        assert session.query(Partnership).count() == 1

    def test_unknown_retailer(self, session, distributor):
        with pytest.raises(NotFoundError):
            send_partnership_request(session, distributor.id, 4040)

    def test_cannot_answer_twice(self, session, distributor, retailer):
        request = send_partnership_request(session, distributor.id, retailer.id)
        respond_to_partnership(session, request.id, retailer.id, accept=True)

        with pytest.raises(BusinessLogicError):
            respond_to_partnership(session, request.id, retailer.id, accept=False)

    def test_only_addressed_retailer_can_answer(self, session, distributor, retailer, account_factory):
        _, stranger = account_factory(UserRole.RETAILER.value, 'Stranger Shop')
        request = send_partnership_request(session, distributor.id, retailer.id)

        with pytest.raises(NotFoundError):
            respond_to_partnership(session, request.id, stranger.id, accept=True)


class TestRetailerHelpers:

    @pytest.mark.parametrize('name, expected', [
        ('Jane Doe', ('Jane', 'Doe')),
        ('Jane Q  Doe', ('Jane', 'Q Doe')),
        ('Madonna', ('Madonna', '')),
        ('   ', ('', '')),
        (None, ('', '')),
    ])
    def test_split_contact_name(self, name, expected):
        assert split_contact_name(name) == expected

    def test_temporary_passwords_are_random(self):
        first, second = generate_temporary_password(), generate_temporary_password()
        assert first.startswith('temp-')
        assert first != second
