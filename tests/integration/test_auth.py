"""
Integration tests for authentication and the catalog/partnership endpoints.
"""
from orderhub.models import AppUser, UserRole


class TestLogin:
    """Tests for /auth endpoints."""

    def test_login_success(self, client, distributor_user, distributor):
        response = client.post('/auth/login', json={
            'email': distributor_user.email.upper(), 'password': 'password123'
        })
        data = response.get_json()

        assert response.status_code == 200
        assert data['user']['id'] == distributor_user.id
        assert data['user']['role'] == UserRole.DISTRIBUTOR.value
        assert data['user']['distributor_id'] == distributor.id
        assert data['user']['retailer_id'] is None

        with client.session_transaction() as sess:
            assert sess['user_id'] == distributor_user.id

    def test_login_with_form_post(self, client, retailer_user, retailer):
        response = client.post('/auth/login', data={'email': retailer_user.email, 'password': 'password123'})
        assert response.status_code == 200
        assert response.get_json()['user']['retailer_id'] == retailer.id

    def test_wrong_password(self, client, distributor_user):
        response = client.post('/auth/login', json={'email': distributor_user.email, 'password': 'nope'})
        assert response.status_code == 401
        assert response.get_json()['message'] == 'Invalid email or password'

    def test_missing_credentials(self, client):
        response = client.post('/auth/login', json={'email': ''})
        assert response.status_code == 401

    def test_inactive_user_cannot_login(self, client, session, distributor_user):
        session.get(AppUser, distributor_user.id).active = False
        session.commit()

        response = client.post('/auth/login', json={'email': distributor_user.email, 'password': 'password123'})
        assert response.status_code == 401

    def test_logout_clears_session_and_draft(self, distributor_client, products):
        distributor_client.put(f'/orders/draft/lines/{products[0].id}', json={'quantity': 1})
        distributor_client.post('/auth/logout')

        with distributor_client.session_transaction() as sess:
            assert 'user_id' not in sess
            assert 'order_draft' not in sess
        assert distributor_client.get('/auth/me').status_code == 401

    def test_me(self, retailer_client, retailer_user):
        data = retailer_client.get('/auth/me').get_json()
        assert data['user']['email'] == retailer_user.email
        assert data['user']['name'] == 'Test Retailer'

    def test_stale_session_user_is_dropped(self, client):
        with client.session_transaction() as sess:
            sess['user_id'] = 999999

        assert client.get('/auth/me').status_code == 401
        with client.session_transaction() as sess:
            assert 'user_id' not in sess


class TestCatalogEndpoints:

    def test_distributor_sees_own_products(self, distributor_client, products):
        data = distributor_client.get('/catalog/products').get_json()
        assert [p['name'] for p in data['products']] == ['Product A', 'Product B']
        assert data['products'][0]['price'] == '10.00'

    def test_partner_retailer_browses_distributor_catalog(self, retailer_client, distributor, products, partnership):
        response = retailer_client.get(f'/catalog/products?distributor_id={distributor.id}')
        assert response.status_code == 200
        assert len(response.get_json()['products']) == 2

    def test_non_partner_retailer_is_refused(self, retailer_client, distributor, products):
        response = retailer_client.get(f'/catalog/products?distributor_id={distributor.id}')
        assert response.status_code == 403

    def test_retailer_must_name_distributor(self, retailer_client):
        assert retailer_client.get('/catalog/products').status_code == 400

    def test_retailer_lists(self, distributor_client, retailer, partnership, account_factory):
        account_factory(UserRole.RETAILER.value, 'Fresh Start Market')

        partners = distributor_client.get('/catalog/retailers').get_json()['retailers']
        available = distributor_client.get('/catalog/retailers/available').get_json()['retailers']

        assert [r['name'] for r in partners] == ['Corner Market']
        assert [r['name'] for r in available] == ['Fresh Start Market']

    def test_partner_distributors(self, retailer_client, distributor, partnership):
        data = retailer_client.get('/catalog/distributors').get_json()
        assert data['distributors'][0]['id'] == distributor.id

    def test_distributor_only_lists(self, retailer_client):
        assert retailer_client.get('/catalog/retailers').status_code == 403


class TestPartnershipEndpoints:

    def test_request_and_accept(self, client, distributor_user, retailer_user, distributor, retailer, login_as):
        login_as(distributor_user)
        response = client.post('/partnerships/', json={'retailer_id': retailer.id})
        assert response.status_code == 201
        partnership_id = response.get_json()['partnership']['id']

        login_as(retailer_user)
        response = client.post(f'/partnerships/{partnership_id}/respond', json={'accept': True})
        assert response.status_code == 200
        assert response.get_json()['partnership']['status'] == 'accepted'

    def test_duplicate_request(self, distributor_client, retailer, partnership):
        response = distributor_client.post('/partnerships/', json={'retailer_id': retailer.id})
        assert response.status_code == 400

    def test_request_requires_retailer_id(self, distributor_client, distributor):
        assert distributor_client.post('/partnerships/', json={}).status_code == 400

    def test_respond_requires_accept_flag(self, retailer_client, retailer):
        assert retailer_client.post('/partnerships/1/respond', json={}).status_code == 400
