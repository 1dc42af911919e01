import pytest
from decimal import Decimal
import os
import uuid

# Tests run against an in-memory SQLite database unless told otherwise
os.environ['DATABASE_URL'] = os.environ.get('TEST_DATABASE_URL', 'sqlite://')
os.environ.setdefault('WTF_CSRF_ENABLED', 'false')

from orderhub import create_app
from orderhub.database import get_session, create_all, drop_all
from orderhub.models import (
    AppUser, UserRole, Distributor, Retailer, Partnership, PartnershipStatus,
    ProductCategory, Product
)


@pytest.fixture(scope='session')
def app():
    """Create application instance for testing."""
    app = create_app('config.Config')
    app.config['TESTING'] = True
    app.config['WTF_CSRF_ENABLED'] = False
    return app


@pytest.fixture(scope='function', autouse=True)
def tables(app):
    """Fresh schema for every test."""
    create_all()
    yield
    get_session().remove()
    drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def session():
    """Create database session for testing."""
    session = get_session()
    yield session
    session.rollback()
    session.close()


def detached(session, *objects):
    """
    Reload committed objects and detach them from the session.

    Requests share the scoped session with the tests: a commit inside a request
    expires every object it holds and the teardown then closes it. Detached
    snapshots keep their loaded columns through both, so fixtures can be read
    at any point of a test. Change rows through session.get(), not through them.
    """
    for obj in objects:
        session.refresh(obj)
        session.expunge(obj)
    return objects[0] if len(objects) == 1 else objects


def make_account(session, role, business_name, email=None, address=None):
    """Create a user plus its distributor/retailer profile (detached)."""
    suffix = str(uuid.uuid4())[:8]
    user = AppUser(
        email=email or f'{role}-{suffix}@test.com',
        first_name='Test',
        last_name=role.capitalize(),
        business_name=business_name,
        role=role,
        active=True
    )
    user.set_password('password123')
    session.add(user)
    session.flush()

    if role == UserRole.DISTRIBUTOR.value:
        profile = Distributor(user_id=user.id, business_address=address)
    else:
        profile = Retailer(user_id=user.id, store_address=address)
    session.add(profile)
    session.commit()

    return detached(session, user, profile)


@pytest.fixture(scope='function')
def distributor_account(session):
    """(user, distributor) for 'Fresh Foods Co'."""
    return make_account(session, UserRole.DISTRIBUTOR.value, 'Fresh Foods Co', address='1 Warehouse Rd')


@pytest.fixture(scope='function')
def distributor_user(distributor_account):
    return distributor_account[0]


@pytest.fixture(scope='function')
def distributor(distributor_account):
    return distributor_account[1]


@pytest.fixture(scope='function')
def retailer_account(session):
    """(user, retailer) for 'Corner Market'."""
    return make_account(session, UserRole.RETAILER.value, 'Corner Market', address='22 Main St')


@pytest.fixture(scope='function')
def retailer_user(retailer_account):
    return retailer_account[0]


@pytest.fixture(scope='function')
def retailer(retailer_account):
    return retailer_account[1]


@pytest.fixture(scope='function')
def partnership(session, distributor, retailer):
    """Accepted partnership between the two fixtures."""
    partnership = Partnership(
        distributor_id=distributor.id,
        retailer_id=retailer.id,
        status=PartnershipStatus.ACCEPTED.value
    )
    session.add(partnership)
    session.commit()
    return detached(session, partnership)


@pytest.fixture(scope='function')
def category(session):
    category = ProductCategory(name='Produce')
    session.add(category)
    session.commit()
    return detached(session, category)


@pytest.fixture(scope='function')
def products(session, distributor, category):
    """Product A ($10.00) and Product B ($5.50) of the distributor."""
    product_a = Product(
        distributor_id=distributor.id,
        name='Product A',
        description='Crate of apples',
        price=Decimal('10.00'),
        case_size=12,
        category_id=category.id,
        stock_quantity=40
    )
    product_b = Product(
        distributor_id=distributor.id,
        name='Product B',
        price=Decimal('5.50'),
        case_size=6,
        stock_quantity=15
    )
    session.add_all([product_a, product_b])
    session.commit()
    return detached(session, product_a, product_b)


def login(client, user):
    """Simulate login by setting the session user id (accepts a user or an id)."""
    user_id = getattr(user, 'id', user)
    with client.session_transaction() as sess:
        sess['user_id'] = user_id


@pytest.fixture(scope='function')
def distributor_client(client, distributor_user):
    """Test client logged in as the distributor."""
    login(client, distributor_user)
    return client


@pytest.fixture(scope='function')
def retailer_client(client, retailer_user):
    """Test client logged in as the retailer."""
    login(client, retailer_user)
    return client


@pytest.fixture(scope='function')
def account_factory(session):
    """Create extra distributor/retailer accounts inside a test."""
    def _create(role, business_name, email=None, address=None):
        return make_account(session, role, business_name, email=email, address=address)
    return _create


@pytest.fixture(scope='function')
def login_as(client):
    """Log the shared test client in as any user."""
    def _login(user):
        login(client, user)
        return client
    return _login
