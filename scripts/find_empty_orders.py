import sys
import os

# Add project root to path
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from orderhub import create_app
from orderhub.database import get_session
from orderhub.services.order_service import find_orders_without_items


def find_empty_orders():
    app = create_app()
    with app.app_context():
        session = get_session()
        orders = find_orders_without_items(session)
        print(f"Found {len(orders)} orders without items:")
        for o in orders:
            print(f"ID: {o.id}, Number: {o.order_number}, Distributor: {o.distributor_id}, Retailer: {o.retailer_id}, Status: {o.status}, Total: {o.total}")

if __name__ == "__main__":
    find_empty_orders()
