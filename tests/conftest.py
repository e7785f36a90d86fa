from datetime import date

import pytest

from fake_supabase import FakeSupabase
from ops_data import OpsData
from ops_store import OpsStore

# A Monday
TODAY = date(2026, 10, 19)


def seed_tables():
    """Two dedicated drivers, one freelancer, one inactive; three rotation locations and one fixed."""
    return {
        'settings': [{'id': 'settings-1', 'companyName': 'Es Teh Keliling', 'currency': 'IDR'}],
        'products': [
            {'id': 'p-2', 'name': 'Thai Tea', 'price': 8000, 'commission': 1000, 'imageUrl': '', 'status': 'active'},
            {'id': 'p-1', 'name': 'Es Teh', 'price': 5000, 'commission': 500, 'imageUrl': '', 'status': 'active'},
        ],
        'drivers': [
            {'id': 'd-budi', 'name': 'Budi', 'type': 'Dedicated', 'contact': '0811', 'status': 'active', 'location': ''},
            {'id': 'd-ani', 'name': 'Ani', 'type': 'Dedicated', 'contact': '0812', 'status': 'active', 'location': ''},
            {'id': 'd-citra', 'name': 'Citra', 'type': 'Freelance', 'contact': '0813', 'status': 'active', 'location': ''},
            {'id': 'd-dedi', 'name': 'Dedi', 'type': 'Dedicated', 'contact': '0814', 'status': 'inactive', 'location': ''},
        ],
        'locations': [
            {'id': 'l-pasar', 'name': 'Pasar Baru', 'category': 'Daily Rotation'},
            {'id': 'l-alun', 'name': 'Alun-alun', 'category': 'Daily Rotation'},
            {'id': 'l-kampus', 'name': 'Kampus', 'category': 'Daily Rotation'},
            {'id': 'l-gudang', 'name': 'Gudang', 'category': 'Fixed'},
        ],
        'sales': [
            {'id': 's-1', 'driverId': 'd-ani', 'productId': 'p-1', 'quantity': 2, 'total': 10000,
             'timestamp': '2026-10-16T08:00:00+00:00'},
            {'id': 's-2', 'driverId': 'd-budi', 'productId': 'p-2', 'quantity': 1, 'total': 8000,
             'timestamp': '2026-10-17T08:00:00+00:00'},
        ],
        'schedule': [
            {'id': 'old-1', 'driverId': 'd-ani', 'driverName': 'Ani', 'date': '2026-10-19',
             'locationId': 'l-pasar', 'locationName': 'Pasar Baru'},
            {'id': 'old-2', 'driverId': 'd-citra', 'driverName': 'Citra', 'date': '2026-10-19',
             'locationId': 'l-gudang', 'locationName': 'Gudang'},
        ],
        'payments': [],
    }


@pytest.fixture
def fake_client():
    return FakeSupabase(seed_tables())


@pytest.fixture
def store(fake_client):
    return OpsStore(client=fake_client)


@pytest.fixture
def ops(store, fake_client):
    """OpsData loaded from the seeded tables, with the call log reset."""
    data = OpsData(store=store, today=lambda: TODAY)
    data.fetch_all()
    assert data.error is None
    fake_client.calls.clear()
    return data
