#!/usr/bin/env python3
"""
Tests for the store wrapper.
"""

import pytest

from fake_supabase import FakeSupabase
from ops_store import NIL_UUID, ConfigError, OpsStore, StorageError


def test_missing_credentials(monkeypatch):
    monkeypatch.delenv("SUPABASE_URL", raising=False)
    monkeypatch.delenv("SUPABASE_KEY", raising=False)

    with pytest.raises(ConfigError):
        OpsStore()


def test_api_error_becomes_storage_error(store, fake_client):
    fake_client.fail('insert', 'payments', message='permission denied')

    with pytest.raises(StorageError) as excinfo:
        store.insert('payments', {'id': 'x'})

    assert 'permission denied' in str(excinfo.value)
    assert excinfo.value.code == 'XX000'
    assert excinfo.value.__cause__ is not None


def test_select_orders_rows(store):
    rows = store.select('drivers', order_by='name', descending=True)
    assert [r['name'] for r in rows] == ['Dedi', 'Citra', 'Budi', 'Ani']


def test_select_first_on_empty_table():
    store = OpsStore(client=FakeSupabase({'settings': []}))
    assert store.select_first('settings') is None


def test_update_matches_every_column(store):
    rows = store.update('schedule', {'locationName': 'X'}, driverId='d-ani', date='2026-10-19')
    assert [r['id'] for r in rows] == ['old-1']

    assert store.update('schedule', {'locationName': 'X'}, driverId='d-ani', date='2026-10-20') == []


def test_delete_requires_a_filter(store):
    with pytest.raises(ValueError):
        store.delete('products')


def test_delete_in_and_delete_all(store, fake_client):
    store.delete_in('drivers', 'id', ['d-ani', 'd-budi'])
    assert [r['id'] for r in fake_client.tables['drivers']] == ['d-citra', 'd-dedi']

    deleted = store.delete_all('schedule')
    assert len(deleted) == 2
    assert fake_client.tables['schedule'] == []
    assert NIL_UUID not in {r['id'] for r in deleted}
