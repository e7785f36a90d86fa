#!/usr/bin/env python3
"""
Fleet Ops Data
Keeps the local copy of every table in sync with the hosted store.

Local state is only changed after the matching store call has succeeded, so
a StorageError always leaves the previous state in place.
"""

import logging
import uuid
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from datetime import date, datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from ops_models import (
    CompanySettings, Driver, Location, Payment, Product, Sale, ScheduleEntry,
    DEFAULT_SETTINGS_ID, default_settings,
)
from ops_store import OpsError, OpsStore, StorageError
from schedule_generator import build_rotation

logger = logging.getLogger(__name__)

# table -> (order column, descending)
PROTECTED_TABLES = {
    'products': ('name', False),
    'drivers': ('name', False),
    'sales': ('timestamp', True),
    'locations': ('name', False),
    'schedule': ('date', False),
    'payments': ('timestamp', True),
}

DRIVER_UPDATE_FIELDS = ('name', 'type', 'contact', 'status', 'location')
LOCATION_UPDATE_FIELDS = ('name', 'category')


def _new_id() -> str:
    return str(uuid.uuid4())


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _parse_rows(model, rows: List[Dict[str, Any]], table: str) -> list:
    """Build model objects from a table's rows; a row that does not fit raises StorageError."""
    try:
        return [model.from_dict(r) for r in rows]
    except (KeyError, ValueError, TypeError) as err:
        raise StorageError(f"Unreadable '{table}' row: {err!r}") from err


def _single(rows: List[Dict[str, Any]], table: str, target: str) -> Dict[str, Any]:
    """Return the only row of a write result, or raise StorageError."""
    if len(rows) != 1:
        raise StorageError(f"Expected exactly one '{table}' row for {target}, got {len(rows)}")
    return rows[0]


class OpsData:
    """Local state for the fleet ops tables plus every operation on them."""

    def __init__(self, store: Optional[OpsStore] = None, today: Callable[[], date] = date.today):
        """
        Initialize OpsData.

        Args:
            store: Store to talk to (default: built from the environment)
            today: Returns the current date; generation and the daily
                override both start from it
        """
        self.store = store or OpsStore()
        self.today = today

        self.products: List[Product] = []
        self.drivers: List[Driver] = []
        self.sales: List[Sale] = []
        self.locations: List[Location] = []
        self.schedule: List[ScheduleEntry] = []
        self.payments: List[Payment] = []
        self.settings: Optional[CompanySettings] = None
        self.loading = False
        self.error: Optional[Exception] = None

    # -------------------------
    # Loading
    # -------------------------
    def fetch_all(self, authenticated: bool = True) -> None:
        """
        Reload everything from the store.

        Settings are always loaded (a default row is inserted when the table
        is empty). The other tables are only loaded when `authenticated`;
        otherwise they are cleared. Failures are kept in `self.error` and do
        not propagate.
        """
        logger.info("fetch_all started (authenticated=%s)", authenticated)
        self.loading = True
        self.error = None

        try:
            self.settings = self._load_settings()

            if authenticated:
                rows = self._fetch_protected()
                # parse everything before assigning so a bad row applies nothing
                products = _parse_rows(Product, rows['products'], 'products')
                drivers = _parse_rows(Driver, rows['drivers'], 'drivers')
                sales = _parse_rows(Sale, rows['sales'], 'sales')
                locations = _parse_rows(Location, rows['locations'], 'locations')
                schedule = _parse_rows(ScheduleEntry, rows['schedule'], 'schedule')
                payments = _parse_rows(Payment, rows['payments'], 'payments')

                self.products = products
                self.drivers = drivers
                self.sales = sales
                self.locations = locations
                self.schedule = schedule
                self.payments = payments
            else:
                logger.info("No session, clearing protected data")
                self.products = []
                self.drivers = []
                self.sales = []
                self.locations = []
                self.schedule = []
                self.payments = []
        except OpsError as err:
            self.error = err
            logger.error("Error fetching data: %s", err)
            if self.settings is None:
                self.settings = default_settings()
        finally:
            self.loading = False
            logger.info("fetch_all finished")

    def _load_settings(self) -> CompanySettings:
        row = self.store.select_first('settings')
        if row is not None:
            return _parse_rows(CompanySettings, [row], 'settings')[0]
        logger.info("No settings row found, inserting defaults")
        stored = self.store.insert('settings', default_settings().to_dict())
        return CompanySettings.from_dict(_single(stored, 'settings', DEFAULT_SETTINGS_ID))

    def _fetch_protected(self) -> Dict[str, List[Dict[str, Any]]]:
        """Select every protected table concurrently; the first failure aborts the whole fetch."""
        with ThreadPoolExecutor(max_workers=len(PROTECTED_TABLES)) as pool:
            futures = {
                table: pool.submit(self.store.select, table, order_by, descending)
                for table, (order_by, descending) in PROTECTED_TABLES.items()
            }
            done, pending = wait(futures.values(), return_when=FIRST_EXCEPTION)
            for future in done:
                if future.exception() is not None:
                    for other in pending:
                        other.cancel()
                    raise future.exception()
        return {table: future.result() for table, future in futures.items()}

    def _load_schedule(self) -> List[ScheduleEntry]:
        return _parse_rows(ScheduleEntry, self.store.select('schedule', order_by='date'), 'schedule')

    # -------------------------
    # Products
    # -------------------------
    def add_product(self, product_data: Dict[str, Any]) -> Product:
        row = dict(product_data, id=_new_id())
        product = Product.from_dict(_single(self.store.insert('products', row), 'products', row['id']))
        self.products = [product] + self.products
        return product

    def update_product(self, product: Product) -> Product:
        values = product.to_dict()
        values.pop('id')
        updated = Product.from_dict(_single(self.store.update('products', values, id=product.id), 'products', product.id))
        self.products = [updated if p.id == updated.id else p for p in self.products]
        return updated

    def delete_product(self, product_id: str) -> None:
        self.store.delete('products', id=product_id)
        self.products = [p for p in self.products if p.id != product_id]

    # -------------------------
    # Drivers
    # -------------------------
    def add_driver(self, driver_data: Dict[str, Any], user_id: Optional[str] = None) -> Driver:
        """
        Store a new driver profile.

        Creating the login account is done elsewhere; pass its id as
        `user_id` to link the profile to it.
        """
        row = dict(driver_data, id=_new_id(), userId=user_id)
        driver = Driver.from_dict(_single(self.store.insert('drivers', row), 'drivers', row['id']))
        self.drivers = [driver] + self.drivers
        return driver

    def update_driver(self, driver: Driver) -> Driver:
        data = driver.to_dict()
        values = {k: data[k] for k in DRIVER_UPDATE_FIELDS}
        updated = Driver.from_dict(_single(self.store.update('drivers', values, id=driver.id), 'drivers', driver.id))
        self.drivers = [updated if d.id == updated.id else d for d in self.drivers]
        return updated

    # -------------------------
    # Sales
    # -------------------------
    def add_sale(self, sale_data: Dict[str, Any]) -> Sale:
        row = dict(sale_data, id=_new_id(), timestamp=_now_iso())
        sale = Sale.from_dict(_single(self.store.insert('sales', row), 'sales', row['id']))
        self.sales = [sale] + self.sales
        return sale

    # -------------------------
    # Locations
    # -------------------------
    def add_location(self, location_data: Dict[str, Any]) -> Location:
        row = dict(location_data, id=_new_id())
        location = Location.from_dict(_single(self.store.insert('locations', row), 'locations', row['id']))
        self.locations = [location] + self.locations
        return location

    def update_location(self, location: Location) -> Location:
        data = location.to_dict()
        values = {k: data[k] for k in LOCATION_UPDATE_FIELDS}
        updated = Location.from_dict(_single(self.store.update('locations', values, id=location.id), 'locations', location.id))
        self.locations = [updated if l.id == updated.id else l for l in self.locations]
        return updated

    def delete_location(self, location_id: str) -> None:
        self.store.delete('locations', id=location_id)
        self.locations = [l for l in self.locations if l.id != location_id]

    # -------------------------
    # Schedule
    # -------------------------
    def generate_schedule(self, rotation_interval: int, excluded_days=()) -> List[ScheduleEntry]:
        """
        Replace the schedule of every active dedicated driver with a new rotation.

        Args:
            rotation_interval: Scheduled days a driver stays at one location
            excluded_days: Weekdays (0=Sunday ... 6=Saturday) left unscheduled

        Returns:
            The full schedule as stored after the write

        Raises:
            ValidationAbort: Nothing to schedule or bad options; the store is not touched
            StorageError: A store call failed; earlier steps are not rolled back
        """
        drivers = [d for d in self.drivers if d.in_rotation]
        locations = [l for l in self.locations if l.in_rotation]
        entries = build_rotation(drivers, locations, rotation_interval, excluded_days, self.today())

        self.store.delete_in('schedule', 'driverId', [d.id for d in drivers])
        self.store.insert('schedule', [e.to_dict() for e in entries])
        self.schedule = self._load_schedule()

        logger.info("Generated %d schedule entries for %d drivers over %d locations",
                    len(entries), len(drivers), len(locations))
        return self.schedule

    def update_schedule_for_driver_today(self, driver_id: str, new_location_id: str) -> Optional[ScheduleEntry]:
        """
        Move one driver to another location for today only.

        Returns None without calling the store when the location is unknown.
        Raises StorageError when the driver has no entry for today.
        """
        location = next((l for l in self.locations if l.id == new_location_id), None)
        if location is None:
            return None

        today_iso = self.today().isoformat()
        rows = self.store.update(
            'schedule',
            {'locationId': location.id, 'locationName': location.name},
            driverId=driver_id,
            date=today_iso
        )
        entry = ScheduleEntry.from_dict(_single(rows, 'schedule', f"driver {driver_id} on {today_iso}"))
        self.schedule = [
            entry if (e.driver_id == driver_id and e.date == today_iso) else e
            for e in self.schedule
        ]
        return entry

    def clear_schedule(self) -> None:
        self.store.delete_all('schedule')
        self.schedule = []

    # -------------------------
    # Payments
    # -------------------------
    def add_payment(self, driver_id: str, period: str, amount: float) -> Payment:
        row = {'id': _new_id(), 'driverId': driver_id, 'period': period, 'amount': amount, 'timestamp': _now_iso()}
        payment = Payment.from_dict(_single(self.store.insert('payments', row), 'payments', row['id']))
        self.payments = [payment] + self.payments
        return payment

    # -------------------------
    # Settings
    # -------------------------
    def update_settings(self, changes: Dict[str, Any]) -> Optional[CompanySettings]:
        if self.settings is None:
            return None
        values = {k: v for k, v in changes.items() if k != 'id'}
        row = _single(self.store.update('settings', values, id=self.settings.id), 'settings', self.settings.id)
        self.settings = CompanySettings.from_dict(row)
        return self.settings

    def factory_reset(self) -> None:
        logger.warning("Factory reset is not supported against the hosted store. "
                       "Truncate the tables from the store dashboard instead.")
