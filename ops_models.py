#!/usr/bin/env python3
"""
Fleet Ops Data Models
Data classes for the rows stored in the remote tables.

Column names on the wire are camelCase (driverId, locationName, ...) to match
the hosted tables; attribute names are snake_case.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional
import json


class DriverType(str, Enum):
    DEDICATED = "Dedicated"
    FREELANCE = "Freelance"


class LocationCategory(str, Enum):
    DAILY_ROTATION = "Daily Rotation"
    FIXED = "Fixed"


ACTIVE = "active"
INACTIVE = "inactive"


class _JsonMixin:
    """Shared JSON helpers; subclasses provide to_dict/from_dict."""

    def to_json(self) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict())

    @classmethod
    def from_json(cls, json_str: str):
        """Create from JSON string."""
        return cls.from_dict(json.loads(json_str))


@dataclass
class Product(_JsonMixin):
    """A product drivers sell."""
    id: str
    name: str
    price: float = 0
    commission: float = 0
    image_url: str = ""
    status: str = ACTIVE

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'price': self.price,
            'commission': self.commission,
            'imageUrl': self.image_url,
            'status': self.status
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Product':
        return cls(
            id=data['id'],
            name=data['name'],
            price=data.get('price', 0),
            commission=data.get('commission', 0),
            image_url=data.get('imageUrl', ''),
            status=data.get('status', ACTIVE)
        )


@dataclass
class Driver(_JsonMixin):
    """A driver; only active dedicated drivers take part in the rotation."""
    id: str
    name: str
    type: DriverType = DriverType.DEDICATED
    contact: str = ""
    status: str = ACTIVE
    location: str = ""
    user_id: Optional[str] = None

    @property
    def in_rotation(self) -> bool:
        return self.status == ACTIVE and self.type == DriverType.DEDICATED

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'type': self.type.value,
            'contact': self.contact,
            'status': self.status,
            'location': self.location,
            'userId': self.user_id
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Driver':
        return cls(
            id=data['id'],
            name=data['name'],
            type=DriverType(data.get('type', DriverType.DEDICATED.value)),
            contact=data.get('contact') or '',
            status=data.get('status', ACTIVE),
            location=data.get('location') or '',
            user_id=data.get('userId')
        )


@dataclass
class Location(_JsonMixin):
    """A selling location."""
    id: str
    name: str
    category: LocationCategory = LocationCategory.DAILY_ROTATION

    @property
    def in_rotation(self) -> bool:
        return self.category == LocationCategory.DAILY_ROTATION

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'category': self.category.value
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Location':
        return cls(
            id=data['id'],
            name=data['name'],
            category=LocationCategory(data.get('category', LocationCategory.DAILY_ROTATION.value))
        )


@dataclass
class Sale(_JsonMixin):
    id: str
    driver_id: str
    product_id: str
    quantity: int
    total: float
    timestamp: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'driverId': self.driver_id,
            'productId': self.product_id,
            'quantity': self.quantity,
            'total': self.total,
            'timestamp': self.timestamp
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Sale':
        return cls(
            id=data['id'],
            driver_id=data['driverId'],
            product_id=data['productId'],
            quantity=data.get('quantity', 0),
            total=data.get('total', 0),
            timestamp=data['timestamp']
        )


@dataclass
class ScheduleEntry(_JsonMixin):
    """
    One driver's location for one day.

    driver_name and location_name are copies taken when the entry was written
    and are not updated when the driver or location is renamed.
    """
    id: str
    driver_id: str
    driver_name: str
    date: str  # YYYY-MM-DD
    location_id: str
    location_name: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'driverId': self.driver_id,
            'driverName': self.driver_name,
            'date': self.date,
            'locationId': self.location_id,
            'locationName': self.location_name
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ScheduleEntry':
        return cls(
            id=data['id'],
            driver_id=data['driverId'],
            driver_name=data.get('driverName', ''),
            # date columns may come back as timestamps
            date=str(data['date'])[:10],
            location_id=data['locationId'],
            location_name=data.get('locationName', '')
        )


@dataclass
class Payment(_JsonMixin):
    """A payroll payment made to a driver for a period."""
    id: str
    driver_id: str
    period: str
    amount: float
    timestamp: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'driverId': self.driver_id,
            'period': self.period,
            'amount': self.amount,
            'timestamp': self.timestamp
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Payment':
        return cls(
            id=data['id'],
            driver_id=data['driverId'],
            period=data['period'],
            amount=data.get('amount', 0),
            timestamp=data['timestamp']
        )


@dataclass
class CompanySettings(_JsonMixin):
    """
    The single settings row.

    Columns other than id and companyName are kept in `extra` so they survive
    a read/update cycle unchanged.
    """
    id: str
    company_name: str = ""
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        data = dict(self.extra)
        data['id'] = self.id
        data['companyName'] = self.company_name
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CompanySettings':
        extra = {k: v for k, v in data.items() if k not in ('id', 'companyName')}
        return cls(
            id=data['id'],
            company_name=data.get('companyName', ''),
            extra=extra
        )


DEFAULT_SETTINGS_ID = 'a8e9e3e3-1b1b-4b1b-8b1b-1b1b1b1b1b1b'

def default_settings() -> CompanySettings:
    """Settings used when the table is empty or cannot be read."""
    return CompanySettings(id=DEFAULT_SETTINGS_ID, company_name='My Company')
