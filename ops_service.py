# ops_service.py
from typing import Any, Callable, Dict, List, Optional

from fastapi import Body, Depends, FastAPI
from pydantic import BaseModel, Field

from ops_data import OpsData
from ops_models import ACTIVE, Driver, DriverType, Location, LocationCategory, Product
from ops_store import OpsError, ValidationAbort

app = FastAPI(title="Fleet Ops Service")

_ops: Optional[OpsData] = None


def get_ops() -> OpsData:
    """Shared OpsData, loaded from the store on first use."""
    global _ops
    if _ops is None:
        _ops = OpsData()
        _ops.fetch_all()
    return _ops


# Request models
class ProductRequest(BaseModel):
    name: str
    price: float = 0
    commission: float = 0
    imageUrl: str = ""
    status: str = ACTIVE


class DriverRequest(BaseModel):
    name: str
    type: DriverType = DriverType.DEDICATED
    contact: str = ""
    status: str = ACTIVE
    location: str = ""


class NewDriverRequest(DriverRequest):
    userId: Optional[str] = None  # id of an already created login account


class SaleRequest(BaseModel):
    driverId: str
    productId: str
    quantity: int = Field(1, ge=1)
    total: float = 0


class LocationRequest(BaseModel):
    name: str
    category: LocationCategory = LocationCategory.DAILY_ROTATION


class GenerateScheduleRequest(BaseModel):
    rotationInterval: int
    excludedDays: List[int] = []


class OverrideRequest(BaseModel):
    locationId: str


class PaymentRequest(BaseModel):
    driverId: str
    period: str
    amount: float


def _run(action: str, operation: Callable[[], Dict[str, Any]]) -> Dict[str, Any]:
    """Run an operation and report it as a result dictionary."""
    try:
        result = operation()
    except ValidationAbort as e:
        return {'success': False, 'action': action, 'error': str(e), 'notice': str(e)}
    except OpsError as e:
        return {'success': False, 'action': action, 'error': str(e)}
    return dict({'success': True, 'action': action}, **result)


@app.get("/data")
def get_data(refresh: bool = False, ops: OpsData = Depends(get_ops)):
    """
    Return every table as currently held.

    /data?refresh=true reloads from the store first.
    """
    if refresh:
        ops.fetch_all()
    return {
        'success': ops.error is None,
        'error': str(ops.error) if ops.error else None,
        'settings': ops.settings.to_dict() if ops.settings else None,
        'products': [p.to_dict() for p in ops.products],
        'drivers': [d.to_dict() for d in ops.drivers],
        'sales': [s.to_dict() for s in ops.sales],
        'locations': [l.to_dict() for l in ops.locations],
        'schedule': [e.to_dict() for e in ops.schedule],
        'payments': [p.to_dict() for p in ops.payments],
    }


@app.post("/products")
def add_product(request: ProductRequest, ops: OpsData = Depends(get_ops)):
    return _run('add_product', lambda: {'product': ops.add_product(request.model_dump()).to_dict()})


@app.put("/products/{product_id}")
def update_product(product_id: str, request: ProductRequest, ops: OpsData = Depends(get_ops)):
    product = Product.from_dict(dict(request.model_dump(), id=product_id))
    return _run('update_product', lambda: {'product': ops.update_product(product).to_dict()})


@app.delete("/products/{product_id}")
def delete_product(product_id: str, ops: OpsData = Depends(get_ops)):
    def operation():
        ops.delete_product(product_id)
        return {'id': product_id}
    return _run('delete_product', operation)


@app.post("/drivers")
def add_driver(request: NewDriverRequest, ops: OpsData = Depends(get_ops)):
    data = request.model_dump(mode='json', exclude={'userId'})
    return _run('add_driver', lambda: {'driver': ops.add_driver(data, user_id=request.userId).to_dict()})


@app.put("/drivers/{driver_id}")
def update_driver(driver_id: str, request: DriverRequest, ops: OpsData = Depends(get_ops)):
    driver = Driver.from_dict(dict(request.model_dump(mode='json'), id=driver_id))
    return _run('update_driver', lambda: {'driver': ops.update_driver(driver).to_dict()})


@app.post("/sales")
def add_sale(request: SaleRequest, ops: OpsData = Depends(get_ops)):
    return _run('add_sale', lambda: {'sale': ops.add_sale(request.model_dump()).to_dict()})


@app.post("/locations")
def add_location(request: LocationRequest, ops: OpsData = Depends(get_ops)):
    data = request.model_dump(mode='json')
    return _run('add_location', lambda: {'location': ops.add_location(data).to_dict()})


@app.put("/locations/{location_id}")
def update_location(location_id: str, request: LocationRequest, ops: OpsData = Depends(get_ops)):
    location = Location.from_dict(dict(request.model_dump(mode='json'), id=location_id))
    return _run('update_location', lambda: {'location': ops.update_location(location).to_dict()})


@app.delete("/locations/{location_id}")
def delete_location(location_id: str, ops: OpsData = Depends(get_ops)):
    def operation():
        ops.delete_location(location_id)
        return {'id': location_id}
    return _run('delete_location', operation)


@app.post("/schedule/generate")
def generate_schedule(request: GenerateScheduleRequest, ops: OpsData = Depends(get_ops)):
    """
    Regenerate the rotation for all active dedicated drivers.

    Body: {"rotationInterval": 2, "excludedDays": [0]}  (0=Sunday ... 6=Saturday)
    """
    def operation():
        schedule = ops.generate_schedule(request.rotationInterval, request.excludedDays)
        return {'schedule': [e.to_dict() for e in schedule]}
    return _run('generate_schedule', operation)


@app.put("/schedule/today/{driver_id}")
def override_today(driver_id: str, request: OverrideRequest, ops: OpsData = Depends(get_ops)):
    def operation():
        entry = ops.update_schedule_for_driver_today(driver_id, request.locationId)
        return {'entry': entry.to_dict() if entry else None}
    return _run('update_schedule_for_driver_today', operation)


@app.delete("/schedule")
def clear_schedule(ops: OpsData = Depends(get_ops)):
    def operation():
        ops.clear_schedule()
        return {'schedule': []}
    return _run('clear_schedule', operation)


@app.post("/payments")
def add_payment(request: PaymentRequest, ops: OpsData = Depends(get_ops)):
    return _run('add_payment', lambda: {
        'payment': ops.add_payment(request.driverId, request.period, request.amount).to_dict()
    })


@app.put("/settings")
def update_settings(changes: Dict[str, Any] = Body(...), ops: OpsData = Depends(get_ops)):
    def operation():
        settings = ops.update_settings(changes)
        return {'settings': settings.to_dict() if settings else None}
    return _run('update_settings', operation)


@app.post("/factory-reset")
def factory_reset(ops: OpsData = Depends(get_ops)):
    ops.factory_reset()
    return {'success': False, 'action': 'factory_reset',
            'error': 'Factory reset is not supported; truncate the tables from the store dashboard.'}

# ###########################################
# How to start:
#  uvicorn ops_service:app --host 0.0.0.0 --port 8000
# ###########################################
