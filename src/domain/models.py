"""
Domain entities for the club back-office engine.

Every entity is a dataclass that converts to and from the plain dict shape
kept in the record store.  Datetimes and dates travel as ISO strings.
"""
from dataclasses import dataclass, field, asdict
from datetime import date, datetime
from typing import List, Optional

ORDER_ACTIVE = 'active'
ORDER_COMPLETED = 'completed'
ORDER_CANCELLED = 'cancelled'

TABLE_AVAILABLE = 'available'
TABLE_OCCUPIED = 'occupied'
TABLE_RESERVED = 'reserved'
TABLE_CLEANING = 'cleaning'
TABLE_STATUSES = (TABLE_AVAILABLE, TABLE_OCCUPIED, TABLE_RESERVED, TABLE_CLEANING)

SHIFT_WORKING = 'working'


def _to_iso(value):
    return value.isoformat() if value is not None else None


def _to_datetime(value):
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)


def _to_date(value):
    if isinstance(value, datetime):
        return value.date()
    if value is None or isinstance(value, date):
        return value
    return date.fromisoformat(value[:10])


@dataclass
class MenuCategory:
    id: str
    name: str

    def to_dict(self):
        return asdict(self)

    @classmethod
    def from_dict(cls, data):
        return cls(id=data['id'], name=data['name'])


@dataclass
class MenuItem:
    id: str
    name: str
    price: int
    category: str
    is_available: bool = True
    description: Optional[str] = None
    is_seasonal_special: bool = False
    back_rate: Optional[float] = None

    def to_dict(self):
        return asdict(self)

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=data['id'],
            name=data['name'],
            price=data['price'],
            category=data.get('category', ''),
            is_available=data.get('is_available', True),
            description=data.get('description'),
            is_seasonal_special=data.get('is_seasonal_special', False),
            back_rate=data.get('back_rate'),
        )


@dataclass
class OrderLine:
    """An ordered menu item; price is the snapshot taken when it was added."""

    menu_item_id: str
    quantity: int
    price: int
    back_cast_id: Optional[str] = None
    notes: Optional[str] = None

    def to_dict(self):
        return asdict(self)

    @classmethod
    def from_dict(cls, data):
        return cls(
            menu_item_id=data['menu_item_id'],
            quantity=data['quantity'],
            price=data['price'],
            back_cast_id=data.get('back_cast_id'),
            notes=data.get('notes'),
        )


@dataclass
class Guest:
    name: str = ''
    shimei_cast_id: Optional[str] = None
    is_vip: bool = False
    is_douhan: bool = False

    def to_dict(self):
        return asdict(self)

    @classmethod
    def from_dict(cls, data):
        return cls(
            name=data.get('name') or '',
            shimei_cast_id=data.get('shimei_cast_id') or None,
            is_vip=bool(data.get('is_vip', False)),
            is_douhan=bool(data.get('is_douhan', False)),
        )


@dataclass
class DouhanBack:
    cast_id: str
    amount: int

    def to_dict(self):
        return asdict(self)

    @classmethod
    def from_dict(cls, data):
        return cls(cast_id=data['cast_id'], amount=data['amount'])


@dataclass
class OrderTotals:
    """Unrounded bill components of an order."""

    items_total: float = 0
    set_fee_total: float = 0
    douhan_total: float = 0
    douhan_backs: List[DouhanBack] = field(default_factory=list)
    service_fee: float = 0.0
    tax: float = 0.0
    total: float = 0.0
    elapsed_minutes: int = 0
    billed_hours: int = 0

    def to_dict(self):
        return asdict(self)

    @classmethod
    def from_dict(cls, data):
        return cls(
            items_total=data.get('items_total', 0),
            set_fee_total=data.get('set_fee_total', 0),
            douhan_total=data.get('douhan_total', 0),
            douhan_backs=[DouhanBack.from_dict(b) for b in data.get('douhan_backs', [])],
            service_fee=data.get('service_fee', 0.0),
            tax=data.get('tax', 0.0),
            total=data.get('total', 0.0),
            elapsed_minutes=data.get('elapsed_minutes', 0),
            billed_hours=data.get('billed_hours', 0),
        )


@dataclass
class Order:
    id: str
    table_id: str
    start_time: datetime
    guests: List[Guest] = field(default_factory=list)
    lines: List[OrderLine] = field(default_factory=list)
    totals: OrderTotals = field(default_factory=OrderTotals)
    status: str = ORDER_ACTIVE
    end_time: Optional[datetime] = None
    notes: Optional[str] = None

    @property
    def total(self):
        return self.totals.total

    @property
    def is_active(self):
        return self.status == ORDER_ACTIVE

    def to_dict(self):
        return {
            'id': self.id,
            'table_id': self.table_id,
            'start_time': _to_iso(self.start_time),
            'guests': [g.to_dict() for g in self.guests],
            'lines': [line.to_dict() for line in self.lines],
            'totals': self.totals.to_dict(),
            'status': self.status,
            'end_time': _to_iso(self.end_time),
            'notes': self.notes,
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=data['id'],
            table_id=data['table_id'],
            start_time=_to_datetime(data['start_time']),
            guests=[Guest.from_dict(g) for g in data.get('guests', [])],
            lines=[OrderLine.from_dict(line) for line in data.get('lines', [])],
            totals=OrderTotals.from_dict(data.get('totals', {})),
            status=data.get('status', ORDER_ACTIVE),
            end_time=_to_datetime(data.get('end_time')),
            notes=data.get('notes'),
        )


@dataclass
class Table:
    id: str
    number: int
    seats: int = 4
    status: str = TABLE_AVAILABLE
    current_order_id: Optional[str] = None

    def to_dict(self):
        return asdict(self)

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=data['id'],
            number=data['number'],
            seats=data.get('seats', 4),
            status=data.get('status', TABLE_AVAILABLE),
            current_order_id=data.get('current_order_id'),
        )


@dataclass
class Cast:
    id: str
    name: str
    hourly_wage: int = 3000
    is_active: bool = True

    def to_dict(self):
        return asdict(self)

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=data['id'],
            name=data['name'],
            hourly_wage=data['hourly_wage'],
            is_active=data.get('is_active', True),
        )


@dataclass
class Shift:
    id: str
    cast_id: str
    date: date
    start_time: str
    end_time: Optional[str] = None
    status: str = SHIFT_WORKING

    def to_dict(self):
        return {
            'id': self.id,
            'cast_id': self.cast_id,
            'date': _to_iso(self.date),
            'start_time': self.start_time,
            'end_time': self.end_time,
            'status': self.status,
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=data['id'],
            cast_id=data['cast_id'],
            date=_to_date(data['date']),
            start_time=data.get('start_time') or '',
            end_time=data.get('end_time') or None,
            status=data.get('status', SHIFT_WORKING),
        )


@dataclass
class BusinessHours:
    open: str = '20:00'
    close: str = '05:00'


@dataclass
class StoreSettings:
    hourly_set_fee: int = 0
    douhan_fee: int = 3000
    douhan_back_rate: float = 0.5
    service_fee: float = 0.0
    tax_rate: float = 0.0
    business_hours: BusinessHours = field(default_factory=BusinessHours)

    def to_dict(self):
        return asdict(self)

    @classmethod
    def from_dict(cls, data):
        defaults = cls()
        hours = data.get('business_hours') or {}

        def pick(name):
            value = data.get(name)
            return getattr(defaults, name) if value is None else value

        return cls(
            hourly_set_fee=pick('hourly_set_fee'),
            douhan_fee=pick('douhan_fee'),
            douhan_back_rate=pick('douhan_back_rate'),
            service_fee=pick('service_fee'),
            tax_rate=pick('tax_rate'),
            business_hours=BusinessHours(
                open=hours.get('open') or defaults.business_hours.open,
                close=hours.get('close') or defaults.business_hours.close,
            ),
        )


@dataclass
class CastPerformance:
    cast_id: str
    work_hours: float = 0.0
    sales: float = 0
    shimei_count: int = 0
    douhan_count: int = 0
    douhan_back_income: int = 0
    calculated_wage: float = 0

    def to_dict(self):
        return asdict(self)

    @classmethod
    def from_dict(cls, data):
        return cls(
            cast_id=data['cast_id'],
            work_hours=data.get('work_hours', 0.0),
            sales=data.get('sales', 0),
            shimei_count=data.get('shimei_count', 0),
            douhan_count=data.get('douhan_count', 0),
            douhan_back_income=data.get('douhan_back_income', 0),
            calculated_wage=data.get('calculated_wage', 0),
        )


@dataclass
class DailyReport:
    date: date
    total_sales: float = 0
    customer_count: int = 0
    average_spend: float = 0
    profit: float = 0
    total_wages: float = 0
    cast_performance: List[CastPerformance] = field(default_factory=list)
    is_closed: bool = False

    def to_dict(self):
        return {
            'date': _to_iso(self.date),
            'total_sales': self.total_sales,
            'customer_count': self.customer_count,
            'average_spend': self.average_spend,
            'profit': self.profit,
            'total_wages': self.total_wages,
            'cast_performance': [p.to_dict() for p in self.cast_performance],
            'is_closed': self.is_closed,
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            date=_to_date(data['date']),
            total_sales=data.get('total_sales', 0),
            customer_count=data.get('customer_count', 0),
            average_spend=data.get('average_spend', 0),
            profit=data['profit'],
            total_wages=data['total_wages'],
            cast_performance=[CastPerformance.from_dict(p) for p in data.get('cast_performance', [])],
            is_closed=data['is_closed'],
        )


@dataclass
class SavedCustomer:
    id: str
    name: str
    visit_count: int = 0
    last_visit: Optional[datetime] = None
    is_vip: bool = False
    preferred_cast_id: Optional[str] = None
    notes: Optional[str] = None

    def to_dict(self):
        data = asdict(self)
        data['last_visit'] = _to_iso(self.last_visit)
        return data

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=data['id'],
            name=data['name'],
            visit_count=data.get('visit_count', 0),
            last_visit=_to_datetime(data.get('last_visit')),
            is_vip=data.get('is_vip', False),
            preferred_cast_id=data.get('preferred_cast_id'),
            notes=data.get('notes'),
        )


@dataclass
class MonthlySummary:
    total_sales: float = 0
    total_wages: float = 0
    total_profit: float = 0
    total_customers: int = 0
    working_days: int = 0
    average_spend: float = 0


@dataclass
class MonthlyCastPerformance:
    cast_id: str
    cast_name: str
    total_work_hours: float = 0.0
    total_sales: float = 0
    total_shimei_count: int = 0
    total_douhan_count: int = 0
    total_douhan_back_income: int = 0
    total_wage: float = 0
    working_days: int = 0
    average_work_hours: float = 0.0


@dataclass
class MonthlyReport:
    year: int
    month: int
    summary: MonthlySummary
    cast_performance: List[MonthlyCastPerformance]
    daily_reports: List[DailyReport]
