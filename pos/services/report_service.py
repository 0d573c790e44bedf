"""
Reporting service.
Aggregate and list views over sales and payments with composable
period / actor filters. Absent rows always aggregate to zero.
"""
import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from sqlalchemy import and_, exists, func

from pos.exceptions import ValidationError
from pos.models import Sale, Payment, Customer, User, PaymentMethod
from pos.utils.formatters import to_decimal, money, date_str

logger = logging.getLogger(__name__)

PERIOD_TODAY = 'Today'
PERIOD_THIS_MONTH = 'This Month'
PERIOD_ALL = 'All'
PERIODS = (PERIOD_TODAY, PERIOD_THIS_MONTH, PERIOD_ALL)

# Payment method -> breakdown field
METHOD_FIELDS = {
    PaymentMethod.CASH.value: 'cash_sales',
    PaymentMethod.CREDIT.value: 'credit_sales',
    PaymentMethod.MOBILE_BANKING.value: 'mobile_sales',
    PaymentMethod.CARD.value: 'card_sales',
}

ZERO = Decimal('0')

# Shown in place of the customer name for walk-in sales
NO_CUSTOMER = 'no customer'


@dataclass(frozen=True)
class SalesFilter:
    """
    WHERE predicates over the sales table, joined with AND.
    
    Values are carried as bound parameters inside each clause; nothing is
    interpolated into SQL text. An empty filter leaves a query unconditional.
    """
    clauses: Tuple = ()
    
    def and_(self, *clauses) -> 'SalesFilter':
        return SalesFilter(self.clauses + tuple(clauses))
    
    @property
    def is_unconditional(self) -> bool:
        return not self.clauses
    
    def apply(self, query):
        if self.is_unconditional:
            return query
        return query.filter(and_(*self.clauses))


def period_bounds(period: Optional[str], now: Optional[datetime] = None) -> Optional[Tuple[datetime, datetime]]:
    """
    Half-open [start, end) datetime range for a period name.
    
    Returns None for 'All' or an unspecified period.
    
    Raises:
        ValidationError: any other period name (the match is case-sensitive)
    """
    if period is None or period == PERIOD_ALL:
        return None
    
    now = now or datetime.now()
    if period == PERIOD_TODAY:
        start = datetime.combine(now.date(), time.min)
        return start, start + timedelta(days=1)
    if period == PERIOD_THIS_MONTH:
        start = datetime(now.year, now.month, 1)
        if now.month == 12:
            end = datetime(now.year + 1, 1, 1)
        else:
            end = datetime(now.year, now.month + 1, 1)
        return start, end
    
    raise ValidationError(f"Invalid period filter: {period!r}. Use one of: {', '.join(PERIODS)}")


def build_sales_filter(period: Optional[str] = None, created_by: Optional[str] = None,
                       now: Optional[datetime] = None) -> SalesFilter:
    """Compose the period predicate and the optional actor predicate."""
    sales_filter = SalesFilter()
    
    bounds = period_bounds(period, now)
    if bounds is not None:
        start, end = bounds
        sales_filter = sales_filter.and_(Sale.created_at >= start, Sale.created_at < end)
    
    actor = (created_by or '').strip()
    if actor:
        sales_filter = sales_filter.and_(Sale.created_by == actor)
    
    return sales_filter


# =====================================================
# RESULT TYPES
# =====================================================

@dataclass
class SaleSummary:
    id: int
    customer_name: Optional[str]
    total: Decimal
    paid: Decimal
    balance: Decimal
    created_at: datetime
    created_by: str
    
    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'customer_name': self.customer_name or NO_CUSTOMER,
            'total': money(self.total),
            'paid': money(self.paid),
            'balance': money(self.balance),
            'created_at': date_str(self.created_at),
            'created_by': self.created_by,
        }


@dataclass
class ReportStats:
    total_sales: Decimal = ZERO
    total_paid: Decimal = ZERO
    total_balance: Decimal = ZERO
    invoice_count: int = 0
    cash_sales: Decimal = ZERO
    credit_sales: Decimal = ZERO
    mobile_sales: Decimal = ZERO
    card_sales: Decimal = ZERO
    
    def to_dict(self) -> dict:
        return {
            'total_sales': money(self.total_sales),
            'total_paid': money(self.total_paid),
            'total_balance': money(self.total_balance),
            'invoice_count': self.invoice_count,
            'cash_sales': money(self.cash_sales),
            'credit_sales': money(self.credit_sales),
            'mobile_sales': money(self.mobile_sales),
            'card_sales': money(self.card_sales),
        }


@dataclass
class UserSalesSummary(ReportStats):
    username: str = ''
    display_name: str = ''
    
    def to_dict(self) -> dict:
        rv = super().to_dict()
        rv['username'] = self.username
        rv['display_name'] = self.display_name
        return rv


@dataclass
class MonthlyStats:
    total: Decimal = ZERO
    cash: Decimal = ZERO
    credit: Decimal = ZERO
    
    def to_dict(self) -> dict:
        return {'total': money(self.total), 'cash': money(self.cash), 'credit': money(self.credit)}


@dataclass
class PaymentMethodTotal:
    method: str
    total: Decimal
    count: int
    
    def to_dict(self) -> dict:
        return {'method': self.method, 'total': money(self.total), 'count': self.count}


# =====================================================
# SALE LISTS
# =====================================================

def _summary_query(session):
    return session.query(
        Sale.id,
        Customer.name.label('customer_name'),
        Sale.total,
        Sale.paid,
        (Sale.total - Sale.paid).label('balance'),
        Sale.created_at,
        Sale.created_by,
    ).outerjoin(
        Customer, Customer.phone == Sale.customer_phone
    )


def _to_summaries(rows) -> List[SaleSummary]:
    return [
        SaleSummary(
            id=row.id,
            customer_name=row.customer_name,
            total=to_decimal(row.total),
            paid=to_decimal(row.paid),
            balance=to_decimal(row.balance),
            created_at=row.created_at,
            created_by=row.created_by,
        )
        for row in rows
    ]


def _list_sales(session, sales_filter: SalesFilter, limit: Optional[int] = None) -> List[SaleSummary]:
    query = sales_filter.apply(_summary_query(session)).order_by(
        Sale.created_at.desc(), Sale.id.desc()
    )
    if limit is not None:
        query = query.limit(limit)
    return _to_summaries(query.all())


def daily_sales(session, created_by: Optional[str] = None, now: Optional[datetime] = None) -> List[SaleSummary]:
    """Today's sales, newest first, optionally scoped to one actor."""
    return _list_sales(session, build_sales_filter(PERIOD_TODAY, created_by, now))


def monthly_sales(session, created_by: Optional[str] = None, now: Optional[datetime] = None) -> List[SaleSummary]:
    """This month's sales, newest first, optionally scoped to one actor."""
    return _list_sales(session, build_sales_filter(PERIOD_THIS_MONTH, created_by, now))


def all_sales(session, limit: int = 100, created_by: Optional[str] = None) -> List[SaleSummary]:
    """Most recent sales across all time, capped at `limit`."""
    if limit is not None and limit <= 0:
        raise ValidationError('limit must be greater than 0')
    return _list_sales(session, build_sales_filter(PERIOD_ALL, created_by), limit=limit)


def sales_by_date_range(session, start: date, end: date) -> List[SaleSummary]:
    """Sales whose date falls within [start, end], both inclusive. Not actor-scoped."""
    if start is None or end is None:
        raise ValidationError('Both start and end dates are required')
    if start > end:
        raise ValidationError(f'Start date {start} is after end date {end}')
    
    range_filter = SalesFilter().and_(
        Sale.created_at >= datetime.combine(start, time.min),
        Sale.created_at < datetime.combine(end + timedelta(days=1), time.min),
    )
    return _list_sales(session, range_filter)


# =====================================================
# AGGREGATES
# =====================================================

def _method_totals(session, sales_filter: SalesFilter) -> Dict[str, Decimal]:
    """Sum of payments.amount per method for sales matching the filter."""
    rows = sales_filter.apply(
        session.query(
            Payment.method,
            func.coalesce(func.sum(Payment.amount), 0).label('amount')
        ).join(Sale, Sale.id == Payment.sale_id)
    ).group_by(Payment.method).all()
    return {row.method: to_decimal(row.amount) for row in rows}


def _apply_method_totals(stats: ReportStats, method_totals: Dict[str, Decimal]) -> None:
    for method, amount in method_totals.items():
        attr = METHOD_FIELDS.get((method or '').upper())
        if attr:
            setattr(stats, attr, getattr(stats, attr) + amount)


def get_stats_for_period(session, period: Optional[str], created_by: Optional[str] = None,
                         now: Optional[datetime] = None) -> ReportStats:
    """
    Totals for a period: sales, paid, balance, invoice count and a per-method
    breakdown of payments. An empty store yields all zeros.
    """
    sales_filter = build_sales_filter(period, created_by, now)
    
    row = sales_filter.apply(
        session.query(
            func.coalesce(func.sum(Sale.total), 0).label('total_sales'),
            func.coalesce(func.sum(Sale.paid), 0).label('total_paid'),
            func.count(Sale.id).label('invoice_count'),
        )
    ).one()
    
    total_sales = to_decimal(row.total_sales)
    total_paid = to_decimal(row.total_paid)
    stats = ReportStats(
        total_sales=total_sales,
        total_paid=total_paid,
        total_balance=total_sales - total_paid,
        invoice_count=row.invoice_count or 0,
    )
    _apply_method_totals(stats, _method_totals(session, sales_filter))
    return stats


def cash_total_for_user(session, period: Optional[str], username: Optional[str],
                        now: Optional[datetime] = None) -> Decimal:
    """Cash payments taken by one actor in the period; zero for a blank username."""
    if not (username or '').strip():
        return ZERO
    
    sales_filter = build_sales_filter(period, username, now).and_(
        Payment.method == PaymentMethod.CASH.value
    )
    amount = sales_filter.apply(
        session.query(func.coalesce(func.sum(Payment.amount), 0)).join(Sale, Sale.id == Payment.sale_id)
    ).scalar()
    return to_decimal(amount)


def monthly_stats(session, now: Optional[datetime] = None) -> MonthlyStats:
    """
    Current-month total with an approximate cash/credit split.
    
    cash = sum of totals of sales paid in full that have at least one CASH
    payment; credit = total - cash. This is not a per-payment allocation.
    """
    sales_filter = build_sales_filter(PERIOD_THIS_MONTH, now=now)
    
    total = to_decimal(sales_filter.apply(
        session.query(func.coalesce(func.sum(Sale.total), 0))
    ).scalar())
    
    has_cash_payment = exists().where(
        Payment.sale_id == Sale.id,
        Payment.method == PaymentMethod.CASH.value
    )
    cash = to_decimal(sales_filter.and_(Sale.paid >= Sale.total, has_cash_payment).apply(
        session.query(func.coalesce(func.sum(Sale.total), 0))
    ).scalar())
    
    return MonthlyStats(total=total, cash=cash, credit=total - cash)


def payment_method_summary(session, now: Optional[datetime] = None) -> List[PaymentMethodTotal]:
    """Current-month payment totals and counts per method, largest first."""
    sales_filter = build_sales_filter(PERIOD_THIS_MONTH, now=now)
    amount = func.coalesce(func.sum(Payment.amount), 0)
    
    rows = sales_filter.apply(
        session.query(
            Payment.method,
            amount.label('total'),
            func.count(Payment.id).label('count'),
        ).join(Sale, Sale.id == Payment.sale_id)
    ).group_by(Payment.method).order_by(amount.desc(), Payment.method).all()
    
    return [PaymentMethodTotal(method=row.method, total=to_decimal(row.total), count=row.count) for row in rows]


def user_sales_summaries(session, period: Optional[str], now: Optional[datetime] = None) -> List[UserSalesSummary]:
    """
    One row per distinct created_by in the period, with the same per-method
    breakdown as get_stats_for_period, ordered by total sales descending.
    
    The display name comes from the users table, falling back to the raw
    created_by value when there is no matching user.
    """
    sales_filter = build_sales_filter(period, now=now)
    
    sales_rows = sales_filter.apply(
        session.query(
            Sale.created_by,
            func.count(Sale.id).label('invoice_count'),
            func.coalesce(func.sum(Sale.total), 0).label('total_sales'),
            func.coalesce(func.sum(Sale.paid), 0).label('total_paid'),
        )
    ).group_by(Sale.created_by).all()
    
    if not sales_rows:
        return []
    
    method_rows = sales_filter.apply(
        session.query(
            Sale.created_by,
            Payment.method,
            func.coalesce(func.sum(Payment.amount), 0).label('amount'),
        ).join(Sale, Sale.id == Payment.sale_id)
    ).group_by(Sale.created_by, Payment.method).all()
    
    methods_by_actor: Dict[str, Dict[str, Decimal]] = {}
    for row in method_rows:
        methods_by_actor.setdefault(row.created_by, {})[row.method] = to_decimal(row.amount)
    
    actors = [row.created_by for row in sales_rows]
    display_names = {
        username: display_name
        for username, display_name in session.query(User.username, User.display_name).filter(
            User.username.in_([a.lower() for a in actors])
        ).all()
    }
    
    summaries = []
    for row in sales_rows:
        total_sales = to_decimal(row.total_sales)
        total_paid = to_decimal(row.total_paid)
        summary = UserSalesSummary(
            username=row.created_by,
            display_name=display_names.get(row.created_by.lower(), row.created_by),
            total_sales=total_sales,
            total_paid=total_paid,
            total_balance=total_sales - total_paid,
            invoice_count=row.invoice_count or 0,
        )
        _apply_method_totals(summary, methods_by_actor.get(row.created_by, {}))
        summaries.append(summary)
    
    summaries.sort(key=lambda s: (-s.total_sales, s.username))
    return summaries
