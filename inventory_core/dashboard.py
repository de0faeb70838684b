from datetime import date, timedelta

from inventory_core.errors import InvalidDataError

PRESETS = ('7d', '30d', 'month', 'all')


def preset_range(preset, today=None):
    """Return (start, end) dates for a dashboard preset; start is None for 'all'."""
    end = today or date.today()
    if preset == 'all':
        return None, end
    if preset == 'month':
        return end.replace(day=1), end
    if preset == '7d':
        return end - timedelta(days=7), end
    if preset == '30d':
        return end - timedelta(days=30), end
    raise InvalidDataError(f"Unknown date range: {preset}")


def order_day(order):
    return date.fromisoformat(str(order['order_date'])[:10])


def in_range(order, start, end):
    day = order_day(order)
    return (start is None or day >= start) and (end is None or day <= end)


class Dashboard:
    """Read-only aggregates over products and orders."""

    def __init__(self, catalog, sales, purchases):
        self.catalog = catalog
        self.sales = sales
        self.purchases = purchases

    def _orders(self, start, end):
        sales = [o for o in self.sales.list() if in_range(o, start, end)]
        purchases = [o for o in self.purchases.list() if in_range(o, start, end)]
        return sales, purchases

    def summary(self, start=None, end=None):
        sales, purchases = self._orders(start, end)
        return {
            'total_sales_usd': sum(o['total_amount_usd'] for o in sales),
            'total_purchases_usd': sum(o['total_amount_usd'] for o in purchases),
            'low_stock_items': len(self.catalog.low_stock()),
            'out_of_stock_items': len(self.catalog.out_of_stock()),
        }

    def recent_activity(self, limit=5):
        combined = [dict(o, type='Sale') for o in self.sales.list()]
        combined += [dict(o, type='Purchase') for o in self.purchases.list()]
        combined.sort(key=order_day, reverse=True)
        return combined[:limit]

    def top_products(self, start=None, end=None, limit=5):
        sold = {}
        for order in self._orders(start, end)[0]:
            for item in order['items']:
                sold[item['name']] = sold.get(item['name'], 0) + item['quantity']
        ranked = sorted(sold.items(), key=lambda pair: pair[1], reverse=True)
        return [{'name': name, 'quantity': qty} for name, qty in ranked[:limit]]

    def daily_totals(self, start=None, end=None):
        sales, purchases = self._orders(start, end)
        days = {}
        for key, orders in (('sales', sales), ('purchases', purchases)):
            for order in orders:
                day = order_day(order).isoformat()
                days.setdefault(day, {'sales': 0, 'purchases': 0})
                days[day][key] += order['total_amount_usd']
        return [dict(day=day, **totals) for day, totals in sorted(days.items())]

    def category_breakdown(self):
        counts = {}
        for product in self.catalog.list():
            category = product.get('category') or 'Uncategorized'
            counts[category] = counts.get(category, 0) + 1
        return sorted(counts.items(), key=lambda pair: pair[1], reverse=True)

    def build(self, preset='30d', start=None, end=None, today=None):
        if start is None and end is None:
            start, end = preset_range(preset, today)
        return {
            'range': {
                'start': start.isoformat() if start else None,
                'end': end.isoformat() if end else None,
            },
            'summary': self.summary(start, end),
            'recent_activity': self.recent_activity(),
            'low_stock_products': self.catalog.low_stock(),
            'top_products': self.top_products(start, end),
            'daily_totals': self.daily_totals(start, end),
            'category_breakdown': [{'category': c, 'count': n} for c, n in self.category_breakdown()],
        }
