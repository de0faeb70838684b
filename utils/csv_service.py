"""
CSV import/export of products.

Export columns are fixed: id, sku, name, description, category, quantity,
price, imageUrl, barcode. Import accepts the same header names; rows missing
a required column, or whose SKU is already taken, are skipped and reported.
"""

import csv
import logging
from io import StringIO

from inventory_core.errors import InvalidDataError, InventoryError

logger = logging.getLogger(__name__)

EXPORT_COLUMNS = ["id", "sku", "name", "description", "category", "quantity", "price", "imageUrl", "barcode"]
REQUIRED_COLUMNS = ["name", "sku", "category", "quantity", "price"]

# CSV header -> product record key
COLUMN_FIELDS = {
    "id": "id",
    "sku": "sku",
    "name": "name",
    "description": "description",
    "category": "category",
    "quantity": "quantity",
    "price": "price",
    "imageUrl": "image_url",
    "barcode": "barcode",
}


def _to_number(value, cast):
    try:
        return cast(float(value))
    except (TypeError, ValueError):
        return 0


def export_products(products):
    si = StringIO()
    cw = csv.writer(si)
    cw.writerow(EXPORT_COLUMNS)
    for product in products:
        row = []
        for column in EXPORT_COLUMNS:
            value = product.get(COLUMN_FIELDS[column])
            row.append('' if value is None else value)
        cw.writerow(row)
    return si.getvalue()


def parse_rows(text):
    reader = csv.DictReader(StringIO(text))
    rows = []
    for row in reader:
        cleaned = {(k or '').strip(): (v or '').strip() for k, v in row.items() if k is not None}
        if any(cleaned.values()):
            rows.append(cleaned)
    return rows


def import_products(catalog, text):
    """Create a product per valid row; returns {'imported', 'skipped', 'errors'}."""
    rows = parse_rows(text)
    if not rows:
        raise InvalidDataError("CSV file is empty or could not be parsed.")

    imported, errors = 0, []
    for line, row in enumerate(rows, start=2):
        missing = [c for c in REQUIRED_COLUMNS if not row.get(c)]
        if missing:
            errors.append(f"Row {line}: skipped, missing required fields ({', '.join(missing)})")
            continue

        if catalog.find_by_sku(row['sku']):
            errors.append(f"Row {line}: skipped product with SKU {row['sku']} as it already exists.")
            continue

        try:
            catalog.create({
                'name': row['name'],
                'sku': row['sku'],
                'description': row.get('description', ''),
                'category': row['category'],
                'quantity': _to_number(row['quantity'], int),
                'price': _to_number(row['price'], float),
                'image_url': row.get('imageUrl', ''),
                'barcode': row.get('barcode', ''),
            })
            imported += 1
        except InventoryError as e:
            errors.append(f"Row {line}: skipped, {e.message}")

    if errors:
        logger.warning(f"CSV import skipped {len(errors)} row(s)")
    logger.info(f"CSV import finished: {imported} imported, {len(errors)} skipped")
    return {'imported': imported, 'skipped': len(errors), 'errors': errors}
