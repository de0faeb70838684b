# app.py - Inventory Ledger web app (JSON + CSV endpoints)
import os
import logging
from datetime import date

# Flask & Extensions
from flask import (
    request,
    redirect,
    url_for,
    Response,
    jsonify,
)
from flask_login import login_user, logout_user, login_required, current_user
from flask_wtf.csrf import generate_csrf
from flask_babel import gettext as _
from sqlalchemy.exc import SQLAlchemyError
from dotenv import load_dotenv
load_dotenv()

# App-level: Use shared db and create_app from inventory_core
from inventory_core import db, create_app, get_services
from inventory_core.errors import InventoryError, InvalidDataError, NotFoundError
from utils.csv_service import export_products, import_products

# Import forms
from forms import (
    LoginForm,
    RegisterForm,
    ProductForm,
    ProductUpdateForm,
    StockAdjustmentForm,
    CategoryForm,
    SupplierForm,
    CustomerForm,
    SettingsForm,
    CsvImportForm,
    form_errors,
    submitted_data,
)

logger = logging.getLogger("app")

# Explicitly get FLASK_ENV, default to 'production'
env = os.getenv('FLASK_ENV', 'production')

# Initialize app using factory
app = create_app(env)


# ========================
# Utility Functions
# ========================

def payload():
    return request.get_json(silent=True) or request.form.to_dict()


def form_data(form):
    return {
        name: field.data for name, field in form._fields.items()
        if name != 'csrf_token' and field.data is not None
    }


def allowed_file(filename):
    return '.' in filename and \
           filename.rsplit('.', 1)[1].lower() in app.config['ALLOWED_EXTENSIONS']


def invalid(form):
    return jsonify({'error': _("Please correct the highlighted fields."), 'fields': form_errors(form)}), 400


def parse_day(value):
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise InvalidDataError(f"Invalid date: {value}")


# ========================
# Error Handlers
# ========================

@app.errorhandler(InventoryError)
def handle_inventory_error(e):
    return jsonify({'error': e.message}), e.status_code


@app.errorhandler(SQLAlchemyError)
def handle_database_error(e):
    db.session.rollback()
    logger.exception(f"Database error on {request.method} {request.path}")
    return jsonify({'error': _("A database error occurred. Please try again.")}), 500


# ========================
# Authentication
# ========================

@app.route('/register', methods=['POST'])
def register():
    form = RegisterForm()
    if not form.validate_on_submit():
        return invalid(form)
    user = get_services().users.register(form.name.data, form.email.data, form.password.data)
    # Registration signs the new user in
    login_user(user)
    return jsonify(user.to_dict()), 201


@app.route('/login', methods=['POST'])
def login():
    form = LoginForm()
    if not form.validate_on_submit():
        return invalid(form)
    user = get_services().users.authenticate(form.email.data.strip(), form.password.data)
    login_user(user)
    logger.info(f"User logged in: {user.email}")
    return jsonify(user.to_dict())


@app.route('/logout', methods=['POST'])
@login_required
def logout():
    logout_user()  # Clears Flask-Login session
    return jsonify({'message': _("You have been logged out.")})


@app.route('/me')
@login_required
def me():
    return jsonify(current_user.to_dict())


@app.route('/api/csrf-token')
def csrf_token():
    return jsonify({'csrf_token': generate_csrf()})


@app.route('/')
def index():
    return redirect(url_for('dashboard'))


# ========================
# Dashboard
# ========================

@app.route('/api/dashboard')
@login_required
def dashboard():
    preset = request.args.get('preset', '30d')
    start = parse_day(request.args.get('start'))
    end = parse_day(request.args.get('end'))
    return jsonify(get_services().dashboard.build(preset=preset, start=start, end=end))


# ========================
# Products
# ========================

@app.route('/api/products')
@login_required
def list_products():
    products = get_services().catalog.list(
        name=request.args.get('name', '').strip(),
        sku=request.args.get('sku', '').strip(),
        category=request.args.get('category', ''),
    )
    return jsonify(products)


@app.route('/api/products', methods=['POST'])
@login_required
def add_product():
    form = ProductForm()
    if not form.validate_on_submit():
        return invalid(form)
    product = get_services().catalog.create(form_data(form))
    return jsonify(product), 201


@app.route('/api/products/generate-sku')
@login_required
def generate_sku():
    return jsonify({'sku': get_services().catalog.generate_sku()})


@app.route('/api/products/barcode/<barcode>')
@login_required
def product_by_barcode(barcode):
    product = get_services().catalog.find_by_barcode(barcode)
    if product is None:
        raise NotFoundError('Product with barcode', barcode)
    return jsonify(product)


@app.route('/api/products/<product_id>')
@login_required
def get_product(product_id):
    product = get_services().catalog.find_by_id(product_id)
    if product is None:
        raise NotFoundError('Product', product_id)
    return jsonify(product)


@app.route('/api/products/<product_id>', methods=['PUT'])
@login_required
def edit_product(product_id):
    form = ProductUpdateForm()
    if not form.validate_on_submit():
        return invalid(form)
    product = get_services().catalog.update(product_id, submitted_data(form, payload()))
    return jsonify(product)


@app.route('/api/products/<product_id>', methods=['DELETE'])
@login_required
def delete_product(product_id):
    get_services().catalog.delete(product_id)
    return jsonify({'ok': True})


@app.route('/api/products/<product_id>/adjust', methods=['POST'])
@login_required
def adjust_product_stock(product_id):
    form = StockAdjustmentForm()
    if not form.validate_on_submit():
        return invalid(form)
    product = get_services().catalog.adjust_stock(product_id, form.delta.data)
    if product is None:
        raise NotFoundError('Product', product_id)
    return jsonify(product)


# ========================
# Categories
# ========================

@app.route('/api/categories')
@login_required
def list_categories():
    return jsonify(get_services().categories.list())


@app.route('/api/categories', methods=['POST'])
@login_required
def add_category():
    form = CategoryForm()
    if not form.validate_on_submit():
        return invalid(form)
    return jsonify(get_services().categories.create({'name': form.name.data})), 201


@app.route('/api/categories/<category_id>', methods=['PUT'])
@login_required
def edit_category(category_id):
    form = CategoryForm()
    if not form.validate_on_submit():
        return invalid(form)
    return jsonify(get_services().categories.update(category_id, {'name': form.name.data}))


@app.route('/api/categories/<category_id>', methods=['DELETE'])
@login_required
def delete_category(category_id):
    get_services().categories.delete(category_id)
    return jsonify({'ok': True})


# ========================
# Suppliers
# ========================

@app.route('/api/suppliers')
@login_required
def list_suppliers():
    return jsonify(get_services().suppliers.list())


@app.route('/api/suppliers', methods=['POST'])
@login_required
def add_supplier():
    form = SupplierForm()
    if not form.validate_on_submit():
        return invalid(form)
    supplier = get_services().suppliers.create(form_data(form))
    return jsonify(supplier), 201


@app.route('/api/suppliers/<supplier_id>', methods=['PUT'])
@login_required
def edit_supplier(supplier_id):
    form = SupplierForm()
    if not form.validate_on_submit():
        return invalid(form)
    supplier = get_services().suppliers.update(supplier_id, submitted_data(form, payload()))
    return jsonify(supplier)


@app.route('/api/suppliers/<supplier_id>', methods=['DELETE'])
@login_required
def delete_supplier(supplier_id):
    get_services().suppliers.delete(supplier_id)
    return jsonify({'ok': True})


# ========================
# Customers
# ========================

@app.route('/api/customers')
@login_required
def list_customers():
    return jsonify(get_services().customers.list())


@app.route('/api/customers', methods=['POST'])
@login_required
def add_customer():
    form = CustomerForm()
    if not form.validate_on_submit():
        return invalid(form)
    customer = get_services().customers.create(form_data(form))
    return jsonify(customer), 201


@app.route('/api/customers/<customer_id>', methods=['PUT'])
@login_required
def edit_customer(customer_id):
    form = CustomerForm()
    if not form.validate_on_submit():
        return invalid(form)
    customer = get_services().customers.update(customer_id, submitted_data(form, payload()))
    return jsonify(customer)


@app.route('/api/customers/<customer_id>', methods=['DELETE'])
@login_required
def delete_customer(customer_id):
    get_services().customers.delete(customer_id)
    return jsonify({'ok': True})


# ========================
# Sales Orders
# ========================

@app.route('/api/sales')
@login_required
def list_sales_orders():
    return jsonify(get_services().sales.list())


@app.route('/api/sales', methods=['POST'])
@login_required
def add_sales_order():
    order = get_services().sales.create_sales_order(request.get_json(silent=True) or {})
    return jsonify(order), 201


@app.route('/api/sales/<order_id>')
@login_required
def get_sales_order(order_id):
    order = get_services().sales.get(order_id)
    if order is None:
        raise NotFoundError('Sales order', order_id)
    return jsonify(order)


@app.route('/api/sales/<order_id>', methods=['PUT'])
@login_required
def edit_sales_order(order_id):
    order = get_services().sales.update_sales_order(order_id, request.get_json(silent=True) or {})
    return jsonify(order)


@app.route('/api/sales/<order_id>', methods=['DELETE'])
@login_required
def delete_sales_order(order_id):
    get_services().sales.delete_sales_order(order_id)
    return jsonify({'ok': True})


# ========================
# Purchase Orders
# ========================

@app.route('/api/purchases')
@login_required
def list_purchase_orders():
    return jsonify(get_services().purchases.list())


@app.route('/api/purchases', methods=['POST'])
@login_required
def add_purchase_order():
    order = get_services().purchases.create_purchase_order(request.get_json(silent=True) or {})
    return jsonify(order), 201


@app.route('/api/purchases/<order_id>')
@login_required
def get_purchase_order(order_id):
    order = get_services().purchases.get(order_id)
    if order is None:
        raise NotFoundError('Purchase order', order_id)
    return jsonify(order)


@app.route('/api/purchases/<order_id>', methods=['PUT'])
@login_required
def edit_purchase_order(order_id):
    order = get_services().purchases.update_purchase_order(order_id, request.get_json(silent=True) or {})
    return jsonify(order)


@app.route('/api/purchases/<order_id>', methods=['DELETE'])
@login_required
def delete_purchase_order(order_id):
    get_services().purchases.delete_purchase_order(order_id)
    return jsonify({'ok': True})


# ========================
# Settings
# ========================

@app.route('/api/settings')
@login_required
def get_settings():
    return jsonify(get_services().settings.get())


@app.route('/api/settings', methods=['PUT'])
@login_required
def save_settings():
    form = SettingsForm()
    if not form.validate_on_submit():
        return invalid(form)
    settings = get_services().settings.save({'exchange_rate_usd_etb': form.exchange_rate_usd_etb.data})
    return jsonify(settings)


# ========================
# Import / Export
# ========================

@app.route('/export/products.csv')
@login_required
def export_inventory():
    output = export_products(get_services().catalog.list())
    return Response(output, mimetype="text/csv", headers={"Content-Disposition": "attachment;filename=products.csv"})


@app.route('/import/products', methods=['POST'])
@login_required
def import_inventory():
    form = CsvImportForm()
    if not form.validate_on_submit():
        return invalid(form)
    if not allowed_file(form.file.data.filename or ''):
        raise InvalidDataError(_("Only .csv files are accepted."))
    try:
        text = form.file.data.read().decode('utf-8-sig')
    except UnicodeDecodeError:
        raise InvalidDataError(_("The CSV file must be UTF-8 encoded."))
    result = import_products(get_services().catalog, text)
    return jsonify(result)


# ========================
# Run the App
# ========================

if __name__ == '__main__':
    with app.app_context():
        from inventory_core import create_default_admin
        create_default_admin(app)
    logger.info("🚀 Inventory app running...")
    app.run()
