# forms.py

from flask_wtf import FlaskForm
from flask_wtf.file import FileField, FileRequired
from wtforms import (
    StringField, PasswordField, IntegerField, FloatField, TextAreaField,
)
from wtforms.validators import DataRequired, Optional, NumberRange, Length, Email

from flask_babel import lazy_gettext as _


def form_errors(form):
    """Flatten WTForms errors into one message per field."""
    return {name: messages[0] for name, messages in form.errors.items()}


def submitted_data(form, payload):
    """Field values for the keys actually sent, for partial updates."""
    return {
        name: field.data
        for name, field in form._fields.items()
        if name in payload and name != 'csrf_token'
    }


# -------------------
# Authentication Forms
# -------------------
class LoginForm(FlaskForm):
    email = StringField(_("Email"), validators=[DataRequired(), Email()])
    password = PasswordField(_("Password"), validators=[DataRequired()])


class RegisterForm(FlaskForm):
    name = StringField(_("Full Name"), validators=[DataRequired(), Length(max=100)])
    email = StringField(_("Email"), validators=[DataRequired(), Email()])
    password = PasswordField(_("Password"), validators=[DataRequired(), Length(min=6)])


# -------------------
# Product Forms
# -------------------
class ProductForm(FlaskForm):
    sku = StringField(_("SKU *"), validators=[DataRequired(), Length(max=64)])
    name = StringField(_("Product Name *"), validators=[DataRequired(), Length(max=200)])
    description = TextAreaField(_("Description"), validators=[Optional(), Length(max=1000)])
    category = StringField(_("Category"), validators=[Optional(), Length(max=100)])
    quantity = IntegerField(_("Quantity"), default=0, validators=[Optional(), NumberRange(min=0)])
    reorder_level = IntegerField(_("Reorder Level"), validators=[Optional(), NumberRange(min=0)])
    price = FloatField(_("Price (USD)"), default=0, validators=[Optional(), NumberRange(min=0)])
    image_url = StringField(_("Image URL"), validators=[Optional(), Length(max=500)])
    barcode = StringField(_("Barcode"), validators=[Optional(), Length(max=64)])


class ProductUpdateForm(ProductForm):
    sku = StringField(_("SKU"), validators=[Optional(), Length(max=64)])
    name = StringField(_("Product Name"), validators=[Optional(), Length(max=200)])


class StockAdjustmentForm(FlaskForm):
    delta = IntegerField(_("Quantity change"), validators=[DataRequired()])


# -------------------
# Registry Forms
# -------------------
class CategoryForm(FlaskForm):
    name = StringField(_("Category Name"), validators=[DataRequired(), Length(max=100)])


class SupplierForm(FlaskForm):
    name = StringField(_("Supplier Name"), validators=[DataRequired(), Length(max=100)])
    contact_person = StringField(_("Contact Person"), validators=[Optional(), Length(max=100)])
    email = StringField(_("Email"), validators=[Optional(), Email()])
    phone = StringField(_("Phone"), validators=[Optional(), Length(max=30)])
    address = TextAreaField(_("Address"), validators=[Optional()])
    city = StringField(_("City"), validators=[Optional(), Length(max=100)])
    state = StringField(_("State"), validators=[Optional(), Length(max=100)])


class CustomerForm(FlaskForm):
    name = StringField(_("Customer Name"), validators=[DataRequired(), Length(max=100)])
    email = StringField(_("Email"), validators=[Optional(), Email()])
    phone = StringField(_("Phone"), validators=[Optional(), Length(max=30)])
    address = TextAreaField(_("Address"), validators=[Optional()])
    city = StringField(_("City"), validators=[Optional(), Length(max=100)])
    state = StringField(_("State"), validators=[Optional(), Length(max=100)])


# -------------------
# Settings & Import
# -------------------
class SettingsForm(FlaskForm):
    exchange_rate_usd_etb = FloatField(
        _("Exchange Rate (1 USD to ETB)"),
        validators=[DataRequired(), NumberRange(min=0.0001)]
    )


class CsvImportForm(FlaskForm):
    file = FileField(_("Products CSV"), validators=[FileRequired()])
