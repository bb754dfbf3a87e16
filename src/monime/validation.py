"""Client-side input validation for resource modules.

Each ``validate_*`` function raises :class:`~monime.errors.MonimeValidationError`
describing the first problem found, naming the offending field with a
dotted path (e.g. ``"destination.phoneNumber"``).  Nothing is returned on
success.

Resource modules only call these when the client was built with
``validate_inputs=True`` (the default).
"""

from __future__ import annotations

import re
from typing import Any, Dict, Iterable, Mapping, Optional

from monime.errors import MonimeValidationError

CURRENCIES = ("SLE", "USD")
PAYMENT_CODE_MODES = ("one_time", "recurrent")
PAYMENT_CODE_PROVIDERS = ("m17", "m18", "m13")
WEBHOOK_API_RELEASES = ("caph", "siriusb")
FINANCIAL_TRANSACTION_TYPES = ("credit", "debit")

ID_PREFIXES: Dict[str, str] = {
    "payment_code": "pmc-",
    "payment": "pay-",
    "checkout_session": "cos-",
    "payout": "pot-",
    "webhook": "whk-",
    "internal_transfer": "trn-",
    "ussd_otp": "uop-",
}

_MAX_LIMIT = 50
_MAX_METADATA_KEYS = 64
_MAX_METADATA_VALUE_LENGTH = 100
_MAX_WEBHOOK_HEADERS = 10
_COUNTRY_CODE_RE = re.compile(r"^[A-Za-z]{2}$")

_MISSING = object()


def _fail(message: str, field: str, value: Any = None) -> None:
    raise MonimeValidationError(message, field, value)


def _join(prefix: str, name: str) -> str:
    return f"{prefix}.{name}" if prefix else name


def _require_mapping(value: Any, field: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        _fail(f"{field or 'input'} must be an object", field or "input", value)
    return value


def _check_string(
    value: Any,
    field: str,
    *,
    min_length: int = 0,
    max_length: Optional[int] = None,
) -> None:
    if not isinstance(value, str):
        _fail(f"{field} must be a string", field, value)
    if len(value) < min_length:
        if min_length == 1:
            _fail(f"{field} must not be empty", field, value)
        _fail(f"{field} must be at least {min_length} characters", field, value)
    if max_length is not None and len(value) > max_length:
        _fail(f"{field} must be at most {max_length} characters", field, value)


def _check_choice(value: Any, field: str, choices: Iterable[str]) -> None:
    choices = tuple(choices)
    if value not in choices:
        _fail(f"{field} must be one of {', '.join(choices)}", field, value)


def _check_bool(value: Any, field: str) -> None:
    if not isinstance(value, bool):
        _fail(f"{field} must be a boolean", field, value)


def _check_int(value: Any, field: str, *, minimum: Optional[int] = None, maximum: Optional[int] = None) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        _fail(f"{field} must be an integer", field, value)
    if minimum is not None and value < minimum:
        _fail(f"{field} must be at least {minimum}", field, value)
    if maximum is not None and value > maximum:
        _fail(f"{field} must be at most {maximum}", field, value)


def _check_string_list(
    value: Any,
    field: str,
    *,
    min_items: int = 0,
    max_items: Optional[int] = None,
    choices: Optional[Iterable[str]] = None,
) -> None:
    if not isinstance(value, (list, tuple)):
        _fail(f"{field} must be a list", field, value)
    if len(value) < min_items:
        _fail(f"{field} must contain at least {min_items} item(s)", field, value)
    if max_items is not None and len(value) > max_items:
        _fail(f"{field} must contain at most {max_items} item(s)", field, value)
    for index, item in enumerate(value):
        item_field = f"{field}.{index}"
        if choices is not None:
            _check_choice(item, item_field, choices)
        else:
            _check_string(item, item_field)


def _optional(data: Mapping[str, Any], key: str, *, nullable: bool = False) -> Any:
    """Return ``data[key]`` or ``_MISSING`` when absent (or ``None`` and *nullable*)."""
    value = data.get(key, _MISSING)
    if value is None and nullable:
        return _MISSING
    return value


# ---------------------------------------------------------------------------
# Shared shapes
# ---------------------------------------------------------------------------


def validate_id(value: Any, kind: Optional[str] = None, field: str = "id") -> None:
    """Validate a resource ID, enforcing the prefix registered for *kind*."""
    if not isinstance(value, str) or not value:
        _fail("id is required", field, value)
    prefix = ID_PREFIXES.get(kind or "")
    if prefix and not value.startswith(prefix):
        label = (kind or "").replace("_", " ").capitalize()
        _fail(f"{label} ID must start with '{prefix}'", field, value)


def validate_limit(limit: Any) -> None:
    if limit is None:
        return
    _check_int(limit, "limit", minimum=1, maximum=_MAX_LIMIT)


def validate_country_code(country: Any) -> None:
    if not isinstance(country, str) or not _COUNTRY_CODE_RE.match(country):
        _fail("country must be a two-letter country code", "country", country)


def validate_amount(amount: Any, field: str = "amount") -> None:
    data = _require_mapping(amount, field)
    _check_choice(data.get("currency"), _join(field, "currency"), CURRENCIES)
    value = data.get("value")
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        _fail(f"{_join(field, 'value')} must be a number", _join(field, "value"), value)
    if value < 0:
        _fail(f"{_join(field, 'value')} must not be negative", _join(field, "value"), value)


def validate_metadata(metadata: Any, field: str = "metadata") -> None:
    data = _require_mapping(metadata, field)
    if len(data) > _MAX_METADATA_KEYS:
        _fail(
            f"metadata cannot have more than {_MAX_METADATA_KEYS} keys",
            field,
            len(data),
        )
    for key, value in data.items():
        if not isinstance(key, str):
            _fail("metadata keys must be strings", field, key)
        _check_string(value, _join(field, key), max_length=_MAX_METADATA_VALUE_LENGTH)


def _check_metadata(data: Mapping[str, Any], *, nullable: bool = False) -> None:
    metadata = _optional(data, "metadata", nullable=nullable)
    if metadata is not _MISSING:
        validate_metadata(metadata)


def _check_recurrent_target(value: Any, field: str) -> None:
    target = _require_mapping(value, field)
    count = _optional(target, "expectedPaymentCount", nullable=True)
    if count is not _MISSING and (isinstance(count, bool) or not isinstance(count, (int, float))):
        _fail(f"{field}.expectedPaymentCount must be a number", f"{field}.expectedPaymentCount", count)
    total = _optional(target, "expectedPaymentTotal", nullable=True)
    if total is not _MISSING:
        validate_amount(total, f"{field}.expectedPaymentTotal")


def _check_customer(value: Any, field: str) -> None:
    customer = _require_mapping(value, field)
    name = _optional(customer, "name", nullable=True)
    if name is not _MISSING:
        _check_string(name, f"{field}.name")


# ---------------------------------------------------------------------------
# Payment codes
# ---------------------------------------------------------------------------


def validate_create_payment_code(data: Any) -> None:
    data = _require_mapping(data, "")
    _check_string(data.get("name"), "name", min_length=3, max_length=64)
    if (mode := _optional(data, "mode")) is not _MISSING:
        _check_choice(mode, "mode", PAYMENT_CODE_MODES)
    if (enable := _optional(data, "enable")) is not _MISSING:
        _check_bool(enable, "enable")
    if (amount := _optional(data, "amount")) is not _MISSING:
        validate_amount(amount)
    for key in ("duration", "reference", "authorizedPhoneNumber", "financialAccountId"):
        if (value := _optional(data, key)) is not _MISSING:
            _check_string(value, key)
    if (customer := _optional(data, "customer")) is not _MISSING:
        _check_customer(customer, "customer")
    if (providers := _optional(data, "authorizedProviders")) is not _MISSING:
        _check_string_list(providers, "authorizedProviders", choices=PAYMENT_CODE_PROVIDERS)
    if (target := _optional(data, "recurrentPaymentTarget")) is not _MISSING:
        _check_recurrent_target(target, "recurrentPaymentTarget")
    _check_metadata(data)


def validate_update_payment_code(data: Any) -> None:
    data = _require_mapping(data, "")
    if (name := _optional(data, "name", nullable=True)) is not _MISSING:
        _check_string(name, "name", min_length=3, max_length=64)
    if (amount := _optional(data, "amount", nullable=True)) is not _MISSING:
        validate_amount(amount)
    if (enable := _optional(data, "enable", nullable=True)) is not _MISSING:
        _check_bool(enable, "enable")
    for key in ("duration", "reference", "authorizedPhoneNumber", "financialAccountId"):
        if (value := _optional(data, key, nullable=True)) is not _MISSING:
            _check_string(value, key)
    if (customer := _optional(data, "customer", nullable=True)) is not _MISSING:
        _check_customer(customer, "customer")
    if (providers := _optional(data, "authorizedProviders", nullable=True)) is not _MISSING:
        _check_string_list(providers, "authorizedProviders", choices=PAYMENT_CODE_PROVIDERS)
    if (target := _optional(data, "recurrentPaymentTarget", nullable=True)) is not _MISSING:
        _check_recurrent_target(target, "recurrentPaymentTarget")
    _check_metadata(data, nullable=True)


# ---------------------------------------------------------------------------
# Payments
# ---------------------------------------------------------------------------


def validate_update_payment(data: Any) -> None:
    data = _require_mapping(data, "")
    if (name := _optional(data, "name", nullable=True)) is not _MISSING:
        _check_string(name, "name")
    _check_metadata(data, nullable=True)


# ---------------------------------------------------------------------------
# Checkout sessions
# ---------------------------------------------------------------------------


def _check_line_item(value: Any, field: str) -> None:
    item = _require_mapping(value, field)
    if item.get("type") != "custom":
        _fail(f"{field}.type must be 'custom'", f"{field}.type", item.get("type"))
    _check_string(item.get("name"), f"{field}.name", min_length=1, max_length=100)
    validate_amount(item.get("price"), f"{field}.price")
    _check_int(item.get("quantity"), f"{field}.quantity", minimum=1, maximum=100000)


def validate_create_checkout_session(data: Any) -> None:
    data = _require_mapping(data, "")
    _check_string(data.get("name"), "name", min_length=1, max_length=150)
    line_items = data.get("lineItems")
    if not isinstance(line_items, (list, tuple)) or not 1 <= len(line_items) <= 16:
        _fail("lineItems must contain between 1 and 16 items", "lineItems", line_items)
    for index, item in enumerate(line_items):
        _check_line_item(item, f"lineItems.{index}")
    limits = {"description": 1000, "callbackState": 255, "reference": 255}
    for key in ("description", "cancelUrl", "successUrl", "callbackState", "reference", "financialAccountId"):
        if (value := _optional(data, key)) is not _MISSING:
            _check_string(value, key, max_length=limits.get(key))
    if (options := _optional(data, "paymentOptions")) is not _MISSING:
        options = _require_mapping(options, "paymentOptions")
        for key in ("card", "bank", "momo", "wallet"):
            if (flag := _optional(options, key)) is not _MISSING:
                _check_bool(flag, f"paymentOptions.{key}")
    if (branding := _optional(data, "brandingOptions")) is not _MISSING:
        branding = _require_mapping(branding, "brandingOptions")
        if (color := _optional(branding, "primaryColor")) is not _MISSING:
            _check_string(color, "brandingOptions.primaryColor")
    _check_metadata(data)


# ---------------------------------------------------------------------------
# Payouts
# ---------------------------------------------------------------------------

_PAYOUT_DESTINATION_FIELDS = {
    "bank": "accountNumber",
    "momo": "phoneNumber",
    "wallet": "walletId",
}


def validate_create_payout(data: Any) -> None:
    data = _require_mapping(data, "")
    validate_amount(data.get("amount"))
    destination = _require_mapping(data.get("destination"), "destination")
    kind = destination.get("type")
    _check_choice(kind, "destination.type", _PAYOUT_DESTINATION_FIELDS)
    _check_string(destination.get("providerId"), "destination.providerId", min_length=1)
    key = _PAYOUT_DESTINATION_FIELDS[kind]
    _check_string(destination.get(key), f"destination.{key}", min_length=1)
    if (source := _optional(data, "source")) is not _MISSING:
        source = _require_mapping(source, "source")
        if (account := _optional(source, "financialAccountId")) is not _MISSING:
            _check_string(account, "source.financialAccountId")
    _check_metadata(data)


def validate_update_payout(data: Any) -> None:
    _check_metadata(_require_mapping(data, ""), nullable=True)


# ---------------------------------------------------------------------------
# Webhooks
# ---------------------------------------------------------------------------


def _check_verification_method(value: Any) -> None:
    method = _require_mapping(value, "verificationMethod")
    kind = method.get("type")
    _check_choice(kind, "verificationMethod.type", ("HS256", "ES256"))
    if kind == "HS256":
        _check_string(
            method.get("secret"),
            "verificationMethod.secret",
            min_length=32,
            max_length=256,
        )


def _check_webhook_headers(value: Any) -> None:
    headers = _require_mapping(value, "headers")
    if len(headers) > _MAX_WEBHOOK_HEADERS:
        _fail(
            f"headers cannot have more than {_MAX_WEBHOOK_HEADERS} properties",
            "headers",
            len(headers),
        )
    for key, header_value in headers.items():
        _check_string(header_value, f"headers.{key}")


def validate_create_webhook(data: Any) -> None:
    data = _require_mapping(data, "")
    _check_string(data.get("name"), "name", min_length=1, max_length=100)
    _check_string(data.get("url"), "url", min_length=1, max_length=255)
    _check_choice(data.get("apiRelease"), "apiRelease", WEBHOOK_API_RELEASES)
    _check_string_list(data.get("events"), "events", min_items=1, max_items=100)
    if (enabled := _optional(data, "enabled")) is not _MISSING:
        _check_bool(enabled, "enabled")
    if (method := _optional(data, "verificationMethod")) is not _MISSING:
        _check_verification_method(method)
    if (headers := _optional(data, "headers")) is not _MISSING:
        _check_webhook_headers(headers)
    if (emails := _optional(data, "alertEmails")) is not _MISSING:
        _check_string_list(emails, "alertEmails", max_items=2)
    _check_metadata(data)


def validate_update_webhook(data: Any) -> None:
    data = _require_mapping(data, "")
    if (name := _optional(data, "name", nullable=True)) is not _MISSING:
        _check_string(name, "name", min_length=1, max_length=100)
    if (url := _optional(data, "url", nullable=True)) is not _MISSING:
        _check_string(url, "url", min_length=1, max_length=255)
    if (enabled := _optional(data, "enabled", nullable=True)) is not _MISSING:
        _check_bool(enabled, "enabled")
    if (release := _optional(data, "apiRelease", nullable=True)) is not _MISSING:
        _check_choice(release, "apiRelease", WEBHOOK_API_RELEASES)
    if (events := _optional(data, "events", nullable=True)) is not _MISSING:
        _check_string_list(events, "events", min_items=1, max_items=100)
    if (headers := _optional(data, "headers", nullable=True)) is not _MISSING:
        _check_webhook_headers(headers)
    if (emails := _optional(data, "alertEmails", nullable=True)) is not _MISSING:
        _check_string_list(emails, "alertEmails", max_items=2)
    _check_metadata(data, nullable=True)


# ---------------------------------------------------------------------------
# Internal transfers
# ---------------------------------------------------------------------------


def validate_create_internal_transfer(data: Any) -> None:
    data = _require_mapping(data, "")
    validate_amount(data.get("amount"))
    for key in ("sourceFinancialAccount", "destinationFinancialAccount"):
        account = _require_mapping(data.get(key), key)
        _check_string(account.get("id"), f"{key}.id", min_length=1)
    if (description := _optional(data, "description")) is not _MISSING:
        _check_string(description, "description", max_length=150)
    _check_metadata(data)


def validate_update_internal_transfer(data: Any) -> None:
    data = _require_mapping(data, "")
    if (description := _optional(data, "description", nullable=True)) is not _MISSING:
        _check_string(description, "description", max_length=150)
    _check_metadata(data, nullable=True)


# ---------------------------------------------------------------------------
# Financial accounts
# ---------------------------------------------------------------------------


def validate_create_financial_account(data: Any) -> None:
    data = _require_mapping(data, "")
    _check_string(data.get("name"), "name", min_length=1, max_length=150)
    _check_choice(data.get("currency"), "currency", CURRENCIES)
    for key in ("description", "reference"):
        if (value := _optional(data, key)) is not _MISSING:
            _check_string(value, key)
    _check_metadata(data)


def validate_update_financial_account(data: Any) -> None:
    data = _require_mapping(data, "")
    if (name := _optional(data, "name", nullable=True)) is not _MISSING:
        _check_string(name, "name", min_length=1, max_length=150)
    for key in ("description", "reference"):
        if (value := _optional(data, key, nullable=True)) is not _MISSING:
            _check_string(value, key)
    _check_metadata(data, nullable=True)


# ---------------------------------------------------------------------------
# Receipts and USSD OTPs
# ---------------------------------------------------------------------------


def validate_order_number(order_number: Any) -> None:
    _check_string(order_number, "order_number", min_length=1)


def validate_redeem_receipt(data: Any) -> None:
    data = _require_mapping(data, "")
    if (redeem_all := _optional(data, "redeemAll")) is not _MISSING:
        _check_bool(redeem_all, "redeemAll")
    if (entitlements := _optional(data, "entitlements")) is not _MISSING:
        if not isinstance(entitlements, (list, tuple)):
            _fail("entitlements must be a list", "entitlements", entitlements)
        for index, entry in enumerate(entitlements):
            field = f"entitlements.{index}"
            entry = _require_mapping(entry, field)
            _check_string(entry.get("key"), f"{field}.key", min_length=1)
            _check_int(entry.get("units"), f"{field}.units", minimum=1)
    _check_metadata(data)


def validate_create_ussd_otp(data: Any) -> None:
    data = _require_mapping(data, "")
    _check_string(data.get("authorizedPhoneNumber"), "authorizedPhoneNumber", min_length=1)
    if (message := _optional(data, "verificationMessage")) is not _MISSING:
        _check_string(message, "verificationMessage", max_length=255)
    if (duration := _optional(data, "duration")) is not _MISSING:
        _check_string(duration, "duration")
    _check_metadata(data)


def validate_transaction_type(value: Any) -> None:
    if value is None:
        return
    _check_choice(value, "type", FINANCIAL_TRANSACTION_TYPES)
