"""Per-resource wrappers around :class:`~monime.http_client.MonimeHttpClient`."""

from monime.resources.checkout_sessions import CheckoutSessionModule
from monime.resources.financial_accounts import FinancialAccountModule
from monime.resources.financial_transactions import FinancialTransactionModule
from monime.resources.internal_transfers import InternalTransferModule
from monime.resources.payment_codes import PaymentCodeModule
from monime.resources.payments import PaymentModule
from monime.resources.payouts import PayoutModule
from monime.resources.providers import BankModule, MomoModule
from monime.resources.receipts import ReceiptModule
from monime.resources.ussd_otps import UssdOtpModule
from monime.resources.webhooks import WebhookModule

__all__ = [
    "BankModule",
    "CheckoutSessionModule",
    "FinancialAccountModule",
    "FinancialTransactionModule",
    "InternalTransferModule",
    "MomoModule",
    "PaymentCodeModule",
    "PaymentModule",
    "PayoutModule",
    "ReceiptModule",
    "UssdOtpModule",
    "WebhookModule",
]
