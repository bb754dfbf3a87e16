"""Top-level client exposing every resource module.

Example::

    from monime import MonimeClient

    client = MonimeClient(space_id="spc-abc123", access_token="sk_live_...")
    codes = client.payment_codes.list(limit=10)

Credentials may also come from ``MONIME_SPACE_ID`` / ``MONIME_ACCESS_TOKEN``
or ``~/.monime/config.yaml``; see :func:`monime.config.load_config`.
"""

from __future__ import annotations

import random
from typing import Any, Callable, Optional

import requests

from monime.cancellation import TimerScheduler
from monime.config import ClientConfig, load_config
from monime.http_client import MonimeHttpClient
from monime.resources import (
    BankModule,
    CheckoutSessionModule,
    FinancialAccountModule,
    FinancialTransactionModule,
    InternalTransferModule,
    MomoModule,
    PaymentCodeModule,
    PaymentModule,
    PayoutModule,
    ReceiptModule,
    UssdOtpModule,
    WebhookModule,
)


class MonimeClient:
    """Entry point for the Monime API.

    Args:
        space_id: Space identifier (``spc-...``).
        access_token: API access token.
        config: A fully built :class:`ClientConfig`.  When given, the
            credential arguments and *options* are ignored.
        config_path: YAML file consulted by :func:`load_config`.
        session: Optional :class:`requests.Session` to send requests with.
        scheduler: Timer scheduler for timeouts and retry waits.
        id_generator: Produces idempotency keys for POST requests.
        rng: Random source for retry jitter.
        **options: Any other :class:`ClientConfig` field (``base_url``,
            ``timeout``, ``retries``, ``retry_delay``, ``retry_backoff``,
            ``validate_inputs``).

    Raises:
        MonimeValidationError: If the resolved configuration is invalid.
    """

    def __init__(
        self,
        space_id: Optional[str] = None,
        access_token: Optional[str] = None,
        *,
        config: Optional[ClientConfig] = None,
        config_path: Optional[str] = None,
        session: Optional[requests.Session] = None,
        scheduler: Optional[TimerScheduler] = None,
        id_generator: Optional[Callable[[], str]] = None,
        rng: Optional[random.Random] = None,
        **options: Any,
    ) -> None:
        if config is None:
            config = load_config(space_id, access_token, config_path=config_path, **options)
        self.config = config
        self.http = MonimeHttpClient(
            config,
            session=session,
            scheduler=scheduler,
            id_generator=id_generator,
            rng=rng,
        )

        self.payment_codes = PaymentCodeModule(self.http)
        self.payments = PaymentModule(self.http)
        self.payouts = PayoutModule(self.http)
        self.checkout_sessions = CheckoutSessionModule(self.http)
        self.webhooks = WebhookModule(self.http)
        self.internal_transfers = InternalTransferModule(self.http)
        self.financial_accounts = FinancialAccountModule(self.http)
        self.financial_transactions = FinancialTransactionModule(self.http)
        self.receipts = ReceiptModule(self.http)
        self.ussd_otps = UssdOtpModule(self.http)
        self.banks = BankModule(self.http)
        self.momos = MomoModule(self.http)

    def __enter__(self) -> "MonimeClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        self.http.close()

    def __repr__(self) -> str:
        return f"<MonimeClient space_id={self.config.space_id!r} base_url={self.config.base_url!r}>"


__all__ = ["MonimeClient"]
