from __future__ import annotations

import random
from datetime import datetime

import pytest

from dynamic_qris.services.generator import QrisGenerator

FIXED_NOW = datetime(2025, 9, 8, 14, 30, 5)


@pytest.fixture
def merchant_data() -> dict[str, str]:
    return {
        "acquirer_domain": "COM.GO-JEK.WWW",
        "mpan": "936009143805979959",
        "terminal_id": "G805979959",
        "merchant_category": "UMI",
        "nmid": "ID1024358806544",
        "mcc": "5411",
        "merchant_name": "Kodingin Digital Nusantara",
        "merchant_city": "NGAWI",
        "postal_code": "63281",
    }


@pytest.fixture
def generator() -> QrisGenerator:
    return QrisGenerator(invoice_prefix="INV", clock=lambda: FIXED_NOW, rng=random.Random(7))
