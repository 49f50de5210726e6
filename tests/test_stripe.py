import json

import pytest

from app.core.errors import InvalidStripeEnvError, PriceNotFoundError
from app.core.stripe import StripePrice, find_price, load_stripe_config


@pytest.fixture
def stripe_config_file(tmp_path):
    path = tmp_path / "stripe_config.json"
    path.write_text(
        json.dumps(
            {
                "dev": {
                    "publishable_key": "pk_test_abc",
                    "webhook_base_url": "http://localhost:22300",
                    "prices": [
                        {"id": "price_m", "account_type": 1, "period": "monthly", "amount": "1.99", "currency": "EUR"},
                        {"id": "price_y", "account_type": 1, "period": "yearly", "amount": "17.88", "currency": "GBP"},
                    ],
                }
            }
        ),
        encoding="utf-8",
    )
    return path


def test_load_stripe_config(stripe_config_file):
    cfg = load_stripe_config("dev", stripe_config_file)

    assert cfg.publishable_key == "pk_test_abc"
    assert cfg.webhook_base_url == "http://localhost:22300"
    assert [p.id for p in cfg.prices] == ["price_m", "price_y"]


def test_load_stripe_config_unknown_env(stripe_config_file):
    with pytest.raises(InvalidStripeEnvError):
        load_stripe_config("prod", stripe_config_file)


def test_price_formatting():
    monthly = StripePrice(id="a", account_type=1, period="monthly", amount="1.99", currency="EUR")
    yearly = StripePrice(id="b", account_type=1, period="yearly", amount="17.88", currency="GBP")

    assert monthly.formatted_amount == "€1.99"
    assert monthly.formatted_monthly_amount == "€1.99"
    assert yearly.formatted_amount == "£17.88"
    assert yearly.formatted_monthly_amount == "£1.49"


def test_find_price(stripe_config_file):
    cfg = load_stripe_config("dev", stripe_config_file)

    assert find_price(cfg, 1, "yearly").id == "price_y"
    with pytest.raises(PriceNotFoundError):
        find_price(cfg, 2, "monthly")
