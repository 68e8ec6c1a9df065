import pytest

from payfast_bridge.dto.payment import CustomerDetails
from payfast_bridge.services.payment_service import OrderIdGenerator, build_payment_request, split_name
from payfast_bridge.utils.errors import InvalidInputError
from payfast_bridge.utils.signature import generate_signature

from conftest import PASSPHRASE, make_settings


def test_builds_signed_production_request(settings):
    customer = CustomerDetails(name="Jane Mary Doe", email="jane@example.com", phone="0821234567")
    payment = build_payment_request("99.5", "Widget", customer, settings)

    fields = payment.fields
    assert fields["merchant_id"] == "10000100"
    assert fields["merchant_key"] == "46f0cd694581a"
    assert fields["notify_url"] == "https://shop.example.com/api/payfast/notify"
    assert fields["name_first"] == "Jane"
    assert fields["name_last"] == "Mary Doe"
    assert fields["amount"] == "99.50"
    assert fields["item_description"] == "Payment for Widget"
    assert fields["custom_str1"] == "jane@example.com"
    assert fields["custom_str2"] == "0821234567"
    assert fields["m_payment_id"] == payment.merchant_order_id
    assert payment.merchant_order_id.startswith("ORDER_")
    assert payment.submission_url == "https://www.payfast.co.za/eng/process"

    unsigned = {key: value for key, value in fields.items() if key != "signature"}
    assert fields["signature"] == generate_signature(unsigned, PASSPHRASE)


def test_sandbox_flag_selects_sandbox_url():
    payment = build_payment_request(10, "Widget", CustomerDetails(), make_settings(payfast_sandbox=True))
    assert payment.submission_url == "https://sandbox.payfast.co.za/eng/process"
    assert payment.redirect_url.startswith("https://sandbox.payfast.co.za/eng/process?")


def test_missing_customer_details_use_defaults(settings):
    payment = build_payment_request(10, "Widget", CustomerDetails(), settings)
    assert payment.fields["name_first"] == "Customer"
    assert payment.fields["name_last"] == "Name"
    assert payment.fields["email_address"] == settings.default_customer_email
    assert payment.fields["cell_number"] == ""
    assert payment.fields["amount"] == "10.00"


def test_redirect_url_omits_empty_fields(settings):
    payment = build_payment_request("10", "Blue Widget", CustomerDetails(), settings)
    assert "cell_number=" not in payment.redirect_url
    assert "item_name=Blue+Widget" in payment.redirect_url
    assert f"signature={payment.fields['signature']}" in payment.redirect_url


def test_unpassphrased_account_signs_without_passphrase():
    settings = make_settings(payfast_passphrase="")
    payment = build_payment_request("10", "Widget", CustomerDetails(), settings)
    unsigned = {key: value for key, value in payment.fields.items() if key != "signature"}
    assert payment.fields["signature"] == generate_signature(unsigned, None)


@pytest.mark.parametrize("amount", [None, "", "   ", "abc", "NaN", "Infinity", "0", "-5", True, "1e30", "1" * 40, 1e30])
def test_invalid_amount_is_rejected(settings, amount):
    with pytest.raises(InvalidInputError) as exc_info:
        build_payment_request(amount, "Widget", CustomerDetails(), settings)
    assert exc_info.value.field == "amount"


@pytest.mark.parametrize("item_name", [None, "", "  "])
def test_missing_item_name_is_rejected(settings, item_name):
    with pytest.raises(InvalidInputError) as exc_info:
        build_payment_request("10.00", item_name, CustomerDetails(), settings)
    assert exc_info.value.field == "item_name"


@pytest.mark.parametrize(
    ("amount", "expected"),
    [("10", "10.00"), (10.005, "10.01"), ("1.005", "1.01"), ("1e2", "100.00"), (" 7.1 ", "7.10"), (3, "3.00")],
)
def test_amount_is_normalized_to_two_decimals(settings, amount, expected):
    payment = build_payment_request(amount, "Widget", CustomerDetails(), settings)
    assert payment.fields["amount"] == expected


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        (None, ("Customer", "Name")),
        ("", ("Customer", "Name")),
        ("Cher", ("Cher", "Name")),
        ("Jane  Doe", ("Jane", "Doe")),
        ("Jan van der Merwe", ("Jan", "van der Merwe")),
    ],
)
def test_split_name(name, expected):
    assert split_name(name) == expected


def test_order_ids_are_unique_when_clock_stalls():
    generator = OrderIdGenerator(clock=lambda: 1700000000000)
    ids = [generator.next_id() for _ in range(3)]
    assert ids == ["ORDER_1700000000000", "ORDER_1700000000001", "ORDER_1700000000002"]


def test_each_request_gets_a_new_order_id(settings):
    first = build_payment_request("10", "Widget", CustomerDetails(), settings)
    second = build_payment_request("10", "Widget", CustomerDetails(), settings)
    assert first.merchant_order_id != second.merchant_order_id
