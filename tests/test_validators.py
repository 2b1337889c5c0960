from datetime import date

import pytest

from factura_extractor.postprocessor import (
    BARCODE_TIERS,
    DateValidator,
    NameValidator,
    classify_barcode_length,
    validate_barcode,
)


class TestDateValidator:

    def test_window_follows_reference(self):
        validator = DateValidator()
        assert validator.year_window(date(2025, 1, 1)) == (2024, 2027)
        assert validator.year_window(date(2030, 6, 1)) == (2029, 2032)

    def test_inside_window(self):
        valid, message = DateValidator().validate(date(2025, 1, 25), date(2025, 1, 1))
        assert valid
        assert message == "Valid date"

    def test_too_old(self):
        valid, message = DateValidator().validate(date(2023, 12, 31), date(2025, 1, 1))
        assert not valid
        assert "too old" in message

    def test_too_far_ahead(self):
        validator = DateValidator()
        assert validator.is_valid(date(2027, 12, 31), date(2025, 1, 1))
        assert not validator.is_valid(date(2028, 1, 1), date(2025, 1, 1))

    def test_missing_date(self):
        assert not DateValidator().is_valid(None)


class TestBarcodeTiers:

    def test_interbank_beats_service(self):
        assert BARCODE_TIERS['interbank'] > BARCODE_TIERS['service']
        assert BARCODE_TIERS['service'] > BARCODE_TIERS['electronic_payment']
        assert BARCODE_TIERS['electronic_payment'] > BARCODE_TIERS['cbu']

    @pytest.mark.parametrize("length, tier", [
        (60, 'interbank'),
        (44, 'interbank'),
        (40, 'interbank'),
        (39, 'service'),
        (23, 'service'),
        (22, 'cbu'),
        (21, 'electronic_payment'),
        (19, 'electronic_payment'),
        (18, 'numeric_code'),
        (61, 'numeric_code'),
    ])
    def test_length_boundaries(self, length, tier):
        assert classify_barcode_length(length) == tier

    def test_22_digits_with_payment_signal(self):
        assert classify_barcode_length(22, "Código de pago electrónico:") == 'electronic_payment'

    def test_22_digits_labelled_cbu(self):
        assert classify_barcode_length(22, "CBU para pago electrónico") == 'cbu'


class TestValidateBarcode:

    def test_interbank(self):
        result = validate_barcode("0" * 44)
        assert result.valid
        assert result.type == 'interbank'
        assert result.priority == 100
        assert result.length == 44

    def test_strips_separators(self):
        result = validate_barcode("1234 5678-9012 3456 7890 123")
        assert result.cleaned == "12345678901234567890123"
        assert result.type == 'service'

    def test_too_short(self):
        result = validate_barcode("123456789")
        assert not result.valid
        assert result.reason == "Code too short"

    def test_too_long(self):
        result = validate_barcode("1" * 66)
        assert not result.valid
        assert result.reason == "Code too long"

    @pytest.mark.parametrize("code", [None, "", 12345678901])
    def test_empty_or_non_string(self, code):
        assert not validate_barcode(code).valid


class TestNameValidator:

    @pytest.fixture
    def validator(self):
        return NameValidator()

    @pytest.mark.parametrize("name", [
        "JUAN CARLOS PEREZ",
        "Maria Lopez",
        "MARÍA JOSÉ GÓMEZ",
        "O'BRIEN PATRICIO",
    ])
    def test_valid_names(self, validator, name):
        assert validator.is_valid_person_name(name)

    @pytest.mark.parametrize("name, reason", [
        ("EDENOR DISTRIBUIDORA S.A.", "Blacklisted"),
        ("CAMUZZI GAS PAMPEANA", "Blacklisted"),
        ("TOTAL A PAGAR", "Token shorter"),
        ("FECHA DE EMISION", "Blacklisted"),
        ("JUANITO", "Single word"),
        ("JUAN PEREZ 123", "Contains digits"),
        ("JUAN PEREZ: SOCIO", "Unexpected characters"),
        ("UNO DOS TRES CUATRO CINCO SEIS", "tokens"),
        ("", "empty"),
    ])
    def test_rejected_names(self, validator, name, reason):
        valid, message = validator.validate(name)
        assert not valid
        assert reason in message

    def test_custom_blacklist(self):
        validator = NameValidator(blacklist=["PEREZ"])
        assert not validator.is_valid_person_name("JUAN PEREZ")
        assert validator.is_valid_person_name("EDENOR DISTRIBUIDORA")
