import json

import pytest

from factura_extractor import InvoiceExtractor, parse_invoice
from factura_extractor.extraction import FIELD_NAMES, ProviderRecord
from factura_extractor.utils.exceptions import ExtractionError, InvalidInputError

BARCODE_44 = "01234567890123456789012345678901234567890123"


class TestEndToEnd:

    def test_edenor_invoice(self, extractor, edenor_invoice, reference_date):
        result = extractor.parse(edenor_invoice, reference_date=reference_date)

        assert result.amount == 15420.50
        assert result.confidence['amount'] >= 90

        assert result.due_date == "2025-01-25"
        assert result.confidence['date'] >= 90

        assert "Edenor" in result.provider['name']
        assert result.confidence['provider'] == 100

        assert result.barcode == BARCODE_44
        assert result.confidence['barcode'] == 100

        assert result.customer_name == "JUAN PEREZ"
        assert result.confidence['customerName'] == 90

    def test_sources_are_heuristic(self, extractor, edenor_invoice, reference_date):
        result = extractor.parse(edenor_invoice, reference_date=reference_date)
        assert result.sources == {name: 'heuristic' for name in FIELD_NAMES}

    def test_debug_trace_populated(self, extractor, edenor_invoice, reference_date):
        result = extractor.parse(edenor_invoice, reference_date=reference_date)
        assert result.debug[0].startswith("Parsing")
        assert any(message.startswith("Provider: Edenor") for message in result.debug)
        assert any(message.startswith("Amount: selected 15420.5") for message in result.debug)

    def test_idempotent(self, extractor, edenor_invoice, reference_date):
        first = extractor.parse(edenor_invoice, reference_date=reference_date)
        second = extractor.parse(edenor_invoice, reference_date=reference_date)
        assert first.to_dict() == second.to_dict()
        assert first is not second
        assert first.debug is not second.debug

    def test_json_shape(self, extractor, edenor_invoice, reference_date):
        data = json.loads(extractor.parse(edenor_invoice, reference_date=reference_date).to_json())
        assert set(data) == {
            'amount', 'dueDate', 'barcode', 'provider', 'customerName',
            'confidence', 'alternatives', 'debug', 'sources', 'issuerCuit',
        }
        assert set(data['confidence']) == set(FIELD_NAMES)
        assert set(data['alternatives']) == {'amounts', 'dates', 'barcodes'}
        assert data['provider'] == {'id': 'edenor', 'name': 'Edenor', 'type': 'electricity'}

    def test_formatted_values(self, extractor, edenor_invoice, reference_date):
        data = extractor.parse(edenor_invoice, reference_date=reference_date).to_dict(
            include_formatted=True
        )
        assert data['amountFormatted'] == "$ 15.420,50"
        assert data['dueDateFormatted'] == "25/01/2025"

    def test_parse_invoice_helper(self, edenor_invoice, reference_date):
        result = parse_invoice(edenor_invoice, reference_date=reference_date)
        assert result.amount == 15420.50


class TestNullSafety:

    @pytest.mark.parametrize("text", ["", "   \n\t ", None, 42, b"TOTAL A PAGAR"])
    def test_unusable_input(self, extractor, text):
        result = extractor.parse(text)
        assert result.fields == {name: None for name in FIELD_NAMES}
        assert all(value == 0 for value in result.confidence.values())
        assert result.alternatives == {'amounts': [], 'dates': [], 'barcodes': []}
        assert result.missing_fields == list(FIELD_NAMES)

    def test_text_without_fields(self, extractor):
        result = extractor.parse("Gracias por su visita")
        assert result.missing_fields == list(FIELD_NAMES)
        assert result.sources == {}
        assert "Amount: no candidates found" in result.debug


class TestSelectionDetails:

    def test_alternatives_ranked_and_capped(self, reference_date):
        lines = [f"Importe $ {1100 + 13 * i},{11 + i}" for i in range(8)]
        text = "\n".join(lines) + "\nTotal a pagar: $ 2.345,67"
        result = InvoiceExtractor(max_alternatives=3).parse(text, reference_date=reference_date)
        assert result.amount == 2345.67
        alternatives = result.alternatives['amounts']
        assert len(alternatives) == 3
        scores = [alt['score'] for alt in alternatives]
        assert scores == sorted(scores, reverse=True)
        assert all('confidence' in alt for alt in alternatives)

    def test_issue_date_not_selected(self, extractor, reference_date):
        text = "Fecha de emisión: 02/01/2025\nTotal $ 1.500,30"
        result = extractor.parse(text, reference_date=reference_date)
        assert result.due_date is None
        assert result.confidence['date'] == 0
        assert result.alternatives['dates'][0]['value'] == "2025-01-02"

    def test_custom_provider_table(self, reference_date):
        providers = [ProviderRecord('coop', 'Cooperativa Local', ('cooperativa local',), 'electricity')]
        result = InvoiceExtractor(providers=providers).parse(
            "COOPERATIVA LOCAL\nEDENOR", reference_date=reference_date
        )
        assert result.provider['id'] == 'coop'

    def test_issuer_cuit(self, extractor):
        result = extractor.parse("EDENOR S.A.\nC.U.I.T.: 30-65511620-2\nTotal $ 1.500,30")
        assert result.issuer_cuit == "30655116202"

    def test_cross_validation_in_pipeline(self, extractor, reference_date):
        barcode = "1" * 19 + "00731540" + "1" * 17
        text = f"Importe $ 7.315,40\nCódigo de pago: {barcode}"
        result = extractor.parse(text, reference_date=reference_date)
        assert result.amount == 7315.40
        assert result.barcode == barcode
        assert any("found in barcode" in message for message in result.debug)


class TestDottedDueDate:

    def test_dotted_date_read_as_date(self, extractor, reference_date):
        text = "EDENOR\nVencimiento: 10.02.2025\nGracias"
        result = extractor.parse(text, reference_date=reference_date)
        assert result.due_date == "2025-02-10"
        assert result.amount is None


class TestStrictParse:

    @pytest.mark.parametrize("text", [None, 42, b"TOTAL A PAGAR"])
    def test_non_string_rejected(self, extractor, text):
        with pytest.raises(InvalidInputError) as exc_info:
            extractor.parse_strict(text)
        assert exc_info.value.details == {"type": type(text).__name__}

    def test_blank_text_rejected(self, extractor):
        with pytest.raises(ExtractionError):
            extractor.parse_strict("  \n ")

    def test_missing_fields_not_raised(self, extractor):
        result = extractor.parse_strict("Gracias por su visita")
        assert result.missing_fields == list(FIELD_NAMES)

    def test_parse_invoice_strict_flag(self, edenor_invoice, reference_date):
        result = parse_invoice(edenor_invoice, reference_date=reference_date, strict=True)
        assert result.amount == 15420.50
        with pytest.raises(InvalidInputError):
            parse_invoice(None, strict=True)
        assert parse_invoice(None).missing_fields == list(FIELD_NAMES)
