import pytest

from factura_extractor.extraction import DEFAULT_PROVIDERS, ProviderRecord
from factura_extractor.extraction.barcode import BarcodeExtractor
from factura_extractor.extraction.selector import deduplicate, select_best

SERVICE_CODE = "1234567890" * 2 + "12345"          # 25 digits
INTERBANK_CODE = "9876543210" * 4 + "98765"        # 45 digits


@pytest.fixture
def barcodes():
    return BarcodeExtractor()


def run(barcodes, view, trace, provider=None):
    candidates = barcodes.extract(view, trace)
    barcodes.score(candidates, provider)
    candidates = deduplicate(candidates, score=lambda c: c.rank_key)
    return select_best(candidates, barcodes.threshold, rank=lambda c: c.rank_key)


class TestBarcodeExtraction:

    def test_interbank_code(self, barcodes, normalize, trace):
        code = "01234567890123456789012345678901234567890123"
        selection = run(barcodes, normalize(f"Código de barras: {code}"), trace)
        assert selection.selected.value == code
        assert selection.selected.length == 44
        assert selection.selected.type == 'interbank'
        assert barcodes.confidence(selection.selected) == 100

    def test_length_dominates_context(self, barcodes, normalize, trace):
        text = (
            "Factura de servicio\n"
            f"Código de barras para pago: {SERVICE_CODE}\n"
            "Referencia\n"
            f"{INTERBANK_CODE}\n"
        )
        selection = run(barcodes, normalize(text), trace)
        assert selection.selected.value == INTERBANK_CODE
        service = selection.alternatives[0]
        assert service.value == SERVICE_CODE
        assert service.score > selection.selected.score

    def test_grouped_digits_reassembled(self, barcodes, normalize, trace):
        text = "Código de pago: 1234 5678 9012 3456 7890 1234"
        selection = run(barcodes, normalize(text), trace)
        assert selection.selected.value == "123456789012345678901234"
        assert selection.selected.type == 'service'

    def test_account_context_penalized(self, barcodes, normalize, trace):
        candidates = barcodes.extract(normalize(f"Número de cuenta: {SERVICE_CODE}"), trace)
        barcodes.score(candidates)
        assert candidates[0].context_score == -40
        assert candidates[0].score == 80 - 40

    def test_provider_context_bonus(self, barcodes, normalize, trace):
        edenor = [p for p in DEFAULT_PROVIDERS if p.id == 'edenor'][0]
        candidates = barcodes.extract(normalize(f"Edenor pago {INTERBANK_CODE}"), trace)
        barcodes.score(candidates, edenor)
        assert candidates[0].score == 100 + 20 + 10

    def test_accented_provider_pattern(self, barcodes, normalize, trace):
        telefonica = ProviderRecord('telefonica', 'Telefónica', ('telefónica',), 'telecom')
        candidates = barcodes.extract(normalize(f"Telefónica pago {INTERBANK_CODE}"), trace)
        barcodes.score(candidates, telefonica)
        assert candidates[0].context_score == 20 + 10

    def test_twenty_two_digits_is_cbu(self, barcodes, normalize, trace):
        candidates = barcodes.extract(normalize("CBU: " + "0" * 22), trace)
        assert candidates[0].type == 'cbu'

    def test_short_runs_ignored(self, barcodes, normalize, trace):
        assert barcodes.extract(normalize("Medidor 12345678901234"), trace) == []

    def test_to_dict_shape(self, barcodes, normalize, trace):
        candidates = barcodes.extract(normalize(INTERBANK_CODE), trace)
        barcodes.score(candidates)
        assert candidates[0].to_dict() == {
            'value': INTERBANK_CODE,
            'score': 100,
            'raw': INTERBANK_CODE,
            'length': 45,
            'type': 'interbank',
        }
