import pytest

from factura_extractor.extraction.customer import CustomerNameExtractor


@pytest.fixture
def names():
    return CustomerNameExtractor()


class TestCustomerNameStrategies:

    def test_label(self, names, normalize, trace):
        candidate = names.extract(normalize("Titular: Juan Perez\nCUIT 20-12345678-9"), trace)
        assert candidate.value == "JUAN PEREZ"
        assert candidate.strategy == 'label'
        assert candidate.score == 90

    def test_label_cut_at_id_marker(self, names, normalize, trace):
        candidate = names.extract(normalize("Cliente: Ana Gomez DNI 30111222"), trace)
        assert candidate.value == "ANA GOMEZ"

    def test_label_skips_numeric_values(self, names, normalize, trace):
        text = "Nro de cliente: 0012345\nSeñor(a): Laura Fernandez"
        candidate = names.extract(normalize(text), trace)
        assert candidate.value == "LAURA FERNANDEZ"

    def test_name_above_cuit_line(self, names, normalize, trace):
        candidate = names.extract(normalize("ROBERTO SUAREZ\nCUIT 20-22333444-5"), trace)
        assert candidate.value == "ROBERTO SUAREZ"
        assert candidate.strategy == 'label'

    def test_geographic_context(self, names, normalize, trace):
        text = (
            "Factura B\n"
            "Domicilio de suministro: Av Rivadavia 1234\n"
            "Carlos Gomez\n"
        )
        candidate = names.extract(normalize(text), trace)
        assert candidate.value == "CARLOS GOMEZ"
        assert candidate.strategy == 'geographic'
        assert candidate.score == 80

    def test_shape_fallback_skips_provider_line(self, names, normalize, trace):
        text = "EDENOR DISTRIBUIDORA SA\nMARIA LOPEZ\nConsumo 120 kwh"
        candidate = names.extract(normalize(text), trace)
        assert candidate.value == "MARIA LOPEZ"
        assert candidate.strategy == 'shape'
        assert candidate.score == 65

    def test_provider_name_never_selected(self, names, normalize, trace):
        candidate = names.extract(normalize("EDENOR DISTRIBUIDORA S.A.\nFactura B 0001"), trace)
        assert candidate is None
        assert trace.messages[-1] == "Customer name: no strategy produced a valid name"

    def test_strategy_order(self, names):
        assert [s.__name__ for s in names.strategies] == [
            'from_label', 'from_geographic_context', 'from_shape'
        ]


class TestCustomerNameLabels:

    def test_label_inside_sentence_ignored(self, names, normalize, trace):
        text = "Estimado cliente le recordamos que puede adherirse al debito automatico"
        assert names.from_label(normalize(text)) is None

    def test_label_needs_whole_word(self, names, normalize, trace):
        assert names.from_label(normalize("Clientela: Juan Perez")) is None

    def test_name_on_line_after_label(self, names, normalize, trace):
        candidate = names.extract(normalize("Titular\nJuan Perez\nCUIT 20-12345678-9"), trace)
        assert candidate.value == "JUAN PEREZ"
        assert candidate.strategy == 'label'
