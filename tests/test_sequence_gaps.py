"""
Testes da detecção de notas puladas.
"""

import logging

import pytest

from core.models import SkippedSequence
from core.sequence_gaps import SequenceGapDetector, find_gaps, parse_document_number

CNPJ_A = "12345678000195"
CNPJ_B = "98765432000110"


class TestFindGaps:

    def test_lacunas_entre_numeros(self):
        assert find_gaps([100, 101, 103, 104, 107]) == [102, 105, 106]

    def test_ordem_de_entrada_nao_importa(self):
        assert find_gaps([107, 100, 104, 101, 103]) == [102, 105, 106]

    def test_um_numero_nao_tem_lacuna(self):
        assert find_gaps([5]) == []

    def test_vazio(self):
        assert find_gaps([]) == []

    def test_duplicados_nao_geram_lacuna(self):
        assert find_gaps([10, 10, 11]) == []

    def test_sequencia_completa(self):
        assert find_gaps(range(1, 50)) == []

    def test_salto_enorme_nao_e_expandido(self, caplog):
        with caplog.at_level(logging.WARNING, logger="core.sequence_gaps"):
            gaps = find_gaps([1, 3, 999999999])

        assert gaps == [2]
        assert "excede o limite" in caplog.text

    def test_limite_do_salto_e_configuravel(self):
        assert find_gaps([1, 5], max_span=3) == [2, 3, 4]
        assert find_gaps([1, 6], max_span=3) == []


class TestParseDocumentNumber:

    @pytest.mark.parametrize("numero,esperado", [
        ("000123", 123),
        ("45", 45),
        (" 7", 7),
        ("45A", 45),
        ("A45", None),
        ("", None),
        (None, None),
    ])
    def test_leitura_pelos_digitos_iniciais(self, numero, esperado):
        assert parse_document_number(numero) == esperado


class TestSequenceGapDetector:

    @pytest.fixture
    def detector(self):
        return SequenceGapDetector()

    def test_detecta_por_emitente(self, detector):
        for numero in ("100", "101", "103", "104", "107"):
            detector.register(CNPJ_A, numero)

        assert detector.detect() == [
            SkippedSequence(cnpj=CNPJ_A, serie="1", numeros_pulados=["102", "105", "106"]),
        ]

    def test_emitente_com_um_documento_nao_aparece(self, detector):
        detector.register(CNPJ_A, "5")
        assert detector.detect() == []

    def test_emitentes_sao_independentes(self, detector):
        detector.register(CNPJ_B, "10")
        detector.register(CNPJ_A, "1")
        detector.register(CNPJ_B, "12")
        detector.register(CNPJ_A, "2")
        detector.register(CNPJ_A, "4")

        result = detector.detect()
        # ordem de primeira aparição
        assert [s.cnpj for s in result] == [CNPJ_B, CNPJ_A]
        assert result[0].numeros_pulados == ["11"]
        assert result[1].numeros_pulados == ["3"]

    def test_series_diferentes_nao_se_misturam(self, detector):
        detector.register(CNPJ_A, "1", serie="1")
        detector.register(CNPJ_A, "3", serie="2")
        assert detector.detect() == []

    def test_numero_com_zeros_a_esquerda(self, detector):
        detector.register(CNPJ_A, "000098")
        detector.register(CNPJ_A, "000100")
        assert detector.detect()[0].numeros_pulados == ["99"]

    def test_numero_nao_numerico_e_ignorado(self, detector):
        detector.register(CNPJ_A, "1")
        detector.register(CNPJ_A, "ABC")
        detector.register(CNPJ_A, "2")
        assert detector.detect() == []

    def test_to_dict(self):
        seq = SkippedSequence(cnpj=CNPJ_A, serie="1", numeros_pulados=["102", "105"])
        assert seq.to_dict() == {
            "cnpj": CNPJ_A,
            "serie": "1",
            "numeros_pulados": "102, 105",
            "quantidade": 2,
        }
