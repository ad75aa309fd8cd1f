"""
Testes da leitura dos grupos de imposto (ICMS, PIS, COFINS).

Cobre variantes conhecidas, Simples Nacional (CSOSN), grupo sem filho,
grupo ausente e a leitura genérica para variantes desconhecidas.
"""

import xml.etree.ElementTree as ET

import pytest

from extractors.tax_groups import TaxReading, read_tax_group, resolve_variant


def imposto(inner: str) -> ET.Element:
    return ET.fromstring(f"<imposto>{inner}</imposto>")


class TestReadTaxGroup:
    """Testes para read_tax_group."""

    def test_icms00(self):
        reading = read_tax_group(
            imposto("<ICMS><ICMS00><CST>00</CST><vICMS>18.00</vICMS></ICMS00></ICMS>"),
            "ICMS",
        )
        assert reading.codigo == "00"
        assert reading.valor == "18,00"
        assert reading.variante == "ICMS00"

    def test_icms_simples_nacional_usa_csosn(self):
        reading = read_tax_group(
            imposto("<ICMS><ICMSSN101><CSOSN>101</CSOSN></ICMSSN101></ICMS>"),
            "ICMS",
        )
        assert reading.codigo == "101"
        assert reading.valor == "0,00"

    @pytest.mark.parametrize("tag,valor_tag", [
        ("PISAliq", "vPIS"),
        ("PISOutr", "vPIS"),
    ])
    def test_pis_variantes(self, tag, valor_tag):
        reading = read_tax_group(
            imposto(f"<PIS><{tag}><CST>49</CST><{valor_tag}>1234.5</{valor_tag}></{tag}></PIS>"),
            "PIS",
        )
        assert reading.codigo == "49"
        assert reading.valor == "1.234,50"

    def test_cofins_nao_tributado(self):
        reading = read_tax_group(imposto("<COFINS><COFINSNT><CST>06</CST></COFINSNT></COFINS>"), "COFINS")
        assert reading.codigo == "06"
        assert reading.valor == "0,00"

    def test_grupo_ausente(self):
        """Sem o grupo pai, código e valor ficam vazios."""
        assert read_tax_group(imposto("<IPI/>"), "ICMS") == TaxReading()

    def test_imposto_ausente(self):
        assert read_tax_group(None, "PIS") == TaxReading()

    def test_grupo_sem_filhos(self):
        reading = read_tax_group(imposto("<ICMS/>"), "ICMS")
        assert reading.codigo == ""
        assert reading.valor == "0,00"

    def test_variante_desconhecida_usa_leitura_generica(self):
        """Leiautes futuros: lê CST e valor do primeiro filho."""
        reading = read_tax_group(
            imposto("<ICMS><ICMS99X><CST>99</CST><vICMS>3.3</vICMS></ICMS99X></ICMS>"),
            "ICMS",
        )
        assert reading.codigo == "99"
        assert reading.valor == "3,30"
        assert reading.variante == "ICMS99X"

    def test_usa_apenas_o_primeiro_filho(self):
        reading = read_tax_group(
            imposto(
                "<PIS><PISAliq><CST>01</CST><vPIS>1.00</vPIS></PISAliq>"
                "<PISOutr><CST>99</CST><vPIS>9.00</vPIS></PISOutr></PIS>"
            ),
            "PIS",
        )
        assert reading.codigo == "01"
        assert reading.valor == "1,00"


class TestResolveVariant:

    def test_variante_conhecida(self):
        variant = resolve_variant("ICMS", ET.fromstring("<ICMSSN900/>"))
        assert variant.code_tags == ("CSOSN", "CST")
        assert variant.value_tag == "vICMS"

    def test_variante_generica(self):
        variant = resolve_variant("COFINS", ET.fromstring("<COFINSNovo/>"))
        assert variant.code_tags == ("CST",)
        assert variant.value_tag == "vCOFINS"
