"""
Testes dos exportadores (CSV e XLSX) e do nome do relatório.
"""

from datetime import datetime

import pandas as pd
import pytest
from openpyxl import load_workbook

from core.batch_result import BatchResult
from core.exceptions import ExportError
from core.exporters import (
    CsvExporter,
    ExcelExporter,
    build_report_filename,
    export_result,
    get_exporter,
)
from core.models import EXPORT_FIELDS, DocumentType, FiscalRecord, SkippedSequence
from core.batch_processor import process_batch


def goods_record(**overrides) -> FiscalRecord:
    data = dict(
        tipo_documento=DocumentType.NFE,
        numero="100",
        cnpj_emitente="12345678000195",
        nome_emitente="Padaria São José Ltda",
        data_emissao="2024-06-15T10:00:00-03:00",
        produto="Pão",
        ncm="19059090",
        cfop="5102",
        cst="00",
        quantidade="2,00",
        valor_unitario="1.234,50",
        pis="0,35",
        cofins="1,60",
        icms="2,10",
        cst_pis="01",
        cst_cofins="01",
    )
    data.update(overrides)
    return FiscalRecord(**data)


@pytest.fixture
def result():
    batch = BatchResult(
        records=[goods_record(), goods_record(numero="103", icms="")],
        nome_empresa="Padaria São José Ltda",
        cnpj_empresa="12345678000195",
        total_documents=2,
    )
    batch.skipped_sequences = [
        SkippedSequence(cnpj="12345678000195", serie="1", numeros_pulados=["101", "102"])
    ]
    return batch


class TestBuildReportFilename:

    def test_nome_com_empresa(self):
        name = build_report_filename("Padaria São José Ltda", now=datetime(2024, 6, 15, 9, 5))
        assert name == "relatorio_documentos_padaria_sao_jose_ltda_2024_06_15_09_05.xlsx"

    def test_sem_empresa_usa_emitente(self):
        name = build_report_filename("", now=datetime(2024, 1, 2, 3, 4), extension="csv")
        assert name == "relatorio_documentos_emitente_2024_01_02_03_04.csv"


class TestCsvExporter:

    def test_exporta_itens(self, result, tmp_path):
        destination = CsvExporter().export(result, tmp_path / "saida" / "itens.csv")

        assert destination.exists()
        df = pd.read_csv(destination, sep=";", decimal=",", encoding="utf-8-sig", dtype={"numero": str})
        assert list(df.columns) == EXPORT_FIELDS
        assert len(df) == 2
        assert df.loc[0, "valor_unitario"] == pytest.approx(1234.5)
        assert df.loc[0, "icms"] == pytest.approx(2.1)
        # imposto vazio vira zero numérico
        assert df.loc[1, "icms"] == 0

    def test_lote_vazio_levanta_erro(self, tmp_path):
        with pytest.raises(ExportError):
            CsvExporter().export(BatchResult(), tmp_path / "vazio.csv")


class TestExcelExporter:

    def test_abas_e_celulas_numericas(self, tmp_path):
        batch = process_batch([
            """<NFe><infNFe>
                <ide><nNF>1</nNF><dhEmi>2024-06-15T10:00:00</dhEmi></ide>
                <emit><CNPJ>111</CNPJ><xNome>Loja</xNome></emit>
                <det nItem="1"><prod><xProd>A</xProd><NCM>1234</NCM><qCom>2</qCom><vUnCom>10.50</vUnCom></prod>
                <imposto><ICMS><ICMS00><CST>00</CST><vICMS>2.10</vICMS></ICMS00></ICMS></imposto></det>
            </infNFe></NFe>""",
            """<NFe><infNFe>
                <ide><nNF>3</nNF><dhEmi>2024-06-20T10:00:00</dhEmi></ide>
                <emit><CNPJ>111</CNPJ><xNome>Loja</xNome></emit>
                <det nItem="1"><prod><xProd>B</xProd><NCM>1234</NCM><qCom>1</qCom><vUnCom>5</vUnCom></prod></det>
            </infNFe></NFe>""",
        ])
        destination = ExcelExporter().export(batch, tmp_path / "relatorio.xlsx")

        workbook = load_workbook(destination)
        assert workbook.sheetnames == ["Documentos", "Resumo NCM", "Faturamento Mensal", "Notas Puladas"]

        documentos = workbook["Documentos"]
        header = [cell.value for cell in documentos[1]]
        assert header == EXPORT_FIELDS
        qtd_col = header.index("quantidade") + 1
        assert documentos.cell(row=2, column=qtd_col).value == 2
        assert isinstance(documentos.cell(row=2, column=header.index("valor_unitario") + 1).value, float)
        assert documentos.column_dimensions["A"].width == 20

        resumo = workbook["Resumo NCM"]
        resumo_header = [cell.value for cell in resumo[1]]
        assert resumo.cell(row=2, column=resumo_header.index("icms_percentage") + 1).value == "8.08"

        puladas = workbook["Notas Puladas"]
        assert puladas.cell(row=2, column=3).value == "2"

    def test_sem_notas_puladas_nao_cria_aba(self, result, tmp_path):
        result.skipped_sequences = []
        destination = ExcelExporter().export(result, tmp_path / "r.xlsx")
        assert "Notas Puladas" not in load_workbook(destination).sheetnames

    def test_colunas_de_servico_quando_ha_nfse(self, result, tmp_path):
        result.records.append(FiscalRecord(
            tipo_documento=DocumentType.NFSE,
            produto="Serviço",
            quantidade="1,00",
            valor_unitario="500,00",
            icms="0,00",
            valor_servico="500,00",
            valor_iss="25,00",
        ))
        destination = ExcelExporter().export(result, tmp_path / "r.xlsx")
        header = [cell.value for cell in load_workbook(destination)["Documentos"][1]]
        assert header[-2:] == ["valor_servico", "valor_iss"]

    def test_lote_vazio_levanta_erro(self, tmp_path):
        with pytest.raises(ExportError):
            ExcelExporter().export(BatchResult(), tmp_path / "vazio.xlsx")


class TestExportResult:

    def test_gera_arquivo_com_nome_padrao(self, result, tmp_path):
        path = export_result(result, tmp_path, "csv", now=datetime(2024, 6, 15, 9, 5))
        assert path.name == "relatorio_documentos_padaria_sao_jose_ltda_2024_06_15_09_05.csv"
        assert path.exists()

    def test_formato_invalido(self):
        with pytest.raises(ExportError):
            get_exporter("pdf")
