"""
Módulo de exportação de dados extraídos.

Implementa o padrão Strategy para exportação, permitindo adicionar novos
formatos sem modificar o código de orquestração (OCP).

Formatos:
- CSV: apenas os itens (uma linha por item)
- XLSX: itens + resumo por NCM + faturamento mensal + notas puladas
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Union

import pandas as pd
from openpyxl.utils import get_column_letter

from config import settings
from core.batch_result import BatchResult
from core.exceptions import ExportError
from core.models import EXPORT_FIELDS, SERVICE_EXPORT_FIELDS
from extractors.utils import normalize_report_name

logger = logging.getLogger(__name__)

SHEET_DOCUMENTOS = 'Documentos'
SHEET_RESUMO_NCM = 'Resumo NCM'
SHEET_FATURAMENTO = 'Faturamento Mensal'
SHEET_NOTAS_PULADAS = 'Notas Puladas'

REPORT_PREFIX = 'relatorio_documentos'
DEFAULT_REPORT_SLUG = 'emitente'


def build_report_filename(
    nome_empresa: Optional[str],
    now: Optional[datetime] = None,
    extension: str = 'xlsx',
) -> str:
    """
    Monta o nome do relatório a partir da razão social e do horário.

    Example:
        >>> build_report_filename("Padaria São José", datetime(2024, 6, 15, 9, 5))
        'relatorio_documentos_padaria_sao_jose_2024_06_15_09_05.xlsx'
    """
    slug = normalize_report_name(nome_empresa) or DEFAULT_REPORT_SLUG
    stamp = (now or datetime.now()).strftime('%Y_%m_%d_%H_%M')
    return f"{REPORT_PREFIX}_{slug}_{stamp}.{extension.lstrip('.')}"


def records_dataframe(result: BatchResult) -> pd.DataFrame:
    """
    DataFrame dos itens na ordem fixa de colunas, com valores numéricos.

    As colunas de serviço só entram quando o lote tem NFS-e.
    """
    columns = list(EXPORT_FIELDS)
    if any(record.is_service for record in result.records):
        columns += SERVICE_EXPORT_FIELDS
    rows = [record.to_export_row() for record in result.records]
    return pd.DataFrame(rows, columns=columns)


class DataExporter(ABC):
    """
    Interface abstrata para exportadores de dados.

    Permite trocar a implementação de exportação sem afetar o código cliente,
    seguindo o Dependency Inversion Principle (DIP).
    """

    extension = ''

    @abstractmethod
    def export(self, result: BatchResult, destination: Union[str, Path]) -> Path:
        """
        Exporta o resultado de um lote para um destino.

        Args:
            result: BatchResult com itens e agregações
            destination: Caminho do arquivo de saída

        Returns:
            Path do arquivo gerado

        Raises:
            ExportError: Se não houver itens para exportar
        """
        pass

    @staticmethod
    def _ensure_records(result: BatchResult) -> None:
        if result.is_empty:
            raise ExportError("Nenhum item para exportar.")


class CsvExporter(DataExporter):
    """
    Exportador para formato CSV usando pandas.

    Exporta apenas os itens, com separador ';' e decimal ',' (Excel pt-BR).
    """

    extension = 'csv'

    def export(self, result: BatchResult, destination: Union[str, Path]) -> Path:
        self._ensure_records(result)

        destination = Path(destination)
        destination.parent.mkdir(parents=True, exist_ok=True)

        df = records_dataframe(result)
        df.to_csv(
            destination,
            index=False,
            encoding='utf-8-sig',  # BOM para Excel no Windows
            sep=';',
            decimal=','
        )
        logger.info(f"💾 CSV gerado: {destination} ({len(df)} linhas)")
        return destination


class ExcelExporter(DataExporter):
    """
    Exportador para planilha XLSX (pandas + openpyxl).

    Abas:
    - Documentos: um item por linha, colunas numéricas como número
    - Resumo NCM: totais e percentuais por NCM
    - Faturamento Mensal: faturamento e impostos por mês
    - Notas Puladas: só existe quando há lacunas na numeração
    """

    extension = 'xlsx'

    def __init__(self, column_width: int = settings.EXPORT_COLUMN_WIDTH):
        self.column_width = column_width

    def build_sheets(self, result: BatchResult) -> Dict[str, pd.DataFrame]:
        sheets = {
            SHEET_DOCUMENTOS: records_dataframe(result),
            SHEET_RESUMO_NCM: pd.DataFrame([s.to_dict() for s in result.ncm_summaries]),
            SHEET_FATURAMENTO: pd.DataFrame([m.to_dict() for m in result.monthly_revenue]),
        }
        if result.skipped_sequences:
            sheets[SHEET_NOTAS_PULADAS] = pd.DataFrame(
                [s.to_dict() for s in result.skipped_sequences]
            )
        return sheets

    def export(self, result: BatchResult, destination: Union[str, Path]) -> Path:
        self._ensure_records(result)

        destination = Path(destination)
        destination.parent.mkdir(parents=True, exist_ok=True)

        sheets = self.build_sheets(result)
        with pd.ExcelWriter(destination, engine='openpyxl') as writer:
            for sheet_name, df in sheets.items():
                df.to_excel(writer, sheet_name=sheet_name, index=False)
                self._set_column_widths(writer.sheets[sheet_name], len(df.columns))

        logger.info(f"💾 Planilha gerada: {destination} (abas: {', '.join(sheets)})")
        return destination

    def _set_column_widths(self, worksheet, total_columns: int) -> None:
        for col_index in range(1, total_columns + 1):
            worksheet.column_dimensions[get_column_letter(col_index)].width = self.column_width


EXPORTERS = {
    CsvExporter.extension: CsvExporter,
    ExcelExporter.extension: ExcelExporter,
}


def get_exporter(export_format: str) -> DataExporter:
    """
    Retorna o exportador do formato ('xlsx' ou 'csv').

    Raises:
        ExportError: Se o formato não for suportado
    """
    exporter_cls = EXPORTERS.get((export_format or '').lower())
    if exporter_cls is None:
        raise ExportError(f"Formato de exportação não suportado: {export_format}")
    return exporter_cls()


def export_result(
    result: BatchResult,
    output_dir: Union[str, Path],
    export_format: str = settings.EXPORT_FORMAT,
    now: Optional[datetime] = None,
) -> Path:
    """
    Exporta o lote para output_dir com o nome padrão de relatório.

    Returns:
        Path do arquivo gerado
    """
    exporter = get_exporter(export_format)
    filename = build_report_filename(result.nome_empresa, now=now, extension=exporter.extension)
    return exporter.export(result, Path(output_dir) / filename)
