"""
Resultado de processamento em lote.

Este módulo define a estrutura que reúne tudo o que sai de um lote de
XMLs fiscais: os itens extraídos, as visões agregadas (NCM e mês), as
notas puladas e os erros de cada arquivo que não pôde ser lido.

Funcionalidades:
- Contagem de documentos por tipo (NF-e, NFC-e, NFS-e)
- Filtros por NCM e por mês (seleção vazia devolve tudo)
- Serialização para dicionário
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from core.models import (
    DocumentType,
    FiscalRecord,
    MonthlyRevenue,
    NcmSummary,
    SkippedSequence,
)


@dataclass
class BatchResult:
    """
    Resultado do processamento de um lote de XMLs.

    Attributes:
        records: Itens extraídos, na ordem dos documentos de entrada
        ncm_summaries: Totais por NCM, ordenados pelo código
        monthly_revenue: Faturamento por mês (YYYY-MM), em ordem crescente
        available_ncms: NCMs presentes no lote
        available_months: Meses presentes no lote
        skipped_sequences: Notas puladas por emitente/série
        nome_empresa: Razão social do emitente do primeiro documento válido
        cnpj_empresa: CNPJ do emitente do primeiro documento válido
        errors: Erros por arquivo ({"file", "error"})
        total_documents: Quantidade de documentos recebidos
    """

    records: List[FiscalRecord] = field(default_factory=list)
    ncm_summaries: List[NcmSummary] = field(default_factory=list)
    monthly_revenue: List[MonthlyRevenue] = field(default_factory=list)
    available_ncms: List[str] = field(default_factory=list)
    available_months: List[str] = field(default_factory=list)
    skipped_sequences: List[SkippedSequence] = field(default_factory=list)
    nome_empresa: str = ""
    cnpj_empresa: str = ""
    errors: List[Dict[str, Any]] = field(default_factory=list)
    total_documents: int = 0

    def add_error(self, file_path: str, error_msg: str) -> None:
        """Registra um erro de processamento."""
        self.errors.append({"file": file_path, "error": error_msg})

    @property
    def total_errors(self) -> int:
        """Total de erros ocorridos."""
        return len(self.errors)

    @property
    def total_records(self) -> int:
        return len(self.records)

    @property
    def is_empty(self) -> bool:
        """Verifica se o lote não gerou nenhum item."""
        return self.total_records == 0

    def count_by_type(self) -> Dict[str, int]:
        """
        Conta os itens por tipo de documento.

        Returns:
            {"NFe": n, "NFCe": n, "NFSe": n} (tipos ausentes aparecem com 0)
        """
        counts = {doc_type.value: 0 for doc_type in DocumentType}
        for record in self.records:
            counts[record.tipo_documento.value] += 1
        return counts

    def filter_ncm_summaries(self, ncm: Optional[str] = None) -> List[NcmSummary]:
        """Resumos do NCM selecionado; sem seleção, todos."""
        if not ncm:
            return list(self.ncm_summaries)
        return [s for s in self.ncm_summaries if s.ncm == ncm]

    def filter_monthly_revenue(self, mes_ano: Optional[str] = None) -> List[MonthlyRevenue]:
        """Faturamento do mês selecionado (YYYY-MM); sem seleção, todos."""
        if not mes_ano:
            return list(self.monthly_revenue)
        return [m for m in self.monthly_revenue if m.mes_ano == mes_ano]

    def to_dict(self) -> Dict[str, Any]:
        """
        Serializa o BatchResult para dicionário.

        Returns:
            Dicionário serializável em JSON
        """
        return {
            "nome_empresa": self.nome_empresa,
            "cnpj_empresa": self.cnpj_empresa,
            "total_documents": self.total_documents,
            "total_errors": self.total_errors,
            "documentos_por_tipo": self.count_by_type(),
            "records": [r.to_dict() for r in self.records],
            "ncm_summaries": [s.to_dict() for s in self.ncm_summaries],
            "monthly_revenue": [m.to_dict() for m in self.monthly_revenue],
            "available_ncms": list(self.available_ncms),
            "available_months": list(self.available_months),
            "skipped_sequences": [s.to_dict() for s in self.skipped_sequences],
            "errors": self.errors,
        }
