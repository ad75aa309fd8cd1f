"""
Agregação dos registros do lote por NCM e por mês de emissão.

O FiscalAggregator é o único dono dos acumuladores mutáveis do lote.
Registros entram um a um (add_record) e finalize() devolve as visões
ordenadas, com os percentuais de imposto sobre o valor.

Regras:
- valor do item = quantidade x valor unitário
- registros sem NCM não entram no resumo por NCM
- registros sem data ISO válida (YYYY-MM...) não entram no faturamento mensal
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List

from core.models import FiscalRecord, MonthlyRevenue, NcmSummary, percentage
from extractors.utils import parse_number

logger = logging.getLogger(__name__)


@dataclass
class AggregationResult:
    """Visões agregadas de um lote, já ordenadas."""

    ncm_summaries: List[NcmSummary] = field(default_factory=list)
    monthly_revenue: List[MonthlyRevenue] = field(default_factory=list)
    available_ncms: List[str] = field(default_factory=list)
    available_months: List[str] = field(default_factory=list)


@dataclass
class _NcmTotals:
    quantidade: float = 0.0
    valor: float = 0.0
    pis: float = 0.0
    cofins: float = 0.0
    icms: float = 0.0


class FiscalAggregator:
    """
    Acumula totais por NCM e por mês (YYYY-MM).

    Usage:
        aggregator = FiscalAggregator()
        aggregator.add_records(records)
        result = aggregator.finalize()
    """

    def __init__(self):
        self._by_ncm: Dict[str, _NcmTotals] = {}
        self._by_month: Dict[str, MonthlyRevenue] = {}
        self.records_seen = 0

    def add_record(self, record: FiscalRecord) -> None:
        """Soma um registro aos acumuladores de NCM e de mês."""
        self.records_seen += 1

        valor_item = record.valor_item
        pis = parse_number(record.pis)
        cofins = parse_number(record.cofins)
        icms = parse_number(record.icms)

        if record.ncm:
            totals = self._by_ncm.setdefault(record.ncm, _NcmTotals())
            totals.quantidade += parse_number(record.quantidade)
            totals.valor += valor_item
            totals.pis += pis
            totals.cofins += cofins
            totals.icms += icms

        mes_ano = record.mes_emissao
        if mes_ano is None:
            if record.data_emissao:
                logger.debug(f"Data de emissão fora do padrão, sem mês: {record.data_emissao!r}")
            return

        month = self._by_month.setdefault(mes_ano, MonthlyRevenue(mes_ano=mes_ano))
        month.total_faturamento += valor_item
        month.total_icms += icms
        month.total_pis += pis
        month.total_cofins += cofins

    def add_records(self, records: Iterable[FiscalRecord]) -> None:
        for record in records:
            self.add_record(record)

    def finalize(self) -> AggregationResult:
        """
        Gera as visões ordenadas do que foi acumulado até aqui.

        Pode ser chamado mais de uma vez: não altera nem zera o estado.
        """
        ncm_summaries = []
        for ncm in sorted(self._by_ncm):
            totals = self._by_ncm[ncm]
            ncm_summaries.append(NcmSummary(
                ncm=ncm,
                total_quantidade=totals.quantidade,
                total_valor=totals.valor,
                total_pis=totals.pis,
                total_cofins=totals.cofins,
                total_icms=totals.icms,
                pis_percentage=percentage(totals.pis, totals.valor),
                cofins_percentage=percentage(totals.cofins, totals.valor),
                icms_percentage=percentage(totals.icms, totals.valor),
            ))

        months = sorted(self._by_month)
        monthly_revenue = [
            MonthlyRevenue(
                mes_ano=m.mes_ano,
                total_faturamento=m.total_faturamento,
                total_icms=m.total_icms,
                total_pis=m.total_pis,
                total_cofins=m.total_cofins,
            )
            for m in (self._by_month[key] for key in months)
        ]

        return AggregationResult(
            ncm_summaries=ncm_summaries,
            monthly_revenue=monthly_revenue,
            available_ncms=[s.ncm for s in ncm_summaries],
            available_months=months,
        )
