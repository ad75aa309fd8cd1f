from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional
import re

from extractors.utils import parse_number

# Ordem fixa das colunas na exportação (planilha / CSV)
EXPORT_FIELDS = [
    'numero',
    'cnpj_emitente',
    'nome_emitente',
    'data_emissao',
    'cnpj_destinatario',
    'nome_destinatario',
    'produto',
    'ncm',
    'cfop',
    'cst',
    'quantidade',
    'valor_unitario',
    'pis',
    'cofins',
    'icms',
    'cst_pis',
    'cst_cofins',
    'tipo_documento',
]

# Campos exclusivos de NFS-e (vão ao final da linha)
SERVICE_EXPORT_FIELDS = ['valor_servico', 'valor_iss']

# Campos exportados como número (e não como texto formatado)
NUMERIC_EXPORT_FIELDS = {'quantidade', 'valor_unitario', 'pis', 'cofins', 'icms'}

# Data de emissão ISO: 2024-06-15T10:00:00-03:00 -> (2024, 06)
MONTH_RE = re.compile(r"^(\d{4})-(\d{2})(?:-|$)")


class DocumentType(str, Enum):
    """Tipos de documento fiscal suportados."""

    NFE = 'NFe'
    NFCE = 'NFCe'
    NFSE = 'NFSe'

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class XmlDocument:
    """
    Arquivo XML bruto entregue pela camada de ingestão.

    Attributes:
        name (str): Nome do arquivo (com o caminho dentro do ZIP, se houver).
        content (bytes): Conteúdo binário ainda não decodificado.
    """
    name: str
    content: bytes


def month_key(data_emissao: Optional[str]) -> Optional[str]:
    """
    Extrai a chave mensal (YYYY-MM) da data de emissão.

    Usa apenas a parte antes do 'T'. Datas fora do padrão ISO não geram
    chave (o documento fica fora do faturamento mensal).

    Examples:
        >>> month_key("2024-06-15T10:00:00-03:00")
        '2024-06'
        >>> month_key("15/06/2024") is None
        True
    """
    if not data_emissao:
        return None
    date_part = data_emissao.strip().split('T')[0]
    match = MONTH_RE.match(date_part)
    if not match:
        return None
    return f"{match.group(1)}-{match.group(2)}"


def percentage(part: float, total: float) -> str:
    """Percentual de part sobre total com duas casas ("0.00" quando total é zero)."""
    if total == 0:
        return '0.00'
    return f"{part / total * 100:.2f}"


@dataclass
class FiscalRecord:
    """
    Registro unificado: um item (produto ou serviço) de um documento fiscal.

    NF-e, NFC-e e NFS-e são normalizadas neste mesmo formato. O tipo do
    documento define quais campos fazem sentido: os campos de serviço só
    existem em NFS-e e os CSTs de PIS/COFINS só existem em NF-e/NFC-e.

    Attributes:
        tipo_documento (DocumentType): Tipo de origem, definido na extração.
        numero (str): Número da nota atribuído pelo emitente ("" se ausente).
        cnpj_emitente / nome_emitente (str): Emitente (prestador na NFS-e).
        cnpj_destinatario / nome_destinatario (str): Destinatário (tomador na NFS-e).
        data_emissao (str): Data/hora de emissão como veio no XML.
        produto, ncm, cfop, cst (str): Dados do item.
        quantidade, valor_unitario (str): Valores formatados ("1.234,56").
        pis, cofins, icms (str): Impostos formatados ("" quando o grupo não existe).
        cst_pis, cst_cofins (str): Situação tributária de PIS e COFINS.
        valor_servico, valor_iss (Optional[str]): Apenas para NFS-e.
    """
    tipo_documento: DocumentType
    numero: str = ""
    cnpj_emitente: str = ""
    nome_emitente: str = ""
    data_emissao: str = ""
    cnpj_destinatario: str = ""
    nome_destinatario: str = ""
    produto: str = ""
    ncm: str = ""
    cfop: str = ""
    cst: str = ""
    quantidade: str = "0,00"
    valor_unitario: str = "0,00"
    pis: str = ""
    cofins: str = ""
    icms: str = ""
    cst_pis: str = ""
    cst_cofins: str = ""
    valor_servico: Optional[str] = None
    valor_iss: Optional[str] = None

    @property
    def is_service(self) -> bool:
        return self.tipo_documento == DocumentType.NFSE

    @property
    def valor_item(self) -> float:
        """Valor do item: quantidade x valor unitário."""
        return parse_number(self.quantidade) * parse_number(self.valor_unitario)

    @property
    def mes_emissao(self) -> Optional[str]:
        return month_key(self.data_emissao)

    def to_dict(self) -> dict:
        """
        Converte o registro para dicionário na ordem fixa de exportação.

        Os campos de serviço só aparecem em registros de NFS-e.
        """
        data = {name: getattr(self, name) for name in EXPORT_FIELDS}
        data['tipo_documento'] = self.tipo_documento.value
        if self.is_service:
            data['valor_servico'] = self.valor_servico
            data['valor_iss'] = self.valor_iss
        return data

    def to_export_row(self) -> dict:
        """
        Linha para planilha: mesmos campos de to_dict(), com quantidade,
        valor unitário e impostos convertidos para número.
        """
        row = self.to_dict()
        for name in NUMERIC_EXPORT_FIELDS:
            row[name] = parse_number(row[name])
        return row


@dataclass
class NcmSummary:
    """Totais acumulados de um NCM no lote."""
    ncm: str
    total_quantidade: float = 0.0
    total_valor: float = 0.0
    total_pis: float = 0.0
    total_cofins: float = 0.0
    total_icms: float = 0.0
    pis_percentage: str = '0.00'
    cofins_percentage: str = '0.00'
    icms_percentage: str = '0.00'

    def to_dict(self) -> dict:
        return {
            'ncm': self.ncm,
            'total_quantidade': self.total_quantidade,
            'total_valor': self.total_valor,
            'total_pis': self.total_pis,
            'total_cofins': self.total_cofins,
            'total_icms': self.total_icms,
            'pis_percentage': self.pis_percentage,
            'cofins_percentage': self.cofins_percentage,
            'icms_percentage': self.icms_percentage,
        }


@dataclass
class MonthlyRevenue:
    """Faturamento e impostos acumulados de um mês (YYYY-MM)."""
    mes_ano: str
    total_faturamento: float = 0.0
    total_icms: float = 0.0
    total_pis: float = 0.0
    total_cofins: float = 0.0

    @property
    def icms_percentage(self) -> str:
        return percentage(self.total_icms, self.total_faturamento)

    @property
    def pis_percentage(self) -> str:
        return percentage(self.total_pis, self.total_faturamento)

    @property
    def cofins_percentage(self) -> str:
        return percentage(self.total_cofins, self.total_faturamento)

    def to_dict(self) -> dict:
        return {
            'mes_ano': self.mes_ano,
            'total_faturamento': self.total_faturamento,
            'total_icms': self.total_icms,
            'total_pis': self.total_pis,
            'total_cofins': self.total_cofins,
            'icms_percentage': self.icms_percentage,
            'pis_percentage': self.pis_percentage,
            'cofins_percentage': self.cofins_percentage,
        }


@dataclass
class SkippedSequence:
    """Números ausentes na sequência de um emitente/série."""
    cnpj: str
    serie: str
    numeros_pulados: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            'cnpj': self.cnpj,
            'serie': self.serie,
            'numeros_pulados': ', '.join(self.numeros_pulados),
            'quantidade': len(self.numeros_pulados),
        }
