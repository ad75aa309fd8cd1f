"""
Extrator de dados de arquivos XML de NF-e, NFC-e e NFS-e.

Este módulo converte o XML de cada documento fiscal em uma lista de
FiscalRecord (um por item), no mesmo formato para os três tipos.

Suporta:
- NF-e (Nota Fiscal Eletrônica de Produto) - Modelo 55
- NFC-e (Nota Fiscal de Consumidor Eletrônica)
- NFS-e (Nota Fiscal de Serviço Eletrônica) - ABRASF, IPM e variantes

Estrutura XML NF-e:
    <nfeProc>
        <NFe>
            <infNFe>
                <ide>...</ide>      # Identificação (número, data)
                <emit>...</emit>    # Emitente (CNPJ, razão social)
                <dest>...</dest>    # Destinatário
                <det nItem="1">     # Um por item
                    <prod>...</prod>
                    <imposto>...</imposto>
                </det>
            </infNFe>
        </NFe>
    </nfeProc>

Estrutura XML NFS-e (ABRASF):
    <CompNfse>
        <Nfse>
            <InfNfse>
                <Numero>...</Numero>
                <PrestadorServico>...</PrestadorServico>
                <TomadorServico>...</TomadorServico>
                <Servico>...</Servico>
            </InfNfse>
        </Nfse>
    </CompNfse>

Campos ausentes nunca levantam exceção: viram "" ou o padrão da tabela
(ver extractors/field_maps.py).
"""

import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Mapping, Optional, Tuple, Union

from core.exceptions import XmlParseError
from core.models import DocumentType, FiscalRecord
from extractors.field_maps import (
    NFE_HEADER_FIELDS,
    NFE_ITEM_SELECTOR,
    NFE_PRODUCT_DEFAULTS,
    NFE_PRODUCT_FIELDS,
    NFSE_HEADER_DEFAULTS,
    NFSE_HEADER_FIELDS,
    NFSE_ITEM_DEFAULTS,
    NFSE_ITEM_FIELDS,
    NFSE_ITEM_SELECTORS,
    NFSE_SINGLE_ITEM_DESCRIPTION,
)
from extractors.tax_groups import read_tax_group
from extractors.utils import format_number

logger = logging.getLogger(__name__)

# Marcadores de tipo, verificados nesta ordem de prioridade
NFE_MARKER = 'NFe'
NFCE_MARKER = 'NFCe'
# NFS-e não tem padrão nacional: cada município/provedor usa uma raiz
NFSE_MARKERS = (
    'NFSe',
    'Nfse',
    'CompNfse',
    'Rps',
    'GerarNfseResposta',
    'ConsultarNfseResposta',
    'xmlNfpse',
)


@dataclass
class XmlExtractionResult:
    """Resultado da extração de um XML."""

    success: bool
    records: List[FiscalRecord] = field(default_factory=list)
    doc_type: Optional[DocumentType] = None
    error: Optional[str] = None
    source_name: str = ""


# ==================== Métodos Auxiliares ====================


def _remove_namespaces(root: ET.Element) -> ET.Element:
    """
    Remove namespaces das tags já parseadas ({http://...}NFe -> NFe).

    Isso simplifica muito a busca por elementos, já que não precisamos
    lidar com variações de namespace entre diferentes emissores.
    """
    for elem in root.iter():
        if isinstance(elem.tag, str) and '}' in elem.tag:
            elem.tag = elem.tag.split('}', 1)[1]
    return root


def element_text(elem: Optional[ET.Element]) -> str:
    """Texto completo do elemento (inclui descendentes), sem espaços nas pontas."""
    if elem is None:
        return ""
    return "".join(elem.itertext()).strip()


def find_text_in_paths(parent: Optional[ET.Element], paths: Tuple[str, ...]) -> str:
    """Busca texto no primeiro caminho que tiver conteúdo."""
    if parent is None:
        return ""
    for path in paths:
        text = element_text(parent.find(path))
        if text:
            return text
    return ""


def read_fields(
    parent: Optional[ET.Element],
    table: Mapping[str, Tuple[str, ...]],
    defaults: Optional[Mapping[str, str]] = None,
) -> Dict[str, str]:
    """
    Resolve todos os campos de uma tabela (campo -> caminhos candidatos).

    Returns:
        Dicionário campo -> texto, com o padrão (ou "") quando nenhum caminho casa
    """
    defaults = defaults or {}
    return {
        name: find_text_in_paths(parent, paths) or defaults.get(name, "")
        for name, paths in table.items()
    }


def has_element(root: ET.Element, tag: str) -> bool:
    """Verifica se a tag existe no documento (incluindo a raiz)."""
    return root.tag == tag or root.find(f".//{tag}") is not None


# ==================== Extratores por tipo ====================


def _extract_goods(root: ET.Element, doc_type: DocumentType) -> List[FiscalRecord]:
    """
    Extrai os itens de NF-e/NFC-e (leiaute idêntico nos dois modelos).

    Um registro por <det>. Documento sem <det> não gera registros.
    """
    header = read_fields(root, NFE_HEADER_FIELDS)
    records = []

    for det in root.iterfind(NFE_ITEM_SELECTOR):
        prod = det.find('.//prod')
        imposto = det.find('.//imposto')

        product = read_fields(prod, NFE_PRODUCT_FIELDS, NFE_PRODUCT_DEFAULTS)
        icms = read_tax_group(imposto, 'ICMS')
        pis = read_tax_group(imposto, 'PIS')
        cofins = read_tax_group(imposto, 'COFINS')

        records.append(FiscalRecord(
            tipo_documento=doc_type,
            produto=product['produto'],
            ncm=product['ncm'],
            cfop=product['cfop'],
            cst=icms.codigo,
            quantidade=format_number(product['quantidade']),
            valor_unitario=format_number(product['valor_unitario']),
            pis=pis.valor,
            cofins=cofins.valor,
            icms=icms.valor,
            cst_pis=pis.codigo,
            cst_cofins=cofins.codigo,
            **header,
        ))

    return records


def extract_nfe(root: ET.Element) -> List[FiscalRecord]:
    """Extrai os itens de uma NF-e (modelo 55)."""
    return _extract_goods(root, DocumentType.NFE)


def extract_nfce(root: ET.Element) -> List[FiscalRecord]:
    """Extrai os itens de uma NFC-e."""
    return _extract_goods(root, DocumentType.NFCE)


def _service_items(root: ET.Element) -> List[ET.Element]:
    """Itens de serviço de todos os padrões conhecidos, em ordem de documento."""
    matched = set()
    for selector in NFSE_ITEM_SELECTORS:
        matched.update(id(elem) for elem in root.iterfind(selector))
    if not matched:
        return []
    return [elem for elem in root.iter() if id(elem) in matched]


def extract_nfse(root: ET.Element) -> List[FiscalRecord]:
    """
    Extrai os itens de uma NFS-e.

    Sem itens discriminados, gera um único registro representando o
    documento inteiro (quantidade 1, valor unitário = valor dos serviços).
    """
    header = read_fields(root, NFSE_HEADER_FIELDS, NFSE_HEADER_DEFAULTS)
    valor_servico_raw = header.pop('valor_servico')
    valor_iss_raw = header.pop('valor_iss')

    common = dict(
        tipo_documento=DocumentType.NFSE,
        cst='',
        pis='',
        cofins='',
        icms=format_number('0'),
        cst_pis='',
        cst_cofins='',
        valor_servico=format_number(valor_servico_raw),
        valor_iss=format_number(valor_iss_raw),
        **header,
    )

    items = _service_items(root)
    if not items:
        return [FiscalRecord(
            produto=NFSE_SINGLE_ITEM_DESCRIPTION,
            ncm='',
            quantidade=format_number('1'),
            valor_unitario=format_number(valor_servico_raw),
            **common,
        )]

    records = []
    for item in items:
        fields = read_fields(item, NFSE_ITEM_FIELDS, NFSE_ITEM_DEFAULTS)
        records.append(FiscalRecord(
            produto=fields['produto'],
            ncm=fields['ncm'],
            quantidade=format_number(fields['quantidade']),
            valor_unitario=format_number(fields['valor_unitario'] or valor_servico_raw),
            **common,
        ))
    return records


EXTRACTORS: Dict[DocumentType, Callable[[ET.Element], List[FiscalRecord]]] = {
    DocumentType.NFE: extract_nfe,
    DocumentType.NFCE: extract_nfce,
    DocumentType.NFSE: extract_nfse,
}


class XmlExtractor:
    """
    Extrator de dados de arquivos XML de NF-e, NFC-e e NFS-e.

    Detecta automaticamente o tipo de documento e extrai os itens
    no formato unificado (FiscalRecord).
    """

    def parse(self, xml_content: Union[str, bytes]) -> ET.Element:
        """
        Faz o parse do XML e remove os namespaces.

        Raises:
            XmlParseError: Se o conteúdo não for XML bem formado.
        """
        if isinstance(xml_content, str):
            # Remove BOM se presente
            xml_content = xml_content.lstrip('\ufeff').lstrip()
        else:
            xml_content = xml_content.lstrip()

        if not xml_content:
            raise XmlParseError("Conteúdo XML vazio")

        try:
            root = ET.fromstring(xml_content)
        except ET.ParseError as e:
            raise XmlParseError(f"Erro ao fazer parse do XML: {e}") from e

        return _remove_namespaces(root)

    def detect_document_type(self, root: ET.Element) -> DocumentType:
        """
        Detecta o tipo do documento pelos elementos marcadores.

        Ordem: NF-e, NFC-e, NFS-e. Sem marcador conhecido, assume NF-e
        (a extração segue e pode gerar registros quase vazios).
        """
        if has_element(root, NFE_MARKER):
            return DocumentType.NFE

        if has_element(root, NFCE_MARKER):
            return DocumentType.NFCE

        if any(has_element(root, marker) for marker in NFSE_MARKERS):
            return DocumentType.NFSE

        logger.debug(f"Nenhum marcador reconhecido (raiz <{root.tag}>), assumindo NF-e")
        return DocumentType.NFE

    def extract_records(self, root: ET.Element, doc_type: DocumentType) -> List[FiscalRecord]:
        """Aplica o extrator do tipo informado."""
        return EXTRACTORS[doc_type](root)

    def extract(self, xml_content: Union[str, bytes], source_name: str = "") -> XmlExtractionResult:
        """
        Extrai os itens de um documento XML.

        Falhas de parse ou de extração não propagam: retornam
        XmlExtractionResult com success=False e a mensagem de erro.

        Args:
            xml_content: Conteúdo do XML (texto já decodificado ou bytes)
            source_name: Nome do arquivo de origem, para logs

        Returns:
            XmlExtractionResult com os registros extraídos ou erro
        """
        try:
            root = self.parse(xml_content)
        except XmlParseError as e:
            logger.warning(f"⚠️ XML inválido ignorado ({source_name or 'sem nome'}): {e}")
            return XmlExtractionResult(success=False, error=str(e), source_name=source_name)

        doc_type = self.detect_document_type(root)

        try:
            records = self.extract_records(root, doc_type)
        except Exception as e:
            logger.warning(f"⚠️ Erro ao extrair {doc_type} ({source_name or 'sem nome'}): {e}")
            return XmlExtractionResult(
                success=False,
                doc_type=doc_type,
                error=f"Erro ao extrair {doc_type}: {e}",
                source_name=source_name,
            )

        if not records:
            logger.info(f"Documento {doc_type} sem itens: {source_name or 'sem nome'}")

        return XmlExtractionResult(
            success=True,
            records=records,
            doc_type=doc_type,
            source_name=source_name,
        )


# Função utilitária para uso direto
def extract_xml(xml_content: Union[str, bytes], source_name: str = "") -> XmlExtractionResult:
    """
    Função de conveniência para extrair itens de um XML.

    Args:
        xml_content: Conteúdo do XML

    Returns:
        XmlExtractionResult
    """
    extractor = XmlExtractor()
    return extractor.extract(xml_content, source_name)
