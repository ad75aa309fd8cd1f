"""
Leitura dos grupos de imposto (ICMS, PIS, COFINS) de um item de NF-e/NFC-e.

Dentro de <imposto>, cada tributo tem um grupo pai (<ICMS>, <PIS>, <COFINS>)
cujo único filho depende da situação tributária do item:

    <imposto>
        <ICMS>
            <ICMS00>            # ou ICMS20, ICMSSN102, ...
                <CST>00</CST>
                <vICMS>2.10</vICMS>
            </ICMS00>
        </ICMS>
        <PIS>
            <PISAliq>           # ou PISNT, PISOutr, ...
                <CST>01</CST>
                <vPIS>0.17</vPIS>
            </PISAliq>
        </PIS>
    </imposto>

Cada variante conhecida declara onde estão o código de situação e o valor.
Filhos desconhecidos caem na variante genérica, que lê CST e valor do
primeiro filho (compatível com leiautes futuros).
"""

import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from extractors.utils import format_number

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TaxVariant:
    """
    Formato de um grupo de situação tributária.

    Attributes:
        tag: Nome do elemento filho (ex: 'ICMS00', 'PISAliq').
        code_tags: Tags candidatas ao código de situação, em ordem.
        value_tag: Tag do valor do imposto (ex: 'vICMS').
    """
    tag: str
    code_tags: Tuple[str, ...]
    value_tag: str


@dataclass(frozen=True)
class TaxReading:
    """Resultado da leitura de um grupo de imposto."""
    codigo: str = ""
    valor: str = ""
    variante: Optional[str] = None


def _variants(tags, code_tags, value_tag) -> Dict[str, TaxVariant]:
    return {tag: TaxVariant(tag, code_tags, value_tag) for tag in tags}


# ICMS regime normal (CST) e Simples Nacional (CSOSN)
ICMS_VARIANTS = {
    **_variants(
        ('ICMS00', 'ICMS02', 'ICMS10', 'ICMS15', 'ICMS20', 'ICMS30', 'ICMS40',
         'ICMS51', 'ICMS53', 'ICMS60', 'ICMS61', 'ICMS70', 'ICMS90',
         'ICMSPart', 'ICMSST'),
        ('CST',),
        'vICMS',
    ),
    **_variants(
        ('ICMSSN101', 'ICMSSN102', 'ICMSSN201', 'ICMSSN202', 'ICMSSN500', 'ICMSSN900'),
        ('CSOSN', 'CST'),
        'vICMS',
    ),
}

PIS_VARIANTS = _variants(('PISAliq', 'PISQtde', 'PISNT', 'PISOutr'), ('CST',), 'vPIS')

COFINS_VARIANTS = _variants(
    ('COFINSAliq', 'COFINSQtde', 'COFINSNT', 'COFINSOutr'), ('CST',), 'vCOFINS'
)

# tributo -> (variantes conhecidas, tag do valor usada pela variante genérica)
TAX_GROUPS = {
    'ICMS': (ICMS_VARIANTS, 'vICMS'),
    'PIS': (PIS_VARIANTS, 'vPIS'),
    'COFINS': (COFINS_VARIANTS, 'vCOFINS'),
}


def _text(parent: ET.Element, tag: str) -> str:
    """Texto do primeiro descendente com a tag, ou ''."""
    elem = parent.find(f".//{tag}")
    if elem is None:
        return ""
    return "".join(elem.itertext()).strip()


def resolve_variant(tax: str, child: ET.Element) -> TaxVariant:
    """Retorna a variante conhecida do filho, ou a genérica (leitura posicional)."""
    variants, value_tag = TAX_GROUPS[tax]
    variant = variants.get(child.tag)
    if variant is None:
        logger.debug(f"Grupo {tax} desconhecido: <{child.tag}>, usando leitura genérica")
        return TaxVariant(child.tag, ('CST',), value_tag)
    return variant


def read_tax_group(imposto: Optional[ET.Element], tax: str) -> TaxReading:
    """
    Lê código de situação e valor de um tributo do item.

    Args:
        imposto: Elemento <imposto> do item (pode ser None)
        tax: 'ICMS', 'PIS' ou 'COFINS'

    Returns:
        TaxReading com código e valor formatado. Sem grupo pai, ambos
        ficam vazios; grupo sem filho ou sem valor resulta em "0,00".
    """
    if imposto is None:
        return TaxReading()

    group = imposto.find(f".//{tax}")
    if group is None:
        return TaxReading()

    children = list(group)
    if not children:
        return TaxReading(valor=format_number("0"))

    child = children[0]
    variant = resolve_variant(tax, child)

    codigo = ""
    for code_tag in variant.code_tags:
        codigo = _text(child, code_tag)
        if codigo:
            break

    valor = _text(child, variant.value_tag) or "0"
    return TaxReading(codigo=codigo, valor=format_number(valor), variante=variant.tag)
