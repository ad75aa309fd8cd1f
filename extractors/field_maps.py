"""
Tabelas de campos por tipo de documento.

Cada campo aponta para uma lista ORDENADA de caminhos (ElementPath) que
representam as variações de leiaute conhecidas. O primeiro caminho com
texto não vazio vence; se nenhum casar, usa o valor padrão.

NF-e e NFC-e seguem o leiaute nacional (portalfiscal.inf.br). A NFS-e não
tem padrão nacional único, então cada campo lista as grafias dos padrões
já vistos: ABRASF (CompNfse/ConsultarNfseResposta), IPM/xmlNfpse
(camelCase) e emissores que reaproveitam tags da NF-e.
"""

from typing import Dict, Tuple

# =============================================================================
# NF-e / NFC-e
# =============================================================================

NFE_HEADER_FIELDS: Dict[str, Tuple[str, ...]] = {
    'numero': ('.//nNF',),
    'cnpj_emitente': ('.//emit/CNPJ', './/emit/CPF'),
    'nome_emitente': ('.//emit/xNome',),
    # dEmi: leiaute 2.00 (sem hora)
    'data_emissao': ('.//ide/dhEmi', './/dhEmi', './/ide/dEmi'),
    'cnpj_destinatario': ('.//dest/CNPJ', './/dest/CPF'),
    'nome_destinatario': ('.//dest/xNome',),
}

# Item de produto: <det><prod>...</prod><imposto>...</imposto></det>
NFE_ITEM_SELECTOR = './/det'

NFE_PRODUCT_FIELDS: Dict[str, Tuple[str, ...]] = {
    'produto': ('.//xProd',),
    'ncm': ('.//NCM',),
    'cfop': ('.//CFOP',),
    'quantidade': ('.//qCom',),
    'valor_unitario': ('.//vUnCom',),
}

NFE_PRODUCT_DEFAULTS: Dict[str, str] = {
    'quantidade': '0',
    'valor_unitario': '0',
}

# =============================================================================
# NFS-e
# =============================================================================

NFSE_HEADER_FIELDS: Dict[str, Tuple[str, ...]] = {
    'numero': ('.//numeroAEDF', './/Numero', './/nNF'),
    'cnpj_emitente': (
        './/cnpjPrestador',
        './/PrestadorServico/IdentificacaoPrestador/Cnpj',
        './/Prestador/Cnpj',
        './/emit/CNPJ',
    ),
    'nome_emitente': (
        './/razaoSocialPrestador',
        './/PrestadorServico/RazaoSocial',
        './/Prestador/RazaoSocial',
        './/emit/xNome',
    ),
    'data_emissao': ('.//dataEmissao', './/DataEmissao', './/dhEmi'),
    'cnpj_destinatario': (
        './/identificacaoTomador',
        './/TomadorServico/IdentificacaoTomador/Cnpj',
        './/TomadorServico/IdentificacaoTomador/CpfCnpj/Cnpj',
        './/Tomador/Cnpj',
        './/dest/CNPJ',
    ),
    'nome_destinatario': (
        './/razaoSocialTomador',
        './/TomadorServico/RazaoSocial',
        './/Tomador/RazaoSocial',
        './/dest/xNome',
    ),
    'valor_servico': ('.//valorTotalServicos', './/ValorServicos'),
    'valor_iss': ('.//valorISSQN', './/ValorIss'),
    'cfop': ('.//cfps', './/Cfop'),
}

NFSE_HEADER_DEFAULTS: Dict[str, str] = {
    'valor_servico': '0',
    'valor_iss': '0',
}

# Itens de serviço discriminados (a união é lida em ordem de documento)
NFSE_ITEM_SELECTORS: Tuple[str, ...] = (
    './/itensServico/itemServico',
    './/ItensServico/ItemServico',
    './/Servico/ItemServico',
)

NFSE_ITEM_FIELDS: Dict[str, Tuple[str, ...]] = {
    'produto': ('.//descricaoServico', './/Descricao'),
    'ncm': ('.//codigoCNAE', './/CodigoServico'),
    'quantidade': ('.//quantidade', './/Quantidade'),
    'valor_unitario': ('.//valorUnitario', './/ValorUnitario'),
}

NFSE_ITEM_DEFAULTS: Dict[str, str] = {
    'quantidade': '1',
}

# Descrição usada quando a NFS-e não discrimina itens
NFSE_SINGLE_ITEM_DESCRIPTION = 'Serviço'
