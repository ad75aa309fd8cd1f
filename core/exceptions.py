class LeitorXmlException(Exception):
    """Exceção base para o projeto Leitor XML."""
    pass

class XmlParseError(LeitorXmlException):
    """Levantada quando o conteúdo não pode ser interpretado como XML."""
    pass

class EmptyBatchError(LeitorXmlException):
    """Levantada quando nenhum arquivo XML foi encontrado para processar."""
    pass

class ExportError(LeitorXmlException):
    """Levantada quando não há dados para exportar ou o destino é inválido."""
    pass
