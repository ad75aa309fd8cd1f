from abc import ABC, abstractmethod
from typing import Iterable, List, Union
from pathlib import Path

from core.models import XmlDocument


class DocumentSourceStrategy(ABC):
    """
    Contrato (Interface) para fontes de documentos XML.

    Permite trocar a origem dos arquivos (disco, ZIP, upload em memória)
    sem quebrar o restante do pipeline.
    """

    @abstractmethod
    def collect(self, paths: Iterable[Union[str, Path]]) -> List[XmlDocument]:
        """
        Reúne os XMLs disponíveis nas origens informadas.

        Args:
            paths: Arquivos ou pastas de entrada (.xml, .zip).

        Returns:
            List[XmlDocument]: Lista plana e ordenada de XMLs (nome + bytes).
        """
        pass
