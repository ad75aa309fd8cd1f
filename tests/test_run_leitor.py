"""
Testes da linha de comando (run_leitor.py).
"""

import zipfile

from run_leitor import main

NFE = """<NFe><infNFe>
    <ide><nNF>{numero}</nNF><dhEmi>2024-06-15T10:00:00</dhEmi></ide>
    <emit><CNPJ>12345678000195</CNPJ><xNome>Padaria São José</xNome></emit>
    <det nItem="1"><prod><xProd>Pão</xProd><NCM>19059090</NCM><qCom>1</qCom><vUnCom>2.5</vUnCom></prod></det>
</infNFe></NFe>"""


class TestRunLeitor:

    def test_gera_relatorio_csv(self, tmp_path, capsys):
        pacote = tmp_path / "notas.zip"
        with zipfile.ZipFile(pacote, "w") as zf:
            zf.writestr("1.xml", NFE.format(numero=1))
            zf.writestr("3.xml", NFE.format(numero=3))
        saida = tmp_path / "saida"

        code = main([str(pacote), "--output-dir", str(saida), "--format", "csv", "--workers", "1"])

        assert code == 0
        arquivos = list(saida.glob("relatorio_documentos_padaria_sao_jose_*.csv"))
        assert len(arquivos) == 1
        out = capsys.readouterr().out
        assert "Padaria São José" in out
        assert "Notas puladas" in out

    def test_sem_xml_retorna_erro(self, tmp_path, capsys):
        (tmp_path / "leia-me.txt").write_text("nada", encoding="utf-8")

        code = main([str(tmp_path), "--output-dir", str(tmp_path / "saida")])

        assert code == 1
        assert "Nenhum arquivo XML" in capsys.readouterr().out
