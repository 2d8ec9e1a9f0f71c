#!/usr/bin/env python3
"""
命令行接口测试
"""

import pandas as pd
import pytest

from geneannotator.cli import build_parser, find_input_file, main
from geneannotator.exceptions import ConfigurationError


TREE = (
    "((cell_a:0.5[&genotypes={1,0,1}],cell_b:0.5[&genotypes={1,3,0}])[&genotypes={1,0,0}]:1.0,"
    "cell_c:1.5[&genotypes={0,3,0}])[&genotypes={0,0,0}];\n"
)
SITES = "chr1 25 A C\nchr1 60 G T\nchr2 10 C A\n"
GENE_MAP = "#chr start end gene\nchr1 10 30 GeneA\nchr1 50 80 GeneB\n"
ANNOVAR = (
    "Chr\tStart\tEnd\tRef\tAlt\tFunc.refGene\tGene.refGene\n"
    "chr1\t10\t30\tA\tC\texonic\tGeneA\n"
    "chr1\t50\t80\tG\tT\tintronic\tGeneB\n"
    "chr2\t1\t100\tC\tA\tintronic\tGeneC\n"
)
# only chr1:60 carries a copy number change
TERNARY = "0 1 1\n0 4 0\n0 0 1\n"


@pytest.fixture
def results_dir(tmp_path):
    d = tmp_path / "results"
    d.mkdir()
    (d / "run.intermediate_tree").write_text(TREE)
    (d / "run.loci_info").write_text(SITES)
    (d / "run.ternary").write_text(TERNARY)
    (tmp_path / "genes.txt").write_text(GENE_MAP)
    (tmp_path / "annovar.txt").write_text(ANNOVAR)
    return d


def read_table(prefix, kind):
    return pd.read_csv(f"{prefix}.{kind}.tsv", sep="\t")


class TestCli:
    """测试命令行"""

    def test_plain_map(self, results_dir, tmp_path, capsys):
        """测试普通基因映射"""
        out = tmp_path / "out" / "annot"
        code = main([
            "--tree", str(results_dir / "run.intermediate_tree"),
            "--sites", str(results_dir / "run.loci_info"),
            "--map", str(tmp_path / "genes.txt"),
            "--out", str(out),
        ])
        assert code == 0
        assert "Successful!" in capsys.readouterr().out

        full = read_table(out, "full")
        assert list(full.columns) == ["node", "chr", "pos", "ref_nuc", "alt_nuc", "event_type", "gene", "classification"]
        # the internal node gains chr1:25; cell_b and cell_c both change chr1:60; chr2 has no gene
        assert len(full) == 3
        assert sorted(full["gene"]) == ["GeneA", "GeneB", "GeneB"]
        assert len(read_table(out, "isa")) == 1
        assert len(read_table(out, "fsa")) == 2

    def test_results_dir_discovery(self, results_dir, tmp_path):
        """测试从结果目录查找输入"""
        out = tmp_path / "discovered"
        code = main([
            "--results-dir", str(results_dir),
            "--map", str(tmp_path / "genes.txt"),
            "--subst", "1",
            "--out", str(out),
        ])
        assert code == 0
        assert len(read_table(out, "full")) == 3

    def test_annovar_keyword_filter(self, results_dir, tmp_path):
        """测试ANNOVAR关键词过滤"""
        out = tmp_path / "annovar"
        code = main([
            "--results-dir", str(results_dir),
            "--map", str(tmp_path / "annovar.txt"),
            "--annovar", "tab",
            "--annovar-filter-col", "5",
            "--annovar-filter-keywords", "f,exonic",
            "--out", str(out),
        ])
        assert code == 0
        full = read_table(out, "full")
        # GeneB is kept through its copy number change; GeneC is filtered out
        assert sorted(set(full["gene"])) == ["GeneA", "GeneB"]

    def test_allowlist(self, results_dir, tmp_path):
        """测试基因白名单"""
        allowlist = tmp_path / "keep.csv"
        allowlist.write_text("id,gene\n1,GeneB\n")
        out = tmp_path / "allow"
        code = main([
            "--results-dir", str(results_dir),
            "--map", str(tmp_path / "genes.txt"),
            "--filter-genes", str(allowlist),
            "--filter-sep", "comma",
            "--filter-col", "1",
            "--out", str(out),
        ])
        assert code == 0
        assert set(read_table(out, "full")["gene"]) == {"GeneB"}

    def test_filter_options_require_annovar(self, results_dir, tmp_path, capsys):
        """测试过滤选项需要ANNOVAR"""
        code = main([
            "--results-dir", str(results_dir),
            "--map", str(tmp_path / "genes.txt"),
            "--annovar-filter-col", "5",
            "--annovar-filter-keywords", "f,exonic",
        ])
        assert code == 2
        assert "ConfigurationError" in capsys.readouterr().err

    def test_filter_options_together(self, results_dir, tmp_path):
        """测试过滤选项必须同时给出"""
        code = main([
            "--results-dir", str(results_dir),
            "--map", str(tmp_path / "annovar.txt"),
            "--annovar", "tab",
            "--annovar-filter-col", "5",
        ])
        assert code == 2

    def test_missing_tree(self, tmp_path):
        """测试缺少树文件"""
        (tmp_path / "genes.txt").write_text(GENE_MAP)
        assert main(["--map", str(tmp_path / "genes.txt")]) == 2

    def test_invalid_deletion_rate(self, results_dir, tmp_path):
        """测试无效缺失速率"""
        code = main([
            "--results-dir", str(results_dir),
            "--map", str(tmp_path / "genes.txt"),
            "--subst", "1",
            "--deletion-rate", "-1",
        ])
        assert code == 2

    def test_unknown_model(self):
        """测试未知模型"""
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--map", "x", "--subst", "9"])

    def test_find_input_file(self, results_dir, tmp_path):
        """测试按模式查找文件"""
        assert find_input_file(results_dir, r".+\.ternary$").endswith("run.ternary")
        with pytest.raises(ConfigurationError):
            find_input_file(results_dir, r".+\.vcf$")
        with pytest.raises(ConfigurationError):
            find_input_file(tmp_path / "missing", r".+\.ternary$")
