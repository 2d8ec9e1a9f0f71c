#!/usr/bin/env python3
"""
Gene Annotator功能演示

展示如何构建替换模型、基因区间索引，并用annotate_tree注释一棵带基因型的树
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from geneannotator import (
    annotate_tree,
    Node,
    VariantSite,
    GeneInterval,
    build_gene_index,
    get_substitution_model,
)
from geneannotator.genes import KeywordFilter


SITES = [
    VariantSite("chr7", 55191822, "T", ("G",)),
    VariantSite("chr17", 7674220, "C", ("T",)),
    VariantSite("chr12", 25245350, "C", ("A", "T")),
    VariantSite("chr1", 1000, "A", ("G",)),
]

GENE_MAP = [
    GeneInterval("chr7", 55019017, 55211628, "EGFR", ("chr7", "55019017", "55211628", "exonic", "EGFR")),
    GeneInterval("chr17", 7661779, 7687538, "TP53", ("chr17", "7661779", "7687538", "exonic", "TP53")),
    GeneInterval("chr12", 25205246, 25250929, "KRAS;KRAS-AS1", ("chr12", "25205246", "25250929", "intronic", "KRAS;KRAS-AS1")),
]


def make_tree():
    """构建一棵带基因型的小树"""
    return Node(0, genotypes=[0, 0, 0, 0], children=[
        Node(1, genotypes=[1, 0, 0, 0], branch_length=0.3, children=[
            Node(2, name="cell_1", genotypes=[1, 1, 0, 1], branch_length=0.2),
            Node(3, name="cell_2", genotypes=[2, 0, 3, 0], branch_length=0.4),
        ]),
        Node(4, name="cell_3", genotypes=[0, 1, 0, 0], branch_length=0.6),
    ])


def demo_substitution_model():
    """演示替换模型"""
    print("=== 替换模型演示 ===\n")

    model = get_substitution_model(1, deletion_rate=0.1)
    print(model.summary())
    print()

    for parent, child in [(0, 1), (0, 2), (1, 4), (4, 6)]:
        events = model.get_evolutionary_events(parent, child)
        print(f"{model.genotype_label(parent)} -> {model.genotype_label(child)}: "
              f"{'|'.join(e.label for e in events)}")

    p = model.get_transition_probabilities(0.5)
    print(f"\nP(0.5) 行和: {p.sum(axis=1).round(6)}")


def demo_gene_index():
    """演示基因区间索引与过滤"""
    print("\n=== 基因区间索引演示 ===\n")

    index = build_gene_index(GENE_MAP)
    for site in SITES:
        print(f"{site}: {index.lookup(site.chromosome, site.position)}")

    keyword_filter = KeywordFilter.parse(3, "f,exonic")
    filtered = build_gene_index(GENE_MAP, keyword_filter=keyword_filter)
    print(f"\n只保留exonic记录: {len(filtered)}/{len(GENE_MAP)}")


def demo_annotation():
    """演示树注释"""
    print("\n=== 树注释演示 ===\n")

    index = build_gene_index(GENE_MAP)
    result = annotate_tree(make_tree(), SITES, index, model=0, verbose=True)

    print("\n节点注释:")
    for node_id, metadata in result.to_metadata().items():
        print(f"  节点 {node_id}: {metadata}")

    print("\nFSA事件表:")
    print(result.to_df("fsa").to_string(index=False))


def main():
    """主演示函数"""
    print("Gene Annotator 功能演示")
    print("=" * 50)

    try:
        demo_substitution_model()
        demo_gene_index()
        demo_annotation()

        print("\n" + "=" * 50)
        print("演示完成！")

    except Exception as e:
        print(f"演示过程中出现错误: {e}")
        import traceback
        traceback.print_exc()


if __name__ == "__main__":
    main()
