#!/usr/bin/env python3
"""
树注释引擎与ISA/FSA分类测试
"""

import numpy as np
import pytest

from geneannotator.annotation import (
    GeneEvent,
    Node,
    NodeGeneBucket,
    TreeAnnotationEngine,
    classify_gene_events,
    count_gene_events,
    count_nodes,
    index_nodes,
    normalize_gene_name,
)
from geneannotator.exceptions import GenotypeFormatError, InvalidTransitionError
from geneannotator.genes import GeneInterval, GeneIntervalIndex, VariantSite
from geneannotator.substitution import EvolutionaryEventType as E, get_substitution_model


SITES = [
    VariantSite("chr1", 25, "A", ("C",)),
    VariantSite("chr1", 60, "G", ("T",)),
    VariantSite("chr2", 10, "C", ("A", "G")),
]


@pytest.fixture
def gene_index():
    return GeneIntervalIndex([
        GeneInterval("chr1", 10, 30, "GeneA"),
        GeneInterval("chr1", 20, 40, "GeneB"),
        GeneInterval("chr2", 1, 100, "Gene;X"),
    ])


@pytest.fixture
def engine(gene_index):
    return TreeAnnotationEngine(get_substitution_model(0), SITES, gene_index)


def make_tree():
    """
    root(0) [0,0,0]
    ├── 1 [1,1,0]
    │   ├── 2 [1,1,0]
    │   └── 3 [2,1,0]
    └── 4 [0,0,1]
        └── 5 [0,0,1]
    """
    return Node(0, genotypes=[0, 0, 0], children=[
        Node(1, genotypes=[1, 1, 0], children=[
            Node(2, name="cell_a", genotypes=[1, 1, 0]),
            Node(3, name="cell_b", genotypes=[2, 1, 0]),
        ]),
        Node(4, genotypes=[0, 0, 1], children=[
            Node(5, name="cell_c", genotypes=[0, 0, 1]),
        ]),
    ])


class TestNode:
    """测试树节点"""

    def test_parent_links(self):
        """测试父节点链接"""
        root = make_tree()
        assert root.is_root()
        assert all(child.parent is root for child in root.children)
        assert root.find(3).parent.id == 1

    def test_preorder(self):
        """测试先序遍历"""
        root = make_tree()
        assert [n.id for n in root.iter_preorder()] == [0, 1, 2, 3, 4, 5]
        assert [n.name for n in root.leaves()] == ["cell_a", "cell_b", "cell_c"]
        assert count_nodes(root) == 6
        assert root.find(42) is None

    def test_duplicate_ids(self):
        """测试重复节点编号"""
        root = Node(0, children=[Node(1), Node(1)])
        with pytest.raises(ValueError):
            index_nodes(root)

    def test_deep_tree(self):
        """测试深树不会递归溢出"""
        root = Node(0)
        node = root
        for i in range(1, 5000):
            node = node.add_child(Node(i))
        assert count_nodes(root) == 5000


class TestGeneEvent:
    """测试基因事件"""

    def test_events_are_canonical(self):
        """测试事件排序"""
        a = GeneEvent(SITES[0], (E.SINGLE_MUTATION, E.SINGLE_DELETION_LOH), "GeneA")
        b = GeneEvent(SITES[0], (E.SINGLE_DELETION_LOH, E.SINGLE_MUTATION), "GeneA")
        assert a == b
        assert hash(a) == hash(b)
        assert a.event_label == "SDLOH|SM"
        assert not a.is_single_mutation

    def test_empty_events(self):
        """测试空事件"""
        with pytest.raises(ValueError):
            GeneEvent(SITES[0], (), "GeneA")

    def test_normalize_gene_name(self):
        """测试基因名规范化"""
        assert normalize_gene_name("Gene;X;Y") == "Gene/X/Y"
        assert normalize_gene_name("GeneA") == "GeneA"


class TestNodeGeneBucket:
    """测试节点基因事件集合"""

    def test_columns_are_aligned(self):
        """测试输出列对齐"""
        bucket = NodeGeneBucket(7)
        bucket.add(GeneEvent(SITES[0], (E.SINGLE_MUTATION,), "GeneA"))
        bucket.add(GeneEvent(SITES[2], (E.COIN_HETERO_DOUBLE_MUTATION,), "Gene/X"))
        columns = bucket.columns("full")

        assert set(columns) == {"chr", "pos", "ref_nuc", "alt_nuc", "event_type", "gene"}
        assert all(len(values) == 2 for values in columns.values())
        assert columns["alt_nuc"] == ["C", "A,G"]
        assert columns["event_type"] == ["SM", "CHeDM"]

    def test_frozen_after_classification(self):
        """测试分类后不可修改"""
        bucket = NodeGeneBucket(1)
        event = GeneEvent(SITES[0], (E.SINGLE_MUTATION,), "GeneA")
        bucket.add(event)
        classify_gene_events({1: bucket})

        assert bucket.classified
        assert bucket.isa == (event,)
        with pytest.raises(RuntimeError):
            bucket.add(event)

    def test_unknown_kind(self):
        """测试未知集合类型"""
        with pytest.raises(ValueError):
            NodeGeneBucket(1).get("all")


class TestTreeAnnotationEngine:
    """测试树注释引擎"""

    def test_gene_cache(self, engine):
        """测试位点基因缓存"""
        assert engine.site_genes == ["GeneA", None, "Gene;X"]
        assert engine.n_sites == 3

    def test_buckets_for_every_node(self, engine):
        """测试每个节点都有集合"""
        buckets = engine.collect(make_tree())
        assert sorted(buckets) == [0, 1, 2, 3, 4, 5]
        assert buckets[0].is_empty()
        assert buckets[2].is_empty()
        assert buckets[5].is_empty()

    def test_collect(self, engine):
        """测试收集基因事件"""
        buckets = engine.collect(make_tree())

        # site 1 is outside any gene
        assert buckets[1].full == [GeneEvent(SITES[0], (E.SINGLE_MUTATION,), "GeneA")]
        assert buckets[3].full == [GeneEvent(SITES[0], (E.HOMO_SINGLE_MUTATION_ADDITION,), "GeneA")]
        assert buckets[4].full == [GeneEvent(SITES[2], (E.SINGLE_MUTATION,), "Gene/X")]
        assert not buckets[1].classified

    def test_singletons_are_isa(self, engine):
        """测试单次单突变为ISA"""
        buckets = engine.annotate(make_tree())

        assert len(buckets[1].isa) == 1 and buckets[1].fsa == ()
        assert len(buckets[4].isa) == 1 and buckets[4].fsa == ()
        # 1/1 from 0/1 is not a single mutation
        assert buckets[3].isa == () and len(buckets[3].fsa) == 1

    def test_star_tree_singleton(self, engine):
        """测试星状树单次突变"""
        root = Node(0, genotypes=[0, 0, 0], children=[
            Node(1, name="leaf_a", genotypes=[1, 0, 0]),
            Node(2, name="leaf_b", genotypes=[0, 0, 0]),
        ])
        buckets = engine.annotate(root)

        assert buckets[1].isa == (GeneEvent(SITES[0], (E.SINGLE_MUTATION,), "GeneA"),)
        assert buckets[1].fsa == ()
        assert buckets[2].is_empty()

    def test_isa_fsa_partition_full(self, engine):
        """测试ISA与FSA划分完整"""
        buckets = engine.annotate(make_tree())
        for bucket in buckets.values():
            assert sorted(map(str, bucket.isa + bucket.fsa)) == sorted(map(str, bucket.full))

    def test_recurrent_mutation_is_fsa(self, engine):
        """测试重复突变为FSA"""
        root = Node(0, genotypes=[0, 0, 0], children=[
            Node(1, genotypes=[1, 0, 0]),
            Node(2, genotypes=[1, 0, 0]),
        ])
        buckets = engine.annotate(root)

        assert count_gene_events(buckets)[GeneEvent(SITES[0], (E.SINGLE_MUTATION,), "GeneA")] == 2
        for node_id in (1, 2):
            assert buckets[node_id].isa == ()
            assert len(buckets[node_id].fsa) == 1

    def test_compound_event_is_fsa(self, engine):
        """测试复合事件为FSA"""
        root = Node(0, genotypes=[0, 0, 0], children=[Node(1, genotypes=[2, 0, 0])])
        buckets = engine.annotate(root)

        assert buckets[1].fsa[0].events == (E.COIN_HOMO_DOUBLE_MUTATION,)
        assert buckets[1].isa == ()

    def test_back_mutation_is_fsa(self, engine):
        """测试回复突变为FSA"""
        root = Node(0, genotypes=[0, 0, 0], children=[
            Node(1, genotypes=[1, 0, 0], children=[Node(2, genotypes=[0, 0, 0])]),
        ])
        buckets = engine.annotate(root)

        assert len(buckets[1].isa) == 1
        assert buckets[2].fsa[0].events == (E.SINGLE_BACK_MUTATION,)

    def test_classification_summary(self, engine):
        """测试分类结果"""
        buckets = engine.collect(make_tree())
        classification = classify_gene_events(buckets)

        assert classification[GeneEvent(SITES[0], (E.SINGLE_MUTATION,), "GeneA")] is True
        assert classification[GeneEvent(SITES[0], (E.HOMO_SINGLE_MUTATION_ADDITION,), "GeneA")] is False
        assert len(classification) == 3

    def test_numeric_genotypes_are_coerced(self, engine):
        """测试浮点与numpy基因型"""
        root = Node(0, genotypes=np.zeros(3), children=[
            Node(1, genotypes=[1.0, np.int64(0), np.float32(0.0)]),
        ])
        buckets = engine.annotate(root)
        assert buckets[1].isa[0].events == (E.SINGLE_MUTATION,)

    def test_missing_genotypes(self, engine):
        """测试缺少基因型"""
        root = Node(0, genotypes=[0, 0, 0], children=[
            Node(1, genotypes=[1, 0, 0]),
            Node(2, name="no_genotypes"),
        ])
        with pytest.raises(GenotypeFormatError, match="Node 2"):
            engine.collect(root)

    @pytest.mark.parametrize("genotypes", [
        [0, 0],
        [0, 0, 0, 0],
        ["0", 0, 0],
        [0.5, 0, 0],
        [True, 0, 0],
        [None, 0, 0],
        [4, 0, 0],
        [-1, 0, 0],
        "000",
    ])
    def test_invalid_genotypes(self, engine, genotypes):
        """测试无效基因型"""
        root = Node(0, genotypes=[0, 0, 0], children=[Node(1, genotypes=genotypes)])
        with pytest.raises(GenotypeFormatError):
            engine.annotate(root)

    def test_validation_is_eager(self, engine):
        """测试先验证再注释"""
        root = Node(0, genotypes=[0, 0, 0], children=[
            Node(1, genotypes=[1, 0, 0]),
            Node(2, genotypes=[0, 0, 0], children=[Node(3, genotypes=[0, "x", 0])]),
        ])
        with pytest.raises(GenotypeFormatError):
            engine.collect(root)

    def test_invalid_transition_propagates(self, gene_index):
        """测试非法转移向上抛出"""
        engine = TreeAnnotationEngine(get_substitution_model(1), SITES, gene_index)
        root = Node(0, genotypes=[4, 0, 0], children=[Node(1, genotypes=[0, 0, 0])])
        with pytest.raises(InvalidTransitionError):
            engine.annotate(root)

    def test_invalid_transition_outside_genes_ignored(self, gene_index):
        """测试基因外位点不检查转移"""
        engine = TreeAnnotationEngine(get_substitution_model(1), SITES, gene_index)
        root = Node(0, genotypes=[0, 4, 0], children=[Node(1, genotypes=[0, 0, 0])])
        buckets = engine.annotate(root)
        assert buckets[1].is_empty()

    def test_deletion_model(self, gene_index):
        """测试缺失模型事件"""
        engine = TreeAnnotationEngine(get_substitution_model(1, deletion_rate=0.1), SITES, gene_index)
        root = Node(0, genotypes=[0, 0, 0], children=[Node(1, genotypes=[4, 0, 6])])
        buckets = engine.annotate(root)

        labels = sorted(e.event_label for e in buckets[1].fsa)
        assert labels == ["CDD", "SDNLOH"]
