import pytest

from normalization_engine import (
    DegenerateFd,
    DerivedRelation,
    FunctionalDependency,
    InvalidRelation,
    NormalForm,
    Relation,
    candidate_keys,
    closure,
    decompose,
    decompose_2nf,
    is_lossless,
    normal_form,
    preserves_dependencies,
    synthesize_3nf,
)

fd = FunctionalDependency.parse


def rel(columns, *fds, name="R"):
    return Relation.from_strings(name, list(columns), fds)


SAMPLES = [
    rel("ABC", "A -> B", "B -> C"),
    rel("ABCD", "A, B -> C", "C -> D"),
    rel("ABCD", "A, B -> C", "A -> D"),
    rel("ABC", "A, B -> C", "C -> A"),
    rel("ABCDE", "A -> B", "B -> C", "C, D -> E"),
    rel("ABCDEF", "A -> B, C", "C -> D", "A, E -> F"),
    rel("AB"),
]


def by_name(derived):
    return {d.name: d for d in derived}


def test_synthesize_3nf_transitive_chain():
    r = rel("ABCD", "A, B -> C", "C -> D")
    derived = synthesize_3nf(r)

    assert [d.name for d in derived] == ["R_1", "R_2"]
    first, second = derived
    assert first.columns == frozenset("ABC")
    assert first.origin_fd == fd("A, B -> C")
    assert first.origin_name == "R"
    assert second.columns == frozenset("CD")
    assert second.origin_fd == fd("C -> D")
    assert frozenset("AB") <= first.columns
    assert all(isinstance(d, DerivedRelation) for d in derived)


def test_synthesize_3nf_adds_key_relation():
    r = rel("ABC", "A -> B")
    derived = synthesize_3nf(r)

    assert [d.columns for d in derived] == [frozenset("AB"), frozenset("AC")]
    key_rel = derived[1]
    assert key_rel.name == "R_2"
    assert key_rel.origin_fd == FunctionalDependency({"A", "C"}, {"A", "C"})
    assert key_rel.origin_fd.is_key
    assert key_rel.fds[0].is_key


def test_synthesize_3nf_without_dependencies_keeps_key():
    derived = synthesize_3nf(rel("AB"))
    assert len(derived) == 1
    assert derived[0].columns == frozenset("AB")
    assert derived[0].origin_fd.is_key


def test_synthesize_3nf_drops_contained_relations():
    derived = synthesize_3nf(rel("AB", "A -> B", "B -> A"))

    assert [d.name for d in derived] == ["R_1"]
    assert derived[0].fds == (fd("A -> B"), fd("B -> A"))
    assert all(f.is_key for f in derived[0].fds)


def test_synthesize_3nf_marks_key_fds():
    derived = by_name(synthesize_3nf(rel("ABCD", "A, B -> C", "C -> D")))
    assert derived["R_1"].fds[0].is_key
    assert derived["R_2"].fds[0].is_key


def test_decompose_2nf_moves_partial_dependency():
    r = rel("ABCD", "A, B -> C", "A -> D")
    derived = decompose_2nf(r)

    assert [d.name for d in derived] == ["R_1", "R_2"]
    retaining, split = derived
    assert retaining.columns == frozenset("ABC")
    assert retaining.fds == (fd("A, B -> C"),)
    assert retaining.fds[0].is_key
    assert retaining.origin_fd == fd("A, B -> C")
    assert retaining.origin_fd.is_key
    assert split.columns == frozenset("AD")
    assert split.origin_fd == fd("A -> D")
    assert split.fds == (fd("A -> D"),)
    assert all(d.origin_name == "R" for d in derived)
    assert all(normal_form(d) >= NormalForm.SECOND for d in derived)


def test_decompose_2nf_keeps_second_normal_form_relation_whole():
    r = rel("ABC", "A -> B", "B -> C")
    derived = decompose_2nf(r)

    assert len(derived) == 1
    only = derived[0]
    assert only.name == "R_1"
    assert only.columns == r.columns
    assert only.fds == (fd("A -> B"), fd("B -> C"))
    assert only.fds[0].is_key and not only.fds[1].is_key
    assert only.origin_fd == FunctionalDependency({"A"}, {"B", "C"})


def test_decompose_2nf_moves_transitive_closure_together():
    r = rel("ABCD", "A, B -> D", "A -> C", "C -> D")
    derived = by_name(decompose_2nf(r))

    assert derived["R_1"].columns == frozenset("AB")
    assert derived["R_2"].columns == frozenset("ACD")
    assert derived["R_2"].origin_fd == FunctionalDependency({"A"}, {"C", "D"})
    assert derived["R_2"].fds == (fd("A -> C"), fd("C -> D"))


def test_decompose_2nf_makes_a_single_pass():
    # D depends on A alone, so the relation built for y = {A, C} keeps a partial dependency.
    r = rel("ABCD", "A -> D")
    derived = by_name(decompose_2nf(r))

    assert derived["R_1"].columns == frozenset("ABC")
    assert derived["R_2"].columns == frozenset("ACD")
    assert derived["R_2"].origin_fd == FunctionalDependency({"A", "C"}, {"D"})
    assert derived["R_2"].fds == (fd("A -> D"),)
    assert normal_form(derived["R_2"]) == NormalForm.FIRST


def test_decompose_does_not_touch_input():
    r = rel("ABCD", "A, B -> C", "A -> D")
    snapshot = Relation(name=r.name, columns=r.columns, fds=r.fds)
    decompose_2nf(r)
    synthesize_3nf(r)
    assert r == snapshot
    assert candidate_keys(r) == [frozenset("AB")]


@pytest.mark.parametrize("relation", SAMPLES)
@pytest.mark.parametrize("target", [NormalForm.SECOND, NormalForm.THIRD])
def test_decomposition_covers_columns_and_is_lossless(relation, target):
    derived = decompose(relation, target)

    assert frozenset().union(*(d.columns for d in derived)) == relation.columns
    assert is_lossless(relation, derived)
    for d in derived:
        assert all(f.attributes <= d.columns for f in d.fds)


@pytest.mark.parametrize("relation", SAMPLES)
def test_synthesis_preserves_dependencies_and_reaches_3nf(relation):
    derived = synthesize_3nf(relation)

    assert preserves_dependencies(relation, derived)
    union_fds = [f for d in derived for f in d.fds]
    for original in relation.fds:
        assert original.rhs <= closure(original.lhs, union_fds)
    for d in derived:
        assert normal_form(d) >= NormalForm.THIRD


def test_lossless_check_detects_lossy_split():
    r = rel("ABC", "A -> B")
    assert not is_lossless(r, [Relation(name="R1", columns=frozenset("AB")), Relation(name="R2", columns=frozenset("BC"))])
    assert is_lossless(r, [Relation(name="R1", columns=frozenset("AB")), Relation(name="R2", columns=frozenset("AC"))])


def test_preservation_check_detects_lost_dependency():
    r = rel("ABC", "A, B -> C", "C -> A")
    split = [Relation(name="R1", columns=frozenset("AC")), Relation(name="R2", columns=frozenset("BC"))]
    assert is_lossless(r, split)
    assert not preserves_dependencies(r, split)


def test_empty_relation_rejected():
    with pytest.raises(InvalidRelation):
        synthesize_3nf(Relation(name="R", columns=frozenset()))


def test_unknown_attribute_rejected():
    with pytest.raises(InvalidRelation):
        decompose_2nf(rel("AB", "A -> C"))


def test_degenerate_dependencies_rejected():
    empty_rhs = Relation(name="R", columns=frozenset("AB"), fds=(FunctionalDependency({"A"}, set()),))
    empty_lhs = Relation(name="R", columns=frozenset("AB"), fds=(FunctionalDependency(set(), {"A"}),))
    for relation in (empty_rhs, empty_lhs):
        with pytest.raises(DegenerateFd):
            synthesize_3nf(relation)
        with pytest.raises(DegenerateFd):
            decompose_2nf(relation)


def test_bcnf_decomposition_not_supported():
    with pytest.raises(ValueError):
        decompose(rel("AB", "A -> B"), NormalForm.BCNF)
