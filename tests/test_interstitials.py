import pytest

from quizbot.services.interstitials import DEFAULT_BINDINGS, InterstitialBindings, InterstitialKind


@pytest.mark.parametrize("from_id, to_id, kind", list(DEFAULT_BINDINGS))
def test_forward_and_reverse_targets_round_trip(from_id, to_id, kind):
    assert DEFAULT_BINDINGS.kind_for(from_id, to_id) == kind
    assert DEFAULT_BINDINGS.forward_target(kind) == to_id
    assert DEFAULT_BINDINGS.reverse_target(kind) == from_id


def test_default_table():
    assert len(DEFAULT_BINDINGS) == 3
    assert DEFAULT_BINDINGS.kind_for("q1", "q2") == InterstitialKind.A
    assert DEFAULT_BINDINGS.kind_for("q3", "q4") == InterstitialKind.B
    assert DEFAULT_BINDINGS.kind_for("q5", "q6") == InterstitialKind.C
    assert DEFAULT_BINDINGS.kind_for("q2", "q3") is None
    assert DEFAULT_BINDINGS.kind_for("q2", "q1") is None


def test_kind_bound_twice_is_rejected():
    with pytest.raises(ValueError):
        InterstitialBindings([("q1", "q2", InterstitialKind.A), ("q3", "q4", InterstitialKind.A)])


def test_pair_bound_twice_is_rejected():
    with pytest.raises(ValueError):
        InterstitialBindings([("q1", "q2", InterstitialKind.A), ("q1", "q2", InterstitialKind.B)])


def test_kind_accepts_raw_values():
    bindings = InterstitialBindings([("x", "y", "b")])
    assert bindings.kind_for("x", "y") is InterstitialKind.B


def test_unbound_kind_has_no_targets():
    bindings = InterstitialBindings([("x", "y", InterstitialKind.A)])
    assert bindings.forward_target(InterstitialKind.C) is None
    assert bindings.reverse_target(InterstitialKind.C) is None
