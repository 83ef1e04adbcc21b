"""Tests for invocation generation and expansion."""

from __future__ import annotations

import itertools

import pytest

from batchlab.errors import DuplicateNameError
from batchlab.params import GridSource, Invocation, expand, grid, named


class TestGrid:
    """Tests for GridSource."""

    def test_grid_single_param(self):
        """Single parameter grid."""
        source = grid(x=[1, 2, 3])
        invocations = list(source)
        assert len(invocations) == 3
        assert [inv.params["x"] for inv in invocations] == [1, 2, 3]
        assert [inv.name for inv in invocations] == ["x1", "x2", "x3"]

    def test_grid_example_names(self):
        """lr x bs sweep yields declared-order names."""
        source = grid(lr=[0.01, 0.1], bs=[32])
        assert [inv.name for inv in source] == ["lr0.01_bs32", "lr0.1_bs32"]

    def test_last_declared_key_varies_fastest(self):
        """Enumeration is mixed radix with the last key fastest."""
        source = GridSource({"a": [1, 2], "b": ["x", "y", "z"]})
        assert [(inv.params["a"], inv.params["b"]) for inv in source] == [
            (1, "x"), (1, "y"), (1, "z"),
            (2, "x"), (2, "y"), (2, "z"),
        ]

    def test_declared_order_not_sorted(self):
        """Key order comes from declaration, not alphabetical order."""
        source = GridSource({"z": [1], "a": [2]})
        (inv,) = list(source)
        assert inv.name == "z1_a2"
        assert list(inv.params) == ["z", "a"]

    def test_cartesian_completeness(self):
        """Every combination appears exactly once."""
        spec = {"a": [1, 2, 3], "b": [True, False], "c": ["p", "q"]}
        invocations = list(GridSource(spec))
        assert len(invocations) == 3 * 2 * 2
        combos = {tuple(inv.params.values()) for inv in invocations}
        assert combos == set(itertools.product(*spec.values()))

    def test_grid_len(self):
        """len() should return product of value counts."""
        source = grid(a=[1, 2], b=[3, 4, 5])
        assert len(source) == 6

    def test_grid_empty(self):
        """Empty grid yields nothing."""
        source = grid()
        assert list(source) == []
        assert len(source) == 0

    def test_empty_values_rejected(self):
        with pytest.raises(ValueError, match="no values"):
            GridSource({"a": []})

    def test_getitem_matches_iteration(self):
        """Index access decodes the same order as __iter__."""
        source = grid(a=[1, 2, 3], b=[0.5, 1.5], c=["u", "v"])
        assert [source[i] for i in range(len(source))] == list(source)
        assert source[-1] == list(source)[-1]

    def test_getitem_out_of_range(self):
        source = grid(a=[1, 2])
        with pytest.raises(IndexError):
            source[2]

    def test_deterministic(self):
        """Repeated iteration gives the identical sequence."""
        source = grid(lr=[0.1, 0.01], seed=[1, 2, 3])
        assert list(source) == list(source)

    def test_value_formatting_in_names(self):
        source = grid(flag=[True, False], eps=[1e-05])
        assert [inv.name for inv in source] == ["flagtrue_eps1e-05", "flagfalse_eps1e-05"]

    def test_origin_is_sweep(self):
        assert all(inv.origin == "sweep" for inv in grid(a=[1, 2]))


class TestNamed:
    """Tests for NamedSource."""

    def test_preserves_order_and_names(self):
        source = named([("zeta", {"lr": 0.1}), ("alpha", {"lr": 0.2})])
        invocations = list(source)
        assert [inv.name for inv in invocations] == ["zeta", "alpha"]
        assert invocations[0].params == {"lr": 0.1}
        assert all(inv.origin == "named" for inv in invocations)

    def test_len(self):
        assert len(named([("a", {}), ("b", {})])) == 2

    def test_params_copied(self):
        params = {"lr": 0.1}
        source = named([("a", params)])
        params["lr"] = 99
        assert list(source)[0].params == {"lr": 0.1}


class TestExpand:
    """Tests for expand()."""

    def test_named_before_sweep(self):
        invocations = expand([named([("baseline", {"lr": 0.5})]), grid(lr=[0.01, 0.1])])
        assert [inv.name for inv in invocations] == ["baseline", "lr0.01", "lr0.1"]

    def test_none_sources_skipped(self):
        assert expand([None, grid(a=[1]), None]) == [
            Invocation(name="a1", params={"a": 1}, origin="sweep")
        ]

    def test_nothing_to_expand(self):
        assert expand([None, None]) == []

    def test_named_collides_with_sweep(self):
        with pytest.raises(DuplicateNameError) as exc_info:
            expand([named([("lr0.1", {"lr": 0.1})]), grid(lr=[0.01, 0.1])])
        assert exc_info.value.name == "lr0.1"
        assert "named invocation" in str(exc_info.value)
        assert "sweep invocation" in str(exc_info.value)

    def test_sweep_values_collide(self):
        """1 and "1" render identically and therefore collide."""
        with pytest.raises(DuplicateNameError):
            expand([grid(x=[1, "1"])])

    def test_duplicate_named(self):
        with pytest.raises(DuplicateNameError):
            expand([named([("a", {}), ("a", {"x": 1})])])
