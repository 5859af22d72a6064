"""Tests for filter clause composition."""

from __future__ import annotations

import pytest

from transmux.executor.filters import (
    FilterSpec,
    compose_filters,
    elaborate_filter,
    is_disabled,
    normalize_filter,
)


class TestElaborateFilter:
    """Tests for elaborate_filter."""

    def test_substitutes_placeholders(self) -> None:
        """Placeholders should be replaced by parameters by position."""
        spec = FilterSpec(
            params=(1280, 720, "10", "20"),
            disable_values=((None,), (None,), (None,), (None,)),
            template=",crop={0}:{1}:{2}:{3}",
        )
        assert elaborate_filter(spec) == ",crop=1280:720:10:20"

    def test_disabled_parameter_drops_clause(self) -> None:
        """Any disabled parameter should produce an empty clause."""
        spec = FilterSpec(
            params=(1280, None),
            disable_values=((None,), (None,)),
            template=",scale={0}:{1}",
        )
        assert elaborate_filter(spec) == ""

    def test_repeated_placeholder_is_replaced_everywhere(self) -> None:
        """Every occurrence of a placeholder should be substituted."""
        spec = FilterSpec(params=(5,), template=",pad={0}:{0}")
        assert elaborate_filter(spec) == ",pad=5:5"

    def test_integral_float_has_no_decimal(self) -> None:
        """2.0 renders as "2"."""
        spec = FilterSpec(params=(2.0,), template=",volume={0}dB")
        assert elaborate_filter(spec) == ",volume=2dB"

    def test_verbatim_returns_template(self) -> None:
        """Verbatim clauses skip checks and substitution."""
        spec = FilterSpec(
            params=(None,),
            disable_values=((None,),),
            template=",hue=s=0:{0}",
            verbatim=True,
        )
        assert elaborate_filter(spec) == ",hue=s=0:{0}"

    def test_clause_without_params(self) -> None:
        """A clause without parameters renders its template."""
        assert elaborate_filter(FilterSpec(template=",hflip")) == ",hflip"


class TestIsDisabled:
    """Tests for sentinel matching."""

    def test_zero_does_not_match_false(self) -> None:
        """Matching is type-strict for booleans."""
        assert not is_disabled(0, (False,))
        assert not is_disabled(False, (0,))

    def test_false_matches_false(self) -> None:
        """False matches a False sentinel."""
        assert is_disabled(False, (False,))

    def test_none_only_matches_none(self) -> None:
        """None matches only a None sentinel."""
        assert is_disabled(None, (0, None))
        assert not is_disabled(None, (0, ""))

    def test_numbers_compare_by_value(self) -> None:
        """0.0 matches a 0 sentinel."""
        assert is_disabled(0.0, (0,))


class TestNormalizeFilter:
    """Tests for normalize_filter."""

    @pytest.mark.parametrize(
        "fragment,expected",
        [
            (",crop=1:1", "crop=1:1"),
            (",,yadif=0:0:0,,", "yadif=0:0:0"),
            ("fps=30", "fps=30"),
            (",,,", ""),
            ("", ""),
            (",a,,b,", "a,,b"),
        ],
    )
    def test_strips_separators_at_both_ends(
        self, fragment: str, expected: str
    ) -> None:
        """Leading and trailing separators should be removed."""
        assert normalize_filter(fragment) == expected

    def test_is_idempotent(self) -> None:
        """Normalizing twice gives the same result."""
        once = normalize_filter(",,a,b,,")
        assert normalize_filter(once) == once

    def test_custom_separator(self) -> None:
        """Should support separators other than a comma."""
        assert normalize_filter(";;a;b;", ";") == "a;b"


class TestComposeFilters:
    """Tests for compose_filters."""

    def test_concatenates_rendered_clauses(self) -> None:
        """Enabled clauses are joined in order, disabled ones vanish."""
        specs = [
            FilterSpec(params=(True,), disable_values=((False,),), template=",yadif"),
            FilterSpec(params=(None,), disable_values=((None,),), template=",x={0}"),
            FilterSpec(params=("vintage",), template=",curves={0}"),
        ]
        assert compose_filters(specs) == ",yadif,curves=vintage"

    def test_prefix_comes_first(self) -> None:
        """The prefix should precede every clause."""
        specs = [FilterSpec(template=",hflip")]
        assert compose_filters(specs, ",fps=24") == ",fps=24,hflip"
