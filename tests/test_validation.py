# SPDX-License-Identifier: Apache-2.0
"""Tests for catalog validators."""

from __future__ import annotations

import pytest

from i18n_builder.core.models import PluralForms
from i18n_builder.validation import (
    CoverageValidator,
    CoverageWarning,
    DuplicateKey,
    DuplicateKeysValidator,
    InsufficientCoverage,
    MissingKey,
    MissingKeysValidator,
    Validator,
    VariableMismatch,
    VariableValidator,
    calculate_coverage,
    default_validators,
    run_validators,
)


class TestMissingKeys:
    """MissingKeysValidator behaviour."""

    def test_nested_missing_key(self) -> None:
        """A missing nested leaf is reported once with its full path."""
        source = {"common": {"a": {"b": {"c": "Deep"}}, "x": "X"}}
        target = {"common": {"a": {"b": {}}, "x": "X"}}

        result = MissingKeysValidator().validate(source, target)

        assert result.errors == [MissingKey("common", "a.b.c")]
        assert str(result.errors[0]) == "Missing key: common.a.b.c"

    def test_missing_subtree_reports_each_leaf(self) -> None:
        """Every leaf below a missing subtree is reported."""
        source = {"common": {"menu": {"open": "Open", "close": "Close"}}}

        result = MissingKeysValidator().validate(source, {"common": {}})

        assert {error.key for error in result.errors} == {"menu.open", "menu.close"}

    def test_absent_namespace(self) -> None:
        """A namespace missing from the target counts as empty."""
        result = MissingKeysValidator().validate({"common": {"a": "A"}}, {})
        assert result.errors == [MissingKey("common", "a")]

    def test_extra_target_keys_ignored(self) -> None:
        """Keys only in the target are not errors."""
        result = MissingKeysValidator().validate(
            {"common": {"a": "A"}}, {"common": {"a": "A", "b": "B"}}
        )
        assert result.is_valid

    def test_subtree_in_place_of_leaf(self) -> None:
        """A mapping where a leaf is expected is missing."""
        result = MissingKeysValidator().validate(
            {"common": {"a": "A"}}, {"common": {"a": {"nested": "x"}}}
        )
        assert result.errors == [MissingKey("common", "a")]

    def test_dotted_key_present(self) -> None:
        """A flat key containing dots resolves to the same flat target key."""
        tree = {"common": {"errors.notFound": "Not found"}}
        assert MissingKeysValidator().validate(tree, tree).is_valid

    def test_dotted_key_not_matched_by_nesting(self) -> None:
        """A nested target does not satisfy a flat dotted source key."""
        result = MissingKeysValidator().validate(
            {"common": {"errors.notFound": "Not found"}},
            {"common": {"errors": {"notFound": "Ei löytynyt"}}},
        )
        assert result.errors == [MissingKey("common", "errors.notFound")]


class TestVariables:
    """VariableValidator behaviour."""

    def test_dropped_variable(self) -> None:
        """A translation without the source placeholder is a mismatch."""
        result = VariableValidator().validate(
            {"common": {"greeting": "Hello {{name}}"}},
            {"common": {"greeting": "Bonjour"}},
        )

        assert result.errors == [
            VariableMismatch("common", "greeting", source_vars=("name",), translation_vars=())
        ]
        assert str(result.errors[0]) == (
            "Variable mismatch in key 'common.greeting': "
            "source has ['name'], translation has []"
        )

    def test_order_and_repetition_ignored(self) -> None:
        """Only the set of variables matters."""
        result = VariableValidator().validate(
            {"common": {"k": "{{a}} and {{b}}"}},
            {"common": {"k": "{{b}}, {{a}} ja {{a}}"}},
        )
        assert result.is_valid

    @pytest.mark.parametrize("text", ["Hi %{user}", "Hi {user}", "Hi {{user}}"])
    def test_syntaxes_are_equivalent(self, text: str) -> None:
        """Placeholder syntax does not affect the variable name."""
        result = VariableValidator().validate(
            {"common": {"k": "Hello {{user}}"}}, {"common": {"k": text}}
        )
        assert result.is_valid

    def test_empty_translation_checked(self) -> None:
        """An empty translation that drops a placeholder is a mismatch."""
        result = VariableValidator().validate(
            {"common": {"k": "Hello {{name}}"}}, {"common": {"k": ""}}
        )
        assert result.errors == [
            VariableMismatch("common", "k", source_vars=("name",), translation_vars=())
        ]

    def test_empty_translation_without_variables(self) -> None:
        """Empty text against a placeholder-free source has equal sets."""
        result = VariableValidator().validate(
            {"common": {"k": "Hello"}}, {"common": {"k": ""}}
        )
        assert result.is_valid

    def test_dotted_key_resolved(self) -> None:
        """Flat keys containing dots are compared with their own target."""
        result = VariableValidator().validate(
            {"common": {"errors.notFound": "{{item}} not found"}},
            {"common": {"errors.notFound": "{{item}} ei löytynyt"}},
        )
        assert result.is_valid

    def test_plural_categories(self) -> None:
        """Plural forms are checked per category."""
        source = {
            "common": {
                "items": PluralForms(one="{{count}} item", other="{{count}} items")
            }
        }
        target = {
            "common": {
                "items": PluralForms(one="yksi kohde", other="{{count}} kohdetta")
            }
        }

        result = VariableValidator().validate(source, target)

        assert [error.key for error in result.errors] == ["items.one"]

    def test_kind_mismatch_skipped(self) -> None:
        """Text against plural is not compared."""
        result = VariableValidator().validate(
            {"common": {"k": "{{n}} items"}},
            {"common": {"k": PluralForms(other="kohteita")}},
        )
        assert result.is_valid


class TestCoverage:
    """Coverage calculation and validator."""

    def test_seventy_percent(self) -> None:
        """7 of 10 leaves translated is 70% with one warning."""
        source = {f"k{i}": f"Text {i}" for i in range(10)}
        target = {f"k{i}": f"Teksti {i}" for i in range(7)}

        result = CoverageValidator().validate({"common": source}, {"common": target})

        assert calculate_coverage(source, target) == pytest.approx(70.0)
        assert result.errors == []
        assert len(result.warnings) == 1
        assert result.warnings[0].message == "common: 70.0% coverage (30.0% missing)"

    def test_floor_breach_is_error(self) -> None:
        """Coverage below min_coverage produces an error."""
        source = {"common": {"a": "A", "b": "B"}}
        target = {"common": {"a": "A"}}

        result = CoverageValidator(min_coverage=80.0).validate(source, target)

        assert result.errors == [
            InsufficientCoverage(namespace="common", actual=50.0, threshold=80.0)
        ]

    def test_full_coverage(self) -> None:
        """A fully translated namespace has no warnings."""
        source = {"common": {"a": "A"}}
        result = CoverageValidator(min_coverage=100.0).validate(source, source)
        assert result.warnings == []
        assert result.is_valid

    def test_empty_source(self) -> None:
        """An empty source is fully covered."""
        assert calculate_coverage({}, {}) == 100.0

    def test_dotted_keys(self) -> None:
        """Flat dotted keys count as translated when present."""
        source = {"errors.notFound": "Not found", "errors.denied": "Denied"}
        target = {"errors.notFound": "Ei löytynyt"}
        assert calculate_coverage(source, target) == pytest.approx(50.0)

    def test_empty_and_wrong_kind_not_counted(self) -> None:
        """Empty strings and kind mismatches are untranslated."""
        source = {"a": "A", "b": "B", "c": PluralForms(other="C")}
        target = {"a": "", "b": PluralForms(other="B"), "c": PluralForms(other="C")}
        assert calculate_coverage(source, target) == pytest.approx(100.0 / 3)

    def test_plural_requires_other(self) -> None:
        """A plural with an empty other category is untranslated."""
        source = {"n": PluralForms(one="1", other="many")}
        target = {"n": PluralForms(one="yksi", other="")}
        assert calculate_coverage(source, target) == 0.0


class TestDuplicates:
    """DuplicateKeysValidator behaviour."""

    def test_reports_each_duplicate_once(self) -> None:
        """Repeated keys are reported once with their count."""
        validator = DuplicateKeysValidator({"common": ["a", "b", "a", "c", "a", "b"]})

        result = validator.validate({}, {})

        assert result.errors == [DuplicateKey("common", "a", 3), DuplicateKey("common", "b", 2)]

    def test_without_streams(self) -> None:
        """No key streams means nothing to report."""
        assert DuplicateKeysValidator().validate({"common": {"a": "A"}}, {}).is_valid


class TestReport:
    """Aggregation through run_validators."""

    def test_default_validators(self) -> None:
        """The standard set covers every check."""
        validators = default_validators()
        assert [v.name for v in validators] == [
            "missing_keys",
            "duplicate_keys",
            "variable_validator",
            "coverage_validator",
        ]
        assert all(isinstance(v, Validator) for v in validators)

    def test_run_validators(self) -> None:
        """Errors and warnings keep validator and namespace attribution."""
        source = {
            "common": {"greeting": "Hello {{name}}", "bye": "Bye"},
            "settings": {"title": "Settings"},
        }
        target = {"common": {"greeting": "Hei"}, "settings": {"title": "Asetukset"}}

        report = run_validators(
            source,
            target,
            min_coverage=90.0,
            key_streams={"settings": ["title", "title"]},
        )

        assert not report.is_valid
        assert report.total_errors == 4
        assert report.total_warnings == 1
        names = [name for name, _ in report.errors()]
        assert names == ["missing_keys", "duplicate_keys", "variable_validator", "coverage_validator"]
        assert report.errors_for("settings") == [DuplicateKey("settings", "title", 2)]
        assert len(report.errors_for("common")) == 3
        assert report.warnings_for("common") == [CoverageWarning("common", 50.0)]
        assert report.result("missing_keys").errors == [MissingKey("common", "bye")]

    def test_valid_report(self) -> None:
        """Identical trees are valid."""
        tree = {"common": {"a": "A {{x}}"}}
        report = run_validators(tree, tree)
        assert report.is_valid
        assert report.total_warnings == 0

    def test_merge(self) -> None:
        """Merging keeps results from both reports."""
        first = run_validators({"a": {"k": "K"}}, {})
        second = run_validators({"b": {"k": "K"}}, {"b": {"k": "K"}})
        first.merge(second)
        assert len(first.results) == 8
        assert first.errors_for("a") == [MissingKey("a", "k")]
