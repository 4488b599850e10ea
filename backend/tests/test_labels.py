"""
Tests for risk score and label synthesis.
"""
from datetime import datetime, timezone
from types import MappingProxyType

import pytest

from incident_risk.services.riskmodel.entities import DatasetStatistics, RawRecord
from incident_risk.services.riskmodel.labels import (
    UNREACHABLE_THRESHOLD,
    RiskLabelSynthesizer,
    binarize_label,
)


def make_stats(counts, min_time=0.0, max_time=100.0, has_numeric_risk=False):
    return DatasetStatistics(
        category_counts=MappingProxyType(dict(counts)),
        min_count=min(counts.values()),
        max_count=max(counts.values()),
        min_time=min_time,
        max_time=max_time,
        time_span=None if min_time is None else max_time - min_time,
        has_numeric_risk=has_numeric_risk,
        row_count=sum(counts.values()),
    )


def make_record(category="theft", epoch_seconds=0.0, risk=None, label=None):
    return RawRecord(
        timestamp=datetime.fromtimestamp(epoch_seconds, tz=timezone.utc),
        epoch_seconds=epoch_seconds,
        latitude=0.0,
        longitude=0.0,
        category=category,
        risk=risk,
        label=label,
    )


class TestBinarizeLabel:
    """Test supplied label squashing."""

    @pytest.mark.parametrize(
        "value,expected",
        [(None, None), (0.0, 0), (0.4, 0), (0.5, 1), (1.0, 1), (7.0, 1), (-1.0, 0)],
    )
    def test_binarize(self, value, expected):
        """Test rounding half away from zero followed by the 0/1 mapping."""
        assert binarize_label(value) == expected


class TestRiskScore:
    """Test per-row risk scoring."""

    def test_single_category_scores_half(self):
        """Test that a one-category corpus gives every row category score 0.5."""
        synthesizer = RiskLabelSynthesizer(make_stats({"theft": 4}))

        assert synthesizer.category_score("theft") == 0.5

    def test_blend_of_category_and_recency(self):
        """Test the 0.6 / 0.4 blend of category frequency and recency."""
        synthesizer = RiskLabelSynthesizer(make_stats({"theft": 4, "arson": 1}))

        assert synthesizer.risk_score(make_record("theft", 100.0)) == pytest.approx(1.0)
        assert synthesizer.risk_score(make_record("arson", 0.0)) == pytest.approx(0.0)
        assert synthesizer.risk_score(make_record("arson", 50.0)) == pytest.approx(0.2)

    def test_unknown_category_uses_minimum_count(self):
        """Test that a category missing from the statistics scores like the rarest one."""
        synthesizer = RiskLabelSynthesizer(make_stats({"theft": 4, "arson": 1}))

        assert synthesizer.category_score("vandalism") == 0.0
        assert synthesizer.category_score("") == 0.0

    def test_zero_time_span_gives_neutral_recency(self):
        """Test that a corpus with a single timestamp scores recency as 0.5."""
        synthesizer = RiskLabelSynthesizer(make_stats({"theft": 1}, min_time=10.0, max_time=10.0))

        assert synthesizer.recency_score(10.0) == 0.5

    def test_existing_risk_is_clamped(self):
        """Test that supplied risk values are used directly, clamped to [0, 1]."""
        synthesizer = RiskLabelSynthesizer(make_stats({"theft": 2}, has_numeric_risk=True))

        assert synthesizer.risk_score(make_record(risk=1.7)) == 1.0
        assert synthesizer.risk_score(make_record(risk=-0.2)) == 0.0
        assert synthesizer.risk_score(make_record(risk=0.35)) == 0.35


class TestResolveLabels:
    """Test batch label resolution."""

    def test_histogram_threshold(self):
        """Test the 75th-percentile threshold over a 1% histogram."""
        assert RiskLabelSynthesizer.risk_threshold([0.1, 0.2, 0.3, 0.4, 0.5]) == pytest.approx(0.4)

    def test_missing_labels_use_threshold(self):
        """Test that rows without labels are labeled by the risk threshold."""
        labels = RiskLabelSynthesizer.resolve_labels([0.1, 0.2, 0.3, 0.4, 0.5], [None] * 5)

        assert labels == (0, 0, 0, 1, 1)

    def test_supplied_labels_are_kept(self):
        """Test that supplied labels are not overridden by the threshold."""
        labels = RiskLabelSynthesizer.resolve_labels([0.9, 0.1, 0.5], [0, 1, None])

        assert labels[:2] == (0, 1)

    def test_all_negative_labels_promote_max_risk(self):
        """Test that fully labeled data with no positives promotes the highest-risk rows."""
        labels = RiskLabelSynthesizer.resolve_labels([0.2, 0.9, 0.9], [0, 0, 0])

        assert labels == (0, 1, 1)

    def test_all_negative_labels_with_zero_risk_are_kept(self):
        """Test that fully labeled negatives stay negative when every risk is zero."""
        assert RiskLabelSynthesizer.resolve_labels([0.0, 0.0, 0.0], [0, 0, 0]) == (0, 0, 0)

    def test_existing_positive_blocks_promotion(self):
        """Test that a supplied positive label suppresses promotion."""
        assert RiskLabelSynthesizer.resolve_labels([0.2, 0.9, 0.1], [0, 0, 1]) == (0, 0, 1)

    def test_single_bucket_promotes_max_risk(self):
        """Test that identical risks make the threshold unreachable and then promote every row."""
        assert RiskLabelSynthesizer.risk_threshold([0.42, 0.42, 0.42]) == UNREACHABLE_THRESHOLD

        labels = RiskLabelSynthesizer.resolve_labels([0.42, 0.42, 0.42], [None, None, None])

        assert labels == (1, 1, 1)

    def test_all_zero_risk_stays_negative(self):
        """Test that no promotion happens when the maximum risk is zero."""
        assert RiskLabelSynthesizer.resolve_labels([0.0, 0.0], [None, None]) == (0, 0)

    def test_resolution_is_idempotent(self):
        """Test that resolving already-resolved labels changes nothing."""
        risks = [0.05, 0.3, 0.6, 0.61, 0.9, 0.2]
        first = RiskLabelSynthesizer.resolve_labels(risks, [None, 1, None, None, 0, None])
        second = RiskLabelSynthesizer.resolve_labels(risks, list(first))

        assert first == second

    def test_length_mismatch(self):
        """Test that risks and labels must line up."""
        with pytest.raises(ValueError):
            RiskLabelSynthesizer.resolve_labels([0.1], [])
