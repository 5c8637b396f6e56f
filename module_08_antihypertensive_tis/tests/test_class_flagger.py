# tests/test_class_flagger.py
"""Tests for antihypertensive class indicator flags."""

import pytest
import pandas as pd
import numpy as np
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))


class TestNormalizeLabel:
    """Test class label normalization."""

    def test_lowercases_and_trims(self):
        from processing.class_flagger import normalize_class_label
        assert normalize_class_label('  CCB ') == 'ccb'

    def test_missing_returns_none(self):
        from processing.class_flagger import normalize_class_label
        assert normalize_class_label(None) is None
        assert normalize_class_label(np.nan) is None
        assert normalize_class_label('   ') is None


class TestFlagClasses:
    """Test indicator column generation."""

    @pytest.fixture
    def records(self):
        return pd.DataFrame({
            'patient_id': ['P1', 'P1', 'P2', 'P3', 'P4'],
            'period': ['Previous', 'New', 'New', 'New', 'New'],
            'med_class': ['CCB', 'arb', 'ACEI_Thiazide', 'BetaBlocker', None],
        })

    def test_one_column_per_recognized_class(self, records):
        from processing.class_flagger import flag_classes
        result = flag_classes(records)
        for col in ['class_ccb', 'class_arb', 'class_thiazide', 'class_acei_thiazide']:
            assert col in result.columns

    def test_exact_class_flagged(self, records):
        from processing.class_flagger import flag_classes
        result = flag_classes(records)
        assert result['class_ccb'].tolist() == [1, 0, 0, 0, 0]
        assert result['class_acei_thiazide'].tolist() == [0, 0, 1, 0, 0]

    def test_match_is_case_insensitive(self, records):
        from processing.class_flagger import flag_classes
        result = flag_classes(records)
        assert result.loc[1, 'class_arb'] == 1

    def test_unrecognized_class_all_zero(self, records):
        """Unrecognized and missing labels get no indicator."""
        from processing.class_flagger import flag_classes
        result = flag_classes(records)
        indicators = ['class_ccb', 'class_arb', 'class_thiazide', 'class_acei_thiazide']
        assert result.loc[3, indicators].sum() == 0
        assert result.loc[4, indicators].sum() == 0

    def test_at_most_one_indicator_per_record(self, records):
        from processing.class_flagger import flag_classes
        result = flag_classes(records)
        indicators = ['class_ccb', 'class_arb', 'class_thiazide', 'class_acei_thiazide']
        assert (result[indicators].sum(axis=1) <= 1).all()

    def test_input_not_modified(self, records):
        from processing.class_flagger import flag_classes
        flag_classes(records)
        assert 'class_ccb' not in records.columns

    def test_thiazide_not_confused_with_combination(self):
        """'Thiazide' and 'ACEI_Thiazide' are separate classes."""
        from processing.class_flagger import flag_classes
        df = pd.DataFrame({'med_class': ['Thiazide', 'ACEI_Thiazide']})
        result = flag_classes(df)
        assert result['class_thiazide'].tolist() == [1, 0]
        assert result['class_acei_thiazide'].tolist() == [0, 1]

    def test_custom_class_list(self):
        from processing.class_flagger import flag_classes
        from config.tis_config import TISConfig
        config = TISConfig(recognized_classes=['BetaBlocker'])
        df = pd.DataFrame({'med_class': ['betablocker', 'CCB']})
        result = flag_classes(df, config)
        assert result['class_betablocker'].tolist() == [1, 0]
        assert 'class_ccb' not in result.columns


class TestUnrecognizedLabels:
    """Test reporting of labels outside the configuration."""

    def test_lists_distinct_unknown_labels(self):
        from processing.class_flagger import unrecognized_labels
        labels = pd.Series(['ccb', 'betablocker', 'betablocker', None, 'loop'])
        assert unrecognized_labels(labels) == ['betablocker', 'loop']
