# tests/test_dispensing_loader.py
"""Tests for dispensing record loading and numeric coercion."""

import pytest
import pandas as pd
import numpy as np
from io import StringIO
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))


SAMPLE_CSV = """patient_id,period,med_class,strength1,strength2,strength3,rxamt,rxsup,maxdose1,maxdose2,maxdose3
001,Previous,CCB,10,,,30,30,40,,
001,New,CCB,20,,,30,30,40,,
002,New,ARB,50,12.5,,30,30,100,25,
"""


class TestParseText:
    """Test CSV parsing."""

    def test_parse_sample(self):
        from extractors.dispensing_loader import DispensingLoader
        loader = DispensingLoader('/tmp/fake.csv')
        df = loader.parse_text(StringIO(SAMPLE_CSV))
        assert len(df) == 3
        assert df.loc[0, 'patient_id'] == '001'  # kept as string

    def test_pipe_delimited(self):
        from extractors.dispensing_loader import DispensingLoader
        loader = DispensingLoader('/tmp/fake.txt', sep='|')
        df = loader.parse_text(StringIO(SAMPLE_CSV.replace(',', '|')))
        assert df.loc[2, 'med_class'] == 'ARB'


class TestCoerceNumeric:
    """Test numeric coercion at the boundary."""

    def test_blank_becomes_missing(self):
        from extractors.dispensing_loader import coerce_numeric
        df = pd.read_csv(StringIO(SAMPLE_CSV), dtype=str)
        result = coerce_numeric(df)
        assert result.loc[0, 'strength1'] == 10.0
        assert pd.isna(result.loc[0, 'strength2'])
        assert result['rxsup'].dtype == float

    def test_whitespace_becomes_missing(self):
        from extractors.dispensing_loader import coerce_numeric
        df = pd.read_csv(StringIO(SAMPLE_CSV), dtype=str)
        df.loc[1, 'maxdose2'] = '  '
        result = coerce_numeric(df)
        assert pd.isna(result.loc[1, 'maxdose2'])

    def test_non_numeric_raises_with_row(self):
        from extractors.dispensing_loader import coerce_numeric, InvalidDispensingError
        df = pd.read_csv(StringIO(SAMPLE_CSV), dtype=str)
        df.loc[2, 'rxamt'] = 'thirty'

        with pytest.raises(InvalidDispensingError) as excinfo:
            coerce_numeric(df)

        err = excinfo.value
        assert err.column == 'rxamt'
        assert err.row_index == 2
        assert err.patient_id == '002'
        assert err.value == 'thirty'
        assert 'patient 002' in str(err)

    def test_error_is_value_error(self):
        from extractors.dispensing_loader import InvalidDispensingError
        assert issubclass(InvalidDispensingError, ValueError)


class TestRequiredColumns:
    """Test column presence check."""

    def test_missing_column_raises(self):
        from extractors.dispensing_loader import check_required_columns, InvalidDispensingError
        df = pd.read_csv(StringIO(SAMPLE_CSV)).drop(columns=['maxdose3'])
        with pytest.raises(InvalidDispensingError, match='maxdose3'):
            check_required_columns(df)

    def test_complete_columns_pass(self):
        from extractors.dispensing_loader import check_required_columns
        check_required_columns(pd.read_csv(StringIO(SAMPLE_CSV)))


class TestLoad:
    """Test loading from disk."""

    def test_load_csv(self, tmp_path):
        from extractors.dispensing_loader import DispensingLoader
        path = tmp_path / "dispensing.csv"
        path.write_text(SAMPLE_CSV)

        df = DispensingLoader(path).load()

        assert len(df) == 3
        assert df['patient_id'].nunique() == 2
        assert df.loc[2, 'strength2'] == 12.5

    def test_load_parquet(self, tmp_path):
        from extractors.dispensing_loader import DispensingLoader
        path = tmp_path / "dispensing.parquet"
        pd.read_csv(StringIO(SAMPLE_CSV), dtype={'patient_id': str}).to_parquet(path, index=False)

        df = DispensingLoader(path).load()

        assert len(df) == 3
        assert df.loc[0, 'maxdose1'] == 40.0

    def test_load_rejects_bad_value(self, tmp_path):
        from extractors.dispensing_loader import DispensingLoader, InvalidDispensingError
        path = tmp_path / "dispensing.csv"
        path.write_text(SAMPLE_CSV.replace('001,New,CCB,20', '001,New,CCB,twenty'))

        with pytest.raises(InvalidDispensingError) as excinfo:
            DispensingLoader(path).load()

        assert excinfo.value.column == 'strength1'
        assert excinfo.value.row_index == 1
