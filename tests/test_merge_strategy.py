"""
Tests for the merge engine and its strategies.
"""
import os
import sys
from datetime import datetime

import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.exceptions import ValidationError
from data_handling.dataset import build_dataset
from data_handling.merge_strategy import MergeEngine, merge_datasets
from data_handling.models import ROW_INDEX_COLUMN, ColumnMapping, MergeStrategy, NormalizedDataset

JOIN_STRATEGIES = [MergeStrategy.INNER_JOIN, MergeStrategy.LEFT_JOIN,
                   MergeStrategy.OUTER_JOIN, MergeStrategy.SMART_MERGE]


def nd(dataset_id, rows):
    return NormalizedDataset(id=dataset_id, rows=tuple(rows))


@pytest.fixture
def engine():
    return MergeEngine()


@pytest.fixture
def contact_datasets():
    return [
        nd('A', [{'id': '1', 'email': 'a@x.com'}]),
        nd('B', [{'id': '1', 'phone': '555'}]),
    ]


@pytest.fixture
def overlapping_datasets():
    return [
        nd('A', [{'id': 1, 'a': 'a1'}, {'id': 2, 'a': 'a2'}, {'id': 3, 'a': 'a3'}]),
        nd('B', [{'id': 4, 'b': 'b4'}, {'id': 2, 'b': 'b2'}, {'id': 3, 'b': 'b3'}]),
        nd('C', [{'id': 3, 'c': 'c3'}, {'id': 2, 'c': 'c2'}]),
    ]


class TestDocumentedExamples:
    """The reference examples for outer join and append."""

    def test_outer_join(self, engine, contact_datasets):
        table = engine.merge(contact_datasets, 'id', MergeStrategy.OUTER_JOIN)

        assert table.columns == (ROW_INDEX_COLUMN, 'email', 'id', 'phone')
        assert list(table.rows) == [{'_row_index': 1, 'id': '1', 'email': 'a@x.com', 'phone': '555'}]

    def test_append_with_schema(self, engine, contact_datasets):
        table = engine.merge(contact_datasets, 'id', MergeStrategy.APPEND, target_schema=['id', 'email', 'phone'])

        assert table.columns == (ROW_INDEX_COLUMN, 'id', 'email', 'phone')
        assert list(table.rows) == [
            {'_row_index': 1, 'id': '1', 'email': 'a@x.com', 'phone': None},
            {'_row_index': 2, 'id': '1', 'email': None, 'phone': '555'},
        ]


class TestIdSets:
    """Test id-set construction per strategy."""

    def test_inner_join(self, engine, overlapping_datasets):
        ids = engine.build_id_set(overlapping_datasets, 'id', MergeStrategy.INNER_JOIN)
        assert ids == ['2', '3']

    def test_left_join(self, engine, overlapping_datasets):
        ids = engine.build_id_set(overlapping_datasets, 'id', MergeStrategy.LEFT_JOIN)
        assert ids == ['1', '2', '3']

    def test_outer_join_first_appearance_order(self, engine, overlapping_datasets):
        ids = engine.build_id_set(overlapping_datasets, 'id', MergeStrategy.OUTER_JOIN)
        assert ids == ['1', '2', '3', '4']

    def test_strategy_containment(self, engine, overlapping_datasets):
        inner = set(engine.build_id_set(overlapping_datasets, 'id', MergeStrategy.INNER_JOIN))
        left = set(engine.build_id_set(overlapping_datasets, 'id', MergeStrategy.LEFT_JOIN))
        outer = set(engine.build_id_set(overlapping_datasets, 'id', MergeStrategy.OUTER_JOIN))

        assert inner <= left <= outer

    def test_append_has_no_id_set(self, engine, overlapping_datasets):
        with pytest.raises(ValueError):
            engine.build_id_set(overlapping_datasets, 'id', MergeStrategy.APPEND)

    def test_rows_without_identifier_are_excluded(self, engine):
        datasets = [nd('A', [{'id': None, 'x': 1}, {'id': '', 'x': 2}, {'x': 3}, {'id': 'k', 'x': 4}])]
        assert engine.build_id_set(datasets, 'id', MergeStrategy.OUTER_JOIN) == ['k']


class TestJoinReconciliation:
    """Test how joined rows are assembled."""

    def test_row_count_matches_id_set(self, engine, overlapping_datasets):
        for strategy in JOIN_STRATEGIES:
            table = engine.merge(overlapping_datasets, 'id', strategy)
            ids = engine.build_id_set(overlapping_datasets, 'id', strategy)
            assert table.metadata.total_rows == len(ids) == len(table.rows)

    def test_left_join_ignores_extra_ids(self, engine, overlapping_datasets):
        table = engine.merge(overlapping_datasets, 'id', MergeStrategy.LEFT_JOIN)

        assert [row['id'] for row in table.rows] == [1, 2, 3]
        assert table.rows[0]['b'] is None
        assert table.rows[1]['b'] == 'b2'
        assert table.rows[2]['c'] == 'c3'

    def test_later_dataset_wins(self, engine):
        datasets = [nd('A', [{'id': 1, 'name': 'first'}]), nd('B', [{'id': 1, 'name': 'second'}])]
        table = engine.merge(datasets, 'id', MergeStrategy.INNER_JOIN)

        assert table.rows[0]['name'] == 'second'

    def test_first_row_per_id_wins_within_dataset(self, engine):
        datasets = [nd('A', [{'id': 1, 'v': 'first'}, {'id': 1, 'v': 'duplicate'}])]
        table = engine.merge(datasets, 'id', MergeStrategy.OUTER_JOIN)

        assert len(table.rows) == 1
        assert table.rows[0]['v'] == 'first'

    def test_identifiers_compare_canonically(self, engine):
        """Numeric and text forms of the same id join together."""
        datasets = [nd('A', [{'id': 1, 'a': 'x'}]), nd('B', [{'id': '1', 'b': 'y'}])]
        table = engine.merge(datasets, 'id', MergeStrategy.INNER_JOIN)

        assert len(table.rows) == 1
        assert table.rows[0]['a'] == 'x'
        assert table.rows[0]['b'] == 'y'
        assert table.rows[0]['id'] == '1'

    def test_smart_merge_matches_outer_join(self, engine, overlapping_datasets):
        outer = engine.merge(overlapping_datasets, 'id', MergeStrategy.OUTER_JOIN)
        smart = engine.merge(overlapping_datasets, 'id', MergeStrategy.SMART_MERGE)

        assert outer.rows == smart.rows
        assert outer.columns == smart.columns
        assert smart.metadata.strategy is MergeStrategy.SMART_MERGE


class TestAppend:
    """Test the append strategy."""

    def test_row_count_is_sum_of_inputs(self, engine, overlapping_datasets):
        table = engine.merge(overlapping_datasets, 'id', MergeStrategy.APPEND)
        assert len(table.rows) == sum(len(ds.rows) for ds in overlapping_datasets)

    def test_rows_without_identifier_are_kept(self, engine):
        datasets = [nd('A', [{'x': 1}]), nd('B', [{'id': None, 'x': 2}])]
        table = engine.merge(datasets, 'id', MergeStrategy.APPEND)

        assert [row['x'] for row in table.rows] == [1, 2]
        assert table.columns == (ROW_INDEX_COLUMN, 'id', 'x')

    def test_dataset_then_row_order(self, engine, overlapping_datasets):
        table = engine.merge(overlapping_datasets, 'id', MergeStrategy.APPEND)
        assert [row['id'] for row in table.rows] == [1, 2, 3, 4, 2, 3, 3, 2]


class TestOutputShape:
    """Test columns, row index and metadata."""

    def test_row_index_sequence(self, engine, overlapping_datasets):
        for strategy in JOIN_STRATEGIES + [MergeStrategy.APPEND]:
            table = engine.merge(overlapping_datasets, 'id', strategy)
            assert [row[ROW_INDEX_COLUMN] for row in table.rows] == list(range(1, len(table.rows) + 1))
            assert table.columns[0] == ROW_INDEX_COLUMN

    def test_columns_sorted_without_schema(self, engine, overlapping_datasets):
        table = engine.merge(overlapping_datasets, 'id', MergeStrategy.OUTER_JOIN)
        assert table.columns == (ROW_INDEX_COLUMN, 'a', 'b', 'c', 'id')

    def test_every_row_has_every_column(self, engine, overlapping_datasets):
        table = engine.merge(overlapping_datasets, 'id', MergeStrategy.OUTER_JOIN, target_schema=['id', 'a', 'z'])
        for row in table.rows:
            assert list(row) == [ROW_INDEX_COLUMN, 'id', 'a', 'z']
            assert row['z'] is None

    def test_row_index_in_schema_is_not_duplicated(self, engine, contact_datasets):
        table = engine.merge(contact_datasets, 'id', MergeStrategy.APPEND, target_schema=[ROW_INDEX_COLUMN, 'id'])
        assert table.columns == (ROW_INDEX_COLUMN, 'id')

    def test_metadata(self, engine, contact_datasets):
        table = engine.merge(contact_datasets, 'id', 'outer_join')

        assert table.metadata.sources == ('A', 'B')
        assert table.metadata.join_key == 'id'
        assert table.metadata.strategy is MergeStrategy.OUTER_JOIN
        assert datetime.fromisoformat(table.metadata.generated_at).tzinfo is not None
        assert table.to_dict()['metadata']['strategy'] == 'outer_join'

    def test_to_dataframe(self, engine, contact_datasets):
        frame = engine.merge(contact_datasets, 'id', MergeStrategy.APPEND).to_dataframe()

        assert list(frame.columns) == [ROW_INDEX_COLUMN, 'email', 'id', 'phone']
        assert len(frame) == 2

    def test_unknown_strategy(self, engine, contact_datasets):
        with pytest.raises(ValidationError):
            engine.merge(contact_datasets, 'id', 'cross_join')


class TestEmptyResults:
    """Edge cases that produce an empty, well-formed table."""

    @pytest.mark.parametrize('strategy', JOIN_STRATEGIES + [MergeStrategy.APPEND])
    def test_no_datasets(self, engine, strategy):
        table = engine.merge([], 'id', strategy)

        assert table.rows == ()
        assert table.columns == (ROW_INDEX_COLUMN,)
        assert table.metadata.total_rows == 0

    def test_no_datasets_with_schema(self, engine):
        table = engine.merge([], 'id', MergeStrategy.INNER_JOIN, target_schema=['id', 'x'])
        assert table.columns == (ROW_INDEX_COLUMN, 'id', 'x')

    @pytest.mark.parametrize('strategy', JOIN_STRATEGIES)
    def test_identifier_missing_everywhere(self, engine, overlapping_datasets, strategy):
        table = engine.merge(overlapping_datasets, 'patient_id', strategy)

        assert table.rows == ()
        assert table.metadata.total_rows == 0

    def test_no_shared_ids(self, engine):
        datasets = [nd('A', [{'id': 1}]), nd('B', [{'id': 2}])]
        assert engine.merge(datasets, 'id', MergeStrategy.INNER_JOIN).rows == ()


class TestMergeDatasets:
    """Test normalization plus merge."""

    def test_mappings_per_dataset(self):
        clinic_a = build_dataset(['Patient ID', 'E-mail'], [{'Patient ID': 'P1', 'E-mail': 'a@x.com'}],
                                 name='a.csv', dataset_id='a')
        clinic_b = build_dataset(['pid', 'Cell'], [{'pid': 'P1', 'Cell': '555-123-4567'}],
                                 name='b.csv', dataset_id='b')
        mappings = {
            'a': [ColumnMapping('Patient ID', 'patient_id', 0.95), ColumnMapping('E-mail', 'email', 0.9)],
            'b': [ColumnMapping('pid', 'patient_id', 0.8), ColumnMapping('Cell', 'phone', 0.9)],
        }

        table = merge_datasets([clinic_a, clinic_b], mappings, 'patient_id', 'outer_join',
                               target_schema=['patient_id', 'email', 'phone'])

        assert list(table.rows) == [
            {'_row_index': 1, 'patient_id': 'P1', 'email': 'a@x.com', 'phone': '555-123-4567'}
        ]

    def test_missing_mapping_entry_is_identity(self):
        dataset = build_dataset(['id', 'x'], [{'id': 1, 'x': 'y'}], name='a.csv', dataset_id='a')
        table = merge_datasets([dataset], {}, 'id', MergeStrategy.LEFT_JOIN)

        assert table.rows[0]['x'] == 'y'

    def test_identifier_outside_target_schema(self):
        dataset = build_dataset(['id', 'x'], [{'id': 1, 'x': 'y'}], name='a.csv', dataset_id='a')

        joined = merge_datasets([dataset], {}, 'id', MergeStrategy.OUTER_JOIN, target_schema=['x'])
        appended = merge_datasets([dataset], {}, 'id', MergeStrategy.APPEND, target_schema=['x'])

        assert joined.rows == ()
        assert list(appended.rows) == [{'_row_index': 1, 'x': 'y'}]
