"""Tests for CSV and GeoJSON loading."""

import json

import numpy as np
import pandas as pd
import pytest

from traffic_replay.config import Columns
from traffic_replay.loader import (
    filter_case,
    load_agents_csv,
    load_map_geojson,
    poses_from_dataframe,
    polylines_from_geojson,
)


@pytest.fixture
def records() -> pd.DataFrame:
    return pd.DataFrame({
        'case_id': [1, 1, 2, np.nan],
        'track_id': [5, 6, 5, 9],
        'frame_id': ['10', '2', '2', '1'],
        'timestamp_ms': [1000, 200, 200, 100],
        'agent_type': ['Car', 'Pedestrian', 'Truck', 'Bicycle'],
        'lon': [1.0, 2.0, 3.0, 4.0],
        'lat': [-1.0, -2.0, -3.0, -4.0],
        'length': [4.5, 0.6, 12.0, 1.8],
        'width': [1.8, 0.6, 2.5, 0.6],
        'psi_rad': [0.0, 1.5, -0.3, 3.1],
    })


class TestPoses:

    def test_fields(self, records):
        poses = poses_from_dataframe(records)
        first = poses[0]

        assert len(poses) == 4
        assert first.frame_id == 10
        assert first.track_id == 5
        assert first.position == (1.0, -1.0)
        assert first.dimensions == (4.5, 1.8)
        assert first.heading == 0.0
        assert first.category == 'Car'
        assert first.timestamp_ms == 1000

    def test_missing_columns(self, records):
        with pytest.raises(ValueError, match='psi_rad'):
            poses_from_dataframe(records.drop(columns=['psi_rad']))

    def test_custom_columns(self, records):
        renamed = records.rename(columns={'lon': 'x [m]', 'lat': 'y [m]'})
        poses = poses_from_dataframe(renamed, Columns(x='x [m]', y='y [m]'))
        assert poses[1].position == (2.0, -2.0)

    def test_non_numeric_frame_id(self, records):
        records.loc[0, 'frame_id'] = 'ten'
        with pytest.raises(ValueError):
            poses_from_dataframe(records)


class TestCaseFilter:

    def test_keeps_case_and_unassigned_rows(self, records):
        kept = filter_case(records, 1)
        assert list(kept['track_id']) == [5, 6, 9]

    def test_without_case_column(self, records):
        no_case = records.drop(columns=['case_id'])
        assert len(filter_case(no_case, 1)) == 4


class TestCsv:

    def test_load(self, records, tmp_path):
        path = tmp_path / 'scenario.csv'
        records.to_csv(path, index=False)

        poses = load_agents_csv(path, case_id=2)
        assert sorted(p.frame_id for p in poses) == [1, 2]

    def test_missing_file(self, tmp_path):
        with pytest.raises(OSError):
            load_agents_csv(tmp_path / 'nope.csv')


class TestGeoJson:

    @staticmethod
    def _collection(*geometries):
        return {
            'type': 'FeatureCollection',
            'features': [{'type': 'Feature', 'properties': {}, 'geometry': g}
                         for g in geometries],
        }

    def test_line_strings(self):
        data = self._collection(
            {'type': 'LineString', 'coordinates': [[0, 0], [1, 1], [2, 0]]},
            {'type': 'MultiLineString', 'coordinates': [[[5, 5], [6, 6]], [[7, 7, 0], [8, 8, 9]]]},
        )
        lines = polylines_from_geojson(data)

        assert len(lines) == 3
        np.testing.assert_allclose(lines[0], [[0, 0], [1, 1], [2, 0]])
        np.testing.assert_allclose(lines[2], [[7, 7], [8, 8]])

    def test_other_geometries_skipped(self):
        data = self._collection(
            {'type': 'Point', 'coordinates': [0, 0]},
            {'type': 'LineString', 'coordinates': [[0, 0]]},
            None,
        )
        assert polylines_from_geojson(data) == []

    def test_not_a_feature_collection(self):
        with pytest.raises(ValueError):
            polylines_from_geojson({'type': 'Feature'})

    def test_load_file(self, tmp_path):
        path = tmp_path / 'map.geojson'
        path.write_text(json.dumps(self._collection(
            {'type': 'LineString', 'coordinates': [[0, 0], [3, 4]]})))
        lines = load_map_geojson(path)
        assert len(lines) == 1

    def test_invalid_json(self, tmp_path):
        path = tmp_path / 'map.geojson'
        path.write_text('{not json')
        with pytest.raises(ValueError):
            load_map_geojson(path)
