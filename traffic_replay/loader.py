"""
Scenario loading
================
Reads agent records from CSV (pandas) and map polylines from GeoJSON, and
turns them into AgentPose records for the frame index.

Map coordinates are taken as-is: they must already be in the same
coordinate space as the agent positions.
"""

import json
import logging
import numpy as np
import pandas as pd
from pathlib import Path
from typing import List, Optional

from .config import Columns
from .frames import AgentPose

logger = logging.getLogger(__name__)


def filter_case(df: pd.DataFrame, case_id: int, columns: Optional[Columns] = None) -> pd.DataFrame:
    """
    Keep the rows of one case. Rows without a case id belong to every case.
    """
    columns = columns or Columns()
    if columns.case_id not in df.columns:
        return df
    case = df[columns.case_id]
    return df[case.isna() | (case == case_id)]


def poses_from_dataframe(df: pd.DataFrame, columns: Optional[Columns] = None) -> List[AgentPose]:
    columns = columns or Columns()
    missing = [c for c in columns.required() if c not in df.columns]
    if missing:
        raise ValueError(f"Agent records are missing columns: {missing}")

    frame_ids = pd.to_numeric(df[columns.frame_id], errors='raise').astype(int)
    timestamps = pd.to_numeric(df[columns.timestamp], errors='raise').astype(np.int64)

    poses = []
    for (_, row), frame_id, ts in zip(df.iterrows(), frame_ids, timestamps):
        poses.append(AgentPose(
            frame_id=int(frame_id),
            track_id=row[columns.track_id],
            x=float(row[columns.x]),
            y=float(row[columns.y]),
            length=float(row[columns.length]),
            width=float(row[columns.width]),
            heading=float(row[columns.heading]),
            category=str(row[columns.category]),
            timestamp_ms=int(ts),
        ))
    return poses


def load_agents_csv(path, columns: Optional[Columns] = None,
                    case_id: Optional[int] = None) -> List[AgentPose]:
    """Read a scenario CSV into agent poses, optionally filtered to one case."""
    columns = columns or Columns()
    path = Path(path)
    logger.info(f"Reading agent records from {path.name}...")
    df = pd.read_csv(path)
    if case_id is not None:
        df = filter_case(df, case_id, columns)
    poses = poses_from_dataframe(df, columns)
    logger.info(f"  Agent records: {len(poses)}")
    return poses


def polylines_from_geojson(data: dict) -> List[np.ndarray]:
    """LineString / MultiLineString features as (n, 2) arrays."""
    if data.get('type') != 'FeatureCollection':
        raise ValueError("Map file is not a GeoJSON FeatureCollection")

    lines = []
    for feature in data.get('features', []):
        geometry = feature.get('geometry') or {}
        gtype = geometry.get('type')
        coords = geometry.get('coordinates', [])
        if gtype == 'LineString':
            parts = [coords]
        elif gtype == 'MultiLineString':
            parts = coords
        else:
            logger.debug(f"Skipping {gtype} map feature")
            continue
        for part in parts:
            if len(part) >= 2:
                lines.append(np.asarray(part, dtype=np.float64)[:, :2])
    return lines


def load_map_geojson(path) -> List[np.ndarray]:
    path = Path(path)
    logger.info(f"Reading map polylines from {path.name}...")
    with open(path) as f:
        data = json.load(f)
    lines = polylines_from_geojson(data)
    logger.info(f"  Map polylines: {len(lines)}")
    return lines
