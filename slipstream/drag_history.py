from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List

import pandas as pd


@dataclass(frozen=True)
class DragRecord:
    datetime: datetime
    vehicle_id: int
    vehicle_type: str
    platoon_size: int
    position: int
    ratio: float
    drag_coefficient: float


class DragHistory:
    """
    Stores the drag coefficients computed by slipstream devices.
    """

    def __init__(self):
        self.drag_history: List[DragRecord] = []
        self.by_vehicle: Dict[int, List[DragRecord]] = defaultdict(list)

    def add(self, record: DragRecord):
        self.by_vehicle[record.vehicle_id].append(record)
        self.drag_history.append(record)

    def __len__(self):
        return len(self.drag_history)

    def latest(self, vehicle_id: int):
        records = self.by_vehicle.get(vehicle_id)
        if not records:
            return None
        return max(records, key=lambda r: r.datetime)

    def to_dataframe(self):
        data = {
            "timestamp": [r.datetime for r in self.drag_history],
            "vehicle_id": pd.array([r.vehicle_id for r in self.drag_history], dtype="Int64"),
            "vehicle_type": [r.vehicle_type for r in self.drag_history],
            "platoon_size": pd.array([r.platoon_size for r in self.drag_history], dtype="Int32"),
            "position": pd.array([r.position for r in self.drag_history], dtype="Int32"),
            "ratio": pd.array([r.ratio for r in self.drag_history], dtype="float"),
            "drag_coefficient": pd.array([r.drag_coefficient for r in self.drag_history], dtype="float"),
        }

        return pd.DataFrame(data)

    def __getstate__(self):
        self.drag_history.sort(key=lambda r: (r.datetime, r.vehicle_id))
        return {"drag_history": self.drag_history}

    def __setstate__(self, state):
        self.drag_history = state["drag_history"]
        self.by_vehicle = defaultdict(list)
        for record in self.drag_history:
            self.by_vehicle[record.vehicle_id].append(record)
