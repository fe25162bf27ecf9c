# slipstream/vehicle_types.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional


@dataclass(frozen=True)
class VehicleClassParams:
    name: str
    length_m: float
    # reference (isolated vehicle) drag coefficient; None if the class was never measured
    drag_coefficient: Optional[float] = None


DEFAULT_VEHICLE_CLASSES: Dict[str, VehicleClassParams] = {
    "car": VehicleClassParams(
        name="car",
        length_m=4.5,
        drag_coefficient=0.30,
    ),
    "truck": VehicleClassParams(
        name="truck",
        length_m=16.5,  # tractor + semi-trailer
        drag_coefficient=0.60,
    ),
}
