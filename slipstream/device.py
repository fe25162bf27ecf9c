import logging
from datetime import datetime
from typing import Dict, Optional

from .cfd.estimator import Cfd
from .cfd.search import NO_EFFECT_RATIO
from .drag_history import DragRecord
from .errors import ConfigurationError
from .platoon import LaneView
from .vehicle_types import DEFAULT_VEHICLE_CLASSES, VehicleClassParams

logger = logging.getLogger(__name__)

REFERENCE_DRAG_COEFFICIENT = "referenceDragCoefficient"
ACTUAL_DRAG_COEFFICIENT = "actualDragCoefficient"


class SlipstreamDevice:
    """
    Keeps the drag coefficient of one vehicle up to date with the platoon it
    currently drives in.
    """

    def __init__(self, vehicle_id: int, vehicle_type: str, reference_drag_coefficient: float, cfd: Cfd):
        self.id = f"slipstream_{vehicle_id}"
        self.vehicle_id = vehicle_id
        self.vehicle_type = vehicle_type
        self.reference_drag_coefficient = reference_drag_coefficient
        self.drag_coefficient = reference_drag_coefficient
        self.ratio = NO_EFFECT_RATIO
        self.cfd = cfd
        logger.debug(
            "initialized device '%s' with drag coefficient %s", self.id, self.reference_drag_coefficient
        )

    @classmethod
    def build(
        cls,
        vehicle_id: int,
        vehicle_type: str,
        cfd: Cfd,
        vehicle_classes: Optional[Dict[str, VehicleClassParams]] = None,
    ) -> "SlipstreamDevice":
        classes = vehicle_classes if vehicle_classes is not None else DEFAULT_VEHICLE_CLASSES
        params = classes.get(vehicle_type)
        if params is None or params.drag_coefficient is None:
            raise ConfigurationError(
                f"vehicle '{vehicle_id}' of type '{vehicle_type}' does not supply a drag coefficient"
            )
        return cls(vehicle_id, vehicle_type, params.drag_coefficient, cfd)

    def notify_move(self, lane: LaneView, timestamp: datetime) -> DragRecord:
        """Recompute the drag coefficient for the vehicle's current platoon."""
        query = lane.platoon_query(self.vehicle_id)
        if query is None:
            platoon_size, position = 1, 0
            self.ratio = NO_EFFECT_RATIO
        else:
            types, gaps, position = query
            platoon_size = len(types)
            self.ratio = self.cfd.estimate_drag_ratio(types, gaps, position)

        self.drag_coefficient = self.reference_drag_coefficient * self.ratio
        logger.debug(
            "Drag coefficient of %s: %s -> %s", self.vehicle_id, self.reference_drag_coefficient, self.drag_coefficient
        )

        return DragRecord(
            datetime=timestamp,
            vehicle_id=self.vehicle_id,
            vehicle_type=self.vehicle_type,
            platoon_size=platoon_size,
            position=position,
            ratio=self.ratio,
            drag_coefficient=self.drag_coefficient,
        )

    def get_parameter(self, key: str) -> float:
        if key == REFERENCE_DRAG_COEFFICIENT:
            return self.reference_drag_coefficient
        if key == ACTUAL_DRAG_COEFFICIENT:
            return self.drag_coefficient
        raise ConfigurationError(f"Parameter '{key}' is not supported for device of type 'slipstream'")
