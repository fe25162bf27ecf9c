from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

from .config import SlipstreamSettings
from .vehicle_types import DEFAULT_VEHICLE_CLASSES


def _norm_vtype(vt) -> str:
    if isinstance(vt, (bytes, bytearray)):
        return vt.decode("utf-8", errors="ignore")
    return str(vt)


@dataclass(frozen=True)
class VehicleState:
    vehicle_id: int
    vehicle_type: str
    position_m: float  # front bumper, measured along the lane
    length_m: float

    @classmethod
    def of_class(cls, vehicle_id: int, vehicle_type, position_m: float) -> "VehicleState":
        vt = _norm_vtype(vehicle_type)
        params = DEFAULT_VEHICLE_CLASSES.get(vt, DEFAULT_VEHICLE_CLASSES["car"])
        return cls(vehicle_id, vt, float(position_m), params.length_m)

    @property
    def back_m(self) -> float:
        return self.position_m - self.length_m


Neighbour = Tuple[VehicleState, float]
PlatoonQuery = Tuple[List[str], List[float], int]


class LaneView:
    """
    Snapshot of the vehicles on one lane, used to find the platoon around a
    vehicle.
    """

    def __init__(self, vehicles: Iterable[VehicleState] = (), settings: Optional[SlipstreamSettings] = None):
        self.settings = settings if settings is not None else SlipstreamSettings()
        self.vehicles: Dict[int, VehicleState] = {}
        self._ordered: List[VehicleState] = []
        for vehicle in vehicles:
            self.add(vehicle)

    def add(self, vehicle: VehicleState):
        self.vehicles[vehicle.vehicle_id] = vehicle
        # ordered from the lane end backwards; equal positions keep insertion order
        self._ordered = sorted(self.vehicles.values(), key=lambda v: -v.position_m)

    def _index(self, vehicle_id: int) -> int:
        vehicle = self.vehicles[vehicle_id]
        return self._ordered.index(vehicle)

    def leader(self, vehicle_id: int) -> Optional[Neighbour]:
        i = self._index(vehicle_id)
        if i == 0:
            return None
        me, ahead = self._ordered[i], self._ordered[i - 1]
        return ahead, ahead.back_m - me.position_m

    def follower(self, vehicle_id: int) -> Optional[Neighbour]:
        i = self._index(vehicle_id)
        if i == len(self._ordered) - 1:
            return None
        me, behind = self._ordered[i], self._ordered[i + 1]
        return behind, me.back_m - behind.position_m

    def _walk(self, vehicle_id: int, step) -> List[Neighbour]:
        remaining = self.settings.max_total_distance_m
        found: List[Neighbour] = []
        last = vehicle_id
        while remaining > 0.0:
            neighbour = step(last)
            if neighbour is None:
                break
            vehicle, gap = neighbour
            if gap > self.settings.max_gap_m:
                break
            gap_and_length = gap + vehicle.length_m
            if remaining - gap_and_length < 0.0:
                break
            found.append(neighbour)
            remaining -= gap_and_length
            last = vehicle.vehicle_id
        return found

    def leaders(self, vehicle_id: int) -> List[Neighbour]:
        """
        Vehicles ahead, nearest first, each with its gap to the vehicle behind it.
        Stops at the first gap above `max_gap_m` or once the
        `max_total_distance_m` budget of gaps and lengths is used up.
        """
        return self._walk(vehicle_id, self.leader)

    def followers(self, vehicle_id: int) -> List[Neighbour]:
        """Vehicles behind, nearest first, each with its gap to the vehicle ahead of it."""
        return self._walk(vehicle_id, self.follower)

    def platoon_query(self, vehicle_id: int) -> Optional[PlatoonQuery]:
        """
        Returns (types, gaps, position) of the platoon around `vehicle_id`,
        ordered from the head to the tail, or None if the vehicle drives alone.
        """
        me = self.vehicles[vehicle_id]
        ahead = self.leaders(vehicle_id)
        behind = self.followers(vehicle_id)
        if not ahead and not behind:
            return None

        types = [v.vehicle_type for v, _ in reversed(ahead)] + [me.vehicle_type]
        # the gap stored with a leader belongs to the vehicle behind it
        gaps = [0.0] + [gap for _, gap in reversed(ahead)]
        for vehicle, gap in behind:
            types.append(vehicle.vehicle_type)
            gaps.append(gap)
        return types, gaps, len(ahead)
