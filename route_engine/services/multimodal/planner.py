"""
Template-based multimodal leg planner.

Evaluates a fixed catalogue of leg-sequence templates for a
point-to-point shipment:

    road      road linehaul
    sea       road feeder + sea + road feeder
    air       road feeder + air + road feeder
    sea_air   road feeder + sea to hub + air + road feeder
    road_sea  road linehaul + sea + road feeder
    rail      road feeder + rail + road feeder (optional)

Terminals are placed along the origin-destination line at configured
fractions. Service types follow cargo thresholds (FTL/LTL on road,
FCL/LCL on sea and rail, express/economy in the air).
"""
import logging
import math

from route_engine.core.config import MultimodalParameters
from route_engine.models.enums import ServiceType, TransportMode
from route_engine.schemas.base import Location
from route_engine.schemas.multimodal import Cargo
from route_engine.services.multimodal.models import MultimodalRoute, TransportLeg, TransportNode
from route_engine.services.solver.data_model import haversine_distance

logger = logging.getLogger(__name__)

# Minimum billable volume for LCL consolidation
MIN_LCL_VOLUME_M3 = 1.0


def interpolate(origin: TransportNode, destination: TransportNode, fraction: float, name: str, kind: str) -> TransportNode:
    """Point at a fraction of the straight line between two nodes."""
    return TransportNode(
        name=name,
        latitude=origin.latitude + (destination.latitude - origin.latitude) * fraction,
        longitude=origin.longitude + (destination.longitude - origin.longitude) * fraction,
        kind=kind,
    )


class MultimodalPlanner:
    """
    Builds one MultimodalRoute per template.

    Usage:
        planner = MultimodalPlanner(config.multimodal)
        routes = planner.plan_routes(origin, destination, cargo)
    """

    def __init__(self, params: MultimodalParameters):
        self.params = params

    # =========================================================================
    # Service types
    # =========================================================================
    def road_service(self, cargo: Cargo) -> ServiceType:
        if cargo.weight >= self.params.ftl_weight_threshold_kg or cargo.volume >= self.params.ftl_volume_threshold_m3:
            return ServiceType.FTL
        return ServiceType.LTL

    def container_service(self, cargo: Cargo) -> ServiceType:
        if cargo.volume >= self.params.fcl_volume_threshold_m3:
            return ServiceType.FCL
        return ServiceType.LCL

    def air_service(self, cargo: Cargo) -> ServiceType:
        return ServiceType.EXPRESS if cargo.is_urgent else ServiceType.ECONOMY

    # =========================================================================
    # Pricing
    # =========================================================================
    def _price(self, mode: TransportMode, service: ServiceType, distance_km: float, cargo: Cargo) -> float:
        p = self.params
        tonnes = cargo.weight / 1000.0

        if mode == TransportMode.ROAD:
            if service == ServiceType.FTL:
                trucks = max(
                    1,
                    math.ceil(cargo.weight / p.truck_capacity_kg),
                    math.ceil(cargo.volume / p.truck_capacity_m3),
                )
                return trucks * distance_km * p.ftl_rate_per_truck_km
            return max(p.ltl_minimum_charge, tonnes * distance_km * p.ltl_rate_per_tonne_km)

        if mode == TransportMode.SEA:
            if service == ServiceType.FCL:
                containers = max(1, math.ceil(cargo.volume / p.container_volume_m3))
                return containers * (distance_km * p.fcl_rate_per_container_km + p.fcl_handling_per_container)
            volume = max(cargo.volume, MIN_LCL_VOLUME_M3)
            return volume * (distance_km * p.lcl_rate_per_m3_km + p.lcl_handling_per_m3)

        if mode == TransportMode.AIR:
            chargeable = max(cargo.weight, cargo.volume * p.air_volumetric_kg_per_m3)
            rate = p.air_express_rate_per_kg_km if service == ServiceType.EXPRESS else p.air_economy_rate_per_kg_km
            return chargeable * distance_km * rate

        return tonnes * distance_km * p.rail_rate_per_tonne_km

    def _handling_hours(self, mode: TransportMode, service: ServiceType) -> float:
        if mode == TransportMode.AIR:
            if service == ServiceType.EXPRESS:
                return self.params.air_express_handling_hours
            return self.params.air_economy_handling_hours
        return self.params.modes[mode].handling_hours

    def build_leg(
        self,
        sequence: int,
        mode: TransportMode,
        origin: TransportNode,
        destination: TransportNode,
        cargo: Cargo,
    ) -> TransportLeg:
        mode_params = self.params.modes[mode]
        if mode == TransportMode.ROAD:
            service = self.road_service(cargo)
        elif mode == TransportMode.AIR:
            service = self.air_service(cargo)
        else:
            service = self.container_service(cargo)

        distance = haversine_distance(
            origin.latitude, origin.longitude, destination.latitude, destination.longitude,
        ) * mode_params.circuity
        duration = distance / mode_params.speed_kmh + self._handling_hours(mode, service)

        notes = []
        if cargo.is_hazardous:
            if mode == TransportMode.AIR:
                notes.append("Hazardous cargo: subject to dangerous-goods acceptance by the air carrier")
            else:
                notes.append("Hazardous cargo: dangerous-goods documentation required")

        return TransportLeg(
            sequence=sequence,
            mode=mode,
            service_type=service,
            origin=origin,
            destination=destination,
            carrier=mode_params.carrier,
            distance_km=distance,
            duration_hours=duration,
            cost=self._price(mode, service, distance, cargo),
            co2_kg=cargo.weight / 1000.0 * distance * mode_params.co2_kg_per_tonne_km,
            notes=tuple(notes),
        )

    def _route(self, template: str, hops: list[tuple[TransportMode, TransportNode, TransportNode]], cargo: Cargo) -> MultimodalRoute:
        legs = tuple(
            self.build_leg(sequence, mode, start, end, cargo)
            for sequence, (mode, start, end) in enumerate(hops, start=1)
        )
        return MultimodalRoute(route_id=template, template=template, legs=legs)

    # =========================================================================
    # Templates
    # =========================================================================
    def plan_routes(self, origin: Location, destination: Location, cargo: Cargo) -> list[MultimodalRoute]:
        """Evaluate every template in catalogue order."""
        p = self.params
        start = TransportNode(origin.address or "Origin", origin.latitude, origin.longitude)
        end = TransportNode(destination.address or "Destination", destination.latitude, destination.longitude)

        origin_port = interpolate(start, end, p.feeder_fraction, "Origin port", "port")
        destination_port = interpolate(start, end, 1 - p.feeder_fraction, "Destination port", "port")
        origin_airport = interpolate(start, end, p.air_feeder_fraction, "Origin airport", "airport")
        destination_airport = interpolate(start, end, 1 - p.air_feeder_fraction, "Destination airport", "airport")
        transit_hub = interpolate(start, end, p.sea_air_hub_fraction, "Sea-air transit hub", "hub")
        linehaul_port = interpolate(start, end, p.road_sea_linehaul_fraction, "Linehaul port", "port")

        road, sea, air, rail = TransportMode.ROAD, TransportMode.SEA, TransportMode.AIR, TransportMode.RAIL

        routes = [
            self._route("road", [(road, start, end)], cargo),
            self._route("sea", [
                (road, start, origin_port),
                (sea, origin_port, destination_port),
                (road, destination_port, end),
            ], cargo),
            self._route("air", [
                (road, start, origin_airport),
                (air, origin_airport, destination_airport),
                (road, destination_airport, end),
            ], cargo),
            self._route("sea_air", [
                (road, start, origin_port),
                (sea, origin_port, transit_hub),
                (air, transit_hub, destination_airport),
                (road, destination_airport, end),
            ], cargo),
            self._route("road_sea", [
                (road, start, linehaul_port),
                (sea, linehaul_port, destination_port),
                (road, destination_port, end),
            ], cargo),
        ]

        if p.include_rail_template:
            origin_terminal = interpolate(start, end, p.feeder_fraction, "Origin rail terminal", "rail_terminal")
            destination_terminal = interpolate(start, end, 1 - p.feeder_fraction, "Destination rail terminal", "rail_terminal")
            routes.append(self._route("rail", [
                (road, start, origin_terminal),
                (rail, origin_terminal, destination_terminal),
                (road, destination_terminal, end),
            ], cargo))

        logger.info(
            f"Planned {len(routes)} multimodal templates for {cargo.weight:.0f} kg / {cargo.volume:.1f} m3"
        )
        return routes
