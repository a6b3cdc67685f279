"""
Map Presentation

SessionState snapshot => 지도 layer 구성 (순수 함수)
folium으로 Leaflet 지도 렌더링
"""

from typing import List, Optional, Tuple
from dataclasses import dataclass

import folium

from routemap.core.config import (
    DEFAULT_MAP_CENTER,
    DEFAULT_MAP_ZOOM,
    FOCUS_ZOOM,
    MARKER_ICONS,
    TILE_PROVIDERS,
)
from routemap.client.workflow import SessionState
from routemap.models.domain import RouteSummary

LatLon = Tuple[float, float]

MARKER_ICON_SIZE = (30, 45)
MARKER_ICON_ANCHOR = (15, 45)


@dataclass(frozen=True)
class TileLayerSpec:
    name: str
    url: str
    subdomains: Tuple[str, ...]
    attribution: str
    active: bool = False


@dataclass(frozen=True)
class MarkerSpec:
    role: str  # "source" | "destination"
    position: LatLon
    icon_url: str
    popup: str


@dataclass(frozen=True)
class PolylineSpec:
    positions: Tuple[LatLon, ...]
    color: str = "blue"
    weight: int = 6
    dash_array: str = "10, 10"
    opacity: float = 0.8


@dataclass(frozen=True)
class MapView:
    center: LatLon
    zoom: int
    tile_layers: Tuple[TileLayerSpec, ...]
    markers: Tuple[MarkerSpec, ...]
    polyline: Optional[PolylineSpec] = None
    summary: Optional[RouteSummary] = None


def build_tile_layers(base_layer: str = "Default") -> Tuple[TileLayerSpec, ...]:
    """선택 가능한 base layer 목록, base_layer만 active"""
    if base_layer not in TILE_PROVIDERS:
        raise ValueError(
            f"unknown base layer {base_layer!r}, choose one of {list(TILE_PROVIDERS)}"
        )

    return tuple(
        TileLayerSpec(
            name=name,
            url=provider["url"],
            subdomains=tuple(provider["subdomains"]),
            attribution=provider["attribution"],
            active=(name == base_layer),
        )
        for name, provider in TILE_PROVIDERS.items()
    )


def build_map_view(state: SessionState, base_layer: str = "Default") -> MapView:
    """
    SessionState => MapView

    - 출발지 marker (파란색), 목적지 marker (빨간색)
    - 두 좌표와 경로가 모두 있을 때만 polyline
    - 중심: 출발지 좌표 (없으면 기본 중심)
    """
    source = state.source
    destination = state.destination

    markers: List[MarkerSpec] = []
    if source.coordinate is not None:
        markers.append(
            MarkerSpec(
                role="source",
                position=source.coordinate.as_tuple(),
                icon_url=MARKER_ICONS["source"],
                popup=f"📍 {source.query}",
            )
        )
    if destination.coordinate is not None:
        markers.append(
            MarkerSpec(
                role="destination",
                position=destination.coordinate.as_tuple(),
                icon_url=MARKER_ICONS["destination"],
                popup=f"📍 {destination.query}",
            )
        )

    polyline = None
    summary = None
    if state.has_route:
        polyline = PolylineSpec(positions=tuple(c.as_tuple() for c in state.geometry))
        summary = state.summary

    if source.coordinate is not None:
        center, zoom = source.coordinate.as_tuple(), FOCUS_ZOOM
    else:
        center, zoom = DEFAULT_MAP_CENTER, DEFAULT_MAP_ZOOM

    return MapView(
        center=center,
        zoom=zoom,
        tile_layers=build_tile_layers(base_layer),
        markers=tuple(markers),
        polyline=polyline,
        summary=summary,
    )


def render_map(view: MapView) -> folium.Map:
    """MapView => folium.Map"""
    fmap = folium.Map(location=list(view.center), zoom_start=view.zoom, tiles=None)

    # active layer를 마지막에 추가해야 기본 표시됨
    for layer in sorted(view.tile_layers, key=lambda layer: layer.active):
        folium.TileLayer(
            tiles=layer.url,
            attr=layer.attribution,
            name=layer.name,
            subdomains=list(layer.subdomains),
            overlay=False,
            control=True,
            show=layer.active,
        ).add_to(fmap)

    for marker in view.markers:
        folium.Marker(
            location=list(marker.position),
            popup=folium.Popup(marker.popup),
            icon=folium.CustomIcon(
                marker.icon_url,
                icon_size=MARKER_ICON_SIZE,
                icon_anchor=MARKER_ICON_ANCHOR,
            ),
        ).add_to(fmap)

    if view.polyline is not None:
        tooltip = None
        if view.summary is not None:
            tooltip = (
                f"🚗 {view.summary.distance_km} km, "
                f"⏳ {view.summary.duration_min} minutes"
            )
        folium.PolyLine(
            locations=[list(p) for p in view.polyline.positions],
            color=view.polyline.color,
            weight=view.polyline.weight,
            opacity=view.polyline.opacity,
            dash_array=view.polyline.dash_array,
            tooltip=tooltip,
        ).add_to(fmap)

    folium.LayerControl(position="topright").add_to(fmap)
    return fmap


def render_html(view: MapView) -> str:
    """MapView => standalone HTML 문자열"""
    return render_map(view).get_root().render()
