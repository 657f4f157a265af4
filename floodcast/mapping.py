# floodcast/mapping.py
import pandas as pd
import pydeck as pdk

from floodcast.sample_data import COMMUNITY_LOCATIONS

# Nigeria, used when no selectable community has known coordinates
DEFAULT_CENTER = (9.0820, 8.6753, 5.0)


def esri_light_gray_basemap():
    return pdk.Layer(
        "TileLayer",
        data="https://server.arcgisonline.com/ArcGIS/rest/services/Canvas/World_Light_Gray_Base/MapServer/tile/{z}/{y}/{x}",
        minZoom=0, maxZoom=19, tileSize=256
    )


def community_points(communities, selected=None) -> pd.DataFrame:
    """One row per community with known coordinates; the selected one is highlighted."""
    rows = []
    sel = (selected or "").lower()
    for name in communities:
        loc = COMMUNITY_LOCATIONS.get(str(name).lower())
        if loc is None:
            continue
        is_sel = str(name).lower() == sel
        rows.append({
            "name": name,
            "lat": loc[0],
            "lon": loc[1],
            "radius": 30000 if is_sel else 18000,
            "fill_color": [239, 68, 68, 220] if is_sel else [59, 130, 246, 180],
        })
    return pd.DataFrame(rows, columns=["name", "lat", "lon", "radius", "fill_color"])


def center_and_zoom(points_df: pd.DataFrame):
    if points_df.empty:
        return DEFAULT_CENTER
    lat = (points_df["lat"].min() + points_df["lat"].max()) / 2.0
    lon = (points_df["lon"].min() + points_df["lon"].max()) / 2.0
    span = max(points_df["lat"].max() - points_df["lat"].min(),
               points_df["lon"].max() - points_df["lon"].min())
    zoom = 9.0
    if span > 8.0: zoom = 4.8
    elif span > 4.0: zoom = 5.5
    elif span > 1.0: zoom = 6.5
    return lat, lon, zoom


def community_deck(communities, selected=None):
    """pydeck map of the selectable communities, or None if none can be placed."""
    pts = community_points(communities, selected)
    if pts.empty:
        return None
    lat, lon, zoom = center_and_zoom(pts)
    layer = pdk.Layer(
        "ScatterplotLayer",
        data=pts,
        pickable=True,
        get_position="[lon, lat]",
        get_radius="radius",
        get_fill_color="fill_color",
        get_line_color=[40, 40, 40],
        stroked=True,
        line_width_min_pixels=1,
    )
    return pdk.Deck(
        layers=[esri_light_gray_basemap(), layer],
        initial_view_state=pdk.ViewState(latitude=lat, longitude=lon, zoom=zoom),
        map_style=None,
        tooltip={"html": "<b>Community:</b> {name}", "style": {"backgroundColor": "white", "color": "black"}}
    )
