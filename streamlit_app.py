from __future__ import annotations

import asyncio
from pathlib import Path

import streamlit as st

from geo_logger.config import AppConfig, build_platform
from geo_logger.csv_io import load_track_readings
from geo_logger.display import current_position_lines, history_rows
from geo_logger.models import DEFAULT_ALBUM, DEFAULT_TZ, Accuracy
from geo_logger.platform import PositionSensor
from geo_logger.sensors import ReplayPositionSensor, SimulatedPositionSensor
from geo_logger.state import AppState, SessionController


def _session_state() -> AppState:
    # History lives exactly as long as the browser session.
    if "app_state" not in st.session_state:
        st.session_state["app_state"] = AppState()
    return st.session_state["app_state"]


def _sensor(kind: str, center_lat: float, center_lon: float, seed: int, csv_path: str) -> PositionSensor:
    """Reuse the sensor across reruns so replay position / RNG state carry on."""

    key = (kind, center_lat, center_lon, seed, csv_path)
    if st.session_state.get("sensor_key") != key:
        if kind == "replay":
            readings, _ = load_track_readings(csv_path)
            sensor: PositionSensor = ReplayPositionSensor(readings)
        else:
            sensor = SimulatedPositionSensor(center_lat, center_lon, seed=seed)
        st.session_state["sensor_key"] = key
        st.session_state["sensor"] = sensor
    return st.session_state["sensor"]


def _show_alert(controller: SessionController) -> None:
    alert = controller.state.last_alert
    if alert is None:
        return
    if alert.is_error:
        st.error(f"**{alert.title}**：{alert.message}")
    else:
        st.success(f"**{alert.title}**：{alert.message}")


def main() -> None:
    st.set_page_config(page_title="Geolocation Logger", layout="centered")
    st.title("Geolocation Logger")

    with st.sidebar:
        st.subheader("位置来源")
        kind = st.radio("传感器", options=["simulate", "replay"], horizontal=True)
        center_lat = st.number_input("中心纬度 center_lat", value=30.7456421, format="%.7f")
        center_lon = st.number_input("中心经度 center_lon", value=103.9284974, format="%.7f")
        seed = int(st.number_input("随机种子 seed", value=0, step=1))
        csv_path = st.text_input("轨迹CSV（replay）", value="Path.csv")
        accuracy_name = st.selectbox("精度模式", [a.name for a in Accuracy], index=Accuracy.HIGH - 1)
        timeout = st.number_input("定位超时（秒，0 表示不限）", value=0.0, step=1.0, min_value=0.0)

        st.subheader("导出")
        tz_name = st.text_input("时区（IANA）", value=DEFAULT_TZ)
        documents_dir = st.text_input("私有文档目录", value="documents")
        media_root = st.text_input("媒体库根目录", value="media")
        album = st.text_input("相册名", value=DEFAULT_ALBUM)
        cleanup = st.checkbox("登记失败时删除已写入的文件", value=False)

        with st.expander("权限模拟", expanded=False):
            allow_location = st.checkbox("允许定位", value=True)
            allow_media = st.checkbox("允许访问媒体库", value=True)

    try:
        config = AppConfig(
            tz_name=tz_name,
            documents_dir=Path(documents_dir),
            media_root=Path(media_root),
            album_name=album,
            accuracy=Accuracy[accuracy_name],
            acquire_timeout_seconds=float(timeout) if timeout > 0 else None,
            cleanup_on_failure=cleanup,
            allow_location=allow_location,
            allow_media=allow_media,
        ).validate()
        sensor = _sensor(kind, float(center_lat), float(center_lon), seed, csv_path)
    except (ValueError, KeyError, OSError) as exc:
        st.error(str(exc))
        return

    state = _session_state()
    controller = SessionController(state, build_platform(config, sensor), config)

    if st.button("GET LOCATION", type="primary", use_container_width=True, disabled=state.locating):
        with st.spinner("正在获取位置 ..."):
            asyncio.run(controller.get_location())

    if st.button("SAVE LOCATIONS TO FILE", use_container_width=True, disabled=not controller.can_save):
        with st.spinner("正在保存 ..."):
            asyncio.run(controller.save_locations())
        _show_alert(controller)

    if state.error_message:
        st.error(state.error_message)

    if state.current_position is not None:
        st.subheader("Current Location:")
        for line in current_position_lines(state.current_position):
            st.text(line)

    if not state.history.is_empty():
        st.subheader(f"Location History ({state.history.count()}):")
        with st.container(height=240):
            for row in history_rows(state.history.iterate(), config.tz_name):
                st.markdown(f"{row.label}  \n{row.coords}")
                st.divider()


if __name__ == "__main__":
    main()
