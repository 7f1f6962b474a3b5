"""Command-line interface for geo_logger.

Run:
    python -m geo_logger locate --count 3 --save
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from geo_logger.config import AppConfig, build_platform
from geo_logger.csv_io import load_track_readings
from geo_logger.display import current_position_lines, history_rows
from geo_logger.export import render_history
from geo_logger.models import DEFAULT_ALBUM, DEFAULT_TZ, Accuracy, HistoryEntry
from geo_logger.platform import DirectoryMediaLibrary, PositionSensor
from geo_logger.sensors import ReplayPositionSensor, SimulatedPositionSensor
from geo_logger.state import AppState, SessionController
from geo_logger.timeutils import iso_from_epoch_ms


def _build_sensor(args: argparse.Namespace) -> PositionSensor:
    if args.sensor == "replay":
        readings, summary = load_track_readings(args.csv)
        print(
            f"回放轨迹：parsed={summary.rows_parsed}, skipped={summary.rows_skipped}",
            file=sys.stderr,
            flush=True,
        )
        return ReplayPositionSensor(readings, loop=args.loop)
    return SimulatedPositionSensor(args.center_lat, args.center_lon, seed=args.seed)


def _config_from_args(args: argparse.Namespace) -> AppConfig:
    return AppConfig(
        tz_name=args.tz,
        documents_dir=Path(args.documents_dir),
        media_root=Path(args.media_root),
        album_name=args.album,
        accuracy=Accuracy[args.accuracy.upper()],
        acquire_timeout_seconds=args.timeout,
        cleanup_on_failure=args.cleanup_on_failure,
        allow_location=not args.deny_location,
        allow_media=not args.deny_media,
    ).validate()


async def _run_locate(controller: SessionController, count: int, interval: float, save: bool) -> int:
    state = controller.state
    failures = 0
    for i in range(count):
        if i > 0 and interval > 0:
            await asyncio.sleep(interval)
        ok = await controller.get_location()
        if not ok:
            failures += 1
            print(f"[{i + 1}/{count}] {state.error_message}", file=sys.stderr, flush=True)
            continue
        print(f"[{i + 1}/{count}] " + ", ".join(current_position_lines(state.current_position)))

    print()
    print(f"### Location History ({state.history.count()})")
    for row in history_rows(state.history.iterate(), controller.config.tz_name):
        print(f"{row.label}  {row.coords}")

    if save:
        alert = await controller.save_locations()
        print()
        print(f"### {alert.title}")
        print(alert.message)
        if state.last_export is not None and not alert.is_error:
            print(f"file={state.last_export.path}, album={state.last_export.album.directory}")
        if alert.is_error:
            return 1
    return 1 if failures == count else 0


def _cmd_locate(args: argparse.Namespace) -> int:
    config = _config_from_args(args)
    controller = SessionController(AppState(), build_platform(config, _build_sensor(args)), config)
    return asyncio.run(_run_locate(controller, max(1, int(args.count)), float(args.interval), args.save))


def _cmd_render(args: argparse.Namespace) -> int:
    readings, _ = load_track_readings(args.csv)
    # Recorded tracks have no separate capture instant; the sensor time stands in.
    entries = [
        HistoryEntry(reading=r, timestamp=iso_from_epoch_ms(r.timestamp_ms))
        for r in readings
    ]
    text = render_history(entries)
    if args.out:
        Path(args.out).write_text(text, encoding="utf-8")
        print(f"已导出：{args.out}（条数={len(entries)}）", file=sys.stderr)
    else:
        sys.stdout.write(text)
    return 0


def _cmd_album(args: argparse.Namespace) -> int:
    media = DirectoryMediaLibrary(args.media_root)
    album = asyncio.run(media.get_album(args.album))
    if album is None:
        print(f"相册不存在：{args.album!r}（media_root={args.media_root}）", file=sys.stderr)
        return 1
    names = media.album_assets(album)
    print(f"### {album.title} ({len(names)})")
    for name in names:
        print(name)
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="geo_logger", description="单次定位记录与导出（文本文件 -> 相册）")
    p.add_argument("-v", "--verbose", action="store_true", help="输出调试日志")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_loc = sub.add_parser("locate", help="获取位置（可多次），可选导出到相册")
    p_loc.add_argument("--count", type=int, default=1, help="获取位置的次数")
    p_loc.add_argument("--interval", type=float, default=0.0, help="两次获取之间的间隔（秒）")
    p_loc.add_argument("--sensor", type=str, default="simulate", choices=["simulate", "replay"], help="位置来源")
    p_loc.add_argument("--csv", type=str, default="Path.csv", help="replay 模式下的轨迹CSV")
    p_loc.add_argument("--loop", action="store_true", help="replay 回放完毕后从头开始")
    p_loc.add_argument("--center-lat", type=float, default=30.7456421, help="simulate 模式中心纬度")
    p_loc.add_argument("--center-lon", type=float, default=103.9284974, help="simulate 模式中心经度")
    p_loc.add_argument("--seed", type=int, default=0, help="simulate 模式随机种子")
    p_loc.add_argument(
        "--accuracy",
        type=str,
        default=Accuracy.HIGH.name.lower(),
        choices=[a.name.lower() for a in Accuracy],
        help="定位精度模式",
    )
    p_loc.add_argument("--timeout", type=float, default=None, help="定位超时（秒），默认不限")
    p_loc.add_argument("--tz", type=str, default=DEFAULT_TZ, help="显示用时区（IANA）")
    p_loc.add_argument("--save", action="store_true", help="获取后导出到相册")
    p_loc.add_argument("--documents-dir", type=str, default="documents", help="应用私有文档目录")
    p_loc.add_argument("--media-root", type=str, default="media", help="媒体库根目录")
    p_loc.add_argument("--album", type=str, default=DEFAULT_ALBUM, help="相册名")
    p_loc.add_argument("--cleanup-on-failure", action="store_true", help="登记资源失败时删除已写入的文件")
    p_loc.add_argument("--deny-location", action="store_true", help="模拟拒绝定位权限")
    p_loc.add_argument("--deny-media", action="store_true", help="模拟拒绝媒体库权限")
    p_loc.set_defaults(func=_cmd_locate)

    p_ren = sub.add_parser("render", help="把轨迹CSV渲染成导出文本格式")
    p_ren.add_argument("--csv", type=str, default="Path.csv", help="输入CSV路径")
    p_ren.add_argument("--out", type=str, default=None, help="输出文件（默认 stdout）")
    p_ren.set_defaults(func=_cmd_render)

    p_alb = sub.add_parser("album", help="列出相册中的文件")
    p_alb.add_argument("--media-root", type=str, default="media", help="媒体库根目录")
    p_alb.add_argument("--album", type=str, default=DEFAULT_ALBUM, help="相册名")
    p_alb.set_defaults(func=_cmd_album)

    return p


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint."""

    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        return int(args.func(args))
    except (ValueError, KeyError, OSError) as exc:
        print(f"错误：{exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
