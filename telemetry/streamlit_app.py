from __future__ import annotations

import argparse
import time

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import streamlit as st

from telemetry.logger import read_records


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(add_help=False)
    parser.add_argument(
        "--log-path",
        type=str,
        default="telemetry_logs/mapping.jsonl",
        help="Path to telemetry JSONL log file.",
    )
    return parser.parse_args()


def load_telemetry(path: str, max_rows: int = 2000) -> pd.DataFrame:
    records = read_records(path)
    if not records:
        return pd.DataFrame()
    df = pd.json_normalize(records)
    return df.tail(max_rows)


def main() -> None:
    args = parse_args()

    st.set_page_config(page_title="Grid Mapping Telemetry", layout="wide")
    st.title("Grid Mapping Telemetry Dashboard")

    status_placeholder = st.empty()

    col1, col2 = st.columns(2)
    map_fig = col1.empty()
    counts_fig = col2.empty()
    stats_placeholder = st.empty()

    refresh_interval = st.sidebar.slider("Refresh interval (s)", 0.5, 5.0, 1.0, 0.5)

    while True:
        df = load_telemetry(args.log_path)
        if df.empty:
            status_placeholder.info(f"Waiting for telemetry at '{args.log_path}'...")
            time.sleep(refresh_interval)
            continue

        status_placeholder.success(f"Streaming from '{args.log_path}' ({len(df)} records)")
        latest = df.iloc[-1]

        st.sidebar.subheader("Robot Pose")
        st.sidebar.write(
            f"x={latest.get('pose.x', 0.0):.2f}, "
            f"y={latest.get('pose.y', 0.0):.2f}, "
            f"heading={latest.get('pose.heading', 0.0):.2f}"
        )
        st.sidebar.write(
            f"v={latest.get('pose.v', 0.0):.2f}, "
            f"w={latest.get('pose.w', 0.0):.2f}"
        )

        # Path with the latest point cloud
        with map_fig.container():
            fig, ax = plt.subplots()
            if "pose.x" in df.columns and "pose.y" in df.columns:
                ax.plot(df["pose.x"], df["pose.y"], "-y", label="Path")
                ax.scatter([latest.get("pose.x", 0.0)], [latest.get("pose.y", 0.0)], c="b", label="Robot")
            points = latest.get("cloud.points", None)
            if isinstance(points, list) and points:
                cloud = np.asarray(points, dtype=float)
                ax.scatter(cloud[:, 0], cloud[:, 1], s=4, c="r", label="Point cloud")
            ax.set_aspect("equal", adjustable="box")
            ax.set_xlabel("x [m]")
            ax.set_ylabel("y [m]")
            ax.set_title("Robot Path")
            ax.legend(loc="upper right")
            map_fig.pyplot(fig)
            plt.close(fig)

        # Cell classification over time
        count_cols = ["grid.unknown", "grid.freespace", "grid.occupied"]
        existing = [c for c in count_cols if c in df.columns]
        if existing:
            with counts_fig.container():
                fig2, ax2 = plt.subplots()
                ticks = df["tick"].values if "tick" in df.columns else np.arange(len(df))
                for col in existing:
                    ax2.plot(ticks, df[col].values, label=col.split(".", 1)[1])
                ax2.set_title("Cell Counts")
                ax2.set_xlabel("Tick")
                ax2.legend(loc="upper right")
                counts_fig.pyplot(fig2)
                plt.close(fig2)

        coverage = latest.get("grid.coverage", None)
        step_time = latest.get("step_time", None)
        stats_text = "Mapping stats:\n"
        if coverage is not None:
            stats_text += f"- Coverage: {coverage:.1%}\n"
        if step_time is not None:
            stats_text += f"- Step time: {step_time * 1000.0:.2f} ms\n"
        stats_placeholder.text(stats_text)

        time.sleep(refresh_interval)


if __name__ == "__main__":
    main()
