"""
BAC-over-time graph. Produces an image file or returns data for a web frontend.
"""

from pathlib import Path
from typing import Dict, List, Optional

from stddrinks.analysis import LEGAL_LIMIT_BAC, SessionSummary, ThresholdStatus, closest_sample
from stddrinks.calculations import BacSample


def curve_data(samples: List[BacSample]) -> List[Dict]:
    """{time_ms, bac, label} dicts for any frontend."""
    return [s.to_dict() for s in samples]


def save_bac_graph(
    samples: List[BacSample],
    output_path: str = "bac_graph.png",
    summary: Optional[SessionSummary] = None,
    now_ms: Optional[float] = None,
    title: str = "Estimated BAC %",
) -> str:
    """
    Plot the BAC curve with matplotlib and save to file.
    Returns path to saved file. Requires: pip install matplotlib
    """
    try:
        import matplotlib
        matplotlib.use("Agg")
        import matplotlib.pyplot as plt
    except ImportError:
        raise ImportError("matplotlib is required for save_bac_graph. pip install matplotlib")

    if samples:
        start = samples[0].time_ms
        hours = [(s.time_ms - start) / 3_600_000 for s in samples]
        bacs = [s.bac for s in samples]
    else:
        start = 0.0
        hours, bacs = [0.0], [0.0]

    fig, ax = plt.subplots(figsize=(10, 5))
    ax.plot(hours, bacs, color="#2dd4bf", linewidth=2, label="BAC")
    ax.fill_between(hours, bacs, alpha=0.15, color="#2dd4bf")
    ax.axhline(y=LEGAL_LIMIT_BAC, color="#f97316", linestyle="--", linewidth=1, label="Limit (0.05%)")

    if summary is not None and summary.status == ThresholdStatus.OVER_THRESHOLD:
        x = (summary.crossing_time_ms - start) / 3_600_000
        marker_label = f"Below 0.05 at {summary.crossing_label}"
        if summary.is_projected:
            marker_label += " (projected)"
        ax.plot([x], [LEGAL_LIMIT_BAC], "o", color="#f97316", label=marker_label)

    if now_ms is not None:
        now = closest_sample(samples, now_ms)
        if now is not None:
            ax.plot([(now_ms - start) / 3_600_000], [now.bac], "o", color="#6366f1", label="Now")

    ax.set_xlabel("Hours from first drink")
    ax.set_ylabel("BAC (%)")
    ax.set_title(title)
    ax.legend(loc="upper right")
    ax.set_ylim(bottom=0, top=max([0.08] + bacs) * 1.05)
    ax.grid(True, alpha=0.3)
    if samples:
        ax.set_xticks([hours[0], hours[-1]], [samples[0].label, samples[-1].label])
    fig.tight_layout()
    Path(output_path).parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(output_path, dpi=150)
    plt.close(fig)
    return output_path
