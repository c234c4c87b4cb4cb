"""Dashboard statistics and chart data over the cached record list."""

import math
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import List

import plotly.graph_objects as go

from models import HealthRecord

WINDOW_DAYS = 7
MORNING_COLOR = "#f97316"
EVENING_COLOR = "#6366f1"
BM_COLORS = ["#6366f1", "#e2e8f0"]


@dataclass(frozen=True)
class WindowSummary:
    avg_morning: float = 0.0
    avg_evening: float = 0.0
    evening_minus_morning_avg: float = 0.0
    bm_rate: int = 0
    bm_days: int = 0
    total_days: int = 0

    def to_dict(self) -> dict:
        return {
            "avgMorning": self.avg_morning,
            "avgEvening": self.avg_evening,
            "eveningMinusMorningAvg": self.evening_minus_morning_avg,
            "bmRate": self.bm_rate,
            "bmDays": self.bm_days,
            "totalDays": self.total_days,
        }


@dataclass(frozen=True)
class BmSplit:
    with_bm: int = 0
    without_bm: int = 0


def round1(value: float) -> float:
    """Round half up to one decimal, the way the dashboard displays weights."""
    return float(Decimal(repr(value)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def percent(part: int, whole: int) -> int:
    if not whole:
        return 0
    return int(math.floor(100 * part / whole + 0.5))


def recent_window(records: List[HealthRecord], n: int = WINDOW_DAYS) -> List[HealthRecord]:
    """Most recent n records, oldest first. `records` is date descending."""
    return list(reversed(records[:n]))


def summary(window: List[HealthRecord]) -> WindowSummary:
    total = len(window)
    if total == 0:
        return WindowSummary()
    sum_m = sum(r.morning_weight for r in window)
    sum_e = sum(r.evening_weight for r in window)
    bm_days = sum(1 for r in window if r.has_bm)
    return WindowSummary(
        avg_morning=round1(sum_m / total),
        avg_evening=round1(sum_e / total),
        evening_minus_morning_avg=round1((sum_e - sum_m) / total),
        bm_rate=percent(bm_days, total),
        bm_days=bm_days,
        total_days=total,
    )


def bm_split(records: List[HealthRecord]) -> BmSplit:
    with_bm = sum(1 for r in records if r.has_bm)
    return BmSplit(with_bm=with_bm, without_bm=len(records) - with_bm)


# ============================================================
# Charts (plotly)
# ============================================================
def weight_trend_figure(window: List[HealthRecord]) -> go.Figure:
    dates = [r.date.isoformat() for r in window]
    fig = go.Figure()
    fig.add_trace(go.Scatter(
        x=dates, y=[r.morning_weight for r in window],
        mode="lines+markers", name="早晨体重", line=dict(color=MORNING_COLOR, width=3),
    ))
    fig.add_trace(go.Scatter(
        x=dates, y=[r.evening_weight for r in window],
        mode="lines+markers", name="晚上体重", line=dict(color=EVENING_COLOR, width=3),
    ))
    fig.update_layout(title="最近7天体重趋势", yaxis=dict(autorange=True), legend=dict(orientation="h"))
    return fig


def bm_split_figure(split: BmSplit) -> go.Figure:
    fig = go.Figure(go.Pie(
        labels=["有排便", "无排便"],
        values=[split.with_bm, split.without_bm],
        hole=0.6,
        marker=dict(colors=BM_COLORS),
        sort=False,
    ))
    fig.update_layout(title="排便情况统计")
    return fig


def dashboard(records: List[HealthRecord]) -> dict:
    if not records:
        return {
            "empty": True,
            "message": "开始记录您的每日体重和排便情况，我们将为您生成专业的趋势分析报告。",
            "totalRecords": 0,
        }
    window = recent_window(records)
    split = bm_split(records)
    return {
        "empty": False,
        "summary": summary(window).to_dict(),
        "totalRecords": len(records),
        "bmSplit": {"withBM": split.with_bm, "withoutBM": split.without_bm},
        "window": [r.to_dict() for r in window],
        "charts": {
            "weightTrend": weight_trend_figure(window).to_plotly_json(),
            "bmSplit": bm_split_figure(split).to_plotly_json(),
        },
    }
