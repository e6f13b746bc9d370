"""
YouTube attribution.

Leads carry the video they came from in `utm_content`; sales calls only
carry the prospect's name. Calls are joined to leads by lowercased full
name and the results are grouped per video ID.
"""
import logging
from dataclasses import asdict, dataclass
from typing import Dict, Iterable, List, Optional
from urllib.parse import quote

from core.aggregation import safe_divide
from core.config import config
from core.models import Lead, SalesCall

logger = logging.getLogger(__name__)

SORT_KEYS = ("aov", "cash_call", "cash_app", "cash_optin")


def extract_video_id(url: Optional[str]) -> str:
    """
    Video ID from a YouTube URL.

    Handles youtu.be/<id> and ...?v=<id>; any other input is assumed to
    already be an ID and is returned unchanged.
    """
    if not url:
        return ""
    url = url.strip()
    if "youtu.be/" in url:
        return url.split("youtu.be/", 1)[1].split("?")[0].split("&")[0]
    if "v=" in url:
        return url.split("v=", 1)[1].split("&")[0].split("#")[0]
    return url


def build_tracking_link(
    base_url: Optional[str],
    video_id: Optional[str] = None,
    medium: Optional[str] = None,
) -> str:
    """
    Landing-page URL tagged with YouTube UTM parameters.

    Uses '&' when the base URL already has a query string. utm_content is
    left out when there is no video ID.
    """
    settings = config.attribution
    target = (base_url or "").strip() or settings.default_landing_url
    separator = "&" if "?" in target else "?"
    link = f"{target}{separator}utm_source={settings.utm_source}&utm_medium={medium or settings.utm_medium}"
    if video_id:
        link += f"&utm_content={quote(video_id, safe='-_')}"
    return link


def _name_key(name: str) -> str:
    return " ".join((name or "").lower().split())


@dataclass
class VideoStats:
    """Funnel counters for one video."""
    video_id: str
    leads: int = 0
    qualified: int = 0
    calls: int = 0
    taken: int = 0
    closed: int = 0
    cash: float = 0.0
    revenue: float = 0.0

    @property
    def show_rate(self) -> float:
        return safe_divide(self.taken, self.calls) * 100

    @property
    def close_rate(self) -> float:
        return safe_divide(self.closed, self.taken) * 100

    @property
    def aov(self) -> float:
        return safe_divide(self.cash, self.closed)

    @property
    def cash_per_call(self) -> float:
        return safe_divide(self.cash, self.calls)

    @property
    def cash_per_application(self) -> float:
        return safe_divide(self.cash, self.qualified)

    @property
    def cash_per_optin(self) -> float:
        return safe_divide(self.cash, self.leads)

    def add(self, other: "VideoStats") -> None:
        self.leads += other.leads
        self.qualified += other.qualified
        self.calls += other.calls
        self.taken += other.taken
        self.closed += other.closed
        self.cash += other.cash
        self.revenue += other.revenue

    def to_dict(self) -> Dict:
        data = asdict(self)
        data.update({
            "show_rate": round(self.show_rate, 1),
            "close_rate": round(self.close_rate, 1),
            "aov": round(self.aov, 2),
            "cash_per_call": round(self.cash_per_call, 2),
            "cash_per_application": round(self.cash_per_application, 2),
            "cash_per_optin": round(self.cash_per_optin, 2),
        })
        return data


def attribute_calls(leads: Iterable[Lead], calls: Iterable[SalesCall]) -> List[VideoStats]:
    """
    Per-video funnel stats.

    Only leads whose source is youtube and that carry a video ID take part.
    A call counts for the video of the lead with the same (case-insensitive)
    name; calls matching no such lead are ignored. When several leads share
    a name the most recent row wins.
    """
    source = config.attribution.utm_source.lower()
    stats: Dict[str, VideoStats] = {}
    video_by_name: Dict[str, str] = {}

    for lead in leads:
        if lead.source.strip().lower() != source:
            continue
        video_id = extract_video_id(lead.utm_content)
        if not video_id:
            continue
        entry = stats.setdefault(video_id, VideoStats(video_id))
        entry.leads += 1
        if lead.is_qualified:
            entry.qualified += 1
        name = _name_key(lead.full_name)
        if name:
            video_by_name[name] = video_id

    unmatched = 0
    for call in calls:
        video_id = video_by_name.get(_name_key(call.prospect))
        if video_id is None:
            unmatched += 1
            continue
        entry = stats[video_id]
        entry.cash += call.cash
        entry.revenue += call.revenue
        if not call.is_appointment:
            continue
        entry.calls += 1
        if call.is_taken:
            entry.taken += 1
        if call.is_closed:
            entry.closed += 1

    logger.debug(
        f"Attributed calls to {len(stats)} videos",
        extra={"videos": len(stats), "unmatched_calls": unmatched},
    )
    return list(stats.values())


def sort_video_stats(stats: Iterable[VideoStats], sort: Optional[str] = None) -> List[VideoStats]:
    """Order videos by a metric (descending); unknown keys use cash."""
    metric = {
        "aov": lambda s: s.aov,
        "cash_call": lambda s: s.cash_per_call,
        "cash_app": lambda s: s.cash_per_application,
        "cash_optin": lambda s: s.cash_per_optin,
    }.get(sort or "", lambda s: s.cash)
    return sorted(stats, key=lambda s: (metric(s), s.cash), reverse=True)


def totals(stats: Iterable[VideoStats]) -> VideoStats:
    """Sum of every video's counters."""
    total = VideoStats("total")
    for entry in stats:
        total.add(entry)
    return total
