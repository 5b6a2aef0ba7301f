"""Generate a self-contained HTML page from a rendered timeline frame.

Chapters are absolutely positioned by their placement; the disclosed globe's
points are laid out with CSS transforms (translate + scale, opacity, blur).
A small script keeps the globe turning from the embedded sphere points.
"""

import html
import json
import logging
from pathlib import Path

from chronoglobe.config import Config
from chronoglobe.globe_view import GlobeFrame, GlobeView
from chronoglobe.models import ViewMode
from chronoglobe.timeline_view import ChapterCard, TimelineFrame

logger = logging.getLogger(__name__)


def generate_timeline_html(
    frame: TimelineFrame,
    output_path: str | Path,
    config: Config | None = None,
    sphere_points: list[dict] | None = None,
) -> Path:
    """Write the timeline frame as a static HTML page. Returns the path."""
    config = config or Config()
    page = render_timeline_html(frame, config, sphere_points or [])
    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(page)
    logger.info("Timeline written to %s (%d chapters)", path, len(frame.cards))
    return path


def sphere_payload(globe: GlobeView | None) -> list[dict]:
    """Unrotated sphere points of the mounted globe, for the page script."""
    if globe is None:
        return []
    return [
        {**point.model_dump(), "memory_id": memory.id, "title": memory.display_title}
        for point, memory in zip(globe.points, globe.plotted)
    ]


def _card_html(card: ChapterCard) -> str:
    p = card.placement
    title = html.escape(card.chapter.title or "")
    thumbs = "".join(
        f'<div class="thumb" title="{html.escape(m.display_title)}">'
        + (f'<img src="{html.escape(m.thumbnail_url)}" alt="">' if m.thumbnail_url else "")
        + "</div>"
        for m in card.thumbnails
    )
    if card.overflow_count:
        thumbs += f'<div class="thumb more">+{card.overflow_count}</div>'
    state = card.state.value
    return f"""<div class="chapter {state}" data-chapter="{html.escape(p.chapter_id)}"
     style="left:{p.horizontal_offset_pct:.2f}%; top:{card.top_px}px;">
  <div class="stem"></div>
  <div class="blob" style="width:{p.blob_size_px:.0f}px; height:{p.blob_size_px:.0f}px;">
    <span class="badge">{p.memory_count}</span>
  </div>
  <div class="span" style="width:{p.horizontal_width_pct:.2f}vw;"></div>
  <div class="card">
    <div class="card-title">{title}</div>
    <div class="card-dates">{html.escape(card.date_label)}</div>
    <div class="thumbs">{thumbs}</div>
  </div>
</div>"""


def _globe_html(globe: GlobeFrame | None, size: int) -> str:
    if globe is None:
        return ""
    title = html.escape(globe.title)
    if globe.empty_message:
        body = f'<div class="empty">{html.escape(globe.empty_message)}</div>'
    elif globe.mode == ViewMode.LIST:
        rows = "".join(
            f'<li data-memory="{html.escape(m.id)}">{html.escape(m.display_title)}'
            f'<span class="when">{html.escape((m.created_at or "")[:10])}</span></li>'
            for m in globe.list_items
        )
        body = f'<ul class="memory-list">{rows}</ul>'
    else:
        half = size / 2
        points = "".join(
            f'<div class="point" data-memory="{html.escape(item.memory.id)}" '
            f'data-index="{item.point.index}" title="{html.escape(item.memory.display_title)}" '
            f'style="transform: translate({half + item.point.x:.1f}px, {half + item.point.y:.1f}px) '
            f'scale({item.point.scale:.3f}); opacity:{item.point.opacity:.3f}; '
            f'filter: blur({item.point.blur:.2f}px); z-index:{int(item.point.z + 1000)};"></div>'
            for item in globe.items
        )
        more = f'<div class="more-count">+{globe.unplotted_count}</div>' if globe.unplotted_count else ""
        body = f'<div class="globe" style="width:{size}px; height:{size}px;">{points}</div>{more}'
    return f"""<div class="disclosure" data-chapter="{html.escape(globe.chapter_id)}">
  <h4>{title}</h4>
  <p class="subtitle">{globe.memory_count} {"memory" if globe.memory_count == 1 else "memories"}</p>
  {body}
</div>"""


def render_timeline_html(frame: TimelineFrame, config: Config, sphere_points: list[dict]) -> str:
    size = config.render.globe_size_px
    markers = "".join(
        f'<div class="marker"><div class="tick"></div><span>{html.escape(m.label)}</span></div>'
        for m in frame.markers
    )
    cards = "\n".join(_card_html(c) for c in frame.cards)
    depth = max((c.top_px for c in frame.cards), default=0) + 400
    rotation = frame.disclosed.rotation.model_dump() if frame.disclosed else {}

    return f"""<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8">
<meta name="viewport" content="width=device-width, initial-scale=1.0">
<title>Your Life Timeline</title>
<style>
  * {{ margin: 0; padding: 0; box-sizing: border-box; }}
  body {{ font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
         background: {config.render.background}; color: #c9d1d9; padding: 20px; }}
  h1 {{ color: #58a6ff; margin-bottom: 4px; }}
  .subtitle {{ color: #8b949e; margin-bottom: 16px; font-size: 14px; }}
  .axis {{ height: 4px; background: #30363d; border-radius: 2px; }}
  .markers {{ display: flex; justify-content: space-between; }}
  .marker {{ display: flex; flex-direction: column; align-items: center; font-size: 11px; color: #8b949e; }}
  .tick {{ width: 8px; height: 8px; border-radius: 50%; background: #8b949e; margin-top: -6px; }}
  .lane {{ position: relative; min-height: {depth}px; margin-top: 24px; }}
  .chapter {{ position: absolute; width: 220px; }}
  .stem {{ width: 2px; height: 24px; background: #8b949e; margin-left: 20px; }}
  .blob {{ border-radius: 50%; background: #1f6feb55; border: 2px solid #58a6ff;
           display: flex; align-items: center; justify-content: center; cursor: pointer; }}
  .chapter.disclosed .blob {{ background: #58a6ffaa; }}
  .badge {{ font-size: 12px; font-weight: 700; color: #fff; }}
  .span {{ height: 3px; background: #58a6ff44; margin: 4px 0; }}
  .card {{ background: #161b22; border: 1px solid #30363d; border-radius: 6px; padding: 8px 10px; }}
  .card-title {{ font-weight: 600; font-size: 14px; }}
  .card-dates {{ font-size: 11px; color: #8b949e; }}
  .thumbs {{ display: grid; grid-template-columns: repeat(5, 1fr); gap: 2px; margin-top: 6px; }}
  .thumb {{ aspect-ratio: 1; background: #30363d; border-radius: 3px; overflow: hidden;
            font-size: 10px; display: flex; align-items: center; justify-content: center; }}
  .thumb img {{ width: 100%; height: 100%; object-fit: cover; }}
  .disclosure {{ position: fixed; right: 24px; top: 24px; background: #161b22ee;
                 border: 1px solid #30363d; border-radius: 12px; padding: 12px; }}
  .globe {{ position: relative; }}
  .point {{ position: absolute; left: -14px; top: -14px; width: 28px; height: 28px;
            border-radius: 50%; background: {config.render.point_color}; cursor: pointer; }}
  .memory-list {{ list-style: none; max-height: {size}px; overflow-y: auto; font-size: 13px; }}
  .memory-list li {{ padding: 4px 0; border-bottom: 1px solid #21262d; }}
  .when {{ color: #8b949e; margin-left: 8px; font-size: 11px; }}
  .empty, .more-count {{ color: #8b949e; font-size: 12px; }}
</style>
</head>
<body>

<h1>Your Life Timeline</h1>
<p class="subtitle">{frame.birth_year} - {frame.current_year} &middot; {frame.current_year - frame.birth_year} years
  &middot; {html.escape(frame.zoom_label)} &middot; {html.escape(frame.summary)}</p>

<div class="axis"></div>
<div class="markers">{markers}</div>

<div class="lane">
{cards}
</div>

{_globe_html(frame.disclosed, size)}

<script>
const spherePoints = {json.dumps(sphere_points)};
const rotation = {json.dumps(rotation)};
const autoStep = {config.globe.auto_yaw_step};
const cullZ = {config.globe.cull_z};
const depthRange = {config.globe.max_radius};
const half = {size / 2};

(() => {{
  const globe = document.querySelector('.globe');
  if (!globe || !spherePoints.length) return;
  let yaw = rotation.yaw || 0, pitch = rotation.pitch || 0, paused = false;
  globe.addEventListener('mouseover', (e) => {{ if (e.target.classList.contains('point')) paused = true; }});
  globe.addEventListener('mouseout', (e) => {{ if (e.target.classList.contains('point')) paused = false; }});
  const nodes = {{}};
  globe.querySelectorAll('.point').forEach((el) => {{ nodes[el.dataset.index] = el; }});
  spherePoints.forEach((p, i) => {{
    if (nodes[i]) return;
    const el = document.createElement('div');
    el.className = 'point';
    el.dataset.index = i;
    el.dataset.memory = p.memory_id;
    el.title = p.title;
    el.style.display = 'none';
    globe.appendChild(el);
    nodes[i] = el;
  }});
  const frame = () => {{
    if (!paused) yaw += autoStep;
    const cy = Math.cos(yaw), sy = Math.sin(yaw), cp = Math.cos(pitch), sp = Math.sin(pitch);
    spherePoints.forEach((p, i) => {{
      const el = nodes[i];
      if (!el) return;
      const x1 = p.x * cy - p.z * sy, z1 = p.x * sy + p.z * cy;
      const y2 = p.y * cp - z1 * sp, z2 = p.y * sp + z1 * cp;
      if (z2 < cullZ) {{ el.style.display = 'none'; return; }}
      const t = Math.min(1, Math.max(0, (z2 + depthRange) / (2 * depthRange)));
      el.style.display = '';
      el.style.transform = `translate(${{half + x1}}px, ${{half + y2}}px) scale(${{p.scale * (0.6 + 0.6 * t)}})`;
      el.style.opacity = 0.35 + 0.65 * t;
      el.style.filter = `blur(${{(1 - t) * {config.globe.max_blur_px}}}px)`;
      el.style.zIndex = Math.round(z2 + 1000);
    }});
    requestAnimationFrame(frame);
  }};
  requestAnimationFrame(frame);
}})();
</script>

</body>
</html>"""
