"""画廊 HTML 片段与页面渲染。"""

from __future__ import annotations

from pathlib import Path

from jinja2 import Environment
from markupsafe import Markup

from media_gallery.core.config import SizeConfig
from media_gallery.core.exceptions import GalleryWriteError
from media_gallery.core.models import ConversionTask, DirectorySummary, MediaKind

_jinja_env = Environment(autoescape=True, keep_trailing_newline=True)
Template = _jinja_env.from_string

INDEX_FILENAME = "index.html"

IMAGE_TEMPLATE = Template(
    "<a href='{{ scale|urlencode }}'><img src='{{ thumbnail|urlencode }}' loading='lazy'/></a>"
)

VIDEO_TEMPLATE = Template(
    "<video poster='{{ thumbnail|urlencode }}' preload='none' controls><source src='{{ scale|urlencode }}'></video>"
)

DIRECTORY_TEMPLATE = Template("""\
<a class='folder' href='{{ dir.name|urlencode }}/{{ index }}'>\
{% if dir.thumbnail %}<img src='{{ dir.name|urlencode }}/{{ dir.thumbnail|urlencode }}' loading='lazy'/>{% endif %}\
<div>{{ dir.name }}\
{% if dir.total_images %}<span class='tag'>{{ dir.images }} + {{ dir.sub_images }} img</span>{% endif %}\
{% if dir.total_videos %}<span class='tag'>{{ dir.videos }} + {{ dir.sub_videos }} vid</span>{% endif %}\
{% if dir.directories %}<span class='tag'>{{ dir.directories }} dir</span>{% endif %}\
</div></a>""")

PAGE_TEMPLATE = Template("""\
<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>{{ title }}</title>
<style>
body { margin: 0; padding: 8px; background: #111; color: #ddd; font-family: sans-serif; }
.gallery { display: flex; flex-wrap: wrap; gap: 4px; }
.gallery img, .gallery video { width: {{ thumb_width }}px; height: {{ thumb_height }}px; object-fit: cover; display: block; }
.gallery .folder { position: relative; color: #fff; text-decoration: none; }
.gallery .folder div { position: absolute; bottom: 0; left: 0; right: 0; padding: 4px; background: rgba(0, 0, 0, 0.6); }
.gallery .tag { margin-left: 6px; font-size: 12px; color: #aaa; }
</style>
</head>
<body>
{% if parent_link %}<nav><a href="../{{ index }}">..</a></nav>{% endif %}
<div class="gallery">
{{ content }}
</div>
</body>
</html>
""")


def render_file(task: ConversionTask) -> Markup:
    """单个媒体文件的画廊条目；未知类型返回空片段。"""

    if task.kind is MediaKind.IMAGE:
        return Markup(IMAGE_TEMPLATE.render(scale=task.scale_name, thumbnail=task.thumbnail_name))
    if task.kind is MediaKind.VIDEO:
        return Markup(VIDEO_TEMPLATE.render(scale=task.scale_name, thumbnail=task.thumbnail_name))
    return Markup("")


def render_directory(summary: DirectorySummary) -> Markup:
    return Markup(DIRECTORY_TEMPLATE.render(dir=summary, index=INDEX_FILENAME))


def write_gallery_page(
    path: Path,
    content: str,
    thumbnail: SizeConfig,
    title: str = "",
    parent_link: bool = True,
) -> None:
    """把已渲染的条目写入完整页面。content 视为可信标记，不再转义。"""

    page = PAGE_TEMPLATE.render(
        title=title or path.parent.name,
        thumb_width=thumbnail.width,
        thumb_height=thumbnail.height,
        content=Markup(content),
        parent_link=parent_link,
        index=INDEX_FILENAME,
    )
    try:
        path.write_text(page, encoding="utf-8")
    except OSError as exc:
        raise GalleryWriteError(f"写入画廊页面失败: {path}") from exc
