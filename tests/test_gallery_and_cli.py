"""测试画廊渲染、中断信号处理与命令行入口。"""

from __future__ import annotations

import signal
from pathlib import Path

from rich.progress import Progress
from typer.testing import CliRunner

from media_gallery.cli import main as cli_main
from media_gallery.core.config import SizeConfig
from media_gallery.core.models import ConversionCommand, ConversionOutcome, ConversionTask, DirectorySummary, MediaKind
from media_gallery.core.progress import ProgressUpdate
from media_gallery.core.shutdown import INTERRUPT_NOTICE, CancellationToken, ShutdownCoordinator
from media_gallery.processing.pipeline import build_gallery
from media_gallery.render.gallery import render_directory, render_file, write_gallery_page

runner = CliRunner()


def fake_runner(command: ConversionCommand) -> ConversionOutcome:
    command.target_path.write_text("converted")
    return ConversionOutcome(command=command, status="converted", returncode=0)


def test_render_image_and_video_entries(tmp_path: Path) -> None:
    image = render_file(ConversionTask(tmp_path / "a.jpg", MediaKind.IMAGE, "s_a.jpg", "t_a.jpg"))
    video = render_file(ConversionTask(tmp_path / "b.mov", MediaKind.VIDEO, "b.mp4", "b.mp4.jpg"))
    unknown = render_file(ConversionTask(tmp_path / "c.txt", MediaKind.UNKNOWN, "", ""))

    assert image == "<a href='s_a.jpg'><img src='t_a.jpg' loading='lazy'/></a>"
    assert "poster='b.mp4.jpg'" in video and "<source src='b.mp4'>" in video
    assert unknown == ""


def test_render_escapes_directory_names() -> None:
    html = render_directory(DirectorySummary(name="<b>{{ content }}", images=1))

    assert "<b>" not in html
    assert "<div>&lt;b&gt;{{ content }}" in html


def test_render_quotes_paths_in_links(tmp_path: Path) -> None:
    task = ConversionTask(tmp_path / "a#1?.jpg", MediaKind.IMAGE, "s_a#1?%.jpg", "t_a#1?%.jpg")

    html = render_file(task)

    assert "href='s_a%231%3F%25.jpg'" in html
    assert "src='t_a%231%3F%25.jpg'" in html

    summary = DirectorySummary(name="trip #2", sub_thumbnail="day 1/t_b.jpg", sub_images=1)
    html = render_directory(summary)

    assert "href='trip%20%232/index.html'" in html
    assert "src='trip%20%232/day%201/t_b.jpg'" in html


def test_render_directory_uses_representative_thumbnail() -> None:
    summary = DirectorySummary(name="trip", own_thumbnail="t_a.jpg", sub_thumbnail="day1/t_b.jpg", images=1, sub_images=1)
    summary.directories = 1

    html = render_directory(summary)

    assert "href='trip/index.html'" in html
    assert "src='trip/day1/t_b.jpg'" in html
    assert "1 + 1 img" in html
    assert "1 dir" in html


def test_render_directory_without_thumbnail_has_no_image() -> None:
    html = render_directory(DirectorySummary(name="clips", videos=2))

    assert "<img" not in html
    assert "2 + 0 vid" in html


def test_gallery_page_injects_thumbnail_size(tmp_path: Path) -> None:
    page_path = tmp_path / "index.html"

    write_gallery_page(page_path, "<p>BODY</p>", SizeConfig(123, 45), title="album", parent_link=False)

    page = page_path.read_text(encoding="utf-8")
    assert "width: 123px" in page and "height: 45px" in page
    assert "<p>BODY</p>" in page
    assert "<title>album</title>" in page
    assert "../index.html" not in page


def test_shutdown_coordinator_sets_token_once() -> None:
    token = CancellationToken()
    messages: list[str] = []
    previous = signal.getsignal(signal.SIGUSR1)

    with ShutdownCoordinator(token, notify=messages.append, signals=(signal.SIGUSR1,)):
        signal.raise_signal(signal.SIGUSR1)
        signal.raise_signal(signal.SIGUSR1)
        assert token.cancelled

    assert messages == [INTERRUPT_NOTICE]
    assert signal.getsignal(signal.SIGUSR1) == previous


def test_progress_callback_uses_single_task() -> None:
    progress = Progress(disable=True)
    callback = cli_main._build_progress_callback(progress)

    # 任务在首次回调前就已存在。
    assert len(progress.tasks) == 1

    callback(ProgressUpdate(submitted=1, completed=0))
    callback(ProgressUpdate(submitted=2, completed=1))

    [task] = progress.tasks
    assert task.total == 2
    assert task.completed == 1


def test_cli_builds_gallery(tmp_path: Path, monkeypatch) -> None:
    source = tmp_path / "root"
    output = tmp_path / "out"
    (source / "sub").mkdir(parents=True)
    (source / "a.jpg").write_bytes(b"img")
    (source / "sub" / "b.mp4").write_bytes(b"vid")

    def build_with_fake_runner(config, **kwargs):
        assert config.parallelism == 3
        assert config.thumbnail == SizeConfig(200, 100)
        assert ".webp" in config.extensions.image
        return build_gallery(config, runner=fake_runner, **kwargs)

    monkeypatch.setattr(cli_main, "build_gallery", build_with_fake_runner)

    result = runner.invoke(
        cli_main.app,
        ["-i", str(source), "-o", str(output), "-p", "3", "-x", "200", "-y", "100", "-image", "jpg,webp"],
    )

    assert result.exit_code == 0, result.output
    assert "1 张图片" in result.output and "1 个视频" in result.output
    assert (output / "index.html").exists()
    assert (output / "sub" / "index.html").exists()


def test_cli_tolerates_missing_encoder(tmp_path: Path) -> None:
    source = tmp_path / "root"
    source.mkdir()
    (source / "a.jpg").write_bytes(b"img")

    result = runner.invoke(
        cli_main.app,
        ["-i", str(source), "-o", str(tmp_path / "out"), "--image-tool", "media-gallery-missing-encoder"],
    )

    assert result.exit_code == 0, result.output
    assert "失败 2 次" in result.output
    assert (tmp_path / "out" / "index.html").exists()


def test_cli_requires_output(tmp_path: Path) -> None:
    result = runner.invoke(cli_main.app, ["-i", str(tmp_path)])

    assert result.exit_code == 2


def test_cli_reports_fatal_error(tmp_path: Path) -> None:
    source = tmp_path / "root"
    source.mkdir()

    result = runner.invoke(cli_main.app, ["-i", str(source), "-o", str(source / "nested")])

    assert result.exit_code == 1
    assert "错误" in result.output
