"""测试媒体类型识别、输出文件名推导与扩展名配置解析。"""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from media_gallery.core.classifier import build_task, classify, derive_output_names
from media_gallery.core.config import ExtensionConfig, default_parallelism, parse_extensions
from media_gallery.core.models import MediaKind

IMAGES = parse_extensions("jpg,jpeg,gif,png,heic")
VIDEOS = parse_extensions("mp4,avi,mov")
CONVERT = parse_extensions("heic")


def test_parse_extensions_normalizes_items() -> None:
    assert parse_extensions("jpg, .PNG,,heic ") == frozenset({".jpg", ".png", ".heic"})
    assert parse_extensions(["Mov", ""]) == frozenset({".mov"})
    assert parse_extensions("") == frozenset()


def test_default_parallelism_uses_available_cores(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(os, "sched_getaffinity", lambda pid: {0, 2, 5}, raising=False)
    monkeypatch.setattr(os, "cpu_count", lambda: 64)

    assert default_parallelism() == 3


def test_default_parallelism_falls_back_to_cpu_count(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delattr(os, "sched_getaffinity", raising=False)
    monkeypatch.setattr(os, "cpu_count", lambda: None)

    assert default_parallelism() == 1


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("a.jpg", MediaKind.IMAGE),
        ("photo.heic", MediaKind.IMAGE),
        ("clip.mov", MediaKind.VIDEO),
        ("notes.txt", MediaKind.UNKNOWN),
        ("jpg", MediaKind.UNKNOWN),
        ("", MediaKind.UNKNOWN),
    ],
)
def test_classify_by_suffix(name: str, expected: MediaKind) -> None:
    assert classify(name, IMAGES, VIDEOS) is expected


@pytest.mark.parametrize("name", ["a.jpg", "clip.mov", "readme.md", "Photo.Heic"])
def test_classify_ignores_letter_case(name: str) -> None:
    expected = classify(name, IMAGES, VIDEOS)
    assert classify(name.upper(), IMAGES, VIDEOS) is expected
    assert classify(name.lower(), IMAGES, VIDEOS) is expected


def test_image_names_use_prefixes() -> None:
    assert derive_output_names("a.jpg", MediaKind.IMAGE, CONVERT) == ("s_a.jpg", "t_a.jpg")


def test_heic_is_renamed_to_jpeg() -> None:
    assert derive_output_names("photo.heic", MediaKind.IMAGE, CONVERT) == ("s_photo.jpg", "t_photo.jpg")
    assert derive_output_names("photo.HEIC", MediaKind.IMAGE, CONVERT) == ("s_photo.jpg", "t_photo.jpg")


def test_heic_kept_when_not_configured_for_conversion() -> None:
    assert derive_output_names("photo.heic", MediaKind.IMAGE, frozenset()) == ("s_photo.heic", "t_photo.heic")


def test_video_names_are_normalized_to_mp4() -> None:
    assert derive_output_names("b.mp4", MediaKind.VIDEO, CONVERT) == ("b.mp4", "b.mp4.jpg")
    assert derive_output_names("holiday.2019.MOV", MediaKind.VIDEO, CONVERT) == (
        "holiday.2019.mp4",
        "holiday.2019.mp4.jpg",
    )


def test_unknown_has_no_outputs() -> None:
    assert derive_output_names("notes.txt", MediaKind.UNKNOWN, CONVERT) == ("", "")


def test_build_task_combines_classification_and_names(tmp_path: Path) -> None:
    source = tmp_path / "IMG_0001.HEIC"
    task = build_task(source, ExtensionConfig())

    assert task.source_path == source
    assert task.kind is MediaKind.IMAGE
    assert task.scale_name == "s_IMG_0001.jpg"
    assert task.thumbnail_name == "t_IMG_0001.jpg"
