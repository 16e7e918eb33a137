"""Tests for srcverify.classifier."""

from __future__ import annotations

from pathlib import Path

import pytest

from srcverify.classifier import FileClassifier, read_leading_lines
from srcverify.config import ClassifierConfig
from srcverify.errors import ClassificationError
from srcverify.models import FileRole
from tests._fixtures.source_builder import ARMORED_PUBLIC_KEY, ARMORED_SIGNATURE, SourceBuilder


def test_classify_labels_each_file_with_one_role(source_builder: SourceBuilder) -> None:
    source_builder.write(
        {
            "pkg-1.0.tar.gz": b"\x1f\x8b\x08\x00binary archive",
            "pkg-1.0.tar.gz.sig": b"\x89\x02\x33binary signature",
            "pkg-1.0.tar.gz.asc": ARMORED_SIGNATURE,
            "upstream.gpg": b"\x99\x01\x0dbinary key",
            "KEYS": ARMORED_PUBLIC_KEY,
            "fix-build.patch": "--- a/Makefile\n+++ b/Makefile\n",
        }
    )
    classifier = FileClassifier()
    roles = {
        entry.source.name: entry.role
        for entry in classifier.classify_all(
            source_builder.declare(
                "pkg-1.0.tar.gz",
                "pkg-1.0.tar.gz.sig",
                "pkg-1.0.tar.gz.asc",
                "upstream.gpg",
                "KEYS",
                "fix-build.patch",
            )
        )
    }

    assert roles == {
        "pkg-1.0.tar.gz": FileRole.PLAIN_SOURCE,
        "pkg-1.0.tar.gz.sig": FileRole.SIGNATURE,
        "pkg-1.0.tar.gz.asc": FileRole.SIGNATURE,
        "upstream.gpg": FileRole.KEYRING,
        "KEYS": FileRole.KEYRING,
        "fix-build.patch": FileRole.PLAIN_SOURCE,
    }


def test_macro_file_is_never_a_keyring(source_builder: SourceBuilder) -> None:
    source_builder.write({"macros.gpg": ARMORED_PUBLIC_KEY})
    classifier = FileClassifier()

    assert classifier.classify(source_builder.path("macros.gpg")) is FileRole.PLAIN_SOURCE


def test_signature_extension_skips_content_inspection(source_builder: SourceBuilder) -> None:
    source_builder.write({"data.sig": ARMORED_PUBLIC_KEY})
    classifier = FileClassifier()

    assert classifier.classify(source_builder.path("data.sig")) is FileRole.SIGNATURE


def test_signature_marker_wins_over_keyring_extension(source_builder: SourceBuilder) -> None:
    source_builder.write({"release.gpg": ARMORED_SIGNATURE})
    classifier = FileClassifier()

    assert classifier.classify(source_builder.path("release.gpg")) is FileRole.SIGNATURE


def test_marker_beyond_sniff_window_is_ignored(source_builder: SourceBuilder) -> None:
    padding = "".join(f"line {index}\n" for index in range(10))
    source_builder.write({"notes.txt": padding + ARMORED_SIGNATURE})
    classifier = FileClassifier()

    assert classifier.classify(source_builder.path("notes.txt")) is FileRole.PLAIN_SOURCE


def test_conflicting_markers_are_rejected(source_builder: SourceBuilder) -> None:
    source_builder.write({"bundle.asc": ARMORED_PUBLIC_KEY + ARMORED_SIGNATURE})
    classifier = FileClassifier()

    with pytest.raises(ClassificationError) as excinfo:
        classifier.classify(source_builder.path("bundle.asc"))
    assert "bundle.asc" in str(excinfo.value)


def test_unreadable_file_falls_back_to_extension(tmp_path: Path) -> None:
    classifier = FileClassifier()

    assert classifier.classify(tmp_path / "missing.gpg") is FileRole.KEYRING
    assert classifier.classify(tmp_path / "missing.sign") is FileRole.SIGNATURE
    assert classifier.classify(tmp_path / "missing.tar.xz") is FileRole.PLAIN_SOURCE


def test_classification_is_cached_per_instance(source_builder: SourceBuilder) -> None:
    source_builder.write({"KEYS": ARMORED_PUBLIC_KEY})
    path = source_builder.path("KEYS")
    classifier = FileClassifier()

    assert classifier.classify(path) is FileRole.KEYRING
    path.write_text("no longer a key\n", encoding="utf-8")
    assert classifier.classify(path) is FileRole.KEYRING
    assert FileClassifier().classify(path) is FileRole.PLAIN_SOURCE


def test_custom_extensions_from_config(source_builder: SourceBuilder) -> None:
    source_builder.write({"archive.tar.minisig": b"opaque", "trusted.kbx": b"opaque"})
    classifier = FileClassifier(
        ClassifierConfig(
            signature_extensions=[".minisig"],
            keyring_extensions=[".kbx"],
            excluded_names=[],
        )
    )

    assert classifier.classify(source_builder.path("archive.tar.minisig")) is FileRole.SIGNATURE
    assert classifier.classify(source_builder.path("trusted.kbx")) is FileRole.KEYRING


def test_read_leading_lines_stops_at_eof(tmp_path: Path) -> None:
    path = tmp_path / "short.txt"
    path.write_bytes(b"one\ntwo\n")

    assert read_leading_lines(path, 10) == [b"one\n", b"two\n"]
