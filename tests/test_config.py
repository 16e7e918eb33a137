"""Tests for srcverify.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from srcverify.config import ConfigError, SrcVerifyConfig, load_config


def test_load_config_returns_defaults_when_missing(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    assert isinstance(config, SrcVerifyConfig)
    assert config.root == tmp_path.resolve()
    assert config.tools.gpg == "gpg"
    assert config.tools.gpgv == "gpgv"
    assert config.classifier.signature_extensions == [".sig", ".sign"]
    assert config.classifier.keyring_extensions == [".gpg"]
    assert config.classifier.excluded_names == ["macros.gpg"]
    assert config.classifier.sniff_lines == 10
    assert config.verify.tmpdir is None
    assert config.verify.require_signatures is False


def test_load_config_parses_expected_fields(tmp_path: Path) -> None:
    config_file = tmp_path / ".srcverify.yml"
    config_file.write_text(
        """
tools:
  gpg: "/usr/bin/gpg2"
  gpgv: gpgv2
classifier:
  signature_extensions: [sig, .asc]
  keyring_extensions:
    - .gpg
    - .kbx
  excluded_names: []
  sniff_lines: 20
verify:
  tmpdir: "build/keyrings"
  require_signatures: yes
""",
        encoding="utf-8",
    )

    config = load_config(config_file)

    assert config.tools.gpg == "/usr/bin/gpg2"
    assert config.tools.gpgv == "gpgv2"
    assert config.classifier.signature_extensions == [".sig", ".asc"]
    assert config.classifier.keyring_extensions == [".gpg", ".kbx"]
    assert config.classifier.excluded_names == []
    assert config.classifier.sniff_lines == 20
    assert config.verify.tmpdir == (tmp_path / "build" / "keyrings").resolve()
    assert config.verify.require_signatures is True


def test_load_config_rejects_non_mapping(tmp_path: Path) -> None:
    (tmp_path / ".srcverify.yml").write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="mapping"):
        load_config(tmp_path)


def test_load_config_rejects_invalid_yaml(tmp_path: Path) -> None:
    (tmp_path / ".srcverify.yml").write_text("tools: [unclosed\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="Failed to parse"):
        load_config(tmp_path)


def test_load_config_rejects_non_positive_sniff_lines(tmp_path: Path) -> None:
    (tmp_path / ".srcverify.yml").write_text("classifier:\n  sniff_lines: 0\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="sniff_lines"):
        load_config(tmp_path)


def test_load_config_rejects_non_utf8_file(tmp_path: Path) -> None:
    (tmp_path / ".srcverify.yml").write_bytes(b"\xff\xfetools:\n")

    with pytest.raises(ConfigError, match="Failed to read .srcverify.yml"):
        load_config(tmp_path)


def test_load_config_rejects_unreadable_file(tmp_path: Path) -> None:
    (tmp_path / ".srcverify.yml").mkdir()

    with pytest.raises(ConfigError, match="Failed to read .srcverify.yml"):
        load_config(tmp_path)
