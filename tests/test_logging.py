"""Tests for srcverify.logging."""

from __future__ import annotations

import io
from pathlib import Path

from srcverify.logging import configure_logging, get_logger, log_subject


def test_records_inside_subject_carry_file_name() -> None:
    stream = io.StringIO()
    configure_logging(stream=stream)
    logger = get_logger("executor")

    with log_subject("pkg.tar.sig"):
        logger.info("signature does not verify")
    logger.info("done")

    lines = stream.getvalue().splitlines()
    assert lines == [
        "[srcverify] INFO pkg.tar.sig: signature does not verify",
        "[srcverify] INFO done",
    ]


def test_reconfiguring_replaces_handlers(tmp_path: Path) -> None:
    first = io.StringIO()
    second = io.StringIO()
    log_file = tmp_path / "srcverify.log"

    configure_logging(stream=first)
    logger = configure_logging(verbose=True, stream=second, log_file=log_file)
    get_logger("planner").debug("Paired %s", "pkg.tar.sig")

    assert first.getvalue() == ""
    assert "DEBUG Paired pkg.tar.sig" in second.getvalue()
    assert len(logger.handlers) == 2
    for handler in logger.handlers:
        handler.flush()
    assert "srcverify.planner: Paired pkg.tar.sig" in log_file.read_text(encoding="utf-8")
