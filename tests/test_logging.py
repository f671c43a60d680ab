"""Tests for logger naming."""

from __future__ import annotations

import logging

from receiptscan.runtime.logging import ROOT_LOGGER_NAME, get_logger, set_log_level


def test_package_modules_keep_their_name() -> None:
    assert get_logger("receiptscan.receipt.cached_receipt").name == "receiptscan.receipt.cached_receipt"


def test_foreign_names_are_nested_under_package() -> None:
    assert get_logger("tests.helpers").name == "receiptscan.tests.helpers"


def test_set_log_level_changes_namespace_level() -> None:
    root = logging.getLogger(ROOT_LOGGER_NAME)
    original = root.level
    try:
        set_log_level(logging.DEBUG)
        assert root.level == logging.DEBUG
    finally:
        set_log_level(original)


def test_debug_level_switches_to_line_number_format() -> None:
    root = logging.getLogger(ROOT_LOGGER_NAME)
    original = root.level
    try:
        set_log_level(logging.DEBUG)
        assert any("%(lineno)d" in (h.formatter._fmt or "") for h in root.handlers if h.formatter)
    finally:
        set_log_level(original)
