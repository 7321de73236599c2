"""Tests for protocol modules."""

import inspect
from typing import Protocol

from migrate_packages.models import PackageType
from migrate_packages.protocols import UploadStrategy
from migrate_packages.protocols.upload_protocol import UploadStrategy as StrategyProtocol
from migrate_packages.transfer import build_upload_strategies


def test_upload_strategy_import():
    """Test that UploadStrategy can be imported from protocols package."""
    assert UploadStrategy is StrategyProtocol


def test_upload_strategy_is_protocol():
    """Test that UploadStrategy is a Protocol type."""
    assert issubclass(StrategyProtocol, Protocol)  # type: ignore[arg-type]


def test_upload_strategy_interface():
    """Test that UploadStrategy defines the expected interface."""
    assert hasattr(StrategyProtocol, "upload")
    assert "spec" in inspect.signature(StrategyProtocol.upload).parameters


def test_strategies_implement_protocol(mock_target, fast_retry):
    """Test every built strategy provides the protocol's methods."""
    strategies = build_upload_strategies(mock_target, fast_retry)

    for package_type in PackageType:
        assert callable(getattr(strategies[package_type], "upload", None))
