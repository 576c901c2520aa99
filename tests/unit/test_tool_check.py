from __future__ import annotations

import logging
import sys

import pytest

from devstack.errors import ToolNotFoundError
from devstack.tool_check import TOOL_HINTS, check_tools, require_tool, tool_version


def test_require_tool_returns_path():
    assert require_tool("kubectl", which=lambda tool: "/usr/local/bin/kubectl") == "/usr/local/bin/kubectl"


def test_require_tool_missing_includes_hint():
    with pytest.raises(ToolNotFoundError) as excinfo:
        require_tool("kubectl", which=lambda tool: None)

    assert excinfo.value.hint == TOOL_HINTS["kubectl"]
    assert "kubectl CLI not found" in str(excinfo.value)


def test_require_tool_custom_hint():
    with pytest.raises(ToolNotFoundError, match="try harder"):
        require_tool("kargo", "try harder", which=lambda tool: None)


def test_check_tools_reports_each(caplog):
    caplog.set_level(logging.INFO, logger="devstack.tool_check")
    present = {"git": "/usr/bin/git"}

    status = check_tools(["git", "jq"], which=present.get)

    assert status == {"git": "/usr/bin/git", "jq": None}
    assert "✅ git" in caplog.text
    assert "❌ jq not found" in caplog.text
    assert "brew install jq" in caplog.text


def test_tool_version_first_line():
    assert tool_version(sys.executable).startswith("Python ")


def test_tool_version_missing_tool():
    assert tool_version("devstack-no-such-tool") is None
