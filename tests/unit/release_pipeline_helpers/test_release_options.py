from __future__ import annotations

import pytest

from devstack.errors import UsageError
from devstack.release_pipeline_helpers import ReleaseDefaults, get_release_defaults, parse_release_args


class TestParseReleaseArgs:
    def test_version_only_uses_defaults(self):
        options = parse_release_args(["1.0.0"])

        assert options.version == "1.0.0"
        assert not options.trigger_kargo
        assert not options.skip_build
        assert options.local_tag == "backstage:1.0.0"
        assert options.full_image == "gitea.cnoe.localtest.me:8443/giteaadmin/backstage:1.0.0"

    def test_flags_in_any_position(self):
        options = parse_release_args(["--skip-build", "latest", "--trigger-kargo"])

        assert options.version == "latest"
        assert options.skip_build
        assert options.trigger_kargo

    def test_overrides(self):
        options = parse_release_args(["--registry", "registry.local:5000", "--owner", "team", "--image", "portal", "2.1.0"])

        assert options.full_image == "registry.local:5000/team/portal:2.1.0"

    def test_missing_version(self):
        with pytest.raises(UsageError, match="VERSION is required") as excinfo:
            parse_release_args(["--trigger-kargo"])

        assert excinfo.value.exit_code == 1
        assert "--help" in excinfo.value.usage_hint

    def test_unknown_option(self):
        with pytest.raises(UsageError, match="Unknown option: --force"):
            parse_release_args(["--force", "1.0.0"])

    def test_unexpected_positional(self):
        with pytest.raises(UsageError, match="Unexpected argument: extra"):
            parse_release_args(["1.0.0", "extra"])

    def test_help_exits_zero(self, capsys):
        with pytest.raises(SystemExit) as excinfo:
            parse_release_args(["--help"])

        assert excinfo.value.code == 0
        assert "--trigger-kargo" in capsys.readouterr().out


def test_defaults_read_environment(monkeypatch):
    monkeypatch.setenv("DEVSTACK_REGISTRY_HOST", "registry.example:443")
    monkeypatch.setenv("DEVSTACK_KARGO_NAMESPACE", "kargo-dev")

    defaults = get_release_defaults()

    assert defaults == ReleaseDefaults(registry_host="registry.example:443", namespace="kargo-dev")
    options = parse_release_args(["1.0.0"], defaults)
    assert options.registry_host == "registry.example:443"
    assert options.namespace == "kargo-dev"
