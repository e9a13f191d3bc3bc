"""
Unit tests for volume to configuration source resolution.
"""

from config_version_webhook.models.sources import SourceRef
from config_version_webhook.models.workload import Volume
from config_version_webhook.services.volume_resolver import resolve_volume_sources


def _volumes(*raw):
    return [Volume.model_validate(v) for v in raw]


class TestResolveVolumeSources:
    """Tests for resolve_volume_sources."""

    def test_config_maps_and_secrets_in_declaration_order(self):
        volumes = _volumes(
            {"name": "a", "secret": {"secretName": "db-creds"}},
            {"name": "b", "configMap": {"name": "app-cfg"}},
            {"name": "c", "configMap": {"name": "feature-flags"}},
        )

        assert resolve_volume_sources(volumes) == [
            SourceRef("secret", "db-creds"),
            SourceRef("configmap", "app-cfg"),
            SourceRef("configmap", "feature-flags"),
        ]

    def test_other_volume_types_are_skipped(self):
        volumes = _volumes(
            {"name": "scratch", "emptyDir": {}},
            {"name": "cfg", "configMap": {"name": "app-cfg"}},
            {"name": "data", "persistentVolumeClaim": {"claimName": "data"}},
        )

        assert resolve_volume_sources(volumes) == [SourceRef("configmap", "app-cfg")]

    def test_no_volumes(self):
        assert resolve_volume_sources(None) == []
        assert resolve_volume_sources([]) == []

    def test_marker_keys(self):
        sources = resolve_volume_sources(
            _volumes(
                {"name": "cfg", "configMap": {"name": "app-cfg"}},
                {"name": "sec", "secret": {"secretName": "tls"}},
            )
        )

        assert [source.marker_key for source in sources] == ["ccm-app-cfg", "cs-tls"]
