"""Tests for proxy configuration models and YAML loading."""

import pytest
from pydantic import ValidationError

from s3proxy.config import BucketConfig, ProxyConfig, load_config


class TestBucketConfig:
    def test_defaults(self):
        bucket = BucketConfig(name="assets")

        assert bucket.region == "us-east-1"
        assert bucket.path == "/"
        assert bucket.key_prefix == ""
        assert bucket.page_size == 1000
        assert bucket.recursive is True

    @pytest.mark.parametrize(("raw", "expected"), [("assets", "/assets"), ("/assets/", "/assets"), ("", "/")])
    def test_path_is_normalized(self, raw, expected):
        assert BucketConfig(name="b", path=raw).path == expected

    def test_empty_name_rejected(self):
        with pytest.raises(ValidationError):
            BucketConfig(name="  ")

    @pytest.mark.parametrize("page_size", [0, 1001])
    def test_page_size_bounds(self, page_size):
        with pytest.raises(ValidationError):
            BucketConfig(name="b", page_size=page_size)


class TestProxyConfig:
    def test_duplicate_mounts_rejected(self):
        with pytest.raises(ValidationError, match="duplicate mount path"):
            ProxyConfig(buckets=[BucketConfig(name="a", path="/x"), BucketConfig(name="b", path="/x/")])

    def test_unknown_bind_type_rejected(self):
        with pytest.raises(ValidationError):
            ProxyConfig(bind_type="udp")

    @pytest.mark.parametrize(
        ("bind", "expected"),
        [
            (":8080", {"host": "0.0.0.0", "port": 8080}),
            ("127.0.0.1:9000", {"host": "127.0.0.1", "port": 9000}),
            ("[::1]:8081", {"host": "::1", "port": 8081}),
        ],
    )
    def test_tcp_bind_options(self, bind, expected):
        assert ProxyConfig(bind=bind).uvicorn_bind_options() == expected

    def test_unix_bind_options(self):
        config = ProxyConfig(bind="/run/s3proxy.sock", bind_type="unix")
        assert config.uvicorn_bind_options() == {"uds": "/run/s3proxy.sock"}

    def test_invalid_tcp_bind(self):
        with pytest.raises(ValueError, match="invalid tcp bind address"):
            ProxyConfig(bind="localhost").uvicorn_bind_options()


class TestLoadConfig:
    def test_loads_bucket_list(self, tmp_path):
        config_file = tmp_path / "buckets.yaml"
        config_file.write_text(
            "bind: ':9000'\n"
            "buckets:\n"
            "  - name: assets\n"
            "    region: eu-west-1\n"
            "    path: /assets\n"
            "  - name: docs\n"
            "    key_prefix: site/\n"
            "    recursive: false\n"
        )

        config = load_config(config_file)

        assert config.bind == ":9000"
        assert [b.name for b in config.buckets] == ["assets", "docs"]
        assert config.buckets[0].region == "eu-west-1"
        assert config.buckets[1].recursive is False

    def test_empty_file_gives_defaults(self, tmp_path):
        config_file = tmp_path / "empty.yaml"
        config_file.write_text("")

        config = load_config(config_file)

        assert config.buckets == []
        assert config.bind == ":8080"

    def test_non_mapping_rejected(self, tmp_path):
        config_file = tmp_path / "list.yaml"
        config_file.write_text("- a\n- b\n")

        with pytest.raises(ValueError, match="must be a mapping"):
            load_config(config_file)
