"""Tests for msk.config handling."""

import pytest

from cku_sizing.config import MSKConfig, load_msk_config, parse_properties, to_jmx_endpoints
from cku_sizing.errors import ConfigurationError


class TestParseProperties:
    def test_skips_comments_and_blank_lines(self):
        text = "# comment\n\nbootstrap.servers=b-1:9092\n  # indented comment\nnot a property\n"
        assert parse_properties(text) == {"bootstrap.servers": "b-1:9092"}

    def test_strips_spaces_and_quotes(self):
        text = "bootstrap.servers = \"b-1:9092, b-2:9092\"\naws.region='eu-west-1'\n"
        assert parse_properties(text) == {"bootstrap.servers": "b-1:9092,b-2:9092", "aws.region": "eu-west-1"}

    def test_value_may_contain_equals(self):
        assert parse_properties("key=a=b") == {"key": "a=b"}


class TestLoadMskConfig:
    def test_full_file(self, tmp_path):
        path = tmp_path / "msk.config"
        path.write_text(
            "bootstrap.servers=b-1.kafka:9092,b-2.kafka:9092\n"
            "cluster.arn=arn:aws:kafka:eu-west-1:123:cluster/prod/abc\n"
            "aws.region=eu-west-1\n"
            "logging.verbose=TRUE\n"
            "jmx.port=8778\n"
        )
        assert load_msk_config(str(path)) == MSKConfig(
            bootstrap_servers="b-1.kafka:9092,b-2.kafka:9092",
            cluster_arn="arn:aws:kafka:eu-west-1:123:cluster/prod/abc",
            aws_region="eu-west-1",
            verbose=True,
            jmx_port=8778,
        )

    def test_defaults(self, tmp_path):
        path = tmp_path / "msk.config"
        path.write_text("# nothing configured yet\n")
        assert load_msk_config(str(path)) == MSKConfig()

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            load_msk_config(str(tmp_path / "absent.config"))

    def test_invalid_jmx_port(self, tmp_path):
        path = tmp_path / "msk.config"
        path.write_text("jmx.port=eleven\n")
        with pytest.raises(ConfigurationError, match="jmx.port"):
            load_msk_config(str(path))


class TestJmxEndpoints:
    def test_replaces_kafka_port(self):
        assert to_jmx_endpoints("b-1:9092,b-2:9094") == ["b-1:8778", "b-2:8778"]

    def test_custom_port_and_blank_entries(self):
        assert to_jmx_endpoints("b-1:9092, ,b-2", 9779) == ["b-1:9779", "b-2:9779"]
