import json

import pytest

from geyserstream.compression import CompressionType
from geyserstream.config import CompressionParameters, ConfigQuicPlugin, QuicParameters
from geyserstream.defaults import DEFAULT_CC_ALGORITHM, DEFAULT_MAX_STREAMS


def test_empty_config_uses_defaults():
    config = ConfigQuicPlugin.from_json("{}")
    assert config.address == "[::]:10800"
    assert config.number_of_retries == 100
    assert config.log_level == "info"
    assert config.allow_accounts is True
    assert config.build_blocks_with_accounts is True
    assert config.enable_block_builder is False
    assert config.compression_parameters.compression_type == CompressionType.lz4_fast(8)
    assert config.quic_parameters.cc_algorithm == DEFAULT_CC_ALGORITHM


def test_partial_quic_parameters_filled_with_defaults():
    params = QuicParameters.from_dict({"enable_gso": False})
    assert params.enable_gso is False
    assert params.max_number_of_streams_per_client == DEFAULT_MAX_STREAMS


def test_unknown_top_level_field_rejected():
    with pytest.raises(ValueError):
        ConfigQuicPlugin.from_dict({"bogus": 1})


def test_invalid_address_rejected():
    with pytest.raises(ValueError):
        ConfigQuicPlugin.from_dict({"address": "localhost:10800"})


def test_compression_type_json_forms():
    assert CompressionParameters.from_dict({"compression_type": "None"}).compression_type == (
        CompressionType.none()
    )
    assert CompressionParameters.from_dict(
        {"compression_type": {"Lz4": 4}}
    ).compression_type == CompressionType.lz4(4)
    with pytest.raises(ValueError):
        CompressionParameters.from_dict({})
    with pytest.raises(ValueError):
        CompressionParameters.from_dict({"compression_type": "Zip"})


def test_round_trip_through_json():
    config = ConfigQuicPlugin(
        address="0.0.0.0:20000",
        compression_parameters=CompressionParameters(CompressionType.none()),
        enable_block_builder=True,
    )
    again = ConfigQuicPlugin.from_json(json.dumps(config.to_dict()))
    assert again == config