import pytest

from sygma_relay.chain_config import ConfigError, GeneralChainConfig


def test_from_mapping_decodes_fields():
    config = GeneralChainConfig.from_mapping(
        {"id": 1, "endpoint": "ws://domain.example.com", "name": "evm1", "freshStart": True}
    )
    assert config == GeneralChainConfig(
        name="evm1", domain_id=1, endpoint="ws://domain.example.com", fresh_start=True
    )
    config.validate()
    assert config.domain_id == 1


def test_keys_match_case_insensitively():
    config = GeneralChainConfig.from_mapping({"ID": 3, "Name": "chain", "ENDPOINT": "ws://x"})
    assert (config.domain_id, config.name, config.endpoint) == (3, "chain", "ws://x")


def test_unknown_keys_are_ignored():
    config = GeneralChainConfig.from_mapping({"id": 2, "name": "n", "endpoint": "e", "from": "address"})
    assert config == GeneralChainConfig(name="n", domain_id=2, endpoint="e")


def test_missing_id_stays_none_and_fails_validation():
    config = GeneralChainConfig.from_mapping({"name": "n", "endpoint": "e"})
    assert config.domain_id is None
    with pytest.raises(ConfigError):
        config.validate()


@pytest.mark.parametrize(
    "raw",
    [
        {"id": 1, "name": "n"},
        {"id": 1, "endpoint": "e"},
        {},
    ],
)
def test_missing_required_fields_fail_validation(raw):
    with pytest.raises(ConfigError):
        GeneralChainConfig.from_mapping(raw).validate()


@pytest.mark.parametrize(
    "raw",
    [
        {"id": "one"},
        {"id": -1},
        {"id": 256},
        {"name": 5},
        {"freshStart": "yes"},
    ],
)
def test_undecodable_values_raise(raw):
    with pytest.raises(ConfigError):
        GeneralChainConfig.from_mapping(raw)


def test_non_mapping_raises():
    with pytest.raises(ConfigError):
        GeneralChainConfig.from_mapping(["id", 1])