"""Tests for the configuration document loader."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from batchlab.errors import ConfigError, DuplicateNameError
from batchlab.loader import config_from_dict, load, loads

EXAMPLE_YAML = """
command: python train.py --epochs 3
timeout: 30
experiments:
  - name: baseline
    params: {lr: 0.05, optimizer: sgd}
  - name: no_dropout
    params: {dropout: 0.0}
sweep:
  lr: [0.01, 0.1]
  bs: [32]
"""


class TestLoadFormats:
    def test_yaml(self, tmp_path: Path):
        path = tmp_path / "sweep.yaml"
        path.write_text(EXAMPLE_YAML)
        config = load(path)

        assert config.command == ["python", "train.py", "--epochs", "3"]
        assert config.timeout == 30.0
        assert config.source == str(path)
        assert [inv.name for inv in config.invocations()] == [
            "baseline", "no_dropout", "lr0.01_bs32", "lr0.1_bs32",
        ]

    def test_json(self, tmp_path: Path):
        path = tmp_path / "sweep.json"
        path.write_text(json.dumps({"sweep": {"lr": [0.01, 0.1], "bs": [32]}}))
        config = load(path)
        assert [inv.name for inv in config.invocations()] == ["lr0.01_bs32", "lr0.1_bs32"]
        assert config.experiments is None

    def test_toml(self, tmp_path: Path):
        path = tmp_path / "sweep.toml"
        path.write_text(
            'command = ["./run.sh"]\n'
            "[sweep]\n"
            "seed = [1, 2]\n"
            "\n"
            "[[experiments]]\n"
            'name = "smoke"\n'
            "params = { quick = true }\n"
        )
        config = load(path)
        assert config.command == ["./run.sh"]
        invocations = config.invocations()
        assert [inv.name for inv in invocations] == ["smoke", "seed1", "seed2"]
        assert invocations[0].params == {"quick": True}

    def test_unknown_suffix_parsed_as_yaml(self, tmp_path: Path):
        path = tmp_path / "sweep.cfg"
        path.write_text("sweep:\n  a: [1]\n")
        assert [inv.name for inv in load(path).invocations()] == ["a1"]

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(ConfigError, match="cannot read"):
            load(tmp_path / "nope.yaml")

    def test_unparsable_yaml(self):
        with pytest.raises(ConfigError, match="cannot parse"):
            loads("sweep: [unclosed", fmt="yaml")

    def test_unparsable_json(self):
        with pytest.raises(ConfigError, match="cannot parse"):
            loads("{", fmt="json")

    def test_unparsable_toml(self):
        with pytest.raises(ConfigError, match="cannot parse"):
            loads("sweep = ", fmt="toml")

    def test_duplicate_yaml_key(self):
        with pytest.raises(ConfigError, match="duplicate key 'lr'"):
            loads("sweep:\n  lr: [0.01]\n  lr: [0.1]\n")

    def test_duplicate_yaml_top_level_key(self):
        with pytest.raises(ConfigError, match="duplicate key 'command'"):
            loads("command: a\ncommand: b\n")

    def test_duplicate_json_key(self):
        with pytest.raises(ConfigError, match="duplicate key 'lr'"):
            loads('{"sweep": {"lr": [0.01], "lr": [0.1]}}', fmt="json")

    def test_duplicate_toml_key(self):
        with pytest.raises(ConfigError, match="cannot parse"):
            loads("timeout = 1\ntimeout = 2\n", fmt="toml")

    def test_yaml_merge_keys_still_allowed(self):
        text = (
            "experiments:\n"
            "  - name: a\n"
            "    params: &shared {lr: 0.1}\n"
            "  - name: b\n"
            "    params:\n"
            "      <<: *shared\n"
            "      bs: 32\n"
        )
        _, b = loads(text).invocations()
        assert b.params == {"lr": 0.1, "bs": 32}


class TestEmptyDocuments:
    def test_empty_document(self):
        config = loads("")
        assert config.invocations() == []
        assert config.command is None

    def test_empty_mapping(self):
        assert config_from_dict({}).invocations() == []

    def test_empty_sweep_mapping(self):
        config = config_from_dict({"sweep": {}})
        assert config.sweep is None
        assert config.invocations() == []

    def test_empty_experiments_list(self):
        assert config_from_dict({"experiments": []}).invocations() == []


class TestSchema:
    @pytest.mark.parametrize(
        "document, message",
        [
            ([1, 2], "top level must be a mapping"),
            ({"sweeps": {}}, "unknown top-level keys"),
            ({"experiments": {"name": "a"}}, "must be a list"),
            ({"experiments": ["a"]}, "must be a mapping"),
            ({"experiments": [{"params": {}}]}, "missing name"),
            ({"experiments": [{"name": "a"}]}, "missing params"),
            ({"experiments": [{"name": "a", "params": {}, "seed": 1}]}, "unknown keys"),
            ({"experiments": [{"name": "", "params": {}}]}, "non-empty string"),
            ({"experiments": [{"name": 3, "params": {}}]}, "non-empty string"),
            ({"experiments": [{"name": "a", "params": [1]}]}, "must be a mapping"),
            ({"sweep": [1, 2]}, "must be a mapping"),
            ({"sweep": {"lr": 0.1}}, "must be a list"),
            ({"sweep": {"lr": []}}, "has no values"),
            ({"sweep": {"lr": [None]}}, "null"),
            ({"sweep": {"lr": [[0.1]]}}, "must be bool, int, float or str"),
            ({"sweep": {"lr": [float("nan")]}}, "NaN"),
            ({"experiments": [{"name": "a", "params": {"x": {"y": 1}}}]}, "parameter 'x'"),
            ({"command": ""}, "'command' is empty"),
            ({"command": 5}, "string or a list"),
            ({"timeout": 0}, "positive"),
            ({"timeout": "soon"}, "number of seconds"),
            ({"timeout": True}, "number of seconds"),
        ],
    )
    def test_invalid(self, document, message):
        with pytest.raises(ConfigError, match=message):
            config_from_dict(document)

    def test_duplicate_experiment_names(self):
        document = {
            "experiments": [
                {"name": "a", "params": {}},
                {"name": "a", "params": {"x": 1}},
            ]
        }
        with pytest.raises(ConfigError, match="duplicate experiment name 'a'"):
            config_from_dict(document)

    @pytest.mark.parametrize("name", ["a/b", "a\\b", ".", ".."])
    def test_names_must_be_file_names(self, name):
        with pytest.raises(ConfigError, match="file name"):
            config_from_dict({"experiments": [{"name": name, "params": {}}]})

    def test_sweep_string_values_must_be_file_safe(self):
        with pytest.raises(ConfigError, match="file name"):
            config_from_dict({"sweep": {"data": ["train/a.csv"]}})

    def test_sweep_keys_must_be_file_safe(self):
        with pytest.raises(ConfigError, match="file name"):
            config_from_dict({"sweep": {"data/split": [1]}})

    @pytest.mark.parametrize(
        "document",
        [
            {"sweep": {"tag": ["x\x00y"]}},
            {"sweep": {"t\x00g": [1]}},
            {"experiments": [{"name": "a", "params": {"tag": "x\x00y"}}]},
            {"experiments": [{"name": "a", "params": {"t\x00g": 1}}]},
            {"experiments": [{"name": "a\x00b", "params": {}}]},
        ],
    )
    def test_nul_bytes_rejected(self, document):
        with pytest.raises(ConfigError, match="NUL|file name"):
            config_from_dict(document)

    @pytest.mark.parametrize(
        "document",
        [
            {"sweep": {"name": ["a", "b"]}},
            {"experiments": [{"name": "a", "params": {"name": "other"}}]},
        ],
    )
    def test_name_parameter_is_reserved(self, document):
        with pytest.raises(ConfigError, match="'name' is reserved"):
            config_from_dict(document)

    def test_long_experiment_name(self):
        with pytest.raises(ConfigError, match="too long"):
            config_from_dict({"experiments": [{"name": "a" * 300, "params": {}}]})

    def test_long_sweep_value(self):
        with pytest.raises(ConfigError, match="too long"):
            config_from_dict({"sweep": {"tag": ["v" * 300]}})

    def test_long_derived_name(self):
        """Caught when expanding, before anything runs."""
        config = config_from_dict({"sweep": {"a": ["x" * 150], "b": ["y" * 150]}})
        with pytest.raises(ConfigError, match="too long"):
            config.invocations()

    def test_longest_allowed_name(self):
        name = "a" * 251
        config = config_from_dict({"experiments": [{"name": name, "params": {}}]})
        assert [inv.name for inv in config.invocations()] == [name]

    def test_source_in_message(self):
        with pytest.raises(ConfigError, match="^cfg.yaml: "):
            config_from_dict({"sweep": {"a": []}}, source="cfg.yaml")


class TestExpansion:
    def test_cross_source_collision(self):
        """Detected at expansion, not at load."""
        config = config_from_dict(
            {
                "experiments": [{"name": "lr0.1", "params": {"lr": 0.1}}],
                "sweep": {"lr": [0.1]},
            }
        )
        with pytest.raises(DuplicateNameError):
            config.invocations()

    def test_named_params_independent_of_sweep(self):
        config = config_from_dict(
            {
                "experiments": [{"name": "ref", "params": {"lr": 1, "extra": "x"}}],
                "sweep": {"lr": [0.1]},
            }
        )
        ref, swept = config.invocations()
        assert ref.params == {"lr": 1, "extra": "x"}
        assert swept.params == {"lr": 0.1}

    def test_expansion_deterministic(self):
        config = loads(EXAMPLE_YAML)
        assert config.invocations() == config.invocations()
        assert loads(EXAMPLE_YAML).invocations() == config.invocations()

    def test_fingerprint_stable(self):
        assert loads(EXAMPLE_YAML).fingerprint == loads(EXAMPLE_YAML).fingerprint
        assert loads(EXAMPLE_YAML).fingerprint != loads("sweep: {a: [1]}").fingerprint
