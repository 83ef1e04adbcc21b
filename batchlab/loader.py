"""
Loader for experiment configuration documents.

A configuration document declares what to run:

```yaml
command: python train.py
timeout: 3600
experiments:
  - name: baseline
    params: {lr: 0.01, bs: 64}
sweep:
  lr: [0.01, 0.1]
  bs: [32]
```

Every key is optional. The document is validated against an explicit
schema up front, so malformed input fails with ConfigError before any
invocation is expanded or executed.
"""

from __future__ import annotations

import json
import logging
import math
import shlex
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from batchlab._canonical import CanonicalizeError, check_primitive, fingerprint
from batchlab.errors import ConfigError
from batchlab.params.expand import expand
from batchlab.params.grid import GridSource
from batchlab.params.named import NamedSource
from batchlab.params.source import Invocation

logger = logging.getLogger(__name__)

TOP_LEVEL_KEYS = frozenset({"experiments", "sweep", "command", "timeout"})
EXPERIMENT_KEYS = frozenset({"name", "params"})

# Passed to the experiment command as --name
RESERVED_PARAMS = frozenset({"name"})

# Longest invocation name whose "<name>.log" fits a typical file name limit
MAX_NAME_BYTES = 255 - len(".log")


@dataclass(frozen=True)
class ExperimentConfig:
    """
    Validated configuration document.

    Attributes:
        experiments: Named experiments, or None if none were declared.
        sweep: Parameter grid, or None if no (non-empty) sweep was declared.
        command: Experiment command prefix declared in the document.
        timeout: Per-invocation timeout in seconds declared in the document.
        source: Where the document came from (path or "<string>").
        raw: The parsed document, for fingerprinting and manifests.
    """

    experiments: NamedSource | None = None
    sweep: GridSource | None = None
    command: list[str] | None = None
    timeout: float | None = None
    source: str = "<string>"
    raw: dict[str, Any] = field(default_factory=dict, repr=False)

    def invocations(self) -> list[Invocation]:
        """
        Expand into the ordered batch: named experiments, then the sweep.

        Raises:
            DuplicateNameError: If two invocations share a name.
            ConfigError: If a derived name is too long for a log file name.
        """
        invocations = expand([self.experiments, self.sweep])
        for invocation in invocations:
            _check_name_length(invocation.name, "invocation name", self.source)
        return invocations

    @property
    def fingerprint(self) -> str:
        """Stable fingerprint of the parsed document."""
        return fingerprint(self.raw)


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


class _UniqueKeyLoader(yaml.SafeLoader):
    """SafeLoader that rejects a key repeated within one mapping."""

    def construct_mapping(self, node, deep=False):
        if isinstance(node, yaml.MappingNode):
            seen = set()
            for key_node, _ in node.value:
                if key_node.tag == "tag:yaml.org,2002:merge":
                    continue
                key = self.construct_object(key_node, deep=deep)
                try:
                    duplicate = key in seen
                except TypeError:
                    # unhashable; the base constructor reports it
                    continue
                if duplicate:
                    raise yaml.constructor.ConstructorError(
                        "while constructing a mapping",
                        node.start_mark,
                        f"found duplicate key {key!r}",
                        key_node.start_mark,
                    )
                seen.add(key)
        return super().construct_mapping(node, deep=deep)


def _unique_pairs(source: str):
    def hook(pairs: list[tuple[str, Any]]) -> dict[str, Any]:
        document: dict[str, Any] = {}
        for key, value in pairs:
            if key in document:
                raise ConfigError(f"cannot parse JSON document: duplicate key {key!r}", source)
            document[key] = value
        return document

    return hook


def _parse(text: str, fmt: str, source: str) -> Any:
    try:
        if fmt == "json":
            return json.loads(text, object_pairs_hook=_unique_pairs(source))
        if fmt == "toml":
            # tomllib already rejects redefined keys
            return tomllib.loads(text)
        return yaml.load(text, Loader=_UniqueKeyLoader)
    except (json.JSONDecodeError, tomllib.TOMLDecodeError, yaml.YAMLError) as e:
        raise ConfigError(f"cannot parse {fmt.upper()} document: {e}", source) from e


def _format_for(path: Path) -> str:
    suffix = path.suffix.lower()
    if suffix == ".json":
        return "json"
    if suffix == ".toml":
        return "toml"
    return "yaml"


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def _check_name_length(name: str, what: str, source: str) -> None:
    if len(name.encode("utf-8")) > MAX_NAME_BYTES:
        raise ConfigError(
            f"{what} {name[:40]!r}... is too long for a log file name "
            f"(more than {MAX_NAME_BYTES} bytes)",
            source,
        )


def _check_file_name(name: str, what: str, source: str) -> None:
    if "/" in name or "\\" in name or "\x00" in name or name in (".", ".."):
        raise ConfigError(f"{what} {name!r} cannot be used as a file name", source)
    _check_name_length(name, what, source)


def _check_param_name(key: Any, where: str, source: str) -> None:
    if not isinstance(key, str) or not key:
        raise ConfigError(f"{where}: parameter names must be non-empty strings", source)
    if "\x00" in key:
        raise ConfigError(f"{where}: parameter name {key!r} contains a NUL byte", source)
    if key in RESERVED_PARAMS:
        raise ConfigError(
            f"{where}: parameter name {key!r} is reserved for the invocation name", source
        )


def _check_value(value: Any, where: str, source: str) -> Any:
    try:
        return check_primitive(value)
    except CanonicalizeError as e:
        raise ConfigError(f"{where}: {e}", source) from e


def _check_params(params: Any, where: str, source: str) -> dict[str, Any]:
    if not isinstance(params, dict):
        raise ConfigError(f"{where}: 'params' must be a mapping", source)
    checked = {}
    for key, value in params.items():
        _check_param_name(key, where, source)
        checked[key] = _check_value(value, f"{where}: parameter {key!r}", source)
    return checked


def _load_experiments(entries: Any, source: str) -> NamedSource | None:
    if entries is None:
        return None
    if not isinstance(entries, list):
        raise ConfigError("'experiments' must be a list", source)

    experiments: list[tuple[str, dict[str, Any]]] = []
    seen: set[str] = set()
    for i, entry in enumerate(entries):
        where = f"experiments[{i}]"
        if not isinstance(entry, dict):
            raise ConfigError(f"{where} must be a mapping", source)
        missing = EXPERIMENT_KEYS - entry.keys()
        if missing:
            raise ConfigError(f"{where} is missing {', '.join(sorted(missing))}", source)
        unknown = entry.keys() - EXPERIMENT_KEYS
        if unknown:
            raise ConfigError(f"{where} has unknown keys: {', '.join(sorted(unknown))}", source)

        name = entry["name"]
        if not isinstance(name, str) or not name:
            raise ConfigError(f"{where}: 'name' must be a non-empty string", source)
        _check_file_name(name, "experiment name", source)
        if name in seen:
            raise ConfigError(f"duplicate experiment name {name!r}", source)
        seen.add(name)

        experiments.append((name, _check_params(entry["params"], where, source)))

    return NamedSource(experiments)


def _load_sweep(sweep: Any, source: str) -> GridSource | None:
    if sweep is None:
        return None
    if not isinstance(sweep, dict):
        raise ConfigError("'sweep' must be a mapping of parameter name to values", source)
    if not sweep:
        return None

    params: dict[str, list[Any]] = {}
    for key, values in sweep.items():
        where = f"sweep.{key}"
        if not isinstance(key, str) or not key:
            raise ConfigError("sweep parameter names must be non-empty strings", source)
        _check_param_name(key, "sweep", source)
        _check_file_name(key, "sweep parameter name", source)
        if not isinstance(values, list):
            raise ConfigError(f"{where} must be a list of values", source)
        if not values:
            raise ConfigError(f"{where} has no values", source)
        checked = [_check_value(v, where, source) for v in values]
        for v in checked:
            if isinstance(v, str):
                _check_file_name(v, f"{where} value", source)
        params[key] = checked

    return GridSource(params)


def parse_command(command: Any, source: str) -> list[str]:
    """
    Normalise a command given as a string (shell-split) or list of strings.

    Raises:
        ConfigError: If the command is empty or of the wrong type.
    """
    if isinstance(command, str):
        try:
            argv = shlex.split(command)
        except ValueError as e:
            raise ConfigError(f"cannot split 'command': {e}", source) from e
    elif isinstance(command, list) and all(isinstance(a, str) for a in command):
        argv = list(command)
    else:
        raise ConfigError("'command' must be a string or a list of strings", source)
    if not argv:
        raise ConfigError("'command' is empty", source)
    return argv


def parse_timeout(timeout: Any, source: str) -> float:
    """
    Validate a timeout in seconds.

    Raises:
        ConfigError: If the timeout is not a positive finite number.
    """
    if isinstance(timeout, bool) or not isinstance(timeout, (int, float)):
        raise ConfigError("'timeout' must be a number of seconds", source)
    if not math.isfinite(timeout) or timeout <= 0:
        raise ConfigError("'timeout' must be positive", source)
    return float(timeout)


def config_from_dict(document: Any, source: str = "<string>") -> ExperimentConfig:
    """
    Validate a parsed document and build an ExperimentConfig.

    Args:
        document: The parsed document (None is treated as empty).
        source: Label used in error messages.

    Raises:
        ConfigError: If the document does not match the schema.
    """
    if document is None:
        document = {}
    if not isinstance(document, dict):
        raise ConfigError("top level must be a mapping", source)

    unknown = document.keys() - TOP_LEVEL_KEYS
    if unknown:
        raise ConfigError(f"unknown top-level keys: {', '.join(sorted(map(str, unknown)))}", source)

    command = document.get("command")
    timeout = document.get("timeout")

    return ExperimentConfig(
        experiments=_load_experiments(document.get("experiments"), source),
        sweep=_load_sweep(document.get("sweep"), source),
        command=parse_command(command, source) if command is not None else None,
        timeout=parse_timeout(timeout, source) if timeout is not None else None,
        source=source,
        raw=document,
    )


def loads(text: str, fmt: str = "yaml", source: str = "<string>") -> ExperimentConfig:
    """
    Parse and validate a configuration document from a string.

    Args:
        text: Document text.
        fmt: One of "yaml", "json", "toml".
        source: Label used in error messages.
    """
    return config_from_dict(_parse(text, fmt, source), source)


def load(path: str | Path) -> ExperimentConfig:
    """
    Load and validate a configuration file.

    The format is chosen by suffix: .json, .toml, otherwise YAML.

    Raises:
        ConfigError: If the file cannot be read, parsed, or validated.
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"cannot read configuration: {e}", str(path)) from e

    config = loads(text, fmt=_format_for(path), source=str(path))
    logger.debug(
        f"Loaded {path}: "
        f"{len(config.experiments or [])} named, {len(config.sweep or [])} swept"
    )
    return config
