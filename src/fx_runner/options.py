"""
Launch options for a Firefox run.

Handles:
- The immutable options structure consumed by the argument builder and launcher
- The tokenized/raw variant for extra binary arguments
- Conversion from the dashed option keys used by front ends
"""

import os
from dataclasses import dataclass, field, fields
from types import MappingProxyType
from typing import Any, Mapping, Optional, Union

# Primitive values allowed inside a pre-tokenized argument sequence
Scalar = Union[str, int, float, bool]


@dataclass(frozen=True)
class Tokenized:
    """Extra arguments that are already split into tokens."""

    tokens: tuple[Scalar, ...]


@dataclass(frozen=True)
class Raw:
    """A free-form argument string, tokenized with shell-like quoting."""

    text: str


BinaryArgs = Union[Tokenized, Raw]


def coerce_binary_args(value: Any) -> Optional[BinaryArgs]:
    """
    Normalize user input for ``binary_args`` into the tagged variant.

    Strings become ``Raw``; lists and tuples become ``Tokenized``.

    Raises:
        TypeError: For any other type
    """
    if value is None or isinstance(value, (Tokenized, Raw)):
        return value
    if isinstance(value, str):
        return Raw(value)
    if isinstance(value, (list, tuple)):
        return Tokenized(tuple(value))
    raise TypeError(
        f"binary_args must be a string or a sequence, not {type(value).__name__}"
    )


def _optional_path(value: Any) -> Optional[str]:
    if value is None:
        return None
    return os.fspath(value)


@dataclass(frozen=True)
class LaunchOptions:
    """
    Everything needed to launch one Firefox process.

    Field names mirror the dashed option keys (``new-instance`` is
    ``new_instance``). Use ``from_mapping`` to build options from those keys.
    """

    binary: Optional[str] = None
    profile: Optional[str] = None
    new_instance: bool = False
    no_remote: bool = False
    foreground: bool = False
    binary_args: Optional[BinaryArgs] = None
    binary_args_first: bool = False
    listen: Optional[Union[str, int]] = None
    stdout_file_path: Optional[str] = None
    stderr_file_path: Optional[str] = None
    env: Mapping[str, Any] = field(default_factory=dict)
    detached: bool = False

    def __post_init__(self):
        # frozen, so normalized values are written with object.__setattr__
        object.__setattr__(self, "binary", _optional_path(self.binary))
        object.__setattr__(self, "profile", _optional_path(self.profile))
        object.__setattr__(self, "binary_args", coerce_binary_args(self.binary_args))
        object.__setattr__(self, "stdout_file_path", _optional_path(self.stdout_file_path))
        object.__setattr__(self, "stderr_file_path", _optional_path(self.stderr_file_path))
        object.__setattr__(self, "env", MappingProxyType(dict(self.env or {})))

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "LaunchOptions":
        """
        Build options from a mapping of option keys.

        Accepts the dashed keys (``binary-args-first``) as well as their
        underscore spellings.

        Raises:
            ValueError: If a key is not a recognized option
        """
        known = {f.name for f in fields(cls)}
        kwargs = {}
        for key, value in mapping.items():
            name = key.replace("-", "_")
            if name not in known:
                raise ValueError(f"Unknown launch option: {key}")
            kwargs[name] = value
        return cls(**kwargs)

    def as_mapping(self) -> dict[str, Any]:
        """Return the options keyed by their dashed names, JSON-friendly."""
        if isinstance(self.binary_args, Raw):
            binary_args: Any = self.binary_args.text
        elif isinstance(self.binary_args, Tokenized):
            binary_args = list(self.binary_args.tokens)
        else:
            binary_args = ""
        return {
            "binary": self.binary,
            "profile": self.profile,
            "new-instance": self.new_instance,
            "no-remote": self.no_remote,
            "foreground": self.foreground,
            "binary-args": binary_args,
            "binary-args-first": self.binary_args_first,
            "listen": self.listen,
            "stdout-file-path": self.stdout_file_path,
            "stderr-file-path": self.stderr_file_path,
            "env": dict(self.env),
            "detached": self.detached,
        }
