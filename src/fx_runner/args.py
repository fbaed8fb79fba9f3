"""
Argument builder - turns launch options into Firefox command-line tokens.

The order of generated flags is fixed by a rule table:

    [-start-debugger-server <listen>] [-foreground] [-no-remote]
    [-new-instance] [-P <name> | -profile <path>] <binary args...>

With ``binary_args_first`` the extra binary arguments move to the front.
"""

import re
import shlex
from typing import Any, Callable, Mapping, Optional, Union

from .errors import BinaryArgsError
from .options import BinaryArgs, LaunchOptions, Raw, Scalar, Tokenized

# Profiles without a path separator are names for Firefox's profile manager
_PATH_SEPARATOR = re.compile(r"[\\/]")


def is_profile_name(profile: Optional[str]) -> bool:
    """
    Check whether a profile string is a profile name rather than a path.

    ``.`` and ``..`` count as paths even though they have no separator.
    """
    if not profile:
        return False
    if profile in (".", ".."):
        return False
    return not _PATH_SEPARATOR.search(profile)


def parse_binary_args(text: str) -> list[str]:
    """
    Split a free-form argument string into tokens.

    Single- and double-quoted substrings become one token, unquoted
    whitespace separates tokens: ``-a b -c "d e"`` gives four tokens.

    Raises:
        BinaryArgsError: If a quote is left unclosed
    """
    try:
        return shlex.split(text)
    except ValueError as e:
        raise BinaryArgsError(text, str(e)) from e


def resolve_binary_args(binary_args: Optional[BinaryArgs]) -> list[Scalar]:
    """Resolve the binary_args variant to a token list."""
    if binary_args is None:
        return []
    if isinstance(binary_args, Tokenized):
        return list(binary_args.tokens)
    if isinstance(binary_args, Raw):
        return parse_binary_args(binary_args.text)
    raise TypeError(f"Unsupported binary_args: {binary_args!r}")


def _profile_args(options: LaunchOptions) -> list[Scalar]:
    if is_profile_name(options.profile):
        return ["-P", options.profile]
    return ["-profile", options.profile]


# (applies, tokens) in output order
_FLAG_RULES: tuple[
    tuple[Callable[[LaunchOptions], Any], Callable[[LaunchOptions], list[Scalar]]], ...
] = (
    (lambda o: o.listen, lambda o: ["-start-debugger-server", o.listen]),
    (lambda o: o.foreground, lambda o: ["-foreground"]),
    (lambda o: o.no_remote, lambda o: ["-no-remote"]),
    (lambda o: o.new_instance, lambda o: ["-new-instance"]),
    (lambda o: o.profile, _profile_args),
)


def build_args(options: Union[LaunchOptions, Mapping[str, Any]]) -> list[Scalar]:
    """
    Build the ordered argument list for a Firefox launch.

    Pure function: no I/O and no shared state, so calling it twice with the
    same options gives equal lists.

    Args:
        options: LaunchOptions, or a mapping of option keys
            (``{"foreground": True, "binary-args": [...]}``)

    Returns:
        A new list of tokens. Non-string tokens from a pre-tokenized
        ``binary_args`` are kept as-is.
    """
    if not isinstance(options, LaunchOptions):
        options = LaunchOptions.from_mapping(options)

    flags: list[Scalar] = []
    for applies, tokens in _FLAG_RULES:
        if applies(options):
            flags.extend(tokens(options))

    extra = resolve_binary_args(options.binary_args)
    if options.binary_args_first:
        return extra + flags
    return flags + extra
