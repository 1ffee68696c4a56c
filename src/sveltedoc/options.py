"""Parse options and their validation.

Options are checked once, before any walk starts; an invalid option raises
``ConfigurationError`` and nothing is parsed.
"""

from __future__ import annotations

from dataclasses import dataclass

from sveltedoc.exit_codes import ConfigurationError
from sveltedoc.grammar.comments import VISIBILITIES, is_visibility_supported

SUPPORTED_FEATURES = (
    "name",
    "data",
    "computed",
    "methods",
    "components",
    "description",
    "keywords",
    "events",
    "slots",
    "refs",
)

DEFAULT_IGNORED_VISIBILITIES = ("protected", "private")

SUPPORTED_ENCODINGS = ("ascii", "utf8", "utf-8", "utf-16-le", "latin1", "latin-1")


def _quoted(values) -> str:
    return ", ".join(f"'{v}'" for v in values)


@dataclass
class ParseOptions:
    """What to extract and how to filter it.

    ``default_action_visibility`` is accepted and validated but has no
    effect on the output; actions are not collected.
    """

    features: tuple = SUPPORTED_FEATURES
    include_source_locations: bool = False
    ignored_visibilities: tuple = DEFAULT_IGNORED_VISIBILITIES
    default_method_visibility: str = "private"
    default_action_visibility: str = "private"
    filename: str | None = None
    encoding: str = "utf-8"

    @classmethod
    def from_kwargs(cls, **kwargs) -> "ParseOptions":
        """Build options from keyword arguments, rejecting unknown names."""
        known = set(cls.__dataclass_fields__)
        unknown = sorted(k for k in kwargs if k not in known)
        if unknown:
            raise ConfigurationError(f"unknown parse option(s): {', '.join(unknown)}")
        return cls(**kwargs)

    def validate(self) -> "ParseOptions":
        """Raise ``ConfigurationError`` for the first invalid option; return self."""
        self.features = _as_tuple("features", self.features)
        unsupported = [f for f in self.features if f not in SUPPORTED_FEATURES]
        if unsupported:
            raise ConfigurationError(
                f"features expected any of {_quoted(SUPPORTED_FEATURES)}, "
                f"but found these unsupported features: {_quoted(unsupported)}"
            )

        self.ignored_visibilities = _as_tuple("ignored_visibilities", self.ignored_visibilities)
        unsupported = [v for v in self.ignored_visibilities if not is_visibility_supported(v)]
        if unsupported:
            raise ConfigurationError(
                f"ignored_visibilities expected any of {_quoted(VISIBILITIES)}, "
                f"but found these unsupported visibilities: {_quoted(unsupported)}"
            )

        for name in ("default_method_visibility", "default_action_visibility"):
            value = getattr(self, name)
            if not is_visibility_supported(value):
                raise ConfigurationError(f"{name} must be one of {_quoted(VISIBILITIES)}, got {value!r}")

        if not isinstance(self.include_source_locations, bool):
            raise ConfigurationError("include_source_locations must be a boolean")

        if not isinstance(self.encoding, str) or self.encoding.lower() not in SUPPORTED_ENCODINGS:
            raise ConfigurationError(
                f"encoding {self.encoding!r} is not supported; use one of {_quoted(SUPPORTED_ENCODINGS)}"
            )
        return self


def _as_tuple(name: str, value) -> tuple:
    # Strings are rejected, not split into characters
    if isinstance(value, (str, bytes)) or not isinstance(value, (list, tuple, set, frozenset)):
        raise ConfigurationError(f"{name} must be a list of strings, got {type(value).__name__}")
    if isinstance(value, (set, frozenset)):
        value = sorted(value, key=str)
    return tuple(value)
