"""Custom validators for argument parsing."""

import argparse
import math
from typing import Any, Sequence


class NonNegativeIntegerAction(argparse.Action):
    """Argparse action that validates the value is >= 0."""

    def __call__(
        self,
        parser: argparse.ArgumentParser,
        namespace: argparse.Namespace,
        values: str | Sequence[Any] | None,
        option_string: str | None = None,
    ) -> None:
        # Used with type=int, so argparse has already converted the value.
        if not isinstance(values, int):
            parser.error(f"{option_string} must be an integer")
            return

        if values < 0:
            parser.error(f"{option_string} must be non-negative, got {values}")
        setattr(namespace, self.dest, values)


class NonNegativeFloatAction(argparse.Action):
    """Argparse action that validates a finite value >= 0."""

    def __call__(
        self,
        parser: argparse.ArgumentParser,
        namespace: argparse.Namespace,
        values: str | Sequence[Any] | None,
        option_string: str | None = None,
    ) -> None:
        if not isinstance(values, float):
            parser.error(f"{option_string} must be a number")
            return

        if not math.isfinite(values) or values < 0:
            parser.error(f"{option_string} must be a finite non-negative number, got {values}")
        setattr(namespace, self.dest, values)
