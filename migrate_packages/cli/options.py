"""Shared Click options and helpers for the CLI commands."""

from typing import Any, Callable, Type, TypeVar

import click
from pydantic import ValidationError

F = TypeVar("F", bound=Callable[..., Any])
M = TypeVar("M")

ENVVAR_PREFIX = "GHMP"


def envvar(name: str) -> str:
    """Flat environment variable name for an option, e.g. ``GHMP_SOURCE_TOKEN``."""
    return f"{ENVVAR_PREFIX}_{name}"


def package_type_option() -> Callable[[F], F]:
    """Shared --package-type option for commands."""
    return click.option(
        "-p",
        "--package-type",
        envvar=envvar("PACKAGE_TYPE"),
        help="Package type to process (container, npm, maven, nuget, rubygems)",
    )


def build_context(model: Type[M], **values: Any) -> M:
    """
    Validate command options into a context model.

    Raises:
        click.UsageError: If any option is invalid; the message lists every problem
    """
    try:
        return model(**values)
    except ValidationError as e:
        problems = "; ".join(f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors())
        raise click.UsageError(f"Invalid options: {problems}") from e


__all__ = ["ENVVAR_PREFIX", "envvar", "package_type_option", "build_context"]
