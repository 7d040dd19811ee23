"""
Source Extraction
=================

Parses a build recipe (Dockerfile syntax) into stages and commands, and
emits the source paths declared by COPY and ADD instructions.

Tokenizing (comments, line continuations, the ``# escape=`` directive) is
delegated to ``dockerfile-parse``; this module validates the resulting
instruction list and turns it into typed stages.

Usage:
    from buildprint_sdk.recipe import parse_recipe, iter_source_references

    stages = parse_recipe(Path("Dockerfile").read_bytes())
    for reference in iter_source_references(stages):
        print(reference)
"""

import io
import json
import re
from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Optional, Tuple, Union

from buildprint_common import RECIPE_INSTRUCTIONS, SOURCE_INSTRUCTIONS, ParseError, get_logger
from dockerfile_parse import DockerfileParser

logger = get_logger("sdk.extractor")

_FLAG_PATTERN = re.compile(r"^--([A-Za-z][A-Za-z0-9-]*)(?:=(\S*))?(?:\s+|$)")


@dataclass
class Command:
    """A single instruction inside a stage."""

    instruction: str
    value: str
    line: int
    flags: Dict[str, Union[str, bool]] = field(default_factory=dict)
    arguments: List[str] = field(default_factory=list)

    @property
    def is_source_command(self) -> bool:
        return self.instruction in SOURCE_INSTRUCTIONS

    @property
    def source_paths(self) -> List[str]:
        """Every argument but the last, for COPY and ADD."""
        if not self.is_source_command:
            return []
        return self.arguments[:-1]

    @property
    def destination(self) -> Optional[str]:
        if not self.is_source_command:
            return None
        return self.arguments[-1]


@dataclass
class Stage:
    """A build stage introduced by FROM."""

    base: str
    line: int
    name: Optional[str] = None
    commands: List[Command] = field(default_factory=list)


def _split_flags(value: str) -> Tuple[Dict[str, Union[str, bool]], str]:
    """Strip leading ``--flag`` / ``--flag=value`` tokens from an argument string."""
    flags: Dict[str, Union[str, bool]] = {}
    rest = value.strip()
    while True:
        match = _FLAG_PATTERN.match(rest)
        if not match:
            return flags, rest
        name, flag_value = match.group(1), match.group(2)
        flags[name] = True if flag_value is None else flag_value
        rest = rest[match.end() :]


def _split_arguments(rest: str) -> List[str]:
    """Parse JSON (exec) form when possible, whitespace-separated form otherwise."""
    if rest.startswith("["):
        try:
            parsed = json.loads(rest)
        except ValueError:
            parsed = None
        if isinstance(parsed, list) and all(isinstance(item, str) for item in parsed):
            return parsed
    return rest.split()


def _parse_from(value: str, line: int) -> Stage:
    _, rest = _split_flags(value)
    args = rest.split()
    if len(args) == 1:
        return Stage(base=args[0], line=line)
    if len(args) == 3 and args[1].lower() == "as":
        return Stage(base=args[0], line=line, name=args[2].lower())
    raise ParseError("FROM requires either one or three arguments", line=line)


def _parse_source_command(instruction: str, value: str, line: int) -> Command:
    flags, rest = _split_flags(value)
    arguments = _split_arguments(rest)
    if len(arguments) < 2:
        raise ParseError(f"{instruction} requires at least two arguments", line=line)
    for source in arguments[:-1]:
        if source.startswith("<<"):
            raise ParseError(f"heredoc sources are not supported: {source}", line=line)
    return Command(instruction=instruction, value=value, line=line, flags=flags, arguments=arguments)


def _instructions(data: bytes) -> List[dict]:
    try:
        data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise ParseError(f"recipe is not valid UTF-8: {e}") from e

    parser = DockerfileParser(fileobj=io.BytesIO(data), env_replace=False)
    return parser.structure


def parse_recipe(data: bytes) -> List[Stage]:
    """
    Parse raw recipe bytes into build stages.

    ARG instructions before the first FROM are global and belong to no
    stage. Any other instruction there is an error, as is an unknown
    instruction keyword.

    Args:
        data: Raw recipe content

    Returns:
        Stages in declaration order

    Raises:
        ParseError: If the recipe is syntactically invalid
    """
    stages: List[Stage] = []

    for item in _instructions(data):
        instruction = item["instruction"].upper()
        value = item.get("value", "")
        line = item["startline"] + 1

        if instruction == "COMMENT":
            continue

        if instruction not in RECIPE_INSTRUCTIONS:
            raise ParseError(f"unknown instruction: {instruction}", line=line)

        if instruction == "FROM":
            stages.append(_parse_from(value, line))
            continue

        if not stages:
            if instruction == "ARG":
                continue
            raise ParseError("no build stage in current context", line=line)

        if instruction in SOURCE_INSTRUCTIONS:
            command = _parse_source_command(instruction, value, line)
        else:
            command = Command(instruction=instruction, value=value, line=line)
        stages[-1].commands.append(command)

    logger.debug("Parsed recipe", stages=len(stages))
    return stages


def iter_source_references(stages: Iterable[Stage]) -> Iterator[str]:
    """Yield every source path declared by COPY and ADD commands."""
    for stage in stages:
        for command in stage.commands:
            yield from command.source_paths


def extract_source_references(data: bytes) -> List[str]:
    """Parse ``data`` and return all declared source references."""
    return list(iter_source_references(parse_recipe(data)))
