from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from typing import Any

from domain.models import RawResourceBlock, Reference, TerraformResource

logger = logging.getLogger(__name__)

Value = Any

_RESOURCE_HEADER = re.compile(r'\bresource\s+"([^"]+)"\s+"([^"]+)"\s*\{')
_BLOCK_OPEN = re.compile(r'^([A-Za-z_][\w-]*)(?:\s+"[^"]*")*\s*\{(.*)$')
_MAP_ASSIGN = re.compile(r"^([\w-]+)\s*=\s*\{(.*)$")
_KEY_VALUE = re.compile(r"^([\w-]+)\s*=\s*(.+)$")
_INT_LITERAL = re.compile(r"^\d+$")
_INT64_MAX = 2**63 - 1
_FLOAT_LITERAL = re.compile(r"^\d*\.\d+$")

_OPENERS = {"{": "}", "[": "]", "(": ")"}
_CLOSERS = {"}", "]", ")"}


def parse_terraform(text: str) -> list[TerraformResource]:
    resources = [
        TerraformResource(
            type=block.type,
            name=block.name,
            config=parse_config_block(block.body),
        )
        for block in parse_resource_blocks(text)
    ]
    logger.debug("Parsed %d terraform resources", len(resources))
    return resources


def parse_resource_blocks(text: str) -> list[RawResourceBlock]:
    blocks: list[RawResourceBlock] = []
    position = 0
    while True:
        header = _next_resource_header(text, position)
        if header is None:
            break
        body_start = header.end()
        body_end = _find_closing_brace(text, body_start)
        if body_end is None:
            logger.debug(
                "Dropping unterminated resource %s.%s at offset %d",
                header.group(1),
                header.group(2),
                header.start(),
            )
            position = body_start
            continue
        blocks.append(
            RawResourceBlock(
                type=header.group(1),
                name=header.group(2),
                body=text[body_start:body_end],
                offset=header.start(),
            )
        )
        position = body_end + 1
    return blocks


def _next_resource_header(text: str, position: int) -> re.Match[str] | None:
    """Find the next ``resource`` header that is not inside a string or a line comment."""
    length = len(text)
    while position < length:
        char = text[position]
        if char == '"':
            position = _skip_string(text, position + 1)
            continue
        if char == "#" or text.startswith("//", position):
            newline = text.find("\n", position)
            if newline == -1:
                return None
            position = newline
            continue
        if char == "r":
            header = _RESOURCE_HEADER.match(text, position)
            if header is not None:
                return header
        position += 1
    return None


def _skip_string(text: str, position: int) -> int:
    length = len(text)
    while position < length:
        char = text[position]
        if char == "\\":
            position += 2
            continue
        if char in {'"', "\n"}:
            return position + 1
        position += 1
    return length


def _find_closing_brace(text: str, position: int) -> int | None:
    """Return the index of the brace closing the block opened just before ``position``."""
    depth = 1
    in_string = False
    length = len(text)
    while position < length:
        char = text[position]
        if in_string:
            if char == "\\":
                position += 2
                continue
            if char in {'"', "\n"}:
                in_string = False
        elif char == '"':
            in_string = True
        elif char == "#" or text.startswith("//", position):
            newline = text.find("\n", position)
            if newline == -1:
                return None
            position = newline
            continue
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return position
        position += 1
    return None


def parse_config_block(body: str) -> dict[str, Value]:
    lines = [line.strip() for line in strip_line_comments(body).splitlines()]
    return _parse_lines([line for line in lines if line])


def _parse_lines(lines: Sequence[str]) -> dict[str, Value]:
    config: dict[str, Value] = {}
    index = 0
    while index < len(lines):
        index = _parse_entry(lines, index, config)
    return config


def _parse_entry(lines: Sequence[str], index: int, config: dict[str, Value]) -> int:
    line = lines[index]

    if "=" not in line.split("{", 1)[0]:
        block = _BLOCK_OPEN.match(line)
        if block:
            body, next_index = _collect_block(lines, index, block.group(2))
            _store_block(config, block.group(1), _parse_lines(body))
            return next_index

    attribute_map = _MAP_ASSIGN.match(line)
    if attribute_map:
        body, next_index = _collect_block(lines, index, attribute_map.group(2))
        config[attribute_map.group(1)] = _parse_lines(body)
        return next_index

    pair = _KEY_VALUE.match(line)
    if not pair:
        return index + 1

    key, raw_value = pair.group(1), pair.group(2).strip()
    next_index = index + 1
    depth = _nesting_delta(raw_value)
    parts = [raw_value]
    while depth > 0 and next_index < len(lines):
        continuation = lines[next_index]
        parts.append(continuation)
        depth += _nesting_delta(continuation)
        next_index += 1
    config[key] = parse_value(" ".join(parts))
    return next_index


def _collect_block(lines: Sequence[str], index: int, rest: str) -> tuple[list[str], int]:
    depth = 1 + _brace_delta(rest)
    if depth <= 0:
        inline = rest[: rest.rfind("}")].strip()
        return [item.strip() for item in split_top_level(inline) if item.strip()], index + 1

    body = [rest.strip()] if rest.strip() else []
    index += 1
    while index < len(lines):
        line = lines[index]
        depth += _brace_delta(line)
        index += 1
        if depth <= 0:
            closing = line[: line.rfind("}")].strip()
            if closing:
                body.append(closing)
            return body, index
        body.append(line)
    return body, index


def _store_block(config: dict[str, Value], name: str, value: dict[str, Value]) -> None:
    existing = config.get(name)
    if existing is None:
        config[name] = value
    elif isinstance(existing, list):
        existing.append(value)
    else:
        config[name] = [existing, value]


def parse_value(raw: str) -> Value:
    value = raw.strip()
    if value.endswith(","):
        value = value[:-1].rstrip()

    if len(value) >= 2 and value.startswith('"') and value.endswith('"'):
        return value[1:-1]
    if value == "true":
        return True
    if value == "false":
        return False
    if _INT_LITERAL.match(value) and int(value) <= _INT64_MAX:
        return int(value)
    if _FLOAT_LITERAL.match(value):
        return float(value)
    if value.startswith("[") and value.endswith("]"):
        inner = value[1:-1].strip()
        if not inner:
            return []
        return [parse_value(item) for item in split_top_level(inner) if item.strip()]
    if "." in value:
        return Reference(value)
    return value


def split_top_level(text: str, separator: str = ",") -> list[str]:
    """Split on ``separator`` outside quoted strings and bracketed groups."""
    parts: list[str] = []
    current: list[str] = []
    depth = 0
    in_string = False
    escaped = False
    for char in text:
        if in_string:
            current.append(char)
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char in _OPENERS:
            depth += 1
        elif char in _CLOSERS:
            depth = max(0, depth - 1)
        elif char == separator and depth == 0:
            parts.append("".join(current))
            current = []
            continue
        current.append(char)
    parts.append("".join(current))
    return parts


def strip_line_comments(content: str) -> str:
    result_lines: list[str] = []
    for line in content.splitlines():
        in_string = False
        escaped = False
        cleaned: list[str] = []
        for idx, char in enumerate(line):
            if in_string:
                if escaped:
                    escaped = False
                elif char == "\\":
                    escaped = True
                elif char == '"':
                    in_string = False
            elif char == '"':
                in_string = True
            elif char == "#" or (char == "/" and line[idx + 1 : idx + 2] == "/"):
                break
            cleaned.append(char)
        result_lines.append("".join(cleaned))
    return "\n".join(result_lines)


def _brace_delta(line: str) -> int:
    return _count_outside_strings(line, "{") - _count_outside_strings(line, "}")


def _nesting_delta(line: str) -> int:
    opened = sum(_count_outside_strings(line, char) for char in _OPENERS)
    closed = sum(_count_outside_strings(line, char) for char in _CLOSERS)
    return opened - closed


def _count_outside_strings(line: str, target: str) -> int:
    count = 0
    in_string = False
    escaped = False
    for char in line:
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
        elif char == '"':
            in_string = True
        elif char == target:
            count += 1
    return count
