"""Parsing of raw generate_image tool arguments into typed requests."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Mapping, Optional, Union


class Resolution(str, Enum):
    """Image sizes accepted by the Flux Schnell endpoint."""

    SQUARE = "1024x1024"
    PORTRAIT_3_4 = "960x1280"
    PORTRAIT_3_4_SMALL = "768x1024"
    PORTRAIT_1_2 = "720x1440"
    PORTRAIT_9_16 = "720x1280"


RESOLUTION_VALUES: tuple[str, ...] = tuple(item.value for item in Resolution)


@dataclass(frozen=True, slots=True)
class GenerationRequest:
    """Validated arguments of one generate_image call."""

    prompt: str
    resolution: Resolution
    seed: Optional[int] = None


@dataclass(frozen=True, slots=True)
class ParseSuccess:
    request: GenerationRequest
    ok: bool = True


@dataclass(frozen=True, slots=True)
class ParseFailure:
    reason: str
    ok: bool = False


ParseResult = Union[ParseSuccess, ParseFailure]

# A check returns None when the arguments pass, otherwise a failure reason.
ArgumentCheck = Callable[[Mapping[str, Any]], Optional[str]]


def coerce_seed(value: Any) -> Optional[int]:
    """Return value as a non-negative integer, or None if it is not one.

    Booleans and empty strings are rejected rather than read as 1/0;
    numeric strings and integral floats are accepted.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        number: float = value
    elif isinstance(value, float):
        number = value
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            return coerce_seed(int(text))
        except ValueError:
            pass
        try:
            number = float(text)
        except ValueError:
            return None
    else:
        return None

    if isinstance(number, float):
        if not math.isfinite(number) or not number.is_integer():
            return None
        number = int(number)
    if number < 0:
        return None
    return int(number)


def _check_prompt(args: Mapping[str, Any]) -> Optional[str]:
    prompt = args.get("prompt")
    if not isinstance(prompt, str):
        return "prompt must be a string"
    if not prompt.strip():
        return "prompt must not be empty"
    return None


def _check_resolution(args: Mapping[str, Any]) -> Optional[str]:
    resolution = args.get("resolution")
    if not isinstance(resolution, str) or resolution not in RESOLUTION_VALUES:
        return f"resolution must be one of {', '.join(RESOLUTION_VALUES)}"
    return None


def _check_seed(args: Mapping[str, Any]) -> Optional[str]:
    seed = args.get("seed")
    if seed is None:
        return None
    if coerce_seed(seed) is None:
        return "seed must be an integer >= 0"
    return None


ARGUMENT_CHECKS: tuple[ArgumentCheck, ...] = (_check_prompt, _check_resolution, _check_seed)


def parse_generation_args(args: Any) -> ParseResult:
    """Validate raw tool arguments and build a GenerationRequest.

    Checks run in order and the first failing one decides the reason.
    """
    if args is None or not isinstance(args, Mapping):
        return ParseFailure("arguments must be an object")

    for check in ARGUMENT_CHECKS:
        reason = check(args)
        if reason is not None:
            return ParseFailure(reason)

    seed = args.get("seed")
    return ParseSuccess(
        GenerationRequest(
            prompt=args["prompt"],
            resolution=Resolution(args["resolution"]),
            seed=coerce_seed(seed) if seed is not None else None,
        )
    )
