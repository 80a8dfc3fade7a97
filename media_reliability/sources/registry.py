"""Loading and validating the source registry.

The registry is a JSON array maintained by moderators. It is validated
in full before any source reaches the matcher: one malformed entry
rejects the whole registry with a readable message.
"""

import json
import logging
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from media_reliability.sources.schemas import Source

logger = logging.getLogger(__name__)

_SOURCE_LIST = TypeAdapter(list[Source])


class RegistryValidationError(ValueError):
    """Raised when registry text is not a valid list of sources."""

    def __init__(self, message: str, setting: str = "sources"):
        super().__init__(f'Invalid value for "{setting}" setting. Error:\n {message}')
        self.setting = setting
        self.detail = message


def format_validation_error(exc: ValidationError) -> str:
    """
    Render a pydantic ValidationError as one line per problem.

    Example:
        Validation error: Input should be less than or equal to 5 at "[0].tier"
    """
    lines = []
    for error in exc.errors():
        location = ""
        for part in error["loc"]:
            if isinstance(part, int):
                location += f"[{part}]"
            else:
                location += f".{part}" if location else str(part)
        suffix = f' at "{location}"' if location else ""
        lines.append(f"Validation error: {error['msg']}{suffix}")
    return "\n".join(lines)


def load_sources(text: str) -> tuple[Source, ...]:
    """
    Parse and validate registry JSON.

    Args:
        text: JSON array of source objects

    Returns:
        Validated sources in registry order

    Raises:
        RegistryValidationError: On invalid JSON, schema errors or duplicate ids
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise RegistryValidationError(f"Invalid JSON input ({e.msg} at line {e.lineno})") from e

    try:
        sources = _SOURCE_LIST.validate_python(data)
    except ValidationError as e:
        raise RegistryValidationError(format_validation_error(e)) from e

    seen: set[str] = set()
    duplicates = []
    for source in sources:
        if source.id in seen:
            duplicates.append(source.id)
        seen.add(source.id)
    if duplicates:
        raise RegistryValidationError(f"Duplicate source ids: {', '.join(sorted(set(duplicates)))}")

    logger.debug(f"Loaded {len(sources)} sources")
    return tuple(sources)


def load_sources_file(path: Path | str) -> tuple[Source, ...]:
    """Load and validate a registry JSON file (UTF-8)."""
    registry_path = Path(path)
    sources = load_sources(registry_path.read_text(encoding="utf-8"))
    logger.info(f"Loaded {len(sources)} sources from {registry_path}")
    return sources
