# schema.py
"""
Configuration blocks as pydantic models.

Each block (``os_disk``, ``upgrade_policy``, ...) is a ``Block`` subclass.
``normalize_block`` checks a user supplied mapping against a block model and
returns a new mapping where every declared option is present, so the expand
functions can read values without guarding for missing keys.
"""

from typing import Any, Dict, Sequence, Type

from pydantic import BaseModel, ConfigDict, model_validator
from pydantic import ValidationError as PydanticValidationError

from errors import ValidationError


class Block(BaseModel):
    """A configuration block. Unknown options are rejected, ``None`` means unset."""

    model_config = ConfigDict(extra="forbid")

    @model_validator(mode="before")
    @classmethod
    def _drop_unset(cls, data: Any) -> Any:
        # an empty YAML value (`disk_size_gb:`) is the same as leaving the option out
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if value is not None}
        return data


def _option_path(path: str, loc: Sequence[Any]) -> str:
    return ".".join(str(part) for part in ([path] if path else []) + list(loc))


def _translate(error: Dict[str, Any], path: str) -> ValidationError:
    option = _option_path(path, error["loc"])
    kind = error["type"]

    # an empty required list or string counts as a missing option
    empty = kind in ("too_short", "string_too_short") and error.get("ctx", {}).get("min_length") == 1
    if kind == "missing" or empty:
        return ValidationError(f"The argument `{option}` is required, but no definition was found.", field=option)
    if kind == "extra_forbidden":
        return ValidationError(f"Unsupported argument `{option}`", field=option)
    if kind == "value_error":
        # raised by a model validator, the message already names the options
        return ValidationError(str(error["ctx"]["error"]), field=option or None)
    return ValidationError(f"`{option or 'block'}`: {error['msg']}", field=option or None)


def normalize_block(model: Type[Block], raw: Any, path: str = "") -> Dict[str, Any]:
    """Validate ``raw`` against ``model`` and return it with every option populated.

    Raises ``ValidationError`` for unknown options, wrong types, values outside
    their allowed set or range, too many nested blocks, missing required
    options and options set together with one they conflict with. Only the
    first problem pydantic reports is raised.
    """
    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ValidationError(f"`{path or 'block'}` must be a mapping, got {raw!r}", field=path or None)

    try:
        block = model.model_validate(raw)
    except PydanticValidationError as e:
        raise _translate(e.errors()[0], path) from None

    return block.model_dump()
