import hashlib
import json
import logging
import tomllib
from pathlib import Path
from typing import Any

import tomli_w

from ._ir import CompiledService

logger = logging.getLogger(__name__)


def _read_document(path: Path) -> dict[str, Any]:
    """Read a JSON or TOML document, chosen by file suffix."""
    match path.suffix.lower():
        case ".json":
            with path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        case ".toml":
            with path.open("rb") as f:
                data = tomllib.load(f)
        case _:
            msg = f"Unsupported file type '{path.suffix}' for {path}; expected .json or .toml"
            raise ValueError(msg)
    if not isinstance(data, dict):
        msg = f"Expected an object at the top level of {path}, got {type(data).__name__}"
        raise TypeError(msg)
    return data


def load_spec(input_path: Path | str) -> dict[str, Any]:
    """Load a raw project spec from a JSON or TOML file.

    The returned mapping is not validated; pass it to `compile_spec` or
    `validate_spec`.

    Args:
        input_path: Path to a ``.json`` or ``.toml`` file.

    Returns:
        The parsed document.

    """
    input_path = Path(input_path)
    raw = _read_document(input_path)
    logger.debug(f"Loaded spec from {input_path}")
    return raw


def compiled_to_dict(ir: CompiledService) -> dict[str, Any]:
    """Convert an IR to its JSON-compatible wire form (camelCase keys, unset optionals omitted)."""
    return ir.model_dump(mode="json", by_alias=True, exclude_none=True)


def to_canonical_json(ir: CompiledService) -> str:
    """Serialize an IR to its canonical, byte-stable JSON form.

    Keys are sorted and separators are compact, so two IRs compiled from the
    same logical spec produce identical strings.
    """
    return json.dumps(compiled_to_dict(ir), sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def ir_digest(ir: CompiledService) -> str:
    """Content address of an IR: ``"sha256:<hexdigest>"`` of its canonical JSON."""
    h = hashlib.sha256(to_canonical_json(ir).encode("utf-8"))
    return f"sha256:{h.hexdigest()}"


def _drop_none(value: Any) -> Any:
    # TOML has no null; free-form maps (tool config) may still hold None values.
    if isinstance(value, dict):
        return {k: _drop_none(v) for k, v in value.items() if v is not None}
    if isinstance(value, list):
        return [_drop_none(item) for item in value]
    return value


def export_compiled(ir: CompiledService, output_path: Path | str, *, indent: int = 2) -> None:
    """Write an IR to a ``.json`` (pretty, sorted keys) or ``.toml`` file.

    Parent directories are created as needed. TOML cannot express null, so
    ``None`` values inside free-form maps are omitted from ``.toml`` output.

    Raises:
        ValueError: If the suffix is neither ``.json`` nor ``.toml``.

    """
    output_path = Path(output_path)
    data = compiled_to_dict(ir)

    # Nothing is written unless serialization succeeds.
    match output_path.suffix.lower():
        case ".json":
            content = json.dumps(data, indent=indent, sort_keys=True, ensure_ascii=False) + "\n"
        case ".toml":
            content = tomli_w.dumps(_drop_none(data))
        case _:
            msg = f"Unsupported file type '{output_path.suffix}' for {output_path}; expected .json or .toml"
            raise ValueError(msg)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(content, encoding="utf-8")
    logger.debug(f"Exported compiled service to {output_path}")


def load_compiled(input_path: Path | str) -> CompiledService:
    """Load an IR previously written by `export_compiled` (or produced elsewhere).

    Raises:
        pydantic.ValidationError: If the document is not a well-formed CompiledService.

    """
    input_path = Path(input_path)
    ir = CompiledService.model_validate(_read_document(input_path))
    logger.debug(f"Loaded compiled service from {input_path}")
    return ir
