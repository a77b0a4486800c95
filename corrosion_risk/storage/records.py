"""
Record Mapping — Stored/Exported Documents to Domain Models

Accepts rows as the backend-as-a-service returns them (snake_case, with
`norm_parameters` / `standard_parameters` joins and JSON columns that may
arrive as strings) and camelCase documents exported by the web client.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Union

from corrosion_risk.schemas import Datapoint, Norm, Parameter

from .casing import Casing, convert_keys


logger = logging.getLogger(__name__)

# Join aliases under which a norm's parameter associations are stored
PARAMETER_ASSOCIATION_KEYS = ("parameters", "norm_parameters", "standard_parameters")


def _json_column(value: Any) -> Any:
    """JSON columns may be returned as text."""
    if isinstance(value, str):
        return json.loads(value) if value.strip() else []
    return value


def load_parameter(record: Dict[str, Any]) -> Parameter:
    """Build a Parameter from a stored row or exported document."""
    return Parameter.model_validate(convert_keys(record, "snake"))


def load_norm(record: Dict[str, Any]) -> Norm:
    """
    Build a Norm from a stored row or exported document.

    Raises:
        pydantic.ValidationError: record does not describe a valid norm
        json.JSONDecodeError: a JSON column holds malformed text
    """
    data = convert_keys(record, "snake")

    associations = None
    for key in PARAMETER_ASSOCIATION_KEYS:
        if data.get(key) is not None:
            associations = data.pop(key)
            break
    for key in PARAMETER_ASSOCIATION_KEYS:
        data.pop(key, None)

    data["parameters"] = [
        {**assoc, "rating_ranges": _json_column(assoc.get("rating_ranges")) or []}
        for assoc in (associations or [])
    ]
    data["output_config"] = _json_column(data.get("output_config")) or []
    return Norm.model_validate(data)


def load_datapoint(record: Dict[str, Any]) -> Datapoint:
    """Build a Datapoint; values/ratings keys are kept as stored."""
    data = convert_keys(record, "snake")
    data["values"] = _json_column(data.get("values")) or {}
    data["ratings"] = _json_column(data.get("ratings")) or {}
    return Datapoint.model_validate(data)


def dump_norm(norm: Norm, casing: Casing = "snake") -> Dict[str, Any]:
    """
    Serialise a norm to a JSON-shaped dict.

    rating_ranges rows keep min/max/rating and output_config rows keep
    name/formula/description, so load_norm(dump_norm(n)) == n.
    """
    data = norm.model_dump(mode="json")
    if casing == "camel":
        return convert_keys(data, "camel")
    return data


def dump_datapoint(datapoint: Datapoint, casing: Casing = "snake") -> Dict[str, Any]:
    data = datapoint.model_dump(mode="json")
    if casing == "camel":
        return convert_keys(data, "camel")
    return data


def load_norms_file(path: Union[str, Path]) -> List[Norm]:
    """
    Load norms from a JSON file holding a list or {"norms": [...]}.

    Raises:
        FileNotFoundError, json.JSONDecodeError, pydantic.ValidationError
    """
    path = Path(path)
    with path.open(encoding="utf-8") as fh:
        payload = json.load(fh)

    if isinstance(payload, dict):
        payload = payload.get("norms", [])
    norms = [load_norm(record) for record in payload]
    logger.info(f"Loaded {len(norms)} norm(s) from {path}")
    return norms


def load_datapoints_file(path: Union[str, Path]) -> List[Datapoint]:
    """Load datapoints from a JSON file holding a list or {"datapoints": [...]}."""
    path = Path(path)
    with path.open(encoding="utf-8") as fh:
        payload = json.load(fh)

    if isinstance(payload, dict):
        payload = payload.get("datapoints", [])
    return [load_datapoint(record) for record in payload]
