"""
Validation schema for proofs exchanged as JSON.

Hashes travel as ``0x``-prefixed hex strings; integer fields are strict so
that ``"5"`` or ``true`` never sneak in as an index.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictInt, field_validator

from mmr.crypto import hex_to_bytes
from mmr.utils.validation import MAX_PATH_LENGTH, MAX_U64, validate_hex_string


def _check_hex(value: str, name: str) -> str:
    valid, err = validate_hex_string(value, name)
    if not valid:
        raise ValueError(err)
    if not hex_to_bytes(value):
        raise ValueError(f"{name} is empty")
    return value


class ProofDocument(BaseModel):
    """JSON shape of a leaf-inclusion proof."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    leaf_index: StrictInt = Field(ge=0, le=MAX_U64)
    leaf_value: Optional[str] = None
    sibling_path: List[str] = Field(default_factory=list, max_length=MAX_PATH_LENGTH)
    own_peak_position: StrictInt = Field(ge=0, le=MAX_U64)
    peaks: List[str] = Field(min_length=1, max_length=MAX_PATH_LENGTH)

    @field_validator("leaf_value")
    @classmethod
    def _leaf_value_hex(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        return _check_hex(value, "leaf_value")

    @field_validator("sibling_path", "peaks")
    @classmethod
    def _hash_list_hex(cls, values: List[str]) -> List[str]:
        return [_check_hex(v, f"hash[{i}]") for i, v in enumerate(values)]
