"""
ABI metadata types.

ABIParam and ABIEntry describe contract functions the way ABI JSON does:
a function (or constructor) has typed inputs and outputs, and tuple
parameters carry their member types in ``components``.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from trontx.constants import TRC_TOKEN_TYPE
from trontx.errors import EncodingError

_ARRAY_SUFFIX_RE = re.compile(r"^(.*?)((?:\[\d*\])*)$")


def split_types(text: str) -> List[str]:
    """Split a comma separated type list, respecting parentheses."""
    parts: List[str] = []
    depth = 0
    current = ""
    for char in text:
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth < 0:
                raise EncodingError(f"Unbalanced parentheses in {text!r}")
        if char == "," and depth == 0:
            parts.append(current)
            current = ""
        else:
            current += char
    if depth != 0:
        raise EncodingError(f"Unbalanced parentheses in {text!r}")
    if current:
        parts.append(current)
    return parts


@dataclass(frozen=True)
class ABIParam:
    """A single input or output parameter."""

    type: str
    name: str = ""
    components: Tuple["ABIParam", ...] = ()
    indexed: bool = False

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ABIParam":
        return cls(
            type=data["type"],
            name=data.get("name", "") or "",
            components=tuple(cls.from_dict(c) for c in data.get("components") or ()),
            indexed=bool(data.get("indexed", False)),
        )

    @classmethod
    def from_type(cls, type_str: str, name: str = "") -> "ABIParam":
        """Build a param from a type string, expanding inline tuples like ``(uint256,address)[]``."""
        type_str = re.sub(r"\s", "", type_str)
        if type_str.startswith("("):
            close = _matching_paren(type_str)
            inner, suffix = type_str[1:close], type_str[close + 1:]
            return cls(
                type="tuple" + suffix,
                name=name,
                components=tuple(cls.from_type(t) for t in split_types(inner)),
            )
        return cls(type=type_str, name=name)

    @property
    def is_tuple(self) -> bool:
        return self.type.startswith("tuple")

    @property
    def array_suffix(self) -> str:
        return _ARRAY_SUFFIX_RE.match(self.type).group(2)

    def signature_type(self) -> str:
        """Type as it appears in a function signature (trcToken kept literal)."""
        if self.is_tuple:
            inner = ",".join(c.signature_type() for c in self.components)
            return f"({inner}){self.array_suffix}"
        return self.type

    def abi_type(self) -> str:
        """Type string understood by eth_abi (trcToken mapped to uint256)."""
        if self.is_tuple:
            inner = ",".join(c.abi_type() for c in self.components)
            return f"({inner}){self.array_suffix}"
        base = _ARRAY_SUFFIX_RE.match(self.type).group(1)
        if base == TRC_TOKEN_TYPE:
            return "uint256" + self.array_suffix
        return self.type

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"name": self.name, "type": self.type}
        if self.components:
            data["components"] = [c.to_dict() for c in self.components]
        if self.indexed:
            data["indexed"] = True
        return data


def _matching_paren(text: str) -> int:
    depth = 0
    for index, char in enumerate(text):
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth == 0:
                return index
    raise EncodingError(f"Unbalanced parentheses in {text!r}")


@dataclass(frozen=True)
class ABIEntry:
    """
    A function, constructor, event or other ABI entry.

    Example:
        >>> entry = ABIEntry.from_signature("transfer(address,uint256)")
        >>> entry.signature()
        'transfer(address,uint256)'
    """

    name: str = ""
    type: str = "function"
    inputs: Tuple[ABIParam, ...] = ()
    outputs: Tuple[ABIParam, ...] = ()
    state_mutability: str = "nonpayable"
    payable: Optional[bool] = None
    constant: Optional[bool] = None
    anonymous: bool = False

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ABIEntry":
        state = data.get("stateMutability") or data.get("state_mutability")
        payable = data.get("payable")
        if not state:
            state = "payable" if payable else "nonpayable"
        return cls(
            name=data.get("name", "") or "",
            type=(data.get("type") or "function").lower(),
            inputs=tuple(ABIParam.from_dict(p) for p in data.get("inputs") or ()),
            outputs=tuple(ABIParam.from_dict(p) for p in data.get("outputs") or ()),
            state_mutability=str(state).lower(),
            payable=payable,
            constant=data.get("constant"),
            anonymous=bool(data.get("anonymous", False)),
        )

    @classmethod
    def from_signature(
        cls,
        signature: str,
        outputs: Sequence[str] = (),
    ) -> "ABIEntry":
        """Build a function entry from ``name(type,...)``."""
        signature = re.sub(r"\s", "", signature)
        open_index = signature.find("(")
        if open_index <= 0 or not signature.endswith(")"):
            raise EncodingError(f"Invalid function signature: {signature!r}")
        return cls(
            name=signature[:open_index],
            inputs=tuple(
                ABIParam.from_type(t) for t in split_types(signature[open_index + 1:-1])
            ),
            outputs=tuple(ABIParam.from_type(t) for t in outputs),
        )

    @property
    def is_payable(self) -> bool:
        return bool(self.payable) or self.state_mutability == "payable"

    def signature(self) -> str:
        inner = ",".join(p.signature_type() for p in self.inputs)
        return f"{self.name}({inner})"

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "type": self.type,
            "inputs": [p.to_dict() for p in self.inputs],
            "stateMutability": self.state_mutability,
        }
        if self.name:
            data["name"] = self.name
        if self.outputs:
            data["outputs"] = [p.to_dict() for p in self.outputs]
        if self.payable is not None:
            data["payable"] = self.payable
        if self.constant is not None:
            data["constant"] = self.constant
        if self.anonymous:
            data["anonymous"] = True
        return data


def parse_abi(abi: Union[str, Mapping[str, Any], Sequence[Any]]) -> List[ABIEntry]:
    """
    Normalize ABI input to a list of entries.

    Accepts a JSON string, a list of entry dicts, or a dict with an
    ``entrys`` key (the node's representation).
    """
    if isinstance(abi, str):
        try:
            abi = json.loads(abi)
        except ValueError as exc:
            raise EncodingError(f"Invalid ABI JSON: {exc}") from None
    if isinstance(abi, Mapping):
        abi = abi.get("entrys") or []
    if not isinstance(abi, (list, tuple)):
        raise EncodingError("ABI must be a list of entries")
    return [e if isinstance(e, ABIEntry) else ABIEntry.from_dict(e) for e in abi]


__all__ = ["ABIParam", "ABIEntry", "parse_abi", "split_types"]
