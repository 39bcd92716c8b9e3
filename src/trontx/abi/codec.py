"""
ABI parameter codecs.

Two codecs share one capability (``ParamCodec``):

- FlatParamCodec (V1): flat lists of typed values, no tuples.
- StructuredParamCodec (V2): parameters described by ABI metadata with
  tuple components, nested to any depth.

Both delegate head/tail encoding to eth_abi and convert values on the way
in and out: ledger addresses become 20-byte words, numeric strings become
integers, hex strings become bytes, and trcToken is encoded as uint256.

Example:
    >>> codec = StructuredParamCodec()
    >>> entry = ABIEntry.from_signature("transfer(address,uint256)")
    >>> call = codec.encode_call(entry, ["TNPeeaaFB7K9cmo4uQpcU32zGK8G1NYqeL", 100])
"""

from __future__ import annotations

import re
from typing import Any, List, Mapping, Optional, Protocol, Sequence, Union

from eth_abi import decode as abi_decode
from eth_abi import encode as abi_encode
from eth_abi.exceptions import DecodingError, EncodingError as EthEncodingError
from web3 import Web3

from trontx.abi.types import ABIEntry, ABIParam
from trontx.constants import SELECTOR_SIZE
from trontx.errors import EncodingError, InvalidAddressError
from trontx.utils import address as address_codec
from trontx.utils.validation import to_integer

_ARRAY_RE = re.compile(r"^(.*)\[(\d*)\]$")
_HEX_DIGITS_RE = re.compile(r"[0-9a-fA-F]*")

ERROR_SELECTOR = bytes.fromhex("08c379a0")


def function_selector(signature: str) -> bytes:
    """Return the 4-byte selector: keccak256 of the whitespace-free signature."""
    return bytes(Web3.keccak(text=re.sub(r"\s", "", signature))[:SELECTOR_SIZE])


def _to_bytes(data: Union[bytes, str], abi_type: Optional[str] = None) -> bytes:
    """Accept bytes, bytearray or a hex string (optional 0x prefix)."""
    if isinstance(data, (bytes, bytearray)):
        return bytes(data)
    if not isinstance(data, str):
        raise EncodingError(f"Invalid bytes value: {data!r}", abi_type=abi_type)
    text = data[2:] if data.startswith(("0x", "0X")) else data
    if len(text) % 2 or not _HEX_DIGITS_RE.fullmatch(text):
        raise EncodingError(f"Invalid hex data: {data!r}", abi_type=abi_type)
    return bytes.fromhex(text)


class ParamCodec(Protocol):
    """Capability shared by the V1 and V2 codecs."""

    def selector(self, entry: ABIEntry) -> bytes: ...

    def encode(self, entry: ABIEntry, values: Sequence[Any]) -> bytes: ...

    def decode(
        self, entry: ABIEntry, data: Union[bytes, str], *, use_outputs: bool = True
    ) -> List[Any]: ...

    def encode_call(self, entry: ABIEntry, values: Sequence[Any]) -> bytes: ...


class _EthAbiCodec:
    """eth_abi-backed walker shared by both codecs."""

    version = 0

    def selector(self, entry: ABIEntry) -> bytes:
        return function_selector(entry.signature())

    def encode(self, entry: ABIEntry, values: Sequence[Any]) -> bytes:
        return self.encode_params(entry.inputs, values)

    def encode_call(self, entry: ABIEntry, values: Sequence[Any]) -> bytes:
        return self.selector(entry) + self.encode(entry, values)

    def decode(
        self,
        entry: ABIEntry,
        data: Union[bytes, str],
        *,
        use_outputs: bool = True,
    ) -> List[Any]:
        params = entry.outputs if use_outputs else entry.inputs
        return self.decode_params(params, data)

    # ------------------------------------------------------------------

    def encode_params(self, params: Sequence[ABIParam], values: Sequence[Any]) -> bytes:
        self._check_params(params)
        if isinstance(values, Mapping):
            values = [values[p.name] for p in params]
        values = list(values)
        if len(values) != len(params):
            raise EncodingError(
                f"Expected {len(params)} values, got {len(values)}",
                details={"version": self.version},
            )
        types = [p.abi_type() for p in params]
        converted = [self._encode_value(p, v) for p, v in zip(params, values)]
        try:
            return abi_encode(types, converted)
        except (EthEncodingError, TypeError, ValueError, OverflowError) as exc:
            raise EncodingError(
                f"Failed to encode parameters: {exc}",
                abi_type=",".join(types),
            ) from exc

    def decode_params(
        self, params: Sequence[ABIParam], data: Union[bytes, str]
    ) -> List[Any]:
        self._check_params(params)
        raw = _to_bytes(data)
        types = [p.abi_type() for p in params]
        try:
            decoded = abi_decode(types, raw)
        except (DecodingError, TypeError, ValueError) as exc:
            raise EncodingError(
                f"Failed to decode result: {exc}",
                abi_type=",".join(types),
            ) from exc
        return [self._decode_value(p, v) for p, v in zip(params, decoded)]

    def _check_params(self, params: Sequence[ABIParam]) -> None:
        """Hook for codecs that restrict the accepted parameter shapes."""

    # ------------------------------------------------------------------

    def _encode_value(self, param: ABIParam, value: Any) -> Any:
        match = _ARRAY_RE.match(param.type)
        if match:
            if not isinstance(value, (list, tuple)):
                raise EncodingError(
                    f"Expected a list for {param.type}", abi_type=param.type
                )
            if match.group(2) and len(value) != int(match.group(2)):
                raise EncodingError(
                    f"Expected {match.group(2)} items for {param.type}",
                    abi_type=param.type,
                )
            element = ABIParam(type=match.group(1), components=param.components)
            return [self._encode_value(element, v) for v in value]

        if param.type == "tuple":
            if isinstance(value, Mapping):
                value = [value[c.name] for c in param.components]
            if not isinstance(value, (list, tuple)) or len(value) != len(param.components):
                raise EncodingError(
                    "Tuple value does not match its components",
                    abi_type=param.abi_type(),
                )
            return tuple(self._encode_value(c, v) for c, v in zip(param.components, value))

        base = param.abi_type()
        if base == "address":
            try:
                return Web3.to_checksum_address("0x" + address_codec.to_evm(value).hex())
            except InvalidAddressError as exc:
                raise EncodingError(f"Invalid address value: {value!r}", abi_type=base) from exc
        if base.startswith(("uint", "int")):
            number = to_integer(value)
            if number is None:
                raise EncodingError(f"Invalid integer value: {value!r}", abi_type=param.type)
            return number
        if base == "bool":
            if isinstance(value, str) and value.lower() in ("true", "false"):
                return value.lower() == "true"
            if not isinstance(value, bool):
                raise EncodingError(f"Invalid bool value: {value!r}", abi_type=base)
            return value
        if base.startswith("bytes"):
            return _to_bytes(value, base)
        if base == "string":
            if not isinstance(value, str):
                raise EncodingError(f"Invalid string value: {value!r}", abi_type=base)
            return value
        return value

    def _decode_value(self, param: ABIParam, value: Any) -> Any:
        match = _ARRAY_RE.match(param.type)
        if match:
            element = ABIParam(type=match.group(1), components=param.components)
            return [self._decode_value(element, v) for v in value]
        if param.type == "tuple":
            return [self._decode_value(c, v) for c, v in zip(param.components, value)]
        if param.type == "address":
            return address_codec.from_evm(value)
        return value


class FlatParamCodec(_EthAbiCodec):
    """
    V1 codec: flat parameter lists.

    Parameters are supplied either through an ABIEntry without tuple types
    or as ``[{"type": "address", "value": ...}, ...]`` via ``encode_typed``.
    """

    version = 1

    def _check_params(self, params: Sequence[ABIParam]) -> None:
        for param in params:
            if param.is_tuple or "(" in param.type:
                raise EncodingError(
                    "Tuple types require the structured (V2) codec",
                    abi_type=param.signature_type(),
                )

    def encode_typed(self, params: Sequence[Mapping[str, Any]]) -> bytes:
        """Encode ``[{"type": ..., "value": ...}]`` pairs."""
        abi_params = []
        values = []
        for index, item in enumerate(params):
            if "type" not in item or "value" not in item:
                raise EncodingError(f"Parameter {index} needs a type and a value")
            abi_params.append(ABIParam.from_type(item["type"]))
            values.append(item["value"])
        return self.encode_params(abi_params, values)

    def decode_types(self, types: Sequence[str], data: Union[bytes, str]) -> List[Any]:
        """Decode ``data`` against a flat list of type strings."""
        return self.decode_params([ABIParam.from_type(t) for t in types], data)


class StructuredParamCodec(_EthAbiCodec):
    """V2 codec: parameters with tuple components, any nesting depth."""

    version = 2


def select_codec(function_abi: Optional[Any] = None) -> _EthAbiCodec:
    """Choose the codec for the supplied metadata: ABI metadata selects V2."""
    if function_abi is not None:
        return StructuredParamCodec()
    return FlatParamCodec()


def decode_revert_reason(data: Union[bytes, str, None]) -> Optional[str]:
    """Return the message of an ``Error(string)`` revert payload, if present."""
    if not data:
        return None
    raw = _to_bytes(data)
    if raw[:SELECTOR_SIZE] != ERROR_SELECTOR:
        return None
    try:
        (message,) = abi_decode(["string"], raw[SELECTOR_SIZE:])
    except (DecodingError, ValueError):
        return None
    return message


__all__ = [
    "ParamCodec",
    "FlatParamCodec",
    "StructuredParamCodec",
    "function_selector",
    "select_codec",
    "decode_revert_reason",
]
