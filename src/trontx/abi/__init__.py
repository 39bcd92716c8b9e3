"""Contract-call parameter encoding."""

from trontx.abi.codec import (
    FlatParamCodec,
    ParamCodec,
    StructuredParamCodec,
    decode_revert_reason,
    function_selector,
    select_codec,
)
from trontx.abi.types import ABIEntry, ABIParam, parse_abi

__all__ = [
    "ABIEntry",
    "ABIParam",
    "parse_abi",
    "ParamCodec",
    "FlatParamCodec",
    "StructuredParamCodec",
    "function_selector",
    "select_codec",
    "decode_revert_reason",
]
