"""
Contract message factory.

Turns validated operation parameters into typed contract messages, one
builder method per operation kind. Every method validates all of its inputs
before building anything and returns a frozen ContractMessage; nothing is
sent to the network here.

Example:
    >>> factory = ContractMessageFactory()
    >>> message = factory.send_trx(
    ...     "TNPeeaaFB7K9cmo4uQpcU32zGK8G1NYqeL",
    ...     1_000_000,
    ...     "TVDGpn4hCSzJ5nkHPLetk8KQBtwaTppnkr",
    ... )
    >>> message.contract_type
    <ContractType.TRANSFER: 1>
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from google.protobuf.message import Message

from trontx.abi.codec import FlatParamCodec, StructuredParamCodec
from trontx.abi.codec import function_selector as selector_for
from trontx.abi.types import ABIEntry, parse_abi
from trontx.config import BuildOptions
from trontx.constants import (
    ACCOUNT_ID_MAX_BYTES,
    ACCOUNT_ID_MIN_BYTES,
    DEFAULT_FEE_LIMIT,
    DEFAULT_ORIGIN_ENERGY_LIMIT,
    DEFAULT_USER_FEE_PERCENTAGE,
    MAX_INT32,
    MAX_INT64,
    MAX_ORIGIN_ENERGY_LIMIT,
    MAX_PERCENTAGE,
    MAX_TOKEN_PRECISION,
    MIN_FREEZE_DURATION_DAYS,
    TRX_EXCHANGE_TOKEN_ID,
)
from trontx.errors import (
    EncodingError,
    InvalidAmountError,
    InvalidRangeError,
    InvalidStringError,
    MissingRequiredFieldError,
    SameAccountError,
)
from trontx.protocol.contract_types import ContractType
from trontx.protocol.schema import message_class
from trontx.utils.logging import get_logger
from trontx.utils.validation import (
    AmountPolicy,
    validate_address,
    validate_amount,
    validate_fee_limit,
    validate_hex,
    validate_integer,
    validate_resource,
    validate_string,
    validate_timestamp,
    validate_token_id,
    validate_url,
)

_logger = get_logger(__name__)

OptionsLike = Union[BuildOptions, Mapping[str, Any], None]

RESOURCE_CODES: Dict[str, int] = {"BANDWIDTH": 0, "ENERGY": 1}

ABI_ENTRY_TYPES: Dict[str, int] = {
    "constructor": 1,
    "function": 2,
    "event": 3,
    "fallback": 4,
    "receive": 5,
    "error": 6,
}

ABI_STATE_MUTABILITY: Dict[str, int] = {
    "pure": 1,
    "view": 2,
    "nonpayable": 3,
    "payable": 4,
}

PERMISSION_TYPES: Dict[str, int] = {"owner": 0, "witness": 1, "active": 2}


def _now_ms() -> int:
    return int(time.time() * 1000)


def _freeze(value: Any) -> Any:
    if isinstance(value, Mapping):
        return MappingProxyType({k: _freeze(v) for k, v in value.items()})
    if isinstance(value, list):
        return tuple(_freeze(v) for v in value)
    return value


def _thaw(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {k: _thaw(v) for k, v in value.items()}
    if isinstance(value, tuple):
        return [_thaw(v) for v in value]
    return value


def _jsonable(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    if isinstance(value, bytes):
        return value.hex()
    return value


@dataclass(frozen=True)
class ContractMessage:
    """
    A validated, typed contract message ready for assembly.

    Attributes:
        contract_type: Wire tag of the contract kind.
        parameter: Read-only mapping of protobuf field name to value.
            Addresses are 21 raw bytes; nested messages are mappings.
        permission_id: Permission tier, only set when non-zero.
        fee_limit: Suggested fee limit for smart contract operations.
    """

    contract_type: ContractType
    parameter: Mapping[str, Any]
    permission_id: Optional[int] = None
    fee_limit: Optional[int] = None

    @property
    def owner_address(self) -> bytes:
        return self.parameter["owner_address"]

    @property
    def call_data(self) -> Optional[bytes]:
        """Encoded call data or constructor bytecode with arguments, if any."""
        if self.contract_type is ContractType.TRIGGER_SMART_CONTRACT:
            return self.parameter.get("data")
        if self.contract_type is ContractType.CREATE_SMART_CONTRACT:
            return self.parameter["new_contract"].get("bytecode")
        return None

    def to_protobuf(self) -> Message:
        """Build the protobuf parameter message."""
        cls = message_class(self.contract_type.message_name)
        return cls(**_thaw(self.parameter))

    def to_dict(self) -> Dict[str, Any]:
        """Return the parameter with bytes rendered as hex, as the node shows it."""
        return _jsonable(_thaw(self.parameter))


class ContractMessageFactory:
    """
    Builds contract messages for every supported operation kind.

    Args:
        clock: Callable returning the current time in milliseconds. Used for
            the token sale window checks.
    """

    def __init__(self, clock: Optional[Callable[[], int]] = None) -> None:
        self._clock = clock or _now_ms
        self._flat_codec = FlatParamCodec()
        self._structured_codec = StructuredParamCodec()

    # ========================================================================
    # Helpers
    # ========================================================================

    def _owner(self, owner: Any, options: BuildOptions, field_name: str = "origin address") -> bytes:
        if owner is None:
            owner = options.default_address
        if owner is None:
            raise MissingRequiredFieldError(field_name)
        return validate_address(owner, field_name)

    def _finish(
        self,
        contract_type: ContractType,
        parameter: Dict[str, Any],
        options: BuildOptions,
        fee_limit: Optional[int] = None,
    ) -> ContractMessage:
        permission_id = options.permission_id or None
        message = ContractMessage(
            contract_type=contract_type,
            parameter=_freeze({k: v for k, v in parameter.items() if v is not None}),
            permission_id=permission_id,
            fee_limit=fee_limit,
        )
        _logger.debug(
            "Built contract message",
            extra={
                "contract_type": contract_type.name,
                "permission_id": permission_id,
            },
        )
        return message

    @staticmethod
    def _resource(value: Any) -> int:
        return RESOURCE_CODES[validate_resource(value)]

    # ========================================================================
    # Transfers
    # ========================================================================

    def send_trx(
        self,
        to: Any,
        amount: Any,
        owner: Any = None,
        options: OptionsLike = None,
    ) -> ContractMessage:
        """
        Build a TRX transfer.

        Args:
            to: Recipient address.
            amount: Amount in sun, zero allowed.
            owner: Sender address; defaults to ``options.default_address``.
            options: Build options.

        Raises:
            InvalidAddressError: If either address is invalid.
            SameAccountError: If sender and recipient are the same account.
            InvalidAmountError: If amount is negative or not an integer.
        """
        options = BuildOptions.coerce(options)
        to_address = validate_address(to, "recipient address")
        owner_address = self._owner(owner, options)
        if to_address == owner_address:
            raise SameAccountError("Cannot transfer TRX to the same account", field="recipient address", address=to)
        amount = validate_amount(amount, AmountPolicy.NON_NEGATIVE)

        return self._finish(
            ContractType.TRANSFER,
            {"owner_address": owner_address, "to_address": to_address, "amount": amount},
            options,
        )

    def send_token(
        self,
        to: Any,
        amount: Any,
        token_id: Any,
        owner: Any = None,
        options: OptionsLike = None,
    ) -> ContractMessage:
        """Build a TRC-10 token transfer. Amount must be positive."""
        options = BuildOptions.coerce(options)
        to_address = validate_address(to, "recipient address")
        owner_address = self._owner(owner, options)
        if to_address == owner_address:
            raise SameAccountError("Cannot transfer tokens to the same account", field="recipient address", address=to)
        amount = validate_amount(amount, AmountPolicy.POSITIVE)
        token_id = validate_token_id(token_id)

        return self._finish(
            ContractType.TRANSFER_ASSET,
            {
                "asset_name": token_id.encode("utf-8"),
                "owner_address": owner_address,
                "to_address": to_address,
                "amount": amount,
            },
            options,
        )

    def purchase_token(
        self,
        issuer: Any,
        token_id: Any,
        amount: Any,
        buyer: Any = None,
        options: OptionsLike = None,
    ) -> ContractMessage:
        """Build a participation in a token sale."""
        options = BuildOptions.coerce(options)
        issuer_address = validate_address(issuer, "issuer address")
        buyer_address = self._owner(buyer, options, "buyer address")
        if issuer_address == buyer_address:
            raise SameAccountError("Cannot purchase tokens from same account", field="issuer address", address=issuer)
        amount = validate_amount(amount, AmountPolicy.POSITIVE)
        token_id = validate_token_id(token_id)

        return self._finish(
            ContractType.PARTICIPATE_ASSET_ISSUE,
            {
                "owner_address": buyer_address,
                "to_address": issuer_address,
                "asset_name": token_id.encode("utf-8"),
                "amount": amount,
            },
            options,
        )

    # ========================================================================
    # Tokens
    # ========================================================================

    def create_token(
        self,
        *,
        name: Any,
        abbreviation: Any,
        total_supply: Any,
        url: Any,
        sale_end: Any,
        sale_start: Any = None,
        description: Any = "",
        trx_ratio: Any = 1,
        token_ratio: Any = 1,
        free_bandwidth: Any = 0,
        free_bandwidth_limit: Any = 0,
        frozen_amount: Any = 0,
        frozen_duration: Any = 0,
        precision: Any = None,
        vote_score: Any = None,
        owner: Any = None,
        options: OptionsLike = None,
    ) -> ContractMessage:
        """
        Build a TRC-10 token issue.

        Args:
            name: Token name, non-empty.
            abbreviation: Token abbreviation, non-empty.
            total_supply: Total supply, positive.
            url: Project url (http or https, at most 256 bytes after the scheme).
            sale_end: Sale end in ms, strictly after the start.
            sale_start: Sale start in ms, not in the past. Defaults to now.
            description: Free text, may be empty.
            trx_ratio: TRX side of the exchange rate, positive int32.
            token_ratio: Token side of the exchange rate, positive int32.
            free_bandwidth: Free bandwidth per account, non-negative.
            free_bandwidth_limit: Total free bandwidth, required when
                ``free_bandwidth`` is set.
            frozen_amount: Supply frozen at issue, non-negative.
            frozen_duration: Days the frozen supply stays frozen.
            precision: Decimal places, 0 to 6.
            vote_score: Optional positive int32 vote score.
            owner: Issuer address.
            options: Build options.

        Returns:
            An AssetIssueContract message.
        """
        options = BuildOptions.coerce(options)
        now = self._clock()

        name = validate_string(name, "token name")
        abbreviation = validate_string(abbreviation, "token abbreviation")
        total_supply = validate_amount(total_supply, AmountPolicy.POSITIVE, "supply amount")
        trx_ratio = validate_amount(trx_ratio, AmountPolicy.POSITIVE, "TRX ratio", maximum=MAX_INT32)
        token_ratio = validate_amount(token_ratio, AmountPolicy.POSITIVE, "token ratio", maximum=MAX_INT32)

        if sale_start is None:
            sale_start = now
        sale_start = validate_timestamp(sale_start, "sale start timestamp", not_before=now)
        sale_end = validate_timestamp(sale_end, "sale end timestamp", after=sale_start)

        description = validate_string(description, "token description", allow_empty=True)
        url = validate_url(url, "token url")

        free_bandwidth = validate_amount(free_bandwidth, AmountPolicy.NON_NEGATIVE, "free bandwidth amount")
        free_bandwidth_limit = validate_amount(
            free_bandwidth_limit, AmountPolicy.NON_NEGATIVE, "free bandwidth limit"
        )
        if free_bandwidth and not free_bandwidth_limit:
            raise InvalidRangeError(
                free_bandwidth_limit,
                field="free bandwidth limit",
                reason="required when free bandwidth is set",
            )

        frozen_amount = validate_amount(frozen_amount, AmountPolicy.NON_NEGATIVE, "frozen supply")
        frozen_duration = validate_amount(frozen_duration, AmountPolicy.NON_NEGATIVE, "frozen duration")

        if vote_score is not None:
            vote_score = validate_amount(vote_score, AmountPolicy.POSITIVE, "vote score", maximum=MAX_INT32)
        if precision is not None:
            precision = validate_integer(precision, "precision", 0, MAX_TOKEN_PRECISION)

        parameter: Dict[str, Any] = {
            "owner_address": self._owner(owner, options, "issuer address"),
            "name": name.encode("utf-8"),
            "abbr": abbreviation.encode("utf-8"),
            "description": description.encode("utf-8"),
            "url": url.encode("utf-8"),
            "total_supply": total_supply,
            "trx_num": trx_ratio,
            "num": token_ratio,
            "start_time": sale_start,
            "end_time": sale_end,
            "free_asset_net_limit": free_bandwidth,
            "public_free_asset_net_limit": free_bandwidth_limit,
            "precision": precision,
            "vote_score": vote_score,
        }
        if frozen_amount > 0:
            parameter["frozen_supply"] = [
                {"frozen_amount": frozen_amount, "frozen_days": frozen_duration}
            ]
        return self._finish(ContractType.ASSET_ISSUE, parameter, options)

    create_asset = create_token

    def update_token(
        self,
        *,
        url: Any,
        description: Any = "",
        free_bandwidth: Any = 0,
        free_bandwidth_limit: Any = 0,
        owner: Any = None,
        options: OptionsLike = None,
    ) -> ContractMessage:
        """Build an update of the owner's token description, url and bandwidth limits."""
        options = BuildOptions.coerce(options)
        description = validate_string(description, "token description", allow_empty=True)
        url = validate_url(url, "token url")
        free_bandwidth = validate_amount(free_bandwidth, AmountPolicy.NON_NEGATIVE, "free bandwidth amount")
        free_bandwidth_limit = validate_amount(
            free_bandwidth_limit, AmountPolicy.NON_NEGATIVE, "free bandwidth limit"
        )
        if free_bandwidth and not free_bandwidth_limit:
            raise InvalidRangeError(
                free_bandwidth_limit,
                field="free bandwidth limit",
                reason="required when free bandwidth is set",
            )

        return self._finish(
            ContractType.UPDATE_ASSET,
            {
                "owner_address": self._owner(owner, options),
                "description": description.encode("utf-8"),
                "url": url.encode("utf-8"),
                "new_limit": free_bandwidth,
                "new_public_limit": free_bandwidth_limit,
            },
            options,
        )

    update_asset = update_token

    # ========================================================================
    # Accounts
    # ========================================================================

    def create_account(
        self,
        account_address: Any,
        owner: Any = None,
        options: OptionsLike = None,
    ) -> ContractMessage:
        options = BuildOptions.coerce(options)
        return self._finish(
            ContractType.ACCOUNT_CREATE,
            {
                "owner_address": self._owner(owner, options),
                "account_address": validate_address(account_address, "account address"),
            },
            options,
        )

    def update_account(
        self,
        account_name: Any,
        owner: Any = None,
        options: OptionsLike = None,
    ) -> ContractMessage:
        options = BuildOptions.coerce(options)
        account_name = validate_string(account_name, "account name")
        return self._finish(
            ContractType.ACCOUNT_UPDATE,
            {
                "account_name": account_name.encode("utf-8"),
                "owner_address": self._owner(owner, options),
            },
            options,
        )

    def set_account_id(
        self,
        account_id: Any,
        owner: Any = None,
        options: OptionsLike = None,
    ) -> ContractMessage:
        """Set the account id; ``account_id`` is hex and must decode to 8-32 bytes."""
        options = BuildOptions.coerce(options)
        raw = validate_hex(
            account_id,
            "account id",
            min_bytes=ACCOUNT_ID_MIN_BYTES,
            max_bytes=ACCOUNT_ID_MAX_BYTES,
        )
        return self._finish(
            ContractType.SET_ACCOUNT_ID,
            {"account_id": raw, "owner_address": self._owner(owner, options)},
            options,
        )

    # ========================================================================
    # Resources
    # ========================================================================

    def freeze_balance(
        self,
        amount: Any,
        duration: Any = MIN_FREEZE_DURATION_DAYS,
        resource: Any = "BANDWIDTH",
        owner: Any = None,
        receiver: Any = None,
        options: OptionsLike = None,
    ) -> ContractMessage:
        """
        Build a (v1) balance freeze.

        The receiver is only recorded when it differs from the owner.
        """
        options = BuildOptions.coerce(options)
        amount = validate_amount(amount, AmountPolicy.POSITIVE)
        duration = validate_integer(duration, "duration", MIN_FREEZE_DURATION_DAYS, MAX_INT64)
        owner_address = self._owner(owner, options)
        parameter: Dict[str, Any] = {
            "owner_address": owner_address,
            "frozen_balance": amount,
            "frozen_duration": duration,
            "resource": self._resource(resource),
        }
        if receiver is not None:
            receiver_address = validate_address(receiver, "receiver address")
            if receiver_address != owner_address:
                parameter["receiver_address"] = receiver_address
        return self._finish(ContractType.FREEZE_BALANCE, parameter, options)

    def unfreeze_balance(
        self,
        resource: Any = "BANDWIDTH",
        owner: Any = None,
        receiver: Any = None,
        options: OptionsLike = None,
    ) -> ContractMessage:
        options = BuildOptions.coerce(options)
        owner_address = self._owner(owner, options)
        parameter: Dict[str, Any] = {
            "owner_address": owner_address,
            "resource": self._resource(resource),
        }
        if receiver is not None:
            receiver_address = validate_address(receiver, "receiver address")
            if receiver_address != owner_address:
                parameter["receiver_address"] = receiver_address
        return self._finish(ContractType.UNFREEZE_BALANCE, parameter, options)

    def freeze_balance_v2(
        self,
        amount: Any,
        resource: Any = "BANDWIDTH",
        owner: Any = None,
        options: OptionsLike = None,
    ) -> ContractMessage:
        options = BuildOptions.coerce(options)
        return self._finish(
            ContractType.FREEZE_BALANCE_V2,
            {
                "owner_address": self._owner(owner, options),
                "frozen_balance": validate_amount(amount, AmountPolicy.POSITIVE),
                "resource": self._resource(resource),
            },
            options,
        )

    def unfreeze_balance_v2(
        self,
        amount: Any,
        resource: Any = "BANDWIDTH",
        owner: Any = None,
        options: OptionsLike = None,
    ) -> ContractMessage:
        options = BuildOptions.coerce(options)
        return self._finish(
            ContractType.UNFREEZE_BALANCE_V2,
            {
                "owner_address": self._owner(owner, options),
                "unfreeze_balance": validate_amount(amount, AmountPolicy.POSITIVE),
                "resource": self._resource(resource),
            },
            options,
        )

    def cancel_unfreeze_balance_v2(self, owner: Any = None, options: OptionsLike = None) -> ContractMessage:
        options = BuildOptions.coerce(options)
        return self._finish(
            ContractType.CANCEL_ALL_UNFREEZE_V2,
            {"owner_address": self._owner(owner, options)},
            options,
        )

    def delegate_resource(
        self,
        amount: Any,
        receiver: Any,
        resource: Any = "BANDWIDTH",
        owner: Any = None,
        lock: bool = False,
        lock_period: Any = None,
        options: OptionsLike = None,
    ) -> ContractMessage:
        """
        Build a resource delegation.

        Raises:
            SameAccountError: If the receiver is the owner.
            InvalidAmountError: If amount is not positive.
        """
        options = BuildOptions.coerce(options)
        amount = validate_amount(amount, AmountPolicy.POSITIVE)
        receiver_address = validate_address(receiver, "receiver address")
        owner_address = self._owner(owner, options)
        if receiver_address == owner_address:
            raise SameAccountError(
                "Receiver address must not be the same as owner address",
                field="receiver address",
                address=receiver,
            )
        if not isinstance(lock, bool):
            raise InvalidRangeError(lock, field="lock", reason="must be a boolean")
        if lock_period is not None:
            lock_period = validate_integer(lock_period, "lock period", 0, MAX_INT64)

        return self._finish(
            ContractType.DELEGATE_RESOURCE,
            {
                "owner_address": owner_address,
                "receiver_address": receiver_address,
                "balance": amount,
                "resource": self._resource(resource),
                "lock": lock,
                "lock_period": lock_period,
            },
            options,
        )

    def undelegate_resource(
        self,
        amount: Any,
        receiver: Any,
        resource: Any = "BANDWIDTH",
        owner: Any = None,
        options: OptionsLike = None,
    ) -> ContractMessage:
        options = BuildOptions.coerce(options)
        amount = validate_amount(amount, AmountPolicy.POSITIVE)
        receiver_address = validate_address(receiver, "receiver address")
        owner_address = self._owner(owner, options)
        if receiver_address == owner_address:
            raise SameAccountError(
                "Receiver address must not be the same as owner address",
                field="receiver address",
                address=receiver,
            )
        return self._finish(
            ContractType.UNDELEGATE_RESOURCE,
            {
                "owner_address": owner_address,
                "receiver_address": receiver_address,
                "balance": amount,
                "resource": self._resource(resource),
            },
            options,
        )

    def withdraw_expire_unfreeze(self, owner: Any = None, options: OptionsLike = None) -> ContractMessage:
        options = BuildOptions.coerce(options)
        return self._finish(
            ContractType.WITHDRAW_EXPIRE_UNFREEZE,
            {"owner_address": self._owner(owner, options)},
            options,
        )

    def withdraw_block_rewards(self, owner: Any = None, options: OptionsLike = None) -> ContractMessage:
        options = BuildOptions.coerce(options)
        return self._finish(
            ContractType.WITHDRAW_BALANCE,
            {"owner_address": self._owner(owner, options)},
            options,
        )

    # ========================================================================
    # Witnesses and governance
    # ========================================================================

    def apply_for_sr(self, owner: Any = None, url: Any = None, options: OptionsLike = None) -> ContractMessage:
        """Apply to become a super representative; ``url`` follows the token url rule."""
        options = BuildOptions.coerce(options)
        owner_address = self._owner(owner, options)
        url = validate_url(url, "url")
        return self._finish(
            ContractType.WITNESS_CREATE,
            {"owner_address": owner_address, "url": url.encode("utf-8")},
            options,
        )

    def vote(
        self,
        votes: Union[Mapping[Any, Any], Sequence[Sequence[Any]]],
        owner: Any = None,
        options: OptionsLike = None,
    ) -> ContractMessage:
        """
        Vote for super representatives.

        Args:
            votes: Mapping of witness address to vote count, or a list of
                (address, count) pairs.
        """
        options = BuildOptions.coerce(options)
        items: Iterable[Any] = votes.items() if isinstance(votes, Mapping) else votes
        if not isinstance(items, Iterable) or isinstance(items, (str, bytes)):
            raise InvalidRangeError(votes, field="votes", reason="must be a mapping or a list of pairs")
        vote_list: List[Dict[str, Any]] = []
        for item in items:
            if not isinstance(item, (list, tuple)) or len(item) != 2:
                raise InvalidRangeError(item, field="votes", reason="each vote is an (address, count) pair")
            witness, count = item
            vote_list.append(
                {
                    "vote_address": validate_address(witness, "SR address"),
                    "vote_count": validate_amount(count, AmountPolicy.POSITIVE, "vote count"),
                }
            )
        if not vote_list:
            raise InvalidRangeError(votes, field="votes", reason="at least one vote is required")

        return self._finish(
            ContractType.VOTE_WITNESS,
            {"owner_address": self._owner(owner, options), "votes": vote_list},
            options,
        )

    def create_proposal(
        self,
        parameters: Union[Mapping[Any, Any], Sequence[Mapping[str, Any]]],
        owner: Any = None,
        options: OptionsLike = None,
    ) -> ContractMessage:
        """
        Create a network parameter proposal.

        ``parameters`` is a mapping of parameter id to value, or a list of
        ``{"key": ..., "value": ...}`` dicts. Entries are emitted sorted by key.
        """
        options = BuildOptions.coerce(options)
        if isinstance(parameters, Mapping):
            pairs = list(parameters.items())
        elif isinstance(parameters, (list, tuple)):
            pairs = []
            for entry in parameters:
                if not isinstance(entry, Mapping) or "key" not in entry or "value" not in entry:
                    raise InvalidRangeError(entry, field="proposal parameters", reason="entries need a key and a value")
                pairs.append((entry["key"], entry["value"]))
        else:
            raise InvalidRangeError(parameters, field="proposal parameters", reason="must be a mapping or a list")
        if not pairs:
            raise InvalidRangeError(parameters, field="proposal parameters", reason="cannot be empty")

        normalized: Dict[int, int] = {}
        for key, value in pairs:
            key = validate_integer(key, "proposal parameters", 0, MAX_INT64)
            if key in normalized:
                raise InvalidRangeError(key, field="proposal parameters", reason="duplicate key")
            normalized[key] = validate_integer(value, "proposal parameters", -MAX_INT64 - 1, MAX_INT64)

        return self._finish(
            ContractType.PROPOSAL_CREATE,
            {
                "owner_address": self._owner(owner, options, "issuer address"),
                "parameters": [{"key": k, "value": v} for k, v in sorted(normalized.items())],
            },
            options,
        )

    def vote_proposal(
        self,
        proposal_id: Any,
        is_approval: Any,
        owner: Any = None,
        options: OptionsLike = None,
    ) -> ContractMessage:
        options = BuildOptions.coerce(options)
        proposal_id = validate_integer(proposal_id, "proposal ID", 0, MAX_INT64)
        if not isinstance(is_approval, bool):
            raise InvalidRangeError(is_approval, field="has approval", reason="must be a boolean")
        return self._finish(
            ContractType.PROPOSAL_APPROVE,
            {
                "owner_address": self._owner(owner, options, "voter address"),
                "proposal_id": proposal_id,
                "is_add_approval": is_approval,
            },
            options,
        )

    def delete_proposal(self, proposal_id: Any, owner: Any = None, options: OptionsLike = None) -> ContractMessage:
        options = BuildOptions.coerce(options)
        return self._finish(
            ContractType.PROPOSAL_DELETE,
            {
                "owner_address": self._owner(owner, options, "issuer address"),
                "proposal_id": validate_integer(proposal_id, "proposal ID", 0, MAX_INT64),
            },
            options,
        )

    def update_brokerage(self, brokerage: Any, owner: Any = None, options: OptionsLike = None) -> ContractMessage:
        """Set the witness brokerage percentage (0-100)."""
        options = BuildOptions.coerce(options)
        if brokerage is None:
            raise MissingRequiredFieldError("brokerage")
        brokerage = validate_integer(brokerage, "brokerage", 0, MAX_PERCENTAGE)
        return self._finish(
            ContractType.UPDATE_BROKERAGE,
            {"owner_address": self._owner(owner, options), "brokerage": brokerage},
            options,
        )

    # ========================================================================
    # Smart contracts
    # ========================================================================

    def create_smart_contract(
        self,
        *,
        abi: Any,
        bytecode: Any,
        fee_limit: Any = DEFAULT_FEE_LIMIT,
        call_value: Any = 0,
        token_value: Any = 0,
        token_id: Any = None,
        user_fee_percentage: Any = DEFAULT_USER_FEE_PERCENTAGE,
        origin_energy_limit: Any = DEFAULT_ORIGIN_ENERGY_LIMIT,
        parameters: Sequence[Any] = (),
        function_abi: Any = None,
        raw_parameter: Any = None,
        name: str = "",
        owner: Any = None,
        options: OptionsLike = None,
    ) -> ContractMessage:
        """
        Build a contract deployment.

        Constructor arguments are encoded from, in order of precedence:
        ``raw_parameter`` (hex, used verbatim), ``function_abi`` with
        ``parameters`` (structured codec), or ``parameters`` typed by the
        constructor entry in ``abi`` (flat codec).

        Args:
            abi: Contract ABI as a list of entries or a JSON string.
            bytecode: Contract bytecode as hex.
            fee_limit: Maximum fee in sun, 1 to MAX_FEE_LIMIT.
            call_value: TRX sent to the constructor, non-negative.
            token_value: TRC-10 amount sent to the constructor.
            token_id: TRC-10 token id for ``token_value``.
            user_fee_percentage: Share of energy paid by callers, 0-100.
            origin_energy_limit: Energy the deployer covers per call.
            parameters: Constructor argument values.
            function_abi: Constructor ABI entry for structured encoding.
            raw_parameter: Pre-encoded constructor arguments.
            name: Contract name.
            owner: Deployer address.
            options: Build options.

        Raises:
            InvalidStringError: If the ABI or bytecode is malformed.
            InvalidRangeError: If a limit or percentage is out of range.
            InvalidAmountError: If value is sent to a non-payable constructor.
            EncodingError: If the constructor arguments cannot be encoded.
        """
        options = BuildOptions.coerce(options)
        try:
            entries = parse_abi(abi)
        except EncodingError as exc:
            raise InvalidStringError(abi, field="abi", reason=exc.message) from exc
        code = validate_hex(bytecode, "bytecode", min_bytes=1)

        fee_limit = validate_fee_limit(fee_limit)
        call_value = validate_amount(call_value, AmountPolicy.NON_NEGATIVE, "call value")
        token_value = validate_amount(token_value, AmountPolicy.NON_NEGATIVE, "token value")
        if token_id is not None:
            token_id = validate_amount(token_id, AmountPolicy.NON_NEGATIVE, "token id")
        user_fee_percentage = validate_integer(user_fee_percentage, "user fee percentage", 0, MAX_PERCENTAGE)
        origin_energy_limit = validate_integer(
            origin_energy_limit, "origin energy limit", 1, MAX_ORIGIN_ENERGY_LIMIT
        )
        if not isinstance(name, str):
            raise InvalidStringError(name, field="contract name", reason="must be a string")

        constructor = next((e for e in entries if e.type == "constructor"), None)
        if function_abi is not None and not isinstance(function_abi, ABIEntry):
            function_abi = ABIEntry.from_dict(function_abi)
        payable_source = function_abi or constructor
        payable = payable_source.is_payable if payable_source is not None else False
        if not payable and call_value:
            raise InvalidAmountError(call_value, field="call value", reason="must be 0 when the constructor is not payable")
        if not payable and token_value:
            raise InvalidAmountError(token_value, field="token value", reason="must be 0 when the constructor is not payable")

        owner_address = self._owner(owner, options)

        if raw_parameter is not None:
            code += validate_hex(raw_parameter, "raw parameter")
        elif function_abi is not None:
            code += self._structured_codec.encode(function_abi, parameters)
        elif parameters:
            if constructor is None:
                raise EncodingError("Constructor parameters given but the ABI has no constructor")
            code += self._flat_codec.encode(constructor, parameters)

        new_contract: Dict[str, Any] = {
            "origin_address": owner_address,
            "abi": {"entrys": [_abi_entry_to_proto(e) for e in entries]},
            "bytecode": code,
            "call_value": call_value,
            "consume_user_resource_percent": user_fee_percentage,
            "origin_energy_limit": origin_energy_limit,
            "name": name or None,
        }
        parameter: Dict[str, Any] = {
            "owner_address": owner_address,
            "new_contract": {k: v for k, v in new_contract.items() if v is not None},
        }
        if token_id is not None:
            parameter["call_token_value"] = token_value
            parameter["token_id"] = token_id
        return self._finish(ContractType.CREATE_SMART_CONTRACT, parameter, options, fee_limit=fee_limit)

    def trigger_smart_contract(
        self,
        contract: Any,
        function_selector: Optional[str] = None,
        parameters: Sequence[Any] = (),
        owner: Any = None,
        *,
        call_value: Any = 0,
        token_value: Any = 0,
        token_id: Any = None,
        fee_limit: Any = DEFAULT_FEE_LIMIT,
        function_abi: Any = None,
        raw_parameter: Any = None,
        input_data: Any = None,
        options: OptionsLike = None,
    ) -> ContractMessage:
        """
        Build a contract call.

        Call data is ``input_data`` verbatim when given; otherwise the
        selector of ``function_selector`` (or of ``function_abi``)
        followed by the arguments: ``raw_parameter`` hex, ``parameters``
        encoded against ``function_abi`` (structured codec), or
        ``parameters`` as ``[{"type": ..., "value": ...}]`` (flat codec).
        """
        options = BuildOptions.coerce(options)
        contract_address = validate_address(contract, "contract address")
        fee_limit = validate_fee_limit(fee_limit)
        call_value = validate_amount(call_value, AmountPolicy.NON_NEGATIVE, "call value")
        token_value = validate_amount(token_value, AmountPolicy.NON_NEGATIVE, "token value")
        if token_id is not None:
            token_id = validate_amount(token_id, AmountPolicy.NON_NEGATIVE, "token id")
        owner_address = self._owner(owner, options, "issuer address")

        if function_abi is not None and not isinstance(function_abi, ABIEntry):
            function_abi = ABIEntry.from_dict(function_abi)

        if input_data is not None:
            data = validate_hex(input_data, "input")
        else:
            if function_selector is None and function_abi is not None:
                function_selector = function_abi.signature()
            function_selector = validate_string(function_selector, "function selector")
            data = selector_for(function_selector)
            if raw_parameter is not None:
                data += validate_hex(raw_parameter, "raw parameter")
            elif function_abi is not None:
                data += self._structured_codec.encode(function_abi, parameters)
            elif parameters:
                data += self._flat_codec.encode_typed(parameters)

        parameter: Dict[str, Any] = {
            "owner_address": owner_address,
            "contract_address": contract_address,
            "data": data,
            "call_value": call_value,
        }
        if token_id is not None:
            parameter["call_token_value"] = token_value
            parameter["token_id"] = token_id
        return self._finish(ContractType.TRIGGER_SMART_CONTRACT, parameter, options, fee_limit=fee_limit)

    def clear_abi(self, contract: Any, owner: Any = None, options: OptionsLike = None) -> ContractMessage:
        options = BuildOptions.coerce(options)
        return self._finish(
            ContractType.CLEAR_ABI,
            {
                "owner_address": self._owner(owner, options),
                "contract_address": validate_address(contract, "contract address"),
            },
            options,
        )

    def update_setting(
        self,
        contract: Any,
        user_fee_percentage: Any,
        owner: Any = None,
        options: OptionsLike = None,
    ) -> ContractMessage:
        options = BuildOptions.coerce(options)
        return self._finish(
            ContractType.UPDATE_SETTING,
            {
                "owner_address": self._owner(owner, options),
                "contract_address": validate_address(contract, "contract address"),
                "consume_user_resource_percent": validate_integer(
                    user_fee_percentage, "user fee percentage", 0, MAX_PERCENTAGE
                ),
            },
            options,
        )

    def update_energy_limit(
        self,
        contract: Any,
        origin_energy_limit: Any,
        owner: Any = None,
        options: OptionsLike = None,
    ) -> ContractMessage:
        options = BuildOptions.coerce(options)
        return self._finish(
            ContractType.UPDATE_ENERGY_LIMIT,
            {
                "owner_address": self._owner(owner, options),
                "contract_address": validate_address(contract, "contract address"),
                "origin_energy_limit": validate_integer(
                    origin_energy_limit, "origin energy limit", 1, MAX_ORIGIN_ENERGY_LIMIT
                ),
            },
            options,
        )

    # ========================================================================
    # Exchanges
    # ========================================================================

    def create_token_exchange(
        self,
        first_token_id: Any,
        first_token_balance: Any,
        second_token_id: Any,
        second_token_balance: Any,
        owner: Any = None,
        options: OptionsLike = None,
    ) -> ContractMessage:
        """Create a token/token exchange pair."""
        options = BuildOptions.coerce(options)
        first_token_id = validate_token_id(first_token_id, "first token ID")
        second_token_id = validate_token_id(second_token_id, "second token ID")
        return self._finish(
            ContractType.EXCHANGE_CREATE,
            {
                "owner_address": self._owner(owner, options),
                "first_token_id": first_token_id.encode("utf-8"),
                "first_token_balance": validate_amount(
                    first_token_balance, AmountPolicy.POSITIVE, "first token balance"
                ),
                "second_token_id": second_token_id.encode("utf-8"),
                "second_token_balance": validate_amount(
                    second_token_balance, AmountPolicy.POSITIVE, "second token balance"
                ),
            },
            options,
        )

    def create_trx_exchange(
        self,
        token_id: Any,
        token_balance: Any,
        trx_balance: Any,
        owner: Any = None,
        options: OptionsLike = None,
    ) -> ContractMessage:
        """Create a token/TRX exchange pair; the TRX side uses token id ``_``."""
        return self.create_token_exchange(
            token_id,
            token_balance,
            TRX_EXCHANGE_TOKEN_ID,
            trx_balance,
            owner,
            options,
        )

    def _exchange_quant(
        self,
        contract_type: ContractType,
        exchange_id: Any,
        token_id: Any,
        amount: Any,
        owner: Any,
        options: BuildOptions,
        extra: Optional[Dict[str, Any]] = None,
    ) -> ContractMessage:
        parameter: Dict[str, Any] = {
            "owner_address": self._owner(owner, options),
            "exchange_id": validate_integer(exchange_id, "exchange ID", 0, MAX_INT64),
            "token_id": validate_token_id(token_id).encode("utf-8"),
            "quant": validate_amount(amount, AmountPolicy.POSITIVE, "token amount"),
        }
        parameter.update(extra or {})
        return self._finish(contract_type, parameter, options)

    def inject_exchange_tokens(
        self,
        exchange_id: Any,
        token_id: Any,
        token_amount: Any,
        owner: Any = None,
        options: OptionsLike = None,
    ) -> ContractMessage:
        return self._exchange_quant(
            ContractType.EXCHANGE_INJECT, exchange_id, token_id, token_amount, owner, BuildOptions.coerce(options)
        )

    def withdraw_exchange_tokens(
        self,
        exchange_id: Any,
        token_id: Any,
        token_amount: Any,
        owner: Any = None,
        options: OptionsLike = None,
    ) -> ContractMessage:
        return self._exchange_quant(
            ContractType.EXCHANGE_WITHDRAW, exchange_id, token_id, token_amount, owner, BuildOptions.coerce(options)
        )

    def trade_exchange_tokens(
        self,
        exchange_id: Any,
        token_id: Any,
        token_amount_sold: Any,
        token_amount_expected: Any,
        owner: Any = None,
        options: OptionsLike = None,
    ) -> ContractMessage:
        """Trade on an exchange; both the sold and the expected amounts must be positive."""
        options = BuildOptions.coerce(options)
        expected = validate_amount(token_amount_expected, AmountPolicy.POSITIVE, "token amount expected")
        return self._exchange_quant(
            ContractType.EXCHANGE_TRANSACTION,
            exchange_id,
            token_id,
            token_amount_sold,
            owner,
            options,
            extra={"expected": expected},
        )

    # ========================================================================
    # Permissions
    # ========================================================================

    def update_account_permissions(
        self,
        owner: Any = None,
        owner_permission: Optional[Mapping[str, Any]] = None,
        witness_permission: Optional[Mapping[str, Any]] = None,
        active_permissions: Optional[Union[Mapping[str, Any], Sequence[Mapping[str, Any]]]] = None,
        options: OptionsLike = None,
    ) -> ContractMessage:
        """
        Replace the account's permission tiers.

        Each permission is a dict with ``threshold``, ``keys`` (a list of
        ``{"address", "weight"}``) and optionally ``permission_name``, ``id``,
        ``parent_id`` and ``operations`` (32-byte hex). The owner permission
        is required.
        """
        options = BuildOptions.coerce(options)
        if owner_permission is None:
            raise MissingRequiredFieldError("owner permissions")

        parameter: Dict[str, Any] = {
            "owner_address": self._owner(owner, options),
            "owner": _permission(owner_permission, "owner"),
        }
        if witness_permission is not None:
            parameter["witness"] = _permission(witness_permission, "witness")
        if active_permissions is not None:
            if isinstance(active_permissions, Mapping):
                active_permissions = [active_permissions]
            parameter["actives"] = [_permission(p, "active") for p in active_permissions]
        return self._finish(ContractType.ACCOUNT_PERMISSION_UPDATE, parameter, options)

    # ========================================================================
    # Dispatch
    # ========================================================================

    def build(
        self,
        kind: Union[ContractType, int, str],
        params: Mapping[str, Any],
        options: OptionsLike = None,
    ) -> ContractMessage:
        """
        Build a message by contract kind.

        Args:
            kind: ContractType, wire tag or name ("TRANSFER", "TransferContract").
            params: Keyword arguments for the kind's builder method; ``from``
                is accepted for the owner.
            options: Build options.

        Raises:
            ValueError: If the kind has no builder.
        """
        contract_type = ContractType.parse(kind)
        method_name = _BUILDERS.get(contract_type)
        if method_name is None:
            raise ValueError(f"No builder for contract type {contract_type.name}")
        kwargs = dict(params)
        if "from" in kwargs:
            owner_key = "buyer" if contract_type is ContractType.PARTICIPATE_ASSET_ISSUE else "owner"
            kwargs[owner_key] = kwargs.pop("from")
        return getattr(self, method_name)(**kwargs, options=options)


_BUILDERS: Dict[ContractType, str] = {
    ContractType.ACCOUNT_CREATE: "create_account",
    ContractType.TRANSFER: "send_trx",
    ContractType.TRANSFER_ASSET: "send_token",
    ContractType.VOTE_WITNESS: "vote",
    ContractType.WITNESS_CREATE: "apply_for_sr",
    ContractType.ASSET_ISSUE: "create_token",
    ContractType.PARTICIPATE_ASSET_ISSUE: "purchase_token",
    ContractType.ACCOUNT_UPDATE: "update_account",
    ContractType.FREEZE_BALANCE: "freeze_balance",
    ContractType.UNFREEZE_BALANCE: "unfreeze_balance",
    ContractType.WITHDRAW_BALANCE: "withdraw_block_rewards",
    ContractType.UPDATE_ASSET: "update_token",
    ContractType.PROPOSAL_CREATE: "create_proposal",
    ContractType.PROPOSAL_APPROVE: "vote_proposal",
    ContractType.PROPOSAL_DELETE: "delete_proposal",
    ContractType.SET_ACCOUNT_ID: "set_account_id",
    ContractType.CREATE_SMART_CONTRACT: "create_smart_contract",
    ContractType.TRIGGER_SMART_CONTRACT: "trigger_smart_contract",
    ContractType.UPDATE_SETTING: "update_setting",
    ContractType.EXCHANGE_CREATE: "create_token_exchange",
    ContractType.EXCHANGE_INJECT: "inject_exchange_tokens",
    ContractType.EXCHANGE_WITHDRAW: "withdraw_exchange_tokens",
    ContractType.EXCHANGE_TRANSACTION: "trade_exchange_tokens",
    ContractType.UPDATE_ENERGY_LIMIT: "update_energy_limit",
    ContractType.ACCOUNT_PERMISSION_UPDATE: "update_account_permissions",
    ContractType.CLEAR_ABI: "clear_abi",
    ContractType.UPDATE_BROKERAGE: "update_brokerage",
    ContractType.FREEZE_BALANCE_V2: "freeze_balance_v2",
    ContractType.UNFREEZE_BALANCE_V2: "unfreeze_balance_v2",
    ContractType.WITHDRAW_EXPIRE_UNFREEZE: "withdraw_expire_unfreeze",
    ContractType.DELEGATE_RESOURCE: "delegate_resource",
    ContractType.UNDELEGATE_RESOURCE: "undelegate_resource",
    ContractType.CANCEL_ALL_UNFREEZE_V2: "cancel_unfreeze_balance_v2",
}


def _abi_entry_to_proto(entry: ABIEntry) -> Dict[str, Any]:
    def params(items: Sequence[Any]) -> List[Dict[str, Any]]:
        return [
            {"indexed": p.indexed, "name": p.name, "type": p.type}
            for p in items
        ]

    return {
        "anonymous": entry.anonymous,
        "constant": bool(entry.constant),
        "name": entry.name,
        "inputs": params(entry.inputs),
        "outputs": params(entry.outputs),
        "type": ABI_ENTRY_TYPES.get(entry.type, 0),
        "payable": entry.is_payable,
        "stateMutability": ABI_STATE_MUTABILITY.get(entry.state_mutability, 0),
    }


def _permission(permission: Mapping[str, Any], slot: str) -> Dict[str, Any]:
    field_name = f"{slot} permission"
    if not isinstance(permission, Mapping):
        raise InvalidRangeError(permission, field=field_name, reason="must be a mapping")

    threshold = validate_amount(permission.get("threshold"), AmountPolicy.POSITIVE, f"{field_name} threshold")
    keys = permission.get("keys")
    if not isinstance(keys, (list, tuple)) or not keys:
        raise InvalidRangeError(keys, field=f"{field_name} keys", reason="at least one key is required")

    proto_keys = []
    for key in keys:
        if not isinstance(key, Mapping):
            raise InvalidRangeError(key, field=f"{field_name} keys", reason="keys must be mappings")
        proto_keys.append(
            {
                "address": validate_address(key.get("address"), f"{field_name} key address"),
                "weight": validate_amount(key.get("weight"), AmountPolicy.POSITIVE, f"{field_name} key weight"),
            }
        )

    result: Dict[str, Any] = {
        "type": PERMISSION_TYPES[slot],
        "permission_name": validate_string(permission.get("permission_name", slot), f"{field_name} name"),
        "threshold": threshold,
        "keys": proto_keys,
    }
    if permission.get("id") is not None:
        result["id"] = validate_integer(permission["id"], f"{field_name} id", 0, MAX_INT32)
    if permission.get("parent_id") is not None:
        result["parent_id"] = validate_integer(permission["parent_id"], f"{field_name} parent id", 0, MAX_INT32)
    if permission.get("operations") is not None:
        result["operations"] = validate_hex(
            permission["operations"], f"{field_name} operations", min_bytes=32, max_bytes=32
        )
    return result


__all__ = [
    "ContractMessage",
    "ContractMessageFactory",
    "RESOURCE_CODES",
]
