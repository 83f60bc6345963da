"""EIP-712 typed-data models shared by client and server."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

PRIMARY_TYPE = "Authentication"


class TypedDataField(BaseModel):
    """A single named, typed field of an EIP-712 struct."""

    model_config = ConfigDict(frozen=True)

    name: str
    type: str


class EIP712Domain(BaseModel):
    """EIP-712 signing domain.

    Part of the signed payload, so issuer and verifier must agree on it
    field for field.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    version: str
    chain_id: int = Field(alias="chainId")
    verifying_contract: str | None = Field(default=None, alias="verifyingContract")

    def to_typed_data(self) -> dict[str, Any]:
        """Domain in wire shape, omitting an unset verifyingContract."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    def type_fields(self) -> tuple[TypedDataField, ...]:
        """EIP712Domain type list matching the populated fields."""
        fields = [
            TypedDataField(name="name", type="string"),
            TypedDataField(name="version", type="string"),
            TypedDataField(name="chainId", type="uint256"),
        ]
        if self.verifying_contract is not None:
            fields.append(TypedDataField(name="verifyingContract", type="address"))
        return tuple(fields)


AUTHENTICATION_FIELDS: tuple[TypedDataField, ...] = (
    TypedDataField(name="challenge", type="string"),
)


class AuthTypes(BaseModel):
    """Type definitions carried by the authentication envelope."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    eip712_domain: tuple[TypedDataField, ...] = Field(alias="EIP712Domain")
    authentication: tuple[TypedDataField, ...] = Field(alias="Authentication")


class EIP712AuthChallenge(BaseModel):
    """Message body: the server-issued challenge token."""

    model_config = ConfigDict(frozen=True)

    challenge: str


class EIP712AuthMessage(BaseModel):
    """Authentication envelope handed to the wallet for signing."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    domain: EIP712Domain
    types: AuthTypes
    primary_type: str = Field(default=PRIMARY_TYPE, alias="primaryType")
    message: EIP712AuthChallenge

    def to_typed_data(self) -> dict[str, Any]:
        """Envelope in the JSON shape expected by eth_signTypedData_v4."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    def to_json(self) -> str:
        """Serialize envelope to a JSON string."""
        return self.model_dump_json(by_alias=True, exclude_none=True)
