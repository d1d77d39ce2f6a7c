"""
Cross-window checkout messages.

Every message travels as a ``{type, data}`` envelope between the merchant
page (host) and the embedded wallet surface:

Surface to host:
- ready: the surface has loaded and can receive cart data
- resize: the surface's rendered height changed
- result: payment completed
- cancelled: the buyer left checkout

Host to surface:
- initCheckout: cart amount, line items and merchant name

Inbound data is parsed into one of the models below before anything is
dispatched; anything else is rejected.
"""

from decimal import Decimal
from typing import Annotated, Any, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, field_validator


class MessageRejected(Exception):
    """An inbound message failed validation or came from the wrong origin."""


class LineItem(BaseModel):
    """One cart line as sent by the merchant."""
    model_config = ConfigDict(extra="allow")
    
    id: Optional[str] = None
    name: str
    price: Decimal
    qty: int = Field(default=1, ge=1)


class InitCheckoutData(BaseModel):
    amount: str
    items: List[LineItem] = Field(default_factory=list)
    merchantName: str = ""
    
    @field_validator("amount", mode="before")
    @classmethod
    def _amount_as_text(cls, value: Any) -> Any:
        if isinstance(value, (int, float, Decimal)) and not isinstance(value, bool):
            return f"{Decimal(str(value)):.2f}"
        return value
    
    @field_validator("amount")
    @classmethod
    def _positive_amount(cls, value: str) -> str:
        try:
            parsed = Decimal(value)
        except Exception as e:
            raise ValueError(f"amount is not a number: {value!r}") from e
        if not parsed.is_finite() or parsed <= 0:
            raise ValueError("amount must be positive")
        return value


class ResizeData(BaseModel):
    height: int = Field(gt=0)


class ResultData(BaseModel):
    success: bool = True
    transactionId: str
    last4: str
    cardBrand: str
    amount: str


class ReadyMessage(BaseModel):
    type: Literal["ready"] = "ready"
    data: Optional[dict] = None


class ResizeMessage(BaseModel):
    type: Literal["resize"] = "resize"
    data: ResizeData


class ResultMessage(BaseModel):
    type: Literal["result"] = "result"
    data: ResultData


class CancelledMessage(BaseModel):
    type: Literal["cancelled"] = "cancelled"
    data: Optional[dict] = None


class InitCheckoutMessage(BaseModel):
    type: Literal["initCheckout"] = "initCheckout"
    data: InitCheckoutData


SurfaceMessage = Annotated[
    Union[ReadyMessage, ResizeMessage, ResultMessage, CancelledMessage],
    Field(discriminator="type"),
]

# Only one host-to-surface message exists today
HostMessage = InitCheckoutMessage

_surface_adapter = TypeAdapter(SurfaceMessage)
_host_adapter = TypeAdapter(HostMessage)


def _parse(adapter, raw):
    if not isinstance(raw, dict):
        raise MessageRejected(f"expected an object envelope, got {type(raw).__name__}")
    try:
        return adapter.validate_python(raw)
    except ValidationError as e:
        raise MessageRejected(f"invalid {raw.get('type')!r} message: {e.error_count()} error(s)") from e


def parse_surface_message(raw):
    """Validate a message sent by the wallet surface to the host page."""
    return _parse(_surface_adapter, raw)


def parse_host_message(raw):
    """Validate a message sent by the host page to the wallet surface."""
    return _parse(_host_adapter, raw)


def to_wire(message: BaseModel) -> dict:
    """Serialize a message to its ``{type, data}`` envelope."""
    return message.model_dump(mode="json", exclude_none=True)
