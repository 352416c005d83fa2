from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Dict, List, NamedTuple, Optional, Union


DateLike = Union[str, date, None]


class AmountMode(str, Enum):
    TAX_INCLUDED = "integrado"
    PLUS_TAX = "mas_iva"


@dataclass(frozen=True)
class OrderRecord:
    folio: str
    description: str
    amount: float
    created_date: DateLike
    authorizer: str
    amount_mode: Optional[AmountMode] = AmountMode.TAX_INCLUDED
    min_pay_date: DateLike = None
    max_pay_date: DateLike = None
    comments: Optional[str] = ""


class MoneyBreakdown(NamedTuple):
    subtotal: float
    tax: float
    total: float


class Primitive(NamedTuple):
    """One drawing operation accepted by the page canvas."""

    kind: str  # text | rect | line | image
    x: float
    y: float
    width: float = 0.0
    height: float = 0.0
    text: str = ""
    font: str = ""
    size: float = 0.0


class Diagnostics:
    """
    Non-fatal problems collected during one render.

    Every warning is logged on the caller's logger and kept in order so the
    caller can inspect what was skipped without parsing logs.
    """

    def __init__(self) -> None:
        self.warnings: List[str] = []

    def warn(self, logger: logging.Logger, message: str, *args) -> None:
        text = message % args if args else message
        logger.warning(text)
        self.warnings.append(text)

    def __len__(self) -> int:
        return len(self.warnings)


@dataclass
class RenderResult:
    pdf: bytes
    warnings: List[str] = field(default_factory=list)
    primitives: List[Primitive] = field(default_factory=list)
    positions: Dict[str, float] = field(default_factory=dict)

    def has_image(self) -> bool:
        return any(p.kind == "image" for p in self.primitives)

    def texts(self) -> List[str]:
        return [p.text for p in self.primitives if p.kind == "text"]
