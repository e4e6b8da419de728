"""Bounded look-ahead product parser for supermarket receipt text.

A line starting with a 13-digit barcode anchors one product. The scan is a
finite-state walk over an immutable line tuple:

    SEEK_ANCHOR -> EXTRACT_NAME -> EXTRACT_QUANTITY_PRICE -> EMIT_OR_DISCARD
        ^                |                                        |
        +----------------+ (name too short)                       |
        +---------------------------------------------------------+

The cursor only moves forward. Every state leaves it just past the last
line it consumed, so no line is read by two anchors.
"""

import re
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import ClassVar

from ecoreceipt.logging.logger import Log
from ecoreceipt.parsing.models import ParsedProduct

_SPACE_RUN_RE = re.compile(r" {3,}")
_MULTI_SPACE_RE = re.compile(r"\s+")

PLACEHOLDER_BARCODE = "0" * 13


class ScanState(Enum):
    SEEK_ANCHOR = "seek_anchor"
    EXTRACT_NAME = "extract_name"
    EXTRACT_QUANTITY_PRICE = "extract_quantity_price"
    EMIT_OR_DISCARD = "emit_or_discard"


@dataclass
class _Candidate:
    """Fields gathered for the product under construction."""

    anchor_index: int
    barcode: str
    name: str = ""
    quantity: Decimal = Decimal("1")
    unit: str | None = None
    price: Decimal | None = None


@dataclass
class _Scan:
    lines: tuple[str, ...]
    cursor: int = 0
    candidate: _Candidate | None = None
    products: list[ParsedProduct] = field(default_factory=list)


def normalize_lines(text: str) -> tuple[str, ...]:
    """Collapse CRLF and wide space runs, then keep trimmed non-empty lines."""
    text = text.replace("\r\n", "\n")
    text = _SPACE_RUN_RE.sub(" ", text)
    return tuple(line.strip() for line in text.split("\n") if line.strip())


def clean_name(raw: str, max_length: int = 40) -> str:
    """Keep letters and spaces only, collapse spaces, trim and truncate."""
    letters = "".join(ch for ch in raw if ch.isalpha() or ch.isspace())
    return _MULTI_SPACE_RE.sub(" ", letters).strip()[:max_length].strip()


class ProductParser:
    """Reconstructs ParsedProduct records from noisy OCR text."""

    ANCHOR_RE: ClassVar[re.Pattern[str]] = re.compile(r"^(\d{13})")
    QUANTITY_RE: ClassVar[re.Pattern[str]] = re.compile(
        r"(\d+)[.,](\d+)\s*(kg|un|l|g)(?![^\W\d_])",
        re.IGNORECASE,
    )
    PRICE_RE: ClassVar[re.Pattern[str]] = re.compile(r"\d+[.,]\d{2}")

    NAME_LOOKAHEAD: ClassVar[int] = 2
    DETAIL_LOOKAHEAD: ClassVar[int] = 3
    MIN_NAME_LENGTH: ClassVar[int] = 3
    MAX_NAME_LENGTH: ClassVar[int] = 40
    MAX_PRICE: ClassVar[Decimal] = Decimal("10000")
    BASE_CONFIDENCE: ClassVar[float] = 0.7

    def parse(self, text: str) -> list[ParsedProduct]:
        """Scan ``text`` and return every product that passed validation."""
        scan = _Scan(lines=normalize_lines(text))
        handlers = {
            ScanState.SEEK_ANCHOR: self._seek_anchor,
            ScanState.EXTRACT_NAME: self._extract_name,
            ScanState.EXTRACT_QUANTITY_PRICE: self._extract_quantity_price,
            ScanState.EMIT_OR_DISCARD: self._emit_or_discard,
        }

        state: ScanState | None = ScanState.SEEK_ANCHOR
        while state is not None:
            state = handlers[state](scan)

        Log.info(
            f"Parsed {len(scan.products)} products from {len(scan.lines)} lines"
        )
        return scan.products

    # ------------------------------------------------------------------
    # States
    # ------------------------------------------------------------------

    def _seek_anchor(self, scan: _Scan) -> ScanState | None:
        while scan.cursor < len(scan.lines):
            match = self.ANCHOR_RE.match(scan.lines[scan.cursor])
            if match is not None:
                scan.candidate = _Candidate(anchor_index=scan.cursor, barcode=match.group(1))
                return ScanState.EXTRACT_NAME
            scan.cursor += 1
        return None

    def _extract_name(self, scan: _Scan) -> ScanState:
        candidate = self._require_candidate(scan)
        anchor = candidate.anchor_index
        parts = [scan.lines[anchor][len(candidate.barcode):]]

        index = anchor + 1
        limit = min(len(scan.lines), anchor + 1 + self.NAME_LOOKAHEAD)
        while index < limit and self._is_name_continuation(scan.lines[index]):
            parts.append(scan.lines[index])
            index += 1

        name = clean_name(" ".join(parts), self.MAX_NAME_LENGTH)
        if len(name) < self.MIN_NAME_LENGTH:
            Log.debug(
                "Rejected barcode anchor with short name",
                barcode=candidate.barcode,
                name=name,
            )
            scan.cursor = anchor + 1
            scan.candidate = None
            return ScanState.SEEK_ANCHOR

        candidate.name = name
        scan.cursor = index
        return ScanState.EXTRACT_QUANTITY_PRICE

    def _extract_quantity_price(self, scan: _Scan) -> ScanState:
        candidate = self._require_candidate(scan)
        quantity_found = False
        index = scan.cursor
        limit = min(len(scan.lines), scan.cursor + self.DETAIL_LOOKAHEAD)

        while index < limit:
            line = scan.lines[index]
            if self.ANCHOR_RE.match(line):
                break

            if not quantity_found:
                quantity_found = self._read_quantity(line, candidate)

            price = self._read_price(line)
            index += 1
            if price is not None:
                candidate.price = price
                break

        scan.cursor = index
        return ScanState.EMIT_OR_DISCARD

    def _emit_or_discard(self, scan: _Scan) -> ScanState:
        candidate = self._require_candidate(scan)
        scan.candidate = None

        if candidate.price is None:
            Log.warning(
                "Discarded product without a price",
                barcode=candidate.barcode,
                name=candidate.name,
            )
        elif not Decimal("0") < candidate.price < self.MAX_PRICE:
            Log.warning(
                "Discarded product with out-of-range price",
                barcode=candidate.barcode,
                name=candidate.name,
                price=str(candidate.price),
            )
        else:
            scan.products.append(
                ParsedProduct(
                    name=candidate.name,
                    price=candidate.price,
                    quantity=candidate.quantity,
                    parse_confidence=self.BASE_CONFIDENCE,
                    barcode=candidate.barcode,
                    unit=candidate.unit,
                )
            )
        return ScanState.SEEK_ANCHOR

    # ------------------------------------------------------------------
    # Token helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _is_name_continuation(line: str) -> bool:
        if any(ch.isdigit() for ch in line):
            return False
        return all(ch.isalpha() or ch.isspace() for ch in line)

    def _read_quantity(self, line: str, candidate: _Candidate) -> bool:
        match = self.QUANTITY_RE.search(line)
        if match is None:
            return False
        quantity = _to_decimal(f"{match.group(1)}.{match.group(2)}")
        if quantity is None or quantity <= 0:
            return False
        candidate.quantity = quantity
        candidate.unit = match.group(3).lower()
        return True

    def _read_price(self, line: str) -> Decimal | None:
        # Quantity tokens look like prices ("1.17kg"); drop them first.
        without_quantity = self.QUANTITY_RE.sub(" ", line)
        matches = self.PRICE_RE.findall(without_quantity)
        if not matches:
            return None
        return _to_decimal(matches[-1].replace(",", "."))

    @staticmethod
    def _require_candidate(scan: _Scan) -> _Candidate:
        if scan.candidate is None:
            raise RuntimeError("Parser state requires a product candidate")
        return scan.candidate


def _to_decimal(raw: str) -> Decimal | None:
    try:
        return Decimal(raw)
    except InvalidOperation:
        return None


def render_receipt_text(products: list[ParsedProduct]) -> str:
    """Rebuild clean receipt text that ProductParser reads back unchanged."""
    lines: list[str] = []
    for product in products:
        lines.append(f"{product.barcode or PLACEHOLDER_BARCODE} {product.name}")
        quantity = format(product.quantity, "f")
        if "." not in quantity:
            quantity = f"{quantity}.00"
        lines.append(f"{quantity} {product.unit or 'un'}")
        lines.append(f"{product.price:.2f}")
    return "\n".join(lines)
