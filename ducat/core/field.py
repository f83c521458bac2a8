"""
Ducat Ledger Prime Field

Elements of the BLS12-381 scalar field. Every commitment in the ledger
(public identities, serial numbers, transaction roots) is a FieldElement so
it can be fed to a circuit as a public input without conversion.

SIZE: 32 bytes
SERIALIZATION: big-endian, canonical (value < modulus)
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Union

from ducat.constants import FIELD_MODULUS, FIELD_ELEMENT_SIZE
from ducat.core.errors import FieldEncodingError


@dataclass(frozen=True, slots=True)
class FieldElement:
    """
    Element of the prime field F_r.

    Constructing from any integer reduces it modulo r, so equality is
    always equality over the field.
    """
    value: int = 0

    def __post_init__(self):
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise TypeError(
                f"FieldElement value must be int, got {type(self.value).__name__}"
            )
        object.__setattr__(self, "value", self.value % FIELD_MODULUS)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, FieldElement):
            return self.value == other.value
        if isinstance(other, int) and not isinstance(other, bool):
            return self.value == other % FIELD_MODULUS
        return False

    def __hash__(self) -> int:
        return hash(self.value)

    def __repr__(self) -> str:
        text = f"{self.value:x}"
        if len(text) > 16:
            text = text[:16] + "..."
        return f"FieldElement(0x{text})"

    def __int__(self) -> int:
        return self.value

    def __bytes__(self) -> bytes:
        return self.to_bytes()

    def __bool__(self) -> bool:
        return self.value != 0

    # --------------------------------------------------------------------------
    # Arithmetic
    # --------------------------------------------------------------------------

    def __add__(self, other: FieldLike) -> FieldElement:
        return FieldElement(self.value + to_field_element(other).value)

    __radd__ = __add__

    def __sub__(self, other: FieldLike) -> FieldElement:
        return FieldElement(self.value - to_field_element(other).value)

    def __rsub__(self, other: FieldLike) -> FieldElement:
        return FieldElement(to_field_element(other).value - self.value)

    def __mul__(self, other: FieldLike) -> FieldElement:
        return FieldElement(self.value * to_field_element(other).value)

    __rmul__ = __mul__

    def __neg__(self) -> FieldElement:
        return FieldElement(-self.value)

    def __pow__(self, exponent: int) -> FieldElement:
        if exponent < 0:
            return self.inverse() ** (-exponent)
        return FieldElement(pow(self.value, exponent, FIELD_MODULUS))

    def __truediv__(self, other: FieldLike) -> FieldElement:
        return self * to_field_element(other).inverse()

    def inverse(self) -> FieldElement:
        """Multiplicative inverse via Fermat's little theorem."""
        if self.value == 0:
            raise ZeroDivisionError("Zero has no inverse in the field")
        return FieldElement(pow(self.value, FIELD_MODULUS - 2, FIELD_MODULUS))

    # --------------------------------------------------------------------------
    # Encoding
    # --------------------------------------------------------------------------

    def to_bytes(self) -> bytes:
        """Canonical 32-byte big-endian encoding."""
        return self.value.to_bytes(FIELD_ELEMENT_SIZE, "big")

    def serialize(self) -> bytes:
        """Serialize to canonical bytes."""
        return self.to_bytes()

    def hex(self) -> str:
        return self.to_bytes().hex()

    @classmethod
    def from_bytes(cls, data: bytes) -> FieldElement:
        """
        Decode a canonical encoding.

        Raises:
            FieldEncodingError: wrong length or value not below the modulus
        """
        if len(data) != FIELD_ELEMENT_SIZE:
            raise FieldEncodingError(
                f"Field element must be {FIELD_ELEMENT_SIZE} bytes, got {len(data)}"
            )
        value = int.from_bytes(data, "big")
        if value >= FIELD_MODULUS:
            raise FieldEncodingError("Non-canonical field element encoding")
        return cls(value)

    @classmethod
    def from_bytes_reduce(cls, data: bytes) -> FieldElement:
        """Interpret arbitrary bytes as a big-endian integer mod r."""
        return cls(int.from_bytes(data, "big"))

    @classmethod
    def deserialize(cls, data: bytes, offset: int = 0) -> tuple[FieldElement, int]:
        """Deserialize from bytes, return (FieldElement, bytes_consumed)."""
        return cls.from_bytes(data[offset:offset + FIELD_ELEMENT_SIZE]), FIELD_ELEMENT_SIZE

    @classmethod
    def from_hex(cls, hex_string: str) -> FieldElement:
        return cls.from_bytes(bytes.fromhex(hex_string))

    @classmethod
    def zero(cls) -> FieldElement:
        return cls(0)

    @classmethod
    def one(cls) -> FieldElement:
        return cls(1)


FieldLike = Union[FieldElement, int]


def to_field_element(value: FieldLike) -> FieldElement:
    """
    Coerce a FieldElement or int to a FieldElement.

    Raises:
        TypeError: for any other type (bool included)
    """
    if isinstance(value, FieldElement):
        return value
    if isinstance(value, int) and not isinstance(value, bool):
        return FieldElement(value)
    raise TypeError(f"Expected FieldElement or int, got {type(value).__name__}")


def is_field_like(value: object) -> bool:
    """Check whether value can be coerced without error."""
    if isinstance(value, FieldElement):
        return True
    return isinstance(value, int) and not isinstance(value, bool)


def sort_key(element: FieldElement) -> int:
    """Ordering used wherever a set of commitments must be canonicalized."""
    return element.value
