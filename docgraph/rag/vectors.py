"""Conversion between float vectors and the pgvector text literal."""

from typing import List, Sequence


def vector_to_literal(vector: Sequence[float]) -> str:
    """Render ``[v0,v1,...]`` with six decimals per value; ``[]`` when empty."""
    return "[" + ",".join("%f" % float(v) for v in vector) + "]"


def literal_to_vector(literal: str) -> List[float]:
    body = literal.strip()
    if not (body.startswith("[") and body.endswith("]")):
        raise ValueError(f"not a vector literal: {literal[:32]!r}")
    body = body[1:-1].strip()
    if not body:
        return []
    return [float(part) for part in body.split(",")]
