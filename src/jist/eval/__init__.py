"""Statement compilers for the Jist interpreter."""

__all__ = [
    "blocks",
    "collections",
    "common",
    "control",
    "expr",
    "fn",
    "loops",
    "variables",
]
