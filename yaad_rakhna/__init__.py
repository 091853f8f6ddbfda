"""Yaad Rakhna: a Hindi voice skill that remembers where things were put.

The package holds the dialogue and storage core of the skill together with the
thin glue that adapts it to a voice platform's request/response envelope.
Modules are intentionally lightweight and do not perform storage I/O on import.
"""

__all__ = [
    "__version__",
]

__version__ = "0.1.0"
