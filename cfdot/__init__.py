"""Operations against a Diego deployment's BBS and Locket, through caller-supplied clients."""

__version__ = "0.1.0"