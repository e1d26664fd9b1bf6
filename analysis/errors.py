"""
Exceptions raised by the entropy engine.

Empty or undersized inputs are not errors: they degrade to documented
fallback values (mean entropy 0, not-found range sentinels).
"""


class EntropyError(Exception):
    """Base class for entropy engine errors."""


class MalformedCodeError(EntropyError, ValueError):
    """A mutation code matches neither the nucleotide nor the amino acid grammar."""

    def __init__(self, code: str, reason: str = ""):
        self.code = code
        message = f"Malformed mutation code {code!r}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class ReferenceDataError(EntropyError, ValueError):
    """The reference table file is missing required fields or is inconsistent."""


class UnknownGeneError(EntropyError, KeyError):
    """A requested gene name is not present in the reference table."""

    def __str__(self):
        return str(self.args[0]) if self.args else ""
