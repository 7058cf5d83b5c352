# eod_positions/utils/errors.py
class PositionCalcError(RuntimeError):
    """
    Base of every fatal error: the run is aborted and the CLI exits non-zero.
    """


class InputFileError(PositionCalcError):
    """Input file missing or empty."""


class TransactionFormatError(PositionCalcError):
    """
    The transaction stream is not a JSON array of transaction objects.

    Never recovered: a partial read of the transactions would silently
    produce wrong end-of-day positions.
    """


class EmptyTransactionsError(PositionCalcError):
    """Aggregation finished without a single instrument."""


class PositionIOError(PositionCalcError):
    """Open / read / write failure on the positions input or one of the outputs."""


class PipelineOrderError(PositionCalcError):
    """Join step started before the aggregation step published its deltas."""


class PositionFormatError(ValueError):
    """
    A single malformed line of the positions file.

    Recoverable: the join step routes the raw line to the error file and
    continues with the next line.
    """

    def __init__(self, line: str, reason: str):
        super().__init__(f"{reason}: {line!r}")
        self.line = line
        self.reason = reason
