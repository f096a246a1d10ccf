"""Report writer adapter.

This adapter implements IResultReporter for both reporting details:

- BASIC_ERRORS_ONLY: one line per failed row on stderr
- FULL_RESULTS_LOG: the full Login / TID / Status table written to the
  results file, plus a summary on stdout
"""

import logging
import sys
from pathlib import Path
from typing import Optional, TextIO, Union

from ..domain.entities import (
    BatchResult,
    BatchSummary,
    IdentitySubmissionResult,
    ReportingDetail,
)
from ..domain.ports import IResultReporter

logger = logging.getLogger(__name__)


def render_table(results: list[IdentitySubmissionResult]) -> str:
    """Render results as a fixed-width text table, in row order."""
    login_width = max([len("Login")] + [len(r.login) for r in results]) + 2
    tid_width = max([len("TID")] + [len(r.tid) for r in results]) + 2

    lines = [
        f"{'Login':<{login_width}}{'TID':<{tid_width}}Status",
        "-" * (login_width + tid_width + len("Status")),
    ]
    for r in results:
        lines.append(f"{r.login:<{login_width}}{r.tid:<{tid_width}}{r.status_label}")
    return "\n".join(lines) + "\n"


def render_summary(summary: BatchSummary, dry_run: bool = False) -> str:
    succeeded = "Valid" if dry_run else "Succeeded"
    return (
        f"Total: {summary.total}\n"
        f"{succeeded}: {summary.successes}\n"
        f"Failed: {summary.failures}\n"
    )


def render_error_line(result: IdentitySubmissionResult) -> str:
    return (
        f"Row {result.row_number}: {result.login} / {result.tid}: "
        f"{result.status_label}"
    )


class TableReportWriter(IResultReporter):
    """Report writer for the two reporting details.

    Attributes:
        detail: Which reporting detail to produce
        log_file: Results table destination (FULL_RESULTS_LOG only)
    """

    def __init__(
        self,
        detail: ReportingDetail = ReportingDetail.FULL_RESULTS_LOG,
        log_file: Union[str, Path] = "results.log",
        out: Optional[TextIO] = None,
        err: Optional[TextIO] = None,
    ):
        self.detail = detail
        self.log_file = Path(log_file)
        self._out = out
        self._err = err

    @property
    def out(self) -> TextIO:
        return self._out or sys.stdout

    @property
    def err(self) -> TextIO:
        return self._err or sys.stderr

    def report(self, batch: BatchResult) -> Optional[Path]:
        """Emit the batch outcome.

        Returns:
            Path of the results file for FULL_RESULTS_LOG, else None (also
            None when the file could not be written and the table was
            printed instead)
        """
        if self.detail == ReportingDetail.BASIC_ERRORS_ONLY:
            for result in batch.failed:
                print(render_error_line(result), file=self.err)
            return None

        table = render_table(batch.results)
        written: Optional[Path] = self.log_file
        try:
            self.log_file.parent.mkdir(parents=True, exist_ok=True)
            self.log_file.write_text(table, encoding="utf-8")
            logger.info(f"Wrote {len(batch.results)} results to {self.log_file}")
        except OSError as e:
            # The rows were already submitted; keep the table on the console instead.
            logger.error(f"Could not write results to {self.log_file}: {e}")
            print(
                f"[Notify] WARNING: Could not write {self.log_file} ({e}); "
                "results table follows",
                file=self.err,
            )
            self.out.write(table)
            written = None

        print("", file=self.out)
        print("=" * 40, file=self.out)
        print("SUMMARY", file=self.out)
        print("=" * 40, file=self.out)
        self.out.write(render_summary(batch.summary, dry_run=batch.dry_run))
        if written is not None:
            print(f"Results written to {written}", file=self.out)
        return written
