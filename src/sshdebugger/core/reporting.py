"""Progress and output reporting"""

import logging
from abc import ABC, abstractmethod

from sshdebugger.core.steps import PipelineStep, StepOutcome

# Human-readable pipeline output, kept apart from diagnostic module loggers
output_logger = logging.getLogger("sshdebugger.output")


class ProgressReporter(ABC):
    """Write-only sink for pipeline output lines and step progress"""

    @abstractmethod
    def write_line(self, text: str) -> None:
        """Append a line to the output log"""
        pass

    @abstractmethod
    def report_step(self, step: PipelineStep) -> None:
        """Report a finished step"""
        pass


class LoggingReporter(ProgressReporter):
    """Reporter writing everything through the logging module"""

    def write_line(self, text: str) -> None:
        output_logger.info(text)

    def report_step(self, step: PipelineStep) -> None:
        if step.outcome is StepOutcome.FAILED:
            output_logger.error(step.status_text)
        else:
            output_logger.info(step.status_text)
