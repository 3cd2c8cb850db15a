"""
servicehealth.errors
AUTHOR: carter-vin

Error taxonomy

- MeasurementUnavailable: a metric or tool could not be queried
  (aggregator maps it to the check's documented verdict)
- ExternalCommandFailed: a deployment-phase command failed (fatal to deploy)
- DeploymentError: a deployment precondition is not met (fatal to deploy)
"""

from __future__ import annotations

from typing import Sequence


class ServiceHealthError(Exception):
    """Base class for all servicehealth errors."""


class MeasurementUnavailable(ServiceHealthError):
    """Raised by collectors when the underlying measurement cannot be obtained."""


class DeploymentError(ServiceHealthError):
    """Raised when the deployment flow cannot continue."""


class ExternalCommandFailed(DeploymentError):
    """
    External command exited non-zero

    Keeps the command and its stderr so the failure cause is not lost
    behind a generic log line.
    """

    def __init__(self, args: Sequence[str], returncode: int, stderr: str = "") -> None:
        self.command = list(args)
        self.returncode = returncode
        self.stderr = stderr.strip()
        message = f"command failed ({returncode}): {' '.join(self.command)}"
        if self.stderr:
            message = f"{message}: {self.stderr}"
        super().__init__(message)
