"""servicehealth.collectors package exports."""

from servicehealth.collectors.cpu import collect_cpu
from servicehealth.collectors.disk import collect_disk
from servicehealth.collectors.files import collect_log_activity
from servicehealth.collectors.memory import collect_memory
from servicehealth.collectors.metadata import collect_instance_metadata

__all__ = [
    "collect_cpu",
    "collect_disk",
    "collect_instance_metadata",
    "collect_log_activity",
    "collect_memory",
]
