"""
kafka-health - replication health probe for Kafka clusters
"""

__version__ = "0.1.0"

# These imports are needed for the tests to run properly
# by making the modules accessible via kafkahealth.module_name
from . import broker
from . import cli
from . import config
from . import console
from . import evaluator
from . import probe
from . import resolver
from . import types

__all__ = [
    "broker",
    "cli",
    "config",
    "console",
    "evaluator",
    "probe",
    "resolver",
    "types",
]
